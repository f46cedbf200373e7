"""baseline: business units, divisions, weekly reports

Revision ID: 001_baseline
Revises:
Create Date: 2025-06-22
"""
from alembic import op
import sqlalchemy as sa

revision = '001_baseline'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'business_units',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_business_units_name', 'business_units', ['name'], unique=True)

    op.create_table(
        'divisions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_unit_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['business_unit_id'], ['business_units.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_unit_id', 'name', name='uq_division_business_unit_name')
    )
    op.create_index('ix_divisions_business_unit_id', 'divisions', ['business_unit_id'])

    op.create_table(
        'weekly_reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_unit_id', sa.Integer(), nullable=False),
        sa.Column('division_id', sa.Integer(), nullable=False),
        sa.Column('custom_year', sa.Integer(), nullable=False),
        sa.Column('custom_week', sa.Integer(), nullable=False),
        sa.Column('report_date', sa.Date(), nullable=False),
        sa.Column('highlight', sa.Text(), nullable=True),
        sa.Column('biz_dev', sa.Text(), nullable=True),
        sa.Column('planned_next', sa.Text(), nullable=True),
        sa.Column('urgent', sa.Text(), nullable=True),
        sa.Column('submitted_by', sa.String(255), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['business_unit_id'], ['business_units.id']),
        sa.ForeignKeyConstraint(['division_id'], ['divisions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'business_unit_id', 'division_id', 'custom_year', 'custom_week',
            name='uq_weekly_report_period'
        )
    )
    op.create_index('ix_weekly_reports_business_unit_id', 'weekly_reports', ['business_unit_id'])
    op.create_index('ix_weekly_reports_division_id', 'weekly_reports', ['division_id'])
    op.create_index('ix_weekly_reports_report_date', 'weekly_reports', ['report_date'])
    op.create_index('ix_weekly_reports_year_week', 'weekly_reports', ['custom_year', 'custom_week'])


def downgrade():
    op.drop_index('ix_weekly_reports_year_week', 'weekly_reports')
    op.drop_index('ix_weekly_reports_report_date', 'weekly_reports')
    op.drop_index('ix_weekly_reports_division_id', 'weekly_reports')
    op.drop_index('ix_weekly_reports_business_unit_id', 'weekly_reports')
    op.drop_table('weekly_reports')
    op.drop_index('ix_divisions_business_unit_id', 'divisions')
    op.drop_table('divisions')
    op.drop_index('ix_business_units_name', 'business_units')
    op.drop_table('business_units')
