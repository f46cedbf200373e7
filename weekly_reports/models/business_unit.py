from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from weekly_reports.database import Base


class BusinessUnit(Base):
    __tablename__ = "business_units"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    divisions = relationship(
        "Division",
        back_populates="business_unit",
        cascade="all, delete-orphan",
        order_by="Division.name",
    )
    reports = relationship("WeeklyReport", back_populates="business_unit")

    def __repr__(self):
        return f"<BusinessUnit {self.name}>"


class Division(Base):
    __tablename__ = "divisions"

    id = Column(Integer, primary_key=True)
    business_unit_id = Column(
        Integer,
        ForeignKey("business_units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Division names repeat across business units, never within one
    __table_args__ = (
        UniqueConstraint("business_unit_id", "name", name="uq_division_business_unit_name"),
    )

    # Relationships
    business_unit = relationship("BusinessUnit", back_populates="divisions")
    reports = relationship("WeeklyReport", back_populates="division")

    def __repr__(self):
        return f"<Division {self.name}>"
