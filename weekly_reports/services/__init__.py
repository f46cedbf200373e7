from weekly_reports.services.week_math import (
    CustomWeek,
    to_custom_week,
    start_of_custom_week,
    end_of_custom_week,
    week_range,
    shift_week,
    weeks_in_year,
)
from weekly_reports.services.edit_window import (
    EditStatus,
    classify,
    ensure_editable,
    list_week_options,
)
from weekly_reports.services.issue_ledger import (
    IssueLedger,
    IssueStatus,
    UrgentIssue,
    aging_days,
    decode_issues,
    encode_issues,
    new_issue,
)
from weekly_reports.services.report_resolver import (
    Report,
    ReportFields,
    ReportResolver,
    merge_report_fields,
)

__all__ = [
    'CustomWeek',
    'to_custom_week',
    'start_of_custom_week',
    'end_of_custom_week',
    'week_range',
    'shift_week',
    'weeks_in_year',
    'EditStatus',
    'classify',
    'ensure_editable',
    'list_week_options',
    'IssueLedger',
    'IssueStatus',
    'UrgentIssue',
    'aging_days',
    'decode_issues',
    'encode_issues',
    'new_issue',
    'Report',
    'ReportFields',
    'ReportResolver',
    'merge_report_fields',
]
