from fastapi import APIRouter, Depends

from weekly_reports.dependencies import get_resolver
from weekly_reports.services.report_resolver import ReportResolver

router = APIRouter(prefix="/org-units", tags=["org-units"])


@router.get("")
async def list_org_units(resolver: ReportResolver = Depends(get_resolver)):
    """Business units with their divisions (JSON response)."""
    units = resolver.repository.list_business_units()
    return [
        {
            "id": unit.id,
            "name": unit.name,
            "divisions": [{"id": d.id, "name": d.name} for d in unit.divisions],
        }
        for unit in units
    ]
