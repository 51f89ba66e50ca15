from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_owner_portal_service
from src.schemas.owner_portal import PerformanceFilters, PerformanceSummary
from src.services.owner_portal_service import OwnerPortalService
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/properties", tags=["performance"])


@router.get("/{property_id}/performance")
def performance(
    property_id: str,
    filters: PerformanceFilters = Depends(),
    service: OwnerPortalService = Depends(get_owner_portal_service),
) -> ResponseEnvelope[PerformanceSummary]:
    data = service.get_performance(property_id, filters.months)
    meta = Meta(
        as_of_date=data.as_of.date().isoformat(),
        source="supabase",
        time_window=f"{filters.months}m",
        calculation_version="v1",
        currency="USD",
        generated_at=data.as_of.isoformat(),
    )
    return ResponseEnvelope(data=data, meta=meta)
