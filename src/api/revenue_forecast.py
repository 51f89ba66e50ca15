from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_owner_portal_service
from src.core.config import get_settings
from src.schemas.owner_portal import RevenueForecast, RevenueForecastFilters
from src.services.owner_portal_service import OwnerPortalService
from src.shared.response import Meta, ResponseEnvelope
from src.shared.time import parse_horizons


router = APIRouter(prefix="/properties", tags=["revenue-forecast"])


@router.get("/{property_id}/revenue-forecast")
def revenue_forecast(
    property_id: str,
    filters: RevenueForecastFilters = Depends(),
    service: OwnerPortalService = Depends(get_owner_portal_service),
) -> ResponseEnvelope[RevenueForecast]:
    horizons = parse_horizons(filters.horizons or get_settings().forecast_horizons)
    data = service.get_revenue_forecast(property_id, horizons)
    meta = Meta(
        as_of_date=data.as_of.date().isoformat(),
        source="supabase",
        time_window=f"{max(horizons)}d",
        calculation_version="v1",
        currency="USD",
        generated_at=data.as_of.isoformat(),
    )
    return ResponseEnvelope(data=data, meta=meta)
