from __future__ import annotations

from fastapi import APIRouter

from src.api.health import router as health_router
from src.api.performance import router as performance_router
from src.api.revenue_forecast import router as revenue_forecast_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(revenue_forecast_router)
api_router.include_router(performance_router)
