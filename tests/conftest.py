from __future__ import annotations

import os
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Sequence

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

import pytest
from fastapi.testclient import TestClient

from src.analytics.revenue_forecast import forecast_windows, upcoming_reservations
from src.api.dependencies import get_owner_portal_service
from src.core.errors import NotFoundError
from src.main import create_app
from src.schemas.owner_portal import (
    BookingPerformance,
    MonthlyPerformancePoint,
    OccupancySummary,
    PerformanceMetrics,
    PerformanceSummary,
    RevenueForecast,
    StayCategory,
    StayInterval,
)

FIXED_NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def make_stay(
    stay_id: str,
    category: StayCategory,
    start_day: float,
    end_day: float,
    amount: str,
    now: datetime = FIXED_NOW,
) -> StayInterval:
    start = now + timedelta(days=start_day)
    end = now + timedelta(days=end_day)
    nights = max(1, int((end - start).total_seconds() // 86400))
    total = Decimal(amount)
    return StayInterval(
        id=stay_id,
        start=start,
        end=end,
        category=category,
        total_amount=total,
        daily_rate=total / nights,
        nights=nights,
        label="Guest" if category is StayCategory.SHORT_TERM else "Tenant",
    )


class FakeOwnerPortalService:
    intervals = [
        make_stay("str-1", StayCategory.SHORT_TERM, 5, 8, "600"),
        make_stay("mtr-1", StayCategory.MID_TERM, 10, 50, "3000"),
    ]

    def get_revenue_forecast(self, property_id: str, horizons: Sequence[int]) -> RevenueForecast:
        if property_id == "missing":
            raise NotFoundError("Property not found")
        return RevenueForecast(
            as_of=FIXED_NOW,
            windows=forecast_windows(self.intervals, FIXED_NOW, horizons),
            upcoming_reservations=upcoming_reservations(self.intervals, FIXED_NOW),
        )

    def get_performance(self, property_id: str, months: int = 12) -> PerformanceSummary:
        if property_id == "missing":
            raise NotFoundError("Property not found")
        return PerformanceSummary(
            as_of=FIXED_NOW,
            metrics=PerformanceMetrics(
                statement_count=2,
                total_revenue=Decimal("9000"),
                total_net=Decimal("7400"),
                total_expenses=Decimal("1700"),
                avg_monthly_revenue=Decimal("4500"),
                avg_monthly_net=Decimal("3700"),
                growth_rate_percent=25.0,
                expense_ratio_percent=18.89,
                this_month_revenue=Decimal("5000"),
                this_month_net=Decimal("4200"),
                last_month_revenue=Decimal("4000"),
            ),
            monthly=[
                MonthlyPerformancePoint(
                    period=date(2024, 5, 1),
                    revenue=Decimal("4000"),
                    expenses=Decimal("800"),
                    net=Decimal("3200"),
                ),
                MonthlyPerformancePoint(
                    period=date(2024, 6, 1),
                    revenue=Decimal("5000"),
                    expenses=Decimal("900"),
                    net=Decimal("4200"),
                ),
            ][-months:],
            occupancy=OccupancySummary(
                year=2024,
                occupancy_rate_percent=65,
                booked_days=99,
                days_elapsed=153,
            ),
            booking_performance=BookingPerformance(
                total_bookings=2,
                short_term_bookings=1,
                mid_term_bookings=1,
                short_term_revenue=Decimal("600"),
                average_booking_value=Decimal("600"),
                average_nightly_rate=Decimal("200"),
            ),
        )


@pytest.fixture()
def client() -> TestClient:
    app = create_app()
    app.dependency_overrides[get_owner_portal_service] = FakeOwnerPortalService
    return TestClient(app)
