from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from src.shared.base import BaseSchema, FrozenSchema
from src.shared.time import ensure_utc


class StayCategory(str, Enum):
    SHORT_TERM = "short_term"
    MID_TERM = "mid_term"


class StayStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    OTHER = "other"


class StayInterval(FrozenSchema):
    id: str
    start: datetime
    end: datetime
    category: StayCategory
    total_amount: Decimal
    daily_rate: Decimal
    nights: int
    label: str
    status: StayStatus = StayStatus.CONFIRMED
    source: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_bounds(self) -> "StayInterval":
        if self.start >= self.end:
            raise ValueError("Stay interval must start before it ends")
        if self.total_amount <= 0:
            raise ValueError("Stay interval amount must be positive")
        return self


class ForecastWindow(FrozenSchema):
    horizon_days: int
    window_end: datetime
    revenue: int = 0
    bookings_count: int = 0


class UpcomingReservation(FrozenSchema):
    id: str
    category: StayCategory
    label: str
    start: datetime
    end: datetime
    amount: Decimal
    status: StayStatus
    source: Optional[str] = None


class RevenueForecast(BaseSchema):
    as_of: datetime
    windows: List[ForecastWindow]
    upcoming_reservations: List[UpcomingReservation] = Field(default_factory=list)


class PerformanceMetrics(FrozenSchema):
    statement_count: int
    total_revenue: Decimal
    total_net: Decimal
    total_expenses: Decimal
    avg_monthly_revenue: Decimal
    avg_monthly_net: Decimal
    growth_rate_percent: float
    expense_ratio_percent: float
    this_month_revenue: Decimal
    this_month_net: Decimal
    last_month_revenue: Decimal


class MonthlyPerformancePoint(FrozenSchema):
    period: Optional[date] = None
    revenue: Decimal
    expenses: Decimal
    net: Decimal
    short_term_revenue: Decimal = Decimal("0")
    mid_term_revenue: Decimal = Decimal("0")
    # True when no statement exists for the month and figures come from bookings.
    projected: bool = False


class OccupancySummary(FrozenSchema):
    year: int
    occupancy_rate_percent: int
    booked_days: int
    days_elapsed: int
    short_term_days: int = 0
    mid_term_days: int = 0
    short_term_stays: int = 0
    mid_term_stays: int = 0


class BookingPerformance(FrozenSchema):
    total_bookings: int
    short_term_bookings: int
    mid_term_bookings: int
    short_term_revenue: Decimal
    average_booking_value: Decimal
    average_nightly_rate: Decimal


class RevenueSplit(FrozenSchema):
    rental_type: Optional[str] = None
    mid_term_only: bool = False
    short_term_revenue: Decimal
    mid_term_revenue: Decimal
    mid_term_from_statements: Decimal
    mid_term_projected: Decimal
    total_revenue: Decimal


class PerformanceSummary(BaseSchema):
    as_of: datetime
    metrics: Optional[PerformanceMetrics] = None
    monthly: List[MonthlyPerformancePoint] = Field(default_factory=list)
    occupancy: OccupancySummary
    booking_performance: BookingPerformance
    revenue_split: Optional[RevenueSplit] = None


class RevenueForecastFilters(BaseSchema):
    horizons: Optional[str] = None


class PerformanceFilters(BaseSchema):
    months: int = Field(default=12, ge=1, le=60)
