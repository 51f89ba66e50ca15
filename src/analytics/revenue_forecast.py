from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Sequence

from src.core.errors import InvalidArgumentError
from src.schemas.owner_portal import (
    ForecastWindow,
    StayCategory,
    StayInterval,
    UpcomingReservation,
)
from src.shared.time import ensure_utc, whole_days_between

# Leases are billed monthly; a flat 30-day month keeps the daily rate stable across months.
MID_TERM_DAYS_PER_MONTH = Decimal("30")


def _window_end(now: datetime, horizon_days: int) -> datetime:
    try:
        return now + timedelta(days=horizon_days)
    except (OverflowError, ValueError) as exc:
        raise InvalidArgumentError(
            f"Forecast horizon of {horizon_days} days reaches past the supported calendar"
        ) from exc


def validate_horizons(horizons_days: Sequence[int], now: datetime) -> None:
    """Reject horizons that are not positive day counts or whose window end cannot be dated."""
    reference = ensure_utc(now)
    for horizon in horizons_days:
        if isinstance(horizon, bool) or not isinstance(horizon, int) or horizon <= 0:
            raise InvalidArgumentError(f"Forecast horizon must be a positive number of days, got {horizon!r}")
        _window_end(reference, horizon)


def _mid_term_revenue(interval: StayInterval, now: datetime, window_end: datetime) -> Decimal:
    effective_start = interval.start if interval.start > now else now
    effective_end = interval.end if interval.end < window_end else window_end
    if effective_end < effective_start:
        return Decimal("0")
    days = whole_days_between(effective_start, effective_end)
    return days * (interval.total_amount / MID_TERM_DAYS_PER_MONTH)


def _forecast_window(
    intervals: Sequence[StayInterval], now: datetime, horizon_days: int
) -> ForecastWindow:
    window_end = _window_end(now, horizon_days)
    revenue = Decimal("0")
    bookings_count = 0
    for interval in intervals:
        starts_in_window = now < interval.start < window_end
        if interval.category is StayCategory.SHORT_TERM:
            # The whole stay is booked to the window holding its check-in.
            if starts_in_window:
                revenue += interval.total_amount
                bookings_count += 1
            continue
        revenue += _mid_term_revenue(interval, now, window_end)
        if starts_in_window:
            bookings_count += 1

    return ForecastWindow(
        horizon_days=horizon_days,
        window_end=window_end,
        revenue=int(revenue.quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
        bookings_count=bookings_count,
    )


def forecast_windows(
    intervals: Iterable[StayInterval], now: datetime, horizons_days: Sequence[int]
) -> List[ForecastWindow]:
    """Revenue and new-booking counts for each forward window starting at ``now``.

    Windows are returned in the order requested. Short-term stays count in
    full toward the window containing their start; leases are prorated by the
    days they overlap the window.
    """
    reference = ensure_utc(now)
    validate_horizons(horizons_days, reference)
    snapshot = list(intervals)
    return [_forecast_window(snapshot, reference, horizon) for horizon in horizons_days]


def upcoming_reservations(
    intervals: Iterable[StayInterval], now: datetime, limit: int = 5
) -> List[UpcomingReservation]:
    reference = ensure_utc(now)
    upcoming = sorted(
        (interval for interval in intervals if interval.end >= reference),
        key=lambda interval: (interval.start, interval.id),
    )
    return [
        UpcomingReservation(
            id=interval.id,
            category=interval.category,
            label=interval.label,
            start=interval.start,
            end=interval.end,
            amount=interval.total_amount,
            status=interval.status,
            source=interval.source,
        )
        for interval in upcoming[: max(0, limit)]
    ]
