from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence

from src.models.owner_portal import ReconciledStatementRecord
from src.schemas.owner_portal import (
    BookingPerformance,
    MonthlyPerformancePoint,
    OccupancySummary,
    PerformanceMetrics,
    RevenueSplit,
    StayCategory,
    StayInterval,
)
from src.shared.time import ceil_days_between, ensure_utc

ZERO = Decimal("0")
COHOSTING_SERVICE_TYPE = "cohosting"
MID_TERM_ONLY_RENTAL_TYPES = frozenset({"mid_term", "long_term"})


def _amount(value: Optional[Decimal]) -> Decimal:
    return value if value is not None else ZERO


def net_value(statement: ReconciledStatementRecord) -> Decimal:
    """Corrected net earnings when the statement has them, otherwise the raw net."""
    if statement.actual_net_earnings is not None:
        return statement.actual_net_earnings
    return _amount(statement.net_to_owner)


def _newest_first(statements: Sequence[ReconciledStatementRecord]) -> List[ReconciledStatementRecord]:
    return sorted(statements, key=lambda s: s.period or date.min, reverse=True)


def apply_service_type(
    statements: Iterable[ReconciledStatementRecord], service_type: Optional[str]
) -> List[ReconciledStatementRecord]:
    # Co-hosting owners collect revenue themselves; net_to_owner is what they owe us.
    is_cohosting = (service_type or "").strip().lower() == COHOSTING_SERVICE_TYPE
    prepared: List[ReconciledStatementRecord] = []
    for statement in statements:
        if statement.actual_net_earnings is not None:
            prepared.append(statement)
            continue
        if is_cohosting:
            actual_net = _amount(statement.total_revenue) - _amount(statement.net_to_owner)
        else:
            actual_net = _amount(statement.net_to_owner)
        prepared.append(statement.model_copy(update={"actual_net_earnings": actual_net}))
    return prepared


def compute_metrics(
    statements: Sequence[ReconciledStatementRecord],
) -> Optional[PerformanceMetrics]:
    """Totals, averages and month-over-month growth over reconciled statements.

    Returns ``None`` when there are no statements yet. Missing amounts count as
    zero and every ratio with a zero denominator is reported as 0.
    """
    if not statements:
        return None

    count = len(statements)
    total_revenue = sum((_amount(s.total_revenue) for s in statements), ZERO)
    total_expenses = sum((abs(_amount(s.total_expenses)) for s in statements), ZERO)
    total_net = sum((net_value(s) for s in statements), ZERO)

    ordered = _newest_first(statements)
    this_month = ordered[0]
    last_month = ordered[1] if count > 1 else None

    this_month_revenue = _amount(this_month.total_revenue)
    last_month_revenue = _amount(last_month.total_revenue) if last_month else ZERO
    growth_rate = 0.0
    if last_month is not None and last_month_revenue > 0:
        growth_rate = float((this_month_revenue - last_month_revenue) / last_month_revenue * 100)

    expense_ratio = float(total_expenses / total_revenue * 100) if total_revenue > 0 else 0.0

    return PerformanceMetrics(
        statement_count=count,
        total_revenue=total_revenue,
        total_net=total_net,
        total_expenses=total_expenses,
        avg_monthly_revenue=total_revenue / count,
        avg_monthly_net=total_net / count,
        growth_rate_percent=growth_rate,
        expense_ratio_percent=expense_ratio,
        this_month_revenue=this_month_revenue,
        this_month_net=net_value(this_month),
        last_month_revenue=last_month_revenue,
    )


def _next_month(month: date) -> date:
    if month.month == 12:
        return date(month.year + 1, 1, 1)
    return date(month.year, month.month + 1, 1)


def prorate_by_month(interval: StayInterval) -> Dict[date, Decimal]:
    """Spread a lease's monthly rent over the calendar months it touches.

    Each month earns ``rent / days_in_month`` per occupied day, counting both
    the first and the last day, and at least one day per touched month.
    """
    first_day = interval.start.date()
    last_day = interval.end.date()
    shares: Dict[date, Decimal] = {}
    month = date(first_day.year, first_day.month, 1)
    while month <= last_day:
        days_in_month = calendar.monthrange(month.year, month.month)[1]
        month_end = month.replace(day=days_in_month)
        effective_start = max(first_day, month)
        effective_end = min(last_day, month_end)
        days = max(1, (effective_end - effective_start).days + 1)
        shares[month] = interval.total_amount / days_in_month * days
        month = _next_month(month)
    return shares


def _projected_lease_rent(
    intervals: Iterable[StayInterval], covered_months: AbstractSet[date]
) -> Dict[date, Decimal]:
    projected: Dict[date, Decimal] = {}
    for interval in intervals:
        if interval.category is not StayCategory.MID_TERM:
            continue
        for month, share in prorate_by_month(interval).items():
            if month in covered_months:
                continue
            projected[month] = projected.get(month, ZERO) + share
    return projected


def monthly_performance(
    statements: Sequence[ReconciledStatementRecord],
    months: int = 12,
    intervals: Iterable[StayInterval] = (),
) -> List[MonthlyPerformancePoint]:
    """Month-by-month revenue, expenses and net, oldest first.

    Statements are authoritative for their month. Months without one are
    projected from bookings: short-term stays land in their check-in month and
    leases are prorated per calendar month. Projected months carry no expenses.
    """
    stays = list(intervals)
    undated: List[MonthlyPerformancePoint] = []
    by_month: Dict[date, MonthlyPerformancePoint] = {}
    for statement in statements:
        point = MonthlyPerformancePoint(
            period=statement.period,
            revenue=_amount(statement.total_revenue),
            expenses=abs(_amount(statement.total_expenses)),
            net=net_value(statement),
            short_term_revenue=_amount(statement.short_term_revenue),
            mid_term_revenue=_amount(statement.mid_term_revenue),
        )
        if statement.period is None:
            undated.append(point)
        else:
            by_month[statement.period] = point
    covered = frozenset(by_month)

    short_term: Dict[date, Decimal] = {}
    for stay in stays:
        if stay.category is not StayCategory.SHORT_TERM:
            continue
        month = date(stay.start.year, stay.start.month, 1)
        if month not in covered:
            short_term[month] = short_term.get(month, ZERO) + stay.total_amount
    mid_term = _projected_lease_rent(stays, covered)

    for month in set(short_term) | set(mid_term):
        short_term_revenue = short_term.get(month, ZERO)
        mid_term_revenue = mid_term.get(month, ZERO)
        revenue = short_term_revenue + mid_term_revenue
        by_month[month] = MonthlyPerformancePoint(
            period=month,
            revenue=revenue,
            expenses=ZERO,
            net=revenue,
            short_term_revenue=short_term_revenue,
            mid_term_revenue=mid_term_revenue,
            projected=True,
        )

    series = undated + [by_month[month] for month in sorted(by_month)]
    return series[-months:] if months > 0 else []


def compute_revenue_split(
    statements: Sequence[ReconciledStatementRecord],
    intervals: Iterable[StayInterval],
    rental_type: Optional[str],
) -> RevenueSplit:
    """Short-term vs mid-term revenue for the property.

    Short-term revenue comes from reconciled statements, falling back to
    booking totals when no statement reports any. Mid-term revenue is the
    statement figure plus lease rent projected for months without a statement.
    Mid-term and long-term properties book everything as mid-term.
    """
    stays = list(intervals)
    mid_term_only = (rental_type or "").strip().lower() in MID_TERM_ONLY_RENTAL_TYPES

    reconciled_short_term = sum((_amount(s.short_term_revenue) for s in statements), ZERO)
    booked_short_term = sum(
        (stay.total_amount for stay in stays if stay.category is StayCategory.SHORT_TERM), ZERO
    )
    short_term_base = reconciled_short_term if reconciled_short_term > 0 else booked_short_term

    dated = [s for s in statements if s.period is not None]
    mid_term_from_statements = sum(
        (s.mid_term_revenue for s in dated if s.mid_term_revenue is not None and s.mid_term_revenue > 0),
        ZERO,
    )
    covered = frozenset(s.period for s in dated)
    mid_term_projected = sum(_projected_lease_rent(stays, covered).values(), ZERO)

    short_term_revenue = ZERO if mid_term_only else short_term_base
    mid_term_revenue = mid_term_from_statements + mid_term_projected
    if mid_term_only:
        mid_term_revenue += short_term_base
    return RevenueSplit(
        rental_type=rental_type,
        mid_term_only=mid_term_only,
        short_term_revenue=short_term_revenue,
        mid_term_revenue=mid_term_revenue,
        mid_term_from_statements=mid_term_from_statements,
        mid_term_projected=mid_term_projected,
        total_revenue=short_term_revenue + mid_term_revenue,
    )


def compute_occupancy(intervals: Iterable[StayInterval], now: datetime) -> OccupancySummary:
    reference = ensure_utc(now)
    year_start = datetime(reference.year, 1, 1, tzinfo=timezone.utc)
    days_elapsed = ceil_days_between(year_start, reference)

    days_by_category = {StayCategory.SHORT_TERM: 0, StayCategory.MID_TERM: 0}
    stays_by_category = {StayCategory.SHORT_TERM: 0, StayCategory.MID_TERM: 0}
    for interval in intervals:
        if interval.end < year_start or interval.start > reference:
            continue
        effective_start = max(interval.start, year_start)
        effective_end = min(interval.end, reference)
        days = max(0, ceil_days_between(effective_start, effective_end))
        days_by_category[interval.category] += days
        if days > 0:
            stays_by_category[interval.category] += 1

    booked_days = sum(days_by_category.values())
    occupancy_rate = (
        min(100, math.floor(booked_days / days_elapsed * 100 + 0.5)) if days_elapsed > 0 else 0
    )
    return OccupancySummary(
        year=reference.year,
        occupancy_rate_percent=occupancy_rate,
        booked_days=booked_days,
        days_elapsed=days_elapsed,
        short_term_days=days_by_category[StayCategory.SHORT_TERM],
        mid_term_days=days_by_category[StayCategory.MID_TERM],
        short_term_stays=stays_by_category[StayCategory.SHORT_TERM],
        mid_term_stays=stays_by_category[StayCategory.MID_TERM],
    )


def compute_booking_performance(intervals: Iterable[StayInterval]) -> BookingPerformance:
    stays = list(intervals)
    short_term = [stay for stay in stays if stay.category is StayCategory.SHORT_TERM]
    short_term_revenue = sum((stay.total_amount for stay in short_term), ZERO)
    short_term_nights = sum(stay.nights for stay in short_term)
    return BookingPerformance(
        total_bookings=len(stays),
        short_term_bookings=len(short_term),
        mid_term_bookings=len(stays) - len(short_term),
        short_term_revenue=short_term_revenue,
        average_booking_value=short_term_revenue / len(short_term) if short_term else ZERO,
        average_nightly_rate=short_term_revenue / short_term_nights if short_term_nights else ZERO,
    )
