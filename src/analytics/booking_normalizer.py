from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import AbstractSet, Iterable, List, Optional

from src.models.owner_portal import MidTermBookingRecord, ShortTermBookingRecord
from src.schemas.owner_portal import StayCategory, StayInterval, StayStatus
from src.shared.time import ceil_days_between, ensure_utc, parse_instant

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_STATUSES = frozenset({"canceled", "cancelled"})
CONFIRMED_STATUSES = frozenset({"confirmed", "active", "booked", "reserved"})
SHORT_TERM_SOURCE = "OwnerRez"


def _is_cancelled(status: Optional[str], cancellation_statuses: AbstractSet[str]) -> bool:
    return (status or "").strip().lower() in cancellation_statuses


def _to_status(status: Optional[str], cancellation_statuses: AbstractSet[str]) -> StayStatus:
    normalized = (status or "").strip().lower()
    if not normalized or normalized in CONFIRMED_STATUSES:
        return StayStatus.CONFIRMED
    if normalized in cancellation_statuses:
        return StayStatus.CANCELLED
    return StayStatus.OTHER


def _build_interval(
    *,
    record_id: str,
    raw_start: Optional[str],
    raw_end: Optional[str],
    amount: Optional[Decimal],
    raw_status: Optional[str],
    label: str,
    category: StayCategory,
    source: Optional[str],
    now: Optional[datetime],
    cancellation_statuses: AbstractSet[str],
) -> Optional[StayInterval]:
    start = parse_instant(raw_start)
    end = parse_instant(raw_end)
    if start is None or end is None:
        logger.debug("Skipping %s booking %s: missing or unreadable dates", category.value, record_id)
        return None
    if _is_cancelled(raw_status, cancellation_statuses):
        logger.debug("Skipping %s booking %s: cancelled", category.value, record_id)
        return None
    if amount is None or amount <= 0:
        logger.debug("Skipping %s booking %s: non-revenue amount %s", category.value, record_id, amount)
        return None
    if start >= end:
        logger.debug("Skipping %s booking %s: ends before it starts", category.value, record_id)
        return None
    if now is not None and end < now:
        return None

    nights = max(1, ceil_days_between(start, end))
    return StayInterval(
        id=record_id,
        start=start,
        end=end,
        category=category,
        total_amount=amount,
        daily_rate=amount / nights,
        nights=nights,
        label=label,
        status=_to_status(raw_status, cancellation_statuses),
        source=source,
    )


def normalize_bookings(
    short_term: Iterable[ShortTermBookingRecord],
    mid_term: Iterable[MidTermBookingRecord],
    now: Optional[datetime] = None,
    cancellation_statuses: AbstractSet[str] = DEFAULT_CANCELLATION_STATUSES,
) -> List[StayInterval]:
    """Turn raw short-term and mid-term rows into revenue-bearing stay intervals.

    Pass ``now`` for forward-looking use: stays that ended before it are dropped.
    Leave it out for historical figures, where nothing is filtered by date.
    Records that cannot be used are skipped; the batch always completes.
    """
    reference = ensure_utc(now) if now is not None else None
    statuses = frozenset(status.strip().lower() for status in cancellation_statuses)

    intervals: List[StayInterval] = []
    for booking in short_term:
        interval = _build_interval(
            record_id=booking.id,
            raw_start=booking.check_in,
            raw_end=booking.check_out,
            amount=booking.total_amount,
            raw_status=booking.booking_status,
            label=(booking.guest_name or "").strip() or "Guest",
            category=StayCategory.SHORT_TERM,
            source=(booking.ownerrez_listing_name or "").strip() or SHORT_TERM_SOURCE,
            now=reference,
            cancellation_statuses=statuses,
        )
        if interval is not None:
            intervals.append(interval)

    for lease in mid_term:
        interval = _build_interval(
            record_id=lease.id,
            raw_start=lease.start_date,
            raw_end=lease.end_date,
            amount=lease.monthly_rent,
            raw_status=lease.status,
            label=(lease.tenant_name or "").strip() or "Tenant",
            category=StayCategory.MID_TERM,
            source=None,
            now=reference,
            cancellation_statuses=statuses,
        )
        if interval is not None:
            intervals.append(interval)

    return intervals
