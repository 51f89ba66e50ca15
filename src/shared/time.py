from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any, List, Optional

from src.core.errors import BadRequestError

SECONDS_PER_DAY = 86400


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(raw_value: Any) -> Optional[datetime]:
    """Parse a backend date or timestamp into a UTC datetime.

    Date-only values (``2024-06-01``) land on midnight UTC. Anything that
    cannot be read as a date returns ``None`` so callers can skip the record.
    """
    if raw_value is None:
        return None
    if isinstance(raw_value, datetime):
        return ensure_utc(raw_value)
    if isinstance(raw_value, date):
        return datetime.combine(raw_value, time.min, tzinfo=timezone.utc)
    if not isinstance(raw_value, str):
        return None
    text = raw_value.strip()
    if not text:
        return None
    try:
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), time.min, tzinfo=timezone.utc)
        return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None


def parse_month(raw_value: Any) -> Optional[date]:
    """Read ``YYYY-MM`` or ``YYYY-MM-DD`` into the first day of that month."""
    if raw_value is None:
        return None
    if isinstance(raw_value, date):
        return date(raw_value.year, raw_value.month, 1)
    text = str(raw_value).strip()
    try:
        if len(text) == 7:
            parsed = date.fromisoformat(f"{text}-01")
        else:
            parsed = date.fromisoformat(text[:10])
    except ValueError:
        return None
    return date(parsed.year, parsed.month, 1)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Number of complete 24h days from start to end, truncated toward zero."""
    seconds = (end - start).total_seconds()
    return int(seconds / SECONDS_PER_DAY)


def ceil_days_between(start: datetime, end: datetime) -> int:
    seconds = (end - start).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def parse_horizons(raw_value: str) -> List[int]:
    """Split ``"30,60,90"`` into day counts.

    Only the format is checked here; sign checks belong to the forecast itself.
    """
    horizons: List[int] = []
    for part in raw_value.split(","):
        part = part.strip().lower()
        if not part:
            continue
        if part.endswith("d"):
            part = part[:-1]
        try:
            horizons.append(int(part))
        except ValueError as exc:
            raise BadRequestError("Unsupported horizons format") from exc
    if not horizons:
        raise BadRequestError("Unsupported horizons format")
    return horizons
