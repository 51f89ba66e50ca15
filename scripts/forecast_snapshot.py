from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from src.analytics.booking_normalizer import DEFAULT_CANCELLATION_STATUSES, normalize_bookings
from src.analytics.performance_metrics import compute_metrics
from src.analytics.revenue_forecast import forecast_windows, upcoming_reservations
from src.core.logging import configure_logging
from src.models.owner_portal import (
    MidTermBookingRecord,
    ReconciledStatementRecord,
    ShortTermBookingRecord,
)
from src.shared.time import parse_horizons, parse_instant

logger = logging.getLogger("forecast_snapshot")


def load_records(rows: List[Dict[str, Any]], model: Any, label: str) -> List[Any]:
    records = []
    for index, row in enumerate(rows):
        try:
            records.append(model.model_validate(row))
        except ValidationError as exc:
            logger.warning("Skipping %s row %d: %d validation errors", label, index, exc.error_count())
    return records


def build_report(snapshot: Dict[str, Any], now_value: str, horizons_value: str) -> Dict[str, Any]:
    now = parse_instant(now_value)
    if now is None:
        raise ValueError(f"Unreadable --now value: {now_value}")
    horizons = parse_horizons(horizons_value)

    short_term = load_records(snapshot.get("shortTerm") or [], ShortTermBookingRecord, "shortTerm")
    mid_term = load_records(snapshot.get("midTerm") or [], MidTermBookingRecord, "midTerm")
    statements = load_records(snapshot.get("statements") or [], ReconciledStatementRecord, "statements")

    intervals = normalize_bookings(
        short_term, mid_term, now=now, cancellation_statuses=DEFAULT_CANCELLATION_STATUSES
    )
    metrics = compute_metrics(statements)
    return {
        "asOf": now.isoformat(),
        "windows": [
            window.model_dump(mode="json", by_alias=True)
            for window in forecast_windows(intervals, now, horizons)
        ],
        "upcomingReservations": [
            reservation.model_dump(mode="json", by_alias=True)
            for reservation in upcoming_reservations(intervals, now)
        ],
        "metrics": metrics.model_dump(mode="json", by_alias=True) if metrics else None,
    }


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Compute revenue forecast and performance metrics from a JSON snapshot."
    )
    parser.add_argument("snapshot_path", help="Path to JSON file with shortTerm, midTerm and statements")
    parser.add_argument("--now", required=True, help="Reference instant, e.g. 2024-06-01T00:00:00Z")
    parser.add_argument("--horizons", default="30,60,90", help="Comma separated horizons in days")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args()

    configure_logging(args.log_level)

    with open(args.snapshot_path, "r", encoding="utf-8") as snapshot_file:
        snapshot = json.load(snapshot_file)

    report = build_report(snapshot, args.now, args.horizons)
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
