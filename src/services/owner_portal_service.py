from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from src.analytics.booking_normalizer import normalize_bookings
from src.analytics.performance_metrics import (
    apply_service_type,
    compute_booking_performance,
    compute_metrics,
    compute_occupancy,
    compute_revenue_split,
    monthly_performance,
)
from src.analytics.revenue_forecast import forecast_windows, upcoming_reservations, validate_horizons
from src.core.config import Settings, get_cancellation_statuses, get_settings
from src.core.errors import NotFoundError
from src.models.owner_portal import PropertyRecord
from src.repositories.owner_portal_repository import OwnerPortalRepository
from src.schemas.owner_portal import PerformanceSummary, RevenueForecast

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class OwnerPortalService:
    def __init__(
        self,
        repository: OwnerPortalRepository,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.repository = repository
        self.clock = clock or _now_utc
        self.settings = settings or get_settings()

    def _require_property(self, property_id: str) -> PropertyRecord:
        record = self.repository.get_property(property_id)
        if not record:
            raise NotFoundError("Property not found")
        return record

    def get_revenue_forecast(self, property_id: str, horizons: Sequence[int]) -> RevenueForecast:
        # One clock read per request so every window shares the same snapshot.
        now = self.clock()
        validate_horizons(horizons, now)
        self._require_property(property_id)
        short_term = self.repository.list_short_term_bookings(
            property_id, limit=self.settings.booking_history_limit
        )
        mid_term = self.repository.list_mid_term_bookings(
            property_id, limit=self.settings.booking_history_limit
        )

        intervals = normalize_bookings(
            short_term,
            mid_term,
            now=now,
            cancellation_statuses=get_cancellation_statuses(self.settings),
        )
        windows = forecast_windows(intervals, now, horizons)
        logger.info(
            "Forecast for property %s: %d intervals, horizons=%s",
            property_id,
            len(intervals),
            list(horizons),
        )
        return RevenueForecast(
            as_of=now,
            windows=windows,
            upcoming_reservations=upcoming_reservations(
                intervals, now, limit=self.settings.upcoming_reservations_limit
            ),
        )

    def get_performance(self, property_id: str, months: int = 12) -> PerformanceSummary:
        record = self._require_property(property_id)
        statements = apply_service_type(
            self.repository.list_statements(property_id, limit=self.settings.statement_history_limit),
            record.service_type,
        )
        short_term = self.repository.list_short_term_bookings(
            property_id, limit=self.settings.booking_history_limit
        )
        mid_term = self.repository.list_mid_term_bookings(
            property_id, limit=self.settings.booking_history_limit
        )

        now = self.clock()
        history = normalize_bookings(
            short_term, mid_term, cancellation_statuses=get_cancellation_statuses(self.settings)
        )
        metrics = compute_metrics(statements)
        logger.info(
            "Performance for property %s: %d statements, %d stays",
            property_id,
            len(statements),
            len(history),
        )
        return PerformanceSummary(
            as_of=now,
            metrics=metrics,
            monthly=monthly_performance(statements, months=months, intervals=history),
            occupancy=compute_occupancy(history, now),
            booking_performance=compute_booking_performance(history),
            revenue_split=compute_revenue_split(statements, history, record.rental_type),
        )
