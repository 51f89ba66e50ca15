from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from conftest import FIXED_NOW, make_stay
from src.analytics.revenue_forecast import forecast_windows, upcoming_reservations
from src.core.errors import InvalidArgumentError
from src.schemas.owner_portal import StayCategory, StayInterval

SHORT = StayCategory.SHORT_TERM
MID = StayCategory.MID_TERM


def _revenue(windows):
    return [window.revenue for window in windows]


def _counts(windows):
    return [window.bookings_count for window in windows]


def test_no_bookings_yields_zero_windows() -> None:
    windows = forecast_windows([], FIXED_NOW, [30, 60, 90])
    assert [window.horizon_days for window in windows] == [30, 60, 90]
    assert _revenue(windows) == [0, 0, 0]
    assert _counts(windows) == [0, 0, 0]


def test_window_end_is_offset_from_now() -> None:
    window = forecast_windows([], FIXED_NOW, [30])[0]
    assert window.window_end == FIXED_NOW + timedelta(days=30)


def test_short_term_booking_counts_in_full_for_every_window_it_starts_in() -> None:
    stays = [make_stay("str-1", SHORT, 5, 8, "600")]
    windows = forecast_windows(stays, FIXED_NOW, [30, 60, 90])
    assert _revenue(windows) == [600, 600, 600]
    assert _counts(windows) == [1, 1, 1]


def test_short_term_stay_crossing_window_boundary_is_not_prorated() -> None:
    stays = [make_stay("str-1", SHORT, 25, 35, "1000")]
    windows = forecast_windows(stays, FIXED_NOW, [30])
    assert _revenue(windows) == [1000]


def test_short_term_window_bounds_are_exclusive() -> None:
    stays = [
        make_stay("starts-now", SHORT, 0, 3, "300"),
        make_stay("starts-at-window-end", SHORT, 30, 33, "450"),
        make_stay("already-in-house", SHORT, -2, 2, "800"),
    ]
    windows = forecast_windows(stays, FIXED_NOW, [30, 60])
    assert _revenue(windows) == [0, 450]
    assert _counts(windows) == [0, 1]


def test_mid_term_lease_is_prorated_by_overlap() -> None:
    stays = [make_stay("mtr-1", MID, 10, 50, "3000")]
    windows = forecast_windows(stays, FIXED_NOW, [30, 60, 90])
    assert _revenue(windows) == [2000, 4000, 4000]
    assert _counts(windows) == [1, 1, 1]


def test_active_mid_term_lease_is_clipped_to_now_and_not_counted() -> None:
    stays = [make_stay("mtr-1", MID, -10, 20, "3000")]
    windows = forecast_windows(stays, FIXED_NOW, [30])
    assert _revenue(windows) == [2000]
    assert _counts(windows) == [0]


def test_mid_term_lease_starting_after_window_contributes_nothing() -> None:
    stays = [make_stay("mtr-1", MID, 45, 120, "3000")]
    windows = forecast_windows(stays, FIXED_NOW, [30, 60])
    assert _revenue(windows) == [0, 1500]
    assert _counts(windows) == [0, 1]


def test_partial_days_are_truncated_for_mid_term() -> None:
    stays = [make_stay("mtr-1", MID, 0.5, 40, "3000")]
    windows = forecast_windows(stays, FIXED_NOW, [30])
    assert _revenue(windows) == [2900]


def test_revenue_is_rounded_once_per_window() -> None:
    stays = [make_stay(f"mtr-{index}", MID, 1, 2, "1000") for index in range(3)]
    windows = forecast_windows(stays, FIXED_NOW, [30])
    assert _revenue(windows) == [100]


def test_half_units_round_up() -> None:
    stays = [make_stay("mtr-1", MID, 1, 2, "45")]
    assert _revenue(forecast_windows(stays, FIXED_NOW, [30])) == [2]


def test_mixed_portfolio() -> None:
    stays = [
        make_stay("str-1", SHORT, 5, 8, "600"),
        make_stay("str-2", SHORT, 40, 44, "900"),
        make_stay("mtr-1", MID, 10, 50, "3000"),
    ]
    windows = forecast_windows(stays, FIXED_NOW, [30, 60, 90])
    assert _revenue(windows) == [2600, 5500, 5500]
    assert _counts(windows) == [2, 3, 3]


def test_horizons_keep_requested_order_and_duplicates() -> None:
    stays = [make_stay("str-1", SHORT, 45, 48, "700")]
    windows = forecast_windows(stays, FIXED_NOW, [90, 30, 90])
    assert [window.horizon_days for window in windows] == [90, 30, 90]
    assert _revenue(windows) == [700, 0, 700]


@pytest.mark.parametrize("horizons", [[0], [30, -5], [True], [999_999_999], [10**9], [30, 10**30]])
def test_invalid_horizons_raise(horizons) -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        forecast_windows([], FIXED_NOW, horizons)
    assert exc_info.value.code == "invalid_argument"


def test_forecast_is_repeatable() -> None:
    stays = [make_stay("str-1", SHORT, 5, 8, "600"), make_stay("mtr-1", MID, 10, 50, "3000")]
    first = forecast_windows(stays, FIXED_NOW, [30, 60, 90])
    second = forecast_windows(stays, FIXED_NOW, [30, 60, 90])
    assert first == second


def test_naive_now_is_treated_as_utc() -> None:
    stays = [make_stay("mtr-1", MID, 10, 50, "3000")]
    naive = FIXED_NOW.replace(tzinfo=None)
    assert forecast_windows(stays, naive, [30]) == forecast_windows(stays, FIXED_NOW, [30])


def test_upcoming_reservations_sorted_and_limited() -> None:
    stays = [
        make_stay("later", SHORT, 20, 22, "400"),
        make_stay("finished", SHORT, -10, -5, "500"),
        make_stay("in-house", MID, -3, 27, "2500"),
        make_stay("soon", SHORT, 2, 4, "300"),
    ]
    upcoming = upcoming_reservations(stays, FIXED_NOW, limit=2)
    assert [reservation.id for reservation in upcoming] == ["in-house", "soon"]
    assert upcoming[0].amount == stays[2].total_amount
    assert upcoming[0].category is MID


def test_naive_interval_bounds_are_treated_as_utc() -> None:
    stay = StayInterval(
        id="str-naive",
        start=datetime(2030, 1, 1),
        end=datetime(2030, 1, 5),
        category=SHORT,
        total_amount=Decimal("800"),
        daily_rate=Decimal("200"),
        nights=4,
        label="Guest",
    )
    now = datetime(2029, 12, 25, tzinfo=timezone.utc)
    assert stay.start.tzinfo is not None
    assert _revenue(forecast_windows([stay], now, [30])) == [800]
    assert [reservation.id for reservation in upcoming_reservations([stay], now)] == ["str-naive"]


def test_upcoming_reservations_carry_listing_source() -> None:
    stay = make_stay("str-1", SHORT, 2, 4, "300").model_copy(update={"source": "Peach Cottage"})
    assert upcoming_reservations([stay], FIXED_NOW)[0].source == "Peach Cottage"
