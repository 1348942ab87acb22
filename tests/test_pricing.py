"""Unit tests for the peak-hour traffic fee and booking totals."""

from datetime import datetime, timedelta, timezone

import pytest

from tareeqi.domain.exceptions import ValidationError
from tareeqi.domain.pricing import (
    FeeCalculator,
    booking_total,
    local_hour,
    round_money,
    traffic_fee,
)


class TestLocalHour:
    def test_datetime_local_string_is_read_verbatim(self):
        assert local_hour("2026-01-06T07:30") == 7

    def test_utc_string_is_shifted(self):
        assert local_hour("2026-01-06T04:30:00Z") == 7

    def test_utc_shift_wraps_past_midnight(self):
        assert local_hour("2026-01-06T22:00:00Z") == 1

    def test_space_separated_string_is_treated_as_utc(self):
        assert local_hour("2026-01-06 13:00:00") == 16

    def test_naive_datetime_is_local(self):
        assert local_hour(datetime(2026, 1, 6, 17, 15)) == 17

    def test_aware_datetime_is_shifted(self):
        assert local_hour(datetime(2026, 1, 6, 5, 0, tzinfo=timezone.utc)) == 8

    def test_aware_datetime_in_other_zone(self):
        plus_two = timezone(timedelta(hours=2))
        # 09:00+02:00 == 07:00Z == 10:00 local
        assert local_hour(datetime(2026, 1, 6, 9, 0, tzinfo=plus_two)) == 10

    def test_garbage_raises(self):
        with pytest.raises(ValidationError):
            local_hour("next tuesday")


class TestTrafficFee:
    def test_morning_peak(self):
        assert traffic_fee("2026-01-06T07:00", 25) == 1.25

    def test_midday_is_free(self):
        assert traffic_fee("2026-01-06T12:00", 25) == 0

    @pytest.mark.parametrize(
        "departure, expected",
        [
            ("2026-01-06T06:59", 0.0),
            ("2026-01-06T08:59", 1.25),
            ("2026-01-06T09:00", 0.0),
            ("2026-01-06T15:59", 0.0),
            ("2026-01-06T16:00", 1.25),
            ("2026-01-06T17:59", 1.25),
            ("2026-01-06T18:00", 0.0),
        ],
    )
    def test_window_edges(self, departure, expected):
        assert traffic_fee(departure, 25) == expected

    def test_utc_evening_lands_in_local_peak(self):
        # 13:30Z is 16:30 local
        assert traffic_fee("2026-01-06T13:30:00Z", 10) == 0.5

    def test_no_distance_no_fee(self):
        assert traffic_fee("2026-01-06T07:00", None) == 0
        assert traffic_fee("2026-01-06T07:00", 0) == 0

    def test_no_departure_no_fee(self):
        assert traffic_fee(None, 25) == 0

    def test_rounds_half_up(self):
        # 0.05 * 12.5 = 0.625
        assert traffic_fee("2026-01-06T07:00", 12.5) == 0.63

    def test_custom_windows_and_rate(self):
        calc = FeeCalculator(rate_per_km=0.1, peak_windows=[(22, 24)], utc_offset_hours=0)
        assert calc.traffic_fee("2026-01-06T23:00", 10) == 1.0
        assert calc.traffic_fee("2026-01-06T07:00", 10) == 0


class TestBookingTotal:
    def test_fee_is_added_once(self):
        assert booking_total(2.0, 3, 1.25) == 7.25

    def test_zero_fee(self):
        assert booking_total(1.5, 2, 0) == 3.0

    def test_round_money(self):
        assert round_money(2.675) == 2.68
        assert round_money(1.005) == 1.01
