"""
Unit Tests for Time and Series Helpers

These tests verify:
- Month labels are derived in UTC from timestamps, ISO strings and dates
- Raw samples reduce to one point per month, keeping the month's last price
- Only the most recent 12 months are returned, oldest first

Run with:
    pytest tests/unit/test_series.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.utils.series import reduce_to_monthly
from core.utils.time import (
    datetime_to_timestamp,
    month_label,
    one_year_before,
    parse_date,
    to_utc_datetime,
)


def daily_samples(start: datetime, days: int):
    """Millisecond (timestamp, price) pairs where price is the day index"""
    return [
        [datetime_to_timestamp(start + timedelta(days=i), milliseconds=True), float(i)]
        for i in range(days)
    ]


# ============================================
# Tests for Time Utilities
# ============================================

class TestTimeConversion:
    """Tests for timestamp and date parsing"""

    def test_milliseconds_detected(self):
        assert to_utc_datetime(1704110400000) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_seconds_accepted(self):
        assert to_utc_datetime(1704110400) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_negative_timestamp_rejected(self):
        with pytest.raises(ValueError):
            to_utc_datetime(-1)

    def test_naive_date_is_utc(self):
        assert parse_date("2024-01-31") == datetime(2024, 1, 31, tzinfo=timezone.utc)

    def test_invalid_date_rejected(self):
        with pytest.raises(ValueError):
            parse_date("yesterday-ish")

    def test_one_year_before_leap_day(self):
        leap = datetime(2024, 2, 29, tzinfo=timezone.utc)
        assert one_year_before(leap) == datetime(2023, 2, 28, tzinfo=timezone.utc)


class TestMonthLabel:
    """Tests for month_label"""

    def test_from_date_string(self):
        assert month_label("2023-12-31") == "Dec"

    def test_from_iso_timestamp(self):
        assert month_label("2024-01-01T00:00:00.000Z") == "Jan"

    def test_from_epoch_milliseconds(self):
        assert month_label(1709251200000) == "Mar"

    def test_offset_is_converted_to_utc(self):
        """Verify a late-evening New York time lands in the next UTC month"""
        assert month_label("2024-01-31T23:30:00-05:00") == "Feb"


# ============================================
# Tests for Monthly Reduction
# ============================================

class TestReduceToMonthly:
    """Tests for reduce_to_monthly"""

    def test_fourteen_months_keep_last_twelve(self):
        # 2023-01-01 .. 2024-02-29 inclusive is 425 days
        samples = daily_samples(datetime(2023, 1, 1, tzinfo=timezone.utc), 425)

        points = reduce_to_monthly(samples)

        assert len(points) == 12
        assert [p.month for p in points] == [
            "Mar", "Apr", "May", "Jun", "Jul", "Aug",
            "Sep", "Oct", "Nov", "Dec", "Jan", "Feb",
        ]
        # last sample of March 2023 is day index 31 + 28 + 30
        assert points[0].price == 89.0
        assert points[-1].price == 424.0

    def test_month_value_is_last_sample_not_average(self):
        samples = [
            [datetime_to_timestamp(datetime(2024, 1, 2, tzinfo=timezone.utc), True), 10.0],
            [datetime_to_timestamp(datetime(2024, 1, 20, tzinfo=timezone.utc), True), 30.0],
            [datetime_to_timestamp(datetime(2024, 2, 1, tzinfo=timezone.utc), True), 50.0],
        ]

        assert reduce_to_monthly(samples) == [("Jan", 30.0), ("Feb", 50.0)]

    def test_unsorted_input_is_sorted(self):
        samples = daily_samples(datetime(2024, 1, 1, tzinfo=timezone.utc), 60)
        assert reduce_to_monthly(list(reversed(samples))) == reduce_to_monthly(samples)

    def test_empty_input(self):
        assert reduce_to_monthly([]) == []

    def test_limit(self):
        samples = daily_samples(datetime(2023, 1, 1, tzinfo=timezone.utc), 365)
        assert [p.month for p in reduce_to_monthly(samples, limit=2)] == ["Nov", "Dec"]
