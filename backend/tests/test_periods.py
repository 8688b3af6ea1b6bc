from datetime import datetime, timedelta
import pytest
from utils.periods import Period, parse_datetime, resolve_period, trend_key

# A Wednesday.
NOW = datetime(2024, 5, 15, 13, 30)


@pytest.mark.parametrize("period,start", [
    ("day", datetime(2024, 5, 15)),
    ("week", datetime(2024, 5, 12)),
    ("month", datetime(2024, 5, 1)),
    ("quarter", datetime(2024, 4, 1)),
    ("year", datetime(2024, 1, 1)),
])
def test_named_periods_start_at_their_boundary(period, start):
    resolved = resolve_period(period, now=NOW)

    assert resolved == Period(period, start, NOW)


def test_unknown_or_missing_period_means_month():
    assert resolve_period("fortnight", now=NOW) == Period("month", datetime(2024, 5, 1), NOW)
    assert resolve_period(None, now=NOW).start == datetime(2024, 5, 1)


def test_week_starting_on_sunday_begins_that_day():
    sunday = datetime(2024, 5, 12, 9, 0)
    assert resolve_period("week", now=sunday).start == datetime(2024, 5, 12)


def test_explicit_dates_override_period():
    resolved = resolve_period("year", "2024-02-01", "2024-02-29", now=NOW)

    assert resolved.name == "year"
    assert resolved.start == datetime(2024, 2, 1)
    assert resolved.end == datetime(2024, 2, 29, 23, 59, 59, 999999)


def test_datetimes_with_offsets_are_normalised_to_utc():
    assert parse_datetime("2024-03-01T10:00:00+02:00") == datetime(2024, 3, 1, 8, 0)
    assert parse_datetime("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, 0)


def test_blank_values_parse_to_none():
    assert parse_datetime(None) is None
    assert parse_datetime("  ") is None


def test_malformed_dates_are_rejected():
    with pytest.raises(ValueError, match="startDate"):
        resolve_period("month", "31/01/2024", now=NOW)


def test_start_after_end_is_rejected():
    with pytest.raises(ValueError, match="must not be after"):
        resolve_period("month", "2024-05-10", "2024-05-01", now=NOW)


def test_previous_period_has_the_same_length():
    period = Period("week", datetime(2024, 5, 12), datetime(2024, 5, 15))

    previous = period.previous()

    assert previous.start == datetime(2024, 5, 9)
    assert previous.end == period.start
    assert previous.end - previous.start == timedelta(days=3)


def test_period_serialises_with_iso_dates():
    period = Period("day", datetime(2024, 5, 15), datetime(2024, 5, 15, 12))

    assert period.to_dict() == {
        "name": "day",
        "startDate": "2024-05-15T00:00:00",
        "endDate": "2024-05-15T12:00:00",
    }


@pytest.mark.parametrize("period,key", [
    ("day", "2024-05-15 13:00"),
    ("week", "2024-05-15"),
    ("month", "2024-05-15"),
    ("quarter", "2024-05-20"),
    ("year", "2024-05"),
])
def test_trend_keys(period, key):
    assert trend_key(NOW, period) == key
