"""Reporting windows for the dashboard statements.

Timestamps are stored as naive UTC datetimes, so every value produced here is
naive UTC as well.
"""
from collections import namedtuple
from datetime import date, datetime, time, timedelta, timezone

PERIODS = ("day", "week", "month", "quarter", "year")
DEFAULT_PERIOD = "month"


class Period(namedtuple("Period", ["name", "start", "end"])):
    __slots__ = ()

    def previous(self):
        """The window of equal length that ends where this one starts."""
        duration = self.end - self.start
        return Period(self.name, self.start - duration, self.start)

    def to_dict(self):
        return {
            "name": self.name,
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat(),
        }


def parse_datetime(value, field="date", end_of_day=False):
    """Parse an ISO-8601 date or datetime from a query string.

    A bare ``YYYY-MM-DD`` is taken as midnight, or as the last instant of the
    day when ``end_of_day`` is set. Returns None for a missing value and raises
    ValueError for a malformed one.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            return datetime.combine(day, time.max if end_of_day else time.min)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid {field} '{value}', expected an ISO date such as 2024-01-31")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def period_start(period, now):
    today = datetime.combine(now.date(), time.min)
    if period == "day":
        return today
    if period == "week":
        # Weeks start on Sunday.
        return today - timedelta(days=(today.weekday() + 1) % 7)
    if period == "quarter":
        return today.replace(month=(today.month - 1) // 3 * 3 + 1, day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    return today.replace(day=1)


def resolve_period(period=None, start_date=None, end_date=None, now=None):
    """Work out the reporting window for a statement request.

    ``start_date``/``end_date`` are raw query string values and win over the
    named ``period`` when given. Unknown period names fall back to ``month``.
    """
    now = now or datetime.utcnow()
    name = period if period in PERIODS else DEFAULT_PERIOD

    start = parse_datetime(start_date, "startDate") or period_start(name, now)
    end = parse_datetime(end_date, "endDate", end_of_day=True) or now

    if start > end:
        raise ValueError("startDate must not be after endDate")
    return Period(name, start, end)


def trend_key(moment, period):
    """Bucket label for trend series: hourly for a day, weekly for a quarter,
    monthly for a year and daily otherwise."""
    if period == "day":
        return moment.strftime("%Y-%m-%d %H:00")
    if period == "quarter":
        return f"{moment:%Y-%m}-{moment.isocalendar()[1]}"
    if period == "year":
        return moment.strftime("%Y-%m")
    return moment.strftime("%Y-%m-%d")
