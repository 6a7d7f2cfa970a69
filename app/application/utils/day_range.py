from __future__ import annotations

from datetime import date, datetime, time, timezone


def to_utc_day(value: date | datetime) -> date:
    """Calendar day of value in UTC. Naive datetimes are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()
    return value


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=timezone.utc)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    return start_of_day(day), end_of_day(day)
