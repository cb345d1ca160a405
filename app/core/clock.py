"""Timestamp helpers.

All timestamps are timezone-aware UTC datetimes. Values read back from a
database driver that drops the offset are treated as UTC by ``as_utc``.
"""

from datetime import UTC, date, datetime, timedelta


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` in UTC, assuming UTC when it carries no offset."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def start_of_day(moment: datetime | date | None = None) -> datetime:
    """UTC midnight at the start of the day containing ``moment`` (default: now)."""
    if moment is None:
        moment = utcnow()
    elif isinstance(moment, datetime):
        moment = as_utc(moment)
    return datetime(moment.year, moment.month, moment.day, tzinfo=UTC)


def end_of_day(moment: datetime | date) -> datetime:
    """Last representable instant of the UTC day containing ``moment``."""
    return start_of_day(moment) + timedelta(days=1) - timedelta(microseconds=1)
