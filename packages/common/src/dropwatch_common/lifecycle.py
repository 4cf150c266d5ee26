"""Registration lifecycle arithmetic.

A domain that is not renewed moves through fixed windows counted in days
after its expiry date:

    day < 0        active
    day 0..30      grace
    day 31..60     redemption
    day 61..75     pending_delete
    day > 75       dropped (released for public registration)

All functions take the reference instant explicitly. Calendar days are UTC
calendar days, so the same instant gives the same answer in every timezone.
"""

from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import Any, Optional, Union

from dropwatch_common.constants import (
    DROP_HOLD_DAYS,
    GRACE_PERIOD_END_DAY,
    PENDING_DELETE_END_DAY,
    REDEMPTION_PERIOD_END_DAY,
)

DateLike = Union[date, datetime]

# Formats seen in registry WHOIS output and auction CSV exports
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y.%m.%d",
    "%Y.%m.%d %H:%M:%S",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
    "%d-%b-%Y",
    "%d-%b-%Y %H:%M:%S",
    "%d-%B-%Y",
    "%d %b %Y",
    "%b %d %Y",
    "%a %b %d %H:%M:%S %Z %Y",
)


class DomainStatus(str, Enum):
    """Lifecycle status stored on every domain record."""

    ACTIVE = "active"
    GRACE = "grace"
    REDEMPTION = "redemption"
    PENDING_DELETE = "pending_delete"
    DROPPED = "dropped"


def utc_now() -> datetime:
    """Default clock for services; tests pass a fixed instant instead."""
    return datetime.now(UTC)


def to_utc_date(value: DateLike) -> date:
    """
    Reduce a date or datetime to a UTC calendar date.

    Aware datetimes are converted to UTC first; naive datetimes are taken
    to already be in UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value


def drop_date_from_expiry(expiry: DateLike) -> date:
    """Release date for an expiry date."""
    return to_utc_date(expiry) + timedelta(days=DROP_HOLD_DAYS)


def expiry_date_from_drop(drop: DateLike) -> date:
    """Expiry date for a release date (inverse of drop_date_from_expiry)."""
    return to_utc_date(drop) - timedelta(days=DROP_HOLD_DAYS)


def days_until_drop(drop: DateLike, now: DateLike) -> int:
    """
    Whole days from now until the drop date.

    Negative once the drop date has passed.
    """
    return (to_utc_date(drop) - to_utc_date(now)).days


def days_since(day: DateLike, now: DateLike) -> int:
    """Whole days elapsed since day (negative if day is in the future)."""
    return (to_utc_date(now) - to_utc_date(day)).days


def lifecycle_status(expiry: DateLike, now: DateLike) -> DomainStatus:
    """
    Lifecycle status of a domain given its expiry date.

    Args:
        expiry: Registration expiry date
        now: Reference instant

    Returns:
        DomainStatus for the number of days since expiry
    """
    elapsed = days_since(expiry, now)

    if elapsed < 0:
        return DomainStatus.ACTIVE
    if elapsed <= GRACE_PERIOD_END_DAY:
        return DomainStatus.GRACE
    if elapsed <= REDEMPTION_PERIOD_END_DAY:
        return DomainStatus.REDEMPTION
    if elapsed <= PENDING_DELETE_END_DAY:
        return DomainStatus.PENDING_DELETE
    return DomainStatus.DROPPED


def parse_date(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a loosely typed date value.

    Accepts datetime/date objects, lists (first element wins), ISO-8601
    strings and the registry formats listed in _DATE_FORMATS.

    Returns:
        datetime (aware if the input carried an offset) or None
    """
    if value is None:
        return None

    if isinstance(value, (list, tuple)):
        return parse_date(value[0]) if value else None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    if not text:
        return None

    # fromisoformat handles "Z" and offsets on 3.11+
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    # Some registries append a timezone label after the timestamp
    for candidate in (text, text.split(" (")[0], text.rsplit(" ", 1)[0]):
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt)
            except ValueError:
                continue

    return None
