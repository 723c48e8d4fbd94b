"""Days-until-expiry calculations for pantry items."""

import math
from datetime import date, datetime, time
from typing import Any, Iterable, List, Optional, Union

from pantryplan.data_layer.models import NO_EXPIRY_DAYS, PantryItem

SECONDS_PER_DAY = 24 * 60 * 60

Moment = Union[date, datetime]


def _as_datetime(moment: Moment) -> datetime:
    """Dates are taken as midnight; timezone-aware values are made naive."""
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            return moment.replace(tzinfo=None)
        return moment
    return datetime.combine(moment, time.min)


def parse_expiry_date(value: Any) -> Optional[date]:
    """Parse an expiry date from a date, datetime or ISO string.

    Args:
        value: Raw expiry value from a pantry record

    Returns:
        The expiry date, or None if absent or unparseable (never raises)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    # JS-style timestamps end with "Z"
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def days_until_expiry(item: PantryItem, now: Moment) -> int:
    """Whole days until ``item`` expires, never less than 1.

    Items without an expiry date get NO_EXPIRY_DAYS. Items expiring today
    or already expired still count as 1 day so they keep the highest urgency.
    """
    if item.expiry_date is None:
        return NO_EXPIRY_DAYS
    delta = _as_datetime(item.expiry_date) - _as_datetime(now)
    days = math.ceil(delta.total_seconds() / SECONDS_PER_DAY)
    return max(1, days)


def sort_by_urgency(items: Iterable[PantryItem], now: Moment) -> List[PantryItem]:
    """Sort pantry items by days until expiry (most urgent first, stable)."""
    return sorted(items, key=lambda item: days_until_expiry(item, now))


def soon_to_expire(items: Iterable[PantryItem], now: Moment, limit: int = 10) -> List[PantryItem]:
    """The ``limit`` most urgent items that actually carry an expiry date."""
    dated = [item for item in items if item.expiry_date is not None]
    return sort_by_urgency(dated, now)[:limit]
