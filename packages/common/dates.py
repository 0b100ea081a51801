"""
Tolerant date handling for API payloads

The PHP backend returns dates as ISO strings, MySQL-style
"YYYY-MM-DD HH:MM:SS" strings, plain dates, or zero-dates for unset
columns. Anything that cannot be read becomes None instead of an error.
"""
from datetime import date, datetime, time, timezone
from typing import Any, Optional

import structlog

logger = structlog.get_logger()

ZERO_DATES = {"0000-00-00", "0000-00-00 00:00:00"}

EPOCH = datetime(1970, 1, 1)


def _naive(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC and compared as naive values."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_api_date(value: Any, field: str = "date") -> Optional[datetime]:
    """
    Parse a date value coming from the API.

    Args:
        value: str, date, datetime or None
        field: Field name, only used for log context

    Returns:
        Naive datetime, or None when missing or unparseable
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return _naive(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if not isinstance(value, str):
        logger.warning("unparseable_date", field=field, value=repr(value))
        return None

    text = value.strip()
    if not text:
        return None

    if text in ZERO_DATES:
        logger.debug("zero_date", field=field, value=text)
        return None

    candidate = text.replace(" ", "T", 1)
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        return _naive(datetime.fromisoformat(candidate))
    except ValueError:
        pass

    logger.warning("unparseable_date", field=field, value=text)
    return None


def start_of_day(value: date) -> datetime:
    """Midnight at the start of the given day."""
    if isinstance(value, datetime):
        value = _naive(value).date()
    return datetime.combine(value, time.min)


def end_of_day(value: date) -> datetime:
    """Last representable instant of the given day."""
    if isinstance(value, datetime):
        value = _naive(value).date()
    return datetime.combine(value, time.max)
