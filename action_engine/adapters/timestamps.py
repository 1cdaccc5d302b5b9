"""Timestamp normalization shared by the entity adapters."""

import math
from datetime import date, datetime, timezone
from typing import Any, Optional

MS_PER_MINUTE = 60_000
MS_PER_DAY = 86_400_000


def to_epoch_ms(value: Any) -> Optional[float]:
    """
    Normalize a stored timestamp to epoch milliseconds.

    Accepts epoch-ms numbers, datetimes/dates and ISO-8601 strings
    (date-only values are midnight UTC, naive values are UTC). Anything
    missing or unparseable yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        return float(value)
    if isinstance(value, datetime):
        return _datetime_ms(value)
    if isinstance(value, date):
        return _datetime_ms(datetime(value.year, value.month, value.day))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _datetime_ms(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def to_datetime(epoch_ms: float) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


def floor_days_between(start_ms: float, end_ms: float) -> int:
    """Whole days elapsed from start to end (floored)."""
    return math.floor((end_ms - start_ms) / MS_PER_DAY)


def _datetime_ms(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp() * 1000
