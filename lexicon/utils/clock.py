"""Timestamp helpers and study-day bucketing for review scheduling."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware UTC datetime.

    Accepts the trailing 'Z' that browsers write (``2024-05-01T10:00:00.000Z``).
    Naive values are read as UTC.

    Raises:
        ValueError: If the value is not an ISO 8601 string or a datetime
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Expected an ISO 8601 timestamp, got {value!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format an aware datetime as ISO 8601 UTC with a 'Z' suffix."""
    if dt.tzinfo is None:
        raise ValueError("Cannot format a naive datetime")
    utc = dt.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def require_aware(now: datetime) -> datetime:
    """Reject naive datetimes so due comparisons never mix clocks."""
    if not isinstance(now, datetime):
        raise ValueError(f"Expected a datetime, got {type(now).__name__}")
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("Timestamps must be timezone-aware")
    return now


class StudyDay:
    """Utility class for bucketing review activity into study days."""

    def __init__(self, rollover_hour: int = 4, tz: Optional[timezone] = None):
        """
        Initialize study day utilities.

        Args:
            rollover_hour: Hour of day when the study day rolls over (default 4 AM)
            tz: Timezone the rollover hour is expressed in (default UTC)
        """
        if not 0 <= rollover_hour < 24:
            raise ValueError(f"rollover_hour must be in 0..23, got {rollover_hour}")
        self.rollover_hour = rollover_hour
        self.tz = tz or timezone.utc

    def study_date(self, now: datetime) -> str:
        """
        Get the study date (YYYY-MM-DD) for a timestamp.

        Study day starts at the rollover hour, so with the default of 4 AM:
        - 2 AM -> yesterday's study date
        - 6 AM -> today's study date
        """
        local = require_aware(now).astimezone(self.tz)
        if local.hour < self.rollover_hour:
            local = local - timedelta(days=1)
        return local.strftime("%Y-%m-%d")

    def is_same_study_day(self, first: datetime, second: datetime) -> bool:
        """Check if two timestamps fall in the same study day."""
        return self.study_date(first) == self.study_date(second)
