import time
from datetime import datetime, timezone
from typing import Optional


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def iso_timestamp(value: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a `Z` suffix."""
    dt = value if value is not None else datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def elapsed_seconds(start_ms: int, end_ms: int) -> float:
    """Seconds between two epoch-millisecond stamps, rounded to one decimal."""
    return round(max(end_ms - start_ms, 0) / 1000.0, 1)
