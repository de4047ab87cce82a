import math
from urllib.parse import urlsplit


def round_half_up(value: float) -> int:
    # round() would bank 2.5 down to 2
    return int(math.floor(value + 0.5))


def percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(100.0 * part / whole)


def fmt_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.2f} MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes} B"


def fmt_mb(num_bytes: int) -> str:
    return f"{num_bytes / (1024 * 1024):.2f} MB"


def display_path(url: str) -> str:
    """Drop scheme and host so result tables show the page path only."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return path
