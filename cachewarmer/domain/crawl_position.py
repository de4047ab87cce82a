import logging
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional

from cachewarmer.utils.datetime_utils import now_ms

logger = logging.getLogger(__name__)


def _parse_int(params: Mapping[str, str], name: str, default: int) -> int:
    raw = params.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        logger.warning("Invalid %s parameter %r; using %s", name, raw, default)
        return default
    return max(value, 0)


@dataclass(frozen=True)
class CrawlPosition:
    """Crawl progress carried by the client between invocations.

    Nothing here is stored server-side: a position is parsed from the inbound
    query string and re-serialized into every outgoing continuation reference.
    Unknown query parameters are ignored so newer senders stay compatible.
    """
    sitemap_index: int = 0
    offset: int = 0
    cumulative_bytes: int = 0
    start_time: int = 0

    @classmethod
    def from_params(cls, params: Mapping[str, str], now: Optional[int] = None) -> "CrawlPosition":
        started = _parse_int(params, "startTime", -1)
        if started < 0:
            started = now if now is not None else now_ms()
        return cls(
            sitemap_index=_parse_int(params, "smIdx", 0),
            offset=_parse_int(params, "offset", 0),
            cumulative_bytes=_parse_int(params, "totalBytes", 0),
            start_time=started,
        )

    def to_params(self) -> Dict[str, int]:
        return {
            "smIdx": self.sitemap_index,
            "offset": self.offset,
            "totalBytes": self.cumulative_bytes,
            "startTime": self.start_time,
        }

    def next_batch(self, batch_size: int, cumulative_bytes: int) -> "CrawlPosition":
        return replace(self, offset=self.offset + batch_size, cumulative_bytes=cumulative_bytes)

    def next_sitemap(self, cumulative_bytes: Optional[int] = None) -> "CrawlPosition":
        """Advance to the following sitemap; the offset always resets to 0."""
        total = self.cumulative_bytes if cumulative_bytes is None else cumulative_bytes
        return replace(self, sitemap_index=self.sitemap_index + 1, offset=0, cumulative_bytes=total)
