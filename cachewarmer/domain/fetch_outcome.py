from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Union


class CacheStatus(str, Enum):
    HIT = "HIT"
    MISS = "MISS"
    DYNAMIC = "DYNAMIC"
    BYPASS = "BYPASS"
    OTHER = "OTHER"
    ERR = "ERR"

    @classmethod
    def from_header(cls, value: Optional[str]) -> "CacheStatus":
        """Map an upstream cache-status header value to a status.

        A missing header means MISS. Any other upstream value (EXPIRED,
        STALE, REVALIDATED, ...) is OTHER and is counted with the errors.
        """
        if value is None or value.strip() == "":
            return cls.MISS
        normalized = value.strip().upper()
        if normalized in (cls.HIT.value, cls.MISS.value, cls.DYNAMIC.value, cls.BYPASS.value):
            return cls(normalized)
        return cls.OTHER

    @property
    def category(self) -> str:
        """Aggregation bucket: DYNAMIC and BYPASS share `dynamic`."""
        if self is CacheStatus.HIT:
            return "hit"
        if self is CacheStatus.MISS:
            return "miss"
        if self in (CacheStatus.DYNAMIC, CacheStatus.BYPASS):
            return "dynamic"
        return "error"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one warming or verification request; never persisted.

    `upstream_status` keeps the raw header value for display.
    """
    url: str
    http_status: Union[int, str]
    cache_status: CacheStatus
    response_bytes: int = 0
    elapsed_ms: int = 0
    upstream_status: Optional[str] = None

    @classmethod
    def error(cls, url: str) -> "FetchOutcome":
        return cls(url=url, http_status="ERR", cache_status=CacheStatus.ERR)

    @property
    def badge(self) -> str:
        return self.upstream_status or self.cache_status.value

    @property
    def category(self) -> str:
        return self.cache_status.category

    @property
    def is_hit(self) -> bool:
        return self.cache_status is CacheStatus.HIT


@dataclass
class BatchSummary:
    hit_count: int = 0
    miss_count: int = 0
    dynamic_count: int = 0
    error_count: int = 0
    total_bytes: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[FetchOutcome]) -> "BatchSummary":
        summary = cls()
        for outcome in outcomes:
            summary.add(outcome)
        return summary

    def add(self, outcome: FetchOutcome) -> None:
        self.total_bytes += int(outcome.response_bytes)
        category = outcome.category
        if category == "hit":
            self.hit_count += 1
        elif category == "miss":
            self.miss_count += 1
        elif category == "dynamic":
            self.dynamic_count += 1
        else:
            self.error_count += 1

    @property
    def count(self) -> int:
        return self.hit_count + self.miss_count + self.dynamic_count + self.error_count

    def stats(self) -> Dict[str, int]:
        """Category counts keyed the way automation payloads expose them."""
        return {
            "hit": self.hit_count,
            "miss": self.miss_count,
            "dynamic": self.dynamic_count,
            "error": self.error_count,
        }
