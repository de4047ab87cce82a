from dataclasses import dataclass, field
from typing import List

from cachewarmer.domain.fetch_outcome import FetchOutcome


@dataclass(frozen=True)
class VerificationReport:
    """Terminal artifact of a completed crawl."""
    hit_rate_percent: int
    total_bytes_formatted: str
    total_elapsed_seconds: float
    sample_outcomes: List[FetchOutcome] = field(default_factory=list)

    @property
    def verified_count(self) -> int:
        return len(self.sample_outcomes)
