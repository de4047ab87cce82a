from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from cachewarmer.domain.crawl_position import CrawlPosition
from cachewarmer.domain.fetch_outcome import BatchSummary, FetchOutcome
from cachewarmer.domain.verification_report import VerificationReport


class CrawlState(str, Enum):
    COMPLETED = "completed"
    SITEMAP_ERROR = "sitemap_error"
    SITEMAP_EXHAUSTED = "sitemap_exhausted"
    BATCH_IN_PROGRESS = "batch_in_progress"
    VERIFYING = "verifying"


@dataclass
class CrawlStep:
    """What one invocation of the crawl state machine did.

    `next_position` is None only for terminal states (COMPLETED, VERIFYING).
    """
    state: CrawlState
    position: CrawlPosition
    total_sitemaps: int
    next_position: Optional[CrawlPosition] = None
    sitemap_url: Optional[str] = None
    error: Optional[str] = None
    outcomes: List[FetchOutcome] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)
    total_urls: int = 0
    progress: int = 0
    report: Optional[VerificationReport] = None

    @property
    def is_terminal(self) -> bool:
        return self.next_position is None

    @property
    def sitemap_number(self) -> int:
        """1-based sitemap number used in messages and logs."""
        return self.position.sitemap_index + 1

    @property
    def batch_start(self) -> int:
        return self.position.offset

    @property
    def batch_end(self) -> int:
        return self.position.offset + len(self.outcomes)
