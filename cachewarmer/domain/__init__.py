"""Domain objects for the cache warmer - explicit re-exports to satisfy linters."""
from .mode import Mode as Mode
from .http_response import HttpResponse as HttpResponse
from .crawl_position import CrawlPosition as CrawlPosition
from .sitemap_result import SitemapResolutionResult as SitemapResolutionResult
from .fetch_outcome import CacheStatus as CacheStatus
from .fetch_outcome import FetchOutcome as FetchOutcome
from .fetch_outcome import BatchSummary as BatchSummary
from .verification_report import VerificationReport as VerificationReport
from .crawl_step import CrawlState as CrawlState
from .crawl_step import CrawlStep as CrawlStep
from .settings import WarmerSettings as WarmerSettings

__all__ = [
    "Mode",
    "HttpResponse",
    "CrawlPosition",
    "SitemapResolutionResult",
    "CacheStatus",
    "FetchOutcome",
    "BatchSummary",
    "VerificationReport",
    "CrawlState",
    "CrawlStep",
    "WarmerSettings",
]
