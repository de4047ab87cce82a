import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List

from cachewarmer.domain.sitemap_result import SitemapResolutionResult
from cachewarmer.exceptions import HttpFetchError, SitemapFetchError
from cachewarmer.services.http_service import HttpService
from cachewarmer.services.sitemap_parser import scan_page_urls, scan_sitemap

logger = logging.getLogger(__name__)

EMPTY_OR_INVALID = "Empty or Invalid XML"


class SitemapResolver:
    """Turns a sitemap URL into a flat, sorted list of page URLs.

    Index documents are expanded exactly one level: up to `child_limit`
    children are fetched concurrently and their `<url>` entries flattened.
    Index markers inside a child are ignored. The reported byte size covers
    the top-level document only.
    """

    MAX_ATTEMPTS = 2

    def __init__(
        self,
        http_service: HttpService,
        *,
        child_limit: int = 10,
        retry_delay_seconds: float = 1.0,
        sleep_fn: Callable[[float], None] = time.sleep,
    ):
        self.http_service = http_service
        self.child_limit = max(int(child_limit), 1)
        self.retry_delay_seconds = retry_delay_seconds
        self.sleep_fn = sleep_fn

    def fetch_text(self, url: str) -> str:
        """Fetch a sitemap document, retrying once after a fixed delay.

        Raises SitemapFetchError carrying the last failure reason.
        """
        reason = "unknown error"
        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            try:
                response = self.http_service.fetch(url)
                if response.ok:
                    return response.text
                reason = f"HTTP {response.status_code}"
            except HttpFetchError as e:
                reason = str(e.original)
            if attempt < self.MAX_ATTEMPTS:
                logger.warning("Sitemap fetch attempt %s failed for %s (%s); retrying", attempt, url, reason)
                self.sleep_fn(self.retry_delay_seconds)
        raise SitemapFetchError(url, reason)

    def _child_urls(self, child_url: str) -> List[str]:
        try:
            return scan_page_urls(self.fetch_text(child_url))
        except SitemapFetchError as e:
            logger.error("Error fetching child sitemap %s: %s", child_url, e.reason)
            return []

    def resolve(self, sitemap_url: str) -> SitemapResolutionResult:
        try:
            xml = self.fetch_text(sitemap_url)
        except SitemapFetchError as e:
            return SitemapResolutionResult.failed(e.reason)

        parsed = scan_sitemap(xml)
        if parsed.is_index:
            children = parsed.sitemaps[: self.child_limit]
            logger.info(
                "Found sitemap index %s with %s children; processing first %s",
                sitemap_url,
                len(parsed.sitemaps),
                len(children),
            )
            with ThreadPoolExecutor(max_workers=len(children), thread_name_prefix="sitemap") as pool:
                child_results = list(pool.map(self._child_urls, children))
            urls = [u for child in child_results for u in child]
        else:
            urls = list(parsed.urls)

        if not urls:
            return SitemapResolutionResult.failed(EMPTY_OR_INVALID)

        return SitemapResolutionResult(
            urls=sorted(urls),
            raw_byte_size=len(xml.encode("utf-8")),
        )
