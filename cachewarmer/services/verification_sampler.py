import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from cachewarmer.domain.fetch_outcome import FetchOutcome
from cachewarmer.domain.verification_report import VerificationReport
from cachewarmer.exceptions import HttpFetchError
from cachewarmer.services.fetch_classifier import classify
from cachewarmer.services.http_service import HttpService
from cachewarmer.utils.formatting import fmt_mb, percent

logger = logging.getLogger(__name__)


class VerificationSampler:
    """Re-fetches a random sample of crawled URLs to measure the cache-hit rate.

    Each sampled URL is requested once, concurrently, with no jitter and no
    retry. Failed requests stay in the sample as ERR rows and count as misses.
    """

    def __init__(
        self,
        http_service: HttpService,
        *,
        sample_size: int = 40,
        cache_status_header: str = "cf-cache-status",
        user_agent: str = "CF-Warmer-Verify",
        rng: Optional[random.Random] = None,
    ):
        self.http_service = http_service
        self.sample_size = max(int(sample_size), 1)
        self.cache_status_header = cache_status_header
        self.headers = {"User-Agent": user_agent}
        self.rng = rng or random.Random()

    def sample(self, all_urls: Sequence[str]) -> List[str]:
        """Pick up to `sample_size` URLs without replacement."""
        urls = list(all_urls)
        if len(urls) <= self.sample_size:
            return urls
        return self.rng.sample(urls, self.sample_size)

    def _verify_one(self, url: str) -> FetchOutcome:
        try:
            return classify(
                self.http_service,
                url,
                cache_status_header=self.cache_status_header,
                headers=self.headers,
            )
        except HttpFetchError as e:
            logger.warning("Verify fetch failed for %s: %s", url, e.original)
        except Exception as e:
            logger.error("Verify fetch error for %s: %s", url, e, exc_info=True)
        return FetchOutcome.error(url)

    def verify(self, all_urls: Sequence[str], cumulative_bytes: int, elapsed_seconds: float) -> VerificationReport:
        chosen = self.sample(all_urls)
        outcomes: List[FetchOutcome] = []
        if chosen:
            with ThreadPoolExecutor(max_workers=len(chosen), thread_name_prefix="verify") as pool:
                outcomes = list(pool.map(self._verify_one, chosen))

        hits = sum(1 for o in outcomes if o.is_hit)
        # an empty population reports 0% rather than dividing by zero
        rate = percent(hits, len(chosen))
        logger.info("Verification: %s/%s sampled URLs were cache hits (%s%%)", hits, len(chosen), rate)

        return VerificationReport(
            hit_rate_percent=rate,
            total_bytes_formatted=fmt_mb(cumulative_bytes),
            total_elapsed_seconds=elapsed_seconds,
            sample_outcomes=sorted(outcomes, key=lambda o: o.url),
        )
