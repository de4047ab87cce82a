import logging
import random
import time
from typing import Callable, Optional

from cachewarmer.domain.fetch_outcome import CacheStatus, FetchOutcome
from cachewarmer.exceptions import HttpFetchError
from cachewarmer.services.http_service import HttpService

logger = logging.getLogger(__name__)


def classify(http_service: HttpService, url: str, *, cache_status_header: str, headers=None,
             clock: Callable[[], float] = time.monotonic) -> FetchOutcome:
    """Fetch `url` once and classify it by the upstream cache-status header.

    Raises HttpFetchError on transport failure; callers decide how to record it.
    """
    started = clock()
    response = http_service.fetch(url, headers=headers)
    elapsed_ms = int(round((clock() - started) * 1000))
    raw_status = response.header(cache_status_header)
    return FetchOutcome(
        url=url,
        http_status=response.status_code,
        cache_status=CacheStatus.from_header(raw_status),
        response_bytes=len(response.content),
        elapsed_ms=elapsed_ms,
        upstream_status=(raw_status or "").strip() or None,
    )


class FetchClassifier:
    """Issues one warming request per URL and never raises.

    A random jitter of 0..`jitter_max_ms` is slept before each request so a
    batch does not hit the origin in a single burst.
    """

    def __init__(
        self,
        http_service: HttpService,
        *,
        jitter_max_ms: int = 50,
        cache_status_header: str = "cf-cache-status",
        user_agent: str = "CF-Worker-Warmer",
        random_fn: Optional[Callable[[], float]] = None,
        sleep_fn: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.http_service = http_service
        self.jitter_max_ms = jitter_max_ms
        self.cache_status_header = cache_status_header
        self.headers = {"User-Agent": user_agent, "X-Purpose": "Warming"}
        self.random_fn = random_fn or random.random
        self.sleep_fn = sleep_fn
        self.clock = clock

    def fetch_one(self, url: str) -> FetchOutcome:
        if self.jitter_max_ms > 0:
            self.sleep_fn(self.random_fn() * self.jitter_max_ms / 1000.0)
        try:
            return classify(
                self.http_service,
                url,
                cache_status_header=self.cache_status_header,
                headers=self.headers,
                clock=self.clock,
            )
        except HttpFetchError as e:
            logger.warning("Warm fetch failed for %s: %s", url, e.original)
        except Exception as e:
            logger.error("Warm fetch error for %s: %s", url, e, exc_info=True)
        return FetchOutcome.error(url)
