import logging
from typing import Callable

from cachewarmer.domain.crawl_position import CrawlPosition
from cachewarmer.domain.crawl_step import CrawlState, CrawlStep
from cachewarmer.domain.fetch_outcome import BatchSummary
from cachewarmer.domain.mode import Mode
from cachewarmer.domain.settings import WarmerSettings
from cachewarmer.services.batch_executor import BatchExecutor
from cachewarmer.services.sitemap_resolver import SitemapResolver
from cachewarmer.services.verification_sampler import VerificationSampler
from cachewarmer.utils.datetime_utils import elapsed_seconds, now_ms
from cachewarmer.utils.formatting import fmt_size, percent

logger = logging.getLogger(__name__)


class CrawlStateMachine:
    """Decides and performs the next step of a chained crawl.

    The machine keeps no state between calls: the inbound CrawlPosition is
    the whole memory of the crawl, and every step returns the position the
    caller must send next. Given the same position and the same sitemap
    contents it always returns the same next position.

    States, checked in order:
      - COMPLETED: sitemap_index is past the active list. Automation callers
        get a terminal "done"; interactive callers move on to VERIFYING.
      - SITEMAP_ERROR: the current sitemap could not be resolved; skip it.
      - SITEMAP_EXHAUSTED: the offset is past the end of the URL list; advance.
      - BATCH_IN_PROGRESS: warm [offset, offset + batch_size) and move the
        offset forward.
    """

    def __init__(
        self,
        *,
        settings: WarmerSettings,
        resolver: SitemapResolver,
        batch_executor: BatchExecutor,
        sampler: VerificationSampler,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings
        self.resolver = resolver
        self.batch_executor = batch_executor
        self.sampler = sampler
        self.clock = clock

    def step(self, mode: Mode, position: CrawlPosition) -> CrawlStep:
        sitemaps = self.settings.sitemaps_for(mode)
        total = len(sitemaps)
        tag = mode.value.upper()

        if position.sitemap_index >= total:
            if mode.is_automation:
                logger.info("[%s] Chain complete.", tag)
                return CrawlStep(state=CrawlState.COMPLETED, position=position, total_sitemaps=total)
            return self._verify(sitemaps, position)

        sitemap_url = sitemaps[position.sitemap_index]
        result = self.resolver.resolve(sitemap_url)
        if result.error:
            logger.error("[%s] Sitemap Error: %s - URL: %s", tag, result.error, sitemap_url)
            return CrawlStep(
                state=CrawlState.SITEMAP_ERROR,
                position=position,
                total_sitemaps=total,
                next_position=position.next_sitemap(),
                sitemap_url=sitemap_url,
                error=result.error,
            )

        running_bytes = position.cumulative_bytes
        if position.offset == 0:
            running_bytes += result.raw_byte_size

        batch_size = self.settings.batch_size
        batch = result.urls[position.offset:position.offset + batch_size]
        if not batch:
            logger.info("[%s] Sitemap %s Finished.", tag, position.sitemap_index + 1)
            return CrawlStep(
                state=CrawlState.SITEMAP_EXHAUSTED,
                position=position,
                total_sitemaps=total,
                next_position=position.next_sitemap(running_bytes),
                sitemap_url=sitemap_url,
                total_urls=len(result.urls),
                progress=100,
            )

        outcomes = self.batch_executor.run_batch(batch)
        summary = BatchSummary.from_outcomes(outcomes)
        running_bytes += summary.total_bytes

        logger.info(
            "[%s] SM:%s Batch %s-%s | HIT:%s MISS:%s DYN:%s ERR:%s | Size:%s",
            tag,
            position.sitemap_index + 1,
            position.offset,
            position.offset + len(batch),
            summary.hit_count,
            summary.miss_count,
            summary.dynamic_count,
            summary.error_count,
            fmt_size(summary.total_bytes),
        )

        next_position = position.next_batch(batch_size, running_bytes)
        # 100% is reserved for the exhausted step so the page never reads "done" early
        progress = min(percent(next_position.offset, len(result.urls)), 99)
        return CrawlStep(
            state=CrawlState.BATCH_IN_PROGRESS,
            position=position,
            total_sitemaps=total,
            next_position=next_position,
            sitemap_url=sitemap_url,
            outcomes=outcomes,
            summary=summary,
            total_urls=len(result.urls),
            progress=progress,
        )

    def _verify(self, sitemaps, position: CrawlPosition) -> CrawlStep:
        elapsed = elapsed_seconds(position.start_time, self.clock())
        urls = []
        if sitemaps:
            resolved = self.resolver.resolve(sitemaps[0])
            if resolved.error:
                logger.warning("Verification sitemap %s could not be resolved: %s", sitemaps[0], resolved.error)
            urls = resolved.urls
        report = self.sampler.verify(urls, position.cumulative_bytes, elapsed)
        return CrawlStep(
            state=CrawlState.VERIFYING,
            position=position,
            total_sitemaps=len(sitemaps),
            sitemap_url=sitemaps[0] if sitemaps else None,
            report=report,
        )
