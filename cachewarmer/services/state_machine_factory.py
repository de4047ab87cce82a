from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from cachewarmer.domain.settings import WarmerSettings
from cachewarmer.services.batch_executor import BatchExecutor
from cachewarmer.services.crawl_state_machine import CrawlStateMachine
from cachewarmer.services.fetch_classifier import FetchClassifier
from cachewarmer.services.http_service import HttpService
from cachewarmer.services.sitemap_resolver import SitemapResolver
from cachewarmer.services.verification_sampler import VerificationSampler


@dataclass(frozen=True)
class CrawlStateMachineFactory:
    """Wires a fresh state machine around one invocation's settings.

    Only the transport callable and the sleep function are shared between
    invocations; every settings-dependent collaborator is rebuilt per call.
    """
    http_client: Callable
    sleep_fn: Callable[[float], None] = time.sleep

    def create(self, settings: WarmerSettings) -> CrawlStateMachine:
        http_service = HttpService(
            user_agent=settings.user_agent,
            http_client=self.http_client,
            timeout=settings.http_timeout,
        )
        resolver = SitemapResolver(
            http_service,
            child_limit=settings.child_sitemap_limit,
            retry_delay_seconds=settings.sitemap_retry_delay,
            sleep_fn=self.sleep_fn,
        )
        classifier = FetchClassifier(
            http_service,
            jitter_max_ms=settings.jitter_max_ms,
            cache_status_header=settings.cache_status_header,
            user_agent=settings.warm_user_agent,
            sleep_fn=self.sleep_fn,
        )
        sampler = VerificationSampler(
            http_service,
            sample_size=settings.verify_size,
            cache_status_header=settings.cache_status_header,
            user_agent=settings.verify_user_agent,
        )
        return CrawlStateMachine(
            settings=settings,
            resolver=resolver,
            batch_executor=BatchExecutor(classifier),
            sampler=sampler,
        )
