from dataclasses import dataclass, field
from typing import Optional, Tuple

from cachewarmer.domain.mode import Mode


DEFAULT_BATCH_SIZE = 40
DEFAULT_VERIFY_SIZE = 40
DEFAULT_JITTER_MAX_MS = 50
CHILD_SITEMAP_LIMIT = 10
SITEMAP_RETRY_DELAY_SECONDS = 1.0


@dataclass(frozen=True)
class WarmerSettings:
    """Immutable per-invocation configuration.

    Built from the environment by `cachewarmer.configs.load_settings()` and
    handed to each component explicitly; nothing mutates it afterwards.
    """
    api_sitemaps: Tuple[str, ...] = field(default_factory=tuple)
    visual_sitemaps: Tuple[str, ...] = field(default_factory=tuple)
    batch_size: int = DEFAULT_BATCH_SIZE
    verify_size: int = DEFAULT_VERIFY_SIZE
    jitter_max_ms: int = DEFAULT_JITTER_MAX_MS
    worker_route: Optional[str] = None
    clean_url_visual_mode: bool = True
    api_secret: Optional[str] = None
    user_agent: str = "Mozilla/5.0 (compatible; Cloudflare-Warmer/1.0)"
    warm_user_agent: str = "CF-Worker-Warmer"
    verify_user_agent: str = "CF-Warmer-Verify"
    http_timeout: int = 10
    cache_status_header: str = "cf-cache-status"
    child_sitemap_limit: int = CHILD_SITEMAP_LIMIT
    sitemap_retry_delay: float = SITEMAP_RETRY_DELAY_SECONDS
    refresh_seconds: int = 1

    def __post_init__(self):
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.verify_size <= 0:
            raise ValueError("verify_size must be positive")
        if self.jitter_max_ms < 0:
            raise ValueError("jitter_max_ms must not be negative")

    def sitemaps_for(self, mode: Mode) -> Tuple[str, ...]:
        return self.api_sitemaps if mode.is_automation else self.visual_sitemaps

    def is_clean_request(self, mode: Mode) -> bool:
        """Visual requests skip (and never expose) the key in clean URL mode."""
        return mode.is_visual and self.clean_url_visual_mode

    def requires_auth(self, mode: Mode) -> bool:
        return not self.is_clean_request(mode)
