import logging
import os
from typing import Dict, List, Optional

import yaml

from cachewarmer import config as env
from cachewarmer.domain.settings import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_JITTER_MAX_MS,
    DEFAULT_VERIFY_SIZE,
    SITEMAP_RETRY_DELAY_SECONDS,
    WarmerSettings,
)

logger = logging.getLogger(__name__)


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(v).strip() for v in value if v and str(v).strip()]


def load_sitemaps_file(path: Optional[str]) -> Dict[str, List[str]]:
    """Load sitemap lists from a YAML file.

    The file may contain:
      - api_sitemaps: string or list of strings
      - visual_sitemaps: string or list of strings

    A missing or unreadable file yields empty lists.
    """
    lists: Dict[str, List[str]] = {"api_sitemaps": [], "visual_sitemaps": []}
    if not path:
        return lists
    if not os.path.isfile(path):
        logger.warning("Sitemaps file not found: %s", path)
        return lists
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except Exception:
        logger.exception("Could not load sitemaps file %s", path)
        return lists
    if not isinstance(data, dict):
        return lists
    for key in lists:
        lists[key] = _as_list(data.get(key))
    return lists


def load_settings() -> WarmerSettings:
    """Build an immutable settings value from the environment plus defaults.

    Called once per inbound request, so changes to the environment are picked
    up without sharing mutable state between invocations.
    """
    from_file = load_sitemaps_file(env.get_optional_str_env("CACHE_WARMER_SITEMAPS_FILE"))
    api_sitemaps = env.get_list_env("SITEMAPS_API") or from_file["api_sitemaps"]
    visual_sitemaps = env.get_list_env("SITEMAPS_VISUAL") or from_file["visual_sitemaps"]

    return WarmerSettings(
        api_sitemaps=tuple(api_sitemaps),
        visual_sitemaps=tuple(visual_sitemaps),
        batch_size=max(env.get_int_env("BATCH_SIZE", DEFAULT_BATCH_SIZE), 1),
        verify_size=max(env.get_int_env("VERIFY_SIZE", DEFAULT_VERIFY_SIZE), 1),
        jitter_max_ms=max(env.get_int_env("DELAY_MS", DEFAULT_JITTER_MAX_MS), 0),
        worker_route=env.get_optional_str_env("WORKER_ROUTE"),
        clean_url_visual_mode=env.get_bool_env("VISUAL_MODE", True),
        api_secret=env.get_optional_str_env("API_KEY"),
        user_agent=env.get_str_env("USER_AGENT", WarmerSettings.user_agent),
        warm_user_agent=env.get_str_env("WARM_USER_AGENT", WarmerSettings.warm_user_agent),
        verify_user_agent=env.get_str_env("VERIFY_USER_AGENT", WarmerSettings.verify_user_agent),
        http_timeout=env.get_int_env("HTTP_TIMEOUT", 10),
        cache_status_header=env.get_str_env("CACHE_STATUS_HEADER", WarmerSettings.cache_status_header),
        sitemap_retry_delay=max(env.get_float_env("SITEMAP_RETRY_DELAY", SITEMAP_RETRY_DELAY_SECONDS), 0.0),
    )
