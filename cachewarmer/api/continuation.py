from urllib.parse import urlencode

from cachewarmer.domain.crawl_position import CrawlPosition
from cachewarmer.domain.mode import Mode
from cachewarmer.domain.settings import WarmerSettings


def build_next_url(base: str, mode: Mode, position: CrawlPosition, settings: WarmerSettings) -> str:
    """Serialize the next crawl position into a self-reference URL.

    The reference is rebuilt from scratch each time; the key is appended only
    when the request is not a clean visual one and a secret is configured.
    """
    params = {"mode": mode.value}
    params.update(position.to_params())
    if not settings.is_clean_request(mode) and settings.api_secret:
        params["key"] = settings.api_secret
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode(params)}"
