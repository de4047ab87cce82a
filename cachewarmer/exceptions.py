"""Custom exceptions for the cache warmer services."""


class HttpFetchError(Exception):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"HTTP fetch failed for {url}: {original}")


class SitemapFetchError(Exception):
    """Raised when a sitemap document cannot be retrieved.

    `reason` is the short, user-facing cause ("HTTP 500", or the transport
    error text) that ends up in `SitemapResolutionResult.error`.
    """

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Sitemap fetch failed for {url}: {reason}")
