from typing import List, NamedTuple, Optional


class SitemapResolutionResult(NamedTuple):
    """Flat, sorted page URLs of one sitemap (index children included).

    `error` is set exactly when `urls` is empty.
    """
    urls: List[str]
    raw_byte_size: int
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "SitemapResolutionResult":
        return cls(urls=[], raw_byte_size=0, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None
