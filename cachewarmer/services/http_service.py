import requests
from typing import Callable, Mapping, Optional

from cachewarmer.domain.http_response import HttpResponse
from cachewarmer.exceptions import HttpFetchError


class HttpService:
    """
    HTTP client wrapper used for sitemaps, warming and verification requests.

    Requires http_client callable for dependency injection (DIP compliance).
    This enables easy testing without patching and allows swapping HTTP libraries.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: int = 10):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client

    def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> HttpResponse:
        """Fetch URL and return status code, full body bytes and response headers.

        Only transport errors are wrapped; any status code is returned as-is.
        """
        request_headers = {"User-Agent": self.user_agent}
        if headers:
            request_headers.update(headers)
        try:
            resp = self.http_client(url, headers=request_headers, timeout=self.timeout)
            # reading the body here keeps streaming errors inside the wrapper
            content = resp.content
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e) from e

        return HttpResponse(resp.status_code, content or b"", getattr(resp, "headers", None))
