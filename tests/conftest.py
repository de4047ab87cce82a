import threading
from types import SimpleNamespace

import pytest
import requests

from cachewarmer.services.http_service import HttpService


class FakeHttpClient:
    """Stands in for `requests.get`, answering from a URL -> response table.

    A route value is either an exception instance (raised), a single
    (status, body, headers) tuple, or a list of those consumed in order.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, url, headers=None, timeout=None, **kwargs):
        with self._lock:
            self.calls.append((url, dict(headers or {})))
            route = self.routes.get(url)
            if isinstance(route, list):
                route = route.pop(0) if len(route) > 1 else route[0]
        if route is None:
            raise requests.exceptions.ConnectionError(f"no route to {url}")
        if isinstance(route, Exception):
            raise route
        status, body, resp_headers = (tuple(route) + (None,))[:3]
        if isinstance(body, str):
            body = body.encode("utf-8")
        return SimpleNamespace(
            status_code=status,
            content=body,
            headers=requests.structures.CaseInsensitiveDict(resp_headers or {}),
        )

    def count(self, url):
        return sum(1 for u, _ in self.calls if u == url)


def urlset(*urls):
    entries = "".join(f"<url><loc>{u}</loc><lastmod>2024-01-01</lastmod></url>" for u in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'
    )


def sitemapindex(*urls):
    entries = "".join(f"<sitemap><loc>{u}</loc></sitemap>" for u in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'
    )


@pytest.fixture
def fake_http():
    return FakeHttpClient()


@pytest.fixture
def http_service(fake_http):
    return HttpService(user_agent="TestAgent", http_client=fake_http)
