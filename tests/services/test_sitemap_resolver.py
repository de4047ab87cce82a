import logging
from unittest.mock import Mock

import requests

from cachewarmer.services.sitemap_resolver import EMPTY_OR_INVALID, SitemapResolver
from conftest import sitemapindex, urlset


def _resolver(http_service, **kwargs):
    kwargs.setdefault("sleep_fn", Mock())
    return SitemapResolver(http_service, **kwargs)


def test_leaf_sitemap_is_sorted(fake_http, http_service):
    doc = urlset("https://e.com/c", "https://e.com/a", "https://e.com/b")
    fake_http.routes["https://e.com/sitemap.xml"] = (200, doc)

    result = _resolver(http_service).resolve("https://e.com/sitemap.xml")

    assert result.error is None
    assert result.urls == ["https://e.com/a", "https://e.com/b", "https://e.com/c"]
    assert result.raw_byte_size == len(doc.encode("utf-8"))


def test_resolution_is_deterministic(fake_http, http_service):
    fake_http.routes["https://e.com/s.xml"] = (200, urlset("https://e.com/z", "https://e.com/m", "https://e.com/a"))
    resolver = _resolver(http_service)
    assert resolver.resolve("https://e.com/s.xml") == resolver.resolve("https://e.com/s.xml")


def test_index_with_two_children_flattens_and_sorts(fake_http, http_service):
    index = sitemapindex("https://e.com/posts.xml", "https://e.com/pages.xml")
    posts = [f"https://e.com/post-{i}" for i in (5, 3, 1, 4, 2)]
    pages = ["https://e.com/about", "https://e.com/contact", "https://e.com/a-page"]
    fake_http.routes.update({
        "https://e.com/index.xml": (200, index),
        "https://e.com/posts.xml": (200, urlset(*posts)),
        "https://e.com/pages.xml": (200, urlset(*pages)),
    })

    result = _resolver(http_service).resolve("https://e.com/index.xml")

    assert len(result.urls) == 8
    assert result.urls == sorted(posts + pages)
    # only the top-level document is counted
    assert result.raw_byte_size == len(index.encode("utf-8"))


def test_index_children_are_capped(fake_http, http_service):
    children = [f"https://e.com/child-{i:02d}.xml" for i in range(15)]
    fake_http.routes["https://e.com/index.xml"] = (200, sitemapindex(*children))
    for i, child in enumerate(children):
        fake_http.routes[child] = (200, urlset(f"https://e.com/page-{i:02d}"))

    result = _resolver(http_service, child_limit=10).resolve("https://e.com/index.xml")

    assert len(result.urls) == 10
    assert fake_http.count(children[10]) == 0


def test_failed_child_contributes_nothing(fake_http, http_service, caplog):
    fake_http.routes.update({
        "https://e.com/index.xml": (200, sitemapindex("https://e.com/ok.xml", "https://e.com/broken.xml")),
        "https://e.com/ok.xml": (200, urlset("https://e.com/one", "https://e.com/two")),
        "https://e.com/broken.xml": (404, "gone"),
    })
    caplog.set_level(logging.ERROR)

    result = _resolver(http_service).resolve("https://e.com/index.xml")

    assert result.error is None
    assert result.urls == ["https://e.com/one", "https://e.com/two"]
    assert "https://e.com/broken.xml" in caplog.text


def test_nested_index_in_child_is_not_followed(fake_http, http_service):
    fake_http.routes.update({
        "https://e.com/index.xml": (200, sitemapindex("https://e.com/inner-index.xml")),
        "https://e.com/inner-index.xml": (200, sitemapindex("https://e.com/deep.xml")),
        "https://e.com/deep.xml": (200, urlset("https://e.com/deep-page")),
    })

    result = _resolver(http_service).resolve("https://e.com/index.xml")

    assert result.error == EMPTY_OR_INVALID
    assert fake_http.count("https://e.com/deep.xml") == 0


def test_http_500_twice_reports_status(fake_http, http_service):
    fake_http.routes["https://e.com/s.xml"] = (500, "oops")
    sleep = Mock()

    result = _resolver(http_service, sleep_fn=sleep).resolve("https://e.com/s.xml")

    assert result.error == "HTTP 500"
    assert result.urls == []
    assert result.raw_byte_size == 0
    assert fake_http.count("https://e.com/s.xml") == 2
    sleep.assert_called_once_with(1.0)


def test_retry_recovers_after_one_failure(fake_http, http_service):
    fake_http.routes["https://e.com/s.xml"] = [
        requests.exceptions.ConnectionError("reset"),
        (200, urlset("https://e.com/a")),
    ]

    result = _resolver(http_service).resolve("https://e.com/s.xml")

    assert result.urls == ["https://e.com/a"]
    assert fake_http.count("https://e.com/s.xml") == 2


def test_transport_error_message_is_reported(fake_http, http_service):
    fake_http.routes["https://e.com/s.xml"] = requests.exceptions.ConnectionError("refused")

    result = _resolver(http_service).resolve("https://e.com/s.xml")

    assert result.error == "refused"


def test_empty_document_is_an_error(fake_http, http_service):
    fake_http.routes["https://e.com/s.xml"] = (200, "<urlset></urlset>")

    result = _resolver(http_service).resolve("https://e.com/s.xml")

    assert result.error == EMPTY_OR_INVALID
    assert result.urls == []
