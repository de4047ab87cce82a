"""Minimal pull-style scanner for sitemap documents.

Only two element shapes matter: `<sitemap><loc>X</loc></sitemap>` (index
entries) and `<url><loc>X</loc></url>` (page entries). The scanner walks the
tag stream instead of building a tree, so truncated or slightly malformed
documents still yield the entries that precede the damage. Deeply nested or
unusually namespaced markup may be under-read; that is accepted.
"""
import re
from typing import Iterator, List, NamedTuple, Optional, Tuple
from xml.sax.saxutils import unescape

_TAG_RE = re.compile(r"<(/?)(?:([A-Za-z_][\w.\-]*):)?([A-Za-z_][\w.\-]*)(?:\s[^<>]*?)?(/?)>")
_CDATA_RE = re.compile(r"^<!\[CDATA\[(.*)\]\]>$", re.DOTALL)

_CONTAINERS = ("sitemap", "url")


class ParsedSitemap(NamedTuple):
    sitemaps: List[str]
    urls: List[str]

    @property
    def is_index(self) -> bool:
        return bool(self.sitemaps)


def _iter_tags(xml: str) -> Iterator[Tuple[bool, Optional[str], str, bool, int, int]]:
    for m in _TAG_RE.finditer(xml):
        closing, prefix, name, self_closing = m.group(1), m.group(2), m.group(3), m.group(4)
        yield bool(closing), prefix, name.lower(), bool(self_closing), m.start(), m.end()


def _clean_loc(raw: str) -> str:
    text = raw.strip()
    cdata = _CDATA_RE.match(text)
    if cdata:
        return cdata.group(1).strip()
    return unescape(text).strip()


def scan_sitemap(xml: str) -> ParsedSitemap:
    """Extract index (`<sitemap>`) and page (`<url>`) locations in document order.

    Only the first `<loc>` of each container counts, and it must carry the
    same namespace prefix as its container (so `<image:loc>` inside a
    `<url>` is skipped).
    """
    found = {"sitemap": [], "url": []}
    container: Optional[str] = None
    container_prefix: Optional[str] = None
    loc_start: Optional[int] = None
    taken = False

    for closing, prefix, name, self_closing, start, end in _iter_tags(xml or ""):
        if name in _CONTAINERS:
            if self_closing:
                continue
            if not closing:
                container, container_prefix, taken, loc_start = name, prefix, False, None
            elif container == name:
                container, container_prefix, loc_start = None, None, None
            continue
        if name != "loc" or container is None or taken or prefix != container_prefix:
            continue
        if not closing and not self_closing:
            loc_start = end
        elif closing and loc_start is not None:
            text = _clean_loc(xml[loc_start:start])
            loc_start = None
            taken = True
            if text:
                found[container].append(text)

    return ParsedSitemap(sitemaps=found["sitemap"], urls=found["url"])


def scan_page_urls(xml: str) -> List[str]:
    """Page locations only; index markers in the document are ignored."""
    return scan_sitemap(xml).urls
