"""Content extraction: turns product / article HTML into record fields.

Every field is located by an ordered list of small extractor functions; the
first one returning a non-empty value wins.  A field that no extractor finds
falls back to a fixed placeholder, so extraction never raises on a page that
lacks the expected markup.
"""

from __future__ import annotations

import html as html_lib
import re
from typing import Callable, Iterable, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from bookcard.scraper.models import (
    DEFAULT_CATEGORY,
    NO_SUMMARY,
    UNKNOWN_AUTHOR,
    UNKNOWN_TITLE,
    ArticleText,
    CommerceRecord,
)

Extractor = Callable[[str, BeautifulSoup], Optional[str]]

# Trailing breadcrumb entries too generic to describe a book.  Seeing one as
# the last breadcrumb triggers a second search for a more specific category.
GENERIC_CATEGORIES: frozenset[str] = frozenset(
    {"Kindle Store", "Kindleストア", "Kindle本", "Kindle eBooks", "Books", "本"}
)

# ---------------------------------------------------------------------------
# Text cleaning
# ---------------------------------------------------------------------------
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_NON_CONTENT_RE = re.compile(
    r"<(script|style)[^>]*>.*?</\1\s*>|<!--.*?-->", re.IGNORECASE | re.DOTALL
)
_TAG_RE = re.compile(r"<[^>]*>")
_SPACES_RE = re.compile(r"[^\S\n]{2,}")
_LINE_EDGE_RE = re.compile(r"[^\S\n]*\n[^\S\n]*")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def clean_html(fragment: str) -> str:
    """Strip markup from *fragment* while keeping its paragraph structure.

    ``<br>`` becomes a newline, ``</p>`` a blank line; every other tag becomes
    a single space.  Runs of spaces collapse to one, blank-line runs to one
    blank line, and entities are decoded.
    """
    text = _NON_CONTENT_RE.sub(" ", fragment)
    text = _BR_RE.sub("\n", text)
    text = _P_CLOSE_RE.sub("\n\n", text)
    text = _TAG_RE.sub(" ", text)
    text = html_lib.unescape(text)
    text = _SPACES_RE.sub(" ", text)
    text = _LINE_EDGE_RE.sub("\n", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def _first_match(extractors: Iterable[Extractor], html: str, soup: BeautifulSoup) -> str | None:
    """Return the first non-empty value produced by *extractors*."""
    for extractor in extractors:
        value = extractor(html, soup)
        if value:
            return value
    return None


def _search(pattern: re.Pattern[str]) -> Extractor:
    """Build an extractor returning group 1 of *pattern*, entity-decoded."""

    def _extract(html: str, soup: BeautifulSoup) -> str | None:
        match = pattern.search(html)
        if match:
            return html_lib.unescape(match.group(1)).strip() or None
        return None

    return _extract


def _block(find: Callable[[BeautifulSoup], Optional[Tag]]) -> Extractor:
    """Build an extractor returning the cleaned inner HTML of a located block."""

    def _extract(html: str, soup: BeautifulSoup) -> str | None:
        element = find(soup)
        if element is None:
            return None
        return clean_html(element.decode_contents()) or None

    return _extract


def _first_non_empty(elements: Iterable[Tag]) -> Tag | None:
    for element in elements:
        if clean_html(element.decode_contents()):
            return element
    return None


# ---------------------------------------------------------------------------
# Commerce field extractors
# ---------------------------------------------------------------------------
_PRODUCT_TITLE = (
    _search(re.compile(r'<span[^>]*id="productTitle"[^>]*>([^<]+)</span>', re.IGNORECASE)),
    _search(re.compile(r'<span[^>]*id="ebooksProductTitle"[^>]*>([^<]+)</span>', re.IGNORECASE)),
)

_AUTHOR = (
    _search(re.compile(r'<a class="[^"]*" href="[^"]*/e/[^"]*">([^<]+)</a>')),
    _search(
        re.compile(
            r'id="bylineInfo"[^>]*>(?:(?!</div>)[\s\S])*?<span[^>]*>\s*([^<\s][^<]*)</span>',
            re.IGNORECASE,
        )
    ),
)

_DESCRIPTION = (
    _block(lambda soup: soup.find(id="bookDescription_feature_div")),
    _block(lambda soup: soup.find(id="productDescription")),
    _block(lambda soup: soup.find(class_="a-expander-content")),
    _block(lambda soup: _first_non_empty(soup.find_all("noscript"))),
)


def _absolute(href: str, source_url: str) -> str:
    """Resolve a root-relative *href* against the scheme and host of *source_url*."""
    if not href.startswith("/") or href.startswith("//"):
        return href
    parts = urlsplit(source_url)
    if not parts.scheme or not parts.netloc:
        return href
    return f"{parts.scheme}://{parts.netloc}{href}"


def _anchors(container: Tag) -> list[tuple[str, str]]:
    """Return ``(text, href)`` for every non-empty anchor in *container*."""
    anchors = []
    for a in container.find_all("a"):
        text = a.get_text(" ", strip=True)
        if text:
            anchors.append((text, a.get("href", "") or ""))
    return anchors


def _breadcrumb_category(soup: BeautifulSoup) -> tuple[str, str] | None:
    """Return the most specific ``(name, href)`` in the breadcrumb bar."""
    container = soup.find(id="wayfinding-breadcrumbs_feature_div")
    if container is None:
        return None
    anchors = _anchors(container)
    return anchors[-1] if anchors else None


def _tertiary_category(soup: BeautifulSoup) -> tuple[str, str] | None:
    """Return the first non-generic tertiary-coloured category link."""
    for a in soup.select("a.a-link-normal.a-color-tertiary"):
        text = a.get_text(" ", strip=True)
        if text and text not in GENERIC_CATEGORIES:
            return text, a.get("href", "") or ""
    return None


def _category(soup: BeautifulSoup, source_url: str) -> tuple[str, str]:
    """Best-effort category and absolute category URL for a product page."""
    found = _breadcrumb_category(soup)
    if found is None or found[0] in GENERIC_CATEGORIES:
        found = _tertiary_category(soup) or found
    if found is None:
        return DEFAULT_CATEGORY, ""
    name, href = found
    return name, (_absolute(href.strip(), source_url) if href else "")


# ---------------------------------------------------------------------------
# Article extractors
# ---------------------------------------------------------------------------
_ARTICLE_TITLE = (
    _search(re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)),
    _search(re.compile(r"<h1[^>]*>([^<]+)</h1>", re.IGNORECASE)),
)


def _class_container(name: str) -> Callable[[BeautifulSoup], Optional[Tag]]:
    pattern = re.compile(rf"(^|[-_]){name}($|[-_])")
    return lambda soup: _first_non_empty(soup.find_all(class_=pattern))


_MAIN_TEXT = (
    _block(lambda soup: soup.find("article")),
    _block(lambda soup: soup.find("main")),
    _block(_class_container("content")),
    _block(_class_container("entry")),
    _block(_class_container("post")),
    _block(lambda soup: soup.body),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_commerce(html: str, source_url: str) -> CommerceRecord:
    """Extract a :class:`CommerceRecord` from product-page *html*.

    Missing fields fall back to ``"Unknown Title"``, ``"Unknown Author"``,
    ``"No summary available."`` and the ``"Fiction"`` category with no link.
    """
    soup = BeautifulSoup(html, "html.parser")
    category, category_url = _category(soup, source_url)
    return CommerceRecord(
        title=_first_match(_PRODUCT_TITLE, html, soup) or UNKNOWN_TITLE,
        author=_first_match(_AUTHOR, html, soup) or UNKNOWN_AUTHOR,
        category=category,
        category_url=category_url,
        description=_first_match(_DESCRIPTION, html, soup) or NO_SUMMARY,
        source_url=source_url,
    )


def extract_article(html: str) -> ArticleText:
    """Locate the title and main body text of an article page.

    The body is taken from the first non-empty of ``<article>``, ``<main>``,
    then ``content`` / ``entry`` / ``post`` class containers, then ``<body>``,
    and finally the whole input.
    """
    soup = BeautifulSoup(html, "html.parser")
    main_text = _first_match(_MAIN_TEXT, html, soup) or clean_html(html)
    return ArticleText(
        title=_first_match(_ARTICLE_TITLE, html, soup) or UNKNOWN_TITLE,
        main_text=main_text,
    )
