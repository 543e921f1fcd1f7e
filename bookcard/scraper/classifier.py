"""Route an input URL to the commerce or article extractor."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from bookcard.errors import InvalidInputError
from bookcard.scraper.models import ExtractionRequest, SourceKind

# ---------------------------------------------------------------------------
# Known commerce hosts (matched as the host itself or any subdomain of it)
# ---------------------------------------------------------------------------
COMMERCE_DOMAINS: frozenset[str] = frozenset(
    {
        "amazon.com",
        "amazon.co.jp",
        "amazon.co.uk",
        "amazon.de",
        "amazon.fr",
        "amazon.it",
        "amazon.es",
        "amazon.ca",
        "amazon.in",
        "amazon.nl",
        "amazon.com.au",
        "amazon.com.br",
        "amazon.com.mx",
        # Short-link forms
        "amzn.to",
        "amzn.asia",
        "a.co",
    }
)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_VALID_URL_RE = re.compile(r"^https?://[^\s/?#]+\.[^\s/?#]+", re.IGNORECASE)
_URL_IN_TEXT_RE = re.compile(r"https?://[^\s<>()\[\]{}\"'`]+", re.IGNORECASE)
_TRAILING_PUNCT = ".,;:!?"

# How far (in characters) a cursor may sit outside a URL and still pick it.
CURSOR_SLACK = 3


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def classify_url(url: str) -> SourceKind:
    """Return :attr:`SourceKind.COMMERCE` for known shop hosts, else ARTICLE.

    Never raises: anything that is not a parseable http(s) URL is an article.
    """
    candidate = url.strip()
    if not _SCHEME_RE.match(candidate):
        return SourceKind.ARTICLE
    try:
        host = (urlsplit(candidate).hostname or "").lower()
    except ValueError:
        return SourceKind.ARTICLE
    if any(_host_matches(host, domain) for domain in COMMERCE_DOMAINS):
        return SourceKind.COMMERCE
    return SourceKind.ARTICLE


def validate_url(url: str) -> ExtractionRequest:
    """Check *url* looks like an absolute web URL and classify it.

    Raises:
        InvalidInputError: If *url* is empty or lacks a scheme / dotted host.
    """
    candidate = url.strip()
    if not candidate:
        raise InvalidInputError("Please enter a URL.")
    if not _VALID_URL_RE.match(candidate):
        raise InvalidInputError(f"Invalid URL: {candidate!r}")
    return ExtractionRequest(source_url=candidate, source_kind=classify_url(candidate))


def find_url_near(text: str, position: int, slack: int = CURSOR_SLACK) -> str | None:
    """Return the first URL in *text* whose span contains *position*.

    A URL also counts when *position* is at most *slack* characters before its
    start or after its end.  Trailing sentence punctuation is not part of the
    URL.  Returns ``None`` when nothing is close enough.
    """
    for match in _URL_IN_TEXT_RE.finditer(text):
        url = match.group(0).rstrip(_TRAILING_PUNCT)
        start = match.start()
        end = start + len(url)
        if start - slack <= position <= end + slack:
            return url
    return None
