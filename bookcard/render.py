"""Template rendering for book cards and article notes.

Placeholders look like ``{{namespace:field}}``.  Product records fill the
``book-creator`` namespace, article records the ``blog-creator`` namespace.
Tokens the record does not provide, including every token of the other
namespace, are left in the output untouched.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

from bookcard.scraper.models import ArticleRecord, CommerceRecord, ExtractedRecord, SourceKind

COMMERCE_NAMESPACE = "book-creator"
ARTICLE_NAMESPACE = "blog-creator"

# Field names per namespace, for help output.
TEMPLATE_FIELDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        COMMERCE_NAMESPACE: ("title", "author", "genre", "genre-link", "summary", "amazon-link"),
        ARTICLE_NAMESPACE: ("title", "summary", "blog-link"),
    }
)

_TOKEN_RE = re.compile(r"\{\{([\w-]+:[\w-]+)\}\}")
_LINK_TEXT_RE = re.compile(r"[#\[\]|]")
_FILENAME_RE = re.compile(r'[\\/:*?"<>|]')


def markdown_link(text: str, url: str) -> str:
    """Return ``[text](url)`` with ``#``, ``[``, ``]`` and ``|`` removed from *text*.

    With no *url* the cleaned text is returned on its own.
    """
    label = _LINK_TEXT_RE.sub("", text).strip()
    if not url:
        return label
    return f"[{label}]({url})"


def sanitize_filename(title: str) -> str:
    """Return ``<title>.md`` with characters illegal in file names removed."""
    name = _FILENAME_RE.sub("", title).strip()
    return f"{name or 'Untitled'}.md"


def _commerce_fields(record: CommerceRecord) -> dict[str, str]:
    return {
        "title": record.title,
        "author": record.author,
        "genre": record.category,
        "genre-link": markdown_link(record.category, record.category_url),
        "summary": record.description,
        "amazon-link": markdown_link(record.title, record.source_url),
    }


def _article_fields(record: ArticleRecord) -> dict[str, str]:
    return {
        "title": record.title,
        "summary": record.summary,
        "blog-link": markdown_link(record.title, record.source_url),
    }


def build_render_context(record: ExtractedRecord) -> Mapping[str, str]:
    """Map every ``namespace:field`` key of *record*'s kind to its value."""
    if record.kind is SourceKind.COMMERCE:
        namespace, fields = COMMERCE_NAMESPACE, _commerce_fields(record)
    elif record.kind is SourceKind.ARTICLE:
        namespace, fields = ARTICLE_NAMESPACE, _article_fields(record)
    else:
        raise ValueError(f"Unsupported record kind: {record.kind!r}")
    return MappingProxyType({f"{namespace}:{key}": value for key, value in fields.items()})


def render(template: str, record: ExtractedRecord) -> str:
    """Substitute every known placeholder in *template* with *record*'s values.

    Substitution is a single pass, so text inserted from the record is never
    itself scanned for placeholders.
    """
    context = build_render_context(record)
    return _TOKEN_RE.sub(lambda m: context.get(m.group(1), m.group(0)), template)
