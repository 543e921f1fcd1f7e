"""Data models for the extraction pipeline.

Every object here lives for a single invocation.  Records are frozen so a
render context built from one can never drift from the record it came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"
NO_SUMMARY = "No summary available."
DEFAULT_CATEGORY = "Fiction"


class SourceKind(str, Enum):
    COMMERCE = "commerce"
    ARTICLE = "article"


@dataclass(frozen=True)
class ExtractionRequest:
    """A classified URL, ready to be fetched."""

    source_url: str
    source_kind: SourceKind


@dataclass(frozen=True)
class RawPage:
    """HTML returned by the proxy chain for one URL."""

    html: str
    origin_url: str


@dataclass(frozen=True)
class ArticleText:
    """Title and main body text located inside an article page."""

    title: str
    main_text: str


@dataclass(frozen=True)
class CommerceRecord:
    """Metadata extracted from a product page."""

    kind: ClassVar[SourceKind] = SourceKind.COMMERCE

    title: str
    author: str
    category: str
    category_url: str
    description: str
    source_url: str


@dataclass(frozen=True)
class ArticleRecord:
    """Metadata extracted from an article / blog page."""

    kind: ClassVar[SourceKind] = SourceKind.ARTICLE

    title: str
    summary: str
    source_url: str


ExtractedRecord = Union[CommerceRecord, ArticleRecord]
