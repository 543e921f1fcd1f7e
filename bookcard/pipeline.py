"""End-to-end book card creation.

Stages run strictly in sequence; each awaits the previous one's output:

    validate/classify → preconditions → proxy fetch → extract
        → (article only) summarize → render → persist

The optional ``cancel`` event is checked between stages.  Once it is set no
further network call is issued; a request already in flight finishes and its
result is discarded.
"""

from __future__ import annotations

import asyncio

import httpx

from bookcard.config import Settings
from bookcard.errors import PipelineCancelled
from bookcard.notes import Vault, check_preconditions, create_note
from bookcard.scraper.classifier import validate_url
from bookcard.scraper.extractor import extract_article, extract_commerce
from bookcard.scraper.models import (
    NO_SUMMARY,
    ArticleRecord,
    ExtractedRecord,
    ExtractionRequest,
    RawPage,
    SourceKind,
)
from bookcard.scraper.proxies import resolve_html
from bookcard.summarizer import summarize


def _check_cancelled(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise PipelineCancelled("Cancelled.")


async def fetch_page(
    request: ExtractionRequest,
    config: Settings,
    *,
    client: httpx.AsyncClient | None = None,
) -> RawPage:
    """Fetch *request*'s URL through the proxy chain."""
    html = await resolve_html(request.source_url, config, client=client)
    return RawPage(html=html, origin_url=request.source_url)


async def build_record(
    request: ExtractionRequest,
    config: Settings,
    *,
    cancel: asyncio.Event | None = None,
    client: httpx.AsyncClient | None = None,
) -> ExtractedRecord:
    """Fetch, extract and (for articles) summarize one classified URL.

    Raises:
        FetchFailure: If no intermediary yielded the page.
        PipelineCancelled: If *cancel* was set between stages.
    """
    _check_cancelled(cancel)
    page = await fetch_page(request, config, client=client)
    _check_cancelled(cancel)

    if request.source_kind is SourceKind.COMMERCE:
        return extract_commerce(page.html, page.origin_url)
    if request.source_kind is SourceKind.ARTICLE:
        article = extract_article(page.html)
        print(f"[pipeline] article {article.title!r}: {len(article.main_text)} chars of text.")
        if not article.main_text:
            return ArticleRecord(title=article.title, summary=NO_SUMMARY, source_url=page.origin_url)
        summary = await summarize(
            article.main_text,
            config.anthropic_api_key,
            config.summary_model,
            config=config,
            client=client,
        )
        return ArticleRecord(title=article.title, summary=summary, source_url=page.origin_url)
    raise ValueError(f"Unsupported source kind: {request.source_kind!r}")


async def create_card(
    url: str,
    config: Settings,
    vault: Vault,
    *,
    cancel: asyncio.Event | None = None,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Create a note for *url* from the configured template.

    Args:
        url: Product or article URL.
        config: Read-only settings for this invocation.
        vault: Host store the template is read from and the note written to.
        cancel: Set to stop the pipeline before its next stage.
        client: Optional shared ``httpx.AsyncClient`` for every request.

    Returns:
        The vault-relative path of the created note.

    Raises:
        InvalidInputError: *url* is not an absolute http(s) URL.
        PersistenceError: Template or output folder missing, or write failed.
        FetchFailure: Every intermediary failed.
        PipelineCancelled: *cancel* was set.
    """
    request = validate_url(url)
    template = check_preconditions(config, vault)

    vault.notify(f"Fetching {request.source_kind.value} information…")
    record = await build_record(request, config, cancel=cancel, client=client)
    _check_cancelled(cancel)

    return create_note(record, template, config, vault)
