"""Scraper package: URL routing, proxy fetch and content extraction."""

from bookcard.scraper.classifier import classify_url, find_url_near, validate_url
from bookcard.scraper.extractor import clean_html, extract_article, extract_commerce
from bookcard.scraper.fetcher import fetch_once, fetch_with_retry
from bookcard.scraper.models import (
    ArticleRecord,
    ArticleText,
    CommerceRecord,
    ExtractedRecord,
    ExtractionRequest,
    RawPage,
    SourceKind,
)
from bookcard.scraper.proxies import DEFAULT_PROXIES, ProxyEntry, first_success, resolve_html

__all__ = [
    "classify_url",
    "find_url_near",
    "validate_url",
    "clean_html",
    "extract_article",
    "extract_commerce",
    "fetch_once",
    "fetch_with_retry",
    "resolve_html",
    "first_success",
    "ProxyEntry",
    "DEFAULT_PROXIES",
    "ArticleRecord",
    "ArticleText",
    "CommerceRecord",
    "ExtractedRecord",
    "ExtractionRequest",
    "RawPage",
    "SourceKind",
]
