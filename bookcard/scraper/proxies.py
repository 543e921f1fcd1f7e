"""Fetch a page through an ordered chain of CORS intermediaries.

Intermediary order (tried sequentially, first non-empty body wins):
  1. allorigins: ``/get?url=`` wrapper, answers with ``{"contents": "<html>"}``.
  2. corsproxy.io: query-string wrapper, answers with the raw page.
  3. cors-anywhere: URL-path wrapper, answers with the raw page.

Each intermediary gets its own retry/timeout budget from the fetcher, so a
dead one costs at most ``attempts × timeout`` plus backoff before the next is
tried.  Intermediaries are never queried concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable
from urllib.parse import quote

import httpx

from bookcard.config import Settings
from bookcard.errors import FetchFailure
from bookcard.scraper.fetcher import DEFAULT_HEADERS, fetch_with_retry

# Field holding the wrapped page in JSON-style proxy responses.
_WRAPPER_FIELD = "contents"


@dataclass(frozen=True)
class ProxyEntry:
    """One intermediary: a name for diagnostics and a URL template."""

    name: str
    template: str

    def wrap(self, target_url: str) -> str:
        """Return the request URL that asks this intermediary for *target_url*.

        ``{url}`` in the template is replaced with the percent-encoded target,
        ``{raw_url}`` with the target as-is.
        """
        return self.template.format(url=quote(target_url, safe=""), raw_url=target_url)


DEFAULT_PROXIES: tuple[ProxyEntry, ...] = (
    ProxyEntry("allorigins", "https://api.allorigins.win/get?url={url}"),
    ProxyEntry("corsproxy", "https://corsproxy.io/?{url}"),
    ProxyEntry("cors-anywhere", "https://cors-anywhere.herokuapp.com/{raw_url}"),
)


# ---------------------------------------------------------------------------
# Sequential fallback combinator
# ---------------------------------------------------------------------------

async def first_success(
    operations: Iterable[Callable[[], Awaitable[str]]],
    *,
    label: str = "fallback",
) -> str:
    """Await each operation in order and return the first non-empty result.

    An operation that raises is recorded and skipped; one that returns an
    empty string is skipped without replacing the recorded error.

    Raises:
        FetchFailure: When no operation produced a value, carrying the last
            recorded error message.
    """
    last_error = "no sources were tried"
    for operation in operations:
        try:
            result = await operation()
        except Exception as exc:  # noqa: BLE001
            last_error = str(exc) or exc.__class__.__name__
            print(f"[{label}] {last_error!s:.160}, trying next source.")
            continue
        if result:
            return result
        print(f"[{label}] empty response, trying next source.")
    raise FetchFailure(f"Failed to fetch page: {last_error}")


# ---------------------------------------------------------------------------
# Response normalisation
# ---------------------------------------------------------------------------

def _unwrap(response: httpx.Response) -> str:
    """Return the page body held in *response*.

    JSON responses are unwrapped from their ``contents`` field; a JSON reply
    without a non-empty ``contents`` string (allorigins answers a failed fetch
    with ``{"contents": null, ...}``) yields ``""`` so the next intermediary is
    tried.  Anything else is treated as raw text / HTML.
    """
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        payload = response.json()
        wrapped = payload.get(_WRAPPER_FIELD) if isinstance(payload, dict) else None
        return wrapped if isinstance(wrapped, str) else ""
    return response.text


def _via(
    entry: ProxyEntry,
    target_url: str,
    config: Settings,
    client: httpx.AsyncClient,
) -> Callable[[], Awaitable[str]]:
    async def _attempt() -> str:
        response = await fetch_with_retry(
            entry.wrap(target_url),
            config.fetch_max_attempts,
            config.fetch_timeout,
            client=client,
            backoff_base=config.fetch_backoff_base,
            backoff_cap=config.fetch_backoff_cap,
        )
        if not response.is_success:
            raise FetchFailure(f"{entry.name}: failed to fetch data: {response.status_code}")
        body = _unwrap(response)
        if body:
            print(f"[proxy] ✓ {entry.name} → {len(body)} chars.")
        return body

    return _attempt


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def resolve_html(
    target_url: str,
    config: Settings,
    *,
    proxies: Iterable[ProxyEntry] = DEFAULT_PROXIES,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Return the HTML of *target_url* fetched through the first working proxy.

    Raises:
        FetchFailure: If every intermediary failed or returned an empty body.
    """
    if client is not None:
        return await first_success(
            (_via(entry, target_url, config, client) for entry in proxies),
            label="proxy",
        )

    async with httpx.AsyncClient(headers=DEFAULT_HEADERS, follow_redirects=True) as own:
        return await first_success(
            (_via(entry, target_url, config, own) for entry in proxies),
            label="proxy",
        )
