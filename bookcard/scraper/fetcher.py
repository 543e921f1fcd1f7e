"""Single-request HTTP fetcher with per-attempt timeout and retry/backoff.

Status codes are *not* interpreted here: a 404 or 503 is a successful fetch
as far as this module is concerned.  Only transport failures (connection
errors, timeouts) trigger another attempt.
"""

from __future__ import annotations

import asyncio

import httpx

from bookcard.errors import NetworkFailure, NetworkTimeout, RetriesExhausted

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
}

DEFAULT_BACKOFF_BASE = 1.0
DEFAULT_BACKOFF_CAP = 8.0

# Module-level alias so tests can patch the wait without touching asyncio.
_sleep = asyncio.sleep


def backoff_delay(retry: int, base: float, cap: float) -> float:
    """Seconds to wait before retry number *retry* (1-based)."""
    return min(base * (2 ** (retry - 1)), cap)


async def _get(client: httpx.AsyncClient, url: str, timeout: float) -> httpx.Response:
    try:
        return await asyncio.wait_for(client.get(url, timeout=timeout), timeout=timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise NetworkTimeout(f"Request to {url} timed out after {timeout:.1f}s") from exc
    except httpx.HTTPError as exc:
        raise NetworkFailure(f"Request to {url} failed: {exc}") from exc


async def fetch_once(
    url: str,
    timeout: float,
    *,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Issue one GET for *url* and return the fully-read response.

    The request is aborted once *timeout* seconds elapse.  When no *client*
    is given a short-lived one is opened and closed around the request, so an
    aborted call never leaves a connection behind.

    Raises:
        NetworkTimeout: The attempt exceeded *timeout*.
        NetworkFailure: Any other transport error.
    """
    if client is not None:
        return await _get(client, url, timeout)

    async with httpx.AsyncClient(headers=DEFAULT_HEADERS, follow_redirects=True) as own:
        return await _get(own, url, timeout)


async def fetch_with_retry(
    url: str,
    max_attempts: int,
    timeout: float,
    *,
    client: httpx.AsyncClient | None = None,
    backoff_base: float = DEFAULT_BACKOFF_BASE,
    backoff_cap: float = DEFAULT_BACKOFF_CAP,
) -> httpx.Response:
    """Call :func:`fetch_once` up to *max_attempts* times.

    The first attempt runs immediately; retry *n* waits
    ``min(backoff_base * 2 ** (n - 1), backoff_cap)`` seconds first.

    Raises:
        NetworkError: The error from the last attempt once all have failed.
        RetriesExhausted: If *max_attempts* is zero or negative.
    """
    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        if attempt > 1:
            delay = backoff_delay(attempt - 1, backoff_base, backoff_cap)
            print(f"[fetch] attempt {attempt}/{max_attempts} for {url} in {delay:.1f}s …")
            await _sleep(delay)
        try:
            return await fetch_once(url, timeout, client=client)
        except (NetworkTimeout, NetworkFailure) as exc:
            last_error = exc
            print(f"[fetch] attempt {attempt}/{max_attempts} failed: {exc}")

    if last_error is not None:
        raise last_error
    raise RetriesExhausted(f"No fetch attempts were made for {url}")
