"""Article summarization through the Anthropic Messages API.

``summarize`` never raises.  A missing key, an API error or a transport
failure each produce a readable string that goes into the note in place of the
summary, so a note is still created with whatever else was extracted.
"""

from __future__ import annotations

from typing import Any

import httpx

from bookcard.config import Settings
from bookcard.scraper.models import NO_SUMMARY

MISSING_KEY_MESSAGE = (
    "Set an Anthropic API key (ANTHROPIC_API_KEY) to generate article summaries."
)

DEFAULT_MAX_CHARS = 10_000
DEFAULT_MAX_TOKENS = 1000

_PROMPT = (
    "Please summarize the following technical article concisely. "
    "Focus on the main points, key techniques and conclusions. "
    "Answer in the same language as the article.\n\n"
    "Article:\n{text}"
)


def truncate(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Cut *text* to *max_chars* characters, marking the cut with ``...``."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def build_payload(text: str, model: str, max_tokens: int, max_chars: int) -> dict[str, Any]:
    """Return the JSON body for a single-turn summarization request."""
    return {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [
            {"role": "user", "content": _PROMPT.format(text=truncate(text, max_chars))}
        ],
    }


def _error_message(response: httpx.Response) -> str:
    """Describe a non-2xx API response for the note body."""
    try:
        detail = response.json().get("error", {}).get("message", "")
    except (ValueError, AttributeError):
        detail = ""
    if detail:
        return f"Summary unavailable: {detail} (HTTP {response.status_code})"
    return f"Summary unavailable: HTTP {response.status_code}"


def _first_text(data: Any) -> str:
    try:
        text = data["content"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return NO_SUMMARY
    return text.strip() if isinstance(text, str) and text.strip() else NO_SUMMARY


async def summarize(
    text: str,
    api_key: str,
    model: str,
    *,
    config: Settings,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Return a concise summary of *text*, or a degraded explanatory string.

    Args:
        text: Cleaned article text.  Truncated to ``summary_max_chars``.
        api_key: Anthropic API key.  When empty no request is made and
            :data:`MISSING_KEY_MESSAGE` is returned.
        model: Model identifier sent with the request.
        config: Supplies endpoint, API version and size / time limits.
        client: Optional shared ``httpx.AsyncClient``.
    """
    if not api_key:
        return MISSING_KEY_MESSAGE

    payload = build_payload(text, model, config.summary_max_tokens, config.summary_max_chars)
    headers = {
        "x-api-key": api_key,
        "anthropic-version": config.anthropic_version,
        "content-type": "application/json",
    }
    endpoint = f"{config.anthropic_base_url.rstrip('/')}/v1/messages"

    try:
        if client is not None:
            response = await client.post(
                endpoint, headers=headers, json=payload, timeout=config.summary_timeout
            )
        else:
            async with httpx.AsyncClient(timeout=config.summary_timeout) as own:
                response = await own.post(endpoint, headers=headers, json=payload)
    except httpx.HTTPError as exc:
        print(f"[summary] request failed: {exc}")
        return f"Summary unavailable: {exc.__class__.__name__}"

    if not response.is_success:
        message = _error_message(response)
        print(f"[summary] {message}")
        return message

    try:
        data = response.json()
    except ValueError:
        return NO_SUMMARY
    return _first_text(data)
