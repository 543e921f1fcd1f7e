"""Exception hierarchy for the book card pipeline.

Only :class:`InvalidInputError`, :class:`FetchFailure` and
:class:`PersistenceError` are meant to reach the user.  Network errors are
recovered by the proxy chain, and extraction / summarization problems never
raise at all; they degrade to placeholder values instead.
"""

from __future__ import annotations


class BookCardError(Exception):
    """Base class for every error raised by ``bookcard``."""


class InvalidInputError(BookCardError):
    """The input URL failed the minimal sanity check."""


class NetworkError(BookCardError):
    """A single network request failed."""


class NetworkTimeout(NetworkError):
    """A request was aborted after its per-attempt timeout elapsed."""


class NetworkFailure(NetworkError):
    """A request failed for any reason other than a timeout."""


class RetriesExhausted(NetworkError):
    """``fetch_with_retry`` was asked for zero attempts, so none ran."""


class FetchFailure(BookCardError):
    """Every intermediary in the proxy chain failed to yield content."""


class PersistenceError(BookCardError):
    """Template / output folder preconditions unmet, or the note write failed."""


class PipelineCancelled(BookCardError):
    """The caller cancelled the invocation between two stages."""
