"""Adapt a type's data into a query provider."""

from __future__ import annotations

import unicodedata
from collections.abc import Callable
from collections.abc import Sequence
from typing import Any
from typing import Protocol

from .candidates import Candidate
from .candidates import to_candidates

ResultCallback = Callable[[Sequence[Any]], None]


class DataProviderProtocol(Protocol):
    """Protocol for mention data sources.

    A provider may return results synchronously, return an awaitable that
    resolves to results, or return None and invoke the callback later.
    """

    def __call__(self, query: str, callback: ResultCallback) -> Sequence[Any] | Any | None:
        """Provide candidates for a query.

        Args:
            query: Text typed after the trigger.
            callback: Receives results for asynchronous providers.

        Returns:
            Candidates, an awaitable of candidates, or None.
        """
        ...


def strip_accents(text: str) -> str:
    """Remove combining marks (e.g. ``Lydìã`` -> ``Lydia``)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def get_substring_index(text: str, query: str, ignore_accents: bool = False) -> int:
    """Case-insensitive ``str.find``, optionally ignoring accents."""
    if ignore_accents:
        return strip_accents(text).lower().find(strip_accents(query).lower())
    return text.lower().find(query.lower())


def filter_candidates(candidates: Sequence[Candidate], query: str, ignore_accents: bool = False) -> list[Candidate]:
    """Keep the top-level candidates whose display text contains the query."""
    return [
        candidate
        for candidate in candidates
        if get_substring_index(candidate.display_text, query, ignore_accents) >= 0
    ]


def make_data_provider(data: Any, ignore_accents: bool = False) -> DataProviderProtocol:
    """Return a provider for static data, or the callable itself."""
    if callable(data):
        return data

    candidates = to_candidates(data)

    def provide(query: str, callback: ResultCallback | None = None) -> list[Candidate]:
        return filter_candidates(candidates, query, ignore_accents)

    return provide
