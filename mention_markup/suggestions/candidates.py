"""Candidate variants and the flattened id -> candidate index."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any


@dataclass(frozen=True)
class SimpleCandidate:
    """Candidate given as a bare string; it is both id and display."""

    value: str

    @property
    def id(self) -> str:
        return self.value

    @property
    def display(self) -> str:
        return self.value

    @property
    def display_text(self) -> str:
        return self.value

    @property
    def meta_data(self) -> Mapping[str, Any]:
        return {}

    @property
    def children(self) -> tuple[Candidate, ...]:
        return ()


@dataclass(frozen=True)
class RichCandidate:
    """Candidate with id, optional display, metadata and nested children."""

    id: str
    display: str | None = None
    meta_data: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[Candidate, ...] = ()

    @property
    def display_text(self) -> str:
        """Display text, falling back to the id."""
        return self.display or self.id


Candidate = SimpleCandidate | RichCandidate


def to_candidate(item: Any) -> Candidate:
    """Normalize a data item into a Candidate.

    Accepts Candidate instances, strings, and mappings with ``id`` and
    optional ``display``, ``metaData``/``meta_data`` and ``children``/``data``
    keys.

    Raises:
        TypeError: If the item has none of these shapes.
        KeyError: If a mapping has no ``id``.
    """
    if isinstance(item, (SimpleCandidate, RichCandidate)):
        return item
    if isinstance(item, str):
        return SimpleCandidate(item)
    if isinstance(item, Mapping):
        meta_data = item.get("metaData", item.get("meta_data")) or {}
        children = item.get("children", item.get("data")) or ()
        display = item.get("display")
        return RichCandidate(
            id=str(item["id"]),
            display=str(display) if display is not None else None,
            meta_data=dict(meta_data),
            children=to_candidates(children),
        )
    raise TypeError(f"Cannot use {type(item).__name__} as a mention candidate")


def to_candidates(items: Iterable[Any]) -> tuple[Candidate, ...]:
    """Normalize a sequence of data items."""
    return tuple(to_candidate(item) for item in items)


def build_candidate_index(candidates: Iterable[Any]) -> dict[str, Candidate]:
    """Flatten a candidate tree into an id-indexed lookup.

    Walks the tree iteratively in pre-order; a later candidate with an
    already-seen id replaces the earlier one.

    Example:
        >>> index = build_candidate_index([{"id": "a", "data": [{"id": "b"}]}])
        >>> sorted(index)
        ['a', 'b']
    """
    index: dict[str, Candidate] = {}
    stack = list(reversed(to_candidates(candidates)))
    while stack:
        candidate = stack.pop()
        index[candidate.id] = candidate
        stack.extend(reversed(candidate.children))
    return index


class CandidateIndexCache:
    """Memoize the flattened index by structural equality of the input data.

    The index is rebuilt only when the candidate data compares unequal to the
    data the cached index was built from.
    """

    def __init__(self) -> None:
        """Initialize empty cache."""
        self._data: tuple[Candidate, ...] | None = None
        self._index: dict[str, Candidate] = {}
        self.builds = 0

    def get(self, candidates: Iterable[Any]) -> dict[str, Candidate]:
        """Return the index for candidates, rebuilding only if they changed."""
        data = to_candidates(candidates)
        if data != self._data:
            self._data = data
            self._index = build_candidate_index(data)
            self.builds += 1
        return self._index

    def clear(self) -> None:
        """Forget the cached index."""
        self._data = None
        self._index = {}
