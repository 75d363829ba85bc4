"""Per-type mention configuration."""

from __future__ import annotations

import re
from collections.abc import Callable
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

DEFAULT_MARKUP = "@[__display__](__id__)"
DEFAULT_TRIGGER = "@"


def default_display_transform(id: str, display: str | None) -> str:
    """Show the raw display text, falling back to the id."""
    return display or id


@dataclass(frozen=True)
class MentionTypeConfig:
    """Configuration for one mention type.

    A type is identified by its position in the registry (``type_index``),
    so configs are immutable once registered.

    Attributes:
        trigger: Literal trigger string (e.g. ``"@"``) or a compiled pattern
            whose group 1 is the replaced run and group 2 the query.
        markup: Template containing ``__id__`` and/or ``__display__`` and an
            optional ``__metaData__`` placeholder.
        display_transform: ``(id, raw_display) -> display`` used for the
            plain-text view.
        data: Candidates (strings, dicts or Candidate objects) or a provider
            callable ``(query, callback) -> results | awaitable | None``.
        append_space_on_add: Append the space character after insertion.
        allow_space_in_query: Let the query run over spaces.
        highlight_to_tag: Treat a selected range as the query target.
        preserve_value: Keep the typed word as display text on insertion.
        ignore_accents: Accent-insensitive filtering of static data.
        merge_candidate_meta_data: Fill missing metadata from the candidate index.
        on_add: Called with ``(id, display)`` after a mention is inserted.
        name: Optional human-readable label.
    """

    trigger: str | re.Pattern[str] = DEFAULT_TRIGGER
    markup: str = DEFAULT_MARKUP
    display_transform: Callable[[str, str | None], str] = default_display_transform
    data: Sequence[Any] | Callable[..., Any] = ()
    append_space_on_add: bool = False
    allow_space_in_query: bool = False
    highlight_to_tag: bool = False
    preserve_value: bool = False
    ignore_accents: bool = False
    merge_candidate_meta_data: bool = False
    on_add: Callable[[str, str], None] | None = None
    name: str | None = None

    @property
    def has_static_data(self) -> bool:
        """True if data is a candidate sequence rather than a provider."""
        return not callable(self.data)
