"""Data models for scanned markup documents."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum


class Correction(str, Enum):
    """How to map a plain-text index that falls inside a mention."""

    START = "START"  # markup offset of the mention's first character
    END = "END"  # markup offset just after the mention
    NULL = "NULL"  # no direct position; caret must not sit mid-markup


@dataclass(frozen=True)
class LiteralSpan:
    """Literal text between mentions, located in both coordinate spaces."""

    text: str
    markup_start: int
    plain_text_start: int

    @property
    def markup_end(self) -> int:
        return self.markup_start + len(self.text)

    @property
    def plain_text_end(self) -> int:
        return self.plain_text_start + len(self.text)


@dataclass(frozen=True)
class Mention:
    """One typed reference found in a markup document.

    Mentions are derived data: they are recomputed by re-scanning after every
    edit and never mutated in place.
    """

    type_index: int
    id: str
    display: str  # after display_transform
    raw_display: str
    markup: str  # matched markup text
    markup_start: int
    markup_end: int
    plain_text_start: int
    meta_data: dict[str, str] = field(default_factory=dict)

    @property
    def plain_text_end(self) -> int:
        return self.plain_text_start + len(self.display)


Segment = LiteralSpan | Mention


@dataclass(frozen=True)
class ChangeResult:
    """New value handed back to the host after an operation changed it."""

    value: str
    plain_text: str
    mentions: list[Mention]
    selection_start: int | None
    selection_end: int | None
