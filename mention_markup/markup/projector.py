"""Project a markup document onto its plain-text view."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mention_markup.registry import MentionRegistry

from .models import Mention
from .models import Segment
from .scanner import scan_markup

if TYPE_CHECKING:
    from mention_markup.suggestions.candidates import Candidate


@dataclass(frozen=True)
class Projection:
    """Plain-text view of a markup document plus the segments it came from."""

    document: str
    plain_text: str
    segments: tuple[Segment, ...]

    @property
    def mentions(self) -> list[Mention]:
        return [segment for segment in self.segments if isinstance(segment, Mention)]


def _merge_meta_data(
    mention: Mention,
    registry: MentionRegistry,
    candidate_index: Mapping[str, Candidate] | None,
) -> Mention:
    if mention.meta_data or not candidate_index:
        return mention
    if not registry[mention.type_index].merge_candidate_meta_data:
        return mention
    candidate = candidate_index.get(mention.id)
    if candidate is None or not candidate.meta_data:
        return mention
    return dataclasses.replace(mention, meta_data={key: str(value) for key, value in candidate.meta_data.items()})


def project(
    document: str,
    registry: MentionRegistry,
    candidate_index: Mapping[str, Candidate] | None = None,
) -> Projection:
    """Scan once and build the plain text and segment list.

    Args:
        document: Markup document.
        registry: Mention registry.
        candidate_index: Optional id -> candidate table. Types configured with
            ``merge_candidate_meta_data`` take metadata from it when their
            markup carries none.

    Returns:
        Projection with plain text, ordered segments and mentions.
    """
    segments: list[Segment] = []
    parts: list[str] = []
    for segment in scan_markup(document, registry):
        if isinstance(segment, Mention):
            segment = _merge_meta_data(segment, registry, candidate_index)
            parts.append(segment.display)
        else:
            parts.append(segment.text)
        segments.append(segment)
    return Projection(document=document, plain_text="".join(parts), segments=tuple(segments))


def get_plain_text(document: str, registry: MentionRegistry) -> str:
    """Return the plain-text view of a markup document."""
    return project(document, registry).plain_text


def get_mentions(
    document: str,
    registry: MentionRegistry,
    candidate_index: Mapping[str, Candidate] | None = None,
) -> list[Mention]:
    """Return the mentions of a markup document in document order."""
    return project(document, registry, candidate_index).mentions
