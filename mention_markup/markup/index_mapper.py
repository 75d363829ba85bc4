"""Map positions between the plain-text and markup coordinate spaces."""

from __future__ import annotations

from mention_markup.registry import MentionRegistry

from .models import Correction
from .models import LiteralSpan
from .models import Mention
from .projector import Projection
from .projector import project


def map_projection_index(
    projection: Projection,
    plain_index: int,
    correction: Correction = Correction.START,
) -> int | None:
    """Map a plain-text index to a markup offset using an existing projection.

    Indices inside a literal span map one to one. An index exactly on a
    mention boundary belongs to the adjacent literal span. Indices strictly
    inside a mention's display follow ``correction``. Negative indices clamp
    to 0 and indices past the plain text map to the end of the document.

    Args:
        projection: Projection of the markup document.
        plain_index: Index in the plain-text view.
        correction: Policy for indices inside a mention.

    Returns:
        Markup offset, or None for ``Correction.NULL`` inside a mention.
    """
    plain_index = max(plain_index, 0)
    for segment in projection.segments:
        if isinstance(segment, LiteralSpan):
            if segment.plain_text_start <= plain_index <= segment.plain_text_end:
                return segment.markup_start + plain_index - segment.plain_text_start
        elif segment.plain_text_start < plain_index < segment.plain_text_end:
            if correction is Correction.NULL:
                return None
            return segment.markup_end if correction is Correction.END else segment.markup_start
    return len(projection.document)


def map_plain_text_index(
    document: str,
    registry: MentionRegistry,
    plain_index: int,
    correction: Correction = Correction.START,
) -> int | None:
    """Map a plain-text index to a markup offset.

    Example:
        >>> registry = MentionRegistry.from_markups("@[__display__](user:__id__)")
        >>> map_plain_text_index("Hi @[John](user:1)!", registry, 7)
        18
    """
    return map_projection_index(project(document, registry), plain_index, correction)


def map_markup_index(
    projection: Projection,
    markup_index: int,
    correction: Correction = Correction.START,
) -> int | None:
    """Map a markup offset back to a plain-text index.

    Offsets inside a literal span map one to one. Offsets strictly inside a
    mention's markup follow ``correction``: START gives the display start,
    END the display end and NULL gives None. Offsets past the document map
    to the end of the plain text.

    Example:
        >>> registry = MentionRegistry.from_markups("@[__display__](user:__id__)")
        >>> map_markup_index(project("Hi @[John](user:1)!", registry), 18)
        7
    """
    markup_index = max(markup_index, 0)
    for segment in projection.segments:
        if isinstance(segment, LiteralSpan):
            if segment.markup_start <= markup_index <= segment.markup_end:
                return segment.plain_text_start + markup_index - segment.markup_start
        elif segment.markup_start < markup_index < segment.markup_end:
            if correction is Correction.NULL:
                return None
            return segment.plain_text_end if correction is Correction.END else segment.plain_text_start
    return len(projection.plain_text)


def mention_at(projection: Projection, plain_index: int) -> Mention | None:
    """Return the mention whose display covers ``[start, end)`` around plain_index."""
    for mention in projection.mentions:
        if mention.plain_text_start <= plain_index < mention.plain_text_end:
            return mention
    return None


def find_mention_at(document: str, registry: MentionRegistry, plain_index: int) -> Mention | None:
    """Return the mention under a plain-text index, if any."""
    return mention_at(project(document, registry), plain_index)


def get_end_of_last_mention(document: str, registry: MentionRegistry) -> int:
    """Plain-text index just after the last mention, or 0 without mentions."""
    mentions = project(document, registry).mentions
    return mentions[-1].plain_text_end if mentions else 0


def expand_to_mentions(projection: Projection, start: int, end: int) -> tuple[int, int]:
    """Widen a plain-text range so it never cuts through a mention's display."""
    first = mention_at(projection, start)
    if first is not None and first.plain_text_start < start:
        start = first.plain_text_start
    last = mention_at(projection, end)
    if last is not None and last.plain_text_start < end:
        end = last.plain_text_end
    return start, end
