"""Reconcile plain-text edits back into the markup document."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mention_markup.registry import MentionRegistry

from .index_mapper import map_projection_index
from .models import Correction
from .projector import project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionDelta:
    """Selection bounds around a plain-text edit.

    Any field may be None when the host does not know it; the diff then
    relies on the text alone.
    """

    selection_start_before: int | None = None
    selection_end_before: int | None = None
    selection_end_after: int | None = None


def splice_string(value: str, start: int, end: int, insert: str) -> str:
    """Replace ``value[start:end]`` with insert."""
    return value[:start] + insert + value[end:]


def _common_prefix_length(old: str, new: str, limit: int) -> int:
    length = 0
    while length < limit and old[length] == new[length]:
        length += 1
    return length


def _common_suffix_length(old: str, new: str, limit: int) -> int:
    length = 0
    while length < limit and old[-1 - length] == new[-1 - length]:
        length += 1
    return length


def changed_region(old: str, new: str, selection: SelectionDelta | None = None) -> tuple[int, int, int]:
    """Locate the edit between two plain texts.

    The shared prefix is bounded by where the selection started so that a
    repeated character next to the caret is attributed to the caret side,
    and the shared suffix never overlaps the prefix.

    Returns:
        ``(start, old_end, new_end)``: ``old[start:old_end]`` was replaced by
        ``new[start:new_end]``.
    """
    selection = selection or SelectionDelta()
    shortest = min(len(old), len(new))

    prefix_limit = shortest
    anchors = [
        index
        for index in (selection.selection_start_before, selection.selection_end_after)
        if index is not None
    ]
    if anchors:
        prefix_limit = max(0, min(prefix_limit, *anchors))
    prefix = _common_prefix_length(old, new, prefix_limit)

    suffix_limit = shortest - prefix
    if selection.selection_end_after is not None:
        suffix_limit = min(suffix_limit, len(new) - selection.selection_end_after)
    if selection.selection_end_before is not None:
        suffix_limit = min(suffix_limit, len(old) - selection.selection_end_before)
    suffix = _common_suffix_length(old, new, max(suffix_limit, 0))

    return prefix, len(old) - suffix, len(new) - suffix


def apply_change_to_value(
    value: str,
    plain_text_value: str,
    selection: SelectionDelta | None,
    registry: MentionRegistry,
) -> str:
    """Apply a plain-text edit to the markup document.

    The replaced region of the old plain text is mapped to markup with
    ``START``/``END`` correction, so a region touching any part of a
    mention's display removes the whole mention. Inserted characters are
    spliced in verbatim and are never parsed as markup.

    Args:
        value: Markup document before the edit.
        plain_text_value: Plain text after the edit.
        selection: Selection bounds around the edit (optional hints).
        registry: Mention registry.

    Returns:
        New markup document.

    Example:
        >>> registry = MentionRegistry.from_markups("@[__display__](user:__id__)")
        >>> apply_change_to_value("Hi @[John](user:1)!", "Hi Jo!", None, registry)
        'Hi !'
    """
    projection = project(value, registry)
    old_plain_text = projection.plain_text
    if old_plain_text == plain_text_value:
        return value

    start, old_end, new_end = changed_region(old_plain_text, plain_text_value, selection)
    insert = plain_text_value[start:new_end]

    markup_start = map_projection_index(projection, start, Correction.START)
    markup_end = map_projection_index(projection, old_end, Correction.END)

    touched = [
        mention
        for mention in projection.mentions
        if mention.markup_start < markup_end and mention.markup_end > markup_start
    ]
    if touched:
        logger.debug(
            "Edit of plain range [%d, %d) removes %d mention(s): %s",
            start,
            old_end,
            len(touched),
            ", ".join(mention.id for mention in touched),
        )

    return splice_string(value, markup_start, markup_end, insert)
