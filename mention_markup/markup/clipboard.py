"""Copy, cut and paste that keep mentions intact."""

from __future__ import annotations

from dataclasses import dataclass

from mention_markup.registry import MentionRegistry

from .index_mapper import map_projection_index
from .models import Correction
from .projector import project
from .reconciler import splice_string


@dataclass(frozen=True)
class ClipboardPayload:
    """Both representations of a copied selection."""

    plain_text: str
    markup: str | None = None


def _markup_bounds(value: str, registry: MentionRegistry, start: int, end: int) -> tuple[str, int, int]:
    projection = project(value, registry)
    markup_start = map_projection_index(projection, start, Correction.START)
    markup_end = map_projection_index(projection, end, Correction.END)
    return projection.plain_text, markup_start, markup_end


def copy_selection(value: str, registry: MentionRegistry, start: int, end: int) -> ClipboardPayload:
    """Capture the selected plain text and the markup it covers.

    A selection edge inside a mention widens the markup to the whole mention.
    """
    plain_text, markup_start, markup_end = _markup_bounds(value, registry, start, end)
    return ClipboardPayload(plain_text=plain_text[start:end], markup=value[markup_start:markup_end])


def cut_selection(value: str, registry: MentionRegistry, start: int, end: int) -> tuple[ClipboardPayload, str]:
    """Copy the selection, then remove its markup from the document."""
    payload = copy_selection(value, registry, start, end)
    _, markup_start, markup_end = _markup_bounds(value, registry, start, end)
    return payload, value[:markup_start] + value[markup_end:]


def paste(
    value: str,
    registry: MentionRegistry,
    start: int,
    end: int,
    payload: ClipboardPayload | str,
) -> str:
    """Replace the selection with pasted content.

    Markup from a ClipboardPayload is preferred over its plain text, so
    mentions survive a copy/paste round trip. Carriage returns are dropped.
    """
    if isinstance(payload, str):
        payload = ClipboardPayload(plain_text=payload)
    _, markup_start, markup_end = _markup_bounds(value, registry, start, end)
    inserted = payload.markup if payload.markup else payload.plain_text
    return splice_string(value, markup_start, markup_end, inserted.replace("\r", ""))
