"""Scan a markup document into literal spans and mentions."""

from __future__ import annotations

import re
from collections.abc import Callable
from collections.abc import Iterator

from mention_markup.placeholders import parse_meta_data
from mention_markup.registry import MentionRegistry

from .models import LiteralSpan
from .models import Mention
from .models import Segment


def _build_mention(match: re.Match[str], registry: MentionRegistry, plain_text_start: int) -> Mention:
    type_index = registry.resolve_type(match)
    config = registry[type_index]
    positions = registry.group_positions(type_index)

    id = match.group(positions.id)
    raw_display = match.group(positions.display)
    meta_data = parse_meta_data(match.group(positions.meta_data)) if positions.meta_data is not None else {}

    return Mention(
        type_index=type_index,
        id=id,
        display=config.display_transform(id, raw_display),
        raw_display=raw_display,
        markup=match.group(0),
        markup_start=match.start(),
        markup_end=match.end(),
        plain_text_start=plain_text_start,
        meta_data=meta_data,
    )


def scan_markup(document: str, registry: MentionRegistry) -> Iterator[Segment]:
    """Yield literal spans and mentions in document order.

    Matches are found left to right without overlap; when two types could
    match at the same position the earlier registered type wins. A literal
    span (possibly empty) precedes every mention, and a trailing literal is
    yielded only if non-empty.

    Args:
        document: Markup document.
        registry: Registry holding the combined pattern.

    Yields:
        LiteralSpan and Mention records with markup and plain-text positions.
    """
    start = 0
    plain_text_index = 0

    for match in registry.pattern.finditer(document):
        literal = LiteralSpan(document[start : match.start()], start, plain_text_index)
        yield literal
        plain_text_index = literal.plain_text_end

        mention = _build_mention(match, registry, plain_text_index)
        yield mention
        plain_text_index = mention.plain_text_end
        start = match.end()

    if start < len(document):
        yield LiteralSpan(document[start:], start, plain_text_index)


def iterate_markup(
    document: str,
    registry: MentionRegistry,
    on_mention: Callable[[Mention], None],
    on_literal: Callable[[LiteralSpan], None] | None = None,
) -> None:
    """Callback form of scan_markup.

    Args:
        document: Markup document.
        registry: Mention registry.
        on_mention: Called for every mention.
        on_literal: Optional, called for every literal span before/between/after mentions.
    """
    for segment in scan_markup(document, registry):
        if isinstance(segment, Mention):
            on_mention(segment)
        elif on_literal is not None:
            on_literal(segment)
