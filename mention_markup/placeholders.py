"""Placeholder grammar for mention markup templates.

A template such as ``@[__display__](user:__id__)`` mixes literal characters
with up to three placeholders. Only the first occurrence of each placeholder
takes part in parsing; later occurrences are plain literal text.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

from mention_markup.exceptions import MentionConfigError

logger = logging.getLogger(__name__)


class Placeholder(str, Enum):
    """Placeholders recognised inside a markup template."""

    ID = "__id__"
    DISPLAY = "__display__"
    META_DATA = "__metaData__"


PLACEHOLDER_NAMES = {
    "id": Placeholder.ID,
    "display": Placeholder.DISPLAY,
    "meta_data": Placeholder.META_DATA,
}

META_DATA_SEPARATOR = ";"
META_DATA_ASSIGNMENT = "="


def placeholder_positions(markup: str) -> dict[Placeholder, int]:
    """Return the index of the first occurrence of each placeholder present in markup."""
    positions: dict[Placeholder, int] = {}
    for placeholder in Placeholder:
        index = markup.find(placeholder.value)
        if index >= 0:
            positions[placeholder] = index
    return positions


def validate_markup(markup: str) -> None:
    """Ensure the template contains ``__id__`` or ``__display__``.

    Raises:
        MentionConfigError: If neither mandatory placeholder is present.
    """
    positions = placeholder_positions(markup)
    if Placeholder.ID not in positions and Placeholder.DISPLAY not in positions:
        raise MentionConfigError(
            f"The markup '{markup}' does not contain either of the placeholders "
            f"'{Placeholder.ID.value}' or '{Placeholder.DISPLAY.value}'"
        )


def count_placeholders(markup: str) -> int:
    """Number of capture groups the compiled template contributes."""
    return len(placeholder_positions(markup))


def find_position_of_capturing_group(markup: str, name: str) -> int:
    """Relative capture group index for ``id``, ``display`` or ``meta_data``.

    Groups are numbered by the order in which the placeholders first appear in
    the template. When only one of ``id``/``display`` is used, both names
    resolve to that single group.

    Args:
        markup: Markup template.
        name: One of ``"id"``, ``"display"``, ``"meta_data"``.

    Returns:
        Zero-based group position within the template's own groups.

    Raises:
        ValueError: If name is not a known placeholder name.
        MentionConfigError: If the template lacks both mandatory placeholders,
            or ``meta_data`` is requested from a template without it.
    """
    if name not in PLACEHOLDER_NAMES:
        raise ValueError(f'Second arg must be either "id", "display" or "meta_data", got: "{name}"')
    validate_markup(markup)

    positions = placeholder_positions(markup)
    ordered = sorted(positions, key=positions.__getitem__)
    placeholder = PLACEHOLDER_NAMES[name]

    if placeholder not in positions:
        if placeholder is Placeholder.META_DATA:
            raise MentionConfigError(f"The markup '{markup}' has no {Placeholder.META_DATA.value} placeholder")
        # Single mandatory placeholder: id and display share its group
        placeholder = Placeholder.ID if Placeholder.ID in positions else Placeholder.DISPLAY

    return ordered.index(placeholder)


def parse_meta_data(raw: str | None) -> dict[str, str]:
    """Parse ``key=value;key=value`` segments.

    Segments that are not ``key=value`` shaped, have an empty key, or use the
    metadata placeholder itself as key are skipped.

    Example:
        >>> parse_meta_data("type=TYPE;broken;sub=SUB")
        {'type': 'TYPE', 'sub': 'SUB'}
    """
    result: dict[str, str] = {}
    if not raw:
        return result

    for segment in raw.split(META_DATA_SEPARATOR):
        key, sep, value = segment.partition(META_DATA_ASSIGNMENT)
        if not sep or not key or key == Placeholder.META_DATA.value:
            if segment:
                logger.debug("Skipping malformed metadata segment %r", segment)
            continue
        result[key] = value
    return result


def serialize_meta_data(meta_data: Mapping[str, object] | None) -> str:
    """Serialize metadata as ``key=value`` pairs joined by ``;``."""
    if not meta_data:
        return ""
    return META_DATA_SEPARATOR.join(
        f"{key}{META_DATA_ASSIGNMENT}{value}"
        for key, value in meta_data.items()
        if key != Placeholder.META_DATA.value
    )
