"""Compile markup templates into one combined capture-tagged pattern."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from collections.abc import Sequence
from dataclasses import dataclass

from mention_markup.exceptions import MentionConfigError
from mention_markup.placeholders import Placeholder
from mention_markup.placeholders import count_placeholders
from mention_markup.placeholders import find_position_of_capturing_group
from mention_markup.placeholders import placeholder_positions
from mention_markup.placeholders import validate_markup

from .config import MentionTypeConfig

logger = logging.getLogger(__name__)

_ANY_CHAR = r"[\s\S]"


def _bounded_group(next_char: str | None) -> str:
    if next_char is None:
        return f"({_ANY_CHAR}+?)"
    return f"([^{re.escape(next_char)}]+?)"


def markup_to_regex(markup: str) -> str:
    """Translate a markup template into a regular expression source.

    ``__id__`` and ``__display__`` become non-greedy groups bounded by the
    literal character that follows them. ``__metaData__`` together with its
    surrounding delimiters becomes a zero-or-more group with one inner
    capture, so ``{k=v;k2=v2}`` is optional.

    Args:
        markup: Markup template.

    Returns:
        Regular expression source with one capture group per placeholder.

    Raises:
        MentionConfigError: If the template lacks both mandatory placeholders
            or the metadata placeholder has no closing delimiter.

    Example:
        >>> markup_to_regex("@[__display__](__id__)")
        '@\\\\[([^\\\\]]+?)\\\\]\\\\(([^\\\\)]+?)\\\\)'
    """
    validate_markup(markup)
    positions = placeholder_positions(markup)
    starts = set(positions.values())

    parts: list[str] = []
    cursor = 0
    for placeholder in sorted(positions, key=positions.__getitem__):
        start = positions[placeholder]
        end = start + len(placeholder.value)
        next_char = markup[end] if end < len(markup) else None

        if placeholder is not Placeholder.META_DATA:
            parts.append(re.escape(markup[cursor:start]))
            parts.append(_bounded_group(next_char))
            cursor = end
            continue

        if next_char is None or end in starts:
            raise MentionConfigError(
                f"The markup '{markup}' has no closing delimiter after {Placeholder.META_DATA.value}"
            )
        before = markup[start - 1] if start > cursor else ""
        parts.append(re.escape(markup[cursor : start - len(before)]))
        parts.append(
            f"(?:{re.escape(before)}([^{re.escape(next_char)}]*?){re.escape(next_char)})*"
        )
        cursor = end + 1

    parts.append(re.escape(markup[cursor:]))
    return "".join(parts)


@dataclass(frozen=True)
class GroupPositions:
    """Absolute group numbers for one type inside the combined pattern."""

    wrapper: int
    id: int
    display: int
    meta_data: int | None


class MentionRegistry:
    """Ordered, validated set of mention types sharing one combined pattern.

    Each type's pattern is wrapped in its own capturing group and all of them
    are alternated. The capture-group offset table records the wrapper group
    of each type so that a single match can be attributed to its type and
    its id/display/metadata groups can be read back.

    Raises:
        MentionConfigError: On an empty type list, an invalid template, an
            empty trigger, or two types sharing the same template.
    """

    def __init__(self, types: Sequence[MentionTypeConfig]) -> None:
        """Initialize registry.

        Args:
            types: Mention types in registration order.
        """
        if not types:
            raise MentionConfigError("A mention registry needs at least one mention type")

        self._types: tuple[MentionTypeConfig, ...] = tuple(types)
        seen: dict[str, int] = {}
        sources: list[str] = []
        for type_index, config in enumerate(self._types):
            if isinstance(config.trigger, str) and not config.trigger:
                raise MentionConfigError(f"Mention type {type_index} has an empty trigger")
            if config.markup in seen:
                raise MentionConfigError(
                    f"Mention types {seen[config.markup]} and {type_index} share the markup "
                    f"'{config.markup}'; the later type could never match"
                )
            seen[config.markup] = type_index
            sources.append(markup_to_regex(config.markup))

        offsets: list[int] = []
        positions: list[GroupPositions] = []
        # Group 0 is the whole match, so the first wrapper is group 1
        accumulated = 1
        for config in self._types:
            offsets.append(accumulated)
            has_meta = Placeholder.META_DATA.value in config.markup
            positions.append(
                GroupPositions(
                    wrapper=accumulated,
                    id=accumulated + 1 + find_position_of_capturing_group(config.markup, "id"),
                    display=accumulated + 1 + find_position_of_capturing_group(config.markup, "display"),
                    meta_data=(
                        accumulated + 1 + find_position_of_capturing_group(config.markup, "meta_data")
                        if has_meta
                        else None
                    ),
                )
            )
            accumulated += count_placeholders(config.markup) + 1

        self._capture_group_offsets = tuple(offsets)
        self._group_positions = tuple(positions)
        self._pattern = re.compile("|".join(f"({source})" for source in sources))
        logger.debug("Compiled %d mention type(s) into %r", len(self._types), self._pattern.pattern)

    @classmethod
    def from_markups(cls, *markups: str) -> MentionRegistry:
        """Build a registry of default-configured types, one per template."""
        return cls([MentionTypeConfig(markup=markup) for markup in markups])

    @property
    def types(self) -> tuple[MentionTypeConfig, ...]:
        """Registered mention types in order."""
        return self._types

    @property
    def pattern(self) -> re.Pattern[str]:
        """Combined alternation of every type's pattern."""
        return self._pattern

    @property
    def capture_group_offsets(self) -> tuple[int, ...]:
        """Wrapper group number of each type, monotonically increasing."""
        return self._capture_group_offsets

    def group_positions(self, type_index: int) -> GroupPositions:
        """Absolute group numbers for one type."""
        return self._group_positions[type_index]

    def resolve_type(self, match: re.Match[str]) -> int:
        """Return the type index whose wrapper group took part in the match."""
        for type_index, offset in enumerate(self._capture_group_offsets):
            if match.start(offset) != -1:
                return type_index
        raise ValueError("Match was not produced by this registry's pattern")

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, type_index: int) -> MentionTypeConfig:
        return self._types[type_index]

    def __iter__(self) -> Iterator[MentionTypeConfig]:
        return iter(self._types)
