"""Trigger patterns and word-boundary handling."""

from __future__ import annotations

import re

DEFAULT_LANGUAGE = "en_US"
JAPANESE = "ja"

# Word-boundary character per language. Scripts that need real segmentation
# plug in here; everything else falls back to an ASCII space.
SPACE_CHARACTERS = {
    DEFAULT_LANGUAGE: " ",
    JAPANESE: "\u3000",
}

JAPANESE_PATTERN = re.compile(
    r"[\u3000-\u303F]|[\u3040-\u309F]|[\u30A0-\u30FF]|[\uFF00-\uFFEF]|[\u4E00-\u9FAF]"
    r"|[\u2605-\u2606]|[\u2190-\u2195]|\u203B"
)


def detect_language(text: str, default: str = DEFAULT_LANGUAGE) -> str:
    """Return ``"ja"`` if text contains Japanese characters, else default."""
    return JAPANESE if JAPANESE_PATTERN.search(text) else default


def space_character_for(language: str | None) -> str:
    """Word-boundary character for a language."""
    return SPACE_CHARACTERS.get(language or DEFAULT_LANGUAGE, " ")


def make_trigger_regex(
    trigger: str | re.Pattern[str],
    allow_space_in_query: bool = False,
    ignore_space: bool = False,
) -> re.Pattern[str]:
    """Build the pattern that detects a trigger and its query before the caret.

    Group 1 is the run replaced on insertion (trigger plus query) and group 2
    is the query. Compiled patterns are returned unchanged.

    Args:
        trigger: Trigger string or compiled pattern.
        allow_space_in_query: Let the query contain whitespace.
        ignore_space: Do not require whitespace/start before the trigger.

    Example:
        >>> make_trigger_regex("@").search("hi @jo").groups()
        ('@jo', 'jo')
    """
    if isinstance(trigger, re.Pattern):
        return trigger

    escaped = re.escape(trigger)
    prefix = "" if ignore_space else r"(?:^|\s)"
    excluded = escaped if allow_space_in_query else rf"\s{escaped}"
    return re.compile(rf"{prefix}({escaped}([^{excluded}]*))$")


def expand_to_word_boundaries(
    plain_text: str,
    start: int,
    end: int,
    space_character: str = " ",
) -> tuple[int, int]:
    """Grow a selection outwards to the surrounding space characters.

    Example:
        >>> expand_to_word_boundaries("say hello world", 6, 8)
        (4, 9)
    """
    new_start = plain_text.rfind(space_character, 0, start) + 1
    next_space = plain_text.find(space_character, end)
    new_end = next_space if next_space >= 0 else len(plain_text)
    return new_start, new_end
