"""Compose the markup and plain text for inserting a mention."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from mention_markup.placeholders import Placeholder
from mention_markup.placeholders import serialize_meta_data
from mention_markup.registry import MentionTypeConfig

from .index_mapper import expand_to_mentions
from .index_mapper import map_projection_index
from .models import Correction
from .projector import Projection
from .reconciler import splice_string


def make_mentions_markup(
    markup: str,
    id: str,
    display: str,
    meta_data: Mapping[str, object] | None = None,
) -> str:
    """Fill a markup template with a mention's values.

    Only the first occurrence of each placeholder is replaced, matching how
    templates are parsed.

    Example:
        >>> make_mentions_markup("@[__display__](user:__id__)", "2", "Jane")
        '@[Jane](user:2)'
    """
    result = markup.replace(Placeholder.ID.value, str(id), 1).replace(Placeholder.DISPLAY.value, display, 1)
    if Placeholder.META_DATA.value in markup:
        result = result.replace(Placeholder.META_DATA.value, serialize_meta_data(meta_data), 1)
    return result


@dataclass(frozen=True)
class Insertion:
    """One atomic insertion applied to markup and plain text together."""

    markup_start: int
    markup_end: int
    markup_text: str
    plain_start: int
    plain_end: int
    plain_text: str
    caret: int

    def apply(self, value: str, plain_text: str) -> tuple[str, str]:
        """Return the new ``(markup, plain_text)`` pair."""
        return (
            splice_string(value, self.markup_start, self.markup_end, self.markup_text),
            splice_string(plain_text, self.plain_start, self.plain_end, self.plain_text),
        )


@dataclass(frozen=True)
class WordSpan:
    """Plain-text span whose text is kept as the mention's display."""

    start: int
    end: int
    text: str


def find_preserved_word(
    plain_text: str,
    caret: int,
    trigger: str,
    space_character: str = " ",
    single_character_words: bool = False,
) -> WordSpan | None:
    """Locate the word typed after the closest trigger before the caret.

    The word runs from just after the trigger to the next space character
    (or the end of the text). ``single_character_words`` keeps only one
    character, for scripts written without spaces.
    """
    trigger_start = plain_text.rfind(trigger, 0, caret)
    if trigger_start < 0:
        return None
    word_start = trigger_start + len(trigger)
    if single_character_words:
        word_end = min(word_start + 1, len(plain_text))
    else:
        space = plain_text.find(space_character, word_start)
        word_end = space if space >= 0 else len(plain_text)
    text = plain_text[word_start:word_end]
    if not text:
        return None
    return WordSpan(start=trigger_start, end=word_end, text=text)


def compose_insertion(
    projection: Projection,
    config: MentionTypeConfig,
    id: str,
    display: str,
    meta_data: Mapping[str, object] | None,
    *,
    sequence_start: int,
    sequence_end: int,
    word: WordSpan | None = None,
    replace: tuple[int, int, int, int] | None = None,
    space_character: str = " ",
) -> Insertion:
    """Compute where and what to insert for a chosen candidate.

    The display text comes from, in order of precedence, the replaced
    mention's span (``replace``), a highlighted or preserved word, or the
    query match ``[sequence_start, sequence_end)``.

    Args:
        projection: Projection of the current markup document.
        config: Mention type of the insertion.
        id: Candidate id.
        display: Display text to use (already chosen by the caller).
        meta_data: Candidate metadata, serialized if the template asks for it.
        sequence_start: Plain-text start of the trigger+query run.
        sequence_end: Plain-text end of the trigger+query run.
        word: Highlighted/preserved word span, if any.
        replace: ``(plain_start, plain_end, markup_start, markup_end)`` of a
            mention being replaced.
        space_character: Appended when ``append_space_on_add`` is set.

    Returns:
        Insertion describing both splices and the new caret position.
    """
    markup_text = make_mentions_markup(config.markup, id, display, meta_data)
    plain_display = config.display_transform(id, display)
    if config.append_space_on_add:
        markup_text += space_character
        plain_display += space_character

    if replace is not None:
        plain_start, plain_end, markup_start, markup_end = replace
    else:
        if word is not None:
            plain_start, plain_end = expand_to_mentions(projection, word.start, word.end)
        else:
            plain_start, plain_end = sequence_start, sequence_end
        markup_start = map_projection_index(projection, plain_start, Correction.START)
        markup_end = map_projection_index(projection, plain_end, Correction.END)

    return Insertion(
        markup_start=markup_start,
        markup_end=markup_end,
        markup_text=markup_text,
        plain_start=plain_start,
        plain_end=plain_end,
        plain_text=plain_display,
        caret=plain_start + len(plain_display),
    )
