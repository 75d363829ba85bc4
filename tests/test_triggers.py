"""Tests for trigger detection and word boundaries."""

import re

from mention_markup.suggestions import detect_language
from mention_markup.suggestions import expand_to_word_boundaries
from mention_markup.suggestions import make_trigger_regex
from mention_markup.suggestions.triggers import space_character_for


class TestMakeTriggerRegex:
    """Tests for make_trigger_regex."""

    def test_query_after_trigger(self) -> None:
        """Group 1 is trigger plus query, group 2 the query."""
        assert make_trigger_regex("@").search("hi @jo").groups() == ("@jo", "jo")

    def test_trigger_at_start(self) -> None:
        """The trigger may open the text."""
        assert make_trigger_regex("@").search("@").groups() == ("@", "")

    def test_requires_preceding_space(self) -> None:
        """Triggers glued to a word are ignored (e-mail addresses)."""
        assert make_trigger_regex("@").search("mail me@host") is None

    def test_query_stops_at_space(self) -> None:
        """A space ends the query unless spaces are allowed."""
        assert make_trigger_regex("@").search("hi @jo sm") is None
        match = make_trigger_regex("@", allow_space_in_query=True).search("hi @jo sm")
        assert match.groups() == ("@jo sm", "jo sm")

    def test_ignore_space(self) -> None:
        """Space-less scripts match without a preceding space."""
        assert make_trigger_regex("@", ignore_space=True).search("hi@jo").groups() == ("@jo", "jo")

    def test_multi_character_trigger(self) -> None:
        """Triggers are escaped and may be longer than one character."""
        assert make_trigger_regex("::").search("go ::sm").groups() == ("::sm", "sm")

    def test_pattern_passthrough(self) -> None:
        """Compiled patterns are used as given."""
        pattern = re.compile(r"(\$(\w*))$")
        assert make_trigger_regex(pattern) is pattern


class TestWordBoundaries:
    """Tests for word boundaries and language detection."""

    def test_expand(self) -> None:
        """Selections grow to the surrounding spaces."""
        assert expand_to_word_boundaries("say hello world", 6, 8) == (4, 9)
        assert expand_to_word_boundaries("hello", 1, 2) == (0, 5)

    def test_custom_space_character(self) -> None:
        """The boundary character is configurable."""
        assert expand_to_word_boundaries("a_bc_d", 3, 3, "_") == (2, 4)

    def test_detect_language(self) -> None:
        """Japanese characters switch the language."""
        assert detect_language("こんにちは") == "ja"
        assert detect_language("hello") == "en_US"
        assert detect_language("hello", default="fr") == "fr"

    def test_space_character_for(self) -> None:
        """Japanese uses the ideographic space."""
        assert space_character_for("ja") == "\u3000"
        assert space_character_for(None) == " "
        assert space_character_for("de") == " "
