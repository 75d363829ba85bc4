"""Tests for template compilation and the mention registry."""

import re

import pytest

from mention_markup.exceptions import MentionConfigError
from mention_markup.registry import MentionRegistry
from mention_markup.registry import MentionTypeConfig
from mention_markup.registry import markup_to_regex

USER = "@[__display__](user:__id__)"
TAG = "#[__display__](tag:__id__)"


class TestMarkupToRegex:
    """Tests for markup_to_regex."""

    def test_matches_filled_template(self) -> None:
        """Id and display are captured in template order."""
        match = re.fullmatch(markup_to_regex(USER), "@[John Doe](user:42)")
        assert match is not None
        assert match.groups() == ("John Doe", "42")

    def test_groups_stop_at_next_literal(self) -> None:
        """A display group never runs past its closing delimiter."""
        match = re.search(markup_to_regex(USER), "@[a](user:1) and @[b](user:2)")
        assert match is not None
        assert match.group(0) == "@[a](user:1)"

    def test_trailing_placeholder(self) -> None:
        """A placeholder ending the template matches lazily."""
        match = re.fullmatch(markup_to_regex("#__id__"), "#topic")
        assert match is not None
        assert match.group(1) == "topic"

    def test_meta_data_optional(self) -> None:
        """The metadata section may be absent."""
        pattern = markup_to_regex("@[__display__](__id__){__metaData__}")
        with_meta = re.fullmatch(pattern, "@[J](1){a=b;c=d}")
        without_meta = re.fullmatch(pattern, "@[J](1)")
        assert with_meta is not None
        assert with_meta.group(3) == "a=b;c=d"
        assert without_meta is not None
        assert without_meta.group(3) is None

    def test_meta_data_without_closing_delimiter(self) -> None:
        """Metadata at the very end of a template is ambiguous."""
        with pytest.raises(MentionConfigError, match="closing delimiter"):
            markup_to_regex("@[__display__](__id__)__metaData__")

    def test_special_characters_escaped(self) -> None:
        """Regex metacharacters in the template are literal."""
        match = re.fullmatch(markup_to_regex("$(__id__)*"), "$(x)*")
        assert match is not None


class TestMentionRegistry:
    """Tests for MentionRegistry."""

    def test_offsets(self) -> None:
        """Each type's wrapper group follows the previous type's groups."""
        registry = MentionRegistry.from_markups(USER, TAG)
        assert registry.capture_group_offsets == (1, 4)

    def test_group_positions(self) -> None:
        """Absolute id/display groups are derived from the offsets."""
        registry = MentionRegistry.from_markups(USER, TAG)
        first = registry.group_positions(0)
        second = registry.group_positions(1)
        assert (first.wrapper, first.display, first.id, first.meta_data) == (1, 2, 3, None)
        assert (second.wrapper, second.display, second.id) == (4, 5, 6)

    def test_resolve_type(self) -> None:
        """A match is attributed to the type whose wrapper participated."""
        registry = MentionRegistry.from_markups(USER, TAG)
        match = registry.pattern.search("see #[py](tag:python)")
        assert match is not None
        assert registry.resolve_type(match) == 1

    def test_empty(self) -> None:
        """A registry needs at least one type."""
        with pytest.raises(MentionConfigError):
            MentionRegistry([])

    def test_duplicate_markup(self) -> None:
        """Two types with the same template are ambiguous."""
        with pytest.raises(MentionConfigError, match="share the markup"):
            MentionRegistry.from_markups(USER, USER)

    def test_empty_trigger(self) -> None:
        """Empty trigger strings are rejected."""
        with pytest.raises(MentionConfigError, match="empty trigger"):
            MentionRegistry([MentionTypeConfig(trigger="")])

    def test_invalid_markup(self) -> None:
        """Invalid templates fail at construction time."""
        with pytest.raises(MentionConfigError):
            MentionRegistry.from_markups("no placeholders")

    def test_sequence_protocol(self) -> None:
        """Registries index and iterate their types."""
        registry = MentionRegistry.from_markups(USER, TAG)
        assert len(registry) == 2
        assert registry[1].markup == TAG
        assert [config.markup for config in registry] == [USER, TAG]
