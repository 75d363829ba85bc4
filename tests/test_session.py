"""Tests for the suggestion session lifecycle."""

import pytest

from mention_markup.exceptions import MentionQueryError
from mention_markup.registry import MentionRegistry
from mention_markup.registry import MentionTypeConfig
from mention_markup.suggestions import QueryState
from mention_markup.suggestions import SuggestionSession

USER = "@[__display__](user:__id__)"
PEOPLE = [{"id": "1", "display": "John"}, {"id": "2", "display": "Jane"}]


def make_session(**options) -> SuggestionSession:
    options.setdefault("data", PEOPLE)
    return SuggestionSession(MentionRegistry([MentionTypeConfig(markup=USER, **options)]))


class TestTriggerDetection:
    """Tests for update_queries."""

    def test_trigger_query(self) -> None:
        """A trigger before the caret queries the type's data."""
        session = make_session()
        session.update_queries("hi @j", "hi @j", 5)

        assert session.state_of(0) is QueryState.RESOLVED
        assert [entry.candidate.id for entry in session.entries()] == ["1", "2"]
        info = session.entries()[0].group.query_info
        assert (info.query, info.sequence_start, info.sequence_end) == ("j", 3, 5)

    def test_no_trigger(self) -> None:
        """Text without a trigger leaves the type idle."""
        session = make_session()
        session.update_queries("hi there", "hi there", 8)
        assert session.state_of(0) is QueryState.IDLE
        assert session.suggestions_count() == 0

    def test_only_text_after_last_mention(self) -> None:
        """A trigger inside an earlier mention's display is not reused."""
        session = make_session(data=["@x"])
        value = "@[@x](user:x) y"
        session.update_queries(value, "@x y", 4)
        assert session.suggestions_count() == 0

    def test_multiple_types(self) -> None:
        """Every type whose trigger matches gets its own group."""
        registry = MentionRegistry(
            [
                MentionTypeConfig(markup=USER, data=["john"]),
                MentionTypeConfig(trigger="#", markup="#[__display__](tag:__id__)", data=["javascript"]),
            ]
        )
        session = SuggestionSession(registry)
        session.update_queries("@j #j", "@j #j", 5)
        assert sorted(session.groups) == [1]
        assert session.entries()[0].candidate.id == "javascript"

    def test_preserve_value_queries_everything(self) -> None:
        """Types preserving the typed word always query with an empty string."""
        session = make_session(preserve_value=True)
        session.update_queries("hi @zz", "hi @zz", 6)
        assert session.suggestions_count() == 2
        assert session.entries()[0].group.query_info.query == ""

    def test_caret_inside_mention_switches(self) -> None:
        """A caret inside a mention queries a replacement for it."""
        session = make_session()
        session.update_queries("hi @[John](user:1)", "hi John", 5)

        group = session.entries()[0].group
        assert group.replace_target is not None
        assert (group.replace_target.markup_start, group.replace_target.markup_end) == (3, 18)

    def test_highlight_to_tag(self) -> None:
        """A range selection is expanded to whole words and queried."""
        session = make_session(highlight_to_tag=True, data=["python", "pytest"])
        expanded = session.update_queries("I like python a lot", "I like python a lot", 8, 10)

        assert expanded == (7, 13)
        info = session.entries()[0].group.query_info
        assert info.highlighted
        assert (info.sequence_start, info.sequence_end) == (7, 13)

    def test_range_without_highlight_to_tag(self) -> None:
        """Ranges only query types configured for highlight-to-tag."""
        session = make_session()
        assert session.update_queries("hi @j", "hi @j", 3, 5) is None


class TestAsyncResults:
    """Tests for the query token guard."""

    def test_callback_provider(self) -> None:
        """Providers returning None deliver through the callback."""
        callbacks = []
        session = make_session(data=lambda query, callback: callbacks.append(callback))
        session.update_queries("@j", "@j", 2)

        assert session.state_of(0) is QueryState.QUERYING
        assert callbacks[0](["Jane"]) is True
        assert session.state_of(0) is QueryState.RESOLVED

    def test_stale_callback_dropped(self) -> None:
        """Results for a superseded query are discarded."""
        callbacks = []
        session = make_session(data=lambda query, callback: callbacks.append(callback))
        session.update_queries("@j", "@j", 2)
        session.update_queries("@ja", "@ja", 3)

        assert callbacks[0](["John"]) is False
        assert session.suggestions_count() == 0
        assert callbacks[1](["Jane"]) is True
        assert [entry.candidate.id for entry in session.entries()] == ["Jane"]

    def test_stale_callback_after_fresh_one(self) -> None:
        """A superseded callback firing last does not overwrite newer results."""
        callbacks = []
        session = make_session(data=lambda query, callback: callbacks.append(callback))
        session.update_queries("@j", "@j", 2)
        session.update_queries("@ja", "@ja", 3)

        assert callbacks[1](["Jane"]) is True
        assert callbacks[0](["John"]) is False
        assert [entry.candidate.id for entry in session.entries()] == ["Jane"]
        assert session.state_of(0) is QueryState.RESOLVED

    def test_results_after_cancel_dropped(self) -> None:
        """Cancelling invalidates outstanding callbacks."""
        callbacks = []
        session = make_session(data=lambda query, callback: callbacks.append(callback))
        session.update_queries("@j", "@j", 2)
        session.cancel_query()

        assert callbacks[0](["Jane"]) is False
        assert session.suggestions_count() == 0
        assert session.last_outcome is QueryState.CANCELLED

    @pytest.mark.asyncio
    async def test_awaitable_provider(self) -> None:
        """Awaitables are resolved by wait_for_pending."""

        async def fetch(query):
            return [f"{query}-result"]

        session = make_session(data=lambda query, callback: fetch(query))
        session.update_queries("@ab", "@ab", 3)
        assert session.has_pending

        await session.wait_for_pending()
        assert not session.has_pending
        assert [entry.candidate.id for entry in session.entries()] == ["ab-result"]

    @pytest.mark.asyncio
    async def test_superseded_coroutine_never_runs(self) -> None:
        """Coroutines of superseded queries are closed without running."""
        started = []

        async def fetch(query):
            started.append(query)
            return [query]

        session = make_session(data=lambda query, callback: fetch(query))
        session.update_queries("@a", "@a", 2)
        session.update_queries("@ab", "@ab", 3)
        await session.wait_for_pending()

        assert started == ["ab"]
        assert [entry.candidate.id for entry in session.entries()] == ["ab"]

    @pytest.mark.asyncio
    async def test_failing_provider_keeps_other_results(self) -> None:
        """One provider raising does not lose the other types' results."""

        async def fail(query):
            raise RuntimeError("backend down")

        async def fetch(query):
            return ["team"]

        registry = MentionRegistry(
            [
                MentionTypeConfig(markup=USER, data=lambda query, callback: fail(query)),
                MentionTypeConfig(markup="@<__display__>(team:__id__)", data=lambda query, callback: fetch(query)),
            ]
        )
        session = SuggestionSession(registry)
        session.update_queries("@t", "@t", 2)
        await session.wait_for_pending()

        assert session.state_of(0) is QueryState.IDLE
        assert session.state_of(1) is QueryState.RESOLVED
        assert [entry.candidate.id for entry in session.entries()] == ["team"]


class TestCommit:
    """Tests for commit_query and navigation."""

    def test_commit(self) -> None:
        """Committing inserts the mention and closes the session."""
        session = make_session()
        session.update_queries("hi @ja", "hi @ja", 6)
        entry = session.focused_entry()
        result = session.commit_query(entry.candidate, entry.group, "hi @ja")

        assert result.value == "hi @[Jane](user:2)"
        assert result.plain_text == "hi Jane"
        assert (result.selection_start, result.selection_end) == (7, 7)
        assert [mention.id for mention in result.mentions] == ["2"]
        assert session.last_outcome is QueryState.INSERTED
        assert session.suggestions_count() == 0

    def test_commit_appends_space_and_calls_on_add(self) -> None:
        """append_space_on_add and on_add take effect on commit."""
        added = []
        session = make_session(append_space_on_add=True, on_add=lambda id, display: added.append((id, display)))
        session.update_queries("@ja", "@ja", 3)
        result = session.select_focused("@ja")

        assert result.value == "@[Jane](user:2) "
        assert result.selection_start == 5
        assert added == [("2", "Jane")]

    def test_commit_replaces_mention(self) -> None:
        """Committing from inside a mention swaps it."""
        session = make_session()
        session.update_queries("hi @[John](user:1)", "hi John", 5)
        session.shift_focus(1)
        result = session.select_focused("hi @[John](user:1)")
        assert result.value == "hi @[Jane](user:2)"

    def test_highlighted_word_is_display(self) -> None:
        """The highlighted word becomes the display text."""
        session = make_session(highlight_to_tag=True, data=["python", "pytest"])
        value = "I like python a lot"
        session.update_queries(value, value, 8, 10)
        session.shift_focus(1)
        result = session.select_focused(value)
        assert result.value == "I like @[python](user:pytest) a lot"

    def test_preserved_word_is_display(self) -> None:
        """preserve_value keeps the typed word as display."""
        session = make_session(preserve_value=True, data=["John"])
        session.update_queries("hi @jo", "hi @jo", 6)
        result = session.select_focused("hi @jo", caret=6)
        assert result.value == "hi @[jo](user:John)"

    def test_meta_data_inserted(self) -> None:
        """Candidate metadata fills the metadata placeholder."""
        registry = MentionRegistry(
            [
                MentionTypeConfig(
                    markup="@[__display__](__id__){__metaData__}",
                    data=[{"id": "1", "display": "John", "metaData": {"role": "admin"}}],
                )
            ]
        )
        session = SuggestionSession(registry)
        session.update_queries("@jo", "@jo", 3)
        result = session.select_focused("@jo")
        assert result.value == "@[John](1){role=admin}"
        assert result.mentions[0].meta_data == {"role": "admin"}

    def test_commit_stale_group(self) -> None:
        """Groups from a cancelled query cannot be committed."""
        session = make_session()
        session.update_queries("@j", "@j", 2)
        entry = session.focused_entry()
        session.cancel_query()
        with pytest.raises(MentionQueryError):
            session.commit_query(entry.candidate, entry.group, "@j")

    def test_unknown_type(self) -> None:
        """Queries for unregistered types are rejected."""
        with pytest.raises(MentionQueryError):
            make_session().begin_query(3, "", 0, 0, "")

    def test_navigation(self) -> None:
        """Focus moves across the flattened list and wraps."""
        session = make_session()
        session.update_queries("@j", "@j", 2)
        assert session.focused_entry().candidate.id == "1"
        session.shift_focus(1)
        assert session.focused_entry().candidate.id == "2"
        session.shift_focus(1)
        assert session.focused_entry().candidate.id == "1"

    def test_children(self) -> None:
        """Opened entries expose their children."""
        session = make_session(data=[{"id": "team", "children": ["amy", "bob"]}])
        session.update_queries("@", "@", 1)
        session.open_focused()

        assert session.children_count() == 2
        assert session.focused_child().id == "amy"
        session.shift_child_focus(1)
        result = session.select_child_focused("@")
        assert result.value == "@[bob](user:bob)"

    def test_japanese_space_character(self) -> None:
        """The word boundary follows the language."""
        registry = MentionRegistry.from_markups(USER)
        assert SuggestionSession(registry, language="ja").space_character == "\u3000"
        assert SuggestionSession(registry, space_character="_").space_character == "_"
