"""Suggestion session: trigger detection, queries, navigation and commit.

Each mention type can be mid-query at the same time as the others. Every
detection cycle bumps a monotonic query token; results delivered with an
older token (late callbacks, slow awaitables) are dropped.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mention_markup.exceptions import MentionQueryError
from mention_markup.markup.index_mapper import expand_to_mentions
from mention_markup.markup.index_mapper import get_end_of_last_mention
from mention_markup.markup.index_mapper import map_projection_index
from mention_markup.markup.index_mapper import mention_at
from mention_markup.markup.insertion import WordSpan
from mention_markup.markup.insertion import compose_insertion
from mention_markup.markup.insertion import find_preserved_word
from mention_markup.markup.models import ChangeResult
from mention_markup.markup.models import Correction
from mention_markup.markup.models import Mention
from mention_markup.markup.projector import get_mentions
from mention_markup.markup.projector import project
from mention_markup.registry import MentionRegistry

from .candidates import Candidate
from .candidates import to_candidates
from .focus import FocusState
from .focus import clamp_focus
from .focus import close_open
from .focus import open_focused
from .focus import shift_child_focus
from .focus import shift_focus
from .providers import make_data_provider
from .triggers import JAPANESE
from .triggers import expand_to_word_boundaries
from .triggers import make_trigger_regex
from .triggers import space_character_for

logger = logging.getLogger(__name__)


class QueryState(str, Enum):
    """Lifecycle of a query for one mention type."""

    IDLE = "idle"
    DETECTING = "detecting"  # matching triggers against the text before the caret
    QUERYING = "querying"  # provider called, results outstanding
    RESOLVED = "resolved"  # results available for navigation
    INSERTED = "inserted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ReplaceTarget:
    """Existing mention that a committed candidate will replace."""

    plain_start: int
    plain_end: int
    markup_start: int
    markup_end: int
    display: str
    raw_display: str
    meta_data: Mapping[str, str]

    @classmethod
    def from_mention(cls, mention: Mention) -> ReplaceTarget:
        return cls(
            plain_start=mention.plain_text_start,
            plain_end=mention.plain_text_end,
            markup_start=mention.markup_start,
            markup_end=mention.markup_end,
            display=mention.display,
            raw_display=mention.raw_display,
            meta_data=dict(mention.meta_data),
        )


@dataclass(frozen=True)
class QueryInfo:
    """Where a query came from, in plain-text coordinates."""

    type_index: int
    query: str
    sequence_start: int
    sequence_end: int
    plain_text: str
    highlighted: bool = False


@dataclass(frozen=True)
class SuggestionGroup:
    """Resolved results for one mention type."""

    query_info: QueryInfo
    results: tuple[Candidate, ...]
    replace_target: ReplaceTarget | None = None


@dataclass(frozen=True)
class SuggestionEntry:
    """One addressable row of the flattened suggestion list."""

    index: int
    candidate: Candidate
    group: SuggestionGroup


@dataclass
class _PendingQuery:
    token: int
    query_info: QueryInfo
    replace_target: ReplaceTarget | None
    awaitable: Any


def flatten_suggestions(groups: Mapping[int, SuggestionGroup]) -> list[SuggestionEntry]:
    """Merge every type's results, in registration order, into one list."""
    entries: list[SuggestionEntry] = []
    for type_index in sorted(groups):
        group = groups[type_index]
        for candidate in group.results:
            entries.append(SuggestionEntry(index=len(entries), candidate=candidate, group=group))
    return entries


class SuggestionSession:
    """Query/selection state for inserting mentions into one editing session."""

    def __init__(
        self,
        registry: MentionRegistry,
        *,
        space_character: str | None = None,
        language: str | None = None,
        candidate_index: Mapping[str, Candidate] | None = None,
    ) -> None:
        """Initialize session.

        Args:
            registry: Mention registry.
            space_character: Word-boundary character. Defaults to the one
                for ``language`` (ASCII space unless Japanese).
            language: Language code driving word-boundary behaviour.
            candidate_index: Flattened id -> candidate table used for
                metadata merging in mention lists.
        """
        self._registry = registry
        self._space_character = space_character
        self.language = language
        self.candidate_index: Mapping[str, Candidate] = candidate_index or {}

        self._query_token = 0
        self._groups: dict[int, SuggestionGroup] = {}
        self._querying: dict[int, QueryInfo] = {}
        self._pending: list[_PendingQuery] = []
        self._detecting = False
        self.focus = FocusState()
        self.last_outcome: QueryState | None = None

    @property
    def registry(self) -> MentionRegistry:
        return self._registry

    @registry.setter
    def registry(self, registry: MentionRegistry) -> None:
        """Swap in a new registry; queries against the old one are dropped."""
        self._invalidate()
        self.focus = FocusState()
        self._registry = registry

    @property
    def space_character(self) -> str:
        return self._space_character or space_character_for(self.language)

    @property
    def is_japanese(self) -> bool:
        return self.language == JAPANESE

    @property
    def query_token(self) -> int:
        """Current query token; results carrying any other token are stale."""
        return self._query_token

    @property
    def groups(self) -> dict[int, SuggestionGroup]:
        return dict(self._groups)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def state_of(self, type_index: int) -> QueryState:
        """Query state of one mention type."""
        if type_index in self._groups:
            return QueryState.RESOLVED
        if type_index in self._querying:
            return QueryState.QUERYING
        if self._detecting:
            return QueryState.DETECTING
        return QueryState.IDLE

    # ---- flattened view ---------------------------------------------------

    def entries(self) -> list[SuggestionEntry]:
        return flatten_suggestions(self._groups)

    def suggestions_count(self) -> int:
        return sum(len(group.results) for group in self._groups.values())

    def entry_at(self, index: int | None) -> SuggestionEntry | None:
        if index is None:
            return None
        entries = self.entries()
        return entries[index] if 0 <= index < len(entries) else None

    def focused_entry(self) -> SuggestionEntry | None:
        return self.entry_at(self.focus.focus_index)

    def children_count(self) -> int:
        """Number of children of the opened entry (0 if nothing is open)."""
        entry = self.entry_at(self.focus.open_index)
        return len(entry.candidate.children) if entry else 0

    def focused_child(self) -> Candidate | None:
        entry = self.entry_at(self.focus.open_index)
        if entry is None or self.focus.child_index is None:
            return None
        children = entry.candidate.children
        return children[self.focus.child_index] if self.focus.child_index < len(children) else None

    # ---- navigation -------------------------------------------------------

    def shift_focus(self, delta: int) -> FocusState:
        self.focus = shift_focus(self.focus, delta, self.suggestions_count())
        return self.focus

    def shift_child_focus(self, delta: int) -> FocusState:
        self.focus = shift_child_focus(self.focus, delta, self.children_count(), self.suggestions_count())
        return self.focus

    def open_focused(self, index: int | None = None) -> FocusState:
        """Open an entry (the focused one by default) to navigate its children."""
        target = self.focus.focus_index if index is None else index
        if self.entry_at(target) is not None:
            self.focus = open_focused(self.focus, target)
        return self.focus

    def close_open(self) -> FocusState:
        self.focus = close_open(self.focus)
        return self.focus

    # ---- query lifecycle --------------------------------------------------

    def _invalidate(self) -> None:
        self._query_token += 1
        self._groups = {}
        self._querying = {}
        for pending in self._pending:
            if inspect.iscoroutine(pending.awaitable):
                pending.awaitable.close()
            elif isinstance(pending.awaitable, asyncio.Future):
                pending.awaitable.cancel()
        self._pending = []

    def update_queries(
        self,
        value: str,
        plain_text: str,
        selection_start: int,
        selection_end: int | None = None,
    ) -> tuple[int, int] | None:
        """Re-run trigger detection for the current caret or selection.

        Invalidates all earlier queries, then:

        - for a non-empty range and types configured for highlight-to-tag,
          queries with the highlighted word (expanded to word and mention
          boundaries);
        - for a caret inside a mention, queries to replace that mention;
        - otherwise matches each type's trigger against the text between the
          end of the last mention and the caret.

        Args:
            value: Current markup document.
            plain_text: Its plain-text view.
            selection_start: Selection start (the caret when collapsed).
            selection_end: Selection end; defaults to selection_start.

        Returns:
            The expanded selection when highlight-to-tag adjusted it, else None.
        """
        if selection_end is None:
            selection_end = selection_start

        self._invalidate()
        self.focus = FocusState()
        self._detecting = True
        try:
            projection = project(value, self._registry)

            highlight_types = [index for index, config in enumerate(self._registry) if config.highlight_to_tag]
            if selection_start != selection_end:
                if not highlight_types or not plain_text[selection_start:selection_end]:
                    return None
                start, end = selection_start, selection_end
                if not self.is_japanese:
                    start, end = expand_to_word_boundaries(plain_text, start, end, self.space_character)
                    start, end = expand_to_mentions(projection, start, end)
                for type_index in highlight_types:
                    self.begin_query(type_index, "", start, end, plain_text, highlighted=True)
                return start, end

            position = map_projection_index(projection, selection_start, Correction.NULL)
            if position is None:
                mention = mention_at(projection, selection_start)
                if mention is not None:
                    self.begin_query(
                        mention.type_index,
                        "",
                        mention.plain_text_start,
                        mention.plain_text_end,
                        plain_text,
                        replace_target=ReplaceTarget.from_mention(mention),
                    )
                return None

            substring_start = get_end_of_last_mention(value[:position], self._registry)
            substring = plain_text[substring_start:selection_start]
            for type_index, config in enumerate(self._registry):
                regex = make_trigger_regex(config.trigger, config.allow_space_in_query, ignore_space=self.is_japanese)
                match = regex.search(substring)
                if match is None:
                    continue
                sequence_start = substring_start + match.start(1)
                self.begin_query(
                    type_index,
                    match.group(2),
                    sequence_start,
                    sequence_start + len(match.group(1)),
                    plain_text,
                )
            return None
        finally:
            self._detecting = False

    def begin_query(
        self,
        type_index: int,
        query: str,
        sequence_start: int,
        sequence_end: int,
        plain_text: str,
        replace_target: ReplaceTarget | None = None,
        highlighted: bool = False,
    ) -> QueryInfo:
        """Dispatch a query to a type's data source under the current token.

        Synchronous results are applied immediately; awaitables are queued for
        wait_for_pending(); providers returning None must call the callback.

        Raises:
            MentionQueryError: If type_index is not registered.
        """
        if not 0 <= type_index < len(self._registry):
            raise MentionQueryError(f"Unknown mention type index: {type_index}")
        config = self._registry[type_index]
        if config.preserve_value:
            query = ""

        info = QueryInfo(
            type_index=type_index,
            query=query,
            sequence_start=sequence_start,
            sequence_end=sequence_end,
            plain_text=plain_text,
            highlighted=highlighted,
        )
        token = self._query_token
        self._querying[type_index] = info
        logger.debug("Querying type %d for %r (token %d)", type_index, query, token)

        provider = make_data_provider(config.data, config.ignore_accents)
        callback = functools.partial(self.receive_results, token, info, replace_target=replace_target)
        result = provider(query, callback)

        if result is None:
            return info
        if inspect.isawaitable(result):
            self._pending.append(_PendingQuery(token, info, replace_target, result))
            return info
        self.receive_results(token, info, result, replace_target=replace_target)
        return info

    def receive_results(
        self,
        token: int,
        query_info: QueryInfo,
        results: Sequence[Any] | None,
        replace_target: ReplaceTarget | None = None,
    ) -> bool:
        """Apply provider results unless they belong to a superseded query.

        Returns:
            True if applied, False if the token was stale.
        """
        if token != self._query_token:
            logger.debug(
                "Discarding stale results for type %d (token %d, current %d)",
                query_info.type_index,
                token,
                self._query_token,
            )
            return False

        self._querying.pop(query_info.type_index, None)
        self._groups[query_info.type_index] = SuggestionGroup(
            query_info=query_info,
            results=to_candidates(results or ()),
            replace_target=replace_target,
        )
        self.focus = clamp_focus(self.focus, self.suggestions_count())
        return True

    async def wait_for_pending(self) -> None:
        """Await queued provider awaitables and apply their (non-stale) results."""
        pending, self._pending = self._pending, []
        if not pending:
            return
        outcomes = await asyncio.gather(*(item.awaitable for item in pending), return_exceptions=True)
        for item, results in zip(pending, outcomes):
            if isinstance(results, BaseException):
                logger.warning("Data provider for type %d failed: %s", item.query_info.type_index, results)
                if item.token == self._query_token:
                    self._querying.pop(item.query_info.type_index, None)
                continue
            self.receive_results(item.token, item.query_info, results, replace_target=item.replace_target)

    def cancel_query(self) -> None:
        """Drop all queries and results; late results will be discarded."""
        active = bool(self._groups or self._querying or self._pending)
        self._invalidate()
        self.focus = FocusState()
        if active:
            self.last_outcome = QueryState.CANCELLED

    # ---- commit -----------------------------------------------------------

    def commit_query(
        self,
        candidate: Candidate,
        group: SuggestionGroup,
        value: str,
        caret: int | None = None,
    ) -> ChangeResult:
        """Insert a candidate as a mention and close the session.

        Args:
            candidate: Chosen candidate (top-level or child).
            group: Group the candidate was offered in.
            value: Current markup document.
            caret: Caret position, used to locate a preserved word.

        Returns:
            New value, plain text, mentions and collapsed caret.

        Raises:
            MentionQueryError: If group is not one of the session's current groups.
        """
        if self._groups.get(group.query_info.type_index) is not group:
            raise MentionQueryError(f"No active query for mention type {group.query_info.type_index}")

        info = group.query_info
        config = self._registry[info.type_index]
        projection = project(value, self._registry)
        plain_text = projection.plain_text

        display = candidate.display_text
        word: WordSpan | None = None
        replace: tuple[int, int, int, int] | None = None
        target = group.replace_target

        if target is not None:
            replace = (target.plain_start, target.plain_end, target.markup_start, target.markup_end)
            if config.preserve_value:
                display = target.raw_display
        elif info.highlighted:
            word = WordSpan(info.sequence_start, info.sequence_end, plain_text[info.sequence_start : info.sequence_end])
        elif config.preserve_value and isinstance(config.trigger, str):
            word = find_preserved_word(
                plain_text,
                info.sequence_end if caret is None else caret,
                config.trigger,
                self.space_character,
                single_character_words=self.is_japanese,
            )
        if word is not None:
            display = word.text

        insertion = compose_insertion(
            projection,
            config,
            candidate.id,
            display,
            candidate.meta_data,
            sequence_start=info.sequence_start,
            sequence_end=info.sequence_end,
            word=word,
            replace=replace,
            space_character=self.space_character,
        )
        new_value, new_plain_text = insertion.apply(value, plain_text)
        logger.debug("Inserted mention %r of type %d at %d", candidate.id, info.type_index, insertion.markup_start)

        if config.on_add is not None:
            config.on_add(candidate.id, display)

        self._invalidate()
        self.focus = FocusState()
        self.last_outcome = QueryState.INSERTED
        return ChangeResult(
            value=new_value,
            plain_text=new_plain_text,
            mentions=get_mentions(new_value, self._registry, self.candidate_index),
            selection_start=insertion.caret,
            selection_end=insertion.caret,
        )

    def select_focused(self, value: str, caret: int | None = None) -> ChangeResult | None:
        """Commit the focused top-level entry, if any."""
        entry = self.focused_entry()
        if entry is None:
            return None
        return self.commit_query(entry.candidate, entry.group, value, caret)

    def select_child_focused(self, value: str, caret: int | None = None) -> ChangeResult | None:
        """Commit the focused child of the opened entry, if any."""
        entry = self.entry_at(self.focus.open_index)
        child = self.focused_child()
        if entry is None or child is None:
            return None
        return self.commit_query(child, entry.group, value, caret)
