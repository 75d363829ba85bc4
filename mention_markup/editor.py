"""Editing-session facade tying markup, reconciliation and suggestions together.

A host text field forwards its events (text changes, selection changes, key
presses, clicks on suggestions, IME composition and clipboard actions) to a
MentionEditor and applies the ChangeResult it gets back.

Example:
    >>> registry = MentionRegistry([MentionTypeConfig(data=["john", "jane"])])
    >>> editor = MentionEditor(registry)
    >>> _ = editor.handle_change("hi @ja", 6)
    >>> editor.handle_key(Key.RETURN).change.value
    'hi @[jane](jane)'
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mention_markup.markup.clipboard import ClipboardPayload
from mention_markup.markup.clipboard import copy_selection
from mention_markup.markup.clipboard import cut_selection
from mention_markup.markup.clipboard import paste
from mention_markup.markup.index_mapper import map_markup_index
from mention_markup.markup.index_mapper import map_projection_index
from mention_markup.markup.models import ChangeResult
from mention_markup.markup.models import Correction
from mention_markup.markup.models import Mention
from mention_markup.markup.projector import get_mentions
from mention_markup.markup.projector import get_plain_text
from mention_markup.markup.projector import project
from mention_markup.markup.reconciler import SelectionDelta
from mention_markup.markup.reconciler import apply_change_to_value
from mention_markup.markup.reconciler import changed_region
from mention_markup.registry import MentionRegistry
from mention_markup.registry import MentionTypeConfig
from mention_markup.suggestions.candidates import CandidateIndexCache
from mention_markup.suggestions.session import SuggestionSession
from mention_markup.suggestions.triggers import DEFAULT_LANGUAGE
from mention_markup.suggestions.triggers import detect_language

logger = logging.getLogger(__name__)


class Key(str, Enum):
    """Keys the suggestion list reacts to."""

    TAB = "Tab"
    RETURN = "Enter"
    ESCAPE = "Escape"
    UP = "ArrowUp"
    DOWN = "ArrowDown"
    LEFT = "ArrowLeft"
    RIGHT = "ArrowRight"


@dataclass(frozen=True)
class KeyResult:
    """Outcome of a key press.

    Attributes:
        handled: True if the host should suppress the key's default action.
        change: New value when the key inserted a mention.
    """

    handled: bool
    change: ChangeResult | None = None


def _removed(mention: Mention, start: int, old_end: int) -> bool:
    """Whether replacing the plain range [start, old_end) removes the mention."""
    if start < mention.plain_text_end and old_end > mention.plain_text_start:
        return True
    return mention.plain_text_start < start < mention.plain_text_end


class MentionEditor:
    """State of one mentions input: value, selection, composition and suggestions."""

    def __init__(
        self,
        registry: MentionRegistry,
        value: str = "",
        *,
        accordion: bool = False,
        space_character: str | None = None,
        language: str | None = None,
    ) -> None:
        """Initialize editor.

        Args:
            registry: Mention types.
            value: Initial markup document.
            accordion: Candidates with children open instead of inserting.
            space_character: Word-boundary character; derived from the
                language when omitted.
            language: Initial language; Japanese text switches it to ``"ja"``.
        """
        self.value = value
        self.accordion = accordion
        self.selection_start: int | None = None
        self.selection_end: int | None = None
        self.composing = False
        self._base_language = language or DEFAULT_LANGUAGE
        self._index_cache = CandidateIndexCache()
        self.session = SuggestionSession(
            registry,
            space_character=space_character,
            language=self._base_language,
        )
        self._refresh_candidate_index()

    @property
    def registry(self) -> MentionRegistry:
        return self.session.registry

    @property
    def language(self) -> str:
        return self.session.language or self._base_language

    @property
    def candidate_index(self) -> dict[str, Any]:
        return dict(self.session.candidate_index)

    @property
    def plain_text(self) -> str:
        return get_plain_text(self.value, self.registry)

    @property
    def mentions(self) -> list[Mention]:
        return get_mentions(self.value, self.registry, self.session.candidate_index)

    def _result(self, selection_start: int | None, selection_end: int | None) -> ChangeResult:
        return ChangeResult(
            value=self.value,
            plain_text=self.plain_text,
            mentions=self.mentions,
            selection_start=selection_start,
            selection_end=selection_end,
        )

    def _apply(self, change: ChangeResult | None) -> ChangeResult | None:
        if change is not None:
            self.value = change.value
            self.selection_start = change.selection_start
            self.selection_end = change.selection_end
        return change

    def _refresh_candidate_index(self) -> None:
        static: list[Any] = []
        for config in self.registry:
            if config.has_static_data:
                static.extend(config.data)
        self.session.candidate_index = self._index_cache.get(static)

    # ---- text and selection ----------------------------------------------

    def handle_change(
        self,
        new_plain_text: str,
        selection_start: int,
        selection_end: int | None = None,
    ) -> ChangeResult:
        """Reconcile an edit of the plain text into the markup value.

        Args:
            new_plain_text: Field content after the edit.
            selection_start: Selection start after the edit.
            selection_end: Selection end after the edit; defaults to the start.

        Returns:
            New value, plain text, mentions and the caret to restore.
        """
        if selection_end is None:
            selection_end = selection_start

        old_projection = project(self.value, self.registry)
        selection = SelectionDelta(
            selection_start_before=self.selection_start,
            selection_end_before=self.selection_end,
            selection_end_after=selection_end,
        )
        self.value = apply_change_to_value(self.value, new_plain_text, selection, self.registry)

        # A deleted mention takes characters outside the host's selection with
        # it; the caret goes back to where the mention started.
        if self.selection_end is not None and old_projection.plain_text != new_plain_text:
            start, old_end, new_end = changed_region(old_projection.plain_text, new_plain_text, selection)
            for mention in old_projection.mentions:
                if not mention.plain_text_start <= selection_start < mention.plain_text_end:
                    continue
                if _removed(mention, start, old_end) and self.selection_end > mention.plain_text_start:
                    selection_start = mention.plain_text_start + (new_end - start)
                    selection_end = selection_start
                break

        plain_text = self.plain_text
        language = detect_language(plain_text, default=self._base_language)
        if language != self.session.language:
            logger.debug("Switching language to %s", language)
            self.session.language = language

        self.selection_start = selection_start
        self.selection_end = selection_end
        if not self.composing:
            self._update_queries()
        return self._result(selection_start, selection_end)

    def handle_select(self, selection_start: int, selection_end: int | None = None) -> ChangeResult | None:
        """Record a selection change and refresh suggestions.

        Returns:
            A ChangeResult carrying the adjusted selection when highlight-to-tag
            expanded it, else None.
        """
        if selection_end is None:
            selection_end = selection_start
        self.selection_start = selection_start
        self.selection_end = selection_end
        if self.composing:
            return None
        expanded = self._update_queries()
        if expanded is None or expanded == (selection_start, selection_end):
            return None
        self.selection_start, self.selection_end = expanded
        return self._result(*expanded)

    def _update_queries(self) -> tuple[int, int] | None:
        start, end = self.selection_start, self.selection_end
        if start is None or end is None:
            return None
        highlight = any(config.highlight_to_tag for config in self.registry)
        if start != end and not highlight:
            self.session.cancel_query()
            return None
        return self.session.update_queries(self.value, self.plain_text, start, end)

    # ---- suggestion list -------------------------------------------------

    def handle_key(self, key: Key) -> KeyResult:
        """Route a key press to the suggestion list while it has entries."""
        session = self.session
        if session.suggestions_count() == 0:
            return KeyResult(handled=False)

        if key is Key.ESCAPE:
            session.cancel_query()
            return KeyResult(handled=True)

        if key in (Key.UP, Key.DOWN):
            delta = 1 if key is Key.DOWN else -1
            if session.focus.is_open:
                session.shift_child_focus(delta)
            else:
                session.shift_focus(delta)
            return KeyResult(handled=True)

        if key is Key.RIGHT and self.accordion:
            entry = session.focused_entry()
            if entry is not None and entry.candidate.children:
                session.open_focused()
                return KeyResult(handled=True)
            return KeyResult(handled=False)

        if key is Key.LEFT and self.accordion:
            if session.focus.is_open:
                session.close_open()
                return KeyResult(handled=True)
            return KeyResult(handled=False)

        if key in (Key.RETURN, Key.TAB):
            if session.focus.is_open:
                change = session.select_child_focused(self.value, self.selection_start)
                return KeyResult(handled=True, change=self._apply(change))
            entry = session.focused_entry()
            if entry is None:
                return KeyResult(handled=False)
            if key is Key.RETURN and self.accordion and entry.candidate.children:
                session.open_focused()
                return KeyResult(handled=True)
            change = session.select_focused(self.value, self.selection_start)
            return KeyResult(handled=True, change=self._apply(change))

        return KeyResult(handled=False)

    def select_suggestion(self, index: int) -> ChangeResult | None:
        """Handle a click on a top-level suggestion.

        In accordion mode a candidate with children toggles open instead of
        being inserted.
        """
        session = self.session
        entry = session.entry_at(index)
        if entry is None:
            return None
        if self.accordion and entry.candidate.children:
            if session.focus.open_index == index:
                session.close_open()
            else:
                session.open_focused(index)
            return None
        return self._apply(session.commit_query(entry.candidate, entry.group, self.value, self.selection_start))

    def select_child_suggestion(self, child_index: int) -> ChangeResult | None:
        """Handle a click on a child of the opened suggestion."""
        session = self.session
        entry = session.entry_at(session.focus.open_index)
        if entry is None or not 0 <= child_index < len(entry.candidate.children):
            return None
        child = entry.candidate.children[child_index]
        return self._apply(session.commit_query(child, entry.group, self.value, self.selection_start))

    def set_data(self, type_index: int, candidates: Iterable[Any]) -> None:
        """Replace a type's static candidates and refresh the candidate index."""
        types = list(self.registry.types)
        types[type_index] = dataclasses.replace(types[type_index], data=tuple(candidates))
        self.session.registry = MentionRegistry(types)
        self._refresh_candidate_index()

    # ---- composition -----------------------------------------------------

    def composition_start(self) -> None:
        """IME composition began; suggestions are frozen until it ends."""
        self.composing = True

    def composition_end(self) -> ChangeResult | None:
        """IME composition ended; refresh suggestions for the current selection."""
        self.composing = False
        if self.selection_start is None:
            return None
        return self.handle_select(self.selection_start, self.selection_end)

    # ---- clipboard -------------------------------------------------------

    def _selection(self) -> tuple[int, int]:
        start = self.selection_start or 0
        end = self.selection_end if self.selection_end is not None else start
        return start, end

    def copy(self) -> ClipboardPayload:
        start, end = self._selection()
        return copy_selection(self.value, self.registry, start, end)

    def _spliced_range(self, start: int, end: int) -> tuple[int, int]:
        # Selection edges inside a mention widen the splice to the whole mention.
        projection = project(self.value, self.registry)
        markup_start = map_projection_index(projection, start, Correction.START)
        markup_end = map_projection_index(projection, end, Correction.END)
        return map_markup_index(projection, markup_start), map_markup_index(projection, markup_end)

    def cut(self) -> tuple[ClipboardPayload, ChangeResult]:
        start, end = self._selection()
        caret, _ = self._spliced_range(start, end)
        payload, self.value = cut_selection(self.value, self.registry, start, end)
        self.selection_start = self.selection_end = caret
        return payload, self._result(caret, caret)

    def paste(self, payload: ClipboardPayload | str) -> ChangeResult:
        """Insert clipboard content over the selection; the caret ends after it."""
        start, end = self._selection()
        plain_start, plain_end = self._spliced_range(start, end)
        kept_length = len(self.plain_text) - (plain_end - plain_start)
        self.value = paste(self.value, self.registry, start, end, payload)
        caret = plain_start + len(self.plain_text) - kept_length
        self.selection_start = self.selection_end = caret
        return self._result(caret, caret)


def create_editor(*types: MentionTypeConfig, value: str = "", **kwargs: Any) -> MentionEditor:
    """Build an editor from mention type configs."""
    return MentionEditor(MentionRegistry(list(types)), value, **kwargs)
