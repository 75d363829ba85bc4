"""Keyboard focus over the flattened suggestion list.

Transitions are pure functions returning a new FocusState. One level of
nesting is supported: an opened candidate ("accordion" mode) exposes its
children through ``child_index``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FocusState:
    """Focused top-level entry, opened entry and focused child."""

    focus_index: int | None = 0
    open_index: int | None = None
    child_index: int | None = None

    @property
    def is_open(self) -> bool:
        return self.open_index is not None


def shift_focus(state: FocusState, delta: int, count: int) -> FocusState:
    """Move the top-level focus by delta, wrapping around, and close any open entry."""
    if count <= 0:
        return FocusState()
    if state.focus_index is not None:
        current = state.focus_index
    else:
        current = state.open_index or 0
    return FocusState(focus_index=(current + delta) % count)


def open_focused(state: FocusState, index: int) -> FocusState:
    """Open entry index and focus its first child."""
    return FocusState(focus_index=None, open_index=index, child_index=0)


def close_open(state: FocusState) -> FocusState:
    """Close the opened entry and focus it again."""
    if state.open_index is None:
        return state
    return FocusState(focus_index=state.open_index)


def shift_child_focus(state: FocusState, delta: int, children_count: int, count: int) -> FocusState:
    """Move focus among the opened entry's children.

    Moving past the last child advances to the next top-level entry; moving
    before the first child closes back to the parent.

    Args:
        state: Current focus.
        delta: +1 (down) or -1 (up).
        children_count: Number of children of the opened entry.
        count: Number of top-level entries.
    """
    if state.open_index is None or children_count <= 0:
        return shift_focus(state, delta, count)

    if state.child_index is None:
        if delta > 0:
            return FocusState(focus_index=None, open_index=state.open_index, child_index=0)
        return close_open(state)

    new_child = (children_count + state.child_index + delta) % children_count
    if delta > 0 and new_child == 0:
        return FocusState(focus_index=(state.open_index + 1) % count if count else 0)
    if delta < 0 and new_child == children_count - 1:
        return close_open(state)
    return FocusState(focus_index=None, open_index=state.open_index, child_index=new_child)


def clamp_focus(state: FocusState, count: int) -> FocusState:
    """Keep the top-level focus inside a list that may have shrunk."""
    if state.open_index is not None and state.open_index >= count:
        return FocusState(focus_index=max(count - 1, 0))
    if state.focus_index is None or state.focus_index < count:
        return state
    return FocusState(
        focus_index=max(count - 1, 0),
        open_index=state.open_index,
        child_index=state.child_index,
    )
