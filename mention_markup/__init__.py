"""Mention Markup - typed mentions embedded in plain-text values.

A value is stored as markup (e.g. ``Hi @[John](user:1)!``) while the user
edits its plain-text view (``Hi John!``). This package scans markup against
configurable templates, maps positions between the two views, reconciles
plain-text edits back into markup, and runs the trigger/suggestion/insert
cycle for adding new mentions.

Core concept: a MentionRegistry compiles every type's template into one
pattern; everything else is derived from scanning with it.
"""

from __future__ import annotations

# Editor facade
from mention_markup.editor import Key
from mention_markup.editor import KeyResult
from mention_markup.editor import MentionEditor
from mention_markup.editor import create_editor

# Exceptions
from mention_markup.exceptions import MentionConfigError
from mention_markup.exceptions import MentionError
from mention_markup.exceptions import MentionQueryError
from mention_markup.exceptions import MentionSettingsError

# Markup operations
from mention_markup.markup import ChangeResult
from mention_markup.markup import ClipboardPayload
from mention_markup.markup import Correction
from mention_markup.markup import LiteralSpan
from mention_markup.markup import Mention
from mention_markup.markup import Projection
from mention_markup.markup import SelectionDelta
from mention_markup.markup import apply_change_to_value
from mention_markup.markup import find_mention_at
from mention_markup.markup import get_mentions
from mention_markup.markup import get_plain_text
from mention_markup.markup import iterate_markup
from mention_markup.markup import make_mentions_markup
from mention_markup.markup import map_markup_index
from mention_markup.markup import map_plain_text_index
from mention_markup.markup import project

# Placeholders
from mention_markup.placeholders import Placeholder
from mention_markup.placeholders import find_position_of_capturing_group

# Registry
from mention_markup.registry import MentionRegistry
from mention_markup.registry import MentionTypeConfig

# Settings
from mention_markup.settings import EditorSettings
from mention_markup.settings import load_settings
from mention_markup.settings import parse_settings

# Suggestions
from mention_markup.suggestions import Candidate
from mention_markup.suggestions import QueryState
from mention_markup.suggestions import RichCandidate
from mention_markup.suggestions import SimpleCandidate
from mention_markup.suggestions import SuggestionSession
from mention_markup.suggestions import build_candidate_index

__all__ = [
    # Editor
    "Key",
    "KeyResult",
    "MentionEditor",
    "create_editor",
    # Exceptions
    "MentionConfigError",
    "MentionError",
    "MentionQueryError",
    "MentionSettingsError",
    # Markup
    "ChangeResult",
    "ClipboardPayload",
    "Correction",
    "LiteralSpan",
    "Mention",
    "Projection",
    "SelectionDelta",
    "apply_change_to_value",
    "find_mention_at",
    "get_mentions",
    "get_plain_text",
    "iterate_markup",
    "make_mentions_markup",
    "map_markup_index",
    "map_plain_text_index",
    "project",
    # Placeholders
    "Placeholder",
    "find_position_of_capturing_group",
    # Registry
    "MentionRegistry",
    "MentionTypeConfig",
    # Settings
    "EditorSettings",
    "load_settings",
    "parse_settings",
    # Suggestions
    "Candidate",
    "QueryState",
    "RichCandidate",
    "SimpleCandidate",
    "SuggestionSession",
    "build_candidate_index",
]
