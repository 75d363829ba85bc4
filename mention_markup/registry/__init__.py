"""Mention type registry and markup template compiler."""

from .compiler import GroupPositions
from .compiler import MentionRegistry
from .compiler import markup_to_regex
from .config import DEFAULT_MARKUP
from .config import DEFAULT_TRIGGER
from .config import MentionTypeConfig
from .config import default_display_transform

__all__ = [
    "DEFAULT_MARKUP",
    "DEFAULT_TRIGGER",
    "GroupPositions",
    "MentionRegistry",
    "MentionTypeConfig",
    "default_display_transform",
    "markup_to_regex",
]
