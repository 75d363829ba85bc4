"""Markup scanning, projection, index mapping and edit reconciliation."""

from .clipboard import ClipboardPayload
from .clipboard import copy_selection
from .clipboard import cut_selection
from .clipboard import paste
from .index_mapper import expand_to_mentions
from .index_mapper import find_mention_at
from .index_mapper import get_end_of_last_mention
from .index_mapper import map_markup_index
from .index_mapper import map_plain_text_index
from .index_mapper import map_projection_index
from .index_mapper import mention_at
from .insertion import Insertion
from .insertion import WordSpan
from .insertion import compose_insertion
from .insertion import find_preserved_word
from .insertion import make_mentions_markup
from .models import ChangeResult
from .models import Correction
from .models import LiteralSpan
from .models import Mention
from .models import Segment
from .projector import Projection
from .projector import get_mentions
from .projector import get_plain_text
from .projector import project
from .reconciler import SelectionDelta
from .reconciler import apply_change_to_value
from .reconciler import changed_region
from .reconciler import splice_string
from .scanner import iterate_markup
from .scanner import scan_markup

__all__ = [
    "ChangeResult",
    "ClipboardPayload",
    "Correction",
    "Insertion",
    "LiteralSpan",
    "Mention",
    "Projection",
    "Segment",
    "SelectionDelta",
    "WordSpan",
    "apply_change_to_value",
    "changed_region",
    "compose_insertion",
    "copy_selection",
    "cut_selection",
    "expand_to_mentions",
    "find_mention_at",
    "find_preserved_word",
    "get_end_of_last_mention",
    "get_mentions",
    "get_plain_text",
    "iterate_markup",
    "make_mentions_markup",
    "map_markup_index",
    "map_plain_text_index",
    "map_projection_index",
    "mention_at",
    "paste",
    "project",
    "scan_markup",
    "splice_string",
]
