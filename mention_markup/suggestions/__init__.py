"""Candidates, data providers, trigger detection and the suggestion session."""

from .candidates import Candidate
from .candidates import CandidateIndexCache
from .candidates import RichCandidate
from .candidates import SimpleCandidate
from .candidates import build_candidate_index
from .candidates import to_candidate
from .candidates import to_candidates
from .focus import FocusState
from .providers import DataProviderProtocol
from .providers import filter_candidates
from .providers import make_data_provider
from .providers import strip_accents
from .session import QueryInfo
from .session import QueryState
from .session import ReplaceTarget
from .session import SuggestionEntry
from .session import SuggestionGroup
from .session import SuggestionSession
from .session import flatten_suggestions
from .triggers import detect_language
from .triggers import expand_to_word_boundaries
from .triggers import make_trigger_regex

__all__ = [
    "Candidate",
    "CandidateIndexCache",
    "DataProviderProtocol",
    "FocusState",
    "QueryInfo",
    "QueryState",
    "ReplaceTarget",
    "RichCandidate",
    "SimpleCandidate",
    "SuggestionEntry",
    "SuggestionGroup",
    "SuggestionSession",
    "build_candidate_index",
    "detect_language",
    "expand_to_word_boundaries",
    "filter_candidates",
    "flatten_suggestions",
    "make_data_provider",
    "make_trigger_regex",
    "strip_accents",
    "to_candidate",
    "to_candidates",
]
