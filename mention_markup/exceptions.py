"""Exception hierarchy for mention-markup."""


class MentionError(Exception):
    """Base exception for all mention-related errors."""


class MentionConfigError(MentionError):
    """Mention type definition is invalid (missing placeholders, ambiguous templates)."""


class MentionSettingsError(MentionConfigError):
    """Settings file could not be loaded (parse error, schema violation)."""


class MentionQueryError(MentionError):
    """Suggestion query referenced an unknown type or has nothing to commit."""
