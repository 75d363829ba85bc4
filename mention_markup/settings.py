"""YAML settings for mention types and editors.

Example settings file::

    accordion: false
    types:
      - name: users
        trigger: "@"
        markup: "@[__display__](user:__id__)"
        append_space_on_add: true
        candidates:
          - id: 1
            display: John
          - id: 2
            display: Jane
      - name: tags
        trigger: "#"
        markup: "#[__display__](tag:__id__)"
        candidates: [python, yaml]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator
from pydantic import model_validator

from mention_markup.editor import MentionEditor
from mention_markup.exceptions import MentionSettingsError
from mention_markup.registry import DEFAULT_MARKUP
from mention_markup.registry import DEFAULT_TRIGGER
from mention_markup.registry import MentionRegistry
from mention_markup.registry import MentionTypeConfig
from mention_markup.suggestions.candidates import Candidate
from mention_markup.suggestions.candidates import RichCandidate
from mention_markup.suggestions.candidates import SimpleCandidate

logger = logging.getLogger(__name__)


class CandidateSettings(BaseModel):
    """One static candidate, optionally with nested children."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str = Field(description="Identifier written into the markup")
    display: str | None = Field(default=None, description="Text shown in the plain-text view")
    meta_data: dict[str, str] = Field(default_factory=dict, alias="metaData")
    children: list[CandidateSettings | str] = Field(default_factory=list)

    @field_validator("id", "display", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        # YAML turns ``id: 1`` into an int.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("meta_data", mode="before")
    @classmethod
    def _coerce_meta_data(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {str(key): str(item) for key, item in value.items()}
        return value

    def to_candidate(self) -> Candidate:
        return RichCandidate(
            id=self.id,
            display=self.display,
            meta_data=dict(self.meta_data),
            children=tuple(_to_candidate(child) for child in self.children),
        )


def _to_candidate(item: CandidateSettings | str) -> Candidate:
    return SimpleCandidate(item) if isinstance(item, str) else item.to_candidate()


class MentionTypeSettings(BaseModel):
    """Serializable form of a MentionTypeConfig with static candidates."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    trigger: str = Field(default=DEFAULT_TRIGGER, min_length=1)
    trigger_is_pattern: bool = Field(
        default=False,
        description="Compile trigger as a regex (group 1: replaced run, group 2: query)",
    )
    markup: str = DEFAULT_MARKUP
    append_space_on_add: bool = False
    allow_space_in_query: bool = False
    highlight_to_tag: bool = False
    preserve_value: bool = False
    ignore_accents: bool = False
    merge_candidate_meta_data: bool = False
    candidates: list[CandidateSettings | str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_trigger_pattern(self) -> MentionTypeSettings:
        if self.trigger_is_pattern:
            try:
                pattern = re.compile(self.trigger)
            except re.error as e:
                raise ValueError(f"Invalid trigger pattern {self.trigger!r}: {e}") from e
            if pattern.groups < 2:
                raise ValueError(f"Trigger pattern {self.trigger!r} needs two capturing groups")
        return self

    def to_config(self) -> MentionTypeConfig:
        trigger: str | re.Pattern[str] = re.compile(self.trigger) if self.trigger_is_pattern else self.trigger
        return MentionTypeConfig(
            trigger=trigger,
            markup=self.markup,
            data=tuple(_to_candidate(item) for item in self.candidates),
            append_space_on_add=self.append_space_on_add,
            allow_space_in_query=self.allow_space_in_query,
            highlight_to_tag=self.highlight_to_tag,
            preserve_value=self.preserve_value,
            ignore_accents=self.ignore_accents,
            merge_candidate_meta_data=self.merge_candidate_meta_data,
            name=self.name,
        )


class EditorSettings(BaseModel):
    """Mention types plus editor-wide options."""

    model_config = ConfigDict(extra="forbid")

    types: list[MentionTypeSettings] = Field(default_factory=lambda: [MentionTypeSettings()], min_length=1)
    accordion: bool = False
    language: str | None = None
    space_character: str | None = Field(default=None, min_length=1, max_length=1)

    def build_registry(self) -> MentionRegistry:
        """Compile the configured types.

        Raises:
            MentionConfigError: If a markup template is invalid or two types share one.
        """
        return MentionRegistry([settings.to_config() for settings in self.types])

    def build_editor(self, value: str = "") -> MentionEditor:
        return MentionEditor(
            self.build_registry(),
            value,
            accordion=self.accordion,
            space_character=self.space_character,
            language=self.language,
        )


def parse_settings(data: Mapping[str, Any] | None) -> EditorSettings:
    """Validate already-parsed settings data.

    Raises:
        MentionSettingsError: If data is not a mapping or fails validation.
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise MentionSettingsError(f"Settings must be a mapping, got {type(data).__name__}")
    try:
        return EditorSettings.model_validate(dict(data))
    except ValidationError as e:
        raise MentionSettingsError(f"Invalid mention settings: {e}") from e


def load_settings(path: Path | str) -> EditorSettings:
    """Read and validate a YAML settings file.

    Args:
        path: Path to the YAML file. An empty file yields the defaults.

    Returns:
        Validated settings.

    Raises:
        MentionSettingsError: If the file is missing, is not valid YAML, or
            does not match the settings schema.
    """
    path = Path(path)
    if not path.exists():
        raise MentionSettingsError(f"Settings file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise MentionSettingsError(f"Invalid YAML in {path}: {e}") from e

    logger.debug("Loaded mention settings from %s", path)
    return parse_settings(data)
