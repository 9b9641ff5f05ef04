"""Style profile data model: the durable summary of a user's writing."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from notestyle.exceptions import InvalidProfileError

SCHEMA_VERSION = 1
EXPORT_VERSION = "1.0"

Tone = Literal["formal", "neutral", "casual"]
Structure = Literal["bullets", "mixed", "paragraphs"]
Verbosity = Literal["short", "medium", "long"]
SampleSource = Literal["manual", "note"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to plain JSON types using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)


class TrainingStats(_CamelModel):
    """How much writing the profile has seen."""

    confidence: int = Field(default=0, ge=0, le=100)
    samples_analyzed: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    last_trained_at: Optional[datetime] = None


class StyleMetrics(_CamelModel):
    """Continuous style scores.

    The defaults are the neutral midpoints of a fresh profile and double as
    the fallback for any metric missing from stored data.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    avg_words_per_sentence: float = Field(default=14, ge=0)
    avg_words_per_sample: float = Field(default=80, ge=0)
    punctuation_rate: float = Field(default=0.12, ge=0)  # punctuation chars per token
    emoji_rate: float = Field(default=0.0, ge=0)  # emoji per token
    question_rate: float = Field(default=0.05, ge=0)  # question marks per sentence
    exclamation_rate: float = Field(default=0.02, ge=0)  # exclamations per sentence
    capitalization_rate: float = Field(default=0.08, ge=0)  # ALLCAPS tokens per token
    bullet_rate: float = Field(default=0.1, ge=0)  # bullet lines per line
    formality_score: float = Field(default=50, ge=0, le=100)
    brevity_score: float = Field(default=50, ge=0, le=100)


class StyleTags(_CamelModel):
    """Categorical summary, always derived from metrics."""

    tone: Tone = "neutral"
    structure: Structure = "mixed"
    verbosity: Verbosity = "medium"


class UserOverrides(_CamelModel):
    """Manual pins that win over the derived tags when set."""

    tone: Optional[Tone] = None
    structure: Optional[Structure] = None
    verbosity: Optional[Verbosity] = None
    preferred_phrases: list[str] = Field(default_factory=list)
    avoided_phrases: list[str] = Field(default_factory=list)
    custom_instructions: str = ""


class ProfileSettings(_CamelModel):
    """Behavioral flags for the training service."""

    auto_train: bool = True
    include_notes_on_train: bool = True
    privacy_mode: bool = False


class StyleProfile(_CamelModel):
    """Complete style profile learned from the user's writing samples."""

    schema_version: int = SCHEMA_VERSION
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    training: TrainingStats = Field(default_factory=TrainingStats)
    metrics: StyleMetrics = Field(default_factory=StyleMetrics)
    style_tags: StyleTags = Field(default_factory=StyleTags)
    user_overrides: UserOverrides = Field(default_factory=UserOverrides)
    settings: ProfileSettings = Field(default_factory=ProfileSettings)


class StyleAnalysis(_CamelModel):
    """Features extracted from one batch of samples. Never persisted alone."""

    training: TrainingStats
    metrics: StyleMetrics
    style_tags: StyleTags


class WritingSample(_CamelModel):
    """One unit of training input kept in the sample library."""

    id: str
    text: str
    source: SampleSource = "manual"
    added_at: datetime = Field(default_factory=utcnow)
    word_count: int = Field(default=0, ge=0)


class ProfileBundle(_CamelModel):
    """Export format: the profile together with the sample library."""

    profile: StyleProfile
    samples: list[WritingSample] = Field(default_factory=list)
    exported_at: Optional[datetime] = None
    version: str = EXPORT_VERSION


def default_profile(now: datetime | None = None) -> StyleProfile:
    """Build a fresh default profile: neutral metrics, no training."""
    now = now or utcnow()
    return StyleProfile(created_at=now, updated_at=now)


_PROFILE_KEYS = frozenset(
    key
    for name, field in StyleProfile.model_fields.items()
    for key in (name, field.alias)
    if key
)


def _format_errors(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    ]


def _decode(data: Mapping[str, Any] | str | bytes) -> Mapping[str, Any]:
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise InvalidProfileError(errors=[f"not valid JSON ({exc.msg})"]) from exc
    if not isinstance(data, Mapping):
        raise InvalidProfileError(errors=["top level must be a JSON object"])
    return data


def parse_profile(data: Mapping[str, Any] | str | bytes) -> StyleProfile:
    """Validate external profile data.

    Absent fields take their defaults; anything present but malformed
    raises InvalidProfileError.
    """
    payload = _decode(data)
    if not _PROFILE_KEYS.intersection(payload):
        raise InvalidProfileError(errors=["no style profile fields found"])
    try:
        return StyleProfile.model_validate(payload)
    except ValidationError as exc:
        raise InvalidProfileError(errors=_format_errors(exc)) from exc


def parse_bundle(
    data: Mapping[str, Any] | str | bytes,
) -> tuple[StyleProfile, list[WritingSample]]:
    """Validate an export bundle, or a bare profile, for import."""
    payload = _decode(data)
    if "profile" not in payload:
        return parse_profile(payload), []
    if not isinstance(payload["profile"], Mapping):
        raise InvalidProfileError(errors=["profile: must be a JSON object"])
    profile = parse_profile(payload["profile"])
    try:
        bundle = ProfileBundle.model_validate({**payload, "profile": profile})
    except ValidationError as exc:
        raise InvalidProfileError(errors=_format_errors(exc)) from exc
    return bundle.profile, bundle.samples
