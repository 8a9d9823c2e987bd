"""Shared Pydantic models used across psytrack."""

from __future__ import annotations

import time
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def now_ms() -> int:
    """Current wall-clock time as a millisecond epoch."""
    return int(time.time() * 1000)


# ── Enums ─────────────────────────────────────────────────────


class EmotionCategory(str, Enum):
    """Closed set of categorical emotional states.

    Declaration order doubles as the tie-break order wherever an argmax
    over categories is taken.
    """

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    ANXIOUS = "anxious"
    CALM = "calm"
    EXCITED = "excited"
    TIRED = "tired"
    FRUSTRATED = "frustrated"
    FOCUSED = "focused"
    OVERWHELMED = "overwhelmed"
    NEUTRAL = "neutral"


class Modality(str, Enum):
    """Independent signal channels feeding the fusion engine."""

    FACE = "face"
    VOICE = "voice"
    JOURNAL = "journal"
    WEARABLE = "wearable"


class ValenceGroup(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class AlertType(str, Enum):
    SUSTAINED_NEGATIVE = "sustained_negative"
    SUDDEN_CHANGE = "sudden_change"
    RECURRING_PATTERN = "recurring_pattern"
    INTENSITY_SPIKE = "intensity_spike"
    PROLONGED_FATIGUE = "prolonged_fatigue"
    EMOTIONAL_VOLATILITY = "emotional_volatility"
    POSITIVE_TREND = "positive_trend"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MediaType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


POSITIVE_EMOTIONS = frozenset({
    EmotionCategory.HAPPY,
    EmotionCategory.EXCITED,
    EmotionCategory.CALM,
    EmotionCategory.FOCUSED,
})

NEGATIVE_EMOTIONS = frozenset({
    EmotionCategory.SAD,
    EmotionCategory.ANGRY,
    EmotionCategory.ANXIOUS,
    EmotionCategory.FRUSTRATED,
    EmotionCategory.OVERWHELMED,
})


def valence_group(emotion: EmotionCategory) -> ValenceGroup:
    """Bucket an emotion into its coarse valence group (neutral and tired are neutral)."""
    if emotion in POSITIVE_EMOTIONS:
        return ValenceGroup.POSITIVE
    if emotion in NEGATIVE_EMOTIONS:
        return ValenceGroup.NEGATIVE
    return ValenceGroup.NEUTRAL


# ── Data transfer objects ─────────────────────────────────────


class ActivityMetadata(BaseModel):
    """Free-text activity label supplied alongside a fusion or alert check."""

    activity: str
    timestamp: int = Field(default_factory=now_ms)


class EmotionState(BaseModel):
    """A fused emotional state.  Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    mood: EmotionCategory
    confidence: float = Field(ge=0.0, le=1.0)
    source_weights: dict[Modality, float] = Field(default_factory=dict, validate_default=True)
    timestamp: int = Field(default_factory=now_ms)
    context: str | None = None

    # One state is shared by the alert history and the capsule, so the
    # weights are stored read-only.
    @field_validator("source_weights", mode="after")
    @classmethod
    def _freeze_weights(cls, value: dict[Modality, float]) -> Mapping[Modality, float]:
        return MappingProxyType(dict(value))

    @field_serializer("source_weights")
    def _dump_weights(self, value: Mapping[Modality, float]) -> dict[Modality, float]:
        return dict(value)

    def __deepcopy__(self, memo: dict | None = None) -> EmotionState:
        # mappingproxy cannot be deep-copied; the state is immutable anyway.
        return self


class Alert(BaseModel):
    """An alert raised by the pattern detectors of the alert engine."""

    type: AlertType
    emotion: EmotionCategory
    suggestion: str
    severity: AlertSeverity
    triggered_at: int
    duration: int | None = None  # ms, sustained-run alerts only
    context: str | None = None

    @property
    def dismissal_key(self) -> str:
        """Composite key a presentation surface uses to dismiss this alert."""
        return f"{self.type.value}:{self.emotion.value}:{self.triggered_at}"


class TimeCapsuleEntry(BaseModel):
    """A media recording tagged with the emotion it captured."""

    media_url: str
    media_type: MediaType
    emotion_tag: EmotionCategory
    intensity: float | None = Field(None, ge=0.0, le=1.0)
    context: str | None = None
    notes: str | None = None
    timestamp: int = Field(default_factory=now_ms)


class TimePeriod(BaseModel):
    """Inclusive ``[start, end]`` millisecond range with an optional label."""

    start: int
    end: int
    label: str | None = None


class EmotionTrend(BaseModel):
    emotion: EmotionCategory
    frequency: int
    average_intensity: float
    trend: TrendDirection
    contexts: list[str] = Field(default_factory=list)


class EmotionSummary(BaseModel):
    dominant_emotion: EmotionCategory
    emotion_distribution: dict[EmotionCategory, float]
    trends: list[EmotionTrend] = Field(default_factory=list)
    volatility: float = Field(ge=0.0, le=1.0)
    period: TimePeriod


class CapsuleExport(BaseModel):
    """Two-array payload exchanged with the persistence layer."""

    entries: list[TimeCapsuleEntry] = Field(default_factory=list)
    states: list[EmotionState] = Field(default_factory=list)
