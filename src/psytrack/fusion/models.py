"""Pydantic models for per-modality signals and classifier output.

These models represent:
- The four optional modality inputs delivered by the perception layer
- A single ranked (category, confidence) prediction
- One classifier's ranked predictions plus its reliability weight
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from psytrack.models import EmotionCategory, Modality, now_ms


# ── Modality inputs ───────────────────────────────────────────


class FacialSignal(BaseModel):
    """Facial feature summary produced by on-device extraction."""

    embedding: list[float] = Field(
        default_factory=list,
        description="Feature vector; only its direction is used after L2 normalisation.",
    )
    confidence: float | None = Field(
        None,
        description="Detector confidence reported upstream (informational).",
    )
    timestamp: int = Field(default_factory=now_ms)


class VoiceSignal(BaseModel):
    """Voice tone measurement; pitch and energy are expected on a 0-1 scale."""

    pitch: float = 0.5
    energy: float = 0.5
    tone: str = Field("", description="Coarse tone label, e.g. 'flat' or 'excited'.")
    timestamp: int = Field(default_factory=now_ms)


class TextSignal(BaseModel):
    """Free text, typically a journal entry."""

    text: str = ""
    timestamp: int = Field(default_factory=now_ms)


class WearableSignal(BaseModel):
    """Wearable metrics; either reading may be missing."""

    heart_rate: float | None = Field(None, description="Beats per minute.")
    step_count: float | None = Field(None, description="Steps in the sampling interval.")
    timestamp: int = Field(default_factory=now_ms)


# ── Classifier output ─────────────────────────────────────────


class EmotionPrediction(BaseModel):
    """A single ranked category prediction."""

    model_config = ConfigDict(frozen=True)

    emotion: EmotionCategory
    confidence: float = Field(ge=0.0, le=1.0)


class ModalityResult(BaseModel):
    """Ranked predictions of one modality classifier and its fixed weight."""

    model_config = ConfigDict(frozen=True)

    modality: Modality
    predictions: tuple[EmotionPrediction, ...] = Field(max_length=3)
    weight: float = Field(gt=0.0)

    def contains(self, emotion: EmotionCategory) -> bool:
        return any(p.emotion == emotion for p in self.predictions)
