"""Classifier lookup tables — keyword lexicon, tone table and cut points.

The modality classifiers never hard-code their thresholds: they read them
from a :class:`ClassifierTables` instance injected into the fusion engine.
:func:`default_tables` returns the stock English tables; build a custom
instance to swap locales or tune cut points without touching the
classifiers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from psytrack.config import ConfigurationError
from psytrack.models import EmotionCategory as E
from psytrack.models import Modality

# ── Keyword lexicon ───────────────────────────────────────────

_DEFAULT_KEYWORDS: dict[E, tuple[str, ...]] = {
    E.HAPPY: ("happy", "joy", "delighted", "pleased", "cheerful", "content", "glad", "thrilled"),
    E.SAD: ("sad", "unhappy", "depressed", "down", "blue", "gloomy", "miserable", "sorrow"),
    E.ANGRY: ("angry", "mad", "furious", "irritated", "annoyed", "rage", "outraged", "hostile"),
    E.ANXIOUS: ("anxious", "worried", "nervous", "uneasy", "tense", "stressed", "concerned", "afraid"),
    E.CALM: ("calm", "peaceful", "relaxed", "tranquil", "serene", "composed", "collected", "quiet"),
    E.EXCITED: ("excited", "thrilled", "eager", "enthusiastic", "animated", "energetic", "lively"),
    E.TIRED: ("tired", "exhausted", "sleepy", "fatigued", "drained", "weary", "lethargic"),
    E.FRUSTRATED: ("frustrated", "annoyed", "irritated", "agitated", "exasperated", "bothered"),
    E.FOCUSED: ("focused", "concentrated", "attentive", "engaged", "absorbed", "alert", "mindful"),
    E.OVERWHELMED: ("overwhelmed", "swamped", "overloaded", "stressed", "burdened", "pressured"),
    E.NEUTRAL: ("neutral", "okay", "fine", "average", "indifferent", "balanced", "moderate"),
}

# Tone label (lower-case) → predictions added to the quadrant rule output
_DEFAULT_TONES: dict[str, tuple[tuple[E, float], ...]] = {
    "excited": ((E.EXCITED, 0.85),),
    "flat": ((E.NEUTRAL, 0.8), (E.TIRED, 0.6)),
    "angry": ((E.ANGRY, 0.9),),
    "sad": ((E.SAD, 0.85),),
    "happy": ((E.HAPPY, 0.8),),
}

_DEFAULT_WEIGHTS: dict[Modality, float] = {
    Modality.FACE: 0.4,  # facial expression is the most direct signal
    Modality.VOICE: 0.3,
    Modality.JOURNAL: 0.25,
    Modality.WEARABLE: 0.15,  # objective but only loosely tied to emotion
}


# ── Threshold groups ──────────────────────────────────────────


def _require_unit(group: object, *names: str) -> None:
    for name in names:
        value = getattr(group, name)
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"{type(group).__name__}.{name} must be within [0, 1], got {value}")


def _require_order(group: object, low: str, high: str) -> None:
    if getattr(group, low) > getattr(group, high):
        raise ConfigurationError(f"{type(group).__name__}.{low} must not exceed {high}")


@dataclass(frozen=True, slots=True)
class FacialThresholds:
    """Cut points on the first two L2-normalised embedding components."""

    primary_high: float = 0.7
    primary_low: float = 0.3
    secondary_high: float = 0.6
    secondary_low: float = 0.3
    empty_confidence: float = 0.5

    def __post_init__(self) -> None:
        _require_unit(self, "primary_high", "primary_low", "secondary_high", "secondary_low", "empty_confidence")
        _require_order(self, "primary_low", "primary_high")
        _require_order(self, "secondary_low", "secondary_high")


@dataclass(frozen=True, slots=True)
class VoiceThresholds:
    """Quadrant boundaries over clamped pitch and energy."""

    high_energy: float = 0.7
    high_pitch: float = 0.7
    low_energy: float = 0.3
    low_pitch: float = 0.4
    anxious_pitch: float = 0.6

    def __post_init__(self) -> None:
        _require_unit(self, "high_energy", "high_pitch", "low_energy", "low_pitch", "anxious_pitch")
        _require_order(self, "low_energy", "high_energy")
        _require_order(self, "low_pitch", "high_pitch")


@dataclass(frozen=True, slots=True)
class WearableThresholds:
    high_heart_rate: float = 100.0
    low_heart_rate: float = 60.0
    active_steps: float = 100.0  # separates exercise from anxiety at high HR
    high_steps: float = 120.0
    low_steps: float = 20.0
    missing_confidence: float = 0.3

    def __post_init__(self) -> None:
        if self.low_heart_rate <= 0:
            raise ConfigurationError("WearableThresholds.low_heart_rate must be positive")
        if min(self.active_steps, self.low_steps) < 0:
            raise ConfigurationError("WearableThresholds step counts must not be negative")
        _require_order(self, "low_heart_rate", "high_heart_rate")
        _require_order(self, "low_steps", "high_steps")
        _require_unit(self, "missing_confidence")


@dataclass(frozen=True, slots=True)
class TextThresholds:
    max_confidence: float = 0.95
    no_match_confidence: float = 0.4

    def __post_init__(self) -> None:
        _require_unit(self, "max_confidence", "no_match_confidence")


# ── Tables ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ClassifierTables:
    """Immutable configuration consumed by the modality classifiers."""

    keywords: Mapping[E, tuple[str, ...]]
    tones: Mapping[str, tuple[tuple[E, float], ...]]
    weights: Mapping[Modality, float]
    facial: FacialThresholds = field(default_factory=FacialThresholds)
    voice: VoiceThresholds = field(default_factory=VoiceThresholds)
    wearable: WearableThresholds = field(default_factory=WearableThresholds)
    text: TextThresholds = field(default_factory=TextThresholds)

    def __post_init__(self) -> None:
        # Freeze caller-supplied dicts so a shared instance cannot drift.
        try:
            keywords = {E(k): tuple(v) for k, v in self.keywords.items()}
            tones = {
                label.lower(): tuple((E(mood), float(conf)) for mood, conf in entries)
                for label, entries in self.tones.items()
            }
            weights = {Modality(k): float(v) for k, v in self.weights.items()}
        except ValueError as exc:
            raise ConfigurationError(f"invalid classifier table entry: {exc}") from exc

        for label, entries in tones.items():
            if any(not 0.0 <= conf <= 1.0 for _, conf in entries):
                raise ConfigurationError(f"tone {label!r} confidences must be within [0, 1]")
        object.__setattr__(self, "keywords", MappingProxyType(keywords))
        object.__setattr__(self, "tones", MappingProxyType(tones))

        missing = set(Modality) - set(weights)
        if missing or any(w <= 0 for w in weights.values()):
            raise ConfigurationError(
                f"weights must be positive for every modality (missing: {sorted(m.value for m in missing)})"
            )
        object.__setattr__(self, "weights", MappingProxyType(weights))


def default_tables() -> ClassifierTables:
    """Return the stock English classifier tables."""
    return ClassifierTables(
        keywords=_DEFAULT_KEYWORDS,
        tones=_DEFAULT_TONES,
        weights=_DEFAULT_WEIGHTS,
    )
