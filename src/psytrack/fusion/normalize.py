"""Signal normaliser — clamping, vector normalisation and prediction ranking."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from psytrack.fusion.models import EmotionPrediction
from psytrack.models import EmotionCategory

MAX_PREDICTIONS = 3


def finite(value: float | None, default: float = 0.0) -> float:
    """Return *value* as a float, or *default* when missing, NaN or infinite."""
    if value is None:
        return default
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def clamp(value: float | None, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp *value* into ``[lo, hi]``; non-finite input maps to *lo*."""
    return min(max(finite(value, lo), lo), hi)


def normalize_vector(vector: Sequence[float]) -> list[float]:
    """L2-normalise *vector*.

    Non-finite components are treated as zero.  A zero-magnitude vector is
    returned as all zeros of the same length.
    """
    cleaned = [finite(v) for v in vector]
    magnitude = math.hypot(*cleaned) if cleaned else 0.0
    if magnitude == 0.0 or not math.isfinite(magnitude):
        return [0.0] * len(cleaned)
    return [v / magnitude for v in cleaned]


def rank_predictions(
    pairs: Iterable[tuple[EmotionCategory, float]],
    limit: int = MAX_PREDICTIONS,
) -> tuple[EmotionPrediction, ...]:
    """Sort by confidence (descending), keep the best score per category, cap at *limit*.

    Confidences are clamped into [0, 1].  Ties keep their input order.
    """
    ordered = sorted(
        ((emotion, clamp(conf)) for emotion, conf in pairs),
        key=lambda pair: pair[1],
        reverse=True,
    )
    seen: set[EmotionCategory] = set()
    ranked: list[EmotionPrediction] = []
    for emotion, conf in ordered:
        if emotion in seen:
            continue
        seen.add(emotion)
        ranked.append(EmotionPrediction(emotion=emotion, confidence=conf))
        if len(ranked) == limit:
            break
    return tuple(ranked)
