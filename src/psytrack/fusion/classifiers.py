"""Modality classifiers — threshold and keyword heuristics per signal channel.

Each classifier is a pure function ``(signal, tables) -> ModalityResult``
returning at most three ranked predictions and the modality's fixed
reliability weight.  None of them raise: missing or degenerate input
yields a low-confidence ``neutral`` prediction instead.

=========  =====================================================  ======
Modality   Rule                                                   Weight
=========  =====================================================  ======
Facial     cut points on the first two L2-normalised components   0.40
Voice      pitch/energy quadrant + tone-label lookup              0.30
Text       whole-word keyword counts, share of all matches        0.25
Wearable   heart-rate and step-count thresholds                   0.15
=========  =====================================================  ======
"""

from __future__ import annotations

import re
from functools import lru_cache

from psytrack.fusion.lexicon import ClassifierTables
from psytrack.fusion.models import (
    FacialSignal,
    ModalityResult,
    TextSignal,
    VoiceSignal,
    WearableSignal,
)
from psytrack.fusion.normalize import clamp, finite, normalize_vector, rank_predictions
from psytrack.models import EmotionCategory as E
from psytrack.models import Modality


def _result(
    modality: Modality,
    pairs: list[tuple[E, float]],
    tables: ClassifierTables,
) -> ModalityResult:
    return ModalityResult(
        modality=modality,
        predictions=rank_predictions(pairs),
        weight=tables.weights[modality],
    )


# ── Facial ────────────────────────────────────────────────────


def classify_facial(signal: FacialSignal, tables: ClassifierTables) -> ModalityResult:
    """Map a facial feature vector to ranked emotions."""
    t = tables.facial
    vector = normalize_vector(signal.embedding)
    if not any(vector):  # empty or all-zero embedding
        return _result(Modality.FACE, [(E.NEUTRAL, t.empty_confidence)], tables)

    v1 = vector[0]
    v2 = vector[1] if len(vector) > 1 else 0.0

    if v1 > t.primary_high:
        pairs = [(E.HAPPY, v1), (E.EXCITED, v1 * 0.8)]
    elif v1 < t.primary_low:
        pairs = [(E.SAD, 1 - v1), (E.TIRED, (1 - v1) * 0.7)]
    elif v2 > t.secondary_high:
        pairs = [(E.ANGRY, v2), (E.FRUSTRATED, v2 * 0.9)]
    elif v2 < t.secondary_low:
        pairs = [(E.CALM, 1 - v2), (E.FOCUSED, (1 - v2) * 0.8)]
    else:
        pairs = [(E.NEUTRAL, 0.6), (E.FOCUSED, 0.4)]
    return _result(Modality.FACE, pairs, tables)


# ── Voice ─────────────────────────────────────────────────────


def classify_voice(signal: VoiceSignal, tables: ClassifierTables) -> ModalityResult:
    """Quadrant rule over pitch/energy, optionally reinforced by the tone label."""
    t = tables.voice
    pitch = clamp(signal.pitch)
    energy = clamp(signal.energy)

    if energy > t.high_energy and pitch > t.high_pitch:
        pairs = [(E.EXCITED, energy * 0.9), (E.HAPPY, pitch * 0.8)]
    elif energy > t.high_energy and pitch < t.low_pitch:
        pairs = [(E.ANGRY, energy * 0.85), (E.FRUSTRATED, (1 - pitch) * 0.7)]
    elif energy < t.low_energy and pitch < t.low_pitch:
        pairs = [(E.SAD, (1 - energy) * 0.8), (E.TIRED, (1 - pitch) * 0.75)]
    elif energy < t.low_energy and pitch > t.anxious_pitch:
        pairs = [(E.ANXIOUS, pitch * 0.7), (E.OVERWHELMED, (1 - energy) * 0.6)]
    else:
        pairs = [(E.CALM, 0.6), (E.NEUTRAL, 0.5)]

    tone = (signal.tone or "").strip().lower()
    if tone:
        pairs.extend(tables.tones.get(tone, ()))
    return _result(Modality.VOICE, pairs, tables)


# ── Text ──────────────────────────────────────────────────────


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


def count_keywords(text: str, tables: ClassifierTables) -> dict[E, int]:
    """Whole-word, case-insensitive keyword hits per category (zero counts omitted)."""
    counts: dict[E, int] = {}
    for emotion, keywords in tables.keywords.items():
        hits = sum(len(_keyword_pattern(kw).findall(text)) for kw in keywords)
        if hits:
            counts[emotion] = hits
    return counts


def classify_text(signal: TextSignal, tables: ClassifierTables) -> ModalityResult:
    """Score categories by their share of all keyword matches in the text."""
    t = tables.text
    counts = count_keywords(signal.text or "", tables)
    total = sum(counts.values())
    if total == 0:
        return _result(Modality.JOURNAL, [(E.NEUTRAL, t.no_match_confidence)], tables)

    pairs = [
        (emotion, min(count / total, t.max_confidence))
        for emotion, count in counts.items()
    ]
    return _result(Modality.JOURNAL, pairs, tables)


# ── Wearable ──────────────────────────────────────────────────


def classify_wearable(signal: WearableSignal, tables: ClassifierTables) -> ModalityResult:
    """Heart-rate and step-count heuristics.

    A zero, negative or non-finite reading counts as missing.
    """
    t = tables.wearable
    heart_rate = max(finite(signal.heart_rate), 0.0)
    steps = max(finite(signal.step_count), 0.0)

    if not heart_rate and not steps:
        return _result(Modality.WEARABLE, [(E.NEUTRAL, t.missing_confidence)], tables)

    pairs: list[tuple[E, float]] = []
    if heart_rate:
        if heart_rate > t.high_heart_rate:
            if steps > t.active_steps:
                pairs.append((E.EXCITED, 0.7))
            else:
                pairs += [(E.ANXIOUS, 0.65), (E.EXCITED, 0.4)]
        elif heart_rate < t.low_heart_rate:
            pairs += [(E.CALM, 0.6), (E.TIRED, 0.5)]
        else:
            pairs += [(E.NEUTRAL, 0.5), (E.FOCUSED, 0.4)]

    if steps:
        if steps > t.high_steps:
            pairs.append((E.EXCITED, 0.6))
        elif steps < t.low_steps:
            pairs += [(E.CALM, 0.5), (E.FOCUSED, 0.4)]

    if not pairs:
        # Moderate steps without a heart-rate reading
        pairs.append((E.NEUTRAL, t.missing_confidence))
    return _result(Modality.WEARABLE, pairs, tables)
