"""Summary statistics over time-capsule records.

Pure functions over lists of :class:`TimeCapsuleEntry` and
:class:`EmotionState`; the :class:`EmotionTimeCapsule` selects the records
for a period and delegates here.
"""

from __future__ import annotations

from typing import Sequence

from psytrack.models import (
    EmotionCategory,
    EmotionState,
    EmotionTrend,
    TimeCapsuleEntry,
    TimePeriod,
    TrendDirection,
)

TREND_THRESHOLD = 0.1
DEFAULT_INTENSITY = 0.5
MIN_TREND_OCCURRENCES = 2
MIN_VOLATILITY_STATES = 3


def uniform_distribution() -> dict[EmotionCategory, float]:
    share = 1 / len(EmotionCategory)
    return {emotion: share for emotion in EmotionCategory}


def emotion_counts(
    entries: Sequence[TimeCapsuleEntry],
    states: Sequence[EmotionState],
) -> dict[EmotionCategory, int]:
    counts = {emotion: 0 for emotion in EmotionCategory}
    for entry in entries:
        counts[entry.emotion_tag] += 1
    for state in states:
        counts[state.mood] += 1
    return counts


def emotion_distribution(
    entries: Sequence[TimeCapsuleEntry],
    states: Sequence[EmotionState],
) -> dict[EmotionCategory, float]:
    """Share of each category across entries and states (uniform when empty)."""
    counts = emotion_counts(entries, states)
    total = sum(counts.values())
    if total == 0:
        return uniform_distribution()
    return {emotion: count / total for emotion, count in counts.items()}


def dominant_emotion(distribution: dict[EmotionCategory, float]) -> EmotionCategory:
    """Argmax of *distribution*; ties resolve to the earlier category, all-zero to neutral."""
    dominant = EmotionCategory.NEUTRAL
    best = 0.0
    for emotion in EmotionCategory:
        share = distribution.get(emotion, 0.0)
        if share > best:
            dominant, best = emotion, share
    return dominant


def split_period(period: TimePeriod) -> tuple[TimePeriod, TimePeriod]:
    """Bisect *period* at its midpoint: ``[start, mid]`` and ``(mid, end]``."""
    mid = period.start + (period.end - period.start) // 2
    return (
        TimePeriod(start=period.start, end=mid),
        TimePeriod(start=mid + 1, end=period.end),
    )


def _in(period: TimePeriod, timestamp: int) -> bool:
    return period.start <= timestamp <= period.end


def emotion_trends(
    entries: Sequence[TimeCapsuleEntry],
    states: Sequence[EmotionState],
    period: TimePeriod,
) -> list[EmotionTrend]:
    """Per-category trend direction between the two halves of *period*.

    *entries* and *states* must already be restricted to *period*.  Only
    categories with at least two occurrences are reported, most frequent
    first.
    """
    first, second = split_period(period)
    first_dist = emotion_distribution(
        [e for e in entries if _in(first, e.timestamp)],
        [s for s in states if _in(first, s.timestamp)],
    )
    second_dist = emotion_distribution(
        [e for e in entries if _in(second, e.timestamp)],
        [s for s in states if _in(second, s.timestamp)],
    )

    trends: list[EmotionTrend] = []
    for emotion in EmotionCategory:
        tagged = [e for e in entries if e.emotion_tag == emotion]
        moods = [s for s in states if s.mood == emotion]
        frequency = len(tagged) + len(moods)
        if frequency < MIN_TREND_OCCURRENCES:
            continue

        intensities = [
            e.intensity if e.intensity is not None else DEFAULT_INTENSITY for e in tagged
        ] + [s.confidence for s in moods]

        change = second_dist[emotion] - first_dist[emotion]
        if change > TREND_THRESHOLD:
            direction = TrendDirection.INCREASING
        elif change < -TREND_THRESHOLD:
            direction = TrendDirection.DECREASING
        else:
            direction = TrendDirection.STABLE

        contexts = dict.fromkeys(
            r.context for r in (*tagged, *moods) if r.context
        )
        trends.append(EmotionTrend(
            emotion=emotion,
            frequency=frequency,
            average_intensity=sum(intensities) / len(intensities),
            trend=direction,
            contexts=list(contexts),
        ))

    trends.sort(key=lambda t: t.frequency, reverse=True)
    return trends


def emotional_volatility(states: Sequence[EmotionState]) -> float:
    """Share of adjacent time-ordered states whose mood differs, in [0, 1].

    Fewer than three states carry no signal and score 0.
    """
    if len(states) < MIN_VOLATILITY_STATES:
        return 0.0
    ordered = sorted(states, key=lambda s: s.timestamp)
    changes = sum(1 for prev, cur in zip(ordered, ordered[1:]) if prev.mood != cur.mood)
    return min(max(changes / (len(ordered) - 1), 0.0), 1.0)


# ── Therapist prose ───────────────────────────────────────────

_POSITIVE_INSIGHT = (
    "Positive emotional states have been predominant, which is beneficial for "
    "overall wellbeing."
)
_ANGER_INSIGHT = (
    "Frustration/anger has been common. Exploring healthy expression of these "
    "emotions could be beneficial."
)

_INSIGHTS: dict[EmotionCategory, str] = {
    EmotionCategory.HAPPY: _POSITIVE_INSIGHT,
    EmotionCategory.EXCITED: _POSITIVE_INSIGHT,
    EmotionCategory.CALM: _POSITIVE_INSIGHT,
    EmotionCategory.FOCUSED: _POSITIVE_INSIGHT,
    EmotionCategory.SAD: (
        "Sadness has been a prominent emotion. Consider exploring potential "
        "triggers and coping strategies."
    ),
    EmotionCategory.ANXIOUS: (
        "Anxiety has been frequently recorded. Relaxation techniques and "
        "identifying anxiety triggers may be helpful."
    ),
    EmotionCategory.ANGRY: _ANGER_INSIGHT,
    EmotionCategory.FRUSTRATED: _ANGER_INSIGHT,
    EmotionCategory.TIRED: (
        "Fatigue has been a recurring theme. Consider discussing sleep patterns "
        "and energy management."
    ),
    EmotionCategory.OVERWHELMED: (
        "Feeling overwhelmed has been common. Breaking down tasks and stress "
        "management techniques may help."
    ),
    EmotionCategory.NEUTRAL: (
        "Emotional states have been predominantly neutral. This could indicate "
        "emotional regulation or potential emotional suppression."
    ),
}


def emotion_insight(emotion: EmotionCategory) -> str:
    return _INSIGHTS[emotion]
