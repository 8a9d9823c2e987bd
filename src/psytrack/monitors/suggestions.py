"""Suggestion text for fired alerts, with activity-specific overrides."""

from __future__ import annotations

from dataclasses import dataclass

from psytrack.models import Alert, EmotionCategory as E

_SUSTAINED_SUGGESTIONS: dict[E, str] = {
    E.SAD: (
        "You've been feeling sad for a while. Consider reaching out to someone "
        "you trust or doing an activity you enjoy."
    ),
    E.ANXIOUS: (
        "You've been feeling anxious. Try a deep breathing exercise: breathe in "
        "for 4 counts, hold for 4, and exhale for 6."
    ),
    E.ANGRY: (
        "You've been feeling angry. Consider taking a short break or trying a "
        "physical activity to release tension."
    ),
    E.FRUSTRATED: (
        "You've been feeling frustrated. It might help to step away from the "
        "current task and return to it later with fresh eyes."
    ),
    E.OVERWHELMED: (
        "You've been feeling overwhelmed. Try breaking down your tasks into "
        "smaller steps and focus on one thing at a time."
    ),
}

DEFAULT_SUGGESTION = "Consider taking a short break to check in with yourself."

FATIGUE_SUGGESTION = (
    "Consider taking a rest or short nap if possible. Hydrate and take a break from screens."
)

VOLATILITY_SUGGESTION = (
    "Your emotions have been changing frequently. Consider a grounding exercise "
    "or taking a break from stimulating activities."
)

POSITIVE_TREND_SUGGESTION = (
    "You've been maintaining a positive emotional state. Great job! Take note "
    "of what's working well for you."
)


def sustained_suggestion(emotion: E) -> str:
    return _SUSTAINED_SUGGESTIONS.get(emotion, DEFAULT_SUGGESTION)


def sudden_change_suggestion(emotion: E, *, negative_shift: bool) -> str:
    if negative_shift:
        return (
            f"Noticed a shift to {emotion.value}. Take a moment to breathe and "
            "reflect on what triggered this change."
        )
    return f"Your mood has shifted to {emotion.value}. Notice what's working well for you right now."


# ── Activity overrides ────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ActivityOverride:
    """Replace the suggestion for *emotions* when the activity mentions a keyword."""

    keywords: tuple[str, ...]
    emotions: frozenset[E]
    suggestion: str


# Keyword groups are tried in order; the first group whose keywords match
# the activity label is the only one applied.
_ACTIVITY_OVERRIDES: tuple[tuple[ActivityOverride, ...], ...] = (
    (
        ActivityOverride(
            keywords=("homework", "study"),
            emotions=frozenset({E.FRUSTRATED, E.OVERWHELMED}),
            suggestion=(
                "Consider taking a short break from your homework. Try the Pomodoro "
                "technique: 25 minutes of focus followed by a 5-minute break."
            ),
        ),
        ActivityOverride(
            keywords=("homework", "study"),
            emotions=frozenset({E.TIRED}),
            suggestion=(
                "You seem tired while studying. A short walk or stretching might "
                "help restore your energy."
            ),
        ),
    ),
    (
        ActivityOverride(
            keywords=("game", "play"),
            emotions=frozenset({E.ANGRY, E.FRUSTRATED}),
            suggestion=(
                "Games can sometimes be frustrating. Remember it's okay to take a "
                "break and come back to it later."
            ),
        ),
    ),
    (
        ActivityOverride(
            keywords=("social", "friend", "family"),
            emotions=frozenset({E.ANXIOUS, E.OVERWHELMED}),
            suggestion=(
                "Social situations can be overwhelming. It's okay to take a few "
                "minutes alone to recharge if needed."
            ),
        ),
    ),
)


def apply_activity_context(alerts: list[Alert], activity: str) -> None:
    """Stamp *activity* onto every alert and rewrite matching suggestions in place."""
    label = activity.lower()
    group = next(
        (g for g in _ACTIVITY_OVERRIDES if any(kw in label for kw in g[0].keywords)),
        (),
    )
    for alert in alerts:
        alert.context = activity
        for override in group:
            if alert.emotion in override.emotions:
                alert.suggestion = override.suggestion
                break
