"""Emotion time capsule — bounded emotion history with period summaries."""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError

from psytrack.capsule.analysis import (
    dominant_emotion,
    emotion_distribution,
    emotion_insight,
    emotion_trends,
    emotional_volatility,
    uniform_distribution,
)
from psytrack.history import RingBuffer
from psytrack.models import (
    CapsuleExport,
    EmotionCategory,
    EmotionState,
    EmotionSummary,
    TimeCapsuleEntry,
    TimePeriod,
    TrendDirection,
    now_ms,
)

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_LOOKBACK_MS = 24 * 60 * 60 * 1000
EMPTY_VOLATILITY = 0.5


class EmotionTimeCapsule:
    """Two bounded logs, media-tagged entries and bare emotional states.

    Both logs evict their oldest record once *max_entries* is reached.
    Records may arrive out of timestamp order; every query filters or
    sorts by timestamp itself.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._max_entries = max_entries
        self._entries: RingBuffer[TimeCapsuleEntry] = RingBuffer(max_entries)
        self._states: RingBuffer[EmotionState] = RingBuffer(max_entries)

    # ── Ingestion ─────────────────────────────────────────────

    def add_entry(self, entry: TimeCapsuleEntry) -> None:
        self._entries.append(entry)

    def add_emotion_state(self, state: EmotionState) -> None:
        self._states.append(state)

    # ── Queries ───────────────────────────────────────────────

    def get_entries(self) -> list[TimeCapsuleEntry]:
        return self._entries.to_list()

    def get_states(self) -> list[EmotionState]:
        return self._states.to_list()

    def get_entries_by_emotion(self, emotion: EmotionCategory) -> list[TimeCapsuleEntry]:
        return [e for e in self._entries if e.emotion_tag == emotion]

    def get_entries_by_time_period(self, period: TimePeriod) -> list[TimeCapsuleEntry]:
        return [e for e in self._entries if period.start <= e.timestamp <= period.end]

    def get_entries_by_context(self, context: str) -> list[TimeCapsuleEntry]:
        """Entries whose context contains *context*, case-insensitively."""
        needle = context.lower()
        return [e for e in self._entries if e.context and needle in e.context.lower()]

    def get_states_by_time_period(self, period: TimePeriod) -> list[EmotionState]:
        return [s for s in self._states if period.start <= s.timestamp <= period.end]

    # ── Summaries ─────────────────────────────────────────────

    def summarize_history(
        self,
        period: TimePeriod | None = None,
        *,
        now: int | None = None,
    ) -> EmotionSummary:
        """Distribution, dominant emotion, trends and volatility for *period*.

        The default period runs from the earliest stored record to *now*.
        """
        period = period or self._default_period(now)
        entries = self.get_entries_by_time_period(period)
        states = self.get_states_by_time_period(period)

        if not entries and not states:
            return EmotionSummary(
                dominant_emotion=EmotionCategory.NEUTRAL,
                emotion_distribution=uniform_distribution(),
                trends=[],
                volatility=EMPTY_VOLATILITY,
                period=period,
            )

        distribution = emotion_distribution(entries, states)
        return EmotionSummary(
            dominant_emotion=dominant_emotion(distribution),
            emotion_distribution=distribution,
            trends=emotion_trends(entries, states, period),
            volatility=emotional_volatility(states),
            period=period,
        )

    def generate_therapist_summary(
        self,
        period: TimePeriod | None = None,
        *,
        now: int | None = None,
    ) -> str:
        """Deterministic templated prose built from :meth:`summarize_history`."""
        summary = self.summarize_history(period, now=now)
        label = period.label if period is not None and period.label else "the recorded period"
        dominant = summary.dominant_emotion
        share = round(summary.emotion_distribution[dominant] * 100)

        parts = [
            f"During {label}, the dominant emotion was {dominant.value} "
            f"({share}% of recordings)."
        ]

        notable = [
            t for t in summary.trends
            if t.frequency > 2 and t.trend != TrendDirection.STABLE
        ]
        if notable:
            listed = ", ".join(f"{t.emotion.value} is {t.trend.value}" for t in notable)
            parts.append(f"Notable trends: {listed}.")

        if summary.volatility > 0.7:
            parts.append("Emotional states have been highly variable.")
        elif summary.volatility < 0.3:
            parts.append("Emotional states have been relatively stable.")

        parts.append(emotion_insight(dominant))
        return " ".join(parts)

    # ── Export / import ───────────────────────────────────────

    def export_data(self) -> CapsuleExport:
        """Snapshot both logs, oldest first, for an external persistence layer."""
        return CapsuleExport(entries=self.get_entries(), states=self.get_states())

    def import_data(self, data: CapsuleExport | dict[str, Any] | str | bytes) -> bool:
        """Replace both logs with *data*.

        Accepts a :class:`CapsuleExport`, its dict form, or its JSON text.
        A malformed payload is logged and ignored, leaving the capsule as is.
        """
        try:
            if isinstance(data, CapsuleExport):
                payload = data
            elif isinstance(data, (str, bytes)):
                payload = CapsuleExport.model_validate_json(data)
            else:
                payload = CapsuleExport.model_validate(data)
        except ValidationError as exc:
            logger.warning("capsule.import_rejected", errors=exc.error_count())
            return False

        self._entries = RingBuffer(self._max_entries, payload.entries)
        self._states = RingBuffer(self._max_entries, payload.states)
        logger.info(
            "capsule.imported",
            entries=len(self._entries),
            states=len(self._states),
        )
        return True

    def clear_entries(self) -> None:
        """Empty both logs."""
        self._entries.clear()
        self._states.clear()

    def purge_before(self, cutoff: int) -> int:
        """Drop every record older than *cutoff*; return how many were removed."""
        before = len(self)
        self._entries = RingBuffer(
            self._max_entries, [e for e in self._entries if e.timestamp >= cutoff]
        )
        self._states = RingBuffer(
            self._max_entries, [s for s in self._states if s.timestamp >= cutoff]
        )
        return before - len(self)

    # ── Internals ─────────────────────────────────────────────

    def _default_period(self, now: int | None) -> TimePeriod:
        end = now if now is not None else now_ms()
        timestamps = [e.timestamp for e in self._entries] + [s.timestamp for s in self._states]
        start = min(timestamps) if timestamps else end - DEFAULT_LOOKBACK_MS
        return TimePeriod(start=start, end=end)

    def __len__(self) -> int:
        return len(self._entries) + len(self._states)
