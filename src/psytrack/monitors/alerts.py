"""Alert engine — temporal pattern detection over fused emotional states.

The engine keeps a bounded, time-ordered history of confident states and,
on every :meth:`EmotionAlertEngine.check_alerts` call, evaluates four
independent detectors:

======================  ==========================================  ========
Detector                Fires when                                  Cooldown
======================  ==========================================  ========
Sustained negative      newest negative mood run >= sustained time  1x base
Prolonged fatigue       newest ``tired`` run >= 1.5x sustained      1x base
Sudden change           newest two moods cross valence groups       1x base
Emotional volatility    >= N mood changes inside the window         2x base
Positive trend          >= 4 of the last 5 moods positive           3x base
======================  ==========================================  ========

Cooldowns are plain timestamp comparisons against a last-fired table with
one slot per :class:`AlertType`; no timers are involved.
"""

from __future__ import annotations

import structlog

from psytrack.config import AlertConfig
from psytrack.history import RingBuffer
from psytrack.models import (
    NEGATIVE_EMOTIONS,
    POSITIVE_EMOTIONS,
    ActivityMetadata,
    Alert,
    AlertSeverity,
    AlertType,
    EmotionCategory,
    EmotionState,
    now_ms,
    valence_group,
)
from psytrack.monitors.suggestions import (
    FATIGUE_SUGGESTION,
    POSITIVE_TREND_SUGGESTION,
    VOLATILITY_SUGGESTION,
    apply_activity_context,
    sudden_change_suggestion,
    sustained_suggestion,
)

logger = structlog.get_logger(__name__)

# Multiples of the base cooldown, one per alert type.
COOLDOWN_MULTIPLIERS: dict[AlertType, int] = {
    AlertType.SUSTAINED_NEGATIVE: 1,
    AlertType.SUDDEN_CHANGE: 1,
    AlertType.RECURRING_PATTERN: 1,
    AlertType.INTENSITY_SPIKE: 1,
    AlertType.PROLONGED_FATIGUE: 1,
    AlertType.EMOTIONAL_VOLATILITY: 2,
    AlertType.POSITIVE_TREND: 3,
}

# Negative emotions that escalate faster
_HIGH_PRIORITY = frozenset({
    EmotionCategory.ANXIOUS,
    EmotionCategory.OVERWHELMED,
    EmotionCategory.ANGRY,
})

_TREND_WINDOW = 5
_TREND_MIN_POSITIVE = 4
_VOLATILITY_MIN_STATES = 3


class EmotionAlertEngine:
    """Detect concerning or encouraging patterns in a stream of emotional states.

    Parameters
    ----------
    config : AlertConfig | None
        Detector thresholds, cooldown and history capacity.
    """

    def __init__(self, config: AlertConfig | None = None) -> None:
        self._config = config or AlertConfig()
        self._history: RingBuffer[EmotionState] = RingBuffer(self._config.max_history)
        self._last_fired: dict[AlertType, int | None] = dict.fromkeys(AlertType)

    @property
    def config(self) -> AlertConfig:
        return self._config

    # ── History management ────────────────────────────────────

    def add_state(self, state: EmotionState) -> bool:
        """Retain *state* if it is confident enough and not older than the newest entry.

        Returns ``True`` when the state was stored.
        """
        if state.confidence < self._config.min_confidence:
            return False
        newest = self._history.newest()
        if newest is not None and state.timestamp < newest.timestamp:
            logger.warning(
                "alerts.out_of_order_state",
                timestamp=state.timestamp,
                newest=newest.timestamp,
            )
            return False
        self._history.append(state)
        return True

    def clear_history(self) -> None:
        self._history.clear()

    def get_history(self) -> list[EmotionState]:
        """Return retained states, oldest first."""
        return self._history.to_list()

    @property
    def history_size(self) -> int:
        return len(self._history)

    def last_fired(self, alert_type: AlertType) -> int | None:
        return self._last_fired[alert_type]

    # ── Evaluation ────────────────────────────────────────────

    def check_alerts(
        self,
        activity: ActivityMetadata | None = None,
        *,
        now: int | None = None,
    ) -> list[Alert]:
        """Evaluate every detector and return the alerts that fired.

        Multiple detectors may fire on the same call.  With fewer than two
        retained states the result is always empty.
        """
        if len(self._history) < 2:
            return []
        now = now if now is not None else now_ms()

        alerts: list[Alert] = []
        for detector in (
            self._check_sustained,
            self._check_sudden_change,
            self._check_volatility,
            self._check_positive_trend,
        ):
            alerts.extend(detector(now))

        if activity is not None:
            apply_activity_context(alerts, activity.activity)

        for alert in alerts:
            logger.info(
                "alerts.fired",
                type=alert.type.value,
                emotion=alert.emotion.value,
                severity=alert.severity.value,
                context=alert.context,
            )
        return alerts

    # ── Detectors ─────────────────────────────────────────────

    def _check_sustained(self, now: int) -> list[Alert]:
        mood, duration = self._current_run()
        cfg = self._config

        if mood in NEGATIVE_EMOTIONS and duration >= cfg.sustained_emotion_ms:
            if self._cooling_down(AlertType.SUSTAINED_NEGATIVE, now):
                return []
            return [self._fire(Alert(
                type=AlertType.SUSTAINED_NEGATIVE,
                emotion=mood,
                suggestion=sustained_suggestion(mood),
                severity=self._sustained_severity(mood, duration),
                triggered_at=now,
                duration=duration,
            ))]

        if mood == EmotionCategory.TIRED and duration >= cfg.fatigue_ms:
            if self._cooling_down(AlertType.PROLONGED_FATIGUE, now):
                return []
            return [self._fire(Alert(
                type=AlertType.PROLONGED_FATIGUE,
                emotion=mood,
                suggestion=FATIGUE_SUGGESTION,
                severity=AlertSeverity.MEDIUM,
                triggered_at=now,
                duration=duration,
            ))]
        return []

    def _check_sudden_change(self, now: int) -> list[Alert]:
        if self._cooling_down(AlertType.SUDDEN_CHANGE, now):
            return []
        previous, latest = self._history[-2], self._history[-1]
        if latest.mood == previous.mood:
            return []
        if now - latest.timestamp >= self._config.sudden_change_window_ms:
            return []
        if valence_group(latest.mood) == valence_group(previous.mood):
            return []

        negative_shift = (
            latest.mood in NEGATIVE_EMOTIONS and previous.mood not in NEGATIVE_EMOTIONS
        )
        return [self._fire(Alert(
            type=AlertType.SUDDEN_CHANGE,
            emotion=latest.mood,
            suggestion=sudden_change_suggestion(latest.mood, negative_shift=negative_shift),
            severity=AlertSeverity.MEDIUM if negative_shift else AlertSeverity.LOW,
            triggered_at=now,
        ))]

    def _check_volatility(self, now: int) -> list[Alert]:
        if self._cooling_down(AlertType.EMOTIONAL_VOLATILITY, now):
            return []
        window = self._config.volatility_window_ms
        recent = [s for s in self._history if now - s.timestamp <= window]
        if len(recent) < _VOLATILITY_MIN_STATES:
            return []
        if count_mood_changes(recent) < self._config.volatility_threshold:
            return []
        return [self._fire(Alert(
            type=AlertType.EMOTIONAL_VOLATILITY,
            emotion=recent[-1].mood,
            suggestion=VOLATILITY_SUGGESTION,
            severity=AlertSeverity.HIGH,
            triggered_at=now,
        ))]

    def _check_positive_trend(self, now: int) -> list[Alert]:
        if self._cooling_down(AlertType.POSITIVE_TREND, now):
            return []
        if len(self._history) < _TREND_WINDOW:
            return []
        recent = self._history.tail(_TREND_WINDOW)
        positives = sum(1 for s in recent if s.mood in POSITIVE_EMOTIONS)
        if positives < _TREND_MIN_POSITIVE or recent[-1].mood not in POSITIVE_EMOTIONS:
            return []
        return [self._fire(Alert(
            type=AlertType.POSITIVE_TREND,
            emotion=recent[-1].mood,
            suggestion=POSITIVE_TREND_SUGGESTION,
            severity=AlertSeverity.LOW,
            triggered_at=now,
        ))]

    # ── Internals ─────────────────────────────────────────────

    def _current_run(self) -> tuple[EmotionCategory, int]:
        """Mood of the newest state and how long it has persisted (ms)."""
        latest = self._history[-1]
        start = latest
        for i in range(len(self._history) - 2, -1, -1):
            if self._history[i].mood != latest.mood:
                break
            start = self._history[i]
        return latest.mood, latest.timestamp - start.timestamp

    def _sustained_severity(self, emotion: EmotionCategory, duration: int) -> AlertSeverity:
        threshold = self._config.sustained_emotion_ms
        if emotion in _HIGH_PRIORITY:
            return AlertSeverity.HIGH if duration > threshold * 1.5 else AlertSeverity.MEDIUM
        return AlertSeverity.MEDIUM if duration > threshold * 2 else AlertSeverity.LOW

    def _cooling_down(self, alert_type: AlertType, now: int) -> bool:
        last = self._last_fired[alert_type]
        if last is None:
            return False
        cooldown = self._config.cooldown_ms * COOLDOWN_MULTIPLIERS[alert_type]
        return now - last < cooldown

    def _fire(self, alert: Alert) -> Alert:
        self._last_fired[alert.type] = alert.triggered_at
        return alert


def count_mood_changes(states: list[EmotionState]) -> int:
    """Number of adjacent pairs whose moods differ."""
    return sum(1 for prev, cur in zip(states, states[1:]) if prev.mood != cur.mood)
