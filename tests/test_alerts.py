"""Tests for the emotion alert engine."""

from __future__ import annotations

import pytest

from psytrack.config import AlertConfig, ConfigurationError, Settings
from psytrack.models import ActivityMetadata, AlertSeverity, AlertType, EmotionCategory as E
from psytrack.monitors import EmotionAlertEngine
from psytrack.monitors.alerts import COOLDOWN_MULTIPLIERS, count_mood_changes

T0 = 1_700_000_000_000
MINUTE = 60_000


def _feed(engine: EmotionAlertEngine, make_state, moods_at: list[tuple[str, float]]) -> None:
    for mood, minute in moods_at:
        assert engine.add_state(make_state(mood, minute))


def _at(minutes: float) -> int:
    return T0 + int(minutes * MINUTE)


class TestHistory:
    def test_fewer_than_two_states_never_alerts(self, alert_engine, make_state):
        alert_engine.add_state(make_state("sad", 0))
        assert alert_engine.check_alerts(now=_at(60)) == []

    def test_low_confidence_rejected(self, alert_engine, make_state):
        assert alert_engine.add_state(make_state("sad", 0, confidence=0.5)) is False
        assert alert_engine.history_size == 0

    def test_out_of_order_rejected(self, alert_engine, make_state):
        alert_engine.add_state(make_state("calm", 5))
        assert alert_engine.add_state(make_state("sad", 1)) is False
        assert [s.mood for s in alert_engine.get_history()] == [E.CALM]

    def test_history_bounded(self, make_state):
        engine = EmotionAlertEngine(AlertConfig(max_history=3))
        for minute in range(5):
            engine.add_state(make_state("calm", minute))
        history = engine.get_history()
        assert len(history) == 3
        assert history[0].timestamp == _at(2)

    def test_clear_history(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("calm", 0), ("calm", 1)])
        alert_engine.clear_history()
        assert alert_engine.get_history() == []


class TestSustainedNegative:
    def test_fires_after_sustained_duration(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("sad", 0), ("sad", 5), ("sad", 11)])
        alerts = alert_engine.check_alerts(now=_at(11))
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AlertType.SUSTAINED_NEGATIVE
        assert alert.emotion == E.SAD
        assert alert.severity == AlertSeverity.LOW
        assert alert.duration == 11 * MINUTE
        assert alert.triggered_at == _at(11)

    def test_short_run_does_not_fire(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("calm", 0), ("sad", 2), ("sad", 9)])
        types = {a.type for a in alert_engine.check_alerts(now=_at(20))}
        assert AlertType.SUSTAINED_NEGATIVE not in types

    def test_high_priority_emotion_escalates(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("anxious", 0), ("anxious", 16)])
        alerts = alert_engine.check_alerts(now=_at(16))
        assert alerts[0].severity == AlertSeverity.HIGH

    def test_cooldown_suppresses_repeat(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("sad", 0), ("sad", 11)])
        assert alert_engine.check_alerts(now=_at(11))

        alert_engine.add_state(make_state("sad", 12))
        assert alert_engine.check_alerts(now=_at(12)) == []

        alert_engine.add_state(make_state("sad", 17))
        alerts = alert_engine.check_alerts(now=_at(17))
        assert [a.type for a in alerts] == [AlertType.SUSTAINED_NEGATIVE]
        assert alert_engine.last_fired(AlertType.SUSTAINED_NEGATIVE) == _at(17)


class TestProlongedFatigue:
    def test_needs_longer_run_than_sustained(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("tired", 0), ("tired", 12)])
        assert alert_engine.check_alerts(now=_at(12)) == []

        alert_engine.add_state(make_state("tired", 16))
        alerts = alert_engine.check_alerts(now=_at(16))
        assert [a.type for a in alerts] == [AlertType.PROLONGED_FATIGUE]
        assert alerts[0].severity == AlertSeverity.MEDIUM


class TestSuddenChange:
    def test_negative_shift(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("calm", 0), ("anxious", 1)])
        alerts = alert_engine.check_alerts(now=_at(1))
        assert [a.type for a in alerts] == [AlertType.SUDDEN_CHANGE]
        assert alerts[0].severity == AlertSeverity.MEDIUM
        assert alerts[0].emotion == E.ANXIOUS

    def test_positive_shift_is_low(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("sad", 0), ("happy", 1)])
        alerts = alert_engine.check_alerts(now=_at(1))
        assert alerts[0].severity == AlertSeverity.LOW

    def test_same_valence_group_ignored(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("sad", 0), ("angry", 1)])
        assert alert_engine.check_alerts(now=_at(1)) == []

    def test_cooldown_suppresses_repeat(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("calm", 0), ("anxious", 1)])
        assert alert_engine.check_alerts(now=_at(1))

        alert_engine.add_state(make_state("calm", 2))
        assert alert_engine.check_alerts(now=_at(2)) == []

        alert_engine.add_state(make_state("anxious", 7))
        alerts = alert_engine.check_alerts(now=_at(7))
        assert [a.type for a in alerts] == [AlertType.SUDDEN_CHANGE]

    def test_stale_change_ignored(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("calm", 0), ("anxious", 1)])
        assert alert_engine.check_alerts(now=_at(7)) == []


class TestVolatility:
    def test_frequent_changes(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [
            ("happy", 0), ("sad", 1), ("happy", 2), ("sad", 3), ("happy", 4),
        ])
        alerts = alert_engine.check_alerts(now=_at(4))
        by_type = {a.type: a for a in alerts}
        assert set(by_type) == {AlertType.SUDDEN_CHANGE, AlertType.EMOTIONAL_VOLATILITY}
        assert by_type[AlertType.EMOTIONAL_VOLATILITY].severity == AlertSeverity.HIGH

    def test_changes_outside_window_ignored(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [
            ("happy", 0), ("sad", 1), ("happy", 2), ("sad", 3), ("sad", 40), ("sad", 41),
        ])
        types = {a.type for a in alert_engine.check_alerts(now=_at(41))}
        assert AlertType.EMOTIONAL_VOLATILITY not in types

    def test_double_cooldown(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [
            ("happy", 0), ("sad", 1), ("happy", 2), ("sad", 3), ("happy", 4),
        ])
        assert AlertType.EMOTIONAL_VOLATILITY in {a.type for a in alert_engine.check_alerts(now=_at(4))}

        _feed(alert_engine, make_state, [
            ("sad", 5), ("happy", 6), ("sad", 7), ("happy", 8), ("sad", 9),
        ])
        types = {a.type for a in alert_engine.check_alerts(now=_at(9))}
        assert AlertType.SUDDEN_CHANGE in types
        assert AlertType.EMOTIONAL_VOLATILITY not in types

        alert_engine.add_state(make_state("happy", 15))
        types = {a.type for a in alert_engine.check_alerts(now=_at(15))}
        assert AlertType.EMOTIONAL_VOLATILITY in types
        assert alert_engine.last_fired(AlertType.EMOTIONAL_VOLATILITY) == _at(15)

    def test_count_mood_changes(self, make_state):
        states = [make_state(m, i) for i, m in enumerate(["calm", "calm", "sad", "calm"])]
        assert count_mood_changes(states) == 2


class TestPositiveTrend:
    def test_mostly_positive(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("happy", i) for i in range(5)])
        alerts = alert_engine.check_alerts(now=_at(4))
        assert [a.type for a in alerts] == [AlertType.POSITIVE_TREND]
        assert alerts[0].severity == AlertSeverity.LOW

    def test_longer_cooldown(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("happy", i) for i in range(5)])
        assert alert_engine.check_alerts(now=_at(4))

        alert_engine.add_state(make_state("happy", 14))
        assert alert_engine.check_alerts(now=_at(14)) == []

        alert_engine.add_state(make_state("happy", 20))
        assert [a.type for a in alert_engine.check_alerts(now=_at(20))] == [AlertType.POSITIVE_TREND]

    def test_newest_must_be_positive(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [
            ("happy", 0), ("calm", 1), ("focused", 2), ("happy", 3), ("tired", 4),
        ])
        types = {a.type for a in alert_engine.check_alerts(now=_at(4))}
        assert AlertType.POSITIVE_TREND not in types


class TestActivityContext:
    def test_homework_frustration_suggests_pomodoro(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("frustrated", 0), ("frustrated", 11)])
        alerts = alert_engine.check_alerts(
            ActivityMetadata(activity="Homework time", timestamp=_at(11)),
            now=_at(11),
        )
        assert alerts[0].context == "Homework time"
        assert "Pomodoro" in alerts[0].suggestion

    def test_game_anger_suggests_break(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("angry", 0), ("angry", 11)])
        alerts = alert_engine.check_alerts(
            ActivityMetadata(activity="playing a video game", timestamp=_at(11)),
            now=_at(11),
        )
        assert alerts[0].suggestion.startswith("Games can sometimes be frustrating")

    def test_social_anxiety_suggests_recharging(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("anxious", 0), ("anxious", 11)])
        alerts = alert_engine.check_alerts(
            ActivityMetadata(activity="Family dinner", timestamp=_at(11)),
            now=_at(11),
        )
        assert alerts[0].context == "Family dinner"
        assert alerts[0].suggestion.startswith("Social situations can be overwhelming")

    def test_override_needs_matching_emotion(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("sad", 0), ("sad", 11)])
        alerts = alert_engine.check_alerts(
            ActivityMetadata(activity="playing a video game", timestamp=_at(11)),
            now=_at(11),
        )
        assert alerts[0].suggestion.startswith("You've been feeling sad")

    def test_unrelated_activity_only_sets_context(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("sad", 0), ("sad", 11)])
        alerts = alert_engine.check_alerts(
            ActivityMetadata(activity="cooking", timestamp=_at(11)),
            now=_at(11),
        )
        assert alerts[0].context == "cooking"
        assert alerts[0].suggestion.startswith("You've been feeling sad")


class TestConfiguration:
    def test_every_alert_type_has_a_cooldown_multiplier(self):
        assert set(COOLDOWN_MULTIPLIERS) == set(AlertType)
        assert COOLDOWN_MULTIPLIERS[AlertType.EMOTIONAL_VOLATILITY] == 2
        assert COOLDOWN_MULTIPLIERS[AlertType.POSITIVE_TREND] == 3

    @pytest.mark.parametrize("kwargs", [
        {"sustained_emotion_ms": 0},
        {"volatility_window_ms": -1},
        {"cooldown_ms": -5},
        {"fatigue_multiplier": 0.5},
        {"min_confidence": 1.5},
        {"max_history": 1},
        {"volatility_threshold": 0},
    ])
    def test_invalid_config_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            AlertConfig(**kwargs)

    def test_from_settings_converts_minutes(self):
        config = AlertConfig.from_settings(Settings(alert_sustained_minutes=2, alert_cooldown_minutes=1))
        assert config.sustained_emotion_ms == 2 * MINUTE
        assert config.cooldown_ms == MINUTE
        assert config.fatigue_ms == pytest.approx(3 * MINUTE)


class TestStreamScenarios:
    def test_five_sad_states_fire_exactly_once(self, alert_engine, make_state):
        fired = []
        for minute in (0, 3, 6, 9, 12):
            alert_engine.add_state(make_state("sad", minute))
            fired += alert_engine.check_alerts(now=_at(minute))
        assert [(a.type, a.emotion) for a in fired] == [(AlertType.SUSTAINED_NEGATIVE, E.SAD)]

    def test_happy_to_sad_is_medium_sudden_change(self, alert_engine, make_state):
        _feed(alert_engine, make_state, [("happy", 0), ("sad", 1)])
        alerts = alert_engine.check_alerts(now=_at(1))
        assert [(a.type, a.severity) for a in alerts] == [(AlertType.SUDDEN_CHANGE, AlertSeverity.MEDIUM)]
