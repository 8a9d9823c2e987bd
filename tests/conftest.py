"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Callable

import pytest
import structlog

from psytrack.capsule import EmotionTimeCapsule
from psytrack.config import AlertConfig
from psytrack.fusion import EmotionFusionEngine
from psytrack.models import EmotionCategory, EmotionState
from psytrack.monitors import EmotionAlertEngine
from psytrack.notifications.handlers import NotificationDispatcher

T0 = 1_700_000_000_000
MINUTE = 60_000

StateFactory = Callable[..., EmotionState]


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any global structlog configuration a test applied (e.g. via ``main()``)."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def t0() -> int:
    return T0


@pytest.fixture
def make_state() -> StateFactory:
    """Build an :class:`EmotionState` at ``T0 + minutes``."""

    def _make(
        mood: EmotionCategory | str,
        minutes: float = 0,
        confidence: float = 0.8,
        context: str | None = None,
    ) -> EmotionState:
        return EmotionState(
            mood=EmotionCategory(mood),
            confidence=confidence,
            timestamp=T0 + int(minutes * MINUTE),
            context=context,
        )

    return _make


@pytest.fixture
def fusion_engine() -> EmotionFusionEngine:
    return EmotionFusionEngine()


@pytest.fixture
def alert_engine() -> EmotionAlertEngine:
    return EmotionAlertEngine(AlertConfig())


@pytest.fixture
def capsule() -> EmotionTimeCapsule:
    return EmotionTimeCapsule(max_entries=50)


@pytest.fixture
def dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher()
