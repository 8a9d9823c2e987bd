"""Tracker pipeline connecting fusion → alert engine → time capsule for one person."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from psytrack.capsule import EmotionTimeCapsule
from psytrack.config import AlertConfig, Settings, get_settings
from psytrack.fusion import (
    EmotionFusionEngine,
    FacialSignal,
    TextSignal,
    VoiceSignal,
    WearableSignal,
)
from psytrack.models import ActivityMetadata, Alert, EmotionState
from psytrack.monitors import EmotionAlertEngine
from psytrack.notifications import DeliveryReport, NotificationDispatcher, create_dispatcher
from psytrack.privacy import PrivacyManager

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Observation:
    """What one :meth:`EmotionTracker.observe` call produced."""

    state: EmotionState
    alerts: list[Alert] = field(default_factory=list)
    retained: bool = False


class EmotionTracker:
    """Owns the three engines for a single monitored person.

    Every observation is fused, offered to the alert engine and always
    recorded in the time capsule, even when the alert engine drops it for
    low confidence.
    """

    def __init__(
        self,
        *,
        fusion: EmotionFusionEngine | None = None,
        alerts: EmotionAlertEngine | None = None,
        capsule: EmotionTimeCapsule | None = None,
        dispatcher: NotificationDispatcher | None = None,
        privacy: PrivacyManager | None = None,
    ) -> None:
        self.fusion = fusion or EmotionFusionEngine()
        self.alerts = alerts or EmotionAlertEngine()
        self.capsule = capsule if capsule is not None else EmotionTimeCapsule()
        self.dispatcher = dispatcher
        self.privacy = privacy or PrivacyManager()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> EmotionTracker:
        settings = settings or get_settings()
        privacy = PrivacyManager.from_settings(settings)
        return cls(
            alerts=EmotionAlertEngine(AlertConfig.from_settings(settings)),
            capsule=EmotionTimeCapsule(settings.capsule_max_entries),
            dispatcher=create_dispatcher(settings, privacy),
            privacy=privacy,
        )

    def observe(
        self,
        face: FacialSignal | None = None,
        voice: VoiceSignal | None = None,
        text: TextSignal | None = None,
        wearable: WearableSignal | None = None,
        activity: ActivityMetadata | None = None,
        *,
        now: int | None = None,
    ) -> Observation:
        """Fuse the supplied signals, record the state and evaluate alerts."""
        state = self.fusion.fuse(face, voice, text, wearable, activity, now=now)
        self.capsule.add_emotion_state(state)
        retained = self.alerts.add_state(state)
        fired = self.alerts.check_alerts(activity, now=state.timestamp) if retained else []

        logger.info(
            "tracker.observed",
            mood=state.mood.value,
            confidence=round(state.confidence, 3),
            retained=retained,
            alerts=len(fired),
        )
        return Observation(state=state, alerts=fired, retained=retained)

    async def observe_and_notify(
        self,
        face: FacialSignal | None = None,
        voice: VoiceSignal | None = None,
        text: TextSignal | None = None,
        wearable: WearableSignal | None = None,
        activity: ActivityMetadata | None = None,
        *,
        now: int | None = None,
    ) -> tuple[Observation, list[DeliveryReport]]:
        """Like :meth:`observe`, then hand fired alerts to the dispatcher."""
        observation = self.observe(face, voice, text, wearable, activity, now=now)
        if self.dispatcher is None or not observation.alerts:
            return observation, []
        results = await self.dispatcher.dispatch_many(observation.alerts)
        return observation, results

    def purge_expired(self, *, now: int | None = None) -> int:
        """Apply the retention window to the capsule and reset alert history."""
        return self.privacy.cleanup_expired_data(self.capsule, self.alerts, now=now)
