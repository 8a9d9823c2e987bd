"""Privacy controls — consent flags, outbound anonymization and retention cleanup."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from psytrack.models import now_ms

if TYPE_CHECKING:
    from psytrack.capsule import EmotionTimeCapsule
    from psytrack.config import Settings
    from psytrack.monitors import EmotionAlertEngine

logger = structlog.get_logger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
ANONYMIZED = "ANONYMIZED"

SENSITIVE_KEYS = frozenset({
    "name", "id", "user", "user_id", "userId", "patient_id", "patientId", "email", "phone",
})


class PrivacySettings(BaseModel):
    """Per-person consent flags."""

    model_config = ConfigDict(frozen=True)

    store_raw_data: bool = False
    share_with_therapist: bool = True
    share_with_caregivers: bool = False
    data_retention_days: int = Field(default=90, ge=1)
    anonymize_data: bool = True
    allow_remote_processing: bool = False


# operation name -> settings flag that permits it
_OPERATIONS = {
    "store_raw": "store_raw_data",
    "share_therapist": "share_with_therapist",
    "share_caregiver": "share_with_caregivers",
    "remote_process": "allow_remote_processing",
}


class PrivacyManager:
    """Gatekeeper for anything that leaves the process or outlives retention."""

    def __init__(self, settings: PrivacySettings | None = None) -> None:
        self._settings = settings or PrivacySettings()

    @classmethod
    def from_settings(cls, settings: Settings) -> PrivacyManager:
        return cls(PrivacySettings(
            store_raw_data=settings.privacy_store_raw_data,
            share_with_therapist=settings.privacy_share_with_therapist,
            share_with_caregivers=settings.privacy_share_with_caregivers,
            data_retention_days=settings.privacy_data_retention_days,
            anonymize_data=settings.privacy_anonymize_data,
            allow_remote_processing=settings.privacy_allow_remote_processing,
        ))

    def get_settings(self) -> PrivacySettings:
        return self._settings

    def update_settings(self, **changes: Any) -> PrivacySettings:
        """Merge *changes* into the current flags and return the new settings."""
        self._settings = PrivacySettings.model_validate(
            {**self._settings.model_dump(), **changes}
        )
        logger.info("privacy.settings_updated", changed=sorted(changes))
        return self._settings

    def is_allowed(self, operation: str) -> bool:
        """Whether *operation* is permitted. Unknown operations are denied."""
        flag = _OPERATIONS.get(operation)
        return bool(flag and getattr(self._settings, flag))

    def apply_privacy_filters(self, data: Any) -> Any:
        """Return an anonymized deep copy of *data* (input is never mutated).

        Sensitive string values become ``"ANONYMIZED"`` and numeric ones ``0``,
        at any nesting depth.  With ``anonymize_data`` off the copy is returned
        unchanged.
        """
        filtered = copy.deepcopy(data)
        if not self._settings.anonymize_data:
            return filtered
        return _anonymize(filtered)

    def cleanup_expired_data(
        self,
        capsule: EmotionTimeCapsule,
        alert_engine: EmotionAlertEngine | None = None,
        *,
        now: int | None = None,
    ) -> int:
        """Drop capsule records older than the retention window and reset alert history.

        Returns the number of capsule records removed.
        """
        now = now if now is not None else now_ms()
        cutoff = now - self._settings.data_retention_days * DAY_MS
        removed = capsule.purge_before(cutoff)
        if alert_engine is not None:
            alert_engine.clear_history()
        logger.info("privacy.cleanup", removed=removed, cutoff=cutoff)
        return removed


def _anonymize(value: Any) -> Any:
    if isinstance(value, dict):
        for key, item in value.items():
            if key in SENSITIVE_KEYS and isinstance(item, str):
                value[key] = ANONYMIZED
            elif key in SENSITIVE_KEYS and isinstance(item, (int, float)) and not isinstance(item, bool):
                value[key] = 0
            else:
                value[key] = _anonymize(item)
    elif isinstance(value, list):
        return [_anonymize(item) for item in value]
    return value
