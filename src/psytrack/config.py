"""Centralised settings and validated engine configuration."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_MINUTE_MS = 60 * 1000


class ConfigurationError(ValueError):
    """Raised when static configuration is invalid (e.g. negative thresholds)."""


class Settings(BaseSettings):
    """All runtime configuration for psytrack.

    Values are read from environment variables first, then from a *.env*
    file at the project root.  Every variable lives in a flat namespace
    (``ALERT_COOLDOWN_MINUTES``, ``LOG_LEVEL`` ...).
    """

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ── Alert engine ──────────────────────────────────────────
    alert_sustained_minutes: float = 10.0
    alert_fatigue_multiplier: float = 1.5  # fatigue needs a longer run
    alert_sudden_change_minutes: float = 5.0
    alert_volatility_minutes: float = 30.0
    alert_volatility_threshold: int = 4
    alert_cooldown_minutes: float = 5.0
    alert_min_confidence: float = 0.6
    alert_max_history: int = 100

    # ── Time capsule ──────────────────────────────────────────
    capsule_max_entries: int = 1000

    # ── Notifications ─────────────────────────────────────────
    webhook_url: str = ""
    webhook_timeout: float = 10.0

    # ── Privacy defaults ──────────────────────────────────────
    privacy_store_raw_data: bool = False
    privacy_share_with_therapist: bool = True
    privacy_share_with_caregivers: bool = False
    privacy_data_retention_days: int = 90
    privacy_anonymize_data: bool = True
    privacy_allow_remote_processing: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()


@dataclass(frozen=True, slots=True)
class AlertConfig:
    """Thresholds for :class:`~psytrack.monitors.alerts.EmotionAlertEngine`.

    All durations are milliseconds.  Invalid values raise
    :class:`ConfigurationError` at construction.
    """

    sustained_emotion_ms: int = 10 * _MINUTE_MS
    fatigue_multiplier: float = 1.5
    sudden_change_window_ms: int = 5 * _MINUTE_MS
    volatility_window_ms: int = 30 * _MINUTE_MS
    volatility_threshold: int = 4
    cooldown_ms: int = 5 * _MINUTE_MS
    min_confidence: float = 0.6
    max_history: int = 100

    def __post_init__(self) -> None:
        for name in (
            "sustained_emotion_ms",
            "sudden_change_window_ms",
            "volatility_window_ms",
        ):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if self.cooldown_ms < 0:
            raise ConfigurationError(f"cooldown_ms must not be negative, got {self.cooldown_ms}")
        if self.fatigue_multiplier < 1.0:
            raise ConfigurationError(
                f"fatigue_multiplier must be >= 1.0, got {self.fatigue_multiplier}"
            )
        if self.volatility_threshold < 1:
            raise ConfigurationError(
                f"volatility_threshold must be >= 1, got {self.volatility_threshold}"
            )
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ConfigurationError(
                f"min_confidence must be within [0, 1], got {self.min_confidence}"
            )
        if self.max_history < 2:
            raise ConfigurationError(f"max_history must be >= 2, got {self.max_history}")

    @property
    def fatigue_ms(self) -> float:
        return self.sustained_emotion_ms * self.fatigue_multiplier

    @classmethod
    def from_settings(cls, settings: Settings) -> AlertConfig:
        """Build an :class:`AlertConfig` from minute-based application settings."""
        return cls(
            sustained_emotion_ms=int(settings.alert_sustained_minutes * _MINUTE_MS),
            fatigue_multiplier=settings.alert_fatigue_multiplier,
            sudden_change_window_ms=int(settings.alert_sudden_change_minutes * _MINUTE_MS),
            volatility_window_ms=int(settings.alert_volatility_minutes * _MINUTE_MS),
            volatility_threshold=settings.alert_volatility_threshold,
            cooldown_ms=int(settings.alert_cooldown_minutes * _MINUTE_MS),
            min_confidence=settings.alert_min_confidence,
            max_history=settings.alert_max_history,
        )
