"""Monitors sub-package — temporal alerting over fused emotional states."""

from psytrack.monitors.alerts import EmotionAlertEngine

__all__ = ["EmotionAlertEngine"]
