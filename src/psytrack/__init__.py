"""psytrack — multimodal emotion fusion, pattern alerts and emotion history summaries."""

from psytrack.capsule import EmotionTimeCapsule
from psytrack.fusion import EmotionFusionEngine
from psytrack.monitors import EmotionAlertEngine
from psytrack.pipeline import EmotionTracker
from psytrack.privacy import PrivacyManager

__all__ = [
    "EmotionAlertEngine",
    "EmotionFusionEngine",
    "EmotionTimeCapsule",
    "EmotionTracker",
    "PrivacyManager",
]
