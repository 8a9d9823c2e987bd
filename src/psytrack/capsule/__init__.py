"""Time capsule — bounded emotion history, period summaries and research frames."""

from psytrack.capsule.store import EmotionTimeCapsule

__all__ = ["EmotionTimeCapsule"]
