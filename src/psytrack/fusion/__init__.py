"""Multimodal fusion — categorical emotional state from optional signal channels.

Architecture
------------
1. **Signal normaliser** (`normalize.py`)
   - Clamping, L2 normalisation, ranking and de-duplication of predictions
2. **Modality classifiers** (`classifiers.py`)
   - Facial, voice, text and wearable heuristics, each returning at most
     three ranked predictions plus a fixed reliability weight
   - Thresholds and lexicons injected via `lexicon.ClassifierTables`
3. **Fusion engine** (`engine.py`)
   - Weighted accumulation over present modalities with an agreement bonus

The classifiers are deliberately threshold- and keyword-based heuristics,
not trained models.
"""

from psytrack.fusion.engine import EmotionFusionEngine
from psytrack.fusion.lexicon import ClassifierTables, default_tables
from psytrack.fusion.models import (
    EmotionPrediction,
    FacialSignal,
    ModalityResult,
    TextSignal,
    VoiceSignal,
    WearableSignal,
)

__all__ = [
    "ClassifierTables",
    "EmotionFusionEngine",
    "EmotionPrediction",
    "FacialSignal",
    "ModalityResult",
    "TextSignal",
    "VoiceSignal",
    "WearableSignal",
    "default_tables",
]
