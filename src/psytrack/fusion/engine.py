"""Fusion engine — weighted late fusion of modality classifier outputs.

Design principles
-----------------
- **Present modalities only**: fixed reliability weights of the supplied
  modalities are renormalised to sum to 1; absent channels carry no weight.
- **Agreement bonus**: the winning score is scaled by
  ``0.7 + 0.3 * agreement`` where agreement is the share of present
  modalities whose ranked list contains the winning category.
- **Deterministic**: identical inputs and ``now`` yield identical states.
  Cosmetic jitter belongs in the presentation layer, never here.
"""

from __future__ import annotations

import structlog

from psytrack.fusion.classifiers import (
    classify_facial,
    classify_text,
    classify_voice,
    classify_wearable,
)
from psytrack.fusion.lexicon import ClassifierTables, default_tables
from psytrack.fusion.models import (
    FacialSignal,
    ModalityResult,
    TextSignal,
    VoiceSignal,
    WearableSignal,
)
from psytrack.fusion.normalize import clamp
from psytrack.models import (
    ActivityMetadata,
    EmotionCategory,
    EmotionState,
    Modality,
    now_ms,
)

logger = structlog.get_logger(__name__)

NO_SIGNAL_CONFIDENCE = 0.3
_BASE_FACTOR = 0.7
_AGREEMENT_FACTOR = 0.3


class EmotionFusionEngine:
    """Combine whichever modality signals are present into one :class:`EmotionState`.

    Parameters
    ----------
    tables : ClassifierTables | None
        Lookup tables for the modality classifiers; defaults to
        :func:`default_tables`.
    """

    def __init__(self, tables: ClassifierTables | None = None) -> None:
        self._tables = tables or default_tables()

    @property
    def tables(self) -> ClassifierTables:
        return self._tables

    def classify(
        self,
        face: FacialSignal | None = None,
        voice: VoiceSignal | None = None,
        text: TextSignal | None = None,
        wearable: WearableSignal | None = None,
    ) -> list[ModalityResult]:
        """Run the classifier of every supplied modality, in fixed modality order."""
        results: list[ModalityResult] = []
        if face is not None:
            results.append(classify_facial(face, self._tables))
        if voice is not None:
            results.append(classify_voice(voice, self._tables))
        if text is not None:
            results.append(classify_text(text, self._tables))
        if wearable is not None:
            results.append(classify_wearable(wearable, self._tables))
        return results

    def fuse(
        self,
        face: FacialSignal | None = None,
        voice: VoiceSignal | None = None,
        text: TextSignal | None = None,
        wearable: WearableSignal | None = None,
        activity: ActivityMetadata | None = None,
        *,
        now: int | None = None,
    ) -> EmotionState:
        """Fuse up to four modality signals into a single emotional state.

        ``now`` (ms epoch) stamps the state; the wall clock is used when omitted.
        """
        timestamp = now if now is not None else now_ms()
        context = activity.activity if activity is not None else None
        results = self.classify(face, voice, text, wearable)

        if not results:
            return EmotionState(
                mood=EmotionCategory.NEUTRAL,
                confidence=NO_SIGNAL_CONFIDENCE,
                source_weights={},
                timestamp=timestamp,
                context=context,
            )

        total_weight = sum(r.weight for r in results)
        source_weights: dict[Modality, float] = {
            r.modality: r.weight / total_weight for r in results
        }

        scores = {emotion: 0.0 for emotion in EmotionCategory}
        for result in results:
            weight = source_weights[result.modality]
            for pred in result.predictions:
                scores[pred.emotion] += pred.confidence * weight

        mood = EmotionCategory.NEUTRAL
        top_score = 0.0
        for emotion in EmotionCategory:
            if scores[emotion] > top_score:
                mood, top_score = emotion, scores[emotion]

        agreement = sum(1 for r in results if r.contains(mood)) / len(results)
        confidence = clamp(top_score * (_BASE_FACTOR + _AGREEMENT_FACTOR * agreement))

        logger.debug(
            "fusion.state_fused",
            mood=mood.value,
            confidence=round(confidence, 3),
            modalities=[m.value for m in source_weights],
            agreement=round(agreement, 2),
        )
        return EmotionState(
            mood=mood,
            confidence=confidence,
            source_weights=source_weights,
            timestamp=timestamp,
            context=context,
        )
