"""Analysis helpers — pandas views over time-capsule exports for research workflows."""

from __future__ import annotations

import pandas as pd

from psytrack.models import CapsuleExport, EmotionCategory

_STATE_COLUMNS = ["timestamp", "mood", "confidence", "context"]
_ENTRY_COLUMNS = ["timestamp", "emotion", "intensity", "media_type", "context"]


def states_to_dataframe(export: CapsuleExport) -> pd.DataFrame:
    """Load exported emotional states into a :class:`pandas.DataFrame`.

    Columns: ``mood``, ``confidence``, ``context`` plus one ``weight_<modality>``
    column per modality seen.  Indexed by a UTC ``DatetimeIndex``, sorted.
    """
    records = [
        {
            "timestamp": s.timestamp,
            "mood": s.mood.value,
            "confidence": s.confidence,
            "context": s.context,
            **{f"weight_{m.value}": w for m, w in s.source_weights.items()},
        }
        for s in export.states
    ]
    return _indexed(pd.DataFrame(records, columns=None if records else _STATE_COLUMNS))


def entries_to_dataframe(export: CapsuleExport) -> pd.DataFrame:
    """Load exported media entries into a time-indexed :class:`pandas.DataFrame`."""
    records = [
        {
            "timestamp": e.timestamp,
            "emotion": e.emotion_tag.value,
            "intensity": e.intensity,
            "media_type": e.media_type.value,
            "context": e.context,
        }
        for e in export.entries
    ]
    return _indexed(pd.DataFrame(records, columns=_ENTRY_COLUMNS))


def mood_counts(df: pd.DataFrame, rule: str = "1D", column: str = "mood") -> pd.DataFrame:
    """Count each emotion per resampling bucket.

    Parameters
    ----------
    df:
        Output of :func:`states_to_dataframe` (or :func:`entries_to_dataframe`
        with ``column="emotion"``).
    rule:
        Pandas offset alias (``'1h'``, ``'1D'``, ``'1W'`` ...).

    Returns one column per :class:`EmotionCategory`, zero-filled.
    """
    categories = [e.value for e in EmotionCategory]
    if df.empty:
        return pd.DataFrame(columns=categories, dtype="int64")
    counts = (
        df.groupby([pd.Grouper(freq=rule), column])
        .size()
        .unstack(fill_value=0)
        .reindex(columns=categories, fill_value=0)
    )
    return counts.astype("int64")


def _indexed(df: pd.DataFrame) -> pd.DataFrame:
    df["timestamp"] = pd.to_datetime(df["timestamp"].astype("int64"), unit="ms", utc=True)
    return df.set_index("timestamp").sort_index()
