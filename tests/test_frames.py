"""Tests for the pandas research views."""

from __future__ import annotations

import pandas as pd

from psytrack.capsule.frames import entries_to_dataframe, mood_counts, states_to_dataframe
from psytrack.models import CapsuleExport, EmotionState, MediaType, Modality, TimeCapsuleEntry

DAY = 24 * 60 * 60 * 1000
T0 = 1_700_006_400_000  # 2023-11-15 00:00 UTC


def _state(mood: str, offset: int) -> EmotionState:
    return EmotionState(
        mood=mood,
        confidence=0.7,
        source_weights={Modality.FACE: 0.6, Modality.VOICE: 0.4},
        timestamp=T0 + offset,
    )


def test_states_frame_is_time_indexed_and_sorted():
    export = CapsuleExport(states=[_state("sad", 2 * DAY), _state("calm", 0)])
    df = states_to_dataframe(export)
    assert isinstance(df.index, pd.DatetimeIndex)
    assert list(df["mood"]) == ["calm", "sad"]
    assert df["weight_face"].iloc[0] == 0.6


def test_mood_counts_per_day():
    export = CapsuleExport(states=[
        _state("sad", 0), _state("sad", 1000), _state("calm", DAY + 5),
    ])
    counts = mood_counts(states_to_dataframe(export))
    assert list(counts["sad"]) == [2, 0]
    assert list(counts["calm"]) == [0, 1]
    assert counts["happy"].sum() == 0


def test_entries_frame():
    export = CapsuleExport(entries=[
        TimeCapsuleEntry(
            media_url="file:///a.m4a",
            media_type=MediaType.AUDIO,
            emotion_tag="happy",
            intensity=0.9,
            timestamp=T0,
        ),
    ])
    df = entries_to_dataframe(export)
    assert df.loc[df.index[0], "media_type"] == "audio"
    assert mood_counts(df, column="emotion")["happy"].iloc[0] == 1


def test_empty_export():
    df = states_to_dataframe(CapsuleExport())
    assert df.empty
    assert mood_counts(df).empty
