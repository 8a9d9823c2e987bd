"""Tests for privacy controls."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from psytrack.config import Settings
from psytrack.privacy import ANONYMIZED, DAY_MS, PrivacyManager, PrivacySettings

T0 = 1_700_000_000_000


class TestPermissions:
    def test_defaults(self):
        manager = PrivacyManager()
        assert manager.is_allowed("share_therapist") is True
        assert manager.is_allowed("share_caregiver") is False
        assert manager.is_allowed("store_raw") is False
        assert manager.is_allowed("remote_process") is False

    def test_unknown_operation_denied(self):
        assert PrivacyManager().is_allowed("sell_data") is False

    def test_update_settings(self):
        manager = PrivacyManager()
        manager.update_settings(share_with_caregivers=True)
        assert manager.is_allowed("share_caregiver") is True
        assert manager.get_settings().share_with_therapist is True

    def test_invalid_update_rejected(self):
        with pytest.raises(ValidationError):
            PrivacyManager().update_settings(data_retention_days=0)

    def test_from_settings(self):
        manager = PrivacyManager.from_settings(Settings(privacy_data_retention_days=30))
        assert manager.get_settings().data_retention_days == 30


class TestFilters:
    def test_anonymizes_nested_payload_without_mutation(self):
        payload = {
            "name": "Sam",
            "user_id": 42,
            "mood": "calm",
            "contacts": [{"email": "a@b.c", "relation": "parent"}],
            "meta": {"patient_id": "P-7", "device": {"id": 3}},
        }
        filtered = PrivacyManager().apply_privacy_filters(payload)

        assert filtered["name"] == ANONYMIZED
        assert filtered["user_id"] == 0
        assert filtered["mood"] == "calm"
        assert filtered["contacts"][0] == {"email": ANONYMIZED, "relation": "parent"}
        assert filtered["meta"]["patient_id"] == ANONYMIZED
        assert filtered["meta"]["device"]["id"] == 0
        assert payload["name"] == "Sam"
        assert payload["contacts"][0]["email"] == "a@b.c"

    def test_camel_case_identifiers(self):
        filtered = PrivacyManager().apply_privacy_filters({"userId": "u-1", "patientId": 77, "mood": "sad"})
        assert filtered == {"userId": ANONYMIZED, "patientId": 0, "mood": "sad"}

    def test_nested_emotion_state_survives_copy(self, make_state):
        state = make_state("sad", 0)
        filtered = PrivacyManager().apply_privacy_filters({"name": "Sam", "state": state})
        assert filtered["state"] == state
        assert filtered["name"] == ANONYMIZED

    def test_disabled_anonymization_copies(self):
        manager = PrivacyManager(PrivacySettings(anonymize_data=False))
        payload = {"name": "Sam"}
        filtered = manager.apply_privacy_filters(payload)
        assert filtered == payload
        assert filtered is not payload


class TestRetention:
    def test_cleanup_expired_data(self, capsule, alert_engine, make_state):
        old = make_state("sad", 0)
        capsule.add_emotion_state(old)
        alert_engine.add_state(old)
        now = T0 + 91 * DAY_MS
        recent = make_state("calm", (now - T0) / 60_000 - 5)
        capsule.add_emotion_state(recent)

        removed = PrivacyManager().cleanup_expired_data(capsule, alert_engine, now=now)

        assert removed == 1
        assert capsule.get_states() == [recent]
        assert alert_engine.history_size == 0
