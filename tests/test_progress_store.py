"""
Tests for ProgressStore: rehydration, persistence and the onboarding flows.
"""
import json

import pytest

from sentry_academy.models import EngineerRole, PreferredContentType, SentryFeature
from sentry_academy.progress_store import STORAGE_KEY, ProgressStore
from sentry_academy.storage import InMemoryStorage


class TestRehydration:
    def test_absent_key_gives_defaults(self, progress_store):
        assert progress_store.progress.role is None
        assert progress_store.next_recommendation() is None

    def test_existing_blob_is_loaded(self):
        storage = InMemoryStorage({STORAGE_KEY: json.dumps({
            "role": "backend", "currentStep": 1, "completedModules": ["sentry-fundamentals"],
        })})
        store = ProgressStore(storage)
        assert store.progress.role == EngineerRole.BACKEND
        assert store.progress.completed_modules == ["sentry-fundamentals"]

    def test_corrupt_blob_falls_back_to_defaults(self):
        store = ProgressStore(InMemoryStorage({STORAGE_KEY: "{not json"}))
        assert store.progress.role is None


class TestMutations:
    def test_set_role_persists_camel_case(self, progress_store, memory_storage):
        progress_store.set_user_role(EngineerRole.SRE)
        blob = json.loads(memory_storage.get(STORAGE_KEY))
        assert blob["role"] == "sre"
        assert blob["onboardingCompleted"] is True

    def test_set_role_resets_completion(self, backend_store):
        backend_store.complete_module("sentry-fundamentals")
        backend_store.set_user_role(EngineerRole.FRONTEND)
        assert backend_store.progress.completed_modules == []
        assert backend_store.progress.current_step == 0

    def test_complete_module_advances_current_step(self, backend_store):
        backend_store.complete_module("sentry-fundamentals")
        assert backend_store.progress.current_step == 0
        backend_store.complete_module("nodejs-integration")
        assert backend_store.progress.current_step == 1
        assert backend_store.next_recommendation().module_id == "react-error-boundaries"

    def test_update_progress_merges(self, backend_store):
        backend_store.update_progress(preferred_content_type=PreferredContentType.HANDS_ON)
        assert backend_store.progress.preferred_content_type == PreferredContentType.HANDS_ON
        assert backend_store.progress.role == EngineerRole.BACKEND

    def test_update_progress_rejects_unknown_field(self, backend_store):
        with pytest.raises(ValueError):
            backend_store.update_progress(favourite_colour="blue")

    def test_mark_onboarding_seen(self, progress_store):
        assert progress_store.mark_onboarding_seen().has_seen_onboarding

    def test_reset_removes_persisted_copy(self, backend_store, memory_storage):
        backend_store.reset_progress()
        assert STORAGE_KEY not in memory_storage
        assert backend_store.progress.role is None

    def test_state_survives_a_new_store(self, backend_store, memory_storage):
        backend_store.complete_module("sentry-fundamentals")
        again = ProgressStore(memory_storage)
        assert again.progress.completed_modules == ["sentry-fundamentals"]


class TestKnownFeatures:
    def test_requires_role(self, progress_store):
        with pytest.raises(ValueError):
            progress_store.apply_known_features([SentryFeature.LOGGING])

    def test_known_features_complete_steps(self, backend_store):
        progress = backend_store.apply_known_features(["logging"])
        assert "backend-error-tracking" in progress.completed_steps
        assert "backend-logging" in progress.completed_steps
        assert SentryFeature.ERROR_TRACKING in progress.completed_features
        assert progress.current_step == 2
