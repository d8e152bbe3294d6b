"""
Tests for the onboarding feature → progress mapping.
"""
from sentry_academy.feature_mapper import map_features_to_progress
from sentry_academy.models import EngineerRole, SentryFeature


class TestFeatureMapper:
    def test_empty_selection_maps_to_nothing(self):
        mapping = map_features_to_progress(EngineerRole.BACKEND, [])
        assert mapping.completed_modules == []
        assert mapping.completed_step_ids == []

    def test_any_selection_implies_error_tracking(self):
        mapping = map_features_to_progress(EngineerRole.BACKEND, ["distributed-tracing"])
        assert mapping.completed_features[0] == SentryFeature.ERROR_TRACKING
        assert "backend-error-tracking" in mapping.completed_step_ids
        assert "sentry-fundamentals" in mapping.completed_modules

    def test_feature_completes_matching_steps(self):
        mapping = map_features_to_progress(EngineerRole.BACKEND, [SentryFeature.DISTRIBUTED_TRACING])
        assert "backend-distributed-tracing" in mapping.completed_step_ids
        assert "distributed-tracing" in mapping.completed_modules

    def test_feature_outside_path_uses_default_module(self):
        mapping = map_features_to_progress(EngineerRole.BACKEND, ["session-replay"])
        assert "session-replay" in mapping.completed_modules
        assert not any("session-replay" in s for s in mapping.completed_step_ids)

    def test_unknown_values_ignored(self):
        mapping = map_features_to_progress(EngineerRole.SRE, ["telepathy"])
        assert mapping.completed_features == []

    def test_duplicates_collapsed(self):
        mapping = map_features_to_progress(EngineerRole.BACKEND, ["logging", "logging", "error-tracking"])
        assert mapping.completed_features.count(SentryFeature.LOGGING) == 1
        assert len(mapping.completed_modules) == len(set(mapping.completed_modules))
