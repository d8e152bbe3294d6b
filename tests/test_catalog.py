"""
Tests for the static role / learning-path catalogue.
"""
import pytest

from sentry_academy.catalog import (
    COURSES,
    LEARNING_PATHS,
    ROLES,
    get_course,
    get_learning_path_for_role,
    get_module_difficulty,
    get_module_reason,
    get_personalization,
    get_role_display_name,
)
from sentry_academy.models import Difficulty, EngineerRole


class TestRoles:
    def test_every_role_has_info(self):
        assert set(ROLES) == set(EngineerRole)

    def test_every_role_has_display_name(self):
        for role in EngineerRole:
            assert get_role_display_name(role)

    def test_backend_display_name(self):
        assert get_role_display_name(EngineerRole.BACKEND) == "Backend Engineering"


class TestLearningPaths:
    @pytest.mark.parametrize("role", list(EngineerRole))
    def test_every_role_has_a_path(self, role):
        path = get_learning_path_for_role(role)
        assert path is not None
        assert path.role_id == role
        assert path.steps

    @pytest.mark.parametrize("role", list(EngineerRole))
    def test_steps_sorted_by_priority(self, role):
        priorities = [s.priority for s in LEARNING_PATHS[role].steps]
        assert priorities == sorted(priorities)

    @pytest.mark.parametrize("role", list(EngineerRole))
    def test_only_first_step_unlocked(self, role):
        steps = LEARNING_PATHS[role].steps
        assert steps[0].is_unlocked
        assert not any(s.is_unlocked for s in steps[1:])

    def test_no_role_no_path(self):
        assert get_learning_path_for_role(None) is None

    def test_backend_first_step(self):
        first = LEARNING_PATHS[EngineerRole.BACKEND].steps[0]
        assert first.id == "backend-error-tracking"
        assert first.modules == ("sentry-fundamentals", "nodejs-integration")

    def test_step_by_id(self):
        path = LEARNING_PATHS[EngineerRole.BACKEND]
        assert path.step_by_id("backend-logging").title == "Structured Logging"
        assert path.step_by_id("missing") is None

    def test_module_ids_unique(self):
        ids = LEARNING_PATHS[EngineerRole.BACKEND].module_ids()
        assert len(ids) == len(set(ids))


class TestLookups:
    def test_personalization_found(self):
        adaptation = get_personalization(EngineerRole.BACKEND, "sentry-fundamentals")
        assert adaptation is not None
        assert "API" in adaptation.explanation

    def test_personalization_missing_module(self):
        assert get_personalization(EngineerRole.BACKEND, "no-such-module") is None

    def test_module_reason_missing(self):
        assert get_module_reason(EngineerRole.PM_MANAGER, "sentry-fundamentals") is None

    def test_module_difficulty_explicit(self):
        assert get_module_difficulty("distributed-tracing") == Difficulty.ADVANCED

    def test_module_difficulty_defaults_to_beginner(self):
        assert get_module_difficulty("unknown-module") == Difficulty.BEGINNER

    def test_course_lookup(self):
        assert get_course("sentry-fundamentals").title == "Sentry Fundamentals"
        assert get_course("nope") is None

    def test_course_ids_unique(self):
        ids = [c.id for c in COURSES]
        assert len(ids) == len(set(ids))
