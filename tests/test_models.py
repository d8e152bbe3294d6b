"""
Tests for data models: UserProgress serialisation, generation requests,
status transitions and AIGeneratedCourse helpers.
"""
import json

import pytest
from pydantic import ValidationError

from factories import make_course, make_request

from sentry_academy.models import (
    STATUS_TRANSITIONS,
    Course,
    EngineerRole,
    GenerationProgress,
    GenerationStatus,
    PreferredContentType,
    ResearchSource,
    ResearchSourceConfig,
    SentryFeature,
    UserProgress,
    can_transition,
    default_research_sources,
)


# ─── UserProgress ─────────────────────────────────────────────────────────────

class TestUserProgress:
    def test_defaults(self):
        p = UserProgress()
        assert p.role is None
        assert p.current_step == 0
        assert p.completed_modules == []
        assert p.preferred_content_type == PreferredContentType.MIXED
        assert not p.onboarding_completed

    def test_serialises_with_camel_case_keys(self):
        p = UserProgress(role=EngineerRole.SRE, completed_features=[SentryFeature.LOGGING])
        data = json.loads(p.model_dump_json(by_alias=True))
        for key in ("role", "currentStep", "completedSteps", "completedModules", "completedFeatures",
                    "onboardingCompleted", "lastActiveDate", "preferredContentType", "hasSeenOnboarding"):
            assert key in data
        assert data["role"] == "sre"
        assert data["completedFeatures"] == ["logging"]

    def test_parses_camel_case_blob(self):
        blob = json.dumps({"role": "ai-ml", "currentStep": 2, "completedModules": ["seer-mcp"]})
        p = UserProgress.model_validate_json(blob)
        assert p.role == EngineerRole.AI_ML
        assert p.current_step == 2
        assert p.completed_modules == ["seer-mcp"]

    def test_negative_current_step_rejected(self):
        with pytest.raises(ValidationError):
            UserProgress(current_step=-1)


# ─── Requests & sources ───────────────────────────────────────────────────────

class TestGenerationRequest:
    def test_default_sources_cover_all_nine(self):
        sources = default_research_sources()
        assert {s.source for s in sources} == set(ResearchSource)
        assert all(s.enabled for s in sources)

    def test_default_content_type_is_intermediate(self):
        assert make_request().content_type.value == "intermediate"

    def test_request_is_frozen(self):
        request = make_request()
        with pytest.raises(ValidationError):
            request.keywords = ["other"]

    def test_enabled_sources_filters_disabled(self):
        request = make_request(selected_sources=[
            ResearchSourceConfig(source=ResearchSource.BLOG, enabled=False),
            ResearchSourceConfig(source=ResearchSource.DOCS_MAIN),
        ])
        assert [s.source for s in request.enabled_sources()] == [ResearchSource.DOCS_MAIN]

    @pytest.mark.parametrize("priority", [0, 6])
    def test_priority_out_of_range_rejected(self, priority):
        with pytest.raises(ValidationError):
            ResearchSourceConfig(source=ResearchSource.BLOG, priority=priority)

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            GenerationProgress(progress=101)


# ─── Status transitions ───────────────────────────────────────────────────────

class TestStatusTransitions:
    @pytest.mark.parametrize("current,target", [
        (GenerationStatus.PENDING, GenerationStatus.RESEARCHING),
        (GenerationStatus.RESEARCHING, GenerationStatus.GENERATING),
        (GenerationStatus.GENERATING, GenerationStatus.REVIEW_NEEDED),
        (GenerationStatus.REVIEW_NEEDED, GenerationStatus.APPROVED),
        (GenerationStatus.REVIEW_NEEDED, GenerationStatus.REJECTED),
        (GenerationStatus.APPROVED, GenerationStatus.PUBLISHED),
    ])
    def test_forward_moves_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        (GenerationStatus.PENDING, GenerationStatus.APPROVED),
        (GenerationStatus.REVIEW_NEEDED, GenerationStatus.PUBLISHED),
        (GenerationStatus.PUBLISHED, GenerationStatus.ERROR),
        (GenerationStatus.REJECTED, GenerationStatus.APPROVED),
    ])
    def test_invalid_moves_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_error_reachable_from_every_non_terminal_state(self):
        terminal = {GenerationStatus.PUBLISHED, GenerationStatus.REJECTED, GenerationStatus.ERROR}
        for status in GenerationStatus:
            if status not in terminal:
                assert GenerationStatus.ERROR in STATUS_TRANSITIONS[status]


# ─── AIGeneratedCourse ────────────────────────────────────────────────────────

class TestAIGeneratedCourse:
    def test_not_approved_by_default(self):
        assert not make_course().is_approved

    def test_to_course_drops_generation_fields(self):
        plain = make_course().to_course()
        assert type(plain) is Course
        assert plain.id == "c1"
        assert not hasattr(plain, "generated_modules")

    def test_personalization_for(self):
        course = make_course()
        assert course.personalization_for(EngineerRole.BACKEND) is not None
        assert course.personalization_for(EngineerRole.FRONTEND) is None

    def test_quality_score_bounds(self):
        with pytest.raises(ValidationError):
            make_course(quality_score=1.5)
