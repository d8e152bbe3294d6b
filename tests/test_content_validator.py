"""
Tests for the content validator: course structure rules, quality metrics,
free-text quality and role relevance.
"""
import pytest

from factories import make_course, make_module, make_personalization, make_request, make_synthesized

from sentry_academy.content_validator import (
    IssueSeverity,
    IssueType,
    ValidationContext,
    ValidationIssue,
    calculate_quality_metrics,
    check_content_quality,
    ensure_role_relevance,
    validate_course_structure,
)
from sentry_academy.models import Difficulty, EngineerRole, SentryFeature


def messages(result):
    return [i.message for i in result.issues]


class TestValidateCourseStructure:
    def test_well_formed_course_is_valid(self):
        result = validate_course_structure(make_course())
        assert result.issues == []
        assert result.score == 1.0
        assert result.is_valid
        assert "Add more practical code examples throughout the course" in result.suggestions

    def test_two_modules_is_blocking(self):
        result = validate_course_structure(make_course(module_count=2))
        [issue] = result.issues
        assert issue.severity == IssueSeverity.HIGH
        assert issue.blocking
        assert issue.field == "generated_modules"
        assert result.score == pytest.approx(0.915)
        assert not result.is_valid

    def test_non_sentry_course_is_critical(self):
        course = make_course(
            title="Kubernetes Capacity Guide",
            description="Plan cluster capacity with node pools and pod autoscaling in production clusters.",
            generated_modules=[make_module(i, title=f"Capacity part {i + 1}") for i in range(3)],
            synthesized_content=make_synthesized(main_concepts=["capacity", "scheduling", "pods"]),
        )
        result = validate_course_structure(course)
        assert result.by_severity(IssueSeverity.CRITICAL)
        assert not result.is_valid

    def test_metadata_rules(self):
        result = validate_course_structure(make_course(title="Short", duration="soon", level="Expert"))
        assert {i.field for i in result.issues} == {"title", "duration", "level"}

    def test_module_rules(self):
        modules = [
            make_module(0, key_takeaways=["only one"]),
            make_module(1, code_example="# TODO: call sentry_sdk.init"),
            make_module(2, code_example="print('hello, world!!')"),
            make_module(3, confidence=0.5),
        ]
        result = validate_course_structure(make_course(generated_modules=modules))
        assert {i.field for i in result.issues} == {
            "generated_modules[0].key_takeaways",
            "generated_modules[1].code_example",
            "generated_modules[2].code_example",
            "generated_modules[3].confidence",
        }
        [low_confidence] = [i for i in result.issues if i.field.endswith("confidence")]
        assert low_confidence.severity == IssueSeverity.HIGH

    def test_missing_role_personalization(self):
        request = make_request(roles=[EngineerRole.BACKEND, EngineerRole.SRE])
        course = make_course(request=request, role_personalizations=[make_personalization()])
        result = validate_course_structure(course)
        assert "Missing personalizations for roles: sre" in messages(result)
        assert "Generate personalizations for all target engineering roles" in result.suggestions

    def test_thin_synthesis(self):
        course = make_course(synthesized_content=make_synthesized(
            main_concepts=["profiling"], key_takeaways=[], use_cases=[], best_practices=[],
        ))
        result = validate_course_structure(course)
        assert all(i.type == IssueType.CONTENT for i in result.issues)
        assert len(result.issues) == 4

    def test_context_level_and_required_features(self):
        context = ValidationContext(
            expected_level=Difficulty.ADVANCED,
            required_features=[SentryFeature.SESSION_REPLAY],
        )
        result = validate_course_structure(make_course(), context)
        assert {i.severity for i in result.issues} == {IssueSeverity.LOW, IssueSeverity.MEDIUM}
        assert "Required feature session-replay is not covered" in messages(result)

    def test_threshold_from_context(self):
        course = make_course(generated_modules=[make_module(i, confidence=0.5) for i in range(3)])
        strict = validate_course_structure(course, ValidationContext(min_quality_threshold=0.99))
        lenient = validate_course_structure(course, ValidationContext(min_quality_threshold=0.1))
        assert not strict.is_valid
        assert lenient.is_valid


class TestQualityMetrics:
    def test_no_issues_is_perfect(self):
        metrics = calculate_quality_metrics([])
        assert metrics.overall_score == 1.0

    def test_weights(self):
        issues = [
            ValidationIssue(IssueType.TECHNICAL, IssueSeverity.CRITICAL, "a"),
            ValidationIssue(IssueType.RELEVANCE, IssueSeverity.HIGH, "b"),
        ]
        metrics = calculate_quality_metrics(issues)
        assert metrics.structural_compliance == pytest.approx(0.5)
        assert metrics.technical_accuracy == pytest.approx(0.85)
        assert metrics.role_relevance == pytest.approx(0.85)
        assert metrics.overall_score == pytest.approx(0.5 * 0.3 + 0.85 * 0.25 + 0.25 + 0.85 * 0.2)

    def test_metrics_floor_at_zero(self):
        issues = [ValidationIssue(IssueType.TECHNICAL, IssueSeverity.CRITICAL, "x")] * 10
        metrics = calculate_quality_metrics(issues)
        assert metrics.structural_compliance == 0.0
        assert metrics.technical_accuracy == 0.0


class TestContentQuality:
    def test_empty_text(self):
        report = check_content_quality("")
        assert report.readability_score == 0.0
        assert len(report.issues) == 3

    def test_educational_text(self):
        report = check_content_quality(
            "Learn to implement the SDK. This guide has a step by step example. "
            "Practice the exercise to understand the objective of this tutorial."
        )
        assert report.educational_value == 1.0
        assert report.readability_score >= 0.6
        assert report.issues == ["Content needs more technical detail and practical examples"]


class TestRoleRelevance:
    def test_relevant_backend_course(self):
        course = make_course(
            title="Sentry API performance for backend services",
            description="Learn how to trace API calls from server to database with Sentry across every service.",
        )
        report = ensure_role_relevance(course, EngineerRole.BACKEND)
        assert report.relevance_score >= 0.6
        assert report.issues == []

    def test_missing_personalization(self):
        report = ensure_role_relevance(make_course(), "frontend")
        assert "No personalization found for frontend role" in report.issues

    def test_unexpected_difficulty(self):
        request = make_request(roles=[EngineerRole.AI_ML])
        report = ensure_role_relevance(make_course(request=request), EngineerRole.AI_ML)
        assert any("may not be appropriate for ai-ml role" in issue for issue in report.issues)
