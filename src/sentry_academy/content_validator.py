"""
content_validator.py — Quality gate for AI-generated courses
=============================================================
``validate_course_structure`` never raises; it always returns a
``ValidationResult`` with itemised issues, four sub-metrics and
improvement suggestions.

Rule groups
-----------
  metadata        title 10–100 chars, description ≥ 50, "2 hrs"-style
                  duration, level in Beginner/Intermediate/Advanced
  modules         3–8 modules; per module: title, takeaways, code, scenario,
                  confidence ≥ 0.6
  roles           every target role personalised; explanation and
                  relevance text long enough; examples present
  richness        ≥ 3 concepts, ≥ 5 takeaways, ≥ 2 use cases, ≥ 3 practices
  technical       must be recognisably about Sentry; no placeholder code;
                  code examples use the SDK

Scoring
-------
  structural   = 1 − 0.3·critical − 0.2·high − 0.1·medium
  technical    = 1 − 0.15 per technical issue
  educational  = 1 − 0.10 per content issue
  role         = 1 − 0.15 per relevance issue
  overall      = 0.30·structural + 0.25·technical + 0.25·educational + 0.20·role

A course is valid when ``overall ≥ threshold`` and no issue is critical or
blocking.  Too few modules is a blocking issue: a short course fails even
when every other check passes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sentry_academy.models import (
    AIGeneratedCourse,
    AIGeneratedModule,
    AIGeneratedPersonalization,
    Difficulty,
    EngineerRole,
    SentryFeature,
)

logger = logging.getLogger(__name__)

MIN_MODULES = 3
MAX_MODULES = 8
DEFAULT_THRESHOLD = 0.7

_DURATION_RE = re.compile(r"\d+(?:\.\d+)?\s*(min|hr|hour)", re.IGNORECASE)
_VALID_LEVELS = ("Beginner", "Intermediate", "Advanced")
_SENTRY_TERMS = ("sentry", "error tracking", "performance monitoring", "observability")


class IssueType(str, Enum):
    STRUCTURE = "structure"
    CONTENT   = "content"
    TECHNICAL = "technical"
    RELEVANCE = "relevance"


class IssueSeverity(str, Enum):
    LOW      = "low"
    MEDIUM   = "medium"
    HIGH     = "high"
    CRITICAL = "critical"


@dataclass
class ValidationIssue:
    type:          IssueType
    severity:      IssueSeverity
    message:       str
    field:         str = ""
    suggested_fix: str = ""
    blocking:      bool = False   # fails validation regardless of score


@dataclass
class QualityMetrics:
    structural_compliance: float
    technical_accuracy:    float
    educational_value:     float
    role_relevance:        float
    overall_score:         float


@dataclass
class ValidationContext:
    expected_level:        Optional[Difficulty] = None
    required_features:     list[SentryFeature] = field(default_factory=list)
    min_quality_threshold: float = DEFAULT_THRESHOLD


@dataclass
class ValidationResult:
    is_valid:    bool
    score:       float
    issues:      list[ValidationIssue]
    suggestions: list[str]
    metrics:     QualityMetrics

    def by_severity(self, severity: IssueSeverity) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]


@dataclass
class ContentQualityReport:
    readability_score: float
    educational_value: float
    technical_depth:   float
    issues:            list[str] = field(default_factory=list)


@dataclass
class RoleRelevanceReport:
    relevance_score: float
    issues:          list[str] = field(default_factory=list)
    suggestions:     list[str] = field(default_factory=list)


# ─── Main entry point ────────────────────────────────────────────────────────

def validate_course_structure(
    course: AIGeneratedCourse,
    context: Optional[ValidationContext] = None,
) -> ValidationResult:
    context = context or ValidationContext()
    issues: list[ValidationIssue] = [
        *_check_metadata(course, context),
        *_check_modules(course.generated_modules),
        *_check_personalizations(course.role_personalizations, course.generation_request.target_roles),
        *_check_richness(course),
        *_check_technical(course, context),
    ]
    metrics = calculate_quality_metrics(issues)
    is_valid = (
        metrics.overall_score >= context.min_quality_threshold
        and not any(i.severity == IssueSeverity.CRITICAL or i.blocking for i in issues)
    )
    logger.debug("Validated course %s: score=%.3f valid=%s issues=%d",
                 course.id, metrics.overall_score, is_valid, len(issues))
    return ValidationResult(
        is_valid=is_valid,
        score=metrics.overall_score,
        issues=issues,
        suggestions=_suggestions(course, metrics),
        metrics=metrics,
    )


def calculate_quality_metrics(issues: list[ValidationIssue]) -> QualityMetrics:
    def count(**match) -> int:
        return sum(1 for i in issues if all(getattr(i, k) == v for k, v in match.items()))

    structural = max(0.0, 1 - (
        count(severity=IssueSeverity.CRITICAL) * 0.3
        + count(severity=IssueSeverity.HIGH) * 0.2
        + count(severity=IssueSeverity.MEDIUM) * 0.1
    ))
    technical = max(0.0, 1 - count(type=IssueType.TECHNICAL) * 0.15)
    educational = max(0.0, 1 - count(type=IssueType.CONTENT) * 0.1)
    role = max(0.0, 1 - count(type=IssueType.RELEVANCE) * 0.15)
    overall = structural * 0.3 + technical * 0.25 + educational * 0.25 + role * 0.2
    return QualityMetrics(
        structural_compliance=structural,
        technical_accuracy=technical,
        educational_value=educational,
        role_relevance=role,
        overall_score=round(overall, 4),
    )


# ─── Rule groups ─────────────────────────────────────────────────────────────

def _check_metadata(course: AIGeneratedCourse, context: ValidationContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if len(course.title or "") < 10:
        issues.append(ValidationIssue(
            IssueType.STRUCTURE, IssueSeverity.HIGH, "Course title is too short or missing",
            "title", "Provide a descriptive title of at least 10 characters",
        ))
    elif len(course.title) > 100:
        issues.append(ValidationIssue(
            IssueType.STRUCTURE, IssueSeverity.MEDIUM, "Course title is too long",
            "title", "Keep the title under 100 characters",
        ))
    if len(course.description or "") < 50:
        issues.append(ValidationIssue(
            IssueType.STRUCTURE, IssueSeverity.HIGH, "Course description is too short or missing",
            "description", "Provide a description of at least 50 characters",
        ))
    if not _DURATION_RE.search(course.duration or ""):
        issues.append(ValidationIssue(
            IssueType.STRUCTURE, IssueSeverity.MEDIUM, "Invalid or missing duration format",
            "duration", 'Use a format like "2 hrs" or "90 min"',
        ))
    if course.level not in _VALID_LEVELS:
        issues.append(ValidationIssue(
            IssueType.STRUCTURE, IssueSeverity.MEDIUM, "Invalid course level",
            "level", f"Use one of: {', '.join(_VALID_LEVELS)}",
        ))
    elif context.expected_level is not None and course.level.lower() != context.expected_level.value:
        issues.append(ValidationIssue(
            IssueType.STRUCTURE, IssueSeverity.LOW,
            f"Course level {course.level} differs from the expected {context.expected_level.value}",
            "level", "Adjust the content depth or the requested level",
        ))
    return issues


def _check_modules(modules: list[AIGeneratedModule]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if len(modules) < MIN_MODULES:
        issues.append(ValidationIssue(
            IssueType.CONTENT, IssueSeverity.HIGH, "Insufficient number of modules",
            "generated_modules", f"Add more modules for comprehensive coverage (minimum {MIN_MODULES})",
            blocking=True,
        ))
    if len(modules) > MAX_MODULES:
        issues.append(ValidationIssue(
            IssueType.CONTENT, IssueSeverity.MEDIUM, "Too many modules may overwhelm learners",
            "generated_modules", "Combine related topics or split into multiple courses",
        ))

    for index, module in enumerate(modules):
        label, where = f"Module {index + 1}", f"generated_modules[{index}]"
        if len(module.title or "") < 5:
            issues.append(ValidationIssue(
                IssueType.STRUCTURE, IssueSeverity.MEDIUM, f"{label} title is too short",
                f"{where}.title", "Provide descriptive module titles",
            ))
        if len(module.key_takeaways) < 2:
            issues.append(ValidationIssue(
                IssueType.CONTENT, IssueSeverity.MEDIUM, f"{label} has insufficient key takeaways",
                f"{where}.key_takeaways", "Include at least 2-3 key takeaways per module",
            ))
        if module.content_config.has_code_example and len(module.code_example or "") < 20:
            issues.append(ValidationIssue(
                IssueType.TECHNICAL, IssueSeverity.MEDIUM, f"{label} lacks adequate code examples",
                f"{where}.code_example", "Provide complete, working code examples",
            ))
        if module.content_config.has_scenario and len(module.scenario or "") < 30:
            issues.append(ValidationIssue(
                IssueType.CONTENT, IssueSeverity.LOW, f"{label} scenario is too brief",
                f"{where}.scenario", "Provide detailed, realistic scenarios",
            ))
        if module.confidence < 0.6:
            issues.append(ValidationIssue(
                IssueType.TECHNICAL, IssueSeverity.HIGH, f"{label} has low confidence score",
                f"{where}.confidence", "Review and improve content accuracy and completeness",
            ))
    return issues


def _check_personalizations(
    personalizations: list[AIGeneratedPersonalization],
    target_roles: list[EngineerRole],
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    covered = {p.role_id for p in personalizations}
    missing = [r.value for r in target_roles if r not in covered]
    if missing:
        issues.append(ValidationIssue(
            IssueType.RELEVANCE, IssueSeverity.HIGH,
            f"Missing personalizations for roles: {', '.join(missing)}",
            "role_personalizations", "Generate personalizations for all target roles",
        ))
    for index, p in enumerate(personalizations):
        where = f"role_personalizations[{index}]"
        if len(p.explanation or "") < 50:
            issues.append(ValidationIssue(
                IssueType.CONTENT, IssueSeverity.MEDIUM,
                f"Personalization for {p.role_id.value} lacks detailed explanation",
                f"{where}.explanation", "Provide comprehensive role-specific explanations",
            ))
        if len(p.why_relevant or "") < 30:
            issues.append(ValidationIssue(
                IssueType.RELEVANCE, IssueSeverity.MEDIUM,
                f"Personalization for {p.role_id.value} lacks clear relevance explanation",
                f"{where}.why_relevant", "Explain why this content matters for this role",
            ))
        if not p.role_specific_examples:
            issues.append(ValidationIssue(
                IssueType.CONTENT, IssueSeverity.LOW,
                f"No role-specific examples for {p.role_id.value}",
                f"{where}.role_specific_examples", "Add practical examples relevant to this role",
            ))
    return issues


def _check_richness(course: AIGeneratedCourse) -> list[ValidationIssue]:
    content = course.synthesized_content
    checks = (
        (len(content.main_concepts) < 3, IssueSeverity.MEDIUM, "Insufficient main concepts covered",
         "Include more core concepts for comprehensive coverage"),
        (len(content.key_takeaways) < 5, IssueSeverity.MEDIUM, "Too few key takeaways",
         "Include more actionable takeaways for learners"),
        (len(content.use_cases) < 2, IssueSeverity.MEDIUM, "Insufficient use cases provided",
         "Add more real-world use cases and examples"),
        (len(content.best_practices) < 3, IssueSeverity.LOW, "Limited best practices coverage",
         "Include more industry best practices"),
    )
    return [
        ValidationIssue(IssueType.CONTENT, severity, message, "synthesized_content", fix)
        for failed, severity, message, fix in checks if failed
    ]


def _check_technical(course: AIGeneratedCourse, context: ValidationContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    text = _course_text(course)
    if not any(term in text for term in _SENTRY_TERMS):
        issues.append(ValidationIssue(
            IssueType.TECHNICAL, IssueSeverity.CRITICAL, "Content does not appear to be Sentry-specific",
            "", "Ensure content focuses on Sentry tools and concepts",
        ))
    for feature in context.required_features:
        if feature.value.replace("-", " ") not in text and feature.value not in text:
            issues.append(ValidationIssue(
                IssueType.TECHNICAL, IssueSeverity.MEDIUM, f"Required feature {feature.value} is not covered",
                "", f"Add material on {feature.value}",
            ))
    for index, module in enumerate(course.generated_modules):
        code, where = module.code_example or "", f"generated_modules[{index}].code_example"
        if not code:
            continue
        if "TODO" in code:
            issues.append(ValidationIssue(
                IssueType.TECHNICAL, IssueSeverity.MEDIUM, f"Module {index + 1} contains placeholder code",
                where, "Replace placeholder code with working examples",
            ))
        if "sentry" not in code.lower():
            issues.append(ValidationIssue(
                IssueType.TECHNICAL, IssueSeverity.MEDIUM,
                f"Module {index + 1} code example lacks Sentry integration",
                where, "Include Sentry-specific code in examples",
            ))
    return issues


def _suggestions(course: AIGeneratedCourse, metrics: QualityMetrics) -> list[str]:
    suggestions: list[str] = []
    if metrics.technical_accuracy < 0.8:
        suggestions.append("Review technical content for accuracy and add more Sentry-specific examples")
    if metrics.educational_value < 0.8:
        suggestions.append("Enhance educational structure with clearer learning objectives and outcomes")
    if metrics.role_relevance < 0.8:
        suggestions.append("Improve role-specific content and add targeted examples for each engineering role")
    if metrics.structural_compliance < 0.8:
        suggestions.append("Address structural issues in course organization and module formatting")

    modules = course.generated_modules
    if len(modules) < 4:
        suggestions.append("Consider adding more modules to provide comprehensive coverage of the topic")
    if len(course.role_personalizations) < len(course.generation_request.target_roles):
        suggestions.append("Generate personalizations for all target engineering roles")
    if modules and sum(m.confidence for m in modules) / len(modules) < 0.8:
        suggestions.append("Improve module content quality and research depth for higher confidence scores")
    if len(course.synthesized_content.code_examples) < 3:
        suggestions.append("Add more practical code examples throughout the course")
    if len(course.synthesized_content.use_cases) < 3:
        suggestions.append("Include more real-world use cases and scenarios")
    return suggestions


# ─── Free-text quality ───────────────────────────────────────────────────────

_EDUCATIONAL_INDICATORS = (
    "learn", "understand", "implement", "practice", "example",
    "step", "guide", "tutorial", "exercise", "objective",
)
_TECHNICAL_TERMS = (
    "api", "configuration", "integration", "sdk", "implementation",
    "monitoring", "tracking", "debugging", "performance", "optimization",
)


def check_content_quality(content: str) -> ContentQualityReport:
    report = ContentQualityReport(
        readability_score=_readability(content),
        educational_value=_coverage(content, _EDUCATIONAL_INDICATORS, 2.0),
        technical_depth=_coverage(content, _TECHNICAL_TERMS, 1.5),
    )
    if report.readability_score < 0.6:
        report.issues.append("Content may be too complex or difficult to read")
    if report.educational_value < 0.7:
        report.issues.append("Content lacks sufficient educational structure or clear learning objectives")
    if report.technical_depth < 0.5:
        report.issues.append("Content needs more technical detail and practical examples")
    return report


def _readability(content: str) -> float:
    sentences = [s for s in re.split(r"[.!?]+", content) if s.strip()]
    words = content.split()
    if not sentences or not words:
        return 0.0
    avg_sentence = len(words) / len(sentences)
    complex_ratio = sum(1 for w in words if len(w) > 6) / len(words)
    score = 1.0
    if avg_sentence > 20:
        score -= 0.2
    if avg_sentence > 30:
        score -= 0.3
    if complex_ratio > 0.3:
        score -= 0.2
    if complex_ratio > 0.5:
        score -= 0.3
    return max(0.0, round(score, 4))


def _coverage(content: str, terms: tuple[str, ...], weight: float) -> float:
    lowered = content.lower()
    found = sum(1 for t in terms if t in lowered)
    return min(1.0, found / len(terms) * weight)


# ─── Role relevance ──────────────────────────────────────────────────────────

ROLE_KEYWORDS: dict[EngineerRole, tuple[str, ...]] = {
    EngineerRole.FRONTEND:   ("react", "javascript", "browser", "ui", "user experience", "client"),
    EngineerRole.BACKEND:    ("api", "server", "database", "service", "backend", "infrastructure"),
    EngineerRole.FULLSTACK:  ("end-to-end", "full-stack", "complete", "integration", "system"),
    EngineerRole.SRE:        ("reliability", "infrastructure", "deployment", "operations", "monitoring"),
    EngineerRole.AI_ML:      ("model", "machine learning", "data", "pipeline", "inference", "training"),
    EngineerRole.PM_MANAGER: ("metrics", "dashboard", "business", "stakeholder", "reporting", "insights"),
}

EXPECTED_DIFFICULTY: dict[EngineerRole, tuple[Difficulty, ...]] = {
    EngineerRole.FRONTEND:   (Difficulty.BEGINNER, Difficulty.INTERMEDIATE),
    EngineerRole.BACKEND:    (Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    EngineerRole.FULLSTACK:  (Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    EngineerRole.SRE:        (Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    EngineerRole.AI_ML:      (Difficulty.ADVANCED,),
    EngineerRole.PM_MANAGER: (Difficulty.BEGINNER, Difficulty.INTERMEDIATE),
}


def ensure_role_relevance(course: AIGeneratedCourse, role: EngineerRole) -> RoleRelevanceReport:
    role = EngineerRole(role)
    keywords = ROLE_KEYWORDS[role]
    text = _course_text(course)
    report = RoleRelevanceReport(relevance_score=sum(1 for k in keywords if k in text) / len(keywords))

    personalization = course.personalization_for(role)
    if personalization is None:
        report.issues.append(f"No personalization found for {role.value} role")
        report.suggestions.append(f"Add role-specific content for {role.value} engineers")
    if report.relevance_score < 0.6:
        report.issues.append(f"Content may not be sufficiently relevant for {role.value} engineers")
        report.suggestions.append(f"Add more {role.value}-specific examples and use cases")
    if personalization is not None and personalization.difficulty not in EXPECTED_DIFFICULTY[role]:
        report.issues.append(
            f'Difficulty level "{personalization.difficulty.value}" may not be appropriate '
            f"for {role.value} role"
        )
    return report


def _course_text(course: AIGeneratedCourse) -> str:
    return " ".join([
        course.title,
        course.description,
        *(f"{m.title} {m.description}" for m in course.generated_modules),
        *course.synthesized_content.main_concepts,
    ]).lower()
