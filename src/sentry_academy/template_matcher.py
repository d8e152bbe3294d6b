"""
template_matcher.py — Fit synthesised content to the catalogue's course shape
==============================================================================
Given a ``SynthesizedContent`` this module extracts a ``ContentPattern``
(concepts, action verbs, technology terms, business-impact terms and a
complexity tier) and uses it to produce course titles, descriptions, module
lists and role personalisations that look like the hand-written catalogue.

``map_to_existing_structure`` is the entry point when no explicit
``ContentTemplate`` is given; ``create_dynamic_template`` then sizes the
template from the pattern.  The generation service also uses the module and
personalisation builders directly in mock mode.

Complexity tier
---------------
Each tier has a list of indicator phrases; a tier scores one point per
phrase found in the concepts, takeaways and best practices.  Highest score
wins, ties go to the higher tier, and no indicator at all means
intermediate.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from sentry_academy.models import (
    AIGeneratedModule,
    AIGeneratedPersonalization,
    ContentConfig,
    ContentTemplate,
    CourseStructure,
    Difficulty,
    EngineerRole,
    ModuleStructure,
    RolePersonalizationStructure,
    SynthesizedContent,
)

# ─── Vocabulary ──────────────────────────────────────────────────────────────

_ACTION_PATTERNS = (
    re.compile(r"\b(implement|configure|set up|monitor|track|debug|optimize|analyze|integrate|deploy)\b",
               re.IGNORECASE),
    re.compile(r"\b(create|build|develop|establish|enable|disable|update|manage)\b", re.IGNORECASE),
)

TECH_TERMS = (
    "react", "javascript", "node.js", "python", "django", "api", "database",
    "microservices", "kubernetes", "docker", "aws", "gcp", "azure",
    "performance", "latency", "throughput", "errors", "exceptions",
    "alerts", "dashboards", "metrics", "logs", "traces",
)

BUSINESS_TERMS = (
    "user experience", "performance", "reliability", "scalability",
    "cost reduction", "efficiency", "productivity", "quality",
    "customer satisfaction", "revenue", "conversion", "retention",
)

COMPLEXITY_INDICATORS: dict[Difficulty, tuple[str, ...]] = {
    Difficulty.BEGINNER:     ("basic", "introduction", "getting started", "setup", "installation"),
    Difficulty.INTERMEDIATE: ("configuration", "integration", "best practices", "optimization"),
    Difficulty.ADVANCED:     ("architecture", "scaling", "custom", "enterprise", "distributed"),
}

_DURATION_MULTIPLIER = {
    Difficulty.BEGINNER:     1.0,
    Difficulty.INTERMEDIATE: 1.2,
    Difficulty.ADVANCED:     1.5,
}

_ROLE_TITLES = {
    EngineerRole.FRONTEND:   "Frontend",
    EngineerRole.BACKEND:    "Backend",
    EngineerRole.FULLSTACK:  "Full-Stack",
    EngineerRole.SRE:        "SRE",
    EngineerRole.AI_ML:      "AI/ML",
    EngineerRole.PM_MANAGER: "Product Management",
}


@dataclass(frozen=True)
class RoleContext:
    focus_areas: tuple[str, ...]
    examples:    tuple[str, ...]
    pain_points: tuple[str, ...]
    next_step:   str


ROLE_CONTEXTS: dict[EngineerRole, RoleContext] = {
    EngineerRole.FRONTEND: RoleContext(
        ("user experience", "performance", "debugging", "client-side"),
        ("React components", "browser errors", "page load times"),
        ("JavaScript errors", "performance bottlenecks", "user impact"),
        "implement user experience monitoring",
    ),
    EngineerRole.BACKEND: RoleContext(
        ("API performance", "server errors", "database queries", "infrastructure"),
        ("API endpoints", "server exceptions", "database performance"),
        ("API latency", "service downtime", "data integrity"),
        "set up API performance tracking",
    ),
    EngineerRole.FULLSTACK: RoleContext(
        ("end-to-end monitoring", "system integration", "performance optimization"),
        ("full-stack applications", "microservices", "user journeys"),
        ("complex debugging", "performance across layers", "data flow issues"),
        "create end-to-end monitoring",
    ),
    EngineerRole.SRE: RoleContext(
        ("system reliability", "infrastructure monitoring", "incident response"),
        ("infrastructure metrics", "service health", "alerting systems"),
        ("system outages", "capacity planning", "incident escalation"),
        "establish infrastructure alerting",
    ),
    EngineerRole.AI_ML: RoleContext(
        ("model monitoring", "data pipelines", "inference performance"),
        ("ML model serving", "data quality", "prediction accuracy"),
        ("model drift", "data issues", "inference latency"),
        "monitor model performance",
    ),
    EngineerRole.PM_MANAGER: RoleContext(
        ("metrics analysis", "team coordination", "business impact"),
        ("KPI dashboards", "team reports", "stakeholder updates"),
        ("data interpretation", "priority setting", "resource allocation"),
        "build stakeholder dashboards",
    ),
}


# ─── Result types ────────────────────────────────────────────────────────────

@dataclass
class ContentPattern:
    concepts:         list[str] = field(default_factory=list)
    actions:          list[str] = field(default_factory=list)
    technologies:     list[str] = field(default_factory=list)
    business_impacts: list[str] = field(default_factory=list)
    complexity:       Difficulty = Difficulty.INTERMEDIATE


@dataclass
class StructureMapping:
    course_title:       str
    course_description: str
    modules:            list[AIGeneratedModule]
    estimated_duration: str
    module_count:       int   # target from the template, before any clamping


@dataclass
class ComplianceResult:
    is_compliant: bool
    issues:       list[str] = field(default_factory=list)
    suggestions:  list[str] = field(default_factory=list)


# ─── Pattern analysis ────────────────────────────────────────────────────────

def analyze_content_patterns(content: SynthesizedContent) -> ContentPattern:
    actions = _extract_actions([*content.key_takeaways, *content.best_practices])
    technologies = _find_terms([*content.main_concepts, *content.key_takeaways], TECH_TERMS)
    business = _find_terms(content.use_cases, BUSINESS_TERMS)
    return ContentPattern(
        concepts=_unique(content.main_concepts),
        actions=_unique(actions),
        technologies=_unique(technologies),
        business_impacts=_unique(business),
        complexity=determine_complexity(content),
    )


def determine_complexity(content: SynthesizedContent) -> Difficulty:
    text = " ".join([*content.main_concepts, *content.key_takeaways, *content.best_practices]).lower()
    scores = {
        tier: sum(1 for phrase in phrases if phrase in text)
        for tier, phrases in COMPLEXITY_INDICATORS.items()
    }
    if not any(scores.values()):
        return Difficulty.INTERMEDIATE
    if scores[Difficulty.ADVANCED] >= max(scores[Difficulty.INTERMEDIATE], scores[Difficulty.BEGINNER]):
        return Difficulty.ADVANCED
    if scores[Difficulty.INTERMEDIATE] >= scores[Difficulty.BEGINNER]:
        return Difficulty.INTERMEDIATE
    return Difficulty.BEGINNER


# ─── Structure mapping ───────────────────────────────────────────────────────

def map_to_existing_structure(
    content: SynthesizedContent,
    target_role: Optional[EngineerRole] = None,
    template: Optional[ContentTemplate] = None,
) -> StructureMapping:
    pattern = analyze_content_patterns(content)
    used = template or create_dynamic_template(pattern)
    primary = pattern.concepts[0] if pattern.concepts else "Sentry Monitoring"
    modules = generate_module_structure(content, pattern, used.course_structure.module_count)
    return StructureMapping(
        course_title=generate_course_title(primary, pattern, target_role),
        course_description=generate_course_description(
            content, pattern, used.course_structure.description_length,
        ),
        modules=modules,
        estimated_duration=calculate_course_duration(len(modules), pattern.complexity),
        module_count=used.course_structure.module_count,
    )


def create_dynamic_template(pattern: ContentPattern) -> ContentTemplate:
    advanced = pattern.complexity == Difficulty.ADVANCED
    return ContentTemplate(
        course_structure=CourseStructure(
            title_pattern="{concept} Mastery with Sentry",
            description_length=200 if advanced else 150,
            module_count=min(max(len(pattern.concepts), 3), 6),
            estimated_duration="3 hrs" if advanced else "2 hrs",
        ),
        module_structure=ModuleStructure(
            title_pattern="{action} {concept}",
            description_length=100,
            include_key_takeaways=True,
            include_scenario=pattern.complexity != Difficulty.BEGINNER,
            include_code_example=bool(pattern.technologies),
        ),
        role_personalization=RolePersonalizationStructure(
            explanation_length=250 if advanced else 200,
            include_use_cases=True,
            include_next_steps=True,
        ),
    )


def generate_module_structure(
    content: SynthesizedContent,
    pattern: ContentPattern,
    target_module_count: int = 5,
) -> list[AIGeneratedModule]:
    """One module per concept (leaving a slot free) plus a hands-on module when there is material for it."""
    modules = [
        create_concept_module(concept, content, pattern, index)
        for index, concept in enumerate(content.main_concepts[: max(target_module_count - 1, 0)])
    ]
    if len(modules) < target_module_count and (content.code_examples or content.use_cases):
        modules.append(create_practical_module(content, pattern, len(modules)))
    return modules


def create_concept_module(
    concept: str,
    content: SynthesizedContent,
    pattern: ContentPattern,
    index: int,
) -> AIGeneratedModule:
    action = pattern.actions[index] if index < len(pattern.actions) else "Understanding"
    code = content.code_examples[index] if index < len(content.code_examples) else (
        f"# {concept} with Sentry\nimport sentry_sdk\n\nsentry_sdk.init(dsn=\"YOUR_DSN_HERE\")"
    )
    return AIGeneratedModule(
        id=f"module-{index + 1}",
        title=f"{action[:1].upper()}{action[1:]} {concept}",
        description=(
            f"Learn the fundamentals of {concept} and how to apply it effectively "
            "in your Sentry monitoring strategy."
        ),
        duration="15 min",
        key_takeaways=content.key_takeaways[index * 2:(index + 1) * 2],
        scenario=(content.use_cases[index] if index < len(content.use_cases)
                  else f"You need to implement {concept} monitoring for your application."),
        code_example=code,
        content_config=ContentConfig(
            has_hands_on=bool(pattern.technologies),
            has_scenario=True,
            has_code_example=index < len(content.code_examples),
            estimated_reading_time=5,
        ),
        confidence=0.8,
    )


def create_practical_module(content: SynthesizedContent, pattern: ContentPattern, index: int) -> AIGeneratedModule:
    return AIGeneratedModule(
        id=f"module-{index + 1}",
        title="Hands-On Implementation",
        description="Apply what you've learned with practical examples and real-world scenarios.",
        duration="25 min",
        key_takeaways=content.best_practices[:3],
        scenario="Implement a complete monitoring solution using the concepts you've learned.",
        code_example="\n\n".join(content.code_examples) or "# Complete Sentry implementation example",
        content_config=ContentConfig(
            has_hands_on=True,
            has_scenario=True,
            has_code_example=True,
            estimated_reading_time=8,
        ),
        confidence=0.85,
    )


def create_role_specific_content(
    content: SynthesizedContent,
    pattern: ContentPattern,
    role: EngineerRole,
) -> AIGeneratedPersonalization:
    context = ROLE_CONTEXTS[EngineerRole(role)]
    primary = content.main_concepts[0] if content.main_concepts else "monitoring"
    examples = [*context.examples, *content.code_examples[:2]][:3]
    use_cases = [
        u for u in content.use_cases
        if any(area.lower() in u.lower() for area in context.focus_areas)
    ][:3]
    return AIGeneratedPersonalization(
        role_id=role,
        explanation=(
            f"As an engineer focused on {context.focus_areas[0]}, {primary} is crucial for "
            f"{context.focus_areas[1]}. This content shows how to apply {primary} concepts "
            "to your daily workflow and responsibilities."
        ),
        why_relevant=(
            f"This directly addresses {context.pain_points[0]} that you encounter in your role, "
            "providing practical solutions and best practices."
        ),
        next_step_nudge=(
            f"Ready to {context.next_step}? Continue to the next module to build on these concepts."
        ),
        difficulty=pattern.complexity,
        role_specific_examples=examples,
        role_specific_use_cases=use_cases or [f"Reduce {context.pain_points[0]} with {primary}"],
    )


# ─── Titles, descriptions, durations ─────────────────────────────────────────

def generate_course_title(
    primary_concept: str,
    pattern: ContentPattern,
    role: Optional[EngineerRole] = None,
) -> str:
    concept = primary_concept[:1].upper() + primary_concept[1:]
    if role is not None:
        return f"{concept} for {_ROLE_TITLES[EngineerRole(role)]} Engineers"
    if pattern.complexity == Difficulty.ADVANCED:
        return f"Advanced {concept} with Sentry"
    if pattern.complexity == Difficulty.BEGINNER:
        return f"Getting Started with {concept}"
    return f"Mastering {concept} with Sentry"


def generate_course_description(content: SynthesizedContent, pattern: ContentPattern, max_length: int) -> str:
    primary = pattern.concepts[0] if pattern.concepts else "Sentry monitoring"
    benefit = content.use_cases[0] if content.use_cases else "improve application reliability"
    description = f"Learn how to effectively implement {primary} to {benefit}. "
    if content.key_takeaways:
        description += f"Master {' and '.join(content.key_takeaways[:2])}."
    description = description.strip()
    if len(description) > max_length:
        description = description[: max_length - 3] + "..."
    return description


def calculate_course_duration(module_count: int, complexity: Difficulty | str) -> str:
    multiplier = _DURATION_MULTIPLIER.get(Difficulty(complexity), 1.0)
    total_minutes = int(module_count * 15 * multiplier + 0.5)
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes} min"
    if minutes == 0:
        return f"{hours} hr{'s' if hours > 1 else ''}"
    return f"{total_minutes / 60:.1f} hrs"


# ─── Structure compliance ────────────────────────────────────────────────────

def validate_structure_compliance(content: Any, target_structure: str) -> ComplianceResult:
    """
    Check a course, module or learning-path step (model, dataclass or dict)
    against the minimum shape the catalogue expects.
    """
    data = _as_dict(content)
    issues: list[str] = []
    suggestions: list[str] = []

    if target_structure == "course":
        if len(str(data.get("title") or "")) < 10:
            issues.append("Course title too short")
            suggestions.append("Title should be at least 10 characters and descriptive")
        if len(str(data.get("description") or "")) < 50:
            issues.append("Course description too short")
            suggestions.append("Description should be at least 50 characters")
        if len(data.get("generated_modules") or []) < 3:
            issues.append("Insufficient number of modules")
            suggestions.append("Course should have at least 3 modules for comprehensive coverage")
    elif target_structure == "module":
        if len(data.get("key_takeaways") or []) < 2:
            issues.append("Insufficient key takeaways")
            suggestions.append("Each module should have at least 2-3 key takeaways")
        if not data.get("scenario"):
            issues.append("Missing scenario")
            suggestions.append("Include a real-world scenario to provide context")
    elif target_structure == "learning_path":
        if len(data.get("outcomes") or []) < 2:
            issues.append("Insufficient learning outcomes")
            suggestions.append("Learning path step should have clear outcomes")
    else:
        raise ValueError(f"Unknown target structure: {target_structure!r}")

    return ComplianceResult(is_compliant=not issues, issues=issues, suggestions=suggestions)


# ─── Internal helpers ────────────────────────────────────────────────────────

def _extract_actions(texts: Iterable[str]) -> list[str]:
    found: list[str] = []
    for text in texts:
        for pattern in _ACTION_PATTERNS:
            found.extend(m.lower() for m in pattern.findall(text))
    return found


def _find_terms(texts: Iterable[str], terms: Iterable[str]) -> list[str]:
    terms = tuple(terms)
    return [term for text in texts for term in terms if term in text.lower()]


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _as_dict(content: Any) -> dict[str, Any]:
    if isinstance(content, BaseModel):
        return content.model_dump()
    if dataclasses.is_dataclass(content) and not isinstance(content, type):
        return dataclasses.asdict(content)
    if isinstance(content, Mapping):
        return dict(content)
    raise TypeError(f"Cannot check structure of {type(content).__name__}")
