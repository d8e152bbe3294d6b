"""
Data models for Sentry Academy.

Learner-side models (roles, features, UserProgress) and the admin-side
content-generation models (requests, progress, research, AI courses,
approval workflows, bulk operations, settings) live here so every
component shares one vocabulary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─── Learner enumerations ────────────────────────────────────────────────────

class EngineerRole(str, Enum):
    """Persona a learner picks during onboarding."""
    FRONTEND   = "frontend"
    BACKEND    = "backend"
    FULLSTACK  = "fullstack"
    SRE        = "sre"
    AI_ML      = "ai-ml"
    PM_MANAGER = "pm-manager"


class SentryFeature(str, Enum):
    """Product area a learning-path step teaches."""
    ERROR_TRACKING         = "error-tracking"
    PERFORMANCE_MONITORING = "performance-monitoring"
    LOGGING                = "logging"
    SESSION_REPLAY         = "session-replay"
    DISTRIBUTED_TRACING    = "distributed-tracing"
    RELEASE_HEALTH         = "release-health"
    DASHBOARDS_ALERTS      = "dashboards-alerts"
    INTEGRATIONS           = "integrations"
    USER_FEEDBACK          = "user-feedback"
    SEER_MCP               = "seer-mcp"
    CUSTOM_METRICS         = "custom-metrics"
    METRICS_INSIGHTS       = "metrics-insights"
    STAKEHOLDER_REPORTING  = "stakeholder-reporting"


class Difficulty(str, Enum):
    BEGINNER     = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED     = "advanced"


class PreferredContentType(str, Enum):
    HANDS_ON   = "hands-on"
    CONCEPTUAL = "conceptual"
    MIXED      = "mixed"


# ─── Learner progress (persisted as one camelCase JSON blob) ─────────────────

class UserProgress(BaseModel):
    """
    The single learner's progress record.

    Serialised with camelCase keys (``model_dump_json(by_alias=True)``) so the
    persisted blob keeps the layout the web client reads.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role:                   Optional[EngineerRole] = None
    current_step:           int  = Field(default=0, ge=0)
    completed_steps:        list[str] = Field(default_factory=list)
    completed_modules:      list[str] = Field(default_factory=list)
    completed_features:     list[SentryFeature] = Field(default_factory=list)
    onboarding_completed:   bool = False
    last_active_date:       datetime = Field(default_factory=utcnow)
    preferred_content_type: PreferredContentType = PreferredContentType.MIXED
    has_seen_onboarding:    bool = False


# ─── Generation enumerations ─────────────────────────────────────────────────

class GenerationStatus(str, Enum):
    PENDING       = "pending"
    RESEARCHING   = "researching"
    GENERATING    = "generating"
    REVIEW_NEEDED = "review-needed"
    APPROVED      = "approved"
    REJECTED      = "rejected"
    PUBLISHED     = "published"
    ERROR         = "error"


# Allowed moves of a request's status.  ``error`` is reachable from every
# non-terminal state; an errored request may be queued again.
STATUS_TRANSITIONS: dict[GenerationStatus, frozenset[GenerationStatus]] = {
    GenerationStatus.PENDING:       frozenset({GenerationStatus.RESEARCHING, GenerationStatus.ERROR}),
    GenerationStatus.RESEARCHING:   frozenset({GenerationStatus.GENERATING, GenerationStatus.ERROR}),
    GenerationStatus.GENERATING:    frozenset({GenerationStatus.REVIEW_NEEDED, GenerationStatus.ERROR}),
    GenerationStatus.REVIEW_NEEDED: frozenset({GenerationStatus.APPROVED, GenerationStatus.REJECTED,
                                               GenerationStatus.ERROR}),
    GenerationStatus.APPROVED:      frozenset({GenerationStatus.PUBLISHED, GenerationStatus.REJECTED,
                                               GenerationStatus.ERROR}),
    GenerationStatus.REJECTED:      frozenset(),
    GenerationStatus.PUBLISHED:     frozenset(),
    GenerationStatus.ERROR:         frozenset({GenerationStatus.PENDING}),
}

# Statuses at which the generation pipeline itself has finished its work.
PIPELINE_DONE_STATUSES = frozenset({
    GenerationStatus.REVIEW_NEEDED,
    GenerationStatus.APPROVED,
    GenerationStatus.REJECTED,
    GenerationStatus.PUBLISHED,
    GenerationStatus.ERROR,
})


def can_transition(current: GenerationStatus, target: GenerationStatus) -> bool:
    return target in STATUS_TRANSITIONS.get(current, frozenset())


class ResearchSource(str, Enum):
    """The nine research sources; values are the sources' base URLs."""
    DOCS_MAIN    = "https://docs.sentry.io"
    DOCS_PRODUCT = "https://docs.sentry.io/product/"
    BLOG         = "https://blog.sentry.io/"
    SENTRY_MAIN  = "https://sentry.io/"
    VS_LOGGING   = "https://sentry.io/vs/logging/"
    ANSWERS      = "https://sentry.io/answers/"
    SUPPORT      = "https://sentry.zendesk.com/hc/en-us"
    YOUTUBE      = "https://www.youtube.com/@Sentry-monitoring/videos"
    CUSTOMERS    = "https://sentry.io/customers/"


class ApprovalStatus(str, Enum):
    PENDING   = "pending"
    IN_REVIEW = "in-review"
    APPROVED  = "approved"
    REJECTED  = "rejected"


class ReviewCommentType(str, Enum):
    GENERAL    = "general"
    TECHNICAL  = "technical"
    EDITORIAL  = "editorial"
    SUGGESTION = "suggestion"


class BulkOperationType(str, Enum):
    APPROVE = "approve"
    REJECT  = "reject"
    PUBLISH = "publish"
    ARCHIVE = "archive"
    DELETE  = "delete"


class BulkOperationStatus(str, Enum):
    PENDING    = "pending"
    PROCESSING = "processing"
    COMPLETED  = "completed"
    FAILED     = "failed"


# ─── Generation request & progress ───────────────────────────────────────────

class ResearchSourceConfig(BaseModel):
    source:      ResearchSource
    enabled:     bool = True
    priority:    int  = Field(default=3, ge=1, le=5, description="1 = highest priority")
    description: str  = ""


def default_research_sources() -> list[ResearchSourceConfig]:
    """All nine sources enabled, documentation first."""
    return [
        ResearchSourceConfig(source=ResearchSource.DOCS_MAIN, priority=1,
                             description="Official Sentry documentation - highest technical accuracy"),
        ResearchSourceConfig(source=ResearchSource.SENTRY_MAIN, priority=1,
                             description="Main Sentry platform and product information"),
        ResearchSourceConfig(source=ResearchSource.DOCS_PRODUCT, priority=2,
                             description="Product-specific documentation with feature details"),
        ResearchSourceConfig(source=ResearchSource.BLOG, priority=2,
                             description="Engineering blog posts with real-world examples"),
        ResearchSourceConfig(source=ResearchSource.VS_LOGGING, priority=3,
                             description="Comparison content for positioning context"),
        ResearchSourceConfig(source=ResearchSource.ANSWERS, priority=3,
                             description="Community Q&A and troubleshooting resources"),
        ResearchSourceConfig(source=ResearchSource.SUPPORT, priority=4,
                             description="Support documentation and help center"),
        ResearchSourceConfig(source=ResearchSource.YOUTUBE, priority=4,
                             description="Video content and tutorials"),
        ResearchSourceConfig(source=ResearchSource.CUSTOMERS, priority=5,
                             description="Customer case studies and success stories"),
    ]


class ContentGenerationRequest(BaseModel):
    """Admin's request to generate one course.  Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id:                     str
    keywords:               list[str]
    selected_sources:       list[ResearchSourceConfig] = Field(default_factory=default_research_sources)
    target_roles:           list[EngineerRole]
    include_code_examples:  bool = True
    include_scenarios:      bool = True
    generate_learning_path: bool = False
    content_type:           Difficulty = Difficulty.INTERMEDIATE
    created_at:             datetime = Field(default_factory=utcnow)
    created_by:             str = "admin"

    def enabled_sources(self) -> list[ResearchSourceConfig]:
        return [s for s in self.selected_sources if s.enabled]


class GenerationProgress(BaseModel):
    status:                   GenerationStatus = GenerationStatus.PENDING
    current_step:             str   = ""
    progress:                 float = Field(default=0.0, ge=0.0, le=100.0)
    logs:                     list[str] = Field(default_factory=list)
    error:                    Optional[str] = None
    estimated_time_remaining: Optional[int] = None   # seconds


class GenerationResponse(BaseModel):
    success:            bool
    request_id:         str
    estimated_duration: int = 0      # seconds
    error:              Optional[str] = None


# ─── Research & synthesis ────────────────────────────────────────────────────

class ResearchedContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    source:          ResearchSource
    url:             str
    title:           str
    content:         str
    relevance_score: float = Field(ge=0.0, le=1.0)
    extracted_at:    datetime = Field(default_factory=utcnow)
    key_topics:      list[str] = Field(default_factory=list)
    code_examples:   list[str] = Field(default_factory=list)
    use_cases:       list[str] = Field(default_factory=list)


class SynthesizedContent(BaseModel):
    main_concepts:    list[str] = Field(default_factory=list)
    key_takeaways:    list[str] = Field(default_factory=list)
    code_examples:    list[str] = Field(default_factory=list)
    use_cases:        list[str] = Field(default_factory=list)
    best_practices:   list[str] = Field(default_factory=list)
    common_pitfalls:  list[str] = Field(default_factory=list)
    related_features: list[str] = Field(default_factory=list)


# ─── Courses ─────────────────────────────────────────────────────────────────

class Course(BaseModel):
    """Catalogue entry shape shared by hand-written and AI-generated courses."""
    id:          str
    title:       str
    description: str
    duration:    str
    level:       str
    rating:      float = Field(default=4.5, ge=0.0, le=5.0)
    students:    int   = Field(default=0, ge=0)
    category:    str   = "Monitoring"
    is_popular:  bool  = False
    slug:        Optional[str] = None


class ContentConfig(BaseModel):
    has_hands_on:           bool = False
    has_scenario:           bool = False
    has_code_example:       bool = False
    estimated_reading_time: int  = 5   # minutes


class AIGeneratedModule(BaseModel):
    id:                str
    title:             str
    description:       str
    duration:          str = "15 min"
    is_completed:      bool = False
    key_takeaways:     list[str] = Field(default_factory=list)
    scenario:          str = ""
    code_example:      str = ""
    content_config:    ContentConfig = Field(default_factory=ContentConfig)
    source_references: list[str] = Field(default_factory=list)
    confidence:        float = Field(default=0.8, ge=0.0, le=1.0)


class AIGeneratedPersonalization(BaseModel):
    role_id:                 EngineerRole
    explanation:             str
    why_relevant:            str
    next_step_nudge:         str
    difficulty:              Difficulty = Difficulty.INTERMEDIATE
    role_specific_examples:  list[str] = Field(default_factory=list)
    role_specific_use_cases: list[str] = Field(default_factory=list)


class AIGeneratedCourse(Course):
    is_ai_generated:      bool = True
    generation_request:   ContentGenerationRequest
    research_sources:     list[ResearchedContent] = Field(default_factory=list)
    synthesized_content:  SynthesizedContent = Field(default_factory=SynthesizedContent)
    generated_modules:    list[AIGeneratedModule] = Field(default_factory=list)
    role_personalizations: list[AIGeneratedPersonalization] = Field(default_factory=list)
    quality_score:        float = Field(default=0.0, ge=0.0, le=1.0)
    review_notes:         Optional[str] = None
    approved_by:          Optional[str] = None
    approved_at:          Optional[datetime] = None
    is_archived:          bool = False
    generated_at:         datetime = Field(default_factory=utcnow)
    last_modified:        datetime = Field(default_factory=utcnow)
    version:              int = Field(default=1, ge=1)

    # ── Derived helpers ──────────────────────────────────────────────────────

    @property
    def is_approved(self) -> bool:
        return self.approved_at is not None and bool(self.approved_by)

    def to_course(self) -> Course:
        """Down-cast to the plain catalogue shape."""
        return Course.model_validate(self.model_dump(include=set(Course.model_fields)))

    def personalization_for(self, role: EngineerRole) -> Optional[AIGeneratedPersonalization]:
        return next((p for p in self.role_personalizations if p.role_id == role), None)


# ─── Templates ───────────────────────────────────────────────────────────────

class CourseStructure(BaseModel):
    title_pattern:      str = "{concept} with Sentry"
    description_length: int = 150
    module_count:       int = 5
    estimated_duration: str = "2 hrs"


class ModuleStructure(BaseModel):
    title_pattern:         str  = "{action} {concept}"
    description_length:    int  = 100
    include_key_takeaways: bool = True
    include_scenario:      bool = True
    include_code_example:  bool = True


class RolePersonalizationStructure(BaseModel):
    explanation_length: int  = 200
    include_use_cases:  bool = True
    include_next_steps: bool = True


class ContentTemplate(BaseModel):
    course_structure:     CourseStructure = Field(default_factory=CourseStructure)
    module_structure:     ModuleStructure = Field(default_factory=ModuleStructure)
    role_personalization: RolePersonalizationStructure = Field(default_factory=RolePersonalizationStructure)


# ─── Review workflow ─────────────────────────────────────────────────────────

class ReviewComment(BaseModel):
    id:         str
    reviewer:   str
    content:    str
    type:       ReviewCommentType = ReviewCommentType.GENERAL
    module_id:  Optional[str] = None   # set when the comment targets one module
    resolved:   bool = False
    created_at: datetime = Field(default_factory=utcnow)


class ApprovalCriterion(BaseModel):
    id:          str
    name:        str
    description: str
    passed:      bool = False
    notes:       Optional[str] = None


class ApprovalWorkflow(BaseModel):
    id:                str
    course_id:         str
    status:            ApprovalStatus = ApprovalStatus.PENDING
    assigned_reviewer: Optional[str] = None
    review_comments:   list[ReviewComment] = Field(default_factory=list)
    approval_criteria: list[ApprovalCriterion] = Field(default_factory=list)
    created_at:        datetime = Field(default_factory=utcnow)
    reviewed_at:       Optional[datetime] = None

    def unresolved_comments(self) -> list[ReviewComment]:
        return [c for c in self.review_comments if not c.resolved]


class BulkOperationResult(BaseModel):
    course_id: str
    success:   bool
    error:     Optional[str] = None


class BulkOperation(BaseModel):
    id:           str
    type:         BulkOperationType
    course_ids:   list[str]
    status:       BulkOperationStatus = BulkOperationStatus.PENDING
    progress:     float = Field(default=0.0, ge=0.0, le=100.0)
    results:      list[BulkOperationResult] = Field(default_factory=list)
    created_at:   datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    created_by:   str = "admin"


# ─── Settings ────────────────────────────────────────────────────────────────

class RateLimits(BaseModel):
    requests_per_hour: int = Field(default=10, ge=1)
    requests_per_day:  int = Field(default=50, ge=1)


class AIGenerationSettings(BaseModel):
    default_sources:              list[ResearchSourceConfig] = Field(default_factory=default_research_sources)
    max_concurrent_generations:   int   = Field(default=3, ge=1)
    default_quality_threshold:    float = Field(default=0.7, ge=0.0, le=1.0)
    auto_approval_threshold:      float = Field(default=0.85, ge=0.0, le=1.0)
    max_content_length:           int   = 10_000
    enable_experimental_features: bool  = False
    rate_limits:                  RateLimits = Field(default_factory=RateLimits)
