"""
Factory helpers for building test objects.
Imported by conftest.py fixtures AND directly by test modules.
"""
import sys
import os

# Ensure both src/ and tests/ are importable in all test files
_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Force mock mode (safe to call multiple times)
os.environ["FORCE_MOCK_MODE"] = "true"
os.environ.setdefault("OPENAI_API_KEY", "<placeholder>")
os.environ["GENERATION_DELAY_SECONDS"] = "0.01"

from sentry_academy.models import (
    AIGeneratedCourse,
    AIGeneratedModule,
    AIGeneratedPersonalization,
    ContentConfig,
    ContentGenerationRequest,
    Difficulty,
    EngineerRole,
    ResearchedContent,
    ResearchSource,
    SynthesizedContent,
)

SDK_SNIPPET = 'import sentry_sdk\n\nsentry_sdk.init(dsn="YOUR_DSN_HERE", traces_sample_rate=1.0)'


def make_request(
    request_id: str = "req-1",
    keywords: list | None = None,
    roles: list | None = None,
    **overrides,
) -> ContentGenerationRequest:
    return ContentGenerationRequest(
        id           = request_id,
        keywords     = ["profiling"] if keywords is None else keywords,
        target_roles = [EngineerRole.BACKEND] if roles is None else roles,
        **overrides,
    )


def make_research(
    source: ResearchSource = ResearchSource.DOCS_MAIN,
    relevance: float = 0.9,
    url: str = "https://docs.sentry.io/product/profiling/",
    topics: list | None = None,
) -> ResearchedContent:
    return ResearchedContent(
        source          = source,
        url             = url,
        title           = "Profiling",
        content         = "Profiling shows where your code spends time. Use the SDK to enable it.",
        relevance_score = relevance,
        key_topics      = topics if topics is not None else ["profiling", "performance monitoring"],
        code_examples   = [SDK_SNIPPET],
        use_cases       = ["Production application monitoring"],
    )


def make_module(index: int = 0, confidence: float = 0.85, **overrides) -> AIGeneratedModule:
    fields = dict(
        id            = f"module-{index + 1}",
        title         = f"Configure Sentry profiling part {index + 1}",
        description   = "Learn how profiling data helps you find slow code paths in production.",
        key_takeaways = ["Enable profiling in the SDK", "Read flame graphs"],
        scenario      = "Your checkout API got slower after the last deploy and nobody knows why.",
        code_example  = SDK_SNIPPET,
        content_config = ContentConfig(has_hands_on=True, has_scenario=True, has_code_example=True),
        confidence    = confidence,
    )
    fields.update(overrides)
    return AIGeneratedModule(**fields)


def make_personalization(role: EngineerRole = EngineerRole.BACKEND, **overrides) -> AIGeneratedPersonalization:
    fields = dict(
        role_id         = role,
        explanation     = "As an engineer focused on API performance, profiling is crucial for server errors.",
        why_relevant    = "This directly addresses API latency that you encounter in your role.",
        next_step_nudge = "Ready to set up API performance tracking? Continue to the next module.",
        difficulty      = Difficulty.INTERMEDIATE,
        role_specific_examples  = ["API endpoints"],
        role_specific_use_cases = ["Reduce API latency with profiling"],
    )
    fields.update(overrides)
    return AIGeneratedPersonalization(**fields)


def make_synthesized(**overrides) -> SynthesizedContent:
    fields = dict(
        main_concepts  = ["profiling", "performance monitoring", "transactions", "flame graphs"],
        key_takeaways  = [
            "Enable profiling in the SDK",
            "Read flame graphs",
            "Find slow functions",
            "Compare releases",
            "Share findings with your team",
        ],
        code_examples  = [SDK_SNIPPET, SDK_SNIPPET + "\n# profiles_sample_rate"],
        use_cases      = ["Production application monitoring", "Performance optimization"],
        best_practices = ["Sample deliberately", "Tag releases", "Review after deploys"],
        common_pitfalls = ["Profiling everything in production"],
    )
    fields.update(overrides)
    return SynthesizedContent(**fields)


def make_course(
    course_id: str = "c1",
    request: ContentGenerationRequest | None = None,
    module_count: int = 4,
    **overrides,
) -> AIGeneratedCourse:
    request = request or make_request(request_id=f"req-{course_id}")
    fields = dict(
        id                    = course_id,
        title                 = "Sentry profiling Guide",
        description           = "Learn profiling with Sentry. Master the concepts and apply them in real-world scenarios.",
        duration              = "1.2 hrs",
        level                 = "Intermediate",
        generation_request    = request,
        research_sources      = [make_research()],
        synthesized_content   = make_synthesized(),
        generated_modules     = [make_module(i) for i in range(module_count)],
        role_personalizations = [make_personalization(r) for r in request.target_roles],
        quality_score         = 0.9,
    )
    fields.update(overrides)
    return AIGeneratedCourse(**fields)
