"""
generation_service.py — Research-to-course generation pipeline
===============================================================
``ContentGenerationService`` turns a ``ContentGenerationRequest`` plus its
researched content into an ``AIGeneratedCourse`` and drives the request's
progress through the store.

Status flow
-----------
  pending → researching → generating → review-needed
  any non-terminal status → error   (progress reset to 0, exception re-raised)

Progress checkpoints inside ``generate_course_content``
  40 %  synthesizing research
  60 %  course metadata and modules
  80 %  role personalizations
  100 % status review-needed, course persisted

Course title, description and module count (clamped to 3..6) come from
``map_to_existing_structure`` using the caller's ``ContentTemplate`` or, when
none is given, one derived from the synthesized content.

Two execution modes
-------------------
Mock (default)   Synthesis, metadata, modules and personalizations are built
                 deterministically from the keywords and the research.
Live             When OPENAI_API_KEY is real and FORCE_MOCK_MODE is off, each
                 step is a JSON-mode completion.  A failed synthesis fails the
                 job; metadata, module and personalization failures fall back
                 to the deterministic builders.

Background jobs
---------------
``start_content_generation`` schedules one asyncio task per request id and
returns immediately.  The task sleeps ``GENERATION_DELAY_SECONDS``, runs
research when none was supplied, then generates.  ``cancel_generation`` is
the only way to stop a job.  A request that already produced a course
(review-needed or later) cannot be started again.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import math
import textwrap
import time
import uuid
from typing import Any, Iterable, Optional

from sentry_academy.ai_client import AIClient, AIClientError
from sentry_academy.config import Settings, get_settings
from sentry_academy.generation_store import GenerationStore
from sentry_academy.guardrails import ensure_valid_request
from sentry_academy.logger import request_context
from sentry_academy.models import (
    PIPELINE_DONE_STATUSES,
    AIGeneratedCourse,
    AIGeneratedModule,
    AIGeneratedPersonalization,
    ContentConfig,
    ContentGenerationRequest,
    ContentTemplate,
    Difficulty,
    EngineerRole,
    GenerationProgress,
    GenerationResponse,
    GenerationStatus,
    ResearchedContent,
    SentryFeature,
    SynthesizedContent,
)
from sentry_academy.rate_limit import RateLimitExceeded
from sentry_academy.research_engine import ContentResearchEngine
from sentry_academy.template_matcher import (
    ContentPattern,
    ROLE_CONTEXTS,
    StructureMapping,
    analyze_content_patterns,
    calculate_course_duration,
    create_concept_module,
    create_role_specific_content,
    map_to_existing_structure,
)

logger = logging.getLogger(__name__)

MIN_MODULES = 3
MAX_MODULES = 6
MAX_CONCEPTS = 6
WORDS_PER_MINUTE = 200

# A request may (re)start generation only from these statuses.
STARTABLE_STATUSES = frozenset({
    GenerationStatus.PENDING,
    GenerationStatus.RESEARCHING,
    GenerationStatus.ERROR,
})

_LEVELS = {
    Difficulty.BEGINNER:     "Beginner",
    Difficulty.INTERMEDIATE: "Intermediate",
    Difficulty.ADVANCED:     "Advanced",
}

# Failures that degrade a live step to its deterministic fallback.
_RECOVERABLE = (AIClientError, RateLimitExceeded, ValueError)


# ─── Prompts (live mode) ─────────────────────────────────────────────────────

_SYNTHESIS_PROMPT = textwrap.dedent("""
    You are an expert technical education content synthesizer specializing in
    Sentry observability tools. Analyse the research content and extract key
    learning concepts, practical examples and best practices.

    Respond with ONLY a JSON object of this shape:
    {
      "main_concepts": ["..."],
      "key_takeaways": ["..."],
      "code_examples": ["..."],
      "use_cases": ["..."],
      "best_practices": ["..."],
      "common_pitfalls": ["..."],
      "related_features": ["..."]
    }
""").strip()

_METADATA_PROMPT = textwrap.dedent("""
    You are an expert course designer for technical education. Create engaging
    course metadata from the synthesized content.

    Respond with ONLY a JSON object of this shape:
    {
      "title": "Course Title",
      "description": "Compelling 2-3 sentence description",
      "duration": "X hrs or X min",
      "category": "Category name",
      "rating": 4.5
    }
""").strip()

_MODULE_PROMPT = textwrap.dedent("""
    You are an expert technical curriculum designer. Create one detailed course
    module for Sentry education. Make it practical and actionable for engineers.

    Respond with ONLY a JSON object of this shape:
    {
      "title": "Module Title",
      "description": "2-3 sentence module description",
      "duration": "X min",
      "key_takeaways": ["...", "...", "..."],
      "scenario": "Real-world scenario description",
      "code_example": "Code example with comments",
      "source_references": ["url"]
    }
""").strip()

_PERSONALIZATION_PROMPT = textwrap.dedent("""
    You are an expert in role-specific technical education. Explain the course
    content so that it resonates with one engineering role.

    Respond with ONLY a JSON object of this shape:
    {
      "explanation": "Role-specific explanation of the content",
      "why_relevant": "Why this matters specifically for this role",
      "next_step_nudge": "Encouraging next step guidance",
      "difficulty": "beginner | intermediate | advanced",
      "role_specific_examples": ["..."],
      "role_specific_use_cases": ["..."]
    }
""").strip()


# ─── Quality score ───────────────────────────────────────────────────────────

def calculate_quality_score(
    synthesized: SynthesizedContent,
    modules: list[AIGeneratedModule],
    personalizations: list[AIGeneratedPersonalization],
    researched: list[ResearchedContent],
) -> float:
    """
    Weighted heuristic in [0, 1]:

      richness    min(0.3, 0.1·concepts + 0.1·takeaways + 0.05·code + 0.05·practices)
      modules     0.25 × mean module confidence
      coverage    0.20 when any personalization exists
      research    0.15 × mean research relevance
      diversity   0.10 × min(distinct sources / 4, 1)
    """
    richness = min(0.3, (
        len(synthesized.main_concepts) * 0.1
        + len(synthesized.key_takeaways) * 0.1
        + len(synthesized.code_examples) * 0.05
        + len(synthesized.best_practices) * 0.05
    ))
    confidence = sum(m.confidence for m in modules) / len(modules) if modules else 0.0
    coverage = 0.2 if personalizations else 0.0
    relevance = sum(r.relevance_score for r in researched) / len(researched) if researched else 0.0
    diversity = min(len({r.source for r in researched}) / 4, 1.0)
    score = richness + confidence * 0.25 + coverage + relevance * 0.15 + diversity * 0.1
    return round(min(score, 1.0), 4)


def clamp_module_count(count: int) -> int:
    return min(max(count, MIN_MODULES), MAX_MODULES)


def estimate_reading_time(text: str) -> int:
    return max(1, math.ceil(len(text.split()) / WORDS_PER_MINUTE))


def new_course_id() -> str:
    return f"ai-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def unique_keywords(keywords: Iterable[str]) -> list[str]:
    """Stripped, non-blank keywords with case-insensitive duplicates removed."""
    seen: set[str] = set()
    result: list[str] = []
    for keyword in keywords:
        cleaned = keyword.strip()
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            result.append(cleaned)
    return result


def _single_role(request: ContentGenerationRequest) -> Optional[EngineerRole]:
    """The target role when there is exactly one; a shared course gets a role-neutral title."""
    return request.target_roles[0] if len(request.target_roles) == 1 else None


# ─── Deterministic synthesis ─────────────────────────────────────────────────

def _keyword_code_example(keyword: str) -> str:
    name = keyword.replace('"', "'")
    return (
        "import sentry_sdk\n\n"
        "sentry_sdk.init(\n"
        '    dsn="YOUR_DSN_HERE",\n'
        "    traces_sample_rate=1.0,\n"
        ")\n\n"
        f'with sentry_sdk.start_transaction(op="task", name="{name}"):\n'
        "    run_task()"
    )


def synthesize_research(
    researched: list[ResearchedContent],
    keywords: list[str],
    include_code_examples: bool = True,
) -> SynthesizedContent:
    """Deterministic synthesis: keywords first, then the research's strongest topics."""
    ranked = sorted(researched, key=lambda r: -r.relevance_score)
    concepts = unique_keywords([*keywords, *(t for r in ranked for t in r.key_topics)])[:MAX_CONCEPTS]

    takeaways: list[str] = []
    for concept in concepts:
        takeaways += [
            f"Understand how {concept} fits into your Sentry setup",
            f"Apply {concept} data to find and fix issues faster",
        ]
    primary = keywords[0] if keywords else (concepts[0] if concepts else "monitoring")
    for extra in (
        f"Connect {primary} insights to alerts and dashboards",
        f"Share {primary} findings with your team",
        f"Keep {primary} signal high and noise low",
    ):
        if len(takeaways) >= 5:
            break
        takeaways.append(extra)

    code_examples = unique_keywords(c for r in ranked for c in r.code_examples)[:3]
    if not code_examples and include_code_examples:
        code_examples = [_keyword_code_example(primary)]

    use_cases = unique_keywords([
        *(u for r in ranked for u in r.use_cases),
        *(f"Use {k} to catch regressions before users report them" for k in keywords),
    ])[:5]

    text = " ".join([*keywords, *concepts]).lower()
    related = [f.value for f in SentryFeature if f.value.replace("-", " ") in text or f.value in text]

    return SynthesizedContent(
        main_concepts=concepts,
        key_takeaways=takeaways,
        code_examples=code_examples,
        use_cases=use_cases,
        best_practices=[
            f"Instrument {primary} as early as possible in new services",
            "Tag events with release and environment information",
            "Set sample rates deliberately for production traffic",
            "Route alerts to the team that owns the code",
            "Review issue trends after every deploy",
        ],
        common_pitfalls=[
            f"Collecting {primary} data nobody looks at",
            "Leaving sample rates at development defaults in production",
            "Alerting on every event instead of on trends",
        ],
        related_features=related,
    )


def _str_list(value: Any) -> list[str]:
    return [str(v) for v in value] if isinstance(value, list) else []


# ─── Service ─────────────────────────────────────────────────────────────────

class ContentGenerationService:
    """Owns the generation jobs for one ``GenerationStore``."""

    def __init__(
        self,
        store: GenerationStore,
        research_engine: Optional[ContentResearchEngine] = None,
        ai_client: Optional[AIClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store
        self._research = research_engine or ContentResearchEngine(store, settings=self._settings)
        if ai_client is None and self._settings.live_mode:
            ai_client = AIClient(self._settings.openai)
        self._ai = ai_client
        self._jobs: dict[str, asyncio.Task[AIGeneratedCourse]] = {}

    @property
    def live_mode(self) -> bool:
        return self._ai is not None and self._ai.is_configured

    # ── Entry points ─────────────────────────────────────────────────────────

    async def submit_request(
        self,
        request: ContentGenerationRequest,
        template: Optional[ContentTemplate] = None,
    ) -> GenerationResponse:
        """
        Validate, store, research, then schedule generation.

        Raises:
            RequestValidationError – a BLOCK guardrail failed; nothing was stored.
        """
        ensure_valid_request(request)
        refusal = self._start_refusal(request.id)
        if refusal is not None:
            return refusal
        self._store.add_generation_request(request)
        self._store.update_generation_progress(
            request.id,
            status=GenerationStatus.RESEARCHING,
            current_step="Starting research phase",
            progress=5,
            logs=["Generation request submitted"],
        )
        with request_context(request.id):
            try:
                researched = await self._research.research_sentry_content(
                    unique_keywords(request.keywords), request.enabled_sources(), request.id,
                )
            except Exception as exc:
                self._mark_failed(request.id, exc)
                raise
        return self.start_content_generation(request, researched, template)

    def start_content_generation(
        self,
        request: ContentGenerationRequest,
        researched: Optional[list[ResearchedContent]] = None,
        template: Optional[ContentTemplate] = None,
    ) -> GenerationResponse:
        """
        Schedule the background job and return at once.  Needs a running event
        loop.  Only a pending, researching or errored request can be started;
        an errored one is queued again first.
        """
        refusal = self._start_refusal(request.id)
        if refusal is not None:
            return refusal
        progress = self._store.get_generation_progress(request.id)
        if self._store.get_generation_request(request.id) is None:
            self._store.add_generation_request(request)
        elif progress is not None and progress.status == GenerationStatus.ERROR:
            self._store.update_generation_progress(
                request.id,
                status=GenerationStatus.PENDING,
                current_step="Queued for processing",
                progress=0,
                error=None,
                logs=["Generation restarted"],
            )

        try:
            task = asyncio.get_running_loop().create_task(self._run_job(request, researched, template))
        except RuntimeError as exc:
            logger.error("Could not schedule generation for %s: %s", request.id, exc)
            return GenerationResponse(success=False, request_id=request.id, error=str(exc))

        self._jobs[request.id] = task
        task.add_done_callback(functools.partial(self._on_job_done, request.id))
        logger.info("Scheduled generation for %s", request.id)
        return GenerationResponse(
            success=True,
            request_id=request.id,
            estimated_duration=self._settings.generation.estimated_duration,
        )

    def _start_refusal(self, request_id: str) -> Optional[GenerationResponse]:
        if self.is_generating(request_id):
            return GenerationResponse(
                success=False,
                request_id=request_id,
                error="Generation already in progress for this request",
            )
        progress = self._store.get_generation_progress(request_id)
        if progress is not None and progress.status not in STARTABLE_STATUSES:
            return GenerationResponse(
                success=False,
                request_id=request_id,
                error=f"Generation cannot start from status {progress.status.value}",
            )
        return None

    def cancel_generation(self, request_id: str) -> bool:
        task = self._jobs.pop(request_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        progress = self._store.get_generation_progress(request_id)
        if progress is not None and progress.status not in PIPELINE_DONE_STATUSES:
            self._store.update_generation_progress(
                request_id,
                status=GenerationStatus.ERROR,
                current_step="Generation cancelled",
                error="Generation cancelled",
                logs=["Generation cancelled by request"],
            )
        logger.info("Cancelled generation for %s", request_id)
        return True

    def is_generating(self, request_id: str) -> bool:
        task = self._jobs.get(request_id)
        return task is not None and not task.done()

    async def wait_for_generation(self, request_id: str, timeout: Optional[float] = None) -> GenerationProgress:
        return await self._store.wait_for_status(request_id, PIPELINE_DONE_STATUSES, timeout)

    # ── Pipeline ─────────────────────────────────────────────────────────────

    async def generate_course_content(
        self,
        request: ContentGenerationRequest,
        researched: list[ResearchedContent],
        template: Optional[ContentTemplate] = None,
    ) -> AIGeneratedCourse:
        """
        Build, persist and return the course.  *template* fixes the course
        shape; without one a template is derived from the synthesized content.
        """
        with request_context(request.id):
            try:
                return await self._generate(request, list(researched), template)
            except Exception as exc:
                self._mark_failed(request.id, exc)
                raise

    def _mark_failed(self, request_id: str, exc: BaseException) -> None:
        logger.error("Generation failed for %s: %s", request_id, exc)
        self._store.update_generation_progress(
            request_id,
            status=GenerationStatus.ERROR,
            current_step="Content generation failed",
            progress=0,
            error=str(exc) or type(exc).__name__,
            logs=[f"Error during generation: {exc}"],
        )

    async def _generate(
        self,
        request: ContentGenerationRequest,
        researched: list[ResearchedContent],
        template: Optional[ContentTemplate],
    ) -> AIGeneratedCourse:
        self._store.update_generation_progress(
            request.id,
            status=GenerationStatus.GENERATING,
            current_step="Synthesizing research into course content",
            progress=40,
            logs=["Starting content generation from research data"],
        )
        synthesized = await self._synthesize(researched, request)
        pattern = analyze_content_patterns(synthesized)
        structure = map_to_existing_structure(synthesized, _single_role(request), template)
        module_count = clamp_module_count(structure.module_count)

        self._store.update_generation_progress(
            request.id,
            current_step="Generating course structure and modules",
            progress=60,
            logs=["Research synthesized, generating course structure"],
        )
        metadata = await self._course_metadata(synthesized, pattern, request, structure, module_count)
        modules = await self._modules(synthesized, pattern, request, researched, module_count)

        self._store.update_generation_progress(
            request.id,
            current_step="Creating role-specific personalizations",
            progress=80,
            logs=["Modules generated, creating role personalizations"],
        )
        personalizations = [
            await self._personalization(synthesized, pattern, role) for role in request.target_roles
        ]

        course = AIGeneratedCourse(
            id=new_course_id(),
            **metadata,
            generation_request=request,
            research_sources=researched,
            synthesized_content=synthesized,
            generated_modules=modules,
            role_personalizations=personalizations,
            quality_score=calculate_quality_score(synthesized, modules, personalizations, researched),
        )
        self._store.add_course(course)
        self._store.update_generation_progress(
            request.id,
            status=GenerationStatus.REVIEW_NEEDED,
            current_step="Content generation complete - ready for review",
            progress=100,
            estimated_time_remaining=0,
            logs=["Course generation completed successfully"],
        )
        logger.info("Generated course %s (%d modules, quality %.2f)",
                    course.id, len(modules), course.quality_score)
        return course

    async def _run_job(
        self,
        request: ContentGenerationRequest,
        researched: Optional[list[ResearchedContent]],
        template: Optional[ContentTemplate] = None,
    ) -> AIGeneratedCourse:
        await asyncio.sleep(self._settings.generation.delay_seconds)
        if researched is None:
            with request_context(request.id):
                try:
                    researched = await self._research.research_sentry_content(
                        unique_keywords(request.keywords), request.enabled_sources(), request.id,
                    )
                except Exception as exc:
                    self._mark_failed(request.id, exc)
                    raise
        return await self.generate_course_content(request, researched, template)

    def _on_job_done(self, request_id: str, task: asyncio.Task) -> None:
        if self._jobs.get(request_id) is task:
            del self._jobs[request_id]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background generation failed for %s: %s", request_id, exc)

    # ── Steps ────────────────────────────────────────────────────────────────

    async def _synthesize(
        self,
        researched: list[ResearchedContent],
        request: ContentGenerationRequest,
    ) -> SynthesizedContent:
        keywords = unique_keywords(request.keywords)
        if not self.live_mode:
            return synthesize_research(researched, keywords, request.include_code_examples)

        summary = "\n\n".join(f"Source: {r.title}\nContent: {r.content[:1000]}..." for r in researched)
        user_prompt = (
            f"Synthesize the following research for Sentry concepts related to: {', '.join(keywords)}\n\n"
            f"Research Content:\n{summary}\n\n"
            "Extract the educational components most valuable for engineers learning these features."
        )
        try:
            data = await asyncio.to_thread(self._ai.complete_json, _SYNTHESIS_PROMPT, user_prompt)
        except _RECOVERABLE as exc:
            raise AIClientError("Failed to synthesize research content") from exc
        return SynthesizedContent(**{
            name: _str_list(data.get(name)) for name in SynthesizedContent.model_fields
        })

    async def _course_metadata(
        self,
        synthesized: SynthesizedContent,
        pattern: ContentPattern,
        request: ContentGenerationRequest,
        structure: StructureMapping,
        module_count: int,
    ) -> dict[str, Any]:
        keywords = unique_keywords(request.keywords)
        metadata: dict[str, Any] = {
            "title":       structure.course_title,
            "description": structure.course_description,
            "duration":    calculate_course_duration(module_count, pattern.complexity),
            "level":       _LEVELS[request.content_type],
            "category":    "Monitoring",
            "rating":      4.5,
            "students":    0,
            "is_popular":  False,
        }
        if not self.live_mode:
            return metadata

        user_prompt = (
            f"Create course metadata for a Sentry course about: {', '.join(keywords)}\n\n"
            f"Target skill level: {request.content_type.value}\n"
            f"Target roles: {', '.join(r.value for r in request.target_roles)}\n\n"
            f"Key concepts: {', '.join(synthesized.main_concepts)}\n"
            f"Main takeaways: {', '.join(synthesized.key_takeaways[:3])}"
        )
        try:
            data = await asyncio.to_thread(self._ai.complete_json, _METADATA_PROMPT, user_prompt)
        except _RECOVERABLE as exc:
            logger.warning("Metadata generation failed, using defaults: %s", exc)
            return metadata
        for key in ("title", "description", "duration", "category"):
            if isinstance(data.get(key), str) and data[key].strip():
                metadata[key] = data[key].strip()
        try:
            metadata["rating"] = min(max(float(data.get("rating", 4.5)), 3.0), 5.0)
        except (TypeError, ValueError):
            pass
        return metadata

    async def _modules(
        self,
        synthesized: SynthesizedContent,
        pattern: ContentPattern,
        request: ContentGenerationRequest,
        researched: list[ResearchedContent],
        module_count: int,
    ) -> list[AIGeneratedModule]:
        modules: list[AIGeneratedModule] = []
        for index in range(module_count):
            concept = (synthesized.main_concepts[index] if index < len(synthesized.main_concepts)
                       else f"Advanced Topic {index + 1}")
            if self.live_mode:
                module = await self._live_module(concept, synthesized, request, index)
            else:
                module = create_concept_module(concept, synthesized, pattern, index)
            modules.append(self._finish_module(module, concept, request, researched))
        return modules

    async def _live_module(
        self,
        concept: str,
        synthesized: SynthesizedContent,
        request: ContentGenerationRequest,
        index: int,
    ) -> AIGeneratedModule:
        user_prompt = (
            f"Create a module about: {concept}\n\n"
            f"Course keywords: {', '.join(request.keywords)}\n"
            f"Skill level: {request.content_type.value}\n"
            f"Available takeaways: {', '.join(synthesized.key_takeaways)}\n"
            f"Available code examples: {', '.join(synthesized.code_examples[:2])}\n"
            f"Available use cases: {', '.join(synthesized.use_cases[:2])}\n"
            f"Best practices: {', '.join(synthesized.best_practices[:2])}"
        )
        try:
            data = await asyncio.to_thread(self._ai.complete_json, _MODULE_PROMPT, user_prompt)
        except _RECOVERABLE as exc:
            logger.warning("Module %d generation failed, using a basic module: %s", index + 1, exc)
            return AIGeneratedModule(
                id=f"module-{index + 1}",
                title=concept,
                description=f"Learn about {concept} and how to use it effectively with Sentry.",
                key_takeaways=[
                    f"Understand {concept} fundamentals",
                    f"Implement {concept} in your applications",
                    f"Monitor and troubleshoot {concept} issues",
                ],
                scenario=f"You're tasked with implementing {concept} monitoring for your team's "
                         "production applications.",
                code_example=_keyword_code_example(concept),
                confidence=0.6,
            )
        return AIGeneratedModule(
            id=f"module-{index + 1}",
            title=str(data.get("title") or concept),
            description=str(data.get("description") or f"Learn about {concept} in Sentry."),
            duration=str(data.get("duration") or "15 min"),
            key_takeaways=_str_list(data.get("key_takeaways")),
            scenario=str(data.get("scenario") or ""),
            code_example=str(data.get("code_example") or ""),
            source_references=_str_list(data.get("source_references")),
            confidence=0.8,
        )

    def _finish_module(
        self,
        module: AIGeneratedModule,
        concept: str,
        request: ContentGenerationRequest,
        researched: list[ResearchedContent],
    ) -> AIGeneratedModule:
        """Apply the request's content flags and fill what the builders left empty."""
        takeaways = module.key_takeaways
        if len(takeaways) < 2:
            takeaways = [
                *takeaways,
                f"Understand {concept} fundamentals",
                f"Implement {concept} in your applications",
            ][:3]
        references = module.source_references or [
            r.url for r in researched if concept.lower() in (t.lower() for t in r.key_topics)
        ][:3]
        return module.model_copy(update={
            "key_takeaways":     takeaways,
            "scenario":          module.scenario if request.include_scenarios else "",
            "code_example":      module.code_example if request.include_code_examples else "",
            "source_references": references,
            "content_config":    ContentConfig(
                has_hands_on=request.include_code_examples,
                has_scenario=request.include_scenarios,
                has_code_example=request.include_code_examples,
                estimated_reading_time=estimate_reading_time(
                    " ".join([module.description, module.scenario, *takeaways])
                ),
            ),
        })

    async def _personalization(
        self,
        synthesized: SynthesizedContent,
        pattern: ContentPattern,
        role: EngineerRole,
    ) -> AIGeneratedPersonalization:
        fallback = create_role_specific_content(synthesized, pattern, role)
        if not self.live_mode:
            return fallback

        context = ROLE_CONTEXTS[role]
        user_prompt = (
            f"Create role-specific personalization for: {role.value}\n\n"
            f"Role focus: {', '.join(context.focus_areas)}\n"
            f"Content concepts: {', '.join(synthesized.main_concepts)}\n"
            f"Use cases: {', '.join(synthesized.use_cases)}\n"
            f"Best practices: {', '.join(synthesized.best_practices)}"
        )
        try:
            data = await asyncio.to_thread(self._ai.complete_json, _PERSONALIZATION_PROMPT, user_prompt)
            return AIGeneratedPersonalization(
                role_id=role,
                explanation=str(data.get("explanation") or fallback.explanation),
                why_relevant=str(data.get("why_relevant") or fallback.why_relevant),
                next_step_nudge=str(data.get("next_step_nudge") or fallback.next_step_nudge),
                difficulty=data.get("difficulty") or fallback.difficulty,
                role_specific_examples=_str_list(data.get("role_specific_examples"))
                or fallback.role_specific_examples,
                role_specific_use_cases=_str_list(data.get("role_specific_use_cases"))
                or fallback.role_specific_use_cases,
            )
        except _RECOVERABLE as exc:
            logger.warning("Personalization for %s failed, using template: %s", role.value, exc)
            return fallback
