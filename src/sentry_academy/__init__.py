"""
sentry_academy — Role-based learning paths + AI course generation
==================================================================
Package containing the learning-path catalogue, the learner progress
engine, and the content-generation pipeline used by the admin panel.

Module map
----------
  models.py                 Shared enums, Pydantic models and dataclasses.
  config.py                 Settings loaded from .env; live vs mock mode.
  logger.py                 Request-id aware logging setup.
  catalog.py                Roles, learning paths, personalisations, courses.
  storage.py                Key-value persistence (in-memory + SQLite).

  recommendations.py        Next-content selection + completion cascade.
  progress_store.py         Single learner's progress, persisted as JSON.
  feature_mapper.py         Onboarding: known features → completed steps.

  generation_store.py       Repository for requests, progress, AI courses,
                            approval workflows and bulk operations.
  rate_limit.py             Sliding-window rate limiter.
  research_engine.py        Nine simulated research sources + ranking.
  ai_client.py              OpenAI chat-completions wrapper (live mode).
  template_matcher.py       Synthesised content → course/module shape.
  generation_service.py     Generation state machine + quality score.
  content_validator.py      Structural / technical / educational checks.
  review.py                 Approval workflow, transitions, bulk actions.
  guardrails.py             Request validation + trusted research URLs.

Pipeline order
--------------
  RequestGuardrails [R-01..R-05] → GenerationStore.add_generation_request
  → ContentResearchEngine (pending → researching, 10% … 35%)
  → ContentGenerationService (generating 40% → 60% → 80%)
  → review-needed (100%) → ContentValidator (on demand)
  → review.approve_course / reject_course / run_bulk_operation
  → published
"""
__version__ = "0.1.0"
