"""
guardrails.py – Request & research guardrails
==============================================
Checks that run before the generation pipeline touches any state, plus the
trusted-domain check applied to every researched URL.

Guardrail levels
----------------
BLOCK   – Hard-stop: the request is rejected, nothing is stored.
WARN    – Soft-stop: the pipeline proceeds with a logged warning.
INFO    – Advisory only.

Guards implemented
------------------
Request guards (before GenerationStore.add_generation_request):
  R-01  At least one non-blank keyword
  R-02  At least one target role
  R-03  At least one enabled research source
  R-04  Keyword hygiene: no keyword longer than 60 characters, no duplicates
  R-05  Enabled sources span more than one priority level

Research guards (inside ContentResearchEngine):
  U-01  Hallucination guard: researched URLs must start with a trusted
        Sentry or YouTube prefix
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from sentry_academy.models import ContentGenerationRequest

logger = logging.getLogger(__name__)


# ─── Enums & data models ─────────────────────────────────────────────────────

class GuardrailLevel(str, Enum):
    BLOCK = "BLOCK"
    WARN  = "WARN"
    INFO  = "INFO"


@dataclass
class GuardrailViolation:
    code:    str
    level:   GuardrailLevel
    message: str
    field:   str = ""   # which field triggered the violation


@dataclass
class GuardrailResult:
    passed:     bool
    violations: list[GuardrailViolation] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return any(v.level == GuardrailLevel.BLOCK for v in self.violations)

    @property
    def warnings(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.WARN]

    @property
    def blocking(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.BLOCK]

    def summary(self) -> str:
        if not self.violations:
            return "✅ All guardrails passed."
        icons = {GuardrailLevel.BLOCK: "🚫", GuardrailLevel.WARN: "⚠️", GuardrailLevel.INFO: "ℹ️"}
        return "\n".join(f"{icons[v.level]} [{v.code}] {v.message}" for v in self.violations)


class RequestValidationError(ValueError):
    """A generation request failed one or more BLOCK-level guardrails."""

    def __init__(self, result: GuardrailResult) -> None:
        self.result = result
        messages = "; ".join(f"[{v.code}] {v.message}" for v in result.blocking)
        super().__init__(f"Invalid generation request: {messages}")


# ─── Constant sets ───────────────────────────────────────────────────────────

MAX_KEYWORD_LENGTH = 60

# A URL is trusted when it equals a prefix (minus the trailing slash) or
# starts with it, so look-alike hosts such as sentry.io.example.com fail.
TRUSTED_URL_PREFIXES = (
    "https://docs.sentry.io/",
    "https://blog.sentry.io/",
    "https://sentry.io/",
    "https://sentry.zendesk.com/",
    "https://www.youtube.com/@Sentry-monitoring/",
    "https://www.youtube.com/watch?",
)


def is_trusted_url(url: str) -> bool:
    return any(url == p.rstrip("/?") or url.startswith(p) for p in TRUSTED_URL_PREFIXES)


# ─── Guardrail checks ────────────────────────────────────────────────────────

class RequestGuardrails:
    """R-01 – R-05: Validates a ContentGenerationRequest before it is stored."""

    def check(self, request: ContentGenerationRequest) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        # R-01 Keywords
        keywords = [k.strip() for k in request.keywords if k.strip()]
        if not keywords:
            violations.append(GuardrailViolation(
                code="R-01", level=GuardrailLevel.BLOCK,
                field="keywords",
                message="At least one keyword is required.",
            ))

        # R-02 Target roles
        if not request.target_roles:
            violations.append(GuardrailViolation(
                code="R-02", level=GuardrailLevel.BLOCK,
                field="target_roles",
                message="At least one target role is required.",
            ))

        # R-03 Enabled sources
        enabled = request.enabled_sources()
        if not enabled:
            violations.append(GuardrailViolation(
                code="R-03", level=GuardrailLevel.BLOCK,
                field="selected_sources",
                message="At least one research source must be enabled.",
            ))

        # R-04 Keyword hygiene
        for keyword in keywords:
            if len(keyword) > MAX_KEYWORD_LENGTH:
                violations.append(GuardrailViolation(
                    code="R-04", level=GuardrailLevel.WARN,
                    field="keywords",
                    message=f"Keyword '{keyword[:30]}…' is longer than {MAX_KEYWORD_LENGTH} characters.",
                ))
        lowered = [k.lower() for k in keywords]
        duplicates = sorted({k for k in lowered if lowered.count(k) > 1})
        if duplicates:
            violations.append(GuardrailViolation(
                code="R-04", level=GuardrailLevel.WARN,
                field="keywords",
                message=f"Duplicate keywords will be researched once: {', '.join(duplicates)}.",
            ))

        # R-05 Source priorities
        priorities = {s.priority for s in enabled}
        if len(enabled) > 1 and len(priorities) == 1:
            violations.append(GuardrailViolation(
                code="R-05", level=GuardrailLevel.WARN,
                field="selected_sources",
                message="All enabled sources share one priority; results will not be weighted.",
            ))

        return GuardrailResult(
            passed=not any(v.level == GuardrailLevel.BLOCK for v in violations),
            violations=violations,
        )


class ResearchUrlGuard:
    """U-01: Researched content must come from a trusted domain."""

    def check_url(self, url: str, field_name: str = "url") -> GuardrailResult:
        violations: list[GuardrailViolation] = []
        if not url or not is_trusted_url(url):
            violations.append(GuardrailViolation(
                code="U-01", level=GuardrailLevel.WARN,
                field=field_name,
                message=f"URL '{url[:80]}' does not originate from a trusted domain.",
            ))
        return GuardrailResult(
            passed=not violations,
            violations=violations,
        )


def ensure_valid_request(request: ContentGenerationRequest) -> GuardrailResult:
    """Run the request guardrails; raise ``RequestValidationError`` on any BLOCK."""
    result = RequestGuardrails().check(request)
    if result.blocked:
        raise RequestValidationError(result)
    for violation in result.warnings:
        logger.warning("Request %s: [%s] %s", request.id, violation.code, violation.message)
    return result
