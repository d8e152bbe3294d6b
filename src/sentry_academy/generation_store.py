"""
generation_store.py — Repository for the content-generation workflow
=====================================================================
One ``GenerationStore`` instance holds every collection the admin panel
works with.  Construct one per process (or per test) and pass it to the
services that need it; there is no module-level singleton.

Collections
-----------
  courses               course id   → AIGeneratedCourse
  requests              request id  → ContentGenerationRequest
  progress              request id  → GenerationProgress
  approval workflows    workflow id → ApprovalWorkflow
  bulk operations       op id       → BulkOperation
  settings              one AIGenerationSettings record

Contracts
---------
- Unknown ids: ``get_*`` returns None, ``update_*`` / ``delete_*`` return
  False and leave the store untouched.
- ``update_generation_progress`` appends ``logs``; every other field given
  overwrites.  The log list is never replaced.
- ``update_course`` bumps ``version`` and ``last_modified`` on every call.

Progress notification
---------------------
Callers may poll ``get_generation_progress`` or subscribe:

    unsubscribe = store.subscribe(request_id, callback)
    progress = await store.wait_for_status(request_id, {"review-needed", "error"})

A subscriber that raises is logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from sentry_academy.models import (
    AIGeneratedCourse,
    AIGenerationSettings,
    ApprovalStatus,
    ApprovalWorkflow,
    BulkOperation,
    ContentGenerationRequest,
    Course,
    EngineerRole,
    GenerationProgress,
    GenerationStatus,
    utcnow,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[GenerationProgress], None]


@dataclass
class GenerationStats:
    total_requests:        int = 0
    total_courses:         int = 0
    approved_courses:      int = 0
    pending_approval:      int = 0
    status_counts:         dict[str, int] = field(default_factory=dict)
    role_distribution:     dict[str, int] = field(default_factory=dict)
    average_quality_score: float = 0.0


def _check_fields(model: type, changes: dict[str, Any]) -> None:
    unknown = set(changes) - set(model.model_fields)
    if unknown:
        raise ValueError(f"Unknown {model.__name__} fields: {sorted(unknown)}")


class GenerationStore:
    def __init__(self, settings: Optional[AIGenerationSettings] = None) -> None:
        self._courses:     dict[str, AIGeneratedCourse] = {}
        self._requests:    dict[str, ContentGenerationRequest] = {}
        self._progress:    dict[str, GenerationProgress] = {}
        self._workflows:   dict[str, ApprovalWorkflow] = {}
        self._bulk_ops:    dict[str, BulkOperation] = {}
        self._settings:    AIGenerationSettings = settings or AIGenerationSettings()
        self._subscribers: dict[str, list[ProgressCallback]] = {}

    # ─── Courses ─────────────────────────────────────────────────────────────

    def add_course(self, course: AIGeneratedCourse) -> None:
        self._courses[course.id] = course

    def get_course(self, course_id: str) -> Optional[AIGeneratedCourse]:
        return self._courses.get(course_id)

    def get_all_courses(self) -> list[AIGeneratedCourse]:
        return list(self._courses.values())

    def get_approved_courses(self) -> list[AIGeneratedCourse]:
        return [c for c in self._courses.values() if c.is_approved]

    def get_courses_by_status(self, status: GenerationStatus | str) -> list[AIGeneratedCourse]:
        wanted = GenerationStatus(status)
        return [c for c in self._courses.values() if self.course_status(c) == wanted]

    def get_courses_by_role(self, role: EngineerRole | str) -> list[AIGeneratedCourse]:
        wanted = EngineerRole(role)
        return [c for c in self._courses.values() if wanted in c.generation_request.target_roles]

    def get_courses_created_after(self, when: datetime) -> list[AIGeneratedCourse]:
        return [c for c in self._courses.values() if c.generated_at > when]

    def get_courses_by_quality_threshold(self, min_score: float) -> list[AIGeneratedCourse]:
        return [c for c in self._courses.values() if c.quality_score >= min_score]

    def search_courses(self, query: str) -> list[AIGeneratedCourse]:
        """Case-insensitive match on title, description or request keywords."""
        needle = query.strip().lower()
        if not needle:
            return self.get_all_courses()
        return [
            c for c in self._courses.values()
            if needle in c.title.lower()
            or needle in c.description.lower()
            or any(needle in k.lower() for k in c.generation_request.keywords)
        ]

    def update_course(self, course_id: str, **changes: Any) -> bool:
        current = self._courses.get(course_id)
        if current is None:
            return False
        _check_fields(AIGeneratedCourse, changes)
        changes.pop("version", None)
        merged = {
            **dict(current),
            **changes,
            "last_modified": utcnow(),
            "version":       current.version + 1,
        }
        self._courses[course_id] = AIGeneratedCourse.model_validate(merged)
        return True

    def delete_course(self, course_id: str) -> bool:
        if course_id not in self._courses:
            return False
        del self._courses[course_id]
        return True

    # ─── Generation requests & progress ──────────────────────────────────────

    def add_generation_request(self, request: ContentGenerationRequest) -> GenerationProgress:
        self._requests[request.id] = request
        progress = GenerationProgress(
            status=GenerationStatus.PENDING,
            current_step="Queued for processing",
            progress=0,
            logs=[f"Request created at {utcnow().isoformat()}"],
        )
        self._progress[request.id] = progress
        self._notify(request.id, progress)
        return progress

    def get_generation_request(self, request_id: str) -> Optional[ContentGenerationRequest]:
        return self._requests.get(request_id)

    def get_all_generation_requests(self) -> list[ContentGenerationRequest]:
        return list(self._requests.values())

    def get_generation_progress(self, request_id: str) -> Optional[GenerationProgress]:
        return self._progress.get(request_id)

    def update_generation_progress(
        self,
        request_id: str,
        *,
        logs: Optional[Iterable[str]] = None,
        **changes: Any,
    ) -> bool:
        current = self._progress.get(request_id)
        if current is None:
            return False
        _check_fields(GenerationProgress, changes)
        merged = {**dict(current), **changes, "logs": [*current.logs, *(logs or ())]}
        updated = GenerationProgress.model_validate(merged)
        self._progress[request_id] = updated
        self._notify(request_id, updated)
        return True

    # ─── Subscriptions ───────────────────────────────────────────────────────

    def subscribe(self, request_id: str, callback: ProgressCallback) -> Callable[[], None]:
        """Call *callback* after every progress change; returns an unsubscribe function."""
        self._subscribers.setdefault(request_id, []).append(callback)

        def _unsubscribe() -> None:
            callbacks = self._subscribers.get(request_id)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)
                if not callbacks:
                    del self._subscribers[request_id]

        return _unsubscribe

    async def wait_for_status(
        self,
        request_id: str,
        statuses: Iterable[GenerationStatus | str],
        timeout: Optional[float] = None,
    ) -> GenerationProgress:
        """
        Resolve once the request's status is one of *statuses*.

        Raises ``asyncio.TimeoutError`` after *timeout* seconds and ``KeyError``
        for unknown request ids.
        """
        wanted = frozenset(GenerationStatus(s) for s in statuses)
        current = self._progress.get(request_id)
        if current is None:
            raise KeyError(request_id)
        if current.status in wanted:
            return current

        future: asyncio.Future[GenerationProgress] = asyncio.get_running_loop().create_future()

        def _on_update(progress: GenerationProgress) -> None:
            if progress.status in wanted and not future.done():
                future.set_result(progress)

        unsubscribe = self.subscribe(request_id, _on_update)
        try:
            return await asyncio.wait_for(future, timeout)
        finally:
            unsubscribe()

    def _notify(self, request_id: str, progress: GenerationProgress) -> None:
        dead: list[ProgressCallback] = []
        for callback in list(self._subscribers.get(request_id, ())):
            try:
                callback(progress)
            except Exception:
                logger.exception("Progress subscriber failed for %s; dropping it", request_id)
                dead.append(callback)
        for callback in dead:
            callbacks = self._subscribers.get(request_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
        if request_id in self._subscribers and not self._subscribers[request_id]:
            del self._subscribers[request_id]

    # ─── Approval workflows ──────────────────────────────────────────────────

    def add_approval_workflow(self, workflow: ApprovalWorkflow) -> None:
        self._workflows[workflow.id] = workflow

    def get_approval_workflow(self, workflow_id: str) -> Optional[ApprovalWorkflow]:
        return self._workflows.get(workflow_id)

    def get_approval_workflow_by_course(self, course_id: str) -> Optional[ApprovalWorkflow]:
        return next((w for w in self._workflows.values() if w.course_id == course_id), None)

    def get_pending_approvals(self) -> list[ApprovalWorkflow]:
        return [
            w for w in self._workflows.values()
            if w.status in (ApprovalStatus.PENDING, ApprovalStatus.IN_REVIEW)
        ]

    def update_approval_workflow(self, workflow_id: str, **changes: Any) -> bool:
        current = self._workflows.get(workflow_id)
        if current is None:
            return False
        _check_fields(ApprovalWorkflow, changes)
        self._workflows[workflow_id] = ApprovalWorkflow.model_validate({**dict(current), **changes})
        return True

    # ─── Bulk operations ─────────────────────────────────────────────────────

    def add_bulk_operation(self, operation: BulkOperation) -> None:
        self._bulk_ops[operation.id] = operation

    def get_bulk_operation(self, operation_id: str) -> Optional[BulkOperation]:
        return self._bulk_ops.get(operation_id)

    def get_all_bulk_operations(self) -> list[BulkOperation]:
        return list(self._bulk_ops.values())

    def update_bulk_operation(self, operation_id: str, **changes: Any) -> bool:
        current = self._bulk_ops.get(operation_id)
        if current is None:
            return False
        _check_fields(BulkOperation, changes)
        self._bulk_ops[operation_id] = BulkOperation.model_validate({**dict(current), **changes})
        return True

    # ─── Settings ────────────────────────────────────────────────────────────

    def get_settings(self) -> AIGenerationSettings:
        return self._settings

    def update_settings(self, **changes: Any) -> AIGenerationSettings:
        _check_fields(AIGenerationSettings, changes)
        self._settings = AIGenerationSettings.model_validate({**dict(self._settings), **changes})
        return self._settings

    # ─── Derived reads ───────────────────────────────────────────────────────

    def course_status(self, course: AIGeneratedCourse) -> GenerationStatus:
        """
        Status of the request that produced *course*.  A course with no
        progress record (imported or added directly) counts as review-needed.
        """
        progress = self._progress.get(course.generation_request.id)
        return progress.status if progress is not None else GenerationStatus.REVIEW_NEEDED

    def ensure_course_progress(self, course: AIGeneratedCourse) -> GenerationProgress:
        """Give a course without a progress record one at review-needed, so status changes stick."""
        request = course.generation_request
        progress = self._progress.get(request.id)
        if progress is None:
            self._requests.setdefault(request.id, request)
            progress = GenerationProgress(
                status=GenerationStatus.REVIEW_NEEDED,
                current_step="Awaiting review",
                progress=100,
                estimated_time_remaining=0,
                logs=[f"Progress record created for course {course.id}"],
            )
            self._progress[request.id] = progress
        return progress

    def get_generation_stats(self) -> GenerationStats:
        courses = list(self._courses.values())
        status_counts: Counter[str] = Counter(self.course_status(c).value for c in courses)
        roles: Counter[str] = Counter(
            role.value for c in courses for role in c.generation_request.target_roles
        )
        average = sum(c.quality_score for c in courses) / len(courses) if courses else 0.0
        return GenerationStats(
            total_requests=len(self._requests),
            total_courses=len(courses),
            approved_courses=sum(1 for c in courses if c.is_approved),
            pending_approval=len(self.get_pending_approvals()),
            status_counts=dict(status_counts),
            role_distribution=dict(roles),
            average_quality_score=average,
        )

    def merge_with_existing_courses(self, existing: Iterable[Course]) -> list[Course]:
        """*existing* followed by every approved AI course, down-cast to ``Course``."""
        return [*existing, *(c.to_course() for c in self.get_approved_courses())]

    # ─── Import / export ─────────────────────────────────────────────────────

    def export_data(self) -> dict[str, Any]:
        return {
            "courses":            [c.model_dump(mode="json") for c in self._courses.values()],
            "requests":           [r.model_dump(mode="json") for r in self._requests.values()],
            "progress":           {k: p.model_dump(mode="json") for k, p in self._progress.items()},
            "approval_workflows": [w.model_dump(mode="json") for w in self._workflows.values()],
            "bulk_operations":    [b.model_dump(mode="json") for b in self._bulk_ops.values()],
            "settings":           self._settings.model_dump(mode="json"),
        }

    def import_data(self, data: dict[str, Any]) -> None:
        """Replace every collection with the contents of an ``export_data`` dump."""
        courses = [AIGeneratedCourse.model_validate(c) for c in data.get("courses", [])]
        requests = [ContentGenerationRequest.model_validate(r) for r in data.get("requests", [])]
        progress = {k: GenerationProgress.model_validate(p) for k, p in data.get("progress", {}).items()}
        workflows = [ApprovalWorkflow.model_validate(w) for w in data.get("approval_workflows", [])]
        bulk_ops = [BulkOperation.model_validate(b) for b in data.get("bulk_operations", [])]
        settings = data.get("settings")

        self._courses = {c.id: c for c in courses}
        self._requests = {r.id: r for r in requests}
        self._progress = progress
        self._workflows = {w.id: w for w in workflows}
        self._bulk_ops = {b.id: b for b in bulk_ops}
        self._settings = AIGenerationSettings.model_validate(settings) if settings else AIGenerationSettings()
        logger.info("Imported %d courses and %d requests", len(courses), len(requests))

    def clear(self) -> None:
        self._courses.clear()
        self._requests.clear()
        self._progress.clear()
        self._workflows.clear()
        self._bulk_ops.clear()
        self._settings = AIGenerationSettings()
