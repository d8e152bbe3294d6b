"""
review.py — Human review of generated courses
=============================================
Approval workflows, review comments, course status transitions and bulk
operations over a ``GenerationStore``.

A course's status is the generation status of the request that produced it.
Every transition is checked against ``STATUS_TRANSITIONS``:

    review-needed → approved | rejected
    approved      → published | rejected

A course whose request has no progress record is treated as review-needed.

Raises:
    CourseNotFoundError      – unknown course id.
    WorkflowNotFoundError    – unknown workflow id.
    InvalidTransitionError   – the move is not allowed from the current status.

Bulk operations catch these per item, so one bad id never stops the batch.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable, Optional

from sentry_academy.config import get_settings
from sentry_academy.content_validator import (
    IssueSeverity,
    IssueType,
    ValidationContext,
    validate_course_structure,
)
from sentry_academy.generation_store import GenerationStore
from sentry_academy.models import (
    AIGeneratedCourse,
    ApprovalCriterion,
    ApprovalStatus,
    ApprovalWorkflow,
    BulkOperation,
    BulkOperationResult,
    BulkOperationStatus,
    BulkOperationType,
    GenerationStatus,
    ReviewComment,
    ReviewCommentType,
    can_transition,
    utcnow,
)

logger = logging.getLogger(__name__)


class ReviewError(Exception):
    """Base class for review-workflow failures."""


class CourseNotFoundError(ReviewError, LookupError):
    def __init__(self, course_id: str) -> None:
        self.course_id = course_id
        super().__init__(f"Course not found: {course_id}")


class WorkflowNotFoundError(ReviewError, LookupError):
    def __init__(self, workflow_id: str) -> None:
        self.workflow_id = workflow_id
        super().__init__(f"Approval workflow not found: {workflow_id}")


class InvalidTransitionError(ReviewError):
    def __init__(self, course_id: str, current: GenerationStatus, target: GenerationStatus) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Course {course_id} cannot move from {current.value} to {target.value}")


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _require_course(store: GenerationStore, course_id: str) -> AIGeneratedCourse:
    course = store.get_course(course_id)
    if course is None:
        raise CourseNotFoundError(course_id)
    return course


def _require_workflow(store: GenerationStore, workflow_id: str) -> ApprovalWorkflow:
    workflow = store.get_approval_workflow(workflow_id)
    if workflow is None:
        raise WorkflowNotFoundError(workflow_id)
    return workflow


def course_status(store: GenerationStore, course: AIGeneratedCourse) -> GenerationStatus:
    return store.course_status(course)


def _transition(store: GenerationStore, course: AIGeneratedCourse, target: GenerationStatus, note: str) -> None:
    current = course_status(store, course)
    if not can_transition(current, target):
        raise InvalidTransitionError(course.id, current, target)
    store.ensure_course_progress(course)
    store.update_generation_progress(
        course.generation_request.id,
        status=target,
        current_step=note,
        logs=[note],
    )


def _close_workflow(store: GenerationStore, course_id: str, status: ApprovalStatus) -> None:
    workflow = store.get_approval_workflow_by_course(course_id)
    if workflow is not None:
        store.update_approval_workflow(workflow.id, status=status, reviewed_at=utcnow())


# ─── Approval workflows ──────────────────────────────────────────────────────

def create_approval_workflow(
    store: GenerationStore,
    course_id: str,
    reviewer: Optional[str] = None,
) -> ApprovalWorkflow:
    """
    Open a workflow for *course_id* with its approval criteria pre-evaluated.
    Returns the existing workflow when the course already has one.
    """
    course = _require_course(store, course_id)
    existing = store.get_approval_workflow_by_course(course_id)
    if existing is not None:
        return existing

    threshold = store.get_settings().default_quality_threshold
    result = validate_course_structure(course, ValidationContext(min_quality_threshold=threshold))
    serious_technical = [
        i for i in result.issues
        if i.type == IssueType.TECHNICAL and i.severity in (IssueSeverity.HIGH, IssueSeverity.CRITICAL)
    ]
    code_issues = [i for i in result.issues if i.field.endswith(".code_example")]
    missing_roles = [
        r.value for r in course.generation_request.target_roles if course.personalization_for(r) is None
    ]

    workflow = ApprovalWorkflow(
        id=f"wf-{uuid.uuid4().hex[:12]}",
        course_id=course_id,
        assigned_reviewer=reviewer or get_settings().app.default_reviewer,
        approval_criteria=[
            ApprovalCriterion(
                id="technical-accuracy",
                name="Technical accuracy",
                description="Content is Sentry-specific and every module is confidently generated",
                passed=not serious_technical,
                notes="; ".join(i.message for i in serious_technical) or None,
            ),
            ApprovalCriterion(
                id="role-coverage",
                name="Role coverage",
                description="Every target role has a personalization",
                passed=not missing_roles,
                notes=f"Missing: {', '.join(missing_roles)}" if missing_roles else None,
            ),
            ApprovalCriterion(
                id="code-examples",
                name="Code examples",
                description="Code examples are complete and use the Sentry SDK",
                passed=not code_issues,
                notes="; ".join(i.message for i in code_issues) or None,
            ),
            ApprovalCriterion(
                id="quality-threshold",
                name="Quality threshold",
                description="Quality and validation scores meet the configured threshold",
                passed=course.quality_score >= threshold and result.is_valid,
                notes=f"Quality {course.quality_score:.2f}, validation {result.score:.2f}, "
                      f"threshold {threshold:.2f}",
            ),
        ],
    )
    store.add_approval_workflow(workflow)
    logger.info("Opened approval workflow %s for course %s", workflow.id, course_id)
    return workflow


def start_review(store: GenerationStore, workflow_id: str, reviewer: str) -> ApprovalWorkflow:
    workflow = _require_workflow(store, workflow_id)
    if workflow.status != ApprovalStatus.PENDING:
        raise ReviewError(f"Workflow {workflow_id} is already {workflow.status.value}")
    store.update_approval_workflow(workflow_id, status=ApprovalStatus.IN_REVIEW, assigned_reviewer=reviewer)
    return store.get_approval_workflow(workflow_id)


def add_review_comment(
    store: GenerationStore,
    workflow_id: str,
    reviewer: str,
    content: str,
    comment_type: ReviewCommentType = ReviewCommentType.GENERAL,
    module_id: Optional[str] = None,
) -> ReviewComment:
    workflow = _require_workflow(store, workflow_id)
    if not content.strip():
        raise ValueError("Review comment content must not be empty")
    if module_id is not None:
        course = _require_course(store, workflow.course_id)
        if all(m.id != module_id for m in course.generated_modules):
            raise ValueError(f"Course {course.id} has no module {module_id}")

    comment = ReviewComment(
        id=f"comment-{uuid.uuid4().hex[:12]}",
        reviewer=reviewer,
        content=content.strip(),
        type=comment_type,
        module_id=module_id,
    )
    store.update_approval_workflow(workflow_id, review_comments=[*workflow.review_comments, comment])
    return comment


def resolve_review_comment(store: GenerationStore, workflow_id: str, comment_id: str) -> bool:
    workflow = _require_workflow(store, workflow_id)
    if all(c.id != comment_id for c in workflow.review_comments):
        return False
    comments = [
        c.model_copy(update={"resolved": True}) if c.id == comment_id else c
        for c in workflow.review_comments
    ]
    return store.update_approval_workflow(workflow_id, review_comments=comments)


# ─── Course transitions ──────────────────────────────────────────────────────

def approve_course(
    store: GenerationStore,
    course_id: str,
    reviewer: str,
    notes: Optional[str] = None,
) -> AIGeneratedCourse:
    course = _require_course(store, course_id)
    _transition(store, course, GenerationStatus.APPROVED, f"Approved by {reviewer}")
    store.update_course(
        course_id,
        approved_by=reviewer,
        approved_at=utcnow(),
        review_notes=notes if notes is not None else course.review_notes,
    )
    _close_workflow(store, course_id, ApprovalStatus.APPROVED)
    logger.info("Course %s approved by %s", course_id, reviewer)
    return store.get_course(course_id)


def reject_course(store: GenerationStore, course_id: str, reviewer: str, reason: str) -> AIGeneratedCourse:
    course = _require_course(store, course_id)
    _transition(store, course, GenerationStatus.REJECTED, f"Rejected by {reviewer}: {reason}")
    store.update_course(course_id, approved_by=None, approved_at=None, review_notes=reason)
    _close_workflow(store, course_id, ApprovalStatus.REJECTED)
    logger.info("Course %s rejected by %s", course_id, reviewer)
    return store.get_course(course_id)


def publish_course(store: GenerationStore, course_id: str, actor: str) -> AIGeneratedCourse:
    course = _require_course(store, course_id)
    _transition(store, course, GenerationStatus.PUBLISHED, f"Published by {actor}")
    store.update_course(course_id, is_archived=False)
    return store.get_course(course_id)


def archive_course(store: GenerationStore, course_id: str) -> AIGeneratedCourse:
    _require_course(store, course_id)
    store.update_course(course_id, is_archived=True)
    return store.get_course(course_id)


def maybe_auto_approve(store: GenerationStore, course_id: str, actor: str = "auto-approval") -> bool:
    """Approve without review when quality and validation both clear the auto-approval bar."""
    course = _require_course(store, course_id)
    settings = store.get_settings()
    if course.quality_score < settings.auto_approval_threshold:
        return False
    context = ValidationContext(min_quality_threshold=settings.auto_approval_threshold)
    if not validate_course_structure(course, context).is_valid:
        return False
    if not can_transition(course_status(store, course), GenerationStatus.APPROVED):
        return False
    approve_course(store, course_id, actor, notes="Automatically approved")
    return True


# ─── Bulk operations ─────────────────────────────────────────────────────────

def _bulk_delete(store: GenerationStore, course_id: str, actor: str, notes: Optional[str]) -> None:
    if not store.delete_course(course_id):
        raise CourseNotFoundError(course_id)


_BULK_HANDLERS: dict[BulkOperationType, Callable[[GenerationStore, str, str, Optional[str]], object]] = {
    BulkOperationType.APPROVE: lambda s, cid, actor, notes: approve_course(s, cid, actor, notes),
    BulkOperationType.REJECT:  lambda s, cid, actor, notes: reject_course(
        s, cid, actor, notes or "Rejected in bulk operation"),
    BulkOperationType.PUBLISH: lambda s, cid, actor, notes: publish_course(s, cid, actor),
    BulkOperationType.ARCHIVE: lambda s, cid, actor, notes: archive_course(s, cid),
    BulkOperationType.DELETE:  _bulk_delete,
}


def run_bulk_operation(
    store: GenerationStore,
    action: BulkOperationType | str,
    course_ids: Iterable[str],
    actor: str = "admin",
    notes: Optional[str] = None,
) -> BulkOperation:
    """
    Apply *action* to every course id in order and return the finished
    operation.  Each item records its own success or error; item failures
    never fail the operation, which ends ``completed``.  Only an unexpected
    exception aborts the batch; the operation is then marked ``failed`` and
    the exception propagates.
    """
    ids = list(course_ids)
    if not ids:
        raise ValueError("A bulk operation needs at least one course id")
    operation_type = BulkOperationType(action)
    handler = _BULK_HANDLERS[operation_type]

    operation = BulkOperation(
        id=f"bulk-{uuid.uuid4().hex[:12]}",
        type=operation_type,
        course_ids=ids,
        created_by=actor,
    )
    store.add_bulk_operation(operation)
    store.update_bulk_operation(operation.id, status=BulkOperationStatus.PROCESSING)

    results: list[BulkOperationResult] = []
    try:
        for index, course_id in enumerate(ids):
            try:
                handler(store, course_id, actor, notes)
                results.append(BulkOperationResult(course_id=course_id, success=True))
            except (ReviewError, ValueError) as exc:
                logger.warning("Bulk %s failed for %s: %s", operation_type.value, course_id, exc)
                results.append(BulkOperationResult(course_id=course_id, success=False, error=str(exc)))
            store.update_bulk_operation(
                operation.id,
                results=list(results),
                progress=(index + 1) / len(ids) * 100,
            )
    except Exception:
        logger.exception("Bulk %s %s aborted", operation_type.value, operation.id)
        store.update_bulk_operation(operation.id, status=BulkOperationStatus.FAILED, completed_at=utcnow())
        raise

    store.update_bulk_operation(
        operation.id,
        status=BulkOperationStatus.COMPLETED,
        completed_at=utcnow(),
    )
    logger.info("Bulk %s %s: %d/%d succeeded", operation_type.value, operation.id,
                sum(r.success for r in results), len(results))
    return store.get_bulk_operation(operation.id)
