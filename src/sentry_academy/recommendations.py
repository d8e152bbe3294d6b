"""
recommendations.py – Role-based recommendation engine
======================================================
Pure functions over a UserProgress record and the static catalogue.

  get_next_content_recommendation   what should the learner open next?
  get_personalized_content          role-specific copy for one module
  update_progress_after_completion  record a finished module, cascade steps
  get_path_progress                 summary numbers for the progress widget
  unlocked_steps                    path steps with completed/unlocked flags

None of these mutate their input; updated progress is always a new object.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from typing import Optional

from sentry_academy.catalog import (
    LearningPath,
    LearningPathStep,
    get_learning_path_for_role,
    get_module_difficulty,
    get_module_reason,
    get_personalization,
    get_role_display_name,
)
from sentry_academy.models import Difficulty, EngineerRole, UserProgress, utcnow

_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*hours?")
_DEFAULT_TIME_ESTIMATE = "30 minutes"


# ─── Result types ────────────────────────────────────────────────────────────

@dataclass
class NextContentRecommendation:
    module_id:     str
    step_id:       str
    priority:      int    # 1 = lowest urgency
    reasoning:     str
    time_estimate: str


@dataclass
class PersonalizedContent:
    role_specific_explanation: str
    why_relevant_to_role:      str
    next_step_nudge:           str
    difficulty_for_role:       Difficulty


@dataclass
class PathProgress:
    path_id:          str
    completed_steps:  int
    total_steps:      int
    percent_complete: float
    current_step:     int    # index of the first incomplete step (== total when done)


# ─── Public API ──────────────────────────────────────────────────────────────

def get_next_content_recommendation(progress: UserProgress) -> Optional[NextContentRecommendation]:
    """
    Return the next module the learner should work on, or None.

    None means either "no role yet, show onboarding" or "every step done".
    """
    if progress.role is None:
        return None

    path = get_learning_path_for_role(progress.role)
    if path is None:
        return None

    next_step = next((s for s in path.steps if s.id not in progress.completed_steps), None)
    if next_step is None:
        return None

    next_module = next((m for m in next_step.modules if m not in progress.completed_modules), None)
    if next_module is None:
        # Every module is done but the step was never marked complete.
        return NextContentRecommendation(
            module_id=next_step.modules[0],
            step_id=next_step.id,
            priority=1,
            reasoning=(
                "Complete this step to unlock the next phase of your "
                f"{get_role_display_name(progress.role)} learning path."
            ),
            time_estimate=next_step.estimated_time,
        )

    return NextContentRecommendation(
        module_id=next_module,
        step_id=next_step.id,
        priority=max(1, 10 - progress.current_step),
        reasoning=_reasoning(progress.role, next_module),
        time_estimate=calculate_module_time_estimate(next_step.estimated_time, len(next_step.modules)),
    )


def get_personalized_content(
    module_id: str,
    role: EngineerRole,
    completed_modules: Optional[list[str]] = None,
) -> Optional[PersonalizedContent]:
    adaptation = get_personalization(role, module_id)
    if adaptation is None:
        return None
    return PersonalizedContent(
        role_specific_explanation=adaptation.explanation,
        why_relevant_to_role=adaptation.why_relevant,
        next_step_nudge=adaptation.next_step_nudge,
        difficulty_for_role=get_module_difficulty(module_id),
    )


def update_progress_after_completion(progress: UserProgress, completed_module_id: str) -> UserProgress:
    """
    Add *completed_module_id* (once) and re-scan every step of the role's path.

    The re-scan marks any step whose modules are all complete, so a record
    that drifted out of sync is repaired on the next completion.
    """
    modules = list(progress.completed_modules)
    if completed_module_id not in modules:
        modules.append(completed_module_id)

    path = get_learning_path_for_role(progress.role)
    if path is None:
        return progress.model_copy(update={"completed_modules": modules})

    steps = list(progress.completed_steps)
    for step in path.steps:
        if step.id not in steps and all(m in modules for m in step.modules):
            steps.append(step.id)

    return progress.model_copy(update={
        "completed_modules": modules,
        "completed_steps":   steps,
        "last_active_date":  utcnow(),
    })


def get_path_progress(progress: UserProgress) -> Optional[PathProgress]:
    path = get_learning_path_for_role(progress.role)
    if path is None:
        return None
    done = sum(1 for s in path.steps if s.id in progress.completed_steps)
    total = len(path.steps)
    return PathProgress(
        path_id=path.id,
        completed_steps=done,
        total_steps=total,
        percent_complete=round(done / total * 100, 1) if total else 0.0,
        current_step=first_incomplete_step_index(path, progress),
    )


def unlocked_steps(progress: UserProgress) -> list[LearningPathStep]:
    """
    The role's steps with ``is_completed`` / ``is_unlocked`` filled in.

    Step 0 is always unlocked; every later step unlocks when the one before
    it is complete.
    """
    path = get_learning_path_for_role(progress.role)
    if path is None:
        return []
    result: list[LearningPathStep] = []
    previous_done = True
    for index, step in enumerate(path.steps):
        done = step.id in progress.completed_steps
        result.append(dataclasses.replace(
            step,
            is_completed=done,
            is_unlocked=index == 0 or previous_done,
        ))
        previous_done = done
    return result


def first_incomplete_step_index(path: LearningPath, progress: UserProgress) -> int:
    for index, step in enumerate(path.steps):
        if step.id not in progress.completed_steps:
            return index
    return len(path.steps)


def calculate_module_time_estimate(step_time: str, module_count: int) -> str:
    """Split a step's "N hours" evenly across its modules."""
    match = _HOURS_RE.search(step_time or "")
    if match is None or module_count <= 0:
        return _DEFAULT_TIME_ESTIMATE
    module_hours = float(match.group(1)) / module_count
    if module_hours < 1:
        return f"{round(module_hours * 60)} minutes"
    return f"{module_hours:.1f} hours"


# ─── Internal helpers ────────────────────────────────────────────────────────

def _reasoning(role: EngineerRole, module_id: str) -> str:
    return get_module_reason(role, module_id) or (
        f"This is the next step in your {get_role_display_name(role)} learning path."
    )
