"""
progress_store.py – The learner's progress record, persisted as JSON
=====================================================================
Owns exactly one UserProgress.  The record is read once when the store is
built and written back (camelCase JSON under ``sentry-academy-user-progress``)
after every change.

Lifecycle
---------
  ProgressStore(storage)        rehydrate, or defaults when the key is absent
  set_user_role(role)           pick a path; clears completion state
  apply_known_features(feats)   onboarding shortcut (see feature_mapper)
  complete_module(module_id)    record + cascade step completion
  update_progress(**changes)    generic merge (e.g. preferred content type)
  mark_onboarding_seen()
  reset_progress()              back to defaults, persisted copy removed
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from sentry_academy.catalog import get_learning_path_for_role
from sentry_academy.feature_mapper import map_features_to_progress
from sentry_academy.models import EngineerRole, SentryFeature, UserProgress, utcnow
from sentry_academy.recommendations import (
    NextContentRecommendation,
    first_incomplete_step_index,
    get_next_content_recommendation,
    update_progress_after_completion,
)
from sentry_academy.storage import KeyValueStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "sentry-academy-user-progress"


class ProgressStore:
    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._progress = self._load()

    # ── Read side ────────────────────────────────────────────────────────────

    @property
    def progress(self) -> UserProgress:
        return self._progress

    def next_recommendation(self) -> Optional[NextContentRecommendation]:
        return get_next_content_recommendation(self._progress)

    # ── Mutations ────────────────────────────────────────────────────────────

    def set_user_role(self, role: EngineerRole) -> UserProgress:
        """Select a role; completion state from any previous role is dropped."""
        return self._commit(self._progress.model_copy(update={
            "role":                 EngineerRole(role),
            "current_step":         0,
            "completed_steps":      [],
            "completed_modules":    [],
            "completed_features":   [],
            "onboarding_completed": True,
            "has_seen_onboarding":  True,
            "last_active_date":     utcnow(),
        }))

    def apply_known_features(self, features: Iterable[str | SentryFeature]) -> UserProgress:
        if self._progress.role is None:
            raise ValueError("Select a role before importing known features")
        mapping = map_features_to_progress(self._progress.role, features)
        updated = self._progress
        for module_id in mapping.completed_modules:
            updated = update_progress_after_completion(updated, module_id)
        steps = list(updated.completed_steps)
        steps.extend(s for s in mapping.completed_step_ids if s not in steps)
        feats = list(updated.completed_features)
        feats.extend(f for f in mapping.completed_features if f not in feats)
        return self._commit(self._with_current_step(updated.model_copy(update={
            "completed_steps":    steps,
            "completed_features": feats,
            "last_active_date":   utcnow(),
        })))

    def complete_module(self, module_id: str) -> UserProgress:
        updated = update_progress_after_completion(self._progress, module_id)
        return self._commit(self._with_current_step(updated))

    def update_progress(self, **changes: Any) -> UserProgress:
        unknown = set(changes) - set(UserProgress.model_fields)
        if unknown:
            raise ValueError(f"Unknown progress fields: {sorted(unknown)}")
        merged = {**self._progress.model_dump(), **changes, "last_active_date": utcnow()}
        return self._commit(UserProgress.model_validate(merged))

    def mark_onboarding_seen(self) -> UserProgress:
        return self.update_progress(has_seen_onboarding=True)

    def reset_progress(self) -> UserProgress:
        self._progress = UserProgress()
        self._storage.remove(self._key)
        logger.info("Learner progress reset")
        return self._progress

    # ── Internal helpers ─────────────────────────────────────────────────────

    def _load(self) -> UserProgress:
        raw = self._storage.get(self._key)
        if raw is None:
            return UserProgress()
        try:
            return UserProgress.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Failed to parse saved progress, using defaults: %s", exc)
            return UserProgress()

    def _commit(self, progress: UserProgress) -> UserProgress:
        self._progress = progress
        self._storage.set(self._key, progress.model_dump_json(by_alias=True))
        return progress

    @staticmethod
    def _with_current_step(progress: UserProgress) -> UserProgress:
        path = get_learning_path_for_role(progress.role)
        if path is None:
            return progress
        return progress.model_copy(update={"current_step": first_incomplete_step_index(path, progress)})
