"""
feature_mapper.py – Onboarding shortcut for experienced learners
=================================================================
During onboarding a learner can tick the Sentry features they already use.
``map_features_to_progress`` turns that selection into the modules, features
and path steps that should start out completed.

Rules
-----
- Ticking anything at all implies error tracking is already set up.
- A feature completes every step of the role's path that teaches it, and
  all of those steps' modules.
- A feature the role's path never teaches still records its default
  module(s) so course pages show it as done.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from sentry_academy.catalog import get_learning_path_for_role
from sentry_academy.models import EngineerRole, SentryFeature

# Default course module(s) behind each feature.
FEATURE_MODULES: dict[SentryFeature, tuple[str, ...]] = {
    SentryFeature.ERROR_TRACKING:         ("sentry-fundamentals",),
    SentryFeature.PERFORMANCE_MONITORING: ("performance-monitoring",),
    SentryFeature.SESSION_REPLAY:         ("session-replay",),
    SentryFeature.LOGGING:                ("react-error-boundaries",),
    SentryFeature.DISTRIBUTED_TRACING:    ("distributed-tracing",),
    SentryFeature.RELEASE_HEALTH:         ("release-health",),
    SentryFeature.DASHBOARDS_ALERTS:      ("custom-dashboards",),
    SentryFeature.INTEGRATIONS:           ("team-workflows",),
    SentryFeature.USER_FEEDBACK:          ("user-feedback",),
    SentryFeature.SEER_MCP:               ("seer-mcp",),
    SentryFeature.CUSTOM_METRICS:         ("custom-metrics",),
    SentryFeature.METRICS_INSIGHTS:       ("metrics-insights",),
    SentryFeature.STAKEHOLDER_REPORTING:  ("stakeholder-dashboards",),
}


@dataclass
class FeatureProgressMapping:
    completed_modules:  list[str] = field(default_factory=list)
    completed_features: list[SentryFeature] = field(default_factory=list)
    completed_step_ids: list[str] = field(default_factory=list)


def map_features_to_progress(
    role: EngineerRole,
    selected_features: Iterable[str | SentryFeature],
) -> FeatureProgressMapping:
    known: list[SentryFeature] = []
    for raw in selected_features:
        try:
            feature = SentryFeature(raw)
        except ValueError:
            continue   # unknown checkbox values are ignored
        if feature not in known:
            known.append(feature)

    mapping = FeatureProgressMapping()
    if not known:
        return mapping

    if SentryFeature.ERROR_TRACKING not in known:
        known.insert(0, SentryFeature.ERROR_TRACKING)

    path = get_learning_path_for_role(role)
    for feature in known:
        mapping.completed_features.append(feature)
        steps = [s for s in path.steps if s.feature == feature] if path else []
        modules = [m for s in steps for m in s.modules] or list(FEATURE_MODULES[feature])
        for module_id in modules:
            if module_id not in mapping.completed_modules:
                mapping.completed_modules.append(module_id)
        for step in steps:
            if step.id not in mapping.completed_step_ids:
                mapping.completed_step_ids.append(step.id)

    return mapping
