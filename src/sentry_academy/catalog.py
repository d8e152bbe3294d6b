"""
catalog.py – Role & Learning Path Catalogue
============================================
Static, read-only data the learner side runs on:

  ROLES                   RoleInfo per EngineerRole (title, icon, common tasks)
  LEARNING_PATHS          one LearningPath per role, steps sorted by priority
  ROLE_PERSONALIZATIONS   role → module id → RoleContentAdaptation
  ROLE_MODULE_REASONS     role → module id → one-line "why this next" text
  MODULE_DIFFICULTY       module id → Difficulty (explicit per-module metadata)
  COURSES                 hand-written course catalogue (Course models)

Lookups return ``None`` for unknown keys; nothing here raises on a miss.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from sentry_academy.models import Course, Difficulty, EngineerRole, SentryFeature


# ─── Data models ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RoleInfo:
    id:           EngineerRole
    title:        str
    description:  str
    icon:         str
    common_tasks: tuple[str, ...] = ()


@dataclass(frozen=True)
class LearningPathStep:
    """One step of a role's path.  Complete iff every module id is completed."""
    id:             str
    title:          str
    description:    str
    feature:        SentryFeature
    modules:        tuple[str, ...]
    outcomes:       tuple[str, ...]
    estimated_time: str
    priority:       int            # lower = earlier
    is_completed:   bool = False
    is_unlocked:    bool = False


@dataclass(frozen=True)
class LearningPath:
    id:                   str
    role_id:              EngineerRole
    title:                str
    description:          str
    total_estimated_time: str
    steps:                tuple[LearningPathStep, ...] = field(default_factory=tuple)

    def step_by_id(self, step_id: str) -> Optional[LearningPathStep]:
        return next((s for s in self.steps if s.id == step_id), None)

    def module_ids(self) -> list[str]:
        seen: list[str] = []
        for step in self.steps:
            seen.extend(m for m in step.modules if m not in seen)
        return seen


@dataclass(frozen=True)
class RoleContentAdaptation:
    explanation:     str
    why_relevant:    str
    next_step_nudge: str


# ─── Roles ───────────────────────────────────────────────────────────────────

ROLES: dict[EngineerRole, RoleInfo] = {
    EngineerRole.BACKEND: RoleInfo(
        EngineerRole.BACKEND, "Backend Engineer",
        "You build APIs, services, and server-side logic. Focus on reliability, "
        "performance, and data integrity.",
        "🔧",
        ("Building REST APIs and microservices", "Database optimization and queries",
         "Server performance monitoring", "Service-to-service communication"),
    ),
    EngineerRole.FRONTEND: RoleInfo(
        EngineerRole.FRONTEND, "Frontend Engineer",
        "You create user interfaces and experiences. Focus on performance, "
        "accessibility, and user satisfaction.",
        "🎨",
        ("Building responsive web applications", "Optimizing page load performance",
         "Debugging user interaction issues", "Cross-browser compatibility"),
    ),
    EngineerRole.SRE: RoleInfo(
        EngineerRole.SRE, "SRE / DevOps",
        "You maintain infrastructure and ensure system reliability. Focus on uptime, "
        "scalability, and incident response.",
        "⚡",
        ("Managing infrastructure and deployments", "Setting up monitoring and alerting",
         "Incident response and on-call", "System capacity planning"),
    ),
    EngineerRole.FULLSTACK: RoleInfo(
        EngineerRole.FULLSTACK, "Full-Stack Engineer",
        "You work across the entire stack. Focus on end-to-end user experiences "
        "and system integration.",
        "🚀",
        ("Building complete features end-to-end", "Integrating frontend and backend systems",
         "Debugging across multiple layers", "Coordinating releases and deployments"),
    ),
    EngineerRole.AI_ML: RoleInfo(
        EngineerRole.AI_ML, "AI / ML Engineer",
        "You train, serve, and operate models. Focus on inference latency, data "
        "pipelines, and model behaviour in production.",
        "🤖",
        ("Serving models behind APIs", "Running training and data pipelines",
         "Tracking inference latency and cost", "Debugging LLM and agent workflows"),
    ),
    EngineerRole.PM_MANAGER: RoleInfo(
        EngineerRole.PM_MANAGER, "Product / Engineering Manager",
        "You steer priorities and report on product health. Focus on metrics, "
        "user impact, and team coordination.",
        "📊",
        ("Reporting product health to stakeholders", "Prioritising engineering work",
         "Tracking release quality", "Turning user feedback into roadmap items"),
    ),
}

ROLE_DISPLAY_NAMES: dict[EngineerRole, str] = {
    EngineerRole.BACKEND:    "Backend Engineering",
    EngineerRole.FRONTEND:   "Frontend Engineering",
    EngineerRole.SRE:        "SRE/DevOps",
    EngineerRole.FULLSTACK:  "Full-Stack Engineering",
    EngineerRole.AI_ML:      "AI/ML Engineering",
    EngineerRole.PM_MANAGER: "Product & Engineering Management",
}


# ─── Learning paths ──────────────────────────────────────────────────────────
# Each step tuple: (id, title, description, feature, modules, outcomes,
#                   estimated_time, priority)

_F = SentryFeature

_PATH_CATALOGUE: dict[EngineerRole, tuple[str, str, str, list[tuple]]] = {
    EngineerRole.BACKEND: (
        "Backend Engineer Learning Path",
        "Master error tracking, tracing, and performance monitoring for server-side applications",
        "8.5 hours",
        [
            ("backend-error-tracking", "Error Tracking Foundation",
             "Capture and understand exceptions in your APIs and services",
             _F.ERROR_TRACKING, ("sentry-fundamentals", "nodejs-integration"),
             ("Install Sentry SDK in your backend services",
              "Capture API exceptions and server errors",
              "Set up context for better debugging"),
             "1.5 hours", 1),
            ("backend-logging", "Structured Logging",
             "Send structured logs and connect them to errors and traces",
             _F.LOGGING, ("react-error-boundaries",),
             ("Send structured logs from your services",
              "Query logs alongside related errors"),
             "1 hour", 2),
            ("backend-distributed-tracing", "Distributed Tracing",
             "Track requests across services to find latency bottlenecks",
             _F.DISTRIBUTED_TRACING, ("distributed-tracing",),
             ("Instrument APIs with distributed tracing",
              "Follow requests across microservices",
              "Identify slow database queries and external calls"),
             "2 hours", 3),
            ("backend-performance", "Performance Monitoring",
             "Monitor API performance and throughput",
             _F.PERFORMANCE_MONITORING, ("performance-monitoring",),
             ("Track API response times and throughput",
              "Monitor database and cache performance"),
             "2 hours", 4),
            ("backend-release-health", "Release Health",
             "Catch regressions introduced by deploys",
             _F.RELEASE_HEALTH, ("release-health",),
             ("Associate errors with releases", "Track crash-free sessions per release"),
             "1 hour", 5),
            ("backend-dashboards-alerts", "Dashboards & Alerts",
             "Set up proactive alerts for slow or failing endpoints",
             _F.DASHBOARDS_ALERTS, ("custom-dashboards",),
             ("Set up performance alerts for slow endpoints",
              "Build a service health dashboard"),
             "1 hour", 6),
        ],
    ),
    EngineerRole.FRONTEND: (
        "Frontend Engineer Learning Path",
        "Optimize user experience with error tracking, performance monitoring, and session replay",
        "7.5 hours",
        [
            ("frontend-error-tracking", "JavaScript Error Tracking",
             "Capture and debug client-side errors and exceptions",
             _F.ERROR_TRACKING, ("sentry-fundamentals",),
             ("Install Sentry in your frontend application",
              "Capture JavaScript exceptions and unhandled promises",
              "Add user context for better error debugging"),
             "1 hour", 1),
            ("frontend-performance", "Web Performance Monitoring",
             "Measure and optimize Core Web Vitals and page performance",
             _F.PERFORMANCE_MONITORING, ("performance-monitoring",),
             ("Track LCP, FID, and CLS metrics", "Monitor page load performance",
              "Identify slow components and renders"),
             "2 hours", 2),
            ("frontend-session-replay", "Session Replay & Debugging",
             "See exactly what users experienced when errors occurred",
             _F.SESSION_REPLAY, ("session-replay",),
             ("Enable session replay for error context",
              "Debug user interactions and UI issues"),
             "1.5 hours", 3),
            ("frontend-logging", "Frontend Logging",
             "Send browser logs that link back to the sessions that produced them",
             _F.LOGGING, ("react-error-boundaries",),
             ("Send structured logs from the browser", "Filter noisy client logs"),
             "1 hour", 4),
            ("frontend-user-feedback", "User Feedback",
             "Collect feedback from users at the moment something breaks",
             _F.USER_FEEDBACK, ("user-feedback",),
             ("Add the feedback widget", "Link feedback to errors and replays"),
             "1 hour", 5),
            ("frontend-dashboards-alerts", "Dashboards & Alerts",
             "Track user-experience metrics and alert on regressions",
             _F.DASHBOARDS_ALERTS, ("custom-dashboards",),
             ("Build a web vitals dashboard", "Alert on error-rate spikes"),
             "1 hour", 6),
        ],
    ),
    EngineerRole.SRE: (
        "SRE/DevOps Learning Path",
        "Build comprehensive monitoring, alerting, and incident response workflows",
        "8.5 hours",
        [
            ("sre-error-tracking", "Infrastructure Error Monitoring",
             "Aggregate errors across all services and infrastructure",
             _F.ERROR_TRACKING, ("sentry-fundamentals", "nodejs-integration"),
             ("Monitor errors across multiple services",
              "Set up service-level error tracking",
              "Integrate with existing infrastructure monitoring"),
             "1.5 hours", 1),
            ("sre-performance-tracing", "Distributed System Tracing",
             "Trace requests across microservices and infrastructure",
             _F.DISTRIBUTED_TRACING, ("performance-monitoring", "distributed-tracing"),
             ("Implement end-to-end request tracing",
              "Monitor service dependencies and latency",
              "Identify bottlenecks in distributed systems"),
             "2.5 hours", 2),
            ("sre-logging", "Centralised Logging",
             "Correlate logs with errors and traces during incidents",
             _F.LOGGING, ("react-error-boundaries",),
             ("Route service logs into Sentry", "Pivot from a log line to its trace"),
             "1 hour", 3),
            ("sre-release-health", "Release Health",
             "Watch deployment health and roll back quickly",
             _F.RELEASE_HEALTH, ("release-health",),
             ("Track crash-free rate per release", "Set up deployment monitoring"),
             "1 hour", 4),
            ("sre-dashboards", "Dashboards",
             "Create dashboards for infrastructure health",
             _F.DASHBOARDS_ALERTS, ("custom-dashboards",),
             ("Build infrastructure health dashboards",
              "Set up automated alerting and escalation"),
             "1 hour", 5),
            ("sre-integrations", "Incident Response Integrations",
             "Integrate Sentry with on-call workflows",
             _F.INTEGRATIONS, ("team-workflows",),
             ("Integrate with PagerDuty and Slack", "Automate issue ownership"),
             "1.5 hours", 6),
        ],
    ),
    EngineerRole.FULLSTACK: (
        "Full-Stack Engineer Learning Path",
        "Monitor complete user journeys from frontend to backend with comprehensive observability",
        "8.5 hours",
        [
            ("fullstack-error-tracking", "End-to-End Error Tracking",
             "Connect frontend and backend errors for complete visibility",
             _F.ERROR_TRACKING, ("sentry-fundamentals", "nodejs-integration"),
             ("Track errors across frontend and backend",
              "Correlate user actions with server errors",
              "Set up unified error reporting"),
             "2 hours", 1),
            ("fullstack-performance", "Cross-Service Performance",
             "Monitor performance from user interaction to database",
             _F.PERFORMANCE_MONITORING, ("performance-monitoring",),
             ("Trace user interactions through full stack",
              "Monitor both client and server performance"),
             "2 hours", 2),
            ("fullstack-distributed-tracing", "Distributed Tracing",
             "Follow one request from the browser to the database",
             _F.DISTRIBUTED_TRACING, ("distributed-tracing",),
             ("Propagate trace headers across layers",
              "Identify performance bottlenecks across layers"),
             "1.5 hours", 3),
            ("fullstack-session-replay", "Session Replay",
             "Replay the user session behind a backend failure",
             _F.SESSION_REPLAY, ("session-replay",),
             ("Enable session replay", "Jump from a replay to the backend trace"),
             "1 hour", 4),
            ("fullstack-logging", "Logging Across the Stack",
             "Unify browser and server logs",
             _F.LOGGING, ("react-error-boundaries",),
             ("Send logs from client and server", "Query logs by trace id"),
             "1 hour", 5),
            ("fullstack-dashboards-alerts", "Release & Deployment Monitoring",
             "Monitor releases and catch regressions across the stack",
             _F.DASHBOARDS_ALERTS, ("custom-dashboards", "team-workflows"),
             ("Track release health across frontend and backend",
              "Create unified dashboards for stack health"),
             "1 hour", 6),
        ],
    ),
    EngineerRole.AI_ML: (
        "AI/ML Engineer Learning Path",
        "Monitor model serving, data pipelines, and AI agents in production",
        "9.5 hours",
        [
            ("ai-ml-error-tracking", "Error Tracking for ML Services",
             "Capture failures in model servers and pipeline workers",
             _F.ERROR_TRACKING, ("sentry-fundamentals", "nodejs-integration"),
             ("Instrument inference services", "Capture pipeline task failures"),
             "1.5 hours", 1),
            ("ai-ml-performance", "Inference Performance",
             "Measure inference latency and throughput",
             _F.PERFORMANCE_MONITORING, ("performance-monitoring",),
             ("Track p95 inference latency", "Spot slow preprocessing steps"),
             "2 hours", 2),
            ("ai-ml-distributed-tracing", "Tracing Pipelines & Agents",
             "Trace multi-step pipelines and LLM agent calls",
             _F.DISTRIBUTED_TRACING, ("distributed-tracing",),
             ("Trace each stage of a pipeline", "Follow agent tool calls end-to-end"),
             "1.5 hours", 3),
            ("ai-ml-logging", "Pipeline Logging",
             "Structured logs for training and batch jobs",
             _F.LOGGING, ("react-error-boundaries",),
             ("Log dataset and model versions", "Correlate logs with failed runs"),
             "1 hour", 4),
            ("ai-ml-custom-metrics", "Custom Model Metrics",
             "Emit model-quality and cost metrics",
             _F.CUSTOM_METRICS, ("custom-metrics",),
             ("Emit token usage and cost metrics", "Track prediction quality over time"),
             "1.5 hours", 5),
            ("ai-ml-seer-mcp", "Seer & MCP",
             "Use Seer and the MCP server to debug AI workloads",
             _F.SEER_MCP, ("seer-mcp",),
             ("Let Seer propose root causes", "Query Sentry from your agent via MCP"),
             "2 hours", 6),
        ],
    ),
    EngineerRole.PM_MANAGER: (
        "Product & Engineering Manager Learning Path",
        "Turn Sentry data into product insight and stakeholder reporting",
        "5.5 hours",
        [
            ("pm-understanding-metrics", "Understanding Metrics",
             "Read the health signals your teams already collect",
             _F.METRICS_INSIGHTS, ("metrics-insights",),
             ("Interpret error rates and crash-free sessions",
              "Tie performance metrics to user impact"),
             "1.5 hours", 1),
            ("pm-stakeholder-reporting", "Stakeholder Reporting",
             "Build dashboards that answer leadership questions",
             _F.STAKEHOLDER_REPORTING, ("stakeholder-dashboards",),
             ("Build a product health dashboard", "Share scheduled reports"),
             "2 hours", 2),
            ("pm-release-health", "Release Quality",
             "Track the quality of what ships",
             _F.RELEASE_HEALTH, ("release-health",),
             ("Compare releases by adoption and stability",),
             "1 hour", 3),
            ("pm-user-feedback", "User Feedback Loops",
             "Bring user feedback into prioritisation",
             _F.USER_FEEDBACK, ("user-feedback",),
             ("Review feedback alongside errors", "Turn feedback into roadmap items"),
             "1 hour", 4),
        ],
    ),
}


def _build_path(role: EngineerRole) -> LearningPath:
    title, description, total, raw_steps = _PATH_CATALOGUE[role]
    ordered = sorted(raw_steps, key=lambda t: t[7])
    steps = tuple(
        LearningPathStep(
            id=sid, title=stitle, description=sdesc, feature=feature,
            modules=tuple(modules), outcomes=tuple(outcomes),
            estimated_time=est, priority=prio,
            is_unlocked=(i == 0),
        )
        for i, (sid, stitle, sdesc, feature, modules, outcomes, est, prio) in enumerate(ordered)
    )
    return LearningPath(
        id=f"{role.value}-path",
        role_id=role,
        title=title,
        description=description,
        total_estimated_time=total,
        steps=steps,
    )


LEARNING_PATHS: dict[EngineerRole, LearningPath] = {role: _build_path(role) for role in _PATH_CATALOGUE}


# ─── Personalisations ────────────────────────────────────────────────────────

_A = RoleContentAdaptation

ROLE_PERSONALIZATIONS: dict[EngineerRole, dict[str, RoleContentAdaptation]] = {
    EngineerRole.BACKEND: {
        "sentry-fundamentals": _A(
            "Error tracking helps you catch API failures, database connection issues, and "
            "service exceptions before users complain.",
            "As a backend engineer, you need visibility into server-side errors that can "
            "affect multiple users and downstream services.",
            "Next, we'll add distributed tracing to help you find slow database queries and "
            "bottlenecks between services.",
        ),
        "performance-monitoring": _A(
            "Performance monitoring shows you API response times, database query performance, "
            "and service throughput metrics.",
            "Your APIs are the backbone of the application - slow backend performance directly "
            "impacts user experience.",
            "Let's set up dashboards so you can monitor service health and get alerted to "
            "performance regressions.",
        ),
        "custom-dashboards": _A(
            "Dashboards give you a centralized view of service health, error rates, and "
            "performance metrics across your backend infrastructure.",
            "As someone responsible for backend reliability, you need proactive monitoring to "
            "catch issues before they cascade.",
            "You're building a robust monitoring foundation that will help you maintain high "
            "service availability.",
        ),
    },
    EngineerRole.FRONTEND: {
        "sentry-fundamentals": _A(
            "Error tracking captures JavaScript exceptions, promise rejections, and React "
            "component errors that break the user experience.",
            "Frontend errors directly impact users and can lead to lost conversions, frustrated "
            "users, and negative app store reviews.",
            "Next, we'll monitor your app's performance to ensure fast loading times and smooth "
            "user interactions.",
        ),
        "performance-monitoring": _A(
            "Performance monitoring tracks Core Web Vitals like LCP, FID, and CLS that Google "
            "uses for search rankings and user experience.",
            "Slow frontend performance hurts user engagement, SEO rankings, and conversion rates "
            "- especially on mobile devices.",
            "Let's add session replay so you can see exactly what users experienced when they "
            "encountered issues.",
        ),
        "session-replay": _A(
            "Session replay shows you the exact user interactions that led to errors, giving "
            "you visual context for debugging.",
            "Frontend bugs are often hard to reproduce - session replay lets you see the user's "
            "perspective and debug with confidence.",
            "You're building comprehensive frontend monitoring that will help you deliver "
            "exceptional user experiences.",
        ),
    },
    EngineerRole.SRE: {
        "sentry-fundamentals": _A(
            "Error monitoring aggregates issues across your entire infrastructure, giving you "
            "visibility into service health and reliability.",
            "As an SRE, you're responsible for system reliability - error tracking helps you "
            "identify and respond to incidents quickly.",
            "Next, we'll add distributed tracing to help you understand request flows and "
            "identify bottlenecks across microservices.",
        ),
        "performance-monitoring": _A(
            "Performance monitoring shows you service latency, throughput, and dependency "
            "health across your distributed systems.",
            "Performance issues can cascade through distributed systems - you need visibility "
            "to maintain your SLOs and prevent outages.",
            "Let's build dashboards and alerts that integrate with your existing on-call "
            "processes and incident response workflows.",
        ),
        "custom-dashboards": _A(
            "Dashboards centralize infrastructure health metrics and can integrate with your "
            "existing tools like PagerDuty, Slack, and Grafana.",
            "Unified dashboards help you correlate issues across services and provide critical "
            "context during incident response.",
            "You're building a monitoring stack that will reduce MTTR and help you maintain "
            "high system reliability.",
        ),
    },
    EngineerRole.FULLSTACK: {
        "sentry-fundamentals": _A(
            "Error tracking connects frontend and backend errors, giving you end-to-end "
            "visibility into user journeys and system health.",
            "As a full-stack engineer, you need to understand how frontend issues relate to "
            "backend problems and vice versa.",
            "Next, we'll add performance monitoring to track user experiences from browser "
            "interactions to database queries.",
        ),
        "performance-monitoring": _A(
            "Performance monitoring shows you the complete user journey - from page load times "
            "to API response times to database queries.",
            "Full-stack performance issues require understanding both client-side rendering "
            "and server-side processing bottlenecks.",
            "Let's set up release monitoring so you can catch regressions across your entire "
            "stack before they impact users.",
        ),
        "team-workflows": _A(
            "Release monitoring tracks deployment health across frontend and backend, helping "
            "you identify which changes introduce issues.",
            "When you deploy full-stack changes, you need visibility into how they affect the "
            "entire user experience.",
            "You're building comprehensive observability that covers your entire technology stack.",
        ),
    },
    EngineerRole.AI_ML: {
        "sentry-fundamentals": _A(
            "Error tracking captures failures in model servers, feature pipelines, and agent "
            "tool calls with the inputs that triggered them.",
            "Model failures are often silent - capturing them with context is the first step to "
            "trusting what you ship.",
            "Next, we'll measure inference latency so you know where each request spends its time.",
        ),
        "performance-monitoring": _A(
            "Performance monitoring shows inference latency, queue time, and throughput for "
            "every model endpoint.",
            "Latency budgets decide whether a model is usable in production - you need to see "
            "regressions the moment they ship.",
            "Let's trace whole pipelines and agent runs to find the slowest step.",
        ),
        "seer-mcp": _A(
            "Seer analyses issues and proposes root causes, and the MCP server lets your own "
            "agents query Sentry directly.",
            "AI workloads fail in new ways - letting AI help with the debugging shortens the "
            "loop from alert to fix.",
            "You're building an observability setup that understands your models as well as "
            "your code.",
        ),
    },
    EngineerRole.PM_MANAGER: {
        "metrics-insights": _A(
            "Metrics insights turn error rates, crash-free sessions, and web vitals into "
            "signals about product health.",
            "Product decisions are better when they rest on how users actually experience the "
            "product, not on anecdotes.",
            "Next, we'll build dashboards you can share with stakeholders.",
        ),
        "stakeholder-dashboards": _A(
            "Stakeholder dashboards summarise reliability and performance in terms leadership "
            "and customers care about.",
            "You are the bridge between engineering detail and business outcome - clear "
            "reporting keeps everyone aligned.",
            "Let's look at release quality so you can report on what each launch changed.",
        ),
    },
}

ROLE_MODULE_REASONS: dict[EngineerRole, dict[str, str]] = {
    EngineerRole.BACKEND: {
        "sentry-fundamentals":    "Essential for tracking API and service errors that affect multiple users.",
        "performance-monitoring": "Critical for monitoring API response times and database performance.",
        "nodejs-integration":     "Specifically designed for backend Node.js services and APIs.",
        "custom-dashboards":      "Helps you monitor service health and get alerted to performance issues.",
    },
    EngineerRole.FRONTEND: {
        "sentry-fundamentals":    "Crucial for catching JavaScript errors that break user experiences.",
        "performance-monitoring": "Monitors Core Web Vitals that impact SEO and user satisfaction.",
        "session-replay":         "Provides visual context for debugging frontend issues.",
        "custom-dashboards":      "Tracks user experience metrics and conversion impacts.",
    },
    EngineerRole.SRE: {
        "sentry-fundamentals":    "Aggregates errors across your entire infrastructure for incident response.",
        "performance-monitoring": "Monitors service latency and helps maintain SLOs.",
        "custom-dashboards":      "Integrates with your existing monitoring and alerting workflows.",
        "team-workflows":         "Connects with PagerDuty and Slack for incident management.",
    },
    EngineerRole.FULLSTACK: {
        "sentry-fundamentals":    "Provides end-to-end visibility from frontend to backend.",
        "performance-monitoring": "Tracks complete user journeys across your entire stack.",
        "react-error-boundaries": "Connects frontend errors with backend performance data.",
        "team-workflows":         "Monitors releases and catches regressions across the full stack.",
    },
    EngineerRole.AI_ML: {
        "sentry-fundamentals":    "Catches silent failures in model servers and pipelines.",
        "performance-monitoring": "Keeps inference latency inside its budget.",
        "custom-metrics":         "Tracks model quality and token cost next to your errors.",
        "seer-mcp":               "Brings AI-assisted debugging to your AI workloads.",
    },
    EngineerRole.PM_MANAGER: {
        "metrics-insights":       "Turns engineering telemetry into product health signals.",
        "stakeholder-dashboards": "Gives leadership a shared view of reliability.",
    },
}


# ─── Module difficulty & course catalogue ────────────────────────────────────

MODULE_DIFFICULTY: dict[str, Difficulty] = {
    "sentry-fundamentals":    Difficulty.BEGINNER,
    "react-error-boundaries": Difficulty.INTERMEDIATE,
    "performance-monitoring": Difficulty.INTERMEDIATE,
    "nodejs-integration":     Difficulty.BEGINNER,
    "custom-dashboards":      Difficulty.ADVANCED,
    "team-workflows":         Difficulty.ADVANCED,
    "distributed-tracing":    Difficulty.ADVANCED,
    "release-health":         Difficulty.INTERMEDIATE,
    "user-feedback":          Difficulty.BEGINNER,
    "session-replay":         Difficulty.BEGINNER,
    "seer-mcp":               Difficulty.ADVANCED,
    "custom-metrics":         Difficulty.INTERMEDIATE,
    "stakeholder-dashboards": Difficulty.BEGINNER,
    "metrics-insights":       Difficulty.BEGINNER,
}

# Each tuple: (id, title, description, duration, level, rating, students, category, popular)
_COURSE_CATALOGUE: list[tuple] = [
    ("sentry-fundamentals", "Sentry Fundamentals",
     "See Sentry in action through a comprehensive 10-minute demo. Learn how to efficiently "
     "identify and resolve errors and performance issues using Sentry's platform.",
     "10 min", "Beginner", 4.9, 12500, "Foundation", True),
    ("react-error-boundaries", "Sentry Logging",
     "Master structured logging with Sentry. Learn to send, view, and query logs from your "
     "applications for better debugging and monitoring.",
     "1.2 hrs", "Intermediate", 4.8, 8900, "Monitoring", False),
    ("performance-monitoring", "Performance Monitoring",
     "Deep dive into performance tracking, Core Web Vitals, and optimizing your application's "
     "speed and user experience.",
     "2.1 hrs", "Advanced", 4.7, 6400, "Performance", False),
    ("nodejs-integration", "Node.js Integration",
     "Complete backend monitoring setup, express middleware integration, and tracking "
     "server-side errors effectively.",
     "1.8 hrs", "Intermediate", 4.8, 7200, "Backend", False),
    ("custom-dashboards", "Custom Dashboards",
     "Create powerful custom dashboards, set up alerts, and build monitoring workflows that "
     "fit your team's needs.",
     "2.5 hrs", "Advanced", 4.6, 4100, "Advanced", False),
    ("team-workflows", "Team Workflows",
     "Establish team protocols, manage releases, and implement CI/CD integration for seamless "
     "development workflows.",
     "3.2 hrs", "Expert", 4.9, 3800, "Enterprise", True),
    ("distributed-tracing", "Distributed Tracing",
     "Follow requests across services, queues, and databases to pinpoint latency.",
     "2.8 hrs", "Advanced", 4.7, 3200, "Performance", False),
    ("release-health", "Release Health & Deployment Monitoring",
     "Track adoption, crash-free sessions, and regressions for every release you ship.",
     "2.0 hrs", "Intermediate", 4.8, 4500, "DevOps", False),
    ("user-feedback", "User Feedback Integration",
     "Collect user feedback in context and connect it to errors and replays.",
     "1.5 hrs", "Intermediate", 4.6, 2800, "UX", False),
    ("session-replay", "Session Replay",
     "Replay real user sessions to see the clicks and network calls behind every error.",
     "1.5 hrs", "Beginner", 4.7, 3900, "UX", False),
    ("seer-mcp", "Seer & MCP for AI/ML",
     "Use Seer's AI-assisted root cause analysis and the Sentry MCP server in AI workflows.",
     "3.5 hrs", "Advanced", 4.9, 1200, "AI/ML", True),
    ("custom-metrics", "Custom Metrics",
     "Emit and chart the metrics that matter to your application beyond errors and traces.",
     "1.5 hrs", "Intermediate", 4.7, 1900, "Performance", False),
    ("stakeholder-dashboards", "Building Effective Dashboards for Stakeholders",
     "Design dashboards that communicate product health to leadership and customers.",
     "2.0 hrs", "Beginner", 4.8, 3400, "Management", True),
    ("metrics-insights", "Metrics-Driven Product Insights",
     "Turn Sentry telemetry into product decisions and prioritisation.",
     "1.5 hrs", "Beginner", 4.9, 2800, "Management", False),
]

COURSES: list[Course] = [
    Course(id=cid, slug=cid, title=title, description=desc, duration=duration, level=level,
           rating=rating, students=students, category=category, is_popular=popular)
    for cid, title, desc, duration, level, rating, students, category, popular in _COURSE_CATALOGUE
]


# ─── Lookups ─────────────────────────────────────────────────────────────────

def get_role(role: EngineerRole) -> Optional[RoleInfo]:
    return ROLES.get(role)


def get_role_display_name(role: EngineerRole) -> str:
    return ROLE_DISPLAY_NAMES.get(role, str(role.value if isinstance(role, EngineerRole) else role))


def get_learning_path_for_role(role: Optional[EngineerRole]) -> Optional[LearningPath]:
    if role is None:
        return None
    return LEARNING_PATHS.get(role)


def get_personalization(role: EngineerRole, module_id: str) -> Optional[RoleContentAdaptation]:
    """Two-level lookup; ``None`` when either the role or the module is unknown."""
    return ROLE_PERSONALIZATIONS.get(role, {}).get(module_id)


def get_module_reason(role: EngineerRole, module_id: str) -> Optional[str]:
    return ROLE_MODULE_REASONS.get(role, {}).get(module_id)


def get_module_difficulty(module_id: str) -> Difficulty:
    return MODULE_DIFFICULTY.get(module_id, Difficulty.BEGINNER)


def get_course(course_id: str) -> Optional[Course]:
    return next((c for c in COURSES if c.id == course_id), None)
