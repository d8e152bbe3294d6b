"""
demo_generation.py – Console demo of the course generation pipeline

Run:
    python demo_generation.py [keyword ...] [--role ROLE]

Runs in mock mode unless .env holds a real OPENAI_API_KEY.
See .env.example for format.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# ── make src/ importable without installing the package ──────────────────────
sys.path.insert(0, str(Path(__file__).parent / "src"))

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sentry_academy.config import get_settings
from sentry_academy.content_validator import validate_course_structure
from sentry_academy.generation_service import ContentGenerationService
from sentry_academy.generation_store import GenerationStore
from sentry_academy.guardrails import RequestValidationError
from sentry_academy.logger import configure_logging
from sentry_academy.models import (
    AIGeneratedCourse,
    ContentGenerationRequest,
    EngineerRole,
    GenerationProgress,
)
from sentry_academy.progress_store import ProgressStore
from sentry_academy.review import approve_course, create_approval_workflow, publish_course
from sentry_academy.storage import InMemoryStorage

console = Console()

STATUS_STYLE = {
    "pending":       "dim",
    "researching":   "cyan",
    "generating":    "blue",
    "review-needed": "yellow",
    "approved":      "green",
    "published":     "bold green",
    "rejected":      "red",
    "error":         "bold red",
}


# ─── Display helpers ─────────────────────────────────────────────────────────

def _bar(score: float, width: int = 16) -> str:
    filled = round(score * width)
    return "[" + "█" * filled + "░" * (width - filled) + f"] {score:.0%}"


def _print_progress(progress: GenerationProgress) -> None:
    style = STATUS_STYLE.get(progress.status.value, "white")
    console.print(
        f"  [{style}]{progress.status.value:<14}[/{style}] "
        f"{progress.progress:5.1f}%  [dim]{progress.current_step}[/dim]"
    )


def show_course(course: AIGeneratedCourse) -> None:
    console.print()
    console.rule("[bold magenta]Generated Course[/bold magenta]")

    summary = Table(box=box.ROUNDED, show_header=False, padding=(0, 1))
    summary.add_column("Key",   style="bold cyan", no_wrap=True)
    summary.add_column("Value", style="white")
    summary.add_row("Title",       course.title)
    summary.add_row("Description", course.description)
    summary.add_row("Duration",    course.duration)
    summary.add_row("Level",       course.level)
    summary.add_row("Quality",     _bar(course.quality_score))
    summary.add_row("Sources",     str(len(course.research_sources)))
    console.print(Panel(summary, title="[bold]Course Summary[/bold]", border_style="magenta"))

    modules = Table(box=box.SIMPLE_HEAD, header_style="bold white on dark_violet", padding=(0, 1))
    modules.add_column("#",          justify="right")
    modules.add_column("Module",     style="white", min_width=30)
    modules.add_column("Takeaways",  justify="center")
    modules.add_column("Code",       justify="center")
    modules.add_column("Confidence", min_width=24)
    for index, module in enumerate(course.generated_modules, start=1):
        modules.add_row(
            str(index),
            module.title,
            str(len(module.key_takeaways)),
            "[green]✓[/green]" if module.code_example else "[dim]–[/dim]",
            _bar(module.confidence),
        )
    console.print(Panel(modules, title="[bold]Modules[/bold]", border_style="blue"))

    for p in course.role_personalizations:
        console.print(Panel(
            f"{p.explanation}\n\n[italic]{p.why_relevant}[/italic]\n\n[green]{p.next_step_nudge}[/green]",
            title=f"[bold]{p.role_id.value} · {p.difficulty.value}[/bold]",
            border_style="green",
        ))


def show_learner_view(role: EngineerRole) -> None:
    learner = ProgressStore(InMemoryStorage())
    learner.set_user_role(role)
    rec = learner.next_recommendation()
    if rec is None:
        return
    console.print(Panel(
        f"[bold]{rec.module_id}[/bold]  ({rec.time_estimate}, priority {rec.priority})\n"
        f"[dim]{rec.reasoning}[/dim]",
        title=f"[bold]Next step for a new {role.value} learner[/bold]",
        border_style="cyan",
    ))


# ─── Main ────────────────────────────────────────────────────────────────────

def _parse_args(argv: list[str]) -> tuple[list[str], EngineerRole]:
    role = EngineerRole.BACKEND
    keywords: list[str] = []
    args = iter(argv)
    for arg in args:
        if arg == "--role":
            role = EngineerRole(next(args, role.value))
        else:
            keywords.append(arg)
    return keywords or ["profiling"], role


async def run(keywords: list[str], role: EngineerRole) -> None:
    store = GenerationStore()
    service = ContentGenerationService(store)
    request = ContentGenerationRequest(id="demo-request", keywords=keywords, target_roles=[role])
    store.subscribe(request.id, _print_progress)

    response = await service.submit_request(request)
    if not response.success:
        console.print(f"[bold red]Could not start generation:[/bold red] {response.error}")
        return
    progress = await service.wait_for_generation(request.id, timeout=60)
    if progress.error:
        console.print(f"[bold red]Generation failed:[/bold red] {progress.error}")
        return

    [course] = store.get_all_courses()
    show_course(course)

    result = validate_course_structure(course)
    console.print(f"Validation: score {result.score:.2f}, "
                  f"{'[green]valid[/green]' if result.is_valid else '[red]needs work[/red]'}")
    for suggestion in result.suggestions:
        console.print(f"  [dim]• {suggestion}[/dim]")

    workflow = create_approval_workflow(store, course.id)
    for criterion in workflow.approval_criteria:
        mark = "[green]✓[/green]" if criterion.passed else "[red]✗[/red]"
        console.print(f"  {mark} {criterion.name}")
    if result.is_valid:
        approve_course(store, course.id, workflow.assigned_reviewer, notes="Approved from the demo")
        publish_course(store, course.id, workflow.assigned_reviewer)

    show_learner_view(role)


def main() -> None:
    configure_logging("WARNING")
    settings = get_settings()
    keywords, role = _parse_args(sys.argv[1:])

    console.print()
    console.print(Panel(
        "[bold]Sentry Academy — Course Generation[/bold]\n"
        f"[dim]Keywords: {', '.join(keywords)}  •  Role: {role.value}  •  "
        f"OpenAI: {settings.status_summary()['OpenAI']}[/dim]",
        style="on dark_violet",
        expand=False,
    ))

    try:
        asyncio.run(run(keywords, role))

    except RequestValidationError as e:
        console.print(f"\n[bold red]Invalid request:[/bold red]\n{e.result.summary()}")
        sys.exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(0)

    except Exception:
        console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
