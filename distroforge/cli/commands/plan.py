"""``distroforge plan NAME VERSION`` — preview publication references.

Applies the registry naming rules to a hypothetical build without touching
the engine or any registry.
"""

from __future__ import annotations

from datetime import datetime, timezone

import typer
from rich.console import Console

from distroforge.backends import DryRunBackend
from distroforge.config import ForgeConfig
from distroforge.core.publisher import PublicationPlanner
from distroforge.models.builds import TIMESTAMP_FORMAT, ResolvedBuild
from distroforge.monitor.renderer import ReportRenderer

console = Console()


def plan_cmd(
    name: str = typer.Argument(..., help="Distribution name, e.g. Ubuntu-24.04."),
    version: str = typer.Argument(..., help="Resolved version tag, e.g. 24.04."),
    timestamp: str = typer.Option(
        None,
        "--timestamp",
        "-t",
        help="Timestamp tag to use (default: now, UTC).",
    ),
) -> None:
    """Show every registry reference a build would be pushed to."""
    settings = ForgeConfig()
    build = ResolvedBuild(
        repository=name.lower(),
        version=version,
        timestamp=timestamp or datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT),
    )
    planner = PublicationPlanner(DryRunBackend(settings.engine), settings.registry_policy())
    plans = planner.plan(build)

    ReportRenderer(console=console).print_plan(plans)
    for plan in plans:
        for reference in plan.references:
            console.print(reference, highlight=False, soft_wrap=True)
