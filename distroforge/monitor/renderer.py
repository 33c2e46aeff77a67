"""Rich terminal renderer for manifests, publication plans and run reports.

Color scheme
------------
- green     : SUCCEEDED
- red       : FAILED
- yellow    : CANCELLED
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from distroforge.models.builds import RegistryPlan
from distroforge.models.manifest import DistributionManifest
from distroforge.models.outcomes import DistributionStatus, RunReport

_STATUS_ICONS: dict[DistributionStatus, str] = {
    DistributionStatus.SUCCEEDED: "[green]SUCCEEDED[/green]",
    DistributionStatus.FAILED: "[bold red]FAILED[/bold red]",
    DistributionStatus.CANCELLED: "[yellow]CANCELLED[/yellow]",
}


class ReportRenderer:
    """Renders distroforge models as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def render_manifest(self, manifest: DistributionManifest) -> Table:
        table = Table(title="Distribution Manifest", expand=True)
        table.add_column("Family", style="cyan", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("Friendly Name")
        table.add_column("Default", justify="center")
        table.add_column("arm64", justify="center")
        table.add_column("Archive", overflow="fold")

        for family, entry in manifest.iter_distributions():
            table.add_row(
                escape(family),
                escape(entry.name),
                escape(entry.friendly_name),
                "[green]Yes[/green]" if entry.default else "",
                "Yes" if entry.arm64_url else "[dim]-[/dim]",
                escape(entry.amd64_url.url),
            )
        return table

    def print_manifest(self, manifest: DistributionManifest) -> None:
        self.console.print(self.render_manifest(manifest))

    # ------------------------------------------------------------------
    # Publication plan
    # ------------------------------------------------------------------

    def render_plan(self, plans: list[RegistryPlan]) -> Table:
        table = Table(title="Publication Targets", expand=True)
        table.add_column("Registry", style="cyan", no_wrap=True)
        table.add_column("Push", justify="center")
        table.add_column("Reference", style="bold", overflow="fold")

        for plan in plans:
            mode = "batch" if plan.batch_push else "single"
            for target in plan.targets:
                table.add_row(escape(plan.registry), mode, escape(target.reference))
        return table

    def print_plan(self, plans: list[RegistryPlan]) -> None:
        self.console.print(self.render_plan(plans))

    # ------------------------------------------------------------------
    # Run report
    # ------------------------------------------------------------------

    def render_report(self, report: RunReport) -> Panel:
        table = Table(expand=True, show_edge=False)
        table.add_column("Family", style="cyan", no_wrap=True)
        table.add_column("Distribution", style="bold")
        table.add_column("Version")
        table.add_column("Status", justify="center")
        table.add_column("Stage")
        table.add_column("Details", overflow="fold")

        for result in report.results:
            details = escape(result.error or "")
            if result.succeeded:
                details = f"{len(result.published)} references pushed"
            if result.warnings:
                details += f" [yellow]({len(result.warnings)} warnings)[/yellow]"
            table.add_row(
                escape(result.family),
                escape(result.name),
                escape(result.build.version) if result.build else "[dim]-[/dim]",
                _STATUS_ICONS[result.status],
                result.failed_stage.value if result.failed_stage else "",
                details,
            )

        succeeded = len(report.results) - len(report.failures)
        status = (
            "[green]success[/green]" if report.succeeded else "[bold red]FAILED[/bold red]"
        )
        summary = f"[bold]Succeeded:[/bold] {succeeded}/{len(report.results)}  |  [bold]Run:[/bold] {status}"

        return Panel(
            Group(table, Text(""), Text.from_markup(summary)),
            title="[bold]Distroforge Run[/bold]",
            border_style="green" if report.succeeded else "red",
            padding=(1, 2),
        )

    def print_report(self, report: RunReport) -> None:
        self.console.print(self.render_report(report))
