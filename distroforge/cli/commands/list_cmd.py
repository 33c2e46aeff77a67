"""``distroforge list`` — show the distributions the manifest describes."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from distroforge.cli.commands.build import obtain_manifest
from distroforge.config import ForgeConfig
from distroforge.monitor.renderer import ReportRenderer

console = Console()


def list_cmd(
    manifest_path: Path = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Read the manifest from a local file instead of the upstream URL.",
    ),
) -> None:
    """Print every distribution in the manifest, grouped by family."""
    manifest = obtain_manifest(manifest_path, ForgeConfig())
    ReportRenderer(console=console).print_manifest(manifest)
    console.print(
        f"[dim]{manifest.distribution_count} distributions in "
        f"{len(manifest.families)} families[/dim]"
    )
