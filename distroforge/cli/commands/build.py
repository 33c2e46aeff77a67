"""``distroforge build`` — run the full manifest-to-registry pipeline.

Fetches the manifest (or reads ``--manifest``), then downloads, resolves,
imports and publishes every selected distribution.  Exits non-zero when the
manifest cannot be obtained or any distribution fails.
"""

from __future__ import annotations

import logging
import signal
from pathlib import Path

import requests
import typer
from rich.console import Console

from distroforge.backends import DryRunBackend, EngineCLIBackend, ImageBackend
from distroforge.config import ForgeConfig
from distroforge.core.acquisition import ArchiveFetcher, ScratchSpace, fetch_manifest
from distroforge.core.errors import DownloadError, MalformedManifestError
from distroforge.core.manifest_parser import load_manifest, parse_manifest
from distroforge.core.materializer import ImageMaterializer
from distroforge.core.pipeline import PipelineDriver
from distroforge.core.publisher import PublicationPlanner
from distroforge.models.manifest import DistributionManifest
from distroforge.monitor.renderer import ReportRenderer

console = Console()
logger = logging.getLogger(__name__)


def obtain_manifest(
    manifest_path: Path | None,
    settings: ForgeConfig,
    session: requests.Session | None = None,
) -> DistributionManifest:
    """Load the manifest from disk or the configured URL; exit 1 on failure."""
    try:
        if manifest_path is not None:
            return load_manifest(manifest_path)
        data = fetch_manifest(
            settings.manifest_url, session=session, timeout=settings.http_timeout
        )
        return parse_manifest(data)
    except (DownloadError, MalformedManifestError) as exc:
        console.print(f"[bold red]Cannot load manifest:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


def build_cmd(
    manifest_path: Path = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Read the manifest from a local file instead of the upstream URL.",
    ),
    only: list[str] = typer.Option(
        None,
        "--only",
        "-o",
        help="Build only the named distribution (repeatable).",
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Distributions processed concurrently (default: config).",
    ),
    engine: str = typer.Option(
        None,
        "--engine",
        "-e",
        help="Container engine binary (default: config).",
    ),
    verify_checksums: bool = typer.Option(
        False,
        "--verify-checksums",
        help="Verify archive SHA-256 against the manifest (also enabled by config).",
    ),
    scratch_dir: Path = typer.Option(
        None,
        "--scratch-dir",
        help="Directory for temporary archive downloads.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Log engine commands instead of executing them.",
    ),
    report_path: Path = typer.Option(
        None,
        "--report",
        "-r",
        help="Write the run report as JSON to this path.",
    ),
) -> None:
    """Build and publish container images for every manifest distribution."""
    settings = ForgeConfig()
    engine_bin = engine or settings.engine

    backend: ImageBackend
    if dry_run:
        backend = DryRunBackend(engine_bin)
    else:
        backend = EngineCLIBackend(engine_bin, timeout=settings.engine_timeout)

    session = requests.Session()
    manifest = obtain_manifest(manifest_path, settings, session=session)

    driver = PipelineDriver(
        fetcher=ArchiveFetcher(session, timeout=settings.http_timeout),
        materializer=ImageMaterializer(backend),
        planner=PublicationPlanner(backend, settings.registry_policy()),
        scratch=ScratchSpace(scratch_dir or settings.scratch_dir),
        max_workers=workers or settings.max_workers,
        verify_checksums=settings.verify_checksums or verify_checksums,
    )

    # First Ctrl-C stops units between stages; a second one interrupts.
    previous_handler = signal.getsignal(signal.SIGINT)

    def _on_sigint(signum, frame):
        logger.warning("Interrupt received; finishing current stages")
        driver.cancel()
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    installed = False
    try:
        signal.signal(signal.SIGINT, _on_sigint)
        installed = True
    except ValueError:
        logger.debug("Not in the main thread; Ctrl-C cancellation disabled")

    try:
        report = driver.run(manifest, only=only or None)
    finally:
        if installed and previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    console.print()
    ReportRenderer(console=console).print_report(report)

    if report_path is not None:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"[dim]Report written to {report_path}[/dim]")

    raise typer.Exit(code=report.exit_code)
