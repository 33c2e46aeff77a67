"""Pipeline driver — every distribution, start to finish, independently.

Each distribution is one unit of work::

    acquire -> resolve -> materialize -> publish

A stage error ends only its own unit; the unit is recorded with the failing
stage and the run continues.  Scratch archives are released when a unit
finishes, whatever the outcome.  The run fails if any unit did not succeed.

Units share no mutable state apart from ``ScratchSpace`` allocation, so they
may run on a bounded worker pool.  A cancel event is honoured between
stages, never inside one.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Collection
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from distroforge.core.acquisition import ScratchSpace
from distroforge.core.errors import ForgeError, PublicationError
from distroforge.core.materializer import ImageMaterializer
from distroforge.core.publisher import PublicationPlanner
from distroforge.core.version_resolver import resolve_version
from distroforge.models.builds import ResolvedBuild
from distroforge.models.manifest import DistributionEntry, DistributionManifest
from distroforge.models.outcomes import (
    DistributionResult,
    DistributionStatus,
    PipelineStage,
    RunReport,
)

logger = logging.getLogger(__name__)


class ArchiveSource(Protocol):
    """Anything that can download an archive to a local path."""

    def fetch(self, url: str, dest: Path, expected_sha256: str | None = None) -> Path:
        ...


class _Cancelled(Exception):
    """Internal signal: the cancel event was set before *stage* started."""

    def __init__(self, stage: PipelineStage) -> None:
        super().__init__(stage.value)
        self.stage = stage


class PipelineDriver:
    """Sequences acquisition, resolution, materialization and publication.

    Parameters
    ----------
    fetcher:
        Downloads archives (``ArchiveFetcher`` in production).
    materializer:
        Imports archives and applies local aliases.
    planner:
        Derives and pushes registry references.
    scratch:
        Allocates per-distribution download paths.
    resolver:
        ``(archive_path, url) -> version``; raises ``VersionResolutionError``.
    max_workers:
        Number of distributions processed concurrently.  ``1`` is strictly
        sequential.
    verify_checksums:
        Pass the manifest's SHA-256 to the fetcher for verification.
    cancel_event:
        When set, units stop before their next stage.
    """

    def __init__(
        self,
        fetcher: ArchiveSource,
        materializer: ImageMaterializer,
        planner: PublicationPlanner,
        scratch: ScratchSpace,
        *,
        resolver: Callable[[Path, str], str] = resolve_version,
        max_workers: int = 1,
        verify_checksums: bool = False,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._fetcher = fetcher
        self._materializer = materializer
        self._planner = planner
        self._scratch = scratch
        self._resolver = resolver
        self.max_workers = max_workers
        self.verify_checksums = verify_checksums
        self.cancel_event = cancel_event or threading.Event()

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(
        self,
        manifest: DistributionManifest,
        only: Collection[str] | None = None,
    ) -> RunReport:
        """Process every distribution of *manifest* and return the report.

        *only* restricts the run to the named distributions (matched
        case-insensitively against ``Name``).
        """
        started_at = datetime.now(timezone.utc)
        units = self.select(manifest, only)
        logger.info("Processing %d distributions (workers=%d)", len(units), self.max_workers)

        if self.max_workers == 1 or len(units) <= 1:
            results = [self.run_distribution(family, entry) for family, entry in units]
        else:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="distroforge"
            ) as pool:
                futures = [
                    pool.submit(self.run_distribution, family, entry)
                    for family, entry in units
                ]
                results = [future.result() for future in futures]

        report = RunReport(
            results=results,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        if report.succeeded:
            logger.info("All %d distributions have been processed successfully", len(results))
        else:
            failed = [
                f"{result.name} ({result.failed_stage.value if result.failed_stage else '?'})"
                for result in report.failures
            ]
            logger.error(
                "%d of %d distributions failed: %s",
                len(failed),
                len(results),
                ", ".join(failed),
            )
        return report

    @staticmethod
    def select(
        manifest: DistributionManifest,
        only: Collection[str] | None = None,
    ) -> list[tuple[str, DistributionEntry]]:
        """Return ``(family, entry)`` units in manifest order, optionally filtered."""
        wanted = {name.lower() for name in only} if only else None
        units = [
            (family, entry)
            for family, entry in manifest.iter_distributions()
            if wanted is None or entry.canonical_name in wanted
        ]
        if wanted:
            missing = wanted - {entry.canonical_name for _, entry in units}
            for name in sorted(missing):
                logger.warning("Requested distribution %r is not in the manifest", name)
        return units

    # ------------------------------------------------------------------
    # One unit of work
    # ------------------------------------------------------------------

    def run_distribution(self, family: str, entry: DistributionEntry) -> DistributionResult:
        """Run all four stages for *entry*; never raises for stage failures."""
        name = entry.canonical_name
        url = entry.amd64_url.url
        stage = PipelineStage.ACQUIRE
        archive: Path | None = None
        build: ResolvedBuild | None = None
        warnings: list[str] = []
        pushed: list[str] = []

        logger.info("Building image for: %s (%s) [%s]", entry.name, entry.friendly_name, family)
        try:
            self._checkpoint(stage)
            archive = self._scratch.allocate(name)
            expected = entry.amd64_url.sha256 if self.verify_checksums else None
            self._fetcher.fetch(url, archive, expected_sha256=expected or None)

            stage = PipelineStage.RESOLVE
            self._checkpoint(stage)
            version = self._resolver(archive, url)

            stage = PipelineStage.MATERIALIZE
            self._checkpoint(stage)
            image = self._materializer.materialize(archive, version, name)
            build = image.build
            warnings.extend(image.warnings)

            stage = PipelineStage.PUBLISH
            self._checkpoint(stage)
            pushed = self._planner.publish(build)

        except _Cancelled as cancelled:
            logger.warning("%s: cancelled before %s", entry.name, cancelled.stage.value)
            return self._result(
                family, entry, DistributionStatus.CANCELLED,
                stage=cancelled.stage, error="cancelled",
                build=build, pushed=pushed, warnings=warnings,
            )
        except ForgeError as exc:
            failed_stage = exc.stage or stage
            if isinstance(exc, PublicationError):
                pushed = exc.pushed
            logger.error("%s: %s stage failed: %s", entry.name, failed_stage.value, exc)
            return self._result(
                family, entry, DistributionStatus.FAILED,
                stage=failed_stage, error=str(exc),
                build=build, pushed=pushed, warnings=warnings,
            )
        except Exception as exc:
            logger.exception("%s: unexpected error during %s", entry.name, stage.value)
            return self._result(
                family, entry, DistributionStatus.FAILED,
                stage=stage, error=f"{type(exc).__name__}: {exc}",
                build=build, pushed=pushed, warnings=warnings,
            )
        finally:
            if archive is not None:
                self._scratch.release(archive)

        logger.info("Completed building image for: %s", entry.name)
        return self._result(
            family, entry, DistributionStatus.SUCCEEDED,
            build=build, pushed=pushed, warnings=warnings,
        )

    def cancel(self) -> None:
        """Ask every running unit to stop before its next stage."""
        self.cancel_event.set()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _checkpoint(self, stage: PipelineStage) -> None:
        if self.cancel_event.is_set():
            raise _Cancelled(stage)

    @staticmethod
    def _result(
        family: str,
        entry: DistributionEntry,
        status: DistributionStatus,
        *,
        stage: PipelineStage | None = None,
        error: str | None = None,
        build: ResolvedBuild | None = None,
        pushed: list[str] | None = None,
        warnings: list[str] | None = None,
    ) -> DistributionResult:
        return DistributionResult(
            family=family,
            name=entry.name,
            status=status,
            failed_stage=stage,
            error=error,
            build=build,
            published=list(pushed or []),
            warnings=list(warnings or []),
        )
