"""Per-distribution outcomes and the aggregate run report."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from distroforge.models.builds import ResolvedBuild


class PipelineStage(str, Enum):
    """Stages of one distribution's unit of work, in execution order."""

    ACQUIRE = "acquire"
    RESOLVE = "resolve"
    MATERIALIZE = "materialize"
    PUBLISH = "publish"


class DistributionStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class DistributionResult(BaseModel):
    """What happened to one distribution during a run.

    ``failed_stage`` and ``error`` are populated only for failed or
    cancelled units.  ``published`` lists every reference pushed before the
    unit finished, including partial pushes of a failed publication.
    """

    model_config = ConfigDict(frozen=True)

    family: str
    name: str
    status: DistributionStatus
    failed_stage: PipelineStage | None = None
    error: str | None = None
    build: ResolvedBuild | None = None
    published: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == DistributionStatus.SUCCEEDED


class RunReport(BaseModel):
    """Aggregate of every DistributionResult, in manifest order."""

    model_config = ConfigDict(frozen=True)

    results: list[DistributionResult] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return all(result.succeeded for result in self.results)

    @property
    def failures(self) -> list[DistributionResult]:
        return [result for result in self.results if not result.succeeded]

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
