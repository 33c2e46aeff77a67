"""Distroforge data models — all Pydantic v2, all frozen (immutable)."""

from distroforge.models.builds import (
    LATEST_TAG,
    TIMESTAMP_FORMAT,
    MaterializedImage,
    PublicationTarget,
    RegistryPlan,
    ResolvedBuild,
)
from distroforge.models.manifest import ArchiveRef, DistributionEntry, DistributionManifest
from distroforge.models.outcomes import (
    DistributionResult,
    DistributionStatus,
    PipelineStage,
    RunReport,
)

__all__ = [
    # manifest
    "ArchiveRef",
    "DistributionEntry",
    "DistributionManifest",
    # builds
    "LATEST_TAG",
    "TIMESTAMP_FORMAT",
    "ResolvedBuild",
    "MaterializedImage",
    "PublicationTarget",
    "RegistryPlan",
    # outcomes
    "PipelineStage",
    "DistributionStatus",
    "DistributionResult",
    "RunReport",
]
