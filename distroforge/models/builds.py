"""Build and publication models — one materialized image and where it goes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

LATEST_TAG = "latest"

# Sortable, second precision.  Used for both local and remote date tags.
TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"


class ResolvedBuild(BaseModel):
    """The outcome of importing one distribution archive.

    ``repository`` is the lowercased distribution name; ``local_image`` is the
    version-tagged reference every other tag is derived from.
    """

    model_config = ConfigDict(frozen=True)

    repository: str = Field(min_length=1)
    version: str = Field(min_length=1)
    timestamp: str = Field(min_length=1)

    @property
    def local_image(self) -> str:
        return f"{self.repository}:{self.version}"

    @property
    def tags(self) -> list[str]:
        """Version, ``latest`` and timestamp, in that order."""
        return [self.version, LATEST_TAG, self.timestamp]

    @property
    def local_tags(self) -> list[str]:
        return [f"{self.repository}:{tag}" for tag in self.tags]


class MaterializedImage(BaseModel):
    """A ResolvedBuild plus the soft failures collected while aliasing it."""

    model_config = ConfigDict(frozen=True)

    build: ResolvedBuild
    warnings: list[str] = Field(default_factory=list)


class PublicationTarget(BaseModel):
    """One ``(registry, repository, tag)`` triple to push."""

    model_config = ConfigDict(frozen=True)

    registry: str
    repository: str
    tag: str

    @property
    def reference(self) -> str:
        return f"{self.registry}/{self.repository}:{self.tag}"


class RegistryPlan(BaseModel):
    """All targets of one build inside one registry repository.

    ``batch_push`` registries receive a single push of every tag of the
    repository; the others get one push per reference.
    """

    model_config = ConfigDict(frozen=True)

    registry: str
    repository: str
    targets: list[PublicationTarget]
    batch_push: bool = False

    @property
    def repository_reference(self) -> str:
        return f"{self.registry}/{self.repository}"

    @property
    def references(self) -> list[str]:
        return [target.reference for target in self.targets]
