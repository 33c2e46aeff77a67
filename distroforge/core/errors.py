"""Error taxonomy for the manifest-to-image pipeline.

``MalformedManifestError`` aborts a run.  Every other ``ForgeError`` is scoped
to a single distribution: the driver records it against the ``stage`` the
error class declares and moves on to the next distribution.
"""

from __future__ import annotations

from typing import ClassVar

from distroforge.models.outcomes import PipelineStage


class ForgeError(RuntimeError):
    """Base class for all distroforge failures."""

    stage: ClassVar[PipelineStage | None] = None


class MalformedManifestError(ForgeError):
    """The upstream manifest is not valid JSON or lacks ModernDistributions."""


class DownloadError(ForgeError):
    """A manifest or archive could not be fetched."""

    stage = PipelineStage.ACQUIRE


class ChecksumMismatchError(DownloadError):
    """A downloaded archive does not match its published SHA-256."""


class VersionResolutionError(ForgeError):
    """Neither os-release metadata nor the source URL yielded a version."""

    stage = PipelineStage.RESOLVE


class ImageImportError(ForgeError):
    """The container engine refused to import the archive."""

    stage = PipelineStage.MATERIALIZE


class PublicationError(ForgeError):
    """Tagging or pushing failed against at least one registry."""

    stage = PipelineStage.PUBLISH

    def __init__(self, message: str, *, pushed: list[str] | None = None) -> None:
        super().__init__(message)
        self.pushed: list[str] = list(pushed or [])


class BackendError(ForgeError):
    """A container engine command failed.

    Raised by ``ImageBackend`` implementations; the materializer and the
    publication planner translate it into their own stage error.
    """

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr
