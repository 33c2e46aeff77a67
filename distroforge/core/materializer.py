"""Image materialization — archive in, locally tagged image out.

The archive is imported as ``<name>:<version>``; ``<name>:latest`` and
``<name>:<timestamp>`` are then pointed at the same image.  Import failure is
fatal for the distribution.  Alias failures are soft: they are logged and
returned as warnings, since the version-tagged image remains publishable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from distroforge.backends.base import ImageBackend
from distroforge.core.errors import BackendError, ImageImportError, VersionResolutionError
from distroforge.models.builds import (
    LATEST_TAG,
    TIMESTAMP_FORMAT,
    MaterializedImage,
    ResolvedBuild,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ImageMaterializer:
    """Imports archives through an ``ImageBackend`` and applies local aliases.

    Parameters
    ----------
    backend:
        Engine used for import and tagging.
    clock:
        Returns the materialization time.  UTC by default so every timestamp
        tag in a run shares one time zone.
    """

    def __init__(
        self,
        backend: ImageBackend,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._backend = backend
        self._clock = clock

    def materialize(
        self, archive_path: Path, version: str, canonical_name: str
    ) -> MaterializedImage:
        if not version:
            raise VersionResolutionError(
                f"Refusing to import {canonical_name}: empty version tag"
            )

        timestamp = self._clock().strftime(TIMESTAMP_FORMAT)
        build = ResolvedBuild(
            repository=canonical_name.lower(),
            version=version,
            timestamp=timestamp,
        )

        try:
            self._backend.import_archive(Path(archive_path), build.local_image)
        except BackendError as exc:
            raise ImageImportError(
                f"Failed to import {archive_path} as {build.local_image}: {exc}"
            ) from exc
        logger.info("Image imported with tag %s", build.local_image)

        warnings: list[str] = []
        for alias in (LATEST_TAG, timestamp):
            target = f"{build.repository}:{alias}"
            try:
                self._backend.tag(build.local_image, target)
            except BackendError as exc:
                message = f"Failed to tag {build.local_image} as {target}: {exc}"
                logger.warning("%s", message)
                warnings.append(message)
            else:
                logger.info("Image tagged as %s", target)

        return MaterializedImage(build=build, warnings=warnings)
