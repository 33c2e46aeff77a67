"""The ``ImageBackend`` protocol — everything the pipeline asks of an engine.

Any object with these four methods satisfies the protocol.  Implementations
raise ``BackendError`` on failure; callers decide whether that is fatal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageBackend(Protocol):
    """Container engine operations used by materialization and publication."""

    def import_archive(self, archive_path: Path, reference: str) -> None:
        """Import a root-filesystem tarball as a single-layer image."""
        ...

    def tag(self, source: str, target: str) -> None:
        """Point *target* at the image currently referenced by *source*."""
        ...

    def push(self, reference: str) -> None:
        """Push a single fully qualified reference."""
        ...

    def push_all_tags(self, repository: str) -> None:
        """Push every local tag of *repository* in one operation."""
        ...
