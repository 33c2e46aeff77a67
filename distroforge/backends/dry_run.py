"""Backend that records engine commands instead of executing them."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class DryRunBackend:
    """Logs every engine call and keeps them in ``commands``.

    Used by ``distroforge build --dry-run`` to show what a run would do
    without touching local images or registries.
    """

    def __init__(self, engine: str = "docker") -> None:
        self.engine = engine
        self.commands: list[list[str]] = []

    def _record(self, *args: str) -> None:
        command = [self.engine, *args]
        self.commands.append(command)
        logger.info("[dry-run] %s", " ".join(command))

    def import_archive(self, archive_path: Path, reference: str) -> None:
        self._record("import", str(archive_path), reference)

    def tag(self, source: str, target: str) -> None:
        self._record("tag", source, target)

    def push(self, reference: str) -> None:
        self._record("push", reference)

    def push_all_tags(self, repository: str) -> None:
        self._record("push", "--all-tags", repository)
