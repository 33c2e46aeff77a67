"""Shared test fixtures for Distroforge."""

from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from distroforge.core.errors import BackendError, DownloadError

FIXED_TIME = datetime(2025, 1, 15, 3, 0, 0, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2025-01-15-030000"

UBUNTU_URL = "https://example.com/releases/ubuntu-24.04.2-amd64-wsl.rootfs.tar.gz"
DEBIAN_URL = "https://example.com/debian/install.tar.gz"
FEDORA_URL = "https://example.com/fedora/Fedora-WSL-Base-42.1.0.x86_64.tar.xz"


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeBackend:
    """ImageBackend that records calls instead of touching an engine.

    ``fail`` maps an operation name (``import``, ``tag``, ``push``,
    ``push_all``) to a predicate over the call's last argument; matching
    calls raise ``BackendError`` (and are still recorded).
    """

    def __init__(self, fail: dict[str, Callable[[str], bool]] | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.fail = fail or {}

    def _call(self, op: str, *args: str) -> None:
        self.calls.append((op, *args))
        predicate = self.fail.get(op)
        if predicate is not None and predicate(args[-1]):
            raise BackendError(f"simulated {op} failure for {args[-1]}")

    def import_archive(self, archive_path: Path, reference: str) -> None:
        self._call("import", str(archive_path), reference)

    def tag(self, source: str, target: str) -> None:
        self._call("tag", source, target)

    def push(self, reference: str) -> None:
        self._call("push", reference)

    def push_all_tags(self, repository: str) -> None:
        self._call("push_all", repository)

    def ops(self, op: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == op]


class FakeFetcher:
    """ArchiveSource serving in-memory payloads keyed by URL.

    A payload that is an exception instance is raised instead of written.
    """

    def __init__(self, payloads: dict[str, bytes | Exception]) -> None:
        self.payloads = payloads
        self.fetched: list[tuple[str, Path, str | None]] = []

    def fetch(self, url: str, dest: Path, expected_sha256: str | None = None) -> Path:
        self.fetched.append((url, Path(dest), expected_sha256))
        payload = self.payloads.get(url)
        if payload is None:
            raise DownloadError(f"404 for {url}")
        if isinstance(payload, Exception):
            raise payload
        Path(dest).write_bytes(payload)
        return Path(dest)


# ---------------------------------------------------------------------------
# Archive builders
# ---------------------------------------------------------------------------


def build_tar_bytes(
    files: dict[str, str],
    symlinks: dict[str, str] | None = None,
    mode: str = "w:gz",
) -> bytes:
    """Build a tar archive in memory from ``{member_name: text}``."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=mode) as tar:
        for name, text in files.items():
            data = text.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
    return buffer.getvalue()


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a tar archive to disk and return its path."""
    counter = {"n": 0}

    def _factory(
        files: dict[str, str],
        symlinks: dict[str, str] | None = None,
        mode: str = "w:gz",
    ) -> Path:
        counter["n"] += 1
        path = tmp_path / f"archive-{counter['n']}.tar"
        path.write_bytes(build_tar_bytes(files, symlinks, mode))
        return path

    return _factory


# ---------------------------------------------------------------------------
# Manifest fixtures
# ---------------------------------------------------------------------------


def manifest_document(**overrides: Any) -> dict[str, Any]:
    """A DistributionInfo.json-shaped document with three distributions."""
    document: dict[str, Any] = {
        "ModernDistributions": {
            "Ubuntu": [
                {
                    "Name": "Ubuntu",
                    "FriendlyName": "Ubuntu",
                    "Default": True,
                    "Amd64Url": {"Url": UBUNTU_URL, "Sha256": "0xABCDEF"},
                    "Arm64Url": {"Url": UBUNTU_URL.replace("amd64", "arm64"), "Sha256": "0x1234"},
                },
            ],
            "Debian": [
                {
                    "Name": "Debian",
                    "FriendlyName": "Debian GNU/Linux",
                    "Default": True,
                    "Amd64Url": {"Url": DEBIAN_URL, "Sha256": "0x00"},
                    "Arm64Url": None,
                },
            ],
            "Fedora": [
                {
                    "Name": "FedoraLinux-42",
                    "FriendlyName": "Fedora Linux 42",
                    "Default": False,
                    "Amd64Url": {"Url": FEDORA_URL, "Sha256": "0x11"},
                },
            ],
        },
        "Default": "Ubuntu",
        "Distributions": [{"Name": "legacy", "StoreAppId": "9XYZ"}],
    }
    document.update(overrides)
    return document


@pytest.fixture
def manifest_bytes() -> bytes:
    return json.dumps(manifest_document()).encode("utf-8")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_TIME
