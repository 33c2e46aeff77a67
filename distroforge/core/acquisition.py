"""Archive acquisition — HTTP downloads and per-distribution scratch paths.

Downloads use a shared ``requests.Session``.  There is no retry at this
layer; a failed download is a ``DownloadError`` for that distribution.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from pathlib import Path

import requests

from distroforge.core.errors import ChecksumMismatchError, DownloadError
from distroforge.core.hasher import normalize_checksum

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_URL = (
    "https://raw.githubusercontent.com/microsoft/WSL/master/distributions/DistributionInfo.json"
)

_CHUNK_SIZE = 1024 * 1024


def fetch_manifest(
    url: str = DEFAULT_MANIFEST_URL,
    *,
    session: requests.Session | None = None,
    timeout: float | None = 60.0,
) -> bytes:
    """GET the upstream manifest and return its raw bytes.

    A session created here is closed before returning; a caller-supplied
    *session* is left open.
    """
    if session is None:
        with requests.Session() as owned:
            return fetch_manifest(url, session=owned, timeout=timeout)

    logger.info("Fetching distribution manifest from %s", url)
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
        return response.content
    except requests.RequestException as exc:
        raise DownloadError(f"Failed to fetch manifest {url}: {exc}") from exc


class ArchiveFetcher:
    """Streams distribution archives to local files.

    Parameters
    ----------
    session:
        HTTP session to reuse across downloads.  A new one is created if
        not provided.
    timeout:
        Connect / idle-read timeout in seconds (``None`` waits forever).
    chunk_size:
        Bytes read from the response per iteration.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | None = 120.0,
        chunk_size: int = _CHUNK_SIZE,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._chunk_size = chunk_size

    def fetch(self, url: str, dest: Path, expected_sha256: str | None = None) -> Path:
        """Download *url* into *dest* and return *dest*.

        When *expected_sha256* is given the digest is computed while
        streaming and compared once the body is complete.  Partial files
        are removed on any failure.
        """
        dest = Path(dest)
        logger.info("Downloading %s -> %s", url, dest)
        digest = hashlib.sha256()
        written = 0

        try:
            with self._session.get(url, stream=True, timeout=self._timeout) as response:
                response.raise_for_status()
                with open(dest, "wb") as out:
                    for chunk in response.iter_content(chunk_size=self._chunk_size):
                        if not chunk:
                            continue
                        out.write(chunk)
                        digest.update(chunk)
                        written += len(chunk)
        except (requests.RequestException, OSError) as exc:
            dest.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {url}: {exc}") from exc

        if expected_sha256:
            expected = normalize_checksum(expected_sha256)
            actual = digest.hexdigest()
            if actual != expected:
                dest.unlink(missing_ok=True)
                raise ChecksumMismatchError(
                    f"Checksum mismatch for {url}: expected {expected}, got {actual}"
                )
            logger.debug("Checksum verified for %s: %s", url, actual)

        logger.info("Downloaded %d bytes to %s", written, dest)
        return dest


class ScratchSpace:
    """Allocates unique, per-distribution archive paths under *root*.

    Paths derive from the canonical distribution name (``<root>/<name>.tar``);
    a name already in use gets a numeric suffix.  Allocation is serialized
    so concurrent workers never write the same file.  A file left behind by
    an earlier run is removed before its path is reused, so *root* must not
    be shared with another running process.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._lock = threading.Lock()
        self._in_use: set[Path] = set()

    def allocate(self, name: str) -> Path:
        with self._lock:
            self.root.mkdir(parents=True, exist_ok=True)
            candidate = self.root / f"{name}.tar"
            counter = 2
            while candidate in self._in_use:
                candidate = self.root / f"{name}-{counter}.tar"
                counter += 1
            if candidate.exists():
                logger.info("Removing stale scratch archive %s", candidate)
                candidate.unlink()
            self._in_use.add(candidate)
            return candidate

    def release(self, path: Path) -> None:
        """Delete *path* and return it to the pool.  Missing files are fine."""
        path = Path(path)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to clean up scratch archive %s: %s", path, exc)
        with self._lock:
            self._in_use.discard(path)
