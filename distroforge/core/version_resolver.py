"""Version resolution for downloaded distribution archives.

Two strategies, tried in strict priority order:

1. **os-release metadata** — read ``etc/os-release`` / ``usr/lib/os-release``
   from inside the archive and take ``VERSION_ID``.  Authoritative when
   present.
2. **URL fallback** — the first ``N.N`` or ``N.N.N`` run of digits in the
   final path segment of the download URL.

Resolution fails with ``VersionResolutionError`` only when both yield
nothing.
"""

from __future__ import annotations

import logging
import re
import tarfile
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from distroforge.core.errors import VersionResolutionError

logger = logging.getLogger(__name__)

# Archive-internal prefixes are not guaranteed ("./", "rootfs/", ...).
OS_RELEASE_PATTERNS: tuple[str, ...] = ("*etc/os-release", "*usr/lib/os-release")

_VERSION_ID_PREFIX = "VERSION_ID="
_URL_VERSION_RE = re.compile(r"\d+\.\d+(?:\.\d+)?")

# Upper bound on a single os-release read; real files are well under 1 KiB.
_MAX_OS_RELEASE_BYTES = 64 * 1024


def parse_os_release(content: str) -> str:
    """Return the ``VERSION_ID`` value from os-release text, or ``""``.

    Only the first ``VERSION_ID=`` line is considered.  Surrounding
    whitespace and quotes are stripped.

    >>> parse_os_release('NAME="Ubuntu"\\nVERSION_ID="24.04"\\n')
    '24.04'
    """
    for line in content.splitlines():
        if line.startswith(_VERSION_ID_PREFIX):
            value = line[len(_VERSION_ID_PREFIX):].strip()
            return value.strip("\"'")
    return ""


def _is_os_release(member_name: str) -> bool:
    return any(fnmatchcase(member_name, pattern) for pattern in OS_RELEASE_PATTERNS)


def version_from_archive(archive_path: Path) -> str:
    """Scan *archive_path* for os-release files and return the first VERSION_ID.

    Candidates are tried in archive order.  Compression is auto-detected.
    Returns ``""`` when no candidate yields a version or the archive cannot
    be read at all.
    """
    try:
        with tarfile.open(archive_path, mode="r:*") as tar:
            candidates = [
                member
                for member in tar.getmembers()
                if (member.isfile() or member.issym() or member.islnk())
                and _is_os_release(member.name)
            ]
            logger.debug(
                "os-release candidates in %s: %s",
                archive_path,
                [member.name for member in candidates],
            )

            for member in candidates:
                try:
                    handle = tar.extractfile(member)
                except (KeyError, tarfile.TarError) as exc:
                    # Dangling symlink (target outside the archive) or bad member.
                    logger.debug("Skipping %s: %s", member.name, exc)
                    continue
                if handle is None:
                    continue
                with handle:
                    content = handle.read(_MAX_OS_RELEASE_BYTES)
                version = parse_os_release(content.decode("utf-8", errors="replace"))
                if version:
                    logger.debug("VERSION_ID=%s found in %s", version, member.name)
                    return version
    except (tarfile.TarError, OSError, EOFError) as exc:
        logger.warning("Could not read os-release from %s: %s", archive_path, exc)
        return ""

    return ""


def version_from_url(url: str) -> str:
    """Return the first ``N.N[.N]`` found in the URL's final path segment.

    >>> version_from_url("https://example.com/ubuntu-24.04.2-amd64-wsl.rootfs.tar.gz")
    '24.04.2'
    """
    filename = PurePosixPath(urlparse(url).path).name
    match = _URL_VERSION_RE.search(filename)
    return match.group(0) if match else ""


def resolve_version(archive_path: Path, url: str) -> str:
    """Resolve the version tag for a downloaded archive.

    Raises ``VersionResolutionError`` when neither strategy produces a tag.
    """
    version = version_from_archive(archive_path)
    if version:
        logger.info("Extracted tag from os-release: %s", version)
        return version

    logger.info("No usable os-release in %s; trying URL %s", archive_path, url)
    version = version_from_url(url)
    if version:
        logger.info("Extracted tag from URL: %s", version)
        return version

    raise VersionResolutionError(
        f"No VERSION_ID in archive {archive_path} and no version pattern in {url}"
    )
