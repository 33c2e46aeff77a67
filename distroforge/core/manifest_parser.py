"""Decode the upstream distribution manifest into a DistributionManifest."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from distroforge.core.errors import MalformedManifestError
from distroforge.models.manifest import DistributionManifest

logger = logging.getLogger(__name__)


def parse_manifest(data: bytes | str) -> DistributionManifest:
    """Parse manifest JSON.

    Raises ``MalformedManifestError`` when the document is not JSON, is not
    an object, or carries no well-formed ``ModernDistributions`` mapping.
    Unknown keys are ignored and ``Arm64Url`` may be absent or ``null``.
    """
    try:
        manifest = DistributionManifest.model_validate_json(data)
    except ValidationError as exc:
        errors = exc.errors(include_url=False)
        summary = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in errors[:5]
        )
        if len(errors) > 5:
            summary += f" (+{len(errors) - 5} more)"
        raise MalformedManifestError(f"Invalid distribution manifest: {summary}") from exc

    logger.info(
        "Parsed manifest: %d families, %d distributions",
        len(manifest.families),
        manifest.distribution_count,
    )
    return manifest


def load_manifest(path: Path) -> DistributionManifest:
    """Read and parse a manifest stored on local disk."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise MalformedManifestError(f"Cannot read manifest {path}: {exc}") from exc
    return parse_manifest(data)
