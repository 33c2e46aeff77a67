"""Distroforge: republish WSL root filesystems as container base images.

Tracks the upstream WSL distribution manifest and, for every distribution:
  - downloads the amd64 root-filesystem archive
  - resolves a version tag (os-release VERSION_ID, falling back to the URL)
  - imports the archive as ``<name>:<version>`` plus ``latest`` / timestamp aliases
  - publishes to the primary registry (one repository per distribution,
    batch push) and the secondary registry (shared repository, per-tag push)

Each distribution is an independent unit of work; one failure never stops
the others, and the run fails if any distribution failed.
"""

__version__ = "0.1.0"
__description__ = "Republish WSL root filesystems as container base images"

from distroforge.core.manifest_parser import parse_manifest
from distroforge.core.pipeline import PipelineDriver

__all__ = ["PipelineDriver", "parse_manifest", "__version__"]
