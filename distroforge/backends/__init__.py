"""Container engine backends.

Priority of use:
1. **EngineCLIBackend** — drives a Docker-compatible CLI (production).
2. **DryRunBackend** — logs the commands a run would issue.
3. **Custom backends** — any object satisfying ``ImageBackend``.
"""

from distroforge.backends.base import ImageBackend
from distroforge.backends.dry_run import DryRunBackend
from distroforge.backends.engine import EngineCLIBackend

__all__ = ["ImageBackend", "EngineCLIBackend", "DryRunBackend"]
