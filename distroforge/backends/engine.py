"""Container engine backend driven through the engine's command line.

Works with any Docker-compatible CLI (``docker`` by default).  In DEBUG mode
engine output is streamed line by line into the log; otherwise it is
captured and only surfaced when a command fails.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path

from distroforge.core.errors import BackendError

logger = logging.getLogger(__name__)


class EngineCLIBackend:
    """``ImageBackend`` implementation that shells out to the engine binary.

    Parameters
    ----------
    engine:
        Executable name or path, e.g. ``"docker"``.
    timeout:
        Per-command timeout in seconds.  ``None`` means no limit.
    """

    def __init__(self, engine: str = "docker", *, timeout: float | None = None) -> None:
        self.engine = engine
        self.timeout = timeout

    # ------------------------------------------------------------------
    # ImageBackend
    # ------------------------------------------------------------------

    def import_archive(self, archive_path: Path, reference: str) -> None:
        self._run(["import", str(archive_path), reference], f"import {reference}")

    def tag(self, source: str, target: str) -> None:
        self._run(["tag", source, target], f"tag {target}")

    def push(self, reference: str) -> None:
        self._run(["push", reference], f"push {reference}")

    def push_all_tags(self, repository: str) -> None:
        self._run(["push", "--all-tags", repository], f"push {repository}")

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    def _run(self, args: list[str], description: str) -> str:
        """Run one engine command and return its combined output.

        Raises ``BackendError`` on a non-zero exit, a timeout, or when the
        engine binary cannot be started.
        """
        command = [self.engine, *args]
        logger.debug("Running command: %s", " ".join(command))

        if logger.isEnabledFor(logging.DEBUG):
            return self._run_streaming(command, description)

        try:
            proc = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise BackendError(
                f"{description}: timed out after {self.timeout}s", command=command
            ) from exc
        except OSError as exc:
            raise BackendError(f"{description}: cannot run {self.engine}: {exc}", command=command) from exc

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            logger.error("%s failed (exit %d): %s", description, proc.returncode, stderr)
            raise BackendError(
                f"{description}: exit code {proc.returncode}: {stderr}",
                command=command,
                returncode=proc.returncode,
                stderr=stderr,
            )
        return proc.stdout or ""

    def _run_streaming(self, command: list[str], description: str) -> str:
        """Run *command*, logging each output line as it arrives.

        Output is pumped on a reader thread so the timeout is enforced
        while the engine is still writing.
        """
        output_lines: list[str] = []

        def _pump(stream) -> None:
            for line in stream:
                line = line.rstrip()
                if line:
                    logger.debug("[%s] %s", self.engine, line)
                    output_lines.append(line)

        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise BackendError(f"{description}: cannot run {self.engine}: {exc}", command=command) from exc

        with process:
            reader = threading.Thread(
                target=_pump, args=(process.stdout,), name="engine-output", daemon=True
            )
            reader.start()
            try:
                returncode = process.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired as exc:
                process.kill()
                process.wait()
                reader.join(timeout=5)
                raise BackendError(
                    f"{description}: timed out after {self.timeout}s", command=command
                ) from exc
            reader.join()

        output = "\n".join(output_lines)
        if returncode != 0:
            raise BackendError(
                f"{description}: exit code {returncode}",
                command=command,
                returncode=returncode,
                stderr=output,
            )
        return output

    def __repr__(self) -> str:
        return f"<EngineCLIBackend engine={self.engine!r}>"
