"""Runs the Mirth Connect CLI and captures its status report."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from typing import List

log = logging.getLogger(__name__)

# The query file is written on every call so its content is always exactly
# these two commands.
QUERY_SCRIPT = "status\nchannel stats\n"
DEFAULT_TIMEOUT_SECONDS = 10.0
MIN_REPORT_LINES = 3


class FetchError(RuntimeError):
    """Raised when the CLI report could not be obtained."""


class MirthCommandFetcher:
    """Invokes ``mccommand -s <query file>`` and returns its output lines."""

    def __init__(
        self,
        command_path: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.command_path = command_path
        self.timeout = timeout

    def fetch(self) -> List[str]:
        log.debug("Fetching status report via %s", self.command_path)
        try:
            query_file = tempfile.NamedTemporaryFile(
                mode="w",
                prefix="mirth_exporter",
                encoding="utf-8",
                delete=False,
            )
        except OSError as e:
            raise FetchError(f"Could not create query file: {e}") from e

        query_path = query_file.name
        try:
            try:
                with query_file:
                    query_file.write(QUERY_SCRIPT)
            except OSError as e:
                raise FetchError(f"Could not write query file: {e}") from e

            log.debug("Using %s as query file", query_path)
            stdout = self._run(query_path)
        finally:
            try:
                os.remove(query_path)
            except OSError as e:
                log.warning("Could not remove query file %s: %s", query_path, e)

        output = stdout.decode("utf-8", errors="replace")
        lines = output.split("\n")
        if len(lines) < MIN_REPORT_LINES:
            raise FetchError(f"Unexpected output: {output}")

        log.debug(output)
        return lines

    def _run(self, query_path: str) -> bytes:
        cmd = [self.command_path, "-s", query_path]
        try:
            result = subprocess.run(
                cmd,
                check=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except subprocess.TimeoutExpired as e:
            raise FetchError(
                f"{self.command_path} timed out after {self.timeout:g}s"
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise FetchError(
                f"{self.command_path} exited with status {e.returncode}: {stderr}"
            ) from e
        except OSError as e:
            raise FetchError(f"Could not run {self.command_path}: {e}") from e
        return result.stdout
