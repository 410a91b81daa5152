"""Local git command execution.

``GitRunner`` runs git in the checked-out repository and returns a result
dict with ``exit_code``, ``stdout``, ``stderr``, ``duration_ms`` and
``timed_out`` fields.  Output is redacted before it leaves the runner.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Iterable, Sequence

from ..constants import COMMAND_TIMEOUT_S
from ..errors import GitOperationError
from ..redaction import redact_secrets

logger = logging.getLogger(__name__)


class GitRunner:
    """Run git commands in ``cwd``.

    ``secrets`` are scrubbed from stdout and stderr so that tokens embedded
    in remote URLs never reach logs or error messages.
    """

    def __init__(
        self,
        cwd: str = ".",
        secrets: Iterable[str | None] = (),
        timeout_s: int = COMMAND_TIMEOUT_S,
    ) -> None:
        self.cwd = cwd
        self.secrets = [s for s in secrets if s]
        self.timeout_s = timeout_s

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        # Never block on a credential prompt
        env["GIT_TERMINAL_PROMPT"] = "0"
        return env

    def run(self, argv: Sequence[str]) -> dict[str, object]:
        """Run ``git <argv>`` and return the result without raising."""
        command = ["git", *argv]
        timed_out = False
        start_ns = time.time_ns()

        try:
            proc = subprocess.run(
                command,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                shell=False,
                timeout=self.timeout_s,
                text=True,
                env=self._env(),
            )
            stdout = proc.stdout or ""
            stderr = proc.stderr or ""
            exit_code = proc.returncode
        except subprocess.TimeoutExpired:
            timed_out = True
            stdout = ""
            stderr = "Command timed out"
            exit_code = 124
        except OSError as exc:
            stdout = ""
            stderr = str(exc)
            exit_code = 127

        duration_ms = int((time.time_ns() - start_ns) / 1_000_000)
        stdout = redact_secrets(stdout, self.secrets)
        stderr = redact_secrets(stderr, self.secrets)
        logger.debug("git %s -> %s (%d ms)", " ".join(argv), exit_code, duration_ms)

        return {
            "exit_code": exit_code,
            "stdout": stdout,
            "stderr": stderr,
            "duration_ms": duration_ms,
            "timed_out": timed_out,
        }

    def check(self, argv: Sequence[str]) -> str:
        """Run ``git <argv>`` and return stdout.

        :raises GitOperationError: if the command exits non-zero or times out
        """
        result = self.run(argv)
        if result["exit_code"] != 0:
            detail = (str(result["stderr"]) or str(result["stdout"])).strip()
            raise GitOperationError(
                f"git {' '.join(argv)} failed with exit code {result['exit_code']}: {detail}"
            )
        return str(result["stdout"])
