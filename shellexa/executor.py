"""Subshell execution of confirmed commands.

Commands run through the platform shell with the operator's own
privileges and environment.  Standard output and standard error are
merged into one text blob so that, on failure, everything the command
printed can be handed back to the model.  No timeout is applied and the
command is not sandboxed.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from typing import Optional

LOGGER = logging.getLogger(__name__)


@dataclass
class ExecutionOutcome:
    """Result of running one command."""

    command: str
    output: str
    success: bool
    returncode: Optional[int] = None
    duration_seconds: float = 0.0


class ShellExecutor:
    """Run commands in a subshell and capture combined output.

    :param shell: Optional path of the shell executable.  When omitted the
      platform default is used (``/bin/sh`` on POSIX, ``cmd.exe`` on
      Windows).
    """

    def __init__(self, shell: Optional[str] = None) -> None:
        self.shell = shell

    def run(self, command: str) -> ExecutionOutcome:
        LOGGER.info("command_request", extra={"command": command, "shell": self.shell})
        started = time.monotonic()
        try:
            proc = subprocess.run(
                command,
                shell=True,
                executable=self.shell,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as exc:
            outcome = ExecutionOutcome(
                command=command,
                output=str(exc),
                success=False,
                duration_seconds=time.monotonic() - started,
            )
        else:
            outcome = ExecutionOutcome(
                command=command,
                output=proc.stdout or "",
                success=proc.returncode == 0,
                returncode=proc.returncode,
                duration_seconds=time.monotonic() - started,
            )
        LOGGER.info(
            "command_result",
            extra={
                "returncode": outcome.returncode,
                "success": outcome.success,
                "output_length": len(outcome.output),
                "duration_seconds": round(outcome.duration_seconds, 4),
            },
        )
        return outcome
