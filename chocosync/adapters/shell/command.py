"""
Shell command runner — execute commands and capture their output.

This is the only place chocosync spawns processes.  Commands run
without a shell, one at a time, blocking until each finishes.

On Windows the command line goes to CreateProcess untouched, so
free-form choco options keep their quoting exactly.  Elsewhere it is
split with POSIX shlex rules.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time

from chocosync.adapters.base import DEFAULT_TIMEOUT, CommandOutput, CommandRunner
from chocosync.core.errors import ExecutionError, ToolNotFoundError

logger = logging.getLogger(__name__)

_WINDOWS = os.name == "nt"


def command_args(command: str, windows: bool | None = None) -> str | list[str]:
    """Turn a command line into what ``subprocess.run`` should receive."""
    if _WINDOWS if windows is None else windows:
        return command
    return shlex.split(command)


class ShellCommandRunner(CommandRunner):
    """Run commands through ``subprocess.run`` and capture output.

    Args:
        cwd: Working directory for every command (default: current).
    """

    def __init__(self, cwd: str | None = None):
        self._cwd = cwd

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return True

    def run(self, command: str, timeout: int = DEFAULT_TIMEOUT) -> CommandOutput:
        args = command_args(command)

        logger.debug("Executing: %s (timeout=%ss)", command, timeout)
        start = time.monotonic()

        try:
            result = subprocess.run(
                args,
                cwd=self._cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(
                f"Executable not found: {command}",
                command=command,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                f"Command timed out after {timeout}s",
                command=command,
            ) from e
        except OSError as e:
            raise ExecutionError(
                f"Command execution error: {e}",
                command=command,
            ) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Exit %d in %dms: %s", result.returncode, elapsed_ms, command)

        return CommandOutput(
            command=command,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
            duration_ms=elapsed_ms,
        )
