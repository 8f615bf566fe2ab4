"""
Runner base — the protocol contract between engine and the shell.

The engine never spawns processes itself.  It talks to a
``CommandRunner``, which turns a command line into captured output.
Swapping the runner (real shell vs. mock) is how tests and dry
tooling avoid touching the machine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from chocosync.core.errors import ExecutionError

# Seconds per invocation; large package installs are slow
DEFAULT_TIMEOUT = 900


@dataclass
class CommandOutput:
    """Captured result of one command."""

    command: str
    stdout: str = ""
    stderr: str = ""
    return_code: int = 0
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.return_code == 0


class CommandRunner(ABC):
    """Abstract base class for command runners.

    To create a new runner:
        1. Subclass CommandRunner
        2. Implement name, is_available, run
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this runner can execute commands.  Never raises."""

    @abstractmethod
    def run(self, command: str, timeout: int = DEFAULT_TIMEOUT) -> CommandOutput:
        """Run a command and capture its output.

        A non-zero exit is NOT an error here — it is reported in
        ``return_code``.  Only a failure to run at all (missing
        executable, timeout) raises ``ExecutionError``.
        """

    def run_checked(self, command: str, timeout: int = DEFAULT_TIMEOUT) -> CommandOutput:
        """Run a command and raise if it exits non-zero.

        Raises:
            ExecutionError: With the command, exit code and output attached.
        """
        result = self.run(command, timeout=timeout)
        if not result.ok:
            detail = result.stderr.strip() or result.stdout.strip()
            raise ExecutionError(
                f"Command exited with code {result.return_code}"
                + (f": {detail}" if detail else ""),
                command=command,
                return_code=result.return_code,
                output=result.stdout,
            )
        return result

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
