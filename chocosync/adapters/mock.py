"""
Mock runner — test double for every command the engine issues.

Used by tests and by the CLI's ``--mock`` mode to simulate choco
without touching the machine.  Responses are keyed by the exact
command line.
"""

from __future__ import annotations

from chocosync.adapters.base import DEFAULT_TIMEOUT, CommandOutput, CommandRunner


class MockRunner(CommandRunner):
    """Universal mock runner for testing.

    By default, every command succeeds with ``default_output``.
    """

    def __init__(
        self,
        runner_name: str = "mock",
        available: bool = True,
        default_output: str = "",
    ):
        self._name = runner_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, CommandOutput] = {}
        self._call_log: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[str]:
        """Every command line this mock has received, in order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_response(self, command: str, stdout: str = "", return_code: int = 0) -> None:
        """Set the canned output for an exact command line."""
        self._responses[command] = CommandOutput(
            command=command,
            stdout=stdout,
            return_code=return_code,
        )

    def set_failure(self, command: str, error: str = "Mock failure", return_code: int = 1) -> None:
        """Configure a specific command to exit non-zero."""
        self._responses[command] = CommandOutput(
            command=command,
            stderr=error,
            return_code=return_code,
        )

    def run(self, command: str, timeout: int = DEFAULT_TIMEOUT) -> CommandOutput:
        self._call_log.append(command)

        if command in self._responses:
            return self._responses[command]

        return CommandOutput(command=command, stdout=self._default_output)

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
