"""Adapters — bindings to the shell and the choco executable.

Public re-exports for convenient access.
"""

from chocosync.adapters.base import DEFAULT_TIMEOUT, CommandOutput, CommandRunner
from chocosync.adapters.locator import locate_choco
from chocosync.adapters.mock import MockRunner
from chocosync.adapters.shell.command import ShellCommandRunner

__all__ = [
    "DEFAULT_TIMEOUT",
    "CommandOutput",
    "CommandRunner",
    "MockRunner",
    "ShellCommandRunner",
    "locate_choco",
]
