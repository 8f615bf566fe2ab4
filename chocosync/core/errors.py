"""
Error taxonomy for the reconciliation core.

Every fatal condition raised by the engine is a ``ChocoSyncError``.
Lookup misses (a package absent from a listing) are never errors:
they resolve to ``None``.

No retries happen anywhere in the core.  A caller that wants retry
semantics wraps the command runner, not the engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chocosync.core.models.action import Receipt


class ChocoSyncError(Exception):
    """Base class for all reconciliation errors."""


class RequestError(ChocoSyncError):
    """Raised when a package declaration cannot form a valid request."""


class PackageConfigurationError(ChocoSyncError):
    """Raised before execution when the declaration uses an attribute choco cannot honour."""


class UnsupportedOperationError(ChocoSyncError):
    """Raised before execution when an action forbids part of the request."""


class ExecutionError(ChocoSyncError):
    """Raised when an external invocation fails.

    Carries the attempted command line and exit detail so the failure
    can be diagnosed without re-running.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        return_code: int | None = None,
        output: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.return_code = return_code
        self.output = output
        # Receipts of the batch up to and including the failure, set by the executor
        self.receipts: list[Receipt] = []

    def __str__(self) -> str:
        base = super().__str__()
        if self.command:
            base = f"{base} (command: {self.command})"
        return base


class ToolNotFoundError(ExecutionError):
    """Raised when the choco executable cannot be located or launched."""
