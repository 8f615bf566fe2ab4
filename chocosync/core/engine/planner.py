"""
Batch planner & executor — turn a request into as few choco calls as possible.

choco accepts many package names per invocation, but only one
``-version`` pin per invocation.  So:

    install   each pinned pair alone, then every unpinned name at once
    upgrade   every name at once; pins are rejected up front
    remove    every name at once; versions are meaningless to removal

``uninstall`` and ``purge`` forward to ``remove`` (see PackageAction).

Execution is strictly sequential.  The first failing invocation stops
the batch; invocations that already succeeded are NOT rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from chocosync.adapters.base import DEFAULT_TIMEOUT, CommandRunner
from chocosync.core.engine.commands import build_command
from chocosync.core.errors import ExecutionError, UnsupportedOperationError
from chocosync.core.models.action import PackageAction, Receipt
from chocosync.core.models.package import PackageRequest

logger = logging.getLogger(__name__)

# choco sub-command for each canonical action
_SUBCOMMANDS: dict[PackageAction, str] = {
    PackageAction.INSTALL: "install",
    PackageAction.UPGRADE: "upgrade",
    PackageAction.REMOVE: "uninstall",
}


@dataclass
class CommandBatch:
    """The invocations for one action over one request.

    ``pinned`` pairs run one invocation each, in request order.
    ``unpinned`` names run together in a single final invocation,
    skipped entirely when empty.
    """

    action: PackageAction
    pinned: list[tuple[str, str]] = field(default_factory=list)
    unpinned: list[str] = field(default_factory=list)

    @property
    def subcommand(self) -> str:
        return _SUBCOMMANDS[self.action]

    @property
    def total_invocations(self) -> int:
        return len(self.pinned) + (1 if self.unpinned else 0)

    @property
    def names(self) -> list[str]:
        return [n for n, _ in self.pinned] + list(self.unpinned)

    def command_lines(self, tool_path: str, options: str = "") -> list[str]:
        """Exact command texts, in execution order."""
        lines = [
            build_command(tool_path, self.subcommand, "-y", "-version", version, options, name)
            for name, version in self.pinned
        ]
        if self.unpinned:
            lines.append(
                build_command(tool_path, self.subcommand, "-y", options, *self.unpinned)
            )
        return lines


# ═══════════════════════════════════════════════════════════════════
#  Planning
# ═══════════════════════════════════════════════════════════════════


def _plan_install(request: PackageRequest) -> CommandBatch:
    return CommandBatch(
        action=PackageAction.INSTALL,
        pinned=request.pinned(),
        unpinned=request.unpinned(),
    )


def _plan_upgrade(request: PackageRequest) -> CommandBatch:
    if request.has_pins:
        pins = ", ".join(f"{n}={v}" for n, v in request.pinned())
        raise UnsupportedOperationError(
            "choco does not support version pins on upgrade, use install instead "
            f"(pinned: {pins})"
        )
    return CommandBatch(action=PackageAction.UPGRADE, unpinned=list(request.names))


def _plan_remove(request: PackageRequest) -> CommandBatch:
    return CommandBatch(action=PackageAction.REMOVE, unpinned=list(request.names))


_PLANNERS: dict[PackageAction, Callable[[PackageRequest], CommandBatch]] = {
    PackageAction.INSTALL: _plan_install,
    PackageAction.UPGRADE: _plan_upgrade,
    PackageAction.REMOVE: _plan_remove,
}


def plan_batch(action: PackageAction, request: PackageRequest) -> CommandBatch:
    """Partition a request into the invocations for an action.

    Forwarding actions (uninstall, purge) are planned as their target;
    deprecated ones log their notice first.

    Raises:
        UnsupportedOperationError: Upgrade requested with version pins.
    """
    action = PackageAction(action)
    notice = action.deprecation_notice
    if notice:
        logger.warning(notice)

    batch = _PLANNERS[action.canonical](request)
    logger.debug(
        "Planned %s: %d pinned, %d unpinned → %d invocation(s)",
        action.value,
        len(batch.pinned),
        len(batch.unpinned),
        batch.total_invocations,
    )
    return batch


# ═══════════════════════════════════════════════════════════════════
#  Execution
# ═══════════════════════════════════════════════════════════════════


def execute_batch(
    batch: CommandBatch,
    runner: CommandRunner,
    tool_path: str,
    options: str = "",
    timeout: int = DEFAULT_TIMEOUT,
) -> list[Receipt]:
    """Run every invocation of a batch in order.

    Returns:
        One success receipt per invocation.

    Raises:
        ExecutionError: On the first failing invocation.  Its
            ``receipts`` holds everything run so far, failure last.
    """
    receipts: list[Receipt] = []

    for command in batch.command_lines(tool_path, options):
        logger.info("Running: %s", command)
        try:
            result = runner.run_checked(command, timeout=timeout)
        except ExecutionError as e:
            logger.error("Failed: %s", e)
            receipts.append(
                Receipt.failure(
                    command=command,
                    action=batch.action.value,
                    error=str(e),
                    return_code=e.return_code,
                )
            )
            e.receipts = receipts
            raise

        receipts.append(
            Receipt.success(
                command=command,
                action=batch.action.value,
                output=result.stdout.strip(),
                return_code=result.return_code,
                duration_ms=result.duration_ms,
            )
        )

    return receipts
