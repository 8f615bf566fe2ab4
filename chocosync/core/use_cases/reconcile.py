"""
Reconcile use cases — the vertical slice from user intent to choco calls.

These functions never raise for expected failures: every
``ChocoSyncError`` is captured into the result's ``error`` so the CLI
(or any other caller) can render it.  Programming errors still raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from chocosync.adapters.base import CommandRunner
from chocosync.adapters.locator import locate_choco
from chocosync.core.config.loader import Settings
from chocosync.core.engine.reconciler import CycleReport, PackageState, ReconciliationCycle
from chocosync.core.errors import ChocoSyncError, ExecutionError
from chocosync.core.models.action import PackageAction, Receipt
from chocosync.core.models.package import PackageDeclaration

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Result of reconciling one declaration."""

    declaration: PackageDeclaration | None = None
    action: str = ""
    report: CycleReport | None = None
    state: PackageState | None = None
    receipts: list[Receipt] = field(default_factory=list)
    error: str | None = None
    failed_command: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {"action": self.action}
        if self.declaration is not None:
            result["packages"] = self.declaration.names
        if self.error:
            result["error"] = self.error
            if self.failed_command:
                result["failed_command"] = self.failed_command
            if self.receipts:
                result["receipts"] = [r.model_dump(mode="json") for r in self.receipts]
            return result
        if self.state:
            result["state"] = self.state.to_dict()
        if self.report:
            result["report"] = self.report.to_dict()
        return result


@dataclass
class ApplyResult:
    """Result of reconciling every declaration in the config file."""

    results: list[ReconcileResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def changed(self) -> int:
        return sum(1 for r in self.results if r.report and r.report.changed)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "changed": self.changed,
            "results": [r.to_dict() for r in self.results],
        }


def _new_cycle(
    declaration: PackageDeclaration,
    settings: Settings,
    runner: CommandRunner,
) -> ReconciliationCycle:
    tool_path = locate_choco(settings.choco_path)
    return ReconciliationCycle.from_declaration(
        declaration,
        runner=runner,
        tool_path=tool_path,
        timeout=settings.timeout,
        default_options=settings.default_options,
    )


def query_state(
    declaration: PackageDeclaration,
    settings: Settings,
    runner: CommandRunner,
) -> ReconcileResult:
    """Resolve current and candidate versions without changing anything."""
    result = ReconcileResult(declaration=declaration, action="status")
    try:
        cycle = _new_cycle(declaration, settings, runner)
        result.state = cycle.load_current_state()
    except ExecutionError as e:
        result.error = str(e)
        result.failed_command = e.command or None
    except ChocoSyncError as e:
        result.error = str(e)
    return result


def reconcile_packages(
    declaration: PackageDeclaration,
    settings: Settings,
    runner: CommandRunner,
    action: PackageAction | None = None,
    converge: bool = True,
    dry_run: bool = False,
) -> ReconcileResult:
    """Run one reconciliation cycle for a declaration.

    Args:
        declaration: Desired package state.
        settings: Runtime settings (tool path, timeout, default options).
        runner: Command runner (shell or mock).
        action: Action to run; defaults to the declaration's own.
        converge: If True, only touch packages not already converged.
        dry_run: If True, plan but don't execute.

    Returns:
        ReconcileResult with the cycle report or the error.
    """
    action = PackageAction(action or declaration.action)
    result = ReconcileResult(declaration=declaration, action=action.value)

    try:
        cycle = _new_cycle(declaration, settings, runner)
        result.report = cycle.run(action, converge=converge, dry_run=dry_run)
        result.receipts = result.report.receipts
    except ExecutionError as e:
        # No rollback: earlier invocations in the batch stay applied
        result.error = str(e)
        result.failed_command = e.command or None
        result.receipts = list(e.receipts)
    except ChocoSyncError as e:
        result.error = str(e)

    if result.error:
        logger.error("%s %s failed: %s", action.value, declaration.label, result.error)
    return result


def apply_settings(
    settings: Settings,
    runner: CommandRunner,
    dry_run: bool = False,
) -> ApplyResult:
    """Reconcile every declared package, in order, stopping at the first failure."""
    outcome = ApplyResult()
    for declaration in settings.packages:
        result = reconcile_packages(declaration, settings, runner, dry_run=dry_run)
        outcome.results.append(result)
        if not result.ok:
            break
    return outcome
