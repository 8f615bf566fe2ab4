"""
Reconciliation cycle — one pass from declared state to converged state.

Flow:
    declaration → validate → (lazy) state queries → resolve versions
                → narrow to targets → plan batch → execute

A ``ReconciliationCycle`` owns its own ``StateQueryCache``; create a
new cycle for every pass.  Cycles share no mutable state, so separate
cycles may run side by side without locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from chocosync.adapters.base import DEFAULT_TIMEOUT, CommandRunner
from chocosync.core.engine.planner import CommandBatch, execute_batch, plan_batch
from chocosync.core.engine.resolver import resolve_candidate, resolve_current
from chocosync.core.engine.state import StateQueryCache
from chocosync.core.errors import PackageConfigurationError
from chocosync.core.models.action import PackageAction, Receipt
from chocosync.core.models.package import (
    PackageDeclaration,
    PackageRequest,
    ResolvedVersions,
)

logger = logging.getLogger(__name__)


@dataclass
class PackageState:
    """Current and candidate versions, aligned with the request's names."""

    names: list[str] = field(default_factory=list)
    current: ResolvedVersions = field(default_factory=list)
    candidate: ResolvedVersions = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "packages": [
                {"name": n, "current": c, "candidate": a}
                for n, c, a in zip(self.names, self.current, self.candidate)
            ],
        }


@dataclass
class CycleReport:
    """What one cycle did."""

    action: str = ""
    requested: list[str] = field(default_factory=list)
    targets: list[str] = field(default_factory=list)
    receipts: list[Receipt] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return any(r.ok for r in self.receipts)

    @property
    def up_to_date(self) -> bool:
        return not self.targets

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "requested": self.requested,
            "targets": self.targets,
            "dry_run": self.dry_run,
            "changed": self.changed,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


class ReconciliationCycle:
    """Scoped context for one reconciliation pass.

    Args:
        request: The normalised package request.
        runner: Command runner used for every choco invocation.
        tool_path: Full path of the choco executable.
        options: Free-form extra options passed to every action command.
        source: Declared package source; choco provider rejects it.
        timeout: Per-invocation timeout in seconds.
    """

    def __init__(
        self,
        request: PackageRequest,
        runner: CommandRunner,
        tool_path: str,
        options: str = "",
        source: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.request = request
        self.runner = runner
        self.tool_path = tool_path
        self.options = options or ""
        self.source = source
        self.timeout = timeout
        self.cache = StateQueryCache(runner, tool_path, timeout=timeout)

    @classmethod
    def from_declaration(
        cls,
        declaration: PackageDeclaration,
        runner: CommandRunner,
        tool_path: str,
        timeout: int = DEFAULT_TIMEOUT,
        default_options: str = "",
    ) -> ReconciliationCycle:
        return cls(
            request=PackageRequest.from_declaration(declaration),
            runner=runner,
            tool_path=tool_path,
            options=declaration.options or default_options,
            source=declaration.source,
            timeout=timeout,
        )

    # ── Requirements ────────────────────────────────────────────

    def validate(self) -> None:
        """Reject declarations choco cannot honour, before any command runs.

        Raises:
            PackageConfigurationError: A source attribute was declared.
        """
        if self.source:
            raise PackageConfigurationError(
                "chocolatey package provider cannot handle source attribute "
                f"(got {self.source!r})"
            )

    # ── Observe ─────────────────────────────────────────────────

    def load_current_state(self) -> PackageState:
        """Resolve installed and candidate versions for every requested name."""
        names = list(self.request.names)
        return PackageState(
            names=names,
            current=resolve_current(names, self.cache),
            candidate=resolve_candidate(names, self.cache),
        )

    def targets_for(self, action: PackageAction) -> PackageRequest | None:
        """Narrow the request to the packages the action would change.

        Returns None when everything is already converged.
        """
        action = PackageAction(action)
        canonical = action.canonical
        names = list(self.request.names)
        current = resolve_current(names, self.cache)

        if canonical is PackageAction.INSTALL:
            wanted = [
                name
                for (name, pin), have in zip(self.request.pairs(), current)
                if have is None or (pin is not None and pin != have)
            ]
        elif canonical is PackageAction.UPGRADE:
            candidate = resolve_candidate(names, self.cache)
            wanted = []
            for name, have, best in zip(names, current, candidate):
                if best is None:
                    logger.warning("No candidate version available for %s", name)
                elif best != have:
                    wanted.append(name)
        else:
            wanted = [name for name, have in zip(names, current) if have is not None]

        return self.request.subset(wanted)

    # ── Act ─────────────────────────────────────────────────────

    def plan(self, action: PackageAction, converge: bool = True) -> CommandBatch | None:
        """Validate and plan, optionally narrowed to targets.

        Pin rejection for upgrade happens before any state query.
        """
        action = PackageAction(action)
        self.validate()
        # Fail fast on the full request, before touching choco
        batch = plan_batch(action, self.request)
        if not converge:
            return batch

        targets = self.targets_for(action)
        if targets is None:
            return None
        if len(targets) == len(self.request):
            return batch
        # Re-plan quietly; the deprecation notice was already emitted
        return plan_batch(action.canonical, targets)

    def run(
        self,
        action: PackageAction,
        converge: bool = True,
        dry_run: bool = False,
    ) -> CycleReport:
        """Plan and execute one action.

        Args:
            action: Requested action.
            converge: If True, skip packages already in the desired state.
            dry_run: If True, plan only; receipts are skipped entries.

        Raises:
            ChocoSyncError: Any configuration, planning or execution failure.
        """
        action = PackageAction(action)
        report = CycleReport(
            action=action.value,
            requested=list(self.request.names),
            dry_run=dry_run,
        )
        logger.info("Reconciling %s: %s", action.value, ", ".join(report.requested))

        batch = self.plan(action, converge=converge)
        if batch is None:
            logger.info("Nothing to do for %s", action.value)
            return report

        report.targets = batch.names

        if dry_run:
            report.receipts = [
                Receipt.skip(
                    command=line,
                    action=batch.action.value,
                    reason=f"[dry-run] Would run {line}",
                    metadata={"dry_run": True},
                )
                for line in batch.command_lines(self.tool_path, self.options)
            ]
            return report

        report.receipts = execute_batch(
            batch,
            self.runner,
            self.tool_path,
            options=self.options,
            timeout=self.timeout,
        )
        return report
