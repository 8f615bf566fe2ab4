"""Reconciliation engine — parse, cache, resolve, plan, execute.

Public re-exports for convenient access.
"""

from chocosync.core.engine.parser import parse_list_output
from chocosync.core.engine.planner import CommandBatch, execute_batch, plan_batch
from chocosync.core.engine.reconciler import CycleReport, PackageState, ReconciliationCycle
from chocosync.core.engine.resolver import resolve_candidate, resolve_current, resolve_versions
from chocosync.core.engine.state import StateQueryCache

__all__ = [
    "CommandBatch",
    "CycleReport",
    "PackageState",
    "ReconciliationCycle",
    "StateQueryCache",
    "execute_batch",
    "parse_list_output",
    "plan_batch",
    "resolve_candidate",
    "resolve_current",
    "resolve_versions",
]
