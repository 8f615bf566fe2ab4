"""
State query cache — installed and available package maps for one cycle.

Each map costs one choco invocation, so both are computed lazily on
first access and then reused for every lookup in the same cycle.
The cache is owned by a single ``ReconciliationCycle`` and dies with
it; nothing is shared between cycles.
"""

from __future__ import annotations

import logging

from chocosync.adapters.base import DEFAULT_TIMEOUT, CommandRunner
from chocosync.core.engine.commands import build_command
from chocosync.core.engine.parser import parse_list_output
from chocosync.core.models.package import NameVersionMap

logger = logging.getLogger(__name__)

INSTALLED_QUERY = ("list", "-l", "-r")
AVAILABLE_QUERY = ("list", "-r")


class StateQueryCache:
    """Memoised installed/available lookups.

    Failures of the underlying command propagate as ``ExecutionError``
    and leave the slot empty; there is no fallback.
    """

    def __init__(
        self,
        runner: CommandRunner,
        tool_path: str,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self._runner = runner
        self._tool_path = tool_path
        self._timeout = timeout
        self._installed: NameVersionMap | None = None
        self._available: NameVersionMap | None = None
        self._queries_issued = 0

    @property
    def queries_issued(self) -> int:
        """How many list commands this cache has run."""
        return self._queries_issued

    def installed(self) -> NameVersionMap:
        """Packages installed on this machine."""
        if self._installed is None:
            self._installed = self._query(INSTALLED_QUERY)
        return self._installed

    def available(self) -> NameVersionMap:
        """Best versions obtainable from the configured feeds."""
        if self._available is None:
            self._available = self._query(AVAILABLE_QUERY)
        return self._available

    def _query(self, args: tuple[str, ...]) -> NameVersionMap:
        command = build_command(self._tool_path, *args)
        self._queries_issued += 1
        result = self._runner.run_checked(command, timeout=self._timeout)
        packages = parse_list_output(result.stdout)
        logger.debug("%s → %d packages", command, len(packages))
        return packages
