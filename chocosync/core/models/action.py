"""
Package actions and Receipt models — the execution contract.

``PackageAction`` is the closed set of things a declaration can ask for.
Some variants forward to another variant's behaviour: ``uninstall`` is
the legacy spelling of ``remove`` (plus a deprecation notice) and
``purge`` is ``remove`` because choco draws no distinction.

Receipts represent the result of one external invocation.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class PackageAction(str, Enum):
    """Requested package action."""

    INSTALL = "install"
    UPGRADE = "upgrade"
    REMOVE = "remove"
    UNINSTALL = "uninstall"
    PURGE = "purge"

    @property
    def canonical(self) -> PackageAction:
        """The variant whose behaviour this action runs."""
        return _FORWARDS.get(self, self)

    @property
    def deprecation_notice(self) -> str | None:
        """Notice to emit before running, if this variant is deprecated."""
        return _DEPRECATIONS.get(self)

    @classmethod
    def first_class(cls) -> list[PackageAction]:
        """Actions offered to users (legacy aliases excluded)."""
        return [a for a in cls if a not in _DEPRECATIONS]


_FORWARDS: dict[PackageAction, PackageAction] = {
    PackageAction.UNINSTALL: PackageAction.REMOVE,
    PackageAction.PURGE: PackageAction.REMOVE,
}

_DEPRECATIONS: dict[PackageAction, str] = {
    PackageAction.UNINSTALL: (
        "The use of action 'uninstall' on chocolatey packages is deprecated, "
        "please use 'remove'"
    ),
}


class Receipt(BaseModel):
    """Result of one external invocation.

    Success receipts carry the tool's stdout.  Dry runs produce
    skipped receipts listing the command that would have run.
    """

    command: str
    action: str = ""
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    return_code: int | None = None
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the invocation succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the invocation failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        command: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(command=command, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        command: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(command=command, status="failed", error=error, **kwargs)

    @classmethod
    def skip(
        cls,
        command: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(command=command, status="skipped", output=reason, **kwargs)
