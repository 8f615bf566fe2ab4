"""
Tests for batch planning and execution — command texts, order, failures.
"""

import logging

import pytest

from chocosync.adapters.mock import MockRunner
from chocosync.core.engine.commands import build_command
from chocosync.core.engine.planner import CommandBatch, execute_batch, plan_batch
from chocosync.core.errors import ExecutionError, UnsupportedOperationError
from chocosync.core.models.action import PackageAction
from chocosync.core.models.package import PackageRequest

TOOL = "choco.exe"


def _lines(action, request, options=""):
    return plan_batch(action, request).command_lines(TOOL, options)


# ── Command text ────────────────────────────────────────────────────


class TestBuildCommand:
    def test_joins_with_single_spaces(self):
        assert build_command("choco.exe", "install", "-y", "git") == "choco.exe install -y git"

    def test_drops_empty_parts(self):
        assert build_command("choco.exe", "install", "-y", "", "git") == "choco.exe install -y git"

    def test_keeps_multiword_options(self):
        cmd = build_command("choco.exe", "upgrade", "-y", "--pre --force", "git")
        assert cmd == "choco.exe upgrade -y --pre --force git"

    def test_quotes_tool_path_with_spaces(self):
        cmd = build_command(r"C:\Program Files\choco\choco.exe", "list", "-l", "-r")
        assert cmd == r'"C:\Program Files\choco\choco.exe" list -l -r'

    def test_already_quoted_tool_path_untouched(self):
        cmd = build_command('"C:\\tools dir\\choco.exe"', "list", "-r")
        assert cmd == '"C:\\tools dir\\choco.exe" list -r'

    def test_quoted_options_pass_verbatim(self):
        cmd = build_command("choco.exe", "install", "-y", '--params "/InstallDir:C:\\x y"', "git")
        assert cmd == 'choco.exe install -y --params "/InstallDir:C:\\x y" git'


# ── Install ─────────────────────────────────────────────────────────


class TestInstallPlan:
    def test_pinned_then_unpinned(self):
        request = PackageRequest.from_pairs([("git", "2.6.2"), ("vim", None)])
        assert _lines("install", request, "--opts") == [
            "choco.exe install -y -version 2.6.2 --opts git",
            "choco.exe install -y --opts vim",
        ]

    def test_unpinned_names_batched(self):
        request = PackageRequest.from_pairs([("git", None), ("vim", None), ("7zip", None)])
        assert _lines("install", request) == ["choco.exe install -y git vim 7zip"]

    def test_each_pin_runs_alone_in_request_order(self):
        request = PackageRequest.from_pairs(
            [("vim", "8.0"), ("curl", None), ("git", "2.6.2")]
        )
        assert _lines("install", request) == [
            "choco.exe install -y -version 8.0 vim",
            "choco.exe install -y -version 2.6.2 git",
            "choco.exe install -y curl",
        ]

    def test_no_unpinned_means_no_batched_call(self):
        request = PackageRequest.from_pairs([("git", "2.6.2")])
        batch = plan_batch("install", request)
        assert batch.unpinned == []
        assert batch.total_invocations == 1
        assert batch.command_lines(TOOL) == ["choco.exe install -y -version 2.6.2 git"]

    def test_every_name_in_exactly_one_partition(self):
        request = PackageRequest.from_pairs(
            [("a", "1"), ("b", None), ("c", "3"), ("d", None)]
        )
        batch = plan_batch("install", request)
        assert sorted(batch.names) == ["a", "b", "c", "d"]
        assert len(batch.names) == len(set(batch.names))


# ── Upgrade ─────────────────────────────────────────────────────────


class TestUpgradePlan:
    def test_batched(self):
        request = PackageRequest.from_pairs([("git", None), ("vim", None)])
        assert _lines("upgrade", request, "--pre") == ["choco.exe upgrade -y --pre git vim"]

    def test_pin_rejected(self):
        request = PackageRequest.from_pairs([("git", None), ("vim", "8.0")])
        with pytest.raises(UnsupportedOperationError) as exc_info:
            plan_batch("upgrade", request)
        assert "vim=8.0" in str(exc_info.value)

    def test_pin_rejected_before_any_command(self):
        runner = MockRunner()
        request = PackageRequest.single("git", "2.6.2")
        with pytest.raises(UnsupportedOperationError):
            batch = plan_batch(PackageAction.UPGRADE, request)
            execute_batch(batch, runner, TOOL)
        assert runner.call_count == 0


# ── Remove family ───────────────────────────────────────────────────


class TestRemovePlan:
    def test_remove_batched(self):
        request = PackageRequest.from_pairs([("git", None), ("vim", None)])
        assert _lines("remove", request, "--opts") == ["choco.exe uninstall -y --opts git vim"]

    def test_remove_ignores_versions(self):
        request = PackageRequest.from_pairs([("git", "2.6.2"), ("vim", None)])
        assert _lines("remove", request) == ["choco.exe uninstall -y git vim"]

    def test_purge_matches_remove(self):
        request = PackageRequest.from_pairs([("git", None), ("vim", "8.0")])
        assert _lines("purge", request) == _lines("remove", request)

    def test_uninstall_matches_remove(self):
        request = PackageRequest.from_pairs([("git", None), ("vim", None)])
        assert _lines("uninstall", request) == _lines("remove", request)

    def test_uninstall_logs_deprecation(self, caplog):
        caplog.set_level(logging.WARNING, logger="chocosync.core.engine.planner")
        plan_batch("uninstall", PackageRequest.single("git"))
        assert any("deprecated" in r.message and r.levelno == logging.WARNING for r in caplog.records)

    def test_remove_logs_no_deprecation(self, caplog):
        caplog.set_level(logging.WARNING, logger="chocosync.core.engine.planner")
        plan_batch("remove", PackageRequest.single("git"))
        assert not any("deprecated" in r.message for r in caplog.records)

    def test_forwarded_actions_plan_as_remove(self):
        for action in ("uninstall", "purge"):
            batch = plan_batch(action, PackageRequest.single("git"))
            assert batch.action is PackageAction.REMOVE


# ── Execution ───────────────────────────────────────────────────────


class TestExecuteBatch:
    def test_error_starts_without_receipts(self):
        assert ExecutionError("boom").receipts == []

    def test_runs_in_order(self):
        runner = MockRunner(default_output="done")
        request = PackageRequest.from_pairs([("git", "2.6.2"), ("vim", None)])
        receipts = execute_batch(plan_batch("install", request), runner, TOOL, options="--opts")
        assert runner.call_log == [
            "choco.exe install -y -version 2.6.2 --opts git",
            "choco.exe install -y --opts vim",
        ]
        assert [r.ok for r in receipts] == [True, True]
        assert receipts[0].output == "done"
        assert receipts[0].action == "install"

    def test_first_failure_aborts_rest(self):
        runner = MockRunner()
        runner.set_failure("choco.exe install -y -version 1 a", error="no such version", return_code=1)
        batch = CommandBatch(
            action=PackageAction.INSTALL,
            pinned=[("a", "1"), ("b", "2")],
            unpinned=["c"],
        )
        with pytest.raises(ExecutionError) as exc_info:
            execute_batch(batch, runner, TOOL)
        assert runner.call_log == ["choco.exe install -y -version 1 a"]
        err = exc_info.value
        assert err.command == "choco.exe install -y -version 1 a"
        assert err.return_code == 1
        assert len(err.receipts) == 1
        assert err.receipts[0].failed

    def test_no_rollback_of_earlier_invocations(self):
        runner = MockRunner()
        runner.set_failure("choco.exe install -y c")
        batch = CommandBatch(action=PackageAction.INSTALL, pinned=[("a", "1")], unpinned=["c"])
        with pytest.raises(ExecutionError) as exc_info:
            execute_batch(batch, runner, TOOL)
        assert runner.call_log == [
            "choco.exe install -y -version 1 a",
            "choco.exe install -y c",
        ]
        assert [r.status for r in exc_info.value.receipts] == ["ok", "failed"]

    def test_remove_single_invocation(self):
        runner = MockRunner()
        request = PackageRequest.from_pairs([("git", None), ("vim", None)])
        execute_batch(plan_batch("remove", request), runner, TOOL, options="--opts")
        assert runner.call_log == ["choco.exe uninstall -y --opts git vim"]
