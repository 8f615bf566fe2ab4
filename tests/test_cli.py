"""
Tests for CLI commands — actions, status, apply, and global options.
"""

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from chocosync.adapters.locator import CHOCO_INSTALL_ENV
from chocosync.core.config.loader import TIMEOUT_ENV
from chocosync.main import cli


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    """Run every CLI test from an empty directory with no choco env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CHOCO_INSTALL_ENV, raising=False)
    monkeypatch.delenv(TIMEOUT_ENV, raising=False)


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Chocolatey" in result.output
        assert "uninstall" not in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestActionCommands:
    def test_install_dry_run(self):
        result = CliRunner().invoke(
            cli,
            ["install", "git", "vim", "--pin", "git=2.6.2", "--mock", "--dry-run", "--json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        commands = [r["command"] for r in data["report"]["receipts"]]
        assert commands == [
            "choco.exe install -y -version 2.6.2 git",
            "choco.exe install -y vim",
        ]

    def test_install_with_options(self):
        result = CliRunner().invoke(
            cli,
            ["install", "git", "--options=--no-progress", "--mock", "--force", "--json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["report"]["receipts"][0]["command"] == "choco.exe install -y --no-progress git"

    def test_upgrade_with_pin_fails(self):
        result = CliRunner().invoke(cli, ["upgrade", "git", "--pin", "git=2.6.2", "--mock"])
        assert result.exit_code == 1
        assert "version pins" in result.output

    def test_source_fails(self):
        result = CliRunner().invoke(cli, ["install", "git", "--source", "internal", "--mock"])
        assert result.exit_code == 1
        assert "source" in result.output

    def test_remove_force(self):
        result = CliRunner().invoke(cli, ["remove", "git", "vim", "--force", "--mock", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [r["command"] for r in data["report"]["receipts"]] == [
            "choco.exe uninstall -y git vim"
        ]

    def test_uninstall_alias_still_works(self):
        result = CliRunner().invoke(cli, ["uninstall", "git", "--force", "--mock", "--json"])
        assert result.exit_code == 0, result.output
        assert "choco.exe uninstall -y git" in result.output

    def test_pin_for_unrequested_package(self):
        result = CliRunner().invoke(cli, ["install", "git", "--pin", "vim=8.0", "--mock"])
        assert result.exit_code == 2
        assert "not requested" in result.output

    def test_malformed_pin(self):
        result = CliRunner().invoke(cli, ["install", "git", "--pin", "git", "--mock"])
        assert result.exit_code == 2

    def test_missing_names(self):
        result = CliRunner().invoke(cli, ["install", "--mock"])
        assert result.exit_code == 2

    def test_human_output(self):
        result = CliRunner().invoke(cli, ["install", "git", "--force", "--mock"])
        assert result.exit_code == 0, result.output
        assert "✓ choco.exe install -y git" in result.output


class TestStatusCommand:
    def test_status_json(self):
        result = CliRunner().invoke(cli, ["status", "git", "--mock", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["state"]["packages"] == [{"name": "git", "current": None, "candidate": None}]

    def test_status_human(self):
        result = CliRunner().invoke(cli, ["status", "git", "--mock"])
        assert result.exit_code == 0
        assert "git" in result.output


class TestApplyCommand:
    def _write_config(self, tmp_path: Path) -> Path:
        config = tmp_path / "chocosync.yml"
        config.write_text(textwrap.dedent("""\
            choco_path: choco.exe
            packages:
              - name: git
                version: "2.6.2"
              - name: [vim, curl]
        """))
        return config

    def test_apply_dry_run(self, tmp_path: Path):
        config = self._write_config(tmp_path)
        result = CliRunner().invoke(
            cli, ["--config", str(config), "apply", "--mock", "--dry-run", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["ok"] is True
        commands = [
            r["command"] for res in data["results"] for r in res["report"]["receipts"]
        ]
        assert commands == [
            "choco.exe install -y -version 2.6.2 git",
            "choco.exe install -y vim curl",
        ]

    def test_apply_without_config(self):
        result = CliRunner().invoke(cli, ["apply", "--mock"])
        assert result.exit_code == 1
        assert "No chocosync.yml" in result.output

    def test_apply_human(self, tmp_path: Path):
        config = self._write_config(tmp_path)
        result = CliRunner().invoke(cli, ["--config", str(config), "apply", "--mock"])
        assert result.exit_code == 0, result.output
        assert "vim, curl" in result.output
