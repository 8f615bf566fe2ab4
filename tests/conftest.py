"""
Shared test fixtures and configuration.
"""

import logging

import pytest

from chocosync.adapters.mock import MockRunner

CHOCO_EXE = r"C:\ProgramData\chocolatey\bin\choco.exe"

LOCAL_LIST_STDOUT = """\
chocolatey|0.9.9.11
ConEmu|15.10.25.0
"""

REMOTE_LIST_STDOUT = """\
chocolatey|0.9.9.11
ConEmu|15.10.25.1
git|2.6.2
"""


@pytest.fixture
def choco_exe() -> str:
    """Path used for the choco executable in command texts."""
    return CHOCO_EXE


@pytest.fixture
def mock_runner() -> MockRunner:
    """A mock runner primed with installed/available list output."""
    runner = MockRunner()
    runner.set_response(f"{CHOCO_EXE} list -l -r", stdout=LOCAL_LIST_STDOUT)
    runner.set_response(f"{CHOCO_EXE} list -r", stdout=REMOTE_LIST_STDOUT)
    return runner


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """CLI tests call setup_logging, which replaces root handlers."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
