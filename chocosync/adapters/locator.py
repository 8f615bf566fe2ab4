"""
Tool locator — find the choco executable.

Resolution order:
    explicit override  >  $ChocolateyInstall/bin/choco.exe  >  choco on PATH
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping

from chocosync.core.errors import ToolNotFoundError

logger = logging.getLogger(__name__)

CHOCO_INSTALL_ENV = "ChocolateyInstall"


def locate_choco(
    override: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the full path of the choco executable.

    Args:
        override: Explicit path (from config or CLI); returned as-is.
        environ: Environment to consult (default: ``os.environ``).

    Raises:
        ToolNotFoundError: If no location resolves.
    """
    if override:
        return override

    env = os.environ if environ is None else environ
    install_dir = (env.get(CHOCO_INSTALL_ENV) or "").strip()
    if install_dir:
        path = os.path.join(install_dir, "bin", "choco.exe")
        logger.debug("choco resolved from %s: %s", CHOCO_INSTALL_ENV, path)
        return path

    found = shutil.which("choco")
    if found:
        logger.debug("choco resolved from PATH: %s", found)
        return found

    raise ToolNotFoundError(
        f"Cannot locate choco: set {CHOCO_INSTALL_ENV}, put choco on PATH, "
        "or configure choco_path"
    )
