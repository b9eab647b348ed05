"""Execution of runtime binaries from an installed version."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from constants import Constants, RuntimeCommands
from errors import NvsError

logger = logging.getLogger(__name__)


def build_command(version_path: Path, command: str, args: Optional[Sequence[str]] = None) -> List[str]:
    """Build the argv that runs ``command`` from ``version_path``.

    npm, npx and corepack are scripts, so they run through the version's own
    node binary.
    """
    if command not in Constants.SUPPORTED_COMMANDS:
        raise NvsError(
            f"unsupported command {command!r}; expected one of {', '.join(Constants.SUPPORTED_COMMANDS)}"
        )
    bin_path = version_path / Constants.BIN_DIR
    argv = [str(bin_path / RuntimeCommands.NODE.value)]
    if command != RuntimeCommands.NODE.value:
        argv.append(str(bin_path / command))
    argv.extend(args or [])
    return argv


def run_runtime(version_path: Path, command: str, args: Optional[Sequence[str]] = None) -> int:
    """Run ``command`` with inherited stdio and return its exit code."""
    argv = build_command(version_path, command, args)
    logger.debug("Running: %s", " ".join(argv))
    result = subprocess.run(argv, check=False)  # noqa: S603
    return result.returncode
