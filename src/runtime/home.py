"""Layout of the nvs home directory and its initialization."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from constants import Constants
from errors import NotInitializedError

logger = logging.getLogger(__name__)

WRAPPER_TEMPLATE = '#!/bin/bash\nnvs run {command} -- "$@"\n'
WRAPPER_MODE = 0o744


def home_dir() -> Path:
    """Configured nvs home (``~/.nvs`` unless overridden)."""
    return Path(Constants.NVS_HOME).expanduser()


def versions_dir(home: Optional[Path] = None) -> Path:
    return (home or home_dir()) / Constants.VERSIONS_DIR


def bin_dir(home: Optional[Path] = None) -> Path:
    return (home or home_dir()) / Constants.BIN_DIR


def global_version_path(home: Optional[Path] = None) -> Path:
    return (home or home_dir()) / Constants.GLOBAL_VERSION_FILE


def check_init() -> Path:
    """Return the home directory, or raise if ``nvs init`` never ran."""
    home = home_dir()
    if not home.is_dir():
        raise NotInitializedError(str(home))
    return home


def write_wrapper(home: Path, command: str) -> Path:
    """Write the shell shim that forwards ``command`` to ``nvs run``."""
    path = bin_dir(home) / command
    path.write_text(WRAPPER_TEMPLATE.format(command=command), encoding="utf-8")
    os.chmod(path, WRAPPER_MODE)
    return path


def initialize() -> Path:
    """Create the home layout and wrapper scripts. Safe to run repeatedly."""
    home = home_dir()
    for directory in (home, bin_dir(home), versions_dir(home)):
        directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    for command in Constants.SUPPORTED_COMMANDS:
        write_wrapper(home, command)
        logger.debug("Wrote wrapper script for %s", command)
    return home
