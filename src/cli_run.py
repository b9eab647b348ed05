"""CLI entry point for the nvs run mode.

Resolves the requested (or project) version, installs it when missing, and
runs node/npm/npx/corepack from it with inherited stdio. The runtime's exit
code becomes the process exit code unchanged.
"""

from __future__ import annotations

import logging
import os
from typing import Any, List

from runtime.dispatch import run_runtime
from runtime.service import VersionManager

logger = logging.getLogger(__name__)


def runtime_args(args: Any) -> List[str]:
    """Arguments for the runtime, without a leading '--' separator."""
    extra = list(getattr(args, "RUN_ARGS", None) or [])
    if extra and extra[0] == "--":
        extra = extra[1:]
    return extra


def _quiet_logging(args: Any) -> None:
    """Keep nvs output out of the runtime's stderr unless asked for."""
    if getattr(args, "DEBUG", False) or getattr(args, "LOG_LEVEL", None) or os.environ.get("NVS_LOG_LEVEL"):
        return
    level = logging.INFO if getattr(args, "VERBOSE", False) else logging.WARNING
    logging.getLogger().setLevel(level)


def run_command(args: Any, manager: Any = None) -> int:
    """Entry point for the run mode.

    Args:
        args: Parsed CLI arguments namespace.
        manager: Optional VersionManager; one is built for the configured home.

    Returns:
        The exit code of the dispatched runtime.
    """
    _quiet_logging(args)
    manager = manager or VersionManager()
    version_name = manager.resolve(args.RUN_VERSION)
    logger.debug("use %s", version_name)
    return run_runtime(manager.version_path(version_name), args.RUN_COMMAND, runtime_args(args))
