"""CLI entry point for listing local and remote versions."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

import semantic_version

from errors import GlobalVersionNotFoundError
from registry.nodejs import list_remote_versions
from runtime.local import list_local_versions
from runtime.project import decide_version, read_global_version
from runtime.service import VersionManager

logger = logging.getLogger(__name__)

LEGEND = "-global +current *both"


def _sort_key(name: str):
    """Semantic order for version names; anything else sorts last by name."""
    try:
        return 0, semantic_version.Version(name.lstrip("v"))
    except ValueError:
        return 1, name


def sort_versions(names: Iterable[str]) -> List[str]:
    return sorted(names, key=_sort_key)


def format_local_versions(names: Iterable[str], global_name: Optional[str], current_name: Optional[str]) -> str:
    """Render installed versions with global/current markers."""
    lines = []
    for name in sort_versions(names):
        if name == global_name and name == current_name:
            marker = "*"
        elif name == global_name:
            marker = "-"
        elif name == current_name:
            marker = "+"
        else:
            marker = " "
        lines.append(f"{marker} {name}")
    lines.append("")
    lines.append(LEGEND)
    return "\n".join(lines) + "\n"


def _current_spec(manager: VersionManager) -> Optional[str]:
    try:
        return decide_version(global_path=manager.global_file)
    except GlobalVersionNotFoundError:
        logger.debug("current version is not found")
        return None


def local_versions_text(manager: VersionManager) -> str:
    """Resolve the global and current versions and render the local list."""
    current_spec = _current_spec(manager)
    current_name = manager.resolve(current_spec) if current_spec else None

    global_spec = read_global_version(manager.global_file)
    if global_spec is None:
        logger.debug("global version is not found")
    global_name = manager.resolve(global_spec) if global_spec else None

    return format_local_versions(list_local_versions(manager.versions_dir), global_name, current_name)


def remote_versions_text(manager: VersionManager) -> str:
    names = list_remote_versions(manager.mirror, session=manager.session)
    return "".join(f"{name}\n" for name in sort_versions(names))


def list_versions(args: Any, manager: Any = None) -> str:
    """Entry point for the versions action; returns the text to print."""
    manager = manager or VersionManager()
    if getattr(args, "REMOTE", False):
        return remote_versions_text(manager)
    return local_versions_text(manager)
