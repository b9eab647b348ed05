"""Discovery of the version requested by the current project."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from constants import Constants
from errors import GlobalVersionNotFoundError, NvsError
from .home import global_version_path

logger = logging.getLogger(__name__)


def read_global_version(path: Optional[Path] = None) -> Optional[str]:
    """Return the global specifier, or None when it is not set."""
    target = path or global_version_path()
    try:
        text = target.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    return text or None


def write_global_version(spec: str, path: Optional[Path] = None) -> Path:
    """Write ``spec`` as the global specifier; ``auto`` cannot be stored."""
    if spec.strip() == Constants.AUTO_VERSION:
        raise NvsError(f"{Constants.AUTO_VERSION!r} cannot be used as the global version")
    target = path or global_version_path()
    target.write_text(spec.strip() + "\n", encoding="utf-8")
    return target


def _engines_node(package_json: Path) -> Optional[str]:
    """Return ``engines.node`` from a package.json, if set."""
    try:
        with open(package_json, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise NvsError(f"cannot parse {package_json}: {exc}") from exc
    engines = data.get("engines") if isinstance(data, dict) else None
    if isinstance(engines, dict):
        node = engines.get("node")
        if isinstance(node, str) and node.strip():
            return node.strip()
    return None


def decide_version(
    start: Optional[Union[str, Path]] = None,
    global_path: Optional[Path] = None,
) -> str:
    """Find the specifier that applies to ``start`` (default: cwd).

    Walks up to the filesystem root. In each directory a ``.node-version``
    file wins, then ``engines.node`` from ``package.json``. Falls back to the
    global version file at ``global_path`` (default: in the configured home).

    Raises:
        GlobalVersionNotFoundError: If nothing specifies a version.
        NvsError: If a package.json cannot be parsed.
    """
    directory = Path(start or Path.cwd()).resolve()
    while True:
        node_version = directory / Constants.NODE_VERSION_FILE
        if node_version.is_file():
            logger.debug("use %s", node_version)
            return node_version.read_text(encoding="utf-8").rstrip("\r\n")
        package_json = directory / Constants.PACKAGE_JSON_FILE
        if package_json.is_file():
            logger.debug("parse %s", package_json)
            spec = _engines_node(package_json)
            if spec:
                return spec
        if directory.parent == directory:
            break
        directory = directory.parent

    spec = read_global_version(global_path)
    if spec == Constants.AUTO_VERSION:
        logger.warning("global version file contains %r; ignoring it", spec)
        spec = None
    if spec is None:
        raise GlobalVersionNotFoundError()
    logger.debug("use global version %s", spec)
    return spec
