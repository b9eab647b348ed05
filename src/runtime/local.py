"""Lookup of installed runtime versions."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from errors import LocalVersionNotFoundError, NoMatchError
from versioning.matcher import filter_candidates, pick_best
from versioning.models import Constraint
from .home import versions_dir

logger = logging.getLogger(__name__)


def list_local_versions(directory: Optional[Path] = None) -> List[str]:
    """Return the entry names of the versions directory, sorted by name."""
    return sorted(os.listdir(directory or versions_dir()))


def find_local_version(constraint: Constraint, directory: Optional[Path] = None) -> str:
    """Return the best installed version directory name for ``constraint``.

    Args:
        constraint: Parsed specifier.
        directory: Versions directory; defaults to ``<home>/versions``.

    Raises:
        LocalVersionNotFoundError: If nothing installed matches.
        OSError: If the directory cannot be listed.
    """
    candidates = filter_candidates(list_local_versions(directory), constraint)
    try:
        best = pick_best(candidates, str(constraint))
    except NoMatchError:
        raise LocalVersionNotFoundError(str(constraint)) from None
    logger.debug("use %s", best.name)
    return best.name
