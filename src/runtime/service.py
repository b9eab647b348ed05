"""Version resolution service: local lookup with remote download fallback."""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional, Union

from constants import Constants
from errors import LocalVersionNotFoundError
from registry.download import download
from registry.nodejs import archive_name, archive_url, find_remote_version
from versioning.models import Constraint
from versioning.parser import parse_version_spec
from .home import check_init, global_version_path, versions_dir
from .installer import install_archive
from .local import find_local_version
from .project import decide_version

logger = logging.getLogger(__name__)

SpecLike = Union[str, Constraint]


class VersionManager:
    """Resolve, download and install runtime versions under one home."""

    def __init__(
        self,
        home: Optional[Path] = None,
        mirror: Optional[str] = None,
        workers: Optional[int] = None,
        session: Any = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize the manager.

        Args:
            home: nvs home; defaults to the initialized configured home.
            mirror: Distribution index URL override.
            workers: Concurrent range requests per download.
            session: Optional ``requests.Session``-like object for all HTTP.
            cancel_event: Shared cancellation flag for downloads.
        """
        self.home = Path(home) if home is not None else check_init()
        self.mirror = mirror or Constants.MIRROR_URL
        self.workers = workers
        self.session = session
        self.cancel_event = cancel_event or threading.Event()

    @property
    def versions_dir(self) -> Path:
        return versions_dir(self.home)

    @property
    def global_file(self) -> Path:
        return global_version_path(self.home)

    def version_path(self, name: str) -> Path:
        return self.versions_dir / name

    def spec_for(self, spec: str) -> str:
        """Return ``spec``, or the project or global specifier for ``auto``."""
        if spec.strip() == Constants.AUTO_VERSION:
            return decide_version(global_path=self.global_file)
        return spec

    def constraint_for(self, spec: SpecLike) -> Constraint:
        """Parse ``spec``; ``auto`` resolves from the project context."""
        if isinstance(spec, Constraint):
            return spec
        return parse_version_spec(self.spec_for(spec))

    def find_local(self, spec: SpecLike) -> str:
        return find_local_version(self.constraint_for(spec), self.versions_dir)

    def download(self, spec: SpecLike) -> str:
        """Install the best remote match for ``spec``, replacing any old copy.

        Returns:
            The installed version directory name, e.g. ``v18.16.0``.
        """
        constraint = self.constraint_for(spec)
        version_name = find_remote_version(constraint, self.mirror, session=self.session)
        root = archive_name(version_name)
        url = archive_url(version_name, self.mirror)
        logger.info("download %s", url)
        archive = download(url, workers=self.workers, cancel_event=self.cancel_event, session=self.session)
        try:
            install_archive(archive, root, self.version_path(version_name))
        finally:
            archive.close()
            os.unlink(archive.name)
        logger.info("installed %s", version_name)
        return version_name

    def resolve(self, spec: SpecLike) -> str:
        """Return an installed version for ``spec``, downloading it if missing."""
        constraint = self.constraint_for(spec)
        try:
            return find_local_version(constraint, self.versions_dir)
        except LocalVersionNotFoundError:
            logger.warning("download %s version", constraint)
        self.download(constraint)
        return find_local_version(constraint, self.versions_dir)
