"""Node.js distribution index client.

Scrapes the directory listing at ``Constants.MIRROR_URL`` for ``vX.Y.Z/``
entries and builds archive URLs for the host platform.
"""
from __future__ import annotations

import logging
import platform
import re
import sys
import urllib.parse
from html.parser import HTMLParser
from typing import Any, List, Optional

from constants import Constants
from common.http_client import robust_get
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from errors import NetworkError, NoMatchError, UnsupportedPlatformError
from versioning.matcher import filter_candidates, pick_best
from versioning.models import Candidate, Constraint

logger = logging.getLogger(__name__)

VERSION_DIR_RE = re.compile(Constants.REMOTE_VERSION_PATTERN)

_OS_NAMES = {
    "linux": "linux",
    "darwin": "darwin",
}

_ARCH_NAMES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv7l",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


class AnchorTextParser(HTMLParser):
    """Collect the visible text of every ``<a>`` element in a document."""

    def __init__(self) -> None:
        super().__init__()
        self._depth = 0
        self._text: List[str] = []
        self.anchors: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag == "a":
            if self._depth == 0:
                self._text = []
            self._depth += 1

    def handle_endtag(self, tag):
        if tag == "a" and self._depth:
            self._depth -= 1
            if self._depth == 0:
                self.anchors.append("".join(self._text))

    def handle_data(self, data):
        if self._depth:
            self._text.append(data)


def extract_version_dirs(html: str) -> List[str]:
    """Return anchor texts that look like ``vX.Y.Z/`` in page order."""
    parser = AnchorTextParser()
    parser.feed(html)
    parser.close()
    return [text for text in parser.anchors if VERSION_DIR_RE.match(text)]


def fetch_index(base_url: Optional[str] = None, session: Any = None) -> List[str]:
    """Fetch the distribution index and return its version directory names.

    Raises:
        NetworkError: On transport failure or non-2xx status.
    """
    url = base_url or Constants.MIRROR_URL
    status_code, _, text = robust_get(url, session=session)
    if not 200 <= status_code < 300:
        raise NetworkError(url, "failed to fetch version index", status_code=status_code, body=text)
    names = extract_version_dirs(text)
    if is_debug_enabled(logger):
        logger.debug(
            "Parsed version index",
            extra=extra_context(
                event="parse",
                component="nodejs",
                action="fetch_index",
                target=safe_url(url),
                count=len(names),
            )
        )
    return names


def list_remote_versions(base_url: Optional[str] = None, session: Any = None) -> List[str]:
    """Return remote version names (``vX.Y.Z``) in index order."""
    return [name.rstrip("/") for name in fetch_index(base_url, session=session)]


def find_remote_version(
    constraint: Constraint,
    base_url: Optional[str] = None,
    session: Any = None,
) -> str:
    """Return the highest remote version directory satisfying ``constraint``.

    Raises:
        NetworkError: If the index cannot be fetched.
        NoMatchError: If no listed version matches.
    """
    candidates: List[Candidate] = filter_candidates(
        fetch_index(base_url, session=session), constraint
    )
    try:
        best = pick_best(candidates, str(constraint))
    except NoMatchError:
        logger.debug("No remote version matches %s", constraint)
        raise
    logger.debug("Selected remote version %s for %s", best.name, constraint)
    return best.name


def host_os() -> str:
    """Map the running OS to the upstream archive naming."""
    for prefix, name in _OS_NAMES.items():
        if sys.platform.startswith(prefix):
            return name
    raise UnsupportedPlatformError(f"no prebuilt Node.js archive for platform {sys.platform!r}")


def host_arch() -> str:
    """Map the running CPU architecture to the upstream archive naming."""
    machine = platform.machine().lower()
    try:
        return _ARCH_NAMES[machine]
    except KeyError:
        raise UnsupportedPlatformError(
            f"no prebuilt Node.js archive for architecture {machine!r}"
        ) from None


def archive_name(version_dir: str, os_name: Optional[str] = None, arch: Optional[str] = None) -> str:
    """Archive root name, e.g. ``node-v18.16.0-linux-x64``."""
    return f"node-{version_dir}-{os_name or host_os()}-{arch or host_arch()}"


def archive_url(
    version_dir: str,
    base_url: Optional[str] = None,
    os_name: Optional[str] = None,
    arch: Optional[str] = None,
) -> str:
    """URL of the ``.tar.gz`` archive for ``version_dir`` on this host."""
    base = (base_url or Constants.MIRROR_URL).rstrip("/") + "/"
    name = archive_name(version_dir, os_name, arch)
    return urllib.parse.urljoin(base, f"{version_dir}/{name}{Constants.ARCHIVE_SUFFIX}")
