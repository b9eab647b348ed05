"""Error types raised by version resolution, download and install."""

from __future__ import annotations

from typing import List, Optional


class NvsError(Exception):
    """Base class for all errors reported by nvs."""


class ParseError(NvsError, ValueError):
    """A version specifier could not be parsed."""

    def __init__(self, spec: str, reason: str):
        super().__init__(f"{spec!r} is not a valid version: {reason}")
        self.spec = spec
        self.reason = reason


class UnsupportedFormatError(ParseError):
    """A version specifier uses syntax outside the supported grammar."""

    def __init__(self, spec: str, reason: str = "unsupported format"):
        super().__init__(spec, reason)


class NetworkError(NvsError):
    """An HTTP request failed or returned a non-success status."""

    def __init__(
        self,
        url: str,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        detail = message
        if status_code is not None:
            detail = f"{detail} (status {status_code})"
        if body:
            detail = f"{detail}: {body[:200]}"
        super().__init__(f"{url}: {detail}")
        self.url = url
        self.status_code = status_code
        self.body = body


class NoMatchError(NvsError):
    """No available version satisfies the requested constraint."""

    def __init__(self, spec: str, where: str = "remote"):
        super().__init__(f"no {where} version matches {spec!r}")
        self.spec = spec
        self.where = where


class LocalVersionNotFoundError(NoMatchError):
    """No installed version satisfies the constraint; a download may fix it."""

    def __init__(self, spec: str):
        super().__init__(spec, where="installed")


class ExtractionError(NvsError):
    """An archive could not be unpacked or moved into place."""


class PartialDownloadError(NvsError):
    """One or more ranged download workers failed.

    Every worker failure is kept in ``causes`` so simultaneous failures are
    all visible to the caller.
    """

    def __init__(self, url: str, causes: List[BaseException]):
        lines = "\n".join(f"  - {cause}" for cause in causes)
        super().__init__(f"download of {url} failed in {len(causes)} worker(s):\n{lines}")
        self.url = url
        self.causes = list(causes)


class NotInitializedError(NvsError):
    """The nvs home directory does not exist yet."""

    def __init__(self, home: str):
        super().__init__(f"{home} does not exist. Run `nvs init` first")
        self.home = home


class GlobalVersionNotFoundError(NvsError):
    """No project version file was found and no global version is set."""

    def __init__(self):
        super().__init__("no version specified. Run `nvs use <version>`")


class UnsupportedPlatformError(NvsError):
    """The host OS or CPU has no matching upstream archive."""
