"""Logging configuration and structured-context helpers.

Every module logs through ``logging.getLogger(__name__)``; this module only
configures the root logger once and provides small helpers used to attach
structured fields (``extra=...``) to DEBUG records.
"""
from __future__ import annotations

import logging
import os
import re
import sys
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants

_SENSITIVE_KEYS = ("token", "password", "secret", "key", "auth")
_TOKEN_RE = re.compile(r"(?i)(token|password|secret|key|auth)=([^&\s]+)")


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Level precedence: explicit argument, then NVS_LOG_LEVEL, then INFO.
    """
    level_name = (level or os.environ.get("NVS_LOG_LEVEL") or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        root.addHandler(file_handler)

    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True if DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    None values are dropped and sensitive keys are redacted.
    """
    context: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if any(marker in key.lower() for marker in _SENSITIVE_KEYS):
            value = "***"
        context[key] = value
    return context


def redact(text: str) -> str:
    """Mask credential-looking query parameters in free text."""
    if not text:
        return text
    return _TOKEN_RE.sub(lambda m: f"{m.group(1)}=***", text)


def safe_url(url: str) -> str:
    """Return ``url`` without userinfo and with sensitive query values masked."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urllib.parse.urlunsplit(
        (parts.scheme, netloc, parts.path, redact(parts.query), "")
    )


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self):
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc_info) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
