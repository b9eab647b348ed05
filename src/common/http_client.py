"""Shared HTTP helpers used by the catalog scraper and the downloader.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Transport failures are raised as
:class:`errors.NetworkError` so callers can decide how to report them.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Optional, Dict, Tuple

import requests

from constants import Constants
from errors import NetworkError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"User-Agent": Constants.USER_AGENT}


def _request(method: str, url: str, *, context: str, session: Any = None, **kwargs: Any) -> requests.Response:
    """Issue one request with consistent error handling and DEBUG traces."""
    client = session if session is not None else requests
    safe_target = safe_url(url)
    kwargs.setdefault("timeout", Constants.REQUEST_TIMEOUT)
    headers = {**DEFAULT_HEADERS, **(kwargs.pop("headers", None) or {})}
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action=method,
                    target=safe_target,
                    context=context,
                    range=headers.get("Range"),
                )
            )
        try:
            res = getattr(client, method.lower())(url, headers=headers, **kwargs)
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                kwargs["timeout"],
            )
            raise NetworkError(url, f"{context} request timed out") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise NetworkError(url, f"{context} connection error: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action=method,
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def safe_get(url: str, *, context: str, session: Any = None, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "index", "download").
        session: Optional ``requests.Session``-like object; defaults to ``requests``.
        **kwargs: Passed through to ``get``.

    Returns:
        requests.Response: The HTTP response object.

    Raises:
        NetworkError: On timeout or connection failure.
    """
    return _request("GET", url, context=context, session=session, **kwargs)


def safe_head(url: str, *, context: str, session: Any = None, **kwargs: Any) -> requests.Response:
    """Perform a HEAD request with consistent error handling and DEBUG traces."""
    kwargs.setdefault("allow_redirects", True)
    return _request("HEAD", url, context=context, session=session, **kwargs)


# Simple in-memory cache for HTTP responses
_http_cache: Dict[str, Tuple[Any, float]] = {}


def _get_cache_key(method: str, url: str, headers: Optional[Dict[str, str]] = None) -> str:
    """Generate cache key from request parameters."""
    headers_str = str(sorted(headers.items())) if headers else ""
    return f"{method}:{url}:{headers_str}"


def _is_cache_valid(cache_entry: Tuple[Any, float]) -> bool:
    """Check if cache entry is still valid."""
    _, cached_time = cache_entry
    return time.time() - cached_time < Constants.HTTP_CACHE_TTL_SEC


def clear_cache() -> None:
    """Drop every cached response."""
    _http_cache.clear()


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    session: Any = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout, retries, and caching with DEBUG traces.

    Returns:
        Tuple of (status_code, headers_dict, body_text).

    Raises:
        NetworkError: When every attempt failed at the transport level.
    """
    cache_key = _get_cache_key('GET', url, headers)
    safe_target = safe_url(url)

    # Check cache first
    if cache_key in _http_cache and _is_cache_valid(_http_cache[cache_key]):
        cached_data, _ = _http_cache[cache_key]
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP cache hit",
                extra=extra_context(
                    event="cache_hit",
                    component="http_client",
                    action="GET",
                    target=safe_target
                )
            )
        return cached_data

    last_error: Optional[NetworkError] = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        try:
            response = safe_get(url, context="index", session=session, headers=headers, **kwargs)
        except NetworkError as exc:
            last_error = exc
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request exception",
                    extra=extra_context(
                        event="http_exception",
                        component="http_client",
                        action="GET",
                        outcome="request_exception",
                        attempt=attempt + 1,
                        target=safe_target
                    )
                )
            continue

        cache_data = (response.status_code, dict(response.headers), response.text)
        if response.status_code < 500:  # Don't cache server errors
            _http_cache[cache_key] = (cache_data, time.time())
        return cache_data

    raise NetworkError(
        url,
        f"request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_error}",
    )
