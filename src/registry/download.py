"""Parallel ranged downloader.

Splits a resource into ``workers`` byte ranges, fetches them concurrently on
a thread pool and reassembles them in range order into a temporary file.
"""
from __future__ import annotations

import logging
import math
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, BinaryIO, List, Optional, Tuple

import requests

from constants import Constants
from common.http_client import safe_get, safe_head
from common.logging_utils import Timer, safe_url
from errors import NetworkError, PartialDownloadError

logger = logging.getLogger(__name__)

PARTIAL_CONTENT = 206

ByteRange = Tuple[int, Optional[int]]


def content_length(url: str, session: Any = None) -> int:
    """Return the size advertised by a HEAD request.

    Raises:
        NetworkError: On non-2xx status or a missing/empty Content-Length.
    """
    res = safe_head(url, context="download", session=session)
    if not 200 <= res.status_code < 300:
        raise NetworkError(url, "HEAD request failed", status_code=res.status_code)
    raw = res.headers.get("Content-Length")
    try:
        length = int(raw)
    except (TypeError, ValueError):
        raise NetworkError(url, f"missing or invalid Content-Length {raw!r}") from None
    if length <= 0:
        raise NetworkError(url, "remote file is empty")
    return length


def byte_ranges(length: int, workers: int) -> List[ByteRange]:
    """Split ``length`` bytes into ``workers`` inclusive ranges.

    The last range is open-ended (``end`` is None) so any rounding remainder
    is fetched by the last worker. Fewer ranges are returned when
    ``workers`` would leave some of them empty.
    """
    chunk = math.ceil(length / workers)
    workers = math.ceil(length / chunk)
    ranges: List[ByteRange] = []
    for index in range(workers):
        start = index * chunk
        end = None if index == workers - 1 else (index + 1) * chunk - 1
        ranges.append((start, end))
    return ranges


def _range_header(start: int, end: Optional[int]) -> str:
    if end is None:
        return f"bytes={start}-"
    return f"bytes={start}-{end}"


def _fetch_range(
    url: str,
    index: int,
    byte_range: ByteRange,
    session: Any,
    cancel_event: threading.Event,
) -> bytes:
    """Fetch one byte range; runs on a worker thread."""
    header = _range_header(*byte_range)
    if cancel_event.is_set():
        raise NetworkError(url, f"worker {index} cancelled before {header}")
    res = safe_get(
        url,
        context="download",
        session=session,
        headers={"Range": header},
        stream=True,
        timeout=(Constants.CONNECT_TIMEOUT, Constants.REQUEST_TIMEOUT),
    )
    try:
        if res.status_code != PARTIAL_CONTENT:
            raise NetworkError(
                url,
                f"worker {index} expected partial content for {header}",
                status_code=res.status_code,
            )
        buf = bytearray()
        try:
            for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_BYTES):
                if cancel_event.is_set():
                    raise NetworkError(url, f"worker {index} cancelled during {header}")
                buf.extend(chunk)
        except requests.RequestException as exc:
            raise NetworkError(url, f"worker {index} transfer error for {header}: {exc}") from exc
        return bytes(buf)
    finally:
        res.close()


def download(
    url: str,
    workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    session: Any = None,
) -> BinaryIO:
    """Download ``url`` with parallel range requests.

    Args:
        url: Resource to fetch; the server must honour ``Range`` requests.
        workers: Number of concurrent range requests. Defaults to
            ``Constants.MAX_WORKERS``; capped at the content length.
        cancel_event: Set it to abort every in-flight worker. Workers check it
            before connecting and between body chunks, so a worker stuck in a
            request stops within ``Constants.CONNECT_TIMEOUT`` while connecting
            or ``Constants.REQUEST_TIMEOUT`` while reading.
        session: Optional ``requests.Session``-like object.

    Returns:
        The downloaded file, reopened for binary reading. The caller owns it
        and should delete it when done.

    Raises:
        NetworkError: If the HEAD request fails or ``cancel_event`` is
            already set.
        PartialDownloadError: If any worker failed; carries every failure.
    """
    cancel = cancel_event if cancel_event is not None else threading.Event()
    if cancel.is_set():
        raise NetworkError(url, "download cancelled")
    length = content_length(url, session=session)
    count = max(1, min(workers or Constants.MAX_WORKERS, length))
    ranges = byte_ranges(length, count)
    count = len(ranges)
    logger.debug("Downloading %s: %d bytes in %d ranges", safe_url(url), length, count)

    buffers: List[Optional[bytes]] = [None] * count
    failures: List[BaseException] = []
    failures_lock = threading.Lock()

    def worker(index: int) -> None:
        try:
            buffers[index] = _fetch_range(url, index, ranges[index], session, cancel)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Every worker failure is reported together below.
            with failures_lock:
                failures.append(exc)

    executor = ThreadPoolExecutor(max_workers=count, thread_name_prefix="nvs-download")
    with Timer() as t:
        try:
            wait([executor.submit(worker, index) for index in range(count)])
        except KeyboardInterrupt:
            cancel.set()
            raise
        finally:
            executor.shutdown(wait=True)

    if failures:
        raise PartialDownloadError(url, failures)

    received = sum(len(buf) for buf in buffers if buf is not None)
    if received != length:
        logger.warning("Expected %d bytes from %s but received %d", length, safe_url(url), received)

    with tempfile.NamedTemporaryFile(prefix="nvs-", suffix=Constants.ARCHIVE_SUFFIX, delete=False) as tmp:
        for buf in buffers:
            tmp.write(buf or b"")
        tmp_name = tmp.name
    logger.debug("Downloaded %s in %d ms to %s", safe_url(url), t.duration_ms(), tmp_name)
    return open(tmp_name, "rb")  # pylint: disable=consider-using-with
