"""Shared fixtures and in-process HTTP fakes."""

import io
import tarfile
import threading
import time

import pytest

from common import http_client
from constants import Constants

MIRROR = "https://mirror.test/dist/"

INDEX_HTML = """<html>
<head><title>Index of /dist/</title></head>
<body>
<h1>Index of /dist/</h1><hr><pre><a href="../">../</a>
<a href="latest/">latest/</a>                                          03-Jun-2023 10:00    -
<a href="v16.0.0/">v16.0.0/</a>                                        20-Apr-2021 10:00    -
<a href="v16.2.0/">v16.2.0/</a>                                        25-May-2021 10:00    -
<a href="v18.1.0/">v18.1.0/</a>                                        03-May-2022 10:00    -
<a href="v100.0.0/">v100.0.0/</a>                                      01-Jan-2030 10:00    -
<a href="index.json">index.json</a>                                    03-Jun-2023 10:00    220K
</pre><hr></body>
</html>
"""


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code, body=b"", text=None, headers=None, chunk_size=4):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else body.decode("latin-1")
        self.headers = headers or {}
        self._chunk_size = chunk_size
        self.closed = False

    def iter_content(self, chunk_size=1):
        step = min(chunk_size, self._chunk_size)
        for offset in range(0, len(self._body), step):
            yield self._body[offset:offset + step]

    def close(self):
        self.closed = True


class FakeSession:
    """Serves HTML pages and range-capable files from memory.

    ``delay`` makes earlier byte ranges answer later than later ones, so
    workers complete out of order.
    """

    def __init__(self, pages=None, files=None, delay=0.0):
        self.pages = dict(pages or {})
        self.files = dict(files or {})
        self.delay = delay
        self.fail_ranges = set()
        self.requests = []
        self._lock = threading.Lock()

    def _record(self, method, url, headers):
        with self._lock:
            self.requests.append((method, url, (headers or {}).get("Range")))

    def range_headers(self):
        return sorted(r for m, _, r in self.requests if m == "GET" and r)

    def head(self, url, headers=None, **kwargs):
        self._record("HEAD", url, headers)
        if url in self.files:
            return FakeResponse(200, headers={"Content-Length": str(len(self.files[url]))})
        return FakeResponse(404)

    def get(self, url, headers=None, **kwargs):
        self._record("GET", url, headers)
        range_header = (headers or {}).get("Range")
        if url in self.pages:
            status, text = self.pages[url]
            return FakeResponse(status, text=text)
        if url not in self.files:
            return FakeResponse(404, text="not found")
        data = self.files[url]
        if range_header is None or range_header in self.fail_ranges:
            return FakeResponse(200, body=data)
        start_text, end_text = range_header[len("bytes="):].split("-")
        start = int(start_text)
        end = int(end_text) + 1 if end_text else len(data)
        if self.delay:
            time.sleep(self.delay * (len(data) - start) / len(data))
        return FakeResponse(206, body=data[start:end])


def make_tar_gz(entries):
    """Build a .tar.gz in memory.

    ``entries`` is a list of (name, kind, payload, mode) where kind is
    "dir", "file", "symlink" or "hardlink"; payload is bytes for files and
    the link target for links.
    """
    raw = io.BytesIO()
    with tarfile.open(fileobj=raw, mode="w:gz") as archive:
        for name, kind, payload, mode in entries:
            info = tarfile.TarInfo(name)
            info.mode = mode
            if kind == "dir":
                info.type = tarfile.DIRTYPE
                archive.addfile(info)
            elif kind in ("symlink", "hardlink"):
                info.type = tarfile.SYMTYPE if kind == "symlink" else tarfile.LNKTYPE
                info.linkname = payload
                archive.addfile(info)
            else:
                info.size = len(payload)
                archive.addfile(info, io.BytesIO(payload))
    return raw.getvalue()


def node_archive(version="v18.16.0", os_name="linux", arch="x64", extra=None):
    """A tiny Node.js-shaped release archive."""
    root = f"node-{version}-{os_name}-{arch}"
    entries = [
        (f"{root}/", "dir", None, 0o755),
        (f"{root}/bin/", "dir", None, 0o755),
        (f"{root}/bin/node", "file", f"#!node {version}\n".encode(), 0o755),
        (f"{root}/lib/", "dir", None, 0o755),
        (f"{root}/lib/npm-cli.js", "file", b"console.log('npm')\n", 0o644),
        (f"{root}/bin/npm", "symlink", "../lib/npm-cli.js", 0o777),
    ]
    entries.extend(extra or [])
    return make_tar_gz(entries)


@pytest.fixture(autouse=True)
def _isolated_http_cache(monkeypatch):
    """Each test starts with an empty response cache and no retry delay."""
    http_client.clear_cache()
    monkeypatch.setattr(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0)
    yield
    http_client.clear_cache()


@pytest.fixture
def nvs_home(tmp_path, monkeypatch):
    """An initialized-looking nvs home under tmp_path."""
    home = tmp_path / "nvs-home"
    (home / "versions").mkdir(parents=True)
    (home / "bin").mkdir()
    monkeypatch.setattr(Constants, "NVS_HOME", str(home))
    return home


@pytest.fixture
def linux_x64(monkeypatch):
    """Pretend the host is linux/x64 for archive naming."""
    import registry.nodejs as nodejs

    monkeypatch.setattr(nodejs, "host_os", lambda: "linux")
    monkeypatch.setattr(nodejs, "host_arch", lambda: "x64")
