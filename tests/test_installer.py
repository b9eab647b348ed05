"""Tests for archive extraction and version directory replacement."""

import gzip
import io
import os
import shutil
import stat

import pytest

from conftest import make_tar_gz, node_archive
from errors import ExtractionError
from runtime import installer

ROOT = "node-v18.16.0-linux-x64"


def _mode(path):
    return stat.S_IMODE(os.lstat(path).st_mode)


def test_extract_restores_files_modes_and_symlinks(tmp_path):
    dest = installer.extract(io.BytesIO(node_archive()), tmp_path / "out")
    node = dest / ROOT / "bin" / "node"
    assert node.read_bytes() == b"#!node v18.16.0\n"
    assert _mode(node) == 0o755
    assert _mode(dest / ROOT / "lib" / "npm-cli.js") == 0o644
    npm = dest / ROOT / "bin" / "npm"
    assert npm.is_symlink()
    assert os.readlink(npm) == "../lib/npm-cli.js"
    assert npm.read_bytes() == b"console.log('npm')\n"


def test_extract_defaults_to_temporary_directory():
    dest = installer.extract(io.BytesIO(node_archive()))
    try:
        assert dest.name.startswith("nvs-extract-")
        assert (dest / ROOT / "bin" / "node").is_file()
    finally:
        shutil.rmtree(dest)


def test_extract_hardlink(tmp_path):
    data = make_tar_gz([
        ("pkg/", "dir", None, 0o755),
        ("pkg/a", "file", b"same", 0o644),
        ("pkg/b", "hardlink", "pkg/a", 0o644),
    ])
    dest = installer.extract(io.BytesIO(data), tmp_path)
    assert (dest / "pkg" / "b").read_bytes() == b"same"
    assert os.path.samefile(dest / "pkg" / "a", dest / "pkg" / "b")


def test_corrupt_gzip_raises(tmp_path):
    with pytest.raises(ExtractionError):
        installer.extract(io.BytesIO(b"definitely not gzip"), tmp_path)


def test_gzip_of_non_tar_raises(tmp_path):
    with pytest.raises(ExtractionError):
        installer.extract(io.BytesIO(gzip.compress(b"x" * 1024)), tmp_path)


@pytest.mark.parametrize("name", ["../escape", "pkg/../../escape", "/etc/evil"])
def test_member_path_escape_is_rejected(tmp_path, name):
    data = make_tar_gz([(name, "file", b"boom", 0o644)])
    with pytest.raises(ExtractionError):
        installer.extract(io.BytesIO(data), tmp_path / "out")
    assert not (tmp_path / "escape").exists()


def test_file_under_escaping_symlink_is_rejected(tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    data = make_tar_gz([
        ("pkg/", "dir", None, 0o755),
        ("pkg/link", "symlink", str(outside), 0o777),
        ("pkg/link/evil", "file", b"boom", 0o644),
    ])
    with pytest.raises(ExtractionError):
        installer.extract(io.BytesIO(data), tmp_path / "out")
    assert not (outside / "evil").exists()


def test_directory_under_escaping_symlink_is_rejected(tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    data = make_tar_gz([
        ("pkg/link", "symlink", str(outside), 0o777),
        ("pkg/link/sub/", "dir", None, 0o755),
    ])
    with pytest.raises(ExtractionError):
        installer.extract(io.BytesIO(data), tmp_path / "out")
    assert not (outside / "sub").exists()


def test_file_replaces_earlier_symlink_instead_of_following_it(tmp_path):
    target = tmp_path / "outside.txt"
    target.write_text("original")
    data = make_tar_gz([
        ("pkg/", "dir", None, 0o755),
        ("pkg/a", "symlink", str(target), 0o777),
        ("pkg/a", "file", b"replaced", 0o644),
    ])
    dest = installer.extract(io.BytesIO(data), tmp_path / "out")
    assert target.read_text() == "original"
    assert not (dest / "pkg" / "a").is_symlink()
    assert (dest / "pkg" / "a").read_bytes() == b"replaced"


def test_hardlink_through_escaping_symlink_is_rejected(tmp_path):
    secret = tmp_path / "secret.txt"
    secret.write_text("secret")
    data = make_tar_gz([
        ("pkg/", "dir", None, 0o755),
        ("pkg/s", "symlink", str(secret), 0o777),
        ("pkg/h", "hardlink", "pkg/s", 0o644),
    ])
    with pytest.raises(ExtractionError):
        installer.extract(io.BytesIO(data), tmp_path / "out")
    assert secret.read_text() == "secret"


def test_install_archive_places_root_at_target(tmp_path):
    target = tmp_path / "versions" / "v18.16.0"
    installed = installer.install_archive(io.BytesIO(node_archive()), ROOT, target)
    assert installed == target
    assert (target / "bin" / "node").is_file()
    assert (target / "bin" / "npm").is_symlink()


def test_reinstall_removes_stale_files(tmp_path):
    target = tmp_path / "versions" / "v18.16.0"
    (target / "bin").mkdir(parents=True)
    (target / "stale.txt").write_text("old")
    installer.install_archive(io.BytesIO(node_archive()), ROOT, target)
    assert not (target / "stale.txt").exists()
    assert (target / "bin" / "node").is_file()


def test_install_archive_missing_root(tmp_path):
    with pytest.raises(ExtractionError) as excinfo:
        installer.install_archive(io.BytesIO(node_archive()), "node-v0.0.0-linux-x64", tmp_path / "v0.0.0")
    assert "node-v0.0.0-linux-x64" in str(excinfo.value)
    assert not (tmp_path / "v0.0.0").exists()


def test_replace_version_dir_over_file(tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    (source / "marker").write_text("new")
    target = tmp_path / "target"
    target.write_text("not a directory")
    installer.replace_version_dir(source, target)
    assert (target / "marker").read_text() == "new"
    assert not source.exists()
