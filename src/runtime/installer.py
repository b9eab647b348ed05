"""Archive extraction and installation into the versions directory."""
from __future__ import annotations

import gzip
import io
import logging
import os
import shutil
import tarfile
import tempfile
import zlib
from pathlib import Path
from typing import BinaryIO, Optional, Union

from errors import ExtractionError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _member_path(root: Path, name: str) -> Path:
    """Resolve an archive member name under ``root``, rejecting escapes."""
    target = os.path.normpath(os.path.join(root, name))
    if not _is_within(root, target):
        raise ExtractionError(f"unsafe archive member path: {name}")
    return Path(target)


def _is_within(root: Path, target: str) -> bool:
    return target == str(root) or target.startswith(str(root) + os.sep)


def _check_real_path(root: Path, path: Path, name: str) -> None:
    """Reject ``path`` when symlinks extracted earlier lead it out of ``root``."""
    if not _is_within(root, os.path.realpath(path)):
        raise ExtractionError(f"archive member {name} resolves outside {root}")


def _extract_member(archive: tarfile.TarFile, member: tarfile.TarInfo, root: Path) -> None:
    path = _member_path(root, member.name)
    mode = member.mode & 0o7777
    _check_real_path(root, path.parent, member.name)

    if member.isdir():
        if not path.is_symlink():
            path.mkdir(mode=mode or 0o755, parents=True, exist_ok=True)
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    # A later entry replaces an earlier one instead of writing through it.
    if os.path.lexists(path):
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    if member.issym():
        # Link targets are recreated verbatim.
        os.symlink(member.linkname, path)
        return
    if member.islnk():
        source = _member_path(root, member.linkname)
        _check_real_path(root, source, member.linkname)
        os.link(source, path)
        return
    if not member.isreg():
        logger.debug("Skipping unsupported archive member %s (type %r)", member.name, member.type)
        return

    source = archive.extractfile(member)
    if source is None:
        raise ExtractionError(f"cannot read archive member {member.name}")
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_NOFOLLOW", 0), mode)
    with os.fdopen(fd, "wb") as out, source:
        shutil.copyfileobj(source, out)
    os.chmod(path, mode)


def extract(fileobj: BinaryIO, dest: Optional[PathLike] = None) -> Path:
    """Unpack a gzip-compressed tar stream.

    The stream is decompressed fully in memory before the tar entries are
    written out.

    Args:
        fileobj: Open binary handle positioned at the start of the archive.
        dest: Target directory; a fresh temporary directory when omitted.

    Returns:
        Path of the directory holding the extracted tree.

    Raises:
        ExtractionError: On decompression, tar or filesystem errors. Partial
            output is left in place.
    """
    try:
        data = gzip.decompress(fileobj.read())
    except (OSError, EOFError, zlib.error) as exc:
        raise ExtractionError(f"cannot decompress archive: {exc}") from exc

    try:
        if dest is None:
            root = Path(tempfile.mkdtemp(prefix="nvs-extract-"))
        else:
            root = Path(dest)
            root.mkdir(parents=True, exist_ok=True)
        root = Path(os.path.realpath(root))
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as archive:
            for member in archive:
                _extract_member(archive, member, root)
    except tarfile.TarError as exc:
        raise ExtractionError(f"corrupt archive: {exc}") from exc
    except OSError as exc:
        raise ExtractionError(f"cannot write extracted files: {exc}") from exc
    return root


def replace_version_dir(source: PathLike, target: PathLike) -> Path:
    """Replace ``target`` with ``source``: remove the old tree, then move.

    Not safe against two processes installing the same version at once.
    """
    source, target = Path(source), Path(target)
    try:
        if target.is_symlink() or target.is_file():
            target.unlink()
        elif target.exists():
            shutil.rmtree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))
    except OSError as exc:
        raise ExtractionError(f"cannot move {source} to {target}: {exc}") from exc
    return target


def install_archive(fileobj: BinaryIO, archive_root: str, target: PathLike) -> Path:
    """Extract ``fileobj`` and install its ``archive_root`` directory at ``target``.

    Args:
        fileobj: Downloaded ``.tar.gz`` handle.
        archive_root: Top-level directory inside the archive, e.g.
            ``node-v18.16.0-linux-x64``.
        target: Final install path, e.g. ``~/.nvs/versions/v18.16.0``.

    Returns:
        The install path.
    """
    extracted = extract(fileobj)
    logger.info("extract %s", extracted)
    source = extracted / archive_root
    if not source.is_dir():
        raise ExtractionError(f"archive does not contain {archive_root}/")
    logger.info("copy from %s", source)
    installed = replace_version_dir(source, target)
    shutil.rmtree(extracted, ignore_errors=True)
    return installed
