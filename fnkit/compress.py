"""Extraction of zip and tar archives into a directory."""

from __future__ import annotations

import os
import tarfile
import zipfile
from pathlib import Path

__all__ = ["DecompressError", "decompress"]

_TAR_MODES = {
    ".tar.gz": "r:gz",
    ".tgz": "r:gz",
    ".tar.bz2": "r:bz2",
    ".tbz2": "r:bz2",
    ".tar.xz": "r:xz",
    ".txz": "r:xz",
    ".tar": "r:",
}


class DecompressError(Exception):
    """Raised when an archive cannot be extracted."""


def _archive_kind(path: Path) -> str | None:
    name = path.name.lower()
    if name.endswith(".zip"):
        return "zip"
    for suffix in sorted(_TAR_MODES, key=len, reverse=True):
        if name.endswith(suffix):
            return _TAR_MODES[suffix]
    return None


def _safe_target(dest: Path, member: str) -> Path:
    target = (dest / member).resolve()
    if target != dest and dest not in target.parents:
        raise DecompressError(f"illegal file path: {member}")
    return target


def _extract_zip(archive: Path, dest: Path) -> None:
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            target = _safe_target(dest, info.filename)
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            if target.exists():
                raise DecompressError(f"file already exists: {target}")
            zf.extract(info, dest)


def _extract_tar(archive: Path, dest: Path, mode: str) -> None:
    use_filter = hasattr(tarfile, "data_filter")
    with tarfile.open(archive, mode) as tf:
        for member in tf.getmembers():
            target = _safe_target(dest, member.name)
            if member.issym() or member.islnk():
                link_base = target.parent if member.issym() else dest
                _safe_target(link_base, member.linkname)
            if member.isdir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            if os.path.lexists(target):
                raise DecompressError(f"file already exists: {target}")
            if use_filter:
                tf.extract(member, dest, filter="data")
            else:
                tf.extract(member, dest)


def decompress(archive_path: str | os.PathLike[str], dest: str | os.PathLike[str]) -> None:
    """Extract the archive at ``archive_path`` into ``dest``, creating it if needed.

    The archive format is chosen from the file name.
    """
    archive = Path(archive_path)
    dest_dir = Path(dest)
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DecompressError(f"DeCompress error creating output directory: {exc}") from exc

    kind = _archive_kind(archive)
    if kind is None:
        raise DecompressError(
            f"DeCompress error unarchiving file: format unrecognized by filename: {archive}"
        )

    root = dest_dir.resolve()
    try:
        if kind == "zip":
            _extract_zip(archive, root)
        else:
            _extract_tar(archive, root, kind)
    except DecompressError as exc:
        raise DecompressError(f"DeCompress error unarchiving file: {exc}") from exc
    except (OSError, zipfile.BadZipFile, tarfile.TarError) as exc:
        raise DecompressError(f"DeCompress error unarchiving file: {exc}") from exc