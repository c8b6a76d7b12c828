"""Filesystem helpers shared by the renderer, appliers and orchestrator."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644


def ensure_dir(path: str | Path) -> Path:
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def atomic_write_text(path: str | Path, text: str, mode: int | None = None) -> Path:
    """Write ``text`` through a temp file in the same directory, then rename over ``path``."""
    target = Path(path)
    ensure_dir(target.parent)
    if mode is None:
        mode = stat.S_IMODE(target.stat().st_mode) if target.is_file() else DEFAULT_FILE_MODE
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target


def remove_path(path: str | Path) -> bool:
    """Remove a file or symlink (not following it). Returns True when something was removed."""
    target = Path(path)
    if target.is_symlink() or target.is_file():
        target.unlink()
        return True
    if target.is_dir():
        shutil.rmtree(target)
        return True
    return False


def copy_file(source: str | Path, destination: str | Path, mode: int | None = None) -> Path:
    """Copy one file, replacing whatever is at ``destination``."""
    dest = Path(destination)
    ensure_dir(dest.parent)
    if dest.is_symlink():
        dest.unlink()
    shutil.copyfile(source, dest)
    if mode is not None:
        os.chmod(dest, mode)
    return dest


def create_symlink(target: str | Path, link_path: str | Path, label: str = "") -> bool:
    """Point ``link_path`` at ``target``, replacing an existing file or symlink.

    A real directory at ``link_path`` is never removed; IsADirectoryError is
    raised instead. Falls back to copying when the filesystem refuses symlinks. Returns True
    for a real symlink and False when the copy fallback was used.
    """
    link = Path(link_path)
    ensure_dir(link.parent)
    if link.is_dir() and not link.is_symlink():
        raise IsADirectoryError(f"refusing to replace directory {link}")
    if link.is_symlink() or link.exists():
        link.unlink()
    try:
        link.symlink_to(Path(target))
        logger.debug("linked %s %s -> %s", label or "file", link, target)
        return True
    except OSError as exc:
        logger.warning("symlink %s failed (%s), copying instead", link, exc)
        shutil.copyfile(target, link)
        return False


def clean_directory(path: str | Path) -> None:
    """Empty a directory without removing it."""
    directory = Path(path)
    if not directory.is_dir():
        return
    for entry in directory.iterdir():
        remove_path(entry)
