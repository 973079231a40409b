"""Filesystem helpers for manifests and publish directories."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "recreate_dir"]


def _default_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def atomic_write_text(path: Path, content: str) -> None:
    """Replace path with content in one step; readers never see a partial manifest.

    The file keeps its permission bits. New files get the umask default, not
    the owner-only mode of the temp file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        mode = _default_mode()
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as handle:
        handle.write(content)
        tmp = Path(handle.name)
    try:
        tmp.chmod(mode)
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def recreate_dir(path: Path) -> Path:
    """Empty publish dir at path, wiping the previous run's output."""
    shutil.rmtree(path, ignore_errors=True)
    path.mkdir(parents=True)
    return path
