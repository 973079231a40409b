"""Tarball extraction for downloaded tools."""

from __future__ import annotations

import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from vary.core.result import Err, Ok, Result

__all__ = ["InstallError", "extract_tar_gz"]


@dataclass(frozen=True, slots=True)
class InstallError:
    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


def _stripped(name: str, strip_components: int) -> str | None:
    parts = PurePosixPath(name.replace("\\", "/")).parts[strip_components:]
    if not parts or parts[0] == "/" or ".." in parts:
        return None
    return "/".join(parts)


def extract_tar_gz(
    archive: Path, dest: Path, *, strip_components: int = 0
) -> Result[int, InstallError]:
    """Replace dest with the regular files of archive. Returns the file count.

    Members escaping dest (absolute or ``..``) are dropped; links and devices
    are never extracted.
    """
    if not archive.is_file():
        return Err(InstallError(archive, "Archive not found"))
    if not archive.name.endswith((".tar.gz", ".tgz")):
        return Err(InstallError(archive, "Unsupported archive format"))

    shutil.rmtree(dest, ignore_errors=True)
    dest.mkdir(parents=True)
    try:
        with tarfile.open(archive, "r:gz") as tar:
            members: list[tarfile.TarInfo] = []
            for member in tar.getmembers():
                name = _stripped(member.name, strip_components) if member.isreg() else None
                if name is not None:
                    members.append(member.replace(name=name, deep=False))
            tar.extractall(dest, members=members, filter="data")
    except tarfile.TarError as e:
        return Err(InstallError(archive, f"Tar extraction failed: {e}"))
    except OSError as e:
        return Err(InstallError(archive, f"IO error: {e}"))
    return Ok(len(members))
