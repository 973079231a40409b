"""Copying files into publish directories."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from vary.core.result import Err, Ok, Result

from .errors import MissingLicense

LICENSE = "LICENSE"
README = "README.md"
BUILD_OUTPUT_SUFFIXES = (".wasm", ".js", ".d.ts")


def copy_license(root: Path, dest_dir: Path) -> Result[Path, MissingLicense]:
    source = root / LICENSE
    if not source.is_file():
        return Err(MissingLicense(path=source))
    target = dest_dir / LICENSE
    shutil.copyfile(source, target)
    return Ok(target)


def build_outputs(directory: Path) -> list[Path]:
    """Direct children of a wasm build dir worth publishing."""
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.name.endswith(BUILD_OUTPUT_SUFFIXES)
    )


def copy_into(files: Iterable[Path], dest_dir: Path) -> list[Path]:
    copied: list[Path] = []
    for source in files:
        target = dest_dir / source.name
        shutil.copyfile(source, target)
        copied.append(target)
    return copied
