"""Per-platform stub packages under ``npm/``."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from vary.output.console import ConsoleProtocol

from .arch import ArchDescriptor
from .manifest import MANIFEST_NAME, write_manifest

STUB_DIR_NAME = "npm"
STUB_GLOB = f"./{STUB_DIR_NAME}/*"


def stub_root(root: Path) -> Path:
    return root / STUB_DIR_NAME


def ensure_stub_directories(
    root: Path,
    architectures: Iterable[ArchDescriptor],
    *,
    console: ConsoleProtocol,
) -> list[Path]:
    """Create missing ``npm/<key>`` directories with a blank README and os/cpu manifest.

    Existing directories are left untouched. Returns the created directories.
    """
    base = stub_root(root)
    created: list[Path] = []
    for arch in architectures:
        target = base / arch.key
        if target.exists():
            continue
        target.mkdir(parents=True)
        (target / "README.md").write_text("", encoding="utf-8")
        write_manifest(target / MANIFEST_NAME, arch.stub_manifest())
        console.print(f"Create '{STUB_DIR_NAME}/{arch.key}' dir")
        created.append(target)

    if created:
        console.success(f"Created {len(created)} '{STUB_DIR_NAME}/*' dirs")
    else:
        console.print(f"The '{STUB_DIR_NAME}' dirs exist")
    return created


def list_stub_directories(root: Path) -> list[Path]:
    """Existing stub directories, sorted by name (files like .DS_Store ignored)."""
    base = stub_root(root)
    if not base.is_dir():
        return []
    return sorted(p for p in base.iterdir() if p.is_dir() and not p.name.startswith("."))
