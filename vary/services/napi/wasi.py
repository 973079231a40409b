"""Locate the files napi's wasi build leaves in ``target/wasm``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from vary.core.result import Err, Ok, Result

from .errors import WasiOutputMissing

TYPES_FILE = "index.d.ts"


@dataclass(frozen=True, slots=True)
class WasiOutput:
    """Files that make up a wasi publish directory.

    Build outputs are names inside ``directory``; ``types`` may come from the
    project root when the build does not emit one.
    """

    directory: Path
    workers: tuple[str, ...]
    wasm: str
    entry_for_node: str
    entry_for_browser: str
    types: Path

    @property
    def all_files(self) -> tuple[Path, ...]:
        names = (*self.workers, self.wasm, self.entry_for_node, self.entry_for_browser)
        return (*(self.directory / n for n in names), self.types)


def _first(names: list[str], suffix: str) -> str | None:
    return next((n for n in names if n.endswith(suffix)), None)


def resolve_wasi_output(directory: Path, root: Path) -> Result[WasiOutput, WasiOutputMissing]:
    """Classify build outputs by name. Each missing category is its own error.

    Worker files are matched first and never count toward another category.
    The types file is taken from the build dir, else from root.
    """
    if not directory.is_dir():
        return Err(WasiOutputMissing("output dir", str(directory)))
    names = sorted(p.name for p in directory.iterdir() if p.is_file())

    workers = tuple(n for n in names if "wasi-worker" in n)
    if not workers:
        return Err(WasiOutputMissing("worker", "wasi-worker.mjs"))
    names = [n for n in names if n not in workers]

    wasm = _first(names, ".wasm")
    if wasm is None:
        return Err(WasiOutputMissing("wasm", "demo.wasm32-wasi.wasm"))

    entry_for_node = _first(names, ".wasi.cjs")
    if entry_for_node is None:
        return Err(WasiOutputMissing("node entry", "demo.wasi.cjs"))

    entry_for_browser = _first(names, ".wasi-browser.js")
    if entry_for_browser is None:
        return Err(WasiOutputMissing("browser entry", "demo.wasi-browser.js"))

    types = next(
        (p for p in (directory / TYPES_FILE, root / TYPES_FILE) if p.is_file()),
        None,
    )
    if types is None:
        return Err(WasiOutputMissing("types", TYPES_FILE))

    return Ok(WasiOutput(directory, workers, wasm, entry_for_node, entry_for_browser, types))
