"""Wasm fallback packages: ``--wasm`` (node), ``--napi-wasm`` (wasi), ``--wasm-web``.

Each mode builds, optimizes and copies the wasm outputs into a fresh publish
directory under ``target/``, writes a README and a package.json derived from
the root manifest, then publishes that directory alone.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from vary.core.result import Err, Ok, Result
from vary.core.structured import StrDict
from vary.output.console import ConsoleProtocol
from vary.platform.files import recreate_dir
from vary.platform.process import Runner

from .artifacts import README, build_outputs, copy_into, copy_license
from .commands import BUILD_WASM, BUILD_WASM_WEB, run_command
from .errors import (
    BuildOutputMissing,
    CommandFailed,
    ConfigError,
    MissingEntryPoint,
    MissingLicense,
    MissingToken,
    WasiOutputMissing,
)
from .manifest import MANIFEST_NAME, WASM_RUNTIME, NormalizedNapiConfig, RootManifest, write_manifest
from .publish import PublishGate
from .wasi import WasiOutput, resolve_wasi_output
from .wasm_opt import WasmOptimizer

WASM_PICK_KEYS = (
    "version",
    "description",
    "author",
    "homepage",
    "repository",
    "keywords",
    "license",
    "publishConfig",
)

NODE_REQUIRED_FILES = ("binding.js", "index.js", "postinstall.js")
NODE_RECOMMENDED_FILES = ("index.d.ts", "CHANGELOG.md")
NODE_ENTRY = "index.js"
BINDING_FILE = "binding.js"
TYPES_FILE = "index.d.ts"

WasmReleaseError = (
    ConfigError
    | CommandFailed
    | BuildOutputMissing
    | WasiOutputMissing
    | MissingEntryPoint
    | MissingLicense
    | MissingToken
)


class WasmKind(Enum):
    NODE = "node"
    WASI = "wasi"
    WEB = "web"

    @property
    def build_command(self) -> list[str]:
        return BUILD_WASM_WEB if self is WasmKind.WEB else BUILD_WASM

    @property
    def build_dir(self) -> str:
        return "target/wasm_web" if self is WasmKind.WEB else "target/wasm"

    @property
    def publish_dir(self) -> str:
        return "target/wasm_web_publish" if self is WasmKind.WEB else "target/wasm_publish"

    @property
    def label(self) -> str:
        match self:
            case WasmKind.NODE:
                return "wasm"
            case WasmKind.WASI:
                return "wasm (napi wasi)"
            case WasmKind.WEB:
                return "wasm (web)"


def wasm_package_name(manifest: RootManifest, config: NormalizedNapiConfig, kind: WasmKind) -> str:
    vary = manifest.vary
    if kind is WasmKind.WEB:
        override = vary.wasm_web_name if vary else None
        return override or f"{config.package_name}-wasm-web"
    override = vary.wasm_name if vary else None
    return override or f"{config.package_name}-wasm"


def wasm_readme(kind: WasmKind, name: str, package: str, repository: str) -> str:
    link = f"[`{package}`]({repository})"
    match kind:
        case WasmKind.NODE:
            return f"# {name}\n\nThis is the WASM binary for {link}.\n"
        case WasmKind.WASI:
            return (
                f"# {name} (wasi)\n\n"
                "> This package can be used for both Node.js and Web envs.\n\n"
                f"This is the WASM binary for {link}.\n"
            )
        case WasmKind.WEB:
            return f"# {name}\n\nThis is the WASM (Web) binary for {link}.\n"


def wasm_publish_manifest(
    manifest: RootManifest,
    kind: WasmKind,
    name: str,
    *,
    wasi: WasiOutput | None = None,
    runtime_version: str | None = None,
) -> StrDict:
    data = manifest.pick(WASM_PICK_KEYS)
    match kind:
        case WasmKind.NODE:
            data["main"] = NODE_ENTRY
        case WasmKind.WEB:
            data["module"] = NODE_ENTRY
        case WasmKind.WASI:
            if wasi is None or runtime_version is None:
                raise ValueError("wasi outputs and runtime version are required")
            data["main"] = wasi.entry_for_node
            data["browser"] = wasi.entry_for_browser
            data["__wasi"] = True
            data["dependencies"] = {WASM_RUNTIME: runtime_version}
    data["types"] = TYPES_FILE
    data["name"] = name
    return data


def preflight_node(
    manifest: RootManifest, console: ConsoleProtocol
) -> Result[None, ConfigError | MissingEntryPoint]:
    """Check the root package can act as the node wasm fallback loader."""
    files = manifest.files
    missing = [f for f in NODE_REQUIRED_FILES if f not in files]
    if missing:
        return Err(
            ConfigError(
                "files",
                f"package.json#files must include {', '.join(NODE_REQUIRED_FILES)}",
                hint=f"missing: {', '.join(missing)}",
            )
        )
    for f in NODE_RECOMMENDED_FILES:
        if f not in files:
            console.warning(f"The file {f} is recommended to be included in package.json#files")

    if manifest.main != NODE_ENTRY:
        console.warning(f"package.json#main must be {NODE_ENTRY}, but got {manifest.main}")

    if manifest.script("postinstall") is None:
        return Err(
            ConfigError(
                "scripts.postinstall",
                "package.json must include the 'scripts.postinstall' for wasm fallback",
            )
        )

    binding = manifest.root / BINDING_FILE
    if not binding.is_file():
        return Err(MissingEntryPoint(path=binding))
    return Ok(None)


def preflight_wasi(manifest: RootManifest) -> Result[str, ConfigError]:
    """Declared version of the wasm runtime the wasi package depends on."""
    version = manifest.dependency(WASM_RUNTIME)
    if version is None:
        return Err(
            ConfigError(
                "dependencies",
                f"Please install {WASM_RUNTIME}",
                hint=f"pnpm add {WASM_RUNTIME}",
            )
        )
    return Ok(version)


class WasmRelease:
    def __init__(
        self,
        *,
        manifest: RootManifest,
        config: NormalizedNapiConfig,
        runner: Runner,
        console: ConsoleProtocol,
        gate: PublishGate,
        optimizer: WasmOptimizer,
    ) -> None:
        self._manifest = manifest
        self._config = config
        self._runner = runner
        self._console = console
        self._gate = gate
        self._optimizer = optimizer

    def run(self, kind: WasmKind, *, tag: str | None = None) -> Result[Path, WasmReleaseError]:
        manifest = self._manifest
        root = manifest.root
        self._console.info(f"Will release the {kind.label} package.")

        runtime_version: str | None = None
        match kind:
            case WasmKind.NODE:
                checked = preflight_node(manifest, self._console)
                if isinstance(checked, Err):
                    return checked
            case WasmKind.WASI:
                declared = preflight_wasi(manifest)
                if isinstance(declared, Err):
                    return declared
                runtime_version = declared.value
            case WasmKind.WEB:
                pass

        built = run_command(self._runner, kind.build_command, cwd=root)
        if isinstance(built, Err):
            return built

        build_dir = root / kind.build_dir
        if not build_dir.is_dir():
            return Err(
                BuildOutputMissing(
                    path=Path(kind.build_dir),
                    hint=f"Run: {' '.join(kind.build_command)}",
                )
            )

        self._optimizer.optimize(build_dir)

        wasi: WasiOutput | None = None
        if kind is WasmKind.WASI:
            resolved = resolve_wasi_output(build_dir, root)
            if isinstance(resolved, Err):
                return resolved
            wasi = resolved.value
            outputs = list(wasi.all_files)
        else:
            outputs = build_outputs(build_dir)

        publish_dir = recreate_dir(root / kind.publish_dir)

        for copied in copy_into(outputs, publish_dir):
            self._console.print(f"Copy wasm output: {copied.name}")

        name = wasm_package_name(manifest, self._config, kind)
        self._console.print(f"Wasm package name: {name}")

        readme = wasm_readme(kind, name, manifest.name or "", manifest.repository_url or "")
        (publish_dir / README).write_text(readme, encoding="utf-8")

        data = wasm_publish_manifest(
            manifest, kind, name, wasi=wasi, runtime_version=runtime_version
        )
        write_manifest(publish_dir / MANIFEST_NAME, data)

        licensed = copy_license(root, publish_dir)
        if isinstance(licensed, Err):
            return licensed

        published = self._gate.publish(tag=tag, directory=publish_dir)
        if isinstance(published, Err):
            return published
        return Ok(publish_dir)
