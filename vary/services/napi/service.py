"""napi-publish orchestration.

Picks exactly one release mode from the options and runs it:

- ``wasm_opt``: optimize wasm files only, no manifest needed
- ``root``: publish the root package from ``dist``
- ``wasm`` / ``napi_wasm``: publish the node or wasi wasm fallback package
- ``wasm_web``: publish the browser wasm package
- otherwise: patch and publish every ``npm/<key>`` platform package

Manifest validation, target validation and stub directory generation run
before any mode except ``wasm_opt``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from vary.core.config import Settings
from vary.core.result import Err, Ok, Result
from vary.output.console import ConsoleProtocol
from vary.platform.detection import PlatformInfo, detect
from vary.platform.process import Runner
from vary.tools.http import HttpClient, RealHttpClient

from .arch import select
from .errors import ConfigError, NapiError
from .manifest import (
    NormalizedNapiConfig,
    RootManifest,
    detect_napi_cli_version,
    load_root_manifest,
    normalize_napi_config,
    require_release_fields,
    validate_targets,
)
from .publish import PublishGate
from .root_release import RootRelease
from .stubs import ensure_stub_directories
from .subpackages import SubpackageRelease
from .wasm_opt import WasmOptimizer
from .wasm_release import WasmKind, WasmRelease


class ReleaseMode(Enum):
    WASM_OPT = "wasm-opt"
    ROOT = "root"
    WASM = "wasm"
    NAPI_WASM = "napi-wasm"
    WASM_WEB = "wasm-web"
    SUBPACKAGES = "subpackages"


@dataclass(frozen=True, slots=True)
class NapiPublishOptions:
    root: bool = False
    wasm: bool = False
    wasm_web: bool = False
    napi_wasm: bool = False
    wasm_opt: bool = False
    wasm_opt_path: Path | None = None
    tag: str | None = None


def select_mode(options: NapiPublishOptions) -> Result[ReleaseMode, ConfigError]:
    """Resolve the flags to one mode: wasm-opt > root > wasm/napi-wasm > wasm-web."""
    if options.wasm and options.napi_wasm:
        return Err(ConfigError("--napi-wasm", "You cannot use --wasm and --napi-wasm together"))
    if options.wasm_opt:
        return Ok(ReleaseMode.WASM_OPT)
    if options.root:
        return Ok(ReleaseMode.ROOT)
    if options.wasm:
        return Ok(ReleaseMode.WASM)
    if options.napi_wasm:
        return Ok(ReleaseMode.NAPI_WASM)
    if options.wasm_web:
        return Ok(ReleaseMode.WASM_WEB)
    return Ok(ReleaseMode.SUBPACKAGES)


@dataclass(frozen=True, slots=True)
class PreparedRelease:
    manifest: RootManifest
    config: NormalizedNapiConfig
    created_stubs: tuple[Path, ...]


class NapiPublishService:
    def __init__(
        self,
        *,
        root: Path,
        settings: Settings,
        runner: Runner,
        console: ConsoleProtocol,
        http: HttpClient | None = None,
        platform: PlatformInfo | None = None,
    ) -> None:
        self._root = root
        self._settings = settings
        self._runner = runner
        self._console = console
        self._gate = PublishGate(root=root, settings=settings, runner=runner, console=console)
        self._optimizer = WasmOptimizer(
            root=root,
            settings=settings,
            runner=runner,
            console=console,
            http=http or RealHttpClient(),
            platform=platform or detect(),
        )

    def prepare(self) -> Result[PreparedRelease, NapiError]:
        """Load and validate the root manifest, then make sure stub dirs exist."""
        loaded = load_root_manifest(self._root)
        if isinstance(loaded, Err):
            return loaded
        manifest = loaded.value

        required = require_release_fields(manifest)
        if isinstance(required, Err):
            return required

        version = detect_napi_cli_version(manifest)
        if isinstance(version, Err):
            return version
        self._console.print(f"napi cli: {version.value}")

        normalized = normalize_napi_config(manifest, version.value)
        if isinstance(normalized, Err):
            return normalized
        config = normalized.value

        targets = validate_targets(config.targets)
        if isinstance(targets, Err):
            return targets

        created = ensure_stub_directories(self._root, select(targets.value), console=self._console)
        return Ok(PreparedRelease(manifest, config, tuple(created)))

    def publish(self, options: NapiPublishOptions) -> Result[ReleaseMode, NapiError]:
        mode = select_mode(options)
        if isinstance(mode, Err):
            return mode

        if mode.value is ReleaseMode.WASM_OPT:
            self._optimizer.optimize(options.wasm_opt_path)
            return mode

        prepared = self.prepare()
        if isinstance(prepared, Err):
            return prepared
        manifest, config = prepared.value.manifest, prepared.value.config

        result: Result[object, NapiError]

        match mode.value:
            case ReleaseMode.ROOT:
                result = RootRelease(
                    manifest=manifest,
                    config=config,
                    runner=self._runner,
                    console=self._console,
                    gate=self._gate,
                ).run(tag=options.tag)
            case ReleaseMode.WASM | ReleaseMode.NAPI_WASM | ReleaseMode.WASM_WEB:
                result = WasmRelease(
                    manifest=manifest,
                    config=config,
                    runner=self._runner,
                    console=self._console,
                    gate=self._gate,
                    optimizer=self._optimizer,
                ).run(_WASM_KINDS[mode.value], tag=options.tag)
            case _:
                result = SubpackageRelease(
                    manifest=manifest,
                    config=config,
                    runner=self._runner,
                    console=self._console,
                    gate=self._gate,
                ).run(tag=options.tag)

        if isinstance(result, Err):
            return result
        return mode


_WASM_KINDS = {
    ReleaseMode.WASM: WasmKind.NODE,
    ReleaseMode.NAPI_WASM: WasmKind.WASI,
    ReleaseMode.WASM_WEB: WasmKind.WEB,
}
