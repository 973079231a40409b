"""Optional wasm-opt pass over wasm build outputs.

The pass downloads binaryen once into ``target/.wasm-cache`` and shrinks every
discovered ``.wasm`` file in place with ``-Oz``. It is polish only: any
failure is reported as a warning and the release continues.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from vary.core.config import Settings
from vary.core.result import Err, Ok, Result
from vary.output.console import ConsoleProtocol, Style
from vary.output.errors import format_napi_error
from vary.platform.detection import PlatformInfo
from vary.platform.process import Runner
from vary.tools.binaryen import BinaryenTool
from vary.tools.download import Downloader
from vary.tools.http import HttpClient, HttpError
from vary.tools.installer import InstallError, extract_tar_gz

from .commands import run_command
from .errors import CommandFailed, ConfigError, UnsupportedPlatform

WASM_OPT_SECTION = "[package.metadata.wasm-pack.profile.release]"
DEFAULT_WASM_DIRS = ("target/wasm", "target/wasm_web")
CACHE_DIR = "target/.wasm-cache"
_WORKSPACE_WASM_CRATES = ("crates/binding_wasm/Cargo.toml", "crates/wasm/Cargo.toml")

_OptError = ConfigError | UnsupportedPlatform | CommandFailed | HttpError | InstallError


def _describe(error: _OptError) -> str:
    if isinstance(error, HttpError | InstallError):
        return str(error)
    return format_napi_error(error)


def collect_wasm_files(root: Path, path: Path | None) -> Result[list[Path], ConfigError]:
    """Resolve the .wasm files to optimize.

    With no path, the conventional build dirs are scanned. A directory
    contributes its direct ``.wasm`` children; a file is taken as is.
    """
    if path is not None and not path.exists():
        return Err(ConfigError("--wasm-opt", f"The specified wasm file or dir does not exist: {path}"))

    if path is None:
        dirs = [root / d for d in DEFAULT_WASM_DIRS]
    elif path.is_dir():
        dirs = [path]
    else:
        dirs = []

    files: list[Path] = []
    for d in dirs:
        if not d.is_dir():
            continue
        files.extend(sorted(p for p in d.iterdir() if p.is_file() and p.name.endswith(".wasm")))

    if path is not None and path.is_file():
        files.append(path)
    return Ok(files)


def wasm_pack_toml(root: Path) -> Path | None:
    """The Cargo.toml that configures wasm-pack, if any."""
    root_toml = root / "Cargo.toml"
    if not root_toml.exists():
        return None
    if "[workspace]" not in root_toml.read_text(encoding="utf-8"):
        return root_toml
    for rel in _WORKSPACE_WASM_CRATES:
        candidate = root / rel
        if candidate.exists():
            return candidate
    return None


def needs_wasm_pack_tip(toml_path: Path) -> bool:
    content = toml_path.read_text(encoding="utf-8")
    return not (WASM_OPT_SECTION in content and "wasm-opt" in content)


class WasmOptimizer:
    """Runs binaryen's wasm-opt over wasm outputs."""

    def __init__(
        self,
        *,
        root: Path,
        settings: Settings,
        runner: Runner,
        console: ConsoleProtocol,
        http: HttpClient,
        platform: PlatformInfo,
        tool: BinaryenTool | None = None,
    ) -> None:
        self._root = root
        self._settings = settings
        self._runner = runner
        self._console = console
        self._http = http
        self._platform = platform
        self._tool = tool or BinaryenTool()

    @property
    def cache_dir(self) -> Path:
        return self._root / CACHE_DIR

    def optimize(self, path: Path | None = None) -> list[Path]:
        """Optimize wasm files in place. Never fails; returns the optimized files."""
        self._console.info("Start wasm opt ...")
        optimized: list[Path] = []
        try:
            self._advise()
            result = self._run(path)
        except Exception as e:
            self._console.warning(f"Wasm opt failed, Error: {e}")
        else:
            match result:
                case Ok(files):
                    optimized = files
                case Err(error):
                    self._console.warning(f"Wasm opt failed, Error: {_describe(error)}")

        self._console.info("Wasm opt done")
        return optimized

    def _advise(self) -> None:
        # wasm-pack runs its own (older) wasm-opt unless told not to:
        # https://github.com/rustwasm/wasm-pack/issues/864#issuecomment-957818452
        if self._settings.skip_wasm_opt_tips:
            return
        toml_path = wasm_pack_toml(self._root)
        if toml_path is None or not needs_wasm_pack_tip(toml_path):
            return
        rel = toml_path.relative_to(self._root)
        self._console.newline()
        self._console.print(f"Cannot find the 'wasm-opt' config in {rel}, please set:")
        self._console.print(WASM_OPT_SECTION, Style.WARNING)
        self._console.print("wasm-opt = false", Style.WARNING)
        self._console.newline()

    def _run(self, path: Path | None) -> Result[list[Path], _OptError]:
        if self._settings.skip_wasm_opt:
            return Ok([])

        collected = collect_wasm_files(self._root, path)
        if isinstance(collected, Err):
            return collected
        files = collected.value
        if not files:
            self._console.print("Cannot find wasm file, skip wasm-opt")
            return Ok([])
        for f in files:
            self._console.print(f"Wasm-opt: {_display(self._root, f)}")

        binary = self._ensure_tool()
        if isinstance(binary, Err):
            return binary

        self._console.print("Optimizing")
        wasm_opt = binary.value

        def _optimize(f: Path) -> Result[None, CommandFailed]:
            return run_command(self._runner, [str(wasm_opt), "-Oz", "-o", str(f), str(f)], cwd=self._root)

        with ThreadPoolExecutor(max_workers=len(files)) as pool:
            results = list(pool.map(_optimize, files))

        for r in results:
            if isinstance(r, Err):
                return r
        return Ok(files)

    def _ensure_tool(self) -> Result[Path, _OptError]:
        info = self._platform
        url = self._tool.download_url(info.platform, info.arch)
        if url is None:
            return Err(UnsupportedPlatform(platform=str(info.platform), arch=str(info.arch)))

        self._console.print(f"Platform: {info.platform}", Style.DIM)
        self._console.print(f"Arch: {info.arch}", Style.DIM)
        self._console.print(f"Version: {self._tool.version}", Style.DIM)
        self._console.print(f"URL: {url}", Style.DIM)

        if self._tool.is_installed(self.cache_dir):
            return Ok(self._tool.bin_path(self.cache_dir))

        self._console.print(f"Downloading {url}")
        downloaded = Downloader(self._http, self.cache_dir / "downloads").fetch(url)
        if isinstance(downloaded, Err):
            return downloaded

        archive = downloaded.value
        self._console.print(f"Unzip {archive.name}")
        installed = extract_tar_gz(
            archive,
            self._tool.install_dir(self.cache_dir),
            strip_components=1,
        )
        if isinstance(installed, Err):
            return installed

        bin_path = self._tool.bin_path(self.cache_dir)
        if not bin_path.exists():
            return Err(InstallError(archive, "wasm-opt not found in archive"))
        return Ok(bin_path)


def _display(root: Path, path: Path) -> str:
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)
