"""Tests for the wasm-opt pass."""

from __future__ import annotations

import http.client
import io
import tarfile
from pathlib import Path

from vary.core.config import Settings
from vary.core.result import Err, Ok
from vary.output.console import MockConsole
from vary.platform.detection import Arch, Platform, PlatformInfo
from vary.platform.process import MockRunner
from vary.services.napi.wasm_opt import (
    WasmOptimizer,
    collect_wasm_files,
    needs_wasm_pack_tip,
    wasm_pack_toml,
)
from vary.tools.binaryen import BinaryenTool
from vary.tools.http import HttpClient, HttpError, MockHttpClient

LINUX_X64 = PlatformInfo(Platform.LINUX, Arch.X64)
URL = BinaryenTool().download_url(Platform.LINUX, Arch.X64) or ""


def _binaryen_archive() -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        content = b"#!/bin/sh\n"
        info = tarfile.TarInfo(name="binaryen-version_116/bin/wasm-opt")
        info.size = len(content)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def _install_fake_tool(root: Path) -> Path:
    bin_path = BinaryenTool().bin_path(root / "target" / ".wasm-cache")
    bin_path.parent.mkdir(parents=True)
    bin_path.write_bytes(b"")
    return bin_path


def _optimizer(
    root: Path,
    *,
    runner: MockRunner | None = None,
    http: HttpClient | None = None,
    platform: PlatformInfo = LINUX_X64,
    settings: Settings | None = None,
    console: MockConsole | None = None,
) -> WasmOptimizer:
    return WasmOptimizer(
        root=root,
        settings=settings or Settings(home=root, skip_wasm_opt_tips=True),
        runner=runner or MockRunner(),
        console=console or MockConsole(),
        http=http or MockHttpClient(),
        platform=platform,
    )


class TestCollectWasmFiles:
    def test_default_dirs(self, tmp_path: Path) -> None:
        (tmp_path / "target" / "wasm").mkdir(parents=True)
        (tmp_path / "target" / "wasm_web").mkdir(parents=True)
        (tmp_path / "target" / "wasm" / "a.wasm").write_bytes(b"")
        (tmp_path / "target" / "wasm" / "a.js").write_bytes(b"")
        (tmp_path / "target" / "wasm_web" / "b.wasm").write_bytes(b"")

        result = collect_wasm_files(tmp_path, None)

        assert result == Ok(
            [tmp_path / "target" / "wasm" / "a.wasm", tmp_path / "target" / "wasm_web" / "b.wasm"]
        )

    def test_direct_children_only(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "deep.wasm").write_bytes(b"")
        (tmp_path / "top.wasm").write_bytes(b"")

        assert collect_wasm_files(tmp_path, tmp_path) == Ok([tmp_path / "top.wasm"])

    def test_single_file(self, tmp_path: Path) -> None:
        wasm = tmp_path / "x.wasm"
        wasm.write_bytes(b"")
        assert collect_wasm_files(tmp_path, wasm) == Ok([wasm])

    def test_missing_path(self, tmp_path: Path) -> None:
        result = collect_wasm_files(tmp_path, tmp_path / "nope")
        assert isinstance(result, Err)


class TestAdvisory:
    def test_no_cargo_toml(self, tmp_path: Path) -> None:
        assert wasm_pack_toml(tmp_path) is None

    def test_single_crate(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("[package]\nname = 'demo'\n", encoding="utf-8")
        assert wasm_pack_toml(tmp_path) == tmp_path / "Cargo.toml"

    def test_workspace_prefers_binding_wasm(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("[workspace]\nmembers = []\n", encoding="utf-8")
        for rel in ("crates/binding_wasm", "crates/wasm"):
            (tmp_path / rel).mkdir(parents=True)
            (tmp_path / rel / "Cargo.toml").write_text("", encoding="utf-8")
        assert wasm_pack_toml(tmp_path) == tmp_path / "crates/binding_wasm/Cargo.toml"

    def test_workspace_without_wasm_crate(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("[workspace]\n", encoding="utf-8")
        assert wasm_pack_toml(tmp_path) is None

    def test_needs_tip(self, tmp_path: Path) -> None:
        toml = tmp_path / "Cargo.toml"
        toml.write_text("[package]\n", encoding="utf-8")
        assert needs_wasm_pack_tip(toml)
        toml.write_text(
            "[package.metadata.wasm-pack.profile.release]\nwasm-opt = false\n", encoding="utf-8"
        )
        assert not needs_wasm_pack_tip(toml)

    def test_tip_printed(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("[package]\n", encoding="utf-8")
        console = MockConsole()
        optimizer = _optimizer(tmp_path, settings=Settings(home=tmp_path), console=console)

        optimizer.optimize()

        assert console.find("[package.metadata.wasm-pack.profile.release]")
        assert console.find("wasm-opt = false")

    def test_tip_suppressed(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("[package]\n", encoding="utf-8")
        console = MockConsole()

        _optimizer(tmp_path, console=console).optimize()

        assert not console.find("wasm-opt = false")


class TestOptimize:
    def test_no_files_no_download(self, tmp_path: Path) -> None:
        """A directory without .wasm files never fetches binaryen."""
        build = tmp_path / "target" / "wasm"
        build.mkdir(parents=True)
        (build / "index.js").write_bytes(b"")
        http = MockHttpClient()
        runner = MockRunner()

        optimized = _optimizer(tmp_path, http=http, runner=runner).optimize(build)

        assert optimized == []
        assert http.calls == []
        assert runner.commands == []

    def test_skip_env(self, tmp_path: Path) -> None:
        build = tmp_path / "target" / "wasm"
        build.mkdir(parents=True)
        (build / "a.wasm").write_bytes(b"")
        runner = MockRunner()
        settings = Settings(home=tmp_path, skip_wasm_opt=True, skip_wasm_opt_tips=True)

        assert _optimizer(tmp_path, runner=runner, settings=settings).optimize(build) == []
        assert runner.commands == []

    def test_runs_each_file_in_place(self, tmp_path: Path) -> None:
        bin_path = _install_fake_tool(tmp_path)
        build = tmp_path / "target" / "wasm"
        build.mkdir(parents=True)
        files = [build / "a.wasm", build / "b.wasm"]
        for f in files:
            f.write_bytes(b"")
        runner = MockRunner()

        optimized = _optimizer(tmp_path, runner=runner).optimize(build)

        assert optimized == files
        assert sorted(runner.commands) == [
            [str(bin_path), "-Oz", "-o", str(f), str(f)] for f in files
        ]

    def test_downloads_and_installs_tool(self, tmp_path: Path) -> None:
        wasm = tmp_path / "a.wasm"
        wasm.write_bytes(b"")
        http = MockHttpClient()
        http.set_download(URL, _binaryen_archive())
        runner = MockRunner()

        optimized = _optimizer(tmp_path, http=http, runner=runner).optimize(wasm)

        assert optimized == [wasm]
        assert http.calls == [URL]
        assert BinaryenTool().is_installed(tmp_path / "target" / ".wasm-cache")
        assert runner.commands[0][0].endswith("wasm-opt")

    def test_unsupported_platform_is_warning(self, tmp_path: Path) -> None:
        wasm = tmp_path / "a.wasm"
        wasm.write_bytes(b"")
        console = MockConsole()
        windows = PlatformInfo(Platform.WINDOWS, Arch.X64)

        optimized = _optimizer(tmp_path, platform=windows, console=console).optimize(wasm)

        assert optimized == []
        assert console.has_warning()
        assert console.find("Unsupported platform")

    def test_download_failure_is_warning(self, tmp_path: Path) -> None:
        wasm = tmp_path / "a.wasm"
        wasm.write_bytes(b"")
        console = MockConsole()

        optimized = _optimizer(tmp_path, console=console).optimize(wasm)

        assert optimized == []
        assert console.has_warning()
        assert not console.has_error()

    def test_wasm_opt_failure_is_warning(self, tmp_path: Path) -> None:
        bin_path = _install_fake_tool(tmp_path)
        wasm = tmp_path / "a.wasm"
        wasm.write_bytes(b"")
        console = MockConsole()
        runner = MockRunner()
        runner.fail([str(bin_path), "-Oz", "-o", str(wasm), str(wasm)])

        optimized = _optimizer(tmp_path, runner=runner, console=console).optimize(wasm)

        assert optimized == []
        assert console.find("Wasm opt failed")

    def test_missing_path_is_warning(self, tmp_path: Path) -> None:
        console = MockConsole()
        _optimizer(tmp_path, console=console).optimize(tmp_path / "missing.wasm")
        assert console.has_warning()

    def test_unreadable_cargo_toml_is_warning(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_bytes(b"[package]\nname = \"caf\xe9\"\n")
        console = MockConsole()
        settings = Settings(home=tmp_path)

        optimized = _optimizer(tmp_path, settings=settings, console=console).optimize()

        assert optimized == []
        assert console.find("Wasm opt failed")
        assert console.find("Wasm opt done")

    def test_dropped_connection_is_warning(self, tmp_path: Path) -> None:
        class DroppingClient:
            def download(self, url: str, dest: Path) -> Ok[Path] | Err[HttpError]:
                raise http.client.IncompleteRead(b"partial", 100)

        wasm = tmp_path / "a.wasm"
        wasm.write_bytes(b"")
        console = MockConsole()

        optimized = _optimizer(tmp_path, http=DroppingClient(), console=console).optimize(wasm)

        assert optimized == []
        assert console.find("Wasm opt failed")
        assert not console.has_error()
