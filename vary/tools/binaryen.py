"""Binaryen (wasm-opt) release definition.

Prebuilt archives are published on GitHub for macOS and Linux on x86_64 and
arm64 only:

    binaryen-<version>-<arch>-<os>.tar.gz
    └── binaryen-<version>/bin/wasm-opt

GitHub: https://github.com/WebAssembly/binaryen
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from vary.platform.detection import Arch, Platform

__all__ = ["BinaryenTool", "BINARYEN_VERSION"]

BINARYEN_VERSION = "version_116"


@dataclass(frozen=True, slots=True)
class BinaryenTool:
    version: str = BINARYEN_VERSION
    repo: str = "WebAssembly/binaryen"

    def os_mark(self, platform: Platform) -> str | None:
        match platform:
            case Platform.MACOS:
                return "macos"
            case Platform.LINUX:
                return "linux"
            case _:
                return None

    def arch_mark(self, arch: Arch) -> str | None:
        match arch:
            case Arch.X64:
                return "x86_64"
            case Arch.ARM64:
                return "arm64"
            case _:
                return None

    def download_url(self, platform: Platform, arch: Arch) -> str | None:
        """Release archive URL, or None when no prebuilt exists for the host."""
        os_mark = self.os_mark(platform)
        arch_mark = self.arch_mark(arch)
        if os_mark is None or arch_mark is None:
            return None
        asset = f"binaryen-{self.version}-{arch_mark}-{os_mark}.tar.gz"
        return f"https://github.com/{self.repo}/releases/download/{self.version}/{asset}"

    def install_dir(self, cache_dir: Path) -> Path:
        return cache_dir / f"binaryen-{self.version}"

    def bin_path(self, cache_dir: Path) -> Path:
        return self.install_dir(cache_dir) / "bin" / "wasm-opt"

    def is_installed(self, cache_dir: Path) -> bool:
        return self.bin_path(cache_dir).exists()
