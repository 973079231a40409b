"""Host OS and CPU detection.

Only used to pick a prebuilt binaryen archive, so anything outside
linux/macos/windows on x64/arm64 maps to UNKNOWN.
"""

from __future__ import annotations

import os
import platform as _platform
import sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache

__all__ = ["Platform", "Arch", "PlatformInfo", "parse_host", "detect"]


class Platform(Enum):
    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Arch(Enum):
    X64 = auto()
    ARM64 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    platform: Platform
    arch: Arch

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


_SYSTEMS = (
    (("linux",), Platform.LINUX),
    (("darwin",), Platform.MACOS),
    (("win32", "cygwin", "msys"), Platform.WINDOWS),
)

_MACHINES = {
    "x86_64": Arch.X64,
    "amd64": Arch.X64,
    "aarch64": Arch.ARM64,
    "arm64": Arch.ARM64,
}


def parse_host(system: str, machine: str) -> PlatformInfo:
    """Map a ``sys.platform`` value and a machine name to a PlatformInfo."""
    system = system.lower()
    found = next(
        (p for prefixes, p in _SYSTEMS if system.startswith(prefixes)),
        Platform.UNKNOWN,
    )
    return PlatformInfo(found, _MACHINES.get(machine.lower(), Arch.UNKNOWN))


@lru_cache(maxsize=1)
def detect() -> PlatformInfo:
    """Host platform (cached)."""
    machine = _platform.machine()
    if sys.platform == "win32":
        # 32-bit python on 64-bit windows reports the emulated machine
        machine = os.environ.get("PROCESSOR_ARCHITEW6432") or machine
    return parse_host(sys.platform, machine)
