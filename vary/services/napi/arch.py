"""Architecture catalog.

One entry per platform that gets its own npm sub-package. The platform key
is both the directory name under ``npm/`` and the package-name suffix; the
target triple is the Rust target napi builds for it.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "ArchDescriptor",
    "ARCHITECTURES",
    "lookup",
    "by_target",
    "all_target_triples",
    "select",
]


@dataclass(frozen=True, slots=True)
class ArchDescriptor:
    """Static metadata for one platform.

    Attributes:
        key: Platform key, e.g. "darwin-arm64".
        description: Human readable name used in README/description.
        os: package.json ``os`` constraint.
        cpu: package.json ``cpu`` constraint.
        target: Rust target triple.
    """

    key: str
    description: str
    os: tuple[str, ...]
    cpu: tuple[str, ...]
    target: str

    def stub_manifest(self) -> dict[str, object]:
        return {"os": list(self.os), "cpu": list(self.cpu)}


ARCHITECTURES: tuple[ArchDescriptor, ...] = (
    ArchDescriptor("darwin-arm64", "macOS ARM 64-bit", ("darwin",), ("arm64",), "aarch64-apple-darwin"),
    ArchDescriptor("darwin-x64", "macOS 64-bit", ("darwin",), ("x64",), "x86_64-apple-darwin"),
    ArchDescriptor(
        "linux-arm-gnueabihf",
        "Linux ARM 32-bit",
        ("linux",),
        ("arm",),
        "armv7-unknown-linux-gnueabihf",
    ),
    ArchDescriptor(
        "linux-arm64-gnu", "Linux ARM 64-bit", ("linux",), ("arm64",), "aarch64-unknown-linux-gnu"
    ),
    ArchDescriptor(
        "linux-arm64-musl",
        "Linux ARM 64-bit (musl)",
        ("linux",),
        ("arm64",),
        "aarch64-unknown-linux-musl",
    ),
    ArchDescriptor("linux-x64-gnu", "Linux 64-bit", ("linux",), ("x64",), "x86_64-unknown-linux-gnu"),
    ArchDescriptor(
        "linux-x64-musl", "Linux 64-bit (musl)", ("linux",), ("x64",), "x86_64-unknown-linux-musl"
    ),
    ArchDescriptor(
        "win32-arm64-msvc", "Windows ARM 64-bit", ("win32",), ("arm64",), "aarch64-pc-windows-msvc"
    ),
    ArchDescriptor("win32-x64-msvc", "Windows 64-bit", ("win32",), ("x64",), "x86_64-pc-windows-msvc"),
)

_BY_KEY = {a.key: a for a in ARCHITECTURES}
_BY_TARGET = {a.target: a for a in ARCHITECTURES}


def lookup(key: str) -> ArchDescriptor | None:
    return _BY_KEY.get(key)


def by_target(target: str) -> ArchDescriptor | None:
    return _BY_TARGET.get(target)


def all_target_triples() -> frozenset[str]:
    return frozenset(_BY_TARGET)


def select(targets: tuple[str, ...] | list[str]) -> list[ArchDescriptor]:
    """Catalog entries for the given triples, in catalog order.

    Unknown triples are ignored; validate them first.
    """
    wanted = set(targets)
    return [a for a in ARCHITECTURES if a.target in wanted]
