from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ConfigError:
    """A package.json field (or flag combination) is missing or malformed."""

    field: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class UnsupportedTargets:
    unknown: tuple[str, ...]
    supported: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class UnsupportedToolVersion:
    tool: str
    version: str


@dataclass(frozen=True, slots=True)
class UnsupportedPlatform:
    platform: str
    arch: str


@dataclass(frozen=True, slots=True)
class BuildOutputMissing:
    path: Path
    hint: str


@dataclass(frozen=True, slots=True)
class WasiOutputMissing:
    category: str
    example: str


@dataclass(frozen=True, slots=True)
class MissingEntryPoint:
    path: Path


@dataclass(frozen=True, slots=True)
class MissingLicense:
    path: Path


@dataclass(frozen=True, slots=True)
class MissingToken:
    env_var: str
    npmrc: Path


@dataclass(frozen=True, slots=True)
class CommandFailed:
    command: tuple[str, ...]
    returncode: int
    detail: str = ""


NapiError = (
    ConfigError
    | UnsupportedTargets
    | UnsupportedToolVersion
    | UnsupportedPlatform
    | BuildOutputMissing
    | WasiOutputMissing
    | MissingEntryPoint
    | MissingLicense
    | MissingToken
    | CommandFailed
)
