"""Error presentation utilities.

Centralized error formatting and exit code mapping for the napi pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vary.core.errors import ErrorCode
from vary.output.console import Style
from vary.services.napi.errors import (
    BuildOutputMissing,
    CommandFailed,
    ConfigError,
    MissingEntryPoint,
    MissingLicense,
    MissingToken,
    NapiError,
    UnsupportedPlatform,
    UnsupportedTargets,
    UnsupportedToolVersion,
    WasiOutputMissing,
)

if TYPE_CHECKING:
    from vary.output.console import ConsoleProtocol

__all__ = ["format_napi_error", "print_napi_error", "napi_error_exit_code"]


def format_napi_error(error: NapiError) -> str:
    """One-line description of an error."""
    match error:
        case ConfigError(message=message):
            return message
        case UnsupportedTargets(unknown=unknown):
            return f"Not support compiling these platforms config: {', '.join(unknown)}"
        case UnsupportedToolVersion(tool=tool, version=version):
            return f"Unsupported {tool} version: {version} (expected 2.x or 3.x)"
        case UnsupportedPlatform(platform=platform, arch=arch):
            return f"Unsupported platform: {platform}-{arch}"
        case BuildOutputMissing(path=path):
            return f"The '{path}' dir does not exist. Please build first"
        case WasiOutputMissing(category=category, example=example):
            return f"Not found wasi {category} file, like \"{example}\""
        case MissingEntryPoint(path=path):
            return f"File not found: {path}"
        case MissingLicense(path=path):
            return f"LICENSE file is required in root dir: {path}"
        case MissingToken(env_var=env_var):
            return f"'{env_var}' env var is required to publish, please set it"
        case CommandFailed(command=command, returncode=rc):
            return f"{' '.join(command)} failed (exit {rc})"


def print_napi_error(error: NapiError, console: ConsoleProtocol) -> None:
    """Print an error with its follow-up details."""
    console.error(format_napi_error(error))
    match error:
        case ConfigError(hint=hint) if hint:
            console.print(f"hint: {hint}", Style.DIM)
        case UnsupportedTargets(supported=supported):
            console.print(f"Supported platforms: {', '.join(supported)}", Style.DIM)
        case BuildOutputMissing(hint=hint):
            console.print(f"hint: {hint}", Style.DIM)
        case MissingToken(npmrc=npmrc):
            console.print(f"hint: no auth token for the npm registry in {npmrc}", Style.DIM)
        case CommandFailed(detail=detail) if detail:
            console.print(detail.strip(), Style.DIM)
        case _:
            pass


def napi_error_exit_code(error: NapiError) -> int:
    match error:
        case ConfigError() | UnsupportedTargets():
            return int(ErrorCode.USER_ERROR)
        case UnsupportedToolVersion() | UnsupportedPlatform() | MissingToken():
            return int(ErrorCode.ENV_ERROR)
        case BuildOutputMissing() | WasiOutputMissing() | CommandFailed():
            return int(ErrorCode.BUILD_ERROR)
        case MissingEntryPoint() | MissingLicense():
            return int(ErrorCode.IO_ERROR)
