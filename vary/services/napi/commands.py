"""External commands wrapped by the napi release pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from vary.core.result import Err, Ok, Result
from vary.platform.process import Runner

from .errors import CommandFailed

BUILD = ["pnpm", "build"]
BUILD_WASM = ["pnpm", "build:wasm"]
BUILD_WASM_WEB = ["pnpm", "build:wasm:web"]
REINSTALL = ["pnpm", "i", "--no-frozen-lockfile"]


def run_command(
    runner: Runner,
    cmd: list[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[None, CommandFailed]:
    result = runner.run(cmd, cwd=cwd, env=env)
    if isinstance(result, Err):
        error = result.error
        return Err(CommandFailed(command=error.command, returncode=error.returncode, detail=error.stderr))
    return Ok(None)
