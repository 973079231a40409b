from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from vary.core.config import Settings, load_settings
from vary.core.errors import ErrorCode
from vary.output.console import ConsoleProtocol, RichConsole
from vary.platform.process import CommandRunner, Runner

ENV_CWD = "VARY_CWD"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    settings: Settings
    console: ConsoleProtocol
    runner: Runner


def _resolve_root() -> Path:
    override = os.environ.get(ENV_CWD)
    root = Path(override).expanduser() if override else Path.cwd()
    try:
        return root.resolve()
    except OSError as e:
        typer.echo(f"error: invalid project root: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))


def build_context() -> CLIContext:
    root = _resolve_root()
    if not root.is_dir():
        typer.echo(f"error: project root '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    settings = load_settings()
    console = RichConsole()
    return CLIContext(
        root=root,
        settings=settings,
        console=console,
        runner=CommandRunner(console=console, debug=settings.debug),
    )
