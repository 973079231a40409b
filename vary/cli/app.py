from __future__ import annotations

import os
from pathlib import Path

import typer

from vary import __version__
from vary.cli.commands.init import init
from vary.cli.commands.napi_publish import napi_publish
from vary.cli.commands.release import release, release_only, release_quick, version_packages
from vary.cli.context import ENV_CWD
from vary.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands, then their short aliases
app.command("napi-publish")(napi_publish)
app.command("release")(release)
app.command("release:quick")(release_quick)
app.command("release:only")(release_only)
app.command("vp")(version_packages)
app.command("init")(init)

app.command("np", hidden=True)(napi_publish)
app.command("r", hidden=True)(release)
app.command("rq", hidden=True)(release_quick)
app.command("ro", hidden=True)(release_only)
app.command("version-packages", hidden=True)(version_packages)
app.command("i", hidden=True)(init)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    cwd: Path | None = typer.Option(
        None,
        "--cwd",
        help="Project root (defaults to the current directory)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if cwd is not None:
        root = cwd.expanduser()
        if not root.is_dir():
            typer.echo(f"error: --cwd '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ[ENV_CWD] = str(root.resolve())

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()
