"""Changesets release commands."""

from __future__ import annotations

import typer

from vary.cli.commands._helpers import exit_on_error
from vary.cli.context import CLIContext, build_context
from vary.services.changesets import ChangesetsService

_TAG = typer.Option(None, "--tag", help="npm dist-tag", show_default=False)


def _service(ctx: CLIContext) -> ChangesetsService:
    return ChangesetsService(
        root=ctx.root, settings=ctx.settings, runner=ctx.runner, console=ctx.console
    )


def release(tag: str | None = _TAG) -> None:
    """Build all packages, then publish them to npm."""
    ctx = build_context()
    exit_on_error(_service(ctx).release(tag=tag), ctx)


def release_only(tag: str | None = _TAG) -> None:
    """Publish with changesets to the npm registry."""
    ctx = build_context()
    exit_on_error(_service(ctx).release_only(tag=tag), ctx)


def release_quick(tag: str | None = _TAG) -> None:
    """Bump versions, then publish."""
    ctx = build_context()
    svc = _service(ctx)
    exit_on_error(svc.release_quick(tag=tag), ctx)


def version_packages() -> None:
    """Bump package versions from pending changesets."""
    ctx = build_context()
    exit_on_error(_service(ctx).version_packages(), ctx)
