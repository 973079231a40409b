"""Init command - add vary shortcut scripts to package.json."""

from __future__ import annotations

from vary.cli.commands._helpers import exit_on_error
from vary.cli.context import build_context
from vary.services.changesets import ChangesetsService


def init() -> None:
    """Add the release shortcut scripts to package.json."""
    ctx = build_context()
    svc = ChangesetsService(
        root=ctx.root, settings=ctx.settings, runner=ctx.runner, console=ctx.console
    )
    result = svc.init()
    exit_on_error(result, ctx)
    if not result.unwrap():
        ctx.console.print("Nothing to add")
