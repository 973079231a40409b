"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from vary.core.result import Err, Result
from vary.output.errors import napi_error_exit_code, print_napi_error
from vary.services.napi.errors import NapiError

if TYPE_CHECKING:
    from vary.cli.context import CLIContext

T = TypeVar("T")


def exit_on_error(result: Result[T, NapiError], ctx: CLIContext) -> None:
    """Print the error and exit with its code if result is Err, otherwise return."""
    if isinstance(result, Err):
        error = result.error
        print_napi_error(error, ctx.console)
        raise typer.Exit(code=napi_error_exit_code(error))
