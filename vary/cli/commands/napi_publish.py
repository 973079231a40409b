"""napi-publish command - release napi platform, root and wasm packages."""

from __future__ import annotations

from pathlib import Path

import typer

from vary.cli.commands._helpers import exit_on_error
from vary.cli.context import build_context
from vary.services.napi.service import NapiPublishOptions, NapiPublishService, ReleaseMode


def napi_publish(
    path: Path | None = typer.Argument(
        None,
        help="Wasm file or directory to optimize (with --wasm-opt)",
        show_default=False,
    ),
    root: bool = typer.Option(False, "--root", help="Publish the root package from dist/"),
    wasm: bool = typer.Option(False, "--wasm", help="Publish the node wasm fallback package"),
    wasm_web: bool = typer.Option(False, "--wasm-web", help="Publish the web wasm package"),
    napi_wasm: bool = typer.Option(
        False, "--napi-wasm", help="Publish the napi wasi package (node and web)"
    ),
    wasm_opt: bool = typer.Option(False, "--wasm-opt", help="Only run wasm-opt on wasm outputs"),
    tag: str | None = typer.Option(None, "--tag", help="npm dist-tag", show_default=False),
) -> None:
    """Publish napi packages. Without flags, publish every npm/<platform> package."""
    ctx = build_context()

    if path is not None and not wasm_opt:
        ctx.console.warning(f"Ignoring '{path}': only used with --wasm-opt")

    wasm_opt_path: Path | None = None
    if wasm_opt and path is not None:
        p = path.expanduser()
        wasm_opt_path = p if p.is_absolute() else ctx.root / p

    options = NapiPublishOptions(
        root=root,
        wasm=wasm,
        wasm_web=wasm_web,
        napi_wasm=napi_wasm,
        wasm_opt=wasm_opt,
        wasm_opt_path=wasm_opt_path,
        tag=tag,
    )
    service = NapiPublishService(
        root=ctx.root,
        settings=ctx.settings,
        runner=ctx.runner,
        console=ctx.console,
    )
    result = service.publish(options)
    exit_on_error(result, ctx)

    if result.unwrap() is not ReleaseMode.WASM_OPT:
        ctx.console.success("Published")
