from __future__ import annotations

import typer

from shipline.cli.context import build_context
from shipline.core.errors import ErrorCode
from shipline.output.console import Style
from shipline.services.checks import CheckStatus
from shipline.services.toolchain import ToolchainService


def check() -> None:
    """Check the toolchain the pipeline needs and suggest fixes."""
    ctx = build_context()
    console = ctx.console

    console.print(f"project: {ctx.project.root}", Style.DIM)
    console.print(f"target: {ctx.config.build.target}", Style.DIM)
    console.header("Toolchain")

    results = ToolchainService(project=ctx.project, config=ctx.config, console=console).check_all()
    for r in results:
        style = {
            CheckStatus.OK: Style.SUCCESS,
            CheckStatus.WARNING: Style.WARNING,
            CheckStatus.ERROR: Style.ERROR,
        }[r.status]
        console.print(f"{r.name}: {r.message}", style)
        if r.hint and r.status != CheckStatus.OK:
            console.print(f"hint: {r.hint}", Style.DIM)

    if any(r.is_error for r in results):
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
