from __future__ import annotations

import typer

from shipline.cli.commands import _options
from shipline.cli.commands._helpers import exit_on_error
from shipline.cli.commands.stage_cmds import run_single_stage
from shipline.cli.context import build_context
from shipline.core.errors import ErrorCode
from shipline.git.repository import Repository
from shipline.output.console import Style
from shipline.services.release.model import NoRelease
from shipline.services.release.service import ReleaseService


def release(
    branch: str | None = _options.BRANCH,
    dry_run: bool = _options.DRY_RUN,
) -> None:
    """Cut a release from the commit history (if one is warranted)."""
    run_single_stage(build_context(), "release", branch=branch, dry_run=dry_run)


def next_version(
    branch: str | None = _options.BRANCH,
) -> None:
    """Print the version the native release tool would cut next."""
    ctx = build_context()
    branch = branch or Repository(ctx.project.root).current_branch()

    service = ReleaseService(
        project=ctx.project,
        config=ctx.config,
        console=ctx.console,
        environ=ctx.environ,
    )
    decision = exit_on_error(service.plan(branch=branch), ctx, ErrorCode.RELEASE_ERROR)

    if isinstance(decision, NoRelease):
        ctx.console.info(f"no release: {decision.reason}")
        return

    since = decision.last.tag if decision.last is not None else "(none)"
    ctx.console.print(f"last release: {since}", Style.DIM)
    ctx.console.print(f"commits: {len(decision.commits)}", Style.DIM)
    ctx.console.print(f"type: {decision.type}", Style.DIM)
    typer.echo(str(decision.version))
