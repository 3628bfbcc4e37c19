"""Single-stage commands: run one stage outside a full pipeline run."""

from __future__ import annotations

import typer

from shipline.cli.commands import _options
from shipline.cli.context import CLIContext, build_context
from shipline.git.repository import Repository
from shipline.pipeline.events import resolve_run_id
from shipline.pipeline.model import RunPlan, StageName, TriggerEvent
from shipline.pipeline.runner import PipelineRunner, RunContext
from shipline.pipeline.stages import default_handlers


def run_single_stage(
    ctx: CLIContext,
    stage: StageName,
    *,
    branch: str | None = None,
    dry_run: bool = False,
) -> None:
    branch = branch or Repository(ctx.project.root).current_branch()
    plan = RunPlan(
        event=TriggerEvent(kind="workflow_dispatch", branch=branch),
        should_run=True,
        reason=f"{stage} only",
        stages=(stage,),
    )
    run_ctx = RunContext(
        project=ctx.project,
        config=ctx.config,
        console=ctx.console,
        run_id=resolve_run_id(ctx.environ),
        plan=plan,
        environ=ctx.environ,
        dry_run=dry_run,
    )
    report = PipelineRunner(handlers=default_handlers()).run(run_ctx)
    if not report.succeeded:
        raise typer.Exit(code=int(report.exit_code))


def build(dry_run: bool = _options.DRY_RUN) -> None:
    """Compile the release binary for the configured target."""
    run_single_stage(build_context(), "build", dry_run=dry_run)


def lint(dry_run: bool = _options.DRY_RUN) -> None:
    """Run clippy; any diagnostic fails."""
    run_single_stage(build_context(), "lint", dry_run=dry_run)


def artifact(dry_run: bool = _options.DRY_RUN) -> None:
    """Publish the built binary as a run artifact."""
    run_single_stage(build_context(), "artifact", dry_run=dry_run)
