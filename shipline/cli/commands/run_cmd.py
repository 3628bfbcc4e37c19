from __future__ import annotations

import typer

from shipline.cli.commands import _options
from shipline.cli.commands._helpers import resolve_event
from shipline.cli.context import build_context
from shipline.pipeline.events import resolve_run_id
from shipline.pipeline.runner import PipelineRunner, RunContext, print_summary
from shipline.pipeline.stages import default_handlers, default_post_hooks
from shipline.pipeline.triggers import resolve_plan


def run(
    event: str | None = _options.EVENT,
    branch: str | None = _options.BRANCH,
    base: str | None = _options.BASE,
    message: str | None = _options.MESSAGE,
    dry_run: bool = _options.DRY_RUN,
) -> None:
    """Resolve the trigger and run the pipeline."""
    ctx = build_context()
    trigger = resolve_event(ctx, event=event, branch=branch, base=base, message=message)
    plan = resolve_plan(trigger, ctx.config.triggers)

    run_ctx = RunContext(
        project=ctx.project,
        config=ctx.config,
        console=ctx.console,
        run_id=resolve_run_id(ctx.environ),
        plan=plan,
        environ=ctx.environ,
        dry_run=dry_run,
    )
    runner = PipelineRunner(handlers=default_handlers(), post_hooks=default_post_hooks())
    report = runner.run(run_ctx)

    if plan.should_run:
        print_summary(report, ctx.console)
    if not report.succeeded:
        raise typer.Exit(code=int(report.exit_code))
