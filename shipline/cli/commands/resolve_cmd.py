from __future__ import annotations

import json

import typer

from shipline.cli.commands import _options
from shipline.cli.commands._helpers import resolve_event
from shipline.cli.context import build_context
from shipline.output.console import Style
from shipline.pipeline.model import STAGE_ORDER
from shipline.pipeline.triggers import resolve_plan


def resolve(
    event: str | None = _options.EVENT,
    branch: str | None = _options.BRANCH,
    base: str | None = _options.BASE,
    message: str | None = _options.MESSAGE,
    as_json: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
) -> None:
    """Show whether an event triggers the pipeline, and which stages run."""
    ctx = build_context()
    trigger = resolve_event(ctx, event=event, branch=branch, base=base, message=message)
    plan = resolve_plan(trigger, ctx.config.triggers)

    if as_json:
        typer.echo(
            json.dumps(
                {
                    "event": trigger.kind,
                    "branch": trigger.branch,
                    "should_run": plan.should_run,
                    "reason": plan.reason,
                    "stages": list(plan.stages),
                }
            )
        )
        return

    console = ctx.console
    console.print(f"event: {trigger.describe()}", Style.DIM)
    if not plan.should_run:
        console.info(f"not triggered: {plan.reason}")
        return

    console.success(f"triggered: {plan.reason}")
    for stage in STAGE_ORDER:
        if plan.includes(stage):
            console.print(f"  {stage}")
        else:
            console.print(f"  {stage} (skipped)", Style.DIM)
