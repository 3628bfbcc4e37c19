"""Fail-fast execution of a run plan.

Stages run strictly in plan order, each gated on the success of the
previous one. After the first failure the remaining stages are recorded
as skipped and never invoked. Post hooks (cache save) run after the
stage sequence regardless of the outcome and can only warn.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from shipline.core.config import Config
from shipline.core.errors import ErrorCode
from shipline.core.project import Project
from shipline.core.result import Err, Ok, Result
from shipline.output.console import ConsoleProtocol, Style
from shipline.pipeline.model import (
    RunPlan,
    RunReport,
    StageName,
    StageOutcome,
    StageStatus,
)


@dataclass(frozen=True, slots=True)
class StageFailure:
    message: str
    hint: str | None = None
    code: ErrorCode = ErrorCode.BUILD_ERROR


@dataclass
class RunContext:
    """Everything a stage needs. One instance per run; never shared."""

    project: Project
    config: Config
    console: ConsoleProtocol
    run_id: str
    plan: RunPlan
    environ: Mapping[str, str]
    dry_run: bool = False
    # Filled by stages for later stages and post hooks.
    values: dict[str, str] = field(default_factory=dict)


StageHandler = Callable[[RunContext], Result[str, StageFailure]]
PostHook = Callable[[RunContext, bool], Result[str, StageFailure]]


class PipelineRunner:
    def __init__(
        self,
        *,
        handlers: Mapping[StageName, StageHandler],
        post_hooks: Sequence[PostHook] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._handlers = handlers
        self._post_hooks = post_hooks
        self._clock = clock

    def run(self, ctx: RunContext) -> RunReport:
        console = ctx.console
        plan = ctx.plan
        if not plan.should_run:
            console.info(f"pipeline not triggered: {plan.reason}")
            return RunReport(run_id=ctx.run_id, plan=plan)

        missing = [s for s in plan.stages if s not in self._handlers]
        if missing:
            raise ValueError(f"no handler for stage(s): {', '.join(missing)}")

        console.print(f"run {ctx.run_id}: {plan.event.describe()} ({plan.reason})", Style.BOLD)

        outcomes: list[StageOutcome] = []
        failed = False
        for name in plan.stages:
            if failed:
                outcomes.append(StageOutcome(name=name, status=StageStatus.SKIPPED, message="earlier stage failed"))
                continue

            console.header(name)
            started = self._clock()
            result = self._handlers[name](ctx)
            duration = self._clock() - started

            match result:
                case Ok(message):
                    console.success(f"{name}: {message}")
                    outcomes.append(
                        StageOutcome(name=name, status=StageStatus.PASSED, message=message, duration=duration)
                    )
                case Err(failure):
                    console.error(f"{name}: {failure.message}")
                    if failure.hint:
                        console.print(f"hint: {failure.hint}", Style.DIM)
                    outcomes.append(
                        StageOutcome(
                            name=name,
                            status=StageStatus.FAILED,
                            message=failure.message,
                            hint=failure.hint,
                            duration=duration,
                            code=failure.code,
                        )
                    )
                    failed = True

        for hook in self._post_hooks:
            post = hook(ctx, not failed)
            match post:
                case Ok(message):
                    if message:
                        console.print(message, Style.DIM)
                case Err(failure):
                    console.warning(failure.message)

        return RunReport(run_id=ctx.run_id, plan=plan, outcomes=tuple(outcomes))


def print_summary(report: RunReport, console: ConsoleProtocol) -> None:
    console.header("summary")
    for o in report.outcomes:
        style = {
            StageStatus.PASSED: Style.SUCCESS,
            StageStatus.FAILED: Style.ERROR,
            StageStatus.SKIPPED: Style.DIM,
        }[o.status]
        timing = f"  {o.duration:.1f}s" if o.status != StageStatus.SKIPPED else ""
        console.print(f"{o.name:<10} {o.status!s:<8}{timing}", style)
    console.print(f"run {report.run_id}: {report.status}", Style.BOLD)
