"""Trigger resolution: does an event start a run, and with which stages."""

from __future__ import annotations

from shipline.core.config import TriggersConfig
from shipline.pipeline.model import STAGE_ORDER, RunPlan, StageName, TriggerEvent

_VERIFY_STAGES: tuple[StageName, ...] = tuple(s for s in STAGE_ORDER if s != "release")


def _skip_marker(message: str | None, markers: tuple[str, ...]) -> str | None:
    if not message:
        return None
    lowered = message.lower()
    for marker in markers:
        if marker.lower() in lowered:
            return marker
    return None


def resolve_plan(event: TriggerEvent, triggers: TriggersConfig) -> RunPlan:
    """Decide whether an event runs the pipeline and which stages apply.

    - push: runs only on a designated branch, unless the head commit asks
      to skip CI.
    - pull_request: runs for any target branch, without the release stage,
      unless the head commit asks to skip CI.
    - workflow_dispatch: runs everything.
    """
    match event.kind:
        case "push":
            if event.branch is None or event.branch not in triggers.branches:
                return RunPlan(
                    event=event,
                    should_run=False,
                    reason=f"branch '{event.branch or '(none)'}' is not in "
                    f"{', '.join(triggers.branches)}",
                )
            marker = _skip_marker(event.message, triggers.skip_markers)
            if marker is not None:
                return RunPlan(
                    event=event,
                    should_run=False,
                    reason=f"head commit contains '{marker}'",
                )
            return RunPlan(
                event=event,
                should_run=True,
                reason=f"push to {event.branch}",
                stages=STAGE_ORDER,
            )

        case "pull_request":
            if not triggers.pull_request:
                return RunPlan(event=event, should_run=False, reason="pull_request trigger disabled")
            marker = _skip_marker(event.message, triggers.skip_markers)
            if marker is not None:
                return RunPlan(
                    event=event,
                    should_run=False,
                    reason=f"head commit contains '{marker}'",
                )
            return RunPlan(
                event=event,
                should_run=True,
                reason="pull request (release skipped)",
                stages=_VERIFY_STAGES,
            )

        case "workflow_dispatch":
            if not triggers.workflow_dispatch:
                return RunPlan(
                    event=event, should_run=False, reason="workflow_dispatch trigger disabled"
                )
            return RunPlan(
                event=event,
                should_run=True,
                reason="manual dispatch",
                stages=STAGE_ORDER,
            )
