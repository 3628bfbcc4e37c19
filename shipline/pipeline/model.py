from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from shipline.core.errors import ErrorCode

EventKind = Literal["push", "pull_request", "workflow_dispatch"]
EVENT_KINDS: tuple[EventKind, ...] = ("push", "pull_request", "workflow_dispatch")

StageName = Literal["toolchain", "cache", "build", "lint", "artifact", "release"]

# Declared execution order. A run executes a subsequence of this, never a reordering.
STAGE_ORDER: tuple[StageName, ...] = ("toolchain", "cache", "build", "lint", "artifact", "release")


@dataclass(frozen=True, slots=True)
class TriggerEvent:
    """One event that may start a pipeline run.

    Attributes:
        kind: Event type.
        branch: Pushed branch for push, base branch for pull_request,
            selected ref for workflow_dispatch. None for tag pushes.
        message: Head commit message, when known.
        head_branch: Source branch of a pull request.
        head_sha: Head commit of a pull request, when known.
    """

    kind: EventKind
    branch: str | None
    message: str | None = None
    head_branch: str | None = None
    head_sha: str | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.kind == "pull_request"

    def describe(self) -> str:
        match self.kind:
            case "pull_request":
                src = self.head_branch or "?"
                return f"pull_request {src} -> {self.branch or '?'}"
            case _:
                return f"{self.kind} {self.branch or '(no branch)'}"


@dataclass(frozen=True, slots=True)
class RunPlan:
    event: TriggerEvent
    should_run: bool
    reason: str
    stages: tuple[StageName, ...] = ()

    def includes(self, stage: StageName) -> bool:
        return stage in self.stages


class StageStatus(Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class StageOutcome:
    name: StageName
    status: StageStatus
    message: str
    hint: str | None = None
    duration: float = 0.0
    code: ErrorCode = ErrorCode.OK

    @property
    def failed(self) -> bool:
        return self.status == StageStatus.FAILED


RunStatus = Literal["success", "failure", "skipped"]


@dataclass(frozen=True, slots=True)
class RunReport:
    """Result of one pipeline run.

    ``outcomes`` holds one entry per planned stage, in plan order. Stages
    after a failure are recorded as skipped.
    """

    run_id: str
    plan: RunPlan
    outcomes: tuple[StageOutcome, ...] = ()

    @property
    def failed_stage(self) -> StageOutcome | None:
        for o in self.outcomes:
            if o.failed:
                return o
        return None

    @property
    def succeeded(self) -> bool:
        return self.failed_stage is None

    @property
    def status(self) -> RunStatus:
        if not self.plan.should_run:
            return "skipped"
        return "success" if self.succeeded else "failure"

    def outcome(self, name: StageName) -> StageOutcome | None:
        for o in self.outcomes:
            if o.name == name:
                return o
        return None

    @property
    def exit_code(self) -> ErrorCode:
        failed = self.failed_stage
        return ErrorCode.OK if failed is None else failed.code

    def executed(self) -> list[StageName]:
        """Stages that actually ran (passed or failed)."""
        return [o.name for o in self.outcomes if o.status != StageStatus.SKIPPED]
