"""Trigger resolution and stage sequencing."""

from shipline.pipeline.model import (
    STAGE_ORDER,
    RunPlan,
    RunReport,
    StageName,
    StageOutcome,
    StageStatus,
    TriggerEvent,
)
from shipline.pipeline.triggers import resolve_plan

__all__ = [
    "STAGE_ORDER",
    "RunPlan",
    "RunReport",
    "StageName",
    "StageOutcome",
    "StageStatus",
    "TriggerEvent",
    "resolve_plan",
]
