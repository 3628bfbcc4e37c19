"""Trigger events from the GitHub Actions environment or CLI options."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from shipline.core.result import Err, Ok, Result
from shipline.core.structured import StrDict, as_str_dict, get_str, get_table
from shipline.pipeline.model import EVENT_KINDS, EventKind, TriggerEvent

__all__ = ["EventError", "event_from_env", "event_from_options", "resolve_run_id"]


@dataclass(frozen=True, slots=True)
class EventError:
    message: str
    hint: str | None = None


def _kind(name: str | None) -> Result[EventKind, EventError]:
    for kind in EVENT_KINDS:
        if name == kind:
            return Ok(kind)
    return Err(
        EventError(
            message=f"unsupported event: {name or '(none)'}",
            hint=f"expected one of: {', '.join(EVENT_KINDS)}",
        )
    )


def _branch_from_ref(ref: str | None) -> str | None:
    if not ref:
        return None
    if ref.startswith("refs/heads/"):
        return ref.removeprefix("refs/heads/")
    if ref.startswith("refs/"):
        return None
    return ref


def _payload(event_path: str | None) -> StrDict | None:
    if not event_path:
        return None
    try:
        payload: object = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    return as_str_dict(payload)


def _head_commit_message(payload: StrDict | None) -> str | None:
    if payload is None:
        return None
    head = get_table(payload, "head_commit")
    if head is None:
        return None
    return get_str(head, "message")


def _pull_request_head_sha(payload: StrDict | None) -> str | None:
    # The pull_request payload carries the head sha but not its message.
    if payload is None:
        return None
    pr = get_table(payload, "pull_request")
    head = get_table(pr, "head") if pr is not None else None
    if head is None:
        return None
    return get_str(head, "sha")


def event_from_env(environ: Mapping[str, str]) -> Result[TriggerEvent, EventError]:
    """Build the trigger event from GitHub Actions variables.

    Reads GITHUB_EVENT_NAME, GITHUB_REF / GITHUB_REF_NAME, GITHUB_BASE_REF,
    GITHUB_HEAD_REF, and from GITHUB_EVENT_PATH the head commit message
    (push) or the head sha (pull_request).
    """
    name = environ.get("GITHUB_EVENT_NAME")
    if not name:
        return Err(
            EventError(
                message="GITHUB_EVENT_NAME is not set",
                hint="Pass --event (and --branch) when running outside GitHub Actions",
            )
        )

    kind = _kind(name)
    if isinstance(kind, Err):
        return kind

    if kind.value == "pull_request":
        return Ok(
            TriggerEvent(
                kind="pull_request",
                branch=environ.get("GITHUB_BASE_REF") or None,
                head_branch=environ.get("GITHUB_HEAD_REF") or None,
                head_sha=_pull_request_head_sha(_payload(environ.get("GITHUB_EVENT_PATH"))),
            )
        )

    ref = environ.get("GITHUB_REF")
    if ref:
        branch = _branch_from_ref(ref)
    else:
        branch = environ.get("GITHUB_REF_NAME") or None

    message = None
    if kind.value == "push":
        message = _head_commit_message(_payload(environ.get("GITHUB_EVENT_PATH")))

    return Ok(TriggerEvent(kind=kind.value, branch=branch, message=message))


def event_from_options(
    *,
    event: str,
    branch: str | None,
    base: str | None = None,
    message: str | None = None,
) -> Result[TriggerEvent, EventError]:
    """Build a trigger event from explicit CLI options.

    For pull requests, ``base`` is the target branch and ``branch`` the
    source branch.
    """
    kind = _kind(event)
    if isinstance(kind, Err):
        return kind

    if kind.value == "pull_request":
        return Ok(TriggerEvent(kind="pull_request", branch=base, head_branch=branch, message=message))

    return Ok(TriggerEvent(kind=kind.value, branch=_branch_from_ref(branch), message=message))


def resolve_run_id(environ: Mapping[str, str]) -> str:
    """Run id used to isolate artifacts.

    Re-runs of the same GitHub run share GITHUB_RUN_ID and overwrite
    each other's artifacts; local runs get a fresh id.
    """
    run_id = environ.get("GITHUB_RUN_ID")
    if run_id and run_id.strip():
        return run_id.strip()
    return f"local-{uuid4().hex[:12]}"
