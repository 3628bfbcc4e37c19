"""Shared helpers for CLI commands."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, TypeVar

import typer

from shipline.core.errors import ErrorCode
from shipline.core.result import Err, Result
from shipline.git.repository import Repository
from shipline.output.console import Style
from shipline.pipeline.events import EventError, event_from_env, event_from_options
from shipline.pipeline.model import TriggerEvent

if TYPE_CHECKING:
    from shipline.cli.context import CLIContext

T = TypeVar("T")
E = TypeVar("E")


def exit_on_error(
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.BUILD_ERROR,
) -> T:
    """Return the value of an Ok, or print the error and exit.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))
    return result.value


def _with_head_message(ctx: CLIContext, event: TriggerEvent) -> TriggerEvent:
    """Fill a pull request's head commit message from the local clone.

    The checkout may not hold the head commit (shallow merge checkout);
    markers are then not checked.
    """
    if event.kind != "pull_request" or event.message is not None or event.head_sha is None:
        return event
    result = Repository(ctx.project.root).commit_message(event.head_sha)
    if isinstance(result, Err):
        ctx.console.print(f"head commit {event.head_sha[:7]} not available; skip markers not checked", Style.DIM)
        return event
    return replace(event, message=result.value)


def resolve_event(
    ctx: CLIContext,
    *,
    event: str | None,
    branch: str | None,
    base: str | None,
    message: str | None,
) -> TriggerEvent:
    """Event from explicit options, else from the GitHub Actions environment."""
    result: Result[TriggerEvent, EventError]
    if event is not None:
        result = event_from_options(event=event, branch=branch, base=base, message=message)
    else:
        result = event_from_env(ctx.environ)
    return _with_head_message(ctx, exit_on_error(result, ctx, ErrorCode.USER_ERROR))
