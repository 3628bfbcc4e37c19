"""Typer options shared by commands that take a trigger event."""

from __future__ import annotations

import typer

EVENT = typer.Option(
    None,
    "--event",
    help="push, pull_request or workflow_dispatch (default: $GITHUB_EVENT_NAME)",
    show_default=False,
)
BRANCH = typer.Option(
    None,
    "--branch",
    help="Pushed/dispatched branch, or the source branch of a pull request",
    show_default=False,
)
BASE = typer.Option(None, "--base", help="Target branch of a pull request", show_default=False)
MESSAGE = typer.Option(None, "--message", help="Head commit message, checked for skip markers", show_default=False)
DRY_RUN = typer.Option(False, "--dry-run", help="Print actions without running or publishing")
