from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import typer

from shipline.core.config import Config, load_config_optional
from shipline.core.errors import ErrorCode
from shipline.core.project import Project, detect_project
from shipline.core.result import Err
from shipline.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    config: Config
    console: ConsoleProtocol
    environ: Mapping[str, str]


def _console_for(config: Config, environ: Mapping[str, str]) -> RichConsole:
    color = config.env_dict().get("CARGO_TERM_COLOR", "auto")
    return RichConsole(
        force_color=color == "always" or bool(environ.get("GITHUB_ACTIONS")),
        no_color=color == "never" or "NO_COLOR" in environ,
    )


def build_context() -> CLIContext:
    environ = dict(os.environ)

    project_result = detect_project()
    if isinstance(project_result, Err):
        typer.echo(f"error: {project_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    project = project_result.value

    config_result = load_config_optional(project.config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    config = config_result.value

    return CLIContext(
        project=project,
        config=config,
        console=_console_for(config, environ),
        environ=environ,
    )
