from __future__ import annotations

import os
from pathlib import Path

import typer

from shipline import __version__
from shipline.cli.commands.check import check
from shipline.cli.commands.release_cmd import next_version, release
from shipline.cli.commands.resolve_cmd import resolve
from shipline.cli.commands.run_cmd import run
from shipline.cli.commands.stage_cmds import artifact, build, lint
from shipline.core.errors import ErrorCode
from shipline.core.project import PROJECT_ROOT_ENV, is_project_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Pipeline
app.command()(resolve)
app.command()(run)

# Single stages
app.command()(build)
app.command()(lint)
app.command()(artifact)
app.command()(release)
app.command("next-version")(next_version)

# Environment
app.command()(check)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root (overrides auto detection)",
    ),
) -> None:
    if project is not None:
        try:
            root = project.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --project: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir() or not is_project_root(root):
            typer.echo(
                f"error: --project '{root}' is not a project (missing shipline.toml and Cargo.toml)",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[PROJECT_ROOT_ENV] = str(root)


def main() -> None:
    app()
