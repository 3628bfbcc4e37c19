"""Project detection and paths.

The project is the Rust crate the pipeline runs against. Its root is the
nearest directory holding a ``shipline.toml`` or a ``Cargo.toml``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .config import CONFIG_FILE_NAME, ArtifactConfig, CacheConfig
from .result import Err, Ok, Result

__all__ = [
    "Project",
    "ProjectError",
    "PROJECT_ROOT_ENV",
    "detect_project",
    "find_project_upward",
    "is_project_root",
]

PROJECT_ROOT_ENV = "SHIPLINE_PROJECT_ROOT"


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A detected project.

    The root contains:
    - Cargo.toml (the crate manifest)
    - shipline.toml (optional pipeline config)
    - .shipline/ (cache and artifacts, gitignored)
    """

    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    def cache_dir(self, cache: CacheConfig) -> Path:
        return self.root / cache.dir

    def artifacts_dir(self, artifact: ArtifactConfig, run_id: str) -> Path:
        """Per-run artifact directory; runs never share one."""
        return self.root / artifact.dir / run_id

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    return (path / CONFIG_FILE_NAME).is_file() or (path / "Cargo.toml").is_file()


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start for a project root."""
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = PROJECT_ROOT_ENV,
) -> Result[Project, ProjectError]:
    """Detect the project root.

    Detection order:
    1. $SHIPLINE_PROJECT_ROOT (if set, it must be valid)
    2. Search upward from start_dir (or cwd)
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir() and is_project_root(env_path):
            return Ok(Project(root=env_path))
        return Err(
            ProjectError(
                message=f"${env_var} is set to '{env_value}' but it is not a project root",
                searched_from=env_path if env_path.is_dir() else None,
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(search_start)
    if found is None:
        return Err(
            ProjectError(
                message=f"Could not find project (no {CONFIG_FILE_NAME} or Cargo.toml)",
                searched_from=search_start,
            )
        )
    return Ok(Project(root=found))
