from __future__ import annotations

from shipline.core.config import Config
from shipline.core.project import Project
from shipline.output.console import ConsoleProtocol
from shipline.platform.process import merged_env


class BaseService:
    """Shared wiring for stage services."""

    def __init__(
        self,
        *,
        project: Project,
        config: Config,
        console: ConsoleProtocol,
    ) -> None:
        self._project = project
        self._config = config
        self._console = console

    def _env(self) -> dict[str, str]:
        """Process environment with the pipeline-level variables applied."""
        return merged_env(self._config.env_dict())
