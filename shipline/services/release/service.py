"""Release stage entry point.

Selects the configured release tool and enforces the stage contract:
the token must be present, and any tool failure surfaces as an error
rather than a silent "no release".
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from datetime import date

from shipline.core.config import Config
from shipline.core.project import Project
from shipline.core.result import Err, Result
from shipline.git.repository import Repository
from shipline.output.console import ConsoleProtocol, Style
from shipline.services.base import BaseService
from shipline.services.release.errors import ReleaseError
from shipline.services.release.model import NextRelease, NoRelease, ReleaseOutcome
from shipline.services.release.native import NativeReleaser
from shipline.services.release.semantic_release import SemanticReleaseTool


class ReleaseService(BaseService):
    def __init__(
        self,
        *,
        project: Project,
        config: Config,
        console: ConsoleProtocol,
        environ: Mapping[str, str],
        repo: Repository | None = None,
        today: date | None = None,
    ) -> None:
        super().__init__(project=project, config=config, console=console)
        self._environ = environ
        self._repo = repo
        self._today = today

    def token(self) -> str | None:
        value = self._environ.get(self._config.release.token_env, "").strip()
        return value or None

    def _native(self) -> NativeReleaser:
        return NativeReleaser(
            project=self._project,
            config=self._config,
            console=self._console,
            environ=self._environ,
            repo=self._repo,
            today=self._today,
        )

    def plan(self, *, branch: str | None) -> Result[NextRelease | NoRelease, ReleaseError]:
        """What the native tool would cut from the current history."""
        return self._native().plan(branch=branch)

    def release(self, *, branch: str | None, dry_run: bool = False) -> Result[ReleaseOutcome, ReleaseError]:
        cfg = self._config.release
        token = self.token()
        if token is None:
            if not dry_run:
                return Err(
                    ReleaseError(
                        kind="token_missing",
                        message=f"release token missing: ${cfg.token_env} is not set",
                        hint="Expose the repository secret to the release step",
                    )
                )
            self._console.print(f"${cfg.token_env} not set (dry run)", Style.DIM)

        required = ["npx"] if cfg.tool == "semantic-release" else ["git"]
        if cfg.tool == "native" and cfg.github_release and not dry_run:
            required.append("gh")
        for exe in required:
            if shutil.which(exe) is None:
                return Err(ReleaseError(kind="tool_missing", message=f"{exe}: missing"))

        self._console.print(f"release tool: {cfg.tool}", Style.DIM)
        if cfg.tool == "semantic-release":
            tool = SemanticReleaseTool(root=self._project.root, config=cfg, console=self._console)
            return tool.release(token=token, dry_run=dry_run)
        return self._native().release(branch=branch, token=token, dry_run=dry_run)
