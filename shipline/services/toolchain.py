"""Rust toolchain verification and setup.

cargo, rustup and cross are system tools: shipline never downloads
them, it only verifies they are on PATH and, for native (non-cross)
builds, adds the rustup target the build needs.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass

from shipline.core.result import Err, Ok, Result
from shipline.platform.process import run as run_process
from shipline.services.base import BaseService
from shipline.services.checks import CheckResult
from shipline.services.stage_errors import StageError, ToolchainSetupFailed, ToolMissing

_VERSION_TIMEOUT_SECONDS = 30.0
_TARGET_ADD_TIMEOUT_SECONDS = 10 * 60.0


@dataclass(frozen=True, slots=True)
class ToolSpec:
    id: str
    version_cmd: tuple[str, ...]
    hint: str


CARGO = ToolSpec("cargo", ("cargo", "--version"), "Install Rust via https://rustup.rs/")
CLIPPY = ToolSpec("clippy", ("cargo", "clippy", "--version"), "Run: rustup component add clippy")
CROSS = ToolSpec("cross", ("cross", "--version"), "Run: cargo install cross --locked")
RUSTUP = ToolSpec("rustup", ("rustup", "--version"), "Install Rust via https://rustup.rs/")
GIT = ToolSpec("git", ("git", "--version"), "Install git: https://git-scm.com/")
GH = ToolSpec("gh", ("gh", "--version"), "Install GitHub CLI: https://cli.github.com/")
NPX = ToolSpec("npx", ("npx", "--version"), "Install Node.js: https://nodejs.org/")


class ToolchainService(BaseService):
    """Verify (and where possible, set up) the tools a run needs."""

    def required_tools(self) -> list[ToolSpec]:
        tools = [CARGO, CLIPPY]
        if self._config.build.use_cross:
            tools.append(CROSS)
        else:
            tools.append(RUSTUP)
        return tools

    def release_tools(self) -> list[ToolSpec]:
        release = self._config.release
        if release.tool == "semantic-release":
            return [NPX, GIT]
        tools = [GIT]
        if release.github_release:
            tools.append(GH)
        return tools

    def probe(self, tool: ToolSpec) -> Result[str, ToolMissing]:
        """Return the tool's version line, or ToolMissing."""
        if shutil.which(tool.version_cmd[0]) is None:
            return Err(ToolMissing(tool_id=tool.id, hint=tool.hint))

        result = run_process(
            list(tool.version_cmd),
            cwd=self._project.root,
            timeout=_VERSION_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(ToolMissing(tool_id=tool.id, hint=tool.hint))

        lines = result.value.strip().splitlines()
        return Ok(lines[0] if lines else tool.id)

    def setup(self, *, dry_run: bool = False) -> Result[None, StageError]:
        """Verify build tools and install the rustup target for native builds."""
        for tool in self.required_tools():
            probed = self.probe(tool)
            if isinstance(probed, Err):
                return probed
            self._console.print(f"{tool.id}: {probed.value}")

        if self._config.build.use_cross:
            return Ok(None)
        return self._ensure_target(dry_run=dry_run)

    def check_all(self) -> list[CheckResult]:
        """Report on every tool, for `shipline check`."""
        results: list[CheckResult] = []
        for tool in self.required_tools():
            results.append(self._check(tool, required=True))
        for tool in self.release_tools():
            results.append(self._check(tool, required=False))
        return results

    def _check(self, tool: ToolSpec, *, required: bool) -> CheckResult:
        probed = self.probe(tool)
        if isinstance(probed, Ok):
            return CheckResult.success(tool.id, probed.value)
        if required:
            return CheckResult.error(tool.id, "missing", hint=tool.hint)
        return CheckResult.warning(tool.id, "missing (needed for release)", hint=tool.hint)

    def _ensure_target(self, *, dry_run: bool) -> Result[None, StageError]:
        target = self._config.build.target
        installed = run_process(
            ["rustup", "target", "list", "--installed"],
            cwd=self._project.root,
            timeout=_VERSION_TIMEOUT_SECONDS,
        )
        if isinstance(installed, Err):
            return Err(
                ToolchainSetupFailed(
                    step="rustup target list",
                    detail=installed.error.stderr.strip() or str(installed.error),
                )
            )

        if target in {t.strip() for t in installed.value.splitlines()}:
            return Ok(None)

        cmd = ["rustup", "target", "add", target]
        self._console.command(cmd)
        if dry_run:
            return Ok(None)

        added = run_process(cmd, cwd=self._project.root, timeout=_TARGET_ADD_TIMEOUT_SECONDS)
        if isinstance(added, Err):
            return Err(
                ToolchainSetupFailed(
                    step="rustup target add",
                    detail=added.error.stderr.strip() or str(added.error),
                )
            )
        return Ok(None)
