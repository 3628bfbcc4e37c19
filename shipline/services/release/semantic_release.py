"""semantic-release as an external, opaque release tool.

shipline only installs it, runs it with the token, and reads back
whether a version was published. Atomicity of the release is the tool's
own responsibility.
"""

from __future__ import annotations

import re
from pathlib import Path

from shipline.core.config import ReleaseConfig
from shipline.core.result import Err, Ok, Result
from shipline.output.console import ConsoleProtocol, Style
from shipline.platform.process import merged_env, run_capture
from shipline.services.release.errors import ReleaseError
from shipline.services.release.model import ReleaseOutcome
from shipline.services.release.timeouts import (
    NPM_INSTALL_TIMEOUT_SECONDS,
    SEMANTIC_RELEASE_TIMEOUT_SECONDS,
)

_PUBLISHED_RE = re.compile(r"Published release (?P<version>\S+)")
_NEXT_RE = re.compile(r"The next release version is (?P<version>\S+)")
_NO_RELEASE_MARKERS = (
    "no new version is released",
    "There are no relevant changes",
    "This test run was triggered on the branch",
)


def parse_semantic_release_output(output: str, *, dry_run: bool, tag_prefix: str = "v") -> ReleaseOutcome:
    """Interpret semantic-release's log."""
    published = _PUBLISHED_RE.search(output)
    if published is not None:
        version = published.group("version")
        return ReleaseOutcome(released=True, reason="published", version=version, tag=f"{tag_prefix}{version}")

    if dry_run:
        nxt = _NEXT_RE.search(output)
        if nxt is not None:
            version = nxt.group("version")
            return ReleaseOutcome(
                released=False,
                reason="dry run",
                version=version,
                tag=f"{tag_prefix}{version}",
                dry_run=True,
            )

    for marker in _NO_RELEASE_MARKERS:
        if marker in output:
            return ReleaseOutcome.none("no relevant changes")
    return ReleaseOutcome.none("semantic-release did not publish a version")


class SemanticReleaseTool:
    def __init__(self, *, root: Path, config: ReleaseConfig, console: ConsoleProtocol) -> None:
        self._root = root
        self._config = config
        self._console = console

    def install_command(self) -> list[str]:
        return ["npm", "install", "-g", *self._config.npm_packages]

    def run_command(self, *, dry_run: bool) -> list[str]:
        cmd = ["npx", "semantic-release"]
        if dry_run:
            cmd.extend(["--dry-run", "--no-ci"])
        return cmd

    def release(self, *, token: str | None, dry_run: bool) -> Result[ReleaseOutcome, ReleaseError]:
        if token is None and not dry_run:
            return Err(ReleaseError(kind="token_missing", message=f"${self._config.token_env} is not set"))

        install = self.install_command()
        self._console.command(install)
        installed = run_capture(install, cwd=self._root, timeout=NPM_INSTALL_TIMEOUT_SECONDS)
        if isinstance(installed, Err) or installed.value.returncode != 0:
            detail = installed.error.stderr if isinstance(installed, Err) else installed.value.stderr
            return Err(
                ReleaseError(
                    kind="tool_missing",
                    message="failed to install semantic-release",
                    hint=_tail(detail) or "Install Node.js: https://nodejs.org/",
                )
            )

        extra = {"GITHUB_TOKEN": token, "GH_TOKEN": token} if token else {}
        cmd = self.run_command(dry_run=dry_run)
        self._console.command(cmd)
        ran = run_capture(cmd, cwd=self._root, env=merged_env(extra), timeout=SEMANTIC_RELEASE_TIMEOUT_SECONDS)
        if isinstance(ran, Err):
            return Err(ReleaseError(kind="tool_failed", message="semantic-release did not run", hint=ran.error.stderr))

        out = ran.value
        for line in out.stdout.splitlines():
            self._console.print(line, Style.DIM)

        if out.returncode != 0:
            return Err(
                ReleaseError(
                    kind="tool_failed",
                    message=f"semantic-release failed (exit {out.returncode})",
                    hint=_tail(out.stderr) or _tail(out.stdout),
                )
            )
        return Ok(parse_semantic_release_output(out.combined, dry_run=dry_run, tag_prefix=self._config.tag_prefix))


def _tail(text: str, lines: int = 5) -> str | None:
    kept = [ln for ln in text.strip().splitlines() if ln.strip()][-lines:]
    return "\n".join(kept) or None
