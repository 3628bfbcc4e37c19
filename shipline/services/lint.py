"""Static analysis with clippy, zero tolerance.

The stage fails on a non-zero exit, and also when clippy exits 0 but
still printed a diagnostic (as happens with ``deny_warnings = false``).
"""

from __future__ import annotations

import re

from shipline.core.result import Err, Ok, Result
from shipline.output.console import Style
from shipline.platform.process import run_capture
from shipline.services.base import BaseService
from shipline.services.stage_errors import Diagnostic, LintFailed, StageError

_LINT_TIMEOUT_SECONDS = 30 * 60.0

_DIAGNOSTIC_RE = re.compile(
    r"^(?P<level>warning|error)(?:\[(?P<code>[^\]]+)\])?: (?P<message>.+)$"
)

# Cargo summary lines share the diagnostic prefix but describe other diagnostics.
_SUMMARY_RE = re.compile(
    r"generated \d+ warnings?"
    r"|could not compile"
    r"|aborting due to"
    r"|build failed, waiting for other jobs"
    r"|\d+ warnings? emitted"
)


def parse_diagnostics(output: str) -> list[Diagnostic]:
    """Extract diagnostic header lines from rustc/clippy output."""
    diagnostics: list[Diagnostic] = []
    for line in output.splitlines():
        m = _DIAGNOSTIC_RE.match(_strip_ansi(line).strip())
        if m is None:
            continue
        message = m.group("message").strip()
        if _SUMMARY_RE.search(message):
            continue
        diagnostics.append(Diagnostic(level=m.group("level"), message=message, code=m.group("code")))
    return diagnostics


_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(line: str) -> str:
    return _ANSI_RE.sub("", line)


class LintService(BaseService):
    def command(self) -> list[str]:
        lint = self._config.lint
        cmd = ["cargo", "clippy"]
        if lint.no_deps:
            cmd.append("--no-deps")
        cmd.extend(lint.args)
        if lint.deny_warnings:
            cmd.extend(["--", "-D", "warnings"])
        return cmd

    def lint(self, *, dry_run: bool = False) -> Result[int, StageError]:
        """Run clippy. Returns Ok(0) when there is nothing to report."""
        cmd = self.command()
        self._console.command(cmd)
        if dry_run:
            return Ok(0)

        # Diagnostics are parsed, so keep them free of colour codes.
        env = self._env()
        env["CARGO_TERM_COLOR"] = "never"

        result = run_capture(cmd, cwd=self._project.root, env=env, timeout=_LINT_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(LintFailed(returncode=e.returncode, diagnostics=()))

        out = result.value
        diagnostics = parse_diagnostics(out.combined)
        for d in diagnostics:
            self._console.print(str(d), Style.WARNING if d.level == "warning" else Style.ERROR)

        if out.returncode != 0 or diagnostics:
            return Err(LintFailed(returncode=out.returncode, diagnostics=tuple(diagnostics)))
        return Ok(0)
