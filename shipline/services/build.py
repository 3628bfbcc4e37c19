"""Release build of the crate for the configured target triple.

With ``use_cross`` the compile runs through ``cross`` (a containerised
cross-compilation toolchain), which is how a static musl binary is
produced on any host; otherwise plain ``cargo`` is used.
"""

from __future__ import annotations

from pathlib import Path

from shipline.core.result import Err, Ok, Result
from shipline.output.console import Style
from shipline.platform.process import run_silent
from shipline.services.base import BaseService
from shipline.services.stage_errors import CompileFailed, OutputMissing, StageError

_COMPILE_TIMEOUT_SECONDS = 60 * 60.0


class BuildService(BaseService):
    def command(self) -> list[str]:
        build = self._config.build
        program = "cross" if build.use_cross else "cargo"
        return [program, "build", "--release", f"--target={build.target}", *build.args]

    def output_path(self) -> Path:
        return self._project.root / self._config.build.output_path

    def build(self, *, dry_run: bool = False) -> Result[Path, StageError]:
        """Compile the release binary.

        Returns:
            Ok(path) to the built binary
            Err(CompileFailed) if the compiler fails (no retry)
            Err(OutputMissing) if it succeeds but the binary is not where expected
        """
        cmd = self.command()
        self._console.command(cmd)
        output = self.output_path()
        if dry_run:
            self._console.print(f"would produce: {output}", Style.DIM)
            return Ok(output)

        result = run_silent(cmd, cwd=self._project.root, env=self._env(), timeout=_COMPILE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(CompileFailed(returncode=e.returncode, detail=e.stderr.strip()))

        if not output.is_file():
            return Err(OutputMissing(path=output))
        return Ok(output)
