from __future__ import annotations

from pathlib import Path

from shipline.core.errors import ErrorCode
from shipline.output.errors import describe_stage_error, stage_error_exit_code
from shipline.services.stage_errors import (
    ArtifactMissing,
    CompileFailed,
    Diagnostic,
    LintFailed,
    ToolMissing,
)


def test_tool_missing() -> None:
    error = ToolMissing(tool_id="cross", hint="Run: cargo install cross --locked")
    assert describe_stage_error(error) == ("cross: missing", "Run: cargo install cross --locked")
    assert stage_error_exit_code(error) == ErrorCode.ENV_ERROR


def test_compile_failed() -> None:
    assert describe_stage_error(CompileFailed(returncode=101)) == ("build failed (exit 101)", None)
    assert stage_error_exit_code(CompileFailed(returncode=101)) == ErrorCode.BUILD_ERROR


def test_lint_lists_diagnostics() -> None:
    diagnostics = tuple(Diagnostic(level="warning", message=f"issue {i}") for i in range(7))

    message, hint = describe_stage_error(LintFailed(returncode=101, diagnostics=diagnostics))

    assert message == "clippy reported 7 diagnostic(s)"
    assert hint is not None
    assert "issue 4" in hint
    assert "issue 5" not in hint
    assert hint.endswith("and 2 more")


def test_artifact_is_io_error() -> None:
    assert stage_error_exit_code(ArtifactMissing(path=Path("x"))) == ErrorCode.IO_ERROR
