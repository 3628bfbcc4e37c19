"""Error presentation utilities.

Maps every stage and release error to a one-line message, an optional
hint, and the exit code the run reports.
"""

from __future__ import annotations

from shipline.core.errors import ErrorCode
from shipline.services.release.errors import ReleaseError
from shipline.services.stage_errors import (
    ArtifactMissing,
    ArtifactWriteFailed,
    CacheFailed,
    CompileFailed,
    LintFailed,
    OutputMissing,
    StageError,
    ToolchainSetupFailed,
    ToolMissing,
)

__all__ = [
    "describe_release_error",
    "describe_stage_error",
    "stage_error_exit_code",
]

_MAX_LISTED_DIAGNOSTICS = 5


def describe_stage_error(error: StageError) -> tuple[str, str | None]:
    """Message and hint for a stage error."""
    match error:
        case ToolMissing(tool_id=tool_id, hint=hint):
            return (f"{tool_id}: missing", hint)
        case ToolchainSetupFailed(step=step, detail=detail):
            return (f"toolchain setup failed: {step}", detail or None)
        case CompileFailed(returncode=rc, detail=detail):
            return (f"build failed (exit {rc})", detail or None)
        case OutputMissing(path=path):
            return (f"build output not found: {path}", "Check build.target and build.binary")
        case LintFailed(returncode=rc, diagnostics=diagnostics):
            if diagnostics:
                shown = "; ".join(str(d) for d in diagnostics[:_MAX_LISTED_DIAGNOSTICS])
                more = len(diagnostics) - _MAX_LISTED_DIAGNOSTICS
                if more > 0:
                    shown += f"; and {more} more"
                return (f"clippy reported {len(diagnostics)} diagnostic(s)", shown)
            return (f"clippy failed (exit {rc})", None)
        case ArtifactMissing(path=path):
            return (f"artifact source not found: {path}", "Check artifact.path")
        case ArtifactWriteFailed(path=path, reason=reason):
            return (f"failed to write artifact {path}", reason)
        case CacheFailed(action=action, reason=reason):
            return (f"cache {action} failed", reason)


def stage_error_exit_code(error: StageError) -> ErrorCode:
    match error:
        case ToolMissing() | ToolchainSetupFailed():
            return ErrorCode.ENV_ERROR
        case CompileFailed() | OutputMissing() | LintFailed():
            return ErrorCode.BUILD_ERROR
        case ArtifactMissing() | ArtifactWriteFailed() | CacheFailed():
            return ErrorCode.IO_ERROR


def describe_release_error(error: ReleaseError) -> tuple[str, str | None]:
    return (error.message, error.hint)
