from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ToolMissing:
    tool_id: str
    hint: str


@dataclass(frozen=True, slots=True)
class ToolchainSetupFailed:
    step: str
    detail: str


@dataclass(frozen=True, slots=True)
class CompileFailed:
    returncode: int
    detail: str = ""


@dataclass(frozen=True, slots=True)
class OutputMissing:
    path: Path


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One clippy/rustc diagnostic header line."""

    level: str
    message: str
    code: str | None = None

    def __str__(self) -> str:
        code = f"[{self.code}]" if self.code else ""
        return f"{self.level}{code}: {self.message}"


@dataclass(frozen=True, slots=True)
class LintFailed:
    returncode: int
    diagnostics: tuple[Diagnostic, ...]


@dataclass(frozen=True, slots=True)
class ArtifactMissing:
    path: Path


@dataclass(frozen=True, slots=True)
class ArtifactWriteFailed:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class CacheFailed:
    action: str
    reason: str


StageError = (
    ToolMissing
    | ToolchainSetupFailed
    | CompileFailed
    | OutputMissing
    | LintFailed
    | ArtifactMissing
    | ArtifactWriteFailed
    | CacheFailed
)
