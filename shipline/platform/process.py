"""Subprocess execution with Result-based error handling.

Every external collaborator (cargo, cross, git, gh, npm) is invoked
through this module so that failures come back as values and timeouts
are applied consistently.

Usage:
    result = run(["cargo", "--version"], cwd=project.root)
    match result:
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from shipline.core.result import Err, Ok, Result

__all__ = ["CapturedOutput", "ProcessError", "merged_env", "run", "run_capture", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 when the process could not start or timed out.
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


@dataclass(frozen=True, slots=True)
class CapturedOutput:
    """Output of a process that ran to completion, whatever its exit code."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def combined(self) -> str:
        return f"{self.stdout}\n{self.stderr}" if self.stdout else self.stderr


def merged_env(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Current environment with extra variables layered on top."""
    env = dict(os.environ)
    if extra:
        env.update(extra)
    return env


def _timeout_error(cmd: list[str], e: subprocess.TimeoutExpired) -> ProcessError:
    stdout = e.stdout if isinstance(e.stdout, str) else ""
    return ProcessError(
        command=tuple(cmd),
        returncode=-1,
        stdout=stdout,
        stderr=f"Command timed out after {e.timeout}s",
    )


def run_capture(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[CapturedOutput, ProcessError]:
    """Execute a command and capture its output without judging the exit code.

    Err is only returned when the process could not be started or timed out.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(_timeout_error(cmd, e))
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    return Ok(CapturedOutput(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr))


def run(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout, or Err on a non-zero exit.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).
    """
    captured = run_capture(cmd, cwd, env, timeout=timeout)
    if isinstance(captured, Err):
        return captured

    out = captured.value
    if out.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=out.returncode,
                stdout=out.stdout,
                stderr=out.stderr,
            )
        )
    return Ok(out.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with output streaming to the terminal.

    Used for long compiles where the user wants to see progress.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(_timeout_error(cmd, e))
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr=""))

    return Ok(None)
