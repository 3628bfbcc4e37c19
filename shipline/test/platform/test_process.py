"""Tests for shipline.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from shipline.core.result import Err, Ok
from shipline.platform.process import ProcessError, merged_env, run, run_capture, run_silent

PY = sys.executable


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("cargo", "build"), returncode=101, stdout="", stderr="")
        assert str(error) == "cargo build failed (exit 101)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("cross", "build", "--release", "--target", "x86_64-unknown-linux-musl"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "cross build --release ... failed (exit 1)"


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import sys; sys.stderr.write('bad'); sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert "bad" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr

    def test_env_is_passed(self, tmp_path: Path) -> None:
        env = merged_env({"SHIPLINE_TEST_VALUE": "42"})
        result = run([PY, "-c", "import os; print(os.environ['SHIPLINE_TEST_VALUE'])"], cwd=tmp_path, env=env)

        assert result == Ok("42\n")


class TestRunCapture:
    def test_nonzero_exit_is_ok(self, tmp_path: Path) -> None:
        result = run_capture(
            [PY, "-c", "import sys; print('out'); sys.stderr.write('err'); sys.exit(3)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Ok)
        assert result.value.returncode == 3
        assert result.value.stdout.strip() == "out"
        assert "out" in result.value.combined
        assert "err" in result.value.combined


class TestRunSilent:
    def test_success(self, tmp_path: Path) -> None:
        assert run_silent([PY, "-c", "pass"], cwd=tmp_path) == Ok(None)

    def test_failure(self, tmp_path: Path) -> None:
        result = run_silent([PY, "-c", "import sys; sys.exit(101)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 101


def test_merged_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARGO_TERM_COLOR", "auto")
    env = merged_env({"CARGO_TERM_COLOR": "always"})
    assert env["CARGO_TERM_COLOR"] == "always"
