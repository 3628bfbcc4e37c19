from __future__ import annotations

from pathlib import Path

import pytest

from shipline.core.config import BuildConfig, Config
from shipline.core.project import Project
from shipline.core.result import Err, Ok
from shipline.output.console import MockConsole
from shipline.platform.process import ProcessError
from shipline.services import build as build_mod
from shipline.services.build import BuildService
from shipline.services.stage_errors import CompileFailed, OutputMissing


def _service(tmp_path: Path, build: BuildConfig | None = None) -> BuildService:
    return BuildService(
        project=Project(root=tmp_path),
        config=Config(build=build or BuildConfig()),
        console=MockConsole(),
    )


def test_command_uses_cross() -> None:
    svc = _service(Path("/work"))
    assert svc.command() == ["cross", "build", "--release", "--target=x86_64-unknown-linux-musl"]


def test_command_native_with_args() -> None:
    svc = _service(Path("/work"), BuildConfig(use_cross=False, args=("--locked",)))
    assert svc.command() == ["cargo", "build", "--release", "--target=x86_64-unknown-linux-musl", "--locked"]


def test_output_path(tmp_path: Path) -> None:
    assert _service(tmp_path).output_path() == (
        tmp_path / "target" / "x86_64-unknown-linux-musl" / "release" / "revanced-discord-bot"
    )


def test_build_success(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    svc = _service(tmp_path)
    seen: dict[str, object] = {}

    def fake(cmd: list[str], cwd: Path, env: dict[str, str] | None = None, *, timeout: float | None = None):  # type: ignore[no-untyped-def]
        seen["env"] = env
        out = svc.output_path()
        out.parent.mkdir(parents=True)
        out.write_bytes(b"\x7fELF")
        return Ok(None)

    monkeypatch.setattr(build_mod, "run_silent", fake)

    assert svc.build() == Ok(svc.output_path())
    env = seen["env"]
    assert isinstance(env, dict)
    assert env["CARGO_TERM_COLOR"] == "always"


def test_build_compile_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        build_mod,
        "run_silent",
        lambda *a, **k: Err(ProcessError(command=("cross",), returncode=101, stdout="", stderr="")),  # type: ignore[no-untyped-call]
    )

    assert _service(tmp_path).build() == Err(CompileFailed(returncode=101, detail=""))


def test_build_missing_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_mod, "run_silent", lambda *a, **k: Ok(None))  # type: ignore[no-untyped-call]
    svc = _service(tmp_path)

    assert svc.build() == Err(OutputMissing(path=svc.output_path()))
