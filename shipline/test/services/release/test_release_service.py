from __future__ import annotations

from pathlib import Path

import pytest

from shipline.core.config import Config, ReleaseConfig
from shipline.core.project import Project
from shipline.core.result import Err, Ok
from shipline.output.console import MockConsole
from shipline.services.release import service as service_mod
from shipline.services.release.model import ReleaseOutcome
from shipline.services.release.service import ReleaseService


def _service(tmp_path: Path, environ: dict[str, str], config: Config | None = None) -> ReleaseService:
    return ReleaseService(
        project=Project(root=tmp_path),
        config=config or Config(),
        console=MockConsole(),
        environ=environ,
    )


def test_token_from_configured_variable(tmp_path: Path) -> None:
    cfg = Config(release=ReleaseConfig(token_env="RELEASE_TOKEN"))
    assert _service(tmp_path, {"RELEASE_TOKEN": " abc "}, cfg).token() == "abc"
    assert _service(tmp_path, {"GITHUB_TOKEN": "abc"}, cfg).token() is None


def test_missing_token_is_error(tmp_path: Path) -> None:
    result = _service(tmp_path, {}).release(branch="main", dry_run=False)

    assert isinstance(result, Err)
    assert result.error.kind == "token_missing"
    assert "GITHUB_TOKEN" in result.error.message


def test_missing_tool_is_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(service_mod.shutil, "which", lambda _: None)
    cfg = Config(release=ReleaseConfig(tool="semantic-release"))

    result = _service(tmp_path, {"GITHUB_TOKEN": "t"}, cfg).release(branch="main", dry_run=False)

    assert isinstance(result, Err)
    assert result.error.kind == "tool_missing"
    assert "npx" in result.error.message


def test_dispatches_to_semantic_release(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(service_mod.shutil, "which", lambda exe: f"/usr/bin/{exe}")
    seen: dict[str, object] = {}

    class FakeTool:
        def __init__(self, **kwargs: object) -> None:
            seen.update(kwargs)

        def release(self, *, token: str | None, dry_run: bool) -> Ok[ReleaseOutcome]:
            seen["token"] = token
            return Ok(ReleaseOutcome.none("no relevant changes"))

    monkeypatch.setattr(service_mod, "SemanticReleaseTool", FakeTool)
    cfg = Config(release=ReleaseConfig(tool="semantic-release"))

    result = _service(tmp_path, {"GITHUB_TOKEN": "t"}, cfg).release(branch="main", dry_run=False)

    assert result == Ok(ReleaseOutcome.none("no relevant changes"))
    assert seen["token"] == "t"
