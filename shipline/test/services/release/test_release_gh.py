from __future__ import annotations

from pathlib import Path

import pytest

from shipline.core.result import Err, Ok, Result
from shipline.platform.process import ProcessError
from shipline.services.release import gh


def test_repo_slug_precedence() -> None:
    env = {"GITHUB_REPOSITORY": "revanced/revanced-discord-bot"}
    assert gh.repo_slug(env, None, "fork/bot") == "fork/bot"
    assert gh.repo_slug(env, "git@github.com:other/x.git", None) == "revanced/revanced-discord-bot"


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/revanced/revanced-discord-bot.git",
        "https://github.com/revanced/revanced-discord-bot",
        "git@github.com:revanced/revanced-discord-bot.git",
    ],
)
def test_repo_slug_from_remote(url: str) -> None:
    assert gh.repo_slug({}, url, None) == "revanced/revanced-discord-bot"


def test_repo_slug_unknown() -> None:
    assert gh.repo_slug({}, "/srv/git/bot.git", None) is None


class FakeGh:
    def __init__(self, responses: list[Result[str, ProcessError]]) -> None:
        self.responses = responses
        self.calls: list[list[str]] = []
        self.envs: list[dict[str, str]] = []

    def __call__(self, cmd: list[str], cwd: Path, env: dict[str, str] | None = None, *, timeout: float | None = None):  # type: ignore[no-untyped-def]
        self.calls.append(cmd)
        self.envs.append(dict(env or {}))
        return self.responses.pop(0)


def _fail(stderr: str, rc: int = 1) -> Err[ProcessError]:
    return Err(ProcessError(command=("gh",), returncode=rc, stdout="", stderr=stderr))


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh, "sleep", lambda _: None)


def test_release_exists_not_found(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeGh([_fail("release not found")])
    monkeypatch.setattr(gh, "run_process", fake)

    assert gh.release_exists(cwd=tmp_path, repo="o/r", tag="v1.0.0", token="t") == Ok(False)
    assert fake.calls[0][:4] == ["gh", "release", "view", "v1.0.0"]
    assert fake.envs[0]["GH_TOKEN"] == "t"


def test_release_exists_retries_transient(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeGh([_fail("HTTP 502: Bad Gateway"), Ok('{"tagName":"v1.0.0"}')])
    monkeypatch.setattr(gh, "run_process", fake)

    assert gh.release_exists(cwd=tmp_path, repo=None, tag="v1.0.0", token="t") == Ok(True)
    assert len(fake.calls) == 2


def test_create_release_prerelease(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeGh([_fail("release not found"), Ok("https://github.com/o/r/releases/tag/v1.1.0-dev.1\n")])
    monkeypatch.setattr(gh, "run_process", fake)

    result = gh.create_release(cwd=tmp_path, repo="o/r", tag="v1.1.0-dev.1", notes="notes", prerelease=True, token="t")

    assert result == Ok("https://github.com/o/r/releases/tag/v1.1.0-dev.1")
    create = fake.calls[1]
    assert create[:4] == ["gh", "release", "create", "v1.1.0-dev.1"]
    assert "--prerelease" in create
    assert "--verify-tag" in create


def test_create_release_refuses_duplicate(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeGh([Ok("{}")])
    monkeypatch.setattr(gh, "run_process", fake)

    result = gh.create_release(cwd=tmp_path, repo=None, tag="v1.0.0", notes="", prerelease=False, token="t")

    assert isinstance(result, Err)
    assert "already exists" in result.error.message
    assert len(fake.calls) == 1


def test_create_release_bad_credentials_hint(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeGh([_fail("release not found"), _fail("HTTP 401: Bad credentials")])
    monkeypatch.setattr(gh, "run_process", fake)

    result = gh.create_release(cwd=tmp_path, repo=None, tag="v1.0.0", notes="", prerelease=False, token="t")

    assert isinstance(result, Err)
    assert result.error.kind == "gh_failed"
    assert result.error.hint is not None and "release token" in result.error.hint
