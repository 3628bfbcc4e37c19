from __future__ import annotations

import subprocess
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from shipline.core.config import Config, ReleaseConfig
from shipline.core.project import Project
from shipline.core.result import Err, Ok
from shipline.git.repository import Repository
from shipline.output.console import MockConsole
from shipline.services.release.native import NativeReleaser

if TYPE_CHECKING:
    from shipline.test.conftest import GitRepo

MANIFEST = '[package]\nname = "revanced-discord-bot"\nversion = "0.1.0"\nedition = "2021"\n'


def _releaser(git_repo: GitRepo, console: MockConsole, *, github_release: bool = False) -> NativeReleaser:
    config = Config(release=ReleaseConfig(github_release=github_release))
    return NativeReleaser(
        project=Project(root=git_repo.path),
        config=config,
        console=console,
        environ={},
        today=date(2026, 10, 18),
    )


def _seed(git_repo: GitRepo) -> str:
    git_repo.commit("chore: scaffold", {"Cargo.toml": MANIFEST})
    return git_repo.commit("feat(commands): add /poll")


def _remote_tags(remote: Path) -> list[str]:
    out = subprocess.run(
        ["git", "--git-dir", str(remote), "tag"], capture_output=True, text=True, check=True
    ).stdout
    return out.split()


def test_release_pushes_commit_and_tag(git_repo: GitRepo) -> None:
    remote = git_repo.add_bare_remote()
    _seed(git_repo)
    console = MockConsole()

    result = _releaser(git_repo, console).release(branch="main", token="t", dry_run=False)

    assert isinstance(result, Ok)
    assert result.value.released
    assert result.value.tag == "v1.0.0"
    assert _remote_tags(remote) == ["v1.0.0"]

    assert git_repo.git("log", "-1", "--format=%s") == "chore(release): 1.0.0 [skip ci]"
    assert git_repo.git("log", "-1", "--format=%an") == "github-actions[bot]"
    assert 'version = "1.0.0"' in (git_repo.path / "Cargo.toml").read_text(encoding="utf-8")
    changelog = (git_repo.path / "CHANGELOG.md").read_text(encoding="utf-8")
    assert changelog.startswith("# Changelog\n\n# 1.0.0 (2026-10-18)")
    assert "**commands:** add /poll" in changelog
    assert Repository(git_repo.path).is_clean()


def test_second_run_has_nothing_to_release(git_repo: GitRepo) -> None:
    git_repo.add_bare_remote()
    _seed(git_repo)
    releaser = _releaser(git_repo, MockConsole())
    assert isinstance(releaser.release(branch="main", token="t", dry_run=False), Ok)

    again = releaser.release(branch="main", token="t", dry_run=False)

    # the release commit itself is a chore
    assert isinstance(again, Ok)
    assert not again.value.released


def test_failed_push_rolls_back(git_repo: GitRepo) -> None:
    head = _seed(git_repo)
    console = MockConsole()

    result = _releaser(git_repo, console).release(branch="main", token="t", dry_run=False)

    assert isinstance(result, Err)
    assert result.error.kind == "push_failed"
    repo = Repository(git_repo.path)
    assert repo.head_sha() == Ok(head)
    assert not repo.tag_exists("v1.0.0")
    assert (git_repo.path / "Cargo.toml").read_text(encoding="utf-8") == MANIFEST + "\n"
    assert not (git_repo.path / "CHANGELOG.md").exists()
    assert repo.is_clean()
    assert console.find("rolling back")


def test_dry_run_changes_nothing(git_repo: GitRepo) -> None:
    head = _seed(git_repo)
    console = MockConsole()

    result = _releaser(git_repo, console).release(branch="main", token=None, dry_run=True)

    assert isinstance(result, Ok)
    assert result.value.dry_run
    assert result.value.tag == "v1.0.0"
    assert Repository(git_repo.path).head_sha() == Ok(head)
    assert not (git_repo.path / "CHANGELOG.md").exists()
    assert console.find("### Features")


def test_missing_token(git_repo: GitRepo) -> None:
    _seed(git_repo)

    result = _releaser(git_repo, MockConsole()).release(branch="main", token=None, dry_run=False)

    assert isinstance(result, Err)
    assert result.error.kind == "token_missing"


def test_non_release_branch(git_repo: GitRepo) -> None:
    _seed(git_repo)
    git_repo.checkout_new("feature/poll")

    result = _releaser(git_repo, MockConsole()).release(branch="feature/poll", token="t", dry_run=False)

    assert isinstance(result, Ok)
    assert not result.value.released
