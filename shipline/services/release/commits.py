"""Conventional Commits analysis.

Maps each commit to the release it warrants:
- ``BREAKING CHANGE:`` footer or ``type!:`` header: major
- ``feat``: minor
- ``fix``, ``perf``, ``revert``: patch
- anything else (chore, docs, ci, ...): no release
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from shipline.git.repository import Commit
from shipline.services.release.model import ReleaseType, max_release_type

_HEADER_RE = re.compile(r"^(?P<type>[a-zA-Z]+)(?:\((?P<scope>[^)]*)\))?(?P<bang>!)?: (?P<desc>.+)$")
_BREAKING_RE = re.compile(r"^BREAKING[ -]CHANGES?:", re.MULTILINE)
# git revert: Revert "<header>" with "This reverts commit <sha>." in the body.
_GIT_REVERT_RE = re.compile(r'^Revert "(?P<header>.+)"$')
_REVERTS_RE = re.compile(r"^This reverts commit (?P<sha>[0-9a-f]+)", re.MULTILINE)

_TYPE_RELEASE: dict[str, ReleaseType] = {
    "feat": "minor",
    "fix": "patch",
    "perf": "patch",
    "revert": "patch",
}


@dataclass(frozen=True, slots=True)
class ConventionalCommit:
    type: str
    scope: str | None
    description: str
    breaking: bool
    commit: Commit

    @property
    def release_type(self) -> ReleaseType | None:
        if self.breaking:
            return "major"
        return _TYPE_RELEASE.get(self.type)


def _parse_git_revert(commit: Commit) -> ConventionalCommit | None:
    m = _GIT_REVERT_RE.match(commit.subject.strip())
    if m is None or _REVERTS_RE.search(commit.body) is None:
        return None
    return ConventionalCommit(
        type="revert",
        scope=None,
        description=m.group("header"),
        breaking=False,
        commit=commit,
    )


def parse_commit(commit: Commit) -> ConventionalCommit | None:
    """Parse a commit header; None if it does not follow the convention.

    Reverts produced by ``git revert`` count as ``revert`` commits.
    """
    reverted = _parse_git_revert(commit)
    if reverted is not None:
        return reverted
    m = _HEADER_RE.match(commit.subject.strip())
    if m is None:
        return None
    scope = m.group("scope")
    return ConventionalCommit(
        type=m.group("type").lower(),
        scope=scope.strip() or None if scope is not None else None,
        description=m.group("desc").strip(),
        breaking=m.group("bang") is not None or bool(_BREAKING_RE.search(commit.body)),
        commit=commit,
    )


def analyze_commits(commits: list[Commit]) -> tuple[ReleaseType | None, list[ConventionalCommit]]:
    """Highest release type warranted by the commits, plus the parsed commits."""
    release: ReleaseType | None = None
    parsed: list[ConventionalCommit] = []
    for commit in commits:
        cc = parse_commit(commit)
        if cc is None:
            continue
        parsed.append(cc)
        release = max_release_type(release, cc.release_type)
    return release, parsed
