from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from shipline.git.repository import Commit
from shipline.services.release.semver import Version

ReleaseType = Literal["major", "minor", "patch"]

_RANK: dict[ReleaseType, int] = {"patch": 1, "minor": 2, "major": 3}


def max_release_type(a: ReleaseType | None, b: ReleaseType | None) -> ReleaseType | None:
    if a is None:
        return b
    if b is None:
        return a
    return a if _RANK[a] >= _RANK[b] else b


@dataclass(frozen=True, slots=True)
class LastRelease:
    version: Version
    tag: str


@dataclass(frozen=True, slots=True)
class NextRelease:
    """The single version a run will cut."""

    version: Version
    tag: str
    type: ReleaseType
    branch: str
    channel: str | None
    last: LastRelease | None
    commits: tuple[Commit, ...]

    @property
    def prerelease(self) -> bool:
        return self.channel is not None


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """What the release stage did.

    Attributes:
        released: True if a new version was published.
        version: The new version (or the one that would be cut in dry-run).
        reason: Why nothing was released, or a short summary.
    """

    released: bool
    reason: str
    version: str | None = None
    tag: str | None = None
    dry_run: bool = False

    @classmethod
    def none(cls, reason: str) -> ReleaseOutcome:
        return cls(released=False, reason=reason)


@dataclass(frozen=True, slots=True)
class NoRelease:
    reason: str


ReleaseDecision = NextRelease | NoRelease
