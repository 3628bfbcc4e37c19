from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shipline.services.release.model import ReleaseType

_NUM = r"(0|[1-9]\d*)"
_VERSION_RE = re.compile(rf"^{_NUM}\.{_NUM}\.{_NUM}(?:-([0-9A-Za-z-]+)\.{_NUM})?$")


@dataclass(frozen=True, slots=True)
class Version:
    """A release version, optionally on a prerelease channel (1.2.0-dev.3)."""

    major: int
    minor: int
    patch: int
    channel: str | None = None
    pre: int | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.channel is not None

    @property
    def base(self) -> Version:
        return Version(self.major, self.minor, self.patch)

    @property
    def sort_key(self) -> tuple[int, int, int, int, str, int]:
        # A prerelease sorts before the release of the same base.
        stable = 0 if self.is_prerelease else 1
        return (self.major, self.minor, self.patch, stable, self.channel or "", self.pre or 0)

    def bump(self, kind: ReleaseType) -> Version:
        match kind:
            case "major":
                return Version(self.major + 1, 0, 0)
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)

    def with_pre(self, channel: str, n: int) -> Version:
        return Version(self.major, self.minor, self.patch, channel=channel, pre=n)

    def to_tag(self, prefix: str = "v") -> str:
        return f"{prefix}{self}"

    def __str__(self) -> str:
        core = f"{self.major}.{self.minor}.{self.patch}"
        if self.channel is None:
            return core
        return f"{core}-{self.channel}.{self.pre}"


FIRST_RELEASE = Version(1, 0, 0)


def parse_version(text: str) -> Version | None:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    channel = m.group(4)
    pre = m.group(5)
    return Version(
        int(m.group(1)),
        int(m.group(2)),
        int(m.group(3)),
        channel=channel,
        pre=int(pre) if pre is not None else None,
    )


def parse_tag(tag: str, prefix: str = "v") -> Version | None:
    if not tag.startswith(prefix):
        return None
    return parse_version(tag[len(prefix) :])
