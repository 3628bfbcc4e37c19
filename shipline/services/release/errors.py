from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "token_missing",
    "tool_missing",
    "git_failed",
    "tag_exists",
    "manifest_invalid",
    "changelog_failed",
    "push_failed",
    "gh_failed",
    "tool_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
