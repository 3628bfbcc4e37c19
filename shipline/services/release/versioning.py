"""Decide the next version from tags and commit history.

Stable branches release ``X.Y.Z``; prerelease branches release
``X.Y.Z-<channel>.N`` and keep counting N while the base version stays
the same. At most one version comes out of a decision.
"""

from __future__ import annotations

from shipline.core.config import ReleaseConfig
from shipline.core.result import Err, Ok, Result
from shipline.git.repository import Repository
from shipline.services.release.commits import analyze_commits
from shipline.services.release.errors import ReleaseError
from shipline.services.release.model import (
    LastRelease,
    NextRelease,
    NoRelease,
    ReleaseDecision,
    ReleaseType,
)
from shipline.services.release.semver import FIRST_RELEASE, Version, parse_tag


def latest_release(
    tags: list[str], *, prefix: str, channel: str | None
) -> tuple[LastRelease | None, LastRelease | None]:
    """Latest stable release and latest release on ``channel`` among tags.

    Tags that do not parse, or belong to another channel, are ignored.
    """
    stable: LastRelease | None = None
    pre: LastRelease | None = None
    for tag in tags:
        v = parse_tag(tag, prefix)
        if v is None:
            continue
        if not v.is_prerelease:
            if stable is None or v.sort_key > stable.version.sort_key:
                stable = LastRelease(version=v, tag=tag)
        elif channel is not None and v.channel == channel:
            if pre is None or v.sort_key > pre.version.sort_key:
                pre = LastRelease(version=v, tag=tag)
    return stable, pre


def next_version(
    release_type: ReleaseType,
    *,
    last_stable: Version | None,
    last_pre: Version | None,
    channel: str | None,
) -> Version:
    base = last_stable.bump(release_type) if last_stable is not None else FIRST_RELEASE
    if channel is None:
        return base

    if last_pre is not None and last_pre.base.sort_key >= base.sort_key:
        return last_pre.base.with_pre(channel, (last_pre.pre or 0) + 1)
    return base.with_pre(channel, 1)


def decide_release(
    *,
    repo: Repository,
    config: ReleaseConfig,
    branch: str | None,
) -> Result[ReleaseDecision, ReleaseError]:
    """Inspect tags and commits reachable from HEAD and decide what to cut."""
    if branch is None:
        return Ok(NoRelease("not on a branch"))

    release_branch = config.branch(branch)
    if release_branch is None:
        names = ", ".join(b.name for b in config.branches)
        return Ok(NoRelease(f"branch '{branch}' is not a release branch ({names})"))

    tags_r = repo.merged_tags()
    if isinstance(tags_r, Err):
        return Err(ReleaseError(kind="git_failed", message="failed to list tags", hint=tags_r.error.message))

    channel = release_branch.prerelease
    stable, pre = latest_release(tags_r.value, prefix=config.tag_prefix, channel=channel)

    last = stable
    if pre is not None and (last is None or pre.version.sort_key > last.version.sort_key):
        last = pre

    commits_r = repo.commits_since(last.tag if last is not None else None)
    if isinstance(commits_r, Err):
        return Err(
            ReleaseError(kind="git_failed", message="failed to read commit history", hint=commits_r.error.message)
        )

    commits = commits_r.value
    if not commits:
        since = last.tag if last is not None else "the beginning"
        return Ok(NoRelease(f"no commits since {since}"))

    release_type, _ = analyze_commits(commits)
    if release_type is None:
        return Ok(NoRelease(f"no release-worthy commits in {len(commits)} commit(s)"))

    version = next_version(
        release_type,
        last_stable=stable.version if stable is not None else None,
        last_pre=pre.version if pre is not None else None,
        channel=channel,
    )
    tag = version.to_tag(config.tag_prefix)
    if repo.tag_exists(tag):
        return Err(
            ReleaseError(
                kind="tag_exists",
                message=f"tag already exists: {tag}",
                hint="The tag is not reachable from HEAD; check for a diverged release branch",
            )
        )

    return Ok(
        NextRelease(
            version=version,
            tag=tag,
            type=release_type,
            branch=branch,
            channel=channel,
            last=last,
            commits=tuple(commits),
        )
    )
