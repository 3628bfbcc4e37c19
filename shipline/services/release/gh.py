from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from time import sleep

from shipline.core.result import Err, Ok, Result
from shipline.platform.process import ProcessError, merged_env
from shipline.platform.process import run as run_process
from shipline.services.release.errors import ReleaseError
from shipline.services.release.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
)

_REMOTE_RE = re.compile(r"github\.com[:/](?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def _gh_env(token: str) -> dict[str, str]:
    return merged_env({"GH_TOKEN": token, "GITHUB_TOKEN": token})


def repo_slug(environ: Mapping[str, str], remote_url: str | None, configured: str | None) -> str | None:
    """owner/name of the GitHub repository, from config, Actions env, or the remote."""
    if configured:
        return configured
    env_slug = environ.get("GITHUB_REPOSITORY")
    if env_slug:
        return env_slug
    if remote_url:
        m = _REMOTE_RE.search(remote_url.strip())
        if m is not None:
            return m.group("slug")
    return None


def release_exists(
    *,
    cwd: Path,
    repo: str | None,
    tag: str,
    token: str,
) -> Result[bool, ReleaseError]:
    """Whether a GitHub release exists for tag. Retries transient failures."""
    cmd = ["gh", "release", "view", tag, "--json", "tagName"]
    if repo:
        cmd.extend(["--repo", repo])

    for attempt in range(GH_READ_RETRY_ATTEMPTS):
        result = run_process(cmd, cwd=cwd, env=_gh_env(token), timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Ok):
            return Ok(True)

        error = result.error
        if "release not found" in error.stderr.lower():
            return Ok(False)
        if attempt < GH_READ_RETRY_ATTEMPTS - 1 and _is_transient_gh_error(error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue
        return Err(
            ReleaseError(
                kind="gh_failed",
                message=f"failed to query GitHub release {tag}",
                hint=error.stderr.strip() or None,
            )
        )

    return Err(ReleaseError(kind="gh_failed", message=f"failed to query GitHub release {tag}"))


def create_release(
    *,
    cwd: Path,
    repo: str | None,
    tag: str,
    notes: str,
    prerelease: bool,
    token: str,
) -> Result[str, ReleaseError]:
    """Create the GitHub release for an already pushed tag. Returns its URL.

    Not retried: creation is not idempotent. A second attempt for the same
    tag is detected with release_exists first.
    """
    exists = release_exists(cwd=cwd, repo=repo, tag=tag, token=token)
    if isinstance(exists, Err):
        return exists
    if exists.value:
        return Err(ReleaseError(kind="gh_failed", message=f"GitHub release already exists: {tag}"))

    cmd = ["gh", "release", "create", tag, "--title", tag, "--notes", notes, "--verify-tag"]
    if prerelease:
        cmd.append("--prerelease")
    if repo:
        cmd.extend(["--repo", repo])

    result = run_process(cmd, cwd=cwd, env=_gh_env(token), timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        hint = e.stderr.strip() or None
        if hint is not None and ("401" in hint or "bad credentials" in hint.lower()):
            hint = f"{hint} (check the release token)"
        return Err(ReleaseError(kind="gh_failed", message=f"failed to create GitHub release {tag}", hint=hint))

    return Ok(result.value.strip())
