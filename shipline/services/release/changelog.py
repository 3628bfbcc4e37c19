from __future__ import annotations

from datetime import date
from pathlib import Path

from shipline.core.result import Err, Ok, Result
from shipline.platform.files import atomic_write_text
from shipline.services.release.commits import ConventionalCommit, analyze_commits
from shipline.services.release.errors import ReleaseError
from shipline.services.release.model import NextRelease

CHANGELOG_TITLE = "# Changelog"

_SECTIONS: tuple[tuple[str, str], ...] = (
    ("feat", "Features"),
    ("fix", "Bug Fixes"),
    ("perf", "Performance Improvements"),
    ("revert", "Reverts"),
)


def _commit_link(sha: str, short: str, repo_slug: str | None) -> str:
    if repo_slug is None:
        return short
    return f"[{short}](https://github.com/{repo_slug}/commit/{sha})"


def _line(cc: ConventionalCommit, repo_slug: str | None) -> str:
    scope = f"**{cc.scope}:** " if cc.scope else ""
    link = _commit_link(cc.commit.sha, cc.commit.short_sha, repo_slug)
    return f"* {scope}{cc.description} ({link})"


def render_notes(release: NextRelease, *, repo_slug: str | None, today: date) -> str:
    """Render release notes for one version, newest-first commit order."""
    version = str(release.version)
    if repo_slug is not None and release.last is not None:
        url = f"https://github.com/{repo_slug}/compare/{release.last.tag}...{release.tag}"
        title = f"[{version}]({url})"
    else:
        title = version
    level = "##" if release.type == "patch" else "#"

    lines = [f"{level} {title} ({today.isoformat()})"]

    _, parsed = analyze_commits(list(release.commits))
    for type_name, heading in _SECTIONS:
        items = [cc for cc in parsed if cc.type == type_name]
        if not items:
            continue
        lines.extend(["", "", f"### {heading}", ""])
        lines.extend(_line(cc, repo_slug) for cc in items)

    breaking = [cc for cc in parsed if cc.breaking]
    if breaking:
        lines.extend(["", "", "### BREAKING CHANGES", ""])
        lines.extend(_line(cc, repo_slug) for cc in breaking)

    return "\n".join(lines).rstrip() + "\n"


def prepend_changelog(path: Path, notes: str, *, title: str = CHANGELOG_TITLE) -> Result[None, ReleaseError]:
    """Insert notes at the top of the changelog, below its title."""
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as e:
        return Err(ReleaseError(kind="changelog_failed", message=f"failed to read {path.name}: {e}"))

    body = existing.strip()
    if body.startswith(title):
        body = body[len(title) :].strip()

    parts = [title, notes.strip()]
    if body:
        parts.append(body)
    content = "\n\n".join(parts) + "\n"

    try:
        atomic_write_text(path, content)
    except OSError as e:
        return Err(ReleaseError(kind="changelog_failed", message=f"failed to write {path.name}: {e}"))
    return Ok(None)
