from __future__ import annotations

from datetime import date
from pathlib import Path

from shipline.core.result import Ok
from shipline.git.repository import Commit
from shipline.services.release.changelog import prepend_changelog, render_notes
from shipline.services.release.model import LastRelease, NextRelease, ReleaseType
from shipline.services.release.semver import Version

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40


def _release(kind: ReleaseType, commits: list[Commit], *, last: LastRelease | None = None) -> NextRelease:
    version = Version(1, 5, 0) if kind != "patch" else Version(1, 4, 3)
    return NextRelease(
        version=version,
        tag=version.to_tag(),
        type=kind,
        branch="main",
        channel=None,
        last=last,
        commits=tuple(commits),
    )


def test_sections_and_links() -> None:
    release = _release(
        "minor",
        [
            Commit(SHA_A, "feat(commands): add /poll"),
            Commit(SHA_B, "fix: ignore bots"),
            Commit(SHA_C, "chore: bump deps"),
        ],
        last=LastRelease(Version(1, 4, 2), "v1.4.2"),
    )

    notes = render_notes(release, repo_slug="revanced/revanced-discord-bot", today=date(2026, 10, 18))

    lines = notes.splitlines()
    assert lines[0] == (
        "# [1.5.0](https://github.com/revanced/revanced-discord-bot/compare/v1.4.2...v1.5.0) (2026-10-18)"
    )
    assert "### Features" in lines
    assert "### Bug Fixes" in lines
    assert (
        "* **commands:** add /poll "
        f"([aaaaaaa](https://github.com/revanced/revanced-discord-bot/commit/{SHA_A}))"
    ) in lines
    assert "bump deps" not in notes
    assert lines.index("### Features") < lines.index("### Bug Fixes")


def test_patch_heading_without_slug() -> None:
    notes = render_notes(_release("patch", [Commit(SHA_B, "fix: y")]), repo_slug=None, today=date(2026, 1, 2))

    assert notes.splitlines()[0] == "## 1.4.3 (2026-01-02)"
    assert "* y (bbbbbbb)" in notes


def test_breaking_section() -> None:
    release = _release("major", [Commit(SHA_A, "feat!: new config format")])

    notes = render_notes(release, repo_slug=None, today=date(2026, 1, 2))

    assert "### BREAKING CHANGES" in notes


class TestPrependChangelog:
    def test_creates_file(self, tmp_path: Path) -> None:
        path = tmp_path / "CHANGELOG.md"

        assert prepend_changelog(path, "## 1.0.0 (2026-01-01)\n") == Ok(None)

        assert path.read_text(encoding="utf-8") == "# Changelog\n\n## 1.0.0 (2026-01-01)\n"

    def test_newest_first(self, tmp_path: Path) -> None:
        path = tmp_path / "CHANGELOG.md"
        path.write_text("# Changelog\n\n## 1.0.0 (2026-01-01)\n\n* first\n", encoding="utf-8")

        prepend_changelog(path, "## 1.0.1 (2026-01-05)\n\n* second\n")

        text = path.read_text(encoding="utf-8")
        assert text.startswith("# Changelog\n\n## 1.0.1")
        assert text.index("1.0.1") < text.index("1.0.0")
        assert text.count("# Changelog") == 1
