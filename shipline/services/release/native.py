"""In-process release tool.

Cuts at most one version per invocation:

1. decide the next version from tags and Conventional Commits
2. bump Cargo.toml / Cargo.lock and prepend CHANGELOG.md
3. commit ``chore(release): <version> [skip ci]`` and tag it
4. push branch and tag atomically
5. create the GitHub release

Steps 2-4 are transactional: if any of them fails, the local commit
and tag are removed and the touched files restored, so a failed run
leaves no partial release behind.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from pathlib import Path

from shipline.core.config import Config
from shipline.core.project import Project
from shipline.core.result import Err, Ok, Result
from shipline.git.repository import Repository
from shipline.output.console import ConsoleProtocol, Style
from shipline.services.release.changelog import prepend_changelog, render_notes
from shipline.services.release.errors import ReleaseError
from shipline.services.release.gh import create_release, repo_slug
from shipline.services.release.manifest import bump_manifest
from shipline.services.release.model import NextRelease, NoRelease, ReleaseOutcome
from shipline.services.release.versioning import decide_release


class NativeReleaser:
    def __init__(
        self,
        *,
        project: Project,
        config: Config,
        console: ConsoleProtocol,
        environ: Mapping[str, str],
        repo: Repository | None = None,
        today: date | None = None,
    ) -> None:
        self._project = project
        self._config = config
        self._console = console
        self._environ = environ
        self._repo = repo or Repository(
            project.root,
            identity=(config.release.git_user_name, config.release.git_user_email),
        )
        self._today = today

    def plan(self, *, branch: str | None) -> Result[NextRelease | NoRelease, ReleaseError]:
        return decide_release(repo=self._repo, config=self._config.release, branch=branch)

    def release(self, *, branch: str | None, token: str | None, dry_run: bool) -> Result[ReleaseOutcome, ReleaseError]:
        decision = self.plan(branch=branch)
        if isinstance(decision, Err):
            return decision
        if isinstance(decision.value, NoRelease):
            return Ok(ReleaseOutcome.none(decision.value.reason))

        nxt = decision.value
        cfg = self._config.release
        slug = repo_slug(self._environ, self._repo.remote_url(cfg.remote), cfg.repo)
        notes = render_notes(nxt, repo_slug=slug, today=self._today or date.today())

        since = nxt.last.tag if nxt.last is not None else "first release"
        self._console.print(
            f"{nxt.type} release: {nxt.tag} ({len(nxt.commits)} commit(s) since {since})",
            Style.BOLD,
        )

        if dry_run:
            for line in notes.splitlines():
                self._console.print(line, Style.DIM)
            return Ok(
                ReleaseOutcome(
                    released=False,
                    reason="dry run",
                    version=str(nxt.version),
                    tag=nxt.tag,
                    dry_run=True,
                )
            )

        if token is None:
            return Err(ReleaseError(kind="token_missing", message=f"${cfg.token_env} is not set"))

        pushed = self._prepare_and_push(nxt, notes)
        if isinstance(pushed, Err):
            return pushed
        self._console.success(f"pushed {nxt.tag} to {cfg.remote}/{nxt.branch}")

        if cfg.github_release:
            created = create_release(
                cwd=self._project.root,
                repo=slug,
                tag=nxt.tag,
                notes=notes,
                prerelease=nxt.prerelease,
                token=token,
            )
            if isinstance(created, Err):
                e = created.error
                return Err(
                    ReleaseError(
                        kind=e.kind,
                        message=f"{e.message} (tag {nxt.tag} is already pushed)",
                        hint=e.hint or f"Create the release manually: gh release create {nxt.tag}",
                    )
                )
            if created.value:
                self._console.print(created.value, Style.DIM)

        return Ok(ReleaseOutcome(released=True, reason="published", version=str(nxt.version), tag=nxt.tag))

    def _prepare_and_push(self, nxt: NextRelease, notes: str) -> Result[None, ReleaseError]:
        cfg = self._config.release
        head = self._repo.head_sha()
        if isinstance(head, Err):
            return Err(ReleaseError(kind="git_failed", message="failed to resolve HEAD", hint=head.error.message))

        manifest = self._project.root / cfg.manifest
        changelog = self._project.root / cfg.changelog_file
        snapshot = _Snapshot.take([manifest, manifest.parent / "Cargo.lock", changelog])
        state = _State(orig_head=head.value)

        result = self._apply(nxt, notes, manifest=manifest, changelog=changelog, state=state)
        if isinstance(result, Err):
            self._rollback(state, snapshot, tag=nxt.tag)
        return result

    def _apply(
        self,
        nxt: NextRelease,
        notes: str,
        *,
        manifest: Path,
        changelog: Path,
        state: _State,
    ) -> Result[None, ReleaseError]:
        cfg = self._config.release
        version = str(nxt.version)

        changed: list[Path] = []
        if manifest.is_file():
            bumped = bump_manifest(manifest, version)
            if isinstance(bumped, Err):
                return bumped
            changed.extend(bumped.value)

        written = prepend_changelog(changelog, notes)
        if isinstance(written, Err):
            return written
        changed.append(changelog)

        rel = [str(p.relative_to(self._project.root)) for p in changed]
        added = self._repo.add(rel)
        if isinstance(added, Err):
            return Err(ReleaseError(kind="git_failed", message="git add failed", hint=added.error.message))
        state.staged = True

        message = cfg.commit_message.format(version=version, tag=nxt.tag)
        committed = self._repo.commit(message)
        if isinstance(committed, Err):
            return Err(ReleaseError(kind="git_failed", message="git commit failed", hint=committed.error.message))
        state.committed = True

        tagged = self._repo.create_tag(nxt.tag, message)
        if isinstance(tagged, Err):
            return Err(ReleaseError(kind="git_failed", message="git tag failed", hint=tagged.error.message))
        state.tagged = True

        pushed = self._repo.push_atomic(cfg.remote, nxt.branch, nxt.tag)
        if isinstance(pushed, Err):
            return Err(
                ReleaseError(
                    kind="push_failed",
                    message=f"failed to push {nxt.tag}",
                    hint=pushed.error.message,
                )
            )
        return Ok(None)

    def _rollback(self, state: _State, snapshot: _Snapshot, *, tag: str) -> None:
        self._console.warning("release failed, rolling back local changes")
        if state.tagged:
            deleted = self._repo.delete_tag(tag)
            if isinstance(deleted, Err):
                self._console.warning(f"could not delete tag {tag}: {deleted.error.message}")
        if state.committed or state.staged:
            reset = self._repo.reset_mixed(state.orig_head)
            if isinstance(reset, Err):
                self._console.warning(f"could not reset to {state.orig_head[:7]}: {reset.error.message}")
        for problem in snapshot.restore():
            self._console.warning(problem)


class _State:
    def __init__(self, *, orig_head: str) -> None:
        self.orig_head = orig_head
        self.staged = False
        self.committed = False
        self.tagged = False


class _Snapshot:
    """File contents captured before a release touches them (None = absent)."""

    def __init__(self, files: dict[Path, bytes | None]) -> None:
        self._files = files

    @classmethod
    def take(cls, paths: list[Path]) -> _Snapshot:
        files: dict[Path, bytes | None] = {}
        for p in paths:
            files[p] = p.read_bytes() if p.is_file() else None
        return cls(files)

    def restore(self) -> list[str]:
        """Restore every file; returns a description of each failure."""
        problems: list[str] = []
        for path, content in self._files.items():
            try:
                if content is None:
                    path.unlink(missing_ok=True)
                else:
                    path.write_bytes(content)
            except OSError as e:
                problems.append(f"could not restore {path.name}: {e}")
        return problems
