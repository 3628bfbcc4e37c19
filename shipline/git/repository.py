"""Git repository abstraction.

Provides the history queries and write operations the release stage
needs: reachable tags, commits since a tag, commit/tag creation, atomic
push, and the resets used to roll back a failed release.

Usage:
    repo = Repository(project.root)

    match repo.commits_since("v1.2.0"):
        case Ok(commits):
            for c in commits:
                print(c.short_sha, c.subject)
        case Err(e):
            print(f"git log failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shipline.core.result import Err, Ok, Result
from shipline.platform.process import ProcessError
from shipline.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# Field and record separators for `git log --format`.
_FS = "\x1f"
_RS = "\x1e"

__all__ = [
    "Commit",
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class Commit:
    sha: str
    subject: str
    body: str = ""

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def message(self) -> str:
        if not self.body:
            return self.subject
        return f"{self.subject}\n\n{self.body}"


class Repository:
    """Operations on a single git repository.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, *, identity: tuple[str, str] | None = None) -> None:
        """Initialize repository.

        Args:
            path: Repository root (containing .git)
            identity: (name, email) used for commits and tags, overriding git config
        """
        self.path = path
        self.identity = identity

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def head_sha(self) -> Result[str, GitError]:
        return self._value(["rev-parse", "HEAD"], "rev-parse")

    def is_clean(self) -> bool:
        """True if the working tree has no tracked or untracked changes."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return stdout.strip() == ""
            case Err(_):
                return False

    def is_unborn(self) -> bool:
        """True inside a repository whose current branch has no commit yet."""
        if isinstance(self._run(["rev-parse", "--git-dir"]), Err):
            return False
        return isinstance(self._run(["rev-parse", "-q", "--verify", "HEAD"]), Err)

    def merged_tags(self) -> Result[list[str], GitError]:
        """Tags reachable from HEAD. An unborn branch reaches none."""
        if self.is_unborn():
            return Ok([])
        result = self._value(["tag", "--merged", "HEAD"], "tag --merged")
        if isinstance(result, Err):
            return result
        return Ok([t.strip() for t in result.value.splitlines() if t.strip()])

    def tag_exists(self, tag: str) -> bool:
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{tag}"])
        return isinstance(result, Ok)

    def commit_message(self, rev: str) -> Result[str, GitError]:
        """Full message of one commit."""
        return self._value(["log", "-1", "--format=%B", rev, "--"], "log")

    def commits_since(self, ref: str | None) -> Result[list[Commit], GitError]:
        """Commits reachable from HEAD but not from ref, newest first.

        With ref None, returns the whole history of HEAD.
        """
        if self.is_unborn():
            return Ok([])
        rev = f"{ref}..HEAD" if ref else "HEAD"
        result = self._run(["log", f"--format=%H{_FS}%s{_FS}%b{_RS}", rev])
        if isinstance(result, Err):
            return Err(self._error("log", result.error))
        return Ok(_parse_log(result.value))

    def add(self, paths: list[str]) -> Result[None, GitError]:
        return self._unit(["add", "--", *paths], "add")

    def commit(self, message: str) -> Result[str, GitError]:
        """Commit staged changes and return the new HEAD sha."""
        result = self._unit(["commit", "-m", message], "commit")
        if isinstance(result, Err):
            return result
        return self.head_sha()

    def create_tag(self, tag: str, message: str) -> Result[None, GitError]:
        return self._unit(["tag", "-a", tag, "-m", message], "tag")

    def delete_tag(self, tag: str) -> Result[None, GitError]:
        return self._unit(["tag", "-d", tag], "tag -d")

    def reset_mixed(self, ref: str) -> Result[None, GitError]:
        """Move HEAD back to ref, keeping working tree contents."""
        return self._unit(["reset", "--mixed", "-q", ref], "reset")

    def push_atomic(self, remote: str, branch: str, tag: str) -> Result[None, GitError]:
        """Push the branch head and the tag together; either both land or neither."""
        return self._unit(
            ["push", "--atomic", remote, f"HEAD:refs/heads/{branch}", f"refs/tags/{tag}"],
            "push",
        )

    def remote_url(self, remote: str) -> str | None:
        result = self._run(["remote", "get-url", remote])
        if isinstance(result, Err):
            return None
        return result.value.strip() or None

    def _value(self, args: list[str], command: str) -> Result[str, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(command, result.error))
        return Ok(result.value.strip())

    def _unit(self, args: list[str], command: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(command, result.error))
        return Ok(None)

    def _error(self, command: str, e: ProcessError) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
            returncode=e.returncode,
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        prefix = ["git", "-C", str(self.path)]
        if self.identity is not None and command in {"commit", "tag"}:
            name, email = self.identity
            prefix.extend(["-c", f"user.name={name}", "-c", f"user.email={email}"])
        return run_process([*prefix, *args], cwd=self.path, timeout=timeout)


def _parse_log(output: str) -> list[Commit]:
    commits: list[Commit] = []
    for record in output.split(_RS):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split(_FS)
        if len(parts) < 2:
            continue
        sha = parts[0].strip()
        subject = parts[1].strip()
        body = parts[2].strip() if len(parts) > 2 else ""
        commits.append(Commit(sha=sha, subject=subject, body=body))
    return commits
