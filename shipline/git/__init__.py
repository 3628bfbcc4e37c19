"""Git operations used by the release stage.

Usage:
    from shipline.git import Repository

    repo = Repository(Path("/path/to/repo"))
    for commit in repo.commits_since("v1.2.0").unwrap():
        print(commit.short_sha, commit.subject)
"""

from shipline.git.repository import Commit, GitError, Repository

__all__ = [
    "Commit",
    "GitError",
    "Repository",
]
