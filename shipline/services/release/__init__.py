"""Release stage.

- versioning: commit analysis and next-version computation
- native: bump, changelog, commit, tag, push, GitHub release
- semantic_release: delegation to the npm tool
- service: token contract and backend selection
"""

from __future__ import annotations
