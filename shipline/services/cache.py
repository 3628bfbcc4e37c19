"""Build cache: restore and save compiled state between runs.

Entries are keyed by the target triple and the crate's manifest and
lockfile, so a dependency change starts from a clean cache. Restoring
is best effort: a miss just means a cold build.
"""

from __future__ import annotations

import hashlib
import shutil
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from shipline.core.result import Err, Ok, Result
from shipline.services.base import BaseService
from shipline.services.stage_errors import CacheFailed

_KEY_FILES = ("Cargo.toml", "Cargo.lock", "rust-toolchain", "rust-toolchain.toml")


@dataclass(frozen=True, slots=True)
class CacheRestore:
    key: str
    hit: bool


class CacheService(BaseService):
    def cache_key(self) -> str:
        h = hashlib.sha256()
        h.update(self._config.build.target.encode("utf-8"))
        for name in _KEY_FILES:
            path = self._project.root / name
            h.update(b"\0" + name.encode("utf-8") + b"\0")
            if path.is_file():
                h.update(path.read_bytes())
        return f"{self._config.build.target}-{h.hexdigest()[:16]}"

    def _entry_dir(self, key: str) -> Path:
        return self._project.cache_dir(self._config.cache) / key

    def restore(self) -> Result[CacheRestore, CacheFailed]:
        key = self.cache_key()
        entry = self._entry_dir(key)
        if not self._config.cache.enabled or not entry.is_dir():
            return Ok(CacheRestore(key=key, hit=False))

        try:
            for rel in self._config.cache.paths:
                src = entry / rel
                if not src.exists():
                    continue
                dst = self._project.root / rel
                if src.is_dir():
                    shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)
                else:
                    dst.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(src, dst)
        except OSError as e:
            return Err(CacheFailed(action="restore", reason=str(e)))

        return Ok(CacheRestore(key=key, hit=True))

    def save(self, key: str | None = None) -> Result[Path, CacheFailed]:
        """Save cached paths under key, replacing the entry and pruning stale ones."""
        key = key or self.cache_key()
        cache_root = self._project.cache_dir(self._config.cache)
        entry = cache_root / key
        staging = cache_root / f".{key}.{uuid4().hex[:8]}.tmp"

        try:
            staging.mkdir(parents=True, exist_ok=False)
            for rel in self._config.cache.paths:
                src = self._project.root / rel
                if not src.exists():
                    continue
                dst = staging / rel
                if src.is_dir():
                    shutil.copytree(src, dst, symlinks=True)
                else:
                    dst.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(src, dst)

            if entry.exists():
                shutil.rmtree(entry)
            staging.rename(entry)

            for other in cache_root.iterdir():
                if other.is_dir() and other.name != key and not other.name.startswith("."):
                    shutil.rmtree(other)
        except OSError as e:
            return Err(CacheFailed(action="save", reason=str(e)))
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

        return Ok(entry)
