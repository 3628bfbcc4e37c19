"""Publish the built binary as a run artifact."""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path

from shipline.core.result import Err, Ok, Result
from shipline.platform.files import atomic_write_text, sha256_file
from shipline.services.base import BaseService
from shipline.services.stage_errors import ArtifactMissing, ArtifactWriteFailed, StageError

MANIFEST_NAME = "artifact.json"


@dataclass(frozen=True, slots=True)
class PublishedArtifact:
    name: str
    path: Path
    size: int
    sha256: str


class ArtifactService(BaseService):
    def source_path(self) -> Path:
        return self._project.root / self._config.artifact.path

    def destination(self, run_id: str) -> Path:
        return self._project.artifacts_dir(self._config.artifact, run_id) / self._config.artifact.name

    def publish(self, *, run_id: str, dry_run: bool = False) -> Result[PublishedArtifact, StageError]:
        """Copy the binary to ``<artifacts>/<run_id>/<name>``.

        The name is fixed, so publishing twice for the same run overwrites.
        """
        src = self.source_path()
        dst = self.destination(run_id)
        if dry_run:
            self._console.print(f"would publish {src} -> {dst}")
            return Ok(PublishedArtifact(name=self._config.artifact.name, path=dst, size=0, sha256=""))

        if not src.is_file():
            return Err(ArtifactMissing(path=src))

        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
            digest = sha256_file(dst)
            size = dst.stat().st_size
            manifest = {
                "name": self._config.artifact.name,
                "run_id": run_id,
                "source": self._config.artifact.path,
                "size": size,
                "sha256": digest,
            }
            atomic_write_text(dst.parent / MANIFEST_NAME, json.dumps(manifest, indent=2) + "\n")
        except OSError as e:
            return Err(ArtifactWriteFailed(path=dst, reason=str(e)))

        return Ok(PublishedArtifact(name=self._config.artifact.name, path=dst, size=size, sha256=digest))
