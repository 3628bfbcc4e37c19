"""Version bump in Cargo.toml (and the matching Cargo.lock entry).

Edits are line-based so the manifest keeps its formatting and comments.
"""

from __future__ import annotations

import re
import tomllib
from pathlib import Path

from shipline.core.result import Err, Ok, Result
from shipline.core.structured import as_str_dict, get_str, get_table
from shipline.platform.files import atomic_write_text
from shipline.services.release.errors import ReleaseError

_SECTION_RE = re.compile(r"^\s*\[\[?([^\]]+)\]\]?\s*(#.*)?$")
_VERSION_LINE_RE = re.compile(r'^(\s*version\s*=\s*)"[^"]*"(.*)$')
_NAME_LINE_RE = re.compile(r'^\s*name\s*=\s*"([^"]*)"')


def package_name(manifest: Path) -> Result[str, ReleaseError]:
    try:
        data_obj: object = tomllib.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        return Err(ReleaseError(kind="manifest_invalid", message=f"cannot read {manifest.name}: {e}"))

    data = as_str_dict(data_obj) or {}
    package = get_table(data, "package")
    name = get_str(package, "name") if package is not None else None
    if name is None:
        return Err(
            ReleaseError(
                kind="manifest_invalid",
                message=f"{manifest.name} has no [package] name",
                hint="Workspace-only manifests are not versioned",
            )
        )
    return Ok(name)


def set_manifest_version(text: str, version: str) -> str | None:
    """Rewrite ``version`` in the [package] table; None if it has none."""
    lines = text.splitlines(keepends=True)
    section: str | None = None
    for i, line in enumerate(lines):
        m = _SECTION_RE.match(line)
        if m is not None:
            section = m.group(1).strip()
            continue
        if section != "package":
            continue
        v = _VERSION_LINE_RE.match(line.rstrip("\r\n"))
        if v is None:
            continue
        ending = line[len(line.rstrip("\r\n")) :]
        lines[i] = f'{v.group(1)}"{version}"{v.group(2)}{ending}'
        return "".join(lines)
    return None


def set_lock_version(text: str, package: str, version: str) -> str:
    """Rewrite the version of ``package`` in a Cargo.lock; unchanged if absent."""
    lines = text.splitlines(keepends=True)
    current: str | None = None
    for i, line in enumerate(lines):
        if line.strip() == "[[package]]":
            current = None
            continue
        n = _NAME_LINE_RE.match(line)
        if n is not None:
            current = n.group(1)
            continue
        if current != package:
            continue
        v = _VERSION_LINE_RE.match(line.rstrip("\r\n"))
        if v is not None:
            ending = line[len(line.rstrip("\r\n")) :]
            lines[i] = f'{v.group(1)}"{version}"{v.group(2)}{ending}'
            current = None
    return "".join(lines)


def bump_manifest(manifest: Path, version: str) -> Result[list[Path], ReleaseError]:
    """Write the new version; returns the files changed."""
    name = package_name(manifest)
    if isinstance(name, Err):
        return name

    text = manifest.read_text(encoding="utf-8")
    updated = set_manifest_version(text, version)
    if updated is None:
        return Err(
            ReleaseError(
                kind="manifest_invalid",
                message=f"{manifest.name} [package] has no literal version",
                hint="version.workspace = true is not supported",
            )
        )

    changed: list[Path] = []
    try:
        atomic_write_text(manifest, updated)
        changed.append(manifest)

        lock = manifest.parent / "Cargo.lock"
        if lock.is_file():
            lock_text = lock.read_text(encoding="utf-8")
            new_lock = set_lock_version(lock_text, name.value, version)
            if new_lock != lock_text:
                atomic_write_text(lock, new_lock)
                changed.append(lock)
    except OSError as e:
        return Err(ReleaseError(kind="manifest_invalid", message=f"failed to write version: {e}"))

    return Ok(changed)
