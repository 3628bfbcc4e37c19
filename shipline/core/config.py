"""Typed pipeline configuration.

The pipeline is configured by an optional ``shipline.toml`` at the project
root. Every value has a default, and the defaults reproduce the release
workflow of the reference project (musl cross build, clippy with warnings
denied, semantic releases from ``main`` and ``dev``):

    [triggers]
    branches = ["main", "dev"]

    [env]
    CARGO_TERM_COLOR = "always"

    [build]
    target = "x86_64-unknown-linux-musl"
    use_cross = true
    binary = "revanced-discord-bot"

    [[release.branches]]
    name = "dev"
    prerelease = "dev"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "ArtifactConfig",
    "BuildConfig",
    "CacheConfig",
    "Config",
    "ConfigError",
    "LintConfig",
    "ReleaseBranch",
    "ReleaseConfig",
    "ReleaseTool",
    "TriggersConfig",
    "CONFIG_FILE_NAME",
    "load_config",
    "load_config_optional",
]

CONFIG_FILE_NAME = "shipline.toml"

DEFAULT_BRANCHES = ("main", "dev")
DEFAULT_SKIP_MARKERS = ("[skip ci]", "[ci skip]", "[no ci]", "[skip actions]", "[actions skip]")
DEFAULT_TARGET = "x86_64-unknown-linux-musl"
DEFAULT_BINARY = "revanced-discord-bot"
DEFAULT_ENV = (("CARGO_TERM_COLOR", "always"),)
DEFAULT_NPM_PACKAGES = (
    "semantic-release",
    "@semantic-release/git",
    "@semantic-release/changelog",
)

ReleaseTool = Literal["native", "semantic-release"]
_RELEASE_TOOLS: tuple[ReleaseTool, ...] = ("native", "semantic-release")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class TriggersConfig:
    """Which events start a pipeline run."""

    branches: tuple[str, ...] = DEFAULT_BRANCHES
    pull_request: bool = True
    workflow_dispatch: bool = True
    skip_markers: tuple[str, ...] = DEFAULT_SKIP_MARKERS


@dataclass(frozen=True, slots=True)
class BuildConfig:
    target: str = DEFAULT_TARGET
    use_cross: bool = True
    binary: str = DEFAULT_BINARY
    args: tuple[str, ...] = ()

    @property
    def output_path(self) -> str:
        """Relative path of the release binary produced for the target."""
        return f"target/{self.target}/release/{self.binary}"


@dataclass(frozen=True, slots=True)
class LintConfig:
    deny_warnings: bool = True
    no_deps: bool = True
    args: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Build cache settings.

    The cache only speeds up builds; a miss (or a disabled cache) still
    produces a correct build.
    """

    enabled: bool = True
    cache_on_failure: bool = True
    dir: str = ".shipline/cache"
    paths: tuple[str, ...] = ("target",)


@dataclass(frozen=True, slots=True)
class ArtifactConfig:
    name: str = DEFAULT_BINARY
    path: str = f"target/{DEFAULT_TARGET}/release/{DEFAULT_BINARY}"
    dir: str = ".shipline/artifacts"


@dataclass(frozen=True, slots=True)
class ReleaseBranch:
    """A branch releases are cut from.

    Attributes:
        name: Branch name.
        prerelease: Prerelease channel (e.g. "dev" gives 1.2.0-dev.1), None for stable.
    """

    name: str
    prerelease: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    tool: ReleaseTool = "native"
    token_env: str = "GITHUB_TOKEN"
    branches: tuple[ReleaseBranch, ...] = (
        ReleaseBranch("main"),
        ReleaseBranch("dev", prerelease="dev"),
    )
    tag_prefix: str = "v"
    changelog_file: str = "CHANGELOG.md"
    manifest: str = "Cargo.toml"
    commit_message: str = "chore(release): {version} [skip ci]"
    remote: str = "origin"
    github_release: bool = True
    repo: str | None = None
    git_user_name: str = "github-actions[bot]"
    git_user_email: str = "41898282+github-actions[bot]@users.noreply.github.com"
    npm_packages: tuple[str, ...] = DEFAULT_NPM_PACKAGES

    def branch(self, name: str) -> ReleaseBranch | None:
        for b in self.branches:
            if b.name == name:
                return b
        return None


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    triggers: TriggersConfig = field(default_factory=TriggersConfig)
    env: tuple[tuple[str, str], ...] = DEFAULT_ENV
    build: BuildConfig = field(default_factory=BuildConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    artifact: ArtifactConfig = field(default_factory=ArtifactConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    def env_dict(self) -> dict[str, str]:
        return dict(self.env)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: On values that are present but invalid.
        """
        triggers: StrDict = get_table(data, "triggers") or {}
        env: StrDict = get_table(data, "env") or {}
        build: StrDict = get_table(data, "build") or {}
        lint: StrDict = get_table(data, "lint") or {}
        cache: StrDict = get_table(data, "cache") or {}
        artifact: StrDict = get_table(data, "artifact") or {}
        release: StrDict = get_table(data, "release") or {}

        build_cfg = BuildConfig(
            target=get_str(build, "target") or DEFAULT_TARGET,
            use_cross=_bool(build, "use_cross", True),
            binary=get_str(build, "binary") or DEFAULT_BINARY,
            args=tuple(get_str_list(build, "args") or ()),
        )

        return cls(
            triggers=TriggersConfig(
                branches=tuple(_str_list(triggers, "branches", DEFAULT_BRANCHES)),
                pull_request=_bool(triggers, "pull_request", True),
                workflow_dispatch=_bool(triggers, "workflow_dispatch", True),
                skip_markers=tuple(_str_list(triggers, "skip_markers", DEFAULT_SKIP_MARKERS)),
            ),
            env=_env_pairs(env) if "env" in data else DEFAULT_ENV,
            build=build_cfg,
            lint=LintConfig(
                deny_warnings=_bool(lint, "deny_warnings", True),
                no_deps=_bool(lint, "no_deps", True),
                args=tuple(get_str_list(lint, "args") or ()),
            ),
            cache=CacheConfig(
                enabled=_bool(cache, "enabled", True),
                cache_on_failure=_bool(cache, "cache_on_failure", True),
                dir=get_str(cache, "dir") or ".shipline/cache",
                paths=tuple(_str_list(cache, "paths", ("target",))),
            ),
            artifact=ArtifactConfig(
                name=get_str(artifact, "name") or build_cfg.binary,
                path=get_str(artifact, "path") or build_cfg.output_path,
                dir=get_str(artifact, "dir") or ".shipline/artifacts",
            ),
            release=_release_from_dict(release),
        )


def _bool(table: Mapping[str, object], key: str, default: bool) -> bool:
    value = get_bool(table, key)
    if value is None:
        if key in table:
            raise ValueError(f"'{key}' must be a boolean")
        return default
    return value


def _str_list(table: Mapping[str, object], key: str, default: tuple[str, ...]) -> list[str]:
    if key not in table:
        return list(default)
    value = get_str_list(table, key)
    if value is None:
        raise ValueError(f"'{key}' must be a list of strings")
    return value


def _env_pairs(env: StrDict) -> tuple[tuple[str, str], ...]:
    pairs: list[tuple[str, str]] = []
    for k, v in env.items():
        if isinstance(v, bool):
            pairs.append((k, "true" if v else "false"))
        elif isinstance(v, (str, int, float)):
            pairs.append((k, str(v)))
        else:
            raise ValueError(f"env '{k}' must be a scalar")
    return tuple(pairs)


def _release_from_dict(release: StrDict) -> ReleaseConfig:
    defaults = ReleaseConfig()

    tool_raw = get_str(release, "tool") or defaults.tool
    if tool_raw not in _RELEASE_TOOLS:
        raise ValueError(f"release.tool must be one of {', '.join(_RELEASE_TOOLS)}: {tool_raw}")
    tool: ReleaseTool = "native" if tool_raw == "native" else "semantic-release"

    branches = defaults.branches
    raw_branches = get_list(release, "branches")
    if raw_branches is not None:
        parsed: list[ReleaseBranch] = []
        for item in raw_branches:
            if isinstance(item, str) and item.strip():
                parsed.append(ReleaseBranch(item.strip()))
                continue
            table = as_str_dict(item)
            name = get_str(table, "name") if table is not None else None
            if table is None or name is None:
                raise ValueError("release.branches entries need a 'name'")
            parsed.append(ReleaseBranch(name, prerelease=get_str(table, "prerelease")))
        branches = tuple(parsed)

    return ReleaseConfig(
        tool=tool,
        token_env=get_str(release, "token_env") or defaults.token_env,
        branches=branches,
        tag_prefix=get_str(release, "tag_prefix") or defaults.tag_prefix,
        changelog_file=get_str(release, "changelog_file") or defaults.changelog_file,
        manifest=get_str(release, "manifest") or defaults.manifest,
        commit_message=get_str(release, "commit_message") or defaults.commit_message,
        remote=get_str(release, "remote") or defaults.remote,
        github_release=_bool(release, "github_release", True),
        repo=get_str(release, "repo"),
        git_user_name=get_str(release, "git_user_name") or defaults.git_user_name,
        git_user_email=get_str(release, "git_user_email") or defaults.git_user_email,
        npm_packages=tuple(_str_list(release, "npm_packages", DEFAULT_NPM_PACKAGES)),
    )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_optional(path: Path) -> Result[Config, ConfigError]:
    """Load config, falling back to defaults only when the file does not exist.

    A present but broken file is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
