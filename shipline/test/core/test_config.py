"""Tests for shipline.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipline.core.config import (
    Config,
    ReleaseBranch,
    TriggersConfig,
    load_config,
    load_config_optional,
)
from shipline.core.result import Err, Ok


class TestDefaults:
    def test_triggers(self) -> None:
        triggers = TriggersConfig()
        assert triggers.branches == ("main", "dev")
        assert triggers.pull_request is True
        assert triggers.workflow_dispatch is True
        assert "[skip ci]" in triggers.skip_markers

    def test_build_targets_musl_with_cross(self) -> None:
        config = Config()
        assert config.build.target == "x86_64-unknown-linux-musl"
        assert config.build.use_cross is True
        assert config.build.output_path == "target/x86_64-unknown-linux-musl/release/revanced-discord-bot"

    def test_artifact_points_at_build_output(self) -> None:
        config = Config()
        assert config.artifact.name == "revanced-discord-bot"
        assert config.artifact.path == config.build.output_path

    def test_env_forces_cargo_color(self) -> None:
        assert Config().env_dict() == {"CARGO_TERM_COLOR": "always"}

    def test_release_branches(self) -> None:
        release = Config().release
        assert release.tool == "native"
        assert release.token_env == "GITHUB_TOKEN"
        assert release.branch("main") == ReleaseBranch("main")
        assert release.branch("dev") == ReleaseBranch("dev", prerelease="dev")
        assert release.branch("feature") is None

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.build = None  # type: ignore[misc]


class TestFromDict:
    def test_empty_gives_defaults(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_overrides(self) -> None:
        config = Config.from_dict(
            {
                "triggers": {"branches": ["main"], "pull_request": False},
                "build": {"target": "aarch64-unknown-linux-musl", "binary": "bot", "use_cross": False},
                "lint": {"args": ["--all-targets"]},
                "cache": {"enabled": False},
            }
        )
        assert config.triggers.branches == ("main",)
        assert config.triggers.pull_request is False
        assert config.build.use_cross is False
        assert config.lint.args == ("--all-targets",)
        assert config.cache.enabled is False
        # artifact follows the build unless set explicitly
        assert config.artifact.name == "bot"
        assert config.artifact.path == "target/aarch64-unknown-linux-musl/release/bot"

    def test_env_table_replaces_defaults(self) -> None:
        config = Config.from_dict({"env": {"RUST_BACKTRACE": 1, "CI": True}})
        assert config.env_dict() == {"RUST_BACKTRACE": "1", "CI": "true"}

    def test_release_branches_accept_strings_and_tables(self) -> None:
        config = Config.from_dict(
            {"release": {"branches": ["main", {"name": "next", "prerelease": "beta"}]}}
        )
        assert config.release.branches == (
            ReleaseBranch("main"),
            ReleaseBranch("next", prerelease="beta"),
        )

    def test_release_tool(self) -> None:
        config = Config.from_dict({"release": {"tool": "semantic-release"}})
        assert config.release.tool == "semantic-release"

    def test_unknown_release_tool_raises(self) -> None:
        with pytest.raises(ValueError, match="release.tool"):
            Config.from_dict({"release": {"tool": "goreleaser"}})

    def test_non_bool_flag_raises(self) -> None:
        with pytest.raises(ValueError, match="pull_request"):
            Config.from_dict({"triggers": {"pull_request": "yes"}})

    def test_branch_entry_without_name_raises(self) -> None:
        with pytest.raises(ValueError, match="name"):
            Config.from_dict({"release": {"branches": [{"prerelease": "dev"}]}})


class TestLoadConfig:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "shipline.toml"
        path.write_text('[build]\ntarget = "x86_64-unknown-linux-gnu"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.build.target == "x86_64-unknown-linux-gnu"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "shipline.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "shipline.toml"
        path.write_text("[build\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "shipline.toml"
        path.write_text('[release]\ntool = "other"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message

    def test_optional_missing_gives_defaults(self, tmp_path: Path) -> None:
        result = load_config_optional(tmp_path / "shipline.toml")
        assert result == Ok(Config())

    def test_optional_broken_file_is_error(self, tmp_path: Path) -> None:
        path = tmp_path / "shipline.toml"
        path.write_text("not = [valid", encoding="utf-8")
        assert isinstance(load_config_optional(path), Err)
