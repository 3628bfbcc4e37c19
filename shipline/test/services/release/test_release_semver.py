from __future__ import annotations

import pytest

from shipline.services.release.semver import FIRST_RELEASE, Version, parse_tag, parse_version


class TestParse:
    def test_stable(self) -> None:
        assert parse_version("1.2.3") == Version(1, 2, 3)

    def test_prerelease(self) -> None:
        v = parse_version("1.3.0-dev.4")
        assert v == Version(1, 3, 0, channel="dev", pre=4)
        assert v is not None and v.is_prerelease

    @pytest.mark.parametrize("text", ["1.2", "01.2.3", "1.2.3-dev", "1.2.3+build", "v1.2.3"])
    def test_rejects(self, text: str) -> None:
        assert parse_version(text) is None

    def test_parse_tag_prefix(self) -> None:
        assert parse_tag("v2.0.0") == Version(2, 0, 0)
        assert parse_tag("2.0.0") is None
        assert parse_tag("release-2.0.0", "release-") == Version(2, 0, 0)


class TestBump:
    def test_bumps(self) -> None:
        v = Version(1, 2, 3)
        assert v.bump("major") == Version(2, 0, 0)
        assert v.bump("minor") == Version(1, 3, 0)
        assert v.bump("patch") == Version(1, 2, 4)

    def test_bump_drops_prerelease(self) -> None:
        assert Version(1, 2, 3, "dev", 2).bump("patch") == Version(1, 2, 4)


class TestOrdering:
    def test_prerelease_sorts_before_release(self) -> None:
        assert Version(1, 1, 0, "dev", 9).sort_key < Version(1, 1, 0).sort_key
        assert Version(1, 0, 0).sort_key < Version(1, 1, 0, "dev", 1).sort_key

    def test_pre_number(self) -> None:
        assert Version(1, 1, 0, "dev", 2).sort_key < Version(1, 1, 0, "dev", 10).sort_key


def test_str_and_tag() -> None:
    assert str(Version(1, 3, 0, "dev", 1)) == "1.3.0-dev.1"
    assert Version(1, 3, 0).to_tag() == "v1.3.0"
    assert FIRST_RELEASE == Version(1, 0, 0)
