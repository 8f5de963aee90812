"""Tests for relkit.artifacts.semver module."""

from __future__ import annotations

import pytest

from relkit.artifacts.semver import SemVer, parse_version


class TestParseVersion:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1.2.3", SemVer(1, 2, 3)),
            ("v1.2.3", SemVer(1, 2, 3)),
            ("1.2.3-4", SemVer(1, 2, 3, (4,))),
            ("1.2.3-beta.1+build.7", SemVer(1, 2, 3, ("beta", 1), ("build", "7"))),
            (" 0.0.1 ", SemVer(0, 0, 1)),
        ],
    )
    def test_valid(self, text: str, expected: SemVer) -> None:
        assert parse_version(text) == expected

    @pytest.mark.parametrize("text", ["", "1.2", "01.2.3", "1.2.3.4", "latest", "1.2.x", "١.٢.٣"])
    def test_invalid(self, text: str) -> None:
        assert parse_version(text) is None

    def test_str_drops_build(self) -> None:
        version = parse_version("v2.0.0-rc.1+sha.abc")
        assert version is not None
        assert str(version) == "2.0.0-rc.1"
        assert version.is_prerelease


class TestPrecedence:
    """Ordering follows semantic version precedence."""

    def _sorted(self, *texts: str) -> list[str]:
        versions = [parse_version(t) for t in texts]
        assert all(v is not None for v in versions)
        return [str(v) for v in sorted(versions, key=lambda v: v.precedence_key())]  # type: ignore[union-attr]

    def test_numeric_not_lexicographic(self) -> None:
        assert self._sorted("1.10.0", "1.2.0", "1.9.3") == ["1.2.0", "1.9.3", "1.10.0"]

    def test_prerelease_before_release(self) -> None:
        assert self._sorted("1.0.0", "1.0.0-1", "1.0.0-alpha") == ["1.0.0-1", "1.0.0-alpha", "1.0.0"]

    def test_prerelease_identifiers(self) -> None:
        assert self._sorted("1.0.0-alpha.beta", "1.0.0-alpha.1", "1.0.0-alpha") == [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
        ]

    def test_build_metadata_ignored(self) -> None:
        a = parse_version("1.0.0+a")
        b = parse_version("1.0.0+b")
        assert a is not None and b is not None
        assert a.precedence_key() == b.precedence_key()
