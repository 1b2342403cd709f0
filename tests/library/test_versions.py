"""
Unit tests for compiler versions and version constraints.
"""

import pytest

from verifier_library.models import CompilerVersion
from verifier_library.models import VersionConstraint


def v(text: str) -> CompilerVersion:
    return CompilerVersion.parse(text)


@pytest.mark.unit
class TestCompilerVersion:
    """Test CompilerVersion parsing and ordering."""

    def test_parse_release_with_commit(self) -> None:
        """Test a full version string keeps release and commit apart."""
        version = v("v0.3.7+commit.6020B8BB")

        assert version.triple == (0, 3, 7)
        assert version.commit == "6020b8bb"
        assert version.release == "0.3.7"
        assert str(version) == "v0.3.7+commit.6020b8bb"

    def test_parse_without_prefix_or_commit(self) -> None:
        """Test a bare release parses and renders with a v prefix."""
        version = v("0.3.10")

        assert version.commit is None
        assert str(version) == "v0.3.10"

    def test_parse_prerelease(self) -> None:
        """Test prerelease suffixes are kept in the release."""
        version = v("0.4.0rc6")

        assert version.is_prerelease
        assert version.release == "0.4.0rc6"

    def test_parse_nightly(self) -> None:
        """Test nightly builds with commit parse."""
        version = v("0.8.21-nightly.2023.5.1+commit.d9974bed")

        assert version.is_prerelease
        assert version.commit == "d9974bed"

    @pytest.mark.parametrize("text", ["", "abc", "0.3", "0.3.x", "latest"])
    def test_parse_rejects_invalid(self, text: str) -> None:
        """Test non-version strings raise ValueError."""
        with pytest.raises(ValueError):
            CompilerVersion.parse(text)

    def test_ordering_is_numeric(self) -> None:
        """Test versions sort by number, not by text."""
        assert v("0.3.10") > v("0.3.9")
        assert v("0.10.0") > v("0.9.9")

    def test_prerelease_sorts_before_release(self) -> None:
        """Test prereleases precede their release and each other in order."""
        assert v("0.4.0b1") < v("0.4.0rc1") < v("0.4.0")
        assert v("0.4.0rc2") < v("0.4.0rc10")

    def test_sorting_newest_first(self) -> None:
        """Test a list sorts newest first with reverse=True."""
        versions = [v("0.3.1"), v("0.4.0rc1"), v("0.3.10"), v("0.4.0")]

        assert [str(x) for x in sorted(versions, reverse=True)] == ["v0.4.0", "v0.4.0rc1", "v0.3.10", "v0.3.1"]

    def test_commit_is_part_of_identity(self) -> None:
        """Test two builds of one release are different versions of the same release."""
        a = v("0.3.7+commit.aaaa")
        b = v("0.3.7+commit.bbbb")

        assert a != b
        assert a.same_release(b)

    def test_satisfies_request_without_commit(self) -> None:
        """Test a request without commit matches any build of the release."""
        assert v("0.3.7+commit.6020b8bb").satisfies_request(v("0.3.7"))
        assert not v("0.3.8+commit.6020b8bb").satisfies_request(v("0.3.7"))

    def test_satisfies_request_with_commit(self) -> None:
        """Test a request with commit matches only that build."""
        assert v("0.3.7+commit.aaaa").satisfies_request(v("v0.3.7+commit.aaaa"))
        assert not v("0.3.7+commit.bbbb").satisfies_request(v("v0.3.7+commit.aaaa"))


@pytest.mark.unit
class TestVersionConstraint:
    """Test pragma constraint evaluation."""

    @pytest.mark.parametrize(
        ("constraint", "version", "expected"),
        [
            ("^0.3.7", "0.3.7", True),
            ("^0.3.7", "0.3.10", True),
            ("^0.3.7", "0.3.6", False),
            ("^0.3.7", "0.4.0", False),
            ("^0.0.3", "0.0.4", False),
            ("^1.2.0", "1.9.0", True),
            ("~0.3.7", "0.3.9", True),
            ("~0.3.7", "0.4.0", False),
            (">=0.3.1 <0.4.0", "0.3.10", True),
            (">=0.3.1 <0.4.0", "0.4.0", False),
            (">=0.3.1, <0.4.0", "0.3.1", True),
            ("0.3.7", "0.3.7+commit.6020b8bb", True),
            ("==0.3.7", "0.3.8", False),
            ("^0.3", "0.3.9", True),
            ("0.2.16 || ^0.3.7", "0.2.16", True),
            ("0.2.16 || ^0.3.7", "0.3.8", True),
            ("0.2.16 || ^0.3.7", "0.2.15", False),
        ],
    )
    def test_matches(self, constraint: str, version: str, expected: bool) -> None:
        """Test constraint semantics across operators."""
        assert VersionConstraint.parse(constraint).matches(v(version)) is expected

    def test_prerelease_excluded_from_plain_range(self) -> None:
        """Test a range without a prerelease comparator never selects prereleases."""
        constraint = VersionConstraint.parse(">=0.3.0")

        assert not constraint.matches(v("0.4.0rc1"))
        assert constraint.matches(v("0.4.0"))

    def test_prerelease_allowed_when_named(self) -> None:
        """Test naming a prerelease admits prereleases of the same release."""
        constraint = VersionConstraint.parse(">=0.4.0b1")

        assert constraint.matches(v("0.4.0rc3"))
        assert constraint.matches(v("0.4.1"))
        assert not constraint.matches(v("0.4.1rc1"))

    @pytest.mark.parametrize("text", ["", "latest", "^0.3.7 bar", ">=", "0.3.7 ||"])
    def test_parse_rejects_invalid(self, text: str) -> None:
        """Test malformed constraints raise ValueError."""
        with pytest.raises(ValueError):
            VersionConstraint.parse(text)

    def test_str_returns_raw_text(self) -> None:
        """Test str() returns the constraint as written."""
        assert str(VersionConstraint.parse(" ^0.3.7 ")) == "^0.3.7"
