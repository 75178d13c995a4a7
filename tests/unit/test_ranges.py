"""Tests for npm semver helpers."""

import pytest

from core.ranges import intersects, parse_range, parse_version, version_gt


class TestIntersects:
    """Test npm range intersection."""

    @pytest.mark.parametrize(
        "range_a,range_b",
        [
            ("^1.0.0", "^1.1.0"),
            ("~1.2.0", ">=1.2.5 <2.0.0"),
            ("1.x", "1.4.2"),
            ("*", "^3.0.0"),
            ("", "~0.1.0"),
            (">=1.0.0 <1.5.0 || ^2.0.0", "^2.3.0"),
            (">1.2.3", "1.2.4"),
            (">= 1.2.3", "^1.0.0"),
            ("^ 1.0.0", "~ 1.4.0"),
            ("1.0.0 || >= 2.0.0", "^2.1.0"),
            ("1.2.3 - 2.3.4", "^2.0.0"),
        ],
    )
    def test_overlapping_ranges(self, range_a, range_b):
        """Some version satisfies both ranges."""
        assert intersects(range_a, range_b)
        assert intersects(range_b, range_a)

    @pytest.mark.parametrize(
        "range_a,range_b",
        [
            ("^1.0.0", "^2.0.0"),
            ("~1.2.0", "~1.3.0"),
            ("<1.0.0", ">=1.0.0"),
            (">1.2.3", "1.2.3"),
            ("^0.1.0", "^0.2.0"),
            (">= 2.0.0", "^1.0.0"),
        ],
    )
    def test_disjoint_ranges(self, range_a, range_b):
        """No version satisfies both ranges."""
        assert not intersects(range_a, range_b)
        assert not intersects(range_b, range_a)

    def test_non_semver_specs_never_intersect(self):
        """Git URLs and file specs are not ranges."""
        assert not intersects("github:user/repo#v1", "^1.0.0")
        assert not intersects("^1.0.0", "file:../lib")
        assert not intersects(None, "^1.0.0")

    def test_parse_range_rejects_urls(self):
        assert parse_range("git+https://example.com/repo.git") is None
        assert parse_range("^1.0.0") is not None


class TestVersions:
    """Test version parsing and precedence."""

    def test_version_gt(self):
        assert version_gt("1.2.0", "1.0.5")
        assert version_gt("1.0.0", "1.0.0-beta.1")
        assert not version_gt("1.0.0", "1.0.0")
        assert not version_gt("0.9.9", "1.0.0")

    def test_build_metadata_ignored(self):
        """Build metadata does not affect precedence."""
        assert not version_gt("1.0.0+b", "1.0.0+a")
        assert not version_gt("1.0.0+a", "1.0.0+b")
        assert version_gt("1.0.1+a", "1.0.0+b")

    def test_invalid_versions_never_greater(self):
        """Versions that are not semver compare as unordered."""
        assert not version_gt("git+https://example.com/x.git#abc", "1.0.0")
        assert not version_gt("1.0.0", None)

    def test_parse_version(self):
        assert str(parse_version("v1.2.3")) == "1.2.3"
        assert parse_version("not-a-version") is None
        assert parse_version(None) is None
