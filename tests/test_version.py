"""
Tests for compare_versions.
"""

import pytest

from compat_checker.version import compare_versions, is_at_least


VERSIONS = ["", "91.0b1", "91.0", "91.0.1", "91.1", "100.0", "115.0esr", "115.0", "128.5.0"]


class TestCompareVersions:

    @pytest.mark.parametrize("version", VERSIONS)
    def test_reflexive(self, version):
        assert compare_versions(version, version) == 0

    @pytest.mark.parametrize("a", VERSIONS)
    @pytest.mark.parametrize("b", VERSIONS)
    def test_antisymmetric(self, a, b):
        assert compare_versions(a, b) == -compare_versions(b, a)

    def test_monotonic_sequence(self):
        sequence = ["91.0", "91.0.1", "91.1", "100.0"]
        for lower, higher in zip(sequence, sequence[1:]):
            assert compare_versions(lower, higher) == -1
            assert compare_versions(higher, lower) == 1
        assert compare_versions("91.0", "100.0") == -1

    def test_numeric_not_lexicographic(self):
        assert compare_versions("100.0", "99.9") == 1
        assert compare_versions("9.10", "9.9") == 1

    def test_prerelease_below_release(self):
        assert compare_versions("91.0b1", "91.0") == -1
        assert compare_versions("91.0a1", "91.0b1") == -1
        assert compare_versions("1.0.0b", "1.0") == -1

    def test_prerelease_above_previous_release(self):
        assert compare_versions("91.0b1", "90.0") == 1

    def test_missing_segments_are_zero(self):
        assert compare_versions("115", "115.0") == 0
        assert compare_versions("115", "115.0.0") == 0
        assert compare_versions("", "0") == 0
        assert compare_versions("", "0.0") == 0

    def test_none_is_empty(self):
        assert compare_versions(None, "") == 0
        assert compare_versions(None, "1") == -1

    def test_is_at_least(self):
        assert is_at_least("133.0", "133.0")
        assert is_at_least("133.0.1", "133.0")
        assert not is_at_least("128.5.0esr", "133.0")

    def test_non_ascii_characters_are_ignored(self):
        assert compare_versions("1.0é", "1.0") == 0
        assert compare_versions("1.0é", "1.0a.0") == 1
