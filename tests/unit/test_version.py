"""Unit tests for version normalization."""

import pytest

from addon_packager.core.version import normalize_version


class TestNormalizeVersion:
    def test_snapshot_qualifier(self) -> None:
        assert normalize_version("1.2.3-SNAPSHOT") == "1.2.3.SNAPSHOT"

    def test_missing_components_default_to_zero(self) -> None:
        assert normalize_version("2") == "2.0.0"
        assert normalize_version("2.1") == "2.1.0"
        assert normalize_version("1.2-SNAPSHOT") == "1.2.0.SNAPSHOT"

    def test_empty_input(self) -> None:
        assert normalize_version(None) == "0.0.0"
        assert normalize_version("") == "0.0.0"
        assert normalize_version("   ") == "0.0.0"

    def test_multi_part_qualifier(self) -> None:
        assert normalize_version("1.0-beta-2") == "1.0.0.beta-2"

    def test_non_numeric_only(self) -> None:
        assert normalize_version("SNAPSHOT") == "0.0.0.SNAPSHOT"

    def test_invalid_qualifier_chars_replaced(self) -> None:
        assert normalize_version("1.2.3.4.5") == "1.2.3.4_5"

    def test_leading_zeros_dropped(self) -> None:
        assert normalize_version("01.002.3") == "1.2.3"

    @pytest.mark.parametrize(
        "raw",
        ["1.2.3-SNAPSHOT", "2", "1.0-beta-2", "1.2.3.4.5", "SNAPSHOT", "1..2", "", "3.0.0.RC1"],
    )
    def test_idempotent(self, raw: str) -> None:
        once = normalize_version(raw)
        assert normalize_version(once) == once
