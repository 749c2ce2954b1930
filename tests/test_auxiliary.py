"""Tests for the shared formatting helpers"""

from auxiliary import format_bytes, format_kb, format_path_for_display, split_csv


class TestFormatBytes:
    def test_small_values_stay_in_bytes(self):
        assert format_bytes(0) == "0 B"
        assert format_bytes(789) == "789 B"

    def test_scales_by_1024(self):
        assert format_bytes(1536) == "1.50 KB"
        assert format_bytes(345 * 1024**2) == "345.00 MB"
        assert format_bytes(int(1.2 * 1024**3)) == "1.20 GB"

    def test_negative_clamps_to_zero(self):
        assert format_bytes(-4096) == "0 B"

    def test_format_kb(self):
        assert format_kb(500_000) == "488.28 MB"
        assert format_kb(0) == "0 B"


class TestFormatPathForDisplay:
    def test_home_prefix_replaced(self):
        assert format_path_for_display("/Users/dev/code/app", "/Users/dev") == "~/code/app"

    def test_home_itself(self):
        assert format_path_for_display("/Users/dev", "/Users/dev") == "~"

    def test_sibling_with_shared_prefix_untouched(self):
        assert format_path_for_display("/Users/devops/code", "/Users/dev") == "/Users/devops/code"


class TestSplitCsv:
    def test_empty_is_none(self):
        assert split_csv(None) is None
        assert split_csv("") is None
        assert split_csv(" , ") is None

    def test_names_are_stripped(self):
        assert split_csv("brew, node ,docker") == frozenset({"brew", "node", "docker"})
