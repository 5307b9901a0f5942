"""Tests for cell-level parsing helpers."""

import pytest

from results_api.lib.bulk_upload.cells import cell, is_blank, participant_slots, to_float, to_int


class TestCell:
    def test_trims_whitespace(self) -> None:
        assert cell({"a": "  x "}, "a") == "x"

    def test_missing_column_is_empty(self) -> None:
        assert cell({}, "a") == ""
        assert is_blank({}, "a")

    def test_whitespace_only_is_blank(self) -> None:
        assert is_blank({"a": "   "}, "a")


class TestNumbers:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("12", 12.0), (" 12.5 ", 12.5), ("1,200", 1200.0), ("-3", -3.0)],
    )
    def test_to_float_parses(self, text: str, expected: float) -> None:
        assert to_float(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "nan", "inf", "12abc"])
    def test_to_float_rejects(self, text: str) -> None:
        assert to_float(text) is None

    def test_to_int_truncates_spreadsheet_floats(self) -> None:
        assert to_int("45000.0") == 45000

    def test_to_int_default_for_blank(self) -> None:
        assert to_int("", 0) == 0
        assert to_int("x") is None


def test_participant_slots_cover_one_to_ten() -> None:
    assert list(participant_slots()) == list(range(1, 11))
