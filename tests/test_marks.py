"""Unit tests for checkbox glyphs and strikethrough labels (app/engine/marks.py)."""

import pytest
from openpyxl.cell.rich_text import CellRichText, TextBlock

from app.engine.marks import CHECKED, UNCHECKED, bold_heading, checkbox, fan_out, strike_fragment


class TestCheckbox:
    """Tests for checkbox function."""

    def test_glyphs_are_complements(self):
        """Test that true and false always map to the two distinct glyphs."""
        assert checkbox(True) == CHECKED
        assert checkbox(False) == UNCHECKED
        assert checkbox(None) == UNCHECKED
        assert CHECKED != UNCHECKED


class TestFanOut:
    """Tests for fan_out function."""

    def test_selects_exactly_one(self):
        """Test that one enum value ticks exactly one cell."""
        marks = fan_out(("正常", "輕度", "嚴重"), ("B5", "E5", "H5"), "輕度")

        assert marks == {"B5": UNCHECKED, "E5": CHECKED, "H5": UNCHECKED}

    def test_unknown_value_ticks_nothing(self):
        """Test that an unknown or missing value leaves every box unchecked."""
        assert set(fan_out(("a", "b"), ("A1", "B1"), None).values()) == {UNCHECKED}
        assert set(fan_out(("a", "b"), ("A1", "B1"), "c").values()) == {UNCHECKED}

    def test_length_mismatch_raises(self):
        """Test that options and cells must pair up."""
        with pytest.raises(ValueError):
            fan_out(("a", "b"), ("A1",), "a")


class TestStrikeFragment:
    """Tests for strike_fragment function."""

    def test_fragment_struck(self):
        """Test that only the matched substring carries strike formatting."""
        rich = strike_fragment("有 / 無", "無")

        assert isinstance(rich, CellRichText)
        assert rich[0] == "有 / "
        assert isinstance(rich[1], TextBlock)
        assert rich[1].text == "無"
        assert rich[1].font.strike is True
        assert str(rich) == "有 / 無"

    def test_fragment_in_middle(self):
        """Test that text on both sides keeps the base style."""
        rich = strike_fragment("男 / 女 / 其他", "女")

        assert [str(part) for part in rich] == ["男 / ", "女", " / 其他"]
        assert rich[1].font.strike is True

    def test_missing_fragment_returns_plain_label(self):
        """Test that an absent substring leaves the plain string."""
        assert strike_fragment("有 / 無", "未知") == "有 / 無"

    def test_empty_fragment_returns_plain_label(self):
        """Test that an empty substring leaves the plain string."""
        assert strike_fragment("男 / 女", "") == "男 / 女"

    def test_font_name_applied_to_all_runs(self):
        """Test that a font family is carried by every run."""
        rich = strike_fragment("有 / 無", "有", font_name="MingLiU")

        assert all(isinstance(part, TextBlock) for part in rich)
        assert {part.font.rFont for part in rich} == {"MingLiU"}


class TestBoldHeading:
    """Tests for bold_heading function."""

    def test_heading_bold_body_plain(self):
        """Test that the first line is bold and the body follows on a new line."""
        rich = bold_heading("Aspirin", "100mg, QD", "MingLiU")

        assert str(rich) == "Aspirin\n100mg, QD"
        assert rich[0].font.b is True
        assert not rich[1].font.b
