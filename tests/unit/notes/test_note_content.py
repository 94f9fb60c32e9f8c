"""Unit tests for preview text and readable foreground."""

import pytest

from sticky_notes.notes.content import (
    Foreground,
    extract_preview_text,
    luminance,
    parse_color,
    readable_foreground,
)

XAML_NS = "http://schemas.microsoft.com/winfx/2006/xaml/presentation"


class TestExtractPreviewText:
    """Test best-effort plain text extraction."""

    def test_empty(self):
        assert extract_preview_text("") == ""
        assert extract_preview_text(None) == ""

    def test_plain_text_is_stripped(self):
        assert extract_preview_text("  shopping list \n") == "shopping list"

    def test_flow_document_paragraphs(self):
        content = (
            f'<FlowDocument xmlns="{XAML_NS}">'
            "<Paragraph><Run>First</Run> <Bold>line</Bold></Paragraph>"
            "<Paragraph>Second<LineBreak/>Third</Paragraph>"
            "</FlowDocument>"
        )

        assert extract_preview_text(content) == "First line\nSecond\nThird"

    def test_list_items_on_separate_lines(self):
        content = (
            "<FlowDocument><List>"
            "<ListItem><Paragraph>eggs</Paragraph></ListItem>"
            "<ListItem><Paragraph>milk</Paragraph></ListItem>"
            "</List></FlowDocument>"
        )

        lines = [line for line in extract_preview_text(content).splitlines() if line]
        assert lines == ["eggs", "milk"]

    def test_indentation_is_ignored(self):
        content = "<FlowDocument>\n  <Paragraph>Indented</Paragraph>\n</FlowDocument>"
        assert extract_preview_text(content) == "Indented"

    def test_malformed_markup_returns_empty(self):
        assert extract_preview_text("<FlowDocument><Paragraph>oops</FlowDocument>") == ""


class TestParseColor:
    """Test colour string parsing."""

    def test_argb(self):
        assert parse_color("#FFFAD46C") == (0xFF, 0xFA, 0xD4, 0x6C)

    def test_rgb(self):
        assert parse_color("#102030") == (0xFF, 0x10, 0x20, 0x30)

    def test_short_forms(self):
        assert parse_color("#8abc") == (0x88, 0xAA, 0xBB, 0xCC)
        assert parse_color("#abc") == (0xFF, 0xAA, 0xBB, 0xCC)

    @pytest.mark.parametrize("value", ["", "FFFAD46C", "#12345", "#GGGGGG", "#-1234567", None])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_color(value)


class TestReadableForeground:
    """Test luminance-based text colour choice."""

    def test_luminance_bounds(self):
        assert luminance("#FFFFFFFF") == pytest.approx(1.0)
        assert luminance("#FF000000") == pytest.approx(0.0)

    @pytest.mark.parametrize("color", ["#FFFAD46C", "#FFE8FFB5", "#FFD7E3FC", "#FFFFC0CB", "#FFEAC1FF"])
    def test_palette_is_dark_on_light(self, color):
        assert readable_foreground(color) is Foreground.DARK_ON_LIGHT

    def test_dark_background(self):
        assert readable_foreground("#FF202020") is Foreground.LIGHT_ON_DARK

    def test_greys_either_side_of_threshold(self):
        assert readable_foreground("#FF8C8C8C") is Foreground.LIGHT_ON_DARK
        assert readable_foreground("#FFA0A0A0") is Foreground.DARK_ON_LIGHT

    def test_alpha_is_ignored(self):
        assert readable_foreground("#00FFFFFF") is Foreground.DARK_ON_LIGHT

    @pytest.mark.parametrize("color", ["", "blue", "#XYZ", None])
    def test_parse_failure_defaults_to_dark_text(self, color):
        assert readable_foreground(color) is Foreground.DARK_ON_LIGHT
