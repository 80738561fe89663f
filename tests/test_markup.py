"""Unit tests for the line-oriented markup extractor."""

import pytest

import clock_markup as markup
from clock_errors import MarkupError, ResponseUnparsable


class TestTaggedLines:
    def test_keeps_document_order_and_tags_first_marker(self):
        text = "a caption\nnothing\nenabled\ncaption enabled\n"
        lines = list(markup.tagged_lines(text, "caption", "enabled"))
        assert [line.marker for line in lines] == ["caption", "enabled", "caption"]
        assert lines[2].text == "caption enabled"

    def test_no_match(self):
        assert list(markup.tagged_lines("<html>\n</html>", "DISABLED")) == []


class TestAttributeValue:
    def test_id_attribute(self):
        line = '<INPUT TYPE="BUTTON" CLASS="IWBUTTON" ID="BRKENDBTN" VALUE="End Break" DISABLED>'
        assert markup.attribute_value(line) == "BRKENDBTN"

    def test_unterminated_value_runs_to_token_end(self):
        assert markup.attribute_value('<INPUT ID="CLKONBTN DISABLED>') == "CLKONBTN"

    def test_missing_attribute(self):
        assert markup.attribute_value('<INPUT NAME="CLKONBTN" DISABLED>') is None


class TestElementText:
    def test_inner_text(self):
        assert markup.element_text("  <caption>Clock Off</caption>") == "Clock Off"

    def test_no_closing_tag(self):
        assert markup.element_text("<enabled>true") == "true"

    def test_no_tag(self):
        assert markup.element_text("plain text") == ""


class TestPairwise:
    def test_pairs(self):
        assert markup.pairwise("abcd") == [("a", "b"), ("c", "d")]

    def test_empty(self):
        assert markup.pairwise([]) == []

    def test_odd_count_is_unparsable(self):
        with pytest.raises(MarkupError):
            markup.pairwise([1, 2, 3])
        assert issubclass(MarkupError, ResponseUnparsable)


class TestFieldPairs:
    def _lines(self, *markers):
        return [markup.MarkedLine(m, f"<{m}>x</{m}>") for m in markers]

    def test_label_value_pairs(self):
        pairs = markup.field_pairs(self._lines("caption", "enabled", "innerhtml", "enabled"), "enabled")
        assert [(a.marker, b.marker) for a, b in pairs] == [("caption", "enabled"), ("innerhtml", "enabled")]

    @pytest.mark.parametrize(
        "markers",
        [
            ("caption", "caption", "enabled", "enabled"),
            ("enabled", "caption"),
            ("enabled", "enabled"),
            ("caption", "enabled", "caption"),
        ],
    )
    def test_misaligned(self, markers):
        with pytest.raises(MarkupError):
            markup.field_pairs(self._lines(*markers), "enabled")
