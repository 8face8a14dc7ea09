from reportlab.pdfbase import pdfmetrics

from scribo.features.export.reflow import wrap_segment, wrap_text
from scribo.features.export.rich_text import Segment


def char_width(text: str) -> float:
    return float(len(text))


def test_short_text_is_one_line():
    assert wrap_text("hello world", 20, char_width) == ["hello world"]


def test_long_run_is_split_within_width():
    text = "the quick brown fox jumps over the lazy dog " * 5

    lines = wrap_text(text, 30, char_width)

    assert len(lines) >= 2
    assert all(char_width(line) <= 30 for line in lines)
    assert " ".join(lines) == " ".join(text.split())


def test_overlong_word_gets_its_own_line():
    lines = wrap_text("a supercalifragilisticexpialidocious b", 10, char_width)

    assert lines == ["a", "supercalifragilisticexpialidocious", "b"]


def test_whitespace_is_collapsed():
    assert wrap_text("  one\n\ttwo   three ", 100, char_width) == ["one two three"]


def test_empty_segments_produce_no_lines():
    assert wrap_segment(Segment(text=""), 100, char_width) == []
    assert wrap_segment(Segment(text="   \n "), 100, char_width) == []
    assert wrap_segment(Segment(text="\n\n", is_break=True), 100, char_width) == []


def test_lines_keep_style_flags():
    segment = Segment(text="alpha beta gamma delta", bold=True, highlight=True, code=True)

    lines = wrap_segment(segment, 11, char_width)

    assert [line.text for line in lines] == ["alpha beta", "gamma delta"]
    assert all(line.bold and line.highlight and line.code for line in lines)
    assert not any(line.italic or line.strikethrough or line.is_break for line in lines)
    assert segment.text == "alpha beta gamma delta"


def test_wrap_with_font_metrics():
    def measure(text):
        return pdfmetrics.stringWidth(text, "Helvetica", 11)

    text = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 12
    max_width = 495.28

    lines = wrap_text(text, max_width, measure)

    assert len(lines) >= 2
    assert all(measure(line) <= max_width for line in lines)
