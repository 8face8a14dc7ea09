import re
from datetime import datetime, timezone

from scribo.config import PdfLayoutConfig
from scribo.features.export.pdf import (
    PdfDocumentBuilder,
    font_for,
    render_collection_pdf,
    render_note_pdf,
    sanitize_for_pdf,
)
from scribo.features.export.rich_text import Segment
from tests.helpers import make_note

EMOJI_RE = re.compile("[\U0001F300-\U0001FAFF☀-➿]")


def test_sanitize_drops_emoji_and_keeps_latin():
    text = "Café déjà vu 🎉🚀 ✅ naïve – “quotes” • bullet"

    cleaned = sanitize_for_pdf(text)

    assert not EMOJI_RE.search(cleaned)
    assert "Café déjà vu" in cleaned
    assert "naïve – “quotes” • bullet" in cleaned


def test_sanitize_drops_non_latin_scripts():
    assert sanitize_for_pdf("abc 漢字 def") == "abc  def"


def test_sanitize_keeps_all_ascii():
    ascii_text = "".join(chr(c) for c in range(32, 127))
    assert sanitize_for_pdf(ascii_text) == ascii_text


def test_font_variants():
    assert font_for(Segment(text="x")) == "Helvetica"
    assert font_for(Segment(text="x", bold=True)) == "Helvetica-Bold"
    assert font_for(Segment(text="x", italic=True)) == "Helvetica-Oblique"
    assert font_for(Segment(text="x", bold=True, italic=True)) == "Helvetica-BoldOblique"


def test_short_note_is_one_page():
    note = make_note(content="<p>Hello <strong>world</strong> 🎉</p>", tags=["work"])

    document = render_note_pdf(note)

    assert document.data.startswith(b"%PDF")
    assert document.page_count == 1


def test_long_note_spills_onto_more_pages():
    paragraph = "<p>" + "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 20 + "</p>"
    note = make_note(content=paragraph * 8)

    document = render_note_pdf(note)

    assert document.page_count >= 2


def test_many_line_breaks_paginate():
    note = make_note(content="line<br>" * 120)
    assert render_note_pdf(note).page_count >= 2


def test_breaks_move_cursor_without_drawing():
    layout = PdfLayoutConfig()
    builder = PdfDocumentBuilder(layout)

    builder.add_break(Segment(text="\n\n", is_break=True))

    assert builder.y == layout.top_y - 2 * layout.line_height
    assert builder.page_count == 1


def test_new_page_when_cursor_below_threshold():
    layout = PdfLayoutConfig()
    builder = PdfDocumentBuilder(layout)
    builder.y = layout.bottom_threshold - 1

    builder.draw_segment(Segment(text="next line"))

    assert builder.page_count == 2
    assert builder.y == layout.top_y - layout.line_height


def test_tags_go_to_fresh_page_when_no_room():
    layout = PdfLayoutConfig()
    builder = PdfDocumentBuilder(layout)
    builder.y = layout.bottom_threshold - 5

    builder.draw_tags(["a", "b"])

    assert builder.page_count == 2


def test_styled_segments_render():
    note = make_note(
        content="<p><mark>marked</mark> <s>gone</s> <code>x = 1</code> <em><b>both</b></em></p>"
    )
    document = render_note_pdf(note)
    assert document.page_count == 1
    assert len(document.data) > 0


def test_emoji_only_title_renders():
    note = make_note(title="🎉🎉", content="")
    assert render_note_pdf(note).page_count == 1


def test_collection_pdf():
    notes = [
        make_note(id=f"00000000-0000-4000-8000-00000000000{i}", title=f"Note {i}", content="<p>Body</p>")
        for i in range(3)
    ]

    document = render_collection_pdf(notes, exported_at=datetime(2025, 1, 1, tzinfo=timezone.utc))

    assert document.data.startswith(b"%PDF")
    assert document.page_count == 1


def test_large_collection_paginates():
    body = "<p>" + "word " * 400 + "</p>"
    notes = [
        make_note(id=f"00000000-0000-4000-8000-00000000000{i}", title=f"Note {i}", content=body)
        for i in range(5)
    ]

    assert render_collection_pdf(notes).page_count >= 3
