"""
PDF rendering for note exports

Lays out parsed rich text on A4 pages with reportlab: every text segment is
word wrapped to the content width and drawn line by line, starting a new
page whenever the cursor drops below the bottom threshold.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Iterable, Optional, Sequence

from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from scribo.config import PdfLayoutConfig
from scribo.errors import UpstreamError
from scribo.features.export.reflow import wrap_segment
from scribo.features.export.rich_text import Segment, parse_rich_text
from scribo.features.notes.domain import Note
from scribo.utils.datetime_helper import format_timestamp, utcnow

logger = logging.getLogger(__name__)


# (bold, italic) -> standard font
FONTS = {
    (False, False): "Helvetica",
    (True, False): "Helvetica-Bold",
    (False, True): "Helvetica-Oblique",
    (True, True): "Helvetica-BoldOblique",
}

TITLE_COLOR = colors.Color(0.15, 0.38, 0.91)
META_COLOR = colors.Color(0.4, 0.4, 0.4)
TEXT_COLOR = colors.black
CODE_COLOR = colors.Color(0.78, 0.15, 0.31)
HIGHLIGHT_COLOR = colors.Color(1.0, 0.95, 0.4)
RULE_COLOR = colors.Color(0.7, 0.7, 0.7)

# Standard PDF fonts only cover WinAnsi (cp1252)
PDF_TEXT_ENCODING = "cp1252"


def sanitize_for_pdf(text: str) -> str:
    """Drop characters the standard fonts cannot draw (emoji, most non-Latin scripts)"""
    kept = []
    for char in text:
        if char in "\r\n\t":
            kept.append(" ")
            continue
        try:
            char.encode(PDF_TEXT_ENCODING)
        except UnicodeEncodeError:
            continue
        if ord(char) < 32:
            continue
        kept.append(char)
    return "".join(kept)


def font_for(segment: Segment) -> str:
    return FONTS[(segment.bold, segment.italic)]


@dataclass
class PdfDocument:
    data: bytes
    page_count: int


class PdfDocumentBuilder:
    """
    Cursor based page assembler.

    `y` runs top-down from `layout.top_y`. Breaks only move the cursor;
    text lines check for room first, then draw and advance one line.
    """

    def __init__(self, layout: PdfLayoutConfig, title: Optional[str] = None):
        self.layout = layout
        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(
            self._buffer,
            pagesize=(layout.page_width, layout.page_height),
        )
        if title:
            self._canvas.setTitle(sanitize_for_pdf(title))
        self.page_count = 1
        self.y = layout.top_y

    # ------------------------------------------------------------------
    # Pages and cursor
    # ------------------------------------------------------------------

    def new_page(self) -> None:
        self._canvas.showPage()
        self.page_count += 1
        self.y = self.layout.top_y

    def ensure_room(self) -> None:
        if self.y < self.layout.bottom_threshold:
            self.new_page()

    def skip(self, amount: float) -> None:
        self.y -= amount

    def add_break(self, segment: Segment) -> None:
        self.skip(self.layout.line_height * segment.text.count("\n"))

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw_segment(
        self,
        segment: Segment,
        font_size: Optional[float] = None,
        line_height: Optional[float] = None,
        color=None,
    ) -> None:
        """Wrap a text segment to the content width and draw each line"""
        size = font_size or self.layout.body_font_size
        leading = line_height or self.layout.line_height
        font = font_for(segment)

        def measure(text: str) -> float:
            return pdfmetrics.stringWidth(sanitize_for_pdf(text), font, size)

        for line in wrap_segment(segment, self.layout.content_width, measure):
            self.ensure_room()
            self._draw_line(line, font, size, color)
            self.skip(leading)

    def _draw_line(self, line: Segment, font: str, size: float, color=None) -> None:
        text = sanitize_for_pdf(line.text)
        if not text:
            return

        x = self.layout.margin
        width = pdfmetrics.stringWidth(text, font, size)
        c = self._canvas

        if line.highlight:
            c.setFillColor(HIGHLIGHT_COLOR)
            c.rect(x, self.y - size * 0.25, width, size * 1.2, fill=1, stroke=0)

        if line.code:
            c.setFillColor(CODE_COLOR)
        else:
            c.setFillColor(color or TEXT_COLOR)
        c.setFont(font, size)
        c.drawString(x, self.y, text)

        if line.strikethrough:
            mid = self.y + size * 0.3
            c.setStrokeColor(color or TEXT_COLOR)
            c.setLineWidth(0.8)
            c.line(x, mid, x + width, mid)

    def draw_rich_text(self, html: str) -> None:
        for segment in parse_rich_text(html):
            if segment.is_break:
                self.add_break(segment)
            else:
                self.draw_segment(segment)

    def draw_title(self, title: str, font_size: Optional[float] = None) -> None:
        size = font_size or self.layout.title_font_size
        self.draw_segment(
            Segment(text=title, bold=True),
            font_size=size,
            line_height=size + 8,
            color=TITLE_COLOR,
        )

    def draw_meta(self, text: str) -> None:
        self.draw_segment(
            Segment(text=text),
            font_size=self.layout.meta_font_size,
            line_height=self.layout.line_height,
            color=META_COLOR,
        )

    def draw_tags(self, tags: Sequence[str]) -> None:
        if not tags:
            return
        self.ensure_room()
        self.draw_segment(
            Segment(text="Tags: " + ", ".join(f"#{tag}" for tag in tags)),
            font_size=self.layout.tags_font_size,
            color=TITLE_COLOR,
        )

    def draw_rule(self) -> None:
        self.ensure_room()
        c = self._canvas
        c.setStrokeColor(RULE_COLOR)
        c.setLineWidth(0.5)
        c.line(self.layout.margin, self.y, self.layout.page_width - self.layout.margin, self.y)
        self.skip(self.layout.note_spacing)

    def draw_note(self, note: Note) -> None:
        self.draw_title(note.title)
        self.draw_meta(f"Created: {format_timestamp(note.created_at)}")
        self.skip(self.layout.line_height / 2)
        self.draw_rich_text(note.content)
        if note.tags:
            self.skip(self.layout.line_height / 2)
            self.draw_tags(note.tags)

    def finish(self) -> PdfDocument:
        try:
            self._canvas.save()
        except Exception as e:
            logger.error(f"Failed to render PDF: {e}", exc_info=True)
            raise UpstreamError("Failed to render PDF") from e
        return PdfDocument(data=self._buffer.getvalue(), page_count=self.page_count)


def render_note_pdf(note: Note, layout: Optional[PdfLayoutConfig] = None) -> PdfDocument:
    """Single note: title, created line, formatted body, tags"""
    builder = PdfDocumentBuilder(layout or PdfLayoutConfig(), title=note.title)
    builder.draw_note(note)
    return builder.finish()


def render_collection_pdf(
    notes: Iterable[Note],
    layout: Optional[PdfLayoutConfig] = None,
    exported_at: Optional[datetime] = None,
) -> PdfDocument:
    """
    Several notes in one document.

    Starts with a cover heading (note count, export time), then each note
    separated from the previous one by a horizontal rule.
    """
    notes = list(notes)
    layout = layout or PdfLayoutConfig()
    builder = PdfDocumentBuilder(layout, title="Notes Export")

    builder.draw_title("Notes Export")
    builder.draw_meta(f"Total notes: {len(notes)}")
    builder.draw_meta(f"Exported: {format_timestamp(exported_at or utcnow())}")
    builder.skip(layout.note_spacing)

    for index, note in enumerate(notes):
        if index > 0:
            builder.draw_rule()
        builder.draw_note(note)
        builder.skip(layout.note_spacing)

    return builder.finish()
