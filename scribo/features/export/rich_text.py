"""
Rich text parser for note content

Note bodies are stored as a small HTML subset produced by the editor.
`parse_rich_text` turns that HTML into a flat list of segments: styled text
runs and line breaks. Unknown tags are skipped and malformed markup never
raises, so any stored content can be laid out.
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, List


@dataclass
class Segment:
    """A styled run of text, or a line break when `is_break` is set"""
    text: str
    bold: bool = False
    italic: bool = False
    highlight: bool = False
    strikethrough: bool = False
    code: bool = False
    is_break: bool = False

    def with_text(self, text: str) -> "Segment":
        return replace(self, text=text)


BULLET = "• "

# tag name -> style flag it turns on
FORMAT_TAGS: Dict[str, str] = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "mark": "highlight",
    "s": "strikethrough",
    "strike": "strikethrough",
    "del": "strikethrough",
    "code": "code",
}

BLOCK_TAGS = frozenset({"p", "h1", "h2", "h3", "h4", "h5", "h6"})
LIST_TAGS = frozenset({"ul", "ol"})

_ENTITIES = {
    "nbsp": " ",
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "#39": "'",
    "#x27": "'",
    "apos": "'",
}
_ENTITY_RE = re.compile(r"&(nbsp|lt|gt|amp|quot|#39|#x27|apos);", re.IGNORECASE)
_TAG_NAME_RE = re.compile(r"^\s*(/?)\s*([a-zA-Z][a-zA-Z0-9]*)")


def decode_entities(text: str) -> str:
    """Decode the supported HTML entities in one pass (so "&amp;lt;" stays "&lt;")"""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(1).lower()], text)


class _FormatState:
    """Open-tag depth per style flag. A flag is active while its depth is positive."""

    def __init__(self):
        self.depth = {flag: 0 for flag in set(FORMAT_TAGS.values())}

    def open(self, flag: str) -> None:
        self.depth[flag] += 1

    def close(self, flag: str) -> None:
        # unmatched closing tags are a no-op
        self.depth[flag] = max(0, self.depth[flag] - 1)

    def segment(self, text: str) -> Segment:
        return Segment(
            text=text,
            bold=self.depth["bold"] > 0,
            italic=self.depth["italic"] > 0,
            highlight=self.depth["highlight"] > 0,
            strikethrough=self.depth["strikethrough"] > 0,
            code=self.depth["code"] > 0,
        )


def _line_break(text: str) -> Segment:
    return Segment(text=text, is_break=True)


def parse_rich_text(html: str) -> List[Segment]:
    """
    Parse note HTML into text and break segments.

    Supported tags: p, br, strong/b, em/i, mark, s/strike/del, code,
    ul/ol, li and h1-h6. Anything else is dropped while its inner text
    passes through. A `<` without a closing `>` ends the scan.

    Args:
        html: Note content

    Returns:
        List[Segment]: Segments in document order
    """
    segments: List[Segment] = []
    state = _FormatState()
    buffer: List[str] = []

    def flush() -> None:
        if buffer:
            text = decode_entities("".join(buffer))
            buffer.clear()
            if text:
                segments.append(state.segment(text))

    html = html or ""
    i = 0
    while i < len(html):
        char = html[i]
        if char != "<":
            buffer.append(char)
            i += 1
            continue

        end = html.find(">", i + 1)
        if end == -1:
            # unterminated tag: keep what came before it and stop
            break

        raw_tag = html[i + 1:end]
        i = end + 1

        match = _TAG_NAME_RE.match(raw_tag)
        if not match:
            continue
        closing = match.group(1) == "/"
        name = match.group(2).lower()

        if name in FORMAT_TAGS:
            flush()
            flag = FORMAT_TAGS[name]
            if closing:
                state.close(flag)
            else:
                state.open(flag)
        elif name in BLOCK_TAGS:
            flush()
            segments.append(_line_break("\n\n"))
        elif name == "li":
            flush()
            if closing:
                segments.append(_line_break("\n"))
            else:
                segments.append(state.segment(BULLET))
        elif name in LIST_TAGS:
            flush()
            if closing:
                segments.append(_line_break("\n"))
        elif name == "br":
            flush()
            segments.append(_line_break("\n"))

    flush()
    return segments


def plain_text(segments: List[Segment]) -> str:
    """Concatenated text of the non-break segments"""
    return "".join(s.text for s in segments if not s.is_break)
