"""Word wrapping of styled text runs"""

from typing import Callable, List

from scribo.features.export.rich_text import Segment

Measure = Callable[[str], float]


def wrap_text(text: str, max_width: float, measure: Measure) -> List[str]:
    """
    Greedy word wrap.

    Words are never split: a word wider than `max_width` gets a line of
    its own and overflows it.
    """
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def wrap_segment(segment: Segment, max_width: float, measure: Measure) -> List[Segment]:
    """Wrap one text segment into line segments that keep its style flags"""
    if segment.is_break or not segment.text:
        return []
    return [segment.with_text(line) for line in wrap_text(segment.text, max_width, measure)]
