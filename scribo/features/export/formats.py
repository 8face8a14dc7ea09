"""
Export and import format adapters

Exports project notes to JSON, Markdown and plain text. Imports turn JSON,
Notion JSON and Markdown documents into NoteDraft objects; persisting them
is the service's job.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, List, Optional, Sequence, Union

from scribo.errors import InvalidFormatError
from scribo.features.export.rich_text import decode_entities
from scribo.features.notes.domain import Note, NoteDraft
from scribo.utils.datetime_helper import format_timestamp, to_iso, utcnow

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"
MARKDOWN_NOTE_SEPARATOR = "\n\n---\n\n"

RawImport = Union[str, bytes, dict, list]


# ============================================================================
# EXPORT
# ============================================================================

def note_to_json_dict(note: Note) -> dict:
    return {
        "title": note.title,
        "content": note.content,
        "tags": list(note.tags),
        "isPinned": note.is_pinned,
        "isArchived": note.is_archived,
        "createdAt": to_iso(note.created_at),
        "updatedAt": to_iso(note.updated_at),
    }


def collection_to_json_dict(notes: Sequence[Note], exported_at: Optional[datetime] = None) -> dict:
    return {
        "exportDate": to_iso(exported_at or utcnow()),
        "totalNotes": len(notes),
        "notes": [note_to_json_dict(note) for note in notes],
    }


def note_to_markdown(note: Note) -> str:
    """
    Markdown export of one note.

    Example:
        # Title

        Body

        **Tags:** #work, #ideas

        ---
        Created: 2025-10-14 10:30:00 UTC
        Updated: 2025-10-14 11:00:00 UTC
    """
    markdown = f"# {note.title}\n\n{note.content}\n\n"
    if note.tags:
        markdown += "**Tags:** " + ", ".join(f"#{tag}" for tag in note.tags) + "\n\n"
    markdown += "---\n"
    markdown += f"Created: {format_timestamp(note.created_at)}\n"
    markdown += f"Updated: {format_timestamp(note.updated_at)}\n"
    return markdown


def collection_to_markdown(notes: Sequence[Note]) -> str:
    return MARKDOWN_NOTE_SEPARATOR.join(note_to_markdown(note) for note in notes)


def note_to_text(note: Note) -> str:
    return f"{note.title}\n\n{html_to_plain_text(note.content)}\n"


def collection_to_text(notes: Sequence[Note]) -> str:
    return MARKDOWN_NOTE_SEPARATOR.join(note_to_text(note) for note in notes)


_BLOCK_TAG_RE = re.compile(
    r"</?(?:p|div|h[1-6]|blockquote|pre|ul|ol|table|tr|section|article|header|footer)\b[^>]*>",
    re.IGNORECASE,
)
_LI_OPEN_RE = re.compile(r"<li\b[^>]*>", re.IGNORECASE)
_LI_CLOSE_RE = re.compile(r"</li\s*>", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_ANCHOR_RE = re.compile(r"<a\b[^>]*>(.*?)</a\s*>", re.IGNORECASE | re.DOTALL)
_IMG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_IMG_ALT_RE = re.compile(r"""\balt\s*=\s*(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE)
_ANY_TAG_RE = re.compile(r"<[^>]*>")
_EXTRA_NEWLINES_RE = re.compile(r"\n{3,}")


def _image_placeholder(match: "re.Match[str]") -> str:
    alt = _IMG_ALT_RE.search(match.group(0))
    if alt:
        text = (alt.group(1) or alt.group(2) or "").strip()
        if text:
            return f"[{text}]"
    return "[Image]"


def html_to_plain_text(html: str) -> str:
    """
    Strip note HTML down to readable plain text.

    Block tags become blank lines, list items get a bullet, links keep their
    text, images become [alt] (or [Image]). Every other tag is removed.
    """
    if not html:
        return ""

    text = _BR_RE.sub("\n", html)
    text = _LI_OPEN_RE.sub("• ", text)
    text = _LI_CLOSE_RE.sub("\n", text)
    text = _BLOCK_TAG_RE.sub("\n\n", text)
    text = _ANCHOR_RE.sub(r"\1", text)
    text = _IMG_RE.sub(_image_placeholder, text)
    text = _ANY_TAG_RE.sub("", text)
    text = decode_entities(text)
    text = _EXTRA_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


# ============================================================================
# IMPORT
# ============================================================================

def _load_json(raw: RawImport, error_message: str) -> Any:
    if isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected import payload: {e}")
        raise InvalidFormatError(error_message)


def _clean_title(value: Any) -> str:
    if value is None:
        return UNTITLED
    title = str(value).strip()
    return title or UNTITLED


def _json_tags(value: Any) -> List[str]:
    """Tags from a JSON import, kept as written apart from surrounding whitespace"""
    if not isinstance(value, list):
        return []
    return [str(tag).strip() for tag in value]


def _markdown_tags(line: str) -> List[str]:
    """`#work, #ideas` -> ["work", "ideas"]"""
    tags = (tag.strip().lstrip("#") for tag in line.split(","))
    return [tag for tag in tags if tag]


def _draft_from_dict(item: dict) -> NoteDraft:
    content = item.get("content")
    return NoteDraft(
        title=_clean_title(item.get("title")),
        content="" if content is None else str(content),
        tags=_json_tags(item.get("tags")),
    )


def parse_json_import(raw: RawImport) -> List[NoteDraft]:
    """
    Parse a JSON import.

    Accepts `{"notes": [...]}` (the collection export), a bare list, or a
    single note object.

    Raises:
        InvalidFormatError: Unparseable JSON or an element that is not an object
    """
    data = _load_json(raw, "Invalid JSON format")

    if isinstance(data, dict) and isinstance(data.get("notes"), list):
        items = data["notes"]
    elif isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        items = [data]
    else:
        raise InvalidFormatError("Invalid JSON format")

    drafts = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidFormatError(f"Invalid JSON format: note {index + 1} is not an object")
        drafts.append(_draft_from_dict(item))
    return drafts


def _notion_plain_text(item: dict, prop: str, kind: str) -> Optional[str]:
    try:
        return item["properties"][prop][kind][0]["plain_text"]
    except (KeyError, IndexError, TypeError):
        return None


def parse_notion_import(raw: RawImport) -> List[NoteDraft]:
    """
    Parse a Notion JSON export (a list of pages or a single page).

    Plain `title`/`content` keys win over Notion `properties`.
    """
    data = _load_json(raw, "Invalid Notion format")
    items = data if isinstance(data, list) else [data]

    drafts = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidFormatError(f"Invalid Notion format: page {index + 1} is not an object")
        title = item.get("title") or _notion_plain_text(item, "title", "title")
        content = item.get("content") or _notion_plain_text(item, "content", "rich_text") or ""
        drafts.append(
            NoteDraft(
                title=_clean_title(title),
                content=str(content),
                tags=_json_tags(item.get("tags")),
            )
        )
    return drafts


_SECTION_SPLIT_RE = re.compile(r"\n\s*---\s*\n")
_METADATA_PREFIXES = ("# ", "**Tags:**", "---", "Created:", "Updated:")


def _parse_markdown_section(section: str) -> Optional[NoteDraft]:
    title: Optional[str] = None
    tags: List[str] = []
    content_lines: List[str] = []

    for line in section.split("\n"):
        if line.startswith("# "):
            if title is None:
                title = line[2:].strip()
            continue
        if line.startswith("**Tags:**"):
            tags = _markdown_tags(line[len("**Tags:**"):])
            continue
        if line.startswith(_METADATA_PREFIXES):
            continue
        content_lines.append(line)

    content = "\n".join(content_lines).strip()
    if title is None and not tags and not content:
        # e.g. the Created/Updated trailer of an exported note
        return None
    return NoteDraft(title=_clean_title(title), content=content, tags=tags)


def parse_markdown_import(raw: Union[str, bytes]) -> List[NoteDraft]:
    """
    Parse Markdown into notes, one per `---` separated section.

    In each section the first `# ` heading is the title and a `**Tags:**`
    line gives comma separated tags. Other non-metadata lines are the content.

    Raises:
        InvalidFormatError: Empty or non-text input
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidFormatError("Invalid Markdown file. Please ensure the file is in text format.")
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidFormatError("Invalid Markdown file. Please ensure the file is in text format.")

    text = raw.replace("\r\n", "\n")
    drafts = []
    for section in _SECTION_SPLIT_RE.split(text):
        draft = _parse_markdown_section(section)
        if draft is not None:
            drafts.append(draft)
    return drafts
