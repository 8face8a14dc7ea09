"""Domain models for note export and import"""

import re
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel

from scribo.errors import InvalidFormatError
from scribo.features.notes.domain import Note


class ExportFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"
    PDF = "pdf"
    TXT = "txt"

    @classmethod
    def parse(cls, value: str) -> "ExportFormat":
        """Case-insensitive lookup; `md` is accepted for markdown"""
        key = (value or "").strip().lower()
        if key == "md":
            return cls.MARKDOWN
        try:
            return cls(key)
        except ValueError:
            raise InvalidFormatError("Invalid format. Use json, markdown, pdf or txt")

    @property
    def media_type(self) -> str:
        return {
            ExportFormat.JSON: "application/json",
            ExportFormat.MARKDOWN: "text/markdown",
            ExportFormat.PDF: "application/pdf",
            ExportFormat.TXT: "text/plain",
        }[self]

    @property
    def extension(self) -> str:
        return "md" if self is ExportFormat.MARKDOWN else self.value


class ImportFormat(str, Enum):
    JSON = "json"
    NOTION = "notion"
    MARKDOWN = "markdown"

    @classmethod
    def parse(cls, value: str) -> "ImportFormat":
        key = (value or "").strip().lower()
        if key == "md":
            return cls.MARKDOWN
        try:
            return cls(key)
        except ValueError:
            raise InvalidFormatError("Invalid format. Use json, notion, or markdown")


_UNSAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9]")


def safe_filename(title: str) -> str:
    """Title with every non-alphanumeric character replaced by `_`"""
    return _UNSAFE_FILENAME_RE.sub("_", title or "") or "note"


class ExportFile(BaseModel):
    """Rendered export ready to be sent as a download"""
    filename: str
    media_type: str
    content: bytes
    page_count: Optional[int] = None


class ImportFailure(BaseModel):
    """One note that could not be created during an import"""
    index: int
    title: str
    error: str


class ImportResult(BaseModel):
    notes: List[Note] = []
    errors: List[ImportFailure] = []
    total: int = 0

    @property
    def count(self) -> int:
        return len(self.notes)


ImportPayload = Union[str, dict, list]
