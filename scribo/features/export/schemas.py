"""Request and response schemas for Export API"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from scribo.features.export.domain import ImportFailure
from scribo.features.notes.domain import Note


class ImportRequest(BaseModel):
    """
    Import payload.

    `data` is the file content: a JSON string or already-parsed JSON for
    json/notion, a Markdown string for markdown.
    """
    format: str = "json"
    data: Union[str, dict, list, None] = Field(default=None, validate_default=True)

    @field_validator("data")
    @classmethod
    def require_data(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("No data provided")
        return value


class ImportResponse(BaseModel):
    success: bool
    message: str
    count: int
    notes: List[Note]
    errors: Optional[List[ImportFailure]] = None
    warning: Optional[str] = None
