"""Domain models for Notes feature"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class SharePermission(str, Enum):
    """Permission level of a share grant"""
    READ = "read"
    WRITE = "write"


class NoteColor(str, Enum):
    """Note card colors"""
    DEFAULT = "default"
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    PINK = "pink"


class NotePriority(str, Enum):
    """Note priority"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


TITLE_MAX_LENGTH = 100
CONTENT_MAX_LENGTH = 10000
CATEGORY_MAX_LENGTH = 50
TAG_MAX_LENGTH = 30
DEFAULT_CATEGORY = "General"


def _clean_tags(tags: Optional[List[str]]) -> List[str]:
    if tags is None:
        return []
    cleaned = []
    for tag in tags:
        tag = str(tag).strip()
        if len(tag) > TAG_MAX_LENGTH:
            raise ValueError(f"Tag cannot be more than {TAG_MAX_LENGTH} characters")
        cleaned.append(tag)
    return cleaned


class ShareGrant(BaseModel):
    """A (user, permission) pair authorizing non-owner access"""
    user_id: str
    permission: SharePermission = SharePermission.READ
    shared_at: datetime

    class Config:
        from_attributes = True


class NoteBase(BaseModel):
    """Base note fields"""
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(default="", max_length=CONTENT_MAX_LENGTH)
    category: str = Field(default=DEFAULT_CATEGORY, max_length=CATEGORY_MAX_LENGTH)
    tags: List[str] = Field(default_factory=list)
    color: NoteColor = NoteColor.DEFAULT
    priority: NotePriority = NotePriority.MEDIUM

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, value):
        if value is None:
            return DEFAULT_CATEGORY
        value = str(value).strip()
        return value or DEFAULT_CATEGORY

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        return _clean_tags(value)


class NoteCreate(NoteBase):
    """Note creation model"""
    pass


class NoteUpdate(BaseModel):
    """Note update model - all fields optional"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = Field(default=None, max_length=CONTENT_MAX_LENGTH)
    category: Optional[str] = Field(default=None, max_length=CATEGORY_MAX_LENGTH)
    tags: Optional[List[str]] = None
    color: Optional[NoteColor] = None
    priority: Optional[NotePriority] = None

    @field_validator("title", "content", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        return None if value is None else _clean_tags(value)


class Note(NoteBase):
    """Complete note domain model"""
    id: str
    owner_id: str
    shared_with: List[ShareGrant] = Field(default_factory=list)
    is_pinned: bool = False
    is_archived: bool = False
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    last_modified: datetime

    class Config:
        from_attributes = True

    def find_grant(self, user_id: str) -> Optional[ShareGrant]:
        for grant in self.shared_with:
            if grant.user_id == user_id:
                return grant
        return None

    @property
    def is_live(self) -> bool:
        return not self.is_deleted


class NoteDraft(BaseModel):
    """Note parsed from an import file, before it is owned and persisted"""
    title: str = "Untitled"
    content: str = ""
    tags: List[str] = Field(default_factory=list)


class NoteStats(BaseModel):
    """Per-user note statistics"""
    total_notes: int = 0
    pinned_notes: int = 0
    archived_notes: int = 0
    shared_notes: int = 0
    total_categories: int = 0
    total_tags: int = 0


class NoteSortField(str, Enum):
    UPDATED_AT = "updated_at"
    CREATED_AT = "created_at"
    TITLE = "title"
    PRIORITY = "priority"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class NoteListQuery(BaseModel):
    """Filters for listing live notes"""
    search: Optional[str] = None
    category: Optional[str] = None
    include_archived: bool = False
    include_shared: bool = True
    pinned: Optional[bool] = None
    sort_by: NoteSortField = NoteSortField.UPDATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
