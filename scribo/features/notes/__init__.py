"""Notes feature module"""

from scribo.features.notes.api import router
from scribo.features.notes.access import can_access, is_owner
from scribo.features.notes.domain import (
    Note,
    NoteColor,
    NoteCreate,
    NoteDraft,
    NoteListQuery,
    NotePriority,
    NoteStats,
    NoteUpdate,
    ShareGrant,
    SharePermission,
)
from scribo.features.notes.repository import NoteRepository
from scribo.features.notes.service import NoteService

__all__ = [
    "router",
    "can_access",
    "is_owner",
    "Note",
    "NoteColor",
    "NoteCreate",
    "NoteDraft",
    "NoteListQuery",
    "NotePriority",
    "NoteStats",
    "NoteUpdate",
    "ShareGrant",
    "SharePermission",
    "NoteRepository",
    "NoteService",
]
