"""
Deletion lifecycle of a note

    Live --soft delete--> SoftDeleted --restore--> Live
    SoftDeleted --permanent delete / empty bin / sweeper--> Purged

The functions here only change in-memory state; persistence and the
owner checks live in NoteService.
"""

from datetime import datetime
from typing import Optional

from scribo.errors import NotInRecycleBinError
from scribo.features.notes.domain import Note
from scribo.utils.datetime_helper import utcnow


def mark_soft_deleted(note: Note, now: Optional[datetime] = None) -> Note:
    """Move a note to the recycle bin. A repeat call re-stamps deleted_at."""
    note.is_deleted = True
    note.deleted_at = now or utcnow()
    return note


def mark_restored(note: Note) -> Note:
    """
    Bring a note back from the recycle bin.

    Raises:
        NotInRecycleBinError: If the note is live
    """
    if not note.is_deleted:
        raise NotInRecycleBinError("Note is not in recycle bin")
    note.is_deleted = False
    note.deleted_at = None
    return note
