"""SQLAlchemy ORM models"""

from scribo.db.models.user import User
from scribo.db.models.note import Note, NoteShare

__all__ = ["User", "Note", "NoteShare"]
