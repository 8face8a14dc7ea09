from datetime import datetime, timezone
from typing import List, Optional

from scribo.features.notes.domain import Note, ShareGrant

OWNER = "owner-1"
CREATED = datetime(2025, 10, 14, 10, 30, tzinfo=timezone.utc)


def make_note(
    title: str = "Meeting notes",
    content: str = "<p>Agenda</p>",
    owner_id: str = OWNER,
    tags: Optional[List[str]] = None,
    shared_with: Optional[List[ShareGrant]] = None,
    **kwargs,
) -> Note:
    """In-memory note for tests that do not need the database"""
    return Note(
        id=kwargs.pop("id", "8d6f6a52-1d2b-4c6e-9a43-6f0e2b7f9a10"),
        title=title,
        content=content,
        owner_id=owner_id,
        tags=tags or [],
        shared_with=shared_with or [],
        created_at=kwargs.pop("created_at", CREATED),
        updated_at=kwargs.pop("updated_at", CREATED),
        last_modified=kwargs.pop("last_modified", CREATED),
        **kwargs,
    )


def grant(user_id: str, permission: str = "read") -> ShareGrant:
    return ShareGrant(user_id=user_id, permission=permission, shared_at=CREATED)
