"""Capability checks: who may read, write or administer a note"""

import logging
from typing import Union

from scribo.errors import ForbiddenError
from scribo.features.notes.domain import Note, SharePermission

logger = logging.getLogger(__name__)


def is_owner(note: Note, user_id: str) -> bool:
    """Owner-only check used for sharing and the deletion lifecycle"""
    return note.owner_id == str(user_id)


def can_access(
    note: Note,
    user_id: str,
    permission: Union[SharePermission, str] = SharePermission.READ,
) -> bool:
    """
    Decide whether a user holds the requested capability on a note.

    - The owner always has read and write access.
    - A write grant satisfies both read and write checks.
    - A read grant satisfies read checks only.
    - Anyone else has no access.
    """
    permission = SharePermission(permission)
    user_id = str(user_id)

    if is_owner(note, user_id):
        return True

    grant = note.find_grant(user_id)
    if grant is None:
        return False

    if permission == SharePermission.WRITE:
        return grant.permission == SharePermission.WRITE

    return True


def require_access(
    note: Note,
    user_id: str,
    permission: Union[SharePermission, str] = SharePermission.READ,
    action: str = "access",
) -> None:
    """Raise ForbiddenError unless the user holds the capability"""
    if not can_access(note, user_id, permission):
        logger.warning(f"User {user_id} attempted to {action} note {note.id} without {SharePermission(permission).value} access")
        raise ForbiddenError(f"Not authorized to {action} this note")


def require_owner(note: Note, user_id: str, action: str) -> None:
    """Raise ForbiddenError unless the user owns the note"""
    if not is_owner(note, user_id):
        logger.warning(f"User {user_id} attempted to {action} note {note.id} they do not own")
        raise ForbiddenError(f"Only the note owner can {action} this note")
