"""Share registry: per-user grants on a note"""

from datetime import datetime
from typing import Optional, Union

from scribo.errors import SelfShareError
from scribo.features.notes.domain import Note, ShareGrant, SharePermission
from scribo.utils.datetime_helper import utcnow


def share_with(
    note: Note,
    target_user_id: str,
    permission: Union[SharePermission, str] = SharePermission.READ,
    now: Optional[datetime] = None,
) -> ShareGrant:
    """
    Grant a user access to a note.

    An existing grant for the same user is updated in place (permission and
    shared_at), so a user never holds more than one grant.

    Raises:
        SelfShareError: If the target is the note owner
    """
    target_user_id = str(target_user_id)
    if target_user_id == note.owner_id:
        raise SelfShareError("Cannot share note with yourself")

    permission = SharePermission(permission)
    now = now or utcnow()

    grant = note.find_grant(target_user_id)
    if grant is not None:
        grant.permission = permission
        grant.shared_at = now
        return grant

    grant = ShareGrant(user_id=target_user_id, permission=permission, shared_at=now)
    note.shared_with.append(grant)
    return grant


def unshare_from(note: Note, target_user_id: str) -> bool:
    """Remove any grant for the user. Returns False when there was none."""
    target_user_id = str(target_user_id)
    before = len(note.shared_with)
    note.shared_with = [g for g in note.shared_with if g.user_id != target_user_id]
    return len(note.shared_with) != before
