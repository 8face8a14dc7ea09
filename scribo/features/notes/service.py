"""Business logic for Notes: CRUD, sharing and the recycle-bin lifecycle"""

import logging
from typing import List, Optional, Tuple, Union
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from scribo.errors import NotFoundError, UserNotFoundError
from scribo.features.notes import lifecycle, sharing
from scribo.features.notes.access import can_access, is_owner, require_access, require_owner
from scribo.features.notes.domain import (
    Note,
    NoteCreate,
    NoteListQuery,
    NoteStats,
    NoteUpdate,
    SharePermission,
)
from scribo.features.notes.repository import NoteRepository
from scribo.features.users.repository import UserRepository
from scribo.utils.datetime_helper import utcnow

logger = logging.getLogger(__name__)


def parse_note_id(note_id: Union[str, UUID]) -> str:
    """
    Normalize a note id.

    Raises:
        NotFoundError: If the id is not a valid UUID
    """
    try:
        return str(UUID(str(note_id)))
    except (TypeError, ValueError):
        raise NotFoundError("Note not found")


class NoteService:
    """Service layer for note business logic"""

    def __init__(self, db: AsyncSession):
        self.repository = NoteRepository(db)
        self.users = UserRepository(db)

    # ============================================================================
    # LOADING
    # ============================================================================

    async def _load(self, note_id: Union[str, UUID]) -> Note:
        """Fetch a note in any deletion state or raise NotFoundError"""
        note = await self.repository.get(parse_note_id(note_id))
        if note is None:
            raise NotFoundError("Note not found")
        return note

    async def _load_live(self, note_id: Union[str, UUID]) -> Note:
        """Fetch a note that is not in the recycle bin"""
        note = await self._load(note_id)
        if note.is_deleted:
            raise NotFoundError("Note not found")
        return note

    # ============================================================================
    # CRUD
    # ============================================================================

    async def create_note(self, owner_id: str, data: NoteCreate) -> Note:
        now = utcnow()
        note = Note(
            id=str(uuid4()),
            owner_id=str(owner_id),
            created_at=now,
            updated_at=now,
            last_modified=now,
            **data.model_dump(),
        )
        note = await self.repository.create(note)
        logger.info(f"User {owner_id} created note {note.id}")
        return note

    async def get_note(self, note_id: Union[str, UUID], user_id: str) -> Note:
        """
        Get a note the user can read.

        Notes in the recycle bin are only visible to their owner.
        """
        note = await self._load(note_id)
        if note.is_deleted and not is_owner(note, user_id):
            raise NotFoundError("Note not found")
        require_access(note, user_id, SharePermission.READ, action="access")
        return note

    async def list_notes(self, user_id: str, query: NoteListQuery) -> Tuple[List[Note], int]:
        notes, total = await self.repository.list_live(str(user_id), query)
        logger.info(f"User {user_id} retrieved {len(notes)} notes")
        return notes, total

    async def update_note(self, note_id: Union[str, UUID], user_id: str, data: NoteUpdate) -> Note:
        note = await self._load_live(note_id)
        require_access(note, user_id, SharePermission.WRITE, action="update")

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(note, field, value)

        note = await self.repository.save(note)
        logger.info(f"User {user_id} updated note {note.id}")
        return note

    async def toggle_pin(self, note_id: Union[str, UUID], user_id: str) -> Note:
        note = await self._load_live(note_id)
        require_access(note, user_id, SharePermission.WRITE, action="pin/unpin")

        note.is_pinned = not note.is_pinned
        note = await self.repository.save(note)
        logger.info(f"User {user_id} {'pinned' if note.is_pinned else 'unpinned'} note {note.id}")
        return note

    async def toggle_archive(self, note_id: Union[str, UUID], user_id: str) -> Note:
        note = await self._load_live(note_id)
        require_access(note, user_id, SharePermission.WRITE, action="archive/unarchive")

        note.is_archived = not note.is_archived
        note = await self.repository.save(note)
        logger.info(f"User {user_id} {'archived' if note.is_archived else 'unarchived'} note {note.id}")
        return note

    async def get_stats(self, user_id: str) -> NoteStats:
        """Statistics over the live notes a user owns or can see"""
        notes = await self.repository.list_live_accessible(str(user_id))
        categories = {note.category for note in notes}
        tag_count = sum(len(note.tags) for note in notes)
        return NoteStats(
            total_notes=len(notes),
            pinned_notes=sum(1 for note in notes if note.is_pinned),
            archived_notes=sum(1 for note in notes if note.is_archived),
            shared_notes=sum(1 for note in notes if note.shared_with),
            total_categories=len(categories),
            total_tags=tag_count,
        )

    # ============================================================================
    # SHARING
    # ============================================================================

    async def check_access(
        self,
        note_id: Union[str, UUID],
        user_id: str,
        permission: Union[SharePermission, str] = SharePermission.READ,
    ) -> bool:
        """
        Whether the user holds `permission` on the note.

        Only the owner and grant holders get an answer; for anyone else (and
        for grantees once the note is in the recycle bin) the note is not found.
        """
        note = await self._load(note_id)
        if not is_owner(note, user_id):
            if note.is_deleted or note.find_grant(str(user_id)) is None:
                raise NotFoundError("Note not found")
        return can_access(note, user_id, permission)

    async def share_note(
        self,
        note_id: Union[str, UUID],
        requester_id: str,
        permission: Union[SharePermission, str] = SharePermission.READ,
        email: Optional[str] = None,
        target_user_id: Optional[str] = None,
    ) -> Note:
        """
        Share a note with another user, identified by e-mail or id.

        Raises:
            NotFoundError: Note does not exist
            ForbiddenError: Requester is not the owner
            UserNotFoundError: Target does not resolve to a user
            SelfShareError: Target is the owner
        """
        note = await self._load_live(note_id)
        require_owner(note, requester_id, "share")

        target = None
        if email:
            target = await self.users.find_by_email(email)
        elif target_user_id:
            target = await self.users.find_by_id(target_user_id)
        if target is None:
            raise UserNotFoundError("User not found")

        sharing.share_with(note, target.id, permission)
        note = await self.repository.save(note)
        logger.info(f"User {requester_id} shared note {note.id} with {target.id} ({SharePermission(permission).value})")
        return note

    async def unshare_note(self, note_id: Union[str, UUID], requester_id: str, target_user_id: str) -> Note:
        note = await self._load_live(note_id)
        require_owner(note, requester_id, "unshare")

        removed = sharing.unshare_from(note, target_user_id)
        note = await self.repository.save(note)
        if removed:
            logger.info(f"User {requester_id} unshared note {note.id} from user {target_user_id}")
        return note

    # ============================================================================
    # RECYCLE BIN LIFECYCLE
    # ============================================================================

    async def soft_delete(self, note_id: Union[str, UUID], requester_id: str) -> Note:
        """Move a note to the recycle bin (owner only)"""
        note = await self._load(note_id)
        require_owner(note, requester_id, "delete")

        lifecycle.mark_soft_deleted(note)
        note = await self.repository.save(note)
        logger.info(f"User {requester_id} moved note {note.id} to recycle bin")
        return note

    async def restore(self, note_id: Union[str, UUID], requester_id: str) -> Note:
        """
        Restore a note from the recycle bin (owner only).

        Raises:
            NotInRecycleBinError: If the note is live
        """
        note = await self._load(note_id)
        require_owner(note, requester_id, "restore")

        lifecycle.mark_restored(note)
        note = await self.repository.save(note)
        logger.info(f"User {requester_id} restored note {note.id} from recycle bin")
        return note

    async def permanently_delete(self, note_id: Union[str, UUID], requester_id: str) -> None:
        """Remove a note record for good (owner only, any deletion state)"""
        note = await self._load(note_id)
        require_owner(note, requester_id, "permanently delete")

        if not await self.repository.delete(note.id):
            raise NotFoundError("Note not found")
        logger.info(f"User {requester_id} permanently deleted note {note.id}")

    async def empty_recycle_bin(self, owner_id: str) -> int:
        deleted = await self.repository.delete_recycle_bin(str(owner_id))
        logger.info(f"User {owner_id} emptied recycle bin - {deleted} notes permanently deleted")
        return deleted

    async def list_recycle_bin(self, owner_id: str, page: int = 1, limit: int = 10) -> Tuple[List[Note], int]:
        notes, total = await self.repository.list_recycle_bin(str(owner_id), page, limit)
        logger.info(f"User {owner_id} retrieved {len(notes)} deleted notes")
        return notes, total
