"""SQLAlchemy repository for Notes"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import and_, case, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scribo.db.models.note import Note as NoteORM, NoteShare as NoteShareORM
from scribo.errors import NotFoundError, UpstreamError
from scribo.features.notes.domain import (
    Note,
    NoteListQuery,
    NoteSortField,
    ShareGrant,
    SortOrder,
)
from scribo.utils.datetime_helper import ensure_utc, utcnow

logger = logging.getLogger(__name__)


_PRIORITY_RANK = case({"low": 0, "medium": 1, "high": 2}, value=NoteORM.priority, else_=1)


class NoteRepository:
    """
    Repository for Note operations using SQLAlchemy.

    Notes are read and written as whole documents: the share list is loaded
    with the note and replaced on save.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: SQLAlchemy async database session
        """
        self.db = db

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _to_domain_model(self, orm_note: NoteORM) -> Note:
        """Convert ORM model to domain model"""
        return Note(
            id=orm_note.id,
            title=orm_note.title,
            content=orm_note.content or "",
            category=orm_note.category,
            tags=list(orm_note.tags or []),
            color=orm_note.color,
            priority=orm_note.priority,
            owner_id=orm_note.owner_id,
            shared_with=[
                ShareGrant(
                    user_id=share.user_id,
                    permission=share.permission,
                    shared_at=ensure_utc(share.shared_at),
                )
                for share in orm_note.shares
            ],
            is_pinned=bool(orm_note.is_pinned),
            is_archived=bool(orm_note.is_archived),
            is_deleted=bool(orm_note.is_deleted),
            deleted_at=ensure_utc(orm_note.deleted_at),
            created_at=ensure_utc(orm_note.created_at),
            updated_at=ensure_utc(orm_note.updated_at),
            last_modified=ensure_utc(orm_note.last_modified),
        )

    def _to_domain_models(self, orm_notes: Sequence[NoteORM]) -> List[Note]:
        return [self._to_domain_model(n) for n in orm_notes]

    @staticmethod
    def _apply_fields(orm_note: NoteORM, note: Note) -> None:
        orm_note.title = note.title
        orm_note.content = note.content
        orm_note.category = note.category
        orm_note.tags = list(note.tags)
        orm_note.color = note.color.value
        orm_note.priority = note.priority.value
        orm_note.is_pinned = note.is_pinned
        orm_note.is_archived = note.is_archived
        orm_note.is_deleted = note.is_deleted
        orm_note.deleted_at = note.deleted_at

    @staticmethod
    def _sync_shares(orm_note: NoteORM, grants: List[ShareGrant]) -> None:
        existing = {share.user_id: share for share in orm_note.shares}
        wanted = {grant.user_id: grant for grant in grants}

        for user_id, share in existing.items():
            if user_id not in wanted:
                orm_note.shares.remove(share)

        for user_id, grant in wanted.items():
            share = existing.get(user_id)
            if share is None:
                orm_note.shares.append(
                    NoteShareORM(
                        user_id=user_id,
                        permission=grant.permission.value,
                        shared_at=grant.shared_at,
                    )
                )
            else:
                share.permission = grant.permission.value
                share.shared_at = grant.shared_at

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e}", exc_info=True)
            raise UpstreamError(f"Failed to {action}") from e

    async def _get_orm(self, note_id: str) -> Optional[NoteORM]:
        stmt = (
            select(NoteORM)
            .where(NoteORM.id == note_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Single document operations
    # ------------------------------------------------------------------

    async def get(self, note_id: str) -> Optional[Note]:
        """Fetch a note (any deletion state) by id"""
        orm_note = await self._get_orm(note_id)
        if orm_note is None:
            return None
        return self._to_domain_model(orm_note)

    async def create(self, note: Note) -> Note:
        """Insert a new note with its share list"""
        orm_note = NoteORM(
            id=note.id,
            owner_id=note.owner_id,
            created_at=note.created_at,
            updated_at=note.updated_at,
            last_modified=note.last_modified,
        )
        self._apply_fields(orm_note, note)
        orm_note.shares = []
        self._sync_shares(orm_note, note.shared_with)

        self.db.add(orm_note)
        await self._commit("create note")
        return self._to_domain_model(orm_note)

    async def save(self, note: Note, now: Optional[datetime] = None) -> Note:
        """
        Persist the whole note document, advancing updated_at and last_modified.

        Raises:
            NotFoundError: If the row was purged in the meantime
        """
        orm_note = await self._get_orm(note.id)
        if orm_note is None:
            raise NotFoundError("Note not found")

        now = now or utcnow()
        self._apply_fields(orm_note, note)
        self._sync_shares(orm_note, note.shared_with)
        orm_note.updated_at = now
        orm_note.last_modified = now

        await self._commit("save note")
        return self._to_domain_model(orm_note)

    async def delete(self, note_id: str) -> bool:
        """Remove a note record. Returns False if it did not exist."""
        orm_note = await self._get_orm(note_id)
        if orm_note is None:
            return False

        await self.db.delete(orm_note)
        await self._commit("delete note")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _visible_to(self, user_id: str, include_shared: bool = True):
        if include_shared:
            return or_(
                NoteORM.owner_id == user_id,
                NoteORM.shares.any(NoteShareORM.user_id == user_id),
            )
        return NoteORM.owner_id == user_id

    async def list_live(self, user_id: str, query: NoteListQuery) -> Tuple[List[Note], int]:
        """
        List live notes visible to a user.

        Soft-deleted notes are never returned. Pinned notes come first, then
        the requested sort.

        Returns:
            (notes on the requested page, total matching notes)
        """
        conditions = [
            self._visible_to(user_id, query.include_shared),
            NoteORM.is_deleted.is_(False),
        ]
        if not query.include_archived:
            conditions.append(NoteORM.is_archived.is_(False))
        if query.pinned is not None:
            conditions.append(NoteORM.is_pinned.is_(query.pinned))
        if query.category:
            conditions.append(NoteORM.category == query.category)
        if query.search:
            needle = query.search.lower()
            conditions.append(
                or_(
                    func.lower(NoteORM.title).contains(needle, autoescape=True),
                    func.lower(NoteORM.content).contains(needle, autoescape=True),
                )
            )

        sort_columns = {
            NoteSortField.UPDATED_AT: NoteORM.updated_at,
            NoteSortField.CREATED_AT: NoteORM.created_at,
            NoteSortField.TITLE: NoteORM.title,
            NoteSortField.PRIORITY: _PRIORITY_RANK,
        }
        sort_column = sort_columns[query.sort_by]
        ordering = sort_column.desc() if query.sort_order == SortOrder.DESC else sort_column.asc()

        stmt = (
            select(NoteORM)
            .where(and_(*conditions))
            .order_by(NoteORM.is_pinned.desc(), ordering, NoteORM.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        notes = self._to_domain_models(result.scalars().all())

        count_stmt = select(func.count()).select_from(NoteORM).where(and_(*conditions))
        total = (await self.db.execute(count_stmt)).scalar_one()

        return notes, total

    async def list_live_accessible(self, user_id: str) -> List[Note]:
        """All live notes owned by or shared with a user (archived included)"""
        stmt = (
            select(NoteORM)
            .where(and_(self._visible_to(user_id), NoteORM.is_deleted.is_(False)))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return self._to_domain_models(result.scalars().all())

    async def list_live_owned(self, owner_id: str) -> List[Note]:
        """All live notes owned by a user, oldest first"""
        stmt = (
            select(NoteORM)
            .where(and_(NoteORM.owner_id == owner_id, NoteORM.is_deleted.is_(False)))
            .order_by(NoteORM.created_at.asc(), NoteORM.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return self._to_domain_models(result.scalars().all())

    async def list_recycle_bin(self, owner_id: str, page: int = 1, limit: int = 10) -> Tuple[List[Note], int]:
        """
        Soft-deleted notes of an owner, most recently deleted first.

        Returns:
            (notes on the requested page, total notes in the recycle bin)
        """
        condition = and_(NoteORM.owner_id == owner_id, NoteORM.is_deleted.is_(True))
        stmt = (
            select(NoteORM)
            .where(condition)
            .order_by(NoteORM.deleted_at.desc(), NoteORM.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        notes = self._to_domain_models(result.scalars().all())

        count_stmt = select(func.count()).select_from(NoteORM).where(condition)
        total = (await self.db.execute(count_stmt)).scalar_one()

        return notes, total

    # ------------------------------------------------------------------
    # Bulk purges
    # ------------------------------------------------------------------

    async def _purge_where(self, condition, action: str) -> int:
        ids_result = await self.db.execute(select(NoteORM.id).where(condition))
        note_ids = list(ids_result.scalars().all())
        if not note_ids:
            return 0

        try:
            await self.db.execute(
                delete(NoteShareORM).where(NoteShareORM.note_id.in_(note_ids)),
                execution_options={"synchronize_session": False},
            )
            result = await self.db.execute(
                delete(NoteORM).where(and_(NoteORM.id.in_(note_ids), condition)),
                execution_options={"synchronize_session": False},
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e}", exc_info=True)
            raise UpstreamError(f"Failed to {action}") from e

        await self._commit(action)
        # Rows were removed behind the identity map's back
        self.db.expunge_all()
        return result.rowcount or 0

    async def delete_recycle_bin(self, owner_id: str) -> int:
        """Delete every soft-deleted note of one owner. Returns the count."""
        condition = and_(NoteORM.owner_id == owner_id, NoteORM.is_deleted.is_(True))
        return await self._purge_where(condition, "empty recycle bin")

    async def purge_deleted_before(self, cutoff: datetime) -> int:
        """Delete soft-deleted notes of all owners with deleted_at <= cutoff"""
        condition = and_(NoteORM.is_deleted.is_(True), NoteORM.deleted_at <= cutoff)
        return await self._purge_where(condition, "purge expired notes")
