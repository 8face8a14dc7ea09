"""Notes API endpoints"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from scribo.db import get_db
from scribo.errors import NoteAppError, to_http_exception
from scribo.features.notes.domain import (
    NoteCreate,
    NoteListQuery,
    NoteSortField,
    NoteUpdate,
    SharePermission,
    SortOrder,
)
from scribo.features.notes.schemas import (
    AccessCheckResponse,
    DeleteResponse,
    EmptyRecycleBinResponse,
    NoteListResponse,
    NoteResponse,
    NoteStatsResponse,
    ShareNoteRequest,
)
from scribo.features.notes.service import NoteService
from scribo.features.users.domain import CurrentUser
from scribo.middleware.auth import get_current_user

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/notes", tags=["notes"])


def _pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=f"Failed to {action}")


# ============================================================================
# COLLECTION ROUTES (before /{note_id})
# ============================================================================

@router.get("", response_model=NoteListResponse)
async def list_notes(
    search: Optional[str] = None,
    category: Optional[str] = None,
    archived: bool = False,
    shared: bool = True,
    pinned: Optional[bool] = None,
    sort_by: NoteSortField = NoteSortField.UPDATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List live notes owned by or shared with the authenticated user.

    Notes in the recycle bin are never listed. Archived notes are only
    included when `archived=true`.
    """
    query = NoteListQuery(
        search=search,
        category=category,
        include_archived=archived,
        include_shared=shared,
        pinned=pinned,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    try:
        notes, total = await NoteService(db).list_notes(user.user_id, query)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("list notes", e)

    return NoteListResponse(
        notes=notes,
        count=len(notes),
        total=total,
        page=page,
        pages=_pages(total, limit),
    )


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(
    request: NoteCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a note owned by the authenticated user"""
    try:
        note = await NoteService(db).create_note(user.user_id, request)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("create note", e)

    return NoteResponse(message="Note created successfully", note=note)


@router.get("/stats", response_model=NoteStatsResponse)
async def get_note_stats(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Statistics over the authenticated user's live notes"""
    try:
        stats = await NoteService(db).get_stats(user.user_id)
    except Exception as e:
        raise _server_error("get note stats", e)

    return NoteStatsResponse(stats=stats)


@router.get("/recycle-bin", response_model=NoteListResponse)
async def get_recycle_bin(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the authenticated user's soft-deleted notes, most recently deleted first"""
    try:
        notes, total = await NoteService(db).list_recycle_bin(user.user_id, page, limit)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("get recycle bin", e)

    return NoteListResponse(
        notes=notes,
        count=len(notes),
        total=total,
        page=page,
        pages=_pages(total, limit),
    )


@router.delete("/recycle-bin/empty", response_model=EmptyRecycleBinResponse)
async def empty_recycle_bin(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete every note in the authenticated user's recycle bin"""
    try:
        deleted = await NoteService(db).empty_recycle_bin(user.user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("empty recycle bin", e)

    return EmptyRecycleBinResponse(
        deleted_count=deleted,
        message=f"{deleted} notes permanently deleted",
    )


# ============================================================================
# SINGLE NOTE ROUTES
# ============================================================================

@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        note = await NoteService(db).get_note(note_id, user.user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("get note", e)

    return NoteResponse(note=note)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    request: NoteUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update note content. Requires write access."""
    try:
        note = await NoteService(db).update_note(note_id, user.user_id, request)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("update note", e)

    return NoteResponse(message="Note updated successfully", note=note)


@router.delete("/{note_id}", response_model=NoteResponse)
async def delete_note(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Move a note to the recycle bin. Owner only."""
    try:
        note = await NoteService(db).soft_delete(note_id, user.user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("delete note", e)

    return NoteResponse(message="Note moved to recycle bin successfully", note=note)


@router.put("/{note_id}/pin", response_model=NoteResponse)
async def toggle_pin(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        note = await NoteService(db).toggle_pin(note_id, user.user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("pin/unpin note", e)

    return NoteResponse(
        message=f"Note {'pinned' if note.is_pinned else 'unpinned'} successfully",
        note=note,
    )


@router.put("/{note_id}/archive", response_model=NoteResponse)
async def toggle_archive(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        note = await NoteService(db).toggle_archive(note_id, user.user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("archive/unarchive note", e)

    return NoteResponse(
        message=f"Note {'archived' if note.is_archived else 'unarchived'} successfully",
        note=note,
    )


@router.post("/{note_id}/share", response_model=NoteResponse)
async def share_note(
    note_id: str,
    request: ShareNoteRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Share a note with another user. Owner only.

    Sharing again with the same user updates the permission in place.
    """
    try:
        note = await NoteService(db).share_note(
            note_id,
            user.user_id,
            permission=request.permission,
            email=request.email,
            target_user_id=request.user_id,
        )
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("share note", e)

    target = request.email or request.user_id
    return NoteResponse(message=f"Note shared with {target} successfully", note=note)


@router.delete("/{note_id}/share/{target_user_id}", response_model=NoteResponse)
async def unshare_note(
    note_id: str,
    target_user_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        note = await NoteService(db).unshare_note(note_id, user.user_id, target_user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("unshare note", e)

    return NoteResponse(message="Note unshared successfully", note=note)


@router.get("/{note_id}/access", response_model=AccessCheckResponse)
async def check_access(
    note_id: str,
    permission: SharePermission = SharePermission.READ,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Report whether the authenticated user holds read or write access.

    404 unless the user owns the note or holds a grant on a live note.
    """
    try:
        allowed = await NoteService(db).check_access(note_id, user.user_id, permission)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("check note access", e)

    return AccessCheckResponse(note_id=note_id, permission=permission, allowed=allowed)


@router.put("/{note_id}/restore", response_model=NoteResponse)
async def restore_note(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Restore a note from the recycle bin. Owner only."""
    try:
        note = await NoteService(db).restore(note_id, user.user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("restore note", e)

    return NoteResponse(message="Note restored successfully", note=note)


@router.delete("/{note_id}/permanent", response_model=DeleteResponse)
async def permanently_delete_note(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete a note. Owner only."""
    try:
        await NoteService(db).permanently_delete(note_id, user.user_id)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _server_error("permanently delete note", e)

    return DeleteResponse(success=True, message="Note permanently deleted successfully")
