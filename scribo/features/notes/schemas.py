"""Request and response schemas for Notes API"""

from typing import List, Optional

from pydantic import BaseModel, model_validator

from scribo.features.notes.domain import Note, NoteStats, SharePermission


class NoteResponse(BaseModel):
    """Single note with a status message"""
    message: Optional[str] = None
    note: Note


class NoteListResponse(BaseModel):
    """Paginated list of notes"""
    notes: List[Note]
    count: int
    total: int
    page: int
    pages: int


class NoteStatsResponse(BaseModel):
    stats: NoteStats


class ShareNoteRequest(BaseModel):
    """Share target by e-mail (as users know each other) or by user id"""
    email: Optional[str] = None
    user_id: Optional[str] = None
    permission: SharePermission = SharePermission.READ

    @model_validator(mode="after")
    def require_target(self):
        if not self.email and not self.user_id:
            raise ValueError("Please provide email address or user_id")
        return self


class AccessCheckResponse(BaseModel):
    note_id: str
    permission: SharePermission
    allowed: bool


class DeleteResponse(BaseModel):
    success: bool
    message: str


class EmptyRecycleBinResponse(BaseModel):
    deleted_count: int
    message: str
