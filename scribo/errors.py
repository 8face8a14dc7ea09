"""Domain errors and their HTTP mapping"""
from fastapi import HTTPException


class NoteAppError(Exception):
    """Base class for failures the core reports to its callers"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ForbiddenError(NoteAppError):
    """Ownership or permission check failed"""
    status_code = 403


class NotFoundError(NoteAppError):
    """Note, user or share target does not exist (or the id is malformed)"""
    status_code = 404


class UserNotFoundError(NotFoundError):
    """Share target does not resolve to a known user"""


class NotInRecycleBinError(NoteAppError):
    """Restore attempted on a live note"""
    status_code = 400


class SelfShareError(NoteAppError):
    """Owner tried to share a note with themselves"""
    status_code = 400


class InvalidFormatError(NoteAppError):
    """Malformed import payload or unsupported export format"""
    status_code = 400


class UpstreamError(NoteAppError):
    """Persistent store, renderer or language model failure"""
    status_code = 503


def to_http_exception(error: NoteAppError) -> HTTPException:
    """Convert a domain error into the HTTPException FastAPI returns"""
    return HTTPException(status_code=error.status_code, detail=error.message)
