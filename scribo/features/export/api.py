"""Export and import API endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from scribo.db import get_db
from scribo.errors import NoteAppError, to_http_exception
from scribo.features.export.domain import ExportFile
from scribo.features.export.schemas import ImportRequest, ImportResponse
from scribo.features.export.service import ExportService
from scribo.features.users.domain import CurrentUser
from scribo.middleware.auth import get_current_user

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/export", tags=["export"])


def _download(export_file: ExportFile) -> Response:
    headers = {"Content-Disposition": f'attachment; filename="{export_file.filename}"'}
    if export_file.page_count is not None:
        headers["X-Page-Count"] = str(export_file.page_count)
    return Response(
        content=export_file.content,
        media_type=export_file.media_type,
        headers=headers,
    )


@router.get("/note/{note_id}/{export_format}")
async def export_note(
    note_id: str,
    export_format: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Download a single note as json, markdown (md), pdf or txt.

    Requires read access. Notes in the recycle bin cannot be exported.
    """
    try:
        export_file = await ExportService(db).export_note(note_id, user.user_id, export_format)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Export note error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to export note")

    return _download(export_file)


@router.get("/notes/{export_format}")
async def export_all_notes(
    export_format: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download every live note the user owns as one file"""
    try:
        export_file = await ExportService(db).export_collection(user.user_id, export_format)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Export all notes error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to export notes")

    return _download(export_file)


@router.post("/import", response_model=ImportResponse, status_code=201)
async def import_notes(
    request: ImportRequest,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Import notes from json, notion or markdown.

    Notes that fail validation are listed in `errors`; the others are still
    created. Responds 400 when none could be created.
    """
    try:
        result = await ExportService(db).import_notes(user.user_id, request.format, request.data)
    except NoteAppError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Import notes error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to import notes")

    if result.errors:
        message = (
            f"Imported {result.count} of {result.total} notes. {len(result.errors)} failed."
        )
    else:
        message = f"Successfully imported {result.count} notes"

    if result.count == 0:
        response.status_code = 400

    return ImportResponse(
        success=result.count > 0,
        message=message,
        count=result.count,
        notes=result.notes,
        errors=result.errors or None,
        warning="Some notes could not be imported due to validation errors." if result.errors else None,
    )
