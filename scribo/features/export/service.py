"""Business logic for note export and import"""

import json
import logging
from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from scribo.config import PdfLayoutConfig
from scribo.errors import InvalidFormatError, NotFoundError
from scribo.features.export import formats
from scribo.features.export.domain import (
    ExportFile,
    ExportFormat,
    ImportFailure,
    ImportFormat,
    ImportPayload,
    ImportResult,
    safe_filename,
)
from scribo.features.export.pdf import render_collection_pdf, render_note_pdf
from scribo.features.notes.access import require_access
from scribo.features.notes.domain import Note, NoteCreate, NoteDraft, SharePermission
from scribo.features.notes.repository import NoteRepository
from scribo.features.notes.service import NoteService, parse_note_id
from scribo.utils.datetime_helper import utcnow

logger = logging.getLogger(__name__)


def _validation_message(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())


class ExportService:
    """Renders notes into downloadable files and creates notes from imports"""

    def __init__(self, db: AsyncSession, layout: Optional[PdfLayoutConfig] = None):
        self.repository = NoteRepository(db)
        self.notes = NoteService(db)
        self.layout = layout or PdfLayoutConfig()

    # ============================================================================
    # EXPORT
    # ============================================================================

    def render_note(self, note: Note, export_format: ExportFormat) -> ExportFile:
        filename = f"{safe_filename(note.title)}.{export_format.extension}"
        page_count = None

        if export_format is ExportFormat.JSON:
            content = json.dumps(formats.note_to_json_dict(note), indent=2, ensure_ascii=False).encode("utf-8")
        elif export_format is ExportFormat.MARKDOWN:
            content = formats.note_to_markdown(note).encode("utf-8")
        elif export_format is ExportFormat.TXT:
            content = formats.note_to_text(note).encode("utf-8")
        else:
            document = render_note_pdf(note, self.layout)
            content, page_count = document.data, document.page_count

        return ExportFile(
            filename=filename,
            media_type=export_format.media_type,
            content=content,
            page_count=page_count,
        )

    def render_collection(
        self,
        notes: List[Note],
        export_format: ExportFormat,
        exported_at: Optional[datetime] = None,
    ) -> ExportFile:
        exported_at = exported_at or utcnow()
        filename = f"notes_backup_{int(exported_at.timestamp() * 1000)}.{export_format.extension}"
        page_count = None

        if export_format is ExportFormat.JSON:
            payload = formats.collection_to_json_dict(notes, exported_at)
            content = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        elif export_format is ExportFormat.MARKDOWN:
            content = formats.collection_to_markdown(notes).encode("utf-8")
        elif export_format is ExportFormat.TXT:
            content = formats.collection_to_text(notes).encode("utf-8")
        else:
            document = render_collection_pdf(notes, self.layout, exported_at)
            content, page_count = document.data, document.page_count

        return ExportFile(
            filename=filename,
            media_type=export_format.media_type,
            content=content,
            page_count=page_count,
        )

    async def export_note(
        self,
        note_id: Union[str, UUID],
        user_id: str,
        export_format: Union[ExportFormat, str],
    ) -> ExportFile:
        """
        Export one live note the user can read.

        Raises:
            InvalidFormatError: Unknown format
            NotFoundError: Missing or soft-deleted note
            ForbiddenError: No read access
        """
        if not isinstance(export_format, ExportFormat):
            export_format = ExportFormat.parse(export_format)

        note = await self.repository.get(parse_note_id(note_id))
        if note is None or note.is_deleted:
            raise NotFoundError("Note not found")
        require_access(note, user_id, SharePermission.READ, action="export")

        logger.info(f"Exporting note {note.id} as {export_format.value} for user {user_id}")
        return self.render_note(note, export_format)

    async def export_collection(
        self,
        owner_id: str,
        export_format: Union[ExportFormat, str],
    ) -> ExportFile:
        """
        Export all live notes owned by the user (recycle bin excluded).

        Raises:
            InvalidFormatError: Unknown format
            NotFoundError: The user has no notes
        """
        if not isinstance(export_format, ExportFormat):
            export_format = ExportFormat.parse(export_format)

        notes = await self.repository.list_live_owned(str(owner_id))
        if not notes:
            raise NotFoundError("No notes found to export")

        logger.info(f"Exporting {len(notes)} notes as {export_format.value} for user {owner_id}")
        return self.render_collection(notes, export_format)

    # ============================================================================
    # IMPORT
    # ============================================================================

    @staticmethod
    def parse_import(import_format: Union[ImportFormat, str], data: ImportPayload) -> List[NoteDraft]:
        if not isinstance(import_format, ImportFormat):
            import_format = ImportFormat.parse(import_format)

        if import_format is ImportFormat.JSON:
            return formats.parse_json_import(data)
        if import_format is ImportFormat.NOTION:
            return formats.parse_notion_import(data)
        if not isinstance(data, str):
            raise InvalidFormatError("Invalid Markdown file. Please ensure the file is in text format.")
        return formats.parse_markdown_import(data)

    async def import_notes(
        self,
        owner_id: str,
        import_format: Union[ImportFormat, str],
        data: ImportPayload,
    ) -> ImportResult:
        """
        Parse an import and create one note per draft.

        A draft that fails validation is recorded in `errors` and the rest
        still get created.

        Raises:
            InvalidFormatError: Unparseable payload or no notes in it
        """
        drafts = self.parse_import(import_format, data)
        if not drafts:
            logger.warning(f"No valid notes found in import file for user {owner_id}")
            raise InvalidFormatError("No valid notes found in the file")

        logger.info(f"Attempting to import {len(drafts)} notes for user {owner_id}")
        result = ImportResult(total=len(drafts))

        for index, draft in enumerate(drafts, start=1):
            try:
                note_data = NoteCreate(title=draft.title, content=draft.content, tags=draft.tags)
            except ValidationError as e:
                logger.warning(f"Failed to import note {index}/{len(drafts)}: {e.error_count()} validation errors")
                result.errors.append(
                    ImportFailure(index=index, title=draft.title or "Unknown", error=_validation_message(e))
                )
                continue

            note = await self.notes.create_note(owner_id, note_data)
            result.notes.append(note)

        logger.info(
            f"Import complete: {result.count} notes created, {len(result.errors)} failed for user {owner_id}"
        )
        return result
