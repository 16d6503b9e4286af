"""Backup export/import endpoints."""

import asyncio

from fastapi import APIRouter, Request, Response

from nota.api.deps import BackupDep
from nota.schemas.note import ImportResponse, InternalBackupResponse
from nota.utils.exceptions import NotaException, StorageError

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.get("")
async def export_backup(backup: BackupDep) -> Response:
    """
    Download every note, active and trashed, as a JSON array.
    """
    try:
        text = await asyncio.to_thread(backup.export_notes)
    except NotaException as e:
        raise e.to_http_exception()
    return Response(
        content=text,
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="nota-backup.json"'},
    )


@router.post("", response_model=ImportResponse)
async def import_backup(request: Request, backup: BackupDep) -> ImportResponse:
    """
    Import a JSON backup. Notes are added with new ids; unreadable input imports nothing.
    """
    text = (await request.body()).decode("utf-8", errors="replace")
    try:
        imported = await asyncio.to_thread(backup.import_notes, text)
    except NotaException as e:
        raise e.to_http_exception()
    return ImportResponse(imported=imported)


@router.post("/internal", response_model=InternalBackupResponse)
async def write_internal_backup(backup: BackupDep) -> InternalBackupResponse:
    """
    Write every note to the internal backup file in the data directory.
    """
    try:
        path = await asyncio.to_thread(backup.write_internal)
    except NotaException as e:
        raise e.to_http_exception()
    except OSError as e:
        raise StorageError(f"Could not write internal backup: {e}").to_http_exception()
    notes = await asyncio.to_thread(backup.read_internal)
    return InternalBackupResponse(path=str(path), notes=len(notes))


@router.post("/internal/restore", response_model=ImportResponse)
async def restore_internal_backup(backup: BackupDep) -> ImportResponse:
    """
    Import the internal backup file. A missing or unreadable file imports nothing.
    """
    try:
        imported = await asyncio.to_thread(backup.restore_internal)
    except NotaException as e:
        raise e.to_http_exception()
    return ImportResponse(imported=imported)
