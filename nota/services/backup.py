"""JSON backup export and import."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from nota.config import Settings
from nota.repositories.note_repository import NoteStore
from nota.schemas.note import Note
from nota.utils.datetime import now_millis
from nota.utils.exceptions import ParseError

logger = logging.getLogger(__name__)


def encode(notes: Iterable[Note]) -> str:
    """
    Serialize notes to a pretty-printed JSON array.

    Every record carries ``id, title, body, createdAt, deletedAt``; active
    notes have ``"deletedAt": null``.
    """
    records = [
        {
            "id": n.id,
            "title": n.title,
            "body": n.body,
            "createdAt": n.created_at,
            "deletedAt": n.deleted_at,
        }
        for n in notes
    ]
    return json.dumps(records, indent=2, ensure_ascii=False)


# SQLite INTEGER range
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not _INT64_MIN <= number <= _INT64_MAX:
        return default
    return number


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def parse(text: str, now: int | None = None) -> list[Note]:
    """
    Strict variant of ``decode``.

    Missing fields get defaults (``id=0``, empty strings, ``createdAt=now``,
    active); anything that is not an array of objects raises.

    Raises:
        ParseError: If ``text`` is not a JSON array of records
    """
    if not text or not text.strip():
        return []

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Backup is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ParseError("Backup must be a JSON array")

    created_default = now_millis() if now is None else now
    notes = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise ParseError(f"Backup record {index} is not an object")
        deleted_at = record.get("deletedAt")
        notes.append(
            Note(
                id=_as_int(record.get("id"), 0),
                title=_as_str(record.get("title")),
                body=_as_str(record.get("body")),
                created_at=_as_int(record.get("createdAt"), created_default),
                deleted_at=None if deleted_at is None else _as_int(deleted_at, created_default),
            )
        )
    return notes


def decode(text: str, now: int | None = None) -> list[Note]:
    """Parse a backup, returning an empty list for blank or unparseable input."""
    try:
        return parse(text, now=now)
    except ParseError as e:
        logger.warning(f"Ignoring unreadable backup: {e}")
        return []


def write_backup(path: Path, notes: Iterable[Note]) -> None:
    """Write notes to ``path`` as UTF-8 JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(encode(notes), encoding="utf-8")


def read_backup(path: Path) -> list[Note]:
    """Read notes from ``path``; missing or unreadable files yield an empty list."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read backup {path}: {e}")
        return []
    return decode(text)


class BackupService:
    """Export/import of the whole note store."""

    def __init__(self, store: NoteStore, settings: Settings):
        self.store = store
        self.settings = settings

    def export_notes(self) -> str:
        notes = self.store.list_all()
        logger.info(f"Exporting {len(notes)} notes")
        return encode(notes)

    def import_notes(self, text: str) -> int:
        """
        Insert every note of a backup as a new note, in one transaction.

        Ids are reassigned by the store; creation and trash times are kept.

        Returns:
            Number of notes imported
        """
        return self._insert_all(decode(text))

    def _insert_all(self, notes: list[Note]) -> int:
        self.store.insert_many(notes)
        logger.info(f"Imported {len(notes)} notes")
        return len(notes)

    def write_internal(self) -> Path:
        """Write the full backup to the private data directory."""
        path = self.settings.internal_backup_path
        write_backup(path, self.store.list_all())
        logger.info(f"Wrote internal backup to {path}")
        return path

    def read_internal(self) -> list[Note]:
        return read_backup(self.settings.internal_backup_path)

    def restore_internal(self) -> int:
        """Import the notes of the internal backup as new notes."""
        return self._insert_all(self.read_internal())
