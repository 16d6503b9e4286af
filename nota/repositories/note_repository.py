"""Note store: durable CRUD, live queries and trash handling."""

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable, Iterator, Sequence
from contextlib import contextmanager
from functools import partial

from sqlalchemy import or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from nota.models.note import NoteRecord
from nota.schemas.note import Note
from nota.utils.datetime import now_millis
from nota.utils.events import ChangeFeed
from nota.utils.exceptions import ConstraintError, NotFoundError, StorageError

logger = logging.getLogger(__name__)


def _matches(query: str):
    term = query.strip()
    return or_(
        NoteRecord.title.icontains(term, autoescape=True),  # type: ignore[attr-defined]
        NoteRecord.body.icontains(term, autoescape=True),  # type: ignore[attr-defined]
    )


class NoteStore:
    """
    Sole source of truth for notes.

    Methods are synchronous and thread safe; async code calls them through
    ``asyncio.to_thread``. Every committed mutation is announced on
    ``changes`` so live queries re-read.
    """

    def __init__(self, engine: Engine, clock: Callable[[], int] = now_millis):
        """
        Initialize the note store.

        Args:
            engine: SQLAlchemy engine with the ``notes`` table created
            clock: Source of epoch milliseconds for defaulted timestamps
        """
        self.engine = engine
        self.clock = clock
        self.changes = ChangeFeed("notes")
        self._lock = threading.RLock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            try:
                with Session(self.engine) as session:
                    yield session
            except IntegrityError as e:
                logger.error(f"Integrity violation in note store: {e}")
                raise ConstraintError(str(e.orig)) from e
            except OverflowError as e:
                # Raised by the sqlite3 driver itself for integers outside 64 bits
                logger.error(f"Value out of range in note store: {e}")
                raise ConstraintError(str(e)) from e
            except SQLAlchemyError as e:
                logger.error(f"Note store failure: {e}")
                raise StorageError(str(e)) from e

    def _list(self, trashed: bool, query: str = "") -> list[Note]:
        conditions: list = [
            NoteRecord.deleted_at.is_not(None)  # type: ignore[union-attr]
            if trashed
            else NoteRecord.deleted_at.is_(None)  # type: ignore[union-attr]
        ]
        if query and query.strip():
            conditions.append(_matches(query))

        statement = (
            select(NoteRecord)
            .where(*conditions)
            .order_by(NoteRecord.created_at.desc(), NoteRecord.id.desc())  # type: ignore
        )
        with self._session() as session:
            return [Note.model_validate(r) for r in session.exec(statement).all()]

    async def _observe(self, fetch: Callable[[], list[Note]]) -> AsyncIterator[list[Note]]:
        # Listen before the first read so no change slips between read and subscribe
        with self.changes.listen() as listener:
            yield await asyncio.to_thread(fetch)
            while True:
                await listener.wait()
                yield await asyncio.to_thread(fetch)

    # ---- Queries ----

    def observe_active(self, query: str = "") -> AsyncIterator[list[Note]]:
        """
        Live list of active notes, newest first.

        Emits immediately, then again after every change. Never completes.
        """
        return self._observe(partial(self._list, False, query))

    def observe_trash(self, query: str = "") -> AsyncIterator[list[Note]]:
        """Live list of trashed notes, newest first."""
        return self._observe(partial(self._list, True, query))

    def search(self, query: str) -> list[Note]:
        """One-shot substring search over active notes. Blank query returns all."""
        return self._list(trashed=False, query=query)

    def list_trash(self, query: str = "") -> list[Note]:
        return self._list(trashed=True, query=query)

    def list_all(self) -> list[Note]:
        """All notes, active and trashed, newest first."""
        statement = select(NoteRecord).order_by(
            NoteRecord.created_at.desc(), NoteRecord.id.desc()  # type: ignore
        )
        with self._session() as session:
            return [Note.model_validate(r) for r in session.exec(statement).all()]

    def get_by_id(self, note_id: int) -> Note | None:
        with self._session() as session:
            record = session.get(NoteRecord, note_id)
            return Note.model_validate(record) if record else None

    def count_trash(self) -> int:
        statement = select(func.count()).where(
            NoteRecord.deleted_at.is_not(None)  # type: ignore[union-attr]
        )
        with self._session() as session:
            return session.exec(statement).one()

    # ---- Mutations ----

    def insert(self, note: Note) -> int:
        """
        Persist a note under a freshly assigned id.

        Any id on ``note`` is ignored. A missing creation time becomes now.

        Returns:
            The assigned id

        Raises:
            ConstraintError: On an integrity violation
        """
        record = self._new_record(note)
        with self._session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            note_id = record.id
        assert note_id is not None

        self.changes.notify()
        logger.info(f"Inserted note {note_id}")
        return note_id

    def insert_many(self, notes: Sequence[Note]) -> list[int]:
        """
        Persist several notes in one transaction; either all are stored or none.

        Returns:
            The assigned ids, in input order
        """
        if not notes:
            return []
        records = [self._new_record(note) for note in notes]
        with self._session() as session:
            session.add_all(records)
            session.flush()
            note_ids = [r.id for r in records]
            session.commit()

        self.changes.notify()
        logger.info(f"Inserted {len(note_ids)} notes")
        return note_ids  # type: ignore[return-value]

    def _new_record(self, note: Note) -> NoteRecord:
        return NoteRecord(
            title=note.title,
            body=note.body,
            created_at=note.created_at if note.created_at > 0 else self.clock(),
            deleted_at=note.deleted_at,
        )

    def update(self, note: Note) -> None:
        """
        Replace title and body of an existing note.

        Raises:
            NotFoundError: If no note has ``note.id``
        """
        with self._session() as session:
            record = session.get(NoteRecord, note.id)
            if not record:
                raise NotFoundError("Note", f"Note {note.id} not found")
            record.title = note.title
            record.body = note.body
            session.add(record)
            session.commit()

        self.changes.notify()
        logger.debug(f"Updated note {note.id}")

    def move_to_trash(self, note_id: int, at_millis: int) -> None:
        """Mark a note trashed at ``at_millis``. Missing notes are left alone."""
        with self._session() as session:
            record = session.get(NoteRecord, note_id)
            if not record:
                return
            record.deleted_at = at_millis
            session.add(record)
            session.commit()

        self.changes.notify()
        logger.info(f"Moved note {note_id} to trash")

    def restore(self, note_id: int) -> None:
        """Clear the trash mark. No-op for active or missing notes."""
        with self._session() as session:
            record = session.get(NoteRecord, note_id)
            if not record or record.deleted_at is None:
                return
            record.deleted_at = None
            session.add(record)
            session.commit()

        self.changes.notify()
        logger.info(f"Restored note {note_id}")

    def delete_by_id(self, note_id: int) -> None:
        """Permanently delete a note. No error if it does not exist."""
        with self._session() as session:
            record = session.get(NoteRecord, note_id)
            if not record:
                return
            session.delete(record)
            session.commit()

        self.changes.notify()
        logger.info(f"Deleted note {note_id}")

    def _delete_trashed(self, *conditions) -> int:
        statement = select(NoteRecord).where(
            NoteRecord.deleted_at.is_not(None), *conditions  # type: ignore[union-attr]
        )
        with self._session() as session:
            records = session.exec(statement).all()
            for record in records:
                session.delete(record)
            session.commit()
            deleted = len(records)

        if deleted:
            self.changes.notify()
        return deleted

    def delete_trash_older_than(self, threshold_millis: int) -> int:
        """
        Permanently delete notes trashed strictly before ``threshold_millis``.

        Returns:
            Number of notes removed
        """
        deleted = self._delete_trashed(
            NoteRecord.deleted_at < threshold_millis  # type: ignore[operator]
        )
        logger.info(f"Purged {deleted} trashed notes older than {threshold_millis}")
        return deleted

    def empty_trash(self) -> int:
        """Permanently delete every trashed note."""
        deleted = self._delete_trashed()
        logger.info(f"Emptied trash ({deleted} notes)")
        return deleted

    def close(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
