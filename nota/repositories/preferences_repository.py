import asyncio
import logging
import threading
from collections.abc import AsyncIterator

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from nota.models.preference import PreferenceRecord
from nota.schemas.settings import TextSizeLevel
from nota.utils.events import ChangeFeed
from nota.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

TEXT_SIZE_KEY = "body_size_level"


class PreferencesStore:
    """Persisted display text-size level, clamped to the TextSizeLevel range."""

    def __init__(
        self,
        engine: Engine,
        store_name: str = "settings",
        default: int = TextSizeLevel.NORMAL,
    ):
        self.engine = engine
        self.store_name = store_name
        self.default = int(TextSizeLevel.clamp(default))
        self.changes = ChangeFeed(f"prefs:{store_name}")
        self._lock = threading.Lock()

    def current(self) -> int:
        try:
            with self._lock, Session(self.engine) as session:
                record = session.get(PreferenceRecord, (self.store_name, TEXT_SIZE_KEY))
                return record.value if record else self.default
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def set(self, level: int) -> int:
        """Clamp and durably store ``level``. Returns the stored value."""
        value = int(TextSizeLevel.clamp(level))
        try:
            with self._lock, Session(self.engine) as session:
                record = session.get(PreferenceRecord, (self.store_name, TEXT_SIZE_KEY))
                if record:
                    record.value = value
                else:
                    record = PreferenceRecord(
                        store=self.store_name, key=TEXT_SIZE_KEY, value=value
                    )
                session.add(record)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

        if value != level:
            logger.info(f"Text size {level} out of range, clamped to {value}")
        self.changes.notify()
        return value

    async def get(self) -> AsyncIterator[int]:
        """Emit the current level now and after every change."""
        with self.changes.listen() as listener:
            yield await asyncio.to_thread(self.current)
            while True:
                await listener.wait()
                yield await asyncio.to_thread(self.current)
