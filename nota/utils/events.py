import asyncio
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class ChangeListener:
    """One subscriber's view of a ChangeFeed."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.queue: asyncio.Queue[int] = asyncio.Queue()

    async def wait(self) -> int:
        """Wait for the next change, coalescing any that queued up meanwhile."""
        version = await self.queue.get()
        while not self.queue.empty():
            version = self.queue.get_nowait()
        return version


class ChangeFeed:
    """
    Thread-safe change notifier.

    Producers call ``notify()`` from any thread after committing a change;
    each listener is woken on its own event loop with the new version number.
    """

    def __init__(self, name: str = "feed"):
        self.name = name
        self.version = 0
        self._listeners: set[ChangeListener] = set()
        self._lock = threading.Lock()

    @contextmanager
    def listen(self) -> Iterator[ChangeListener]:
        """Register a listener for the running event loop."""
        listener = ChangeListener(asyncio.get_running_loop())
        with self._lock:
            self._listeners.add(listener)
            count = len(self._listeners)
        logger.debug(f"[{self.name}] listener added. Active listeners: {count}")
        try:
            yield listener
        finally:
            with self._lock:
                self._listeners.discard(listener)
            logger.debug(f"[{self.name}] listener removed.")

    def notify(self) -> int:
        """Bump the version and wake every listener."""
        with self._lock:
            self.version += 1
            version = self.version
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener.loop.call_soon_threadsafe(listener.queue.put_nowait, version)
            except RuntimeError:
                # Listener's loop is closed
                with self._lock:
                    self._listeners.discard(listener)
        return version

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)


def format_sse(event_name: str, data: str) -> str:
    """Format one Server-Sent Events message."""
    return f"event: {event_name}\ndata: {data}\n\n"
