"""Note lifecycle controller: session state, editing, auto-save and search."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable

from nota.repositories.note_repository import NoteStore
from nota.schemas.note import Note
from nota.schemas.state import ErrorNotice, SessionState
from nota.utils.datetime import now_millis
from nota.utils.exceptions import NotaException, NotFoundError

logger = logging.getLogger(__name__)


class NoteController:
    """
    Single authoritative session state for one user session.

    Every command runs under one ``asyncio.Lock`` so state changes are applied
    one at a time, in the order commands were issued. Store calls run in
    worker threads. Observers get immutable ``SessionState`` snapshots.

    The editing slot is Closed (``editing is None``), Editing-new
    (``editing.id == 0``) or Editing-existing (``editing.id > 0``).
    """

    def __init__(
        self,
        store: NoteStore,
        clock: Callable[[], int] = now_millis,
        debounce_seconds: float = 0.8,
        autosave_interval_seconds: float = 60.0,
        resubscribe_seconds: float = 1.0,
    ):
        """
        Initialize the controller.

        Args:
            store: Note store shared with the rest of the process
            clock: Source of epoch milliseconds
            debounce_seconds: Quiet period before an edit is auto-saved
            autosave_interval_seconds: Period of the auto-save while an editor is open
            resubscribe_seconds: Delay before re-following the note list after a failure
        """
        self.store = store
        self.clock = clock
        self.debounce_seconds = debounce_seconds
        self.autosave_interval_seconds = autosave_interval_seconds
        self.resubscribe_seconds = resubscribe_seconds

        self._state = SessionState()
        self._lock = asyncio.Lock()
        self._subscribers: set[asyncio.Queue[SessionState]] = set()

        # Identifies the current editing session; timers carry the value they started with
        self._session_token = 0
        self._query_seq = 0

        self._debounce_task: asyncio.Task | None = None
        self._periodic_task: asyncio.Task | None = None
        self._items_task: asyncio.Task | None = None
        self._items_ready = asyncio.Event()

    # -------------------------
    # State and observers
    # -------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    def _set_state(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        for queue in self._subscribers:
            queue.put_nowait(self._state)

    def _fail(self, error: NotaException, action: str) -> None:
        logger.error(f"Failed to {action}: {error.detail}")
        self._set_state(
            error=ErrorNotice(
                kind=error.kind, message=error.detail, retryable=error.retryable
            )
        )

    async def subscribe(self) -> AsyncIterator[SessionState]:
        """Yield the current state, then every later state in order."""
        queue: asyncio.Queue[SessionState] = asyncio.Queue()
        self._subscribers.add(queue)
        try:
            yield self._state
            while True:
                yield await queue.get()
        finally:
            self._subscribers.discard(queue)

    async def clear_error(self) -> None:
        async with self._lock:
            self._set_state(error=None, notice=None)

    # -------------------------
    # Lifetime
    # -------------------------

    async def start(self) -> None:
        """Follow the live list of active notes. Returns once the first list arrived."""
        if self._items_task is None:
            self._items_task = asyncio.create_task(self._follow_items())
        await self._items_ready.wait()

    async def stop(self) -> None:
        """Cancel the list subscription and every auto-save timer."""
        async with self._lock:
            tasks = [t for t in (self._items_task, self._debounce_task, self._periodic_task) if t]
            self._items_task = None
            self._end_session()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _follow_items(self) -> None:
        while True:
            try:
                async for notes in self.store.observe_active():
                    async with self._lock:
                        self._set_state(items=tuple(notes))
                    self._items_ready.set()
            except NotaException as e:
                async with self._lock:
                    self._fail(e, "refresh note list")
                self._items_ready.set()
                await asyncio.sleep(self.resubscribe_seconds)

    # -------------------------
    # Editing sessions and timers
    # -------------------------

    def _end_session(self) -> None:
        for task in (self._debounce_task, self._periodic_task):
            if task and not task.done():
                task.cancel()
        self._debounce_task = None
        self._periodic_task = None
        self._session_token += 1

    def _begin_session(self) -> None:
        self._end_session()
        self._periodic_task = asyncio.create_task(
            self._periodic_autosave(self._session_token)
        )

    async def _debounced_autosave(self, token: int) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # A save that started runs to completion even if this timer is cancelled
        await asyncio.shield(self.autosave_if_dirty(token=token))

    async def _periodic_autosave(self, token: int) -> None:
        while True:
            await asyncio.sleep(self.autosave_interval_seconds)
            await asyncio.shield(self.autosave_if_dirty(token=token))

    def schedule_autosave(self) -> None:
        """Restart the debounce timer. Only the last call before a quiet period saves."""
        if self._state.editing is None:
            return
        if self._debounce_task and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = asyncio.create_task(
            self._debounced_autosave(self._session_token)
        )

    # -------------------------
    # Commands
    # -------------------------

    async def new_note(self, title: str = "") -> Note:
        """Open a fresh in-memory draft (``id == 0``)."""
        async with self._lock:
            draft = Note(title=title, body="", created_at=self.clock())
            self._begin_session()
            self._set_state(editing=draft, error=None, notice=None)
            logger.debug("Started new draft")
            return draft

    async def edit(self, note_id: int) -> Note | None:
        """
        Open a stored note for editing.

        The previously open note is replaced without being saved. A missing
        note closes the editor and leaves a notice.
        """
        async with self._lock:
            try:
                note = await asyncio.to_thread(self.store.get_by_id, note_id)
            except NotaException as e:
                self._fail(e, f"open note {note_id}")
                return None

            if note is None:
                self._end_session()
                self._set_state(editing=None, notice=f"Note {note_id} no longer exists")
                logger.warning(f"Note {note_id} not found for editing")
                return None

            self._begin_session()
            self._set_state(editing=note, error=None, notice=None)
            return note

    async def update_editing(
        self, title: str | None = None, body: str | None = None
    ) -> Note | None:
        """Patch the open note in memory. No-op when the editor is closed."""
        async with self._lock:
            editing = self._state.editing
            if editing is None:
                return None
            changes = {}
            if title is not None:
                changes["title"] = title
            if body is not None:
                changes["body"] = body
            if not changes:
                return editing
            editing = editing.model_copy(update=changes)
            self._set_state(editing=editing)
            return editing

    async def save_editing(self) -> Note | None:
        """
        Persist the open note and reload it from the store.

        Returns:
            The stored note, or None when nothing was saved
        """
        async with self._lock:
            return await self._save_locked()

    async def _save_locked(self) -> Note | None:
        editing = self._state.editing
        if editing is None:
            return None

        note_id = editing.id
        try:
            if editing.is_draft:
                note_id = await asyncio.to_thread(self.store.insert, editing)
            else:
                await asyncio.to_thread(self.store.update, editing)
            saved = await asyncio.to_thread(self.store.get_by_id, note_id)
        except NotFoundError:
            self._close_vanished(note_id)
            return None
        except NotaException as e:
            if editing.is_draft and note_id:
                # Row exists even though the reload failed; keep its id to avoid a second insert
                editing = editing.model_copy(update={"id": note_id})
                self._set_state(editing=editing)
            self._fail(e, f"save note {editing.id or 'draft'}")
            return None

        if saved is None:
            self._close_vanished(note_id)
            return None

        self._set_state(editing=saved, error=None)
        logger.info(f"Saved note {saved.id}")
        return saved

    def _close_vanished(self, note_id: int) -> None:
        logger.warning(f"Note {note_id} vanished while saving")
        self._end_session()
        self._set_state(editing=None, notice=f"Note {note_id} no longer exists")

    async def delete_note(self, note_id: int, hard: bool = False) -> bool:
        """Move a note to the trash, or delete it permanently when ``hard``."""
        async with self._lock:
            try:
                if hard:
                    await asyncio.to_thread(self.store.delete_by_id, note_id)
                else:
                    await asyncio.to_thread(self.store.move_to_trash, note_id, self.clock())
            except NotaException as e:
                self._fail(e, f"delete note {note_id}")
                return False

            changes: dict = {"error": None}
            editing = self._state.editing
            if editing is not None and editing.id == note_id:
                self._end_session()
                changes["editing"] = None
            if any(n.id == note_id for n in self._state.results):
                changes["results"] = tuple(n for n in self._state.results if n.id != note_id)
            self._set_state(**changes)
            return True

    async def restore_note(self, note_id: int) -> bool:
        """Bring a trashed note back to the active list."""
        async with self._lock:
            try:
                await asyncio.to_thread(self.store.restore, note_id)
            except NotaException as e:
                self._fail(e, f"restore note {note_id}")
                return False
            self._set_state(error=None)
            return True

    async def close_editor(self, flush: bool = False) -> bool:
        """
        Close the editor.

        Unsaved changes are discarded unless ``flush`` is set, in which case a
        non-blank note is saved first and the editor stays open if that fails.
        """
        async with self._lock:
            editing = self._state.editing
            if editing is None:
                return True
            if flush and not editing.is_blank:
                saved = await self._save_locked()
                if saved is None and self._state.editing is not None:
                    # Draft kept after a failed save
                    return False
            self._end_session()
            self._set_state(editing=None)
            return True

    async def autosave_if_dirty(self, token: int | None = None) -> Note | None:
        """
        Save the open note unless the editor is closed or the note is blank.

        ``token`` ties a timer to the editing session that scheduled it; a
        stale token is ignored.
        """
        async with self._lock:
            editing = self._state.editing
            if editing is None or editing.is_blank:
                return None
            if token is not None and token != self._session_token:
                return None
            return await self._save_locked()

    async def set_query(self, query: str) -> tuple[Note, ...]:
        """
        Update the search query and its results.

        Results of a superseded query are dropped even if they arrive last.
        """
        async with self._lock:
            self._query_seq += 1
            seq = self._query_seq
            if not query.strip():
                self._set_state(query=query, searching=False, results=())
                return ()
            self._set_state(query=query, searching=True)

        try:
            results = tuple(await asyncio.to_thread(self.store.search, query))
        except NotaException as e:
            async with self._lock:
                if seq == self._query_seq:
                    self._set_state(searching=False)
                    self._fail(e, f"search for '{query}'")
            return ()

        async with self._lock:
            if seq != self._query_seq:
                logger.debug(f"Dropping stale results for '{query}'")
                return results
            self._set_state(results=results, searching=False)
        return results
