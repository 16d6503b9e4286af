"""Pytest configuration and fixtures."""

import asyncio
from collections.abc import Callable, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from nota.config import Settings
from nota.database import build_engine, create_db_and_tables
from nota.main import create_app
from nota.repositories.note_repository import NoteStore
from nota.repositories.preferences_repository import PreferencesStore
from nota.schemas.note import Note
from nota.services.note_controller import NoteController

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite://"


@pytest.fixture(name="engine")
def engine_fixture() -> Generator[Engine, None, None]:
    """Create a test database engine."""
    engine = build_engine(TEST_DATABASE_URL, echo=False)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="store")
def store_fixture(engine: Engine) -> NoteStore:
    return NoteStore(engine, clock=lambda: 1_000_000)


@pytest.fixture(name="preferences")
def preferences_fixture(engine: Engine) -> PreferencesStore:
    return PreferencesStore(engine)


@pytest_asyncio.fixture(name="controller")
async def controller_fixture(store: NoteStore):
    """Controller with a short debounce and no periodic save during a test."""
    controller = NoteController(
        store,
        clock=lambda: 5_000,
        debounce_seconds=0.05,
        autosave_interval_seconds=3600,
        resubscribe_seconds=0.05,
    )
    await controller.start()
    yield controller
    await controller.stop()


@pytest.fixture(name="test_settings")
def test_settings_fixture(tmp_path) -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        data_dir=tmp_path,
        autosave_debounce_seconds=0.05,
        autosave_interval_seconds=3600,
    )


@pytest.fixture(name="client")
def client_fixture(engine: Engine, test_settings: Settings) -> Generator[TestClient, None, None]:
    """Create a test client sharing the test engine."""
    app = create_app(test_settings, engine=engine, run_scheduler=False)
    with TestClient(app) as client:
        yield client


@pytest.fixture(name="test_note")
def test_note_fixture(store: NoteStore) -> Note:
    """Create a test note."""
    note_id = store.insert(
        Note(title="Groceries", body="Milk, eggs and bread", created_at=1000)
    )
    note = store.get_by_id(note_id)
    assert note is not None
    return note


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it holds or ``timeout`` expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture(name="wait_until")
def wait_until_fixture():
    return _wait_until
