"""Nota API - Main Application."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from nota import __version__
from nota.api.routes import (
    backup_router,
    editor_router,
    events_router,
    notes_router,
    settings_router,
    trash_router,
)
from nota.config import Settings, settings as default_settings
from nota.database import build_engine, create_db_and_tables
from nota.repositories.note_repository import NoteStore
from nota.repositories.preferences_repository import PreferencesStore
from nota.scheduler import CleanupScheduler
from nota.services.backup import BackupService
from nota.services.note_controller import NoteController
from nota.tasks.cleanup_tasks import TrashRetentionJob

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    engine: Engine | None = None,
    run_scheduler: bool = True,
) -> FastAPI:
    """
    Build the application.

    The lifespan owns the process-wide objects: engine, stores, controller and
    scheduler are created once at startup and shared through ``app.state``.
    """
    config = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=config.log_level)

        db_engine = engine or build_engine(config.database_url, echo=config.db_echo)
        create_db_and_tables(db_engine)

        store = NoteStore(db_engine)
        controller = NoteController(
            store,
            debounce_seconds=config.autosave_debounce_seconds,
            autosave_interval_seconds=config.autosave_interval_seconds,
        )
        await controller.start()

        cleanup = CleanupScheduler(
            TrashRetentionJob(store, retention_days=config.trash_retention_days),
            config,
        )
        if run_scheduler:
            cleanup.start()

        app.state.engine = db_engine
        app.state.store = store
        app.state.controller = controller
        app.state.preferences = PreferencesStore(
            db_engine, default=config.default_text_size
        )
        app.state.backup = BackupService(store, config)
        app.state.cleanup = cleanup

        yield

        await cleanup.shutdown()
        await controller.stop()
        if engine is None:
            store.close()

    app = FastAPI(
        title=config.app_name,
        description="A personal note-taking backend with trash, search and backups",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(notes_router)
    app.include_router(editor_router)
    app.include_router(trash_router)
    app.include_router(settings_router)
    app.include_router(backup_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health_check() -> dict:
        """
        System health check.
        """
        db_connected = await asyncio.to_thread(_check_database, app.state.engine)
        return {
            "status": "ok" if db_connected else "degraded",
            "db_connected": db_connected,
        }

    return app


def _check_database(engine: Engine) -> bool:
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


app = create_app()
