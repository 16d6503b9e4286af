"""API routers."""

from nota.api.routes.backup import router as backup_router
from nota.api.routes.editor import router as editor_router
from nota.api.routes.events import router as events_router
from nota.api.routes.notes import router as notes_router
from nota.api.routes.settings import router as settings_router
from nota.api.routes.trash import router as trash_router

__all__ = [
    "backup_router",
    "editor_router",
    "events_router",
    "notes_router",
    "settings_router",
    "trash_router",
]
