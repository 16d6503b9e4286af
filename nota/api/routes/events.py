from collections.abc import AsyncIterator

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from nota.api.deps import ControllerDep
from nota.services.note_controller import NoteController
from nota.utils.events import format_sse

router = APIRouter(tags=["events"])


async def state_events(controller: NoteController) -> AsyncIterator[str]:
    # Send initial ping to confirm connection
    yield ": ping\n\n"
    async for state in controller.subscribe():
        yield format_sse("state", state.model_dump_json())


@router.get("/api/events")
async def events_endpoint(controller: ControllerDep):
    """SSE stream of session state snapshots."""
    return StreamingResponse(
        state_events(controller),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering for Nginx
        },
    )
