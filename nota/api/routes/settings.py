"""Display preference endpoints."""

import asyncio

from fastapi import APIRouter

from nota.api.deps import PreferencesDep
from nota.schemas.settings import TextSizeResponse, TextSizeUpdate
from nota.utils.exceptions import NotaException

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/text-size", response_model=TextSizeResponse)
async def get_text_size(preferences: PreferencesDep) -> TextSizeResponse:
    """
    Get the display text size level.
    """
    try:
        level = await asyncio.to_thread(preferences.current)
    except NotaException as e:
        raise e.to_http_exception()
    return TextSizeResponse.from_level(level)


@router.put("/text-size", response_model=TextSizeResponse)
async def set_text_size(
    update_data: TextSizeUpdate, preferences: PreferencesDep
) -> TextSizeResponse:
    """
    Store the display text size level. Out-of-range levels are clamped.
    """
    try:
        level = await asyncio.to_thread(preferences.set, update_data.level)
    except NotaException as e:
        raise e.to_http_exception()
    return TextSizeResponse.from_level(level)
