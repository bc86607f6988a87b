"""DELETE /conversations/{device_id}: forget a device's history."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from moodshift.conversation import ConversationStore

router = APIRouter()


@router.delete("/conversations/{device_id}")
async def clear_conversation(device_id: str, request: Request) -> JSONResponse:
    store: ConversationStore = request.app.state.runtime.conversations
    removed = await store.clear(device_id)
    return JSONResponse({"success": True, "removed": removed})
