from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from poker_ledger.api.errors import api_error
from poker_ledger.api.schemas import RoomDirectoryRequest
from poker_ledger.runtime import get_room_directory
from poker_ledger.services.room_directory import (
    RoomDirectoryClient,
    RoomDirectoryConfigError,
    RoomDirectoryProviderError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["room-directory"])


def _missing_room_id():
    return api_error(
        code="room_id_required",
        message="Room ID is required",
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def _upstream_failure(exc: Exception):
    logger.error("room directory request failed: %s", exc)
    code = "directory_not_configured" if isinstance(exc, RoomDirectoryConfigError) else "directory_upstream_error"
    return api_error(
        code=code,
        message=str(exc) or "Internal Server Error",
        details={"upstreamStatus": getattr(exc, "status_code", None)},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@router.get("", summary="List rooms, most recently used first")
def list_rooms(directory: RoomDirectoryClient = Depends(get_room_directory)) -> dict:
    try:
        rooms = directory.list_rooms()
    except (RoomDirectoryConfigError, RoomDirectoryProviderError) as exc:
        raise _upstream_failure(exc) from exc
    return {"rooms": rooms}


@router.post("", summary="Create a room or update its title")
def create_or_update_room(
    payload: RoomDirectoryRequest,
    directory: RoomDirectoryClient = Depends(get_room_directory),
) -> dict:
    if not payload.room_id:
        raise _missing_room_id()
    try:
        directory.create_or_update_room(payload.room_id, title=payload.title, intent=payload.intent)
    except (RoomDirectoryConfigError, RoomDirectoryProviderError) as exc:
        raise _upstream_failure(exc) from exc
    return {"success": True}


@router.delete("", summary="Delete a room")
def delete_room(
    room_id: str | None = Query(default=None, alias="roomId"),
    directory: RoomDirectoryClient = Depends(get_room_directory),
) -> dict:
    if not room_id:
        raise _missing_room_id()
    try:
        directory.delete_room(room_id)
    except (RoomDirectoryConfigError, RoomDirectoryProviderError) as exc:
        raise _upstream_failure(exc) from exc
    return {"success": True}
