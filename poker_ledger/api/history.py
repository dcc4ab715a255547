from __future__ import annotations

from fastapi import APIRouter, Depends

from poker_ledger.api.errors import api_error
from poker_ledger.api.schemas import UploadFlushResponse
from poker_ledger.runtime import get_ledger_service, get_repository, get_room_directory
from poker_ledger.services.ledger_service import LedgerService
from poker_ledger.services.room_directory import RoomDirectoryClient
from poker_ledger.storage.repository import LedgerRepository

router = APIRouter(tags=["history"])


@router.get("/players/known", summary="Player names seen in earlier games")
def known_players(repo: LedgerRepository = Depends(get_repository)) -> dict:
    return {"players": repo.list_known_players()}


@router.delete("/players/known/{name}", summary="Forget a player name")
def forget_player(name: str, repo: LedgerRepository = Depends(get_repository)) -> dict:
    if not repo.remove_known_player(name):
        raise api_error(
            code="player_not_found",
            message=f"Unknown player name: {name}",
            details={"name": name},
            status_code=404,
        )
    return {"removed": name}


@router.get("/history", summary="Finalized game logs, newest first")
def history(repo: LedgerRepository = Depends(get_repository)) -> dict:
    return {"logs": [row.to_dict() for row in repo.list_game_logs()]}


@router.delete("/history", summary="Clear local game logs")
def clear_history(repo: LedgerRepository = Depends(get_repository)) -> dict:
    return {"deleted": repo.clear_game_logs()}


@router.get("/history/uploads", summary="Game logs waiting to be published")
def pending_uploads(repo: LedgerRepository = Depends(get_repository)) -> dict:
    return {"logs": [row.to_dict() for row in repo.pending_uploads()]}


@router.post("/history/uploads/flush", response_model=UploadFlushResponse, summary="Publish queued game logs")
def flush_uploads(
    service: LedgerService = Depends(get_ledger_service),
    directory: RoomDirectoryClient = Depends(get_room_directory),
) -> UploadFlushResponse:
    uploaded = service.flush_uploads(directory.publish_game_log)
    return UploadFlushResponse(uploaded=uploaded, pending=len(service.uploads.pending_uploads()))
