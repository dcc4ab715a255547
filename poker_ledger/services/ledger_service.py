from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from poker_ledger.domain import (
    RoomMutation,
    RoomMutationType,
    RoomState,
    SettlementResult,
    calculate_settlement,
    to_snapshot,
)
from poker_ledger.services.room_store import RoomNotFoundError, RoomStore
from poker_ledger.storage.repository import GameLogRow

logger = logging.getLogger(__name__)


class UploadQueue(Protocol):
    def pending_uploads(self) -> list[GameLogRow]: ...

    def mark_uploaded(self, game_log_id: int) -> None: ...


class GameLogStore(Protocol):
    def record_settlement(self, room_id: str, host_name: str, net_by_player: list[tuple[str, int]]) -> GameLogRow:
        """Persist the log, add its names to the NameDirectory and queue the upload atomically."""
        ...


@dataclass(slots=True)
class SettleOutcome:
    state: RoomState
    result: SettlementResult
    game_log: GameLogRow | None


class LedgerService:
    def __init__(
        self,
        store: RoomStore,
        logs: GameLogStore,
        uploads: UploadQueue,
    ) -> None:
        self.store = store
        self.logs = logs
        self.uploads = uploads

    def current_result(self, room_id: str) -> tuple[RoomState, SettlementResult]:
        state = self.store.get(room_id)
        if state is None:
            raise RoomNotFoundError(room_id)
        players, settings = to_snapshot(state)
        return state, calculate_settlement(players, settings)

    def settle_room(self, room_id: str, host_name: str) -> SettleOutcome:
        """Lock a room and harden its settlement into a game log when it balances."""
        state = self.store.apply(room_id, RoomMutation(RoomMutationType.LOCK), create=False)
        players, settings = to_snapshot(state)
        result = calculate_settlement(players, settings)
        logger.info("room %s locked by %s (balanced=%s)", room_id, host_name, result.is_balanced)

        if not result.is_balanced or not result.players:
            return SettleOutcome(state=state, result=result, game_log=None)

        game_log = self.logs.record_settlement(
            room_id,
            host_name,
            [(player.name, player.net_amount or 0) for player in result.players],
        )
        logger.info("room %s: saved game log %s and queued it for upload", room_id, game_log.id)
        return SettleOutcome(state=state, result=result, game_log=game_log)

    def flush_uploads(self, publish: Callable[[GameLogRow], None]) -> int:
        """Publish pending logs in queue order; stops at the first failure."""
        uploaded = 0
        for game_log in self.uploads.pending_uploads():
            try:
                publish(game_log)
            except Exception:
                logger.exception("upload of game log %s failed, keeping it queued", game_log.id)
                break
            self.uploads.mark_uploaded(game_log.id)
            uploaded += 1
        if uploaded:
            logger.info("uploaded %s game log(s)", uploaded)
        return uploaded
