from __future__ import annotations

import logging
import threading

from poker_ledger.domain import DomainValidationError, RoomMutation, RoomState, apply_mutation

logger = logging.getLogger(__name__)


class RoomNotFoundError(DomainValidationError):
    def __init__(self, room_id: str) -> None:
        super().__init__(f"room not found: {room_id}")
        self.room_id = room_id


class RoomStore:
    """In-process shared room document.

    Each mutation is applied atomically against the latest state, and
    readers only ever see fully materialized, immutable states.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, RoomState] = {}
        self._lock = threading.Lock()

    def get(self, room_id: str) -> RoomState | None:
        with self._lock:
            return self._rooms.get(room_id)

    def apply(self, room_id: str, mutation: RoomMutation, *, create: bool = True) -> RoomState:
        """Apply a mutation atomically; with create=False a missing room raises RoomNotFoundError."""
        with self._lock:
            current = self._rooms.get(room_id)
            if current is None:
                if not create:
                    raise RoomNotFoundError(room_id)
                current = RoomState()
            updated = apply_mutation(current, mutation)
            self._rooms[room_id] = updated
        logger.debug("room %s: applied %s", room_id, mutation.mutation_type.value)
        return updated

    def delete(self, room_id: str) -> bool:
        with self._lock:
            return self._rooms.pop(room_id, None) is not None

    def room_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._rooms)
