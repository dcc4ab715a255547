from __future__ import annotations

from poker_ledger.services.ledger_service import LedgerService
from poker_ledger.services.room_directory import RoomDirectoryClient
from poker_ledger.services.room_store import RoomStore
from poker_ledger.storage.database import SessionLocal
from poker_ledger.storage.repository import LedgerRepository

room_store = RoomStore()
repository = LedgerRepository(SessionLocal)
ledger_service = LedgerService(room_store, logs=repository, uploads=repository)
room_directory = RoomDirectoryClient()


def get_ledger_service() -> LedgerService:
    return ledger_service


def get_repository() -> LedgerRepository:
    return repository


def get_room_directory() -> RoomDirectoryClient:
    return room_directory
