from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from poker_ledger.storage.models import GameLog, GameLogEntry, KnownPlayer, PendingUpload, utcnow


@dataclass(slots=True)
class GameLogRow:
    id: int
    room_id: str
    host_name: str
    created_at: str
    players: list[dict[str, object]]

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "roomId": self.room_id,
            "hostName": self.host_name,
            "createdAt": self.created_at,
            "players": self.players,
        }


def _to_row(log: GameLog) -> GameLogRow:
    created_at = log.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return GameLogRow(
        id=log.id,
        room_id=log.room_id,
        host_name=log.host_name,
        created_at=created_at.isoformat(),
        players=[{"name": entry.player_name, "net": entry.net} for entry in log.entries],
    )


def _add_known_players(db: Session, names: Iterable[str]) -> None:
    cleaned: list[str] = []
    for name in names:
        value = (name or "").strip()
        if value and value not in cleaned:
            cleaned.append(value)
    if not cleaned:
        return

    existing = set(db.scalars(select(KnownPlayer.name).where(KnownPlayer.name.in_(cleaned))).all())
    db.add_all([KnownPlayer(name=name) for name in cleaned if name not in existing])


def _write_game_log(
    db: Session,
    room_id: str,
    host_name: str,
    net_by_player: list[tuple[str, int]],
    created_at: datetime | None = None,
) -> GameLog:
    existing = db.scalars(select(GameLog).where(GameLog.room_id == room_id)).first()
    if existing is not None:
        db.delete(existing)
        db.flush()

    log = GameLog(room_id=room_id, host_name=host_name, created_at=created_at or utcnow())
    log.entries = [GameLogEntry(player_name=name, net=int(net)) for name, net in net_by_player]
    db.add(log)
    db.flush()
    return log


class LedgerRepository:
    """Device-local persistence: known player names, game logs and the upload queue."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    # known players

    def list_known_players(self) -> list[str]:
        with self._session_factory() as db:
            return list(db.scalars(select(KnownPlayer.name).order_by(KnownPlayer.name)).all())

    def remove_known_player(self, name: str) -> bool:
        with self._session_factory() as db:
            result = db.execute(delete(KnownPlayer).where(KnownPlayer.name == name))
            db.commit()
            return bool(result.rowcount)

    # game logs

    def record_settlement(
        self,
        room_id: str,
        host_name: str,
        net_by_player: list[tuple[str, int]],
        created_at: datetime | None = None,
    ) -> GameLogRow:
        """Save the game log, remember its player names and queue it for upload in one transaction.

        An earlier log of the same room is replaced along with its queue entry.
        """
        with self._session_factory() as db:
            log = _write_game_log(db, room_id, host_name, net_by_player, created_at)
            _add_known_players(db, (name for name, _ in net_by_player))
            db.add(PendingUpload(game_log_id=log.id))
            db.commit()
            db.refresh(log)
            return _to_row(log)

    def list_game_logs(self) -> list[GameLogRow]:
        with self._session_factory() as db:
            logs = db.scalars(
                select(GameLog)
                .options(selectinload(GameLog.entries))
                .order_by(GameLog.created_at.desc(), GameLog.id.desc())
            ).all()
            return [_to_row(log) for log in logs]

    def clear_game_logs(self) -> int:
        with self._session_factory() as db:
            logs = db.scalars(select(GameLog)).all()
            for log in logs:
                db.delete(log)
            db.commit()
            return len(logs)

    # upload queue

    def pending_uploads(self) -> list[GameLogRow]:
        with self._session_factory() as db:
            logs = db.scalars(
                select(GameLog)
                .join(PendingUpload, PendingUpload.game_log_id == GameLog.id)
                .where(PendingUpload.uploaded_at.is_(None))
                .options(selectinload(GameLog.entries))
                .order_by(PendingUpload.id)
            ).unique().all()
            return [_to_row(log) for log in logs]

    def mark_uploaded(self, game_log_id: int) -> None:
        with self._session_factory() as db:
            uploads = db.scalars(
                select(PendingUpload).where(
                    PendingUpload.game_log_id == game_log_id,
                    PendingUpload.uploaded_at.is_(None),
                )
            ).all()
            for upload in uploads:
                upload.uploaded_at = utcnow()
            db.commit()
