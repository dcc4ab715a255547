from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poker_ledger.storage.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KnownPlayer(Base):
    __tablename__ = "known_players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class GameLog(Base):
    __tablename__ = "game_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    host_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)

    entries: Mapped[list["GameLogEntry"]] = relationship(
        back_populates="game_log", cascade="all, delete-orphan", order_by="GameLogEntry.id"
    )
    uploads: Mapped[list["PendingUpload"]] = relationship(back_populates="game_log", cascade="all, delete-orphan")


class GameLogEntry(Base):
    __tablename__ = "game_log_entries"
    __table_args__ = (UniqueConstraint("game_log_id", "player_name", name="uq_game_log_entries_log_player"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_log_id: Mapped[int] = mapped_column(ForeignKey("game_logs.id"), nullable=False, index=True)
    player_name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    net: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    game_log: Mapped[GameLog] = relationship(back_populates="entries")


class PendingUpload(Base):
    __tablename__ = "pending_uploads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_log_id: Mapped[int] = mapped_column(ForeignKey("game_logs.id"), nullable=False, index=True)
    enqueued_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    uploaded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)

    game_log: Mapped[GameLog] = relationship(back_populates="uploads")
