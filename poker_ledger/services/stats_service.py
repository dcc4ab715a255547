from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session

from poker_ledger.storage.models import GameLog, GameLogEntry


@dataclass
class GlobalBalance:
    total_net: int
    games_count: int
    players: dict[str, int]


def get_global_balance(
    db: Session,
    *,
    period_days: int | None = None,
    player_name: str | None = None,
) -> GlobalBalance:
    filters = []
    if period_days is not None:
        since = datetime.now(timezone.utc) - timedelta(days=period_days)
        filters.append(GameLog.created_at >= since.replace(tzinfo=None))
    if player_name is not None:
        filters.append(GameLogEntry.player_name == player_name)

    row = db.execute(
        select(func.coalesce(func.sum(GameLogEntry.net), 0), func.count(func.distinct(GameLogEntry.game_log_id)))
        .join(GameLog, GameLog.id == GameLogEntry.game_log_id)
        .where(and_(True, *filters))
    ).one()

    per_player = db.execute(
        select(GameLogEntry.player_name, func.coalesce(func.sum(GameLogEntry.net), 0).label("net"))
        .join(GameLog, GameLog.id == GameLogEntry.game_log_id)
        .where(and_(True, *filters))
        .group_by(GameLogEntry.player_name)
        .order_by(GameLogEntry.player_name)
    ).all()

    return GlobalBalance(
        total_net=int(row[0] or 0),
        games_count=int(row[1] or 0),
        players={entry.player_name: int(entry.net) for entry in per_player},
    )


def get_player_stats(db: Session, name: str) -> dict[str, object]:
    history_rows = db.execute(
        select(GameLog.id, GameLog.room_id, GameLog.created_at, GameLogEntry.net)
        .join(GameLog, GameLog.id == GameLogEntry.game_log_id)
        .where(GameLogEntry.player_name == name)
        .order_by(GameLog.created_at.desc(), GameLog.id.desc())
    ).all()

    totals = db.execute(
        select(
            func.coalesce(func.sum(GameLogEntry.net), 0),
            func.count(GameLogEntry.id),
            func.coalesce(func.sum(case((GameLogEntry.net > 0, 1), else_=0)), 0),
        ).where(GameLogEntry.player_name == name)
    ).one()

    total_net = int(totals[0] or 0)
    games_count = int(totals[1] or 0)
    wins = int(totals[2] or 0)

    return {
        "player": name,
        "total_net": total_net,
        "games_count": games_count,
        "win_rate": (wins / games_count) if games_count else 0.0,
        "history": [
            {
                "game_log_id": row.id,
                "room_id": row.room_id,
                "created_at": row.created_at.isoformat() if row.created_at else None,
                "net": int(row.net),
            }
            for row in history_rows
        ],
    }
