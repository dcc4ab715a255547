from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from poker_ledger.services.stats_service import get_global_balance, get_player_stats
from poker_ledger.storage.database import get_db

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/balance")
def stats_balance(
    period_days: int | None = Query(default=None, ge=1),
    player: str | None = None,
    db: Session = Depends(get_db),
) -> dict:
    balance = get_global_balance(db, period_days=period_days, player_name=player)
    average = balance.total_net / balance.games_count if balance.games_count else 0.0
    return {
        "total_balance": balance.total_net,
        "games_count": balance.games_count,
        "average_per_game": average,
        "players": [{"name": name, "net": net} for name, net in balance.players.items()],
    }


@router.get("/player/{name}")
def player_stats(name: str, db: Session = Depends(get_db)) -> dict:
    return get_player_stats(db, name)
