from __future__ import annotations

import math

from .models import Player
from .room import new_player_id

DEFAULT_BUY_INS = 1.0
DEFAULT_CHIPS = 0.0


def parse_import_text(text: str) -> list[Player]:
    """Parse ``name [buy_ins [chips]]`` lines into fresh players.

    Unparsable numbers fall back to the defaults; a name repeated within
    the same text keeps its first line.
    """
    players: list[Player] = []
    seen: set[str] = set()
    for line in text.strip().splitlines():
        parts = line.split()
        if not parts:
            continue
        name = parts[0]
        if name in seen:
            continue
        seen.add(name)

        buy_ins = _parse_number(parts[1], DEFAULT_BUY_INS) if len(parts) >= 2 else DEFAULT_BUY_INS
        chips = _parse_number(parts[2], DEFAULT_CHIPS) if len(parts) >= 3 else DEFAULT_CHIPS
        players.append(Player(id=new_player_id(), name=name, buy_in_count=buy_ins, final_chips=chips))
    return players


def _parse_number(raw: str, default: float) -> float:
    try:
        value = float(raw)
    except ValueError:
        return default
    if math.isnan(value):
        return default
    return value
