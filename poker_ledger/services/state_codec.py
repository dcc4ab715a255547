from __future__ import annotations

import base64
import json
import logging
from typing import Any
from urllib.parse import quote, unquote

from poker_ledger.domain import Player, RoomSettings

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.~".
_URI_COMPONENT_SAFE = "!*'()"


def player_to_wire(player: Player) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": player.id,
        "name": player.name,
        "buyInCount": player.buy_in_count,
        "finalChips": player.final_chips,
    }
    if player.net_amount is not None:
        payload["netAmount"] = player.net_amount
    return payload


def player_from_wire(payload: dict[str, Any]) -> Player:
    return Player(
        id=str(payload["id"]),
        name=str(payload["name"]),
        buy_in_count=payload.get("buyInCount", 1),
        final_chips=payload.get("finalChips", 0),
    )


def settings_to_wire(settings: RoomSettings) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "chipPerBuyIn": settings.chip_per_buy_in,
        "cashPerBuyIn": settings.cash_per_buy_in,
        "isLocked": settings.is_locked,
        "showSettlement": settings.show_settlement,
    }
    if settings.title is not None:
        payload["title"] = settings.title
    return payload


def settings_from_wire(payload: dict[str, Any]) -> RoomSettings:
    defaults = RoomSettings()
    return RoomSettings(
        chip_per_buy_in=payload.get("chipPerBuyIn", defaults.chip_per_buy_in),
        cash_per_buy_in=payload.get("cashPerBuyIn", defaults.cash_per_buy_in),
        is_locked=bool(payload.get("isLocked", False)),
        show_settlement=bool(payload.get("showSettlement", False)),
        title=payload.get("title"),
    )


def serialize_state(players: list[Player] | tuple[Player, ...], settings: RoomSettings) -> str:
    """Encode a room snapshot into a URL-safe share token."""
    data = {"p": [player_to_wire(player) for player in players], "s": settings_to_wire(settings)}
    text = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    encoded = quote(text, safe=_URI_COMPONENT_SAFE)
    return base64.b64encode(encoded.encode("ascii")).decode("ascii")


def deserialize_state(token: str) -> tuple[list[Player], RoomSettings] | None:
    """Decode a share token; tokens from before percent-encoding hold plain JSON."""
    try:
        decoded = base64.b64decode(token, validate=True).decode("latin-1")
        try:
            data = json.loads(unquote(decoded, errors="strict"))
        except ValueError:
            data = json.loads(decoded)
        players = [player_from_wire(item) for item in data["p"]]
        settings = settings_from_wire(data["s"])
    except (ValueError, KeyError, TypeError, AttributeError):
        logger.exception("Failed to parse room state from share token")
        return None
    return players, settings
