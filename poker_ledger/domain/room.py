from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping
from uuid import uuid4

from .models import DomainValidationError, EngineSettings, Player, RoomSettings, normalize_player


class RoomMutationType(str, Enum):
    ADD_PLAYER = "add_player"
    UPDATE_PLAYER = "update_player"
    REMOVE_PLAYER = "remove_player"
    UPDATE_SETTINGS = "update_settings"
    IMPORT_PLAYERS = "import_players"
    RESTORE = "restore"
    LOCK = "lock"
    UNLOCK = "unlock"


PLAYER_FIELDS = frozenset({"name", "buy_in_count", "final_chips"})
SETTINGS_FIELDS = frozenset({"chip_per_buy_in", "cash_per_buy_in", "title", "show_settlement"})


@dataclass(frozen=True)
class RoomMutation:
    mutation_type: RoomMutationType
    name: str | None = None
    player_id: str | None = None
    changes: Mapping[str, Any] = field(default_factory=dict)
    players: tuple[Player, ...] = field(default_factory=tuple)
    settings: RoomSettings | None = None


@dataclass(frozen=True)
class RoomState:
    players: tuple[Player, ...] = field(default_factory=tuple)
    settings: RoomSettings = field(default_factory=RoomSettings)


def new_player_id() -> str:
    return uuid4().hex


def to_snapshot(state: RoomState) -> tuple[tuple[Player, ...], EngineSettings]:
    """Plain, immutable inputs for the settlement engine."""
    return state.players, state.settings.engine_settings()


def apply_mutation(state: RoomState, mutation: RoomMutation) -> RoomState:
    """Apply one mutation to a room without infrastructure dependencies."""
    kind = mutation.mutation_type

    if kind == RoomMutationType.UNLOCK:
        return replace(state, settings=replace(state.settings, is_locked=False))
    if state.settings.is_locked:
        raise DomainValidationError("room is locked")

    if kind == RoomMutationType.LOCK:
        return replace(state, settings=replace(state.settings, is_locked=True))

    if kind == RoomMutationType.ADD_PLAYER:
        name = normalize_player(mutation.name or "")
        _ensure_name_free(state, name)
        player = Player(id=new_player_id(), name=name, buy_in_count=1, final_chips=0)
        return replace(state, players=state.players + (player,))

    if kind == RoomMutationType.UPDATE_PLAYER:
        index = _player_index(state, mutation.player_id)
        changes = _sanitize_player_changes(mutation.changes)
        current = state.players[index]
        if "name" in changes and changes["name"] != current.name:
            _ensure_name_free(state, changes["name"])
        players = list(state.players)
        players[index] = replace(current, **changes)
        return replace(state, players=tuple(players))

    if kind == RoomMutationType.REMOVE_PLAYER:
        index = _player_index(state, mutation.player_id)
        return replace(state, players=state.players[:index] + state.players[index + 1 :])

    if kind == RoomMutationType.UPDATE_SETTINGS:
        unknown = set(mutation.changes) - SETTINGS_FIELDS
        if unknown:
            raise DomainValidationError(f"unsupported settings: {', '.join(sorted(unknown))}")
        return replace(state, settings=replace(state.settings, **mutation.changes))

    if kind == RoomMutationType.IMPORT_PLAYERS:
        taken = {player.name for player in state.players}
        added: list[Player] = []
        for player in mutation.players:
            if player.name in taken:
                continue
            taken.add(player.name)
            added.append(player)
        return replace(state, players=state.players + tuple(added))

    if kind == RoomMutationType.RESTORE:
        restored: list[Player] = []
        seen: set[str] = set()
        for player in mutation.players:
            name = normalize_player(player.name)
            if name in seen:
                continue
            seen.add(name)
            restored.append(replace(player, name=name, net_amount=None))
        return RoomState(players=tuple(restored), settings=mutation.settings or state.settings)

    raise DomainValidationError(f"unsupported mutation type: {kind}")


def _player_index(state: RoomState, player_id: str | None) -> int:
    for index, player in enumerate(state.players):
        if player.id == player_id:
            return index
    raise DomainValidationError(f"unknown player: {player_id}")


def _ensure_name_free(state: RoomState, name: str) -> None:
    if any(player.name == name for player in state.players):
        raise DomainValidationError(f"player already exists: {name}")


def _sanitize_player_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(changes) - PLAYER_FIELDS
    if unknown:
        raise DomainValidationError(f"unsupported player fields: {', '.join(sorted(unknown))}")

    sanitized = dict(changes)
    if "name" in sanitized:
        sanitized["name"] = normalize_player(sanitized["name"])
    for key in ("buy_in_count", "final_chips"):
        if key in sanitized:
            sanitized[key] = max(0, sanitized[key] or 0)
    return sanitized
