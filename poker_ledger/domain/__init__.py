from .importer import parse_import_text
from .models import (
    DomainValidationError,
    EngineSettings,
    Player,
    RoomSettings,
    SettlementResult,
    Transfer,
    normalize_player,
)
from .room import (
    RoomMutation,
    RoomMutationType,
    RoomState,
    apply_mutation,
    to_snapshot,
)
from .settlement import (
    balance_tolerance,
    build_transfers,
    calculate_net,
    calculate_settlement,
)

__all__ = [
    "DomainValidationError",
    "EngineSettings",
    "Player",
    "RoomMutation",
    "RoomMutationType",
    "RoomSettings",
    "RoomState",
    "SettlementResult",
    "Transfer",
    "apply_mutation",
    "balance_tolerance",
    "build_transfers",
    "calculate_net",
    "calculate_settlement",
    "normalize_player",
    "parse_import_text",
    "to_snapshot",
]
