from __future__ import annotations

from dataclasses import dataclass, field


class DomainValidationError(ValueError):
    """Raised when a room rule is violated."""


@dataclass(slots=True, frozen=True)
class Player:
    id: str
    name: str
    buy_in_count: float = 1
    final_chips: float = 0
    net_amount: int | None = None


@dataclass(slots=True, frozen=True)
class EngineSettings:
    """Exchange configuration consumed by the settlement engine."""

    chip_per_buy_in: float
    cash_per_buy_in: float


@dataclass(slots=True, frozen=True)
class RoomSettings:
    """Everything a room stores next to its players, UI flags included."""

    chip_per_buy_in: float = 1000
    cash_per_buy_in: float = 500
    is_locked: bool = False
    show_settlement: bool = False
    title: str | None = None

    def engine_settings(self) -> EngineSettings:
        return EngineSettings(
            chip_per_buy_in=self.chip_per_buy_in,
            cash_per_buy_in=self.cash_per_buy_in,
        )


@dataclass(slots=True, frozen=True)
class Transfer:
    from_name: str
    to_name: str
    amount: int


@dataclass(slots=True, frozen=True)
class SettlementResult:
    players: tuple[Player, ...] = field(default_factory=tuple)
    transfers: tuple[Transfer, ...] = field(default_factory=tuple)
    total_balance: int = 0
    is_balanced: bool = True


def normalize_player(name: str) -> str:
    value = name.strip()
    if not value:
        raise DomainValidationError("player name must be non-empty")
    return value

