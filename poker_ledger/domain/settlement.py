"""Settlement engine: net results per player and the transfers that settle a round."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from .models import Player, SettlementResult, Transfer

# Remaining amounts closer to zero than this count as settled.
SETTLED_EPSILON = 0.1

TIGHT_TOLERANCE = 1
LOOSE_TOLERANCE = 5

_ONE = Decimal(1)


class ExchangeSettings(Protocol):
    chip_per_buy_in: float
    cash_per_buy_in: float


def _dec(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round_half_away(value: Decimal) -> int | float:
    if not value.is_finite():
        # garbage in, garbage out: NaN makes the round unbalanced downstream
        return float(value)
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def balance_tolerance(exchange_rate: float | Decimal) -> int:
    """Allowed absolute total imbalance for a given cash-per-chip rate.

    Cheap chips compound rounding error across many players, so rates
    below one cash unit per chip get the looser bound.
    """
    rate = _dec(exchange_rate)
    if not rate.is_nan() and rate >= _ONE:
        return TIGHT_TOLERANCE
    return LOOSE_TOLERANCE


def calculate_net(players: Sequence[Player], settings: ExchangeSettings) -> tuple[Player, ...]:
    cash_per_buy_in = _dec(settings.cash_per_buy_in)
    chip_per_buy_in = _dec(settings.chip_per_buy_in)

    calculated: list[Player] = []
    for player in players:
        cost = _dec(player.buy_in_count) * cash_per_buy_in
        # multiply before dividing; cash / chip need not terminate
        final_value = _dec(player.final_chips) * cash_per_buy_in / chip_per_buy_in
        calculated.append(replace(player, net_amount=_round_half_away(final_value - cost)))
    return tuple(calculated)


def build_transfers(players: Sequence[Player]) -> tuple[Transfer, ...]:
    """Greedy largest-debtor to largest-creditor matching.

    Usually yields the fewest transfers, but is not a guaranteed-optimal
    solver for every tie pattern.
    """
    debtors = sorted(
        ([player.name, player.net_amount] for player in players if (player.net_amount or 0) < 0),
        key=lambda item: item[1],
    )
    creditors = sorted(
        ([player.name, player.net_amount] for player in players if (player.net_amount or 0) > 0),
        key=lambda item: item[1],
        reverse=True,
    )

    transfers: list[Transfer] = []
    debtor_idx = 0
    creditor_idx = 0
    while debtor_idx < len(debtors) and creditor_idx < len(creditors):
        debtor = debtors[debtor_idx]
        creditor = creditors[creditor_idx]

        amount = min(abs(debtor[1]), creditor[1])
        if amount > 0:
            transfers.append(Transfer(from_name=debtor[0], to_name=creditor[0], amount=round(amount)))

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < SETTLED_EPSILON:
            debtor_idx += 1
        if abs(creditor[1]) < SETTLED_EPSILON:
            creditor_idx += 1

    return tuple(transfers)


def calculate_settlement(players: Sequence[Player], settings: ExchangeSettings) -> SettlementResult:
    if not settings.chip_per_buy_in:
        # exchange rate undefined: report "not configured" instead of raising
        return SettlementResult(players=(), transfers=(), total_balance=0, is_balanced=False)

    calculated = calculate_net(players, settings)
    total_balance = sum((player.net_amount for player in calculated), 0)

    exchange_rate = _dec(settings.cash_per_buy_in) / _dec(settings.chip_per_buy_in)
    is_balanced = abs(total_balance) <= balance_tolerance(exchange_rate)
    if not is_balanced:
        return SettlementResult(players=calculated, transfers=(), total_balance=total_balance, is_balanced=False)

    return SettlementResult(
        players=calculated,
        transfers=build_transfers(calculated),
        total_balance=total_balance,
        is_balanced=True,
    )
