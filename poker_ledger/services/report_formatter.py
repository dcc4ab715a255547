"""Export renderings of a settlement result: CSV, pasteable HTML and plain text."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from html import escape

from poker_ledger.domain import Player, SettlementResult
from poker_ledger.domain.settlement import ExchangeSettings

CSV_PLAYER_HEADER = ("Player", "Buy-ins", "Final Chips", "Net Profit/Loss")
CSV_TRANSFER_HEADER = ("From", "To", "Amount")
CSV_TRANSFERS_MARKER = "TRANSFERS"

NO_TRANSFERS_MESSAGE = "No transfers needed."

# Inline styles survive a paste into docs and mail clients.
_FONT = "font-family: Arial, sans-serif;"
_TABLE_STYLE = f"border-collapse: collapse; width: 100%; {_FONT} border: 1px solid #ccc;"
_TH_STYLE = "background-color: #f3f3f3; border: 1px solid #ccc; padding: 8px; text-align: left;"
_TD_STYLE = "border: 1px solid #ccc; padding: 8px;"
_PROFIT_COLOR = "#2e7d32"
_LOSS_COLOR = "#c62828"


@dataclass(slots=True, frozen=True)
class ReportSummary:
    total_buy_ins: float
    total_chips: float
    top_winner: Player | None
    top_loser: Player | None


def format_number(value: float | int | None) -> str:
    if value is None:
        return "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_signed(amount: int | float) -> str:
    sign = "+" if amount >= 0 else "-"
    return f"{sign}${format_number(abs(amount))}"


def exchange_line(settings: ExchangeSettings) -> str:
    return (
        f"1 Buy-in = ${format_number(settings.cash_per_buy_in)} "
        f"({format_number(settings.chip_per_buy_in)} Chips)"
    )


def sorted_by_net(result: SettlementResult) -> list[Player]:
    return sorted(result.players, key=lambda player: player.net_amount or 0, reverse=True)


def generate_csv(result: SettlementResult) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(CSV_PLAYER_HEADER)
    for player in result.players:
        writer.writerow(
            [
                player.name,
                format_number(player.buy_in_count),
                format_number(player.final_chips),
                format_number(player.net_amount),
            ]
        )

    writer.writerow([])
    writer.writerow([CSV_TRANSFERS_MARKER])
    writer.writerow(CSV_TRANSFER_HEADER)
    for transfer in result.transfers:
        writer.writerow([transfer.from_name, transfer.to_name, format_number(transfer.amount)])

    return buffer.getvalue()


def generate_html_table(result: SettlementResult, settings: ExchangeSettings) -> str:
    parts = [
        f'<h2 style="{_FONT}">Poker Settlement Result</h2>',
        f'<p style="{_FONT}">{escape(exchange_line(settings))}</p>',
        f'<h3 style="{_FONT}">Player Results</h3>',
        f'<table style="{_TABLE_STYLE}">',
        "<thead><tr>",
        *(f'<th style="{_TH_STYLE}">{title}</th>' for title in ("Player", "Buy-ins", "Chips", "Net Amount")),
        "</tr></thead>",
        "<tbody>",
    ]
    for player in sorted_by_net(result):
        net = player.net_amount or 0
        color = _PROFIT_COLOR if net >= 0 else _LOSS_COLOR
        parts.extend(
            [
                "<tr>",
                f'<td style="{_TD_STYLE}">{escape(player.name)}</td>',
                f'<td style="{_TD_STYLE}">{format_number(player.buy_in_count)}</td>',
                f'<td style="{_TD_STYLE}">{format_number(player.final_chips)}</td>',
                f'<td style="{_TD_STYLE} color: {color}; font-weight: bold;">{escape(format_signed(net))}</td>',
                "</tr>",
            ]
        )
    parts.append("</tbody></table>")

    if not result.is_balanced:
        parts.append(
            f'<p style="{_FONT} margin-top: 20px; color: {_LOSS_COLOR};">'
            f"Unbalanced: totals are off by {escape(format_signed(result.total_balance))}. "
            "Transfers are withheld until the inputs are corrected.</p>"
        )
    elif result.transfers:
        parts.extend(
            [
                f'<h3 style="{_FONT} margin-top: 20px;">Transfers</h3>',
                f'<table style="{_TABLE_STYLE}">',
                "<thead><tr>",
                *(f'<th style="{_TH_STYLE}">{title}</th>' for title in CSV_TRANSFER_HEADER),
                "</tr></thead>",
                "<tbody>",
            ]
        )
        for transfer in result.transfers:
            parts.extend(
                [
                    "<tr>",
                    f'<td style="{_TD_STYLE} color: {_LOSS_COLOR};">{escape(transfer.from_name)}</td>',
                    f'<td style="{_TD_STYLE} color: {_PROFIT_COLOR};">{escape(transfer.to_name)}</td>',
                    f'<td style="{_TD_STYLE} font-weight: bold;">${format_number(transfer.amount)}</td>',
                    "</tr>",
                ]
            )
        parts.append("</tbody></table>")
    else:
        parts.append(f'<p style="{_FONT} margin-top: 20px;">{NO_TRANSFERS_MESSAGE}</p>')

    return "\n".join(parts)


def generate_text_summary(result: SettlementResult, settings: ExchangeSettings) -> str:
    lines = ["Poker Settlement Result", exchange_line(settings), ""]

    if not result.is_balanced:
        lines.extend(
            [
                f"WARNING: totals are unbalanced (discrepancy: {format_signed(result.total_balance)})",
                "",
            ]
        )

    lines.append("Players:")
    for player in sorted_by_net(result):
        lines.append(f"  {player.name}: {format_signed(player.net_amount or 0)}")
    lines.append("")

    lines.append("Who pays whom:")
    if not result.is_balanced:
        lines.append("  Transfers withheld until the totals balance.")
    elif not result.transfers:
        lines.append(f"  {NO_TRANSFERS_MESSAGE}")
    else:
        for transfer in result.transfers:
            lines.append(f"  {transfer.from_name} -> {transfer.to_name}: ${format_number(transfer.amount)}")

    return "\n".join(lines) + "\n"


def summarize_report(result: SettlementResult) -> ReportSummary:
    ranked = sorted_by_net(result)
    top_winner = ranked[0] if ranked and (ranked[0].net_amount or 0) > 0 else None
    top_loser = ranked[-1] if ranked and (ranked[-1].net_amount or 0) < 0 else None
    return ReportSummary(
        total_buy_ins=sum((player.buy_in_count for player in result.players), 0),
        total_chips=sum((player.final_chips for player in result.players), 0),
        top_winner=top_winner,
        top_loser=top_loser,
    )


def render_report(result: SettlementResult, settings: ExchangeSettings, fmt: str) -> str:
    if fmt == "csv":
        return generate_csv(result)
    if fmt == "html":
        return generate_html_table(result, settings)
    if fmt == "text":
        return generate_text_summary(result, settings)
    raise ValueError(f"unsupported report format: {fmt}")
