import csv
import io

import pytest

from poker_ledger.domain import EngineSettings, Player, calculate_settlement
from poker_ledger.services.report_formatter import (
    generate_csv,
    generate_html_table,
    generate_text_summary,
    render_report,
    summarize_report,
)

SETTINGS = EngineSettings(chip_per_buy_in=1000, cash_per_buy_in=500)


def _result(*rows: tuple[str, float, float]):
    players = [Player(id=name, name=name, buy_in_count=b, final_chips=c) for name, b, c in rows]
    return calculate_settlement(players, SETTINGS)


def test_csv_layout_keeps_input_order() -> None:
    result = _result(("Loser", 1, 500), ("Winner", 1, 1500))

    assert generate_csv(result) == (
        "Player,Buy-ins,Final Chips,Net Profit/Loss\n"
        "Loser,1,500,-250\n"
        "Winner,1,1500,250\n"
        "\n"
        "TRANSFERS\n"
        "From,To,Amount\n"
        "Loser,Winner,250\n"
    )


def test_csv_parses_back_into_rows() -> None:
    result = _result(("A", 1, 1500), ("B", 1, 500))

    lines = generate_csv(result).split("\n")
    players_block = lines[: lines.index("")]
    transfers_block = [line for line in lines[lines.index("TRANSFERS") + 1 :] if line]

    player_rows = [line.split(",") for line in players_block[1:]]
    transfer_rows = [line.split(",") for line in transfers_block[1:]]
    assert player_rows == [["A", "1", "1500", "250"], ["B", "1", "500", "-250"]]
    assert transfer_rows == [["B", "A", "250"]]


def test_csv_quotes_names_with_commas() -> None:
    result = _result(("Smith, J", 1, 1000))

    rows = list(csv.reader(io.StringIO(generate_csv(result))))

    assert rows[1] == ["Smith, J", "1", "1000", "0"]


def test_html_sorts_players_by_net_descending() -> None:
    result = _result(("Loser", 2, 500), ("Winner", 1, 2500))

    html = generate_html_table(result, SETTINGS)

    assert html.index(">Winner<") < html.index(">Loser<")
    assert "+$750" in html and "-$750" in html
    assert "#2e7d32" in html and "#c62828" in html
    assert "1 Buy-in = $500 (1000 Chips)" in html
    assert "<h3" in html and "Transfers" in html


def test_html_settled_round_says_no_transfers() -> None:
    html = generate_html_table(_result(("A", 1, 1000), ("B", 1, 1000)), SETTINGS)

    assert "No transfers needed." in html
    assert "Unbalanced" not in html


def test_html_unbalanced_round_reports_discrepancy() -> None:
    html = generate_html_table(_result(("A", 1, 1100), ("B", 1, 1000)), SETTINGS)

    assert "Unbalanced" in html
    assert "+$50" in html
    assert "No transfers needed." not in html


def test_html_escapes_player_names() -> None:
    html = generate_html_table(_result(("<b>", 1, 1000)), SETTINGS)

    assert "<b>" not in html
    assert ">&lt;b&gt;<" in html


def test_text_summary_lists_players_and_arrows() -> None:
    text = generate_text_summary(_result(("Loser", 1, 500), ("Winner", 1, 1500)), SETTINGS)

    assert text.splitlines() == [
        "Poker Settlement Result",
        "1 Buy-in = $500 (1000 Chips)",
        "",
        "Players:",
        "  Winner: +$250",
        "  Loser: -$250",
        "",
        "Who pays whom:",
        "  Loser -> Winner: $250",
    ]


def test_text_summary_warns_when_unbalanced() -> None:
    text = generate_text_summary(_result(("A", 1, 1100), ("B", 1, 1000)), SETTINGS)

    assert "WARNING: totals are unbalanced (discrepancy: +$50)" in text
    assert "Transfers withheld until the totals balance." in text
    assert "->" not in text


def test_text_summary_settled_round() -> None:
    text = generate_text_summary(_result(("A", 1, 1000)), SETTINGS)

    assert "  No transfers needed." in text.splitlines()
    assert "WARNING" not in text


def test_summarize_report_picks_winner_and_loser() -> None:
    summary = summarize_report(_result(("A", 1, 1500), ("B", 2, 1500), ("C", 1, 1000)))

    assert summary.total_buy_ins == 4
    assert summary.total_chips == 4000
    assert summary.top_winner.name == "A"
    assert summary.top_loser.name == "B"


def test_summarize_report_without_winners() -> None:
    summary = summarize_report(_result(("A", 1, 1000)))

    assert summary.top_winner is None
    assert summary.top_loser is None


def test_render_report_rejects_unknown_format() -> None:
    result = _result(("A", 1, 1000))

    assert render_report(result, SETTINGS, "csv") == generate_csv(result)
    with pytest.raises(ValueError):
        render_report(result, SETTINGS, "pdf")
