from poker_ledger.domain import parse_import_text


def test_parses_name_buy_ins_and_chips() -> None:
    players = parse_import_text("Alice 2 1500\nBob 1 500\n")

    assert [(p.name, p.buy_in_count, p.final_chips) for p in players] == [
        ("Alice", 2.0, 1500.0),
        ("Bob", 1.0, 500.0),
    ]
    assert len({p.id for p in players}) == 2


def test_missing_or_bad_numbers_fall_back_to_defaults() -> None:
    players = parse_import_text("Alice\nBob x\nCarol 1.5 nan\n   \nDave\t3\tabc")

    assert [(p.name, p.buy_in_count, p.final_chips) for p in players] == [
        ("Alice", 1.0, 0.0),
        ("Bob", 1.0, 0.0),
        ("Carol", 1.5, 0.0),
        ("Dave", 3.0, 0.0),
    ]


def test_first_occurrence_of_a_name_wins() -> None:
    players = parse_import_text("Alice 1 100\nAlice 4 400")

    assert len(players) == 1
    assert players[0].final_chips == 100.0


def test_empty_text_yields_nothing() -> None:
    assert parse_import_text("   \n\n") == []
