from datetime import datetime, timezone

import pytest

from poker_ledger.storage import repository as repository_module


def test_settlement_remembers_player_names(repository) -> None:
    repository.record_settlement("r1", "h", [("Bob", 10), (" Alice ", -10), ("", 0)])
    repository.record_settlement("r2", "h", [("Alice", 5), ("Carol", -5)])

    assert repository.list_known_players() == ["Alice", "Bob", "Carol"]


def test_remove_known_player(repository) -> None:
    repository.record_settlement("r1", "h", [("Alice", 0)])

    assert repository.remove_known_player("Alice") is True
    assert repository.remove_known_player("Alice") is False
    assert repository.list_known_players() == []


def test_game_log_per_room_is_replaced(repository) -> None:
    repository.record_settlement("r1", "host", [("A", 100), ("B", -100)])

    second = repository.record_settlement("r1", "host", [("A", 50), ("B", -50)])

    logs = repository.list_game_logs()
    assert [log.id for log in logs] == [second.id]
    assert logs[0].players == [{"name": "A", "net": 50}, {"name": "B", "net": -50}]
    assert [log.id for log in repository.pending_uploads()] == [second.id]


def test_failed_settlement_write_leaves_nothing_behind(repository, monkeypatch) -> None:
    def broken_queue(**_kwargs):
        raise RuntimeError("queue unavailable")

    monkeypatch.setattr(repository_module, "PendingUpload", broken_queue)

    with pytest.raises(RuntimeError):
        repository.record_settlement("r1", "host", [("A", 100), ("B", -100)])

    monkeypatch.undo()
    assert repository.list_game_logs() == []
    assert repository.list_known_players() == []
    assert repository.pending_uploads() == []


def test_logs_listed_newest_first(repository) -> None:
    repository.record_settlement("old", "h", [("A", 0)], created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    repository.record_settlement("new", "h", [("A", 0)], created_at=datetime(2024, 6, 1, tzinfo=timezone.utc))

    logs = repository.list_game_logs()

    assert [log.room_id for log in logs] == ["new", "old"]
    assert logs[0].to_dict()["createdAt"].startswith("2024-06-01T00:00:00")


def test_clear_game_logs(repository) -> None:
    repository.record_settlement("r1", "h", [("A", 0)])

    assert repository.clear_game_logs() == 1
    assert repository.list_game_logs() == []
    assert repository.pending_uploads() == []


def test_mark_uploaded_only_affects_that_log(repository) -> None:
    first = repository.record_settlement("r1", "h", [("A", 0)])
    repository.record_settlement("r2", "h", [("A", 0)])

    repository.mark_uploaded(first.id)

    assert [log.room_id for log in repository.pending_uploads()] == ["r2"]
