import threading

import pytest

from poker_ledger.domain import RoomMutation, RoomMutationType
from poker_ledger.services.room_store import RoomNotFoundError, RoomStore


def test_first_mutation_creates_room_with_defaults() -> None:
    store = RoomStore()
    assert store.get("r1") is None

    state = store.apply("r1", RoomMutation(RoomMutationType.ADD_PLAYER, name="Alice"))

    assert store.get("r1") is state
    assert state.settings.chip_per_buy_in == 1000
    assert store.room_ids() == ["r1"]


def test_delete_room() -> None:
    store = RoomStore()
    store.apply("r1", RoomMutation(RoomMutationType.LOCK))

    assert store.delete("r1") is True
    assert store.delete("r1") is False
    assert store.get("r1") is None


def test_concurrent_writers_do_not_lose_mutations() -> None:
    store = RoomStore()
    names = [f"player-{idx}" for idx in range(50)]

    threads = [
        threading.Thread(
            target=store.apply,
            args=("r1", RoomMutation(RoomMutationType.ADD_PLAYER, name=name)),
        )
        for name in names
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(player.name for player in store.get("r1").players) == sorted(names)


def test_apply_without_create_requires_existing_room() -> None:
    store = RoomStore()

    with pytest.raises(RoomNotFoundError):
        store.apply("r1", RoomMutation(RoomMutationType.LOCK), create=False)
    assert store.get("r1") is None

    store.apply("r1", RoomMutation(RoomMutationType.ADD_PLAYER, name="Alice"))
    state = store.apply("r1", RoomMutation(RoomMutationType.LOCK), create=False)
    assert state.settings.is_locked is True
