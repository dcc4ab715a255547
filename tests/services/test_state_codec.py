import base64
import json

from poker_ledger.domain import Player, RoomSettings
from poker_ledger.services.state_codec import deserialize_state, serialize_state


def test_token_restores_players_and_settings() -> None:
    players = [
        Player(id="1", name="王小明", buy_in_count=2, final_chips=2500),
        Player(id="2", name="Zoë (50% off)", buy_in_count=1, final_chips=0),
    ]
    settings = RoomSettings(chip_per_buy_in=1000, cash_per_buy_in=500, is_locked=True, title="Friday")

    token = serialize_state(players, settings)

    assert token.isascii()
    assert deserialize_state(token) == (players, settings)


def test_legacy_plain_json_tokens_still_decode() -> None:
    legacy = json.dumps(
        {
            "p": [{"id": "1", "name": "Alice", "buyInCount": 1, "finalChips": 1500}],
            "s": {"chipPerBuyIn": 1000, "cashPerBuyIn": 500},
        }
    )
    token = base64.b64encode(legacy.encode("latin-1")).decode("ascii")

    players, settings = deserialize_state(token)

    assert players == [Player(id="1", name="Alice", buy_in_count=1, final_chips=1500)]
    assert settings == RoomSettings(chip_per_buy_in=1000, cash_per_buy_in=500)


def test_garbage_token_returns_none() -> None:
    assert deserialize_state("not base64!!") is None
    assert deserialize_state(base64.b64encode(b"{broken").decode("ascii")) is None
    assert deserialize_state(base64.b64encode(b'{"p": 1}').decode("ascii")) is None
