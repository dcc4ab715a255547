import pytest

fastapi = pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from poker_ledger.main import app

PAYLOAD = {
    "players": [
        {"id": "a", "name": "A", "buyInCount": 1, "finalChips": 1500},
        {"id": "b", "name": "B", "buyInCount": 1, "finalChips": 500},
    ],
    "settings": {"chipPerBuyIn": 1000, "cashPerBuyIn": 500},
}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_settlement_contract(client: TestClient) -> None:
    response = client.post("/settlement", json=PAYLOAD)

    assert response.status_code == 200
    assert response.json() == {
        "players": [
            {"id": "a", "name": "A", "buyInCount": 1.0, "finalChips": 1500.0, "netAmount": 250},
            {"id": "b", "name": "B", "buyInCount": 1.0, "finalChips": 500.0, "netAmount": -250},
        ],
        "transfers": [{"fromName": "B", "toName": "A", "amount": 250}],
        "totalBalance": 0,
        "isBalanced": True,
    }


def test_zero_chip_rate_is_not_configured(client: TestClient) -> None:
    payload = {**PAYLOAD, "settings": {"chipPerBuyIn": 0, "cashPerBuyIn": 500}}

    response = client.post("/settlement", json=payload)

    assert response.status_code == 200
    assert response.json() == {"players": [], "transfers": [], "totalBalance": 0, "isBalanced": False}


def test_negative_chip_counts_rejected(client: TestClient) -> None:
    payload = {**PAYLOAD, "players": [{"id": "a", "name": "A", "buyInCount": 1, "finalChips": -5}]}

    assert client.post("/settlement", json=payload).status_code == 422


def test_csv_export(client: TestClient) -> None:
    response = client.post("/settlement/export/csv", json=PAYLOAD)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.splitlines()[:3] == [
        "Player,Buy-ins,Final Chips,Net Profit/Loss",
        "A,1,1500,250",
        "B,1,500,-250",
    ]


@pytest.mark.parametrize("fmt, media_type", [("html", "text/html"), ("text", "text/plain")])
def test_other_exports(client: TestClient, fmt: str, media_type: str) -> None:
    response = client.post(f"/settlement/export/{fmt}", json=PAYLOAD)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(media_type)
    assert "1 Buy-in = $500 (1000 Chips)" in response.text


def test_unknown_export_format(client: TestClient) -> None:
    response = client.post("/settlement/export/pdf", json=PAYLOAD)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "unsupported_format"
