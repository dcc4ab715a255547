from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable
from urllib import error, request
from urllib.parse import quote

from poker_ledger.storage.repository import GameLogRow

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.liveblocks.io/v2"
DEFAULT_ROOM_TITLE = "New Poker Game"
CREATE_INTENT = "create"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class RoomDirectoryConfigError(ValueError):
    """Raised when the realtime provider is not configured."""


class RoomDirectoryProviderError(RuntimeError):
    """Raised when the realtime provider returns an error."""

    def __init__(self, message: str, *, status_code: int, retryable: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class RoomDirectoryClient:
    """Lists, creates and deletes rooms on the realtime storage provider and publishes results to them."""

    def __init__(
        self,
        *,
        secret_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        opener: Callable[..., Any] | None = None,
    ) -> None:
        self.secret_key = secret_key if secret_key is not None else os.getenv("REALTIME_SECRET_KEY")
        self.base_url = (base_url or os.getenv("REALTIME_API_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.timeout = timeout if timeout is not None else float(os.getenv("REALTIME_TIMEOUT_SECONDS", "30"))
        self._opener = opener or request.urlopen

    def list_rooms(self) -> list[dict[str, Any]]:
        _, payload = self._request("GET", "/rooms")
        rooms = [_room_summary(room) for room in (payload or {}).get("data", [])]
        rooms.sort(key=lambda room: _parse_timestamp(room["lastConnectionAt"]), reverse=True)
        return rooms

    def create_or_update_room(self, room_id: str, *, title: str | None = None, intent: str | None = None) -> None:
        if intent == CREATE_INTENT:
            status, _ = self._request(
                "POST",
                "/rooms",
                {
                    "id": room_id,
                    "defaultAccesses": ["room:write"],
                    "metadata": {"title": title or DEFAULT_ROOM_TITLE},
                },
                tolerated_statuses=frozenset({409}),
            )
            if status != 409:
                logger.info("Created room %s", room_id)
                return
            logger.info("Room %s already exists, updating metadata", room_id)

        if title:
            self._request("POST", f"/rooms/{quote(room_id, safe='')}/metadata", {"title": title})

    def publish_game_log(self, game_log: GameLogRow) -> None:
        """Attach a finalized result to the room's metadata on the provider."""
        metadata = {
            "settledAt": game_log.created_at,
            "settledBy": game_log.host_name,
            "results": [f"{entry['name']}:{entry['net']}" for entry in game_log.players],
        }
        self._request("POST", f"/rooms/{quote(game_log.room_id, safe='')}/metadata", metadata)
        logger.info("Published game log %s to room %s", game_log.id, game_log.room_id)

    def delete_room(self, room_id: str) -> None:
        self._request("DELETE", f"/rooms/{quote(room_id, safe='')}")
        logger.info("Deleted room %s", room_id)

    def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        *,
        tolerated_statuses: frozenset[int] = frozenset(),
    ) -> tuple[int, Any]:
        if not self.secret_key:
            raise RoomDirectoryConfigError("REALTIME_SECRET_KEY is not configured")

        headers = {"Authorization": f"Bearer {self.secret_key}"}
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = request.Request(f"{self.base_url}{path}", data=data, method=method, headers=headers)
        try:
            with self._opener(req, timeout=self.timeout) as response:
                raw = response.read()
                status = getattr(response, "status", 200)
        except error.HTTPError as exc:
            if exc.code in tolerated_statuses:
                return exc.code, None
            _handle_http_error(exc)
        except error.URLError as exc:
            raise RoomDirectoryProviderError(
                f"Realtime provider unavailable: {exc.reason}", status_code=503, retryable=True
            ) from exc

        if not raw:
            return status, None
        return status, json.loads(raw.decode("utf-8"))


def _room_summary(room: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": room.get("id"),
        "createdAt": room.get("createdAt"),
        "lastConnectionAt": room.get("lastConnectionAt"),
        "metadata": room.get("metadata") or {},
    }


def _parse_timestamp(value: str | None) -> datetime:
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _handle_http_error(exc: error.HTTPError) -> None:
    raw_body = exc.read().decode("utf-8", errors="ignore")
    message = _extract_error_message(raw_body) or f"Realtime provider request failed: {exc.code}"
    logger.warning("Realtime provider returned %s: %s", exc.code, message)

    if exc.code == 429 or exc.code >= 500:
        raise RoomDirectoryProviderError(message, status_code=exc.code, retryable=True) from exc
    raise RoomDirectoryProviderError(message, status_code=exc.code) from exc


def _extract_error_message(raw_body: str) -> str | None:
    try:
        parsed = json.loads(raw_body)
    except json.JSONDecodeError:
        return raw_body or None

    if isinstance(parsed, dict):
        for key in ("message", "error"):
            value = parsed.get(key)
            if isinstance(value, str):
                return value
    return None
