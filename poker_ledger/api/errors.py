from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from poker_ledger.domain import DomainValidationError


def api_error(
    *,
    code: str,
    message: str,
    details: Any | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "code": code,
            "message": message,
            "details": details,
        },
    )


def room_not_found(room_id: str) -> HTTPException:
    return api_error(
        code="room_not_found",
        message=f"Room {room_id} not found",
        details={"roomId": room_id},
        status_code=status.HTTP_404_NOT_FOUND,
    )


def rule_violation(exc: DomainValidationError, *, room_id: str | None = None) -> HTTPException:
    return api_error(
        code="room_rule_violation",
        message=str(exc),
        details={"roomId": room_id} if room_id else None,
        status_code=status.HTTP_409_CONFLICT,
    )
