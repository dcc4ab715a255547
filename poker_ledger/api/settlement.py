from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import Response

from poker_ledger.api.errors import api_error
from poker_ledger.api.schemas import SettlementRequest, SettlementResponse
from poker_ledger.domain import SettlementResult, calculate_settlement
from poker_ledger.domain.settlement import ExchangeSettings
from poker_ledger.services.report_formatter import render_report

router = APIRouter(prefix="/settlement", tags=["settlement"])

MEDIA_TYPES = {
    "csv": "text/csv",
    "html": "text/html",
    "text": "text/plain",
}


def report_response(result: SettlementResult, settings: ExchangeSettings, fmt: str) -> Response:
    if fmt not in MEDIA_TYPES:
        raise api_error(
            code="unsupported_format",
            message=f"Unsupported export format: {fmt}",
            details={"supported": sorted(MEDIA_TYPES)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return Response(
        content=render_report(result, settings, fmt),
        media_type=f"{MEDIA_TYPES[fmt]}; charset=utf-8",
    )


def _calculate(payload: SettlementRequest) -> tuple[SettlementResult, ExchangeSettings]:
    settings = payload.settings.to_domain()
    players = [player.to_domain() for player in payload.players]
    return calculate_settlement(players, settings), settings


@router.post(
    "",
    response_model=SettlementResponse,
    summary="Calculate net results and transfers for a player snapshot",
)
def settle(payload: SettlementRequest) -> SettlementResponse:
    result, _ = _calculate(payload)
    return SettlementResponse.from_domain(result)


@router.post(
    "/export/{fmt}",
    summary="Render the settlement as CSV, HTML or plain text",
)
def export(fmt: str, payload: SettlementRequest) -> Response:
    result, settings = _calculate(payload)
    return report_response(result, settings, fmt)
