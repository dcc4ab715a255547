from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status

from poker_ledger.api.errors import api_error, room_not_found, rule_violation
from poker_ledger.api.schemas import (
    AddPlayerRequest,
    ImportPlayersRequest,
    LockRoomRequest,
    PlayerSchema,
    ReportSummarySchema,
    RestoreRoomRequest,
    RoomResponse,
    RoomSettingsSchema,
    SettlementResponse,
    ShareTokenResponse,
    UpdatePlayerRequest,
    UpdateSettingsRequest,
)
from poker_ledger.api.settlement import report_response
from poker_ledger.domain import (
    DomainValidationError,
    RoomMutation,
    RoomMutationType,
    RoomState,
    SettlementResult,
    calculate_settlement,
    parse_import_text,
    to_snapshot,
)
from poker_ledger.runtime import get_ledger_service
from poker_ledger.services.ledger_service import LedgerService
from poker_ledger.services.report_formatter import summarize_report
from poker_ledger.services.room_store import RoomNotFoundError
from poker_ledger.services.state_codec import deserialize_state, serialize_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _room_response(
    room_id: str,
    state: RoomState,
    result: SettlementResult | None = None,
    game_log_id: int | None = None,
) -> RoomResponse:
    if result is None:
        players, settings = to_snapshot(state)
        result = calculate_settlement(players, settings)
    return RoomResponse(
        room_id=room_id,
        players=[PlayerSchema.from_domain(player) for player in state.players],
        settings=RoomSettingsSchema.from_domain(state.settings),
        result=SettlementResponse.from_domain(result),
        game_log_id=game_log_id,
    )


def _mutate(
    service: LedgerService,
    room_id: str,
    mutation: RoomMutation,
    *,
    create: bool = True,
) -> RoomResponse:
    try:
        state = service.store.apply(room_id, mutation, create=create)
    except RoomNotFoundError as exc:
        raise room_not_found(room_id) from exc
    except DomainValidationError as exc:
        raise rule_violation(exc, room_id=room_id) from exc
    return _room_response(room_id, state)


def _current(service: LedgerService, room_id: str) -> tuple[RoomState, SettlementResult]:
    try:
        return service.current_result(room_id)
    except RoomNotFoundError as exc:
        raise room_not_found(room_id) from exc


@router.get("/{room_id}", response_model=RoomResponse, summary="Current room snapshot and settlement")
def get_room(room_id: str, service: LedgerService = Depends(get_ledger_service)) -> RoomResponse:
    state, result = _current(service, room_id)
    return _room_response(room_id, state, result)


@router.post(
    "/{room_id}/players",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a player to the room",
)
def add_player(
    room_id: str,
    payload: AddPlayerRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> RoomResponse:
    return _mutate(service, room_id, RoomMutation(RoomMutationType.ADD_PLAYER, name=payload.name))


@router.patch("/{room_id}/players/{player_id}", response_model=RoomResponse, summary="Edit a player")
def update_player(
    room_id: str,
    player_id: str,
    payload: UpdatePlayerRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> RoomResponse:
    changes = payload.model_dump(exclude_none=True)
    return _mutate(
        service,
        room_id,
        RoomMutation(RoomMutationType.UPDATE_PLAYER, player_id=player_id, changes=changes),
        create=False,
    )


@router.delete("/{room_id}/players/{player_id}", response_model=RoomResponse, summary="Remove a player")
def remove_player(
    room_id: str,
    player_id: str,
    service: LedgerService = Depends(get_ledger_service),
) -> RoomResponse:
    return _mutate(
        service,
        room_id,
        RoomMutation(RoomMutationType.REMOVE_PLAYER, player_id=player_id),
        create=False,
    )


@router.patch("/{room_id}/settings", response_model=RoomResponse, summary="Edit exchange settings")
def update_settings(
    room_id: str,
    payload: UpdateSettingsRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> RoomResponse:
    changes = payload.model_dump(exclude_none=True)
    return _mutate(service, room_id, RoomMutation(RoomMutationType.UPDATE_SETTINGS, changes=changes))


@router.post("/{room_id}/import", response_model=RoomResponse, summary="Bulk import players from text")
def import_players(
    room_id: str,
    payload: ImportPlayersRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> RoomResponse:
    players = tuple(parse_import_text(payload.text))
    return _mutate(service, room_id, RoomMutation(RoomMutationType.IMPORT_PLAYERS, players=players))


@router.get("/{room_id}/share", response_model=ShareTokenResponse, summary="Share token for the room snapshot")
def share_room(room_id: str, service: LedgerService = Depends(get_ledger_service)) -> ShareTokenResponse:
    state, _ = _current(service, room_id)
    return ShareTokenResponse(room_id=room_id, token=serialize_state(state.players, state.settings))


@router.post("/{room_id}/share", response_model=RoomResponse, summary="Load a shared snapshot into the room")
def restore_room(
    room_id: str,
    payload: RestoreRoomRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> RoomResponse:
    decoded = deserialize_state(payload.token)
    if decoded is None:
        raise api_error(
            code="invalid_share_token",
            message="Share token could not be decoded",
            details={"roomId": room_id},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    players, settings = decoded
    mutation = RoomMutation(RoomMutationType.RESTORE, players=tuple(players), settings=settings)
    response = _mutate(service, room_id, mutation)
    logger.info("room %s restored from share token (%s players)", room_id, len(response.players))
    return response


@router.get("/{room_id}/summary", response_model=ReportSummarySchema, summary="Totals and biggest winner/loser")
def room_summary(room_id: str, service: LedgerService = Depends(get_ledger_service)) -> ReportSummarySchema:
    _, result = _current(service, room_id)
    return ReportSummarySchema.from_domain(summarize_report(result))


@router.post("/{room_id}/lock", response_model=RoomResponse, summary="Lock the room and settle")
def lock_room(
    room_id: str,
    payload: LockRoomRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> RoomResponse:
    try:
        outcome = service.settle_room(room_id, payload.host_name)
    except RoomNotFoundError as exc:
        raise room_not_found(room_id) from exc
    except DomainValidationError as exc:
        raise rule_violation(exc, room_id=room_id) from exc

    game_log_id = outcome.game_log.id if outcome.game_log else None
    return _room_response(room_id, outcome.state, outcome.result, game_log_id)


@router.post("/{room_id}/unlock", response_model=RoomResponse, summary="Unlock the room for edits")
def unlock_room(room_id: str, service: LedgerService = Depends(get_ledger_service)) -> RoomResponse:
    return _mutate(service, room_id, RoomMutation(RoomMutationType.UNLOCK), create=False)


@router.get("/{room_id}/export/{fmt}", summary="Export the room settlement")
def export_room(
    room_id: str,
    fmt: str,
    service: LedgerService = Depends(get_ledger_service),
) -> Response:
    state, result = _current(service, room_id)
    return report_response(result, state.settings, fmt)
