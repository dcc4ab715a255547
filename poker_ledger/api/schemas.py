from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from poker_ledger.domain import EngineSettings, Player, RoomSettings, SettlementResult
from poker_ledger.services.report_formatter import ReportSummary


class PlayerSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    buy_in_count: float = Field(default=1, ge=0, alias="buyInCount")
    final_chips: float = Field(default=0, ge=0, alias="finalChips")
    net_amount: int | None = Field(default=None, alias="netAmount")

    def to_domain(self) -> Player:
        return Player(
            id=self.id,
            name=self.name,
            buy_in_count=self.buy_in_count,
            final_chips=self.final_chips,
        )

    @classmethod
    def from_domain(cls, player: Player) -> "PlayerSchema":
        return cls(
            id=player.id,
            name=player.name,
            buy_in_count=player.buy_in_count,
            final_chips=player.final_chips,
            net_amount=player.net_amount,
        )


class EngineSettingsSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chip_per_buy_in: float = Field(..., ge=0, alias="chipPerBuyIn", examples=[1000])
    cash_per_buy_in: float = Field(..., ge=0, alias="cashPerBuyIn", examples=[500])

    def to_domain(self) -> EngineSettings:
        return EngineSettings(chip_per_buy_in=self.chip_per_buy_in, cash_per_buy_in=self.cash_per_buy_in)


class RoomSettingsSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chip_per_buy_in: float = Field(alias="chipPerBuyIn")
    cash_per_buy_in: float = Field(alias="cashPerBuyIn")
    is_locked: bool = Field(alias="isLocked")
    show_settlement: bool = Field(alias="showSettlement")
    title: str | None = None

    @classmethod
    def from_domain(cls, settings: RoomSettings) -> "RoomSettingsSchema":
        return cls(
            chip_per_buy_in=settings.chip_per_buy_in,
            cash_per_buy_in=settings.cash_per_buy_in,
            is_locked=settings.is_locked,
            show_settlement=settings.show_settlement,
            title=settings.title,
        )


class TransferSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_name: str = Field(alias="fromName")
    to_name: str = Field(alias="toName")
    amount: int


class SettlementRequest(BaseModel):
    players: list[PlayerSchema] = Field(default_factory=list)
    settings: EngineSettingsSchema

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "players": [
                        {"id": "a", "name": "Alice", "buyInCount": 1, "finalChips": 1500},
                        {"id": "b", "name": "Bob", "buyInCount": 1, "finalChips": 500},
                    ],
                    "settings": {"chipPerBuyIn": 1000, "cashPerBuyIn": 500},
                }
            ]
        }
    }


class SettlementResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    players: list[PlayerSchema]
    transfers: list[TransferSchema]
    total_balance: int | float = Field(alias="totalBalance")
    is_balanced: bool = Field(alias="isBalanced")

    @classmethod
    def from_domain(cls, result: SettlementResult) -> "SettlementResponse":
        return cls(
            players=[PlayerSchema.from_domain(player) for player in result.players],
            transfers=[
                TransferSchema(from_name=t.from_name, to_name=t.to_name, amount=t.amount)
                for t in result.transfers
            ],
            total_balance=result.total_balance,
            is_balanced=result.is_balanced,
        )


class AddPlayerRequest(BaseModel):
    name: str = Field(..., min_length=1, examples=["Alice"])


class UpdatePlayerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    buy_in_count: float | None = Field(default=None, alias="buyInCount")
    final_chips: float | None = Field(default=None, alias="finalChips")


class UpdateSettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chip_per_buy_in: float | None = Field(default=None, ge=0, alias="chipPerBuyIn")
    cash_per_buy_in: float | None = Field(default=None, ge=0, alias="cashPerBuyIn")
    show_settlement: bool | None = Field(default=None, alias="showSettlement")
    title: str | None = None


class ImportPlayersRequest(BaseModel):
    text: str = Field(..., description="One player per line: name [buy-ins [chips]]")


class LockRoomRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    host_name: str = Field(default="", alias="hostName")


class RoomResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    players: list[PlayerSchema]
    settings: RoomSettingsSchema
    result: SettlementResponse
    game_log_id: int | None = Field(default=None, alias="gameLogId")


class RoomDirectoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str | None = Field(default=None, alias="roomId")
    title: str | None = None
    intent: str | None = Field(default=None, examples=["create"])


class ShareTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    token: str


class RestoreRoomRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ReportSummarySchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_buy_ins: float = Field(alias="totalBuyIns")
    total_chips: float = Field(alias="totalChips")
    top_winner: PlayerSchema | None = Field(default=None, alias="topWinner")
    top_loser: PlayerSchema | None = Field(default=None, alias="topLoser")

    @classmethod
    def from_domain(cls, summary: ReportSummary) -> "ReportSummarySchema":
        return cls(
            total_buy_ins=summary.total_buy_ins,
            total_chips=summary.total_chips,
            top_winner=PlayerSchema.from_domain(summary.top_winner) if summary.top_winner else None,
            top_loser=PlayerSchema.from_domain(summary.top_loser) if summary.top_loser else None,
        )


class UploadFlushResponse(BaseModel):
    uploaded: int
    pending: int
