from datetime import datetime

from pydantic import BaseModel


class LadderSessionSchema(BaseModel):
    session_id: int
    main_bot_game_id: str
    status: str
    helper_bot_id: str | None
    game_state_json: dict | None
    bet_amount_lamports: int
    chat_id: int
    initiator_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True

    @property
    def game_state(self) -> dict:
        return dict(self.game_state_json or {})

    @property
    def player_name(self) -> str:
        return self.game_state.get("initiatorName") or f"Player {self.initiator_id}"


class PickupNotificationSchema(BaseModel):
    main_bot_game_id: str


class StrandedSessionSchema(BaseModel):
    session_id: int
    main_bot_game_id: str
    status: str
    helper_bot_id: str | None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
