from enum import Enum

from pydantic import BaseModel


class SessionStatus(str, Enum):
    pending_pickup = "pending_pickup"  # created by the main bot
    in_progress = "in_progress"  # claimed by exactly one helper
    completed_bust = "completed_bust"
    completed_win = "completed_win"
    completed_loss_no_tier = "completed_loss_no_tier"
    completed_error = "completed_error"


class OutcomeKind(str, Enum):
    bust = "bust"
    win = "win"
    loss_no_tier = "loss_no_tier"


OUTCOME_STATUS = {
    OutcomeKind.bust: SessionStatus.completed_bust,
    OutcomeKind.win: SessionStatus.completed_win,
    OutcomeKind.loss_no_tier: SessionStatus.completed_loss_no_tier,
}


class PayoutTierModel(BaseModel):
    min_sum: int
    max_sum: int
    multiplier: int | float
    label: str

    class Config:
        frozen = True

    def contains(self, total: int) -> bool:
        return self.min_sum <= total <= self.max_sum


class RollOutcomeModel(BaseModel):
    rolls: list[int]
    total: int
    is_bust: bool
    kind: OutcomeKind
    tier: PayoutTierModel | None = None

    class Config:
        frozen = True

    @property
    def status(self) -> SessionStatus:
        return OUTCOME_STATUS[self.kind]

    @property
    def multiplier(self) -> int | float | None:
        return self.tier.multiplier if self.tier is not None else None

    def to_game_state(self) -> dict:
        """Fields merged into the session's game_state_json."""
        state = {
            "rolls": list(self.rolls),
            "sum": self.total,
            "isBust": self.is_bust,
            "outcome": self.kind.value,
        }
        if self.tier is not None:
            state["payoutMultiplier"] = self.tier.multiplier
            state["tierLabel"] = self.tier.label
        return state
