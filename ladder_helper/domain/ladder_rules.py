"""Greed's Ladder rules, independent from the store and the chat transport.

Five dice are thrown at once. Any die showing the bust value loses the
wager regardless of the sum; otherwise the sum is looked up in the payout
table. Sums below the first tier simply win nothing.
"""

from typing import Sequence

import numpy as np

from ladder_helper.models.dc_models import OutcomeKind, PayoutTierModel, RollOutcomeModel

LADDER_ROLL_COUNT = 5
LADDER_DIE_SIDES = 6
LADDER_BUST_ON = 1


def build_payout_table(entries: Sequence[dict]) -> tuple[PayoutTierModel, ...]:
    """Validate and freeze a payout table.

    Args:
        entries (Sequence[dict]): min_sum, max_sum, multiplier and label per tier

    Raises:
        ValueError: A tier is malformed, out of order or overlaps its neighbour

    Returns:
        tuple[PayoutTierModel, ...]: Tiers sorted by range
    """
    tiers = sorted(
        (PayoutTierModel.model_validate(entry) for entry in entries),
        key=lambda tier: tier.min_sum,
    )
    for tier in tiers:
        if tier.min_sum > tier.max_sum:
            raise ValueError(f"Tier '{tier.label}' has min_sum > max_sum")
        if tier.multiplier <= 0:
            raise ValueError(f"Tier '{tier.label}' must have a positive multiplier")
        if not tier.label.strip():
            raise ValueError("Tier label must not be empty")
    for lower, upper in zip(tiers, tiers[1:]):
        if upper.min_sum <= lower.max_sum:
            raise ValueError(f"Tiers '{lower.label}' and '{upper.label}' overlap")
    return tuple(tiers)


LADDER_PAYOUTS = build_payout_table(
    [
        {"min_sum": 10, "max_sum": 14, "multiplier": 1, "label": "Nice Climb!"},
        {"min_sum": 15, "max_sum": 19, "multiplier": 2, "label": "High Rungs!"},
        {"min_sum": 20, "max_sum": 24, "multiplier": 5, "label": "Peak Performer!"},
        {"min_sum": 25, "max_sum": 29, "multiplier": 10, "label": "Sky High Roller!"},
        {"min_sum": 30, "max_sum": 30, "multiplier": 25, "label": "Ladder Legend!"},
    ]
)


def roll_dice(
    rng: np.random.Generator,
    count: int = LADDER_ROLL_COUNT,
    sides: int = LADDER_DIE_SIDES,
) -> list[int]:
    """Draw every die, even after a bust value shows up."""
    rolls = rng.integers(1, sides + 1, size=count)
    return [int(roll) for roll in rolls]


def find_tier(total: int, tiers: Sequence[PayoutTierModel]) -> PayoutTierModel | None:
    for tier in tiers:
        if tier.contains(total):
            return tier
    return None


def classify_rolls(
    rolls: Sequence[int],
    tiers: Sequence[PayoutTierModel] = LADDER_PAYOUTS,
    bust_on: int = LADDER_BUST_ON,
) -> RollOutcomeModel:
    """Classify a finished throw into bust, win or loss_no_tier.

    Args:
        rolls (Sequence[int]): Die values in throw order
        tiers (Sequence[PayoutTierModel]): Validated payout table
        bust_on (int): Die value that busts the whole throw

    Returns:
        RollOutcomeModel: Rolls, their sum and the matched tier if any
    """
    rolls = [int(roll) for roll in rolls]
    total = sum(rolls)
    is_bust = bust_on in rolls

    if is_bust:
        return RollOutcomeModel(rolls=rolls, total=total, is_bust=True, kind=OutcomeKind.bust)

    tier = find_tier(total, tiers)
    if tier is None:
        return RollOutcomeModel(
            rolls=rolls, total=total, is_bust=False, kind=OutcomeKind.loss_no_tier
        )
    return RollOutcomeModel(
        rolls=rolls, total=total, is_bust=False, kind=OutcomeKind.win, tier=tier
    )


def resolve_game(
    rng: np.random.Generator,
    tiers: Sequence[PayoutTierModel] = LADDER_PAYOUTS,
) -> RollOutcomeModel:
    return classify_rolls(roll_dice(rng), tiers)
