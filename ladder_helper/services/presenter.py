"""Renders Greed's Ladder messages and delivers them best-effort.

The persisted session is authoritative; chat delivery failures are logged
and never interrupt resolution.
"""

import asyncio
import html
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, Sequence

from ladder_helper.domain.ladder_rules import LADDER_BUST_ON, LADDER_ROLL_COUNT
from ladder_helper.models.dc_models import OutcomeKind, RollOutcomeModel
from ladder_helper.models.schema_models import LadderSessionSchema

LAMPORTS_PER_SOL = Decimal(10) ** 9
BET_PRECISION = Decimal("0.0001")
DICE_EMOJI = "🎲"


class MessageTransport(Protocol):
    async def send_message(self, chat_id: int, text: str) -> int | None: ...

    async def edit_message(self, chat_id: int, message_id: int, text: str) -> None: ...


def escape_html(text) -> str:
    if text is None:
        return ""
    return html.escape(str(text), quote=True)


def format_bet(bet_amount_lamports: int) -> str:
    sol = (Decimal(int(bet_amount_lamports)) / LAMPORTS_PER_SOL).quantize(
        BET_PRECISION, rounding=ROUND_HALF_UP
    )
    return f"{sol} SOL"


def format_dice_rolls(rolls: Sequence[int], dice_emoji: str = DICE_EMOJI) -> str:
    return "  ".join(f"{dice_emoji} {roll}" for roll in rolls)


def render_announcement(session: LadderSessionSchema) -> str:
    player = escape_html(session.player_name)
    return (
        f"🪜 <b>Greed's Ladder</b> for {player}!\n\n"
        f"Wager: <b>{format_bet(session.bet_amount_lamports)}</b>\n"
        f"Rolling {LADDER_ROLL_COUNT} dice..."
    )


def render_result(session: LadderSessionSchema, outcome: RollOutcomeModel) -> str:
    if outcome.kind == OutcomeKind.bust:
        result_text = (
            f"💥 <b>CRASH! A {LADDER_BUST_ON} appeared!</b> 💥\n"
            "You tumbled off Greed's Ladder! Wager lost."
        )
    elif outcome.kind == OutcomeKind.win:
        result_text = (
            f"🎉 <b>{escape_html(outcome.tier.label)}</b> 🎉\n"
            "Your payout will be processed by the main bot."
        )
    else:
        result_text = (
            f"😐 A cautious climb, but your sum of <b>{outcome.total}</b> "
            "was not high enough for a prize."
        )

    return (
        "🏁 <b>Greed's Ladder Result</b> 🏁\n\n"
        f"Player: {escape_html(session.player_name)}\n"
        f"Rolls: {format_dice_rolls(outcome.rolls)}\n"
        f"Sum: <b>{outcome.total}</b>\n\n"
        f"{result_text}"
    )


class ResultPresenter:
    def __init__(self, transport: MessageTransport, pacing_delay_sec: float = 2.0):
        self.transport: MessageTransport = transport
        self.pacing_delay_sec: float = pacing_delay_sec

    async def safe_send(self, chat_id: int, text: str) -> int | None:
        try:
            return await self.transport.send_message(chat_id, text)
        except Exception as e:
            logging.error(f"[Ladder] Failed to send message to {chat_id}: {e}")
            return None

    async def announce(self, session: LadderSessionSchema) -> int | None:
        """Send the pre-roll message.

        Returns:
            int | None: Handle of the announcement, None if it was not delivered
        """
        return await self.safe_send(session.chat_id, render_announcement(session))

    async def pause(self):
        await asyncio.sleep(self.pacing_delay_sec)

    async def show_result(
        self,
        session: LadderSessionSchema,
        outcome: RollOutcomeModel,
        announcement_id: int | None,
    ) -> int | None:
        """Edit the announcement into the result, or send the result anew.

        Returns:
            int | None: Handle of the message now showing the result
        """
        text = render_result(session, outcome)
        if announcement_id is not None:
            try:
                await self.transport.edit_message(session.chat_id, announcement_id, text)
                return announcement_id
            except Exception as e:
                logging.warning(
                    f"[Ladder SID:{session.session_id}] Edit failed, sending new message: {e}"
                )
        return await self.safe_send(session.chat_id, text)
