import logging

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import TelegramError

from ladder_helper.exceptions import DeliveryError


class TelegramMessageManager:
    """Sends and edits HTML chat messages through a Telegram bot."""

    def __init__(self, bot: Bot):
        self.bot: Bot = bot

    async def start(self) -> str:
        """Initialize the bot and return its username."""
        await self.bot.initialize()
        me = await self.bot.get_me()
        return me.username

    async def stop(self):
        await self.bot.shutdown()

    async def send_message(self, chat_id: int, text: str) -> int | None:
        """Send an HTML message

        Args:
            chat_id (int): Destination chat
            text (str): Already-escaped HTML

        Raises:
            DeliveryError: Telegram rejected the message

        Returns:
            int | None: message_id of the sent message
        """
        try:
            message = await self.bot.send_message(
                chat_id=chat_id, text=text, parse_mode=ParseMode.HTML
            )
        except TelegramError as e:
            raise DeliveryError(f"Failed to send message to {chat_id}: {e}") from e
        logging.debug(f"Sent message {message.message_id} to {chat_id}")
        return message.message_id

    async def edit_message(self, chat_id: int, message_id: int, text: str) -> None:
        """Replace the text of an earlier message

        Raises:
            DeliveryError: The message is gone, too old, or Telegram refused the edit
        """
        try:
            await self.bot.edit_message_text(
                text=text, chat_id=chat_id, message_id=message_id, parse_mode=ParseMode.HTML
            )
        except TelegramError as e:
            raise DeliveryError(f"Failed to edit message {message_id} in {chat_id}: {e}") from e
