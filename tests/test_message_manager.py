import pytest
from telegram.constants import ParseMode
from telegram.error import BadRequest, NetworkError

from ladder_helper.exceptions import DeliveryError
from ladder_helper.message_manager import TelegramMessageManager


class FakeMessage:
    def __init__(self, message_id):
        self.message_id = message_id


class FakeBot:
    def __init__(self, send_error=None, edit_error=None):
        self.send_error = send_error
        self.edit_error = edit_error
        self.calls = []

    async def send_message(self, chat_id, text, parse_mode):
        self.calls.append(("send", chat_id, text, parse_mode))
        if self.send_error is not None:
            raise self.send_error
        return FakeMessage(501)

    async def edit_message_text(self, text, chat_id, message_id, parse_mode):
        self.calls.append(("edit", chat_id, message_id, text, parse_mode))
        if self.edit_error is not None:
            raise self.edit_error


async def test_send_uses_html_and_returns_message_id():
    bot = FakeBot()
    manager = TelegramMessageManager(bot)

    assert await manager.send_message(-100, "<b>hi</b>") == 501
    assert bot.calls == [("send", -100, "<b>hi</b>", ParseMode.HTML)]


async def test_send_failure_becomes_delivery_error():
    manager = TelegramMessageManager(FakeBot(send_error=NetworkError("timed out")))
    with pytest.raises(DeliveryError):
        await manager.send_message(-100, "hi")


async def test_edit_failure_becomes_delivery_error():
    bot = FakeBot(edit_error=BadRequest("Message to edit not found"))
    manager = TelegramMessageManager(bot)

    with pytest.raises(DeliveryError):
        await manager.edit_message(-100, 7, "result")
    assert bot.calls[0][:3] == ("edit", -100, 7)
