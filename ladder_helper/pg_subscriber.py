import asyncio
import logging

import asyncpg

from ladder_helper.dispatcher import TaskDispatcher
from ladder_helper.notifications import parse_pickup_payload


class PgSubscriber:
    """LISTEN on a Postgres channel and dispatch one game per notification."""

    def __init__(self, dispatcher: TaskDispatcher, channel: str):
        self.dispatcher: TaskDispatcher = dispatcher
        self.channel: str = channel
        self.connection: asyncpg.Connection | None = None
        self._lost = asyncio.Event()

    def on_notification(self, connection, pid: int, channel: str, payload: str):
        """asyncpg listener callback; runs on the event loop and must not block."""
        if channel != self.channel:
            return
        main_bot_game_id = parse_pickup_payload(payload)
        if main_bot_game_id is None:
            return
        logging.info(f"[Ladder] Received pickup notification for {main_bot_game_id}")
        self.dispatcher.dispatch(main_bot_game_id)

    def on_termination(self, connection):
        logging.error("[Ladder] Postgres listen connection was closed")
        self._lost.set()

    async def subscribe(self, dsn: str, **connect_kwargs):
        """Open the dedicated listen connection. Raises if it cannot be established."""
        self.connection = await asyncpg.connect(dsn, **connect_kwargs)
        self.connection.add_termination_listener(self.on_termination)
        await self.connection.add_listener(self.channel, self.on_notification)
        logging.info(f"[Ladder] Listening on Postgres channel '{self.channel}'")

    async def wait_closed(self):
        """Block until the listen connection drops.

        Raises:
            ConnectionError: The subscription was lost
        """
        await self._lost.wait()
        raise ConnectionError(f"Lost subscription to '{self.channel}'")

    async def close(self):
        if self.connection is None or self.connection.is_closed():
            return
        try:
            await self.connection.remove_listener(self.channel, self.on_notification)
        finally:
            await self.connection.close()
