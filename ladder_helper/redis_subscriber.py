import logging

from redis.asyncio import Redis

from ladder_helper.dispatcher import TaskDispatcher
from ladder_helper.notifications import parse_pickup_payload


class RedisSubscriber:
    """Redis pub/sub alternative to the Postgres LISTEN subscription.

    Payloads arrive as raw bytes; decoding is left to the payload parser so
    a message that is not valid UTF-8 is dropped like any other malformed one.
    """

    def __init__(self, dispatcher: TaskDispatcher, channel: str):
        self.dispatcher: TaskDispatcher = dispatcher
        self.channel: str = channel
        self.redis: Redis | None = None
        self.pubsub = None

    async def subscribe(self, redis: Redis):
        self.redis = redis
        self.pubsub = redis.pubsub()
        await self.pubsub.subscribe(self.channel)
        logging.info(f"[Ladder] Subscribed to Redis channel '{self.channel}'")

    def handle_message(self, msg: dict | None):
        if not msg or msg["type"] != "message":
            return
        main_bot_game_id = parse_pickup_payload(msg["data"])
        if main_bot_game_id is None:
            return
        logging.info(f"[Ladder] Received pickup notification for {main_bot_game_id}")
        self.dispatcher.dispatch(main_bot_game_id)

    async def wait_closed(self):
        """Read messages until the connection fails; the error propagates."""
        while True:
            msg = await self.pubsub.get_message(ignore_subscribe_messages=True, timeout=None)
            self.handle_message(msg)

    async def close(self):
        if self.pubsub is not None:
            logging.info("Unsubscribing from channel")
            try:
                await self.pubsub.unsubscribe(self.channel)
            finally:
                await self.pubsub.close()
        if self.redis is not None:
            await self.redis.aclose()
