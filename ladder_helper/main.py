import asyncio
import logging
import signal
import sys

import numpy as np
import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from redis.asyncio import Redis
from telegram import Bot

from ladder_helper.create_postgres_engine import build_ssl_context, create_engine, to_asyncpg_dsn
from ladder_helper.db import create_session_factory
from ladder_helper.dispatcher import TaskDispatcher
from ladder_helper.load_secrets import WorkerSettings, read_settings
from ladder_helper.message_manager import TelegramMessageManager
from ladder_helper.pg_subscriber import PgSubscriber
from ladder_helper.redis_subscriber import RedisSubscriber
from ladder_helper.routers.ops import create_ops_app
from ladder_helper.services.game_runner import LadderGameRunner
from ladder_helper.services.pending_sweep import PendingSweep
from ladder_helper.services.presenter import ResultPresenter
from ladder_helper.services.session_db import SessionStore


async def open_subscription(settings: WorkerSettings, dispatcher: TaskDispatcher):
    """Subscribe to pickup notifications on the configured backend."""
    if settings.notify_backend == "redis":
        redis = Redis.from_url(settings.redis_url, health_check_interval=30)
        subscriber = RedisSubscriber(dispatcher, settings.notify_channel)
        try:
            await subscriber.subscribe(redis)
        except Exception:
            await redis.aclose()
            raise
        return subscriber

    subscriber = PgSubscriber(dispatcher, settings.notify_channel)
    connect_kwargs = {}
    ssl_context = build_ssl_context(settings)
    if ssl_context is not None:
        connect_kwargs["ssl"] = ssl_context
    await subscriber.subscribe(to_asyncpg_dsn(settings.database_url), **connect_kwargs)
    return subscriber


def build_ops_server(settings: WorkerSettings, ops_app) -> uvicorn.Server:
    """uvicorn server for the ops API, served as a task on the worker loop."""
    return uvicorn.Server(
        uvicorn.Config(
            ops_app,
            host=settings.ops_api_host,
            port=settings.ops_api_port,
            log_level=settings.log_level.lower(),
        )
    )


async def run_worker(settings: WorkerSettings):
    engine = create_engine(settings)
    Session = create_session_factory(engine)
    store = SessionStore(Session)
    messages = TelegramMessageManager(Bot(settings.bot_token))
    presenter = ResultPresenter(messages, settings.pacing_delay_sec)
    runner = LadderGameRunner(store, presenter, settings.worker_id, np.random.default_rng())
    dispatcher = TaskDispatcher(runner.handle_new_game_session)
    scheduler = AsyncIOScheduler()
    subscriber = None
    ops_server = None
    ops_task = None

    try:
        username = await messages.start()
        subscriber = await open_subscription(settings, dispatcher)

        if settings.pending_sweep_sec > 0:
            PendingSweep(store, dispatcher).schedule(scheduler, settings.pending_sweep_sec)
            scheduler.start()

        if settings.ops_api_port > 0:
            ops_server = build_ops_server(settings, create_ops_app(store, dispatcher, settings.worker_id))
            ops_task = asyncio.create_task(ops_server.serve())

        logging.info(f"Ladder Helper Bot (@{username}) is online and listening for games...")

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop.set)

        lost = asyncio.create_task(subscriber.wait_closed())
        stopped = asyncio.create_task(stop.wait())
        done, _ = await asyncio.wait({lost, stopped}, return_when=asyncio.FIRST_COMPLETED)
        stopped.cancel()
        if lost in done:
            lost.result()
        lost.cancel()
        logging.info("Stop Worker")
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
        if subscriber is not None:
            await subscriber.close()
        await dispatcher.drain()
        if ops_server is not None:
            ops_server.should_exit = True
            await ops_task
        await messages.stop()
        await engine.dispose()


def main():
    try:
        settings = read_settings()
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logging.critical(f"LADDER HELPER: CRITICAL: {e}")
        sys.exit(1)

    logging.basicConfig(level=settings.log_level)
    try:
        asyncio.run(run_worker(settings))
    except Exception as e:
        logging.critical(f"FATAL: Ladder helper stopped: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
