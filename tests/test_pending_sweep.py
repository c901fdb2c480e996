import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ladder_helper.dispatcher import TaskDispatcher
from ladder_helper.services.pending_sweep import PendingSweep


async def test_sweep_dispatches_pending_sessions(store, add_session):
    await add_session("a")
    await add_session("b", status="in_progress", helper_bot_id="1")
    await add_session("c")
    seen = []

    async def handler(main_bot_game_id):
        seen.append(main_bot_game_id)

    dispatcher = TaskDispatcher(handler)
    assert await PendingSweep(store, dispatcher).sweep_once() == 2
    await dispatcher.drain()

    assert sorted(seen) == ["a", "c"]


async def test_sweep_survives_store_failure():
    class BrokenStore:
        async def read_pending_game_ids(self, limit):
            raise OSError("connection refused")

    dispatcher = TaskDispatcher(lambda game_id: asyncio.sleep(0))
    assert await PendingSweep(BrokenStore(), dispatcher).sweep_once() == 0


def test_sweep_job_configuration():
    scheduler = AsyncIOScheduler()
    PendingSweep(store=None, dispatcher=None).schedule(scheduler, 30)

    (job,) = scheduler.get_jobs()
    assert job.id == "ladder_pending_sweep"
    assert job.max_instances == 1
    assert job.coalesce is True
    assert job.trigger.interval.total_seconds() == 30
