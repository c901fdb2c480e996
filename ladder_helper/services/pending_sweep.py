import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ladder_helper.dispatcher import TaskDispatcher
from ladder_helper.services.session_db import SessionStore

SWEEP_BATCH_LIMIT = 50


class PendingSweep:
    """Re-dispatches sessions whose pickup notification was never handled.

    Notifications sent while no helper was listening are lost; the sweep
    finds those rows and lets the normal claim decide who plays them.
    """

    def __init__(self, store: SessionStore, dispatcher: TaskDispatcher):
        self.store: SessionStore = store
        self.dispatcher: TaskDispatcher = dispatcher

    async def sweep_once(self) -> int:
        try:
            game_ids = await self.store.read_pending_game_ids(SWEEP_BATCH_LIMIT)
        except Exception as e:
            logging.warning(f"[Ladder] Pending sweep could not read sessions: {e}")
            return 0
        for main_bot_game_id in game_ids:
            self.dispatcher.dispatch(main_bot_game_id)
        if game_ids:
            logging.info(f"[Ladder] Pending sweep dispatched {len(game_ids)} session(s)")
        return len(game_ids)

    def schedule(self, scheduler: AsyncIOScheduler, seconds: int):
        scheduler.add_job(
            self.sweep_once,
            "interval",
            seconds=seconds,
            id="ladder_pending_sweep",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=10,
        )
