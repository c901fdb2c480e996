import asyncio
import logging
from typing import Awaitable, Callable, Set


class TaskDispatcher:
    """Runs one independent task per game id.

    Tasks never share state; the atomic claim in the store decides which
    helper actually plays a game, so duplicates are dispatched as-is.
    """

    def __init__(self, handler: Callable[[str], Awaitable[object]]):
        self.handler = handler
        self.tasks: Set[asyncio.Task] = set()
        self.accepting: bool = True

    @property
    def in_flight(self) -> int:
        return len(self.tasks)

    def dispatch(self, main_bot_game_id: str) -> asyncio.Task | None:
        """Schedule a claim-and-resolve attempt without waiting for it.

        Must be called from the running event loop.
        """
        if not self.accepting:
            logging.warning(f"[Ladder GID:{main_bot_game_id}] Shutting down, dispatch ignored")
            return None
        task = asyncio.get_running_loop().create_task(
            self.handler(main_bot_game_id), name=f"ladder:{main_bot_game_id}"
        )
        self.tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task):
        self.tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logging.error(f"Task {task.get_name()} failed: {exc!r}")

    async def drain(self):
        """Stop accepting new work and wait for in-flight tasks."""
        self.accepting = False
        if self.tasks:
            logging.info(f"Waiting for {len(self.tasks)} in-flight game(s)")
            await asyncio.gather(*self.tasks, return_exceptions=True)
