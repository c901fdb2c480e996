"""DB service layer for ladder sessions.

- Workers and routes never touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- CRUD helpers used here do NOT commit; the transaction block does.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ladder_helper.crud import ReadData, UpdateData
from ladder_helper.exceptions import TransientStoreError
from ladder_helper.models.dc_models import SessionStatus
from ladder_helper.models.schema_models import LadderSessionSchema, StrandedSessionSchema
from ladder_helper.models.schemas import LadderSession


class SessionStore:
    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def claim_session(
        self, main_bot_game_id: str, helper_bot_id: str
    ) -> LadderSession | None:
        """Claim a pending session for this helper.

        Args:
            main_bot_game_id (str): Game id from the pickup notification
            helper_bot_id (str): This helper's id

        Raises:
            TransientStoreError: The store failed; the transaction was rolled back

        Returns:
            LadderSession | None: The detached row as claimed, or None if another
            helper already owns it, it is not pending, or it does not exist.
            The factory must use expire_on_commit=False so its columns stay loaded
        """
        try:
            async with self.Session() as session:
                async with session.begin():
                    return await UpdateData.claim_pending_session_no_commit(
                        main_bot_game_id, helper_bot_id, session
                    )
        except (SQLAlchemyError, OSError) as e:
            raise TransientStoreError(f"Claim failed for {main_bot_game_id}: {e}") from e

    async def finalize_outcome(
        self, session_id: int, status: SessionStatus, game_state: dict
    ) -> bool:
        """Persist the terminal status and game state. Never raises.

        A failure here leaves the chat showing a result the store does not have;
        it is logged for manual reconciliation and not retried.

        Returns:
            bool: True if the write was committed
        """
        log_prefix = f"[Ladder SID:{session_id}]"
        logging.info(f"{log_prefix} Finalizing game with status: {status.value}")
        try:
            async with self.Session() as session:
                async with session.begin():
                    updated = await UpdateData.set_final_outcome_no_commit(
                        session_id, status, game_state, session
                    )
            if updated == 0:
                logging.warning(f"{log_prefix} No session row to finalize")
            return updated > 0
        except Exception as e:
            logging.error(f"{log_prefix} CRITICAL: Failed to write final outcome to DB: {e}")
            return False

    async def read_session(self, main_bot_game_id: str) -> LadderSessionSchema | None:
        async with self.Session() as session:
            return await ReadData.read_session_by_game_id(main_bot_game_id, session)

    async def read_pending_game_ids(self, limit: int = 50) -> List[str]:
        async with self.Session() as session:
            return await ReadData.read_pending_game_ids(session, limit)

    async def read_stranded_sessions(self, limit: int = 100) -> List[StrandedSessionSchema]:
        async with self.Session() as session:
            return await ReadData.read_stranded_sessions(session, limit)
