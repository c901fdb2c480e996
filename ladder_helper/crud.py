from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from ladder_helper.models.dc_models import SessionStatus
from ladder_helper.models.schema_models import LadderSessionSchema, StrandedSessionSchema
from ladder_helper.models.schemas import LadderSession


class UpdateData:
    @staticmethod
    async def claim_pending_session_no_commit(
        main_bot_game_id: str, helper_bot_id: str, session: AsyncSession
    ) -> LadderSession | None:
        """Move one pending session to in_progress and record the claimer.

        The WHERE clause on status makes this a single conditional update:
        when two helpers race, only one of them gets a row back.

        Args:
            main_bot_game_id (str): Game id assigned by the main bot
            helper_bot_id (str): Id of the claiming helper
            session (AsyncSession): Session inside an open transaction

        Returns:
            LadderSession | None: The claimed row, None when nothing matched.
            Its contents are validated by the caller, after the claim commits
        """
        stmt = (
            update(LadderSession)
            .where(
                LadderSession.main_bot_game_id == main_bot_game_id,
                LadderSession.status == SessionStatus.pending_pickup.value,
            )
            .values(
                status=SessionStatus.in_progress.value,
                helper_bot_id=helper_bot_id,
                updated_at=func.now(),
            )
            .returning(LadderSession)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def set_final_outcome_no_commit(
        session_id: int, status: SessionStatus, game_state: dict, session: AsyncSession
    ) -> int:
        """Write the terminal status and game state unconditionally.

        Returns:
            int: Number of rows updated
        """
        stmt = (
            update(LadderSession)
            .where(LadderSession.session_id == session_id)
            .values(
                status=status.value,
                game_state_json=game_state,
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount


class ReadData:
    @staticmethod
    async def read_session_by_game_id(
        main_bot_game_id: str, session: AsyncSession
    ) -> LadderSessionSchema | None:
        stmt = select(LadderSession).where(LadderSession.main_bot_game_id == main_bot_game_id)
        result = await session.execute(stmt)
        row = result.scalars().first()
        if row is None:
            return None
        return LadderSessionSchema.model_validate(row)

    @staticmethod
    async def read_pending_game_ids(session: AsyncSession, limit: int = 50) -> List[str]:
        """Read game ids still waiting for pickup, oldest first."""
        stmt = (
            select(LadderSession.main_bot_game_id)
            .where(LadderSession.status == SessionStatus.pending_pickup.value)
            .order_by(LadderSession.session_id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def read_stranded_sessions(
        session: AsyncSession, limit: int = 100
    ) -> List[StrandedSessionSchema]:
        """Read sessions an operator may need to reconcile.

        in_progress rows are either being resolved right now or were left by a
        helper that died; completed_error rows never produced a result.
        """
        stmt = (
            select(LadderSession)
            .where(
                LadderSession.status.in_(
                    [SessionStatus.in_progress.value, SessionStatus.completed_error.value]
                )
            )
            .order_by(LadderSession.session_id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [StrandedSessionSchema.model_validate(row) for row in result.scalars().all()]
