import logging
from typing import Protocol, Sequence

import numpy as np

from ladder_helper.domain.ladder_rules import LADDER_PAYOUTS, resolve_game
from ladder_helper.exceptions import TransientStoreError
from ladder_helper.models.dc_models import PayoutTierModel, SessionStatus
from ladder_helper.models.schema_models import LadderSessionSchema
from ladder_helper.services.presenter import ResultPresenter


class SessionStoreProtocol(Protocol):
    async def claim_session(self, main_bot_game_id: str, helper_bot_id: str): ...

    async def finalize_outcome(
        self, session_id: int, status: SessionStatus, game_state: dict
    ) -> bool: ...


class LadderGameRunner:
    """Claims one session and plays it to a terminal status."""

    def __init__(
        self,
        store: SessionStoreProtocol,
        presenter: ResultPresenter,
        helper_bot_id: str,
        rng: np.random.Generator,
        tiers: Sequence[PayoutTierModel] = LADDER_PAYOUTS,
    ):
        self.store = store
        self.presenter = presenter
        self.helper_bot_id: str = helper_bot_id
        self.rng: np.random.Generator = rng
        self.tiers = tiers

    async def handle_new_game_session(self, main_bot_game_id: str) -> SessionStatus | None:
        """Claim, resolve, present and finalize one game.

        Args:
            main_bot_game_id (str): Game id from the pickup notification

        Returns:
            SessionStatus | None: Terminal status written, None if the session
            was not claimed by this helper
        """
        log_prefix = f"[Ladder GID:{main_bot_game_id}]"
        try:
            claimed = await self.store.claim_session(main_bot_game_id, self.helper_bot_id)
        except TransientStoreError as e:
            logging.warning(f"{log_prefix} Claim aborted, session stays pending: {e}")
            return None

        if claimed is None:
            logging.debug(f"{log_prefix} Nothing to claim (already taken or not pending)")
            return None

        session_id = claimed.session_id
        logging.info(f"{log_prefix} Claimed session {session_id}")
        game_state = {}
        try:
            # A row the main bot wrote badly still ends terminal, never pending.
            session = LadderSessionSchema.model_validate(claimed)
            game_state = session.game_state

            announcement_id = await self.presenter.announce(session)
            await self.presenter.pause()

            outcome = resolve_game(self.rng, self.tiers)
            game_state.update(outcome.to_game_state())

            await self.presenter.show_result(session, outcome, announcement_id)
        except Exception as e:
            logging.exception(f"{log_prefix} Error handling session {session_id}: {e}")
            game_state["error"] = str(e)
            await self.store.finalize_outcome(
                session_id, SessionStatus.completed_error, game_state
            )
            return SessionStatus.completed_error

        await self.store.finalize_outcome(session_id, outcome.status, game_state)
        logging.info(
            f"{log_prefix} Finished with {outcome.status.value} (rolls={outcome.rolls}, sum={outcome.total})"
        )
        return outcome.status
