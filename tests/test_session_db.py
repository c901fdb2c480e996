import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from ladder_helper.exceptions import TransientStoreError
from ladder_helper.models.dc_models import SessionStatus


async def test_claim_pending_session(store, add_session):
    session_id = await add_session("game-1")

    claimed = await store.claim_session("game-1", "777")

    assert claimed is not None
    assert claimed.session_id == session_id
    assert claimed.status == SessionStatus.in_progress.value
    assert claimed.helper_bot_id == "777"
    assert claimed.game_state_json == {"initiatorName": "Alice"}
    assert claimed.bet_amount_lamports == 1_500_000_000

    stored = await store.read_session("game-1")
    assert stored.status == "in_progress"
    assert stored.helper_bot_id == "777"


async def test_claim_unknown_game_returns_none(store):
    assert await store.claim_session("nope", "777") is None


@pytest.mark.parametrize(
    "status",
    [
        "in_progress",
        "completed_bust",
        "completed_win",
        "completed_loss_no_tier",
        "completed_error",
    ],
)
async def test_claim_non_pending_returns_none(store, add_session, status):
    await add_session("game-1", status=status, helper_bot_id="111")

    assert await store.claim_session("game-1", "777") is None

    stored = await store.read_session("game-1")
    assert stored.status == status
    assert stored.helper_bot_id == "111"


async def test_second_claim_loses(store, add_session):
    await add_session("game-1")
    assert await store.claim_session("game-1", "777") is not None
    assert await store.claim_session("game-1", "888") is None
    assert (await store.read_session("game-1")).helper_bot_id == "777"


async def test_concurrent_claims_have_one_winner(store, add_session):
    await add_session("game-1")

    results = await asyncio.gather(
        *(store.claim_session("game-1", f"helper-{i}") for i in range(8))
    )

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    stored = await store.read_session("game-1")
    assert stored.helper_bot_id == winners[0].helper_bot_id


async def test_claim_store_failure_is_transient(store, add_session, monkeypatch):
    await add_session("game-1")

    async def broken(*args, **kwargs):
        raise OperationalError("UPDATE", {}, Exception("connection reset"))

    monkeypatch.setattr(
        "ladder_helper.crud.UpdateData.claim_pending_session_no_commit", broken
    )
    with pytest.raises(TransientStoreError):
        await store.claim_session("game-1", "777")

    monkeypatch.undo()
    assert (await store.read_session("game-1")).status == "pending_pickup"


async def test_finalize_writes_status_and_state(store, add_session):
    session_id = await add_session("game-1", status="in_progress")
    state = {"initiatorName": "Alice", "rolls": [3, 4, 5, 6, 6], "sum": 24}

    assert await store.finalize_outcome(session_id, SessionStatus.completed_win, state)

    stored = await store.read_session("game-1")
    assert stored.status == "completed_win"
    assert stored.game_state_json == state


async def test_finalize_twice_is_idempotent(store, add_session):
    session_id = await add_session("game-1", status="in_progress")
    state = {"rolls": [6, 6, 1, 6, 6], "sum": 25, "isBust": True}

    await store.finalize_outcome(session_id, SessionStatus.completed_bust, state)
    first = await store.read_session("game-1")
    await store.finalize_outcome(session_id, SessionStatus.completed_bust, state)
    second = await store.read_session("game-1")

    assert (first.status, first.game_state_json) == (second.status, second.game_state_json)


async def test_finalize_failure_is_swallowed(store, add_session, monkeypatch, caplog):
    session_id = await add_session("game-1", status="in_progress")

    async def broken(*args, **kwargs):
        raise OperationalError("UPDATE", {}, Exception("disk full"))

    monkeypatch.setattr("ladder_helper.crud.UpdateData.set_final_outcome_no_commit", broken)

    result = await store.finalize_outcome(session_id, SessionStatus.completed_win, {})

    assert result is False
    assert "CRITICAL" in caplog.text


async def test_finalize_missing_session_returns_false(store):
    assert await store.finalize_outcome(999, SessionStatus.completed_win, {}) is False


async def test_pending_and_stranded_reads(store, add_session):
    await add_session("a")
    await add_session("b", status="in_progress", helper_bot_id="1")
    await add_session("c", status="completed_error", helper_bot_id="1")
    await add_session("d")
    await add_session("e", status="completed_win", helper_bot_id="1")

    assert await store.read_pending_game_ids() == ["a", "d"]
    stranded = await store.read_stranded_sessions()
    assert [s.main_bot_game_id for s in stranded] == ["c", "b"]


async def test_claim_commits_even_when_row_contents_are_malformed(store, add_session):
    await add_session("game-bad", game_state_json="not-a-dict")

    claimed = await store.claim_session("game-bad", "777")

    assert claimed is not None
    assert claimed.status == "in_progress"
    assert claimed.game_state_json == "not-a-dict"
    assert await store.read_pending_game_ids() == []
