import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from ladder_helper.db import create_session_factory
from ladder_helper.models.schema_models import LadderSessionSchema
from ladder_helper.models.schemas import Base, LadderSession
from ladder_helper.services.session_db import SessionStore


@pytest.fixture()
async def engine(tmp_path):
    # A file database so concurrent sessions get their own connections.
    sqlite_url = f"sqlite+aiosqlite:///{tmp_path / 'ladder.sqlite3'}"
    engine = create_async_engine(url=sqlite_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def Session(engine):
    return create_session_factory(engine)


@pytest.fixture()
def store(Session):
    return SessionStore(Session)


@pytest.fixture()
def add_session(Session):
    async def _add(main_bot_game_id="game-1", status="pending_pickup", **fields):
        row = LadderSession(
            main_bot_game_id=main_bot_game_id,
            status=status,
            game_state_json=fields.pop("game_state_json", {"initiatorName": "Alice"}),
            bet_amount_lamports=fields.pop("bet_amount_lamports", 1_500_000_000),
            chat_id=fields.pop("chat_id", -100123),
            initiator_id=fields.pop("initiator_id", 42),
            **fields,
        )
        async with Session() as session:
            async with session.begin():
                session.add(row)
        return row.session_id

    return _add


class FakeRng:
    """Stands in for numpy.random.Generator with a fixed throw."""

    def __init__(self, *throws):
        self.throws = list(throws)
        self.calls = []

    def integers(self, low, high, size):
        self.calls.append((low, high, size))
        return list(self.throws.pop(0))


class FakeTransport:
    def __init__(self, fail_send=False, fail_edit=False, next_id=100):
        self.fail_send = fail_send
        self.fail_edit = fail_edit
        self.next_id = next_id
        self.sent = []
        self.edited = []

    async def send_message(self, chat_id, text):
        if self.fail_send:
            raise RuntimeError("chat not found")
        self.sent.append((chat_id, text))
        self.next_id += 1
        return self.next_id

    async def edit_message(self, chat_id, message_id, text):
        if self.fail_edit:
            raise RuntimeError("message to edit not found")
        self.edited.append((chat_id, message_id, text))


@pytest.fixture()
def fake_rng():
    return FakeRng


@pytest.fixture()
def fake_transport():
    return FakeTransport


@pytest.fixture()
def make_session():
    def _make(**fields) -> LadderSessionSchema:
        data = {
            "session_id": 7,
            "main_bot_game_id": "game-7",
            "status": "in_progress",
            "helper_bot_id": "777",
            "game_state_json": {"initiatorName": "<Bob & Co>"},
            "bet_amount_lamports": 1_234_567_890,
            "chat_id": -100123,
            "initiator_id": 42,
        }
        data.update(fields)
        return LadderSessionSchema(**data)

    return _make
