from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column
from sqlalchemy.sql import func
from sqlalchemy.types import JSON, BigInteger, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB


class Base(DeclarativeBase):
    pass


# JSONB on Postgres, plain JSON elsewhere (SQLite in tests).
GameStateJSON = JSON().with_variant(JSONB(), "postgresql")


class LadderSession(Base):
    __tablename__ = "ladder_sessions"
    session_id = Column(Integer, primary_key=True, autoincrement=True)
    main_bot_game_id = Column(String, unique=True, index=True, nullable=False)
    status = Column(String, nullable=False, default="pending_pickup")
    helper_bot_id = Column(String, nullable=True)
    game_state_json = Column(GameStateJSON, nullable=True)
    bet_amount_lamports = Column(BigInteger, nullable=False)
    chat_id = Column(BigInteger, nullable=False)
    initiator_id = Column(BigInteger, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())
