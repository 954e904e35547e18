from datetime import datetime

from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column
from sqlalchemy.types import JSON, DateTime, Uuid
from uuid6 import uuid7


class Base(DeclarativeBase):
    pass


class GameSession(Base):
    __tablename__ = "game_session"
    session_id = Column(Uuid, primary_key=True, default=uuid7)
    state = Column(JSON)  # GameState in its wire form
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, index=True)
