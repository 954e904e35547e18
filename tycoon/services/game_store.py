"""Persistence service for game states.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- States cross this boundary as GameState; the stored form is the wire dict.
"""

import logging
from datetime import datetime
from typing import Dict, Optional, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from tycoon.converter import DataConverter
from tycoon.crud import DeleteData, ReadData, UpdateData
from tycoon.domain.game_state import GameState

data_converter = DataConverter()


class GameStateRepository(Protocol):
    async def load_state(self, session_id: UUID) -> Optional[GameState]: ...

    async def save_state(self, session_id: UUID, state: GameState) -> None: ...

    async def delete_expired(self, older_than: datetime) -> int: ...


class SqlGameStateRepository:
    def __init__(self, Session: async_sessionmaker):
        self.Session = Session

    async def load_state(self, session_id: UUID) -> Optional[GameState]:
        async with self.Session() as session:
            stored = await ReadData.read_game_session(session_id, session)
        if stored is None:
            return None
        try:
            return data_converter.dict_to_state(stored.state)
        except (KeyError, TypeError, ValueError) as e:
            logging.error(f"Stored state of session {session_id} is unreadable, starting over: {e}")
            return None

    async def save_state(self, session_id: UUID, state: GameState) -> None:
        async with self.Session() as session:
            await UpdateData.upsert_game_state(session_id, data_converter.state_to_dict(state), session)

    async def delete_expired(self, older_than: datetime) -> int:
        async with self.Session() as session:
            deleted = await DeleteData.delete_expired_sessions(older_than, session)
        logging.info(f"Deleted {deleted} game sessions not updated since {older_than}")
        return deleted


class InMemoryGameStateRepository:
    """Process-local store, for development without a database and for tests."""

    def __init__(self):
        self.states: Dict[UUID, GameState] = {}
        self.updated_at: Dict[UUID, datetime] = {}

    async def load_state(self, session_id: UUID) -> Optional[GameState]:
        return self.states.get(session_id)

    async def save_state(self, session_id: UUID, state: GameState) -> None:
        self.states[session_id] = state
        self.updated_at[session_id] = datetime.now()

    async def delete_expired(self, older_than: datetime) -> int:
        expired = [sid for sid, at in self.updated_at.items() if at < older_than]
        for sid in expired:
            del self.states[sid]
            del self.updated_at[sid]
        return len(expired)
