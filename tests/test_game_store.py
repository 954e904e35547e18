"""
Tests for game state persistence

Tests cover:
- SqlGameStateRepository against a temporary sqlite database
- InMemoryGameStateRepository
"""

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from uuid6 import uuid7

from tycoon.crud import CreateData, UpdateData
from tycoon.services.game_store import InMemoryGameStateRepository, SqlGameStateRepository


def sqlite_repository(tmp_path):
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite3'}")
    Session = async_sessionmaker(autocommit=False, class_=AsyncSession, autoflush=True, bind=db_engine)
    return db_engine, Session, SqlGameStateRepository(Session)


class TestSqlGameStateRepository:
    """Stored wire form in the game_session table"""

    def test_save_then_load(self, tmp_path, engine):
        async def scenario():
            db_engine, _, repository = sqlite_repository(tmp_path)
            await CreateData.create_table(db_engine)
            session_id = uuid7()
            state = engine.add_visitors(engine.initialize(10000), 150)

            await repository.save_state(session_id, state)
            loaded = await repository.load_state(session_id)
            await db_engine.dispose()
            return state, loaded

        state, loaded = asyncio.run(scenario())
        assert loaded == state

    def test_save_overwrites(self, tmp_path, engine):
        async def scenario():
            db_engine, _, repository = sqlite_repository(tmp_path)
            await CreateData.create_table(db_engine)
            session_id = uuid7()

            await repository.save_state(session_id, engine.initialize(10000))
            await repository.save_state(session_id, engine.initialize(500))
            loaded = await repository.load_state(session_id)
            await db_engine.dispose()
            return loaded

        assert asyncio.run(scenario()).money == 500

    def test_unknown_session(self, tmp_path):
        async def scenario():
            db_engine, _, repository = sqlite_repository(tmp_path)
            await CreateData.create_table(db_engine)
            loaded = await repository.load_state(uuid7())
            await db_engine.dispose()
            return loaded

        assert asyncio.run(scenario()) is None

    def test_unreadable_state_is_dropped(self, tmp_path):
        """A corrupt stored state reads as absent"""

        async def scenario():
            db_engine, Session, repository = sqlite_repository(tmp_path)
            await CreateData.create_table(db_engine)
            session_id = uuid7()
            async with Session() as session:
                await UpdateData.upsert_game_state(session_id, {"money": "lots"}, session)
            loaded = await repository.load_state(session_id)
            await db_engine.dispose()
            return loaded

        assert asyncio.run(scenario()) is None

    def test_database_error_is_raised(self, tmp_path):
        """A failing read is not mistaken for an unknown session"""

        async def scenario():
            db_engine, _, repository = sqlite_repository(tmp_path)
            try:
                # No table created
                return await repository.load_state(uuid7())
            finally:
                await db_engine.dispose()

        with pytest.raises(OperationalError):
            asyncio.run(scenario())

    def test_delete_expired(self, tmp_path, engine):
        async def scenario():
            db_engine, _, repository = sqlite_repository(tmp_path)
            await CreateData.create_table(db_engine)
            session_id = uuid7()
            await repository.save_state(session_id, engine.initialize(10000))

            kept = await repository.delete_expired(datetime.now() - timedelta(hours=1))
            deleted = await repository.delete_expired(datetime.now() + timedelta(hours=1))
            loaded = await repository.load_state(session_id)
            await db_engine.dispose()
            return kept, deleted, loaded

        kept, deleted, loaded = asyncio.run(scenario())
        assert kept == 0
        assert deleted == 1
        assert loaded is None


class TestInMemoryGameStateRepository:
    def test_round_trip_and_expiry(self, engine):
        async def scenario():
            repository = InMemoryGameStateRepository()
            session_id = uuid7()
            await repository.save_state(session_id, engine.initialize(10000))
            loaded = await repository.load_state(session_id)
            deleted = await repository.delete_expired(datetime.now() + timedelta(seconds=1))
            return loaded, deleted, await repository.load_state(session_id)

        loaded, deleted, after = asyncio.run(scenario())
        assert loaded.money == 10000
        assert deleted == 1
        assert after is None
