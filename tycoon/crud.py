import logging
from datetime import datetime
from typing import Any, Dict
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from tycoon.models.schema_models import GameSessionSchema
from tycoon.models.schemas import Base, GameSession


class CreateData:
    @staticmethod
    async def create_table(engine: AsyncEngine) -> None:
        """Create table if not exists"""
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except IntegrityError as e:
            logging.warning(f"Table already exists or other integrity error: {e}")


class ReadData:
    @staticmethod
    async def read_game_session(session_id: UUID, session: AsyncSession) -> GameSessionSchema | None:
        """Read the stored game state of one session

        Args:
            session_id (UUID): To identify the game session

        Returns:
            GameSessionSchema: Stored state with timestamps, None if the session is unknown

        Raises:
            Exception: Database errors are logged and re-raised
        """
        async with session:
            try:
                stmt = select(GameSession).where(GameSession.session_id == session_id)
                result = await session.execute(stmt)
                result = result.scalars().first()

                if result is None:
                    return None

                return GameSessionSchema.model_validate(result)
            except Exception as e:
                logging.error(f"Failed to read game session: {e}")
                raise


class UpdateData:
    @staticmethod
    async def upsert_game_state(session_id: UUID, state: Dict[str, Any], session: AsyncSession) -> None:
        """Insert or replace the stored game state of one session

        Args:
            session_id (UUID): To identify the game session
            state (Dict[str, Any]): GameState in its wire form
        """
        async with session:
            try:
                stmt = select(GameSession).where(GameSession.session_id == session_id)
                result = await session.execute(stmt)
                result = result.scalars().first()

                now = datetime.now()
                if result is None:
                    session.add(
                        GameSession(session_id=session_id, state=state, created_at=now, updated_at=now)
                    )
                else:
                    result.state = state
                    result.updated_at = now
                await session.commit()
            except Exception as e:
                logging.error(f"Failed to save game state: {e}")
                await session.rollback()
                raise


class DeleteData:
    @staticmethod
    async def delete_expired_sessions(older_than: datetime, session: AsyncSession) -> int:
        """Delete sessions that were not updated since older_than

        Args:
            older_than (datetime): Sessions last updated before this are removed

        Returns:
            int: Number of deleted sessions
        """
        async with session:
            try:
                stmt = delete(GameSession).where(GameSession.updated_at < older_than)
                result = await session.execute(stmt)
                await session.commit()
                return result.rowcount
            except Exception as e:
                logging.error(f"Failed to delete expired game sessions: {e}")
                await session.rollback()
                raise
