import logging
import pathlib

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tycoon.load_secrets import db_name, host, password, port, user

logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def database_url() -> str:
    """Postgres when DB_HOST is configured, otherwise a local sqlite file."""
    if host:
        return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"
    file_path = pathlib.Path(__file__).parents[1] / "tycoon.sqlite3"
    return f"sqlite+aiosqlite:///{file_path}"


if host:
    engine = create_async_engine(database_url(), pool_size=20, max_overflow=20)
else:
    engine = create_async_engine(url=database_url(), echo=False)

# Centralized session factory to avoid creating it in router modules.
Session = async_sessionmaker(
    autocommit=False,
    class_=AsyncSession,
    autoflush=True,
    bind=engine,
)
