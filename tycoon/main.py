import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from tycoon.crud import CreateData
from tycoon.db import engine
from tycoon.dependencies import config_loader, get_game_service, redis
from tycoon.load_secrets import session_ttl_hours
from tycoon.routers import game

scheduler = AsyncIOScheduler()
logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app):
    """Load the game config and prepare the store.
    This function is called to start the server; a broken config stops it here.
    """
    config = config_loader.load()
    logging.info(
        f"Game config ready: {len(config.buildings)} marketing channels, {len(config.verticals)} verticals"
    )
    await CreateData.create_table(engine)
    game_service = get_game_service()

    # Forget sessions nobody played for session_ttl_hours
    scheduler.add_job(
        game_service.delete_expired_sessions,
        "interval",
        hours=24,
        args=[session_ttl_hours],
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        await redis.aclose()
        await engine.dispose()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(game.game_router)
