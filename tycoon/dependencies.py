"""Process-wide collaborators, resolved through FastAPI dependencies.

Tests replace them with app.dependency_overrides.
"""

from redis.asyncio import Redis

from tycoon.config_loader import GameConfig, GameConfigLoader
from tycoon.db import Session
from tycoon.domain.engine import GameEngine
from tycoon.load_secrets import game_config_dir, redis_host, redis_port, starting_money
from tycoon.services.game_service import GameService
from tycoon.services.game_store import SqlGameStateRepository
from tycoon.services.publisher import StatePublisher

config_loader = GameConfigLoader(game_config_dir)
redis = Redis(host=redis_host, port=redis_port, decode_responses=True, health_check_interval=30)

_game_service: GameService | None = None


def get_game_config() -> GameConfig:
    return config_loader.load()


def get_redis() -> Redis:
    return redis


def get_game_service() -> GameService:
    global _game_service
    if _game_service is None:
        config = config_loader.load()
        _game_service = GameService(
            engine=GameEngine(config.catalog(), config.formulas),
            repository=SqlGameStateRepository(Session),
            publisher=StatePublisher(redis),
            starting_money=starting_money,
        )
    return _game_service
