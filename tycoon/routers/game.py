import logging
from uuid import UUID

from fastapi import APIRouter, Cookie, Depends, Response
from fastapi.responses import StreamingResponse
from redis.asyncio import Redis
from uuid6 import uuid7

from tycoon.config_loader import GameConfig
from tycoon.converter import DataConverter
from tycoon.dependencies import get_game_config, get_game_service, get_redis
from tycoon.models.dc_models import (
    ActionErrorModel,
    StateResponseModel,
    SyncRequestModel,
    SyncResponseModel,
    TickRequestModel,
)
from tycoon.redis_subscriber import RedisSubscriber
from tycoon.services.game_service import GameService, GameSnapshot

SESSION_COOKIE = "game_session"

game_router = APIRouter(prefix="/api/game")
data_converter = DataConverter()
logging.basicConfig(level=logging.INFO)


def set_session_cookie(response: Response, session_id: UUID) -> None:
    response.set_cookie(SESSION_COOKIE, str(session_id), httponly=True, samesite="lax")


def resolve_session_id(response: Response, game_session: str | None = Cookie(default=None)) -> UUID:
    """Read the session id cookie, issuing a new one when absent or malformed

    Args:
        response (Response): Used to set the cookie on the outgoing response
        game_session (str | None): Raw cookie value

    Returns:
        UUID: Session id of this player
    """
    if game_session:
        try:
            return UUID(game_session)
        except ValueError:
            logging.warning(f"Ignoring malformed session cookie: {game_session!r}")
    session_id = uuid7()
    set_session_cookie(response, session_id)
    logging.info(f"Issued new game session {session_id}")
    return session_id


def state_response(snapshot: GameSnapshot, config: GameConfig | None = None) -> StateResponseModel:
    return StateResponseModel(
        success=True,
        state=data_converter.state_to_model(snapshot.state),
        computed=data_converter.computed_to_model(snapshot.computed),
        config=data_converter.config_to_model(config) if config is not None else None,
    )


class GameAPI:
    @staticmethod
    @game_router.get("/state", response_model=StateResponseModel)
    async def get_state(
        session_id: UUID = Depends(resolve_session_id),
        game_service: GameService = Depends(get_game_service),
        config: GameConfig = Depends(get_game_config),
    ) -> StateResponseModel:
        """Return the authoritative state, the computed values and the config snapshot"""
        snapshot = await game_service.get_state(session_id)
        return state_response(snapshot, config)

    @staticmethod
    @game_router.post("/sync", response_model=SyncResponseModel)
    async def sync(
        request: SyncRequestModel,
        session_id: UUID = Depends(resolve_session_id),
        game_service: GameService = Depends(get_game_service),
    ) -> SyncResponseModel:
        """Apply a batch of client actions in order

        Args:
            request (SyncRequestModel): Ordered actions {id, type, payload}

        Returns:
            SyncResponseModel: New state, computed values and the rejected action ids with error codes
        """
        snapshot = await game_service.sync(session_id, request.actions)
        errors = [
            ActionErrorModel(action_id=r.action_id, code=r.code.value, message=r.message)
            for r in snapshot.rejected
        ]
        return SyncResponseModel(
            success=len(errors) == 0,
            state=data_converter.state_to_model(snapshot.state),
            computed=data_converter.computed_to_model(snapshot.computed),
            rejected_action_ids=[r.action_id for r in snapshot.rejected if r.action_id is not None],
            errors=errors,
        )

    @staticmethod
    @game_router.post("/tick", response_model=StateResponseModel)
    async def tick(
        request: TickRequestModel,
        session_id: UUID = Depends(resolve_session_id),
        game_service: GameService = Depends(get_game_service),
    ) -> StateResponseModel:
        """Add passive visitors for the elapsed time; out-of-range ticks are ignored"""
        snapshot = await game_service.tick(session_id, request.elapsed_ms)
        return state_response(snapshot)

    @staticmethod
    @game_router.post("/reset", response_model=StateResponseModel)
    async def reset(
        session_id: UUID = Depends(resolve_session_id),
        game_service: GameService = Depends(get_game_service),
        config: GameConfig = Depends(get_game_config),
    ) -> StateResponseModel:
        snapshot = await game_service.reset(session_id)
        return state_response(snapshot, config)

    @staticmethod
    @game_router.get("/stream")
    async def stream_state(
        session_id: UUID = Depends(resolve_session_id),
        game_service: GameService = Depends(get_game_service),
        redis: Redis = Depends(get_redis),
    ):
        redis_subscriber = RedisSubscriber(game_service, session_id)

        response = StreamingResponse(
            redis_subscriber.event_generator(redis),
            media_type="text/event-stream; charset=utf-8",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )
        # Returned responses do not carry cookies set by dependencies
        set_session_cookie(response, session_id)
        return response
