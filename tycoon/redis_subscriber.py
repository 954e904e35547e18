import json
import logging
from typing import AsyncGenerator
from uuid import UUID

from redis.asyncio import Redis

from tycoon.converter import DataConverter
from tycoon.services.game_service import GameService, GameSnapshot
from tycoon.services.publisher import channel_name

data_converter = DataConverter()


class RedisSubscriber:
    """Redis subscriber class to push game state changes as SSE events."""

    def __init__(self, game_service: GameService, session_id: UUID):
        self.game_service: GameService = game_service
        self.session_id: UUID = session_id

    def _sse_message(self, snapshot: GameSnapshot) -> str:
        payload = json.dumps(
            {
                "state": data_converter.state_to_dict(snapshot.state),
                "computed": data_converter.computed_to_model(snapshot.computed).model_dump(by_alias=True),
            }
        )
        logging.debug(f"Payload: {payload}")
        return f"event: latest_state_update\ndata: {payload}\n\n"

    async def event_generator(self, redis: Redis) -> AsyncGenerator[str, None]:
        """Yield the current state, then one event per change published on the session channel.

        Args:
            redis (Redis): Redis connection object.
        """
        channel = channel_name(self.session_id)
        pubsub = redis.pubsub()
        yield self._sse_message(await self.game_service.get_state(self.session_id))

        await pubsub.subscribe(channel)
        try:
            while True:
                msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=None)
                if msg and msg["type"] == "message":
                    yield self._sse_message(await self.game_service.get_state(self.session_id))
        finally:
            logging.info("Unsubscribing from channel")
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
