import logging
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError


def channel_name(session_id: UUID) -> str:
    return f"game:{session_id}"


class StatePublisher:
    """Announces state changes of a session on its redis channel.

    The payload is only the session id; subscribers read the state back from
    the store, which stays the single source of truth.
    """

    def __init__(self, redis: Redis):
        self.redis = redis

    async def publish(self, session_id: UUID) -> None:
        try:
            await self.redis.publish(channel_name(session_id), str(session_id))
        except RedisError as e:
            # Push is best effort, the HTTP response carries the state too.
            logging.warning(f"Failed to publish state change of {session_id}: {e}")
