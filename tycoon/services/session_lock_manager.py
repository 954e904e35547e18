from asyncio import Lock
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from uuid import UUID


class SessionLockManager:
    """Serializes load -> apply -> save per game session.

    Two requests of the same session never interleave; different sessions
    run concurrently.
    """

    def __init__(self):
        self.locks: Dict[UUID, Lock] = {}  # one Lock per session_id
        self.users: Dict[UUID, int] = {}  # holders and waiters per session_id
        self.lock = Lock()  # protects self.locks and self.users

    @asynccontextmanager
    async def hold(self, session_id: UUID) -> AsyncIterator[None]:
        """Hold the Lock of the specified session_id for the duration of the block

        Args:
            session_id (UUID): ID to identify this game session
        """
        async with self.lock:
            session_lock = self.locks.setdefault(session_id, Lock())
            self.users[session_id] = self.users.get(session_id, 0) + 1
        try:
            async with session_lock:
                yield
        finally:
            async with self.lock:
                self.users[session_id] -= 1
                if self.users[session_id] == 0:
                    del self.users[session_id]

    async def cleanup_idle(self) -> int:
        """Delete every Lock nobody holds or waits for

        Returns:
            int: Number of deleted locks
        """
        async with self.lock:
            idle = [sid for sid in self.locks if sid not in self.users]
            for sid in idle:
                del self.locks[sid]
            return len(idle)
