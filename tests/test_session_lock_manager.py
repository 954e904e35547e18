import asyncio

from uuid6 import uuid7

from tycoon.services.session_lock_manager import SessionLockManager


async def hold_until(locks, session_id, release, entered):
    async with locks.hold(session_id):
        entered.append(session_id)
        await release.wait()


class TestSessionLockManager:
    """Per-session locks and their cleanup"""

    def test_one_holder_at_a_time(self):
        locks = SessionLockManager()
        session_id = uuid7()

        async def scenario():
            release = asyncio.Event()
            entered = []
            first = asyncio.create_task(hold_until(locks, session_id, release, entered))
            second = asyncio.create_task(hold_until(locks, session_id, release, entered))
            await asyncio.sleep(0.01)
            inside = len(entered)
            release.set()
            await asyncio.gather(first, second)
            return inside, len(entered)

        assert asyncio.run(scenario()) == (1, 2)

    def test_cleanup_keeps_locks_with_waiters(self):
        """A lock released to a queued waiter is still in use"""
        locks = SessionLockManager()
        session_id = uuid7()

        async def scenario():
            release_first, release_second = asyncio.Event(), asyncio.Event()
            entered = []
            first = asyncio.create_task(hold_until(locks, session_id, release_first, entered))
            await asyncio.sleep(0)
            second = asyncio.create_task(hold_until(locks, session_id, release_second, entered))
            await asyncio.sleep(0)
            lock = locks.locks[session_id]

            while_held = await locks.cleanup_idle()
            release_first.set()
            await first
            # The waiter may not have taken the lock yet
            after_release = await locks.cleanup_idle()
            kept = locks.locks.get(session_id) is lock

            release_second.set()
            await second
            after_all = await locks.cleanup_idle()
            return while_held, after_release, kept, after_all

        while_held, after_release, kept, after_all = asyncio.run(scenario())
        assert while_held == 0
        assert after_release == 0
        assert kept
        assert after_all == 1

    def test_cleanup_on_idle_manager(self):
        locks = SessionLockManager()

        async def scenario():
            async with locks.hold(uuid7()):
                pass
            return await locks.cleanup_idle(), locks.locks, locks.users

        assert asyncio.run(scenario()) == (1, {}, {})
