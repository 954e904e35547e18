import asyncio

import pytest
from uuid6 import uuid7

from tycoon.domain.actions import RejectReason
from tycoon.models.dc_models import ActionModel
from tycoon.services.game_service import GameService
from tycoon.services.game_store import InMemoryGameStateRepository


class RecordingPublisher:
    def __init__(self):
        self.published = []

    async def publish(self, session_id):
        self.published.append(session_id)


class FlakyRepository(InMemoryGameStateRepository):
    def __init__(self):
        super().__init__()
        self.failing = False

    async def load_state(self, session_id):
        if self.failing:
            raise ConnectionError("database unavailable")
        return await super().load_state(session_id)


def make_service(engine):
    publisher = RecordingPublisher()
    service = GameService(engine, InMemoryGameStateRepository(), publisher=publisher, starting_money=10000)
    return service, publisher


class TestGameService:
    """Load, apply, save and announce per session"""

    def test_get_state_initializes_and_saves(self, engine):
        """An unknown session starts a new game"""
        service, publisher = make_service(engine)
        session_id = uuid7()

        snapshot = asyncio.run(service.get_state(session_id))

        assert snapshot.state.money == 10000
        assert snapshot.computed.total_attractivity == 100
        assert service.repository.states[session_id] == snapshot.state
        assert publisher.published == []

    def test_sync_applies_in_order_and_reports_rejections(self, engine):
        service, publisher = make_service(engine)
        session_id = uuid7()
        actions = [
            ActionModel(id="1", type="CLICK", payload={"count": 100}),
            ActionModel(id="2", type="BUY_BUILDING", payload={"buildingId": "flyers"}),
            ActionModel(id="3", type="UPGRADE_VERTICAL", payload={"verticalId": "mediterranean"}),
            ActionModel(id="4", type="TELEPORT", payload={}),
        ]

        snapshot = asyncio.run(service.sync(session_id, actions))

        assert snapshot.state.money == 25000 - 1500
        assert snapshot.state.owned("flyers") == 1
        assert [r.action_id for r in snapshot.rejected] == ["4", "3"]
        assert [r.code for r in snapshot.rejected] == [RejectReason.INVALID_ACTION, RejectReason.INSUFFICIENT_FUNDS]
        assert service.repository.states[session_id] == snapshot.state
        assert publisher.published == [session_id]

    def test_tick_in_range(self, engine):
        service, _ = make_service(engine)
        session_id = uuid7()

        async def scenario():
            await service.sync(session_id, [ActionModel(id="1", type="BUY_BUILDING", payload={"buildingId": "seo_basic"})])
            return await service.tick(session_id, 3000)

        assert asyncio.run(scenario()).state.total_visitors == 3

    def test_tick_out_of_range_is_ignored(self, engine):
        """Oversized ticks change nothing and are not saved"""
        service, publisher = make_service(engine)
        session_id = uuid7()

        async def scenario():
            await service.sync(session_id, [ActionModel(id="1", type="BUY_BUILDING", payload={"buildingId": "seo_basic"})])
            before = await service.get_state(session_id)
            after = await service.tick(session_id, 60000)
            return before, after

        before, after = asyncio.run(scenario())
        assert after.state == before.state
        assert len(publisher.published) == 1

    def test_reset(self, engine):
        service, _ = make_service(engine)
        session_id = uuid7()

        async def scenario():
            await service.sync(session_id, [ActionModel(id="1", type="CLICK", payload={"count": 100})])
            return await service.reset(session_id)

        snapshot = asyncio.run(scenario())
        assert snapshot.state.money == 10000
        assert snapshot.state.total_visitors == 0

    def test_concurrent_syncs_do_not_lose_updates(self, engine):
        """Requests of one session are serialized"""
        service, _ = make_service(engine)
        session_id = uuid7()

        async def scenario():
            click = [ActionModel(id=None, type="CLICK", payload={"count": 10})]
            await asyncio.gather(*(service.sync(session_id, click) for _ in range(20)))
            return await service.get_state(session_id)

        assert asyncio.run(scenario()).state.total_visitors == 200

    def test_delete_expired_sessions(self, engine):
        service, _ = make_service(engine)

        async def scenario():
            await service.get_state(uuid7())
            return await service.delete_expired_sessions(ttl_hours=0)

        assert asyncio.run(scenario()) == 1

    def test_failed_load_keeps_stored_progress(self, engine):
        """A storage error fails the request instead of starting a new game"""
        repository = FlakyRepository()
        service = GameService(engine, repository, publisher=None, starting_money=10000)
        session_id = uuid7()

        async def scenario():
            await service.sync(session_id, [ActionModel(id="a1", type="CLICK", payload={"count": 100})])
            repository.failing = True
            with pytest.raises(ConnectionError):
                await service.get_state(session_id)
            with pytest.raises(ConnectionError):
                await service.sync(session_id, [ActionModel(id="a2", type="CLICK", payload={"count": 1})])
            repository.failing = False
            return await service.get_state(session_id)

        snapshot = asyncio.run(scenario())
        assert snapshot.state.money == 25000
        assert snapshot.state.total_visitors == 100
