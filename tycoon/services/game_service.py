"""Use cases behind the game API.

Each use case runs under the session's lock: load (or initialize) the state,
apply the engine, save, then announce the change.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence
from uuid import UUID

from tycoon.domain.action_processor import ActionProcessor, BatchResult, RejectedAction, rejection_message
from tycoon.domain.actions import Action, RejectReason
from tycoon.domain.engine import ComputedValues, GameEngine
from tycoon.domain.game_rules import accept_tick_elapsed, parse_action
from tycoon.domain.game_state import GameState
from tycoon.models.dc_models import ActionModel
from tycoon.services.game_store import GameStateRepository
from tycoon.services.publisher import StatePublisher
from tycoon.services.session_lock_manager import SessionLockManager


@dataclass(frozen=True)
class GameSnapshot:
    state: GameState
    computed: ComputedValues
    rejected: List[RejectedAction] = field(default_factory=list)


class GameService:
    def __init__(
        self,
        engine: GameEngine,
        repository: GameStateRepository,
        publisher: Optional[StatePublisher] = None,
        starting_money: int = 10000,
    ):
        self.engine = engine
        self.processor = ActionProcessor(engine)
        self.repository = repository
        self.publisher = publisher
        self.starting_money = starting_money
        self.locks = SessionLockManager()

    def snapshot(self, state: GameState, rejected: Sequence[RejectedAction] = ()) -> GameSnapshot:
        return GameSnapshot(state=state, computed=self.engine.computed_values(state), rejected=list(rejected))

    async def _load_or_create(self, session_id: UUID) -> GameState:
        state = await self.repository.load_state(session_id)
        if state is None:
            logging.info(f"Initializing new game state for session {session_id}")
            state = self.engine.initialize(self.starting_money)
            await self.repository.save_state(session_id, state)
        return state

    async def _save(self, session_id: UUID, state: GameState) -> None:
        await self.repository.save_state(session_id, state)
        if self.publisher is not None:
            await self.publisher.publish(session_id)

    async def get_state(self, session_id: UUID) -> GameSnapshot:
        async with self.locks.hold(session_id):
            state = await self._load_or_create(session_id)
        return self.snapshot(state)

    async def sync(self, session_id: UUID, actions: Sequence[ActionModel]) -> GameSnapshot:
        """Apply a client batch in order and persist the final state

        Args:
            session_id (UUID): To identify the game session
            actions (Sequence[ActionModel]): Raw actions from the client, in client order

        Returns:
            GameSnapshot: Final state, computed values and every rejected action
        """
        parsed: List[Action] = []
        invalid: List[RejectedAction] = []
        for raw in actions:
            action = parse_action(raw.id, raw.type, raw.payload)
            if action is None:
                logging.warning(f"Dropping invalid action {raw.id} of type {raw.type!r}")
                invalid.append(
                    RejectedAction(
                        action_id=raw.id,
                        code=RejectReason.INVALID_ACTION,
                        message=rejection_message(None, RejectReason.INVALID_ACTION),
                    )
                )
            else:
                parsed.append(action)

        async with self.locks.hold(session_id):
            state = await self._load_or_create(session_id)
            result: BatchResult = self.processor.apply_batch(state, parsed)
            await self._save(session_id, result.state)

        logging.debug(
            f"Session {session_id}: applied {len(parsed)} actions, "
            f"{len(result.rejected)} rejected, {len(invalid)} invalid"
        )
        return self.snapshot(result.state, invalid + result.rejected)

    async def tick(self, session_id: UUID, elapsed_ms: float) -> GameSnapshot:
        elapsed = accept_tick_elapsed(elapsed_ms)
        async with self.locks.hold(session_id):
            state = await self._load_or_create(session_id)
            if elapsed is None:
                logging.warning(f"Ignoring out-of-range tick of {elapsed_ms} ms for session {session_id}")
            else:
                state = self.engine.tick(state, elapsed)
                await self._save(session_id, state)
        return self.snapshot(state)

    async def reset(self, session_id: UUID) -> GameSnapshot:
        async with self.locks.hold(session_id):
            state = self.engine.initialize(self.starting_money)
            await self._save(session_id, state)
        logging.info(f"Reset game state of session {session_id}")
        return self.snapshot(state)

    async def delete_expired_sessions(self, ttl_hours: int) -> int:
        deleted = await self.repository.delete_expired(datetime.now() - timedelta(hours=ttl_hours))
        await self.locks.cleanup_idle()
        return deleted
