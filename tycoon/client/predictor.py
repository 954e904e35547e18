"""Client-side prediction with server reconciliation.

ClientPredictor mirrors GameEngine locally so actions show up at once, queues
them, and syncs the queue with the server after a short debounce. The server
stays authoritative: each response replaces the local state as a whole.
If a sync fails in transport, the local state goes back to where the sent
window started and a fresh GET /state is fetched on the next debounce window.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import List, Optional

import httpx
from uuid6 import uuid7

from tycoon.client.api import GameApiClient
from tycoon.config_loader import GameConfig
from tycoon.converter import DataConverter
from tycoon.domain.action_processor import rejection_message
from tycoon.domain.actions import Action, BuyBuilding, Click, UpgradeVertical
from tycoon.domain.engine import DEFAULT_STARTING_MONEY, ComputedValues, GameEngine
from tycoon.domain.game_rules import MAX_TICK_ELAPSED_MS, clamp_click_count
from tycoon.domain.game_state import GameState
from tycoon.models.dc_models import StateModel

DEFAULT_SYNC_DEBOUNCE_MS = 500
ERROR_DISPLAY_SECONDS = 3

data_converter = DataConverter()


@dataclass(frozen=True)
class PendingAction:
    action: Action
    snapshot: GameState  # local state right before the action


class ClientPredictor:
    def __init__(self, api: GameApiClient, sync_debounce_ms: int = DEFAULT_SYNC_DEBOUNCE_MS):
        self.api = api
        self.sync_debounce_ms = sync_debounce_ms

        self.config: Optional[GameConfig] = None
        self.engine: Optional[GameEngine] = None
        self.state: Optional[GameState] = None
        self.computed: Optional[ComputedValues] = None

        self.pending: List[PendingAction] = []
        self.is_syncing = False
        self.is_reconciling = False
        self.error_message: Optional[str] = None

        self._flush_handle: Optional[asyncio.TimerHandle] = None
        self._error_handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def is_initialized(self) -> bool:
        return self.state is not None

    # ---- lifecycle -----------------------------------------------------------

    async def init(self, initial_config: Optional[GameConfig] = None) -> None:
        """Load config and state from the server

        Args:
            initial_config (Optional[GameConfig]): Config to play offline with when the server cannot be reached

        Raises:
            httpx.HTTPError: Server unreachable and no initial_config given
        """
        try:
            response = await self.api.fetch_state()
        except httpx.HTTPError as e:
            logging.error(f"Failed to initialize game: {e}")
            if initial_config is None:
                raise
            self._show_error("Cannot reach the game server")
            self._use_config(initial_config)
            self._set_state(self.engine.initialize(DEFAULT_STARTING_MONEY))
            return

        config = data_converter.model_to_config(response.config) if response.config else initial_config
        if config is None:
            raise RuntimeError("Server answered without a game config")
        self._use_config(config)
        self._apply_server_state(response.state)
        logging.info("Game state loaded from server")

    def start(self) -> None:
        """Start the passive tick loop. init() must have completed."""
        self._require_ready()
        if self._tick_task is None:
            self._tick_task = asyncio.get_running_loop().create_task(self._tick_loop())

    async def close(self) -> None:
        for handle in (self._flush_handle, self._error_handle):
            if handle is not None:
                handle.cancel()
        self._flush_handle = None
        self._error_handle = None

        tasks = list(self._tasks)
        if self._tick_task is not None:
            tasks.append(self._tick_task)
            self._tick_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # ---- player actions ------------------------------------------------------

    def click(self, count: int = 1) -> bool:
        return self._play(Click(count=clamp_click_count(count)))

    def buy_building(self, building_id: str) -> bool:
        return self._play(BuyBuilding(building_id=building_id))

    def upgrade_vertical(self, vertical_id: str) -> bool:
        return self._play(UpgradeVertical(vertical_id=vertical_id))

    def _play(self, action: Action) -> bool:
        """Apply one action locally and queue it for the server

        Returns:
            bool: False when the local engine rejects the action; it is then not queued
        """
        self._require_ready()
        outcome = self.engine.apply(self.state, action)
        if not outcome.accepted:
            logging.debug(f"Locally rejected {action!r}: {outcome.rejection.value}")
            return False

        self.pending.append(PendingAction(action=replace(action, id=str(uuid7())), snapshot=self.state))
        self._set_state(outcome.state)
        self._schedule_flush()
        return True

    # ---- sync ----------------------------------------------------------------

    def _schedule_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
        loop = asyncio.get_running_loop()
        self._flush_handle = loop.call_later(self.sync_debounce_ms / 1000, self._spawn_flush)

    def _spawn_flush(self) -> None:
        self._flush_handle = None
        task = asyncio.get_running_loop().create_task(self.flush())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def flush(self) -> None:
        """Send the queued actions now, or resync first after a failed sync.

        A call while a request is in flight does nothing; the queue is
        flushed again once that request finishes.
        """
        if self.is_syncing:
            return
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

        self.is_syncing = True
        try:
            if self.is_reconciling:
                await self._resync()
            elif self.pending:
                await self._sync_window()
        finally:
            self.is_syncing = False

        if self.is_reconciling:
            self._schedule_flush()
        elif self.pending:
            await self.flush()

    async def _sync_window(self) -> None:
        window = self.pending
        self.pending = []
        try:
            response = await self.api.sync_actions([data_converter.action_to_model(p.action) for p in window])
        except httpx.HTTPError as e:
            logging.error(f"Sync of {len(window)} actions failed, rolling back: {e}")
            self._rollback(window)
            return

        self._apply_server_state(response.state)
        if response.errors:
            logging.info(f"Server rejected actions {response.rejected_action_ids}")
            self._show_error(response.errors[0].message)

    def _rollback(self, window: List[PendingAction]) -> None:
        # Actions queued while the request was in flight build on the same
        # rolled-back state, so they are dropped with it.
        self.pending = []
        self._set_state(window[0].snapshot)
        self.is_reconciling = True
        self._show_error("Sync failed, reloading the game state")

    async def _resync(self) -> None:
        try:
            response = await self.api.fetch_state()
        except httpx.HTTPError as e:
            logging.error(f"Resync failed, retrying: {e}")
            return
        self.is_reconciling = False
        self._apply_server_state(response.state)
        logging.info("Resynchronized with the server")

    # ---- passive income ------------------------------------------------------

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        last_tick = loop.time()
        while True:
            await asyncio.sleep(self.engine.formulas.tick_interval_ms / 1000)
            now = loop.time()
            elapsed_ms = int((now - last_tick) * 1000)
            last_tick = now
            await self.tick(elapsed_ms)

    async def tick(self, elapsed_ms: int) -> None:
        """Report elapsed time to the server when there is passive income"""
        self._require_ready()
        if elapsed_ms <= 0 or self.engine.visitors_per_second(self.state) <= 0:
            return
        try:
            response = await self.api.send_tick(min(elapsed_ms, MAX_TICK_ELAPSED_MS))
        except httpx.HTTPError as e:
            logging.warning(f"Tick failed: {e}")
            return
        self._apply_server_state(response.state)

    # ---- state ---------------------------------------------------------------

    def _use_config(self, config: GameConfig) -> None:
        self.config = config
        self.engine = GameEngine(config.catalog(), config.formulas)

    def _apply_server_state(self, state_model: StateModel) -> None:
        self._set_state(data_converter.model_to_state(state_model))

    def _set_state(self, state: GameState) -> None:
        self.state = state
        self.computed = self.engine.computed_values(state)

    def _show_error(self, message: str) -> None:
        self.error_message = message
        if self._error_handle is not None:
            self._error_handle.cancel()
        self._error_handle = asyncio.get_running_loop().call_later(ERROR_DISPLAY_SECONDS, self._clear_error)

    def _clear_error(self) -> None:
        self.error_message = None
        self._error_handle = None

    def _require_ready(self) -> None:
        if self.engine is None or self.state is None:
            raise RuntimeError("ClientPredictor.init() has not completed")
