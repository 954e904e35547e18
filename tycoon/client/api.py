"""HTTP client for the game API.

The session cookie issued by the server is kept by the underlying
httpx.AsyncClient, so one GameApiClient is one player.
"""

import logging
from typing import List, Optional

import httpx

from tycoon.models.dc_models import (
    ActionModel,
    StateResponseModel,
    SyncRequestModel,
    SyncResponseModel,
    TickRequestModel,
)

API_PREFIX = "/api/game"


class GameApiClient:
    def __init__(self, base_url: str = "", client: Optional[httpx.AsyncClient] = None, timeout: float = 10):
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict:
        r = await self.client.request(method, f"{API_PREFIX}{path}", json=payload)
        r.raise_for_status()
        return r.json()

    async def fetch_state(self) -> StateResponseModel:
        return StateResponseModel.model_validate(await self._request("GET", "/state"))

    async def sync_actions(self, actions: List[ActionModel]) -> SyncResponseModel:
        """Send queued actions in order

        Args:
            actions (List[ActionModel]): Actions in the order they were played

        Returns:
            SyncResponseModel: Authoritative state plus the rejected action ids

        Raises:
            httpx.HTTPError: Transport failure or non-2xx answer
        """
        payload = SyncRequestModel(actions=actions).model_dump(by_alias=True)
        logging.debug(f"Sync payload: {payload}")
        return SyncResponseModel.model_validate(await self._request("POST", "/sync", payload))

    async def send_tick(self, elapsed_ms: int) -> StateResponseModel:
        payload = TickRequestModel(elapsed_ms=elapsed_ms).model_dump(by_alias=True)
        return StateResponseModel.model_validate(await self._request("POST", "/tick", payload))

    async def reset_game(self) -> StateResponseModel:
        return StateResponseModel.model_validate(await self._request("POST", "/reset"))

    async def aclose(self) -> None:
        await self.client.aclose()
