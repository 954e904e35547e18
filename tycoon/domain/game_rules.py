"""Boundary rules that sit between the transport and the engine.

This module is organized by *concept* (input limits), not by endpoint.

Rule of thumb:
- OK: clamping, validation, turning raw payloads into typed actions.
- Not OK: touching DB sessions, Redis, FastAPI, datetime.now(), etc.

Anything rejected here never reaches GameEngine.
"""

from typing import Any, Mapping, Optional

from tycoon.domain.actions import Action, ActionType, BuyBuilding, Click, UpgradeVertical

MIN_CLICKS_PER_ACTION = 1
MAX_CLICKS_PER_ACTION = 100

# Anti-cheat cap on a single passive tick.
MAX_TICK_ELAPSED_MS = 10000


def clamp_click_count(count: Any) -> int:
    """Clamp a click count into [1, 100]; unreadable counts become 1."""
    try:
        value = int(count)
    except OverflowError:
        # +-inf
        return MAX_CLICKS_PER_ACTION if count > 0 else MIN_CLICKS_PER_ACTION
    except (TypeError, ValueError):
        return MIN_CLICKS_PER_ACTION
    return max(MIN_CLICKS_PER_ACTION, min(MAX_CLICKS_PER_ACTION, value))


def accept_tick_elapsed(elapsed_ms: Any) -> Optional[int]:
    """Return the elapsed time when it is in (0, 10000] ms, else None.

    Out-of-range ticks are ignored, not clamped.
    """
    try:
        value = int(elapsed_ms)
    except (TypeError, ValueError, OverflowError):
        return None
    if value <= 0 or value > MAX_TICK_ELAPSED_MS:
        return None
    return value


def parse_action(action_id: Optional[str], action_type: Any, payload: Optional[Mapping[str, Any]]) -> Optional[Action]:
    """Build a typed action from a raw transport action.

    Returns None for an unknown type or a payload missing its item id.
    """
    payload = payload or {}
    try:
        kind = ActionType(action_type)
    except ValueError:
        return None

    if kind is ActionType.CLICK:
        return Click(count=clamp_click_count(payload.get("count", 1)), id=action_id)
    if kind is ActionType.BUY_BUILDING:
        building_id = payload.get("buildingId")
        if not isinstance(building_id, str) or not building_id:
            return None
        return BuyBuilding(building_id=building_id, id=action_id)
    if kind is ActionType.UPGRADE_VERTICAL:
        vertical_id = payload.get("verticalId")
        if not isinstance(vertical_id, str) or not vertical_id:
            return None
        return UpgradeVertical(vertical_id=vertical_id, id=action_id)
    return None
