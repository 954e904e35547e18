"""Player actions and their outcomes.

Action is a closed union; GameEngine.apply dispatches on it exhaustively.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from tycoon.domain.game_state import GameState


class ActionType(str, Enum):
    CLICK = "CLICK"
    BUY_BUILDING = "BUY_BUILDING"
    UPGRADE_VERTICAL = "UPGRADE_VERTICAL"


class RejectReason(str, Enum):
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    UNKNOWN_ITEM = "UNKNOWN_ITEM"
    INVALID_ACTION = "INVALID_ACTION"  # boundary parsing failed, never produced by the engine


@dataclass(frozen=True)
class Click:
    count: int = 1
    id: Optional[str] = None


@dataclass(frozen=True)
class BuyBuilding:
    building_id: str
    id: Optional[str] = None


@dataclass(frozen=True)
class UpgradeVertical:
    vertical_id: str
    id: Optional[str] = None


Action = Union[Click, BuyBuilding, UpgradeVertical]


@dataclass(frozen=True)
class ActionOutcome:
    """Result of applying one action.

    On rejection `state` is the input state, untouched.
    """

    state: GameState
    rejection: Optional[RejectReason] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


def action_type(action: Action) -> ActionType:
    if isinstance(action, Click):
        return ActionType.CLICK
    if isinstance(action, BuyBuilding):
        return ActionType.BUY_BUILDING
    if isinstance(action, UpgradeVertical):
        return ActionType.UPGRADE_VERTICAL
    raise TypeError(f"Unsupported action: {action!r}")
