"""Apply an ordered batch of actions against one state.

Actions run strictly in order, each against the latest accepted state. A
rejected action never aborts the batch; it is recorded and the next action is
tried. There is no batch-level rollback.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from tycoon.domain.actions import (
    Action,
    ActionOutcome,
    BuyBuilding,
    RejectReason,
    UpgradeVertical,
)
from tycoon.domain.engine import GameEngine
from tycoon.domain.game_state import GameState


@dataclass(frozen=True)
class RejectedAction:
    action_id: Optional[str]
    code: RejectReason
    message: str


@dataclass(frozen=True)
class BatchResult:
    state: GameState
    outcomes: List[ActionOutcome] = field(default_factory=list)
    rejected: List[RejectedAction] = field(default_factory=list)

    @property
    def rejected_action_ids(self) -> List[str]:
        return [r.action_id for r in self.rejected if r.action_id is not None]


def rejection_message(action: Optional[Action], reason: RejectReason) -> str:
    if reason is RejectReason.INVALID_ACTION or action is None:
        return "Unknown action or invalid payload"
    if isinstance(action, BuyBuilding):
        item = f"Cannot purchase building: {action.building_id}"
    elif isinstance(action, UpgradeVertical):
        item = f"Cannot upgrade vertical: {action.vertical_id}"
    else:
        item = "Cannot apply action"
    if reason is RejectReason.UNKNOWN_ITEM:
        return f"{item} (unknown item)"
    return f"{item} (insufficient funds)"


class ActionProcessor:
    def __init__(self, engine: GameEngine):
        self.engine = engine

    def apply_batch(self, state: GameState, actions: Sequence[Action]) -> BatchResult:
        outcomes: List[ActionOutcome] = []
        rejected: List[RejectedAction] = []

        for action in actions:
            outcome = self.engine.apply(state, action)
            outcomes.append(outcome)
            if outcome.accepted:
                state = outcome.state
            else:
                rejected.append(
                    RejectedAction(
                        action_id=action.id,
                        code=outcome.rejection,
                        message=rejection_message(action, outcome.rejection),
                    )
                )

        return BatchResult(state=state, outcomes=outcomes, rejected=rejected)
