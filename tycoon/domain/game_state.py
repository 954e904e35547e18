"""Immutable game state of one player.

Every transition builds a new GameState; nothing is mutated in place, so a
previous instance can be kept as a rollback snapshot for free.
"""

from dataclasses import dataclass, field, replace
from typing import Dict


@dataclass(frozen=True)
class GameState:
    """Authoritative progress of a session. Money fields are centimes."""

    money: int
    total_visitors: int
    visitors_towards_sale: float
    total_sales: float
    total_revenue: int
    buildings: Dict[str, int] = field(default_factory=dict)  # building id -> owned
    verticals: Dict[str, int] = field(default_factory=dict)  # vertical id -> level, 0 = locked
    timestamp: int = 0

    def owned(self, building_id: str) -> int:
        return self.buildings.get(building_id, 0)

    def level(self, vertical_id: str) -> int:
        return self.verticals.get(vertical_id, 0)

    def is_unlocked(self, vertical_id: str) -> bool:
        return self.level(vertical_id) > 0

    def with_purchase(self, building_id: str, cost: int, timestamp: int) -> "GameState":
        buildings = dict(self.buildings)
        buildings[building_id] = buildings.get(building_id, 0) + 1
        return replace(self, money=self.money - cost, buildings=buildings, timestamp=timestamp)

    def with_upgrade(self, vertical_id: str, cost: int, timestamp: int) -> "GameState":
        verticals = dict(self.verticals)
        verticals[vertical_id] = verticals.get(vertical_id, 0) + 1
        return replace(self, money=self.money - cost, verticals=verticals, timestamp=timestamp)
