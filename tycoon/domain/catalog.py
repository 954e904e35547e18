"""Static catalog of buildings and verticals.

Buildings produce passive visitors. Verticals are the travel categories the
visitors buy into. The catalog is read-only once built.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class Building:
    id: str
    name: str
    base_cost: int
    production: float  # visitors per second, per unit owned
    description: str = ""
    icon: str = "🏢"


@dataclass(frozen=True)
class Vertical:
    id: str
    name: str
    base_price: int
    attractivity: int
    margin_growth_factor: float
    unlock_cost: int = 0
    description: str = ""
    icon: str = "✈️"

    def starts_unlocked(self) -> bool:
        return self.unlock_cost == 0


class Catalog:
    """Lookup of purchasable items by id, preserving config order."""

    def __init__(self, buildings: Iterable[Building], verticals: Iterable[Vertical]):
        self._buildings: Dict[str, Building] = {}
        self._verticals: Dict[str, Vertical] = {}
        for building in buildings:
            if building.id in self._buildings:
                raise ValueError(f"Duplicate building id: {building.id}")
            self._buildings[building.id] = building
        for vertical in verticals:
            if vertical.id in self._verticals:
                raise ValueError(f"Duplicate vertical id: {vertical.id}")
            self._verticals[vertical.id] = vertical

    @property
    def buildings(self) -> List[Building]:
        return list(self._buildings.values())

    @property
    def verticals(self) -> List[Vertical]:
        return list(self._verticals.values())

    def find_building(self, building_id: str) -> Optional[Building]:
        return self._buildings.get(building_id)

    def find_vertical(self, vertical_id: str) -> Optional[Vertical]:
        return self._verticals.get(vertical_id)

    def starting_unlocked_verticals(self) -> List[Vertical]:
        return [v for v in self._verticals.values() if v.starts_unlocked()]
