"""Server-authoritative game calculator.

GameEngine is the single source of truth for every economic transition:
clicks, passive ticks, purchases and the sales funnel. It is a pure reducer
over GameState; the only impure input is the injected clock used for the
advisory timestamp.

All monetary values are in centimes (1 EUR = 100 centimes).
"""

import math
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List

from tycoon.domain.actions import (
    Action,
    ActionOutcome,
    BuyBuilding,
    Click,
    RejectReason,
    UpgradeVertical,
)
from tycoon.domain.catalog import Catalog, Vertical
from tycoon.domain.formulas import FormulaSet
from tycoon.domain.game_state import GameState

DEFAULT_STARTING_MONEY = 10000  # 100 EUR


@dataclass(frozen=True)
class VerticalRevenue:
    id: str
    market_share: float  # percent
    sales: float
    revenue: int
    current_price: int


@dataclass(frozen=True)
class SaleBatchResult:
    sales_count: float
    total_revenue: int
    commission: int


@dataclass(frozen=True)
class MarketShareEntry:
    id: str
    name: str
    icon: str
    market_share: float  # percent
    level: int
    current_price: int


@dataclass(frozen=True)
class BuildingCost:
    cost: int
    can_afford: bool


@dataclass(frozen=True)
class VerticalCost:
    cost: int
    can_afford: bool
    current_price: int


@dataclass(frozen=True)
class ComputedValues:
    """Values derived from a state for display. Never persisted."""

    total_attractivity: int
    visitors_per_second: float
    expected_revenue_per_batch: int
    sale_progress: float
    unlocked_verticals_count: int
    market_distribution: List[MarketShareEntry] = field(default_factory=list)
    building_costs: Dict[str, BuildingCost] = field(default_factory=dict)
    vertical_costs: Dict[str, VerticalCost] = field(default_factory=dict)


class GameEngine:
    def __init__(
        self,
        catalog: Catalog,
        formulas: FormulaSet,
        clock: Callable[[], float] = time.time,
    ):
        self.catalog = catalog
        self.formulas = formulas
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    # ---- costs & prices ------------------------------------------------------

    def vertical_price(self, vertical: Vertical, level: int) -> int:
        return self.formulas.vertical_price_at_level(
            vertical.base_price, vertical.margin_growth_factor, level
        )

    # ---- production ----------------------------------------------------------

    def visitors_per_second(self, state: GameState) -> float:
        total = 0.0
        for building in self.catalog.buildings:
            total += building.production * state.owned(building.id)
        return total

    def total_attractivity(self, state: GameState) -> int:
        return sum(v.attractivity for v in self.catalog.verticals if state.is_unlocked(v.id))

    # ---- sales funnel --------------------------------------------------------

    def revenue_distribution(self, buyers: float, state: GameState) -> List[VerticalRevenue]:
        """Split one buyer pool across unlocked verticals by attractivity.

        Each vertical draws from the same pool, so iteration order only
        affects the order of the returned list.
        """
        total_attractivity = self.total_attractivity(state)
        if total_attractivity == 0:
            return []

        distribution = []
        for vertical in self.catalog.verticals:
            level = state.level(vertical.id)
            if level == 0:
                continue
            market_share = vertical.attractivity / total_attractivity
            sales = buyers * market_share
            current_price = self.vertical_price(vertical, level)
            distribution.append(
                VerticalRevenue(
                    id=vertical.id,
                    market_share=market_share * 100,
                    sales=sales,
                    revenue=math.floor(sales * current_price),
                    current_price=current_price,
                )
            )
        return distribution

    def process_sale_batch(self, visitors: int, state: GameState) -> SaleBatchResult:
        if self.total_attractivity(state) == 0:
            # Nothing to sell into: the visitors are lost.
            return SaleBatchResult(sales_count=0.0, total_revenue=0, commission=0)

        buyers = self.formulas.buyers_from_visitors(visitors)
        distribution = self.revenue_distribution(buyers, state)
        total_sale_value = sum(item.revenue for item in distribution)
        sales_count = sum(item.sales for item in distribution)
        return SaleBatchResult(
            sales_count=sales_count,
            total_revenue=total_sale_value,
            commission=self.formulas.commission(total_sale_value),
        )

    def add_visitors(self, state: GameState, count: float) -> GameState:
        """Feed visitors into the funnel and settle every full sale batch.

        Batches are always exactly one threshold in size and each one is
        floored on its own, whether the visitors arrived in one tick or
        over many clicks.
        """
        threshold = self.formulas.sale_trigger_threshold
        towards_sale = state.visitors_towards_sale + count
        money = state.money
        total_sales = state.total_sales
        total_revenue = state.total_revenue

        while towards_sale >= threshold:
            towards_sale -= threshold
            batch = self.process_sale_batch(threshold, state)
            total_sales += batch.sales_count
            total_revenue += batch.total_revenue
            money += batch.commission

        return replace(
            state,
            money=money,
            total_visitors=state.total_visitors + int(count),
            visitors_towards_sale=towards_sale,
            total_sales=total_sales,
            total_revenue=total_revenue,
            timestamp=self._now(),
        )

    # ---- transitions ---------------------------------------------------------

    def initialize(self, starting_money: int = DEFAULT_STARTING_MONEY) -> GameState:
        return GameState(
            money=starting_money,
            total_visitors=0,
            visitors_towards_sale=0.0,
            total_sales=0.0,
            total_revenue=0,
            buildings={b.id: 0 for b in self.catalog.buildings},
            verticals={v.id: (1 if v.starts_unlocked() else 0) for v in self.catalog.verticals},
            timestamp=self._now(),
        )

    def click(self, state: GameState, count: int = 1) -> GameState:
        return self.add_visitors(state, self.formulas.visitors_per_click * count)

    def tick(self, state: GameState, elapsed_ms: int) -> GameState:
        visitors_per_second = self.visitors_per_second(state)
        if visitors_per_second <= 0:
            return state
        return self.add_visitors(state, visitors_per_second * (elapsed_ms / 1000))

    def buy_building(self, state: GameState, building_id: str) -> ActionOutcome:
        building = self.catalog.find_building(building_id)
        if building is None:
            return ActionOutcome(state, RejectReason.UNKNOWN_ITEM)

        cost = self.formulas.building_cost(building.base_cost, state.owned(building_id))
        if state.money < cost:
            return ActionOutcome(state, RejectReason.INSUFFICIENT_FUNDS)
        return ActionOutcome(state.with_purchase(building_id, cost, self._now()))

    def upgrade_vertical(self, state: GameState, vertical_id: str) -> ActionOutcome:
        vertical = self.catalog.find_vertical(vertical_id)
        if vertical is None:
            return ActionOutcome(state, RejectReason.UNKNOWN_ITEM)

        cost = self.formulas.vertical_upgrade_cost(vertical.unlock_cost, state.level(vertical_id))
        if state.money < cost:
            return ActionOutcome(state, RejectReason.INSUFFICIENT_FUNDS)
        return ActionOutcome(state.with_upgrade(vertical_id, cost, self._now()))

    def apply(self, state: GameState, action: Action) -> ActionOutcome:
        if isinstance(action, Click):
            return ActionOutcome(self.click(state, action.count))
        if isinstance(action, BuyBuilding):
            return self.buy_building(state, action.building_id)
        if isinstance(action, UpgradeVertical):
            return self.upgrade_vertical(state, action.vertical_id)
        raise TypeError(f"Unsupported action: {action!r}")

    # ---- derived values ------------------------------------------------------

    def computed_values(self, state: GameState) -> ComputedValues:
        total_attractivity = self.total_attractivity(state)

        expected_buyers = self.formulas.buyers_from_visitors(self.formulas.sale_trigger_threshold)
        expected_revenue = sum(
            item.revenue for item in self.revenue_distribution(expected_buyers, state)
        )

        market_distribution = []
        vertical_costs = {}
        for vertical in self.catalog.verticals:
            level = state.level(vertical.id)
            current_price = self.vertical_price(vertical, level)
            if level > 0 and total_attractivity > 0:
                market_distribution.append(
                    MarketShareEntry(
                        id=vertical.id,
                        name=vertical.name,
                        icon=vertical.icon,
                        market_share=vertical.attractivity / total_attractivity * 100,
                        level=level,
                        current_price=current_price,
                    )
                )
            cost = self.formulas.vertical_upgrade_cost(vertical.unlock_cost, level)
            vertical_costs[vertical.id] = VerticalCost(
                cost=cost, can_afford=state.money >= cost, current_price=current_price
            )

        building_costs = {}
        for building in self.catalog.buildings:
            cost = self.formulas.building_cost(building.base_cost, state.owned(building.id))
            building_costs[building.id] = BuildingCost(cost=cost, can_afford=state.money >= cost)

        return ComputedValues(
            total_attractivity=total_attractivity,
            visitors_per_second=self.visitors_per_second(state),
            expected_revenue_per_batch=self.formulas.commission(expected_revenue),
            sale_progress=state.visitors_towards_sale / self.formulas.sale_trigger_threshold * 100,
            unlocked_verticals_count=len(market_distribution),
            market_distribution=market_distribution,
            building_costs=building_costs,
            vertical_costs=vertical_costs,
        )
