"""Cost, price and commission formulas.

The server engine and the client predictor both compute through this module,
so a prediction and the authoritative result agree bit-for-bit for the same
inputs. Any change here changes both sides at once.

All monetary values are integers in minor currency units (centimes).
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class FormulaSet:
    """Game coefficients loaded once from formulas.yaml."""

    cost_growth_rate: float
    visitors_per_click: int
    sale_trigger_threshold: int
    conversion_rate: float
    base_commission_rate: float
    vertical_upgrade_growth_rate: float
    tick_interval_ms: int

    def building_cost(self, base_cost: int, owned: int) -> int:
        """Price of the next unit of a building.

        Formula: base_cost * cost_growth_rate ** owned, floored.
        """
        return math.floor(base_cost * self.cost_growth_rate**owned)

    def vertical_upgrade_cost(self, unlock_cost: int, current_level: int) -> int:
        """Price of the next level of a vertical.

        Level 0 -> 1 costs the flat unlock price. Level N -> N+1 costs
        unlock_cost * vertical_upgrade_growth_rate ** N, floored.
        """
        if current_level == 0:
            return unlock_cost
        return math.floor(unlock_cost * self.vertical_upgrade_growth_rate**current_level)

    @staticmethod
    def vertical_price_at_level(base_price: int, margin_growth_factor: float, level: int) -> int:
        """Sale price of one trip of a vertical; a locked vertical sells nothing."""
        if level < 1:
            return 0
        return math.floor(base_price * margin_growth_factor ** (level - 1))

    def commission(self, sale_value: int) -> int:
        return math.floor(sale_value * self.base_commission_rate)

    def buyers_from_visitors(self, visitors: float) -> float:
        # Fractional buyers are kept on purpose, they feed the market split.
        return visitors * self.conversion_rate
