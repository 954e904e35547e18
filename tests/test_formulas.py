"""
Unit tests for FormulaSet

Tests cover:
- Building cost growth
- Vertical upgrade cost and price per level
- Commission and buyer conversion
"""

import math


class TestFormulaSet:
    """Cost, price and commission formulas"""

    def test_building_cost_first_unit_is_base_cost(self, formulas):
        """Owning nothing, the next unit costs the base cost"""
        assert formulas.building_cost(1500, 0) == 1500

    def test_building_cost_grows_exponentially_and_floors(self, formulas):
        """1000 * 1.15^2 = 1322.49... is floored to 1322"""
        assert formulas.building_cost(1000, 2) == 1322

    def test_building_cost_is_monotonic(self, formulas):
        """Each extra unit owned never makes the next one cheaper"""
        costs = [formulas.building_cost(10000, owned) for owned in range(30)]
        assert costs == sorted(costs)

    def test_vertical_unlock_costs_flat_unlock_price(self, formulas):
        """Level 0 -> 1 costs exactly unlock_cost"""
        assert formulas.vertical_upgrade_cost(10000, 0) == 10000

    def test_vertical_upgrade_cost_grows_per_level(self, formulas):
        """Level N -> N+1 costs unlock_cost * 1.25^N"""
        assert formulas.vertical_upgrade_cost(10000, 1) == 12500
        assert formulas.vertical_upgrade_cost(10000, 2) == 15625

    def test_vertical_upgrade_cost_is_monotonic(self, formulas):
        costs = [formulas.vertical_upgrade_cost(50000, level) for level in range(20)]
        assert costs == sorted(costs)

    def test_vertical_price_locked_is_zero(self, formulas):
        """A locked vertical sells nothing"""
        assert formulas.vertical_price_at_level(15000, 1.08, 0) == 0

    def test_vertical_price_by_level(self, formulas):
        """Level 1 sells at base price, each level multiplies by the margin factor"""
        assert formulas.vertical_price_at_level(15000, 1.08, 1) == 15000
        assert formulas.vertical_price_at_level(15000, 1.08, 2) == 16200
        assert formulas.vertical_price_at_level(15000, 1.08, 3) == math.floor(15000 * 1.08**2)

    def test_commission_is_floored(self, formulas):
        """10% of 999 is 99.9, floored to 99"""
        assert formulas.commission(999) == 99
        assert formulas.commission(150000) == 15000
        assert formulas.commission(0) == 0

    def test_buyers_keep_fractions(self, formulas):
        """Conversion is not rounded"""
        assert formulas.buyers_from_visitors(100) == 10.0
        assert abs(formulas.buyers_from_visitors(5) - 0.5) < 1e-9
