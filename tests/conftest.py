import pytest

from tycoon.config_loader import GameConfig
from tycoon.domain.catalog import Building, Catalog, Vertical
from tycoon.domain.engine import GameEngine
from tycoon.domain.formulas import FormulaSet

FIXED_NOW = 1700000000


def fixed_clock() -> float:
    return float(FIXED_NOW)


@pytest.fixture
def formulas() -> FormulaSet:
    return FormulaSet(
        cost_growth_rate=1.15,
        visitors_per_click=1,
        sale_trigger_threshold=100,
        conversion_rate=0.10,
        base_commission_rate=0.10,
        vertical_upgrade_growth_rate=1.25,
        tick_interval_ms=1000,
    )


@pytest.fixture
def buildings():
    return [
        Building(id="flyers", name="Flyers", base_cost=1500, production=0.1),
        Building(id="seo_basic", name="SEO", base_cost=10000, production=1.0),
    ]


@pytest.fixture
def verticals():
    return [
        Vertical(
            id="weekend_france",
            name="Week-end France",
            base_price=15000,
            attractivity=100,
            margin_growth_factor=1.08,
            unlock_cost=0,
        ),
        Vertical(
            id="mediterranean",
            name="Mediterranean",
            base_price=80000,
            attractivity=60,
            margin_growth_factor=1.07,
            unlock_cost=50000,
        ),
    ]


@pytest.fixture
def game_config(formulas, buildings, verticals) -> GameConfig:
    return GameConfig(formulas=formulas, buildings=buildings, verticals=verticals)


@pytest.fixture
def catalog(buildings, verticals) -> Catalog:
    return Catalog(buildings, verticals)


@pytest.fixture
def engine(catalog, formulas) -> GameEngine:
    return GameEngine(catalog, formulas, clock=fixed_clock)
