import pytest

from tycoon.domain.catalog import Building, Catalog, Vertical


class TestCatalog:
    """Lookup of buildings and verticals"""

    def test_find_known_items(self, catalog):
        """Items are found by id"""
        assert catalog.find_building("flyers").base_cost == 1500
        assert catalog.find_vertical("mediterranean").unlock_cost == 50000

    def test_find_unknown_items_returns_none(self, catalog):
        """Unknown ids are not an error for lookups"""
        assert catalog.find_building("castle") is None
        assert catalog.find_vertical("moon") is None

    def test_config_order_is_preserved(self, catalog):
        """Lists come back in declaration order"""
        assert [b.id for b in catalog.buildings] == ["flyers", "seo_basic"]
        assert [v.id for v in catalog.verticals] == ["weekend_france", "mediterranean"]

    def test_starting_unlocked_verticals(self, catalog):
        """Only verticals with unlock_cost 0 start unlocked"""
        assert [v.id for v in catalog.starting_unlocked_verticals()] == ["weekend_france"]

    def test_duplicate_building_id_is_rejected(self):
        """Two buildings cannot share an id"""
        flyers = Building(id="flyers", name="Flyers", base_cost=1500, production=0.1)
        with pytest.raises(ValueError, match="Duplicate building id"):
            Catalog([flyers, flyers], [])

    def test_duplicate_vertical_id_is_rejected(self):
        """Two verticals cannot share an id"""
        ski = Vertical(id="ski", name="Ski", base_price=150000, attractivity=35, margin_growth_factor=1.07)
        with pytest.raises(ValueError, match="Duplicate vertical id"):
            Catalog([], [ski, ski])
