"""Load and validate the game rules from config/game/*.yaml.

A missing file, a missing key or a value out of its domain raises
GameConfigError. The server loads the config during startup, so a broken
config stops the boot instead of running with partial rules.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from tycoon.domain.catalog import Building, Catalog, Vertical
from tycoon.domain.formulas import FormulaSet

logging.basicConfig(level=logging.INFO)


class GameConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class GameConfig:
    formulas: FormulaSet
    buildings: List[Building] = field(default_factory=list)
    verticals: List[Vertical] = field(default_factory=list)

    def catalog(self) -> Catalog:
        return Catalog(self.buildings, self.verticals)


def _missing_key(key: str, context: str = "config") -> GameConfigError:
    return GameConfigError(f"Missing required key '{key}' in {context}")


def _require(data: Dict[str, Any], key: str, context: str) -> Any:
    value = data.get(key)
    if value is None:
        raise _missing_key(key, context)
    return value


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise GameConfigError(message)


class GameConfigLoader:
    """Reads formulas.yaml, buildings.yaml and verticals.yaml from one directory.

    The parsed config is cached on the loader instance.
    """

    def __init__(self, config_dir: Path | str):
        self.config_dir = Path(config_dir)
        self._cached_config: Optional[GameConfig] = None

    def load(self) -> GameConfig:
        if self._cached_config is not None:
            return self._cached_config

        try:
            formulas = self._load_formulas()
            buildings = self._load_buildings()
            verticals = self._load_verticals()
            Catalog(buildings, verticals)
        except GameConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise GameConfigError(f"Invalid game config in {self.config_dir}: {e}") from e

        self._cached_config = GameConfig(formulas=formulas, buildings=buildings, verticals=verticals)
        logging.info(
            f"Loaded game config from {self.config_dir}: "
            f"{len(buildings)} buildings, {len(verticals)} verticals"
        )
        return self._cached_config

    def _load_formulas(self) -> FormulaSet:
        data = self._parse_yaml_file(self.config_dir / "formulas.yaml")
        f = data.get("formulas")
        if not isinstance(f, dict):
            raise GameConfigError('Missing "formulas" key in formulas.yaml')

        context = "formulas"
        formulas = FormulaSet(
            cost_growth_rate=float(_require(f, "cost_growth_rate", context)),
            visitors_per_click=int(_require(f, "visitors_per_click", context)),
            sale_trigger_threshold=int(_require(f, "sale_trigger_threshold", context)),
            conversion_rate=float(_require(f, "conversion_rate", context)),
            base_commission_rate=float(_require(f, "base_commission_rate", context)),
            vertical_upgrade_growth_rate=float(_require(f, "vertical_upgrade_growth_rate", context)),
            tick_interval_ms=int(_require(f, "tick_interval_ms", context)),
        )
        _check(formulas.cost_growth_rate > 0, "cost_growth_rate must be > 0")
        _check(formulas.visitors_per_click > 0, "visitors_per_click must be > 0")
        _check(formulas.sale_trigger_threshold > 0, "sale_trigger_threshold must be > 0")
        _check(0 < formulas.conversion_rate <= 1, "conversion_rate must be in (0, 1]")
        _check(0 < formulas.base_commission_rate <= 1, "base_commission_rate must be in (0, 1]")
        _check(formulas.vertical_upgrade_growth_rate > 0, "vertical_upgrade_growth_rate must be > 0")
        _check(formulas.tick_interval_ms > 0, "tick_interval_ms must be > 0")
        return formulas

    def _load_buildings(self) -> List[Building]:
        data = self._parse_yaml_file(self.config_dir / "buildings.yaml")
        return [self._parse_building(item) for item in data.get("marketing") or []]

    def _load_verticals(self) -> List[Vertical]:
        data = self._parse_yaml_file(self.config_dir / "verticals.yaml")
        return [self._parse_vertical(item) for item in data.get("verticals") or []]

    def _parse_building(self, data: Dict[str, Any]) -> Building:
        _check(isinstance(data, dict), "Each building must be a mapping")
        building_id = str(_require(data, "id", "building"))
        context = f"building '{building_id}'"
        building = Building(
            id=building_id,
            name=str(_require(data, "name", context)),
            description=str(data.get("description", "")),
            icon=str(data.get("icon", "🏢")),
            base_cost=int(_require(data, "base_cost", context)),
            production=float(_require(data, "production", context)),
        )
        _check(building.base_cost >= 0, f"base_cost must be >= 0 in {context}")
        _check(building.production >= 0, f"production must be >= 0 in {context}")
        return building

    def _parse_vertical(self, data: Dict[str, Any]) -> Vertical:
        _check(isinstance(data, dict), "Each vertical must be a mapping")
        vertical_id = str(_require(data, "id", "vertical"))
        context = f"vertical '{vertical_id}'"
        vertical = Vertical(
            id=vertical_id,
            name=str(_require(data, "name", context)),
            description=str(data.get("description", "")),
            icon=str(data.get("icon", "✈️")),
            base_price=int(_require(data, "base_price", context)),
            attractivity=int(_require(data, "attractivity", context)),
            margin_growth_factor=float(_require(data, "margin_growth_factor", context)),
            unlock_cost=int(data.get("unlock_cost", 0)),
        )
        _check(vertical.base_price >= 0, f"base_price must be >= 0 in {context}")
        _check(vertical.attractivity > 0, f"attractivity must be > 0 in {context}")
        _check(vertical.margin_growth_factor > 1, f"margin_growth_factor must be > 1 in {context}")
        _check(vertical.unlock_cost >= 0, f"unlock_cost must be >= 0 in {context}")
        return vertical

    @staticmethod
    def _parse_yaml_file(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise GameConfigError(f"Configuration file not found: {path}")
        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise GameConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(parsed, dict):
            raise GameConfigError(f"Invalid YAML structure in: {path}")
        return parsed
