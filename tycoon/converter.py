from dataclasses import asdict
from typing import Any, Dict

from tycoon.config_loader import GameConfig
from tycoon.domain.actions import Action, BuyBuilding, Click, UpgradeVertical, action_type
from tycoon.domain.catalog import Building, Vertical
from tycoon.domain.engine import ComputedValues
from tycoon.domain.formulas import FormulaSet
from tycoon.domain.game_state import GameState
from tycoon.models.dc_models import ActionModel, ComputedModel, ConfigModel, StateModel


class DataConverter:
    """This class is used to convert data between the domain types and the wire formats."""

    def state_to_dict(self, state: GameState) -> Dict[str, Any]:
        """Convert a GameState to its JSON wire form (also the stored form)

        Args:
            state (GameState): Domain state

        Returns:
            Dict[str, Any]: camelCase dict, buildings as {id: {owned}} and verticals as {id: {level}}
        """
        return {
            "money": state.money,
            "totalVisitors": state.total_visitors,
            "visitorsTowardsSale": state.visitors_towards_sale,
            "totalSales": state.total_sales,
            "totalRevenue": state.total_revenue,
            "buildings": {bid: {"owned": owned} for bid, owned in state.buildings.items()},
            "verticals": {vid: {"level": level} for vid, level in state.verticals.items()},
            "timestamp": state.timestamp,
        }

    def dict_to_state(self, data: Dict[str, Any]) -> GameState:
        """Rebuild a GameState from its wire form

        Args:
            data (Dict[str, Any]): Dict produced by state_to_dict

        Returns:
            GameState: Domain state
        """
        return GameState(
            money=int(data["money"]),
            total_visitors=int(data["totalVisitors"]),
            visitors_towards_sale=float(data["visitorsTowardsSale"]),
            total_sales=float(data["totalSales"]),
            total_revenue=int(data["totalRevenue"]),
            buildings={
                bid: int(item.get("owned", 0)) for bid, item in (data.get("buildings") or {}).items()
            },
            verticals={
                vid: int(item.get("level", 0)) for vid, item in (data.get("verticals") or {}).items()
            },
            timestamp=int(data.get("timestamp", 0)),
        )

    def state_to_model(self, state: GameState) -> StateModel:
        return StateModel.model_validate(self.state_to_dict(state))

    def model_to_state(self, state_model: StateModel) -> GameState:
        return self.dict_to_state(state_model.model_dump(by_alias=True))

    def computed_to_model(self, computed: ComputedValues) -> ComputedModel:
        return ComputedModel.model_validate(asdict(computed))

    def config_to_model(self, config: GameConfig) -> ConfigModel:
        return ConfigModel.model_validate(
            {
                "formulas": asdict(config.formulas),
                "buildings": [asdict(b) for b in config.buildings],
                "verticals": [asdict(v) for v in config.verticals],
            }
        )

    def model_to_config(self, config_model: ConfigModel) -> GameConfig:
        """Rebuild the game config from the snapshot the server sends to clients"""
        return GameConfig(
            formulas=FormulaSet(**config_model.formulas.model_dump()),
            buildings=[Building(**b.model_dump()) for b in config_model.buildings],
            verticals=[Vertical(**v.model_dump()) for v in config_model.verticals],
        )

    def action_to_model(self, action: Action) -> ActionModel:
        """Convert a typed action to the transport form read back by game_rules.parse_action"""
        if isinstance(action, Click):
            payload = {"count": action.count}
        elif isinstance(action, BuyBuilding):
            payload = {"buildingId": action.building_id}
        elif isinstance(action, UpgradeVertical):
            payload = {"verticalId": action.vertical_id}
        else:
            raise TypeError(f"Unsupported action: {action!r}")
        return ActionModel(id=action.id, type=action_type(action).value, payload=payload)
