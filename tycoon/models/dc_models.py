from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ActionModel(CamelModel):
    # type stays a plain string so an unknown type is reported per action
    # instead of failing the whole request.
    id: Optional[str] = None
    type: str = ""
    payload: Dict[str, Any] = {}


class SyncRequestModel(CamelModel):
    actions: List[ActionModel] = []


class TickRequestModel(CamelModel):
    elapsed_ms: float = 0


class BuildingStateModel(CamelModel):
    owned: int


class VerticalStateModel(CamelModel):
    level: int  # 0 = locked, 1+ = unlocked


class StateModel(CamelModel):
    money: int
    total_visitors: int
    visitors_towards_sale: float
    total_sales: float
    total_revenue: int
    buildings: Dict[str, BuildingStateModel]
    verticals: Dict[str, VerticalStateModel]
    timestamp: int


class MarketShareModel(CamelModel):
    id: str
    name: str
    icon: str
    market_share: float
    level: int
    current_price: int


class BuildingCostModel(CamelModel):
    cost: int
    can_afford: bool


class VerticalCostModel(CamelModel):
    cost: int
    can_afford: bool
    current_price: int


class ComputedModel(CamelModel):
    total_attractivity: int
    visitors_per_second: float
    expected_revenue_per_batch: int
    sale_progress: float
    unlocked_verticals_count: int
    market_distribution: List[MarketShareModel]
    building_costs: Dict[str, BuildingCostModel]
    vertical_costs: Dict[str, VerticalCostModel]


class FormulasModel(CamelModel):
    cost_growth_rate: float
    visitors_per_click: int
    sale_trigger_threshold: int
    conversion_rate: float
    base_commission_rate: float
    vertical_upgrade_growth_rate: float
    tick_interval_ms: int


class BuildingConfigModel(CamelModel):
    id: str
    name: str
    description: str
    icon: str
    base_cost: int
    production: float


class VerticalConfigModel(CamelModel):
    id: str
    name: str
    description: str
    icon: str
    base_price: int
    attractivity: int
    margin_growth_factor: float
    unlock_cost: int


class ConfigModel(CamelModel):
    formulas: FormulasModel
    buildings: List[BuildingConfigModel]
    verticals: List[VerticalConfigModel]


class ActionErrorModel(CamelModel):
    action_id: Optional[str]
    code: str
    message: str


class StateResponseModel(CamelModel):
    success: bool
    state: StateModel
    computed: ComputedModel
    config: Optional[ConfigModel] = None


class SyncResponseModel(CamelModel):
    success: bool
    state: StateModel
    computed: ComputedModel
    rejected_action_ids: List[str] = []
    errors: List[ActionErrorModel] = []
