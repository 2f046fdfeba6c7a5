from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = 1


# ----------------- PLANNER ---------------------


class PlannerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    max_iterations: int = 0  # 0 => unlimited

    @field_validator("max_iterations")
    @classmethod
    def _nonneg(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_iterations must be >= 0")
        return v


# ----------------- SCORERS ---------------------


class ScorerRefModel(BaseModel):
    """Plugin entry as it appears in a config file; the kind's own model validates the rest."""

    model_config = ConfigDict(extra="allow")
    kind: str
    name: str | None = None


class AdjustEdgesScorerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["adjust_edges"] = "adjust_edges"
    name: str = "AdjustEdgesScorer"


class DistanceScorerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["distance"] = "distance"
    name: str = "DistanceScorer"
    weight: float = 1.0
    use_static_cost: bool = False  # True => weight * edge's static cost

    @field_validator("weight")
    @classmethod
    def _nonneg(cls, v: float) -> float:
        if v < 0:
            raise ValueError("weight must be >= 0")
        return v


class CostmapScorerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["costmap"] = "costmap"
    name: str = "CostmapScorer"
    use_maximum: bool = True  # False => mean of the sampled cells
    invalid_on_collision: bool = True
    invalid_off_map: bool = True
    max_cost: float = 253.0
    costmap_topic: str = "global_costmap/costmap_raw"
    weight: float = 1.0

    @field_validator("max_cost")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("max_cost must be > 0")
        return v

    @field_validator("weight")
    @classmethod
    def _nonneg(cls, v: float, info: ValidationInfo) -> float:
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v


class EdgeScorerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    plugins: list[ScorerRefModel] = Field(default_factory=list)
    aggregation: Literal["sum", "max", "last"] = "sum"


# ------------------------------------------------------------------


class RouteServerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "route_server"
    log: LogModel = LogModel()
    planner: PlannerModel = PlannerModel()
    edge_scorer: EdgeScorerModel = Field(default_factory=EdgeScorerModel)
