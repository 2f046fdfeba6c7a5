# runtime/registries.py
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from lane_router.app.protocols import EdgeCostFunction
from lane_router.config.models import (
    AdjustEdgesScorerModel,
    CostmapScorerModel,
    DistanceScorerModel,
    EdgeScorerModel,
    ScorerRefModel,
)
from lane_router.domain.scoring.edge_scorer import EdgeScorer
from lane_router.domain.scoring.scorers_adjust_edges import AdjustEdgesScorer
from lane_router.domain.scoring.scorers_costmap import CostmapScorer
from lane_router.domain.scoring.scorers_distance import DistanceScorer
from lane_router.errors import ConfigurationError
from lane_router.runtime.services import ServiceRegistry
from lane_router.runtime.types import ScorerContext

ScorerFactory = Callable[[BaseModel, dict], EdgeCostFunction]


@dataclass(frozen=True)
class _ScorerEntry:
    model: type[BaseModel]
    factory: ScorerFactory


_scorer_registry: dict[str, _ScorerEntry] = {}


# ------------------- Scorer registries ---------------------------


def register_scorer(kind: str, model: type[BaseModel]):
    def deco(fn: ScorerFactory):
        _scorer_registry[kind] = _ScorerEntry(model, fn)
        return fn

    return deco


def scorer_kinds() -> list[str]:
    return sorted(_scorer_registry)


def resolve_scorer_params(cfg: BaseModel | Mapping) -> BaseModel:
    """Turn a loose plugin entry into the validated model registered for its kind."""
    try:
        ref = cfg if isinstance(cfg, BaseModel) else ScorerRefModel.model_validate(cfg)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid scorer entry: {exc}") from exc
    try:
        entry = _scorer_registry[ref.kind]
    except KeyError:
        raise ConfigurationError(
            f"Unknown scorer kind {ref.kind!r} (known: {', '.join(scorer_kinds())})"
        ) from None
    if isinstance(ref, entry.model):
        return ref
    data = ref.model_dump(exclude_none=True)
    try:
        return entry.model.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid parameters for scorer {ref.kind!r}: {exc}") from exc


def make_scorer(cfg: BaseModel | Mapping, *, deps: dict) -> EdgeCostFunction:
    """
    Instantiate and configure one plugin. deps can include:
      - 'services': ServiceRegistry   # where update channels get registered
      - 'grid_sources': dict[str, GridSource]
      - 'host_name': str
    """
    params = resolve_scorer_params(cfg)
    plugin = _scorer_registry[params.kind].factory(params, deps)
    context = ScorerContext(
        name=params.name,
        params=params,
        host_name=deps.get("host_name", "route_server"),
        services=deps.setdefault("services", ServiceRegistry()),
        grid_sources=deps.get("grid_sources", {}),
    )
    plugin.configure(context)
    return plugin


def make_edge_scorer(cfg: EdgeScorerModel | Mapping, *, deps: dict) -> EdgeScorer:
    try:
        model = cfg if isinstance(cfg, EdgeScorerModel) else EdgeScorerModel.model_validate(cfg)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid edge scorer config: {exc}") from exc
    scorer = EdgeScorer(aggregation=model.aggregation)
    for entry in model.plugins:
        scorer.add_plugin(make_scorer(entry, deps=deps))
    return scorer


@register_scorer("adjust_edges", AdjustEdgesScorerModel)
def _make_adjust_edges(cfg: AdjustEdgesScorerModel, deps: dict[str, Any]):
    return AdjustEdgesScorer()


@register_scorer("costmap", CostmapScorerModel)
def _make_costmap(cfg: CostmapScorerModel, deps: dict[str, Any]):
    return CostmapScorer()


@register_scorer("distance", DistanceScorerModel)
def _make_distance(cfg: DistanceScorerModel, deps: dict[str, Any]):
    return DistanceScorer()
