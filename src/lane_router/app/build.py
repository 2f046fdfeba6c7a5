# lane_router/app/build.py
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from pydantic import ValidationError

from lane_router.app.protocols import GridSource
from lane_router.config.models import RouteServerModel
from lane_router.domain.entities.graph import Graph, Route
from lane_router.domain.planner import RoutePlanner
from lane_router.domain.scoring.edge_scorer import EdgeScorer
from lane_router.domain.scoring.scorers_adjust_edges import AdjustEdgesRequest, AdjustEdgesResponse
from lane_router.errors import ConfigurationError
from lane_router.io.planner_logging import PlannerLogging, configure_logging
from lane_router.runtime.registries import make_edge_scorer
from lane_router.runtime.services import ServiceRegistry
from lane_router.sim.hooks import NoopHooks


@dataclass
class RouteServer:
    name: str
    planner: RoutePlanner
    scorer: EdgeScorer
    services: ServiceRegistry
    grid_sources: dict[str, GridSource] = field(default_factory=dict)

    def find_route(
        self, graph: Graph, start: int, goal: int, blocked_ids: Iterable[int] = ()
    ) -> Route:
        return self.planner.find_route(graph, start, goal, blocked_ids)

    def adjust_edges(
        self, request: AdjustEdgesRequest, *, scorer: str = "AdjustEdgesScorer"
    ) -> AdjustEdgesResponse:
        return self.services.call(f"{self.name}/{scorer}/adjust_edges", request)


def build(
    cfg: RouteServerModel | Mapping,
    *,
    grid_sources: Mapping[str, GridSource] | None = None,
    use_logging: bool = True,
) -> RouteServer:
    # 0) Validate config
    try:
        model = cfg if isinstance(cfg, RouteServerModel) else RouteServerModel.model_validate(cfg)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid route server config: {exc}") from exc

    # 1) Logging hooks
    if use_logging:
        configure_logging(level=model.log.level)
        hooks = PlannerLogging(
            server=model.name,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
    else:
        hooks = NoopHooks()

    # 2) Scoring plugins (each one configured and registered in load order)
    services = ServiceRegistry()
    sources = dict(grid_sources or {})
    deps = {"services": services, "grid_sources": sources, "host_name": model.name}
    scorer = make_edge_scorer(model.edge_scorer, deps=deps)

    # 3) Planner
    planner = RoutePlanner(scorer, max_iterations=model.planner.max_iterations, hooks=hooks)

    return RouteServer(model.name, planner, scorer, services, sources)
