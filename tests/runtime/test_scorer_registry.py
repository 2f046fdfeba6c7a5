import numpy as np
import pytest
from pydantic import BaseModel, ConfigDict

from lane_router.config.models import CostmapScorerModel, EdgeScorerModel
from lane_router.domain.entities.graph import Graph
from lane_router.domain.grid import OccupancyGrid
from lane_router.domain.scoring.scorers_adjust_edges import AdjustEdgesScorer
from lane_router.domain.scoring.scorers_costmap import CostmapScorer
from lane_router.domain.scoring.scorers_distance import DistanceScorer
from lane_router.errors import ConfigurationError, GridUnavailable, UnknownService
from lane_router.runtime.registries import (
    make_edge_scorer,
    make_scorer,
    register_scorer,
    resolve_scorer_params,
    scorer_kinds,
)
from lane_router.runtime.resources import LatestGridSource, load_grid_from_path
from lane_router.runtime.services import ServiceRegistry


class ConstantScorerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: str = "test_constant"
    name: str = "Constant"
    value: float = 1.0


class ConstantScorer:
    name = "Constant"

    def __init__(self, value: float):
        self.value = value

    def configure(self, context):
        self.name = context.name

    def prepare(self):
        pass

    def score(self, edge, cost=0.0):
        return True, self.value


@register_scorer("test_constant", ConstantScorerModel)
def _make_constant(cfg: ConstantScorerModel, deps):
    return ConstantScorer(cfg.value)


@pytest.fixture
def edge():
    g = Graph()
    g.add_node(1, 0.0, 0.0)
    g.add_node(2, 3.0, 4.0)
    return g.add_edge(1, 1, 2, 2.0, overridable=True)


def test_builtin_kinds_are_registered():
    assert {"adjust_edges", "costmap", "distance"} <= set(scorer_kinds())


def test_loose_entries_resolve_to_kind_models():
    params = resolve_scorer_params({"kind": "costmap", "weight": 2.0, "use_maximum": False})
    assert isinstance(params, CostmapScorerModel)
    assert params.weight == 2.0 and params.use_maximum is False
    assert params.name == "CostmapScorer"
    assert resolve_scorer_params(params) is params


def test_unknown_kind_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="warp_drive"):
        make_scorer({"kind": "warp_drive"}, deps={})


def test_missing_kind_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        make_scorer({"name": "Anonymous"}, deps={})


def test_bad_parameters_are_configuration_errors():
    with pytest.raises(ConfigurationError):
        make_scorer({"kind": "costmap", "max_cost": 0}, deps={})
    with pytest.raises(ConfigurationError):
        make_scorer({"kind": "costmap", "not_an_option": 1}, deps={})
    with pytest.raises(ConfigurationError):
        make_scorer({"kind": "distance", "weight": -1}, deps={})


def test_make_scorer_configures_with_scope():
    deps: dict = {"host_name": "depot_router"}
    plugin = make_scorer({"kind": "adjust_edges", "name": "Closures"}, deps=deps)
    assert isinstance(plugin, AdjustEdgesScorer)
    assert plugin.name == "Closures"
    assert deps["services"].names() == ["depot_router/Closures/adjust_edges"]


def test_make_scorer_wires_grid_sources(edge):
    source = LatestGridSource()
    source.publish(OccupancyGrid.uniform(10, 10))
    plugin = make_scorer(
        {"kind": "costmap", "costmap_topic": "grid"}, deps={"grid_sources": {"grid": source}}
    )
    assert isinstance(plugin, CostmapScorer)
    plugin.prepare()
    assert plugin.score(edge) == (True, 0.0)


def test_distance_scorer(edge):
    plugin = make_scorer({"kind": "distance", "weight": 2.0}, deps={})
    assert isinstance(plugin, DistanceScorer)
    assert plugin.score(edge) == (True, pytest.approx(10.0))
    static = make_scorer({"kind": "distance", "name": "Static", "use_static_cost": True}, deps={})
    assert static.score(edge) == (True, 2.0)


def test_custom_kind_plugs_in(edge):
    plugin = make_scorer({"kind": "test_constant", "value": 4.5}, deps={})
    assert plugin.score(edge) == (True, 4.5)


def test_edge_scorer_keeps_load_order(edge):
    scorer = make_edge_scorer(
        EdgeScorerModel.model_validate(
            {
                "aggregation": "sum",
                "plugins": [
                    {"kind": "test_constant", "name": "One", "value": 1.0},
                    {"kind": "distance"},
                    {"kind": "adjust_edges"},
                ],
            }
        ),
        deps={},
    )
    assert [p.name for p in scorer.plugins] == ["One", "DistanceScorer", "AdjustEdgesScorer"]
    assert scorer.score(edge) == (True, pytest.approx(6.0))


def test_duplicate_plugin_names_fail_at_configure_time():
    with pytest.raises(ConfigurationError):
        make_edge_scorer(
            {"plugins": [{"kind": "distance", "name": "D"}, {"kind": "test_constant", "name": "D"}]},
            deps={},
        )
    with pytest.raises(ConfigurationError):
        make_edge_scorer(
            {"plugins": [{"kind": "adjust_edges"}, {"kind": "adjust_edges"}]}, deps={}
        )


def test_invalid_aggregation_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        make_edge_scorer({"aggregation": "median"}, deps={})


# ---------- Services and grid resources


def test_service_registry_rejects_duplicates():
    services = ServiceRegistry()
    services.register("a/b/c", lambda req: req * 2)
    assert "a/b/c" in services
    assert services.call("a/b/c", 21) == 42
    with pytest.raises(ConfigurationError):
        services.register("a/b/c", lambda req: req)
    with pytest.raises(UnknownService, match="missing"):
        services.call("missing", None)
    assert "missing" not in services


def test_latest_grid_source_before_publish():
    with pytest.raises(GridUnavailable):
        LatestGridSource().get_grid()


def test_load_grid_from_npy(tmp_path):
    path = tmp_path / "grid.npy"
    np.save(path, np.full((4, 6), 7, dtype=np.uint8))
    grid = load_grid_from_path(str(path), resolution=0.25, origin=(1.0, 2.0))
    assert (grid.size_x, grid.size_y) == (6, 4)
    assert grid.cost(5, 3) == 7
    assert grid.world_to_map(1.0, 2.0) == (0, 0)
    with pytest.raises(ValueError):
        load_grid_from_path(str(path), "png")
