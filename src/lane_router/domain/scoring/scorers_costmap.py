import logging
import threading
from collections.abc import Mapping

import numpy as np

from lane_router.app.protocols import GridSource
from lane_router.config.models import CostmapScorerModel
from lane_router.domain.entities.graph import Edge
from lane_router.domain.grid import UNKNOWN, OccupancyGrid, iter_line
from lane_router.errors import GridUnavailable
from lane_router.runtime.types import ScorerContext


class CostmapScorer:
    """
    Scores an edge by the occupancy-grid cells under the straight segment
    joining its two nodes. The grid snapshot is refreshed on `prepare()`;
    without a snapshot every edge is rejected. The grid source is looked up
    by topic on every `prepare()`, so a source added after configuration is
    picked up on the next search.
    """

    name = "CostmapScorer"

    def __init__(self):
        self.log = logging.getLogger("lane_router.scoring.costmap")
        self.params = CostmapScorerModel()
        self._grid_sources: Mapping[str, GridSource] = {}
        self._grid: OccupancyGrid | None = None
        self._warned = False
        self._lock = threading.Lock()

    def configure(self, context: ScorerContext) -> None:
        self.name = context.name
        if context.logger is not None:
            self.log = context.logger
        if context.params is not None:
            self.params = context.params
        self.log.info("Configuring costmap scorer.", extra={"extra": {"scorer": self.name}})
        self._grid_sources = context.grid_sources
        if self.params.costmap_topic not in self._grid_sources:
            self.log.warning(
                "No grid source for costmap scorer",
                extra={"extra": {"scorer": self.name, "topic": self.params.costmap_topic}},
            )

    def prepare(self) -> None:
        grid = None
        source = self._grid_sources.get(self.params.costmap_topic)
        if source is not None:
            try:
                grid = source.get_grid()
            except GridUnavailable:
                grid = None
            except Exception as exc:
                self.log.warning(
                    "Failed to fetch costmap, rejecting edges this cycle",
                    extra={"extra": {"scorer": self.name, "error": repr(exc)}},
                )
                grid = None
        with self._lock:
            self._grid = grid
            self._warned = False

    def score(self, edge: Edge, cost: float = 0.0) -> tuple[bool, float]:
        with self._lock:
            grid = self._grid
            if grid is None:
                if not self._warned:
                    self.log.warning("No costmap yet received!", extra={"extra": {"scorer": self.name}})
                    self._warned = True
                return False, cost

        p = self.params
        a = grid.world_to_map(edge.start.coords.x, edge.start.coords.y)
        b = grid.world_to_map(edge.end.coords.x, edge.end.coords.y)
        if a is None or b is None:
            return (not p.invalid_off_map), cost

        cells = np.array(list(iter_line(*a, *b)), dtype=np.intp)
        samples = grid.costs[cells[:, 1], cells[:, 0]].astype(np.float64)
        known = samples != UNKNOWN
        if p.invalid_on_collision and np.any((samples >= p.max_cost) & known):
            return False, cost

        if p.use_maximum:
            value = samples[known].max(initial=0.0)
        else:
            value = samples.mean()
        return True, float(p.weight * value / p.max_cost)
