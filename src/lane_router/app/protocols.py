from typing import Protocol, runtime_checkable

from lane_router.domain.entities.graph import Edge
from lane_router.domain.grid import OccupancyGrid
from lane_router.runtime.types import ScorerContext

# ------------- Scoring --------------------


@runtime_checkable
class EdgeCostFunction(Protocol):
    """
    Responsibilities:
      • Decide whether an edge is currently traversable.
      • Contribute a cost for accepted edges.
    Plugins are built empty, configured once, then queried for many searches.
    `score` must not mutate anything outside the plugin; when unsure (missing
    live data) it rejects rather than guesses.
    """

    name: str

    def configure(self, context: ScorerContext) -> None: ...

    def prepare(self) -> None:
        """Refresh externally updated state once per route request. Default: nothing."""

    def score(self, edge: Edge, cost: float = 0.0) -> tuple[bool, float]:
        """Return (accepted, cost); `cost` is the running value to keep when not adjusting."""


# ------------- Data providers --------------------


@runtime_checkable
class GridSource(Protocol):
    """Hands out the latest occupancy grid; raises GridUnavailable when there is none."""

    def get_grid(self) -> OccupancyGrid: ...
