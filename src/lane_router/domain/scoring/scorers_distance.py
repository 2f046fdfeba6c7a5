import math

from lane_router.config.models import DistanceScorerModel
from lane_router.domain.entities.graph import Edge
from lane_router.runtime.types import ScorerContext


class DistanceScorer:
    """Straight-line edge length times a weight; optionally the static edge cost instead."""

    name = "DistanceScorer"

    def __init__(self):
        self.params = DistanceScorerModel()

    def configure(self, context: ScorerContext) -> None:
        self.name = context.name
        if context.params is not None:
            self.params = context.params

    def prepare(self) -> None:
        pass

    def score(self, edge: Edge, cost: float = 0.0) -> tuple[bool, float]:
        if self.params.use_static_cost:
            return True, self.params.weight * edge.edge_cost.cost
        a, b = edge.start.coords, edge.end.coords
        return True, self.params.weight * math.hypot(b.x - a.x, b.y - a.y)
