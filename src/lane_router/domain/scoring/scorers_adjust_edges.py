import logging
import threading
from dataclasses import dataclass, field
from typing import NamedTuple

from lane_router.domain.entities.graph import Edge
from lane_router.runtime.types import ScorerContext


class EdgeCostOverride(NamedTuple):
    edgeid: int
    cost: float


@dataclass
class AdjustEdgesRequest:
    closed_edges: list[int] = field(default_factory=list)
    opened_edges: list[int] = field(default_factory=list)
    adjust_edges: list[EdgeCostOverride] = field(default_factory=list)


@dataclass(frozen=True)
class AdjustEdgesResponse:
    success: bool = True


class AdjustEdgesScorer:
    """
    Rejects edges in the closed set so routes avoid lanes that operations marked
    as blocked, and swaps in operator-supplied costs for penalized edges.
    State is updated through the `<host>/<name>/adjust_edges` service.
    """

    name = "AdjustEdgesScorer"

    def __init__(self):
        self._lock = threading.Lock()
        self._closed: set[int] = set()
        self._overrides: dict[int, float] = {}
        self.log = logging.getLogger("lane_router.scoring.adjust_edges")

    def configure(self, context: ScorerContext) -> None:
        self.name = context.name
        if context.logger is not None:
            self.log = context.logger
        self.log.info("Configuring adjust edges scorer.", extra={"extra": {"scorer": self.name}})
        with self._lock:
            self._closed.clear()
            self._overrides.clear()
        context.services.register(context.scoped("adjust_edges"), self.adjust_edges)

    def prepare(self) -> None:
        pass

    def adjust_edges(self, request: AdjustEdgesRequest) -> AdjustEdgesResponse:
        with self._lock:
            self._closed.update(request.closed_edges)
            self._closed.difference_update(request.opened_edges)
            for edgeid, cost in request.adjust_edges:
                self._overrides[edgeid] = float(cost)
            closed, overrides = len(self._closed), len(self._overrides)
        self.log.info(
            "Edge closure and cost adjustment applied",
            extra={"extra": {"scorer": self.name, "closed": closed, "overrides": overrides}},
        )
        return AdjustEdgesResponse(success=True)

    def score(self, edge: Edge, cost: float = 0.0) -> tuple[bool, float]:
        with self._lock:
            if edge.edgeid in self._closed:
                return False, cost
            return True, self._overrides.get(edge.edgeid, cost)

    @property
    def closed_edges(self) -> frozenset[int]:
        with self._lock:
            return frozenset(self._closed)

    @property
    def cost_overrides(self) -> dict[int, float]:
        with self._lock:
            return dict(self._overrides)
