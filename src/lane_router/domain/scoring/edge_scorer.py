from collections.abc import Iterable

from lane_router.app.protocols import EdgeCostFunction
from lane_router.domain.entities.graph import Edge
from lane_router.errors import ConfigurationError
from lane_router.runtime.types import Aggregation


class EdgeScorer:
    """
    Runs an edge through every loaded cost function, in load order.

    Any rejection makes the edge invalid and stops the loop. Each plugin starts
    from a running cost of 0.0; accepted costs are combined according to
    `aggregation` (additive by default). The plugin list is fixed once the
    scorer is handed to a planner and is reused across searches.
    """

    def __init__(
        self,
        plugins: Iterable[EdgeCostFunction] = (),
        *,
        aggregation: Aggregation | str = Aggregation.SUM,
    ):
        self._plugins: list[EdgeCostFunction] = []
        self.aggregation = Aggregation(aggregation)
        for plugin in plugins:
            self.add_plugin(plugin)

    def add_plugin(self, plugin: EdgeCostFunction) -> None:
        if not isinstance(plugin, EdgeCostFunction):
            raise ConfigurationError(f"{type(plugin).__name__} is not an edge cost function")
        if any(p.name == plugin.name for p in self._plugins):
            raise ConfigurationError(f"Duplicate scorer name {plugin.name!r}")
        self._plugins.append(plugin)

    @property
    def plugins(self) -> tuple[EdgeCostFunction, ...]:
        return tuple(self._plugins)

    def plugin_count(self) -> int:
        return len(self._plugins)

    def prepare(self) -> None:
        for plugin in self._plugins:
            plugin.prepare()

    def score(self, edge: Edge) -> tuple[bool, float]:
        total = 0.0
        for plugin in self._plugins:
            accepted, cost = plugin.score(edge, 0.0)
            if not accepted:
                return False, 0.0
            if self.aggregation is Aggregation.SUM:
                total += cost
            elif self.aggregation is Aggregation.MAX:
                total = max(total, cost)
            else:
                total = cost
        return True, total
