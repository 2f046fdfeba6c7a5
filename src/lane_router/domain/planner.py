# lane_router/domain/planner.py

import heapq
import sys
import time
from collections.abc import Iterable

from lane_router.domain.entities.graph import NO_EDGE, Edge, Graph, Node, Route
from lane_router.domain.scoring.edge_scorer import EdgeScorer
from lane_router.errors import InvalidGraph, LaneRouterError, NoRouteFound, SearchTimedOut
from lane_router.runtime.types import SearchStatus
from lane_router.sim.hooks import NoopHooks, PlannerHooks

_STATUS_BY_ERROR = {
    InvalidGraph: SearchStatus.INVALID,
    NoRouteFound: SearchStatus.NO_ROUTE,
    SearchTimedOut: SearchStatus.TIMED_OUT,
}


class RoutePlanner:
    """
    Minimum-cost route search over a Graph (Dijkstra, stopping at the goal).

    Per-search state lives in the graph's SearchStates, so two searches must
    never run on the same graph at once. The planner only borrows the graph;
    the edge scorer is owned and reused across searches.
    """

    def __init__(
        self,
        edge_scorer: EdgeScorer | None = None,
        *,
        max_iterations: int = 0,
        hooks: PlannerHooks | None = None,
    ):
        self.edge_scorer = edge_scorer or EdgeScorer()
        # 0 => unlimited
        self.max_iterations = max_iterations or sys.maxsize
        self.last_iterations = 0
        self._q: list[tuple[float, int, Node]] = []
        self._seq = 0
        self._hooks = hooks or NoopHooks()

    def find_route(
        self, graph: Graph, start: int, goal: int, blocked_ids: Iterable[int] = ()
    ) -> Route:
        t0 = time.perf_counter()
        blocked = frozenset(blocked_ids)
        status = SearchStatus.INVALID
        self.last_iterations = 0
        self._hooks.search_start(start=start, goal=goal, nodes=graph.size(), blocked=len(blocked))
        try:
            if graph.empty():
                raise InvalidGraph("Graph is invalid for routing!")
            start_node, goal_node = graph.at(start), graph.at(goal)

            self.edge_scorer.prepare()
            self._find_shortest_graph_traversal(graph, start_node, goal_node, blocked)

            if graph.search.parent_edge[goal_node.index] == NO_EDGE:
                raise NoRouteFound("Could not find a route to the requested goal!")

            route = Route(
                self._backtrack(graph, goal_node),
                start_node,
                float(graph.search.integrated_cost[goal_node.index]),
            )
            status = SearchStatus.FOUND
            return route
        except LaneRouterError as exc:
            status = _STATUS_BY_ERROR.get(type(exc), status)
            self._hooks.error(reason=status.value, error=str(exc), start=start, goal=goal)
            raise
        except Exception as exc:
            # Scoring plugins may raise anything; report it, then let it propagate
            status = SearchStatus.ERROR
            self._hooks.error(reason=status.value, error=repr(exc), start=start, goal=goal)
            raise
        finally:
            self._hooks.search_end(
                status=status.value,
                iterations=self.last_iterations,
                ms=(time.perf_counter() - t0) * 1000,
                start=start,
                goal=goal,
            )

    def _backtrack(self, graph: Graph, goal: Node) -> list[Edge]:
        parents = graph.search.parent_edge
        edges: list[Edge] = []
        # Local cursor: the goal's stored parent must survive the walk
        cursor = int(parents[goal.index])
        while cursor != NO_EDGE:
            if len(edges) >= graph.size():
                raise InvalidGraph("Parent edges form a cycle; is a scorer returning negative costs?")
            edge = graph.edge_at(cursor)
            edges.append(edge)
            cursor = int(parents[edge.start.index])
        edges.reverse()
        return edges

    def _find_shortest_graph_traversal(
        self, graph: Graph, start: Node, goal: Node, blocked: frozenset[int]
    ) -> None:
        # A full reset is cheap next to the search itself for graphs in the tens of thousands
        graph.reset_search_states()
        search = graph.search
        cost_of, parent_of, traversal_of = (
            search.integrated_cost,
            search.parent_edge,
            search.traversal_cost,
        )
        cost_of[start.index] = 0.0
        self._add_node(0.0, start)

        iterations = 0
        found = exhausted = False
        try:
            while self._q and iterations < self.max_iterations:
                iterations += 1
                curr_cost, _, node = heapq.heappop(self._q)

                # Stale entry: a cheaper one for this node was already expanded
                if curr_cost != cost_of[node.index]:
                    continue

                if node is goal:
                    found = True
                    break

                self._hooks.expand(
                    nodeid=node.nodeid, cost=curr_cost, iterations=iterations, qsize=len(self._q)
                )
                for edge in node.neighbors:
                    accepted, traversal_cost = self._traversal_cost(edge, goal, blocked)
                    if not accepted:
                        continue

                    neighbor = edge.end
                    potential = curr_cost + traversal_cost
                    if potential < cost_of[neighbor.index]:
                        parent_of[neighbor.index] = edge.index
                        cost_of[neighbor.index] = potential
                        traversal_of[neighbor.index] = traversal_cost
                        self._add_node(potential, neighbor)
            exhausted = not self._q
        finally:
            self.last_iterations = iterations
            self._clear_queue()

        # An empty queue means the goal is unreachable, even on the last allowed pop
        if not found and not exhausted and iterations >= self.max_iterations:
            raise SearchTimedOut("Maximum iterations was exceeded!")

    def _traversal_cost(self, edge: Edge, goal: Node, blocked: frozenset[int]) -> tuple[bool, float]:
        # Blocked edge or node, unless the block would hide the goal itself
        if blocked and (edge.edgeid in blocked or edge.end.nodeid in blocked) and edge.end is not goal:
            return False, 0.0

        if not edge.edge_cost.overridable or self.edge_scorer.plugin_count() == 0:
            if edge.edge_cost.cost == 0.0:
                raise InvalidGraph(
                    f"Edge {edge.edgeid} doesn't contain and cannot compute a valid edge cost!"
                )
            return True, edge.edge_cost.cost

        return self.edge_scorer.score(edge)

    def _add_node(self, cost: float, node: Node) -> None:
        self._seq += 1
        heapq.heappush(self._q, (cost, self._seq, node))

    def _clear_queue(self) -> None:
        self._q.clear()
        self._seq = 0
