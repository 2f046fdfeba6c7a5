from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from lane_router.errors import InvalidGraph

NO_EDGE = -1


# Core topology types used by the planner and the scorers
@dataclass(frozen=True)
class Coord:
    x: float  # meters in the map frame
    y: float


@dataclass(frozen=True)
class EdgeCost:
    cost: float = 0.0
    overridable: bool = False  # scorers may replace `cost` at query time


@dataclass(eq=False)
class Node:
    nodeid: int
    coords: Coord
    index: int  # position inside the owning graph
    neighbors: list[Edge] = field(default_factory=list, repr=False)
    metadata: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(eq=False)
class Edge:
    edgeid: int
    start: Node
    end: Node
    edge_cost: EdgeCost
    index: int  # position inside the owning graph's edge arena
    metadata: dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Edge({self.edgeid}: {self.start.nodeid}->{self.end.nodeid})"


@dataclass(frozen=True)
class SearchState:
    """Read-only view of one node's scratch record after (or during) a search."""

    integrated_cost: float = math.inf
    traversal_cost: float = 0.0
    parent_edge: Edge | None = None


class SearchStates:
    """
    Per-search scratch space stored as parallel arrays indexed by node position.
    Resetting is a bulk fill, so a search never allocates per-node records.
    """

    def __init__(self, size: int = 0):
        self._allocate(size)

    def _allocate(self, size: int) -> None:
        self.integrated_cost = np.full(size, np.inf, dtype=np.float64)
        self.traversal_cost = np.zeros(size, dtype=np.float64)
        self.parent_edge = np.full(size, NO_EDGE, dtype=np.int64)

    def __len__(self) -> int:
        return len(self.integrated_cost)

    def reset(self, size: int) -> None:
        if size != len(self):
            self._allocate(size)
            return
        self.integrated_cost.fill(np.inf)
        self.traversal_cost.fill(0.0)
        self.parent_edge.fill(NO_EDGE)


class Graph:
    """
    Append-only container owning every node (and, through them, every edge).
    Node and edge ids are resolved through stable lookups; positions never move.
    """

    def __init__(self):
        self._nodes: list[Node] = []
        self._edges: list[Edge] = []
        self._node_index: dict[int, int] = {}
        self._edge_index: dict[int, int] = {}
        self.search = SearchStates()

    # ------------- construction -----------------------------

    def add_node(
        self, nodeid: int, x: float = 0.0, y: float = 0.0, *, metadata: dict | None = None
    ) -> Node:
        if nodeid in self._node_index:
            raise InvalidGraph(f"Duplicate node id {nodeid}")
        node = Node(nodeid, Coord(float(x), float(y)), len(self._nodes), metadata=metadata or {})
        self._node_index[nodeid] = node.index
        self._nodes.append(node)
        return node

    def add_edge(
        self,
        edgeid: int,
        start_id: int,
        end_id: int,
        cost: float = 0.0,
        *,
        overridable: bool = False,
        metadata: dict | None = None,
    ) -> Edge:
        if edgeid in self._edge_index:
            raise InvalidGraph(f"Duplicate edge id {edgeid}")
        if cost < 0.0:
            raise InvalidGraph(f"Edge {edgeid} has a negative cost {cost}")
        start, end = self.at(start_id), self.at(end_id)
        edge = Edge(
            edgeid,
            start,
            end,
            EdgeCost(float(cost), overridable),
            len(self._edges),
            metadata=metadata or {},
        )
        self._edge_index[edgeid] = edge.index
        self._edges.append(edge)
        start.neighbors.append(edge)
        return edge

    # ------------- lookup -----------------------------------

    def size(self) -> int:
        return len(self._nodes)

    def empty(self) -> bool:
        return not self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    def at(self, nodeid: int) -> Node:
        try:
            return self._nodes[self._node_index[nodeid]]
        except KeyError:
            raise InvalidGraph(f"Node id {nodeid} is not in the graph") from None

    def edge(self, edgeid: int) -> Edge:
        try:
            return self._edges[self._edge_index[edgeid]]
        except KeyError:
            raise InvalidGraph(f"Edge id {edgeid} is not in the graph") from None

    def edge_at(self, index: int) -> Edge:
        return self._edges[index]

    # ------------- search scratch space ---------------------

    def reset_search_states(self) -> None:
        self.search.reset(len(self._nodes))

    def state(self, node: Node) -> SearchState:
        i = node.index
        if i >= len(self.search):
            return SearchState()
        parent = int(self.search.parent_edge[i])
        return SearchState(
            integrated_cost=float(self.search.integrated_cost[i]),
            traversal_cost=float(self.search.traversal_cost[i]),
            parent_edge=self._edges[parent] if parent != NO_EDGE else None,
        )


@dataclass
class Route:
    edges: list[Edge]
    start_node: Node
    route_cost: float

    @property
    def nodes(self) -> list[Node]:
        return [self.start_node, *(e.end for e in self.edges)]

    @property
    def edge_ids(self) -> list[int]:
        return [e.edgeid for e in self.edges]
