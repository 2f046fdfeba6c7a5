# lane_router/domain/grid.py
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

# Cell cost conventions of the occupancy grid
FREE = 0
INSCRIBED = 253
LETHAL = 254
UNKNOWN = 255


@dataclass(frozen=True, eq=False)
class OccupancyGrid:
    """
    Immutable snapshot of a traversability grid.
    `costs` is indexed [my, mx]; the origin is the world position of cell (0, 0)'s corner.
    """

    costs: np.ndarray
    resolution: float = 1.0  # meters per cell
    origin_x: float = 0.0
    origin_y: float = 0.0

    def __post_init__(self):
        costs = np.array(self.costs, dtype=np.uint8)
        if costs.ndim != 2:
            raise ValueError(f"grid costs must be 2-D, got shape {costs.shape}")
        if self.resolution <= 0:
            raise ValueError("grid resolution must be > 0")
        costs.setflags(write=False)
        object.__setattr__(self, "costs", costs)

    @classmethod
    def uniform(
        cls,
        size_x: int,
        size_y: int,
        value: int = FREE,
        *,
        resolution: float = 1.0,
        origin: tuple[float, float] = (0.0, 0.0),
    ) -> OccupancyGrid:
        return cls(
            np.full((size_y, size_x), value, dtype=np.uint8),
            resolution=resolution,
            origin_x=origin[0],
            origin_y=origin[1],
        )

    @property
    def size_x(self) -> int:
        return int(self.costs.shape[1])

    @property
    def size_y(self) -> int:
        return int(self.costs.shape[0])

    def world_to_map(self, wx: float, wy: float) -> tuple[int, int] | None:
        """Cell containing the world point, or None when it falls outside the grid."""
        if wx < self.origin_x or wy < self.origin_y:
            return None
        mx = int((wx - self.origin_x) / self.resolution)
        my = int((wy - self.origin_y) / self.resolution)
        if mx < self.size_x and my < self.size_y:
            return mx, my
        return None

    def cost(self, mx: int, my: int) -> int:
        return int(self.costs[my, mx])

    def with_cells(self, cells: dict[tuple[int, int], int]) -> OccupancyGrid:
        """Copy of this grid with the given (mx, my) cells overwritten."""
        costs = self.costs.copy()
        for (mx, my), value in cells.items():
            costs[my, mx] = value
        return OccupancyGrid(costs, self.resolution, self.origin_x, self.origin_y)


def iter_line(x0: int, y0: int, x1: int, y1: int) -> Iterator[tuple[int, int]]:
    """Integer Bresenham traversal from (x0, y0) to (x1, y1), both ends included."""
    dx, dy = abs(x1 - x0), abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    x, y = x0, y0
    while True:
        yield x, y
        if x == x1 and y == y1:
            return
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy
