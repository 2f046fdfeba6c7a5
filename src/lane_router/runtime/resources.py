# lane_router/runtime/resources.py
import threading
from functools import lru_cache

import numpy as np

from lane_router.domain.grid import OccupancyGrid
from lane_router.errors import GridUnavailable


class StaticGridSource:
    """Always hands out the same grid."""

    def __init__(self, grid: OccupancyGrid):
        self.grid = grid

    def get_grid(self) -> OccupancyGrid:
        return self.grid


class LatestGridSource:
    """Keeps the most recently published grid; publishers may run on any thread."""

    def __init__(self):
        self._grid: OccupancyGrid | None = None
        self._lock = threading.Lock()

    def publish(self, grid: OccupancyGrid) -> None:
        with self._lock:
            self._grid = grid

    def clear(self) -> None:
        with self._lock:
            self._grid = None

    def get_grid(self) -> OccupancyGrid:
        with self._lock:
            grid = self._grid
        if grid is None:
            raise GridUnavailable("No grid published yet")
        return grid


@lru_cache(maxsize=8)
def load_grid_from_path(
    file: str, fmt: str = "npy", *, resolution: float = 1.0, origin: tuple[float, float] = (0.0, 0.0)
) -> OccupancyGrid:
    if fmt == "npy":
        costs = np.load(file, allow_pickle=False)
        return OccupancyGrid(costs, resolution=resolution, origin_x=origin[0], origin_y=origin[1])
    raise ValueError(f"Unsupported grid fmt {fmt!r}")
