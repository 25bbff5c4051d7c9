"""2D grids for elevation, masks and tiles.

Coordinate system: ``(y, x)`` row-major, matching numpy indexing.
+X is East (right), +Y is South (down).
"""

from enum import IntEnum
from typing import Any, Callable

import numpy as np
from numpy.typing import DTypeLike, NDArray

from .tiles import Tile, TileCatalog, TileCategory


class FlowDirection(IntEnum):
    """Cardinal directions, ordered by tie-break priority."""

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


# (dy, dx) per direction
FLOW_DELTAS: dict[FlowDirection, tuple[int, int]] = {
    FlowDirection.UP: (-1, 0),
    FlowDirection.DOWN: (1, 0),
    FlowDirection.LEFT: (0, -1),
    FlowDirection.RIGHT: (0, 1),
}


class Grid:
    """Rectangular field of values backed by a numpy array.

    Unlike raw numpy indexing, ``get``/``set`` reject negative or
    out-of-range coordinates instead of wrapping.
    """

    def __init__(self, data: NDArray[Any]) -> None:
        if data.ndim != 2:
            raise ValueError(f"Grid data must be 2D, got shape {data.shape}")
        self.data = data

    @classmethod
    def filled(
        cls,
        height: int,
        width: int,
        value: Any,
        dtype: DTypeLike = np.float32,
    ) -> "Grid":
        """Create a grid with every cell set to ``value``."""
        return cls(np.full((height, width), value, dtype=dtype))

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self.data.shape

    def in_bounds(self, y: int, x: int) -> bool:
        return 0 <= y < self.height and 0 <= x < self.width

    def _check(self, y: int, x: int) -> None:
        if not self.in_bounds(y, x):
            raise IndexError(
                f"Cell ({y}, {x}) outside grid of {self.height}x{self.width}"
            )

    def get(self, y: int, x: int) -> Any:
        self._check(y, x)
        return self.data[y, x]

    def set(self, y: int, x: int, value: Any) -> None:
        self._check(y, x)
        self.data[y, x] = value

    def neighbor(self, y: int, x: int, direction: FlowDirection) -> tuple[int, int]:
        """Return the adjacent cell in ``direction``, clamped to the grid."""
        self._check(y, x)
        dy, dx = FLOW_DELTAS[direction]
        ny = min(max(y + dy, 0), self.height - 1)
        nx = min(max(x + dx, 0), self.width - 1)
        return ny, nx

    def transform(self, fn: Callable[[NDArray[Any]], NDArray[Any]]) -> "Grid":
        """Apply a whole-array function and wrap the result in a new grid."""
        result = fn(self.data)
        if result.shape != self.data.shape:
            raise ValueError(
                f"Transform changed grid shape {self.data.shape} -> {result.shape}"
            )
        return Grid(result)

    def copy(self) -> "Grid":
        return Grid(self.data.copy())


class TileGrid(Grid):
    """Grid of catalog indices, one tile per cell."""

    def __init__(self, data: NDArray[np.uint8], catalog: TileCatalog) -> None:
        super().__init__(data)
        self.catalog = catalog

    @classmethod
    def create(cls, cells: int, catalog: TileCatalog, fill: str) -> "TileGrid":
        """Create a ``cells x cells`` grid filled with the named tile."""
        index = catalog.index_of(fill)
        return cls(np.full((cells, cells), index, dtype=np.uint8), catalog)

    def tile(self, y: int, x: int) -> Tile:
        return self.catalog[int(self.get(y, x))]

    def set_tile(self, y: int, x: int, tile: Tile) -> None:
        self.set(y, x, self.catalog.index_of(tile.name))

    def category_mask(self, category: TileCategory) -> NDArray[np.bool_]:
        """Boolean mask of cells whose tile belongs to ``category``."""
        in_category = np.array(
            [tile.category == category for tile in self.catalog], dtype=bool
        )
        return in_category[self.data]

    def walkable_mask(self) -> NDArray[np.bool_]:
        walkable = np.array([tile.walkable for tile in self.catalog], dtype=bool)
        return walkable[self.data]

    def bridge_mask(self) -> NDArray[np.bool_]:
        bridges = np.array([tile.bridge for tile in self.catalog], dtype=bool)
        return bridges[self.data]

    def tile_ids(self) -> NDArray[np.uint8]:
        """Per-cell numeric tile ids, as consumed by the sprite renderer."""
        ids = np.array([tile.id for tile in self.catalog], dtype=np.uint8)
        return ids[self.data]

    def names(self) -> NDArray[np.str_]:
        return np.array(self.catalog.names)[self.data]

    def copy(self) -> "TileGrid":
        return TileGrid(self.data.copy(), self.catalog)
