"""Hydrology: river source selection, river tracing and bridge placement.

Rivers are traced one at a time over the tile grid. Each step heads in
the cardinal direction with the nearest water, with a random direction
substituted often enough to keep rivers from running straight. A
finished river is stamped into the grid as water, so later rivers end
when they reach earlier ones.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import structlog
from numpy.typing import NDArray

from ..grid import FlowDirection, Grid, TileGrid
from ..tiles import TileCategory
from .config import HydrologyConfig

logger = structlog.get_logger()

# Source draws are percentiles on [1, PERCENTILE_SCALE]
PERCENTILE_SCALE = 1000


class RiverEnd(str, Enum):
    """Why a river stopped flowing."""

    REACHED_WATER = "reached_water"
    STEP_LIMIT = "step_limit"


@dataclass
class River:
    """A traced river path with its termination reason."""

    path: list[tuple[int, int]]  # (y, x) coordinates, source first
    end: RiverEnd
    steps: int


@dataclass
class HydrologyResult:
    """Rivers, kept bridges and the cumulative river mask."""

    rivers: list[River]
    bridges: list[tuple[int, int]]
    river_mask: Grid
    skipped_sources: list[tuple[int, int]] = field(default_factory=list)


def select_river_sources(
    elevation: NDArray[np.float32],
    terrain_cutoff: float,
    rng: np.random.Generator,
    config: HydrologyConfig,
) -> list[tuple[int, int]]:
    """Pick river start cells among high ground.

    Eligible cells exceed ``terrain_cutoff - source_margin`` and are kept in
    row-major order. The river count is the eligible percentage of the
    map, rounded up. Each start is a percentile draw mapped onto the
    eligible list, so sources follow the list's ordering rather than
    being uniform over it.

    Args:
        elevation: Normalized elevation, shape (cells, cells).
        terrain_cutoff: Elevation where hills begin.
        rng: Random number generator.
        config: Hydrology configuration.

    Returns:
        List of (y, x) source coordinates, possibly with repeats.
    """
    eligible = np.argwhere(elevation > terrain_cutoff - config.source_margin)
    if len(eligible) == 0:
        return []

    river_count = math.ceil(len(eligible) * 100 / elevation.size)

    sources = []
    for _ in range(river_count):
        draw = int(rng.integers(1, PERCENTILE_SCALE + 1))
        index = min(draw * len(eligible) // PERCENTILE_SCALE, len(eligible) - 1)
        y, x = eligible[index]
        sources.append((int(y), int(x)))

    return sources


def distance_to_water(
    tiles: TileGrid,
    y: int,
    x: int,
    direction: FlowDirection,
    budget: int,
) -> int:
    """Steps from (y, x) to the first water cell in a straight line.

    Walking stops at the map edge. Returns ``budget + 1`` if no water is
    found within ``budget`` steps.
    """
    is_water = tiles.category_mask(TileCategory.WATER)
    return _distance_in_mask(is_water, tiles, y, x, direction, budget)


def _distance_in_mask(
    is_water: NDArray[np.bool_],
    grid: Grid,
    y: int,
    x: int,
    direction: FlowDirection,
    budget: int,
) -> int:
    cy, cx = y, x
    for step in range(1, budget + 1):
        ny, nx = grid.neighbor(cy, cx, direction)
        if (ny, nx) == (cy, cx):
            break
        if is_water[ny, nx]:
            return step
        cy, cx = ny, nx
    return budget + 1


def choose_direction(
    is_water: NDArray[np.bool_],
    grid: Grid,
    y: int,
    x: int,
    budget: int,
) -> FlowDirection:
    """Direction with the nearest water; ties keep the earlier direction."""
    best = FlowDirection.UP
    best_distance = _distance_in_mask(is_water, grid, y, x, best, budget)
    for direction in (FlowDirection.DOWN, FlowDirection.LEFT, FlowDirection.RIGHT):
        distance = _distance_in_mask(is_water, grid, y, x, direction, budget)
        if distance < best_distance:
            best, best_distance = direction, distance
    return best


def trace_river(
    tiles: TileGrid,
    source: tuple[int, int],
    rng: np.random.Generator,
    config: HydrologyConfig,
) -> River:
    """Trace one river from ``source`` and stamp it into ``tiles`` as water.

    Args:
        tiles: Tile grid, modified in place.
        source: (y, x) start cell.
        rng: Random number generator.
        config: Hydrology configuration.

    Returns:
        The traced River.
    """
    water = tiles.catalog.index_of("water")
    is_water = tiles.category_mask(TileCategory.WATER)
    budget = tiles.height

    river_mask = Grid.filled(tiles.height, tiles.width, False, dtype=bool)
    y, x = source
    river_mask.set(y, x, True)
    path = [source]

    steps = 0
    while True:
        steps += 1
        if steps > config.max_steps:
            end = RiverEnd.STEP_LIMIT
            break

        direction = choose_direction(is_water, tiles, y, x, budget)
        ny, nx = tiles.neighbor(y, x, direction)
        if rng.random() < config.meander_probability or river_mask.get(ny, nx):
            direction = FlowDirection(int(rng.integers(0, len(FlowDirection))))
            ny, nx = tiles.neighbor(y, x, direction)

        if is_water[ny, nx]:
            end = RiverEnd.REACHED_WATER
            break

        if not river_mask.get(ny, nx):
            river_mask.set(ny, nx, True)
            path.append((ny, nx))
            y, x = ny, nx

    for py, px in path:
        tiles.set(py, px, water)

    logger.debug(
        "river_traced", source=source, length=len(path), steps=steps, end=end.value
    )
    return River(path=path, end=end, steps=steps)


def place_bridges(
    tiles: TileGrid,
    river_mask: NDArray[np.bool_],
    river_count: int,
    rng: np.random.Generator,
    config: HydrologyConfig,
) -> list[tuple[int, int]]:
    """Place bridges across rivers, then thin them to a fixed density.

    A river cell with no bridge beside it becomes a vertical bridge when
    both its up and down neighbors are walkable, else a horizontal bridge
    when both left and right are. Of these candidates,
    ``bridges_per_river * river_count`` are kept and the rest revert to
    water.

    Args:
        tiles: Tile grid with rivers stamped, modified in place.
        river_mask: Cells claimed by any river.
        river_count: Number of rivers traced.
        rng: Random number generator.
        config: Hydrology configuration.

    Returns:
        Sorted (y, x) positions of the kept bridges.
    """
    catalog = tiles.catalog
    water = catalog.index_of("water")
    vertical = catalog.index_of("bridge_vertical")
    horizontal = catalog.index_of("bridge_horizontal")
    walkable = np.array([tile.walkable for tile in catalog], dtype=bool)
    is_bridge = np.array([tile.bridge for tile in catalog], dtype=bool)

    data = tiles.data
    height, width = data.shape

    def walkable_at(y: int, x: int) -> bool:
        return 0 <= y < height and 0 <= x < width and bool(walkable[data[y, x]])

    def bridge_at(y: int, x: int) -> bool:
        return 0 <= y < height and 0 <= x < width and bool(is_bridge[data[y, x]])

    candidates: list[tuple[int, int]] = []
    for y, x in np.argwhere(river_mask):
        y, x = int(y), int(x)
        if any(
            bridge_at(y + dy, x + dx) for dy, dx in ((-1, 0), (1, 0), (0, -1), (0, 1))
        ):
            continue
        if walkable_at(y - 1, x) and walkable_at(y + 1, x):
            data[y, x] = vertical
            candidates.append((y, x))
        elif walkable_at(y, x - 1) and walkable_at(y, x + 1):
            data[y, x] = horizontal
            candidates.append((y, x))

    keep_count = min(config.bridges_per_river * river_count, len(candidates))
    if keep_count < len(candidates):
        kept = set(rng.choice(len(candidates), size=keep_count, replace=False).tolist())
        for i, (y, x) in enumerate(candidates):
            if i not in kept:
                data[y, x] = water

    bridges = sorted(pos for pos in candidates if is_bridge[data[pos]])
    logger.debug("bridges_placed", candidates=len(candidates), kept=len(bridges))
    return bridges


def carve_rivers(
    tiles: TileGrid,
    elevation: NDArray[np.float32],
    terrain_cutoff: float,
    rng: np.random.Generator,
    config: HydrologyConfig,
) -> HydrologyResult:
    """Select sources, trace every river, then place bridges.

    All sources are drawn before any river is traced. Rivers run strictly
    one after another; a source that is already water when its turn
    comes is dropped.

    Args:
        tiles: Classified tile grid, modified in place.
        elevation: Normalized elevation used for source selection.
        terrain_cutoff: Elevation where hills begin.
        rng: Random number generator.
        config: Hydrology configuration.

    Returns:
        HydrologyResult with rivers, bridges and the cumulative mask.
    """
    if elevation.shape != tiles.shape:
        raise ValueError(
            f"Elevation shape {elevation.shape} does not match tiles {tiles.shape}"
        )

    sources = select_river_sources(elevation, terrain_cutoff, rng, config)

    river_mask = Grid.filled(tiles.height, tiles.width, False, dtype=bool)
    rivers: list[River] = []
    skipped: list[tuple[int, int]] = []

    for source in sources:
        if tiles.tile(*source).category == TileCategory.WATER:
            skipped.append(source)
            continue
        river = trace_river(tiles, source, rng, config)
        for y, x in river.path:
            river_mask.set(y, x, True)
        rivers.append(river)

    bridges = place_bridges(tiles, river_mask.data, len(rivers), rng, config)

    logger.info(
        "rivers_carved",
        sources=len(sources),
        rivers=len(rivers),
        skipped=len(skipped),
        river_cells=int(np.sum(river_mask.data)),
        bridges=len(bridges),
    )
    return HydrologyResult(
        rivers=rivers, bridges=bridges, river_mask=river_mask, skipped_sources=skipped
    )
