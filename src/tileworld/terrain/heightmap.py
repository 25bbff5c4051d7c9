"""Heightmap composition: normalization, blending, island shaping, mountains."""

import numpy as np
import structlog
from numpy.typing import NDArray

from ..exceptions import DegenerateInputError
from .config import HeightmapConfig
from .noise import diamond_square

logger = structlog.get_logger()


def _value_range(elevation: NDArray[np.float32]) -> tuple[float, float]:
    """Return (min, max) of a grid.

    Raises:
        DegenerateInputError: If every cell has the same value.
    """
    low = float(np.min(elevation))
    high = float(np.max(elevation))
    if high == low:
        raise DegenerateInputError(f"Flat grid, every cell is {low}")
    return low, high


def normalize(elevation: NDArray[np.float32], target_max: float) -> NDArray[np.float32]:
    """Rescale a grid so its values span [0, target_max - 1].

    A flat grid has no range to stretch and normalizes to all zeros.

    Args:
        elevation: Input grid.
        target_max: Exclusive upper bound of the output range.

    Returns:
        Normalized float32 grid of the same shape.
    """
    try:
        low, high = _value_range(elevation)
    except DegenerateInputError:
        logger.debug("normalize_flat_input", shape=elevation.shape)
        return np.zeros(elevation.shape, dtype=np.float32)

    result = (elevation - low) / (high - low) * (target_max - 1)
    return result.astype(np.float32)


def blend_average(a: NDArray[np.float32], b: NDArray[np.float32]) -> NDArray[np.float32]:
    """Elementwise mean of two equally sized grids."""
    if a.shape != b.shape:
        raise ValueError(f"Cannot blend grids of shape {a.shape} and {b.shape}")
    return ((a + b) / 2.0).astype(np.float32)


def island_falloff(
    elevation: NDArray[np.float32],
    center: tuple[float, float],
    radius: float,
) -> NDArray[np.float32]:
    """Erode elevation beyond ``radius`` from ``center`` to shape an island.

    Cells farther than ``radius`` are scaled by ``(radius - excess) / radius``
    (clamped at 0), where ``excess`` is the distance beyond the radius.
    Border cells and cells that end up negative are forced to 0.

    Args:
        elevation: Input elevation field.
        center: (y, x) center of the island.
        radius: Distance from center where falloff begins.

    Returns:
        Elevation with falloff applied.
    """
    if radius <= 0:
        raise ValueError(f"Falloff radius must be positive, got {radius}")

    height, width = elevation.shape
    cy, cx = center

    yy, xx = np.meshgrid(
        np.arange(height, dtype=np.float32),
        np.arange(width, dtype=np.float32),
        indexing="ij",
    )
    dist = np.sqrt((yy - cy) ** 2 + (xx - cx) ** 2)

    excess = np.maximum(dist - radius, 0.0)
    scale = np.clip((radius - excess) / radius, 0.0, None)
    result = (elevation * scale).astype(np.float32)

    result[result < 0] = 0.0
    result[0, :] = 0.0
    result[-1, :] = 0.0
    result[:, 0] = 0.0
    result[:, -1] = 0.0

    return result


def mountain_overlay(
    primary: NDArray[np.float32],
    secondary: NDArray[np.float32],
    water_cutoff: float,
    terrain_cutoff: float,
) -> NDArray[np.float32]:
    """Perturb elevated land toward an independent field.

    Pure radial falloff leaves the highest ground bunched at the island
    center; blending land cells toward ``secondary`` spreads it out.
    Cells below ``water_cutoff`` are untouched. Cells below
    ``terrain_cutoff`` take ``secondary``'s value outright, higher cells
    move a tenth of the way. Land never drops below ``water_cutoff``.

    Args:
        primary: Island-shaped elevation.
        secondary: Independent elevation field, same shape and range.
        water_cutoff: Elevation where land begins.
        terrain_cutoff: Elevation where hills begin.

    Returns:
        Blended elevation.
    """
    if primary.shape != secondary.shape:
        raise ValueError(
            f"Cannot overlay grids of shape {primary.shape} and {secondary.shape}"
        )

    result = primary.copy()
    land = primary >= water_cutoff
    diff = secondary - primary
    weight = np.where(primary < terrain_cutoff, 1.0, 0.1)

    blended = primary + diff * weight
    blended = np.maximum(blended, water_cutoff)
    result[land] = blended[land]

    return result.astype(np.float32)


def compose_heightmap(
    cells: int,
    rng: np.random.Generator,
    config: HeightmapConfig,
    water_cutoff: float,
    terrain_cutoff: float,
) -> dict[str, NDArray[np.float32]]:
    """Compose the final island heightmap from three fractal fields.

    Args:
        cells: Map side length (2^k + 1).
        rng: Random number generator shared with later stages.
        config: Heightmap parameters.
        water_cutoff: Elevation where land begins.
        terrain_cutoff: Elevation where hills begin.

    Returns:
        Dict of named stages ("blended", "island", "final"); "final" is
        the elevation handed to classification.

    Raises:
        GeneratorError: If the fractal generator rejects the parameters.
    """
    range_max = config.range_max

    coarse = normalize(
        diamond_square(cells, config.coarse_roughness, rng, config.perturbation),
        range_max,
    )
    fine = normalize(
        diamond_square(cells, config.fine_roughness, rng, config.perturbation),
        range_max,
    )
    blended = normalize(blend_average(coarse, fine), range_max)

    center = ((cells - 1) / 2, (cells - 1) / 2)
    radius = cells * config.falloff_radius_fraction
    island = normalize(island_falloff(blended, center, radius), range_max)

    mountains = normalize(
        diamond_square(cells, config.mountain_roughness, rng, config.perturbation),
        range_max,
    )
    final = normalize(
        mountain_overlay(island, mountains, water_cutoff, terrain_cutoff),
        range_max,
    )

    logger.info(
        "heightmap_composed",
        cells=cells,
        land_fraction=round(float(np.mean(final >= water_cutoff)), 3),
    )

    return {"blended": blended, "island": island, "final": final}
