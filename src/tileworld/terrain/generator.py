"""Main map generation orchestration."""

from pathlib import Path

import numpy as np
import structlog
from numpy.typing import NDArray

from ..grid import TileGrid
from ..tiles import TileCatalog, default_catalog
from .biomes import classify_biomes, sample_noise
from .config import MapConfig
from .heightmap import compose_heightmap
from .hydrology import HydrologyResult, carve_rivers
from .noise import CoherentNoise
from .persistence import save_map
from .render import dump_debug_images
from .validation import ValidationResult, validate_map

logger = structlog.get_logger()


class GenerationResult:
    """Result of map generation with intermediate data."""

    def __init__(
        self,
        tiles: TileGrid,
        elevation: NDArray[np.float32],
        hydrology: HydrologyResult,
        validation: ValidationResult,
        config: MapConfig,
    ):
        self.tiles = tiles
        self.elevation = elevation
        self.hydrology = hydrology
        self.validation = validation
        self.config = config


def generate_map(config: MapConfig, catalog: TileCatalog | None = None) -> GenerationResult:
    """Generate a complete tile map from configuration.

    Stages run in a fixed order and share one random generator, so a
    given seed always yields the same map.

    Args:
        config: Map generation configuration.
        catalog: Tile catalog (defaults to the built-in catalog).

    Returns:
        GenerationResult with the finished tile grid.

    Raises:
        GeneratorError: If the fractal generator rejects the map size.
        ConfigurationError: If the catalog lacks a tile the rules need.
    """
    catalog = catalog or default_catalog()
    rng = np.random.default_rng(config.seed)
    cells = config.cells
    biomes = config.biomes
    range_max = config.heightmap.range_max

    logger.info("generation_started", cells=cells, seed=config.seed)

    # Stage A: Heightmap
    stages = compose_heightmap(
        cells, rng, config.heightmap, biomes.water_max, biomes.grass_max
    )
    elevation = stages["final"]

    # Stage B: Noise fields
    coarse = sample_noise(
        CoherentNoise(config.seed + 100), cells, biomes.coarse_wavelength, range_max
    )
    fine = sample_noise(
        CoherentNoise(config.seed + 200), cells, biomes.fine_wavelength, range_max
    )
    swamp = sample_noise(
        CoherentNoise(config.seed + 300), cells, biomes.swamp_wavelength, range_max
    )

    # Stage C: Biomes
    tiles = classify_biomes(elevation, coarse, fine, swamp, catalog, rng, biomes)

    # Stage D: Hydrology
    hydrology = carve_rivers(tiles, elevation, biomes.grass_max, rng, config.hydrology)

    # Stage E: Validation
    validation = validate_map(tiles, hydrology, config)
    _log_map_stats(tiles)

    if config.debug_output_dir:
        dump_debug_images(Path(config.debug_output_dir), range_max, **stages)

    return GenerationResult(
        tiles=tiles,
        elevation=elevation,
        hydrology=hydrology,
        validation=validation,
        config=config,
    )


def generate_and_save_map(
    config: MapConfig,
    save_path: Path,
    catalog: TileCatalog | None = None,
) -> GenerationResult:
    """Generate a map and save it to ``save_path``.

    Args:
        config: Map generation configuration.
        save_path: Path to save the generated map.
        catalog: Tile catalog (defaults to the built-in catalog).

    Returns:
        GenerationResult of the saved map.
    """
    result = generate_map(config, catalog)

    save_path.parent.mkdir(parents=True, exist_ok=True)
    save_map(save_path, result.tiles, result.hydrology, config)

    return result


def _log_map_stats(tiles: TileGrid) -> None:
    """Log per-tile counts."""
    total = tiles.data.size
    counts = np.bincount(tiles.data.ravel(), minlength=len(tiles.catalog))

    for tile, count in zip(tiles.catalog, counts):
        if count:
            logger.debug(
                "tile_count",
                tile=tile.name,
                count=int(count),
                percent=round(float(count) / total * 100, 1),
            )
