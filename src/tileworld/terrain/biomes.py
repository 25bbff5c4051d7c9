"""Biome classification: elevation bands, vegetation, swamps, dunes."""

from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import NDArray

from ..grid import TileGrid
from ..tiles import TileCatalog, TileCategory
from .config import BiomeConfig
from .heightmap import blend_average, normalize
from .noise import NoiseField

logger = structlog.get_logger()

# Grass tiles with a dedicated sand variant; everything else becomes plain sand
SAND_COUNTERPARTS: dict[str, str] = {
    "hill_grass": "hill_sand",
    "mountain_grass": "mountain_sand",
}


@dataclass(frozen=True)
class _WeightTable:
    noise_above: float
    choices: NDArray[np.intp]  # catalog indices
    cumulative: NDArray[np.int64]

    @property
    def total(self) -> int:
        return int(self.cumulative[-1])


@dataclass(frozen=True)
class BiomeTiles:
    """Catalog indices the classifier writes, resolved once per run."""

    water: int
    grass: int
    hill_grass: int
    mountain_grass: int
    forest: int
    swamp: int
    sand_counterpart: NDArray[np.intp]  # catalog index -> sand variant index
    is_grass: NDArray[np.bool_]
    is_water: NDArray[np.bool_]

    @classmethod
    def from_catalog(cls, catalog: TileCatalog) -> "BiomeTiles":
        """Resolve the classifier's tiles.

        Raises:
            ConfigurationError: If the catalog lacks a tile the rules need.
        """
        sand = catalog.index_of("sand")
        counterpart = np.arange(len(catalog), dtype=np.intp)
        for i, tile in enumerate(catalog):
            if tile.category == TileCategory.GRASS:
                name = SAND_COUNTERPARTS.get(tile.name)
                counterpart[i] = catalog.index_of(name) if name else sand

        return cls(
            water=catalog.index_of("water"),
            grass=catalog.index_of("grass"),
            hill_grass=catalog.index_of("hill_grass"),
            mountain_grass=catalog.index_of("mountain_grass"),
            forest=catalog.index_of("forest"),
            swamp=catalog.index_of("swamp"),
            sand_counterpart=counterpart,
            is_grass=np.array([t.category == TileCategory.GRASS for t in catalog]),
            is_water=np.array([t.category == TileCategory.WATER for t in catalog]),
        )


def _weight_tables(catalog: TileCatalog, config: BiomeConfig) -> list[_WeightTable]:
    tables = []
    for band in config.vegetation_bands:
        names = list(band.weights)
        tables.append(
            _WeightTable(
                noise_above=band.noise_above,
                choices=np.array([catalog.index_of(n) for n in names], dtype=np.intp),
                cumulative=np.cumsum([band.weights[n] for n in names]),
            )
        )
    return tables


def sample_noise(
    field: NoiseField,
    cells: int,
    wavelength: float,
    range_max: float,
) -> NDArray[np.float32]:
    """Sample a noise field over the grid and normalize it to [0, range_max).

    Args:
        field: Coherent noise source.
        cells: Map side length.
        wavelength: Tiles per unit of noise coordinate.
        range_max: Exclusive upper bound of the output range.

    Returns:
        Normalized noise grid; a constant field yields all zeros.
    """
    values = np.empty((cells, cells), dtype=np.float32)
    for y in range(cells):
        for x in range(cells):
            values[y, x] = field.sample(x / wavelength, y / wavelength)
    return normalize(values, range_max)


def classify_elevation(
    elevation: NDArray[np.float32],
    tiles: TileGrid,
    biome_tiles: BiomeTiles,
    config: BiomeConfig,
) -> None:
    """Assign water, grass, hill or mountain by elevation band, in place."""
    bands = np.select(
        [
            elevation < config.water_max,
            elevation < config.grass_max,
            elevation < config.hill_max,
        ],
        [biome_tiles.water, biome_tiles.grass, biome_tiles.hill_grass],
        default=biome_tiles.mountain_grass,
    )
    tiles.data[:] = bands.astype(np.uint8)


def apply_vegetation(
    tiles: TileGrid,
    noise: NDArray[np.float32],
    biome_tiles: BiomeTiles,
    rng: np.random.Generator,
    config: BiomeConfig,
) -> None:
    """Vary grass by vegetation noise and dry out low-noise land, in place.

    On plain grass: forest above the forest threshold, then a weighted
    draw from the first band whose lower bound the noise exceeds. Grass,
    hill and mountain cells at or below the sand threshold become their
    sand counterpart.
    """
    tables = _weight_tables(tiles.catalog, config)
    data = tiles.data

    grass = data == biome_tiles.grass
    highland = (data == biome_tiles.hill_grass) | (data == biome_tiles.mountain_grass)
    dry = (grass | highland) & (noise <= config.sand_threshold)
    forest = grass & (noise > config.forest_threshold)

    # np.argwhere yields row-major order, which fixes the draw sequence
    banded = grass & ~forest & (noise > config.sand_threshold)
    for y, x in np.argwhere(banded):
        value = noise[y, x]
        table = next((t for t in tables if value > t.noise_above), None)
        if table is None:
            continue
        roll = rng.integers(0, table.total)
        pick = int(np.searchsorted(table.cumulative, roll, side="right"))
        data[y, x] = table.choices[pick]

    data[forest] = biome_tiles.forest
    data[dry] = biome_tiles.sand_counterpart[data[dry]]


def apply_swamps(
    tiles: TileGrid,
    swamp_noise: NDArray[np.float32],
    biome_tiles: BiomeTiles,
    config: BiomeConfig,
) -> None:
    """Turn grass-category cells with high swamp noise into swamp, in place."""
    grass = biome_tiles.is_grass[tiles.data]
    tiles.data[grass & (swamp_noise > config.swamp_threshold)] = biome_tiles.swamp


def apply_dunes(
    tiles: TileGrid,
    biome_tiles: BiomeTiles,
    rng: np.random.Generator,
    config: BiomeConfig,
) -> None:
    """Sand over coastal grass with probability ``dune_probability``, in place."""
    data = tiles.data
    height, width = data.shape

    for y in range(height):
        for x in range(width):
            if not biome_tiles.is_grass[data[y, x]]:
                continue
            coastal = (
                (y > 0 and biome_tiles.is_water[data[y - 1, x]])
                or (y < height - 1 and biome_tiles.is_water[data[y + 1, x]])
                or (x > 0 and biome_tiles.is_water[data[y, x - 1]])
                or (x < width - 1 and biome_tiles.is_water[data[y, x + 1]])
            )
            if coastal and rng.random() < config.dune_probability:
                data[y, x] = biome_tiles.sand_counterpart[data[y, x]]


def classify_biomes(
    elevation: NDArray[np.float32],
    coarse_noise: NDArray[np.float32],
    fine_noise: NDArray[np.float32],
    swamp_noise: NDArray[np.float32],
    catalog: TileCatalog,
    rng: np.random.Generator,
    config: BiomeConfig,
) -> TileGrid:
    """Classify a finished heightmap into a tile grid.

    Args:
        elevation: Normalized elevation, shape (cells, cells).
        coarse_noise: Low-frequency vegetation noise, normalized.
        fine_noise: High-frequency vegetation noise, normalized.
        swamp_noise: Independent swamp noise, normalized.
        catalog: Tile catalog.
        rng: Random number generator shared across the pipeline.
        config: Classification thresholds.

    Returns:
        TileGrid with every cell classified.

    Raises:
        ConfigurationError: If the catalog lacks a tile the rules name.
    """
    height, width = elevation.shape
    if height != width:
        raise ValueError(f"Map must be square, got {height}x{width}")

    biome_tiles = BiomeTiles.from_catalog(catalog)
    tiles = TileGrid.create(height, catalog, fill="water")

    classify_elevation(elevation, tiles, biome_tiles, config)
    apply_vegetation(
        tiles, blend_average(coarse_noise, fine_noise), biome_tiles, rng, config
    )
    apply_swamps(tiles, swamp_noise, biome_tiles, config)
    apply_dunes(tiles, biome_tiles, rng, config)

    logger.info(
        "biomes_classified",
        water=int(np.sum(biome_tiles.is_water[tiles.data])),
        grass=int(np.sum(biome_tiles.is_grass[tiles.data])),
        swamp=int(np.sum(tiles.data == biome_tiles.swamp)),
    )
    return tiles
