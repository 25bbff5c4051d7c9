"""Image output: tile maps and debug heightmaps."""

from pathlib import Path

import numpy as np
import structlog
from numpy.typing import NDArray
from PIL import Image

from ..grid import TileGrid
from ..tiles import TileCatalog, TileCategory

logger = structlog.get_logger()

# Colors for each tile (RGB)
TILE_COLORS: dict[str, tuple[int, int, int]] = {
    "grass": (60, 150, 60),
    "flowers": (150, 170, 80),
    "thick_grass": (45, 125, 45),
    "thicker_grass": (35, 105, 35),
    "forest": (20, 80, 20),
    "hill_grass": (90, 130, 70),
    "mountain_grass": (110, 110, 100),
    "sand": (230, 210, 140),
    "hill_sand": (200, 180, 120),
    "mountain_sand": (170, 150, 110),
    "water": (20, 60, 140),
    "swamp": (70, 90, 60),
    "bridge_vertical": (140, 100, 60),
    "bridge_horizontal": (140, 100, 60),
}

# Fallback for tiles from custom catalogs
CATEGORY_COLORS: dict[TileCategory, tuple[int, int, int]] = {
    TileCategory.GRASS: (60, 150, 60),
    TileCategory.SAND: (230, 210, 140),
    TileCategory.WATER: (20, 60, 140),
    TileCategory.SWAMP: (70, 90, 60),
}


def _palette(tiles: TileGrid) -> NDArray[np.uint8]:
    return np.array(
        [TILE_COLORS.get(tile.name, CATEGORY_COLORS[tile.category]) for tile in tiles.catalog],
        dtype=np.uint8,
    )


def check_atlas(atlas: Image.Image, catalog: TileCatalog, tile_size: int) -> None:
    """Raise ValueError unless the atlas has a sprite for every catalog id."""
    sprite_count = atlas.width // tile_size
    needed = max(tile.id for tile in catalog)
    if needed >= sprite_count or atlas.height < tile_size:
        raise ValueError(f"Atlas holds {sprite_count} sprites, tile id {needed} needed")


def render_tiles(
    tiles: TileGrid,
    atlas: Image.Image | None = None,
    tile_size: int = 16,
) -> Image.Image:
    """Render a tile grid.

    With an atlas, each cell is the sprite at ``tile.id`` in a single-row
    atlas of ``tile_size`` squares. Without one, each cell is one pixel
    in the tile's color.

    Args:
        tiles: Tile grid to render.
        atlas: Optional sprite atlas image.
        tile_size: Sprite edge length in pixels.

    Returns:
        Rendered RGB(A) image.
    """
    if atlas is None:
        return Image.fromarray(_palette(tiles)[tiles.data])

    ids = tiles.tile_ids()
    sprite_count = atlas.width // tile_size
    if int(ids.max()) >= sprite_count:
        raise ValueError(
            f"Atlas holds {sprite_count} sprites, tile id {int(ids.max())} needed"
        )

    sprites = {
        tile_id: atlas.crop(
            (tile_id * tile_size, 0, (tile_id + 1) * tile_size, tile_size)
        )
        for tile_id in np.unique(ids).tolist()
    }

    image = Image.new(atlas.mode, (tiles.width * tile_size, tiles.height * tile_size))
    for y in range(tiles.height):
        for x in range(tiles.width):
            image.paste(sprites[int(ids[y, x])], (x * tile_size, y * tile_size))

    return image


def save_heightmap_image(elevation: NDArray[np.float32], path: Path, range_max: float) -> None:
    """Save an elevation grid as a grayscale PNG."""
    scaled = np.clip(elevation / max(range_max - 1, 1) * 255.0, 0, 255).astype(np.uint8)
    Image.fromarray(scaled).save(path)


def dump_debug_images(output_dir: Path, range_max: float, **arrays: NDArray[np.float32]) -> None:
    """Save named heightmap stages as images for debugging.

    Args:
        output_dir: Directory to save images.
        range_max: Elevation range used for scaling.
        **arrays: Named elevation arrays to save.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    for name, arr in arrays.items():
        save_heightmap_image(arr, output_dir / f"{name}.png", range_max)

    logger.info("debug_images_saved", output_dir=str(output_dir), count=len(arrays))
