"""Tile kinds and the catalog that indexes them."""

import tomllib
from enum import Enum
from pathlib import Path
from typing import Iterator, Sequence

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError


class TileCategory(str, Enum):
    """Broad terrain category a tile belongs to."""

    GRASS = "grass"
    SAND = "sand"
    WATER = "water"
    SWAMP = "swamp"


class Tile(BaseModel, frozen=True):
    """Immutable tile definition."""

    name: str
    category: TileCategory
    walkable: bool = True
    bridge: bool = False
    id: int = Field(ge=0, le=255, description="Sprite index in the tile atlas")


class TileCatalog:
    """Fixed, ordered registry of tiles with name lookup.

    Names and ids must be unique. Lookups go through a name-to-index
    mapping built once at construction.
    """

    def __init__(self, tiles: Sequence[Tile]) -> None:
        if not tiles:
            raise ConfigurationError("Tile catalog is empty")

        self._tiles: tuple[Tile, ...] = tuple(tiles)
        self._index: dict[str, int] = {}
        seen_ids: set[int] = set()

        for i, tile in enumerate(self._tiles):
            if tile.name in self._index:
                raise ConfigurationError(f"Duplicate tile name: {tile.name!r}")
            if tile.id in seen_ids:
                raise ConfigurationError(
                    f"Duplicate tile id {tile.id} (tile {tile.name!r})"
                )
            self._index[tile.name] = i
            seen_ids.add(tile.id)

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __getitem__(self, index: int) -> Tile:
        return self._tiles[index]

    def index_of(self, name: str) -> int:
        """Return the catalog index of a tile.

        Raises:
            ConfigurationError: If no tile has this name.
        """
        try:
            return self._index[name]
        except KeyError:
            raise ConfigurationError(f"Unknown tile name: {name!r}") from None

    def by_name(self, name: str) -> Tile:
        """Return the tile with the given name.

        Raises:
            ConfigurationError: If no tile has this name.
        """
        return self._tiles[self.index_of(name)]

    @property
    def names(self) -> list[str]:
        return [tile.name for tile in self._tiles]


# Built-in tile set, in sprite atlas order
DEFAULT_TILES: tuple[Tile, ...] = (
    Tile(name="grass", category=TileCategory.GRASS, id=0),
    Tile(name="flowers", category=TileCategory.GRASS, id=1),
    Tile(name="thick_grass", category=TileCategory.GRASS, id=2),
    Tile(name="thicker_grass", category=TileCategory.GRASS, id=3),
    Tile(name="forest", category=TileCategory.GRASS, id=4),
    Tile(name="hill_grass", category=TileCategory.GRASS, id=5),
    Tile(name="mountain_grass", category=TileCategory.GRASS, walkable=False, id=6),
    Tile(name="sand", category=TileCategory.SAND, id=7),
    Tile(name="hill_sand", category=TileCategory.SAND, id=8),
    Tile(name="mountain_sand", category=TileCategory.SAND, walkable=False, id=9),
    Tile(name="water", category=TileCategory.WATER, walkable=False, id=10),
    Tile(name="swamp", category=TileCategory.SWAMP, id=11),
    Tile(name="bridge_vertical", category=TileCategory.WATER, bridge=True, id=12),
    Tile(name="bridge_horizontal", category=TileCategory.WATER, bridge=True, id=13),
)


def default_catalog() -> TileCatalog:
    """Return the built-in tile catalog."""
    return TileCatalog(DEFAULT_TILES)


class _CatalogFile(BaseModel):
    tiles: list[Tile]


def load_catalog(path: Path) -> TileCatalog:
    """Load a tile catalog from a TOML file with ``[[tiles]]`` entries.

    Args:
        path: Path to the TOML file.

    Returns:
        Validated TileCatalog.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigurationError: If the file is malformed or the tiles are invalid.
    """
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed catalog file {path}: {e}") from e

    try:
        parsed = _CatalogFile.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid tile definitions in {path}: {e}") from e

    return TileCatalog(parsed.tiles)
