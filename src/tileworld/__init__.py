"""Tile-based island map generation.

Composes fractal heightmaps into an island, classifies biomes and carves
rivers with bridges into a grid of catalog tiles.
"""

from .exceptions import (
    ConfigurationError,
    DegenerateInputError,
    GeneratorError,
    TileWorldError,
)
from .grid import FlowDirection, Grid, TileGrid
from .tiles import Tile, TileCatalog, TileCategory, default_catalog, load_catalog

__all__ = [
    "ConfigurationError",
    "DegenerateInputError",
    "FlowDirection",
    "GeneratorError",
    "Grid",
    "Tile",
    "TileCatalog",
    "TileCategory",
    "TileGrid",
    "TileWorldError",
    "default_catalog",
    "load_catalog",
]
