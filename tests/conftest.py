"""Shared test fixtures for map generation tests."""

import numpy as np
import pytest

from tileworld.grid import TileGrid
from tileworld.tiles import TileCatalog, default_catalog


@pytest.fixture
def catalog() -> TileCatalog:
    """Built-in tile catalog."""
    return default_catalog()


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def grass_grid(catalog: TileCatalog) -> TileGrid:
    """11x11 grid of plain grass."""
    return TileGrid.create(11, catalog, fill="grass")
