"""Tests for grids and flow directions."""

import numpy as np
import pytest

from tileworld.exceptions import ConfigurationError
from tileworld.grid import FLOW_DELTAS, FlowDirection, Grid, TileGrid
from tileworld.tiles import TileCatalog, TileCategory


class TestFlowDirection:
    """Tests for the direction enum."""

    def test_priority_order(self) -> None:
        assert list(FlowDirection) == [
            FlowDirection.UP,
            FlowDirection.DOWN,
            FlowDirection.LEFT,
            FlowDirection.RIGHT,
        ]

    def test_deltas_are_unit_steps(self) -> None:
        for dy, dx in FLOW_DELTAS.values():
            assert abs(dy) + abs(dx) == 1


class TestGrid:
    """Tests for bounds-checked grid access."""

    def test_filled(self) -> None:
        grid = Grid.filled(4, 6, 1.5)
        assert grid.shape == (4, 6)
        assert grid.height == 4
        assert grid.width == 6
        assert grid.data.dtype == np.float32
        assert grid.get(3, 5) == 1.5

    def test_get_set(self) -> None:
        grid = Grid.filled(3, 3, 0.0)
        grid.set(1, 2, 7.0)
        assert grid.get(1, 2) == 7.0
        assert grid.data[1, 2] == 7.0

    def test_out_of_range_fails_fast(self) -> None:
        grid = Grid.filled(3, 3, 0.0)
        with pytest.raises(IndexError):
            grid.get(3, 0)
        with pytest.raises(IndexError):
            grid.set(0, 3, 1.0)

    def test_negative_index_does_not_wrap(self) -> None:
        grid = Grid.filled(3, 3, 0.0)
        with pytest.raises(IndexError):
            grid.get(-1, 0)

    def test_rejects_non_2d(self) -> None:
        with pytest.raises(ValueError):
            Grid(np.zeros(5))

    def test_neighbor_interior(self) -> None:
        grid = Grid.filled(5, 5, 0.0)
        assert grid.neighbor(2, 2, FlowDirection.UP) == (1, 2)
        assert grid.neighbor(2, 2, FlowDirection.DOWN) == (3, 2)
        assert grid.neighbor(2, 2, FlowDirection.LEFT) == (2, 1)
        assert grid.neighbor(2, 2, FlowDirection.RIGHT) == (2, 3)

    def test_neighbor_clamps_at_every_border(self) -> None:
        grid = Grid.filled(5, 5, 0.0)
        assert grid.neighbor(0, 2, FlowDirection.UP) == (0, 2)
        assert grid.neighbor(4, 2, FlowDirection.DOWN) == (4, 2)
        assert grid.neighbor(2, 0, FlowDirection.LEFT) == (2, 0)
        assert grid.neighbor(2, 4, FlowDirection.RIGHT) == (2, 4)

    def test_transform(self) -> None:
        grid = Grid.filled(2, 2, 3.0)
        doubled = grid.transform(lambda data: data * 2)
        np.testing.assert_array_equal(doubled.data, 6.0)
        np.testing.assert_array_equal(grid.data, 3.0)

    def test_transform_must_keep_shape(self) -> None:
        grid = Grid.filled(2, 2, 3.0)
        with pytest.raises(ValueError):
            grid.transform(lambda data: data[:1])

    def test_copy_is_independent(self) -> None:
        grid = Grid.filled(2, 2, 0.0)
        clone = grid.copy()
        clone.set(0, 0, 1.0)
        assert grid.get(0, 0) == 0.0


class TestTileGrid:
    """Tests for tile grids."""

    def test_create_fills_uniformly(self, catalog: TileCatalog) -> None:
        tiles = TileGrid.create(4, catalog, fill="sand")
        assert tiles.shape == (4, 4)
        assert all(name == "sand" for name in tiles.names().ravel())

    def test_create_unknown_fill(self, catalog: TileCatalog) -> None:
        with pytest.raises(ConfigurationError):
            TileGrid.create(4, catalog, fill="lava")

    def test_set_and_get_tile(self, grass_grid: TileGrid, catalog: TileCatalog) -> None:
        grass_grid.set_tile(3, 4, catalog.by_name("forest"))
        assert grass_grid.tile(3, 4).name == "forest"
        assert grass_grid.tile(4, 3).name == "grass"

    def test_tile_out_of_range(self, grass_grid: TileGrid) -> None:
        with pytest.raises(IndexError):
            grass_grid.tile(11, 0)

    def test_category_mask(self, grass_grid: TileGrid, catalog: TileCatalog) -> None:
        grass_grid.set_tile(0, 0, catalog.by_name("water"))
        grass_grid.set_tile(1, 1, catalog.by_name("bridge_vertical"))
        water = grass_grid.category_mask(TileCategory.WATER)
        assert water[0, 0]
        assert water[1, 1]
        assert int(np.sum(water)) == 2

    def test_walkable_and_bridge_masks(
        self, grass_grid: TileGrid, catalog: TileCatalog
    ) -> None:
        grass_grid.set_tile(0, 0, catalog.by_name("water"))
        grass_grid.set_tile(1, 1, catalog.by_name("bridge_horizontal"))
        walkable = grass_grid.walkable_mask()
        assert not walkable[0, 0]
        assert walkable[1, 1]
        assert walkable[2, 2]
        assert grass_grid.bridge_mask()[1, 1]
        assert int(np.sum(grass_grid.bridge_mask())) == 1

    def test_tile_ids(self, grass_grid: TileGrid, catalog: TileCatalog) -> None:
        grass_grid.set_tile(2, 2, catalog.by_name("water"))
        ids = grass_grid.tile_ids()
        assert ids[2, 2] == catalog.by_name("water").id
        assert ids[0, 0] == catalog.by_name("grass").id

    def test_copy_keeps_catalog(self, grass_grid: TileGrid) -> None:
        clone = grass_grid.copy()
        assert clone.catalog is grass_grid.catalog
        clone.data[0, 0] = 5
        assert grass_grid.tile(0, 0).name == "grass"
