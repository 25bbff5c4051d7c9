"""Tests for map validation."""

from tileworld.grid import Grid, TileGrid
from tileworld.terrain.config import MapConfig
from tileworld.terrain.hydrology import HydrologyResult, River, RiverEnd
from tileworld.terrain.validation import ValidationResult, validate_map
from tileworld.tiles import TileCatalog


def _island(catalog: TileCatalog, cells: int = 9) -> TileGrid:
    tiles = TileGrid.create(cells, catalog, fill="water")
    tiles.data[2:-2, 2:-2] = catalog.index_of("grass")
    return tiles


def _hydrology(
    cells: int = 9,
    river_cells: list[tuple[int, int]] | None = None,
    river_count: int = 0,
) -> HydrologyResult:
    mask = Grid.filled(cells, cells, False, dtype=bool)
    for y, x in river_cells or []:
        mask.set(y, x, True)
    rivers = [
        River(path=list(river_cells or []), end=RiverEnd.REACHED_WATER, steps=1)
        for _ in range(river_count)
    ]
    return HydrologyResult(rivers=rivers, bridges=[], river_mask=mask)


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_starts_passed(self) -> None:
        result = ValidationResult()
        assert result.passed
        assert result.errors == []

    def test_warning_keeps_passed(self) -> None:
        result = ValidationResult()
        result.add_warning("minor")
        assert result.passed
        assert result.warnings == ["minor"]

    def test_error_fails(self) -> None:
        result = ValidationResult()
        result.add_error("broken")
        assert not result.passed


class TestValidateMap:
    """Tests for validate_map."""

    def test_valid_island(self, catalog: TileCatalog) -> None:
        result = validate_map(_island(catalog), _hydrology(), MapConfig())
        assert result.passed
        assert result.warnings == []

    def test_land_on_border(self, catalog: TileCatalog) -> None:
        tiles = _island(catalog)
        tiles.set_tile(0, 4, catalog.by_name("sand"))

        result = validate_map(tiles, _hydrology(), MapConfig())

        assert not result.passed
        assert any("Border" in e for e in result.errors)

    def test_dry_river_cell(self, catalog: TileCatalog) -> None:
        result = validate_map(
            _island(catalog), _hydrology(river_cells=[(4, 4)], river_count=1), MapConfig()
        )
        assert not result.passed
        assert any("river cells" in e for e in result.errors)

    def test_bridges_count_as_river_water(self, catalog: TileCatalog) -> None:
        tiles = _island(catalog)
        tiles.set_tile(4, 4, catalog.by_name("bridge_vertical"))

        result = validate_map(
            tiles, _hydrology(river_cells=[(4, 4)], river_count=1), MapConfig()
        )

        assert result.passed

    def test_adjacent_bridges(self, catalog: TileCatalog) -> None:
        tiles = _island(catalog)
        tiles.set_tile(4, 3, catalog.by_name("bridge_vertical"))
        tiles.set_tile(4, 4, catalog.by_name("bridge_vertical"))

        result = validate_map(
            tiles, _hydrology(river_cells=[(4, 3), (4, 4)], river_count=1), MapConfig()
        )

        assert not result.passed
        assert any("adjacent bridges" in e for e in result.errors)

    def test_too_many_bridges(self, catalog: TileCatalog) -> None:
        tiles = _island(catalog)
        tiles.set_tile(3, 3, catalog.by_name("bridge_vertical"))

        result = validate_map(tiles, _hydrology(), MapConfig())

        assert not result.passed
        assert any("exceed" in e for e in result.errors)

    def test_no_land(self, catalog: TileCatalog) -> None:
        tiles = TileGrid.create(9, catalog, fill="water")
        result = validate_map(tiles, _hydrology(), MapConfig())
        assert "No land found" in result.errors

    def test_multiple_islands_warn(self, catalog: TileCatalog) -> None:
        tiles = _island(catalog)
        tiles.data[4, :] = catalog.index_of("water")

        result = validate_map(tiles, _hydrology(), MapConfig())

        assert result.passed
        assert len(result.warnings) == 1
        assert "2 components" in result.warnings[0]

    def test_diagonal_contact_is_separate(self, catalog: TileCatalog) -> None:
        tiles = TileGrid.create(9, catalog, fill="water")
        grass = catalog.by_name("grass")
        tiles.set_tile(3, 3, grass)
        tiles.set_tile(4, 4, grass)

        result = validate_map(tiles, _hydrology(), MapConfig())

        assert len(result.warnings) == 1
