"""Post-generation validation of map invariants."""

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from ..grid import TileGrid
from ..tiles import TileCategory
from .config import MapConfig
from .hydrology import HydrologyResult

logger = structlog.get_logger()


class ValidationResult:
    """Result of map validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_map(
    tiles: TileGrid,
    hydrology: HydrologyResult,
    config: MapConfig,
) -> ValidationResult:
    """Validate a generated map against its invariants.

    Args:
        tiles: Finished tile grid.
        hydrology: Rivers and bridges carved into the grid.
        config: Generation configuration.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()
    water = tiles.category_mask(TileCategory.WATER)
    bridges = tiles.bridge_mask()

    # Check 1: Border is water
    _check_border_water(water, result)

    # Check 2: River cells are water (bridges included)
    _check_rivers_are_water(water, hydrology, result)

    # Check 3: No two bridges side by side
    _check_bridge_spacing(bridges, result)

    # Check 4: Bridge density
    max_bridges = config.hydrology.bridges_per_river * len(hydrology.rivers)
    if int(np.sum(bridges)) > max_bridges:
        result.add_error(
            f"{int(np.sum(bridges))} bridges exceed limit of {max_bridges}"
        )

    # Check 5: Single landmass
    _check_single_island(water, result)

    if result.passed:
        logger.info("map_validation_passed", warnings=len(result.warnings))
    else:
        logger.warning("map_validation_failed", errors=result.errors)

    for warning in result.warnings:
        logger.warning("map_validation_warning", message=warning)

    return result


def _check_border_water(water: NDArray[np.bool_], result: ValidationResult) -> None:
    """Check that the outer ring is water."""
    border = np.ones(water.shape, dtype=bool)
    border[1:-1, 1:-1] = False
    non_water = int(np.sum(border & ~water))
    if non_water > 0:
        result.add_error(f"Border has {non_water} non-water cells")


def _check_rivers_are_water(
    water: NDArray[np.bool_],
    hydrology: HydrologyResult,
    result: ValidationResult,
) -> None:
    """Check every stamped river cell is water-category."""
    dry = int(np.sum(hydrology.river_mask.data & ~water))
    if dry > 0:
        result.add_error(f"{dry} river cells are not water")


def _check_bridge_spacing(bridges: NDArray[np.bool_], result: ValidationResult) -> None:
    """Check no bridge has an orthogonal bridge neighbor."""
    vertical_pairs = int(np.sum(bridges[:-1, :] & bridges[1:, :]))
    horizontal_pairs = int(np.sum(bridges[:, :-1] & bridges[:, 1:]))
    if vertical_pairs + horizontal_pairs > 0:
        result.add_error(
            f"{vertical_pairs + horizontal_pairs} pairs of adjacent bridges"
        )


def _check_single_island(water: NDArray[np.bool_], result: ValidationResult) -> None:
    """Check that there's a single land mass."""
    land_mask = ~water

    # Default structure is 4-connected
    labeled, num_features = ndimage.label(land_mask)

    if num_features == 0:
        result.add_error("No land found")
    elif num_features > 1:
        sizes = ndimage.sum(land_mask, labeled, range(1, num_features + 1))
        largest_frac = float(np.max(sizes)) / float(np.sum(land_mask))
        result.add_warning(
            f"Multiple land masses: {num_features} components, "
            f"largest is {largest_frac:.1%} of land"
        )
