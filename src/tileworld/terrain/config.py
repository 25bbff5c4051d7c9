"""Map generation configuration models."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import ConfigurationError


class HeightmapConfig(BaseModel):
    """Heightmap composition parameters."""

    range_max: int = Field(default=100, description="Elevations normalize to [0, range_max)")
    coarse_roughness: float = Field(
        default=1.0, description="Roughness of the coarse fractal field (higher = smoother)"
    )
    fine_roughness: float = Field(
        default=0.45, description="Roughness of the fine fractal field"
    )
    mountain_roughness: float = Field(
        default=0.7, description="Roughness of the mountain overlay field"
    )
    perturbation: str = Field(
        default="uniform", description="Fractal perturbation distribution (uniform, normal)"
    )
    falloff_radius_fraction: float = Field(
        default=0.25, description="Island falloff radius as a fraction of map size"
    )


class VegetationBand(BaseModel):
    """Weighted grass variants for noise values above ``noise_above``."""

    noise_above: float = Field(description="Exclusive lower noise bound of the band")
    weights: dict[str, int] = Field(
        description="Tile name -> integer weight; 'grass' leaves the cell unchanged"
    )

    @field_validator("weights")
    @classmethod
    def _positive_total(cls, weights: dict[str, int]) -> dict[str, int]:
        if any(w < 0 for w in weights.values()) or sum(weights.values()) <= 0:
            raise ValueError("band weights must be non-negative with a positive total")
        return weights


def _default_vegetation_bands() -> list[VegetationBand]:
    return [
        VegetationBand(
            noise_above=50,
            weights={"thicker_grass": 50, "thick_grass": 30, "flowers": 5, "grass": 15},
        ),
        VegetationBand(
            noise_above=40,
            weights={"thicker_grass": 20, "thick_grass": 40, "flowers": 10, "grass": 30},
        ),
        VegetationBand(
            noise_above=30,
            weights={"thicker_grass": 5, "thick_grass": 20, "flowers": 15, "grass": 60},
        ),
    ]


class BiomeConfig(BaseModel):
    """Biome classification thresholds."""

    water_max: float = Field(default=50, description="Elevation below this is water")
    grass_max: float = Field(default=80, description="Elevation below this is grass")
    hill_max: float = Field(default=85, description="Elevation below this is hill")
    forest_threshold: float = Field(default=60, description="Vegetation noise above this is forest")
    sand_threshold: float = Field(
        default=30, description="Vegetation noise at or below this turns grass to sand"
    )
    vegetation_bands: list[VegetationBand] = Field(default_factory=_default_vegetation_bands)
    swamp_threshold: float = Field(default=80, description="Swamp noise above this is swamp")
    dune_probability: float = Field(
        default=0.75, description="Chance a coastal grass cell becomes sand"
    )
    coarse_wavelength: float = Field(default=48.0, description="Coarse vegetation noise wavelength")
    fine_wavelength: float = Field(default=12.0, description="Fine vegetation noise wavelength")
    swamp_wavelength: float = Field(default=24.0, description="Swamp noise wavelength")

    @field_validator("vegetation_bands")
    @classmethod
    def _descending(cls, bands: list[VegetationBand]) -> list[VegetationBand]:
        bounds = [band.noise_above for band in bands]
        if bounds != sorted(bounds, reverse=True):
            raise ValueError("vegetation bands must be listed in descending order")
        return bands


class HydrologyConfig(BaseModel):
    """River and bridge parameters."""

    source_margin: float = Field(
        default=10, description="Sources must exceed (grass_max - source_margin)"
    )
    max_steps: int = Field(default=2500, description="Step budget per river")
    meander_probability: float = Field(
        default=0.5, description="Chance each step picks a random direction"
    )
    bridges_per_river: int = Field(default=3, description="Bridges kept per river")


class MapConfig(BaseModel):
    """Complete map generation configuration."""

    seed: int = Field(default=42, description="Random seed for reproducibility")
    cells: int = Field(default=257, description="Map side length, must be 2^k + 1")

    heightmap: HeightmapConfig = Field(default_factory=HeightmapConfig)
    biomes: BiomeConfig = Field(default_factory=BiomeConfig)
    hydrology: HydrologyConfig = Field(default_factory=HydrologyConfig)

    # Debug options
    debug_output_dir: str | None = Field(
        default=None, description="Directory for debug images (None = disabled)"
    )


def load_config(config_path: Path) -> MapConfig:
    """Load map configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed MapConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the TOML is malformed or fails validation.
    """
    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config {config_path}: {e}") from e

    try:
        return MapConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}: {e}") from e
