"""Procedural terrain pipeline.

Heightmap composition, biome classification and hydrology (rivers and
bridges) for a single island map.
"""

from .config import MapConfig, load_config
from .generator import GenerationResult, generate_and_save_map, generate_map
from .persistence import load_map, save_map
from .validation import ValidationResult, validate_map

__all__ = [
    "GenerationResult",
    "MapConfig",
    "ValidationResult",
    "generate_and_save_map",
    "generate_map",
    "load_config",
    "load_map",
    "save_map",
    "validate_map",
]
