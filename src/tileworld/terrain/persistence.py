"""Map persistence: save and load generated maps."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
import structlog

from ..exceptions import ConfigurationError
from ..grid import TileGrid
from ..tiles import Tile, TileCatalog
from .config import MapConfig
from .hydrology import HydrologyResult

logger = structlog.get_logger()

FORMAT_VERSION = 1


def save_map(
    path: Path,
    tiles: TileGrid,
    hydrology: HydrologyResult,
    config: MapConfig,
) -> None:
    """Save a generated map to disk.

    Uses numpy's compressed .npz format. The catalog is stored alongside
    the per-cell catalog indices so the file is self-describing.

    Args:
        path: Output path (should end with .npz).
        tiles: Finished tile grid.
        hydrology: Rivers and bridges of the map.
        config: Generation configuration used.
    """
    catalog_data = [tile.model_dump(mode="json") for tile in tiles.catalog]

    metadata = {
        "version": FORMAT_VERSION,
        "seed": config.seed,
        "cells": config.cells,
        "rivers": len(hydrology.rivers),
        "bridges": [list(pos) for pos in hydrology.bridges],
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    np.savez_compressed(
        path,
        tiles=tiles.data,
        tile_ids=tiles.tile_ids(),
        catalog=np.frombuffer(json.dumps(catalog_data).encode("utf-8"), dtype=np.uint8),
        metadata=np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8),
    )

    file_size = path.stat().st_size / 1024
    logger.info("map_saved", path=str(path), size_kb=round(file_size, 1))


def load_map(path: Path) -> tuple[TileGrid, dict[str, Any]]:
    """Load a map from disk.

    Args:
        path: Path to .npz file.

    Returns:
        Tuple of (TileGrid, metadata dict).

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Map file not found: {path}")

    with np.load(path) as data:
        for key in ("tiles", "catalog"):
            if key not in data:
                raise ValueError(f"Invalid map file: missing '{key}' array")

        indices = data["tiles"].astype(np.uint8)
        catalog_data = json.loads(data["catalog"].tobytes().decode("utf-8"))
        if "metadata" in data:
            metadata = json.loads(data["metadata"].tobytes().decode("utf-8"))
        else:
            metadata = {}

    try:
        catalog = TileCatalog([Tile.model_validate(entry) for entry in catalog_data])
    except ConfigurationError as e:
        raise ValueError(f"Invalid map file: {e}") from e
    if indices.size and int(indices.max()) >= len(catalog):
        raise ValueError("Invalid map file: tile index outside catalog")

    logger.info("map_loaded", path=str(path), shape=indices.shape)
    return TileGrid(indices, catalog), metadata
