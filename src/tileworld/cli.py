"""Command-line interface for map generation."""

import argparse
import logging
import time
from pathlib import Path

import structlog


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for map generation."""
    parser = argparse.ArgumentParser(
        description="Generate a tile-based island map with rivers"
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="TOML config file"
    )
    parser.add_argument(
        "--catalog", type=str, default=None, help="TOML tile catalog file"
    )
    parser.add_argument(
        "--cells", type=int, default=None, help="Map side length, 2^k + 1 (default: 257)"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="maps/island.npz",
        help="Output path (default: maps/island.npz)",
    )
    parser.add_argument(
        "--image", type=str, default=None, help="Also render the map to this PNG"
    )
    parser.add_argument(
        "--atlas", type=str, default=None, help="Sprite atlas used when rendering"
    )
    parser.add_argument(
        "--tile-size", type=int, default=16, help="Atlas sprite size (default: 16)"
    )
    parser.add_argument(
        "--debug-images",
        type=str,
        default=None,
        help="Directory to save heightmap stage images (optional)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    logger = structlog.get_logger()

    # Import here to avoid slow startup for --help
    from PIL import Image

    from .exceptions import TileWorldError
    from .terrain.config import MapConfig, load_config
    from .terrain.generator import generate_and_save_map
    from .terrain.render import check_atlas, render_tiles
    from .tiles import default_catalog, load_catalog

    try:
        config = load_config(Path(args.config)) if args.config else MapConfig()
        catalog = load_catalog(Path(args.catalog)) if args.catalog else default_catalog()
    except (FileNotFoundError, TileWorldError) as e:
        parser.error(str(e))

    atlas = None
    if args.atlas:
        try:
            atlas = Image.open(args.atlas)
            check_atlas(atlas, catalog, args.tile_size)
        except (OSError, ValueError) as e:
            parser.error(f"Unusable atlas {args.atlas}: {e}")

    overrides = {
        "cells": args.cells,
        "seed": args.seed,
        "debug_output_dir": args.debug_images,
    }
    config = config.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    output_path = Path(args.output)

    start_time = time.time()
    try:
        result = generate_and_save_map(config, output_path, catalog)
    except TileWorldError as e:
        logger.error("generation_failed", error=str(e))
        raise SystemExit(1) from e

    logger.info(
        "generation_complete",
        seconds=round(time.time() - start_time, 1),
        output=str(output_path),
        valid=result.validation.passed,
    )

    if args.image:
        image = render_tiles(result.tiles, atlas, args.tile_size)
        image_path = Path(args.image)
        image_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(image_path)
        logger.info("image_saved", path=str(image_path))


if __name__ == "__main__":
    main()
