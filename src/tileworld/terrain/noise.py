"""Noise sources for map generation.

Provides a diamond-square fractal heightmap generator and a seeded
coherent noise field backed by OpenSimplex.
"""

from typing import Callable, Protocol

import numpy as np
from numpy.typing import NDArray
from opensimplex import OpenSimplex

from ..exceptions import GeneratorError

Perturbation = Callable[[np.random.Generator, tuple[int, ...]], NDArray[np.float64]]

PERTURBATIONS: dict[str, Perturbation] = {
    "uniform": lambda rng, shape: rng.uniform(-1.0, 1.0, shape),
    "normal": lambda rng, shape: rng.standard_normal(shape),
}


def _is_fractal_size(size: int) -> bool:
    n = size - 1
    return n >= 2 and (n & (n - 1)) == 0


def diamond_square(
    size: int,
    roughness: float,
    rng: np.random.Generator,
    perturbation: str = "uniform",
) -> NDArray[np.float32]:
    """Generate a fractal heightmap with the diamond-square algorithm.

    Args:
        size: Side length, must be 2^k + 1.
        roughness: Hurst-style exponent; the perturbation amplitude is
            multiplied by 2^-roughness per level (higher = smoother).
        rng: Random number generator.
        perturbation: Name of the perturbation distribution.

    Returns:
        2D elevation array of shape (size, size), unnormalized.

    Raises:
        GeneratorError: If the size or distribution is not supported.
    """
    if not _is_fractal_size(size):
        raise GeneratorError(f"Fractal grid size must be 2^k + 1, got {size}")
    if perturbation not in PERTURBATIONS:
        raise GeneratorError(
            f"Unknown perturbation distribution {perturbation!r}, "
            f"expected one of {sorted(PERTURBATIONS)}"
        )
    perturb = PERTURBATIONS[perturbation]

    heights = np.zeros((size, size), dtype=np.float64)
    n = size - 1

    # Seed the four corners
    heights[0:size:n, 0:size:n] = perturb(rng, (2, 2))

    step = n
    scale = 1.0
    while step > 1:
        half = step // 2

        # Square step: centers take the mean of their four corners
        top_left = heights[0:n:step, 0:n:step]
        top_right = heights[0:n:step, step::step]
        bottom_left = heights[step::step, 0:n:step]
        bottom_right = heights[step::step, step::step]
        corners_mean = (top_left + top_right + bottom_left + bottom_right) / 4.0
        heights[half::step, half::step] = (
            corners_mean + perturb(rng, corners_mean.shape) * scale
        )

        # Diamond step: edge midpoints take the mean of available neighbors
        odd_rows = np.meshgrid(
            np.arange(half, size, step), np.arange(0, size, step), indexing="ij"
        )
        odd_cols = np.meshgrid(
            np.arange(0, size, step), np.arange(half, size, step), indexing="ij"
        )
        ys = np.concatenate([odd_rows[0].ravel(), odd_cols[0].ravel()])
        xs = np.concatenate([odd_rows[1].ravel(), odd_cols[1].ravel()])

        total = np.zeros(ys.shape, dtype=np.float64)
        count = np.zeros(ys.shape, dtype=np.float64)
        for dy, dx in ((-half, 0), (half, 0), (0, -half), (0, half)):
            ny, nx = ys + dy, xs + dx
            valid = (ny >= 0) & (ny < size) & (nx >= 0) & (nx < size)
            total[valid] += heights[ny[valid], nx[valid]]
            count += valid

        heights[ys, xs] = total / count + perturb(rng, ys.shape) * scale

        scale *= 2.0 ** -roughness
        step = half

    return heights.astype(np.float32)


class NoiseField(Protocol):
    """Continuous noise over real coordinates."""

    def sample(self, x: float, y: float) -> float: ...


class CoherentNoise:
    """Seeded 2D coherent noise in [-1, 1], deterministic per seed."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._simplex = OpenSimplex(seed=seed)

    def sample(self, x: float, y: float) -> float:
        return float(self._simplex.noise2(x, y))
