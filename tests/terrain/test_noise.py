"""Tests for the fractal generator and coherent noise."""

import numpy as np
import pytest

from tileworld.exceptions import GeneratorError
from tileworld.terrain.noise import CoherentNoise, diamond_square


def _relative_roughness(heights: np.ndarray) -> float:
    """Mean neighbor difference relative to the value range."""
    spread = float(heights.max() - heights.min())
    return float(np.abs(np.diff(heights, axis=1)).mean()) / spread


class TestDiamondSquare:
    """Tests for diamond-square heightmaps."""

    def test_output_shape(self) -> None:
        result = diamond_square(33, 0.5, np.random.default_rng(1))
        assert result.shape == (33, 33)

    def test_output_dtype(self) -> None:
        result = diamond_square(17, 0.5, np.random.default_rng(1))
        assert result.dtype == np.float32

    def test_all_cells_filled(self) -> None:
        """Every cell is reached by a square or diamond step."""
        result = diamond_square(65, 0.5, np.random.default_rng(3))
        assert np.all(np.isfinite(result))
        # Zero-initialized cells left untouched would repeat exactly 0.0
        assert int(np.sum(result == 0.0)) <= 1

    def test_deterministic_with_same_seed(self) -> None:
        result1 = diamond_square(33, 0.7, np.random.default_rng(123))
        result2 = diamond_square(33, 0.7, np.random.default_rng(123))
        np.testing.assert_array_equal(result1, result2)

    def test_different_seed_different_output(self) -> None:
        result1 = diamond_square(33, 0.7, np.random.default_rng(123))
        result2 = diamond_square(33, 0.7, np.random.default_rng(456))
        assert not np.allclose(result1, result2)

    def test_higher_roughness_is_smoother(self) -> None:
        smooth = diamond_square(129, 1.0, np.random.default_rng(9))
        rough = diamond_square(129, 0.1, np.random.default_rng(9))
        assert _relative_roughness(smooth) < _relative_roughness(rough)

    def test_normal_perturbation(self) -> None:
        result = diamond_square(17, 0.5, np.random.default_rng(1), perturbation="normal")
        assert result.shape == (17, 17)

    @pytest.mark.parametrize("size", [0, 1, 2, 16, 32, 100])
    def test_rejects_sizes_not_power_of_two_plus_one(self, size: int) -> None:
        with pytest.raises(GeneratorError):
            diamond_square(size, 0.5, np.random.default_rng(1))

    @pytest.mark.parametrize("size", [3, 5, 9, 17])
    def test_accepts_power_of_two_plus_one(self, size: int) -> None:
        assert diamond_square(size, 0.5, np.random.default_rng(1)).shape == (size, size)

    def test_rejects_unknown_distribution(self) -> None:
        with pytest.raises(GeneratorError, match="perturbation"):
            diamond_square(17, 0.5, np.random.default_rng(1), perturbation="cauchy")


class TestCoherentNoise:
    """Tests for the seeded noise field."""

    def test_range(self) -> None:
        noise = CoherentNoise(seed=7)
        values = [noise.sample(x * 0.37, y * 0.53) for x in range(20) for y in range(20)]
        assert all(-1.0 <= v <= 1.0 for v in values)

    def test_deterministic_per_seed(self) -> None:
        assert CoherentNoise(5).sample(1.3, 2.7) == CoherentNoise(5).sample(1.3, 2.7)

    def test_seeds_differ(self) -> None:
        points = [(x * 0.41, x * 0.29) for x in range(1, 20)]
        a = [CoherentNoise(1).sample(x, y) for x, y in points]
        b = [CoherentNoise(2).sample(x, y) for x, y in points]
        assert a != b

    def test_returns_float(self) -> None:
        assert isinstance(CoherentNoise(0).sample(0.5, 0.5), float)
