"""Custom exceptions for map generation."""


class TileWorldError(Exception):
    """Base exception for map generation errors."""

    pass


class ConfigurationError(TileWorldError):
    """Raised when the tile catalog or map configuration is invalid."""

    pass


class GeneratorError(TileWorldError):
    """Raised when the fractal generator rejects its inputs."""

    pass


class DegenerateInputError(TileWorldError):
    """Raised when a normalization pass sees a zero-range grid."""

    pass
