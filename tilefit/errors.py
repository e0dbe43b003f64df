"""Error types for tile layout operations.

These are raised inside the geometry and session layers and recovered at the
operation boundary: a failed offset becomes an empty or unchanged polygon, an
invalid room side is ignored, and an out-of-bounds tile move is rejected.
"""


class TileFitError(Exception):
    """Base class for tilefit errors."""


class DegenerateGeometry(TileFitError):
    """An offset or union failed on malformed or fully eroded input."""


class InvalidInput(TileFitError, ValueError):
    """A side length, angle or tile dimension is zero or not finite."""


class OutOfBounds(TileFitError):
    """A tile position is not fully contained in the inner room."""

    def __init__(self, index: int, x: float, y: float):
        self.index = index
        self.x = x
        self.y = y
        super().__init__(f"Tile {index} at ({x:.3f}, {y:.3f}) is outside the inner room")
