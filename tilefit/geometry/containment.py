"""Containment checks for tile placement within the inner room."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shapely.errors import GEOSException
from shapely.geometry import Point
from shapely.prepared import prep

from .polygon_ops import PolygonLike, create_rectangle, is_empty


class ContainmentStatus(Enum):
    """Status of containment check."""
    FULLY_CONTAINED = "fully_contained"
    PARTIALLY_OUTSIDE = "partially_outside"
    FULLY_OUTSIDE = "fully_outside"
    INVALID_GEOMETRY = "invalid_geometry"


@dataclass
class ContainmentResult:
    """Result of a containment check."""

    status: ContainmentStatus
    overlap_ratio: float  # 0.0 to 1.0, fraction of the tile inside the container
    outside_area: float   # Area of the tile outside the container
    message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Check if placement is valid (fully contained)."""
        return self.status == ContainmentStatus.FULLY_CONTAINED


def contains(container: PolygonLike | None, rectangle: PolygonLike | None) -> bool:
    """Test whether a rectangle lies entirely within or on the container boundary.

    The container is treated as a closed region, so tiles flush against the
    inner room outline are accepted. An empty container never contains
    anything.

    Args:
        container: Reference region (usually the inward-offset room)
        rectangle: Candidate tile footprint

    Returns:
        True if every point of the rectangle is inside or on the container
    """
    if is_empty(container) or is_empty(rectangle):
        return False
    try:
        return prep(container).covers(rectangle)
    except (GEOSException, ValueError):
        return False


def rectangle_fits(
    container: PolygonLike | None,
    x: float,
    y: float,
    width: float,
    height: float,
) -> bool:
    """Convenience wrapper building the rectangle from its lower-left anchor."""
    return contains(container, create_rectangle(x, y, width, height))


class PreparedContainer:
    """Container with a cached prepared geometry for repeated tests.

    The greedy packer tests thousands of candidate rectangles against the
    same inner room, so the prepared geometry is built once.
    """

    def __init__(self, container: PolygonLike | None):
        self.container = container
        self._prepared = None if is_empty(container) else prep(container)

    def fits(self, x: float, y: float, width: float, height: float) -> bool:
        if self._prepared is None:
            return False
        try:
            return self._prepared.covers(create_rectangle(x, y, width, height))
        except (GEOSException, ValueError):
            return False


def check_containment(
    tile: PolygonLike,
    container: PolygonLike,
    tolerance: float = 1e-6,
) -> ContainmentResult:
    """Check if a tile is fully contained within the container.

    Args:
        tile: Tile footprint polygon
        container: Inner room polygon
        tolerance: Small tolerance for floating point comparison (meters)

    Returns:
        ContainmentResult with status and metrics
    """
    if tile is None or tile.is_empty:
        return ContainmentResult(
            status=ContainmentStatus.INVALID_GEOMETRY,
            overlap_ratio=0.0,
            outside_area=0.0,
            message="Tile geometry is empty",
        )

    if container is None or container.is_empty:
        return ContainmentResult(
            status=ContainmentStatus.INVALID_GEOMETRY,
            overlap_ratio=0.0,
            outside_area=tile.area,
            message="Container geometry is empty",
        )

    if not tile.is_valid or not container.is_valid:
        return ContainmentResult(
            status=ContainmentStatus.INVALID_GEOMETRY,
            overlap_ratio=0.0,
            outside_area=0.0,
            message="Invalid geometry",
        )

    prepared = prep(container)

    if prepared.covers(tile):
        return ContainmentResult(
            status=ContainmentStatus.FULLY_CONTAINED,
            overlap_ratio=1.0,
            outside_area=0.0,
        )

    if not prepared.intersects(tile):
        return ContainmentResult(
            status=ContainmentStatus.FULLY_OUTSIDE,
            overlap_ratio=0.0,
            outside_area=tile.area,
        )

    # Partial overlap - compute metrics
    intersection = tile.intersection(container)
    overlap_area = intersection.area if not intersection.is_empty else 0.0
    tile_area = tile.area

    overlap_ratio = overlap_area / tile_area if tile_area > 0 else 0.0
    outside_area = tile_area - overlap_area

    if outside_area < tolerance * tolerance:
        return ContainmentResult(
            status=ContainmentStatus.FULLY_CONTAINED,
            overlap_ratio=1.0,
            outside_area=0.0,
        )

    return ContainmentResult(
        status=ContainmentStatus.PARTIALLY_OUTSIDE,
        overlap_ratio=overlap_ratio,
        outside_area=outside_area,
        message=f"Tile {outside_area:.4f}m² outside inner room",
    )


def check_point_in_region(x: float, y: float, region: PolygonLike | None) -> bool:
    """Quick check if a point is within or on the region."""
    if is_empty(region):
        return False
    return region.covers(Point(x, y))
