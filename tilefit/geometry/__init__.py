"""Geometry operations for tile layout using Shapely and pyclipper."""

from .boundary import BoundaryResult, measure_boundary
from .containment import (
    ContainmentResult,
    ContainmentStatus,
    PreparedContainer,
    check_containment,
    contains,
    rectangle_fits,
)
from .polygon_ops import (
    FUSE_EPSILON,
    buffer_polygon,
    create_rectangle,
    empty_polygon,
    fuse_polygon,
    get_polygon_bounds,
    inset_polygon,
    offset_polygon,
    polygon_from_coords,
    polygon_perimeter,
    polygon_rings,
    polygon_to_coords,
    ring_length,
    union_rectangles,
)

__all__ = [
    # Polygon operations
    "FUSE_EPSILON",
    "offset_polygon",
    "inset_polygon",
    "buffer_polygon",
    "fuse_polygon",
    "union_rectangles",
    "create_rectangle",
    "empty_polygon",
    "polygon_from_coords",
    "polygon_to_coords",
    "get_polygon_bounds",
    "polygon_rings",
    "ring_length",
    "polygon_perimeter",
    # Containment checks
    "contains",
    "rectangle_fits",
    "check_containment",
    "PreparedContainer",
    "ContainmentResult",
    "ContainmentStatus",
    # Boundary measurement
    "measure_boundary",
    "BoundaryResult",
]
