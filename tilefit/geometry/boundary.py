"""Protective boundary around the placed tiles.

The boundary is the tile union grown outward by the wall margin. Its ring
length is what gets priced per meter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .polygon_ops import (
    FUSE_EPSILON,
    PolygonLike,
    Coords,
    empty_polygon,
    fuse_polygon,
    is_empty,
    offset_polygon,
    polygon_rings,
    ring_length,
)

logger = logging.getLogger(__name__)


@dataclass
class BoundaryResult:
    """Outward boundary polygon and its measured length."""

    polygon: PolygonLike
    length_m: float
    offset_applied: bool = True

    @property
    def rings(self) -> list[Coords]:
        """Closed rings of the boundary, ready for drawing."""
        return polygon_rings(self.polygon)

    @property
    def is_empty(self) -> bool:
        return is_empty(self.polygon)


def measure_boundary(
    tile_union: PolygonLike | None,
    margin: float,
    quad_segs: int = 1,
    join_style: str = "mitre",
    include_interiors: bool = False,
    epsilon: float = FUSE_EPSILON,
) -> BoundaryResult:
    """Grow the tile union by the margin and measure the resulting outline.

    Steps:
    1. Fuse touching edges with a +eps/-eps buffer
    2. Buffer outward by margin (coarse tessellation)
    3. Sum the Euclidean edge lengths of every closed ring

    If the outward buffer fails, the fused union itself is measured.

    Args:
        tile_union: Union of the placed tile rectangles
        margin: Outward offset distance in meters
        quad_segs: Arc segments per quarter circle for round joins
        join_style: Corner join for the outward offset
        include_interiors: Also measure rings around enclosed holes
        epsilon: Fuse distance

    Returns:
        BoundaryResult with the drawable polygon and its length in meters
    """
    if is_empty(tile_union):
        return BoundaryResult(polygon=empty_polygon(), length_m=0.0, offset_applied=False)

    fused = fuse_polygon(tile_union, epsilon)

    outer = offset_polygon(fused, margin, quad_segs=quad_segs, join_style=join_style)
    offset_applied = margin > 0 and outer is not fused
    if margin > 0 and not offset_applied:
        logger.warning("Outward offset failed; measuring fused tile union instead")

    length = sum(ring_length(r) for r in polygon_rings(outer, include_interiors))
    logger.debug(f"Boundary length {length:.3f}m over margin {margin}m")

    return BoundaryResult(polygon=outer, length_m=length, offset_applied=offset_applied)
