"""Polygon operations using Shapely and pyclipper.

Provides the offset (inset/buffer), epsilon fuse and rectangle union used by
the packer and the boundary measurement. None of these functions raise on
degenerate input: erosion failures collapse to an empty polygon, dilation
and fuse failures hand back the input unchanged.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

import pyclipper
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.geometry.polygon import orient
from shapely.validation import make_valid

from ..errors import DegenerateGeometry

logger = logging.getLogger(__name__)

# Type aliases
Coords = list[tuple[float, float]]
PolygonLike = Polygon | MultiPolygon

# pyclipper works on integers; 1e6 keeps micrometer precision
CLIPPER_SCALE = 1_000_000.0

# Distance used to fuse touching tile edges before further offsetting
FUSE_EPSILON = 1e-6

JOIN_STYLES = ("round", "mitre", "bevel")

_GEOMETRY_ERRORS = (GEOSException, ValueError, TypeError)


def empty_polygon() -> Polygon:
    """Return the empty-region marker."""
    return Polygon()


def is_empty(polygon: PolygonLike | None) -> bool:
    return polygon is None or polygon.is_empty


def polygon_from_coords(coords: Iterable[tuple[float, float]]) -> Polygon:
    """Create Shapely Polygon from coordinate list.

    The ring is closed implicitly. Fewer than three distinct points, or
    coordinates Shapely cannot build a ring from, give the empty polygon.

    Args:
        coords: List of (x, y) tuples forming polygon exterior

    Returns:
        Shapely Polygon
    """
    points = [(float(x), float(y)) for x, y in coords]
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    if len(points) < 3:
        return empty_polygon()

    try:
        return Polygon(points)
    except _GEOMETRY_ERRORS as e:
        logger.warning(f"Could not build polygon from {len(points)} points: {e}")
        return empty_polygon()


def polygon_to_coords(polygon: Polygon) -> Coords:
    """Extract exterior coordinates (closed ring) from a Shapely Polygon."""
    if is_empty(polygon):
        return []
    return list(polygon.exterior.coords)


def create_rectangle(x: float, y: float, width: float, height: float) -> Polygon:
    """Create an axis-aligned rectangle anchored at its lower-left corner.

    Args:
        x: X coordinate of the lower-left corner
        y: Y coordinate of the lower-left corner
        width: Extent along x
        height: Extent along y

    Returns:
        Rectangle Polygon
    """
    coords = [
        (x, y),
        (x + width, y),
        (x + width, y + height),
        (x, y + height),
        (x, y),  # Close ring
    ]
    return Polygon(coords)


def _as_polygonal(geom) -> PolygonLike:
    """Reduce a geometry to its polygonal part (Polygon or MultiPolygon)."""
    if geom is None or geom.is_empty:
        return empty_polygon()
    if isinstance(geom, (Polygon, MultiPolygon)):
        return geom
    if isinstance(geom, GeometryCollection):
        parts: list[Polygon] = []
        for g in geom.geoms:
            sub = _as_polygonal(g)
            if isinstance(sub, Polygon) and not sub.is_empty:
                parts.append(sub)
            elif isinstance(sub, MultiPolygon):
                parts.extend(sub.geoms)
        if not parts:
            return empty_polygon()
        return parts[0] if len(parts) == 1 else MultiPolygon(parts)
    # Lines and points carry no area
    return empty_polygon()


def _repair(geom) -> PolygonLike:
    if geom is None or geom.is_empty:
        return empty_polygon()
    if not geom.is_valid:
        geom = make_valid(geom)
    return _as_polygonal(geom)


def _checked_buffer(geom, distance: float, **kwargs) -> PolygonLike:
    """Buffer and repair, raising DegenerateGeometry on any engine failure."""
    try:
        return _repair(geom.buffer(distance, **kwargs))
    except _GEOMETRY_ERRORS as e:
        raise DegenerateGeometry(f"buffer by {distance} failed: {e}") from e


def offset_polygon(
    polygon: PolygonLike,
    distance: float,
    quad_segs: int = 1,
    join_style: str = "round",
) -> PolygonLike:
    """Offset a polygon by a signed distance.

    Positive distance dilates (grows outward), negative erodes (shrinks
    inward). Erosion past the polygon's inscribed radius yields the empty
    polygon; a failed dilation returns the input unchanged.

    Args:
        polygon: Polygon to offset
        distance: Signed offset distance in meters
        quad_segs: Arc segments per quarter circle for round joins (dilation)
        join_style: "round", "mitre" or "bevel" (dilation)

    Returns:
        Offset polygon (may be MultiPolygon, or empty)
    """
    if is_empty(polygon):
        return empty_polygon()
    if not math.isfinite(distance):
        logger.warning(f"Ignoring non-finite offset distance {distance}")
        return polygon
    if distance == 0:
        return polygon
    if distance < 0:
        return inset_polygon(polygon, -distance)
    return buffer_polygon(polygon, distance, quad_segs=quad_segs, join_style=join_style)


def inset_polygon(
    polygon: PolygonLike,
    distance: float,
    use_pyclipper: bool = True,
) -> PolygonLike:
    """Inset (shrink) polygon by given distance.

    Uses pyclipper for robust offsetting, falls back to Shapely negative
    buffer when pyclipper rejects the input.

    Args:
        polygon: Polygon to inset
        distance: Inset distance in same units as polygon (positive = shrink)
        use_pyclipper: Use pyclipper for the offset

    Returns:
        Inset polygon (may be MultiPolygon if inset splits the shape, or empty)
    """
    if is_empty(polygon):
        return empty_polygon()
    if distance <= 0:
        return polygon

    if use_pyclipper:
        return _inset_with_pyclipper(polygon, distance)
    return _inset_with_shapely(polygon, distance)


def _inset_with_pyclipper(polygon: PolygonLike, distance: float) -> PolygonLike:
    """Inset polygon using pyclipper (more robust for complex shapes)."""
    if isinstance(polygon, MultiPolygon):
        # Handle each polygon separately
        results = []
        for geom in polygon.geoms:
            result = _inset_with_pyclipper(geom, distance)
            if not result.is_empty:
                results.extend(result.geoms if isinstance(result, MultiPolygon) else [result])
        if not results:
            return empty_polygon()
        return results[0] if len(results) == 1 else MultiPolygon(results)

    polygon = orient(polygon, sign=1.0)
    pco = pyclipper.PyclipperOffset()

    try:
        pco.AddPath(
            pyclipper.scale_to_clipper(polygon.exterior.coords[:-1], CLIPPER_SCALE),
            pyclipper.JT_MITER,  # Miter join for sharp corners
            pyclipper.ET_CLOSEDPOLYGON,
        )
        for interior in polygon.interiors:
            pco.AddPath(
                pyclipper.scale_to_clipper(interior.coords[:-1], CLIPPER_SCALE),
                pyclipper.JT_MITER,
                pyclipper.ET_CLOSEDPOLYGON,
            )
        # Execute offset (negative for inset)
        solution = pco.Execute(-distance * CLIPPER_SCALE)
    except (pyclipper.ClipperException, *_GEOMETRY_ERRORS) as e:
        logger.warning(f"pyclipper offset failed: {e}, using Shapely fallback")
        return _inset_with_shapely(polygon, distance)

    if not solution:
        return empty_polygon()

    return _polygons_from_clipper_paths(solution)


def _polygons_from_clipper_paths(paths: list) -> PolygonLike:
    """Rebuild Shapely polygons from pyclipper output paths.

    Positively oriented paths are outer rings, the rest are holes and are
    attached to the outer ring that contains them.
    """
    outers: list[Polygon] = []
    holes: list[Polygon] = []
    for path in paths:
        if len(path) < 3:
            continue
        ring = Polygon(pyclipper.scale_from_clipper(path, CLIPPER_SCALE))
        if ring.is_empty or ring.area == 0:
            continue
        (outers if pyclipper.Orientation(path) else holes).append(ring)

    polygons = []
    for outer in outers:
        own_holes = [h.exterior.coords for h in holes if outer.contains(h.representative_point())]
        poly = Polygon(outer.exterior.coords, own_holes)
        poly = _repair(poly)
        if not poly.is_empty:
            polygons.extend(poly.geoms if isinstance(poly, MultiPolygon) else [poly])

    if not polygons:
        return empty_polygon()
    elif len(polygons) == 1:
        return polygons[0]
    else:
        return MultiPolygon(polygons)


def _inset_with_shapely(polygon: PolygonLike, distance: float) -> PolygonLike:
    """Inset polygon using Shapely negative buffer."""
    try:
        return _checked_buffer(polygon, -distance, join_style="mitre")
    except DegenerateGeometry as e:
        logger.warning(f"Inset failed: {e}; treating region as empty")
        return empty_polygon()


def buffer_polygon(
    polygon: PolygonLike,
    distance: float,
    quad_segs: int = 1,
    join_style: str = "round",
) -> PolygonLike:
    """Expand polygon by given distance (buffer).

    With the default ``quad_segs=1`` each round corner is a single chord.

    Args:
        polygon: Polygon to expand
        distance: Buffer distance (positive = expand)
        quad_segs: Arc segments per quarter circle
        join_style: "round", "mitre" or "bevel"

    Returns:
        Buffered polygon, or the input unchanged if buffering fails
    """
    if is_empty(polygon):
        return empty_polygon()
    if join_style not in JOIN_STYLES:
        raise ValueError(f"join_style must be one of {JOIN_STYLES}, got {join_style!r}")

    try:
        result = _checked_buffer(
            polygon, distance, quad_segs=max(1, quad_segs), join_style=join_style
        )
    except DegenerateGeometry as e:
        logger.warning(f"Outward offset failed: {e}; keeping unbuffered polygon")
        return polygon

    if result.is_empty:
        logger.warning(f"Buffer by {distance} produced an empty result; keeping unbuffered polygon")
        return polygon

    return result


def fuse_polygon(polygon: PolygonLike, epsilon: float = FUSE_EPSILON) -> PolygonLike:
    """Fuse coincident and touching edges with a +eps/-eps buffer pair.

    Args:
        polygon: Union of tile rectangles
        epsilon: Fuse distance in meters

    Returns:
        Fused polygon, or the input unchanged if either buffer step fails
    """
    if is_empty(polygon):
        return empty_polygon()

    try:
        grown = _checked_buffer(polygon, epsilon, quad_segs=1, join_style="mitre")
        fused = _checked_buffer(grown, -epsilon, quad_segs=1, join_style="mitre")
    except DegenerateGeometry as e:
        logger.warning(f"Epsilon fuse failed: {e}; using unfused polygon")
        return polygon

    if fused.is_empty:
        logger.warning("Epsilon fuse produced an empty result; using unfused polygon")
        return polygon

    return fused


def union_rectangles(rectangles: Iterable[PolygonLike]) -> PolygonLike:
    """Fold rectangles into one region with a pairwise union in input order.

    Touching rectangles may leave slivers or shared edges in the result;
    consumers run :func:`fuse_polygon` before further offsetting.

    Args:
        rectangles: Rectangles to union

    Returns:
        Unified polygon (may be MultiPolygon, or empty for empty input)
    """
    result: PolygonLike | None = None
    for i, rect in enumerate(rectangles):
        if is_empty(rect):
            continue
        if not rect.is_valid:
            rect = _repair(rect)
        if result is None:
            result = rect
            continue
        try:
            result = _as_polygonal(result.union(rect))
        except _GEOMETRY_ERRORS as e:
            logger.warning(f"Union with rectangle {i} failed: {e}; skipping it")

    if result is None:
        return empty_polygon()
    return result


def get_polygon_area(polygon: PolygonLike) -> float:
    """Get area of polygon in square units."""
    if is_empty(polygon):
        return 0.0
    return polygon.area


def get_polygon_bounds(polygon: PolygonLike) -> tuple[float, float, float, float]:
    """Get bounding box of polygon.

    Returns:
        Tuple of (min_x, min_y, max_x, max_y)
    """
    if is_empty(polygon):
        return (0.0, 0.0, 0.0, 0.0)
    return polygon.bounds


def iter_polygons(polygon: PolygonLike) -> list[Polygon]:
    """List the polygon parts of a Polygon or MultiPolygon."""
    if is_empty(polygon):
        return []
    if isinstance(polygon, MultiPolygon):
        return [p for p in polygon.geoms if not p.is_empty]
    return [polygon]


def polygon_rings(polygon: PolygonLike, include_interiors: bool = False) -> list[Coords]:
    """Collect the rings of a (multi)polygon as explicitly closed coordinate lists.

    Args:
        polygon: Polygon or MultiPolygon
        include_interiors: Also return hole rings

    Returns:
        One closed ring (last point == first point) per entry
    """
    rings: list[Coords] = []
    for part in iter_polygons(polygon):
        ring_sources = [part.exterior]
        if include_interiors:
            ring_sources.extend(part.interiors)
        for ring in ring_sources:
            coords = [(float(x), float(y)) for x, y in ring.coords]
            if coords and coords[0] != coords[-1]:
                coords.append(coords[0])
            rings.append(coords)
    return rings


def ring_length(ring: Coords) -> float:
    """Sum of Euclidean distances between consecutive ring vertices."""
    total = 0.0
    for (x1, y1), (x2, y2) in zip(ring, ring[1:]):
        total += math.hypot(x2 - x1, y2 - y1)
    return total


def polygon_perimeter(polygon: PolygonLike, include_interiors: bool = False) -> float:
    """Total ring length of a (multi)polygon in meters."""
    return sum(ring_length(r) for r in polygon_rings(polygon, include_interiors))
