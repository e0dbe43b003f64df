"""Pairwise tile overlap detection."""

from shapely.strtree import STRtree

from ..models.placement import TilePlacement

# Shared edges have zero intersection area; anything above this is an overlap
OVERLAP_AREA_TOLERANCE = 1e-9


def find_overlaps(
    placements: list[TilePlacement],
    tolerance: float = OVERLAP_AREA_TOLERANCE,
) -> list[tuple[int, int, float]]:
    """Find all pairs of tiles whose interiors overlap.

    Args:
        placements: Tiles to check
        tolerance: Minimum intersection area counted as overlap

    Returns:
        List of (i, j, overlap_area) with i < j
    """
    geometries = [p.to_shapely_polygon() for p in placements]
    if len(geometries) < 2:
        return []

    tree = STRtree(geometries)
    overlaps = []
    for i, geom in enumerate(geometries):
        for j in tree.query(geom):
            j = int(j)
            if j <= i:
                continue
            area = geom.intersection(geometries[j]).area
            if area > tolerance:
                overlaps.append((i, j, area))

    return sorted(overlaps)


def remove_overlaps(
    placements: list[TilePlacement],
    tolerance: float = OVERLAP_AREA_TOLERANCE,
) -> list[TilePlacement]:
    """Keep tiles in order, dropping any that overlap an already kept tile."""
    dropped: set[int] = set()
    for i, j, _ in find_overlaps(placements, tolerance):
        if i not in dropped:
            dropped.add(j)
    return [p for k, p in enumerate(placements) if k not in dropped]
