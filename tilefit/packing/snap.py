"""Edge snapping for dragged tiles."""

from ..models.placement import TilePlacement


def snap_position(
    moving_index: int,
    x: float,
    y: float,
    width: float,
    height: float,
    placements: list[TilePlacement],
    tolerance: float,
) -> tuple[float, float]:
    """Pull a dragged tile into exact alignment with nearby tile edges.

    The moving tile's left and right edges are compared with the left and
    right edges of every other tile, and its bottom and top edges with their
    bottom and top edges. An edge closer than ``tolerance`` is moved onto the
    neighbor edge. Axes are snapped independently and later tiles override
    earlier ones. Snapping does not check containment.

    Args:
        moving_index: Index of the dragged tile in ``placements`` (skipped)
        x: Candidate lower-left x
        y: Candidate lower-left y
        width: Width of the dragged tile
        height: Height of the dragged tile
        placements: All current placements
        tolerance: Snap distance in meters

    Returns:
        Adjusted (x, y)
    """
    for j, other in enumerate(placements):
        if j == moving_index:
            continue
        for edge in (other.x, other.right):
            if abs(x - edge) < tolerance:
                x = edge
            if abs(x + width - edge) < tolerance:
                x = edge - width
        for edge in (other.y, other.top):
            if abs(y - edge) < tolerance:
                y = edge
            if abs(y + height - edge) < tolerance:
                y = edge - height
    return x, y
