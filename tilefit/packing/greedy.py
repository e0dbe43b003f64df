"""Greedy strip packing of tiles inside a polygonal room.

The room is eroded by the wall margin, then swept in strips one tile short
side wide. Along each strip the longest palette length that still fits is
placed; when nothing fits the sweep skips ahead by the shortest length.

Horizontal and vertical passes run independently. When both run, tiles from
one pass can overlap tiles from the other; ``drop_overlaps`` filters those
out afterwards.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable

from ..geometry.containment import PreparedContainer
from ..geometry.polygon_ops import PolygonLike, get_polygon_bounds, is_empty, offset_polygon
from ..models.placement import Orientation, Palette, TilePlacement
from .overlap import remove_overlaps

logger = logging.getLogger(__name__)

# Builds a placement from (position along strip, strip offset, tile length)
_PlacementFactory = Callable[[float, float, float], TilePlacement]


def pack(
    room: PolygonLike,
    palette: Palette | Iterable[float],
    tile_short_side: float,
    margin: float,
    orientation: Orientation = "both",
    drop_overlaps: bool = False,
) -> list[TilePlacement]:
    """Pack tiles into the room, inset by the margin.

    Args:
        room: Room outline polygon
        palette: Allowed nominal tile lengths
        tile_short_side: Fixed short side of every tile
        margin: Wall clearance; the room is eroded by this distance
        orientation: "both", "horizontal" or "vertical"
        drop_overlaps: Remove vertical-pass tiles that overlap earlier tiles

    Returns:
        Horizontal-pass placements (row-major, ascending x) followed by
        vertical-pass placements (column-major, ascending y)
    """
    if not isinstance(palette, Palette):
        palette = Palette(lengths=list(palette))
    if not (math.isfinite(tile_short_side) and tile_short_side > 0):
        logger.warning(f"Invalid tile short side {tile_short_side}; nothing packed")
        return []
    if not (math.isfinite(margin) and margin >= 0):
        logger.warning(f"Invalid margin {margin}; nothing packed")
        return []
    if orientation not in ("both", "horizontal", "vertical"):
        raise ValueError(f"Unknown orientation {orientation!r}")

    inner = offset_polygon(room, -margin)
    if is_empty(inner):
        logger.info(f"Margin {margin}m leaves no usable area; nothing packed")
        return []

    min_x, min_y, max_x, max_y = get_polygon_bounds(inner)
    lengths = palette.lengths
    min_len = palette.min_length
    container = PreparedContainer(inner)

    placements: list[TilePlacement] = []

    if orientation in ("both", "horizontal"):
        horizontal = _sweep(
            container,
            strip_range=(min_y, max_y),
            scan_range=(min_x, max_x),
            short_side=tile_short_side,
            lengths=lengths,
            min_len=min_len,
            make=lambda along, strip, length: TilePlacement(
                x=along, y=strip, width=length, height=tile_short_side, length=length
            ),
        )
        logger.debug(f"Horizontal pass placed {len(horizontal)} tiles")
        placements.extend(horizontal)

    if orientation in ("both", "vertical"):
        vertical = _sweep(
            container,
            strip_range=(min_x, max_x),
            scan_range=(min_y, max_y),
            short_side=tile_short_side,
            lengths=lengths,
            min_len=min_len,
            make=lambda along, strip, length: TilePlacement(
                x=strip, y=along, width=tile_short_side, height=length, length=length
            ),
        )
        logger.debug(f"Vertical pass placed {len(vertical)} tiles")
        placements.extend(vertical)

    if drop_overlaps:
        before = len(placements)
        placements = remove_overlaps(placements)
        logger.info(f"Dropped {before - len(placements)} overlapping tiles")

    logger.info(f"Packed {len(placements)} tiles ({orientation})")
    return placements


def _sweep(
    container: PreparedContainer,
    strip_range: tuple[float, float],
    scan_range: tuple[float, float],
    short_side: float,
    lengths: list[float],
    min_len: float,
    make: _PlacementFactory,
) -> list[TilePlacement]:
    """Sweep strips across the bounding box and fill each one greedily."""
    strip_lo, strip_hi = strip_range
    scan_lo, scan_hi = scan_range
    placements: list[TilePlacement] = []

    strip = strip_lo
    while strip <= strip_hi - short_side:
        along = scan_lo
        while along <= scan_hi - min_len:
            for length in lengths:
                tile = make(along, strip, length)
                if container.fits(tile.x, tile.y, tile.width, tile.height):
                    placements.append(tile)
                    along += length
                    break
            else:
                along += min_len
        strip += short_side

    return placements
