"""Tile layout pipeline.

Stateless operations over explicit data, plus the request-level pipeline
used by the MCP server:
1. Resolve the catalog and room
2. Erode the room by the margin
3. Greedy-pack tiles
4. Validate the layout
5. Measure the protective boundary
6. Compute quantities and cost
"""

import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .export.geojson import layout_to_geojson
from .export.quantities import QuantityTakeoff, compute_quantities, tile_cost
from .geometry.boundary import BoundaryResult, measure_boundary
from .geometry.polygon_ops import get_polygon_area, is_empty, union_rectangles
from .catalog.loader import load_catalog
from .models.catalog import BoundaryRules, TileCatalog
from .models.placement import Orientation, Palette, TilePlacement
from .models.room import Room
from .packing.greedy import pack
from .tools.tilefit_tools import LayoutRequest, LayoutResponse
from .validation.layout import validate_layout

logger = logging.getLogger(__name__)

__all__ = [
    "pack_room",
    "tile_cost",
    "tile_union",
    "build_boundary",
    "boundary_perimeter_and_cost",
    "quote_layout",
    "generate_layout",
]


def pack_room(
    room: Room,
    palette: Palette | Iterable[float],
    tile_short_side: float,
    orientation: Orientation = "both",
    drop_overlaps: bool = False,
) -> List[TilePlacement]:
    """Pack a room using its own margin."""
    return pack(
        room.to_shapely_polygon(),
        palette,
        tile_short_side,
        room.margin,
        orientation,
        drop_overlaps=drop_overlaps,
    )


def tile_union(placements: Iterable[TilePlacement]):
    """Union of the tile rectangles in placement order."""
    return union_rectangles(p.to_shapely_polygon() for p in placements)


def build_boundary(
    placements: List[TilePlacement],
    margin: float,
    rules: Optional[BoundaryRules] = None,
) -> BoundaryResult:
    """Protective boundary polygon and its length for a set of tiles."""
    rules = rules or BoundaryRules()
    return measure_boundary(
        tile_union(placements),
        margin,
        quad_segs=rules.quad_segs,
        join_style=rules.join_style,
        include_interiors=rules.include_interiors,
    )


def boundary_perimeter_and_cost(
    placements: List[TilePlacement],
    margin: float,
    price_per_meter: float,
    rules: Optional[BoundaryRules] = None,
) -> Tuple[float, float]:
    """Boundary length in meters and its cost.

    An empty layout has no boundary and costs nothing.
    """
    if not placements:
        return 0.0, 0.0
    boundary = build_boundary(placements, margin, rules)
    return boundary.length_m, boundary.length_m * price_per_meter


def quote_layout(
    placements: List[TilePlacement],
    catalog: TileCatalog,
    margin: Optional[float] = None,
    price_by_length: Optional[Mapping[float, float]] = None,
) -> QuantityTakeoff:
    """Quantity takeoff with tile and boundary cost for a layout."""
    margin = catalog.margin if margin is None else margin
    perimeter, _ = boundary_perimeter_and_cost(
        placements, margin, catalog.price_per_meter, catalog.boundary
    )
    return compute_quantities(
        placements,
        price_by_length if price_by_length is not None else catalog.prices,
        boundary_length_m=perimeter,
        price_per_meter=catalog.price_per_meter,
        palette=catalog.palette,
        currency=catalog.currency,
    )


def generate_layout(request: LayoutRequest) -> LayoutResponse:
    """Main pipeline: automatic layout, validation and quote from a request.

    Args:
        request: LayoutRequest with room, catalog and packing options

    Returns:
        LayoutResponse (status "failed" with a message on invalid input)
    """
    job_id = str(uuid.uuid4())[:8]
    stats: Dict[str, Any] = {"job_id": job_id}
    start_time = time.time()

    # PHASE 1: Resolve inputs
    catalog = load_catalog(request.catalog, request.catalog_override)
    margin = catalog.margin if request.room.margin is None else request.room.margin
    room = Room(points=[tuple(c) for c in request.room.outline], margin=margin)
    orientation = request.packing.orientation or catalog.orientation
    logger.info(f"[{job_id}] Packing with catalog '{catalog.name}', orientation {orientation}")

    # PHASE 2: Inner room
    inner = room.inner_polygon()
    stats["room_area_m2"] = round(get_polygon_area(room.to_shapely_polygon()), 4)
    stats["inner_area_m2"] = round(get_polygon_area(inner), 4)
    if is_empty(inner):
        return LayoutResponse(
            job_id=job_id,
            status="failed",
            message=f"Margin {margin}m leaves no usable area in the room",
            statistics=stats,
        )

    # PHASE 3: Pack
    t0 = time.time()
    placements = pack_room(
        room,
        catalog.get_palette(),
        catalog.tile_short_side,
        orientation,
        drop_overlaps=request.packing.drop_overlaps,
    )
    stats["pack_time_ms"] = round((time.time() - t0) * 1000, 1)

    # PHASE 4: Validate
    report = validate_layout(placements, inner)

    # PHASE 5-6: Boundary and quantities
    boundary = build_boundary(placements, margin, catalog.boundary) if placements else None
    quantities = compute_quantities(
        placements,
        catalog.prices,
        boundary_length_m=boundary.length_m if boundary else 0.0,
        price_per_meter=catalog.price_per_meter,
        palette=catalog.palette,
        currency=catalog.currency,
    )

    stats["total_time_ms"] = round((time.time() - start_time) * 1000, 1)
    logger.info(f"[{job_id}] Placed {len(placements)} tiles in {stats['total_time_ms']}ms")

    features = None
    if request.packing.include_geojson:
        features = layout_to_geojson(
            placements,
            room=room,
            inner=inner,
            boundary=boundary.polygon if boundary else None,
        )

    return LayoutResponse(
        job_id=job_id,
        status="completed",
        num_tiles=len(placements),
        placements=[p.model_dump() for p in placements],
        quantities=quantities.to_dict(),
        validation=report.to_dict(),
        features_geojson=features,
        statistics=stats,
    )
