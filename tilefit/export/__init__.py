"""Export utilities for tile layouts."""

from .geojson import (
    filter_geojson_by_layer,
    layout_to_geojson,
    placements_to_features,
)
from .quantities import (
    QuantityTakeoff,
    compute_quantities,
    count_tiles,
    tile_cost,
)

__all__ = [
    "layout_to_geojson",
    "placements_to_features",
    "filter_geojson_by_layer",
    "compute_quantities",
    "count_tiles",
    "tile_cost",
    "QuantityTakeoff",
]
