"""GeoJSON export of tile layouts for drawing layers."""

from typing import Any

from shapely.geometry import mapping

from ..geometry.polygon_ops import PolygonLike, is_empty
from ..models.placement import TilePlacement
from ..models.room import Room


def layout_to_geojson(
    placements: list[TilePlacement],
    room: Room | None = None,
    inner: PolygonLike | None = None,
    boundary: PolygonLike | None = None,
    include_guides: bool = False,
) -> dict[str, Any]:
    """Convert a layout to a GeoJSON FeatureCollection.

    Args:
        placements: Placed tiles
        room: Optional room (outline layer)
        inner: Optional inward-offset room polygon
        boundary: Optional protective boundary polygon
        include_guides: Add per-edge margin guide lines for the room

    Returns:
        GeoJSON FeatureCollection dict
    """
    features = []

    if room is not None:
        features.append(_feature(mapping(room.to_shapely_polygon()), kind="room", layer="room"))
        if include_guides:
            for i, (start, end) in enumerate(room.margin_guide_segments()):
                features.append(_feature(
                    {"type": "LineString", "coordinates": [list(start), list(end)]},
                    kind="margin_guide",
                    layer="room",
                    edge=i,
                ))

    if not is_empty(inner):
        features.append(_feature(mapping(inner), kind="inner_room", layer="room"))

    features.extend(placements_to_features(placements))

    if not is_empty(boundary):
        features.append(_feature(mapping(boundary), kind="boundary", layer="boundary"))

    return {
        "type": "FeatureCollection",
        "features": features,
    }


def placements_to_features(placements: list[TilePlacement]) -> list[dict[str, Any]]:
    """One Polygon feature per tile, in placement order."""
    return [
        _feature(
            mapping(p.to_shapely_polygon()),
            kind="tile",
            layer="tiles",
            index=i,
            length=p.length,
            orientation=p.orientation,
        )
        for i, p in enumerate(placements)
    ]


def filter_geojson_by_layer(
    geojson: dict[str, Any],
    layers: list[str],
) -> dict[str, Any]:
    """Filter GeoJSON features by layer."""
    return {
        "type": "FeatureCollection",
        "features": [
            f for f in geojson.get("features", [])
            if f.get("properties", {}).get("layer") in layers
        ],
    }


def _feature(geometry: dict[str, Any], **properties: Any) -> dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": geometry,
        "properties": properties,
    }
