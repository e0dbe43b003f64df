"""FastMCP server for tile layouts.

Exposes MCP tools for automatic packing, quoting and boundary measurement,
plus session tools for interactive placement (add, drag, remove, reset).
"""

import asyncio
import logging
import math
import sys
import uuid
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from .catalog.loader import list_catalogs, load_catalog
from .models.placement import TilePlacement
from .models.room import Room
from .pipeline import build_boundary, generate_layout, quote_layout
from .session import LayoutSession
from .tools.tilefit_tools import LayoutRequest

# Configure logging to stderr (required for MCP stdio transport)
# stdio servers must NOT log to stdout as it interferes with JSON-RPC
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="tilefit_mcp",
    instructions="Lay out rectangular tiles inside a room outline with a wall clearance. "
    "Use tilefit_pack for an automatic layout, tilefit_quote and tilefit_boundary for costs, "
    "and the tilefit_session_* tools for interactive placement.",
)

# In-memory session store
_sessions: dict[str, LayoutSession] = {}


def _error(message: str, suggestion: str) -> dict[str, Any]:
    return {"isError": True, "error": message, "suggestion": suggestion}


def _parse_placements(
    placements: list[dict[str, Any]],
    tile_short_side: float | None = None,
) -> list[TilePlacement]:
    """Build placements; a missing length is the side other than the short side."""
    tiles = []
    for p in placements:
        if p.get("length") is None and tile_short_side is not None:
            width, height = p.get("width"), p.get("height")
            if height is not None and math.isclose(float(height), tile_short_side):
                p = {**p, "length": width}
            elif width is not None and math.isclose(float(width), tile_short_side):
                p = {**p, "length": height}
        tiles.append(TilePlacement(**p))
    return tiles


@mcp.tool(
    annotations={
        "readOnlyHint": True,  # Pure computation
        "destructiveHint": False,
        "idempotentHint": True,  # Packing is deterministic
        "openWorldHint": False,
    }
)
async def tilefit_pack(
    room_outline: list[list[float]],
    margin: float | None = None,
    catalog: str = "default",
    catalog_override: dict[str, Any] | None = None,
    orientation: str | None = None,
    drop_overlaps: bool = False,
    include_geojson: bool = False,
) -> dict[str, Any]:
    """Generate an automatic tile layout for a room.

    Args:
        room_outline: Room outline as [[x,y], ...] coordinates (meters, implicitly closed)
        margin: Wall clearance in meters (catalog default if omitted)
        catalog: Tile catalog name (see tilefit_list_catalogs)
        catalog_override: Optional catalog overrides (palette, prices, tile_short_side, ...)
        orientation: "both", "horizontal" or "vertical" (catalog default if omitted)
        drop_overlaps: Drop vertical-pass tiles overlapping horizontal-pass tiles
        include_geojson: Include a GeoJSON FeatureCollection for drawing

    Returns:
        Dict with job_id, status, placements, quantities, validation and statistics
    """
    try:
        request = LayoutRequest(
            room={"outline": room_outline, "margin": margin},
            catalog=catalog,
            catalog_override=catalog_override,
            packing={
                "orientation": orientation,
                "drop_overlaps": drop_overlaps,
                "include_geojson": include_geojson,
            },
        )
        response = generate_layout(request)
        return response.model_dump(exclude_none=True)

    except (ValidationError, FileNotFoundError, ValueError) as e:
        logger.exception("Layout generation failed")
        return _error(
            str(e),
            "Check room_outline has at least 3 [x, y] points and the catalog exists",
        )


@mcp.tool(
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def tilefit_quote(
    placements: list[dict[str, Any]],
    catalog: str = "default",
    catalog_override: dict[str, Any] | None = None,
    margin: float | None = None,
) -> dict[str, Any]:
    """Price a set of placements: tile counts, tile cost, boundary cost, grand total.

    Args:
        placements: Tiles as {x, y, width, height, length}; length defaults to the side
            that is not the catalog short side
        catalog: Tile catalog name for prices
        catalog_override: Optional catalog overrides (prices, price_per_meter, ...)
        margin: Boundary offset in meters (catalog default if omitted)

    Returns:
        Quantity takeoff dict
    """
    try:
        tile_catalog = load_catalog(catalog, catalog_override)
        tiles = _parse_placements(placements, tile_catalog.tile_short_side)
        return quote_layout(tiles, tile_catalog, margin=margin).to_dict()
    except (ValidationError, FileNotFoundError, ValueError) as e:
        return _error(str(e), "Placements need x, y, width and height; check the catalog name")


@mcp.tool(
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def tilefit_boundary(
    placements: list[dict[str, Any]],
    margin: float,
    price_per_meter: float = 0.0,
) -> dict[str, Any]:
    """Measure the protective boundary around a set of tiles.

    Args:
        placements: Tiles as {x, y, width, height, length}
        margin: Outward offset in meters
        price_per_meter: Boundary price per meter

    Returns:
        Dict with perimeter_m, cost and the boundary rings for drawing
    """
    try:
        tiles = _parse_placements(placements)
    except ValidationError as e:
        return _error(str(e), "Placements need x, y, width and height")

    if not tiles:
        return {"perimeter_m": 0.0, "cost": 0.0, "rings": []}

    boundary = build_boundary(tiles, margin)
    return {
        "perimeter_m": boundary.length_m,
        "cost": boundary.length_m * price_per_meter,
        "rings": [[list(pt) for pt in ring] for ring in boundary.rings],
        "offset_applied": boundary.offset_applied,
    }


@mcp.tool(
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def tilefit_list_catalogs() -> dict[str, Any]:
    """List available tile catalogs.

    Returns:
        Dict with catalogs list (name and description)
    """
    return {"catalogs": list_catalogs()}


@mcp.tool(
    annotations={
        "readOnlyHint": False,  # Creates a session
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    }
)
async def tilefit_session_create(
    room_outline: list[list[float]],
    margin: float | None = None,
    catalog: str = "default",
    catalog_override: dict[str, Any] | None = None,
    optimize: bool = True,
    orientation: str | None = None,
) -> dict[str, Any]:
    """Create an interactive layout session for a room.

    Args:
        room_outline: Room outline as [[x,y], ...] coordinates
        margin: Wall clearance in meters (catalog default if omitted)
        catalog: Tile catalog name
        catalog_override: Optional catalog overrides
        optimize: Run automatic packing right away
        orientation: Packing orientation (catalog default if omitted)

    Returns:
        Dict with session_id and the session snapshot
    """
    try:
        tile_catalog = load_catalog(catalog, catalog_override)
        room = Room(
            points=[tuple(c) for c in room_outline],
            margin=tile_catalog.margin if margin is None else margin,
        )
        session = LayoutSession(room, tile_catalog)
        if optimize:
            session.optimize(orientation)
    except (ValidationError, FileNotFoundError, ValueError) as e:
        return _error(str(e), "Check room_outline has at least 3 [x, y] points")

    session_id = str(uuid.uuid4())[:8]
    _sessions[session_id] = session
    logger.info(f"Created session {session_id} with {len(session.placements)} tiles")
    return {"session_id": session_id, **session.to_dict()}


def _get_session(session_id: str) -> LayoutSession | None:
    return _sessions.get(session_id)


def _missing_session(session_id: str) -> dict[str, Any]:
    return _error(
        f"Session {session_id} not found",
        "Use tilefit_session_create to start a session",
    )


@mcp.tool(
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def tilefit_session_get(session_id: str, include_quote: bool = True) -> dict[str, Any]:
    """Get the current placements (and quote) of a session."""
    session = _get_session(session_id)
    if session is None:
        return _missing_session(session_id)

    result = {"session_id": session_id, **session.to_dict()}
    if include_quote:
        result["quantities"] = session.quote().to_dict()
        result["validation"] = session.validate().to_dict()
    return result


@mcp.tool(
    annotations={
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,  # Repeated adds stack tiles
        "openWorldHint": False,
    }
)
async def tilefit_session_add_tile(
    session_id: str,
    length: float,
    short_side: float | None = None,
    anchor: list[float] | None = None,
) -> dict[str, Any]:
    """Add a tile manually (at the inner room's lower-left corner unless anchored)."""
    session = _get_session(session_id)
    if session is None:
        return _missing_session(session_id)

    tile = session.add_manual_tile(
        length, short_side, tuple(anchor) if anchor is not None else None
    )
    if tile is None:
        return _error("Tile not added", "Length must be positive and the room must have usable area")
    return {"session_id": session_id, "added": tile.model_dump(), "num_tiles": len(session.placements)}


@mcp.tool(
    annotations={
        "readOnlyHint": False,
        "destructiveHint": True,  # Removes a tile
        "idempotentHint": False,
        "openWorldHint": False,
    }
)
async def tilefit_session_remove_tile(session_id: str, index: int) -> dict[str, Any]:
    """Remove the tile at the given index."""
    session = _get_session(session_id)
    if session is None:
        return _missing_session(session_id)

    removed = session.remove_tile(index)
    return {"session_id": session_id, "removed": removed, "num_tiles": len(session.placements)}


@mcp.tool(
    annotations={
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    }
)
async def tilefit_session_drag(
    session_id: str,
    index: int,
    grab_point: list[float],
    path: list[list[float]],
) -> dict[str, Any]:
    """Drag a tile along a pointer path.

    Each path point is one pointer move: the tile snaps to nearby edges and
    moves only if it stays inside the inner room.

    Args:
        session_id: Session ID from tilefit_session_create
        index: Tile index to drag
        grab_point: Pointer position where the tile was grabbed
        path: Successive pointer positions

    Returns:
        Dict with the outcome of every move and the final tile
    """
    session = _get_session(session_id)
    if session is None:
        return _missing_session(session_id)

    if not session.begin_drag(index, tuple(grab_point)):
        return _error(f"No tile at index {index}", "Use tilefit_session_get to list tiles")
    try:
        outcomes = [session.update_drag(tuple(point)).value for point in path]
    finally:
        session.end_drag()

    return {
        "session_id": session_id,
        "outcomes": outcomes,
        "tile": session.placements[index].model_dump(),
    }


@mcp.tool(
    annotations={
        "readOnlyHint": False,
        "destructiveHint": True,  # Clears all tiles
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def tilefit_session_reset(session_id: str) -> dict[str, Any]:
    """Remove every tile from a session."""
    session = _get_session(session_id)
    if session is None:
        return _missing_session(session_id)

    session.reset_all()
    return {"session_id": session_id, "num_tiles": 0}


@mcp.tool(
    annotations={
        "readOnlyHint": False,
        "destructiveHint": True,  # Drops the session
        "idempotentHint": False,
        "openWorldHint": False,
    }
)
async def tilefit_session_close(session_id: str) -> dict[str, Any]:
    """Discard a session and free its placements."""
    session = _sessions.pop(session_id, None)
    if session is None:
        return _missing_session(session_id)

    logger.info(f"Closed session {session_id} with {len(session.placements)} tiles")
    return {"session_id": session_id, "closed": True}


def run_server():
    """Run the MCP server (stdio transport)."""

    asyncio.run(mcp.run_stdio_async())


def main():
    """Main entry point."""
    run_server()


if __name__ == "__main__":
    main()
