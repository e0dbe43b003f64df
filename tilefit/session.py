"""Interactive layout session.

A LayoutSession owns the placement list and the drag state for one room.
Every mutation takes the session lock, so a session can be shared between
server tasks while keeping a single writer at a time. Each operation either
applies completely or leaves the placements untouched.

Drag protocol::

    Idle --begin_drag--> Dragging(index, grab offset) --end_drag--> Idle

While dragging, each ``update_drag`` snaps the candidate position to
neighboring tile edges and commits it only if the tile stays inside the
inner room.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .errors import InvalidInput, OutOfBounds
from .export.quantities import QuantityTakeoff, compute_quantities
from .geometry.boundary import BoundaryResult
from .geometry.containment import contains
from .geometry.polygon_ops import PolygonLike, get_polygon_bounds, is_empty
from .models.catalog import TileCatalog
from .models.placement import Orientation, TilePlacement
from .models.room import Room
from .packing.snap import snap_position
from .pipeline import build_boundary, pack_room
from .validation.layout import LayoutReport, validate_layout

logger = logging.getLogger(__name__)

Point = tuple[float, float]


class DragOutcome(Enum):
    """Result of a pointer move."""
    COMMITTED = "committed"
    REJECTED = "rejected"
    IDLE = "idle"  # No drag in progress


@dataclass(frozen=True)
class DragState:
    """Tile being dragged and where it was grabbed."""

    index: int
    grab_dx: float
    grab_dy: float
    start: Point


class LayoutSession:
    """Placement list, drag state and cached derived geometry for one room."""

    def __init__(self, room: Room, catalog: Optional[TileCatalog] = None):
        self.catalog = catalog or TileCatalog()
        self._room = room
        self._placements: list[TilePlacement] = []
        self._drag: Optional[DragState] = None
        self._inner: Optional[PolygonLike] = None
        self._boundary: Optional[BoundaryResult] = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def room(self) -> Room:
        return self._room

    @property
    def placements(self) -> list[TilePlacement]:
        """Copy of the current placement list."""
        with self._lock:
            return list(self._placements)

    @property
    def dragging(self) -> Optional[DragState]:
        return self._drag

    @property
    def inner(self) -> PolygonLike:
        """Room eroded by its margin (cached)."""
        with self._lock:
            if self._inner is None:
                self._inner = self._room.inner_polygon()
            return self._inner

    def set_room(self, room: Room) -> None:
        """Replace the room; placements are kept, derived geometry is recomputed."""
        with self._lock:
            self._room = room
            self._inner = None
            self._boundary = None
            self._drag = None

    # ------------------------------------------------------------------
    # Placement list lifecycle
    # ------------------------------------------------------------------

    def optimize(
        self,
        orientation: Optional[Orientation] = None,
        drop_overlaps: bool = False,
    ) -> list[TilePlacement]:
        """Replace all placements with a fresh greedy packing."""
        placements = pack_room(
            self._room,
            self.catalog.get_palette(),
            self.catalog.tile_short_side,
            orientation or self.catalog.orientation,
            drop_overlaps=drop_overlaps,
        )
        with self._lock:
            self._placements = placements
            self._drag = None
            self._boundary = None
            return list(placements)

    def add_manual_tile(
        self,
        length: float,
        short_side: Optional[float] = None,
        anchor: Optional[Point] = None,
    ) -> Optional[TilePlacement]:
        """Append a horizontal tile.

        Without an explicit anchor the tile goes to the lower-left corner of
        the inner room's bounding box, whatever is already there. The new
        tile is not checked for containment or overlap.

        Returns:
            The new placement, or None if the input was invalid or the room
            has no usable area
        """
        short_side = self.catalog.tile_short_side if short_side is None else short_side
        try:
            tile = self._manual_tile(length, short_side, anchor)
        except InvalidInput as e:
            logger.info(f"Manual tile not added: {e}")
            return None

        with self._lock:
            self._placements.append(tile)
            self._boundary = None
        return tile

    def _manual_tile(
        self,
        length: float,
        short_side: float,
        anchor: Optional[Point],
    ) -> TilePlacement:
        for name, value in (("length", length), ("short side", short_side)):
            if value is None or not math.isfinite(value) or value <= 0:
                raise InvalidInput(f"tile {name} must be positive and finite, got {value}")

        if anchor is None:
            inner = self.inner
            if is_empty(inner):
                raise InvalidInput("room has no usable area inside the margin")
            min_x, min_y, _, _ = get_polygon_bounds(inner)
            anchor = (min_x, min_y)

        return TilePlacement(
            x=anchor[0], y=anchor[1], width=length, height=short_side, length=length
        )

    def remove_tile(self, index: int) -> bool:
        """Remove one tile; out-of-range indices are ignored."""
        with self._lock:
            if not 0 <= index < len(self._placements):
                return False
            del self._placements[index]
            self._drag = None
            self._boundary = None
            return True

    def reset_all(self) -> None:
        """Clear placements, drag state and the measured boundary."""
        with self._lock:
            self._placements = []
            self._drag = None
            self._boundary = None

    def tile_at(self, point: Point) -> Optional[int]:
        """Index of the topmost (last drawn) tile under the point."""
        px, py = point
        with self._lock:
            for i in range(len(self._placements) - 1, -1, -1):
                if self._placements[i].contains_point(px, py):
                    return i
        return None

    # ------------------------------------------------------------------
    # Drag
    # ------------------------------------------------------------------

    def begin_drag(self, index: int, grab_point: Point) -> bool:
        """Start dragging a tile, remembering the grab offset."""
        with self._lock:
            if not 0 <= index < len(self._placements):
                return False
            tile = self._placements[index]
            self._drag = DragState(
                index=index,
                grab_dx=grab_point[0] - tile.x,
                grab_dy=grab_point[1] - tile.y,
                start=(tile.x, tile.y),
            )
            return True

    def begin_drag_at(self, point: Point) -> Optional[int]:
        """Start dragging whichever tile is under the point."""
        with self._lock:
            index = self.tile_at(point)
            if index is not None:
                self.begin_drag(index, point)
            return index

    def update_drag(self, pointer: Point) -> DragOutcome:
        """Move the dragged tile toward the pointer.

        The candidate position is snapped to neighboring edges, then kept
        only if the tile lies inside the inner room.
        """
        with self._lock:
            if self._drag is None:
                return DragOutcome.IDLE
            try:
                self._commit_move(self._drag, pointer)
            except OutOfBounds as e:
                logger.debug(f"Drag rejected: {e}")
                return DragOutcome.REJECTED
            return DragOutcome.COMMITTED

    def _commit_move(self, drag: DragState, pointer: Point) -> None:
        tile = self._placements[drag.index]
        x, y = snap_position(
            drag.index,
            pointer[0] - drag.grab_dx,
            pointer[1] - drag.grab_dy,
            tile.width,
            tile.height,
            self._placements,
            self.catalog.snap_tolerance,
        )
        moved = tile.moved_to(x, y)
        if not contains(self.inner, moved.to_shapely_polygon()):
            raise OutOfBounds(drag.index, x, y)

        self._placements[drag.index] = moved
        self._boundary = None

    def end_drag(self) -> None:
        with self._lock:
            self._drag = None

    # ------------------------------------------------------------------
    # Derived results
    # ------------------------------------------------------------------

    def boundary(self) -> Optional[BoundaryResult]:
        """Protective boundary around the tiles (cached until the next change)."""
        with self._lock:
            if not self._placements:
                return None
            if self._boundary is None:
                self._boundary = build_boundary(
                    self._placements, self._room.margin, self.catalog.boundary
                )
            return self._boundary

    def boundary_perimeter_and_cost(
        self,
        price_per_meter: Optional[float] = None,
    ) -> tuple[float, float]:
        """Boundary length and its cost; (0, 0) without tiles."""
        price = self.catalog.price_per_meter if price_per_meter is None else price_per_meter
        boundary = self.boundary()
        if boundary is None:
            return 0.0, 0.0
        return boundary.length_m, boundary.length_m * price

    def quote(self) -> QuantityTakeoff:
        """Tile counts and cost, including the cached boundary."""
        length, _ = self.boundary_perimeter_and_cost()
        return compute_quantities(
            self.placements,
            self.catalog.prices,
            boundary_length_m=length,
            price_per_meter=self.catalog.price_per_meter,
            palette=self.catalog.palette,
            currency=self.catalog.currency,
        )

    def validate(self) -> LayoutReport:
        return validate_layout(self.placements, self.inner)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of the session for tool responses."""
        with self._lock:
            return {
                "room": self._room.model_dump(),
                "catalog": self.catalog.name,
                "num_tiles": len(self._placements),
                "placements": [p.model_dump() for p in self._placements],
                "dragging": self._drag.index if self._drag else None,
            }
