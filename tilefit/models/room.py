"""Room outline models."""

import logging
import math

from pydantic import BaseModel, Field, PrivateAttr, field_validator
from shapely.geometry import Polygon

from ..errors import InvalidInput
from ..geometry.polygon_ops import PolygonLike, offset_polygon, polygon_from_coords

logger = logging.getLogger(__name__)


class Room(BaseModel):
    """Closed room outline with its wall-clearance margin.

    The outline is implicitly closed (edge from last point back to the
    first) and must not self-intersect.
    """

    points: list[tuple[float, float]] = Field(
        ..., min_length=3, description="Outline vertices as (x, y) in meters"
    )
    margin: float = Field(default=0.0, ge=0.0, description="Wall clearance in meters")

    @field_validator("points")
    @classmethod
    def validate_points(cls, v: list[tuple[float, float]]) -> list[tuple[float, float]]:
        """Drop an explicit closing point and reject non-finite coordinates."""
        for x, y in v:
            if not (math.isfinite(x) and math.isfinite(y)):
                raise ValueError(f"Room vertex ({x}, {y}) is not finite")
        if len(v) > 3 and v[0] == v[-1]:
            v = v[:-1]
        return v

    @classmethod
    def rectangle(cls, width: float, height: float, margin: float = 0.0) -> "Room":
        """Axis-aligned rectangular room with its corner at the origin."""
        return cls(points=[(0, 0), (width, 0), (width, height), (0, height)], margin=margin)

    def to_shapely_polygon(self) -> Polygon:
        return polygon_from_coords(self.points)

    def inner_polygon(self) -> PolygonLike:
        """Room eroded by the margin; empty if the margin swallows the room."""
        return offset_polygon(self.to_shapely_polygon(), -self.margin)

    def margin_guide_segments(self) -> list[tuple[tuple[float, float], tuple[float, float]]]:
        """Each room edge shifted inward by the margin along its normal.

        Drawing layers use these segments as the guide line for the wall
        clearance. Segments are not joined at the corners.
        """
        pts = self.points
        n = len(pts)
        area2 = sum(
            pts[i][0] * pts[(i + 1) % n][1] - pts[(i + 1) % n][0] * pts[i][1]
            for i in range(n)
        )
        ccw = area2 > 0

        segments = []
        for i in range(n):
            (px, py), (qx, qy) = pts[i], pts[(i + 1) % n]
            dx, dy = qx - px, qy - py
            edge_len = math.hypot(dx, dy)
            if edge_len == 0:
                continue
            # Inward normal is the left normal for counter-clockwise outlines
            nx, ny = (-dy / edge_len, dx / edge_len) if ccw else (dy / edge_len, -dx / edge_len)
            m = self.margin
            segments.append(((px + nx * m, py + ny * m), (qx + nx * m, qy + ny * m)))
        return segments


class RoomOutline(BaseModel):
    """Room outline drawn side by side, turtle style, from the origin.

    Each side is a length and an absolute angle in degrees. Sides can be
    added until the outline is closed; invalid sides are ignored.
    """

    points: list[tuple[float, float]] = Field(default_factory=list)
    closed: bool = False

    _origin: tuple[float, float] = PrivateAttr(default=(0.0, 0.0))

    def add_side(self, length: float | None, angle_deg: float | None) -> bool:
        """Append the end point of a new side.

        Returns:
            True if a point was added, False if the side was ignored
        """
        try:
            end = self._side_end(length, angle_deg)
        except InvalidInput as e:
            logger.info(f"Ignoring side: {e}")
            return False

        self.points.append(end)
        return True

    def _side_end(self, length: float | None, angle_deg: float | None) -> tuple[float, float]:
        if self.closed:
            raise InvalidInput("outline is already closed")
        if length is None or not math.isfinite(length) or length == 0:
            raise InvalidInput(f"side length must be finite and non-zero, got {length}")
        if angle_deg is None or not math.isfinite(angle_deg):
            raise InvalidInput(f"side angle must be finite, got {angle_deg}")

        last_x, last_y = self.points[-1] if self.points else self._origin
        angle = math.radians(angle_deg)
        return (last_x + length * math.cos(angle), last_y + length * math.sin(angle))

    def close(self) -> bool:
        """Close the outline; needs at least three points."""
        if len(self.points) < 3:
            return False
        self.closed = True
        return True

    def reset(self) -> None:
        self.points = []
        self.closed = False

    def to_room(self, margin: float = 0.0) -> Room:
        """Build the Room for a closed outline.

        Raises:
            InvalidInput: If the outline is not closed yet
        """
        if not self.closed:
            raise InvalidInput("outline must be closed before it can be used as a room")
        return Room(points=list(self.points), margin=margin)
