"""Tile placement and palette models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from shapely.geometry import Polygon

from ..geometry.polygon_ops import create_rectangle

Orientation = Literal["both", "horizontal", "vertical"]


class TilePlacement(BaseModel):
    """A placed tile: axis-aligned rectangle anchored at its lower-left corner.

    ``length`` is the nominal palette length used for counting and pricing.
    A 1 m tile with a 1.26 m short side still has length 1. When omitted it
    falls back to the longer side.
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="X of the lower-left corner in meters")
    y: float = Field(..., description="Y of the lower-left corner in meters")
    width: float = Field(..., gt=0, description="Extent along x in meters")
    height: float = Field(..., gt=0, description="Extent along y in meters")
    length: float = Field(..., gt=0, description="Nominal palette length")

    @model_validator(mode="before")
    @classmethod
    def default_length(cls, data: Any) -> Any:
        """Fill ``length`` from the longer side when omitted."""
        if isinstance(data, dict) and data.get("length") is None:
            width, height = data.get("width"), data.get("height")
            if width is not None and height is not None:
                data = {**data, "length": max(float(width), float(height))}
        return data

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def short_side(self) -> float:
        return min(self.width, self.height)

    @property
    def orientation(self) -> Literal["horizontal", "vertical"]:
        """Horizontal tiles run their length along x."""
        return "horizontal" if self.width >= self.height else "vertical"

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Bounds as (min_x, min_y, max_x, max_y)."""
        return (self.x, self.y, self.right, self.top)

    def contains_point(self, px: float, py: float) -> bool:
        """Closed-rectangle hit test."""
        return self.x <= px <= self.right and self.y <= py <= self.top

    def moved_to(self, x: float, y: float) -> "TilePlacement":
        """Copy of this placement with a new anchor."""
        return self.model_copy(update={"x": x, "y": y})

    def to_shapely_polygon(self) -> Polygon:
        return create_rectangle(self.x, self.y, self.width, self.height)


class Palette(BaseModel):
    """Allowed nominal tile lengths, kept sorted longest first."""

    lengths: list[float] = Field(..., min_length=1, description="Nominal tile lengths in meters")

    @field_validator("lengths")
    @classmethod
    def sort_lengths(cls, v: list[float]) -> list[float]:
        """Validate lengths are positive and store them descending without duplicates."""
        for length in v:
            if not length > 0:
                raise ValueError(f"Tile lengths must be positive, got {length}")
        return sorted(set(v), reverse=True)

    @classmethod
    def of(cls, *lengths: float) -> "Palette":
        return cls(lengths=list(lengths))

    @property
    def min_length(self) -> float:
        return self.lengths[-1]

    @property
    def max_length(self) -> float:
        return self.lengths[0]

    def __contains__(self, length: float) -> bool:
        return float(length) in self.lengths

    def __len__(self) -> int:
        return len(self.lengths)
