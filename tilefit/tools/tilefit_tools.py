"""MCP tool request/response schemas."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..models.placement import Orientation


class RoomInput(BaseModel):
    """Room outline and wall clearance input."""

    outline: list[list[float]] = Field(
        ...,
        description="Room outline as list of [x, y] coordinates in meters (implicitly closed)",
    )
    margin: float | None = Field(
        default=None,
        ge=0.0,
        description="Wall clearance in meters (catalog default if omitted)",
    )

    @field_validator("outline")
    @classmethod
    def validate_outline(cls, v: list[list[float]]) -> list[list[float]]:
        """Validate every vertex is an [x, y] pair."""
        for point in v:
            if len(point) != 2:
                raise ValueError(f"Outline vertices must be [x, y] pairs, got {point}")
        return v


class PackingConfig(BaseModel):
    """Configuration for automatic packing."""

    orientation: Orientation | None = Field(
        default=None,
        description="both, horizontal or vertical (catalog default if omitted)",
    )
    drop_overlaps: bool = Field(
        default=False,
        description="Remove tiles from the vertical pass that overlap horizontal-pass tiles",
    )
    include_geojson: bool = Field(
        default=False,
        description="Include a GeoJSON FeatureCollection of the layout",
    )


class LayoutRequest(BaseModel):
    """Complete request for an automatic tile layout."""

    room: RoomInput = Field(..., description="Room outline and margin")
    catalog: str = Field(default="default", description="Catalog name")
    catalog_override: dict[str, Any] | None = Field(
        default=None,
        description="Override catalog values (palette, prices, tile_short_side, ...)",
    )
    packing: PackingConfig = Field(
        default_factory=PackingConfig,
        description="Packing configuration",
    )


class LayoutResponse(BaseModel):
    """Response from layout generation."""

    job_id: str
    status: str  # "completed", "failed"
    message: str | None = None
    num_tiles: int = 0
    placements: list[dict[str, Any]] = Field(default_factory=list)
    quantities: dict[str, Any] = Field(default_factory=dict)
    validation: dict[str, Any] = Field(default_factory=dict)
    features_geojson: dict[str, Any] | None = None
    statistics: dict[str, Any] = Field(default_factory=dict)
