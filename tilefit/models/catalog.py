"""Tile catalog: palette, dimensions, prices and interaction settings."""

from typing import Dict, List, Literal

from pydantic import BaseModel, Field, field_validator

from .placement import Orientation, Palette


class BoundaryRules(BaseModel):
    """How the protective boundary around the tiles is built and measured."""

    join_style: Literal["round", "mitre", "bevel"] = Field(
        default="mitre", description="Corner join for the outward offset"
    )
    quad_segs: int = Field(
        default=1, ge=1, le=16, description="Arc segments per quarter circle for round joins"
    )
    include_interiors: bool = Field(
        default=False, description="Also measure boundary rings around enclosed holes"
    )


class TileCatalog(BaseModel):
    """Complete tile catalog for a layout session.

    Catalogs are loaded from YAML and can be overridden at request time via
    JSON merge patch.
    """

    name: str = Field(default="default", description="Catalog name")
    currency: str = Field(default="EUR", description="Currency for all prices")

    palette: List[float] = Field(
        default_factory=lambda: [4.0, 2.0, 1.0],
        min_length=1,
        description="Allowed nominal tile lengths in meters",
    )
    tile_short_side: float = Field(
        default=1.26, gt=0, description="Fixed short side of every tile in meters"
    )
    margin: float = Field(
        default=0.207, ge=0, description="Wall clearance and boundary offset in meters"
    )
    orientation: Orientation = Field(default="both", description="Default packing orientation")

    prices: Dict[float, float] = Field(
        default_factory=lambda: {4.0: 20.0, 2.0: 12.0, 1.0: 6.0},
        description="Price per tile by nominal length",
    )
    price_per_meter: float = Field(
        default=0.0, ge=0, description="Price per meter of protective boundary"
    )

    snap_tolerance: float = Field(
        default=0.05, ge=0, description="Edge distance below which dragged tiles snap"
    )

    boundary: BoundaryRules = Field(default_factory=BoundaryRules, description="Boundary rules")

    @field_validator("prices")
    @classmethod
    def validate_prices(cls, v: Dict[float, float]) -> Dict[float, float]:
        """Validate prices are non-negative."""
        for length, price in v.items():
            if price < 0:
                raise ValueError(f"Price for {length}m tiles must be non-negative, got {price}")
        return v

    def get_palette(self) -> Palette:
        return Palette(lengths=self.palette)

    def price_for(self, length: float) -> float:
        """Price of one tile of the given nominal length (0 if unpriced)."""
        return self.prices.get(float(length), 0.0)

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "TileCatalog":
        """Load catalog from YAML string."""
        import yaml
        data = yaml.safe_load(yaml_content) or {}
        return cls(**data)

    def merge_override(self, override: Dict) -> "TileCatalog":
        """Merge override dict into this catalog (JSON merge patch semantics)."""
        base = self.model_dump()
        _deep_merge(base, override)
        return TileCatalog(**base)


def _deep_merge(base: Dict, override: Dict) -> None:
    """Deep merge override into base dict (modifies base in place)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
