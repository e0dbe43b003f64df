"""Quantity takeoff for tile layouts.

Rolls placements and the measured boundary up into tile counts, tile cost,
boundary cost and a grand total for cost estimation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional
import csv
import io
import logging

from ..models.placement import TilePlacement

logger = logging.getLogger(__name__)


@dataclass
class QuantityTakeoff:
    """Tile counts and costs for one layout."""

    currency: str = "EUR"

    # Tiles
    tile_counts: Dict[float, int] = field(default_factory=dict)
    tile_cost: float = 0.0
    tile_area_m2: float = 0.0

    # Protective boundary
    boundary_length_m: float = 0.0
    boundary_cost: float = 0.0

    @property
    def tile_count(self) -> int:
        return sum(self.tile_counts.values())

    @property
    def grand_total(self) -> float:
        return self.tile_cost + self.boundary_cost

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "currency": self.currency,
            "tile_counts": {_length_key(k): v for k, v in self.tile_counts.items()},
            "tile_count": self.tile_count,
            "tile_area_m2": round(self.tile_area_m2, 3),
            "tile_cost": round(self.tile_cost, 2),
            "boundary_length_m": round(self.boundary_length_m, 3),
            "boundary_cost": round(self.boundary_cost, 2),
            "grand_total": round(self.grand_total, 2),
        }

    def to_csv_string(self) -> str:
        """Export quantities as CSV string."""
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(["Tile Layout Quantity Takeoff"])
        writer.writerow([])

        writer.writerow(["Tiles by Length"])
        writer.writerow(["Length (m)", "Count"])
        for length, count in sorted(self.tile_counts.items(), reverse=True):
            writer.writerow([_length_key(length), count])
        writer.writerow([])

        writer.writerow(["Summary"])
        writer.writerow(["Metric", "Value", "Unit"])
        writer.writerow(["Tile Count", self.tile_count, ""])
        writer.writerow(["Tile Area", round(self.tile_area_m2, 3), "m2"])
        writer.writerow(["Tile Cost", round(self.tile_cost, 2), self.currency])
        writer.writerow(["Boundary Length", round(self.boundary_length_m, 3), "m"])
        writer.writerow(["Boundary Cost", round(self.boundary_cost, 2), self.currency])
        writer.writerow(["Grand Total", round(self.grand_total, 2), self.currency])

        return output.getvalue()


def _length_key(length: float) -> str:
    """Render 4.0 as "4" and 0.5 as "0.5"."""
    return f"{length:g}"


def count_tiles(
    placements: Iterable[TilePlacement],
    palette: Optional[Iterable[float]] = None,
) -> Dict[float, int]:
    """Count tiles per nominal length.

    Every palette length appears in the result, with zero when unused.
    """
    counts: Dict[float, int] = {float(length): 0 for length in (palette or [])}
    for p in placements:
        counts[float(p.length)] = counts.get(float(p.length), 0) + 1
    return counts


def tile_cost(
    placements: Iterable[TilePlacement],
    price_by_length: Mapping[float, float],
) -> float:
    """Sum of the per-length price over all placements.

    Lengths without a price contribute nothing.
    """
    prices = {float(k): float(v) for k, v in price_by_length.items()}
    total = 0.0
    unpriced = set()
    for p in placements:
        price = prices.get(float(p.length))
        if price is None:
            unpriced.add(p.length)
            continue
        total += price
    if unpriced:
        logger.warning(f"No price for tile lengths {sorted(unpriced)}; counted as 0")
    return total


def compute_quantities(
    placements: List[TilePlacement],
    price_by_length: Mapping[float, float],
    boundary_length_m: float = 0.0,
    price_per_meter: float = 0.0,
    palette: Optional[Iterable[float]] = None,
    currency: str = "EUR",
) -> QuantityTakeoff:
    """Compute the quantity takeoff for a layout.

    Args:
        placements: Placed tiles
        price_by_length: Price per tile keyed by nominal length
        boundary_length_m: Measured protective boundary length
        price_per_meter: Boundary price per meter
        palette: Lengths that always appear in the counts
        currency: Currency label

    Returns:
        QuantityTakeoff
    """
    return QuantityTakeoff(
        currency=currency,
        tile_counts=count_tiles(placements, palette),
        tile_cost=tile_cost(placements, price_by_length),
        tile_area_m2=sum(p.area for p in placements),
        boundary_length_m=boundary_length_m,
        boundary_cost=boundary_length_m * price_per_meter,
    )
