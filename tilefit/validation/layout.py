"""Layout validation.

Checks a placement list against the inner room and against itself and
reports every tile outside the room and every overlapping pair. Packing
with both orientations is expected to produce overlaps; manually added
tiles are not containment-checked at creation time, so they can show up
as outside.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from ..geometry.containment import check_containment
from ..geometry.polygon_ops import PolygonLike, is_empty
from ..models.placement import TilePlacement
from ..packing.overlap import find_overlaps

logger = structlog.get_logger(__name__)


@dataclass
class LayoutIssue:
    """A single problem found in a layout."""

    kind: Literal["outside", "overlap"]
    tiles: tuple[int, ...]
    amount: float  # Outside area or overlap area in m²
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "tiles": list(self.tiles),
            "amount": round(self.amount, 6),
            "message": self.message,
        }


@dataclass
class LayoutReport:
    """Result of validating a layout."""

    tile_count: int
    issues: list[LayoutIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def outside(self) -> list[LayoutIssue]:
        return [i for i in self.issues if i.kind == "outside"]

    @property
    def overlaps(self) -> list[LayoutIssue]:
        return [i for i in self.issues if i.kind == "overlap"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tile_count": self.tile_count,
            "is_valid": self.is_valid,
            "issues": [i.to_dict() for i in self.issues],
        }


def validate_layout(
    placements: list[TilePlacement],
    inner: PolygonLike | None,
    check_overlaps: bool = True,
) -> LayoutReport:
    """Validate placements against the inner room and each other.

    Args:
        placements: Tiles to check
        inner: Inward-offset room; when empty every tile is reported outside
        check_overlaps: Also report overlapping tile pairs

    Returns:
        LayoutReport listing every issue found
    """
    report = LayoutReport(tile_count=len(placements))

    for i, tile in enumerate(placements):
        result = check_containment(tile.to_shapely_polygon(), inner)
        if result.is_valid:
            continue
        outside_area = tile.area if is_empty(inner) else result.outside_area
        report.issues.append(LayoutIssue(
            kind="outside",
            tiles=(i,),
            amount=outside_area,
            message=result.message or f"Tile {i} is outside the inner room",
        ))

    if check_overlaps:
        for i, j, area in find_overlaps(placements):
            report.issues.append(LayoutIssue(
                kind="overlap",
                tiles=(i, j),
                amount=area,
                message=f"Tiles {i} and {j} overlap by {area:.4f}m²",
            ))

    if report.is_valid:
        logger.info("layout_validated", tiles=report.tile_count)
    else:
        logger.warning(
            "layout_issues_found",
            tiles=report.tile_count,
            outside=len(report.outside),
            overlaps=len(report.overlaps),
        )
    return report
