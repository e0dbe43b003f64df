"""Pydantic models for tilefit."""

from .catalog import BoundaryRules, TileCatalog
from .placement import Orientation, Palette, TilePlacement
from .room import Room, RoomOutline

__all__ = [
    # Tiles
    "TilePlacement",
    "Palette",
    "Orientation",
    # Room
    "Room",
    "RoomOutline",
    # Catalog
    "TileCatalog",
    "BoundaryRules",
]
