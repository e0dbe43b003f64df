"""Automatic tile packing and interactive placement helpers."""

from .greedy import pack
from .overlap import find_overlaps, remove_overlaps
from .snap import snap_position

__all__ = [
    "pack",
    "snap_position",
    "find_overlaps",
    "remove_overlaps",
]
