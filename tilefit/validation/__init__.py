"""Layout validation against the inner room and between tiles."""

from .layout import LayoutIssue, LayoutReport, validate_layout

__all__ = [
    "LayoutIssue",
    "LayoutReport",
    "validate_layout",
]
