"""MCP tool definitions for the tilefit server."""

from .tilefit_tools import (
    LayoutRequest,
    LayoutResponse,
    PackingConfig,
    RoomInput,
)

__all__ = [
    "LayoutRequest",
    "LayoutResponse",
    "PackingConfig",
    "RoomInput",
]
