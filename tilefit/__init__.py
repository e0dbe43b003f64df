"""tilefit - Lay out rectangular tiles inside a room outline.

This package provides:
- Greedy strip packing inside a margin-eroded room polygon
- Interactive placement sessions with edge snapping and containment checks
- Protective boundary measurement and cost quotes
- An MCP server exposing all of the above

Core functionality can be imported without MCP server dependencies:
    from tilefit.pipeline import pack_room, boundary_perimeter_and_cost
    from tilefit.session import LayoutSession

To get the MCP server instance:
    from tilefit import get_mcp
    mcp = get_mcp()
"""

__version__ = "0.1.0"


def get_mcp():
    """Get the MCP server instance (lazy import to avoid coupling).

    Returns:
        FastMCP: The configured MCP server instance.
    """
    from .server import mcp
    return mcp


def get_pipeline():
    """Get the pipeline module for direct use."""
    from . import pipeline
    return pipeline


__all__ = ["get_mcp", "get_pipeline", "__version__"]
