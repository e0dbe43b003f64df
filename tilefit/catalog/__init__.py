"""Tile catalog loading from YAML."""

from .loader import (
    CATALOGS_DIR,
    get_catalog_path,
    list_catalogs,
    load_catalog,
    validate_catalog_yaml,
)

__all__ = [
    "CATALOGS_DIR",
    "get_catalog_path",
    "list_catalogs",
    "load_catalog",
    "validate_catalog_yaml",
]
