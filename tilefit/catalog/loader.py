"""Tile catalogs shipped as YAML.

A catalog names one tile product line: the nominal lengths on offer, the
common short side, the wall clearance and the prices used for quoting.
Catalog files live in ``tilefit/catalogs``; the first comment line of each
file doubles as its human-readable description.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..models.catalog import TileCatalog

logger = logging.getLogger(__name__)

CATALOGS_DIR = Path(__file__).parent.parent / "catalogs"


def get_catalog_path(name: str = "default") -> Path:
    """Resolve a catalog name to its YAML file.

    Raises:
        FileNotFoundError: No catalog file of that name is installed
    """
    path = CATALOGS_DIR / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"No tile catalog named '{name}' (looked in {CATALOGS_DIR})")
    return path


def list_catalogs() -> list[dict[str, str]]:
    """Installed tile catalogs as [{name, description}], sorted by name."""
    if not CATALOGS_DIR.exists():
        logger.warning(f"Tile catalog directory missing: {CATALOGS_DIR}")
        return []

    return sorted(
        (
            {"name": path.stem, "description": _describe(path)}
            for path in CATALOGS_DIR.glob("*.yaml")
        ),
        key=lambda entry: entry["name"],
    )


def _describe(path: Path) -> str:
    try:
        with open(path) as f:
            header = f.readline().strip()
    except OSError as e:
        logger.debug(f"Cannot read catalog header of {path}: {e}")
        header = ""
    if header.startswith("#"):
        return header.lstrip("#").strip()
    return f"Tile catalog {path.stem}"


def load_catalog(
    name: str = "default",
    override: dict | None = None,
) -> TileCatalog:
    """Read a tile catalog, applying per-request overrides on top.

    Args:
        name: Catalog file stem, e.g. "default" or "compact"
        override: Partial catalog (prices, palette, boundary, ...) deep-merged
            over the file's values

    Returns:
        Validated TileCatalog
    """
    with open(get_catalog_path(name)) as f:
        catalog = TileCatalog.from_yaml(f.read())

    if override:
        catalog = catalog.merge_override(override)
        logger.debug(f"Catalog '{name}' overridden: {sorted(override)}")

    return catalog


def validate_catalog_yaml(yaml_content: str) -> tuple[bool, str | None]:
    """Check that a YAML document parses into a usable tile catalog.

    Returns:
        (True, None) when valid, else (False, reason)
    """
    try:
        TileCatalog.from_yaml(yaml_content)
    except (yaml.YAMLError, ValidationError, TypeError) as e:
        return False, str(e)
    return True, None
