"""Catalog configuration loader."""

import json
from pathlib import Path
from typing import Any

from ...exceptions import ConfigNotFoundError, InvalidCatalogError
from ..models import Catalog


def catalog_from_dict(data: Any, source: str | None = None) -> Catalog:
    """Build a Catalog from parsed JSON, raising InvalidCatalogError on bad data.

    Args:
        data: Parsed catalog document
        source: Where the data came from, used in error messages

    Returns:
        Catalog instance (not yet validated)
    """
    if not isinstance(data, dict):
        raise InvalidCatalogError("top-level JSON value must be an object", source)

    try:
        return Catalog.from_dict(data)
    except KeyError as e:
        raise InvalidCatalogError(f"missing required field {e}", source) from e
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidCatalogError(str(e), source) from e


class CatalogConfig:
    """Loader for catalog.json (classes, courses, teachers, rooms, class_courses)."""

    def __init__(self, catalog_path: Path):
        if not catalog_path.exists():
            raise ConfigNotFoundError(catalog_path)

        self.path = catalog_path
        self.catalog = self._load(catalog_path)
        self.catalog.validate()

    def _load(self, path: Path) -> Catalog:
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidCatalogError(f"invalid JSON: {e}", path.name) from e

        return catalog_from_dict(data, path.name)

    def summary(self) -> dict[str, int]:
        """Entity counts, for display."""
        return {
            "classes": len(self.catalog.classes),
            "courses": len(self.catalog.courses),
            "teachers": len(self.catalog.teachers),
            "rooms": len(self.catalog.rooms),
        }
