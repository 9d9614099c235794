"""Unified configuration loader."""

from pathlib import Path

from ..models import Catalog, ScheduleConstraints
from .catalog import CatalogConfig
from .constraints import ConstraintsConfig

CONSTRAINTS_FILE = "constraints.json"
CATALOG_FILE = "catalog.json"


class ConfigLoader:
    """Unified loader for all scheduling configuration files."""

    def __init__(self, config_dir: Path | str | None = None):
        """
        Initialize configuration loader.

        Args:
            config_dir: Path to directory containing configuration files.
                       Expected files:
                       - catalog.json (required)
                       - constraints.json (optional, defaults otherwise)
        """
        if config_dir is None:
            config_dir = Path("config")

        self.config_dir = Path(config_dir)

        # Initialize sub-loaders
        self.constraints = ConstraintsConfig(self._get_path(CONSTRAINTS_FILE))
        self.catalog = CatalogConfig(self.config_dir / CATALOG_FILE)

    def _get_path(self, filename: str) -> Path | None:
        """Get path to config file if it exists."""
        path = self.config_dir / filename
        return path if path.exists() else None

    def load(self) -> tuple[ScheduleConstraints, Catalog]:
        """Return the loaded constraints and catalog."""
        return self.constraints.constraints, self.catalog.catalog
