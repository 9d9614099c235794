"""Configuration loaders for the scheduler."""

from .catalog import CatalogConfig
from .constraints import ConstraintsConfig
from .loader import ConfigLoader

__all__ = [
    "ConfigLoader",
    "ConstraintsConfig",
    "CatalogConfig",
]
