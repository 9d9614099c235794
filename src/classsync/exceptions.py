"""Custom exceptions for the classsync scheduler."""

from pathlib import Path
from typing import Any


class SchedulerError(Exception):
    """Base exception for fatal scheduler errors."""

    pass


class InvalidConstraintsError(SchedulerError):
    """Schedule constraints are malformed."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid constraint '{field}' = {value!r}: {reason}")


class InvalidCatalogError(SchedulerError):
    """Catalog data (classes, courses, teachers, rooms) is inconsistent."""

    def __init__(self, message: str, entity: str | None = None, entity_id: Any = None):
        self.entity = entity
        self.entity_id = entity_id
        location = ""
        if entity:
            location += f" in {entity}"
        if entity_id is not None:
            location += f" (id={entity_id})"
        super().__init__(f"Invalid catalog{location}: {message}")


class ConfigNotFoundError(SchedulerError):
    """A required configuration file is missing."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Configuration file not found: {self.path}")
