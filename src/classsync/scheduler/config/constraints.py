"""Constraints configuration loader."""

import json
from pathlib import Path

from ...exceptions import InvalidConstraintsError
from ..constants import DEFAULT_CONSTRAINTS
from ..models import ScheduleConstraints


class ConstraintsConfig:
    """Loader for constraints.json.

    Values from the file are merged over DEFAULT_CONSTRAINTS, so a missing
    file or a partial file is valid. Keys may be snake_case or camelCase.
    """

    def __init__(self, constraints_path: Path | None = None):
        self._overrides: dict = {}

        if constraints_path and constraints_path.exists():
            self._load(constraints_path)

        # Later keys win, so overrides (in either spelling) replace defaults
        self.constraints = ScheduleConstraints.from_dict({**DEFAULT_CONSTRAINTS, **self._overrides})
        self.constraints.validate()

    def _load(self, path: Path) -> None:
        """Load constraint overrides from JSON."""
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidConstraintsError(path.name, f"{e.lineno}:{e.colno}", "invalid JSON") from e

        if not isinstance(data, dict):
            raise InvalidConstraintsError(path.name, type(data).__name__, "must be a JSON object")
        self._overrides = data

    def to_dict(self) -> dict:
        return self.constraints.to_dict()
