"""Export and load functions for generated schedules."""

import json
from pathlib import Path

from .models import GeneratedSchedule, ScheduleSession


def export_schedule_json(schedule: GeneratedSchedule, output_path: Path | str) -> None:
    """Export a generated schedule to a JSON file.

    Args:
        schedule: GeneratedSchedule to export
        output_path: Path to output JSON file
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with open(output, "w", encoding="utf-8") as f:
        json.dump(schedule.to_dict(), f, ensure_ascii=False, indent=2)


def load_input_data(input_path: Path | str) -> dict:
    """Load a JSON document (catalog, constraints or exported schedule).

    Args:
        input_path: Path to JSON file

    Returns:
        Dictionary with the file contents
    """
    with open(input_path, encoding="utf-8") as f:
        return json.load(f)


def load_schedule_sessions(input_path: Path | str) -> list[ScheduleSession]:
    """Load the sessions of a schedule exported by export_schedule_json().

    A bare list of session dictionaries is accepted as well.
    """
    data = load_input_data(input_path)
    items = data["sessions"] if isinstance(data, dict) else data
    return [ScheduleSession.from_dict(item) for item in items]
