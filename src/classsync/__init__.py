"""classsync - weekly lecture and seminar timetable generator.

Given classes, the courses assigned to them, teachers with their
capabilities and typed rooms, classsync places one lecture and one seminar
per course per class into a Monday-Friday grid, records every conflict it
could not avoid and scores the result from 0 to 100.

Example usage:
    from classsync import ScheduleGenerator, ScheduleConstraints, Catalog

    catalog = Catalog.from_dict(data)
    schedule = ScheduleGenerator(ScheduleConstraints(), catalog).generate()

    print(f"Sessions: {len(schedule.sessions)}")
    print(f"Quality: {schedule.score} ({schedule.label.value})")

    # Export to JSON
    from classsync.scheduler import export_schedule_json
    export_schedule_json(schedule, "schedule.json")
"""

from .exceptions import (
    ConfigNotFoundError,
    InvalidCatalogError,
    InvalidConstraintsError,
    SchedulerError,
)
from .scheduler import (
    Catalog,
    ConfigLoader,
    GeneratedSchedule,
    ScheduleConstraints,
    ScheduleGenerator,
    ScheduleValidator,
)

__version__ = "0.1.0"

__all__ = [
    # Main generator
    "ScheduleGenerator",
    "ScheduleValidator",
    "ConfigLoader",
    # Models
    "Catalog",
    "GeneratedSchedule",
    "ScheduleConstraints",
    # Exceptions
    "SchedulerError",
    "InvalidConstraintsError",
    "InvalidCatalogError",
    "ConfigNotFoundError",
]
