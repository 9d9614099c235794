"""Weekly session scheduling engine.

This package generates a weekly timetable in which every class gets one
lecture and one seminar per assigned course, each placed with a teacher, a
room of the right type and a 2-hour window. It is a greedy best-fit search:
requirements are ranked, then each one takes the best scored candidate that
is still free.

Main classes:
- ScheduleGenerator: Runs one generation and returns a GeneratedSchedule
- ScheduleValidator: Re-checks any session set for conflicts
- QualityScorer: Computes the 0-100 quality score
- ConfigLoader: Loads constraints.json and catalog.json from a directory

Usage:
    from classsync.scheduler import ConfigLoader, ScheduleGenerator

    constraints, catalog = ConfigLoader(Path("config")).load()
    schedule = ScheduleGenerator(constraints, catalog).generate()
    print(schedule.score, schedule.label.value)
"""

from .algorithm import ScheduleGenerator, assemble_schedule, build_metadata, create_generator
from .assist import ProposalReview, ScheduleAdvisor, apply_advice, review_proposal
from .config import CatalogConfig, ConfigLoader, ConstraintsConfig
from .constants import DEFAULT_CONSTRAINTS, TIME_WINDOWS, WEEKDAYS
from .exporter import export_schedule_json, load_input_data, load_schedule_sessions
from .models import (
    Catalog,
    CandidateCategory,
    ConflictKind,
    Course,
    Day,
    GeneratedSchedule,
    ManualAssignment,
    QualityLabel,
    Room,
    ScheduleConflict,
    ScheduleConstraints,
    ScheduleMetadata,
    ScheduleSession,
    SchoolClass,
    SessionType,
    Severity,
    Teacher,
    TeachingType,
    TimeSlot,
)
from .quality import QualityBreakdown, QualityScorer
from .validator import ClassCompleteness, ScheduleValidator

__all__ = [
    # Main generator
    "ScheduleGenerator",
    "create_generator",
    "assemble_schedule",
    "build_metadata",
    # Validation and scoring
    "ScheduleValidator",
    "ClassCompleteness",
    "QualityScorer",
    "QualityBreakdown",
    # Advisor contract
    "ScheduleAdvisor",
    "ProposalReview",
    "review_proposal",
    "apply_advice",
    # Configuration
    "ConfigLoader",
    "ConstraintsConfig",
    "CatalogConfig",
    # Export
    "export_schedule_json",
    "load_input_data",
    "load_schedule_sessions",
    # Models
    "Catalog",
    "CandidateCategory",
    "ConflictKind",
    "Course",
    "Day",
    "GeneratedSchedule",
    "ManualAssignment",
    "QualityLabel",
    "Room",
    "ScheduleConflict",
    "ScheduleConstraints",
    "ScheduleMetadata",
    "ScheduleSession",
    "SchoolClass",
    "SessionType",
    "Severity",
    "Teacher",
    "TeachingType",
    "TimeSlot",
    # Constants
    "DEFAULT_CONSTRAINTS",
    "TIME_WINDOWS",
    "WEEKDAYS",
]
