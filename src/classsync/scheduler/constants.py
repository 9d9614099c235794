"""Constants for schedule generation."""

from .models import Day, ScheduleConstraints

# Days considered for scheduling
WEEKDAYS = [Day.MONDAY, Day.TUESDAY, Day.WEDNESDAY, Day.THURSDAY, Day.FRIDAY]

# Fixed menu of 2-hour windows, (start, end) in 24h hours
TIME_WINDOWS = [
    (8, 10),  # Early
    (9, 11),  # Prime morning
    (10, 12),
    (11, 13),
    (12, 14),
    (13, 15),
    (14, 16),
    (15, 17),
    (16, 18),
    (17, 19),  # Late evening
]

# Defaults applied when constraints.json omits a key
DEFAULT_CONSTRAINTS = ScheduleConstraints().to_dict()

# Requirement priority terms
PRIORITY_WEIGHTS = {
    "base": 100,
    "manual_assignment": 100,
    "single_teacher": 50,
    "two_teachers": 25,
    "lecture": 20,
    "per_year_below_fourth": 10,
    "max_hours_bonus": 10,
    "morning_lecture": 15,
    "grouped": 50,
}

# Conflict penalties used by the quality score (points per conflict)
CONFLICT_PENALTIES = {
    "critical": 15,
    "warning": 5,
    "suggestion": 1,
}

# Maximum points per constraint adherence ratio
CONSTRAINT_BONUS_WEIGHTS = {
    "morning_lectures": 5,
    "back_to_back": 8,
    "distribution": 6,
    "workload_balance": 6,
    "time_window": 5,
}

# Upper bound of the normalised constraint adherence bonus
MAX_CONSTRAINT_BONUS = 15

# Per-session quality multipliers for the committed candidate category
CATEGORY_QUALITY = {
    "best": 1.0,
    "good": 0.95,
    "worst": 0.85,
}

MIN_QUALITY_FACTOR = 0.8

# Default suggestions attached to recorded conflicts
CRITICAL_SUGGESTIONS = ("Review resource availability", "Check data consistency")
WARNING_SUGGESTIONS = ("Consider constraint adjustments",)
