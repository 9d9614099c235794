"""Requirement priority scoring and processing order."""

from dataclasses import replace

from .constants import PRIORITY_WEIGHTS
from .models import Catalog, Course, ScheduleConstraints, SessionType
from .requirements import SessionRequirement
from .teachers import qualified_teachers


def has_manual_assignment(course: Course, session_type: SessionType) -> bool:
    """Check if a course pins a teacher for this session type (or 'both')."""
    return any(a.type.covers(session_type) for a in course.manual_assignments)


def requirement_priority(
    requirement: SessionRequirement,
    catalog: Catalog,
    constraints: ScheduleConstraints,
) -> int:
    """Compute the priority of a requirement (higher is scheduled earlier).

    Terms:
    - base 100
    - +100 when a manual assignment covers the session type
    - +50 / +25 when exactly one / two teachers are qualified
    - +20 for lectures
    - +(4 - year) * 10 so earlier years go first
    - +min(hours_per_week, 10)
    - +15 for lectures when morning lectures are prioritized
    - +50 for grouped lecture requirements
    """
    course = requirement.course
    session_type = requirement.session_type
    priority = PRIORITY_WEIGHTS["base"]

    if has_manual_assignment(course, session_type):
        priority += PRIORITY_WEIGHTS["manual_assignment"]

    teacher_count = len(qualified_teachers(catalog.teachers, course, session_type))
    if teacher_count == 1:
        priority += PRIORITY_WEIGHTS["single_teacher"]
    elif teacher_count == 2:
        priority += PRIORITY_WEIGHTS["two_teachers"]

    if session_type == SessionType.LECTURE:
        priority += PRIORITY_WEIGHTS["lecture"]
    priority += (4 - requirement.representative.year) * PRIORITY_WEIGHTS["per_year_below_fourth"]
    priority += min(course.hours_per_week, PRIORITY_WEIGHTS["max_hours_bonus"])

    if constraints.prioritize_morning_lectures and session_type == SessionType.LECTURE:
        priority += PRIORITY_WEIGHTS["morning_lecture"]

    if requirement.is_grouped:
        priority += PRIORITY_WEIGHTS["grouped"]

    return priority


def rank_requirements(
    requirements: list[SessionRequirement],
    catalog: Catalog,
    constraints: ScheduleConstraints,
) -> list[SessionRequirement]:
    """Assign priorities and sort requirements for sequential processing.

    Sort order (each tier breaks ties of the previous one):
    1. Requirements with a matching manual assignment first
    2. Priority score (descending)
    3. Grouped before singleton
    4. Lecture before seminar
    Remaining ties keep build order.
    """
    prioritized = [
        replace(r, priority=requirement_priority(r, catalog, constraints)) for r in requirements
    ]
    return sorted(
        prioritized,
        key=lambda r: (
            not has_manual_assignment(r.course, r.session_type),
            -r.priority,
            not r.is_grouped,
            r.session_type != SessionType.LECTURE,
        ),
    )
