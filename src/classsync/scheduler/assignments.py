"""Materialize winning candidates as ScheduleSession records."""

import itertools
import logging

from .conflicts import ConflictTracker
from .models import Course, ScheduleSession, SchoolClass, SessionType, TimeSlot
from .requirements import SessionRequirement
from .slots import SlotCandidate
from .teachers import TeacherChoice

logger = logging.getLogger(__name__)


def make_group_id(course: Course, session_type: SessionType, slot: TimeSlot) -> str:
    """Derive the id shared by sibling sessions of one grouped requirement."""
    return f"group_{course.id}_{session_type.value}_{slot.day.label}_{slot.start}"


class SessionFactory:
    """Creates sessions with run-unique sequential ids."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)

    def create(
        self,
        requirement: SessionRequirement,
        school_class: SchoolClass,
        choice: TeacherChoice,
        candidate: SlotCandidate,
        group_id: str | None = None,
    ) -> ScheduleSession:
        return ScheduleSession(
            id=f"session_{next(self._ids)}",
            course_id=requirement.course.id,
            course_name=requirement.course.name,
            class_id=school_class.id,
            class_name=school_class.name,
            teacher_id=choice.teacher.id,
            teacher_name=choice.teacher.name,
            room_id=candidate.room.id,
            room_name=candidate.room.name,
            session_type=requirement.session_type,
            time_slot=candidate.slot,
            is_manual_assignment=choice.is_manual,
            is_grouped=group_id is not None,
            group_id=group_id,
            score=candidate.score,
            category=candidate.category,
        )


def first_available(
    ranked: list[SlotCandidate],
    requirement: SessionRequirement,
    tracker: ConflictTracker,
) -> SlotCandidate | None:
    """Return the best ranked candidate that is still free in the tracker.

    Candidates are scored before commit, so each one is checked again
    against the current calendar.
    """
    for candidate in ranked:
        if tracker.is_slot_available(
            candidate.teacher.id, candidate.room.id, requirement.class_ids, candidate.slot
        ):
            return candidate
        logger.debug(
            f"Candidate {candidate.slot.day.label} {candidate.slot.start}:00 in "
            f"{candidate.room.name} is no longer available"
        )
    return None


def commit_singleton(
    requirement: SessionRequirement,
    choice: TeacherChoice,
    candidate: SlotCandidate,
    factory: SessionFactory,
    tracker: ConflictTracker,
) -> ScheduleSession:
    """Create and reserve the session of an ungrouped requirement."""
    session = factory.create(requirement, requirement.representative, choice, candidate)
    tracker.reserve(session)

    mode = "MANUAL" if session.is_manual_assignment else "AUTO"
    logger.debug(
        f"{mode}: {requirement.describe()} - {candidate.slot.day.label} "
        f"{candidate.slot.start}:00-{candidate.slot.end}:00, "
        f"{choice.teacher.name} in {candidate.room.name} "
        f"({candidate.category.value}, score {candidate.score})"
    )
    return session


def commit_group(
    requirement: SessionRequirement,
    choice: TeacherChoice,
    candidate: SlotCandidate,
    factory: SessionFactory,
    tracker: ConflictTracker,
) -> list[ScheduleSession]:
    """Create and reserve one session per class of a grouped requirement.

    All sessions share the teacher, room, slot and group id.
    """
    group_id = make_group_id(requirement.course, requirement.session_type, candidate.slot)
    sessions = [
        factory.create(requirement, school_class, choice, candidate, group_id=group_id)
        for school_class in requirement.classes
    ]
    for session in sessions:
        tracker.reserve(session)

    logger.debug(
        f"GROUPED: {requirement.describe()} - {candidate.slot.day.label} "
        f"{candidate.slot.start}:00-{candidate.slot.end}:00, "
        f"{choice.teacher.name} in {candidate.room.name} "
        f"({candidate.category.value}, score {candidate.score})"
    )
    return sessions
