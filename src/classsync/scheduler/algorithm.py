"""Greedy weekly schedule generation."""

import logging
from collections.abc import Iterable
from datetime import datetime

from .assignments import SessionFactory, commit_group, commit_singleton, first_available
from .config.catalog import catalog_from_dict
from .conflicts import ConflictLog, ConflictTracker
from .constants import TIME_WINDOWS, WEEKDAYS
from .models import (
    Catalog,
    ConflictKind,
    GeneratedSchedule,
    QualityLabel,
    Room,
    ScheduleConflict,
    ScheduleConstraints,
    ScheduleMetadata,
    ScheduleSession,
    SessionType,
    TeachingType,
)
from .priority import rank_requirements
from .quality import QualityScorer, sessions_frame
from .requirements import SessionRequirement, build_requirements
from .slots import SlotCandidate, SlotScorer, generate_candidates, rank_candidates
from .teachers import TeacherChoice, TeacherSelector
from .validator import ScheduleValidator

logger = logging.getLogger(__name__)


class ScheduleGenerator:
    """Builds one weekly timetable from a catalog and constraints.

    Generation steps:
    1. Validate constraints and catalog (raises on fatal setup errors)
    2. Check manual teacher assignments
    3. Build session requirements (grouping shared lectures) and rank them
    4. Schedule requirements one by one: select a teacher, score every
       (room, day, window) candidate and commit the best one
    5. Validate the complete session set
    6. Compute the quality score and assemble the result

    Resource shortages never raise. They are recorded as conflicts and the
    affected requirement is left unscheduled.
    """

    def __init__(self, constraints: ScheduleConstraints, catalog: Catalog) -> None:
        """Initialize the generator.

        Args:
            constraints: Scheduling configuration for this run
            catalog: Classes, courses, teachers, rooms and the class-course map
        """
        self.constraints = constraints
        self.catalog = catalog
        self.teacher_selector = TeacherSelector(catalog, constraints)
        self.slot_scorer = SlotScorer(catalog, constraints)
        self.validator = ScheduleValidator(catalog, constraints)

    def generate(self) -> GeneratedSchedule:
        """Generate a schedule.

        Returns:
            GeneratedSchedule with sessions, conflicts, score and metadata

        Raises:
            InvalidConstraintsError: If the constraints are unusable
            InvalidCatalogError: If the catalog has duplicate ids or dangling references
        """
        self.constraints.validate()
        self.catalog.validate()
        self._log_input_summary()

        log = ConflictLog()
        tracker = ConflictTracker()
        factory = SessionFactory()

        # 1. Manual assignments
        self._check_manual_assignments(log)

        # 2. Requirements in processing order
        requirements = rank_requirements(
            build_requirements(self.catalog, self.constraints),
            self.catalog,
            self.constraints,
        )
        logger.info(f"Generated {len(requirements)} session requirements")

        # 3. Schedule each requirement
        for requirement in requirements:
            self._schedule_requirement(requirement, tracker, factory, log)

        # 4. Final validation
        self.validator.validate(tracker.sessions, log)

        # 5. Score and assemble
        schedule = assemble_schedule(
            tracker.sessions, log.conflicts, self.catalog, self.constraints
        )
        self._log_final_summary(schedule)
        return schedule

    def _log_input_summary(self) -> None:
        c = self.constraints
        logger.info(
            f"Input: {len(self.catalog.classes)} classes, {len(self.catalog.courses)} courses, "
            f"{len(self.catalog.teachers)} teachers, {len(self.catalog.rooms)} rooms, "
            f"{len(TIME_WINDOWS) * len(WEEKDAYS)} time slots"
        )
        logger.info(
            f"Time window {c.preferred_start_time}:00-{c.preferred_end_time}:00 "
            f"(max {c.max_end_time}:00), session lengths "
            f"L={c.lecture_session_length}h S={c.seminar_session_length}h"
        )

    def _check_manual_assignments(self, log: ConflictLog) -> None:
        """Record conflicts for manual assignments that cannot be honoured."""
        for course in self.catalog.courses:
            for assignment in course.manual_assignments:
                teacher = self.catalog.get_teacher(assignment.teacher_id)
                if teacher is None:
                    name = assignment.teacher_name or f"#{assignment.teacher_id}"
                    log.critical(
                        ConflictKind.TEACHER_CONFLICT,
                        f"Manual assignment: Teacher {name} not found for {course.name}",
                        [course.name, name],
                    )
                    continue

                capabilities = [c for c in teacher.capabilities if c.course_name == course.name]
                if not capabilities:
                    log.warning(
                        ConflictKind.TEACHER_CONFLICT,
                        f"Manual assignment: {teacher.name} not qualified for {course.name}",
                        [course.name, teacher.name],
                    )
                elif not any(
                    c.type in (TeachingType.BOTH, assignment.type) for c in capabilities
                ):
                    taught = ", ".join(c.type.value for c in capabilities)
                    log.warning(
                        ConflictKind.TEACHER_CONFLICT,
                        f"Manual assignment mismatch: {teacher.name} can teach {taught} "
                        f"but assigned to {assignment.type.value} for {course.name}",
                        [course.name, teacher.name],
                    )

    def _rooms_for(self, session_type: SessionType) -> list[Room]:
        return [room for room in self.catalog.rooms if room.type == session_type]

    def _schedule_requirement(
        self,
        requirement: SessionRequirement,
        tracker: ConflictTracker,
        factory: SessionFactory,
        log: ConflictLog,
    ) -> list[ScheduleSession]:
        """Schedule one requirement and return the committed sessions."""
        logger.debug(
            f"Scheduling {requirement.describe()} (priority {requirement.priority}, "
            f"grouped: {requirement.is_grouped})"
        )
        if requirement.is_grouped:
            return self._schedule_group(requirement, tracker, factory, log)

        session = self._schedule_single(requirement, tracker, factory, log)
        return [session] if session is not None else []

    def _schedule_group(
        self,
        requirement: SessionRequirement,
        tracker: ConflictTracker,
        factory: SessionFactory,
        log: ConflictLog,
    ) -> list[ScheduleSession]:
        """Schedule a shared lecture, falling back to one session per class."""
        choice = self.teacher_selector.select(
            requirement.course, requirement.session_type, tracker
        )
        if choice is None:
            log.critical(
                ConflictKind.TEACHER_CONFLICT,
                f"No teacher for grouped {requirement.course.name} "
                f"{requirement.session_type.value}",
                [requirement.course.name, *requirement.class_names],
            )
            return []

        candidate = self._best_candidate(requirement, choice, tracker)
        if candidate is None:
            logger.info(
                f"No shared slot for grouped {requirement.describe()}, "
                f"scheduling classes individually"
            )
            sessions: list[ScheduleSession] = []
            for single in requirement.split():
                session = self._schedule_single(single, tracker, factory, log)
                if session is not None:
                    sessions.append(session)
            return sessions

        return commit_group(requirement, choice, candidate, factory, tracker)

    def _schedule_single(
        self,
        requirement: SessionRequirement,
        tracker: ConflictTracker,
        factory: SessionFactory,
        log: ConflictLog,
    ) -> ScheduleSession | None:
        """Schedule an ungrouped requirement, recording a conflict on failure."""
        course = requirement.course
        session_type = requirement.session_type
        affected = [course.name, requirement.representative.name]

        choice = self.teacher_selector.select(course, session_type, tracker)
        if choice is None:
            log.critical(
                ConflictKind.TEACHER_CONFLICT,
                f"No teacher available for {course.name} {session_type.value}",
                affected,
            )
            return None

        if not self._rooms_for(session_type):
            log.critical(
                ConflictKind.ROOM_CONFLICT,
                f"No rooms available for {course.name} {session_type.value}",
                affected,
            )
            return None

        candidate = self._best_candidate(requirement, choice, tracker)
        if candidate is None:
            log.critical(
                ConflictKind.CONSTRAINT_VIOLATION,
                f"No available time slots for {requirement.describe()}",
                [*affected, choice.teacher.name],
            )
            return None

        return commit_singleton(requirement, choice, candidate, factory, tracker)

    def _best_candidate(
        self,
        requirement: SessionRequirement,
        choice: TeacherChoice,
        tracker: ConflictTracker,
    ) -> SlotCandidate | None:
        """Best still-available candidate across all rooms of the right type."""
        candidates = generate_candidates(
            requirement,
            choice.teacher,
            self._rooms_for(requirement.session_type),
            self.slot_scorer,
            tracker,
        )
        logger.debug(f"{len(candidates)} candidates for {requirement.describe()}")
        return first_available(rank_candidates(candidates), requirement, tracker)

    def _log_final_summary(self, schedule: GeneratedSchedule) -> None:
        metadata = schedule.metadata
        logger.info(
            f"Generated {metadata.total_sessions}/{metadata.expected_sessions} sessions, "
            f"{schedule.critical_count} critical conflicts, {len(schedule.conflicts)} total"
        )
        logger.info(
            f"Room utilization {metadata.utilization_rate:.1f}%, "
            f"{metadata.total_hours}h/week, quality {schedule.score}/100 "
            f"({schedule.label.value})"
        )
        if schedule.label == QualityLabel.POOR:
            logger.warning("Schedule quality is poor, consider adding teachers or rooms")


def build_metadata(
    sessions: Iterable[ScheduleSession],
    catalog: Catalog,
    constraints: ScheduleConstraints,
) -> ScheduleMetadata:
    """Summarize a session set (totals, utilization, per-day and per-room counts)."""
    sessions = list(sessions)
    frame = sessions_frame(sessions)

    day_names = [day.name.lower() for day in WEEKDAYS]
    by_day = frame["day"].value_counts().reindex(day_names, fill_value=0)
    by_room = frame.groupby("room_id").size()
    room_names = {room.id: room.name for room in catalog.rooms}
    for session in sessions:
        room_names.setdefault(session.room_id, session.room_name)

    available_slots = len(catalog.rooms) * len(WEEKDAYS) * len(TIME_WINDOWS)
    utilization = len(sessions) / available_slots * 100 if available_slots else 0.0
    manual = sum(1 for s in sessions if s.is_manual_assignment)

    return ScheduleMetadata(
        constraints=constraints,
        generated_at=datetime.now().isoformat(),
        total_sessions=len(sessions),
        expected_sessions=QualityScorer(catalog, constraints).expected_sessions(),
        total_hours=int(frame["duration"].sum()),
        utilization_rate=round(utilization, 1),
        manual_assignments=manual,
        automatic_assignments=len(sessions) - manual,
        by_day={day: int(count) for day, count in by_day.items()},
        by_room={room_names[room_id]: int(count) for room_id, count in by_room.items()},
    )


def assemble_schedule(
    sessions: Iterable[ScheduleSession],
    conflicts: Iterable[ScheduleConflict],
    catalog: Catalog,
    constraints: ScheduleConstraints,
) -> GeneratedSchedule:
    """Score a session set and freeze it into a GeneratedSchedule."""
    sessions = tuple(sessions)
    conflicts = tuple(conflicts)
    quality = QualityScorer(catalog, constraints).score(sessions, conflicts)
    return GeneratedSchedule(
        sessions=sessions,
        conflicts=conflicts,
        score=quality.score,
        metadata=build_metadata(sessions, catalog, constraints),
    )


def create_generator(
    constraints: ScheduleConstraints | dict | None = None,
    catalog: Catalog | dict | None = None,
) -> ScheduleGenerator:
    """Factory function to create a ScheduleGenerator from models or plain dicts.

    Args:
        constraints: Constraints or a constraints dictionary (defaults if None)
        catalog: Catalog or a catalog dictionary (empty if None)

    Returns:
        Configured ScheduleGenerator instance
    """
    if constraints is None:
        constraints = ScheduleConstraints()
    elif isinstance(constraints, dict):
        constraints = ScheduleConstraints.from_dict(constraints)

    if catalog is None:
        catalog = Catalog()
    elif not isinstance(catalog, Catalog):
        catalog = catalog_from_dict(catalog)

    return ScheduleGenerator(constraints, catalog)
