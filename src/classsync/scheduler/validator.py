"""Post-generation validation of a complete session set."""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from .conflicts import ConflictLog
from .models import (
    Catalog,
    ConflictKind,
    Day,
    ScheduleConstraints,
    ScheduleSession,
    SessionType,
)

logger = logging.getLogger(__name__)


def _share_group(first: ScheduleSession, second: ScheduleSession) -> bool:
    """Check if two sessions are siblings of one grouped lecture."""
    return first.group_id is not None and first.group_id == second.group_id


@dataclass(frozen=True)
class ClassCompleteness:
    """Expected and scheduled session counts of one class."""

    class_name: str
    expected: int
    lectures: int
    seminars: int

    @property
    def is_complete(self) -> bool:
        return self.expected > 0 and self.lectures == self.expected == self.seminars


class ScheduleValidator:
    """Re-checks a session set for invariant violations.

    Used after generation and for any externally proposed session set, so it
    relies only on the sessions and the catalog, never on generator state.
    """

    def __init__(self, catalog: Catalog, constraints: ScheduleConstraints) -> None:
        self.catalog = catalog
        self.constraints = constraints

    def validate(
        self,
        sessions: Iterable[ScheduleSession],
        log: ConflictLog | None = None,
    ) -> ConflictLog:
        """Validate sessions and record conflicts.

        Args:
            sessions: Complete session set of a schedule
            log: Log to append to (a new one is created if omitted)

        Returns:
            The conflict log with all findings appended
        """
        if log is None:
            log = ConflictLog()
        sessions = list(sessions)

        self._check_double_bookings(sessions, log)
        self._check_course_completeness(sessions, log)
        self._check_class_counts(sessions, log)
        self._check_time_limits(sessions, log)

        logger.info(f"Validated {len(sessions)} sessions, {len(log)} conflicts recorded")
        return log

    def _check_double_bookings(self, sessions: list[ScheduleSession], log: ConflictLog) -> None:
        """One critical conflict per resource shared by overlapping sessions."""
        by_day: dict[Day, list[ScheduleSession]] = defaultdict(list)
        for session in sessions:
            by_day[session.time_slot.day].append(session)

        for day in sorted(by_day, key=lambda d: d.value):
            day_sessions = sorted(by_day[day], key=lambda s: s.time_slot.start)
            for i, first in enumerate(day_sessions):
                for second in day_sessions[i + 1 :]:
                    if second.time_slot.start >= first.time_slot.end:
                        break  # sorted by start, nothing later overlaps
                    if _share_group(first, second):
                        continue

                    if first.teacher_id == second.teacher_id:
                        log.critical(
                            ConflictKind.TEACHER_CONFLICT,
                            f"Teacher {first.teacher_name} double-booked on {day.label} "
                            f"({first.course_name} / {second.course_name})",
                            [first.teacher_name, first.course_name, second.course_name],
                        )
                    if first.room_id == second.room_id:
                        log.critical(
                            ConflictKind.ROOM_CONFLICT,
                            f"Room {first.room_name} double-booked on {day.label} "
                            f"({first.course_name} / {second.course_name})",
                            [first.room_name, first.course_name, second.course_name],
                        )
                    if first.class_id == second.class_id:
                        log.critical(
                            ConflictKind.VALIDATION_ERROR,
                            f"Class {first.class_name} double-booked on {day.label} "
                            f"({first.course_name} / {second.course_name})",
                            [first.class_name, first.course_name, second.course_name],
                        )

    def _check_course_completeness(
        self, sessions: list[ScheduleSession], log: ConflictLog
    ) -> None:
        """Each (class, course) needs exactly one lecture and one seminar."""
        counts = Counter((s.class_id, s.course_id, s.session_type) for s in sessions)

        for school_class in self.catalog.classes:
            for course in self.catalog.courses_for(school_class):
                for session_type in SessionType:
                    count = counts[(school_class.id, course.id, session_type)]
                    if count == 0:
                        log.critical(
                            ConflictKind.VALIDATION_ERROR,
                            f"Course {course.name} for {school_class.name} is missing "
                            f"its {session_type.value}",
                            [course.name, school_class.name, f"Missing {session_type.value}"],
                        )
                    elif count > 1:
                        log.warning(
                            ConflictKind.VALIDATION_ERROR,
                            f"Course {course.name} for {school_class.name} has {count} "
                            f"{session_type.value}s (expected 1)",
                            [course.name, school_class.name, f"{count} {session_type.value}s"],
                        )

    def class_completeness(self, sessions: Iterable[ScheduleSession]) -> list[ClassCompleteness]:
        """Expected and scheduled lecture and seminar counts per class, in catalog order."""
        counts = Counter((s.class_id, s.session_type) for s in sessions)
        return [
            ClassCompleteness(
                class_name=school_class.name,
                expected=len(self.catalog.courses_for(school_class)),
                lectures=counts[(school_class.id, SessionType.LECTURE)],
                seminars=counts[(school_class.id, SessionType.SEMINAR)],
            )
            for school_class in self.catalog.classes
        ]

    def _check_class_counts(self, sessions: list[ScheduleSession], log: ConflictLog) -> None:
        """Per class totals against the number of assigned courses."""
        for row in self.class_completeness(sessions):
            class_name, expected = row.class_name, row.expected
            if expected == 0:
                log.critical(
                    ConflictKind.VALIDATION_ERROR,
                    f"Class {class_name} has no assigned courses",
                    [class_name],
                )
                continue

            lectures, seminars = row.lectures, row.seminars

            for session_type, actual in ((SessionType.LECTURE, lectures), (SessionType.SEMINAR, seminars)):
                if actual < expected:
                    missing = expected - actual
                    log.critical(
                        ConflictKind.VALIDATION_ERROR,
                        f"Class {class_name} is missing {missing} {session_type.value}(s). "
                        f"Expected: {expected}, Found: {actual}",
                        [class_name, f"Missing {missing} {session_type.value}s"],
                    )
                elif actual > expected:
                    excess = actual - expected
                    log.warning(
                        ConflictKind.VALIDATION_ERROR,
                        f"Class {class_name} has {excess} excess {session_type.value}(s). "
                        f"Expected: {expected}, Found: {actual}",
                        [class_name, f"{excess} excess {session_type.value}s"],
                    )

            if lectures != seminars:
                log.warning(
                    ConflictKind.VALIDATION_ERROR,
                    f"Class {class_name} has unbalanced sessions: "
                    f"{lectures} lectures vs {seminars} seminars",
                    [class_name, f"Unbalanced: {lectures}L vs {seminars}S"],
                )

    def _check_time_limits(self, sessions: list[ScheduleSession], log: ConflictLog) -> None:
        """Sessions must end by max_end_time and last the configured length."""
        max_end = self.constraints.max_end_time
        for session in sessions:
            slot = session.time_slot
            if slot.end > max_end:
                log.critical(
                    ConflictKind.CONSTRAINT_VIOLATION,
                    f"{session.course_name} {session.session_type.value} for "
                    f"{session.class_name} ends at {slot.end}:00, exceeding maximum "
                    f"end time of {max_end}:00",
                    [session.course_name, session.class_name, f"{slot.end}:00"],
                )

            required = self.constraints.session_length(session.session_type)
            if slot.duration != required:
                log.critical(
                    ConflictKind.CONSTRAINT_VIOLATION,
                    f"{session.course_name} {session.session_type.value} for "
                    f"{session.class_name} lasts {slot.duration}h, expected {required}h",
                    [session.course_name, session.class_name, f"{slot.duration}h"],
                )
