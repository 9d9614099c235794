"""Conflict tracking for schedule generation."""

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator

from .constants import CRITICAL_SUGGESTIONS, WARNING_SUGGESTIONS, WEEKDAYS
from .models import (
    ConflictKind,
    Day,
    ScheduleConflict,
    ScheduleSession,
    SessionType,
    Severity,
    TimeSlot,
)

logger = logging.getLogger(__name__)


def times_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Check if two half-open hour ranges intersect."""
    return start1 < end2 and start2 < end1


class ConflictTracker:
    """Tracks committed sessions for teachers, rooms, classes and days.

    This is the accumulator of one generation run. Every commit goes through
    reserve(), and all availability checks and load figures used by scoring
    read from the indexes below instead of scanning the session list:
    - teacher_schedule: (day, teacher_id) -> sessions taught that day
    - room_schedule: (day, room_id) -> sessions held in the room that day
    - class_schedule: (day, class_id) -> sessions attended that day
    - day_counts / teacher_counts / room_counts: session counters
    - course_rooms: (course_name, session_type) -> room ids used so far
    - grouped_room_counts: (room_id, session_type) -> grouped sessions in room
    """

    def __init__(self, sessions: Iterable[ScheduleSession] = ()) -> None:
        self._sessions: list[ScheduleSession] = []
        self.teacher_schedule: dict[tuple[Day, int], list[ScheduleSession]] = defaultdict(list)
        self.room_schedule: dict[tuple[Day, int], list[ScheduleSession]] = defaultdict(list)
        self.class_schedule: dict[tuple[Day, int], list[ScheduleSession]] = defaultdict(list)
        self.day_counts: dict[Day, int] = defaultdict(int)
        self.teacher_counts: dict[int, int] = defaultdict(int)
        self.room_counts: dict[int, int] = defaultdict(int)
        self.course_rooms: dict[tuple[str, SessionType], set[int]] = defaultdict(set)
        self.grouped_room_counts: dict[tuple[int, SessionType], int] = defaultdict(int)

        for session in sessions:
            self.reserve(session)

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def sessions(self) -> tuple[ScheduleSession, ...]:
        """Committed sessions in commit order."""
        return tuple(self._sessions)

    def reserve(self, session: ScheduleSession) -> None:
        """Record a committed session in all indexes."""
        day = session.time_slot.day
        self._sessions.append(session)
        self.teacher_schedule[(day, session.teacher_id)].append(session)
        self.room_schedule[(day, session.room_id)].append(session)
        self.class_schedule[(day, session.class_id)].append(session)
        self.day_counts[day] += 1
        self.teacher_counts[session.teacher_id] += 1
        self.room_counts[session.room_id] += 1
        self.course_rooms[(session.course_name, session.session_type)].add(session.room_id)
        if session.is_grouped:
            self.grouped_room_counts[(session.room_id, session.session_type)] += 1

    @staticmethod
    def _any_overlap(sessions: list[ScheduleSession], slot: TimeSlot) -> bool:
        return any(
            times_overlap(s.time_slot.start, s.time_slot.end, slot.start, slot.end)
            for s in sessions
        )

    def is_teacher_available(self, teacher_id: int, slot: TimeSlot) -> bool:
        """Check if teacher has no overlapping session."""
        return not self._any_overlap(self.teacher_schedule.get((slot.day, teacher_id), []), slot)

    def is_room_available(self, room_id: int, slot: TimeSlot) -> bool:
        """Check if room is free for the whole slot."""
        return not self._any_overlap(self.room_schedule.get((slot.day, room_id), []), slot)

    def are_classes_available(self, class_ids: Iterable[int], slot: TimeSlot) -> bool:
        """Check if every class is free for the whole slot."""
        return all(
            not self._any_overlap(self.class_schedule.get((slot.day, class_id), []), slot)
            for class_id in class_ids
        )

    def is_slot_available(
        self,
        teacher_id: int,
        room_id: int,
        class_ids: Iterable[int],
        slot: TimeSlot,
    ) -> bool:
        """Check teacher, room and class availability together."""
        return (
            self.is_teacher_available(teacher_id, slot)
            and self.is_room_available(room_id, slot)
            and self.are_classes_available(class_ids, slot)
        )

    def teacher_sessions_on(self, teacher_id: int, day: Day) -> list[ScheduleSession]:
        return list(self.teacher_schedule.get((day, teacher_id), []))

    def teacher_daily_hours(self, teacher_id: int, day: Day) -> int:
        """Total teaching hours for a teacher on a day.

        Sibling sessions of one grouped lecture are taught once, so they
        count once.
        """
        taught = {
            s.group_id or s.id: s.time_slot.duration
            for s in self.teacher_schedule.get((day, teacher_id), [])
        }
        return sum(taught.values())

    def teacher_max_daily_hours(self, teacher_id: int) -> int:
        """Highest daily teaching hours of a teacher across the week."""
        return max((self.teacher_daily_hours(teacher_id, day) for day in WEEKDAYS), default=0)

    def teacher_session_count(self, teacher_id: int) -> int:
        return self.teacher_counts.get(teacher_id, 0)

    def has_adjacent_session(self, teacher_id: int, slot: TimeSlot) -> bool:
        """Check if the slot would sit back-to-back with one of the teacher's sessions."""
        return any(
            s.time_slot.end == slot.start or s.time_slot.start == slot.end
            for s in self.teacher_schedule.get((slot.day, teacher_id), [])
        )

    def day_count(self, day: Day) -> int:
        return self.day_counts.get(day, 0)

    def room_usage(self, room_id: int) -> int:
        return self.room_counts.get(room_id, 0)

    def rooms_used_for(self, course_name: str, session_type: SessionType) -> set[int]:
        """Room ids already used by a course in a session type."""
        return set(self.course_rooms.get((course_name, session_type), set()))

    def grouped_sessions_in_room(self, room_id: int, session_type: SessionType) -> int:
        return self.grouped_room_counts.get((room_id, session_type), 0)


class ConflictLog:
    """Collects ScheduleConflict records with sequential ids."""

    def __init__(self) -> None:
        self._conflicts: list[ScheduleConflict] = []

    def __len__(self) -> int:
        return len(self._conflicts)

    def __iter__(self) -> Iterator[ScheduleConflict]:
        return iter(self._conflicts)

    @property
    def conflicts(self) -> tuple[ScheduleConflict, ...]:
        return tuple(self._conflicts)

    def count(self, severity: Severity) -> int:
        """Number of recorded conflicts with the given severity."""
        return sum(1 for c in self._conflicts if c.severity == severity)

    def add(
        self,
        severity: Severity,
        kind: ConflictKind,
        message: str,
        affected_items: Iterable[str] = (),
        suggestions: Iterable[str] | None = None,
    ) -> ScheduleConflict:
        """Record a conflict and return it."""
        if suggestions is None:
            suggestions = (
                CRITICAL_SUGGESTIONS if severity == Severity.CRITICAL else WARNING_SUGGESTIONS
            )
        conflict = ScheduleConflict(
            id=len(self._conflicts) + 1,
            kind=kind,
            severity=severity,
            message=message,
            affected_items=tuple(affected_items),
            suggestions=tuple(suggestions),
        )
        self._conflicts.append(conflict)

        if severity == Severity.CRITICAL:
            logger.warning(f"Critical conflict: {message}")
        else:
            logger.debug(f"{severity.value.capitalize()} conflict: {message}")
        return conflict

    def critical(self, kind: ConflictKind, message: str, affected_items: Iterable[str] = ()) -> ScheduleConflict:
        return self.add(Severity.CRITICAL, kind, message, affected_items)

    def warning(self, kind: ConflictKind, message: str, affected_items: Iterable[str] = ()) -> ScheduleConflict:
        return self.add(Severity.WARNING, kind, message, affected_items)
