"""Teacher selection: manual pins first, then workload-aware automatic pick."""

import logging
from dataclasses import dataclass

from .conflicts import ConflictTracker
from .models import Catalog, Course, ScheduleConstraints, SessionType, Teacher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeacherChoice:
    """The teacher picked for a requirement and how it was picked."""

    teacher: Teacher
    is_manual: bool = False
    score: int | None = None


def qualified_teachers(
    teachers: list[Teacher], course: Course, session_type: SessionType
) -> list[Teacher]:
    """Teachers capable of (course, session_type) or (course, 'both'), in catalog order."""
    return [t for t in teachers if t.can_teach(course.name, session_type)]


def find_manual_teacher(
    catalog: Catalog, course: Course, session_type: SessionType
) -> Teacher | None:
    """Resolve the first manual assignment that pins a capable teacher.

    The assignment must cover the session type (or be 'both'), the teacher
    must exist, and the teacher's own capabilities must confirm it.
    """
    for assignment in course.manual_assignments:
        if not assignment.type.covers(session_type):
            continue
        teacher = catalog.get_teacher(assignment.teacher_id)
        if teacher is None:
            continue
        if teacher.can_teach(course.name, session_type):
            return teacher
    return None


class TeacherSelector:
    """Picks one teacher per requirement, balancing workload across the run."""

    def __init__(self, catalog: Catalog, constraints: ScheduleConstraints) -> None:
        self.catalog = catalog
        self.constraints = constraints

    def select(
        self,
        course: Course,
        session_type: SessionType,
        tracker: ConflictTracker,
    ) -> TeacherChoice | None:
        """Select a teacher for a course and session type.

        Args:
            course: Course to teach
            session_type: Lecture or seminar
            tracker: Sessions committed so far in this run

        Returns:
            TeacherChoice, or None if nobody is qualified
        """
        manual = find_manual_teacher(self.catalog, course, session_type)
        if manual is not None:
            logger.debug(f"Manual teacher {manual.name} for {course.name} {session_type.value}")
            return TeacherChoice(teacher=manual, is_manual=True)

        candidates = qualified_teachers(self.catalog.teachers, course, session_type)
        if not candidates:
            return None

        # max() keeps the first of equally scored teachers
        scored = [(self.score_teacher(t, tracker), t) for t in candidates]
        best_score, best = max(scored, key=lambda item: item[0])
        return TeacherChoice(teacher=best, is_manual=False, score=best_score)

    def score_teacher(self, teacher: Teacher, tracker: ConflictTracker) -> int:
        """Score a teacher by weekly workload and busiest day."""
        score = 100
        workload = tracker.teacher_session_count(teacher.id)
        average = len(tracker) / len(self.catalog.teachers) if self.catalog.teachers else 0

        if workload < average * 0.8:
            score += 30  # Well below average
        elif workload <= average * 1.2:
            score += 10  # Around average
        else:
            score -= 20

        limit = self.constraints.max_teacher_hours_per_day
        max_daily = tracker.teacher_max_daily_hours(teacher.id)
        if max_daily <= limit * 0.7:
            score += 20
        elif max_daily <= limit:
            score += 5
        else:
            score -= 30

        return score
