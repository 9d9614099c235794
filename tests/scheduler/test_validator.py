"""Tests for post-generation schedule validation."""

from dataclasses import replace

import pytest

from classsync.scheduler.conflicts import ConflictLog
from classsync.scheduler.models import (
    ConflictKind,
    Day,
    ScheduleConstraints,
    SchoolClass,
    SessionType,
    Severity,
)
from classsync.scheduler.validator import ScheduleValidator


def _messages(log, severity=None):
    return [c.message for c in log if severity is None or c.severity == severity]


@pytest.fixture
def complete_sessions(make_session):
    """Lecture and seminar of the simple catalog, back to back on Monday."""
    return [
        make_session(id="s1", room_id=1, start=9, end=11),
        make_session(id="s2", room_id=2, session_type=SessionType.SEMINAR, start=11, end=13),
    ]


class TestScheduleValidator:
    """Tests for ScheduleValidator class."""

    def test_complete_schedule_has_no_conflicts(self, simple_catalog, constraints, complete_sessions):
        log = ScheduleValidator(simple_catalog, constraints).validate(complete_sessions)
        assert len(log) == 0

    def test_appends_to_given_log(self, simple_catalog, constraints):
        log = ConflictLog()
        log.critical(ConflictKind.TEACHER_CONFLICT, "No teacher available for Algorithms lecture")
        result = ScheduleValidator(simple_catalog, constraints).validate([], log)
        assert result is log
        assert log.conflicts[0].message == "No teacher available for Algorithms lecture"
        assert len(log) > 1


class TestDoubleBookings:
    """Tests for overlapping sessions."""

    def test_teacher_and_class_overlap(self, simple_catalog, constraints, make_session):
        sessions = [
            make_session(id="s1", room_id=1, start=9, end=11),
            make_session(id="s2", room_id=2, session_type=SessionType.SEMINAR, start=10, end=12),
        ]
        log = ScheduleValidator(simple_catalog, constraints).validate(sessions)

        double_booked = [c for c in log if "double-booked" in c.message]
        assert [c.kind for c in double_booked] == [
            ConflictKind.TEACHER_CONFLICT,
            ConflictKind.VALIDATION_ERROR,
        ]
        assert all(c.severity == Severity.CRITICAL for c in double_booked)
        assert double_booked[0].message.startswith("Teacher Teacher 1 double-booked on Monday")

    def test_shared_room_overlap(self, shared_course_catalog, constraints, make_session):
        sessions = [
            make_session(id="s1", class_id=1, teacher_id=1, room_id=1, start=9, end=11),
            make_session(id="s2", class_id=2, teacher_id=2, room_id=1, start=10, end=12),
        ]
        log = ScheduleValidator(shared_course_catalog, constraints).validate(sessions)
        double_booked = [c for c in log if "double-booked" in c.message]
        assert [c.kind for c in double_booked] == [ConflictKind.ROOM_CONFLICT]

    def test_grouped_siblings_are_not_conflicts(self, shared_course_catalog, constraints, make_session):
        group_id = "group_1_lecture_Monday_9"
        sessions = [
            make_session(id="s1", class_id=1, group_id=group_id),
            make_session(id="s2", class_id=2, class_name="CS-2", group_id=group_id),
            make_session(
                id="s3", class_id=1, room_id=2, session_type=SessionType.SEMINAR, start=11, end=13
            ),
            make_session(
                id="s4",
                class_id=2,
                class_name="CS-2",
                room_id=3,
                session_type=SessionType.SEMINAR,
                day=Day.TUESDAY,
            ),
        ]
        log = ScheduleValidator(shared_course_catalog, constraints).validate(sessions)
        assert len(log) == 0

    def test_different_groups_still_conflict(self, shared_course_catalog, constraints, make_session):
        sessions = [
            make_session(id="s1", class_id=1, group_id="group_1_lecture_Monday_9"),
            make_session(id="s2", class_id=2, group_id="group_2_lecture_Monday_9"),
        ]
        log = ScheduleValidator(shared_course_catalog, constraints).validate(sessions)
        kinds = [c.kind for c in log if "double-booked" in c.message]
        assert kinds == [ConflictKind.TEACHER_CONFLICT, ConflictKind.ROOM_CONFLICT]


class TestCompleteness:
    """Tests for per course and per class session counts."""

    def test_missing_seminar(self, simple_catalog, constraints, make_session):
        log = ScheduleValidator(simple_catalog, constraints).validate([make_session()])

        critical = _messages(log, Severity.CRITICAL)
        assert "Course Algorithms for CS-1 is missing its seminar" in critical
        assert any("missing 1 seminar(s)" in m for m in critical)
        assert any("unbalanced" in m for m in _messages(log, Severity.WARNING))

    def test_duplicate_lecture(self, simple_catalog, constraints, complete_sessions, make_session):
        sessions = complete_sessions + [make_session(id="s3", room_id=1, day=Day.FRIDAY)]
        log = ScheduleValidator(simple_catalog, constraints).validate(sessions)

        assert log.count(Severity.CRITICAL) == 0
        warnings = _messages(log, Severity.WARNING)
        assert "Course Algorithms for CS-1 has 2 lectures (expected 1)" in warnings
        assert any("1 excess lecture(s)" in m for m in warnings)
        assert any("unbalanced" in m for m in warnings)

    def test_class_without_courses(self, simple_catalog, constraints, complete_sessions):
        catalog = replace(
            simple_catalog, classes=simple_catalog.classes + (SchoolClass(id=2, name="Empty", year=2),)
        )
        log = ScheduleValidator(catalog, constraints).validate(complete_sessions)
        assert _messages(log, Severity.CRITICAL) == ["Class Empty has no assigned courses"]


class TestClassCompleteness:
    """Tests for per-class completeness rows."""

    def test_rows_follow_catalog_order(self, shared_course_catalog, constraints, make_session):
        sessions = [
            make_session(id="l1", group_id="g"),
            make_session(id="l2", class_id=2, class_name="CS-2", group_id="g"),
            make_session(id="s1", room_id=2, session_type=SessionType.SEMINAR, start=11, end=13),
        ]
        rows = ScheduleValidator(shared_course_catalog, constraints).class_completeness(sessions)

        assert [(r.class_name, r.expected, r.lectures, r.seminars) for r in rows] == [
            ("CS-1", 1, 1, 1),
            ("CS-2", 1, 1, 0),
        ]
        assert [r.is_complete for r in rows] == [True, False]

    def test_class_without_courses_is_not_complete(self, simple_catalog, constraints):
        catalog = replace(simple_catalog, class_courses={})
        (row,) = ScheduleValidator(catalog, constraints).class_completeness([])
        assert row.expected == 0
        assert not row.is_complete


class TestTimeLimits:
    """Tests for end time and duration checks."""

    def test_session_ending_too_late(self, simple_catalog, complete_sessions, make_session):
        constraints = ScheduleConstraints(max_end_time=13)
        sessions = [
            complete_sessions[0],
            make_session(id="s2", room_id=2, session_type=SessionType.SEMINAR, start=13, end=15),
        ]
        log = ScheduleValidator(simple_catalog, constraints).validate(sessions)

        violations = [c for c in log if c.kind == ConflictKind.CONSTRAINT_VIOLATION]
        assert len(violations) == 1
        assert "exceeding maximum end time of 13:00" in violations[0].message
        assert violations[0].severity == Severity.CRITICAL

    def test_duration_mismatch(self, simple_catalog, constraints, make_session):
        sessions = [
            make_session(id="s1", room_id=1, start=9, end=12),
            make_session(id="s2", room_id=2, session_type=SessionType.SEMINAR, start=13, end=15),
        ]
        log = ScheduleValidator(simple_catalog, constraints).validate(sessions)

        critical = _messages(log, Severity.CRITICAL)
        assert critical == ["Algorithms lecture for CS-1 lasts 3h, expected 2h"]
