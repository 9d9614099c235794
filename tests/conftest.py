"""Test fixtures for classsync scheduler tests."""

import json

import pytest

from classsync.scheduler.models import (
    CandidateCategory,
    Capability,
    Catalog,
    Course,
    Day,
    Room,
    ScheduleConstraints,
    ScheduleSession,
    SchoolClass,
    SessionType,
    Teacher,
    TeachingType,
    TimeSlot,
)


@pytest.fixture
def constraints():
    """Default constraints with the whole day (until 19:00) allowed."""
    return ScheduleConstraints(max_end_time=19)


@pytest.fixture
def simple_catalog():
    """One class, one course, one teacher who teaches both types, two rooms."""
    return Catalog(
        classes=[SchoolClass(id=1, name="CS-1", year=1)],
        courses=[Course(id=1, name="Algorithms", hours_per_week=4)],
        teachers=[
            Teacher(
                id=1,
                name="Ada Lovelace",
                capabilities=(Capability("Algorithms", TeachingType.BOTH),),
            )
        ],
        rooms=[
            Room(id=1, name="Hall A", type=SessionType.LECTURE, capacity=100),
            Room(id=2, name="Lab 1", type=SessionType.SEMINAR, capacity=30),
        ],
        class_courses={1: [1]},
    )


@pytest.fixture
def shared_course_catalog():
    """Two classes taking the same course, one teacher, three rooms."""
    return Catalog(
        classes=[
            SchoolClass(id=1, name="CS-1", year=1),
            SchoolClass(id=2, name="CS-2", year=1),
        ],
        courses=[Course(id=1, name="Algorithms", hours_per_week=4)],
        teachers=[
            Teacher(
                id=1,
                name="Ada Lovelace",
                capabilities=(Capability("Algorithms", TeachingType.BOTH),),
            )
        ],
        rooms=[
            Room(id=1, name="Hall A", type=SessionType.LECTURE, capacity=100),
            Room(id=2, name="Lab 1", type=SessionType.SEMINAR, capacity=30),
            Room(id=3, name="Lab 2", type=SessionType.SEMINAR, capacity=30),
        ],
        class_courses={1: [1], 2: [1]},
    )


@pytest.fixture
def department_catalog():
    """Three classes, three courses, one teacher per course and three rooms per type."""
    course_names = ["Algorithms", "Databases", "Networks"]
    return Catalog(
        classes=[
            SchoolClass(id=1, name="CS-1", year=1),
            SchoolClass(id=2, name="CS-2", year=2),
            SchoolClass(id=3, name="SE-1", year=3),
        ],
        courses=[
            Course(id=i, name=name, hours_per_week=4)
            for i, name in enumerate(course_names, start=1)
        ],
        teachers=[
            Teacher(
                id=i,
                name=f"Teacher {i}",
                capabilities=(Capability(name, TeachingType.BOTH),),
            )
            for i, name in enumerate(course_names, start=1)
        ],
        rooms=[
            Room(id=1, name="Hall A", type=SessionType.LECTURE),
            Room(id=2, name="Hall B", type=SessionType.LECTURE),
            Room(id=3, name="Hall C", type=SessionType.LECTURE),
            Room(id=4, name="Lab 1", type=SessionType.SEMINAR),
            Room(id=5, name="Lab 2", type=SessionType.SEMINAR),
            Room(id=6, name="Lab 3", type=SessionType.SEMINAR),
        ],
        class_courses={1: [1, 2], 2: [1, 3], 3: [2, 3]},
    )


@pytest.fixture
def make_session():
    """Build a ScheduleSession with sensible defaults."""

    def _make(
        id="session_1",
        course_id=1,
        class_id=1,
        teacher_id=1,
        room_id=1,
        session_type=SessionType.LECTURE,
        day=Day.MONDAY,
        start=9,
        end=11,
        group_id=None,
        category=CandidateCategory.BEST,
        course_name="Algorithms",
        class_name="CS-1",
    ):
        return ScheduleSession(
            id=id,
            course_id=course_id,
            course_name=course_name,
            class_id=class_id,
            class_name=class_name,
            teacher_id=teacher_id,
            teacher_name=f"Teacher {teacher_id}",
            room_id=room_id,
            room_name=f"Room {room_id}",
            session_type=session_type,
            time_slot=TimeSlot(day=day, start=start, end=end),
            is_grouped=group_id is not None,
            group_id=group_id,
            category=category,
        )

    return _make


@pytest.fixture
def catalog_data():
    """Catalog in the catalog.json format."""
    return {
        "classes": [
            {"id": 1, "name": "CS-1", "year": 1},
            {"id": 2, "name": "CS-2", "year": 2},
        ],
        "courses": [
            {"id": 1, "name": "Algorithms", "hours_per_week": 4},
            {
                "id": 2,
                "name": "Databases",
                "hours_per_week": 3,
                "manual_assignments": [
                    {"teacher_id": 2, "type": "both", "teacher_name": "Edgar Codd"}
                ],
            },
        ],
        "teachers": [
            {
                "id": 1,
                "name": "Ada Lovelace",
                "capabilities": [{"course_name": "Algorithms", "type": "both"}],
            },
            {
                "id": 2,
                "name": "Edgar Codd",
                "capabilities": [{"course_name": "Databases", "type": "both"}],
            },
        ],
        "rooms": [
            {"id": 1, "name": "Hall A", "type": "lecture", "capacity": 120},
            {"id": 2, "name": "Lab 1", "type": "seminar", "capacity": 30},
        ],
        "class_courses": {"1": [1, 2], "2": [1]},
    }


@pytest.fixture
def config_dir(tmp_path, catalog_data):
    """Configuration directory with catalog.json and constraints.json."""
    (tmp_path / "catalog.json").write_text(json.dumps(catalog_data), encoding="utf-8")
    (tmp_path / "constraints.json").write_text(
        json.dumps({"maxEndTime": 19, "group_same_course_classes": True}),
        encoding="utf-8",
    )
    return tmp_path
