"""Data models for the weekly session scheduler."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..exceptions import InvalidCatalogError, InvalidConstraintsError


class Day(Enum):
    """Teaching days of the week."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4

    @property
    def label(self) -> str:
        """Human readable day name (e.g. 'Monday')."""
        return self.name.capitalize()

    @classmethod
    def from_name(cls, name: str) -> "Day":
        """Parse a day from 'Monday', 'monday' or 'MONDAY'."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown day: {name!r}") from None


class SessionType(str, Enum):
    """Type of a scheduled session (also the type of a room)."""

    LECTURE = "lecture"
    SEMINAR = "seminar"


class TeachingType(str, Enum):
    """What a teacher can teach, or what a manual assignment pins."""

    LECTURE = "lecture"
    SEMINAR = "seminar"
    BOTH = "both"

    def covers(self, session_type: SessionType) -> bool:
        """Check if this teaching type allows the given session type."""
        return self is TeachingType.BOTH or self.value == session_type.value


class ConflictKind(str, Enum):
    """Category of a recorded scheduling conflict."""

    TEACHER_CONFLICT = "teacher_conflict"
    ROOM_CONFLICT = "room_conflict"
    CONSTRAINT_VIOLATION = "constraint_violation"
    VALIDATION_ERROR = "validation_error"


class Severity(str, Enum):
    """How serious a conflict is."""

    CRITICAL = "critical"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class CandidateCategory(str, Enum):
    """Quality category of a time slot candidate."""

    BEST = "best"
    GOOD = "good"
    WORST = "worst"

    @property
    def rank(self) -> int:
        """Ordering rank, higher is better."""
        return {"best": 3, "good": 2, "worst": 1}[self.value]


class QualityLabel(str, Enum):
    """Advisory label for a schedule quality score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: int) -> "QualityLabel":
        if score >= 90:
            return cls.EXCELLENT
        if score >= 75:
            return cls.GOOD
        if score >= 50:
            return cls.ACCEPTABLE
        return cls.POOR


# Accepted camelCase aliases for constraint keys
_CONSTRAINT_ALIASES = {
    "preferredStartTime": "preferred_start_time",
    "preferredEndTime": "preferred_end_time",
    "maxEndTime": "max_end_time",
    "maxTeacherHoursPerDay": "max_teacher_hours_per_day",
    "avoidBackToBackSessions": "avoid_back_to_back_sessions",
    "lectureSessionLength": "lecture_session_length",
    "seminarSessionLength": "seminar_session_length",
    "prioritizeMorningLectures": "prioritize_morning_lectures",
    "groupSameCourseClasses": "group_same_course_classes",
    "distributeEvenlyAcrossWeek": "distribute_evenly_across_week",
}


@dataclass(frozen=True)
class ScheduleConstraints:
    """Per-run scheduling configuration."""

    preferred_start_time: int = 9
    preferred_end_time: int = 13
    max_end_time: int = 15
    max_teacher_hours_per_day: int = 6
    avoid_back_to_back_sessions: bool = False
    lecture_session_length: int = 2
    seminar_session_length: int = 2
    prioritize_morning_lectures: bool = False
    group_same_course_classes: bool = False
    distribute_evenly_across_week: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduleConstraints":
        """Create constraints from a dictionary (snake_case or camelCase keys).

        Unknown keys are ignored, missing keys keep their defaults.
        """
        known = set(cls.__dataclass_fields__)
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _CONSTRAINT_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)

    def session_length(self, session_type: SessionType) -> int:
        """Required duration in hours for a session type."""
        if session_type == SessionType.LECTURE:
            return self.lecture_session_length
        return self.seminar_session_length

    def validate(self) -> None:
        """Raise InvalidConstraintsError if the constraints are unusable."""
        for name in (
            "preferred_start_time",
            "preferred_end_time",
            "max_end_time",
            "max_teacher_hours_per_day",
            "lecture_session_length",
            "seminar_session_length",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConstraintsError(name, value, "must be an integer")

        for name in ("lecture_session_length", "seminar_session_length", "max_teacher_hours_per_day"):
            if getattr(self, name) <= 0:
                raise InvalidConstraintsError(name, getattr(self, name), "must be positive")

        if not 0 <= self.preferred_start_time <= 24:
            raise InvalidConstraintsError(
                "preferred_start_time", self.preferred_start_time, "must be an hour of the day"
            )
        if self.preferred_start_time >= self.preferred_end_time:
            raise InvalidConstraintsError(
                "preferred_end_time",
                self.preferred_end_time,
                f"must be after preferred_start_time ({self.preferred_start_time})",
            )
        if self.preferred_start_time >= self.max_end_time:
            raise InvalidConstraintsError(
                "max_end_time",
                self.max_end_time,
                f"must be after preferred_start_time ({self.preferred_start_time})",
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SchoolClass:
    """A class (cohort of students) owned by the catalog."""

    id: int
    name: str
    year: int
    semester: int = 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchoolClass":
        return cls(
            id=data["id"],
            name=data["name"],
            year=data.get("year", 1),
            semester=data.get("semester", 1),
        )


@dataclass(frozen=True)
class ManualAssignment:
    """A caller-pinned teacher for a course and session type."""

    teacher_id: int
    type: TeachingType
    teacher_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManualAssignment":
        return cls(
            teacher_id=data["teacher_id"],
            type=TeachingType(data["type"]),
            teacher_name=data.get("teacher_name", ""),
        )


@dataclass(frozen=True)
class Course:
    """A course that classes take, with optional manual teacher pins."""

    id: int
    name: str
    hours_per_week: int = 0
    lecture_hours: int = 0
    seminar_hours: int = 0
    manual_assignments: tuple[ManualAssignment, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Course":
        return cls(
            id=data["id"],
            name=data["name"],
            hours_per_week=data.get("hours_per_week", 0),
            lecture_hours=data.get("lecture_hours", 0),
            seminar_hours=data.get("seminar_hours", 0),
            manual_assignments=tuple(
                ManualAssignment.from_dict(a) for a in data.get("manual_assignments", [])
            ),
        )


@dataclass(frozen=True)
class Capability:
    """A course a teacher is qualified for, and in which session type."""

    course_name: str
    type: TeachingType


@dataclass(frozen=True)
class Teacher:
    """A teacher with the set of courses they can teach."""

    id: int
    name: str
    capabilities: tuple[Capability, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Teacher":
        return cls(
            id=data["id"],
            name=data["name"],
            capabilities=tuple(
                Capability(course_name=c["course_name"], type=TeachingType(c["type"]))
                for c in data.get("capabilities", [])
            ),
        )

    def teaches(self, course_name: str) -> bool:
        """Check if the teacher has any capability for the course."""
        return any(c.course_name == course_name for c in self.capabilities)

    def can_teach(self, course_name: str, session_type: SessionType) -> bool:
        """Check if the teacher can teach the course in the given session type."""
        return any(
            c.course_name == course_name and c.type.covers(session_type)
            for c in self.capabilities
        )


@dataclass(frozen=True)
class Room:
    """A physical room. Capacity is informational only."""

    id: int
    name: str
    type: SessionType
    capacity: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        return cls(
            id=data["id"],
            name=data["name"],
            type=SessionType(data["type"]),
            capacity=data.get("capacity", 0),
        )


@dataclass(frozen=True)
class TimeSlot:
    """A day and an integer hour range [start, end)."""

    day: Day
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeSlot") -> bool:
        """Check if two slots on the same day intersect."""
        return self.day == other.day and self.start < other.end and other.start < self.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.name.lower(),
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeSlot":
        return cls(day=Day.from_name(data["day"]), start=data["start"], end=data["end"])


@dataclass(frozen=True)
class ScheduleSession:
    """One scheduled lecture or seminar for one class."""

    id: str
    course_id: int
    course_name: str
    class_id: int
    class_name: str
    teacher_id: int
    teacher_name: str
    room_id: int
    room_name: str
    session_type: SessionType
    time_slot: TimeSlot
    is_manual_assignment: bool = False
    is_grouped: bool = False
    group_id: str | None = None
    # Score and category of the candidate that produced this session
    score: int | None = None
    category: CandidateCategory | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert session to dictionary."""
        return {
            "id": self.id,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "class_id": self.class_id,
            "class_name": self.class_name,
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "room_id": self.room_id,
            "room_name": self.room_name,
            "session_type": self.session_type.value,
            "time_slot": self.time_slot.to_dict(),
            "is_manual_assignment": self.is_manual_assignment,
            "is_grouped": self.is_grouped,
            "group_id": self.group_id,
            "score": self.score,
            "category": self.category.value if self.category else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduleSession":
        """Create a session from a dictionary produced by to_dict()."""
        category = data.get("category")
        return cls(
            id=data["id"],
            course_id=data["course_id"],
            course_name=data.get("course_name", ""),
            class_id=data["class_id"],
            class_name=data.get("class_name", ""),
            teacher_id=data["teacher_id"],
            teacher_name=data.get("teacher_name", ""),
            room_id=data["room_id"],
            room_name=data.get("room_name", ""),
            session_type=SessionType(data["session_type"]),
            time_slot=TimeSlot.from_dict(data["time_slot"]),
            is_manual_assignment=data.get("is_manual_assignment", False),
            is_grouped=data.get("is_grouped", False),
            group_id=data.get("group_id"),
            score=data.get("score"),
            category=CandidateCategory(category) if category else None,
        )


@dataclass(frozen=True)
class ScheduleConflict:
    """A recorded violation or risk in a generated schedule."""

    id: int
    kind: ConflictKind
    severity: Severity
    message: str
    affected_items: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "affected_items": list(self.affected_items),
            "suggestions": list(self.suggestions),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ScheduleMetadata:
    """Summary information about a generated schedule."""

    constraints: ScheduleConstraints
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    total_sessions: int = 0
    expected_sessions: int = 0
    total_hours: int = 0
    utilization_rate: float = 0.0
    manual_assignments: int = 0
    automatic_assignments: int = 0
    by_day: dict[str, int] = field(default_factory=dict)
    by_room: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "constraints": self.constraints.to_dict(),
            "total_sessions": self.total_sessions,
            "expected_sessions": self.expected_sessions,
            "total_hours": self.total_hours,
            "utilization_rate": self.utilization_rate,
            "manual_assignments": self.manual_assignments,
            "automatic_assignments": self.automatic_assignments,
            "by_day": self.by_day,
            "by_room": self.by_room,
        }


@dataclass(frozen=True)
class GeneratedSchedule:
    """Result of one generation run."""

    sessions: tuple[ScheduleSession, ...]
    conflicts: tuple[ScheduleConflict, ...]
    score: int
    metadata: ScheduleMetadata

    @property
    def label(self) -> QualityLabel:
        return QualityLabel.from_score(self.score)

    def count_conflicts(self, severity: Severity) -> int:
        """Number of conflicts with the given severity."""
        return sum(1 for c in self.conflicts if c.severity == severity)

    @property
    def critical_count(self) -> int:
        return self.count_conflicts(Severity.CRITICAL)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "score": self.score,
            "label": self.label.value,
            "metadata": self.metadata.to_dict(),
            "sessions": [s.to_dict() for s in self.sessions],
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


@dataclass(frozen=True)
class Catalog:
    """Read-only catalog of classes, courses, teachers and rooms for a run.

    ``class_courses`` maps a class id to the ids of the courses assigned to it.
    Collections are stored as tuples, use ``dataclasses.replace`` to derive a
    changed catalog.
    """

    classes: tuple[SchoolClass, ...] = ()
    courses: tuple[Course, ...] = ()
    teachers: tuple[Teacher, ...] = ()
    rooms: tuple[Room, ...] = ()
    class_courses: dict[int, tuple[int, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Id indexes below are built once, so the collections must not change
        object.__setattr__(self, "classes", tuple(self.classes))
        object.__setattr__(self, "courses", tuple(self.courses))
        object.__setattr__(self, "teachers", tuple(self.teachers))
        object.__setattr__(self, "rooms", tuple(self.rooms))
        object.__setattr__(
            self,
            "class_courses",
            {class_id: tuple(course_ids) for class_id, course_ids in self.class_courses.items()},
        )
        object.__setattr__(self, "_courses_by_id", {c.id: c for c in self.courses})
        object.__setattr__(self, "_teachers_by_id", {t.id: t for t in self.teachers})
        object.__setattr__(self, "_rooms_by_id", {r.id: r for r in self.rooms})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Catalog":
        """Create a catalog from a dictionary (e.g. parsed catalog.json)."""
        return cls(
            classes=[SchoolClass.from_dict(c) for c in data.get("classes", [])],
            courses=[Course.from_dict(c) for c in data.get("courses", [])],
            teachers=[Teacher.from_dict(t) for t in data.get("teachers", [])],
            rooms=[Room.from_dict(r) for r in data.get("rooms", [])],
            class_courses={
                int(class_id): list(course_ids)
                for class_id, course_ids in data.get("class_courses", {}).items()
            },
        )

    def courses_for(self, school_class: SchoolClass) -> list[Course]:
        """Courses assigned to a class, in assignment order."""
        return [
            self._courses_by_id[course_id]
            for course_id in self.class_courses.get(school_class.id, [])
            if course_id in self._courses_by_id
        ]

    def get_course(self, course_id: int) -> Course | None:
        return self._courses_by_id.get(course_id)

    def get_teacher(self, teacher_id: int) -> Teacher | None:
        return self._teachers_by_id.get(teacher_id)

    def get_room(self, room_id: int) -> Room | None:
        return self._rooms_by_id.get(room_id)

    def validate(self) -> None:
        """Raise InvalidCatalogError for duplicate ids or dangling references."""
        for entity, items in (
            ("classes", self.classes),
            ("courses", self.courses),
            ("teachers", self.teachers),
            ("rooms", self.rooms),
        ):
            seen: set[int] = set()
            for item in items:
                if item.id in seen:
                    raise InvalidCatalogError("duplicate id", entity, item.id)
                seen.add(item.id)

        class_ids = {c.id for c in self.classes}
        for class_id, course_ids in self.class_courses.items():
            if class_id not in class_ids:
                raise InvalidCatalogError(
                    "class-course map references an unknown class", "class_courses", class_id
                )
            for course_id in course_ids:
                if course_id not in self._courses_by_id:
                    raise InvalidCatalogError(
                        f"class {class_id} is assigned unknown course {course_id}",
                        "class_courses",
                        class_id,
                    )
            if len(set(course_ids)) != len(course_ids):
                raise InvalidCatalogError(
                    "a course is assigned to the class more than once", "class_courses", class_id
                )
