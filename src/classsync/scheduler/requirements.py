"""Session requirement generation, including multi-class lecture grouping."""

from dataclasses import dataclass

from .models import Catalog, Course, ScheduleConstraints, SchoolClass, SessionType


@dataclass(frozen=True)
class SessionRequirement:
    """Unscheduled demand for one session.

    A grouped requirement covers several classes that attend one shared
    lecture; it is committed as one session per class with a common group id.
    """

    id: str
    course: Course
    session_type: SessionType
    classes: tuple[SchoolClass, ...]
    priority: int = 0

    @property
    def is_grouped(self) -> bool:
        return len(self.classes) > 1

    @property
    def representative(self) -> SchoolClass:
        """First class of the requirement, used for priority and messages."""
        return self.classes[0]

    @property
    def class_ids(self) -> list[int]:
        return [c.id for c in self.classes]

    @property
    def class_names(self) -> list[str]:
        return [c.name for c in self.classes]

    def describe(self) -> str:
        """Short description used in conflicts and logs."""
        return f"{self.course.name} {self.session_type.value} for {', '.join(self.class_names)}"

    def split(self) -> list["SessionRequirement"]:
        """Split a grouped requirement into one singleton requirement per class."""
        return [single_requirement(c, self.course, self.session_type) for c in self.classes]


def single_requirement(
    school_class: SchoolClass, course: Course, session_type: SessionType
) -> SessionRequirement:
    """Create an ungrouped requirement for one class."""
    return SessionRequirement(
        id=f"{school_class.id}_{course.id}_{session_type.value}",
        course=course,
        session_type=session_type,
        classes=(school_class,),
    )


def partition_lecture_groups(catalog: Catalog) -> dict[int, tuple[SchoolClass, ...]]:
    """Find courses whose lecture can be shared by several classes.

    Args:
        catalog: Catalog with classes and the class-course map

    Returns:
        Dictionary mapping course id to the classes taking it (in class
        order), only for courses assigned to 2 or more classes
    """
    classes_by_course: dict[int, list[SchoolClass]] = {}
    for school_class in catalog.classes:
        for course in catalog.courses_for(school_class):
            classes_by_course.setdefault(course.id, []).append(school_class)

    return {
        course_id: tuple(classes)
        for course_id, classes in classes_by_course.items()
        if len(classes) >= 2
    }


def build_requirements(
    catalog: Catalog, constraints: ScheduleConstraints
) -> list[SessionRequirement]:
    """Turn (class x course x session type) into session requirements.

    Every class gets one seminar requirement per assigned course. Lectures
    are merged into one grouped requirement per shared course when grouping
    is enabled; the grouped requirement is emitted at the first class of
    the group and skipped for the others.

    Priorities are left at 0; see priority.rank_requirements().
    """
    groups = partition_lecture_groups(catalog) if constraints.group_same_course_classes else {}
    requirements: list[SessionRequirement] = []

    for school_class in catalog.classes:
        for course in catalog.courses_for(school_class):
            group = groups.get(course.id)
            if group is None:
                requirements.append(single_requirement(school_class, course, SessionType.LECTURE))
            elif group[0].id == school_class.id:
                requirements.append(
                    SessionRequirement(
                        id=f"group_{course.id}_{SessionType.LECTURE.value}",
                        course=course,
                        session_type=SessionType.LECTURE,
                        classes=group,
                    )
                )

            # Seminars are always individual
            requirements.append(single_requirement(school_class, course, SessionType.SEMINAR))

    return requirements
