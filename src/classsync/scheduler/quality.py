"""Quality scoring of a generated schedule (0-100)."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from .constants import (
    CATEGORY_QUALITY,
    CONFLICT_PENALTIES,
    CONSTRAINT_BONUS_WEIGHTS,
    MAX_CONSTRAINT_BONUS,
    MIN_QUALITY_FACTOR,
    WEEKDAYS,
)
from .models import (
    Catalog,
    ScheduleConflict,
    ScheduleConstraints,
    ScheduleSession,
    SessionType,
    Severity,
)

logger = logging.getLogger(__name__)

SESSION_COLUMNS = [
    "session_id",
    "class_id",
    "course_id",
    "teacher_id",
    "room_id",
    "session_type",
    "day",
    "start",
    "end",
    "duration",
]


def sessions_frame(sessions: Iterable[ScheduleSession]) -> pd.DataFrame:
    """Flatten sessions into a DataFrame (one row per session)."""
    rows = [
        {
            "session_id": s.id,
            "class_id": s.class_id,
            "course_id": s.course_id,
            "teacher_id": s.teacher_id,
            "room_id": s.room_id,
            "session_type": s.session_type.value,
            "day": s.time_slot.day.name.lower(),
            "start": s.time_slot.start,
            "end": s.time_slot.end,
            "duration": s.time_slot.duration,
        }
        for s in sessions
    ]
    return pd.DataFrame(rows, columns=SESSION_COLUMNS)


def _balance_ratio(counts: pd.Series) -> float:
    """1 for perfectly even counts, towards 0 as the population variance grows."""
    average = counts.mean()
    variance = ((counts - average) ** 2).mean()
    max_variance = average**2
    if max_variance <= 0:
        return 1.0
    return max(0.0, 1 - variance / max_variance)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class QualityBreakdown:
    """Components of the final quality score."""

    coverage: float
    conflict_penalty: float
    constraint_bonus: float
    quality_factor: float
    score: int


class QualityScorer:
    """Computes the composite 0-100 quality score of a session set.

    score = round(clamp(0, 100, (coverage - conflict_penalty + constraint_bonus)
                        * quality_factor))
    """

    def __init__(self, catalog: Catalog, constraints: ScheduleConstraints) -> None:
        self.catalog = catalog
        self.constraints = constraints

    def score(
        self,
        sessions: Iterable[ScheduleSession],
        conflicts: Iterable[ScheduleConflict],
    ) -> QualityBreakdown:
        sessions = list(sessions)
        frame = sessions_frame(sessions)

        coverage = self.coverage_score(sessions)
        penalty = self.conflict_penalty(conflicts)
        bonus = self.constraint_bonus(frame)
        factor = self.quality_factor(sessions)

        raw = (coverage - penalty + bonus) * factor
        final = _round_half_up(min(100.0, max(0.0, raw)))

        logger.info(
            f"Quality score {final} (coverage {coverage:.1f}, penalty -{penalty:.1f}, "
            f"bonus +{bonus:.1f}, factor {factor:.3f})"
        )
        return QualityBreakdown(
            coverage=coverage,
            conflict_penalty=penalty,
            constraint_bonus=bonus,
            quality_factor=factor,
            score=final,
        )

    def expected_sessions(self) -> int:
        """One lecture and one seminar per (class, course) pair."""
        return 2 * sum(len(self.catalog.courses_for(c)) for c in self.catalog.classes)

    def coverage_score(self, sessions: list[ScheduleSession]) -> float:
        """Share of required sessions present, minus up to 20 for duplicates."""
        expected = self.expected_sessions()
        if expected == 0:
            return 0.0

        present = {(s.class_id, s.course_id, s.session_type) for s in sessions}
        matched = sum(
            1
            for school_class in self.catalog.classes
            for course in self.catalog.courses_for(school_class)
            for session_type in SessionType
            if (school_class.id, course.id, session_type) in present
        )

        base = min(1.0, matched / expected) * 100
        excess = max(0, len(sessions) - expected)
        duplicate_penalty = min(20, excess * 2)
        return max(0.0, base - duplicate_penalty)

    def conflict_penalty(self, conflicts: Iterable[ScheduleConflict]) -> float:
        """Weighted conflict count, capped at 100."""
        total = sum(CONFLICT_PENALTIES[c.severity.value] for c in conflicts)
        return float(min(100, total))

    def constraint_bonus(self, frame: pd.DataFrame) -> float:
        """Adherence to enabled soft preferences, normalised to at most 15 points."""
        c = self.constraints
        total = 0.0
        max_possible = 0

        if c.prioritize_morning_lectures:
            max_possible += CONSTRAINT_BONUS_WEIGHTS["morning_lectures"]
            total += self._morning_ratio(frame) * CONSTRAINT_BONUS_WEIGHTS["morning_lectures"]

        if c.avoid_back_to_back_sessions:
            max_possible += CONSTRAINT_BONUS_WEIGHTS["back_to_back"]
            total += self._back_to_back_ratio(frame) * CONSTRAINT_BONUS_WEIGHTS["back_to_back"]

        if c.distribute_evenly_across_week:
            max_possible += CONSTRAINT_BONUS_WEIGHTS["distribution"]
            total += self._distribution_ratio(frame) * CONSTRAINT_BONUS_WEIGHTS["distribution"]

        max_possible += CONSTRAINT_BONUS_WEIGHTS["workload_balance"]
        total += self._workload_ratio(frame) * CONSTRAINT_BONUS_WEIGHTS["workload_balance"]

        max_possible += CONSTRAINT_BONUS_WEIGHTS["time_window"]
        total += self._time_window_points(frame)

        return min(float(MAX_CONSTRAINT_BONUS), total / max_possible * MAX_CONSTRAINT_BONUS)

    def _morning_ratio(self, frame: pd.DataFrame) -> float:
        lectures = frame[frame["session_type"] == SessionType.LECTURE.value]
        if lectures.empty:
            return 0.0
        return float(((lectures["start"] >= 9) & (lectures["start"] <= 11)).mean())

    def _back_to_back_ratio(self, frame: pd.DataFrame) -> float:
        violations = 0
        possible = 0
        ordered = frame.sort_values(["teacher_id", "day", "start"])
        for _, group in ordered.groupby(["teacher_id", "day"]):
            possible += max(0, len(group) - 1)
            ends = group["end"].to_numpy()[:-1]
            starts = group["start"].to_numpy()[1:]
            violations += int((ends == starts).sum())

        if possible == 0:
            return 1.0
        return 1 - violations / possible

    def _distribution_ratio(self, frame: pd.DataFrame) -> float:
        if frame.empty:
            return 1.0
        day_names = [day.name.lower() for day in WEEKDAYS]
        counts = frame["day"].value_counts().reindex(day_names, fill_value=0)
        return _balance_ratio(counts.astype(float))

    def _workload_ratio(self, frame: pd.DataFrame) -> float:
        if not self.catalog.teachers:
            return 1.0
        teacher_ids = [t.id for t in self.catalog.teachers]
        workloads = frame["teacher_id"].value_counts().reindex(teacher_ids, fill_value=0)
        if workloads.mean() == 0:
            return 1.0
        return _balance_ratio(workloads.astype(float))

    def _time_window_points(self, frame: pd.DataFrame) -> float:
        """Up to 5 points: 5 per preferred-window share, 3 per acceptable-only share."""
        if frame.empty:
            return float(CONSTRAINT_BONUS_WEIGHTS["time_window"])
        c = self.constraints
        after_start = frame["start"] >= c.preferred_start_time
        preferred = float((after_start & (frame["end"] <= c.preferred_end_time)).mean())
        acceptable = float((after_start & (frame["end"] <= c.max_end_time)).mean())
        return preferred * CONSTRAINT_BONUS_WEIGHTS["time_window"] + (acceptable - preferred) * 3

    def session_quality(self, session: ScheduleSession) -> float:
        """Quality of one session in (0, 1].

        Observable placement (time window and room type) multiplied by the
        category of the candidate the session was committed from.
        """
        c = self.constraints
        slot = session.time_slot
        if slot.start >= c.preferred_start_time and slot.end <= c.preferred_end_time:
            quality = 1.0
        elif slot.start >= c.preferred_start_time and slot.end <= c.max_end_time:
            quality = 0.9
        else:
            quality = 0.7

        room = self.catalog.get_room(session.room_id)
        if room is None or room.type != session.session_type:
            quality *= 0.8

        if session.category is not None:
            quality *= CATEGORY_QUALITY[session.category.value]
        return quality

    def quality_factor(self, sessions: list[ScheduleSession]) -> float:
        """Mean session quality clamped to [0.8, 1.0]; 1.0 for no sessions."""
        if not sessions:
            return 1.0
        average = sum(self.session_quality(s) for s in sessions) / len(sessions)
        return max(MIN_QUALITY_FACTOR, min(1.0, average))


def count_by_severity(conflicts: Iterable[ScheduleConflict]) -> dict[str, int]:
    """Conflict counts keyed by severity value."""
    counts = {severity.value: 0 for severity in Severity}
    for conflict in conflicts:
        counts[conflict.severity.value] += 1
    return counts
