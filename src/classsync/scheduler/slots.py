"""Time slot candidate generation, scoring and selection."""

import logging
from dataclasses import dataclass, field

from .conflicts import ConflictTracker
from .constants import TIME_WINDOWS, WEEKDAYS
from .models import (
    CandidateCategory,
    Catalog,
    Room,
    ScheduleConstraints,
    SessionType,
    Teacher,
    TimeSlot,
)
from .requirements import SessionRequirement

logger = logging.getLogger(__name__)


@dataclass
class SlotScore:
    """Score of one (day, window, room) option for a teacher."""

    score: int = 100
    category: CandidateCategory = CandidateCategory.BEST
    penalties: int = 0
    reasons: list[str] = field(default_factory=list)

    def add(self, points: int, reason: str, penalty: int = 0) -> None:
        self.score += points
        self.penalties += penalty
        self.reasons.append(reason)

    def demote(self) -> None:
        """Lower a 'best' category to 'good', leaving others unchanged."""
        if self.category == CandidateCategory.BEST:
            self.category = CandidateCategory.GOOD


@dataclass(frozen=True)
class SlotCandidate:
    """A feasible placement for a requirement with its score."""

    slot: TimeSlot
    teacher: Teacher
    room: Room
    rating: SlotScore

    @property
    def score(self) -> int:
        return self.rating.score

    @property
    def category(self) -> CandidateCategory:
        return self.rating.category


class SlotScorer:
    """Scores candidate placements against the soft preferences.

    All load figures (room usage, teacher hours, day counts) are read from
    the run's ConflictTracker, so the same placement scores differently as
    the calendar fills up.
    """

    def __init__(self, catalog: Catalog, constraints: ScheduleConstraints) -> None:
        self.catalog = catalog
        self.constraints = constraints

    def score(
        self,
        requirement: SessionRequirement,
        teacher: Teacher,
        room: Room,
        slot: TimeSlot,
        tracker: ConflictTracker,
    ) -> SlotScore:
        """Score one placement (base 100, additive terms)."""
        c = self.constraints
        rating = SlotScore()

        # Time window
        if slot.start >= c.preferred_start_time and slot.end <= c.preferred_end_time:
            rating.add(40, "Preferred time window")
        elif slot.start >= c.preferred_start_time and slot.end <= c.max_end_time:
            rating.add(20, "Acceptable time window")
            rating.category = CandidateCategory.GOOD
        elif slot.start < c.preferred_start_time:
            rating.add(-15, "Starts before preferred time", penalty=15)
            rating.category = CandidateCategory.GOOD
        else:
            rating.add(-50, "Outside acceptable hours", penalty=50)
            rating.category = CandidateCategory.WORST

        # Room diversity for grouped lectures
        if requirement.is_grouped:
            used = tracker.rooms_used_for(requirement.course.name, requirement.session_type)
            if room.id not in used:
                rating.add(35, "Promotes room diversity for course")
            elif len(used) == 1:
                rating.add(-20, "Risk of room bottleneck", penalty=20)

        if c.prioritize_morning_lectures and requirement.session_type == SessionType.LECTURE:
            self._score_morning_lecture(rating, slot)

        if c.avoid_back_to_back_sessions:
            if tracker.has_adjacent_session(teacher.id, slot):
                rating.add(-40, "Creates back-to-back sessions", penalty=40)
                rating.category = CandidateCategory.WORST
            else:
                rating.add(15, "No back-to-back conflicts")

        if c.distribute_evenly_across_week:
            daily = tracker.day_count(slot.day)
            average = len(tracker) / len(WEEKDAYS)
            if daily < average:
                rating.add(15, "Helps balance weekly distribution")
            elif daily > average + 1:
                rating.add(-20, "Day already heavily scheduled", penalty=20)
                rating.demote()

        room_penalty = self._score_room(rating, requirement, room, tracker)
        if room_penalty > 0:
            rating.category = CandidateCategory.WORST

        teacher_penalty = self._score_teacher(rating, teacher, slot, tracker)
        if teacher_penalty > 0:
            if rating.category == CandidateCategory.BEST:
                rating.category = CandidateCategory.GOOD
            else:
                rating.category = CandidateCategory.WORST

        if rating.penalties > 50:
            rating.category = CandidateCategory.WORST
        elif rating.penalties > 20:
            rating.demote()

        rating.score = max(1, rating.score)
        return rating

    def _score_morning_lecture(self, rating: SlotScore, slot: TimeSlot) -> None:
        if slot.start == 9:
            rating.add(30, "Prime morning lecture slot")
        elif 9 <= slot.start <= 11:
            rating.add(20, "Morning lecture slot")
        elif 11 <= slot.start <= 13:
            rating.add(5, "Late morning lecture")
            rating.demote()
        else:
            rating.add(-25, "Afternoon lecture (not preferred)", penalty=25)
            rating.category = CandidateCategory.WORST

    def _score_room(
        self,
        rating: SlotScore,
        requirement: SessionRequirement,
        room: Room,
        tracker: ConflictTracker,
    ) -> int:
        """Room type match, usage balance and grouped-session competition.

        Returns:
            Penalty points contributed by the room terms
        """
        penalty = 0

        if room.type == requirement.session_type:
            rating.add(20, f"Proper {requirement.session_type.value} room")
        else:
            rating.add(
                -50,
                f"Wrong room type ({room.type.value} for {requirement.session_type.value})",
                penalty=50,
            )
            penalty += 50

        usage = tracker.room_usage(room.id)
        average = len(tracker) / len(self.catalog.rooms) if self.catalog.rooms else 0
        if usage == 0:
            rating.add(25, "Fresh room - good distribution")
        elif usage < average:
            rating.add(15, "Balances room utilization")
        elif usage > average * 1.5:
            rating.add(-20, "Room already heavily used", penalty=15)
            penalty += 15

        if requirement.is_grouped:
            competing = tracker.grouped_sessions_in_room(room.id, requirement.session_type)
            if competing == 0:
                rating.add(30, "No competing grouped sessions")
            elif competing == 1:
                rating.add(10, "Limited competition in this room")
            else:
                rating.add(-25, "Room already has multiple grouped sessions", penalty=20)
                penalty += 20

        return penalty

    def _score_teacher(
        self,
        rating: SlotScore,
        teacher: Teacher,
        slot: TimeSlot,
        tracker: ConflictTracker,
    ) -> int:
        """Daily hour limit and weekly workload balance.

        Returns:
            Penalty points contributed by the teacher terms
        """
        penalty = 0
        limit = self.constraints.max_teacher_hours_per_day

        new_daily_hours = tracker.teacher_daily_hours(teacher.id, slot.day) + slot.duration
        if new_daily_hours <= limit * 0.7:
            rating.add(20, "Well within daily hour limit")
        elif new_daily_hours <= limit:
            rating.add(10, "Within daily hour limit")
        else:
            rating.add(-40, f"Exceeds daily limit ({new_daily_hours}h > {limit}h)", penalty=40)
            penalty += 40

        workload = tracker.teacher_session_count(teacher.id)
        average = len(tracker) / len(self.catalog.teachers) if self.catalog.teachers else 0
        if workload < average * 0.9:
            rating.add(15, "Balances weekly workload")
        elif workload > average * 1.3:
            rating.add(-15, "Teacher already heavily loaded", penalty=15)
            penalty += 15

        return penalty


def generate_candidates(
    requirement: SessionRequirement,
    teacher: Teacher,
    rooms: list[Room],
    scorer: SlotScorer,
    tracker: ConflictTracker,
) -> list[SlotCandidate]:
    """Enumerate and score feasible placements for a fixed teacher.

    For each room, day and window of the fixed menu, a placement is dropped
    when it ends after max_end_time, when its length differs from the
    required session length, or when the teacher, the room or any class of
    the requirement already has an overlapping session that day.

    Returns:
        Scored candidates in generation order (room, day, window)
    """
    constraints = scorer.constraints
    required_length = constraints.session_length(requirement.session_type)
    candidates: list[SlotCandidate] = []

    for room in rooms:
        for day in WEEKDAYS:
            for start, end in TIME_WINDOWS:
                if end > constraints.max_end_time:
                    continue
                if end - start != required_length:
                    continue

                slot = TimeSlot(day=day, start=start, end=end)
                if not tracker.is_slot_available(teacher.id, room.id, requirement.class_ids, slot):
                    continue

                rating = scorer.score(requirement, teacher, room, slot, tracker)
                candidates.append(SlotCandidate(slot=slot, teacher=teacher, room=room, rating=rating))

    return candidates


def rank_candidates(candidates: list[SlotCandidate]) -> list[SlotCandidate]:
    """Order candidates by category (best > good > worst), then score.

    The sort is stable, so equal candidates keep generation order.
    """
    return sorted(candidates, key=lambda c: (-c.category.rank, -c.score))


def pick_best_candidate(candidates: list[SlotCandidate]) -> SlotCandidate | None:
    """Return the winning candidate, or None if there are none."""
    if not candidates:
        return None
    best = rank_candidates(candidates)[0]
    logger.debug(
        f"Selected {best.category.value.upper()} candidate (score: {best.score}) "
        f"{best.slot.day.label} {best.slot.start}:00-{best.slot.end}:00 in {best.room.name}"
    )
    return best
