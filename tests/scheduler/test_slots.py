"""Tests for time slot candidate generation and scoring."""

from dataclasses import replace

import pytest

from classsync.scheduler.conflicts import ConflictTracker
from classsync.scheduler.constants import WEEKDAYS
from classsync.scheduler.models import (
    CandidateCategory,
    Day,
    ScheduleConstraints,
    SessionType,
    Teacher,
    TimeSlot,
)
from classsync.scheduler.requirements import build_requirements, single_requirement
from classsync.scheduler.slots import (
    SlotCandidate,
    SlotScore,
    SlotScorer,
    generate_candidates,
    pick_best_candidate,
    rank_candidates,
)


@pytest.fixture
def lecture(simple_catalog):
    return single_requirement(
        simple_catalog.classes[0], simple_catalog.courses[0], SessionType.LECTURE
    )


def _score(catalog, constraints, requirement, room, slot, tracker=None):
    scorer = SlotScorer(catalog, constraints)
    return scorer.score(requirement, catalog.teachers[0], room, slot, tracker or ConflictTracker())


class TestSlotScore:
    """Tests for SlotScore class."""

    def test_demote_only_lowers_best(self):
        rating = SlotScore()
        rating.demote()
        assert rating.category == CandidateCategory.GOOD

        rating.category = CandidateCategory.WORST
        rating.demote()
        assert rating.category == CandidateCategory.WORST

    def test_add_accumulates(self):
        rating = SlotScore()
        rating.add(-15, "Early", penalty=15)
        rating.add(20, "Room")
        assert rating.score == 105
        assert rating.penalties == 15
        assert rating.reasons == ["Early", "Room"]


class TestSlotScorer:
    """Tests for SlotScorer class."""

    def test_preferred_window(self, simple_catalog, constraints, lecture):
        hall = simple_catalog.rooms[0]
        rating = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 9, 11))
        # 100 + 40 window + 20 room type + 25 unused room + 20 teacher hours
        assert rating.score == 205
        assert rating.category == CandidateCategory.BEST
        assert rating.penalties == 0

    def test_starts_before_preferred_time(self, simple_catalog, constraints, lecture):
        hall = simple_catalog.rooms[0]
        rating = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 8, 10))
        assert rating.score == 150
        assert rating.category == CandidateCategory.GOOD
        assert rating.penalties == 15

    def test_acceptable_window(self, simple_catalog, constraints, lecture):
        hall = simple_catalog.rooms[0]
        rating = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 13, 15))
        assert rating.score == 185
        assert rating.category == CandidateCategory.GOOD

    def test_outside_acceptable_hours(self, simple_catalog, lecture):
        hall = simple_catalog.rooms[0]
        constraints = ScheduleConstraints()  # max end 15
        rating = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 15, 17))
        assert rating.score == 115
        assert rating.category == CandidateCategory.WORST

    def test_wrong_room_type(self, simple_catalog, constraints, lecture):
        lab = simple_catalog.rooms[1]
        rating = _score(simple_catalog, constraints, lecture, lab, TimeSlot(Day.MONDAY, 9, 11))
        assert rating.score == 135
        assert rating.category == CandidateCategory.WORST
        assert any("Wrong room type" in reason for reason in rating.reasons)

    def test_morning_lecture_preference(self, simple_catalog, lecture):
        hall = simple_catalog.rooms[0]
        constraints = ScheduleConstraints(max_end_time=19, prioritize_morning_lectures=True)

        prime = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 9, 11))
        assert prime.score == 235
        assert prime.category == CandidateCategory.BEST

        eleven = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 11, 13))
        assert eleven.score == 225
        assert eleven.category == CandidateCategory.BEST

        late_morning = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 12, 14))
        assert late_morning.score == 190
        assert late_morning.category == CandidateCategory.GOOD

        afternoon = _score(simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 14, 16))
        assert afternoon.score == 160
        assert afternoon.category == CandidateCategory.WORST

    def test_back_to_back(self, simple_catalog, lecture, make_session):
        hall = simple_catalog.rooms[0]
        constraints = ScheduleConstraints(max_end_time=19, avoid_back_to_back_sessions=True)
        tracker = ConflictTracker([make_session(room_id=2, session_type=SessionType.SEMINAR)])

        adjacent = _score(
            simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 11, 13), tracker
        )
        assert adjacent.score == 165
        assert adjacent.category == CandidateCategory.WORST
        assert "Creates back-to-back sessions" in adjacent.reasons

        other_day = _score(
            simple_catalog, constraints, lecture, hall, TimeSlot(Day.TUESDAY, 11, 13), tracker
        )
        assert "No back-to-back conflicts" in other_day.reasons
        assert other_day.category == CandidateCategory.BEST

    def test_grouped_lecture_room_terms(self, shared_course_catalog):
        constraints = ScheduleConstraints(max_end_time=19, group_same_course_classes=True)
        grouped = build_requirements(shared_course_catalog, constraints)[0]
        hall = shared_course_catalog.rooms[0]
        rating = _score(shared_course_catalog, constraints, grouped, hall, TimeSlot(Day.MONDAY, 9, 11))
        # 205 + 35 room diversity + 30 no competing grouped sessions
        assert rating.score == 270
        assert rating.category == CandidateCategory.BEST

    def test_score_floor(self, simple_catalog, lecture, make_session):
        lab = simple_catalog.rooms[1]
        constraints = ScheduleConstraints(
            max_end_time=19,
            max_teacher_hours_per_day=1,
            prioritize_morning_lectures=True,
            avoid_back_to_back_sessions=True,
        )
        tracker = ConflictTracker([make_session(room_id=2, start=14, end=16)])
        rating = _score(simple_catalog, constraints, lecture, lab, TimeSlot(Day.MONDAY, 16, 18), tracker)
        assert rating.score >= 1
        assert rating.category == CandidateCategory.WORST


class TestLoadTerms:
    """Tests for the tracker-driven distribution, room and teacher terms."""

    MONDAY_MORNING = TimeSlot(Day.MONDAY, 9, 11)

    def test_even_distribution(self, simple_catalog, lecture, make_session):
        constraints = ScheduleConstraints(max_end_time=19, distribute_evenly_across_week=True)
        tracker = ConflictTracker(
            [
                make_session(id=f"s{start}", teacher_id=7, room_id=9, start=start, end=start + 2)
                for start in (9, 11, 13)
            ]
        )
        hall = simple_catalog.rooms[0]

        quiet_day = _score(
            simple_catalog, constraints, lecture, hall, TimeSlot(Day.TUESDAY, 9, 11), tracker
        )
        assert quiet_day.score == 235
        assert quiet_day.category == CandidateCategory.BEST
        assert "Helps balance weekly distribution" in quiet_day.reasons

        busy_day = _score(simple_catalog, constraints, lecture, hall, self.MONDAY_MORNING, tracker)
        assert busy_day.score == 200
        assert busy_day.penalties == 20
        assert busy_day.category == CandidateCategory.GOOD
        assert "Day already heavily scheduled" in busy_day.reasons

    def test_within_daily_hour_limit(self, simple_catalog, lecture, make_session):
        constraints = ScheduleConstraints(max_end_time=19, max_teacher_hours_per_day=4)
        tracker = ConflictTracker([make_session(room_id=9, start=13, end=15)])
        hall = simple_catalog.rooms[0]

        rating = _score(simple_catalog, constraints, lecture, hall, self.MONDAY_MORNING, tracker)
        assert rating.score == 195
        assert rating.category == CandidateCategory.BEST
        assert "Within daily hour limit" in rating.reasons

    def test_exceeds_daily_hour_limit(self, simple_catalog, lecture, make_session):
        constraints = ScheduleConstraints(max_end_time=19, max_teacher_hours_per_day=4)
        tracker = ConflictTracker(
            [
                make_session(id="s1", room_id=9, start=11, end=13),
                make_session(id="s2", room_id=9, start=13, end=15),
            ]
        )
        hall = simple_catalog.rooms[0]

        # A best slot drops to good
        morning = _score(simple_catalog, constraints, lecture, hall, self.MONDAY_MORNING, tracker)
        assert morning.score == 145
        assert morning.penalties == 40
        assert morning.category == CandidateCategory.GOOD
        assert "Exceeds daily limit (6h > 4h)" in morning.reasons

        # Anything else drops to worst
        afternoon = _score(
            simple_catalog, constraints, lecture, hall, TimeSlot(Day.MONDAY, 15, 17), tracker
        )
        assert afternoon.score == 125
        assert afternoon.category == CandidateCategory.WORST

    def test_light_weekly_workload(self, simple_catalog, constraints, lecture, make_session):
        second = Teacher(id=2, name="Grace Hopper")
        catalog = replace(simple_catalog, teachers=simple_catalog.teachers + (second,))
        tracker = ConflictTracker(
            [
                make_session(
                    id=f"s{start}", teacher_id=2, room_id=9, day=Day.TUESDAY, start=start, end=start + 2
                )
                for start in (9, 11)
            ]
        )

        rating = _score(catalog, constraints, lecture, catalog.rooms[0], self.MONDAY_MORNING, tracker)
        assert rating.score == 220
        assert rating.category == CandidateCategory.BEST
        assert "Balances weekly workload" in rating.reasons

    def test_heavy_weekly_workload(self, simple_catalog, constraints, lecture, make_session):
        second = Teacher(id=2, name="Grace Hopper")
        catalog = replace(simple_catalog, teachers=simple_catalog.teachers + (second,))
        tracker = ConflictTracker(
            [
                make_session(id=f"s{start}", room_id=9, day=Day.TUESDAY, start=start, end=start + 2)
                for start in (9, 11, 13)
            ]
        )

        rating = _score(catalog, constraints, lecture, catalog.rooms[0], self.MONDAY_MORNING, tracker)
        assert rating.score == 190
        assert rating.penalties == 15
        assert rating.category == CandidateCategory.GOOD
        assert "Teacher already heavily loaded" in rating.reasons

    def test_lightly_used_room(self, simple_catalog, constraints, lecture, make_session):
        tracker = ConflictTracker(
            [
                make_session(id="s1", teacher_id=7, room_id=1, day=Day.TUESDAY, start=9, end=11),
                make_session(id="s2", teacher_id=7, room_id=9, day=Day.TUESDAY, start=11, end=13),
                make_session(id="s3", teacher_id=7, room_id=9, day=Day.TUESDAY, start=13, end=15),
            ]
        )
        hall = simple_catalog.rooms[0]

        rating = _score(simple_catalog, constraints, lecture, hall, self.MONDAY_MORNING, tracker)
        assert rating.score == 210
        assert rating.category == CandidateCategory.BEST
        assert "Balances room utilization" in rating.reasons

    def test_heavily_used_room(self, simple_catalog, constraints, lecture, make_session):
        tracker = ConflictTracker(
            [
                make_session(
                    id=f"s{start}", teacher_id=7, room_id=1, day=Day.TUESDAY, start=start, end=start + 2
                )
                for start in (9, 11, 13)
            ]
        )
        hall = simple_catalog.rooms[0]

        rating = _score(simple_catalog, constraints, lecture, hall, self.MONDAY_MORNING, tracker)
        assert rating.score == 175
        assert rating.penalties == 15
        assert rating.category == CandidateCategory.WORST
        assert "Room already heavily used" in rating.reasons


class TestGroupedRoomTerms:
    """Tests for the room terms that only apply to grouped lectures."""

    @pytest.fixture
    def grouped(self, shared_course_catalog):
        constraints = ScheduleConstraints(max_end_time=19, group_same_course_classes=True)
        return build_requirements(shared_course_catalog, constraints)[0], constraints

    def test_room_bottleneck_with_one_competing_session(
        self, shared_course_catalog, grouped, make_session
    ):
        requirement, constraints = grouped
        tracker = ConflictTracker(
            [
                make_session(id="g", teacher_id=7, room_id=1, day=Day.TUESDAY, group_id="g1"),
                make_session(
                    id="n2", teacher_id=7, room_id=2, day=Day.TUESDAY, start=11, end=13,
                    session_type=SessionType.SEMINAR, course_name="Networks",
                ),
                make_session(
                    id="n3", teacher_id=7, room_id=3, day=Day.TUESDAY, start=13, end=15,
                    session_type=SessionType.SEMINAR, course_name="Networks",
                ),
            ]
        )
        hall = shared_course_catalog.rooms[0]

        rating = _score(
            shared_course_catalog, constraints, requirement, hall, TimeSlot(Day.MONDAY, 9, 11), tracker
        )
        assert rating.score == 185
        assert rating.penalties == 20
        assert rating.category == CandidateCategory.BEST
        assert "Risk of room bottleneck" in rating.reasons
        assert "Limited competition in this room" in rating.reasons

    def test_multiple_competing_grouped_sessions(self, shared_course_catalog, grouped, make_session):
        requirement, constraints = grouped
        tracker = ConflictTracker(
            [
                make_session(
                    id="g1", teacher_id=7, room_id=1, day=Day.TUESDAY,
                    group_id="g1", course_name="Networks",
                ),
                make_session(
                    id="g2", teacher_id=7, room_id=1, day=Day.TUESDAY, start=11, end=13,
                    group_id="g2", course_name="Networks",
                ),
                make_session(
                    id="n2", teacher_id=7, room_id=2, day=Day.WEDNESDAY,
                    session_type=SessionType.SEMINAR, course_name="Networks",
                ),
                make_session(
                    id="n3", teacher_id=7, room_id=3, day=Day.WEDNESDAY, start=11, end=13,
                    session_type=SessionType.SEMINAR, course_name="Networks",
                ),
                make_session(
                    id="n4", teacher_id=7, room_id=2, day=Day.THURSDAY,
                    session_type=SessionType.SEMINAR, course_name="Networks",
                ),
            ]
        )
        hall = shared_course_catalog.rooms[0]

        rating = _score(
            shared_course_catalog, constraints, requirement, hall, TimeSlot(Day.MONDAY, 9, 11), tracker
        )
        assert rating.score == 205
        assert rating.penalties == 20
        assert rating.category == CandidateCategory.WORST
        assert "Promotes room diversity for course" in rating.reasons
        assert "Room already has multiple grouped sessions" in rating.reasons


class TestGenerateCandidates:
    """Tests for generate_candidates function."""

    def test_full_menu(self, simple_catalog, constraints, lecture):
        scorer = SlotScorer(simple_catalog, constraints)
        candidates = generate_candidates(
            lecture, simple_catalog.teachers[0], [simple_catalog.rooms[0]], scorer, ConflictTracker()
        )
        assert len(candidates) == 50
        first = candidates[0]
        assert (first.slot.day, first.slot.start, first.room.name) == (Day.MONDAY, 8, "Hall A")

    def test_max_end_filter(self, simple_catalog, lecture):
        scorer = SlotScorer(simple_catalog, ScheduleConstraints(max_end_time=15))
        candidates = generate_candidates(
            lecture, simple_catalog.teachers[0], [simple_catalog.rooms[0]], scorer, ConflictTracker()
        )
        assert len(candidates) == 30
        assert all(c.slot.end <= 15 for c in candidates)

    def test_duration_mismatch_rejected(self, simple_catalog, lecture):
        scorer = SlotScorer(simple_catalog, ScheduleConstraints(max_end_time=19, lecture_session_length=3))
        candidates = generate_candidates(
            lecture, simple_catalog.teachers[0], simple_catalog.rooms, scorer, ConflictTracker()
        )
        assert candidates == []

    def test_busy_teacher_leaves_no_candidates(self, simple_catalog, lecture, make_session):
        scorer = SlotScorer(simple_catalog, ScheduleConstraints(max_end_time=11))
        tracker = ConflictTracker(
            [
                make_session(id=f"s{i}", class_id=10 + i, room_id=9, day=day, start=9, end=11)
                for i, day in enumerate(WEEKDAYS)
            ]
        )
        candidates = generate_candidates(
            lecture, simple_catalog.teachers[0], [simple_catalog.rooms[0]], scorer, tracker
        )
        assert candidates == []

    def test_busy_class_blocks_overlapping_windows(self, simple_catalog, constraints, lecture, make_session):
        scorer = SlotScorer(simple_catalog, constraints)
        tracker = ConflictTracker([make_session(teacher_id=7, room_id=9, start=10, end=12)])
        candidates = generate_candidates(
            lecture, simple_catalog.teachers[0], [simple_catalog.rooms[0]], scorer, tracker
        )
        monday_starts = [c.slot.start for c in candidates if c.slot.day == Day.MONDAY]
        assert monday_starts == [8, 12, 13, 14, 15, 16, 17]


class TestCandidatePicking:
    """Tests for rank_candidates and pick_best_candidate functions."""

    def _candidate(self, simple_catalog, start, score, category):
        return SlotCandidate(
            slot=TimeSlot(Day.MONDAY, start, start + 2),
            teacher=simple_catalog.teachers[0],
            room=simple_catalog.rooms[0],
            rating=SlotScore(score=score, category=category),
        )

    def test_category_before_score(self, simple_catalog):
        candidates = [
            self._candidate(simple_catalog, 8, 300, CandidateCategory.GOOD),
            self._candidate(simple_catalog, 9, 150, CandidateCategory.BEST),
            self._candidate(simple_catalog, 10, 200, CandidateCategory.BEST),
            self._candidate(simple_catalog, 11, 200, CandidateCategory.BEST),
            self._candidate(simple_catalog, 12, 400, CandidateCategory.WORST),
        ]
        ranked = rank_candidates(candidates)
        assert [c.slot.start for c in ranked] == [10, 11, 9, 8, 12]
        assert pick_best_candidate(candidates).slot.start == 10

    def test_no_candidates(self):
        assert pick_best_candidate([]) is None
