"""Tests for candidate filtering and selection."""

from datetime import date

import pytest

from guardroster.domain.models import Day, HospitalShiftConfig, StaffMember
from guardroster.domain.policies import day_of_week
from guardroster.scheduling.candidate_selector import CandidateSelector
from guardroster.scheduling.preprocessor import preprocess_staff

SHIFT_TYPES = {
    "GARDA_ZI": {"start": "08:00", "end": "20:00", "duration": 12},
    "NOAPTE": {"start": "20:00", "end": "08:00", "duration": 12},
    "GARDA_24": {"start": "08:00", "end": "08:00", "duration": 24},
}


def make_config(**extra) -> HospitalShiftConfig:
    return HospitalShiftConfig.from_dict(
        {"shiftPattern": "custom", "shiftTypes": SHIFT_TYPES, **extra}
    )


def make_day(d: date, config: HospitalShiftConfig, *shift_ids: str) -> Day:
    return Day(
        date=d,
        day_of_week=day_of_week(d),
        day_name="",
        required_shifts=config.resolve_shift_types(list(shift_ids)),
    )


class TestIsEligible:
    """Hard constraints of the regular pass."""

    @pytest.fixture
    def config(self):
        return make_config(maxConsecutiveNights=1)

    @pytest.fixture
    def selector(self, config):
        return CandidateSelector(config)

    @pytest.fixture
    def candidate(self, config):
        member = StaffMember(
            id="1",
            name="Dr. Popescu",
            unavailable=[date(2025, 1, 11)],
            avoided_shift_types=["GARDA_24"],
        )
        return preprocess_staff([member], config)[0]

    def test_fresh_candidate_eligible(self, selector, candidate, config):
        assert selector.is_eligible(candidate, date(2025, 1, 6), config.shift_types["NOAPTE"])

    def test_unavailable_date(self, selector, candidate, config):
        assert not selector.is_eligible(
            candidate, date(2025, 1, 11), config.shift_types["NOAPTE"]
        )

    def test_quota_reached(self, selector, candidate, config):
        candidate.total_assigned = candidate.max_shifts
        assert not selector.is_eligible(
            candidate, date(2025, 1, 6), config.shift_types["NOAPTE"]
        )

    def test_avoided_type(self, selector, candidate, config):
        assert not selector.is_eligible(
            candidate, date(2025, 1, 6), config.shift_types["GARDA_24"]
        )

    def test_insufficient_rest(self, selector, candidate, config):
        candidate.last_shift_date = date(2025, 1, 5)
        candidate.last_shift_type = config.shift_types["NOAPTE"]

        # Night ends 08:00 on the 6th, day shift starts 08:00
        assert not selector.is_eligible(
            candidate, date(2025, 1, 6), config.shift_types["GARDA_ZI"]
        )

    def test_enough_rest(self, selector, candidate, config):
        candidate.last_shift_date = date(2025, 1, 5)
        candidate.last_shift_type = config.shift_types["GARDA_ZI"]

        assert selector.is_eligible(
            candidate, date(2025, 1, 6), config.shift_types["GARDA_ZI"]
        )

    def test_night_streak_limit(self, selector, candidate, config):
        candidate.consecutive_nights = 1

        assert not selector.is_eligible(
            candidate, date(2025, 1, 6), config.shift_types["NOAPTE"]
        )
        assert selector.is_eligible(
            candidate, date(2025, 1, 6), config.shift_types["GARDA_ZI"]
        )

    def test_no_24h_after_24h(self):
        config = make_config(rules={"minRestHours": 0})
        selector = CandidateSelector(config)
        candidate = preprocess_staff([StaffMember(id="1", name="A")], config)[0]
        candidate.last_shift_date = date(2025, 1, 5)
        candidate.last_shift_type = config.shift_types["GARDA_24"]
        candidate.last_24_hour = True

        assert not selector.is_eligible(
            candidate, date(2025, 1, 6), config.shift_types["GARDA_24"]
        )
        assert selector.is_eligible(
            candidate, date(2025, 1, 7), config.shift_types["GARDA_24"]
        )

    def test_day_shift_after_weekend_24h(self):
        config = make_config(rules={"minRestHours": 24})
        selector = CandidateSelector(config)
        candidate = preprocess_staff([StaffMember(id="1", name="A")], config)[0]
        candidate.last_shift_date = date(2025, 1, 11)
        candidate.last_shift_type = config.shift_types["GARDA_24"]
        candidate.last_24_hour = True

        # Saturday's 08:00-08:00 guard ends Saturday 08:00
        assert selector.is_eligible(
            candidate, date(2025, 1, 12), config.shift_types["GARDA_ZI"]
        )


class TestSelect:
    """Scoring, tie-breaks and the emergency fallback."""

    @pytest.fixture
    def config(self):
        return make_config(maxShiftsPerMonth=2)

    @pytest.fixture
    def pool(self, config):
        staff = [StaffMember(id=str(i), name=f"Staff {i}") for i in range(1, 4)]
        return preprocess_staff(staff, config)

    def test_ties_resolve_by_pool_order(self, config, pool):
        day = make_day(date(2025, 1, 6), config, "NOAPTE")
        chosen = CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool)

        assert chosen.candidate.id == "1"
        assert chosen.score == 0
        assert chosen.emergency is False

    def test_lowest_score_wins(self, config, pool):
        pool[0].total_assigned = 1
        pool[0].base_priority = 100
        day = make_day(date(2025, 1, 6), config, "NOAPTE")

        chosen = CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool)
        assert chosen.candidate.id == "2"

    def test_preference_wins(self, config):
        staff = [
            StaffMember(id="1", name="A"),
            StaffMember(id="2", name="B", preferred_shift_types=["NOAPTE"]),
        ]
        pool = preprocess_staff(staff, config)
        day = make_day(date(2025, 1, 6), config, "NOAPTE")

        chosen = CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool)
        assert chosen.candidate.id == "2"
        assert chosen.score == -5000

    def test_weekend_load_spreads(self, config, pool):
        pool[0].weekend_shifts = 1
        day = make_day(date(2025, 1, 4), config, "NOAPTE")

        chosen = CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool)
        assert chosen.candidate.id == "2"

    def test_emergency_when_everyone_at_quota(self, config, pool):
        for candidate in pool:
            candidate.total_assigned = 2
            candidate.base_priority = 200
        pool[2].total_assigned = 3
        pool[2].base_priority = 300
        day = make_day(date(2025, 1, 6), config, "NOAPTE")

        chosen = CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool)

        assert chosen.emergency is True
        assert chosen.candidate.id == "1"
        assert chosen.score == 200 + 2000 + 10000

    def test_emergency_ignores_rest_and_avoidance(self, config):
        member = StaffMember(id="1", name="A", avoided_shift_types=["GARDA_ZI"])
        pool = preprocess_staff([member], config)
        pool[0].last_shift_date = date(2025, 1, 5)
        pool[0].last_shift_type = config.shift_types["NOAPTE"]
        pool[0].total_assigned = 1
        day = make_day(date(2025, 1, 6), config, "GARDA_ZI")

        chosen = CandidateSelector(config).select(day, config.shift_types["GARDA_ZI"], pool)

        assert chosen is not None
        assert chosen.emergency is True

    def test_emergency_prefers_longer_rest(self, config):
        staff = [
            StaffMember(id="B", name="B", avoided_shift_types=["GARDA_ZI"]),
            StaffMember(id="A", name="A", avoided_shift_types=["GARDA_ZI"]),
        ]
        pool = preprocess_staff(staff, config)
        for candidate, last in zip(pool, (date(2025, 1, 9), date(2025, 1, 5))):
            candidate.total_assigned = 1
            candidate.base_priority = 100
            candidate.last_shift_date = last
            candidate.last_shift_type = config.shift_types["GARDA_ZI"]
        day = make_day(date(2025, 1, 10), config, "GARDA_ZI")

        chosen = CandidateSelector(config).select(day, config.shift_types["GARDA_ZI"], pool)

        assert chosen.emergency is True
        assert chosen.candidate.id == "A"
        assert chosen.score == 100 + 1000 - 500 + 10000

    def test_emergency_respects_availability(self, config):
        member = StaffMember(id="1", name="A", unavailable=[date(2025, 1, 6)])
        pool = preprocess_staff([member], config)
        day = make_day(date(2025, 1, 6), config, "NOAPTE")

        assert CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool) is None

    def test_emergency_respects_widened_quota(self, config, pool):
        for candidate in pool:
            candidate.total_assigned = 4
        day = make_day(date(2025, 1, 6), config, "NOAPTE")

        assert CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool) is None

    def test_zero_overflow_disables_emergency(self, pool):
        config = make_config(maxShiftsPerMonth=2, rules={"emergencyQuotaOverflow": 0})
        for candidate in pool:
            candidate.total_assigned = 2
        day = make_day(date(2025, 1, 6), config, "NOAPTE")

        assert CandidateSelector(config).select(day, config.shift_types["NOAPTE"], pool) is None

    def test_empty_pool(self, config):
        day = make_day(date(2025, 1, 6), config, "NOAPTE")
        assert CandidateSelector(config).select(day, config.shift_types["NOAPTE"], []) is None
