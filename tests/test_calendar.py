"""Tests for monthly calendar generation."""

from datetime import date

import pytest

from guardroster.domain.models import HospitalShiftConfig
from guardroster.domain.policies import Only24PatternPolicy
from guardroster.scheduling.calendar_generator import (
    CalendarGenerator,
    generate_days_for_month,
)

SHIFT_TYPES = {
    "GARDA_ZI": {"name": "Gardă Zi", "start": "08:00", "end": "20:00", "duration": 12},
    "NOAPTE": {"name": "Gardă Noapte", "start": "20:00", "end": "08:00", "duration": 12},
    "GARDA_24": {"name": "Gardă 24h", "start": "08:00", "end": "08:00", "duration": 24},
}


def required_ids(days, day_number):
    return [s.id for s in days[day_number - 1].required_shifts]


class TestOnly24Pattern:
    """Every day needs one 24h guard."""

    @pytest.fixture
    def config(self):
        return HospitalShiftConfig.from_dict({
            "hospitalId": "spital2",
            "shiftPattern": "only_24",
            "shiftTypes": {"GARDA_24": SHIFT_TYPES["GARDA_24"]},
        })

    @pytest.mark.parametrize("anchor", [date(2025, 1, 15), date(2024, 2, 1), date(2025, 6, 30)])
    def test_every_day_one_24h_guard(self, config, anchor):
        days = generate_days_for_month(anchor, config)

        assert days
        for day in days:
            assert [s.id for s in day.required_shifts] == ["GARDA_24"]

    def test_leap_february_has_29_days(self, config):
        days = generate_days_for_month(date(2024, 2, 10), config)
        assert len(days) == 29
        assert days[-1].date == date(2024, 2, 29)

    def test_missing_24h_type_leaves_days_empty(self):
        config = HospitalShiftConfig.from_dict({
            "shiftPattern": "only_24",
            "shiftTypes": {"NOAPTE": SHIFT_TYPES["NOAPTE"]},
        })
        days = generate_days_for_month(date(2025, 1, 1), config)

        assert len(days) == 31
        assert all(day.required_shifts == [] for day in days)


class TestStandard1224Pattern:
    """January 2025 under the standard 12/24 pattern."""

    @pytest.fixture
    def days(self):
        config = HospitalShiftConfig.from_dict({
            "hospitalId": "spital1",
            "shiftPattern": "standard_12_24",
            "shiftTypes": SHIFT_TYPES,
        })
        return generate_days_for_month(date(2025, 1, 1), config)

    def test_month_length_and_order(self, days):
        assert len(days) == 31
        assert [d.date.day for d in days] == list(range(1, 32))

    def test_monday_night_only(self, days):
        assert required_ids(days, 6) == ["NOAPTE"]

    def test_second_saturday_24h(self, days):
        assert required_ids(days, 11) == ["GARDA_24"]

    def test_third_saturday_24h(self, days):
        assert required_ids(days, 18) == ["GARDA_24"]

    def test_other_saturdays_day_and_night(self, days):
        assert required_ids(days, 4) == ["GARDA_ZI", "NOAPTE"]
        assert required_ids(days, 25) == ["GARDA_ZI", "NOAPTE"]

    def test_sunday_day_and_night(self, days):
        assert required_ids(days, 5) == ["GARDA_ZI", "NOAPTE"]

    def test_last_friday_24h(self, days):
        assert required_ids(days, 31) == ["GARDA_24"]
        assert required_ids(days, 24) == ["NOAPTE"]

    def test_day_metadata(self, days):
        sunday = days[4]
        assert sunday.day_of_week == 0
        assert sunday.day_name == "Duminică"
        assert sunday.is_weekend is True

        saturday = days[10]
        assert saturday.day_of_week == 6
        assert saturday.day_name == "Sâmbătă"

        assert days[0].day_name == "Miercuri"
        assert days[0].is_weekend is False

    def test_to_dict(self, days):
        data = days[4].to_dict()

        assert data["date"] == "2025-01-05"
        assert data["dayOfWeek"] == 0
        assert data["dayName"] == "Duminică"
        assert [s["id"] for s in data["requiredShifts"]] == ["GARDA_ZI", "NOAPTE"]


class TestCustomPattern:
    """Configured weekday/weekend/holiday lists."""

    @pytest.fixture
    def config(self):
        return HospitalShiftConfig.from_dict({
            "shiftPattern": "custom",
            "shiftTypes": SHIFT_TYPES,
            "weekdayShifts": ["GARDA_ZI", "MISSING", "NOAPTE"],
            "weekendShifts": ["GARDA_24"],
            "holidayShifts": ["GARDA_24"],
            "holidays": ["2025-01-01", "2025-01-02"],
        })

    def test_unknown_ids_dropped(self, config):
        days = generate_days_for_month(date(2025, 1, 1), config)
        assert required_ids(days, 3) == ["GARDA_ZI", "NOAPTE"]

    def test_weekend_list(self, config):
        days = generate_days_for_month(date(2025, 1, 1), config)
        assert required_ids(days, 4) == ["GARDA_24"]
        assert required_ids(days, 5) == ["GARDA_24"]

    def test_holidays(self, config):
        days = generate_days_for_month(date(2025, 1, 1), config)
        assert required_ids(days, 1) == ["GARDA_24"]
        assert required_ids(days, 2) == ["GARDA_24"]


class TestCalendarGenerator:
    """Tests for the CalendarGenerator class."""

    @pytest.fixture
    def config(self):
        return HospitalShiftConfig.from_dict({
            "shiftPattern": "standard_12_24",
            "shiftTypes": SHIFT_TYPES,
        })

    def test_generation_is_idempotent(self, config):
        generator = CalendarGenerator()
        first = generator.generate_days_for_month(date(2025, 3, 1), config)
        second = generator.generate_days_for_month(date(2025, 3, 1), config)

        assert first == second
        assert [d.to_dict() for d in first] == [d.to_dict() for d in second]

    def test_anchor_day_does_not_matter(self, config):
        generator = CalendarGenerator()
        assert generator.generate_days_for_month(
            date(2025, 3, 1), config
        ) == generator.generate_days_for_month(date(2025, 3, 31), config)

    def test_policy_override(self, config):
        generator = CalendarGenerator(pattern_policy=Only24PatternPolicy())
        days = generator.generate_days_for_month(date(2025, 1, 1), config)

        assert all([s.id for s in d.required_shifts] == ["GARDA_24"] for d in days)
