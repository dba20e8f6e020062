"""Policy definitions for scheduling rules.

This module contains configurable policies that define business rules
for which shifts a day requires and how candidates are ranked. Policies are
kept separate from the scheduling engine to allow independent testing and
easy modification.
"""

import calendar
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional

from guardroster.domain.models import (
    HospitalShiftConfig,
    ShiftPattern,
    ShiftType,
    StaffCandidate,
)

GARDA_24 = "GARDA_24"
GARDA_ZI = "GARDA_ZI"
NOAPTE = "NOAPTE"


def day_of_week(d: date) -> int:
    """Weekday index with 0 = Sunday .. 6 = Saturday."""
    return (d.weekday() + 1) % 7


class ShiftPatternPolicy(ABC):
    """Abstract base class for shift-pattern policies."""

    @abstractmethod
    def required_shift_ids(self, d: date, config: HospitalShiftConfig) -> list[str]:
        """Get the ids of the shift types required on a date.

        Args:
            d: The calendar date.
            config: Hospital configuration.

        Returns:
            Ordered shift-type ids. Ids may be missing from the hospital's
            shift types; callers drop those.
        """
        pass


class Only24PatternPolicy(ShiftPatternPolicy):
    """Every day is covered by a single 24h guard."""

    def required_shift_ids(self, d: date, config: HospitalShiftConfig) -> list[str]:
        return [GARDA_24]


@dataclass
class Standard1224PatternPolicy(ShiftPatternPolicy):
    """Night guards on weekdays, day + night on weekends, with 24h exceptions.

    - Monday to Thursday: night guard.
    - Friday: night guard, or a 24h guard on the last Friday of the month.
    - Saturday: 24h guard on the special Saturdays (2nd and 3rd by
      default), otherwise day + night guard.
    - Sunday: day + night guard.
    """

    special_saturdays: tuple[int, ...] = (2, 3)
    last_friday_24h: bool = True

    def required_shift_ids(self, d: date, config: HospitalShiftConfig) -> list[str]:
        dow = day_of_week(d)

        if dow == 6:
            saturday_number = (d.day - 1) // 7 + 1
            if saturday_number in self.special_saturdays:
                return [GARDA_24]
            return [GARDA_ZI, NOAPTE]

        if dow == 0:
            return [GARDA_ZI, NOAPTE]

        if dow == 5 and self.last_friday_24h:
            days_in_month = calendar.monthrange(d.year, d.month)[1]
            if d.day + 7 > days_in_month:
                return [GARDA_24]

        return [NOAPTE]


class CustomPatternPolicy(ShiftPatternPolicy):
    """Use the hospital's configured weekday/weekend/holiday lists as-is."""

    def required_shift_ids(self, d: date, config: HospitalShiftConfig) -> list[str]:
        if d in config.holidays and config.holiday_shifts:
            return list(config.holiday_shifts)
        if day_of_week(d) in (0, 6):
            return list(config.weekend_shifts)
        return list(config.weekday_shifts)


def get_pattern_policy(config: HospitalShiftConfig) -> ShiftPatternPolicy:
    """Get the pattern policy matching a hospital's configuration."""
    if config.shift_pattern == ShiftPattern.ONLY_24:
        return Only24PatternPolicy()
    if config.shift_pattern == ShiftPattern.STANDARD_12_24:
        return Standard1224PatternPolicy(
            special_saturdays=config.rules.special_saturdays,
            last_friday_24h=config.rules.last_friday_24h,
        )
    return CustomPatternPolicy()


class ScoringPolicy(ABC):
    """Abstract base class for candidate scoring. Lower scores win."""

    @abstractmethod
    def score(
        self,
        candidate: StaffCandidate,
        shift_type: ShiftType,
        is_weekend: bool,
        days_since_last_shift: Optional[int],
    ) -> float:
        """Score a candidate for a shift slot.

        Args:
            candidate: Candidate with current run state.
            shift_type: Shift type of the slot.
            is_weekend: Whether the slot falls on Saturday or Sunday.
            days_since_last_shift: Whole days since the candidate's previous
                assignment, or None if there is none.

        Returns:
            Score where lower is better.
        """
        pass

    @abstractmethod
    def emergency_penalty(self) -> float:
        """Flat penalty added to candidates found by the relaxed fallback."""
        pass


@dataclass
class DefaultScoringPolicy(ScoringPolicy):
    """Default fairness scoring.

    Score components:
    - base priority (grows by 100 per assigned shift)
    - +1000 per shift already assigned
    - +3000 per weekend shift already worked, for weekend slots
    - -5000 if the shift type is preferred
    - +2000 per night in the current streak, for night slots
    - -100 per day of rest since the last shift, capped at -500
    """

    total_weight: float = 1000
    weekend_weight: float = 3000
    preferred_bonus: float = 5000
    night_streak_weight: float = 2000
    rest_day_bonus: float = 100
    max_rest_bonus: float = 500
    emergency: float = 10000

    def score(
        self,
        candidate: StaffCandidate,
        shift_type: ShiftType,
        is_weekend: bool,
        days_since_last_shift: Optional[int],
    ) -> float:
        score = float(candidate.base_priority)
        score += candidate.total_assigned * self.total_weight

        if is_weekend:
            score += candidate.weekend_shifts * self.weekend_weight

        if shift_type.id in candidate.preferred:
            score -= self.preferred_bonus

        if shift_type.is_night:
            score += candidate.consecutive_nights * self.night_streak_weight

        if days_since_last_shift is not None:
            score -= min(days_since_last_shift * self.rest_day_bonus, self.max_rest_bonus)

        return score

    def emergency_penalty(self) -> float:
        return self.emergency
