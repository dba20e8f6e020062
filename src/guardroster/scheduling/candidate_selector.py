"""Candidate filtering, scoring and selection for a single shift slot.

For each slot the selector:
1. Filters the pool down to candidates satisfying every constraint
2. Scores them with the scoring policy (lower is better)
3. Falls back to relaxed constraints when nobody qualifies
4. Picks the lowest score, earlier pool position winning ties
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from guardroster.domain.models import (
    Day,
    HospitalShiftConfig,
    ShiftType,
    StaffCandidate,
)
from guardroster.domain.policies import DefaultScoringPolicy, ScoringPolicy
from guardroster.scheduling.rest_calculator import RestIntervalCalculator

logger = logging.getLogger(__name__)


@dataclass
class ScoredCandidate:
    """A candidate with its score for one slot."""

    candidate: StaffCandidate
    score: float
    emergency: bool = False


class CandidateSelector:
    """Greedy selector picking one candidate per shift slot.

    Hard constraints checked in the regular pass:
    - not unavailable on the date
    - under the monthly quota
    - shift type not avoided
    - enough rest since the end of the previous shift
    - night streak below the hospital limit (night shifts)
    - no 24h guard the day right after another 24h guard
    """

    def __init__(
        self,
        config: HospitalShiftConfig,
        rest_calculator: Optional[RestIntervalCalculator] = None,
        scoring_policy: Optional[ScoringPolicy] = None,
    ):
        self.config = config
        self.rest_calculator = rest_calculator or RestIntervalCalculator()
        self.scoring_policy = scoring_policy or DefaultScoringPolicy()

    def select(
        self,
        day: Day,
        shift_type: ShiftType,
        pool: list[StaffCandidate],
    ) -> Optional[ScoredCandidate]:
        """Pick the best candidate for a slot.

        Args:
            day: The day of the slot.
            shift_type: Shift type of the slot.
            pool: Candidates in tie-break order.

        Returns:
            The winning candidate, flagged as emergency if it came from the
            relaxed pass, or None if nobody can take the slot.
        """
        scored = self.eligible_candidates(day, shift_type, pool)
        if not scored:
            scored = self.emergency_candidates(day, shift_type, pool)
            if scored:
                logger.debug(
                    "No eligible staff for %s on %s, using emergency fallback",
                    shift_type.id, day.date,
                )

        if not scored:
            return None

        # min() keeps the first of equal scores, so pool order breaks ties
        return min(scored, key=lambda s: s.score)

    def eligible_candidates(
        self,
        day: Day,
        shift_type: ShiftType,
        pool: list[StaffCandidate],
    ) -> list[ScoredCandidate]:
        """Score every candidate passing all hard constraints."""
        scored = []
        for candidate in pool:
            if not self.is_eligible(candidate, day.date, shift_type):
                continue
            scored.append(
                ScoredCandidate(
                    candidate=candidate,
                    score=self.scoring_policy.score(
                        candidate,
                        shift_type,
                        day.is_weekend,
                        self._days_since_last_shift(candidate, day.date),
                    ),
                )
            )
        return scored

    def emergency_candidates(
        self,
        day: Day,
        shift_type: ShiftType,
        pool: list[StaffCandidate],
    ) -> list[ScoredCandidate]:
        """Score candidates under relaxed constraints.

        Only availability and a widened quota apply. Scores are the regular
        ones, rest bonus included, plus a flat penalty.
        """
        overflow = self.config.rules.emergency_quota_overflow
        penalty = self.scoring_policy.emergency_penalty()

        scored = []
        for candidate in pool:
            if not candidate.is_available(day.date):
                continue
            if candidate.total_assigned >= candidate.max_shifts + overflow:
                continue
            score = self.scoring_policy.score(
                candidate,
                shift_type,
                day.is_weekend,
                self._days_since_last_shift(candidate, day.date),
            )
            scored.append(
                ScoredCandidate(candidate=candidate, score=score + penalty, emergency=True)
            )
        return scored

    def is_eligible(
        self,
        candidate: StaffCandidate,
        shift_date: date,
        shift_type: ShiftType,
    ) -> bool:
        """Check every hard constraint for a candidate and slot."""
        if not candidate.is_available(shift_date):
            return False

        if candidate.total_assigned >= candidate.max_shifts:
            return False

        if shift_type.id in candidate.avoided:
            return False

        if candidate.has_history:
            rest = self.rest_calculator.hours_between(
                candidate.last_shift_date,
                candidate.last_shift_type,
                shift_date,
                shift_type,
            )
            if rest < self.config.rules.min_rest_hours:
                return False

        if shift_type.is_night:
            if candidate.consecutive_nights >= self.config.max_consecutive_nights:
                return False

        if shift_type.is_24_hour and candidate.last_24_hour:
            if candidate.last_shift_date == shift_date - timedelta(days=1):
                return False

        return True

    def _days_since_last_shift(
        self,
        candidate: StaffCandidate,
        shift_date: date,
    ) -> Optional[int]:
        if candidate.last_shift_date is None:
            return None
        return (shift_date - candidate.last_shift_date).days
