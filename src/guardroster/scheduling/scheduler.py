"""Main scheduler interface.

This module provides the high-level ShiftScheduler class that orchestrates
calendar generation, staff preprocessing and greedy slot assignment.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from guardroster.domain.models import (
    UNFILLED_NOTE,
    AssignedShift,
    Day,
    DayResult,
    ExistingShift,
    HospitalShiftConfig,
    ShiftType,
    StaffCandidate,
    StaffMember,
)
from guardroster.domain.policies import (
    DefaultScoringPolicy,
    ScoringPolicy,
    ShiftPatternPolicy,
    day_of_week,
)
from guardroster.scheduling.calendar_generator import CalendarGenerator
from guardroster.scheduling.candidate_selector import CandidateSelector
from guardroster.scheduling.preprocessor import preprocess_staff
from guardroster.scheduling.rest_calculator import (
    DEFAULT_CACHE_CAPACITY,
    RestIntervalCalculator,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerationRun:
    """Mutable state owned by a single generation run.

    Attributes:
        pool: Candidates in tie-break order.
        rest_calculator: Rest-hours cache for this run only.
        sequence: Counter used to build unique shift ids.
    """

    pool: list[StaffCandidate]
    rest_calculator: RestIntervalCalculator
    sequence: int = 0
    _by_id: dict[str, StaffCandidate] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._by_id = {c.id: c for c in self.pool}

    def candidate(self, staff_id: str) -> Optional[StaffCandidate]:
        return self._by_id.get(staff_id)

    def next_shift_id(self, shift_date: date, shift_type: ShiftType, staff_id: str) -> str:
        self.sequence += 1
        return f"{shift_date.isoformat()}-{shift_type.id}-{staff_id}-{self.sequence}"


def update_tracking(
    candidate: StaffCandidate,
    shift_date: date,
    shift_type: ShiftType,
    rest_calculator: RestIntervalCalculator,
) -> None:
    """Record an assignment in a candidate's run state."""
    previous_date = candidate.last_shift_date
    previous_type = candidate.last_shift_type

    candidate.total_assigned += 1

    if day_of_week(shift_date) in (0, 6):
        candidate.weekend_shifts += 1

    if shift_type.is_night:
        candidate.consecutive_nights += 1
    elif previous_date is not None and previous_type is not None:
        # A day shift right after a night with minimal rest keeps the streak
        rest = rest_calculator.hours_between(
            previous_date, previous_type, shift_date, shift_type
        )
        if rest >= 24:
            candidate.consecutive_nights = 0

    candidate.last_shift_date = shift_date
    candidate.last_shift_type = shift_type
    candidate.last_24_hour = shift_type.is_24_hour
    candidate.base_priority = candidate.total_assigned * 100


class ShiftScheduler:
    """High-level scheduler for generating monthly guard schedules.

    The ShiftScheduler coordinates calendar generation and greedy
    assignment to produce fair schedules that respect rest, quota and
    availability constraints. It never backtracks; slots nobody can take
    are reported as unfilled.

    Example:
        >>> scheduler = ShiftScheduler()
        >>> days = scheduler.generate_days_for_month(date(2025, 1, 1), config)
        >>> schedule = scheduler.generate_schedule(staff, days, config)
    """

    def __init__(
        self,
        scoring_policy: Optional[ScoringPolicy] = None,
        pattern_policy: Optional[ShiftPatternPolicy] = None,
        cache_capacity: int = DEFAULT_CACHE_CAPACITY,
    ):
        """Initialize scheduler with policies.

        Args:
            scoring_policy: Policy ranking candidates for a slot.
            pattern_policy: Policy overriding the hospital's shift pattern.
            cache_capacity: Size of the per-run rest-hours cache.
        """
        self.scoring_policy = scoring_policy or DefaultScoringPolicy()
        self.cache_capacity = cache_capacity
        self.calendar_generator = CalendarGenerator(pattern_policy=pattern_policy)

    def generate_days_for_month(
        self,
        month_anchor: date,
        config: HospitalShiftConfig,
    ) -> list[Day]:
        """Generate the required-shift calendar for the anchor's month."""
        return self.calendar_generator.generate_days_for_month(month_anchor, config)

    def generate_schedule(
        self,
        staff: list[StaffMember],
        days: list[Day],
        config: HospitalShiftConfig,
        existing_shifts: Optional[dict[date, list[ExistingShift]]] = None,
    ) -> list[DayResult]:
        """Assign staff to every required shift of every day.

        Args:
            staff: Staff roster.
            days: Days to schedule, in calendar order.
            config: Hospital configuration.
            existing_shifts: Stored shifts by date. Those already holding
                staff are kept as they are.

        Returns:
            One DayResult per day, in calendar order.
        """
        existing_shifts = existing_shifts or {}
        pool = preprocess_staff(staff, config)
        pool.sort(key=lambda c: c.base_priority)

        run = GenerationRun(
            pool=pool,
            rest_calculator=RestIntervalCalculator(self.cache_capacity),
        )
        selector = CandidateSelector(
            config,
            rest_calculator=run.rest_calculator,
            scoring_policy=self.scoring_policy,
        )
        names = {member.id: member.name for member in staff}

        logger.info(
            "Generating schedule for hospital %s: %d days, %d staff",
            config.hospital_id or "?", len(days), len(staff),
        )

        result = []
        for day in days:
            day_result = DayResult(date=day.date)

            covered = self._carry_over(
                day, existing_shifts.get(day.date, []), run, names, day_result
            )

            for shift_type in day.required_shifts:
                if shift_type.id in covered:
                    continue
                day_result.shifts.append(
                    self._fill_slot(day, shift_type, run, selector)
                )

            result.append(day_result)

        unfilled = sum(1 for d in result for s in d.shifts if not s.is_filled)
        logger.info(
            "Schedule generated: %d shifts, %d unfilled, rest cache %d hits / %d misses",
            sum(len(d.shifts) for d in result), unfilled,
            run.rest_calculator.hits, run.rest_calculator.misses,
        )
        return result

    def generate_schedule_with_stats(
        self,
        staff: list[StaffMember],
        days: list[Day],
        config: HospitalShiftConfig,
        existing_shifts: Optional[dict[date, list[ExistingShift]]] = None,
    ) -> tuple[list[DayResult], dict]:
        """Generate schedule and return statistics.

        Returns:
            Tuple of (schedule, stats_dict).
        """
        schedule = self.generate_schedule(staff, days, config, existing_shifts)
        return schedule, self._calculate_stats(schedule, staff)

    def _carry_over(
        self,
        day: Day,
        existing: list[ExistingShift],
        run: GenerationRun,
        names: dict[str, str],
        day_result: DayResult,
    ) -> set[str]:
        """Copy stored assigned shifts into the day and track their staff.

        Returns:
            Ids of the shift types now covered.
        """
        covered: set[str] = set()
        for shift in existing:
            if not shift.is_assigned:
                continue
            if shift.shift_type.id in covered:
                logger.warning(
                    "Dropping duplicate stored %s shift on %s",
                    shift.shift_type.id, day.date,
                )
                continue
            covered.add(shift.shift_type.id)

            assignee_id = shift.staff_ids[0]
            day_result.shifts.append(
                AssignedShift(
                    shift_id=shift.shift_id or f"{day.date.isoformat()}-{shift.shift_type.id}",
                    shift_type=shift.shift_type,
                    assignee_id=assignee_id,
                    assignee_name=names.get(assignee_id),
                    status=shift.status,
                    note=shift.status,
                    staff_ids=list(shift.staff_ids),
                    carried_over=True,
                )
            )

            for staff_id in shift.staff_ids:
                candidate = run.candidate(staff_id)
                if candidate is not None:
                    update_tracking(candidate, day.date, shift.shift_type, run.rest_calculator)

        return covered

    def _fill_slot(
        self,
        day: Day,
        shift_type: ShiftType,
        run: GenerationRun,
        selector: CandidateSelector,
    ) -> AssignedShift:
        """Select a candidate for one slot, or emit an unfilled slot."""
        chosen = selector.select(day, shift_type, run.pool)
        if chosen is None:
            logger.warning("No available staff for %s on %s", shift_type.id, day.date)
            return AssignedShift(
                shift_id=f"{day.date.isoformat()}-{shift_type.id}-unfilled",
                shift_type=shift_type,
                status="open",
                note=UNFILLED_NOTE,
            )

        candidate = chosen.candidate
        update_tracking(candidate, day.date, shift_type, run.rest_calculator)
        logger.debug(
            "%s %s -> %s (score %.0f%s)",
            day.date, shift_type.id, candidate.id, chosen.score,
            ", emergency" if chosen.emergency else "",
        )

        return AssignedShift(
            shift_id=run.next_shift_id(day.date, shift_type, candidate.id),
            shift_type=shift_type,
            assignee_id=candidate.id,
            assignee_name=candidate.name,
            status="generated",
            note="emergency" if chosen.emergency else None,
            staff_ids=[candidate.id],
            emergency=chosen.emergency,
        )

    def _calculate_stats(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
    ) -> dict:
        """Calculate schedule statistics."""
        shifts = [s for day in schedule for s in day.shifts]
        per_staff = Counter(s.assignee_id for s in shifts if s.is_filled)
        totals = [per_staff.get(member.id, 0) for member in staff]

        return {
            "total_shifts": len(shifts),
            "filled_shifts": sum(1 for s in shifts if s.is_filled),
            "unfilled_shifts": sum(1 for s in shifts if not s.is_filled),
            "emergency_shifts": sum(1 for s in shifts if s.emergency),
            "carried_over_shifts": sum(1 for s in shifts if s.carried_over),
            "shifts_per_staff": {member.id: per_staff.get(member.id, 0) for member in staff},
            "min_per_staff": min(totals) if totals else 0,
            "max_per_staff": max(totals) if totals else 0,
        }


def generate_schedule(
    staff: list[StaffMember],
    days: list[Day],
    config: HospitalShiftConfig,
    existing_shifts: Optional[dict[date, list[ExistingShift]]] = None,
) -> list[DayResult]:
    """Assign staff to the required shifts of the given days."""
    return ShiftScheduler().generate_schedule(staff, days, config, existing_shifts)
