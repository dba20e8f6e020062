"""Calendar generation for a scheduling month.

Produces the ordered list of days of a month, each tagged with the shift
types the hospital's pattern requires that day.
"""

import calendar
from datetime import date
from typing import Optional

from guardroster.domain.models import DAY_NAMES, Day, HospitalShiftConfig
from guardroster.domain.policies import (
    ShiftPatternPolicy,
    day_of_week,
    get_pattern_policy,
)


class CalendarGenerator:
    """Generates the required-shift calendar of a month.

    Example:
        >>> generator = CalendarGenerator()
        >>> days = generator.generate_days_for_month(date(2025, 1, 1), config)
        >>> [s.id for s in days[5].required_shifts]
        ['NOAPTE']
    """

    def __init__(self, pattern_policy: Optional[ShiftPatternPolicy] = None):
        """Initialize the generator.

        Args:
            pattern_policy: Policy overriding the one implied by each
                hospital's configured pattern.
        """
        self.pattern_policy = pattern_policy

    def generate_days_for_month(
        self,
        month_anchor: date,
        config: HospitalShiftConfig,
    ) -> list[Day]:
        """Generate every day of the anchor's month.

        Args:
            month_anchor: Any date inside the target month.
            config: Hospital configuration.

        Returns:
            Days in calendar order with their required shift types.
        """
        policy = self.pattern_policy or get_pattern_policy(config)
        year, month = month_anchor.year, month_anchor.month
        days_in_month = calendar.monthrange(year, month)[1]

        days = []
        for day_number in range(1, days_in_month + 1):
            current = date(year, month, day_number)
            dow = day_of_week(current)
            shift_ids = policy.required_shift_ids(current, config)
            days.append(
                Day(
                    date=current,
                    day_of_week=dow,
                    day_name=DAY_NAMES[dow],
                    required_shifts=config.resolve_shift_types(shift_ids),
                )
            )

        return days


def generate_days_for_month(month_anchor: date, config: HospitalShiftConfig) -> list[Day]:
    """Generate the required-shift calendar for the anchor's month."""
    return CalendarGenerator().generate_days_for_month(month_anchor, config)
