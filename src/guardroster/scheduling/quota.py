"""Advisory fair-quota calculation.

Quotas are informational figures for display; the scheduler does not
enforce them.
"""

import math
from collections import Counter

from guardroster.domain.models import (
    Day,
    HospitalShiftConfig,
    ShiftQuota,
    StaffMember,
    StaffQuota,
)


def calculate_fair_quotas(
    staff: list[StaffMember],
    days: list[Day],
    config: HospitalShiftConfig,
) -> list[StaffQuota]:
    """Split the month's required slots evenly across staff.

    The total is floor-divided, with the remainder going one each to the
    first staff in input order. Per-type quotas are ceiling-divided.

    Args:
        staff: Staff roster.
        days: Generated days with required shifts.
        config: Hospital configuration.

    Returns:
        Staff annotated with their quota, in input order.
    """
    if not staff:
        return []

    by_type = Counter(shift.id for day in days for shift in day.required_shifts)
    total_shifts = sum(by_type.values())
    staff_count = len(staff)
    base_quota, remainder = divmod(total_shifts, staff_count)

    type_quota = {
        shift_id: math.ceil(count / staff_count) for shift_id, count in by_type.items()
    }

    return [
        StaffQuota(
            staff=member,
            quota=ShiftQuota(
                total=base_quota + 1 if index < remainder else base_quota,
                by_type=dict(type_quota),
            ),
        )
        for index, member in enumerate(staff)
    ]
