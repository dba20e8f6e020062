"""Staff pool preprocessing for a generation run."""

from guardroster.domain.models import (
    DEFAULT_MAX_SHIFTS,
    HospitalShiftConfig,
    StaffCandidate,
    StaffMember,
)


def effective_max_shifts(staff: StaffMember, config: HospitalShiftConfig) -> int:
    """Monthly quota: personal override, else hospital default, else 10."""
    return staff.max_guards_per_month or config.max_shifts_per_month or DEFAULT_MAX_SHIFTS


def preprocess_staff(
    staff: list[StaffMember],
    config: HospitalShiftConfig,
) -> list[StaffCandidate]:
    """Build fresh scheduling candidates from staff records.

    Constraint lists become sets for constant-time lookups and all tracking
    state starts at zero. The input records are not modified.
    """
    return [
        StaffCandidate(
            staff=member,
            max_shifts=effective_max_shifts(member, config),
            unavailable=frozenset(member.unavailable),
            preferred=frozenset(member.preferred_shift_types),
            avoided=frozenset(member.avoided_shift_types),
        )
        for member in staff
    ]
