"""Domain models and business rules for guard scheduling."""

from guardroster.domain.models import (
    AssignedShift,
    Day,
    DayResult,
    ExistingShift,
    HospitalRules,
    HospitalShiftConfig,
    ShiftCategory,
    ShiftPattern,
    ShiftQuota,
    ShiftType,
    StaffCandidate,
    StaffMember,
    StaffQuota,
)
from guardroster.domain.policies import (
    CustomPatternPolicy,
    DefaultScoringPolicy,
    Only24PatternPolicy,
    ScoringPolicy,
    ShiftPatternPolicy,
    Standard1224PatternPolicy,
    get_pattern_policy,
)

__all__ = [
    # Models
    "AssignedShift",
    "Day",
    "DayResult",
    "ExistingShift",
    "HospitalRules",
    "HospitalShiftConfig",
    "ShiftCategory",
    "ShiftPattern",
    "ShiftQuota",
    "ShiftType",
    "StaffCandidate",
    "StaffMember",
    "StaffQuota",
    # Policies
    "CustomPatternPolicy",
    "DefaultScoringPolicy",
    "Only24PatternPolicy",
    "ScoringPolicy",
    "ShiftPatternPolicy",
    "Standard1224PatternPolicy",
    "get_pattern_policy",
]
