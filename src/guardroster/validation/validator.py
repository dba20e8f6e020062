"""Validation module for verifying generated schedules.

The core check reports every shift slot left without an assignee. Optional
constraint checks re-derive each person's sequence of shifts and report
quota, rest, night-streak and availability problems as warnings, so a
schedule is only ever invalid because of unfilled slots.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from guardroster.domain.models import (
    AssignedShift,
    DayResult,
    HospitalShiftConfig,
    StaffMember,
)
from guardroster.scheduling.preprocessor import effective_max_shifts
from guardroster.scheduling.rest_calculator import hours_between, shift_start


class ValidationErrorType(Enum):
    """Types of validation findings."""

    UNFILLED_SHIFT = "unfilled_shift"
    QUOTA_EXCEEDED = "quota_exceeded"
    INSUFFICIENT_REST = "insufficient_rest"
    CONSECUTIVE_NIGHTS_EXCEEDED = "consecutive_nights_exceeded"
    UNAVAILABLE_ASSIGNMENT = "unavailable_assignment"


@dataclass
class ValidationError:
    """A single validation finding."""

    error_type: ValidationErrorType
    message: str
    date: Optional[date] = None
    shift_name: Optional[str] = None
    staff_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.date:
            parts.append(f"{self.date.isoformat()}")
        if self.shift_name:
            parts.append(f"{self.shift_name}:")
        if self.staff_id:
            parts.append(f"Staff {self.staff_id}:")
        parts.append(self.message)
        return " ".join(parts)

    def to_dict(self) -> dict:
        return {
            "type": self.error_type.value,
            "date": self.date.isoformat() if self.date else None,
            "shift": self.shift_name,
            "staffId": self.staff_id,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: ValidationError) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


class ScheduleValidator:
    """Validates generated schedules.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule, staff, config)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, check_constraints: bool = False):
        """Initialize validator.

        Args:
            check_constraints: Also report quota, rest, night-streak and
                availability problems as warnings.
        """
        self.check_constraints = check_constraints

    def validate(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
        config: HospitalShiftConfig,
    ) -> ValidationResult:
        """Validate a complete schedule.

        Args:
            schedule: The generated schedule.
            staff: Staff roster the schedule was generated for.
            config: Hospital configuration.

        Returns:
            ValidationResult with is_valid flag, errors and warnings.
        """
        result = ValidationResult(is_valid=True)

        for day in schedule:
            for shift in day.shifts:
                if shift.assignee_id is None:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.UNFILLED_SHIFT,
                            message="Unfilled shift",
                            date=day.date,
                            shift_name=shift.shift_type.name,
                        )
                    )

        if self.check_constraints:
            self._check_staff_constraints(schedule, staff, config, result)

        return result

    def _check_staff_constraints(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
        config: HospitalShiftConfig,
        result: ValidationResult,
    ) -> None:
        """Check each person's shift sequence against the hospital rules."""
        staff_map = {member.id: member for member in staff}
        assignments: dict[str, list[tuple[date, AssignedShift]]] = {}

        for day in schedule:
            for shift in day.shifts:
                staff_ids = shift.staff_ids
                if not staff_ids and shift.is_filled:
                    staff_ids = [shift.assignee_id]
                for staff_id in staff_ids:
                    assignments.setdefault(staff_id, []).append((day.date, shift))

        for staff_id, shifts in assignments.items():
            shifts.sort(key=lambda item: shift_start(item[0], item[1].shift_type))
            member = staff_map.get(staff_id)

            if member is not None:
                self._check_quota(staff_id, member, shifts, config, result)
                self._check_availability(staff_id, member, shifts, result)

            self._check_sequence(staff_id, shifts, config, result)

    def _check_quota(
        self,
        staff_id: str,
        member: StaffMember,
        shifts: list[tuple[date, AssignedShift]],
        config: HospitalShiftConfig,
        result: ValidationResult,
    ) -> None:
        max_shifts = effective_max_shifts(member, config)
        if len(shifts) > max_shifts:
            result.add_warning(
                ValidationError(
                    error_type=ValidationErrorType.QUOTA_EXCEEDED,
                    message=f"{member.name} has {len(shifts)} shifts (max: {max_shifts})",
                    staff_id=staff_id,
                    details={"count": len(shifts), "max": max_shifts},
                )
            )

    def _check_availability(
        self,
        staff_id: str,
        member: StaffMember,
        shifts: list[tuple[date, AssignedShift]],
        result: ValidationResult,
    ) -> None:
        unavailable = set(member.unavailable)
        for shift_date, shift in shifts:
            if shift_date in unavailable:
                result.add_warning(
                    ValidationError(
                        error_type=ValidationErrorType.UNAVAILABLE_ASSIGNMENT,
                        message=f"{member.name} is assigned on an unavailable date",
                        date=shift_date,
                        shift_name=shift.shift_type.name,
                        staff_id=staff_id,
                    )
                )

    def _check_sequence(
        self,
        staff_id: str,
        shifts: list[tuple[date, AssignedShift]],
        config: HospitalShiftConfig,
        result: ValidationResult,
    ) -> None:
        """Check rest periods and night streaks between consecutive shifts."""
        consecutive_nights = 0

        for index, (shift_date, shift) in enumerate(shifts):
            rest = None
            if index > 0:
                previous_date, previous = shifts[index - 1]
                rest = hours_between(
                    previous_date, previous.shift_type, shift_date, shift.shift_type
                )
                if rest < config.rules.min_rest_hours:
                    result.add_warning(
                        ValidationError(
                            error_type=ValidationErrorType.INSUFFICIENT_REST,
                            message=(
                                f"Only {rest:g}h rest since {previous_date.isoformat()} "
                                f"(min: {config.rules.min_rest_hours:g}h)"
                            ),
                            date=shift_date,
                            shift_name=shift.shift_type.name,
                            staff_id=staff_id,
                            details={"rest_hours": rest, "emergency": shift.emergency},
                        )
                    )

            if shift.shift_type.is_night:
                consecutive_nights += 1
                if consecutive_nights > config.max_consecutive_nights:
                    result.add_warning(
                        ValidationError(
                            error_type=ValidationErrorType.CONSECUTIVE_NIGHTS_EXCEEDED,
                            message=(
                                f"{consecutive_nights} consecutive night shifts "
                                f"(max: {config.max_consecutive_nights})"
                            ),
                            date=shift_date,
                            shift_name=shift.shift_type.name,
                            staff_id=staff_id,
                        )
                    )
            elif rest is not None and rest >= 24:
                consecutive_nights = 0


def validate_schedule(
    schedule: list[DayResult],
    staff: list[StaffMember],
    config: HospitalShiftConfig,
) -> ValidationResult:
    """Report unfilled slots of a generated schedule."""
    return ScheduleValidator().validate(schedule, staff, config)
