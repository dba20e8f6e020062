"""Domain models for the guard scheduling system.

This module contains all core data structures used throughout the engine,
including shift types, hospital configuration, staff, generated days and
schedule outputs. Input records coming from the application layer are plain
dicts (usually parsed JSON); each model exposes ``from_dict`` to build itself
from those and ``to_dict`` to hand results back.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MAX_SHIFTS = 10
DEFAULT_MIN_REST_HOURS = 12
DEFAULT_MAX_CONSECUTIVE_NIGHTS = 1
DEFAULT_EMERGENCY_OVERFLOW = 2

# Indexed by Day.day_of_week (0 = Sunday)
DAY_NAMES = ["Duminică", "Luni", "Marți", "Miercuri", "Joi", "Vineri", "Sâmbătă"]

UNFILLED_NOTE = "UNFILLED - No available staff"


def parse_date(value: Union[date, str]) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def parse_time(value: Union[time, str]) -> time:
    """Parse an ``HH:MM`` string (or pass a time through)."""
    if isinstance(value, time):
        return value
    hours, _, minutes = value.partition(":")
    return time(hour=int(hours), minute=int(minutes or 0))


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (camelCase or snake_case)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


class ShiftCategory(Enum):
    """Category of a shift type.

    Night-specific rules (streak limits, night scoring) key off this
    instead of the shift-type id.
    """

    DAY = "day"
    NIGHT = "night"
    EXTENDED = "extended"  # 24h guard

    @classmethod
    def infer(cls, shift_id: str, duration: float) -> "ShiftCategory":
        """Infer a category for records that do not carry one."""
        if "NOAPTE" in shift_id or "night" in shift_id.lower():
            return cls.NIGHT
        if duration >= 24:
            return cls.EXTENDED
        return cls.DAY


class ShiftPattern(Enum):
    """Named shift patterns a hospital can be configured with."""

    ONLY_24 = "only_24"
    STANDARD_12_24 = "standard_12_24"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ShiftType:
    """A kind of guard shift (e.g. day guard 08-20, night guard 20-08).

    Attributes:
        id: Identifier, e.g. ``"NOAPTE"``.
        name: Display name.
        start: Start time of day.
        end: End time of day. Earlier than ``start`` for overnight shifts.
        duration: Length in hours.
        color: Display color (hex string), not used by the engine.
        category: Day, night or extended (24h) shift.
    """

    id: str
    name: str
    start: time
    end: time
    duration: float
    color: str = "#9CA3AF"
    category: ShiftCategory = ShiftCategory.DAY

    @property
    def is_night(self) -> bool:
        return self.category == ShiftCategory.NIGHT

    @property
    def is_24_hour(self) -> bool:
        return self.duration == 24

    @property
    def wraps_overnight(self) -> bool:
        """True if the shift ends on the day after it starts."""
        return self.end < self.start

    @classmethod
    def from_dict(cls, data: dict) -> "ShiftType":
        shift_id = str(data["id"])
        duration = float(data.get("duration", 12))
        category = data.get("category")
        return cls(
            id=shift_id,
            name=data.get("name", shift_id),
            start=parse_time(data["start"]),
            end=parse_time(data["end"]),
            duration=duration,
            color=data.get("color", "#9CA3AF"),
            category=(
                ShiftCategory(category)
                if category
                else ShiftCategory.infer(shift_id, duration)
            ),
        )

    def to_dict(self) -> dict:
        duration: Union[int, float] = self.duration
        if float(duration).is_integer():
            duration = int(duration)
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
            "color": self.color,
            "duration": duration,
            "category": self.category.value,
        }


@dataclass(frozen=True)
class HospitalRules:
    """Scheduling rules attached to a hospital configuration.

    Attributes:
        min_rest_hours: Minimum hours between the end of one shift and the
            start of the next for the same person.
        max_consecutive_24h: Maximum back-to-back 24h guards. The engine
            always forbids a 24h guard right after another one.
        special_saturdays: Saturday ordinals covered by a single 24h guard
            under the standard pattern.
        last_friday_24h: Whether the last Friday of the month is a 24h guard
            under the standard pattern.
        emergency_quota_overflow: Extra shifts over quota allowed when no one
            satisfies the regular constraints.
    """

    min_rest_hours: float = DEFAULT_MIN_REST_HOURS
    max_consecutive_24h: int = 1
    special_saturdays: tuple[int, ...] = (2, 3)
    last_friday_24h: bool = True
    emergency_quota_overflow: int = DEFAULT_EMERGENCY_OVERFLOW

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "HospitalRules":
        data = data or {}
        return cls(
            min_rest_hours=float(
                _pick(data, "minRestHours", "min_rest_hours",
                      default=DEFAULT_MIN_REST_HOURS)
            ),
            max_consecutive_24h=int(
                _pick(data, "maxConsecutive24h", "max_consecutive_24h", default=1)
            ),
            special_saturdays=tuple(
                _pick(data, "specialSaturdays", "special_saturdays", default=(2, 3))
            ),
            last_friday_24h=bool(
                _pick(data, "lastFriday24h", "last_friday_24h", default=True)
            ),
            emergency_quota_overflow=int(
                _pick(data, "emergencyQuotaOverflow", "emergency_quota_overflow",
                      default=DEFAULT_EMERGENCY_OVERFLOW)
            ),
        )


@dataclass
class HospitalShiftConfig:
    """Shift configuration of one hospital, read-only during a run.

    Attributes:
        hospital_id: Hospital identifier.
        shift_pattern: Named pattern deciding which shifts each day needs.
        shift_types: Dict mapping shift-type ids to ShiftType.
        weekday_shifts: Required ids on weekdays (custom pattern only).
        weekend_shifts: Required ids on weekends (custom pattern only).
        holiday_shifts: Required ids on holidays (custom pattern only).
        holidays: Dates treated as holidays (custom pattern only).
        max_shifts_per_month: Default monthly quota for staff without one.
        max_consecutive_nights: Longest allowed run of night shifts.
        rules: Rest and pattern rules.
    """

    hospital_id: str
    shift_pattern: ShiftPattern
    shift_types: dict[str, ShiftType] = field(default_factory=dict)
    weekday_shifts: list[str] = field(default_factory=list)
    weekend_shifts: list[str] = field(default_factory=list)
    holiday_shifts: list[str] = field(default_factory=list)
    holidays: set[date] = field(default_factory=set)
    max_shifts_per_month: Optional[int] = None
    max_consecutive_nights: int = DEFAULT_MAX_CONSECUTIVE_NIGHTS
    rules: HospitalRules = field(default_factory=HospitalRules)

    def resolve_shift_types(self, shift_ids: list[str]) -> list[ShiftType]:
        """Map ids to shift types, dropping ids this hospital doesn't define."""
        return [self.shift_types[i] for i in shift_ids if i in self.shift_types]

    @classmethod
    def from_dict(cls, data: dict) -> "HospitalShiftConfig":
        raw_types = _pick(data, "shiftTypes", "shift_types", default={})
        shift_types = {}
        for key, value in raw_types.items():
            shift_type = ShiftType.from_dict({"id": key, **value})
            shift_types[shift_type.id] = shift_type

        max_shifts = _pick(data, "maxShiftsPerMonth", "max_shifts_per_month")
        return cls(
            hospital_id=str(_pick(data, "hospitalId", "hospital_id", "id", default="")),
            shift_pattern=ShiftPattern(_pick(data, "shiftPattern", "shift_pattern")),
            shift_types=shift_types,
            weekday_shifts=list(_pick(data, "weekdayShifts", "weekday_shifts", default=[])),
            weekend_shifts=list(_pick(data, "weekendShifts", "weekend_shifts", default=[])),
            holiday_shifts=list(_pick(data, "holidayShifts", "holiday_shifts", default=[])),
            holidays={parse_date(d) for d in _pick(data, "holidays", default=[])},
            max_shifts_per_month=int(max_shifts) if max_shifts else None,
            max_consecutive_nights=int(
                _pick(data, "maxConsecutiveNights", "max_consecutive_nights",
                      default=DEFAULT_MAX_CONSECUTIVE_NIGHTS)
            ),
            rules=HospitalRules.from_dict(data.get("rules")),
        )


@dataclass
class StaffMember:
    """A member of staff who can take guard shifts.

    Attributes:
        id: Unique identifier (normalised to a string).
        name: Display name.
        max_guards_per_month: Personal monthly quota, overrides the hospital's.
        unavailable: Dates the person cannot work.
        preferred_shift_types: Shift-type ids the person would like.
        avoided_shift_types: Shift-type ids the person must not get.
    """

    id: str
    name: str
    max_guards_per_month: Optional[int] = None
    unavailable: list[date] = field(default_factory=list)
    preferred_shift_types: list[str] = field(default_factory=list)
    avoided_shift_types: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "StaffMember":
        preferences = data.get("preferences") or {}
        max_guards = _pick(data, "maxGuardsPerMonth", "max_guards_per_month")
        return cls(
            id=str(data["id"]),
            name=data.get("name", str(data["id"])),
            max_guards_per_month=int(max_guards) if max_guards else None,
            unavailable=[parse_date(d) for d in data.get("unavailable") or []],
            preferred_shift_types=list(
                _pick(preferences, "preferredShiftTypes", "preferred_shift_types",
                      default=[])
            ),
            avoided_shift_types=list(
                _pick(preferences, "avoidedShiftTypes", "avoided_shift_types",
                      default=[])
            ),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "maxGuardsPerMonth": self.max_guards_per_month,
            "unavailable": [d.isoformat() for d in self.unavailable],
            "preferences": {
                "preferredShiftTypes": list(self.preferred_shift_types),
                "avoidedShiftTypes": list(self.avoided_shift_types),
            },
        }


@dataclass
class Day:
    """A calendar day with the shifts it requires.

    Attributes:
        date: The calendar date.
        day_of_week: 0 = Sunday .. 6 = Saturday.
        day_name: Localised weekday name.
        required_shifts: Ordered shift types to staff on this day.
    """

    date: date
    day_of_week: int
    day_name: str
    required_shifts: list[ShiftType] = field(default_factory=list)

    @property
    def is_weekend(self) -> bool:
        return self.day_of_week in (0, 6)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "dayOfWeek": self.day_of_week,
            "dayName": self.day_name,
            "requiredShifts": [s.to_dict() for s in self.required_shifts],
        }


@dataclass
class ExistingShift:
    """A shift already stored by the application before generation.

    Attributes:
        date: Date of the shift.
        shift_type: Type of the shift.
        staff_ids: Staff already holding the shift (empty if open).
        status: Stored status, e.g. ``"reserved"`` or ``"confirmed"``.
        shift_id: Stored identifier, if any.
    """

    date: date
    shift_type: ShiftType
    staff_ids: list[str] = field(default_factory=list)
    status: str = "reserved"
    shift_id: Optional[str] = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.staff_ids)

    @classmethod
    def from_dict(
        cls,
        shift_date: Union[date, str],
        data: dict,
        shift_types: dict[str, ShiftType],
    ) -> Optional["ExistingShift"]:
        """Build from a stored record, or None if its type can't be resolved.

        The type may be embedded (``{"type": {...}}``) or referenced by id
        (``{"type": "NOAPTE"}`` / ``{"typeId": "NOAPTE"}``). A configured
        type always takes precedence over an embedded copy.
        """
        raw_type = _pick(data, "type", "typeId", "type_id", "shiftType")
        if isinstance(raw_type, dict):
            type_id = str(raw_type.get("id", ""))
            shift_type = shift_types.get(type_id)
            if shift_type is None and {"start", "end"} <= raw_type.keys():
                shift_type = ShiftType.from_dict(raw_type)
        else:
            shift_type = shift_types.get(str(raw_type))
        if shift_type is None:
            return None

        staff_ids = [str(s) for s in _pick(data, "staffIds", "staff_ids", default=[])]
        reserved_by = _pick(data, "reservedBy", "reserved_by")
        if reserved_by is not None and str(reserved_by) not in staff_ids:
            staff_ids.insert(0, str(reserved_by))

        shift_id = _pick(data, "id", "shiftId", "shift_id")
        return cls(
            date=parse_date(shift_date),
            shift_type=shift_type,
            staff_ids=staff_ids,
            status=data.get("status", "reserved"),
            shift_id=str(shift_id) if shift_id is not None else None,
        )


def parse_existing_shifts(
    data: Optional[dict],
    shift_types: dict[str, ShiftType],
) -> dict[date, list[ExistingShift]]:
    """Parse a ``{date -> [shift, ...]}`` mapping of stored shifts.

    Records whose shift type can't be resolved are skipped.
    """
    result: dict[date, list[ExistingShift]] = {}
    for raw_date, shifts in (data or {}).items():
        shift_date = parse_date(raw_date)
        for raw in shifts:
            existing = ExistingShift.from_dict(shift_date, raw, shift_types)
            if existing is None:
                logger.warning("Skipping stored shift on %s with unknown type", shift_date)
                continue
            result.setdefault(shift_date, []).append(existing)
    return result


@dataclass
class StaffCandidate:
    """Scheduling state of one staff member during a generation run.

    Created fresh by the preprocessor for every run and discarded afterwards;
    only the schedule assembler mutates it.

    Attributes:
        staff: The underlying staff record.
        max_shifts: Effective monthly quota.
        unavailable: Dates the person can't work.
        preferred: Preferred shift-type ids.
        avoided: Avoided shift-type ids.
        total_assigned: Shifts assigned so far in this run.
        consecutive_nights: Current night-shift streak.
        last_shift_date: Date of the latest assignment.
        last_shift_type: Type of the latest assignment.
        last_24_hour: Whether the latest assignment was a 24h guard.
        weekend_shifts: Weekend shifts assigned so far.
        base_priority: Fairness tiebreak, grows with the workload.
    """

    staff: StaffMember
    max_shifts: int
    unavailable: frozenset[date] = frozenset()
    preferred: frozenset[str] = frozenset()
    avoided: frozenset[str] = frozenset()
    total_assigned: int = 0
    consecutive_nights: int = 0
    last_shift_date: Optional[date] = None
    last_shift_type: Optional[ShiftType] = None
    last_24_hour: bool = False
    weekend_shifts: int = 0
    base_priority: int = 0

    @property
    def id(self) -> str:
        return self.staff.id

    @property
    def name(self) -> str:
        return self.staff.name

    @property
    def has_history(self) -> bool:
        return self.last_shift_date is not None and self.last_shift_type is not None

    def is_available(self, shift_date: date) -> bool:
        return shift_date not in self.unavailable


@dataclass
class AssignedShift:
    """Outcome for one shift slot.

    Attributes:
        shift_id: Identifier of the shift.
        shift_type: Type of the shift.
        assignee_id: Assigned staff id, None if unfilled.
        assignee_name: Assigned staff name, None if unfilled.
        status: ``"generated"``, ``"open"`` or the stored status of a
            carried-over shift.
        note: Free-text note, e.g. the unfilled marker.
        staff_ids: All staff on the shift (carried-over shifts may list more
            than one).
        emergency: Assigned by the relaxed fallback.
        carried_over: Copied from an existing stored shift.
    """

    shift_id: str
    shift_type: ShiftType
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    status: str = "generated"
    note: Optional[str] = None
    staff_ids: list[str] = field(default_factory=list)
    emergency: bool = False
    carried_over: bool = False

    @property
    def is_filled(self) -> bool:
        return self.assignee_id is not None

    def to_dict(self) -> dict:
        return {
            "shiftId": self.shift_id,
            "type": self.shift_type.to_dict(),
            "assignee": self.assignee_name,
            "assigneeId": self.assignee_id,
            "staffIds": list(self.staff_ids),
            "status": self.status,
            "note": self.note,
            "emergency": self.emergency,
            "carriedOver": self.carried_over,
        }


@dataclass
class DayResult:
    """Schedule output for a single day."""

    date: date
    shifts: list[AssignedShift] = field(default_factory=list)

    def shift_for_type(self, shift_type_id: str) -> Optional[AssignedShift]:
        """Get the first shift of a type on this day, if any."""
        for shift in self.shifts:
            if shift.shift_type.id == shift_type_id:
                return shift
        return None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "shifts": [s.to_dict() for s in self.shifts],
        }


@dataclass
class ShiftQuota:
    """Advisory quota: total shifts and per-type ceilings."""

    total: int
    by_type: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"total": self.total, "byType": dict(self.by_type)}


@dataclass
class StaffQuota:
    """A staff member annotated with an advisory quota."""

    staff: StaffMember
    quota: ShiftQuota

    def to_dict(self) -> dict:
        return {**self.staff.to_dict(), "quota": self.quota.to_dict()}


def schedule_to_dicts(schedule: list[DayResult]) -> list[dict]:
    """Serialise a schedule to plain dicts (JSON-ready)."""
    return [day.to_dict() for day in schedule]
