"""Command-line interface for the guard roster scheduling tool."""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from guardroster.domain.models import (
    Day,
    DayResult,
    HospitalShiftConfig,
    StaffMember,
    parse_existing_shifts,
    schedule_to_dicts,
)
from guardroster.output.pdf_generator import PDFGenerator
from guardroster.output.report_generator import RosterReportGenerator, summarize_by_staff
from guardroster.scheduling.quota import calculate_fair_quotas
from guardroster.scheduling.scheduler import ShiftScheduler
from guardroster.validation.validator import ScheduleValidator

SHIFT_TYPES = {
    "GARDA_ZI": {
        "id": "GARDA_ZI",
        "name": "Gardă Zi (8-20)",
        "start": "08:00",
        "end": "20:00",
        "color": "#3B82F6",
        "duration": 12,
        "category": "day",
    },
    "NOAPTE": {
        "id": "NOAPTE",
        "name": "Gardă Noapte (20-8)",
        "start": "20:00",
        "end": "08:00",
        "color": "#7C3AED",
        "duration": 12,
        "category": "night",
    },
    "GARDA_24": {
        "id": "GARDA_24",
        "name": "Gardă 24h (8-8)",
        "start": "08:00",
        "end": "08:00",
        "color": "#10B981",
        "duration": 24,
        "category": "extended",
    },
}

# Demonstration hospitals, one per built-in pattern
SAMPLE_CONFIGS = {
    "standard_12_24": {
        "hospitalId": "spital1",
        "shiftPattern": "standard_12_24",
        "shiftTypes": SHIFT_TYPES,
        "weekdayShifts": ["NOAPTE"],
        "weekendShifts": ["GARDA_ZI", "NOAPTE", "GARDA_24"],
        "holidayShifts": ["GARDA_24"],
        "maxShiftsPerMonth": 10,
        "maxConsecutiveNights": 2,
        "rules": {"minRestHours": 12, "specialSaturdays": [2, 3], "lastFriday24h": True},
    },
    "only_24": {
        "hospitalId": "spital2",
        "shiftPattern": "only_24",
        "shiftTypes": {"GARDA_24": SHIFT_TYPES["GARDA_24"]},
        "maxShiftsPerMonth": 10,
        "maxConsecutiveNights": 1,
        "rules": {"minRestHours": 24, "maxConsecutive24h": 1},
    },
    "custom": {
        "hospitalId": "spital3",
        "shiftPattern": "custom",
        "shiftTypes": SHIFT_TYPES,
        "weekdayShifts": ["GARDA_ZI", "NOAPTE"],
        "weekendShifts": ["GARDA_24"],
        "maxShiftsPerMonth": 8,
        "maxConsecutiveNights": 2,
        "rules": {"minRestHours": 12},
    },
}


def create_sample_staff(count: int, days: list[Day]) -> list[StaffMember]:
    """Create sample staff for demos.

    Args:
        count: Number of staff members to create.
        days: Days of the month, used to spread unavailable dates.
    """
    names = [
        "Dr. Popescu", "Dr. Ionescu", "Dr. Popa", "Dr. Stan", "Dr. Dumitru",
        "Dr. Stoica", "Dr. Gheorghe", "Dr. Matei", "Dr. Ciobanu", "Dr. Rusu",
        "Dr. Munteanu", "Dr. Moldovan", "Dr. Lungu", "Dr. Constantin",
    ]

    staff = []
    for i in range(count):
        name = names[i % len(names)]
        if i >= len(names):
            name = f"{name} {i // len(names) + 1}"

        # Spread a couple of unavailable days across the month
        unavailable = []
        if days and i % 3 == 0:
            unavailable.append(days[(i * 5) % len(days)].date)
        if days and i % 4 == 1:
            unavailable.append(days[(i * 7 + 3) % len(days)].date)

        preferred = ["NOAPTE"] if i % 5 == 2 else []
        avoided = ["GARDA_24"] if i % 6 == 4 else []

        staff.append(
            StaffMember(
                id=str(i + 1),
                name=name,
                max_guards_per_month=12 if i % 7 == 3 else None,
                unavailable=unavailable,
                preferred_shift_types=preferred,
                avoided_shift_types=avoided,
            )
        )

    return staff


def parse_month(value: str) -> date:
    """Parse ``YYYY-MM`` (or a full ISO date) into a month anchor."""
    try:
        if len(value) == 7:
            year, month = value.split("-")
            return date(int(year), int(month), 1)
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid month: {value!r} (expected YYYY-MM)"
        ) from None


def load_json(path: str):
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_staff(path: str) -> list[StaffMember]:
    return [StaffMember.from_dict(record) for record in load_json(path)]


def print_schedule_summary(
    schedule: list[DayResult],
    staff: list[StaffMember],
    config: HospitalShiftConfig,
    strict: bool = False,
) -> bool:
    """Print workload and validation results. Returns validity."""
    validator = ScheduleValidator(check_constraints=strict)
    result = validator.validate(schedule, staff, config)

    shifts = [s for d in schedule for s in d.shifts]
    print(f"\n{'=' * 60}")
    if schedule:
        print(f"Guard Schedule: {schedule[0].date} to {schedule[-1].date}")
    print(f"{'=' * 60}")
    print(f"  Pattern: {config.shift_pattern.value}")
    print(f"  Total Shifts: {len(shifts)}")
    print(f"  Filled: {sum(1 for s in shifts if s.is_filled)}")
    print(f"  Emergency: {sum(1 for s in shifts if s.emergency)}")
    print(f"  Carried Over: {sum(1 for s in shifts if s.carried_over)}")

    print(f"\nWorkload:")
    for summary in summarize_by_staff(schedule, staff):
        print(f"  {summary.name:<20} {summary.total:>3} shifts "
              f"({summary.nights} nights, {summary.weekends} weekend, "
              f"{summary.full_day} x 24h)")

    if result.is_valid:
        print(f"\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(result.errors)} unfilled)")
        for error in result.errors[:10]:
            print(f"    - {error}")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings[:10]:
            print(f"    - {warning}")

    return result.is_valid


def write_outputs(
    schedule: list[DayResult],
    staff: list[StaffMember],
    config: HospitalShiftConfig,
    json_path: Optional[str] = None,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
) -> None:
    if json_path:
        Path(json_path).write_text(
            json.dumps(schedule_to_dicts(schedule), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        print(f"\nSchedule JSON saved to: {json_path}")
    if pdf_path:
        PDFGenerator().generate(schedule, staff, config, pdf_path)
        print(f"\nPDF saved to: {pdf_path}")
    if report_path:
        RosterReportGenerator().generate(schedule, staff, report_path)
        print(f"\nReport saved to: {report_path}")


def run_days(config_path: str, month: date) -> int:
    """Print the required-shift calendar of a month."""
    config = HospitalShiftConfig.from_dict(load_json(config_path))
    days = ShiftScheduler().generate_days_for_month(month, config)

    for day in days:
        shift_ids = ", ".join(s.id for s in day.required_shifts) or "-"
        print(f"{day.date} {day.day_name:<9} {shift_ids}")
    return 0


def run_generate(
    config_path: str,
    staff_path: str,
    month: date,
    existing_path: Optional[str] = None,
    json_path: Optional[str] = None,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
    strict: bool = False,
) -> int:
    """Generate a schedule from JSON inputs."""
    config = HospitalShiftConfig.from_dict(load_json(config_path))
    staff = load_staff(staff_path)
    existing = None
    if existing_path:
        existing = parse_existing_shifts(load_json(existing_path), config.shift_types)

    scheduler = ShiftScheduler()
    days = scheduler.generate_days_for_month(month, config)
    schedule = scheduler.generate_schedule(staff, days, config, existing)

    is_valid = print_schedule_summary(schedule, staff, config, strict)
    write_outputs(schedule, staff, config, json_path, pdf_path, report_path)
    return 0 if is_valid else 2


def run_quotas(config_path: str, staff_path: str, month: date) -> int:
    """Print advisory fair quotas for a month."""
    config = HospitalShiftConfig.from_dict(load_json(config_path))
    staff = load_staff(staff_path)
    days = ShiftScheduler().generate_days_for_month(month, config)

    for entry in calculate_fair_quotas(staff, days, config):
        by_type = ", ".join(f"{k}: {v}" for k, v in entry.quota.by_type.items())
        print(f"{entry.staff.name:<24} total {entry.quota.total:>3}  ({by_type})")
    return 0


def run_demo(
    pattern: str = "standard_12_24",
    staff_count: int = 6,
    month: Optional[date] = None,
    output_path: Optional[str] = None,
) -> int:
    """Run a demo schedule generation."""
    month = month or date.today().replace(day=1)
    print(f"Generating {pattern} demo schedule for {staff_count} staff, {month:%B %Y}...")

    config = HospitalShiftConfig.from_dict(SAMPLE_CONFIGS[pattern])
    scheduler = ShiftScheduler()
    days = scheduler.generate_days_for_month(month, config)
    staff = create_sample_staff(staff_count, days)

    schedule, stats = scheduler.generate_schedule_with_stats(staff, days, config)
    print(f"  Shifts per staff: {stats['min_per_staff']} - {stats['max_per_staff']}")

    print_schedule_summary(schedule, staff, config, strict=True)
    write_outputs(schedule, staff, config, pdf_path=output_path)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Guard Roster - Hospital Guard Scheduling Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                                 Standard 12/24 demo, 6 staff
  %(prog)s demo --pattern only_24 --count 4     24h-only hospital
  %(prog)s demo --output roster.pdf             Generate PDF output

  %(prog)s days -c hospital.json -m 2025-01     Print required shifts
  %(prog)s generate -c hospital.json -s staff.json -m 2025-01 --json out.json
  %(prog)s quotas -c hospital.json -s staff.json -m 2025-01
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run demo schedule generation")
    demo_parser.add_argument(
        "--pattern", "-p",
        type=str,
        default="standard_12_24",
        choices=sorted(SAMPLE_CONFIGS),
        help="Shift pattern of the demo hospital (default: standard_12_24)",
    )
    demo_parser.add_argument(
        "--count", "-n",
        type=int,
        default=6,
        help="Number of staff to generate (default: 6)",
    )
    demo_parser.add_argument(
        "--month", "-m",
        type=parse_month,
        help="Month to schedule, YYYY-MM (default: current month)",
    )
    demo_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output PDF file path",
    )

    # Days command
    days_parser = subparsers.add_parser("days", help="Print the required-shift calendar")
    days_parser.add_argument("--config", "-c", required=True, help="Hospital config JSON")
    days_parser.add_argument("--month", "-m", required=True, type=parse_month, help="YYYY-MM")

    # Generate command
    generate_parser = subparsers.add_parser("generate", help="Generate a schedule")
    generate_parser.add_argument("--config", "-c", required=True, help="Hospital config JSON")
    generate_parser.add_argument("--staff", "-s", required=True, help="Staff roster JSON")
    generate_parser.add_argument("--month", "-m", required=True, type=parse_month, help="YYYY-MM")
    generate_parser.add_argument("--existing", "-e", help="Existing shifts JSON")
    generate_parser.add_argument("--json", help="Write the schedule as JSON")
    generate_parser.add_argument("--pdf", help="Write the roster as PDF")
    generate_parser.add_argument("--report", help="Write a text roster report")
    generate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Also check quota, rest and night-streak rules (as warnings)",
    )

    # Quotas command
    quotas_parser = subparsers.add_parser("quotas", help="Print advisory fair quotas")
    quotas_parser.add_argument("--config", "-c", required=True, help="Hospital config JSON")
    quotas_parser.add_argument("--staff", "-s", required=True, help="Staff roster JSON")
    quotas_parser.add_argument("--month", "-m", required=True, type=parse_month, help="YYYY-MM")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    try:
        if args.command == "demo":
            return run_demo(args.pattern, args.count, args.month, args.output)
        elif args.command == "days":
            return run_days(args.config, args.month)
        elif args.command == "generate":
            return run_generate(
                args.config,
                args.staff,
                args.month,
                args.existing,
                args.json,
                args.pdf,
                args.report,
                args.strict,
            )
        elif args.command == "quotas":
            return run_quotas(args.config, args.staff, args.month)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
