"""Plain-text roster output for schedule review.

This module creates text reports showing:
- Day-by-day assignments per shift type
- Per-staff workload (total, nights, weekends, 24h guards, emergencies)
- Slots left unfilled
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from guardroster.domain.models import DAY_NAMES, DayResult, StaffMember
from guardroster.domain.policies import day_of_week


@dataclass
class StaffSummary:
    """Workload of one staff member over a schedule."""

    staff_id: str
    name: str
    total: int = 0
    nights: int = 0
    weekends: int = 0
    full_day: int = 0
    emergency: int = 0


def summarize_by_staff(
    schedule: list[DayResult],
    staff: list[StaffMember],
) -> list[StaffSummary]:
    """Count each person's shifts by kind, in roster order.

    Assignees missing from the roster are appended after it.
    """
    summaries = {m.id: StaffSummary(staff_id=m.id, name=m.name) for m in staff}

    for day in schedule:
        weekend = day_of_week(day.date) in (0, 6)
        for shift in day.shifts:
            for staff_id in shift.staff_ids or []:
                summary = summaries.setdefault(
                    staff_id, StaffSummary(staff_id=staff_id, name=staff_id)
                )
                summary.total += 1
                if shift.shift_type.is_night:
                    summary.nights += 1
                if weekend:
                    summary.weekends += 1
                if shift.shift_type.is_24_hour:
                    summary.full_day += 1
                if shift.emergency:
                    summary.emergency += 1

    return list(summaries.values())


class RosterReportGenerator:
    """Generates a human-readable text roster.

    Example:
        >>> generator = RosterReportGenerator()
        >>> text = generator.generate_to_string(schedule, staff)
    """

    def generate(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
        output_path: Union[str, Path],
    ) -> str:
        """Generate the report and save it to a file.

        Returns:
            The generated text content.
        """
        content = self._generate_content(schedule, staff)
        Path(output_path).write_text(content, encoding="utf-8")
        return content

    def generate_to_string(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
    ) -> str:
        """Generate the report and return it as a string."""
        return self._generate_content(schedule, staff)

    def _generate_content(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
    ) -> str:
        lines = []

        if schedule:
            first, last = schedule[0].date, schedule[-1].date
            lines.append(f"GUARD ROSTER {first.isoformat()} - {last.isoformat()}")
        else:
            lines.append("GUARD ROSTER (empty)")
        lines.append("=" * 72)
        lines.append("")

        lines.extend(self._format_days(schedule))
        lines.append("")
        lines.extend(self._format_staff_summary(schedule, staff))
        lines.append("")
        lines.extend(self._format_unfilled(schedule))

        return "\n".join(lines) + "\n"

    def _format_days(self, schedule: list[DayResult]) -> list[str]:
        lines = ["ASSIGNMENTS", "-" * 72]
        for day in schedule:
            day_name = DAY_NAMES[day_of_week(day.date)]
            entries = []
            for shift in day.shifts:
                who = shift.assignee_name or shift.assignee_id or "UNFILLED"
                flag = ""
                if shift.emergency:
                    flag = " (!)"
                elif shift.carried_over:
                    flag = f" [{shift.status}]"
                entries.append(f"{shift.shift_type.id}: {who}{flag}")
            lines.append(f"{day.date.isoformat()} {day_name:<9} " + ", ".join(entries))
        return lines

    def _format_staff_summary(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
    ) -> list[str]:
        lines = [
            "STAFF WORKLOAD",
            "-" * 72,
            f"{'Name':<24}{'Total':>7}{'Nights':>8}{'Weekend':>9}{'24h':>6}{'Emerg':>7}",
        ]
        for summary in summarize_by_staff(schedule, staff):
            lines.append(
                f"{summary.name[:23]:<24}{summary.total:>7}{summary.nights:>8}"
                f"{summary.weekends:>9}{summary.full_day:>6}{summary.emergency:>7}"
            )
        return lines

    def _format_unfilled(self, schedule: list[DayResult]) -> list[str]:
        unfilled = [
            (day.date, shift)
            for day in schedule
            for shift in day.shifts
            if not shift.is_filled
        ]
        lines = [f"UNFILLED SLOTS ({len(unfilled)})", "-" * 72]
        for shift_date, shift in unfilled:
            lines.append(f"{shift_date.isoformat()} {shift.shift_type.name}")
        if not unfilled:
            lines.append("None")
        return lines
