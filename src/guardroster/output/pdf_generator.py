"""PDF generation for roster output.

This module creates printable monthly rosters showing:
- One row per day, one column per shift type, colored by shift type
- Unfilled and emergency slots highlighted
- A summary page with per-staff workload
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from guardroster.domain.models import (
    DAY_NAMES,
    DayResult,
    HospitalShiftConfig,
    ShiftType,
    StaffMember,
)
from guardroster.domain.policies import day_of_week
from guardroster.output.report_generator import summarize_by_staff

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "unfilled": (0.95, 0.55, 0.55),  # Red
    "emergency": (1.0, 0.85, 0.4),  # Amber
    "weekend": (0.93, 0.93, 0.97),  # Light blue-gray
    "header": (0.85, 0.85, 0.85),  # Gray
}


def hex_to_rgb(value: str) -> tuple[float, float, float]:
    """Convert ``#RRGGBB`` to a 0-1 RGB tuple, gray if malformed."""
    value = value.lstrip("#")
    if len(value) != 6:
        return (0.6, 0.6, 0.6)
    try:
        return tuple(int(value[i : i + 2], 16) / 255 for i in (0, 2, 4))
    except ValueError:
        return (0.6, 0.6, 0.6)


def lighten(rgb: tuple[float, float, float], amount: float = 0.6) -> tuple[float, float, float]:
    """Blend a color toward white so dark text stays readable on it."""
    return tuple(c + (1 - c) * amount for c in rgb)


class PDFGenerator:
    """Generates printable monthly roster PDFs.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(schedule, staff, config, "roster.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
        config: HospitalShiftConfig,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate the roster PDF and save it to a file.

        Args:
            schedule: The generated schedule.
            staff: Staff roster.
            config: Hospital configuration (shift columns and colors).
            output_path: Path to save the PDF.
            include_summary: Whether to include the workload summary page.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw(c, schedule, staff, config, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        schedule: list[DayResult],
        staff: list[StaffMember],
        config: HospitalShiftConfig,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate the roster PDF and return it as a bytes buffer."""
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw(c, schedule, staff, config, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(
        self,
        c,
        schedule: list[DayResult],
        staff: list[StaffMember],
        config: HospitalShiftConfig,
        include_summary: bool,
    ) -> None:
        columns = self._shift_columns(schedule, config)
        self._draw_roster_pages(c, schedule, config, columns)
        if include_summary:
            self._draw_summary_page(c, schedule, staff, config)

    def _shift_columns(
        self,
        schedule: list[DayResult],
        config: HospitalShiftConfig,
    ) -> list[ShiftType]:
        """Configured shift types, plus any carried-over type not configured."""
        columns = list(config.shift_types.values())
        known = {s.id for s in columns}
        for day in schedule:
            for shift in day.shifts:
                if shift.shift_type.id not in known:
                    known.add(shift.shift_type.id)
                    columns.append(shift.shift_type)
        return columns

    def _draw_roster_pages(
        self,
        c,
        schedule: list[DayResult],
        config: HospitalShiftConfig,
        columns: list[ShiftType],
    ) -> None:
        """Draw the day-by-shift roster grid, paginated."""
        row_height = 16
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height) - 1)

        date_width = 110
        grid_left = self.margin + date_width
        grid_width = self.page_width - self.margin - grid_left
        column_width = grid_width / max(1, len(columns))

        total_pages = max(1, (len(schedule) + rows_per_page - 1) // rows_per_page)

        for page_start in range(0, max(1, len(schedule)), rows_per_page):
            page_days = schedule[page_start : page_start + rows_per_page]

            self._draw_header(c, schedule, config, header_height)

            # Column headers
            y = self.page_height - self.margin - header_height
            c.setFillColorRGB(*COLORS["header"])
            c.rect(self.margin, y, self.page_width - 2 * self.margin, row_height, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 9)
            c.drawString(self.margin + 4, y + 4, "Date")
            for index, shift_type in enumerate(columns):
                x = grid_left + index * column_width
                c.drawString(x + 4, y + 4, shift_type.name[:28])

            for day in page_days:
                y -= row_height
                self._draw_day_row(c, day, columns, grid_left, column_width, y, row_height)

            self._draw_legend(c, self.margin, self.margin + 10)

            page_num = (page_start // rows_per_page) + 1
            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page_num} of {total_pages}",
            )

            c.showPage()

    def _draw_header(
        self,
        c,
        schedule: list[DayResult],
        config: HospitalShiftConfig,
        header_height: float,
    ) -> None:
        """Draw page header with hospital and month."""
        title = "Guard Roster"
        if config.hospital_id:
            title += f" - {config.hospital_id}"
        if schedule:
            title += f" - {schedule[0].date.strftime('%B %Y')}"

        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, title)

        filled = sum(1 for d in schedule for s in d.shifts if s.is_filled)
        total = sum(len(d.shifts) for d in schedule)
        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Pattern: {config.shift_pattern.value}   Filled: {filled}/{total}",
        )

    def _draw_day_row(
        self,
        c,
        day: DayResult,
        columns: list[ShiftType],
        grid_left: float,
        column_width: float,
        y: float,
        height: float,
    ) -> None:
        """Draw one day: date label and one cell per shift column."""
        dow = day_of_week(day.date)
        if dow in (0, 6):
            c.setFillColorRGB(*COLORS["weekend"])
            c.rect(self.margin, y, self.page_width - 2 * self.margin, height, fill=1, stroke=0)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 8)
        c.drawString(self.margin + 4, y + 4, f"{day.date.isoformat()} {DAY_NAMES[dow][:3]}")

        for index, shift_type in enumerate(columns):
            shift = day.shift_for_type(shift_type.id)
            if shift is None:
                continue

            x = grid_left + index * column_width
            if not shift.is_filled:
                color = COLORS["unfilled"]
                label = "UNFILLED"
            elif shift.emergency:
                color = COLORS["emergency"]
                label = f"{shift.assignee_name or shift.assignee_id} (!)"
            else:
                color = lighten(hex_to_rgb(shift_type.color))
                label = shift.assignee_name or shift.assignee_id

            c.setFillColorRGB(*color)
            c.rect(x + 1, y + 1, column_width - 2, height - 2, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(x + 4, y + 4, str(label)[:30])

        c.setStrokeColorRGB(0.8, 0.8, 0.8)
        c.setLineWidth(0.3)
        c.line(self.margin, y, self.page_width - self.margin, y)

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for highlight colors."""
        c.setFont("Helvetica-Bold", 8)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(x, y, "Legend:")

        items = [
            ("unfilled", "Unfilled"),
            ("emergency", "Emergency (!)"),
            ("weekend", "Weekend"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45

        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 90

    def _draw_summary_page(
        self,
        c,
        schedule: list[DayResult],
        staff: list[StaffMember],
        config: HospitalShiftConfig,
    ) -> None:
        """Draw summary page with per-staff workload."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            "Roster Summary",
        )

        y = self.page_height - self.margin - 60
        shifts = [s for d in schedule for s in d.shifts]

        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Overview")
        y -= 20

        c.setFont("Helvetica", 10)
        stats = [
            f"Total Shifts: {len(shifts)}",
            f"Unfilled: {sum(1 for s in shifts if not s.is_filled)}",
            f"Emergency Assignments: {sum(1 for s in shifts if s.emergency)}",
            f"Carried Over: {sum(1 for s in shifts if s.carried_over)}",
            f"Min Rest: {config.rules.min_rest_hours:g}h   "
            f"Max Consecutive Nights: {config.max_consecutive_nights}",
        ]
        for stat in stats:
            c.drawString(self.margin + 20, y, stat)
            y -= 15

        y -= 20
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Workload by Staff")
        y -= 18

        headers = ["Name", "Total", "Nights", "Weekend", "24h", "Emergency"]
        offsets = [0, 200, 260, 320, 390, 440]
        c.setFont("Helvetica-Bold", 9)
        for header, offset in zip(headers, offsets):
            c.drawString(self.margin + 20 + offset, y, header)
        y -= 14

        c.setFont("Helvetica", 9)
        for summary in summarize_by_staff(schedule, staff):
            if y < self.margin + 20:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 9)
            values = [
                summary.name[:32],
                summary.total,
                summary.nights,
                summary.weekends,
                summary.full_day,
                summary.emergency,
            ]
            for value, offset in zip(values, offsets):
                c.drawString(self.margin + 20 + offset, y, str(value))
            y -= 13

        c.showPage()
