"""Output generation for rosters (PDF, text)."""

from guardroster.output.pdf_generator import PDFGenerator
from guardroster.output.report_generator import RosterReportGenerator, summarize_by_staff

__all__ = [
    "PDFGenerator",
    "RosterReportGenerator",
    "summarize_by_staff",
]
