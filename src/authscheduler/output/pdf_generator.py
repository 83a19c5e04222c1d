"""PDF generation for weekly service schedules.

This module creates printable PDF schedules showing:
- The day x service category grid with every session
- Compliance findings for the current schedule
- Per-category hours, billable units and location breakdown
- Schedule notes, when given
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from authscheduler.domain.models import Day, Schedule, ServiceCatalog
from authscheduler.output.text_export import format_hours
from authscheduler.scheduling.aggregation import WeeklySummary
from authscheduler.validation.validator import ComplianceResult, ComplianceSeverity

# Category column colors (RGB tuples, 0-1 scale), assigned in catalog order
CATEGORY_COLORS = [
    (0.23, 0.51, 0.96),  # Blue
    (0.66, 0.33, 0.97),  # Purple
    (0.39, 0.40, 0.95),  # Indigo
    (0.05, 0.58, 0.53),  # Teal
    (0.02, 0.71, 0.83),  # Cyan
]

SEVERITY_COLORS = {
    ComplianceSeverity.ERROR: (0.86, 0.15, 0.15),  # Red
    ComplianceSeverity.WARNING: (0.85, 0.55, 0.05),  # Amber
    ComplianceSeverity.INFO: (0.09, 0.64, 0.29),  # Green
}


def _import_reportlab():
    try:
        from reportlab.lib.pagesizes import landscape, letter
        from reportlab.pdfgen import canvas
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF generation. "
            "Install with: pip install reportlab"
        )
    return canvas, landscape(letter)


class PDFGenerator:
    """Generates printable PDF service schedules.

    Example:
        >>> generator = PDFGenerator(catalog)
        >>> generator.generate(schedule, summary, compliance, "schedule.pdf")
    """

    def __init__(
        self,
        catalog: Optional[ServiceCatalog] = None,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.catalog = catalog or ServiceCatalog.create_default()
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        schedule: Schedule,
        summary: WeeklySummary,
        compliance: ComplianceResult,
        output_path: Union[str, Path],
        title: str = "Weekly Service Schedule",
        notes: str = "",
    ) -> None:
        """Generate the PDF and save it to a file."""
        canvas, pagesize = _import_reportlab()
        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw(c, schedule, summary, compliance, title, notes)
        c.save()

    def generate_to_buffer(
        self,
        schedule: Schedule,
        summary: WeeklySummary,
        compliance: ComplianceResult,
        title: str = "Weekly Service Schedule",
        notes: str = "",
    ) -> BytesIO:
        """Generate the PDF and return it as a bytes buffer."""
        canvas, pagesize = _import_reportlab()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw(c, schedule, summary, compliance, title, notes)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, schedule, summary, compliance, title, notes="") -> None:
        self._draw_grid_page(c, schedule, summary, compliance, title)
        self._draw_summary_page(c, summary, notes)

    def _color(self, index: int) -> tuple[float, float, float]:
        return CATEGORY_COLORS[index % len(CATEGORY_COLORS)]

    def _draw_grid_page(
        self,
        c,
        schedule: Schedule,
        summary: WeeklySummary,
        compliance: ComplianceResult,
        title: str,
    ) -> None:
        """Draw the day x category grid with the compliance banner."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, title)
        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Total Hours/Week: {summary.total_hours:.1f}   "
            f"Units/Week: {summary.total_units}",
        )

        y = self.page_height - self.margin - 55
        y = self._draw_compliance(c, compliance, y)

        categories = self.catalog.categories
        day_col = 80
        col_width = (self.page_width - 2 * self.margin - day_col) / len(categories)
        header_height = 28
        row_height = (y - self.margin - header_height - 10) / len(Day)

        # Header row
        y -= header_height
        c.setFont("Helvetica-Bold", 8)
        c.setFillColorRGB(0.9, 0.9, 0.9)
        c.rect(self.margin, y, day_col, header_height, fill=1, stroke=1)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(self.margin + 4, y + 10, "Day")
        for idx, category in enumerate(categories):
            x = self.margin + day_col + idx * col_width
            c.setFillColorRGB(*self._color(idx))
            c.rect(x, y, col_width, header_height, fill=1, stroke=1)
            c.setFillColorRGB(1, 1, 1)
            c.drawString(x + 4, y + 16, category.code)
            c.setFont("Helvetica", 7)
            c.drawString(x + 4, y + 6, category.label[:28])
            c.setFont("Helvetica-Bold", 8)

        # One row per day
        c.setStrokeColorRGB(0.7, 0.7, 0.7)
        for day in Day:
            y -= row_height
            c.setFillColorRGB(0, 0, 0)
            c.rect(self.margin, y, day_col, row_height, fill=0, stroke=1)
            c.setFont("Helvetica-Bold", 9)
            c.drawString(self.margin + 4, y + row_height - 12, day.value)
            c.setFont("Helvetica", 7)
            c.drawString(
                self.margin + 4,
                y + row_height - 22,
                f"{summary.hours_by_day.get(day, 0.0):.1f}h",
            )

            for idx, category in enumerate(categories):
                x = self.margin + day_col + idx * col_width
                c.rect(x, y, col_width, row_height, fill=0, stroke=1)
                line_y = y + row_height - 10
                for slot in schedule.slots(day, category.code):
                    if line_y < y + 3:
                        break
                    c.drawString(
                        x + 4,
                        line_y,
                        f"{slot.start}-{slot.end} "
                        f"({format_hours(slot.duration_hours)}h, {slot.location})",
                    )
                    line_y -= 9

        c.showPage()

    def _draw_compliance(self, c, compliance: ComplianceResult, y: float) -> float:
        """Draw one colored line per finding; return the next free y."""
        c.setFont("Helvetica", 9)
        for warning in compliance.warnings:
            c.setFillColorRGB(*SEVERITY_COLORS[warning.severity])
            c.rect(self.margin, y - 2, 8, 8, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(self.margin + 14, y, warning.message)
            y -= 14
        return y - 6

    def _draw_summary_page(self, c, summary: WeeklySummary, notes: str = "") -> None:
        """Draw per-category hours, units, period units and locations."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            "Weekly Summary by Service Category",
        )

        y = self.page_height - self.margin - 55
        max_hours = max(summary.hours_by_category.values(), default=0.0) or 1.0
        bar_max_width = 200

        for idx, category in enumerate(self.catalog.categories):
            code = category.code
            hours = summary.hours_by_category.get(code, 0.0)

            c.setFillColorRGB(*self._color(idx))
            c.rect(self.margin, y - 2, 10, 10, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 10)
            c.drawString(self.margin + 16, y, category.display_name)
            c.setFont("Helvetica", 9)
            c.drawString(
                self.margin + 220,
                y,
                f"{hours:.1f}h/week   {summary.units_by_category.get(code, 0)} units/week   "
                f"{summary.period_units_by_category.get(code, 0):,} units/"
                f"{summary.weeks_in_period} weeks",
            )

            bar_width = (hours / max_hours) * bar_max_width
            c.setFillColorRGB(*self._color(idx))
            c.rect(self.margin + 16, y - 14, bar_width, 6, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)

            breakdown = summary.location_breakdown.get(code, {})
            located = ", ".join(f"{n}: {h:.1f}h" for n, h in breakdown.items() if h > 0)
            c.setFont("Helvetica", 8)
            c.drawString(
                self.margin + 220, y - 13, located or "No sessions scheduled"
            )
            y -= 40

        y -= 10
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Daily Totals")
        y -= 18
        c.setFont("Helvetica", 9)
        for day in Day:
            c.drawString(
                self.margin + 20, y, f"{day.value}: {summary.hours_by_day.get(day, 0.0):.1f}h"
            )
            y -= 13

        if notes.strip():
            self._draw_notes(c, notes.strip(), y - 12)

        c.showPage()

    def _draw_notes(self, c, notes: str, y: float) -> None:
        """Draw wrapped schedule notes, continuing on new pages as needed."""
        from reportlab.lib.utils import simpleSplit

        width = self.page_width - 2 * self.margin
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Schedule Notes")
        y -= 18

        c.setFont("Helvetica", 9)
        for paragraph in notes.splitlines():
            for line in simpleSplit(paragraph, "Helvetica", 9, width) or [""]:
                if y < self.margin:
                    c.showPage()
                    c.setFont("Helvetica", 9)
                    y = self.page_height - self.margin - 20
                c.drawString(self.margin, y, line)
                y -= 12
