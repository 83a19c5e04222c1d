"""Plain-text output for schedules and weekly summaries.

This module produces:
- A tab-separated day x category grid for clipboard copy or printing
- A human-readable summary block (hours, units, locations, warnings)
"""

from pathlib import Path
from typing import Optional, Union

from authscheduler.domain.models import Day, Schedule, ServiceCatalog, TimeSlot
from authscheduler.scheduling.aggregation import WeeklySummary
from authscheduler.validation.validator import ComplianceResult

DEFAULT_SEPARATOR = "; "


def format_hours(hours: float) -> str:
    """Format hours with up to two decimals, trailing zeros stripped."""
    text = f"{hours:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def format_slot(slot: TimeSlot) -> str:
    """Render one slot as ``start-end (duration h, location)``."""
    return f"{slot.start}-{slot.end} ({format_hours(slot.duration_hours)}h, {slot.location})"


def to_tabular_text(
    schedule: Schedule,
    catalog: Optional[ServiceCatalog] = None,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Flatten a schedule into a tab-separated day x category grid.

    The first row is ``Day`` followed by the category codes; each following
    row is one day, every cell listing that bucket's slots joined by the
    separator (empty when there are none).
    """
    catalog = catalog or ServiceCatalog.create_default()
    codes = catalog.category_codes

    lines = ["\t".join(["Day"] + codes)]
    for day in Day:
        cells = [day.value]
        for code in codes:
            cells.append(separator.join(format_slot(s) for s in schedule.slots(day, code)))
        lines.append("\t".join(cells))
    return "\n".join(lines) + "\n"


class TextExporter:
    """Generates text output for a schedule session.

    Example:
        >>> exporter = TextExporter(catalog)
        >>> exporter.generate(schedule, summary, result, "schedule.txt")
    """

    def __init__(self, catalog: Optional[ServiceCatalog] = None):
        self.catalog = catalog or ServiceCatalog.create_default()

    def generate(
        self,
        schedule: Schedule,
        summary: WeeklySummary,
        compliance: ComplianceResult,
        output_path: Union[str, Path],
        notes: str = "",
    ) -> str:
        """Write the grid plus summary to a file and return the content."""
        content = self.generate_to_string(schedule, summary, compliance, notes)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        schedule: Schedule,
        summary: WeeklySummary,
        compliance: ComplianceResult,
        notes: str = "",
    ) -> str:
        parts = [
            to_tabular_text(schedule, self.catalog),
            self.summary_text(summary, compliance),
        ]
        if notes.strip():
            parts.append("SCHEDULE NOTES\n" + notes.strip() + "\n")
        return "\n".join(parts)

    def summary_text(self, summary: WeeklySummary, compliance: ComplianceResult) -> str:
        """Human-readable weekly summary with compliance findings."""
        lines = []
        lines.append("=" * 60)
        lines.append("WEEKLY SUMMARY BY SERVICE CATEGORY")
        lines.append("=" * 60)
        lines.append(f"Total hours/week: {summary.total_hours:.1f}")
        lines.append(
            f"Total units/week: {summary.total_units}  "
            f"(period of {summary.weeks_in_period} weeks: {summary.total_period_units:,})"
        )
        lines.append("")

        for category in self.catalog.categories:
            code = category.code
            hours = summary.hours_by_category.get(code, 0.0)
            lines.append(f"{category.display_name}")
            lines.append(
                f"  {hours:.1f}h/week  {summary.units_by_category.get(code, 0)} units/week  "
                f"{summary.period_units_by_category.get(code, 0):,} units/period"
            )
            if hours == 0:
                lines.append("  No sessions scheduled")
                continue
            breakdown = summary.location_breakdown.get(code, {})
            located = [f"{name}: {h:.1f}h" for name, h in breakdown.items() if h > 0]
            lines.append("  " + ", ".join(located))

        lines.append("")
        lines.append("Daily totals:")
        for day in Day:
            lines.append(f"  {day.short_name}: {summary.hours_by_day.get(day, 0.0):.1f}h")

        lines.append("")
        lines.append("Compliance:")
        for warning in compliance.warnings:
            lines.append(f"  {warning}")

        return "\n".join(lines) + "\n"
