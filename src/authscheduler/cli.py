"""Command-line interface for the service authorization scheduler."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from authscheduler.config import SchedulerConfig, load_config
from authscheduler.domain.exceptions import SchedulerError
from authscheduler.domain.models import Day
from authscheduler.output.pdf_generator import PDFGenerator
from authscheduler.output.text_export import TextExporter, to_tabular_text
from authscheduler.scheduling.aggregation import WeeklySummary
from authscheduler.scheduling.store import ScheduleStore
from authscheduler.scheduling.suggester import (
    ScheduleSuggester,
    SuggesterConfig,
    SuggestionRequest,
)
from authscheduler.validation.validator import ComplianceResult, ComplianceValidator

logger = logging.getLogger(__name__)


def create_sample_schedule(config: SchedulerConfig) -> ScheduleStore:
    """Create a sample week of ABA services.

    Technician sessions every weekday morning, analyst supervision twice a
    week and one evening of family training.
    """
    store = ScheduleStore(config.catalog)

    weekdays = [Day.MONDAY, Day.TUESDAY, Day.WEDNESDAY, Day.THURSDAY, Day.FRIDAY]
    for day in weekdays:
        location = "Community" if day == Day.WEDNESDAY else "Home"
        store.add_slot(day, "97153", "09:00", "12:00", location).unwrap()

    store.add_slot(Day.TUESDAY, "97155", "10:00", "11:00", "Home").unwrap()
    store.add_slot(Day.THURSDAY, "97155", "10:00", "11:00", "Telehealth").unwrap()
    store.add_slot(Day.THURSDAY, "97156", "17:00", "18:00", "Telehealth").unwrap()

    return store


def evaluate(
    store: ScheduleStore,
    config: SchedulerConfig,
    weeks: Optional[int] = None,
) -> tuple[WeeklySummary, ComplianceResult]:
    """Aggregate a schedule and run the compliance rules on it."""
    summary = WeeklySummary.calculate(
        store.schedule,
        config.catalog,
        config.unit_policy,
        config.weeks_in_period if weeks is None else weeks,
    )
    validator = ComplianceValidator(config.catalog, config.compliance)
    return summary, validator.validate(summary)


def load_schedule(path: str, config: SchedulerConfig) -> ScheduleStore:
    """Load a schedule JSON file written by ``ScheduleStore.to_dict``."""
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise SchedulerError(f"Cannot load schedule {path}: {e}") from e
    return ScheduleStore.from_dict(data, config.catalog)


def run_demo(
    config: SchedulerConfig,
    weeks: Optional[int] = None,
    output_path: Optional[str] = None,
) -> None:
    """Build the sample schedule and print summary, warnings and grid."""
    print("Building sample weekly service schedule...")
    store = create_sample_schedule(config)
    summary, result = evaluate(store, config, weeks)

    exporter = TextExporter(config.catalog)
    print()
    print(to_tabular_text(store.schedule, config.catalog))
    print(exporter.summary_text(summary, result))

    if output_path:
        print(f"Generating PDF: {output_path}")
        PDFGenerator(config.catalog).generate(store.schedule, summary, result, output_path)
        print("  PDF created successfully!")


def run_summary(config: SchedulerConfig, schedule_path: str, weeks: Optional[int] = None) -> int:
    """Print the summary and compliance findings for a saved schedule.

    Returns 1 if any error-severity finding is present, else 0.
    """
    store = load_schedule(schedule_path, config)
    summary, result = evaluate(store, config, weeks)
    print(TextExporter(config.catalog).summary_text(summary, result))
    return 1 if result.has_errors else 0


def run_export(
    config: SchedulerConfig,
    schedule_path: str,
    fmt: str = "text",
    output_path: Optional[str] = None,
    notes: str = "",
) -> None:
    """Export a saved schedule as text or PDF."""
    store = load_schedule(schedule_path, config)
    summary, result = evaluate(store, config)

    if fmt == "pdf":
        output_path = output_path or str(Path(schedule_path).with_suffix(".pdf"))
        PDFGenerator(config.catalog).generate(
            store.schedule, summary, result, output_path, notes=notes
        )
        print(f"PDF written to {output_path}")
        return

    exporter = TextExporter(config.catalog)
    if output_path:
        exporter.generate(store.schedule, summary, result, output_path, notes)
        print(f"Text written to {output_path}")
    else:
        print(exporter.generate_to_string(store.schedule, summary, result, notes))


def parse_hours(values: list[str]) -> dict[str, float]:
    """Parse ``CODE=HOURS`` arguments."""
    targets = {}
    for value in values:
        code, sep, hours = value.partition("=")
        if not sep:
            raise SchedulerError(f"Expected CODE=HOURS, got {value!r}")
        try:
            targets[code.strip()] = float(hours)
        except ValueError:
            raise SchedulerError(f"Invalid hours in {value!r}") from None
    return targets


def run_suggest(
    config: SchedulerConfig,
    hours: list[str],
    time_limit: float = 10.0,
    max_daily_hours: Optional[float] = None,
    output_path: Optional[str] = None,
) -> int:
    """Suggest a schedule meeting target weekly hours per category."""
    request = SuggestionRequest.create_standard(parse_hours(hours))
    request.max_daily_hours = max_daily_hours

    print(f"Suggesting schedule for {request.target_hours}...")
    suggester = ScheduleSuggester(
        config.catalog, SuggesterConfig(time_limit_seconds=time_limit)
    )
    suggestion = suggester.suggest(request)

    print(f"  Solver status: {suggestion.status} ({suggestion.solve_time_seconds:.2f}s)")
    if not suggestion.is_feasible:
        print("  No schedule found.")
        return 1

    for code, minutes in suggestion.deviation_minutes.items():
        if minutes:
            print(f"  {code}: {minutes:+d} min from target")

    store = suggestion.store
    summary, result = evaluate(store, config)
    print()
    print(to_tabular_text(store.schedule, config.catalog))
    print(TextExporter(config.catalog).summary_text(summary, result))

    if output_path:
        Path(output_path).write_text(json.dumps(store.to_dict(), indent=2))
        print(f"Schedule written to {output_path}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Weekly service authorization scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                          Show a sample week with summary
  %(prog)s demo --output sched.pdf       Also render it to PDF
  %(prog)s summary week.json             Summary and compliance for a schedule
  %(prog)s export week.json --format pdf Export a schedule as PDF
  %(prog)s suggest --hours 97153=20 --hours 97155=2 --hours 97156=1
        """,
    )
    parser.add_argument("--config", type=str, help="JSON configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Show a sample weekly schedule")
    demo_parser.add_argument(
        "--weeks", "-w",
        type=int,
        help="Weeks in the authorization period (default: from config, 26)",
    )
    demo_parser.add_argument("--output", "-o", type=str, help="Output PDF file path")

    summary_parser = subparsers.add_parser(
        "summary", help="Summarize and validate a saved schedule"
    )
    summary_parser.add_argument("schedule", help="Schedule JSON file")
    summary_parser.add_argument("--weeks", "-w", type=int, help="Weeks in the authorization period")

    export_parser = subparsers.add_parser("export", help="Export a saved schedule")
    export_parser.add_argument("schedule", help="Schedule JSON file")
    export_parser.add_argument(
        "--format", "-f",
        type=str,
        default="text",
        choices=["text", "pdf"],
        help="Output format (default: text)",
    )
    export_parser.add_argument("--output", "-o", type=str, help="Output file path")
    export_parser.add_argument("--notes", type=str, default="", help="Schedule notes to include")

    suggest_parser = subparsers.add_parser(
        "suggest", help="Suggest a schedule for target weekly hours"
    )
    suggest_parser.add_argument(
        "--hours",
        action="append",
        required=True,
        metavar="CODE=HOURS",
        help="Target weekly hours for a category (repeatable)",
    )
    suggest_parser.add_argument(
        "--time-limit", "-t",
        type=float,
        default=10.0,
        help="CP-SAT solver time limit in seconds (default: 10)",
    )
    suggest_parser.add_argument(
        "--max-daily-hours",
        type=float,
        help="Cap on total scheduled hours per day",
    )
    suggest_parser.add_argument("--output", "-o", type=str, help="Write schedule JSON here")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config) if args.config else SchedulerConfig()

        if args.command == "demo":
            run_demo(config, args.weeks, args.output)
            return 0
        elif args.command == "summary":
            return run_summary(config, args.schedule, args.weeks)
        elif args.command == "export":
            run_export(config, args.schedule, args.format, args.output, args.notes)
            return 0
        elif args.command == "suggest":
            return run_suggest(
                config, args.hours, args.time_limit, args.max_daily_hours, args.output
            )
    except SchedulerError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
