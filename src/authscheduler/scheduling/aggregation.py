"""Hours and billing-unit aggregation over a weekly schedule.

All functions are pure reads of a Schedule. Session durations are summed as
fractional hours with no intermediate rounding; rounding happens only when
hours are converted to billable units.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from authscheduler.domain.models import (
    Day,
    Location,
    Schedule,
    ServiceCatalog,
    ServiceCategory,
)
from authscheduler.domain.policies import (
    DEFAULT_UNITS_PER_HOUR,
    DEFAULT_WEEKS_IN_PERIOD,
    DefaultUnitPolicy,
    UnitPolicy,
    period_units,
)

CategoryRef = Union[str, ServiceCategory]


def _code(category: CategoryRef) -> str:
    return category.code if isinstance(category, ServiceCategory) else category


def hours_by_category(schedule: Schedule, category: CategoryRef) -> float:
    """Total weekly hours for one category across all days."""
    code = _code(category)
    return sum(
        (slot.duration_hours for day in Day for slot in schedule.slots(day, code)),
        0.0,
    )


def hours_by_day(schedule: Schedule, day: Day) -> float:
    """Total hours on one day across all categories."""
    return sum(
        (
            slot.duration_hours
            for slots in schedule.buckets.get(day, {}).values()
            for slot in slots
        ),
        0.0,
    )


def location_breakdown(
    schedule: Schedule,
    category: CategoryRef,
    locations: Iterable[Union[str, Location]],
) -> dict[str, float]:
    """Weekly hours per location for one category.

    Every known location starts at zero so an unscheduled category reports
    all-zero rather than missing keys.
    """
    code = _code(category)
    breakdown = {
        (loc.name if isinstance(loc, Location) else loc): 0.0 for loc in locations
    }
    for day in Day:
        for slot in schedule.slots(day, code):
            name = slot.location.name
            breakdown[name] = breakdown.get(name, 0.0) + slot.duration_hours
    return breakdown


def total_weekly_hours(
    schedule: Schedule,
    categories: Optional[Iterable[CategoryRef]] = None,
) -> float:
    """Sum of hours_by_category over the given categories.

    Args:
        schedule: The schedule to read.
        categories: Categories to include. Defaults to every category that
            has a bucket in the schedule.
    """
    if categories is None:
        codes: list[str] = []
        for day_buckets in schedule.buckets.values():
            for code in day_buckets:
                if code not in codes:
                    codes.append(code)
    else:
        codes = [_code(c) for c in categories]
    return sum((hours_by_category(schedule, code) for code in codes), 0.0)


def combined_hours(schedule: Schedule, categories: Iterable[CategoryRef]) -> float:
    """Hours summed over a group of categories (e.g., 97155 + 97155HN)."""
    return sum((hours_by_category(schedule, c) for c in categories), 0.0)


@dataclass
class WeeklySummary:
    """Derived weekly totals for a schedule.

    Always recomputed from a Schedule; never mutated independently.

    Attributes:
        hours_by_category: Category code -> weekly hours.
        hours_by_day: Day -> hours across all categories.
        location_breakdown: Category code -> location name -> hours.
        total_hours: Total weekly hours.
        units_by_category: Category code -> weekly billable units.
        period_units_by_category: Category code -> units over the period.
        weeks_in_period: Length of the authorization period in weeks.
        units_per_hour: Conversion factor used for units.
    """

    hours_by_category: dict[str, float] = field(default_factory=dict)
    hours_by_day: dict[Day, float] = field(default_factory=dict)
    location_breakdown: dict[str, dict[str, float]] = field(default_factory=dict)
    total_hours: float = 0.0
    units_by_category: dict[str, int] = field(default_factory=dict)
    period_units_by_category: dict[str, int] = field(default_factory=dict)
    weeks_in_period: int = DEFAULT_WEEKS_IN_PERIOD
    units_per_hour: int = DEFAULT_UNITS_PER_HOUR

    @classmethod
    def calculate(
        cls,
        schedule: Schedule,
        catalog: ServiceCatalog,
        unit_policy: Optional[UnitPolicy] = None,
        weeks_in_period: int = DEFAULT_WEEKS_IN_PERIOD,
    ) -> "WeeklySummary":
        """Compute every weekly aggregate for a schedule."""
        unit_policy = unit_policy or DefaultUnitPolicy()

        by_category = {
            code: hours_by_category(schedule, code) for code in catalog.category_codes
        }
        units = {code: unit_policy.hours_to_units(h) for code, h in by_category.items()}

        return cls(
            hours_by_category=by_category,
            hours_by_day={day: hours_by_day(schedule, day) for day in Day},
            location_breakdown={
                code: location_breakdown(schedule, code, catalog.locations)
                for code in catalog.category_codes
            },
            total_hours=total_weekly_hours(schedule, catalog.category_codes),
            units_by_category=units,
            period_units_by_category={
                code: period_units(u, weeks_in_period) for code, u in units.items()
            },
            weeks_in_period=weeks_in_period,
            units_per_hour=unit_policy.units_per_hour(),
        )

    def hours_for(self, codes: Iterable[str]) -> float:
        """Combined hours for a group of category codes (unknown codes add 0)."""
        return sum((self.hours_by_category.get(code, 0.0) for code in codes), 0.0)

    @property
    def total_units(self) -> int:
        return sum(self.units_by_category.values())

    @property
    def total_period_units(self) -> int:
        return sum(self.period_units_by_category.values())

    @property
    def busiest_day(self) -> Optional[Day]:
        if not any(self.hours_by_day.values()):
            return None
        return max(self.hours_by_day, key=lambda d: self.hours_by_day[d])
