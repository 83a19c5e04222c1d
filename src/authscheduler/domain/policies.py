"""Policy definitions for billing and compliance rules.

This module contains configurable policies that define business rules for
converting scheduled hours to billable units and the thresholds used by the
compliance validator. Policies are kept separate from the scheduling engine
so a clinic's policy is never baked into the engine itself.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from authscheduler.domain.exceptions import ConfigurationError

# 15-minute billing units
DEFAULT_UNITS_PER_HOUR = 4

# Six-month authorization period
DEFAULT_WEEKS_IN_PERIOD = 26


def billable_units(hours: float, units_per_hour: int = DEFAULT_UNITS_PER_HOUR) -> int:
    """Convert hours to whole billable units, rounding half up.

    Args:
        hours: Fractional hours (unrounded sum of session durations).
        units_per_hour: Billing units per hour.

    Returns:
        Whole number of units.
    """
    if not hours:
        return 0
    raw = Decimal(repr(float(hours))) * units_per_hour
    return int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def period_units(weekly_units: int, weeks_in_period: int) -> int:
    """Project weekly units over an authorization period.

    Args:
        weekly_units: Units per week.
        weeks_in_period: Number of weeks in the authorization period.
    """
    if weeks_in_period < 0:
        raise ConfigurationError(f"weeks_in_period must be >= 0, got {weeks_in_period}")
    return weekly_units * weeks_in_period


class UnitPolicy(ABC):
    """Abstract base class for billing unit conversion."""

    @abstractmethod
    def units_per_hour(self) -> int:
        """Number of billing units in one hour."""
        pass

    @abstractmethod
    def hours_to_units(self, hours: float) -> int:
        """Convert fractional hours to whole billing units."""
        pass


@dataclass
class DefaultUnitPolicy(UnitPolicy):
    """Default unit policy: 15-minute units, round half up.

    1.5 hours -> 6 units; 0 hours -> 0 units.
    """

    units: int = DEFAULT_UNITS_PER_HOUR

    def __post_init__(self):
        if self.units <= 0:
            raise ConfigurationError(f"units_per_hour must be positive, got {self.units}")

    def units_per_hour(self) -> int:
        return self.units

    def hours_to_units(self, hours: float) -> int:
        return billable_units(hours, self.units)

    @property
    def minutes_per_unit(self) -> float:
        return 60 / self.units


@dataclass
class CompliancePolicy:
    """Thresholds used by the compliance validator.

    Category references are codes; a rule whose codes are not configured in
    the catalog simply does not apply.

    Attributes:
        max_weekly_hours: Total weekly hours above which an error is raised.
        primary_categories: Direct-therapy categories that require companions.
        companion_categories: Categories expected whenever primary hours exist.
        companion_label: Human-readable name for the companion group.
        ratio_numerator_categories: Categories forming the ratio numerator
            (e.g., analyst supervision).
        ratio_denominator_categories: Categories forming the ratio denominator
            (e.g., technician hours).
        min_ratio_percent: Minimum numerator/denominator percentage.
        ratio_label: Human-readable name for the ratio.
    """

    max_weekly_hours: float = 40.0
    primary_categories: tuple[str, ...] = ("97153",)
    companion_categories: tuple[str, ...] = ("97156", "97156HN")
    companion_label: str = "parent training"
    ratio_numerator_categories: tuple[str, ...] = ("97155", "97155HN")
    ratio_denominator_categories: tuple[str, ...] = ("97153",)
    min_ratio_percent: float = 5.0
    ratio_label: str = "BCBA supervision"

    def __post_init__(self):
        # JSON configuration supplies lists
        self.primary_categories = _codes("primary_categories", self.primary_categories)
        self.companion_categories = _codes("companion_categories", self.companion_categories)
        self.ratio_numerator_categories = _codes(
            "ratio_numerator_categories", self.ratio_numerator_categories
        )
        self.ratio_denominator_categories = _codes(
            "ratio_denominator_categories", self.ratio_denominator_categories
        )

        for name in ("max_weekly_hours", "min_ratio_percent"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
        for name in ("companion_label", "ratio_label"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"{name} must be text, got {getattr(self, name)!r}")

        if self.max_weekly_hours <= 0:
            raise ConfigurationError(
                f"max_weekly_hours must be positive, got {self.max_weekly_hours}"
            )
        if not 0 <= self.min_ratio_percent <= 100:
            raise ConfigurationError(
                f"min_ratio_percent must be between 0 and 100, got {self.min_ratio_percent}"
            )


def _codes(name: str, value) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{name} must be a list of category codes, got {value!r}")
    if not all(isinstance(code, str) for code in value):
        raise ConfigurationError(f"{name} must contain only category codes, got {value!r}")
    return tuple(value)
