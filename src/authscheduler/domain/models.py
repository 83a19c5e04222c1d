"""Domain models for the weekly service schedule.

This module contains the core data structures used throughout the scheduler:
wall-clock times, service categories and locations, time slots and the
schedule itself. Derived values (hours, units, warnings) live elsewhere and
are always recomputed from a Schedule.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from authscheduler.domain.exceptions import (
    ConfigurationError,
    FormatError,
    UnknownCodeError,
)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """A wall-clock time within a single abstract day.

    Attributes:
        hour: Hour of the day (0-23).
        minute: Minute of the hour (0-59).
    """

    hour: int
    minute: int = 0

    def __post_init__(self):
        if not 0 <= self.hour <= 23:
            raise FormatError(f"Hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise FormatError(f"Minute must be between 0 and 59, got {self.minute}")

    @classmethod
    def parse(cls, text: str) -> "TimeOfDay":
        """Parse a 24-hour ``HH:MM`` string."""
        return parse_time(text)

    @classmethod
    def from_minutes(cls, minutes: int) -> "TimeOfDay":
        """Create a time from minutes since midnight."""
        hours, mins = divmod(minutes, 60)
        return cls(hour=hours, minute=mins)

    def to_minutes(self) -> int:
        """Minutes since midnight."""
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_time(text: str) -> TimeOfDay:
    """Parse a 24-hour ``HH:MM`` string into a TimeOfDay.

    Raises:
        FormatError: If the text is not a valid 24-hour time.
    """
    if not isinstance(text, str):
        raise FormatError(f"Expected HH:MM text, got {type(text).__name__}")
    match = _TIME_PATTERN.match(text.strip())
    if match is None:
        raise FormatError(f"Invalid time {text!r}, expected HH:MM (24-hour)")
    return TimeOfDay(hour=int(match.group(1)), minute=int(match.group(2)))


def duration_hours(start: TimeOfDay, end: TimeOfDay) -> float:
    """Elapsed time from start to end in fractional hours.

    Zero or negative results are returned as-is; callers decide whether
    they are acceptable.
    """
    return (end.to_minutes() - start.to_minutes()) / 60


class Day(Enum):
    """Days of the scheduling week, Monday first."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def parse(cls, text: str) -> "Day":
        """Parse a full or three-letter day name (case insensitive)."""
        key = text.strip().lower()
        for day in cls:
            if key in (day.value.lower(), day.value[:3].lower()):
                return day
        raise UnknownCodeError(f"Unknown day: {text!r}")

    @property
    def short_name(self) -> str:
        return self.value[:3]


@dataclass(frozen=True)
class ServiceCategory:
    """A billing/service code for a scheduled session.

    Attributes:
        code: Billing code (e.g., "97153").
        label: Short provider-role label (e.g., "RBT").
        description: Longer display text.
    """

    code: str
    label: str = ""
    description: str = ""

    @property
    def display_name(self) -> str:
        if self.label:
            return f"{self.code} - {self.label}"
        return self.code


@dataclass(frozen=True)
class Location:
    """A delivery setting for a session (e.g., Home, Telehealth)."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ServiceCatalog:
    """The configured set of service categories and delivery locations.

    Order is significant: it is the column order of the schedule grid and the
    order summaries are reported in.

    Attributes:
        categories: Service categories, in display order.
        locations: Delivery locations, in display order.
    """

    categories: tuple[ServiceCategory, ...]
    locations: tuple[Location, ...]

    def __post_init__(self):
        if not self.categories:
            raise ConfigurationError("At least one service category is required")
        if not self.locations:
            raise ConfigurationError("At least one location is required")
        codes = [c.code for c in self.categories]
        if len(set(codes)) != len(codes):
            raise ConfigurationError(f"Duplicate service category codes: {codes}")
        # Lookup is case insensitive, so "Home" and "home" collide
        names = [loc.name.strip().lower() for loc in self.locations]
        if len(set(names)) != len(names):
            raise ConfigurationError(
                f"Duplicate location names: {[loc.name for loc in self.locations]}"
            )

    @classmethod
    def create_default(cls) -> "ServiceCatalog":
        """Create the standard ABA catalog (five CPT codes, three settings)."""
        return cls(
            categories=(
                ServiceCategory("97153", "RBT", "Behavior Technician"),
                ServiceCategory("97155", "BCBA", "Lead Analyst"),
                ServiceCategory("97155HN", "BCaBA", "Assistant Analyst"),
                ServiceCategory("97156", "BCBA - Family", "Family Training"),
                ServiceCategory("97156HN", "BCaBA - Family", "Family Training Assistant"),
            ),
            locations=(
                Location("Home"),
                Location("Community"),
                Location("Telehealth"),
            ),
        )

    @property
    def category_codes(self) -> list[str]:
        return [c.code for c in self.categories]

    @property
    def location_names(self) -> list[str]:
        return [loc.name for loc in self.locations]

    def has_category(self, code: str) -> bool:
        return any(c.code == code for c in self.categories)

    def category(self, code: str) -> ServiceCategory:
        """Look up a category by code."""
        for category in self.categories:
            if category.code == code:
                return category
        raise UnknownCodeError(f"Unknown service category: {code!r}")

    def location(self, name: str) -> Location:
        """Look up a location by name (case insensitive)."""
        for location in self.locations:
            if location.name.lower() == name.strip().lower():
                return location
        raise UnknownCodeError(f"Unknown location: {name!r}")


@dataclass(frozen=True)
class TimeSlot:
    """One scheduled session.

    The (day, category) the slot belongs to is its position in the Schedule,
    not an attribute of the slot.

    Attributes:
        id: Unique identifier assigned by the store.
        start: Session start time.
        end: Session end time (strictly after start).
        location: Delivery setting.
    """

    id: str
    start: TimeOfDay
    end: TimeOfDay
    location: Location

    @property
    def duration_hours(self) -> float:
        return duration_hours(self.start, self.end)

    @property
    def duration_minutes(self) -> int:
        return self.end.to_minutes() - self.start.to_minutes()

    def __repr__(self) -> str:
        return f"TimeSlot({self.id}: {self.start}-{self.end} @ {self.location})"


@dataclass
class Schedule:
    """Weekly schedule: Day -> category code -> ordered time slots.

    Buckets are created on first insert. Mutation goes through ScheduleStore;
    everything else treats a Schedule as read-only.

    Attributes:
        buckets: Nested mapping of day and category code to slots.
    """

    buckets: dict[Day, dict[str, list[TimeSlot]]] = field(default_factory=dict)

    def slots(self, day: Day, code: str) -> tuple[TimeSlot, ...]:
        """Slots in a bucket, in insertion order (empty if never populated)."""
        return tuple(self.buckets.get(day, {}).get(code, ()))

    def iter_slots(self) -> Iterator[tuple[Day, str, TimeSlot]]:
        """Yield (day, code, slot) for every slot in day order."""
        for day in Day:
            for code, slots in self.buckets.get(day, {}).items():
                for slot in slots:
                    yield day, code, slot

    def find_slot(self, slot_id: str) -> Optional[tuple[Day, str, TimeSlot]]:
        """Locate a slot anywhere in the week by id."""
        for day, code, slot in self.iter_slots():
            if slot.id == slot_id:
                return day, code, slot
        return None

    @property
    def slot_count(self) -> int:
        return sum(1 for _ in self.iter_slots())

    @property
    def is_empty(self) -> bool:
        return self.slot_count == 0
