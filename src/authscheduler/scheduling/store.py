"""Schedule store: the single owner of a weekly service schedule.

Every mutation goes through ``add_slot`` / ``remove_slot``. Each call either
moves the schedule from one valid state to another or is rejected, leaving the
schedule untouched. Expected domain violations (bad duration, overlap, stale
slot id) are returned in a SlotResult rather than raised.

The store has no locking. A host sharing one store between threads must give
add/remove exclusive access, otherwise an overlap check can interleave with a
concurrent insert.
"""

import copy
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from authscheduler.domain.exceptions import (
    FormatError,
    InvalidDuration,
    NotFoundError,
    OverlapConflict,
    SchedulingError,
    UnknownCodeError,
)
from authscheduler.domain.models import (
    Day,
    Location,
    Schedule,
    ServiceCatalog,
    ServiceCategory,
    TimeOfDay,
    TimeSlot,
    parse_time,
)
from authscheduler.scheduling.conflicts import ConflictDetector

logger = logging.getLogger(__name__)

TimeInput = Union[str, TimeOfDay]
CategoryInput = Union[str, ServiceCategory]
LocationInput = Union[str, Location]
DayInput = Union[str, Day]


@dataclass
class SlotResult:
    """Outcome of a store mutation.

    Attributes:
        ok: True if the mutation was applied.
        value: Slot id for a successful add, None otherwise.
        error: The domain error when the mutation was rejected.
    """

    ok: bool
    value: Optional[str] = None
    error: Optional[SchedulingError] = None

    @classmethod
    def success(cls, value: Optional[str] = None) -> "SlotResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: SchedulingError) -> "SlotResult":
        return cls(ok=False, error=error)

    def unwrap(self) -> Optional[str]:
        """Return the value, or raise the carried error."""
        if not self.ok:
            raise self.error
        return self.value


class ScheduleStore:
    """Mutable single-owner handle around a Schedule.

    Example:
        >>> store = ScheduleStore()
        >>> result = store.add_slot(Day.MONDAY, "97153", "09:00", "11:00", "Home")
        >>> result.ok
        True
        >>> store.list_slots(Day.MONDAY, "97153")[0].duration_hours
        2.0
    """

    def __init__(self, catalog: Optional[ServiceCatalog] = None):
        self.catalog = catalog or ServiceCatalog.create_default()
        self.conflict_detector = ConflictDetector()
        self._schedule = Schedule()
        self._ids = itertools.count(1)

    @property
    def schedule(self) -> Schedule:
        """The live schedule. Callers must not mutate it directly."""
        return self._schedule

    def snapshot(self) -> Schedule:
        """Independent copy of the current schedule."""
        return copy.deepcopy(self._schedule)

    def clear(self) -> None:
        """Discard every slot (start a new session)."""
        self._schedule = Schedule()
        logger.debug("Schedule cleared")

    def add_slot(
        self,
        day: DayInput,
        category: CategoryInput,
        start: TimeInput,
        end: TimeInput,
        location: LocationInput,
    ) -> SlotResult:
        """Add a session to the (day, category) bucket.

        Args:
            day: Day of the week, or its full or three-letter name.
            category: Service category or its code.
            start: Start time (TimeOfDay or "HH:MM").
            end: End time (TimeOfDay or "HH:MM").
            location: Location or its name.

        Returns:
            SlotResult with the new slot id, or carrying InvalidDuration /
            OverlapConflict.

        Raises:
            FormatError: If a time string is malformed.
            UnknownCodeError: If the day, category or location is unknown.
        """
        day = self._resolve_day(day)
        code = self._resolve_category(category)
        place = self._resolve_location(location)
        start_time = self._resolve_time(start)
        end_time = self._resolve_time(end)

        if end_time <= start_time:
            error = InvalidDuration(
                f"End time {end_time} must be after start time {start_time}"
            )
            logger.info("Rejected slot %s %s %s-%s: %s", day.value, code, start_time, end_time, error)
            return SlotResult.failure(error)

        existing = self.list_slots(day, code)
        conflicts = self.conflict_detector.find_conflicts(start_time, end_time, existing)
        if conflicts:
            clash = conflicts[0]
            error = OverlapConflict(
                f"{start_time}-{end_time} overlaps existing session "
                f"{clash.start}-{clash.end} on {day.value} for {code}",
                conflicting_slot=clash,
            )
            logger.info("Rejected slot %s %s %s-%s: overlap with %s", day.value, code, start_time, end_time, clash.id)
            return SlotResult.failure(error)

        slot = TimeSlot(
            id=f"{day.value}-{code}-{next(self._ids)}",
            start=start_time,
            end=end_time,
            location=place,
        )
        self._schedule.buckets.setdefault(day, {}).setdefault(code, []).append(slot)
        logger.debug("Added %r to %s/%s", slot, day.value, code)
        return SlotResult.success(slot.id)

    def remove_slot(self, day: DayInput, category: CategoryInput, slot_id: str) -> SlotResult:
        """Remove a slot from the (day, category) bucket.

        Returns:
            Successful SlotResult, or one carrying NotFoundError when the id
            is not in that bucket.
        """
        day = self._resolve_day(day)
        code = self._resolve_category(category)
        slots = self._schedule.buckets.get(day, {}).get(code, [])
        for index, slot in enumerate(slots):
            if slot.id == slot_id:
                del slots[index]
                logger.debug("Removed %r from %s/%s", slot, day.value, code)
                return SlotResult.success(slot_id)

        error = NotFoundError(
            f"No slot {slot_id!r} on {day.value} for {code}", slot_id=slot_id
        )
        logger.info("Rejected removal: %s", error)
        return SlotResult.failure(error)

    def list_slots(self, day: DayInput, category: CategoryInput) -> tuple[TimeSlot, ...]:
        """Slots in a bucket, in insertion order."""
        return self._schedule.slots(self._resolve_day(day), self._resolve_category(category))

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        catalog: Optional[ServiceCatalog] = None,
    ) -> "ScheduleStore":
        """Rebuild a store from ``schedule_to_dict`` output.

        Slots are replayed through ``add_slot`` so every invariant is
        re-checked. Stored ids and hours are not trusted; fresh ids are
        assigned.

        Raises:
            SchedulingError: If a stored slot is rejected.
            FormatError: If the data does not have the ``schedule_to_dict``
                shape or a stored time is malformed.
            UnknownCodeError: If a day, category or location is unknown.
        """
        if not isinstance(data, dict):
            raise FormatError(
                f"Schedule data must be an object keyed by day, got {type(data).__name__}"
            )
        store = cls(catalog)
        for day_name, categories in data.items():
            day = Day.parse(day_name)
            if not isinstance(categories, dict):
                raise FormatError(f"{day.value}: expected an object keyed by category code")
            for code, slots in categories.items():
                if not isinstance(slots, list):
                    raise FormatError(f"{day.value}/{code}: expected a list of slots")
                for index, entry in enumerate(slots):
                    where = f"{day.value}/{code}[{index}]"
                    if not isinstance(entry, dict):
                        raise FormatError(f"{where}: expected a slot object, got {entry!r}")
                    missing = [k for k in ("start", "end", "location") if k not in entry]
                    if missing:
                        raise FormatError(f"{where}: missing {', '.join(missing)}")
                    store.add_slot(
                        day, code, entry["start"], entry["end"], entry["location"]
                    ).unwrap()
        return store

    def to_dict(self) -> dict[str, Any]:
        return schedule_to_dict(self._schedule)

    @staticmethod
    def _resolve_day(day: DayInput) -> Day:
        if isinstance(day, Day):
            return day
        if isinstance(day, str):
            return Day.parse(day)
        raise UnknownCodeError(f"Unknown day: {day!r}")

    def _resolve_category(self, category: CategoryInput) -> str:
        code = category.code if isinstance(category, ServiceCategory) else category
        return self.catalog.category(code).code

    def _resolve_location(self, location: LocationInput) -> Location:
        name = location.name if isinstance(location, Location) else location
        if not isinstance(name, str):
            raise UnknownCodeError(f"Unknown location: {name!r}")
        return self.catalog.location(name)

    @staticmethod
    def _resolve_time(value: TimeInput) -> TimeOfDay:
        if isinstance(value, TimeOfDay):
            return value
        return parse_time(value)


def schedule_to_dict(schedule: Schedule) -> dict[str, Any]:
    """Flatten a schedule into JSON-compatible plain data.

    Only populated buckets appear. Shape::

        {"Monday": {"97153": [{"id": ..., "start": "09:00", "end": "11:00",
                               "location": "Home", "hours": 2.0}]}}
    """
    data: dict[str, Any] = {}
    for day, code, slot in schedule.iter_slots():
        data.setdefault(day.value, {}).setdefault(code, []).append(
            {
                "id": slot.id,
                "start": str(slot.start),
                "end": str(slot.end),
                "location": slot.location.name,
                "hours": slot.duration_hours,
            }
        )
    return data
