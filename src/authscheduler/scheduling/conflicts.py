"""Time-slot conflict detection within a single (day, category) bucket."""

from typing import Iterable

from authscheduler.domain.models import TimeOfDay, TimeSlot


def slots_overlap(
    a_start: TimeOfDay,
    a_end: TimeOfDay,
    b_start: TimeOfDay,
    b_end: TimeOfDay,
) -> bool:
    """Check whether two half-open intervals [start, end) intersect.

    A slot ending exactly when another begins does not overlap it.
    """
    return a_start < b_end and b_start < a_end


class ConflictDetector:
    """Finds existing slots that a candidate slot would collide with.

    Only slots from the same bucket should be passed in; slots in other
    categories on the same day are allowed to overlap.

    Example:
        >>> detector = ConflictDetector()
        >>> detector.has_conflict(start, end, store.list_slots(day, "97153"))
        False
    """

    def find_conflicts(
        self,
        start: TimeOfDay,
        end: TimeOfDay,
        existing: Iterable[TimeSlot],
    ) -> list[TimeSlot]:
        """Return every existing slot overlapping [start, end), in order."""
        return [
            slot for slot in existing
            if slots_overlap(start, end, slot.start, slot.end)
        ]

    def has_conflict(
        self,
        start: TimeOfDay,
        end: TimeOfDay,
        existing: Iterable[TimeSlot],
    ) -> bool:
        return any(
            slots_overlap(start, end, slot.start, slot.end) for slot in existing
        )
