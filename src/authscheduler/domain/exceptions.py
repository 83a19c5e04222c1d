"""Exception hierarchy for the service authorization scheduler."""


class SchedulerError(Exception):
    """Base class for all scheduler errors."""


class FormatError(SchedulerError, ValueError):
    """Raised when a time string or stored schedule data is malformed."""


class UnknownCodeError(SchedulerError, KeyError):
    """Raised when a service category or location is not configured."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class ConfigurationError(SchedulerError, ValueError):
    """Raised when scheduler configuration fails validation."""


class SchedulingError(SchedulerError):
    """Expected domain violation returned inside a SlotResult."""


class InvalidDuration(SchedulingError):
    """Slot end time is not strictly after its start time."""


class OverlapConflict(SchedulingError):
    """Candidate slot overlaps an existing slot in the same bucket."""

    def __init__(self, message: str, conflicting_slot=None):
        super().__init__(message)
        self.conflicting_slot = conflicting_slot


class NotFoundError(SchedulingError):
    """Slot id is not present in the bucket it was removed from."""

    def __init__(self, message: str, slot_id: str = ""):
        super().__init__(message)
        self.slot_id = slot_id
