"""Domain models and business rules for service scheduling."""

from authscheduler.domain.exceptions import (
    ConfigurationError,
    FormatError,
    InvalidDuration,
    NotFoundError,
    OverlapConflict,
    SchedulerError,
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
    duration_hours,
    parse_time,
)
from authscheduler.domain.policies import (
    CompliancePolicy,
    DefaultUnitPolicy,
    UnitPolicy,
    billable_units,
    period_units,
)

__all__ = [
    # Models
    "Day",
    "Location",
    "Schedule",
    "ServiceCatalog",
    "ServiceCategory",
    "TimeOfDay",
    "TimeSlot",
    "duration_hours",
    "parse_time",
    # Policies
    "CompliancePolicy",
    "DefaultUnitPolicy",
    "UnitPolicy",
    "billable_units",
    "period_units",
    # Errors
    "ConfigurationError",
    "FormatError",
    "InvalidDuration",
    "NotFoundError",
    "OverlapConflict",
    "SchedulerError",
    "SchedulingError",
    "UnknownCodeError",
]
