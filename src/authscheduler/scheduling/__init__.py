"""Schedule store, conflict detection, aggregation and layout suggestion."""

from authscheduler.scheduling.aggregation import (
    WeeklySummary,
    combined_hours,
    hours_by_category,
    hours_by_day,
    location_breakdown,
    total_weekly_hours,
)
from authscheduler.scheduling.conflicts import ConflictDetector, slots_overlap
from authscheduler.scheduling.store import ScheduleStore, SlotResult, schedule_to_dict
from authscheduler.scheduling.suggester import (
    CategoryWindow,
    ScheduleSuggester,
    SuggesterConfig,
    SuggestionRequest,
    SuggestionResult,
)

__all__ = [
    "CategoryWindow",
    "ConflictDetector",
    "ScheduleStore",
    "ScheduleSuggester",
    "SlotResult",
    "SuggesterConfig",
    "SuggestionRequest",
    "SuggestionResult",
    "WeeklySummary",
    "combined_hours",
    "hours_by_category",
    "hours_by_day",
    "location_breakdown",
    "schedule_to_dict",
    "slots_overlap",
    "total_weekly_hours",
]
