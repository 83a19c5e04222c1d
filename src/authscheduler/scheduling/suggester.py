"""OR-Tools CP-SAT suggester for weekly service layouts.

Given target weekly hours per service category, the suggester lays out one
session per (day, category) at most, inside each category's allowed window,
so the weekly totals hit the targets while spreading the load across the
week. The solution is replayed through ScheduleStore.add_slot, so a suggested
schedule satisfies exactly the same invariants as a hand-built one.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ortools.sat.python import cp_model

from authscheduler.domain.exceptions import ConfigurationError
from authscheduler.domain.models import Day, ServiceCatalog, TimeOfDay
from authscheduler.scheduling.store import ScheduleStore

logger = logging.getLogger(__name__)

WEEKDAYS = (Day.MONDAY, Day.TUESDAY, Day.WEDNESDAY, Day.THURSDAY, Day.FRIDAY)


@dataclass
class CategoryWindow:
    """Where sessions for one category may be placed.

    Attributes:
        earliest: Earliest session start.
        latest: Latest session end.
        days: Days on which sessions may be placed.
        location: Location for suggested sessions (None = request default).
    """

    earliest: TimeOfDay = field(default_factory=lambda: TimeOfDay(9, 0))
    latest: TimeOfDay = field(default_factory=lambda: TimeOfDay(17, 0))
    days: tuple[Day, ...] = WEEKDAYS
    location: Optional[str] = None


@dataclass
class SuggestionRequest:
    """Parameters for suggesting a weekly layout.

    Attributes:
        target_hours: Category code -> target weekly hours.
        windows: Category code -> allowed window (missing = default_window).
        default_window: Window for categories without their own.
        min_session_minutes: Shortest session length.
        max_session_minutes: Longest session length.
        granularity_minutes: Start/length step (one billing unit by default).
        default_location: Location for suggested sessions.
        max_daily_hours: Optional hard cap on total hours per day.
    """

    target_hours: dict[str, float]
    windows: dict[str, CategoryWindow] = field(default_factory=dict)
    default_window: CategoryWindow = field(default_factory=CategoryWindow)
    min_session_minutes: int = 60
    max_session_minutes: int = 180
    granularity_minutes: int = 15
    default_location: str = "Home"
    max_daily_hours: Optional[float] = None

    def __post_init__(self):
        if self.granularity_minutes <= 0:
            raise ConfigurationError("granularity_minutes must be positive")
        if not 0 < self.min_session_minutes <= self.max_session_minutes:
            raise ConfigurationError(
                "Session bounds must satisfy 0 < min_session_minutes <= max_session_minutes"
            )
        for code, hours in self.target_hours.items():
            if hours < 0:
                raise ConfigurationError(f"Target hours for {code} must be >= 0, got {hours}")

    @classmethod
    def create_standard(cls, target_hours: dict[str, float]) -> "SuggestionRequest":
        """Weekday daytime sessions, with family training in the early evening.

        Daytime window 9 AM - 5 PM; caregiver-training codes 5 PM - 7 PM.
        """
        evening = CategoryWindow(earliest=TimeOfDay(17, 0), latest=TimeOfDay(19, 0))
        return cls(
            target_hours=target_hours,
            windows={"97156": evening, "97156HN": evening},
        )

    def window_for(self, code: str) -> CategoryWindow:
        return self.windows.get(code, self.default_window)


@dataclass
class SuggesterConfig:
    """Configuration for the CP-SAT suggester.

    Attributes:
        time_limit_seconds: Maximum solver runtime.
        num_workers: Number of parallel workers (0 = auto).
        deviation_weight: Penalty per granule away from a category target.
        balance_weight: Penalty per granule of the busiest day's load.
        session_weight: Penalty per scheduled session.
    """

    time_limit_seconds: float = 10.0
    num_workers: int = 0
    deviation_weight: int = 1000
    balance_weight: int = 10
    session_weight: int = 1


@dataclass
class SuggestionResult:
    """Result from the suggester.

    Attributes:
        store: Store holding the suggested schedule (None if infeasible).
        status: Solver status (OPTIMAL, FEASIBLE, etc.).
        deviation_minutes: Category code -> scheduled minus target minutes.
        solve_time_seconds: Time taken to solve.
    """

    store: Optional[ScheduleStore]
    status: str
    deviation_minutes: dict[str, int] = field(default_factory=dict)
    solve_time_seconds: float = 0.0

    @property
    def is_optimal(self) -> bool:
        return self.status == "OPTIMAL"

    @property
    def is_feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE")

    @property
    def meets_targets(self) -> bool:
        return self.is_feasible and not any(self.deviation_minutes.values())


class ScheduleSuggester:
    """Suggests a weekly schedule that meets target hours per category.

    Example:
        >>> suggester = ScheduleSuggester(catalog)
        >>> request = SuggestionRequest.create_standard({"97153": 20, "97155": 2})
        >>> result = suggester.suggest(request)
        >>> result.store.list_slots(Day.MONDAY, "97153")
    """

    def __init__(
        self,
        catalog: Optional[ServiceCatalog] = None,
        config: Optional[SuggesterConfig] = None,
    ):
        self.catalog = catalog or ServiceCatalog.create_default()
        self.config = config or SuggesterConfig()

    def suggest(self, request: SuggestionRequest) -> SuggestionResult:
        """Solve for a layout and build it into a fresh ScheduleStore."""
        for code in request.target_hours:
            self.catalog.category(code)
        self.catalog.location(request.default_location)

        model = cp_model.CpModel()
        step = request.granularity_minutes
        min_len = -(-request.min_session_minutes // step)
        max_len = request.max_session_minutes // step

        # x[(day, code, start, length)] = 1 if that session is chosen
        x: dict[tuple[Day, str, int, int], cp_model.IntVar] = {}
        targets: dict[str, int] = {}

        for code, hours in request.target_hours.items():
            targets[code] = round(hours * 60 / step)
            if targets[code] == 0:
                continue
            window = request.window_for(code)
            first = -(-window.earliest.to_minutes() // step)
            last = window.latest.to_minutes() // step
            for day in window.days:
                for start in range(first, last - min_len + 1):
                    for length in range(min_len, max_len + 1):
                        if start + length > last:
                            break
                        x[(day, code, start, length)] = model.NewBoolVar(
                            f"x_{day.short_name}_{code}_{start}_{length}"
                        )

        # At most one session per (day, category) bucket
        buckets: dict[tuple[Day, str], list[cp_model.IntVar]] = {}
        for (day, code, _start, _length), var in x.items():
            buckets.setdefault((day, code), []).append(var)
        for bucket_vars in buckets.values():
            model.AddAtMostOne(bucket_vars)

        objective_terms = []

        # Weekly total per category: scheduled + under - over == target
        for code, target in targets.items():
            if target == 0:
                continue
            scheduled = sum(
                length * var for (_d, c, _s, length), var in x.items() if c == code
            )
            under = model.NewIntVar(0, target, f"under_{code}")
            over = model.NewIntVar(0, max(target, 7 * max_len), f"over_{code}")
            model.Add(scheduled + under - over == target)
            objective_terms.append((under + over) * self.config.deviation_weight)

        # Daily load balance
        horizon = 7 * 24 * 60 // step
        busiest = model.NewIntVar(0, horizon, "busiest_day")
        for day in Day:
            day_terms = [length * var for (d, _c, _s, length), var in x.items() if d == day]
            if not day_terms:
                continue
            load = sum(day_terms)
            model.Add(busiest >= load)
            if request.max_daily_hours is not None:
                model.Add(load <= int(request.max_daily_hours * 60 // step))
        objective_terms.append(busiest * self.config.balance_weight)
        objective_terms.append(sum(x.values()) * self.config.session_weight)

        model.Minimize(sum(objective_terms))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.config.time_limit_seconds
        if self.config.num_workers > 0:
            solver.parameters.num_workers = self.config.num_workers

        status = solver.Solve(model)

        status_map = {
            cp_model.OPTIMAL: "OPTIMAL",
            cp_model.FEASIBLE: "FEASIBLE",
            cp_model.INFEASIBLE: "INFEASIBLE",
            cp_model.MODEL_INVALID: "MODEL_INVALID",
            cp_model.UNKNOWN: "UNKNOWN",
        }
        status_str = status_map.get(status, "UNKNOWN")
        logger.info("Suggester finished: %s in %.2fs", status_str, solver.WallTime())

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            return SuggestionResult(
                store=None,
                status=status_str,
                solve_time_seconds=solver.WallTime(),
            )

        store = self._extract_solution(solver, x, request)

        deviation = {}
        for code, target in targets.items():
            scheduled = sum(
                length for (_d, c, _s, length), var in x.items()
                if c == code and solver.Value(var) == 1
            )
            deviation[code] = (scheduled - target) * step

        return SuggestionResult(
            store=store,
            status=status_str,
            deviation_minutes=deviation,
            solve_time_seconds=solver.WallTime(),
        )

    def _extract_solution(
        self,
        solver: cp_model.CpSolver,
        x: dict[tuple[Day, str, int, int], cp_model.IntVar],
        request: SuggestionRequest,
    ) -> ScheduleStore:
        """Replay the chosen sessions into a new store in day order."""
        store = ScheduleStore(self.catalog)
        step = request.granularity_minutes

        chosen = [key for key, var in x.items() if solver.Value(var) == 1]
        day_order = {day: i for i, day in enumerate(Day)}
        chosen.sort(key=lambda k: (day_order[k[0]], k[2], k[1]))

        for day, code, start, length in chosen:
            location = request.window_for(code).location or request.default_location
            store.add_slot(
                day,
                code,
                TimeOfDay.from_minutes(start * step),
                TimeOfDay.from_minutes((start + length) * step),
                location,
            ).unwrap()

        return store
