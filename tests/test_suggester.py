"""Tests for the CP-SAT schedule suggester."""

import pytest

from authscheduler.domain.exceptions import ConfigurationError, UnknownCodeError
from authscheduler.domain.models import Day, ServiceCatalog, TimeOfDay
from authscheduler.scheduling.aggregation import hours_by_category, hours_by_day
from authscheduler.scheduling.suggester import (
    CategoryWindow,
    ScheduleSuggester,
    SuggesterConfig,
    SuggestionRequest,
)


@pytest.fixture
def suggester():
    """Suggester with a short time limit for tests."""
    return ScheduleSuggester(
        ServiceCatalog.create_default(),
        SuggesterConfig(time_limit_seconds=10.0),
    )


class TestSuggestionRequest:
    """Tests for request validation."""

    def test_standard_request_uses_evening_family_window(self):
        """Family training should default to evenings, therapy to daytime."""
        request = SuggestionRequest.create_standard({"97153": 10})
        assert request.window_for("97156").earliest == TimeOfDay(17, 0)
        assert request.window_for("97153").earliest == TimeOfDay(9, 0)

    def test_invalid_session_bounds(self):
        """Minimum session longer than maximum should be rejected."""
        with pytest.raises(ConfigurationError):
            SuggestionRequest({"97153": 5}, min_session_minutes=120, max_session_minutes=60)

    def test_negative_target(self):
        """Negative target hours should be rejected."""
        with pytest.raises(ConfigurationError):
            SuggestionRequest({"97153": -1})

    def test_zero_granularity(self):
        """A zero-minute time step should be rejected."""
        with pytest.raises(ConfigurationError):
            SuggestionRequest({"97153": 5}, granularity_minutes=0)


class TestScheduleSuggester:
    """Tests for ScheduleSuggester."""

    def test_meets_single_target(self, suggester):
        """A reachable target should be met exactly."""
        result = suggester.suggest(SuggestionRequest.create_standard({"97153": 6}))

        assert result.is_feasible
        assert result.meets_targets
        assert hours_by_category(result.store.schedule, "97153") == 6.0

    def test_at_most_one_session_per_bucket(self, suggester):
        """Each day should get at most one session per category."""
        result = suggester.suggest(SuggestionRequest.create_standard({"97153": 10}))

        for day in Day:
            assert len(result.store.list_slots(day, "97153")) <= 1

    def test_sessions_respect_windows(self, suggester):
        """Sessions should fall inside their category window and length bounds."""
        request = SuggestionRequest.create_standard({"97153": 8, "97156": 1})
        result = suggester.suggest(request)

        assert result.meets_targets
        for day, code, slot in result.store.schedule.iter_slots():
            window = request.window_for(code)
            assert day in window.days
            assert window.earliest <= slot.start
            assert slot.end <= window.latest
            assert 60 <= slot.duration_minutes <= 180

    def test_custom_window_location(self, suggester):
        """A custom window should control day and location."""
        request = SuggestionRequest(
            {"97155": 2},
            windows={
                "97155": CategoryWindow(days=(Day.SATURDAY,), location="Telehealth"),
            },
            max_session_minutes=120,
        )
        result = suggester.suggest(request)

        assert result.meets_targets
        slots = result.store.list_slots(Day.SATURDAY, "97155")
        assert len(slots) == 1
        assert slots[0].location.name == "Telehealth"

    def test_max_daily_hours_cap(self, suggester):
        """No day should exceed the daily cap."""
        request = SuggestionRequest.create_standard({"97153": 10})
        request.max_daily_hours = 2
        result = suggester.suggest(request)

        assert result.meets_targets
        for day in Day:
            assert hours_by_day(result.store.schedule, day) <= 2

    def test_unreachable_target_reports_shortfall(self, suggester):
        """Five weekday sessions of at most three hours cannot reach 20h."""
        result = suggester.suggest(SuggestionRequest.create_standard({"97153": 20}))

        assert result.is_feasible
        assert not result.meets_targets
        assert result.deviation_minutes["97153"] < 0

    def test_zero_target_schedules_nothing(self, suggester):
        """A zero target should leave the schedule empty."""
        result = suggester.suggest(SuggestionRequest.create_standard({"97153": 0}))

        assert result.is_feasible
        assert result.store.schedule.is_empty
        assert result.deviation_minutes == {"97153": 0}

    def test_unknown_category(self, suggester):
        """Unconfigured categories should raise UnknownCodeError."""
        with pytest.raises(UnknownCodeError):
            suggester.suggest(SuggestionRequest.create_standard({"99999": 2}))
