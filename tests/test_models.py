"""Tests for domain models and time arithmetic."""

import pytest

from authscheduler.domain.exceptions import (
    ConfigurationError,
    FormatError,
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


class TestParseTime:
    """Tests for HH:MM parsing."""

    def test_parses_24_hour_time(self):
        """Valid 24-hour text should parse to hour and minute."""
        assert parse_time("09:30") == TimeOfDay(9, 30)
        assert parse_time("23:59") == TimeOfDay(23, 59)
        assert parse_time("00:00") == TimeOfDay(0, 0)

    def test_single_digit_hour_accepted(self):
        """A one-digit hour should be accepted."""
        assert parse_time("9:05") == TimeOfDay(9, 5)

    def test_surrounding_whitespace_tolerated(self):
        """Leading and trailing whitespace should be ignored."""
        assert parse_time(" 14:15 ") == TimeOfDay(14, 15)

    @pytest.mark.parametrize(
        "text",
        ["", "9", "24:00", "12:60", "7:5", "ab:cd", "09:00 AM", "09-00", "123:00"],
    )
    def test_invalid_text_raises_format_error(self, text):
        """Anything other than strict HH:MM should raise FormatError."""
        with pytest.raises(FormatError):
            parse_time(text)

    def test_non_string_raises_format_error(self):
        """Non-text input should raise FormatError."""
        with pytest.raises(FormatError):
            parse_time(930)

    def test_format_error_is_value_error(self):
        """Callers catching ValueError still see parse failures."""
        with pytest.raises(ValueError):
            TimeOfDay.parse("25:00")


class TestTimeOfDay:
    """Tests for TimeOfDay."""

    def test_to_minutes(self):
        """Minutes since midnight."""
        assert TimeOfDay(9, 30).to_minutes() == 570
        assert TimeOfDay(0, 0).to_minutes() == 0

    def test_from_minutes(self):
        """Minutes since midnight should convert back to a time."""
        assert TimeOfDay.from_minutes(1035) == TimeOfDay(17, 15)

    def test_ordering(self):
        """Times should compare chronologically."""
        assert TimeOfDay(9, 0) < TimeOfDay(9, 1) < TimeOfDay(10, 0)

    def test_str_is_zero_padded(self):
        """Rendering should be zero-padded HH:MM."""
        assert str(TimeOfDay(7, 5)) == "07:05"

    def test_out_of_range_rejected(self):
        """Hour 24 and minute 60 should be rejected."""
        with pytest.raises(FormatError):
            TimeOfDay(24, 0)
        with pytest.raises(FormatError):
            TimeOfDay(10, 60)


class TestDurationHours:
    """Tests for duration_hours."""

    def test_whole_hours(self):
        """09:00-11:00 should be 2 hours."""
        assert duration_hours(TimeOfDay(9, 0), TimeOfDay(11, 0)) == 2.0

    def test_fractional_hours(self):
        """Partial hours should be fractional, not rounded."""
        assert duration_hours(TimeOfDay(9, 0), TimeOfDay(10, 30)) == 1.5
        assert duration_hours(TimeOfDay(9, 0), TimeOfDay(9, 15)) == 0.25

    def test_equal_times_are_zero(self):
        """Equal start and end should give zero."""
        assert duration_hours(TimeOfDay(9, 0), TimeOfDay(9, 0)) == 0

    def test_reversed_times_are_negative_not_an_error(self):
        """End before start should give a negative duration."""
        assert duration_hours(TimeOfDay(11, 0), TimeOfDay(9, 0)) == -2.0


class TestDay:
    """Tests for Day."""

    def test_week_starts_on_monday(self):
        """Iteration order should run Monday to Sunday."""
        days = list(Day)
        assert days[0] == Day.MONDAY
        assert days[-1] == Day.SUNDAY
        assert len(days) == 7

    def test_parse_full_and_short_names(self):
        """Full and three-letter names should parse in any case."""
        assert Day.parse("Monday") == Day.MONDAY
        assert Day.parse("wed") == Day.WEDNESDAY
        assert Day.parse("SUNDAY") == Day.SUNDAY

    def test_parse_unknown_day(self):
        """Unknown names should raise UnknownCodeError."""
        with pytest.raises(UnknownCodeError):
            Day.parse("Funday")


class TestServiceCatalog:
    """Tests for ServiceCatalog."""

    def test_default_catalog_has_five_codes_and_three_locations(self):
        """Default catalog should hold the five CPT codes and three settings."""
        catalog = ServiceCatalog.create_default()
        assert catalog.category_codes == ["97153", "97155", "97155HN", "97156", "97156HN"]
        assert catalog.location_names == ["Home", "Community", "Telehealth"]

    def test_lookup_category(self):
        """Categories should be found by code."""
        catalog = ServiceCatalog.create_default()
        assert catalog.category("97155").label == "BCBA"

    def test_lookup_location_case_insensitive(self):
        """Location lookup should ignore case."""
        catalog = ServiceCatalog.create_default()
        assert catalog.location("telehealth") == Location("Telehealth")

    def test_unknown_codes_raise(self):
        """Unknown codes and locations should raise UnknownCodeError."""
        catalog = ServiceCatalog.create_default()
        with pytest.raises(UnknownCodeError):
            catalog.category("99999")
        with pytest.raises(UnknownCodeError):
            catalog.location("Office")

    def test_duplicate_codes_rejected(self):
        """Repeated category codes should be rejected."""
        with pytest.raises(ConfigurationError):
            ServiceCatalog(
                categories=(ServiceCategory("A"), ServiceCategory("A")),
                locations=(Location("Home"),),
            )

    def test_locations_differing_only_in_case_rejected(self):
        """Locations differing only in case would collide on lookup."""
        with pytest.raises(ConfigurationError):
            ServiceCatalog(
                categories=(ServiceCategory("A"),),
                locations=(Location("Home"), Location("home")),
            )

    def test_empty_catalog_rejected(self):
        """A catalog needs at least one category and one location."""
        with pytest.raises(ConfigurationError):
            ServiceCatalog(categories=(), locations=(Location("Home"),))
        with pytest.raises(ConfigurationError):
            ServiceCatalog(categories=(ServiceCategory("A"),), locations=())

    def test_display_name(self):
        """Display name should include the label when present."""
        assert ServiceCategory("97153", "RBT").display_name == "97153 - RBT"
        assert ServiceCategory("X").display_name == "X"


class TestSchedule:
    """Tests for the Schedule container."""

    def test_unpopulated_bucket_is_empty_tuple(self):
        """A bucket never written to should read as empty."""
        schedule = Schedule()
        assert schedule.slots(Day.MONDAY, "97153") == ()

    def test_iter_slots_in_day_order(self):
        """Slots should be yielded Monday first regardless of insertion order."""
        home = Location("Home")
        friday = TimeSlot("f", TimeOfDay(9), TimeOfDay(10), home)
        monday = TimeSlot("m", TimeOfDay(9), TimeOfDay(10), home)
        schedule = Schedule(
            buckets={
                Day.FRIDAY: {"97153": [friday]},
                Day.MONDAY: {"97153": [monday]},
            }
        )
        assert [slot.id for _, _, slot in schedule.iter_slots()] == ["m", "f"]
        assert schedule.slot_count == 2
        assert schedule.find_slot("f") == (Day.FRIDAY, "97153", friday)
        assert schedule.find_slot("missing") is None

    def test_slot_duration(self):
        """Slot duration should be available in hours and minutes."""
        slot = TimeSlot("s", TimeOfDay(9, 0), TimeOfDay(10, 30), Location("Home"))
        assert slot.duration_hours == 1.5
        assert slot.duration_minutes == 90
