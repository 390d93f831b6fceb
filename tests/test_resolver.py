"""Tests for date availability and time slot generation."""

from datetime import date, datetime, time

import pytest

from bookingengine.domain.errors import ConfigurationError, InputValidationError
from bookingengine.domain.models import (
    BlockedDate,
    DateUnavailableReason,
    DayHours,
    ExistingReservation,
    ScheduleConfig,
    SlotUnavailableReason,
    Weekday,
)
from bookingengine.scheduling.resolver import (
    ScheduleResolver,
    candidate_start_times,
    check_date,
    generate_time_slots,
    get_available_dates_for_month,
    has_available_slots,
    is_date_available,
)

SATURDAY = date(2025, 3, 8)
TUESDAY = date(2025, 3, 11)


def make_config(**overrides) -> ScheduleConfig:
    """Every day 10:00-18:00, hourly one-hour slots, 8 spots each."""
    values = dict(
        operating_days=Weekday.all_days(),
        start_time=time(10, 0),
        end_time=time(18, 0),
        slot_interval_minutes=60,
        duration_minutes=60,
        capacity_per_slot=8,
    )
    values.update(overrides)
    return ScheduleConfig(**values)


class TestDateAvailability:
    """Tests for bookable date resolution."""

    @pytest.fixture
    def now(self):
        return datetime(2025, 3, 1, 9, 0)

    def test_every_day_of_month_when_open_daily(self, now):
        """A daily schedule offers every remaining day of the month."""
        dates = list(get_available_dates_for_month(2025, 3, make_config(), [], now))

        assert len(dates) == 31
        assert dates[0] == date(2025, 3, 1)
        assert dates == sorted(dates)

    def test_no_operating_days_yields_nothing(self, now):
        """Empty operating days produce no dates in any month."""
        config = make_config(operating_days=frozenset())

        for month in range(1, 13):
            assert list(get_available_dates_for_month(2025, month, config, [], now)) == []

    def test_past_dates_are_excluded(self):
        """Days before today are never returned; today is."""
        now = datetime(2025, 3, 15, 20, 0)
        dates = list(get_available_dates_for_month(2025, 3, make_config(), [], now))

        assert dates[0] == date(2025, 3, 15)
        assert all(d >= now.date() for d in dates)
        assert check_date(date(2025, 3, 14), make_config(), [], now).reason == (
            DateUnavailableReason.PAST
        )

    def test_booking_horizon_is_inclusive(self, now):
        """max_advance_days bounds the last bookable day, inclusive."""
        config = make_config(max_advance_days=10)
        dates = list(get_available_dates_for_month(2025, 3, config, [], now))

        assert dates[-1] == date(2025, 3, 11)
        assert check_date(date(2025, 3, 12), config, [], now).reason == (
            DateUnavailableReason.BEYOND_BOOKING_WINDOW
        )

    def test_zero_horizon_allows_only_today(self, now):
        """A horizon of zero days leaves only today."""
        config = make_config(max_advance_days=0)

        assert list(get_available_dates_for_month(2025, 3, config, [], now)) == [now.date()]

    def test_weekend_only_schedule(self, now):
        """A Saturday/Sunday schedule returns only weekend days."""
        config = make_config(operating_days=Weekday.weekend())
        dates = list(get_available_dates_for_month(2025, 3, config, [], now))

        assert [d.day for d in dates] == [1, 2, 8, 9, 15, 16, 22, 23, 29, 30]
        assert check_date(TUESDAY, config, [], now).reason == (
            DateUnavailableReason.NOT_OPERATING
        )

    def test_leap_year_february(self):
        """February has 29 candidate days in a leap year and 28 otherwise."""
        config = make_config()

        leap = get_available_dates_for_month(2024, 2, config, [], datetime(2024, 1, 1))
        common = get_available_dates_for_month(2025, 2, config, [], datetime(2025, 1, 1))

        assert len(list(leap)) == 29
        assert len(list(common)) == 28

    def test_iteration_is_restartable(self, now):
        """Iterating the same result twice yields the same dates."""
        dates = get_available_dates_for_month(2025, 3, make_config(), [], now)

        assert list(dates) == list(dates)

    def test_repeated_calls_are_identical(self, now):
        """Same inputs give the same output."""
        blocked = [BlockedDate(start=date(2025, 3, 5))]
        first = list(get_available_dates_for_month(2025, 3, make_config(), blocked, now))
        second = list(get_available_dates_for_month(2025, 3, make_config(), blocked, now))

        assert first == second

    def test_blocked_range_is_inclusive(self, now):
        """A multi-day block removes every day in its range."""
        blocked = [BlockedDate(start=date(2025, 3, 10), end=date(2025, 3, 12), reason="Private event")]
        dates = set(get_available_dates_for_month(2025, 3, make_config(), blocked, now))

        assert date(2025, 3, 9) in dates
        assert date(2025, 3, 10) not in dates
        assert date(2025, 3, 11) not in dates
        assert date(2025, 3, 12) not in dates
        assert date(2025, 3, 13) in dates

    def test_partial_block_leaves_date_available(self, now):
        """A block with times does not remove the whole date."""
        blocked = [
            BlockedDate(start=SATURDAY, start_time=time(12, 0), end_time=time(13, 0))
        ]

        assert is_date_available(SATURDAY, make_config(), blocked, now)

    def test_reason_order_past_before_blocked(self):
        """A past day that is also blocked reports PAST."""
        now = datetime(2025, 3, 20, 9, 0)
        blocked = [BlockedDate(start=date(2025, 3, 10))]

        result = check_date(date(2025, 3, 10), make_config(), blocked, now)

        assert not result.available
        assert result.reason == DateUnavailableReason.PAST

    def test_reason_order_blocked_before_not_operating(self, now):
        """A blocked non-operating day reports BLOCKED."""
        config = make_config(operating_days=Weekday.weekend())
        blocked = [BlockedDate(start=TUESDAY)]

        assert check_date(TUESDAY, config, blocked, now).reason == DateUnavailableReason.BLOCKED

    def test_invalid_month_rejected(self, now):
        """Months outside 1..12 raise InputValidationError."""
        with pytest.raises(InputValidationError):
            get_available_dates_for_month(2025, 13, make_config(), [], now)

    def test_datetime_is_not_a_date(self, now):
        """Passing a datetime where a date is expected is rejected."""
        with pytest.raises(InputValidationError):
            is_date_available(datetime(2025, 3, 8, 12, 0), make_config(), [], now)

    def test_string_is_not_a_date(self, now):
        """Malformed date inputs raise InputValidationError."""
        with pytest.raises(InputValidationError):
            check_date("2025-03-08", make_config(), [], now)


class TestTimeSlots:
    """Tests for slot generation."""

    @pytest.fixture
    def now(self):
        return datetime(2025, 3, 1, 9, 0)

    def test_hourly_slots_fill_window(self, now):
        """Slots start every interval and end within the window."""
        slots = generate_time_slots(SATURDAY, make_config(), [], [], now)

        assert [s.start_time for s in slots] == [time(h, 0) for h in range(10, 18)]
        assert slots[-1].end_time == time(18, 0)
        assert all(s.available and s.spots == 8 for s in slots)

    def test_trailing_window_shorter_than_duration(self):
        """A slot whose duration would overrun the window is not generated."""
        config = make_config(
            start_time=time(10, 0),
            end_time=time(12, 0),
            slot_interval_minutes=30,
            duration_minutes=90,
        )

        assert candidate_start_times(SATURDAY, config) == [time(10, 0), time(10, 30)]

    def test_duration_longer_than_window(self, now):
        """No slots when one booking cannot fit the window at all."""
        config = make_config(end_time=time(11, 0), duration_minutes=90)

        assert generate_time_slots(SATURDAY, config, [], [], now) == []
        assert not has_available_slots(SATURDAY, config, [], [], now)

    def test_custom_hours_override_window(self, now):
        """Per-weekday hours replace the default window."""
        config = make_config(
            custom_hours={Weekday.SATURDAY: DayHours(time(12, 0), time(14, 0))}
        )

        saturday = generate_time_slots(SATURDAY, config, [], [], now)
        sunday = generate_time_slots(date(2025, 3, 9), config, [], [], now)

        assert [s.start_time for s in saturday] == [time(12, 0), time(13, 0)]
        assert len(sunday) == 8

    def test_non_operating_day_has_no_slots(self, now):
        """Unavailable dates produce an empty slot list."""
        config = make_config(operating_days=Weekday.weekend())

        assert generate_time_slots(TUESDAY, config, [], [], now) == []

    def test_zero_lead_time_keeps_slot_starting_now(self):
        """A slot starting exactly now is still offered without lead time."""
        now = datetime(2025, 3, 8, 12, 0)
        slots = generate_time_slots(SATURDAY, make_config(), [], [], now)

        assert slots[0].start_time == time(12, 0)
        assert len(slots) == 6

    def test_full_day_lead_time(self):
        """A 1440-minute lead time empties today and trims tomorrow."""
        now = datetime(2025, 3, 8, 12, 0)
        config = make_config(advance_booking_minutes=1440)

        today = generate_time_slots(SATURDAY, config, [], [], now)
        tomorrow = generate_time_slots(date(2025, 3, 9), config, [], [], now)

        assert today == []
        assert tomorrow[0].start_time == time(12, 0)
        assert len(tomorrow) == 6

    def test_reservations_reduce_spots(self, now):
        """Spots are capacity minus booked units, floored at zero."""
        reservations = [
            ExistingReservation(SATURDAY, time(10, 0), party_size=3),
            ExistingReservation(SATURDAY, time(10, 0), party_size=6),
            ExistingReservation(SATURDAY, time(11, 0), party_size=2),
            ExistingReservation(date(2025, 3, 9), time(12, 0), party_size=8),
        ]
        slots = {s.start_time: s for s in generate_time_slots(
            SATURDAY, make_config(), [], reservations, now
        )}

        assert slots[time(10, 0)].spots == 0
        assert not slots[time(10, 0)].available
        assert slots[time(10, 0)].reason == SlotUnavailableReason.FULLY_BOOKED
        assert slots[time(11, 0)].spots == 6
        assert slots[time(12, 0)].spots == 8

    def test_unbounded_capacity(self, now):
        """Without capacity every slot is available with no spot count."""
        reservations = [ExistingReservation(SATURDAY, time(10, 0), party_size=500)]
        slots = generate_time_slots(
            SATURDAY, make_config(capacity_per_slot=None), [], reservations, now
        )

        assert all(s.available and s.spots is None for s in slots)

    def test_partial_block_marks_slots(self, now):
        """Slots starting inside a partial block are unavailable, end inclusive."""
        blocked = [
            BlockedDate(start=SATURDAY, start_time=time(12, 0), end_time=time(13, 0))
        ]
        slots = {s.start_time: s for s in generate_time_slots(
            SATURDAY, make_config(), blocked, [], now
        )}

        for start in (time(12, 0), time(13, 0)):
            assert not slots[start].available
            assert slots[start].spots == 0
            assert slots[start].reason == SlotUnavailableReason.BLOCKED
        assert slots[time(11, 0)].available
        assert slots[time(14, 0)].available

    def test_full_day_block_empties_slots(self, now):
        """A full-day block yields no slots."""
        blocked = [BlockedDate(start=SATURDAY)]

        assert generate_time_slots(SATURDAY, make_config(), blocked, [], now) == []

    def test_slots_are_sorted(self, now):
        """Slots come back in ascending start order."""
        config = make_config(slot_interval_minutes=15, duration_minutes=45)
        starts = [s.start_time for s in generate_time_slots(SATURDAY, config, [], [], now)]

        assert starts == sorted(starts)
        assert len(starts) == len(set(starts))

    def test_no_operating_days_has_no_slots_all_month(self, now):
        """A schedule that never operates produces no slots on any date."""
        config = make_config(operating_days=frozenset())

        for day_number in range(1, 32):
            day = date(2025, 3, day_number)
            assert generate_time_slots(day, config, [], [], now) == []

    def test_slot_generation_is_repeatable(self, now):
        """Identical inputs produce identical slot lists."""
        blocked = [
            BlockedDate(start=SATURDAY, start_time=time(12, 0), end_time=time(13, 0))
        ]
        reservations = [
            ExistingReservation(SATURDAY, time(10, 0), party_size=5),
            ExistingReservation(SATURDAY, time(15, 0), party_size=8),
        ]

        first = generate_time_slots(SATURDAY, make_config(), blocked, reservations, now)
        second = generate_time_slots(SATURDAY, make_config(), blocked, reservations, now)

        assert first == second
        assert [s.available for s in first] != [True] * len(first)

    @pytest.mark.parametrize(
        "interval,duration,start,end",
        [
            (60, 60, time(10, 0), time(18, 0)),
            (15, 45, time(9, 0), time(17, 0)),
            (30, 90, time(10, 0), time(12, 0)),
            (45, 20, time(8, 10), time(11, 55)),
            (7, 50, time(6, 0), time(23, 30)),
            (120, 30, time(0, 0), time(23, 59)),
            (25, 240, time(12, 0), time(16, 5)),
        ],
    )
    def test_slots_never_overrun_window(self, now, interval, duration, start, end):
        """Every slot ends at or before the closing time of its day."""
        config = make_config(
            start_time=start,
            end_time=end,
            slot_interval_minutes=interval,
            duration_minutes=duration,
            custom_hours={Weekday.SUNDAY: DayHours(time(13, 15), time(15, 40))},
        )

        for day in (SATURDAY, date(2025, 3, 9)):
            hours = config.hours_for(day)
            slots = generate_time_slots(day, config, [], [], now)
            for slot in slots:
                assert hours.start_time <= slot.start_time
                assert slot.end_time <= hours.end_time


class TestConfigurationErrors:
    """Invalid schedules fail loudly."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"end_time": time(10, 0)},
            {"end_time": time(9, 0)},
            {"slot_interval_minutes": 0},
            {"duration_minutes": -30},
            {"advance_booking_minutes": -1},
            {"capacity_per_slot": 0},
            {"max_advance_days": -1},
            {"custom_hours": {Weekday.MONDAY: DayHours(time(15, 0), time(14, 0))}},
        ],
    )
    def test_resolver_rejects_invalid_schedule(self, overrides):
        """Malformed schedules raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ScheduleResolver(make_config(**overrides))

    def test_slot_generation_rejects_invalid_schedule(self):
        """Module functions validate too."""
        with pytest.raises(ConfigurationError):
            generate_time_slots(
                SATURDAY, make_config(slot_interval_minutes=0), [], [], datetime(2025, 3, 1)
            )


class TestScheduleResolver:
    """Tests for the bound resolver."""

    @pytest.fixture
    def resolver(self):
        return ScheduleResolver(
            make_config(operating_days=Weekday.weekend()),
            [BlockedDate(start=date(2025, 3, 15), end=date(2025, 3, 16))],
        )

    def test_describe_month_reports_reasons(self, resolver):
        """Every day of the month is described."""
        days = resolver.describe_month(2025, 3, datetime(2025, 3, 5, 9, 0))

        assert len(days) == 31
        by_day = {d.day.day: d for d in days}
        assert by_day[1].reason == DateUnavailableReason.PAST
        assert by_day[8].available
        assert by_day[11].reason == DateUnavailableReason.NOT_OPERATING
        assert by_day[15].reason == DateUnavailableReason.BLOCKED

    def test_available_dates_match_describe_month(self, resolver):
        """Dates and the calendar agree."""
        now = datetime(2025, 3, 5, 9, 0)
        described = [d.day for d in resolver.describe_month(2025, 3, now) if d.available]

        assert list(resolver.available_dates(2025, 3, now)) == described

    def test_find_slot(self, resolver):
        """find_slot returns the slot starting at the given time."""
        now = datetime(2025, 3, 5, 9, 0)

        assert resolver.find_slot(SATURDAY, time(14, 0), [], now).start_time == time(14, 0)
        assert resolver.find_slot(SATURDAY, time(14, 30), [], now) is None
