"""Schedule resolver: bookable dates and time slots.

This module decides which calendar dates a customer may book and, for a
bookable date, enumerates discrete slots with their remaining capacity.
Every function is pure: the clock is an explicit ``now`` argument and
reservations are a snapshot supplied by the caller.
"""

import calendar
import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta
from typing import Optional

from bookingengine.domain.errors import InputValidationError
from bookingengine.domain.models import (
    BlockedDate,
    DateAvailability,
    DateUnavailableReason,
    ExistingReservation,
    ScheduleConfig,
    Slot,
    SlotUnavailableReason,
    Weekday,
    add_minutes,
    minutes_to_time,
    slot_datetime,
    time_to_minutes,
)
from bookingengine.validation.validator import ensure_valid_schedule

logger = logging.getLogger(__name__)


def _require_date(day) -> date:
    # datetime subclasses date; reject it so the time part is never dropped
    if isinstance(day, datetime) or not isinstance(day, date):
        raise InputValidationError(f"Expected a calendar date, got {day!r}")
    return day


def _require_month(month: int) -> int:
    if not 1 <= month <= 12:
        raise InputValidationError(f"Month must be within 1..12, got {month}")
    return month


def is_day_operating(day: date, config: ScheduleConfig) -> bool:
    """Whether the item is offered on the weekday of ``day``."""
    return Weekday.of(_require_date(day)) in config.operating_days


def is_date_blocked(day: date, blocked_dates: Iterable[BlockedDate]) -> bool:
    """Whether a full-day block covers ``day``.

    Partial-day blocks leave the date bookable; they only affect slots.
    """
    day = _require_date(day)
    return any(b.is_full_day and b.covers(day) for b in blocked_dates)


def check_date(
    day: date,
    config: ScheduleConfig,
    blocked_dates: Iterable[BlockedDate],
    now: datetime,
) -> DateAvailability:
    """Evaluate date availability and report why a date is unavailable.

    Checks run in order: past, blocked, not operating, beyond the booking
    horizon. The first failing check is reported.
    """
    day = _require_date(day)
    today = now.date()

    if day < today:
        return DateAvailability(day, False, DateUnavailableReason.PAST)
    if is_date_blocked(day, blocked_dates):
        return DateAvailability(day, False, DateUnavailableReason.BLOCKED)
    if not is_day_operating(day, config):
        return DateAvailability(day, False, DateUnavailableReason.NOT_OPERATING)
    if config.max_advance_days is not None:
        if day > today + timedelta(days=config.max_advance_days):
            return DateAvailability(day, False, DateUnavailableReason.BEYOND_BOOKING_WINDOW)
    return DateAvailability(day, True)


def is_date_available(
    day: date,
    config: ScheduleConfig,
    blocked_dates: Iterable[BlockedDate],
    now: datetime,
) -> bool:
    """Single availability predicate for calendar display and commit checks."""
    return check_date(day, config, blocked_dates, now).available


class AvailableDates:
    """Available dates of one month, in ascending order.

    Iteration is lazy and restartable: each ``iter()`` re-evaluates the
    month from the first day.
    """

    def __init__(
        self,
        year: int,
        month: int,
        config: ScheduleConfig,
        blocked_dates: Iterable[BlockedDate],
        now: datetime,
    ):
        ensure_valid_schedule(config)
        self.year = year
        self.month = _require_month(month)
        self.config = config
        self.blocked_dates = tuple(blocked_dates)
        self.now = now

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def __iter__(self) -> Iterator[date]:
        for day_number in range(1, self.days_in_month + 1):
            day = date(self.year, self.month, day_number)
            if is_date_available(day, self.config, self.blocked_dates, self.now):
                yield day

    def __repr__(self) -> str:
        return f"AvailableDates({self.year}-{self.month:02d})"


def get_available_dates_for_month(
    year: int,
    month: int,
    config: ScheduleConfig,
    blocked_dates: Iterable[BlockedDate],
    now: datetime,
) -> AvailableDates:
    """Available dates of a month, for painting a calendar grid."""
    return AvailableDates(year, month, config, blocked_dates, now)


def describe_month(
    year: int,
    month: int,
    config: ScheduleConfig,
    blocked_dates: Iterable[BlockedDate],
    now: datetime,
) -> list[DateAvailability]:
    """Every day of a month with its availability and reason."""
    _require_month(month)
    ensure_valid_schedule(config)
    blocked = tuple(blocked_dates)
    days = calendar.monthrange(year, month)[1]
    return [
        check_date(date(year, month, d), config, blocked, now)
        for d in range(1, days + 1)
    ]


def candidate_start_times(day: date, config: ScheduleConfig) -> list[time]:
    """Slot start times whose full duration fits the day's service window.

    A trailing window shorter than the duration produces no slot.
    """
    hours = config.hours_for(day)
    window_start = time_to_minutes(hours.start_time)
    last_start = time_to_minutes(hours.end_time) - config.duration_minutes

    # range() is empty when the duration exceeds the window
    return [
        minutes_to_time(m)
        for m in range(window_start, last_start + 1, config.slot_interval_minutes)
    ]


def generate_time_slots(
    day: date,
    config: ScheduleConfig,
    blocked_dates: Iterable[BlockedDate],
    existing_reservations: Iterable[ExistingReservation],
    now: datetime,
) -> list[Slot]:
    """Generate bookable slots for a date.

    Args:
        day: Calendar date in the venue's local time.
        config: Schedule configuration.
        blocked_dates: Admin blocks; full-day blocks empty the date,
            partial-day blocks mark matching slots unavailable.
        existing_reservations: Snapshot of committed bookings.
        now: Current venue-local time, for past-date and lead-time checks.

    Returns:
        Slots in ascending start order. Empty for unavailable dates.

    Raises:
        ConfigurationError: If the configuration is invalid.
        InputValidationError: If ``day`` is not a date.
    """
    ensure_valid_schedule(config)
    blocked = tuple(blocked_dates)

    if not is_date_available(day, config, blocked, now):
        return []

    earliest = now + timedelta(minutes=config.advance_booking_minutes)
    reserved = _reserved_units(day, existing_reservations)
    partial_blocks = [b for b in blocked if not b.is_full_day and b.covers(day)]

    slots = []
    for start in candidate_start_times(day, config):
        if slot_datetime(day, start) < earliest:
            continue

        end = add_minutes(start, config.duration_minutes)
        if any(b.covers_time(day, start) for b in partial_blocks):
            slots.append(
                Slot(
                    start_time=start,
                    end_time=end,
                    available=False,
                    spots=0,
                    reason=SlotUnavailableReason.BLOCKED,
                )
            )
            continue

        if config.capacity_per_slot is None:
            slots.append(Slot(start_time=start, end_time=end, available=True, spots=None))
            continue

        spots = max(0, config.capacity_per_slot - reserved.get(start, 0))
        slots.append(
            Slot(
                start_time=start,
                end_time=end,
                available=spots > 0,
                spots=spots,
                reason=None if spots > 0 else SlotUnavailableReason.FULLY_BOOKED,
            )
        )

    logger.debug(
        "Generated %d slots for %s (%d available)",
        len(slots), day, sum(1 for s in slots if s.available),
    )
    return slots


def has_available_slots(
    day: date,
    config: ScheduleConfig,
    blocked_dates: Iterable[BlockedDate],
    existing_reservations: Iterable[ExistingReservation],
    now: datetime,
) -> bool:
    """Whether any slot on ``day`` can still be booked."""
    slots = generate_time_slots(day, config, blocked_dates, existing_reservations, now)
    return any(slot.available for slot in slots)


def _reserved_units(
    day: date,
    reservations: Iterable[ExistingReservation],
) -> dict[time, int]:
    """Sum party sizes per start time for one date."""
    totals: dict[time, int] = defaultdict(int)
    for reservation in reservations:
        if reservation.day == day:
            totals[reservation.start_time] += reservation.party_size
    return totals


class ScheduleResolver:
    """Resolver bound to one bookable item's schedule and blocked dates.

    Example:
        >>> resolver = ScheduleResolver(config, blocked_dates)
        >>> list(resolver.available_dates(2025, 3, now))
        >>> resolver.time_slots(date(2025, 3, 8), reservations, now)
    """

    def __init__(
        self,
        config: ScheduleConfig,
        blocked_dates: Optional[Iterable[BlockedDate]] = None,
    ):
        """Validate and bind the configuration.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        ensure_valid_schedule(config)
        self.config = config
        self.blocked_dates = tuple(blocked_dates or ())

    def is_date_available(self, day: date, now: datetime) -> bool:
        return is_date_available(day, self.config, self.blocked_dates, now)

    def check_date(self, day: date, now: datetime) -> DateAvailability:
        return check_date(day, self.config, self.blocked_dates, now)

    def available_dates(self, year: int, month: int, now: datetime) -> AvailableDates:
        return get_available_dates_for_month(year, month, self.config, self.blocked_dates, now)

    def describe_month(self, year: int, month: int, now: datetime) -> list[DateAvailability]:
        return describe_month(year, month, self.config, self.blocked_dates, now)

    def time_slots(
        self,
        day: date,
        existing_reservations: Iterable[ExistingReservation],
        now: datetime,
    ) -> list[Slot]:
        return generate_time_slots(
            day, self.config, self.blocked_dates, existing_reservations, now
        )

    def find_slot(
        self,
        day: date,
        start: time,
        existing_reservations: Iterable[ExistingReservation],
        now: datetime,
    ) -> Optional[Slot]:
        """The slot starting at ``start`` on ``day``, if one is generated."""
        for slot in self.time_slots(day, existing_reservations, now):
            if slot.start_time == start:
                return slot
        return None
