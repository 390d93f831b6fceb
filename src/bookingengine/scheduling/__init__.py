"""Date and slot resolution for bookable items."""

from bookingengine.scheduling.capacity import SlotCapacityLedger
from bookingengine.scheduling.resolver import (
    AvailableDates,
    ScheduleResolver,
    check_date,
    generate_time_slots,
    get_available_dates_for_month,
    is_date_available,
)

__all__ = [
    "AvailableDates",
    "ScheduleResolver",
    "SlotCapacityLedger",
    "check_date",
    "generate_time_slots",
    "get_available_dates_for_month",
    "is_date_available",
]
