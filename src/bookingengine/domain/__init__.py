"""Domain models, errors and rounding rules for bookings."""

from bookingengine.domain.errors import (
    BookingEngineError,
    ConfigurationError,
    InputValidationError,
    SlotUnavailableError,
)
from bookingengine.domain.models import (
    BlockedDate,
    DateAvailability,
    DateUnavailableReason,
    DayHours,
    DiscountType,
    ExistingReservation,
    FeeConfig,
    FeeMode,
    GiftCard,
    LineItem,
    PriceBreakdown,
    PromoCode,
    ScheduleConfig,
    Slot,
    SlotUnavailableReason,
    Weekday,
)
from bookingengine.domain.policies import (
    HalfEvenRounding,
    HalfUpRounding,
    RoundingPolicy,
    rounding_policy_for,
)

__all__ = [
    # Errors
    "BookingEngineError",
    "ConfigurationError",
    "InputValidationError",
    "SlotUnavailableError",
    # Scheduling models
    "BlockedDate",
    "DateAvailability",
    "DateUnavailableReason",
    "DayHours",
    "ExistingReservation",
    "ScheduleConfig",
    "Slot",
    "SlotUnavailableReason",
    "Weekday",
    # Pricing models
    "DiscountType",
    "FeeConfig",
    "FeeMode",
    "GiftCard",
    "LineItem",
    "PriceBreakdown",
    "PromoCode",
    # Policies
    "HalfEvenRounding",
    "HalfUpRounding",
    "RoundingPolicy",
    "rounding_policy_for",
]
