"""Domain models for the availability and fee engine.

This module contains the immutable input snapshots (schedule configuration,
blocked dates, reservations, fee configuration, discounts) and the outputs
(slots, date availability, price breakdowns) shared by the resolver and the
fee calculator.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from bookingengine.domain.errors import InputValidationError
from bookingengine.settings import get_settings

Money = Union[Decimal, int, float, str]

ZERO = Decimal("0")


class Weekday(Enum):
    """Day of week, valued to match ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: date) -> "Weekday":
        """Weekday of a calendar date."""
        return cls(day.weekday())

    @classmethod
    def parse(cls, name: str) -> "Weekday":
        """Parse a full ("Monday") or short ("mon") day name.

        Args:
            name: Day name, case-insensitive.

        Raises:
            InputValidationError: If the name matches no weekday.
        """
        key = name.strip().lower()
        for day in cls:
            full = day.name.lower()
            if key == full or key == full[:3]:
                return day
        raise InputValidationError(f"Unknown weekday: {name!r}")

    @classmethod
    def all_days(cls) -> frozenset["Weekday"]:
        return frozenset(cls)

    @classmethod
    def weekend(cls) -> frozenset["Weekday"]:
        return frozenset({cls.SATURDAY, cls.SUNDAY})


@dataclass(frozen=True)
class DayHours:
    """Service window override for a single weekday.

    Attributes:
        start_time: Opening time (venue local).
        end_time: Closing time (venue local).
    """

    start_time: time
    end_time: time


@dataclass(frozen=True)
class ScheduleConfig:
    """When a bookable item can be reserved.

    Attributes:
        operating_days: Weekdays on which the item is offered.
        start_time: Start of the daily service window.
        end_time: End of the daily service window.
        slot_interval_minutes: Spacing between consecutive slot starts.
        duration_minutes: Length of one booking.
        advance_booking_minutes: Minimum lead time before a slot is bookable.
        capacity_per_slot: Maximum booked units per slot (None = unbounded).
        max_advance_days: Booking horizon in days after today (None = no limit).
        custom_hours: Per-weekday service windows overriding start/end time.
    """

    operating_days: frozenset[Weekday]
    start_time: time
    end_time: time
    slot_interval_minutes: int
    duration_minutes: int
    advance_booking_minutes: int = 0
    capacity_per_slot: Optional[int] = None
    max_advance_days: Optional[int] = None
    custom_hours: dict[Weekday, DayHours] = field(default_factory=dict, hash=False)

    def hours_for(self, day: date) -> DayHours:
        """Service window in effect on a given date."""
        custom = self.custom_hours.get(Weekday.of(day))
        if custom is not None:
            return custom
        return DayHours(start_time=self.start_time, end_time=self.end_time)


@dataclass(frozen=True)
class BlockedDate:
    """Admin override removing a date, a date range, or a time window.

    A block without times covers whole days. A block with both ``start_time``
    and ``end_time`` only covers slots starting inside that window.

    Attributes:
        start: First blocked date.
        end: Last blocked date, inclusive (None = same as start).
        start_time: Start of a partial-day block.
        end_time: End of a partial-day block, inclusive.
        reason: Free-text reason shown to admins.
    """

    start: date
    end: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: str = ""

    @property
    def last_day(self) -> date:
        return self.end if self.end is not None else self.start

    @property
    def is_full_day(self) -> bool:
        return self.start_time is None or self.end_time is None

    def covers(self, day: date) -> bool:
        """Whether the date falls inside the block's date range."""
        return self.start <= day <= self.last_day

    def covers_time(self, day: date, start: time) -> bool:
        """Whether a slot starting at ``start`` on ``day`` is blocked."""
        if not self.covers(day):
            return False
        if self.is_full_day:
            return True
        return self.start_time <= start <= self.end_time


@dataclass(frozen=True)
class ExistingReservation:
    """A committed booking occupying part of a slot's capacity."""

    day: date
    start_time: time
    party_size: int = 1


class SlotUnavailableReason(Enum):
    """Why a generated slot cannot be booked."""

    BLOCKED = "blocked"
    FULLY_BOOKED = "fully_booked"


class DateUnavailableReason(Enum):
    """Why a calendar date cannot be booked."""

    PAST = "past"
    BLOCKED = "blocked"
    NOT_OPERATING = "not_operating"
    BEYOND_BOOKING_WINDOW = "beyond_booking_window"


@dataclass(frozen=True)
class Slot:
    """A bookable opportunity at a fixed start time.

    Attributes:
        start_time: Slot start.
        end_time: Slot start plus the booking duration.
        available: Whether at least one spot is free.
        spots: Remaining capacity (None when capacity is unbounded).
        reason: Why the slot is unavailable, if it is.
    """

    start_time: time
    end_time: time
    available: bool
    spots: Optional[int]
    reason: Optional[SlotUnavailableReason] = None

    def can_hold(self, party_size: int) -> bool:
        """Whether the slot has room for a party of the given size."""
        if not self.available:
            return False
        return self.spots is None or self.spots >= party_size

    def __str__(self) -> str:
        window = f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"
        if not self.available:
            return f"{window} unavailable ({self.reason.value if self.reason else 'n/a'})"
        if self.spots is None:
            return f"{window} open"
        return f"{window} {self.spots} spots"


@dataclass(frozen=True)
class DateAvailability:
    """Availability of one calendar date, with the reason when unavailable."""

    day: date
    available: bool
    reason: Optional[DateUnavailableReason] = None


class FeeMode(Enum):
    """Who bears the platform and processor fees."""

    PASS_TO_CUSTOMER = "pass_to_customer"
    ABSORB = "absorb"


@dataclass(frozen=True)
class FeeConfig:
    """How platform and processor fees are attributed.

    Percentages are expressed in [0, 100], not [0, 1].

    Attributes:
        mode: Fee attribution mode.
        platform_fee_percent: Platform cut as a percentage of the subtotal.
        processor_fee_percent: Processor percentage of the charged amount.
        processor_fee_fixed: Processor flat fee per charge.
        fee_label: Customer-facing label for the fee line.
        show_fee_breakdown: Whether the caller should itemize fees.
        currency: ISO currency code, lower case.
    """

    mode: FeeMode
    platform_fee_percent: Decimal = ZERO
    processor_fee_percent: Decimal = ZERO
    processor_fee_fixed: Decimal = ZERO
    fee_label: str = "Service Fee"
    show_fee_breakdown: bool = True
    currency: str = "usd"

    @classmethod
    def from_settings(cls, mode: FeeMode, settings=None) -> "FeeConfig":
        """Build a fee configuration from environment defaults."""
        settings = settings or get_settings()
        return cls(
            mode=mode,
            platform_fee_percent=settings.default_platform_fee_percent,
            processor_fee_percent=settings.default_processor_fee_percent,
            processor_fee_fixed=settings.default_processor_fee_fixed,
            fee_label=settings.default_fee_label,
            currency=settings.default_currency,
        )


class DiscountType(Enum):
    """Promo discount kinds."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class PromoCode:
    """An already-validated promotion."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal

    def __post_init__(self):
        object.__setattr__(self, "code", self.code.strip().upper())


@dataclass(frozen=True)
class GiftCard:
    """An already-validated gift card.

    Attributes:
        code: Card code.
        remaining_amount: Balance left on the card.
        requested_amount: Portion of the balance the customer wants to use
            (None = as much as the order allows).
    """

    code: str
    remaining_amount: Decimal
    requested_amount: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, "code", self.code.strip().upper())


@dataclass(frozen=True)
class LineItem:
    """One display line of a price breakdown."""

    label: str
    amount: Decimal


@dataclass(frozen=True)
class PriceBreakdown:
    """Final, cent-rounded price breakdown for an order.

    Attributes:
        subtotal: Ticket subtotal before discounts and fees.
        platform_fee: Platform cut.
        processor_fee: Payment processor fee.
        promo_discount: Amount taken off by the promo code.
        gift_card_discount: Amount paid with the gift card.
        customer_total: Amount charged to the customer (authoritative).
        merchant_receives: Net payout to the merchant.
        currency: ISO currency code.
        mode: Fee attribution mode used.
        fee_label: Label for the customer-facing fee line.
        show_fee_breakdown: Whether fees should be itemized for display.
        platform_shortfall: Fees the platform absorbs when an Absorb-mode
            payout would otherwise go negative.
    """

    subtotal: Decimal
    platform_fee: Decimal
    processor_fee: Decimal
    promo_discount: Decimal
    gift_card_discount: Decimal
    customer_total: Decimal
    merchant_receives: Decimal
    currency: str
    mode: FeeMode
    fee_label: str = "Service Fee"
    show_fee_breakdown: bool = True
    platform_shortfall: Decimal = ZERO

    @property
    def total_fees(self) -> Decimal:
        return self.platform_fee + self.processor_fee

    @property
    def service_fee(self) -> Decimal:
        """Fee amount surfaced to the customer."""
        if self.mode is FeeMode.PASS_TO_CUSTOMER:
            return self.total_fees
        return ZERO

    def line_items(self) -> list[LineItem]:
        """Customer-facing lines, itemized when ``show_fee_breakdown`` is set."""
        lines = [LineItem("Subtotal", self.subtotal)]
        if self.promo_discount:
            lines.append(LineItem("Promo discount", -self.promo_discount))
        if self.gift_card_discount:
            lines.append(LineItem("Gift card", -self.gift_card_discount))
        if self.mode is FeeMode.PASS_TO_CUSTOMER and self.service_fee:
            if self.show_fee_breakdown:
                lines.append(LineItem("Platform fee", self.platform_fee))
                lines.append(LineItem("Processing fee", self.processor_fee))
            else:
                lines.append(LineItem(self.fee_label, self.service_fee))
        lines.append(LineItem("Total", self.customer_total))
        return lines

    def to_dict(self) -> dict[str, object]:
        """Serialize to plain types, money as two-decimal strings."""
        return {
            "subtotal": f"{self.subtotal:.2f}",
            "platform_fee": f"{self.platform_fee:.2f}",
            "processor_fee": f"{self.processor_fee:.2f}",
            "promo_discount": f"{self.promo_discount:.2f}",
            "gift_card_discount": f"{self.gift_card_discount:.2f}",
            "customer_total": f"{self.customer_total:.2f}",
            "merchant_receives": f"{self.merchant_receives:.2f}",
            "platform_shortfall": f"{self.platform_shortfall:.2f}",
            "service_fee": f"{self.service_fee:.2f}",
            "currency": self.currency,
            "mode": self.mode.value,
            "fee_label": self.fee_label,
            "show_fee_breakdown": self.show_fee_breakdown,
        }


def to_decimal(value: Money, name: str = "amount") -> Decimal:
    """Coerce a money value to Decimal without binary float artifacts.

    Raises:
        InputValidationError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise InputValidationError(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except ArithmeticError:
            raise InputValidationError(f"{name} is not a valid amount: {value!r}") from None
    else:
        raise InputValidationError(f"{name} must be a number, got {type(value).__name__}")
    if not result.is_finite():
        raise InputValidationError(f"{name} must be finite, got {value!r}")
    return result


_TIME_12H = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")
_TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_of_day(value: Union[str, time]) -> time:
    """Parse "18:00" or "6:00 PM" into a time.

    Raises:
        InputValidationError: If the string is not a recognizable time.
    """
    if isinstance(value, time):
        return value
    text = re.sub(r"\s+", " ", value.strip())

    match = _TIME_24H.match(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
    else:
        match = _TIME_12H.match(text)
        if not match:
            raise InputValidationError(f"Unrecognized time of day: {value!r}")
        hour, minute = int(match.group(1)), int(match.group(2))
        if not 1 <= hour <= 12:
            raise InputValidationError(f"Unrecognized time of day: {value!r}")
        period = match.group(3).upper()
        if period == "PM" and hour != 12:
            hour += 12
        elif period == "AM" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59:
        raise InputValidationError(f"Time out of range: {value!r}")
    return time(hour=hour, minute=minute)


def time_to_minutes(t: time) -> int:
    """Minutes since midnight."""
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> time:
    """Time of day for minutes since midnight (must be < 24h)."""
    hours, mins = divmod(minutes, 60)
    return time(hour=hours, minute=mins)


def slot_datetime(day: date, start: time) -> datetime:
    """Naive local datetime of a slot start."""
    return datetime.combine(day, start)


def add_minutes(t: time, minutes: int) -> time:
    """Add minutes to a time of day without crossing midnight."""
    return (datetime.combine(date.min, t) + timedelta(minutes=minutes)).time()
