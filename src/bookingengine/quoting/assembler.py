"""Quote assembler.

This module provides the high-level QuoteAssembler that composes the
schedule resolver and the fee calculator into customer quotes, and performs
the commit-time re-validation callers must run before taking payment.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from bookingengine.domain.errors import SlotUnavailableError
from bookingengine.domain.models import (
    DateAvailability,
    ExistingReservation,
    FeeConfig,
    GiftCard,
    PriceBreakdown,
    PromoCode,
    Slot,
)
from bookingengine.pricing.fee_calculator import FeeCalculator
from bookingengine.pricing.tiers import PartySelection, TicketPricing
from bookingengine.scheduling.capacity import SlotCapacityLedger
from bookingengine.scheduling.resolver import AvailableDates, ScheduleResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    """A priced (date, slot, party) choice."""

    day: date
    slot: Slot
    selection: PartySelection
    breakdown: PriceBreakdown

    @property
    def party_size(self) -> int:
        return self.selection.party_size


class QuoteAssembler:
    """Composes availability and pricing into quotes.

    Example:
        >>> assembler = QuoteAssembler(ScheduleResolver(config, blocked))
        >>> quote = assembler.quote(day, time(18, 0), PartySelection(adults=4),
        ...                         pricing, fee_config, reservations, now)
        >>> assembler.confirm(quote, ledger, now)
    """

    def __init__(
        self,
        resolver: ScheduleResolver,
        fee_calculator: Optional[FeeCalculator] = None,
    ):
        self.resolver = resolver
        self.fee_calculator = fee_calculator or FeeCalculator()

    def available_dates(self, year: int, month: int, now: datetime) -> AvailableDates:
        return self.resolver.available_dates(year, month, now)

    def calendar(self, year: int, month: int, now: datetime) -> list[DateAvailability]:
        return self.resolver.describe_month(year, month, now)

    def slots_for(
        self,
        day: date,
        existing_reservations: Iterable[ExistingReservation],
        now: datetime,
    ) -> list[Slot]:
        return self.resolver.time_slots(day, existing_reservations, now)

    def quote(
        self,
        day: date,
        start: time,
        selection: PartySelection,
        pricing: TicketPricing,
        fee_config: FeeConfig,
        existing_reservations: Iterable[ExistingReservation],
        now: datetime,
        promo: Optional[PromoCode] = None,
        gift_card: Optional[GiftCard] = None,
    ) -> Quote:
        """Price a party for a specific slot.

        Raises:
            SlotUnavailableError: If no such slot exists or it lacks room.
            InputValidationError: If the selection or discounts are invalid.
            ConfigurationError: If the fee configuration is invalid.
        """
        slot = self._require_slot(day, start, selection.party_size, existing_reservations, now)
        subtotal = pricing.subtotal_for(selection)
        breakdown = self.fee_calculator.compute_breakdown(
            subtotal, fee_config, promo=promo, gift_card=gift_card
        )
        return Quote(day=day, slot=slot, selection=selection, breakdown=breakdown)

    def confirm(self, quote: Quote, ledger: SlotCapacityLedger, now: datetime) -> None:
        """Re-validate a quote at commit time and claim its capacity.

        The date is checked again with the same predicate used for display
        and the slot is regenerated, so a lapsed lead time or a new partial
        block is caught. Capacity is left to the ledger, which claims the
        party's units atomically.

        Raises:
            SlotUnavailableError: If the date closed, the slot is gone or
                blocked, or the slot filled up.
        """
        if not self.resolver.is_date_available(quote.day, now):
            raise SlotUnavailableError(f"{quote.day} is no longer available")
        slot = self.resolver.find_slot(quote.day, quote.slot.start_time, (), now)
        if slot is None or not slot.available:
            raise SlotUnavailableError(
                f"Slot {quote.slot.start_time.strftime('%H:%M')} on {quote.day} "
                f"is no longer bookable"
            )
        if not ledger.try_reserve(quote.day, quote.slot.start_time, quote.party_size):
            raise SlotUnavailableError(
                f"Slot {quote.slot.start_time.strftime('%H:%M')} on {quote.day} "
                f"no longer has room for {quote.party_size}"
            )
        logger.info(
            "Confirmed %d units at %s %s",
            quote.party_size, quote.day, quote.slot.start_time.strftime("%H:%M"),
        )

    def _require_slot(
        self,
        day: date,
        start: time,
        party_size: int,
        existing_reservations: Iterable[ExistingReservation],
        now: datetime,
    ) -> Slot:
        slot = self.resolver.find_slot(day, start, existing_reservations, now)
        if slot is None:
            raise SlotUnavailableError(
                f"No bookable slot at {start.strftime('%H:%M')} on {day}"
            )
        if not slot.can_hold(party_size):
            raise SlotUnavailableError(
                f"Slot {start.strftime('%H:%M')} on {day} cannot hold {party_size} "
                f"({slot.spots if slot.spots is not None else 'unbounded'} spots left)"
            )
        return slot
