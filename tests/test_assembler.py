"""Tests for quote assembly and commit-time re-validation."""

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from bookingengine.domain.errors import SlotUnavailableError
from bookingengine.domain.models import (
    BlockedDate,
    ExistingReservation,
    FeeConfig,
    FeeMode,
    ScheduleConfig,
    Weekday,
)
from bookingengine.domain.policies import HalfUpRounding
from bookingengine.pricing.fee_calculator import FeeCalculator
from bookingengine.pricing.tiers import PartySelection, TicketPricing
from bookingengine.quoting.assembler import QuoteAssembler
from bookingengine.scheduling.capacity import SlotCapacityLedger
from bookingengine.scheduling.resolver import ScheduleResolver

SATURDAY = date(2025, 3, 8)
EVENING = time(18, 0)


class TestQuoteAssembler:
    """Tests for QuoteAssembler."""

    @pytest.fixture
    def config(self):
        """Weekend evenings, two-hour sessions every hour, 6 players."""
        return ScheduleConfig(
            operating_days=Weekday.weekend(),
            start_time=time(16, 0),
            end_time=time(22, 0),
            slot_interval_minutes=60,
            duration_minutes=120,
            advance_booking_minutes=120,
            capacity_per_slot=6,
        )

    @pytest.fixture
    def assembler(self, config):
        resolver = ScheduleResolver(config, [BlockedDate(start=date(2025, 3, 15))])
        return QuoteAssembler(resolver, FeeCalculator(HalfUpRounding()))

    @pytest.fixture
    def pricing(self):
        return TicketPricing(adult_price=Decimal("25"), child_price=Decimal("15"))

    @pytest.fixture
    def fees(self):
        return FeeConfig(
            mode=FeeMode.PASS_TO_CUSTOMER,
            platform_fee_percent=Decimal("1.29"),
            processor_fee_percent=Decimal("2.9"),
            processor_fee_fixed=Decimal("0.30"),
        )

    @pytest.fixture
    def now(self):
        return datetime(2025, 3, 1, 12, 0)

    def test_quote_prices_party(self, assembler, pricing, fees, now):
        """Four adults at 25.00 match the reference breakdown."""
        quote = assembler.quote(
            SATURDAY, EVENING, PartySelection(adults=4), pricing, fees, [], now
        )

        assert quote.party_size == 4
        assert quote.slot.start_time == EVENING
        assert quote.slot.end_time == time(20, 0)
        assert quote.breakdown.subtotal == Decimal("100.00")
        assert quote.breakdown.customer_total == Decimal("104.63")
        assert quote.breakdown.merchant_receives == Decimal("100.00")

    def test_quote_rejects_missing_slot(self, assembler, pricing, fees, now):
        """Times that are not slot starts cannot be quoted."""
        with pytest.raises(SlotUnavailableError):
            assembler.quote(
                SATURDAY, time(18, 30), PartySelection(adults=1), pricing, fees, [], now
            )

    def test_quote_rejects_slot_past_window(self, assembler, pricing, fees, now):
        """A slot whose session would overrun closing time does not exist."""
        with pytest.raises(SlotUnavailableError):
            assembler.quote(
                SATURDAY, time(21, 0), PartySelection(adults=1), pricing, fees, [], now
            )

    def test_quote_rejects_closed_date(self, assembler, pricing, fees, now):
        """Blocked and non-operating dates have no slots."""
        for day in (date(2025, 3, 15), date(2025, 3, 11)):
            with pytest.raises(SlotUnavailableError):
                assembler.quote(day, EVENING, PartySelection(adults=1), pricing, fees, [], now)

    def test_quote_respects_lead_time(self, assembler, pricing, fees):
        """Slots inside the lead time are not quotable."""
        now = datetime(2025, 3, 8, 16, 30)

        with pytest.raises(SlotUnavailableError):
            assembler.quote(
                SATURDAY, time(18, 0), PartySelection(adults=1), pricing, fees, [], now
            )
        quote = assembler.quote(
            SATURDAY, time(19, 0), PartySelection(adults=1), pricing, fees, [], now
        )
        assert quote.slot.start_time == time(19, 0)

    def test_quote_rejects_party_larger_than_spots(self, assembler, pricing, fees, now):
        """A party must fit in the remaining spots."""
        reservations = [ExistingReservation(SATURDAY, EVENING, party_size=4)]

        with pytest.raises(SlotUnavailableError):
            assembler.quote(
                SATURDAY, EVENING, PartySelection(adults=2, children=1),
                pricing, fees, reservations, now,
            )

    def test_confirm_claims_capacity(self, assembler, config, pricing, fees, now):
        """Confirming decrements the ledger."""
        ledger = SlotCapacityLedger(config.capacity_per_slot)
        quote = assembler.quote(
            SATURDAY, EVENING, PartySelection(adults=2, children=2), pricing, fees, [], now
        )

        assembler.confirm(quote, ledger, now)

        assert ledger.remaining(SATURDAY, EVENING) == 2

    def test_stale_quote_fails_at_commit(self, assembler, config, pricing, fees, now):
        """Two quotes built from the same snapshot cannot both commit."""
        ledger = SlotCapacityLedger(config.capacity_per_slot)
        first = assembler.quote(
            SATURDAY, EVENING, PartySelection(adults=4), pricing, fees, [], now
        )
        second = assembler.quote(
            SATURDAY, EVENING, PartySelection(adults=4), pricing, fees, [], now
        )

        assembler.confirm(first, ledger, now)
        with pytest.raises(SlotUnavailableError):
            assembler.confirm(second, ledger, now)

    def test_confirm_rechecks_date(self, assembler, config, pricing, fees, now):
        """A date that has passed since quoting cannot be confirmed."""
        ledger = SlotCapacityLedger(config.capacity_per_slot)
        quote = assembler.quote(
            SATURDAY, EVENING, PartySelection(adults=1), pricing, fees, [], now
        )

        with pytest.raises(SlotUnavailableError):
            assembler.confirm(quote, ledger, datetime(2025, 3, 9, 9, 0))
        assert ledger.booked(SATURDAY, EVENING) == 0

    def test_confirm_rechecks_lead_time(self, assembler, config, pricing, fees, now):
        """A slot that fell inside the lead time since quoting cannot be confirmed."""
        ledger = SlotCapacityLedger(config.capacity_per_slot)
        quote = assembler.quote(
            SATURDAY, EVENING, PartySelection(adults=2), pricing, fees, [], now
        )

        with pytest.raises(SlotUnavailableError):
            assembler.confirm(quote, ledger, datetime(2025, 3, 8, 17, 0))
        assert ledger.booked(SATURDAY, EVENING) == 0

    def test_confirm_rechecks_partial_block(self, assembler, config, pricing, fees, now):
        """A time window blocked after quoting cannot be confirmed."""
        ledger = SlotCapacityLedger(config.capacity_per_slot)
        quote = assembler.quote(
            SATURDAY, EVENING, PartySelection(adults=2), pricing, fees, [], now
        )
        blocked = QuoteAssembler(ScheduleResolver(config, [
            BlockedDate(start=SATURDAY, start_time=time(18, 0), end_time=time(18, 30)),
        ]))

        with pytest.raises(SlotUnavailableError):
            blocked.confirm(quote, ledger, now)
        assert ledger.booked(SATURDAY, EVENING) == 0

    def test_calendar_and_dates_agree(self, assembler, now):
        """The calendar and the date list come from one predicate."""
        calendar_days = [d.day for d in assembler.calendar(2025, 3, now) if d.available]

        assert list(assembler.available_dates(2025, 3, now)) == calendar_days
        assert date(2025, 3, 15) not in calendar_days
