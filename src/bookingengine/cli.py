"""Command-line interface for the booking availability and fee engine."""

import argparse
import logging
import sys
from datetime import date, datetime
from typing import Optional

from bookingengine.domain.errors import BookingEngineError
from bookingengine.domain.models import (
    DiscountType,
    FeeMode,
    GiftCard,
    PromoCode,
    parse_time_of_day,
    to_decimal,
)
from bookingengine.output.pdf_generator import QuotePDFGenerator
from bookingengine.output.report_generator import AvailabilityReport
from bookingengine.pricing.fee_calculator import FeeCalculator
from bookingengine.pricing.tiers import PartySelection
from bookingengine.quoting.assembler import QuoteAssembler
from bookingengine.scheduling.resolver import ScheduleResolver
from bookingengine.settings import get_settings
from bookingengine.venue import Venue, load_venue

logger = logging.getLogger(__name__)


def _tier_arg(value: str) -> tuple[str, int]:
    tier_id, _, quantity = value.partition("=")
    try:
        return tier_id, int(quantity or 1)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected ID=QTY, got {value!r}") from None


def _build_assembler(venue: Venue) -> QuoteAssembler:
    resolver = ScheduleResolver(venue.schedule, venue.blocked_dates)
    return QuoteAssembler(resolver, FeeCalculator())


def run_dates(venue: Venue, year: int, month: int, now: datetime) -> None:
    """Print the month calendar for a venue."""
    assembler = _build_assembler(venue)
    report = AvailabilityReport()
    print(f"{venue.name} - {venue.item_name}".strip(" -"))
    print(report.month_calendar(year, month, assembler.calendar(year, month, now)))


def run_slots(venue: Venue, day: date, now: datetime) -> None:
    """Print the slots for one date."""
    assembler = _build_assembler(venue)
    slots = assembler.slots_for(day, venue.reservations, now)
    print(AvailabilityReport().slot_listing(day, slots))


def run_quote(venue: Venue, args: argparse.Namespace, now: datetime) -> None:
    """Price a party for a slot and optionally write a PDF quote."""
    assembler = _build_assembler(venue)

    custom = dict(args.tier or [])
    selection = PartySelection(adults=args.adults, children=args.children, custom=custom)

    promo = None
    if args.promo_code:
        promo = PromoCode(
            code=args.promo_code,
            discount_type=DiscountType(args.promo_type),
            discount_value=to_decimal(args.promo_value, "promo value"),
        )
    gift_card = None
    if args.gift_code:
        gift_card = GiftCard(
            code=args.gift_code,
            remaining_amount=to_decimal(args.gift_balance, "gift balance"),
            requested_amount=(
                to_decimal(args.gift_amount, "gift amount") if args.gift_amount else None
            ),
        )

    mode = FeeMode(args.mode) if args.mode else None
    quote = assembler.quote(
        day=args.date,
        start=parse_time_of_day(args.time),
        selection=selection,
        pricing=venue.pricing,
        fee_config=venue.fee_config(mode),
        existing_reservations=venue.reservations,
        now=now,
        promo=promo,
        gift_card=gift_card,
    )

    print(f"Quote for {quote.day} at {quote.slot.start_time.strftime('%H:%M')} "
          f"({quote.party_size} guests, {quote.breakdown.mode.value})")
    print(AvailabilityReport().price_breakdown(quote.breakdown))

    if args.pdf:
        QuotePDFGenerator(venue_name=venue.name).generate(
            quote, args.pdf, item_name=venue.item_name
        )
        print(f"\nPDF quote saved to: {args.pdf}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Booking availability and fee engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s dates venue.json --year 2025 --month 3
  %(prog)s slots venue.json --date 2025-03-08 --now 2025-03-08T09:30
  %(prog)s quote venue.json --date 2025-03-08 --time 18:00 --adults 4
  %(prog)s quote venue.json --date 2025-03-08 --time "6:00 PM" --adults 2 \\
      --children 1 --mode absorb --pdf quote.pdf
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    dates_parser = subparsers.add_parser("dates", help="Show bookable days of a month")
    dates_parser.add_argument("venue", help="Venue JSON file")
    dates_parser.add_argument("--year", "-y", type=int, required=True)
    dates_parser.add_argument("--month", "-m", type=int, required=True)
    dates_parser.add_argument(
        "--now", type=datetime.fromisoformat, help="Current local time (ISO format)"
    )

    slots_parser = subparsers.add_parser("slots", help="List slots for a date")
    slots_parser.add_argument("venue", help="Venue JSON file")
    slots_parser.add_argument(
        "--date", "-d", type=date.fromisoformat, required=True, help="Date (YYYY-MM-DD)"
    )
    slots_parser.add_argument(
        "--now", type=datetime.fromisoformat, help="Current local time (ISO format)"
    )

    quote_parser = subparsers.add_parser("quote", help="Price a booking")
    quote_parser.add_argument("venue", help="Venue JSON file")
    quote_parser.add_argument(
        "--date", "-d", type=date.fromisoformat, required=True, help="Date (YYYY-MM-DD)"
    )
    quote_parser.add_argument("--time", "-t", required=True, help="Slot start (18:00 or 6:00 PM)")
    quote_parser.add_argument("--adults", "-a", type=int, default=1)
    quote_parser.add_argument("--children", type=int, default=0)
    quote_parser.add_argument(
        "--tier",
        action="append",
        type=_tier_arg,
        help="Custom tier as ID=QTY (repeatable)",
    )
    quote_parser.add_argument(
        "--mode",
        choices=[m.value for m in FeeMode],
        help="Override the venue's fee mode",
    )
    quote_parser.add_argument("--promo-code")
    quote_parser.add_argument(
        "--promo-type",
        default="percentage",
        choices=[t.value for t in DiscountType],
    )
    quote_parser.add_argument("--promo-value", default="0")
    quote_parser.add_argument("--gift-code")
    quote_parser.add_argument("--gift-balance", default="0")
    quote_parser.add_argument("--gift-amount", help="Portion of the gift card to use")
    quote_parser.add_argument("--pdf", help="Output PDF file path")
    quote_parser.add_argument(
        "--now", type=datetime.fromisoformat, help="Current local time (ISO format)"
    )

    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else get_settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 1

    try:
        venue = load_venue(args.venue)
        now = args.now or datetime.now()
        if args.command == "dates":
            run_dates(venue, args.year, args.month, now)
        elif args.command == "slots":
            run_slots(venue, args.date, now)
        elif args.command == "quote":
            run_quote(venue, args, now)
    except BookingEngineError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
