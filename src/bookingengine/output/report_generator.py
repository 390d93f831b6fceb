"""Text output for availability and quotes.

This module renders plain-text reports for operators and the CLI:
- A month calendar marking bookable days and why others are closed
- A slot listing with remaining capacity
- A price breakdown
"""

import calendar
from datetime import date

from bookingengine.domain.models import (
    DateAvailability,
    DateUnavailableReason,
    PriceBreakdown,
    Slot,
)

# One-letter calendar markers for unavailable days
REASON_MARKERS = {
    DateUnavailableReason.PAST: "-",
    DateUnavailableReason.BLOCKED: "x",
    DateUnavailableReason.NOT_OPERATING: ".",
    DateUnavailableReason.BEYOND_BOOKING_WINDOW: ">",
}


class AvailabilityReport:
    """Renders availability and pricing as text.

    Example:
        >>> report = AvailabilityReport()
        >>> print(report.month_calendar(2025, 3, resolver.describe_month(2025, 3, now)))
    """

    def month_calendar(self, year: int, month: int, days: list[DateAvailability]) -> str:
        """Render a month grid, Monday first.

        Bookable days show their number; closed days show a marker.
        """
        by_day = {d.day.day: d for d in days}
        lines = [
            f"{calendar.month_name[month]} {year}".center(28),
            " ".join(f"{name:>3}" for name in ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")),
        ]

        for week in calendar.monthcalendar(year, month):
            cells = []
            for day_number in week:
                if day_number == 0:
                    cells.append("   ")
                    continue
                info = by_day.get(day_number)
                if info is None or info.available:
                    cells.append(f"{day_number:>3}")
                else:
                    cells.append(f"{REASON_MARKERS.get(info.reason, '?'):>3}")
            lines.append(" ".join(cells))

        lines.append("")
        lines.append("Legend: - past  x blocked  . closed  > beyond booking window")
        available = sum(1 for d in days if d.available)
        lines.append(f"Bookable days: {available}")
        return "\n".join(lines)

    def slot_listing(self, day: date, slots: list[Slot]) -> str:
        """List slots for a date, one per line."""
        lines = [f"Slots for {day.strftime('%A, %B %d, %Y')}"]
        lines.append("-" * 40)
        if not slots:
            lines.append("No slots available")
        for slot in slots:
            lines.append(str(slot))
        return "\n".join(lines)

    def price_breakdown(self, breakdown: PriceBreakdown) -> str:
        """Render the customer lines followed by the payout summary."""
        currency = breakdown.currency.upper()
        lines = []
        for item in breakdown.line_items():
            lines.append(f"{item.label:<24}{item.amount:>12.2f} {currency}")
        lines.append("-" * 40)
        lines.append(f"{'Merchant receives':<24}{breakdown.merchant_receives:>12.2f} {currency}")
        if breakdown.platform_shortfall:
            lines.append(
                f"{'Platform absorbs':<24}{breakdown.platform_shortfall:>12.2f} {currency}"
            )
        return "\n".join(lines)
