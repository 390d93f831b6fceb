"""PDF generation for booking quotes.

This module creates a one-page printable quote showing:
- Venue and item header
- Booking details (date, time, party)
- Payment summary, itemized when the fee configuration asks for it
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from bookingengine.domain.models import FeeMode
from bookingengine.quoting.assembler import Quote

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "primary": (0.31, 0.27, 0.90),  # Indigo
    "text": (0.07, 0.09, 0.15),
    "muted": (0.42, 0.45, 0.50),
    "discount": (0.06, 0.73, 0.51),  # Green
    "rule": (0.90, 0.91, 0.92),
}


class QuotePDFGenerator:
    """Generates printable PDF quotes.

    Example:
        >>> generator = QuotePDFGenerator(venue_name="Escape Room Co")
        >>> generator.generate(quote, "quote.pdf", item_name="The Vault")
    """

    def __init__(
        self,
        venue_name: str = "",
        page_width: float = 612,  # Letter portrait width (8.5")
        page_height: float = 792,  # Letter portrait height (11")
        margin: float = 54,  # 0.75 inch margins
    ):
        self.venue_name = venue_name
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        quote: Quote,
        output_path: Union[str, Path],
        item_name: str = "",
    ) -> None:
        """Generate the quote PDF and save it to a file.

        Args:
            quote: The quote to render.
            output_path: Path to save the PDF.
            item_name: Name of the booked item, shown in the header.
        """
        try:
            from reportlab.lib.pagesizes import letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=letter)
        self._draw_quote(c, quote, item_name)
        c.save()

    def generate_to_buffer(self, quote: Quote, item_name: str = "") -> BytesIO:
        """Generate the quote PDF and return it as a bytes buffer."""
        try:
            from reportlab.lib.pagesizes import letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=letter)
        self._draw_quote(c, quote, item_name)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_quote(self, c, quote: Quote, item_name: str) -> None:
        y = self._draw_header(c, item_name)
        y = self._draw_booking_details(c, quote, y)
        self._draw_payment_summary(c, quote, y)
        c.showPage()

    def _draw_header(self, c, item_name: str) -> float:
        """Draw the colored title band; returns the next y position."""
        band_height = 64
        c.setFillColorRGB(*COLORS["primary"])
        c.rect(0, self.page_height - band_height, self.page_width, band_height, fill=1, stroke=0)

        c.setFillColorRGB(1, 1, 1)
        c.setFont("Helvetica-Bold", 20)
        c.drawCentredString(
            self.page_width / 2,
            self.page_height - 32,
            self.venue_name or "Booking Quote",
        )
        c.setFont("Helvetica", 11)
        c.drawCentredString(
            self.page_width / 2,
            self.page_height - 50,
            f"Quote - {item_name}" if item_name else "Quote",
        )
        return self.page_height - band_height - 36

    def _draw_section_title(self, c, title: str, y: float) -> float:
        c.setFillColorRGB(*COLORS["primary"])
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, title)
        return y - 20

    def _draw_rule(self, c, y: float) -> float:
        c.setStrokeColorRGB(*COLORS["rule"])
        c.setLineWidth(1)
        c.line(self.margin, y, self.page_width - self.margin, y)
        return y - 24

    def _draw_booking_details(self, c, quote: Quote, y: float) -> float:
        y = self._draw_section_title(c, "Booking Details", y)

        selection = quote.selection
        party = [f"{selection.adults} adult(s)"]
        if selection.children:
            party.append(f"{selection.children} child(ren)")
        for tier_id, quantity in selection.custom.items():
            if quantity:
                party.append(f"{quantity} x {tier_id}")

        rows = [
            ("Date", quote.day.strftime("%A, %B %d, %Y")),
            (
                "Time",
                f"{quote.slot.start_time.strftime('%I:%M %p').lstrip('0')} - "
                f"{quote.slot.end_time.strftime('%I:%M %p').lstrip('0')}",
            ),
            ("Party", ", ".join(party)),
            ("Guests", str(quote.party_size)),
        ]

        c.setFont("Helvetica", 10)
        for label, value in rows:
            c.setFillColorRGB(*COLORS["muted"])
            c.drawString(self.margin, y, label)
            c.setFillColorRGB(*COLORS["text"])
            c.drawString(self.margin + 90, y, value)
            y -= 16

        return self._draw_rule(c, y - 4)

    def _draw_payment_summary(self, c, quote: Quote, y: float) -> float:
        breakdown = quote.breakdown
        currency = breakdown.currency.upper()
        right = self.page_width - self.margin

        y = self._draw_section_title(c, "Payment Summary", y)
        c.setFont("Helvetica", 10)

        for item in breakdown.line_items()[:-1]:
            color = COLORS["discount"] if item.amount < 0 else COLORS["muted"]
            c.setFillColorRGB(*color)
            c.drawString(self.margin, y, item.label)
            c.drawRightString(right, y, f"{item.amount:,.2f} {currency}")
            y -= 16

        c.setStrokeColorRGB(*COLORS["rule"])
        c.line(right - 160, y + 6, right, y + 6)
        y -= 8

        c.setFillColorRGB(*COLORS["text"])
        c.setFont("Helvetica-Bold", 14)
        c.drawString(self.margin, y, "Total")
        c.drawRightString(right, y, f"{breakdown.customer_total:,.2f} {currency}")
        y -= 22

        if breakdown.mode is FeeMode.PASS_TO_CUSTOMER and not breakdown.show_fee_breakdown:
            c.setFont("Helvetica-Oblique", 8)
            c.setFillColorRGB(*COLORS["muted"])
            c.drawString(
                self.margin,
                y,
                f"Includes {breakdown.service_fee:,.2f} {currency} "
                f"{breakdown.fee_label.lower()}",
            )
            y -= 14

        return y
