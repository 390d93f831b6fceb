"""Output generation for availability and quotes (text, PDF)."""

from bookingengine.output.pdf_generator import QuotePDFGenerator
from bookingengine.output.report_generator import AvailabilityReport

__all__ = [
    "AvailabilityReport",
    "QuotePDFGenerator",
]
