"""Quote assembly from availability and pricing."""

from bookingengine.quoting.assembler import Quote, QuoteAssembler

__all__ = [
    "Quote",
    "QuoteAssembler",
]
