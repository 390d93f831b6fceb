"""Ticket pricing and fee attribution."""

from bookingengine.pricing.fee_calculator import FeeCalculator, compute_breakdown
from bookingengine.pricing.tiers import CustomTier, PartySelection, TicketPricing

__all__ = [
    "CustomTier",
    "FeeCalculator",
    "PartySelection",
    "TicketPricing",
    "compute_breakdown",
]
