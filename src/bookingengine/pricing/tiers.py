"""Ticket pricing tiers.

Turns a party selection (adults, children, custom tiers such as VIP or
equipment rental) into the ticket subtotal the fee calculator works from.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from bookingengine.domain.errors import InputValidationError
from bookingengine.domain.models import ZERO, Money, to_decimal


@dataclass(frozen=True)
class CustomTier:
    """An additional priced ticket type.

    Attributes:
        id: Tier identifier referenced by selections.
        name: Display name.
        price: Unit price.
        min_qty: Minimum quantity when the tier is selected.
        max_qty: Maximum quantity per booking.
    """

    id: str
    name: str
    price: Decimal
    min_qty: int = 0
    max_qty: int = 10


@dataclass(frozen=True)
class PartySelection:
    """Head counts chosen by the customer."""

    adults: int
    children: int = 0
    custom: dict[str, int] = field(default_factory=dict)

    @property
    def party_size(self) -> int:
        """Total units occupying the slot."""
        return self.adults + self.children + sum(self.custom.values())


@dataclass(frozen=True)
class TicketPricing:
    """Unit prices for a bookable item."""

    adult_price: Decimal
    child_price: Decimal = ZERO
    custom_tiers: tuple[CustomTier, ...] = ()

    @classmethod
    def flat(cls, price: Money) -> "TicketPricing":
        """Single price per person."""
        return cls(adult_price=to_decimal(price, "price"))

    def tier(self, tier_id: str) -> Optional[CustomTier]:
        for tier in self.custom_tiers:
            if tier.id == tier_id:
                return tier
        return None

    def subtotal_for(self, selection: PartySelection) -> Decimal:
        """Ticket subtotal for a selection.

        Raises:
            InputValidationError: On negative counts, an empty party, unknown
                tiers, or quantities outside a tier's bounds.
        """
        if selection.adults < 0 or selection.children < 0:
            raise InputValidationError("Head counts must not be negative")
        if selection.party_size <= 0:
            raise InputValidationError("Party must include at least one person")

        total = (
            to_decimal(self.adult_price, "adult_price") * selection.adults
            + to_decimal(self.child_price, "child_price") * selection.children
        )

        for tier_id, quantity in selection.custom.items():
            tier = self.tier(tier_id)
            if tier is None:
                raise InputValidationError(f"Unknown pricing tier: {tier_id!r}")
            if quantity < 0:
                raise InputValidationError(f"{tier.name} quantity must not be negative")
            if quantity and not tier.min_qty <= quantity <= tier.max_qty:
                raise InputValidationError(
                    f"{tier.name} quantity must be within "
                    f"{tier.min_qty}..{tier.max_qty}, got {quantity}"
                )
            total += to_decimal(tier.price, "price") * quantity

        return total
