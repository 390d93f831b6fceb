"""Fee calculator: price breakdowns under both fee attribution modes.

Absorb mode is a forward computation: fees come out of the merchant's
payout. Pass-to-customer mode has the processor charging its percentage on
the customer's total, which itself includes the processor fee:

    total = d + platform + (total * p + fixed)

where ``d`` is the discounted subtotal and ``p`` the processor rate. Solving
for the total gives the closed form

    total = (d + platform + fixed) / (1 - p)

which is exact, so no iteration is needed. The processor fee is recovered as
``total - d - platform`` so the parts add up to the total before rounding.
"""

import logging
from decimal import Decimal
from typing import Optional

from bookingengine.domain.errors import InputValidationError
from bookingengine.domain.models import (
    ZERO,
    DiscountType,
    FeeConfig,
    FeeMode,
    GiftCard,
    Money,
    PriceBreakdown,
    PromoCode,
    to_decimal,
)
from bookingengine.domain.policies import RoundingPolicy, rounding_policy_for
from bookingengine.settings import get_settings
from bookingengine.validation.validator import ensure_valid_fee_config

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class FeeCalculator:
    """Computes price breakdowns for orders.

    Example:
        >>> calculator = FeeCalculator()
        >>> config = FeeConfig(mode=FeeMode.ABSORB, platform_fee_percent=Decimal("1.29"))
        >>> breakdown = calculator.compute_breakdown(Decimal("100"), config)
        >>> breakdown.merchant_receives
    """

    def __init__(self, rounding_policy: Optional[RoundingPolicy] = None):
        """Initialize with a rounding policy.

        Args:
            rounding_policy: Cent rounding rule. Defaults to the policy named
                by the ``rounding_mode`` setting (half-up unless overridden).
        """
        if rounding_policy is None:
            rounding_policy = rounding_policy_for(get_settings().rounding_mode)
        self.rounding = rounding_policy

    def compute_breakdown(
        self,
        subtotal: Money,
        fee_config: FeeConfig,
        promo: Optional[PromoCode] = None,
        gift_card: Optional[GiftCard] = None,
    ) -> PriceBreakdown:
        """Compute the full price breakdown for an order.

        Promo discounts apply to the subtotal first; the gift card then
        covers part or all of what is left.

        Args:
            subtotal: Ticket subtotal before discounts and fees.
            fee_config: Fee attribution configuration.
            promo: Already-validated promo code, if any.
            gift_card: Already-validated gift card, if any.

        Returns:
            PriceBreakdown rounded to cents.

        Raises:
            ConfigurationError: If the fee configuration is invalid.
            InputValidationError: If the subtotal or a discount is invalid.
        """
        ensure_valid_fee_config(fee_config)

        subtotal = to_decimal(subtotal, "subtotal")
        if subtotal < 0:
            raise InputValidationError(f"subtotal must not be negative, got {subtotal}")
        subtotal = self.rounding.round_money(subtotal)

        promo_discount = self._promo_discount(subtotal, promo)
        gift_discount = self._gift_card_discount(subtotal - promo_discount, gift_card)
        discounted = subtotal - promo_discount - gift_discount

        platform_rate = to_decimal(fee_config.platform_fee_percent) / HUNDRED
        processor_rate = to_decimal(fee_config.processor_fee_percent) / HUNDRED
        processor_fixed = to_decimal(fee_config.processor_fee_fixed)

        if fee_config.mode is FeeMode.PASS_TO_CUSTOMER:
            return self._pass_to_customer(
                subtotal, promo_discount, gift_discount, discounted,
                platform_rate, processor_rate, processor_fixed, fee_config,
            )
        return self._absorb(
            subtotal, promo_discount, gift_discount, discounted,
            platform_rate, processor_rate, processor_fixed, fee_config,
        )

    def _absorb(
        self,
        subtotal: Decimal,
        promo_discount: Decimal,
        gift_discount: Decimal,
        discounted: Decimal,
        platform_rate: Decimal,
        processor_rate: Decimal,
        processor_fixed: Decimal,
        fee_config: FeeConfig,
    ) -> PriceBreakdown:
        """Fees on the ticket subtotal, deducted from the payout."""
        platform_fee = subtotal * platform_rate
        # Nothing reaches the card when discounts cover the whole order
        if discounted > 0:
            processor_fee = subtotal * processor_rate + processor_fixed
        else:
            processor_fee = ZERO

        customer_total = discounted
        payout = customer_total - platform_fee - processor_fee
        shortfall = ZERO
        if payout < 0:
            shortfall = -payout
            payout = ZERO
            logger.warning(
                "Fees exceed discounted subtotal %s; platform absorbs %s",
                customer_total, self.rounding.round_money(shortfall),
            )

        return PriceBreakdown(
            subtotal=subtotal,
            platform_fee=self.rounding.round_money(platform_fee),
            processor_fee=self.rounding.round_money(processor_fee),
            promo_discount=promo_discount,
            gift_card_discount=gift_discount,
            customer_total=self.rounding.round_money(customer_total),
            merchant_receives=self.rounding.round_money(payout),
            currency=fee_config.currency.lower(),
            mode=FeeMode.ABSORB,
            fee_label=fee_config.fee_label,
            show_fee_breakdown=fee_config.show_fee_breakdown,
            platform_shortfall=self.rounding.round_money(shortfall),
        )

    def _pass_to_customer(
        self,
        subtotal: Decimal,
        promo_discount: Decimal,
        gift_discount: Decimal,
        discounted: Decimal,
        platform_rate: Decimal,
        processor_rate: Decimal,
        processor_fixed: Decimal,
        fee_config: FeeConfig,
    ) -> PriceBreakdown:
        """Fees added on top so the merchant nets the discounted subtotal."""
        platform_fee = discounted * platform_rate

        if discounted > 0:
            base = discounted + platform_fee + processor_fixed
            customer_total = base / (1 - processor_rate)
            processor_fee = customer_total - discounted - platform_fee
        else:
            customer_total = ZERO
            processor_fee = ZERO

        logger.debug(
            "Solved pass-to-customer total %s for discounted subtotal %s",
            customer_total, discounted,
        )

        return PriceBreakdown(
            subtotal=subtotal,
            platform_fee=self.rounding.round_money(platform_fee),
            processor_fee=self.rounding.round_money(processor_fee),
            promo_discount=promo_discount,
            gift_card_discount=gift_discount,
            # Charged amount is rounded up to the next cent
            customer_total=self.rounding.round_up(customer_total),
            merchant_receives=discounted,
            currency=fee_config.currency.lower(),
            mode=FeeMode.PASS_TO_CUSTOMER,
            fee_label=fee_config.fee_label,
            show_fee_breakdown=fee_config.show_fee_breakdown,
        )

    def _promo_discount(self, subtotal: Decimal, promo: Optional[PromoCode]) -> Decimal:
        """Promo amount, capped at the subtotal."""
        if promo is None:
            return ZERO

        value = to_decimal(promo.discount_value, "discount_value")
        if value < 0:
            raise InputValidationError(f"Promo {promo.code} has a negative value")

        if promo.discount_type is DiscountType.PERCENTAGE:
            if value > HUNDRED:
                raise InputValidationError(
                    f"Promo {promo.code} percentage must not exceed 100, got {value}"
                )
            discount = subtotal * value / HUNDRED
        else:
            discount = value

        return min(self.rounding.round_money(discount), subtotal)

    def _gift_card_discount(self, balance: Decimal, gift_card: Optional[GiftCard]) -> Decimal:
        """Gift card amount, capped at the card balance and the order balance."""
        if gift_card is None:
            return ZERO

        remaining = to_decimal(gift_card.remaining_amount, "remaining_amount")
        if remaining < 0:
            raise InputValidationError(f"Gift card {gift_card.code} has a negative balance")

        usable = remaining
        if gift_card.requested_amount is not None:
            requested = to_decimal(gift_card.requested_amount, "requested_amount")
            if requested < 0:
                raise InputValidationError(
                    f"Requested gift card amount must not be negative, got {requested}"
                )
            usable = min(usable, requested)

        return min(self.rounding.round_money(usable), balance)


def compute_breakdown(
    subtotal: Money,
    fee_config: FeeConfig,
    promo: Optional[PromoCode] = None,
    gift_card: Optional[GiftCard] = None,
    rounding_policy: Optional[RoundingPolicy] = None,
) -> PriceBreakdown:
    """Compute a price breakdown with a one-off calculator."""
    return FeeCalculator(rounding_policy).compute_breakdown(
        subtotal, fee_config, promo, gift_card
    )
