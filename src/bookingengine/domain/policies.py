"""Rounding policies for monetary output.

Fee arithmetic runs on exact Decimals; a policy decides how the final
figures are brought to cent precision. Policies are kept separate from the
calculator so the tie-breaking rule can be swapped and tested on its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


class RoundingPolicy(ABC):
    """Abstract base class for cent rounding."""

    @abstractmethod
    def round_money(self, amount: Decimal) -> Decimal:
        """Round an amount to cents using the policy's tie-breaking rule."""
        pass

    def round_up(self, amount: Decimal) -> Decimal:
        """Round an amount up to the next cent.

        Used for charges that must cover a fee computed on themselves.
        """
        return amount.quantize(CENT, rounding=ROUND_CEILING)

    @property
    @abstractmethod
    def name(self) -> str:
        pass


@dataclass
class HalfUpRounding(RoundingPolicy):
    """Round half away from zero: 0.125 -> 0.13. The default."""

    def round_money(self, amount: Decimal) -> Decimal:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def name(self) -> str:
        return "half_up"


@dataclass
class HalfEvenRounding(RoundingPolicy):
    """Banker's rounding: 0.125 -> 0.12, 0.135 -> 0.14."""

    def round_money(self, amount: Decimal) -> Decimal:
        return amount.quantize(CENT, rounding=ROUND_HALF_EVEN)

    @property
    def name(self) -> str:
        return "half_even"


def rounding_policy_for(name: str) -> RoundingPolicy:
    """Look up a rounding policy by its settings name."""
    policies = {
        "half_up": HalfUpRounding,
        "half_even": HalfEvenRounding,
    }
    try:
        return policies[name]()
    except KeyError:
        raise ValueError(
            f"Unknown rounding mode {name!r}, expected one of {sorted(policies)}"
        ) from None
