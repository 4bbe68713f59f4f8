"""Price arithmetic for booking entries."""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from enum import Enum

from adledger.domain.models import ChargeMode
from adledger.domain.value_objects import CENT, Money, Percentage


class PriceMode(Enum):
    """How per-magazine prices combine into one list price."""

    SUM = "sum"
    MEAN = "mean"


def combine_prices(prices: list[Money], mode: PriceMode) -> Money:
    if not prices:
        raise ValueError("At least one price is required")
    total = sum((price.amount for price in prices), Decimal("0"))
    if mode is PriceMode.MEAN:
        total = total / len(prices)
    return Money(total).rounded()


def discounted_price(
    list_price: Money, discount_percentage: Percentage, discount_value: Money
) -> Money:
    """List price less both discounts, floored at zero."""
    discount = list_price.amount * discount_percentage.value / 100 + discount_value.amount
    remaining = list_price.amount - discount
    return Money(max(Decimal("0"), remaining)).rounded()


def net_value(
    list_price: Money,
    discount_percentage: Percentage,
    discount_value: Money,
    apportioned_charges: Money,
) -> Money:
    return (
        discounted_price(list_price, discount_percentage, discount_value)
        + apportioned_charges
    ).rounded()


def apportion_charges(charges: Money, entry_count: int, mode: ChargeMode) -> list[Money]:
    """Split additional charges over entries, to the cent.

    SPLIT shares the charges evenly; leftover cents go to the first entries
    so the parts always add back up to the total. WHOLESALE puts everything
    on the first entry.
    """
    if entry_count < 1:
        raise ValueError("A booking needs at least one entry")
    total = charges.rounded().amount
    if mode is ChargeMode.WHOLESALE or entry_count == 1:
        return [Money(total)] + [Money.zero()] * (entry_count - 1)

    share = (total / entry_count).quantize(CENT, rounding=ROUND_DOWN)
    leftover_cents = int(((total - share * entry_count) / CENT).to_integral_value(ROUND_HALF_UP))
    return [
        Money(share + CENT) if index < leftover_cents else Money(share)
        for index in range(entry_count)
    ]
