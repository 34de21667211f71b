"""
Tier Resolver - Maps a quantity onto a tier table.

All functions are pure: tier tables are read, never mutated, and an empty
table always falls back to the product's default price.
"""
import math
from typing import Iterable, Optional

from .models import PriceTier, NextTierHint


def sort_tiers(tiers: Iterable[PriceTier]) -> list[PriceTier]:
    """Return a new list of tiers ordered by min_quantity ascending."""
    return sorted(tiers or [], key=lambda t: t.min_quantity)


def find_tier(tiers: Iterable[PriceTier], quantity: int) -> Optional[PriceTier]:
    """
    Find the band a quantity falls into.

    Scans from the highest band downward so the most specific
    (largest min_quantity) band wins.
    """
    for tier in reversed(sort_tiers(tiers)):
        if tier.contains(quantity):
            return tier
    return None


def resolve_price(tiers: Iterable[PriceTier], quantity: int, default_price: float) -> float:
    """
    Resolve the unit price for a quantity.

    Quantities below the lowest band, or with no tiers configured,
    resolve to default_price.
    """
    tier = find_tier(tiers, quantity)
    if tier is None:
        return default_price
    return tier.unit_price


def next_tier_hint(tiers: Iterable[PriceTier], quantity: int, default_price: float) -> Optional[NextTierHint]:
    """
    Describe the next cheaper band reachable by buying more.

    Returns None when no tiers are configured or the quantity is
    already at the best reachable price.
    """
    ordered = sort_tiers(tiers)
    if not ordered:
        return None

    current_price = resolve_price(ordered, quantity, default_price)

    for tier in ordered:
        if tier.min_quantity > quantity and tier.unit_price < current_price:
            # Storefront rounding: halves go up
            savings = math.floor((1 - tier.unit_price / current_price) * 100 + 0.5)
            return NextTierHint(
                quantity_needed=tier.min_quantity - quantity,
                next_price=tier.unit_price,
                savings_percent=int(savings),
            )

    return None


def lowest_tier_price(tiers: Iterable[PriceTier], default_price: float) -> float:
    """Lowest reachable unit price, for "from $X" display."""
    prices = [tier.unit_price for tier in tiers or []]
    return min(prices + [default_price])


def current_tier_label(tiers: Iterable[PriceTier], quantity: int) -> Optional[str]:
    """Label of the band containing quantity, e.g. "10-49 units" or "50+ units"."""
    tier = find_tier(tiers, quantity)
    return tier.label() if tier else None
