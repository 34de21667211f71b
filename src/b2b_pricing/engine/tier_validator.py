"""
Tier Validator - Rejects inconsistent tier tables before they are saved.

Validation is fail-fast: only the first violated rule is reported, and a
malformed table is reported as a result, never raised.
"""
import math
from typing import Sequence

from .models import PriceTier, ValidationResult


MAX_TIERS = 5

TOO_MANY_TIERS = "A tier table can have at most {max_tiers} tiers"
FIRST_TIER_NOT_ONE = "The first tier must start at quantity 1"
NON_POSITIVE_QUANTITY = "Tier quantities must be greater than 0"
NON_POSITIVE_PRICE = "Tier prices must be greater than 0"
UNBOUNDED_NOT_LAST = "Only the last tier can have no upper limit"
NOT_CONTIGUOUS = "Tier quantity ranges must be contiguous (tier ending at {max_qty} must be followed by {expected})"
PRICE_INCREASES = "Unit price must stay the same or decrease as quantity increases"


def validate_tiers(tiers: Sequence[PriceTier], max_tiers: int = MAX_TIERS) -> ValidationResult:
    """
    Check a proposed tier table against the tier table invariants.

    An empty table is valid; the product then uses its default price.
    """
    if not tiers:
        return ValidationResult(valid=True)

    if len(tiers) > max_tiers:
        return ValidationResult(valid=False, reason=TOO_MANY_TIERS.format(max_tiers=max_tiers))

    ordered = sorted(tiers, key=lambda t: t.min_quantity)

    if ordered[0].min_quantity != 1:
        return ValidationResult(valid=False, reason=FIRST_TIER_NOT_ONE)

    for i, tier in enumerate(ordered):
        if tier.min_quantity <= 0:
            return ValidationResult(valid=False, reason=NON_POSITIVE_QUANTITY)

        if not math.isfinite(tier.unit_price) or tier.unit_price <= 0:
            return ValidationResult(valid=False, reason=NON_POSITIVE_PRICE)

        if i == len(ordered) - 1:
            break

        next_tier = ordered[i + 1]

        if tier.max_quantity is None:
            return ValidationResult(valid=False, reason=UNBOUNDED_NOT_LAST)

        if next_tier.min_quantity != tier.max_quantity + 1:
            return ValidationResult(
                valid=False,
                reason=NOT_CONTIGUOUS.format(max_qty=tier.max_quantity, expected=tier.max_quantity + 1),
            )

        if not next_tier.unit_price <= tier.unit_price:
            return ValidationResult(valid=False, reason=PRICE_INCREASES)

    return ValidationResult(valid=True)
