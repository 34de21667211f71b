"""Engine subpackage - core tier pricing logic and resolution."""
from .pricing_engine import PricingEngine
from .models import PriceTier, NextTierHint, ValidationResult, Request, LineItem, Result
from .tier_resolver import resolve_price, next_tier_hint, lowest_tier_price, current_tier_label
from .tier_validator import validate_tiers

__all__ = [
    'PricingEngine', 'PriceTier', 'NextTierHint', 'ValidationResult',
    'Request', 'LineItem', 'Result',
    'resolve_price', 'next_tier_hint', 'lowest_tier_price', 'current_tier_label',
    'validate_tiers',
]
