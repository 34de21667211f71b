#!/usr/bin/env python
"""
Check pipeline - validates every stored tier table against the catalog.

Usage:
    python scripts/check_tiers.py
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from b2b_pricing.config.settings import get_settings
from b2b_pricing.engine import PricingEngine
from b2b_pricing.services.tiers_service import TiersService


def main():
    print("=" * 60)
    print("TIER TABLE CHECK")
    print("=" * 60)
    print()

    settings = get_settings()
    engine = PricingEngine(settings)
    service = TiersService(settings.tiers_csv, max_tiers=settings.max_tiers)

    stats = service.get_stats()
    failures = 0

    for product_id in stats['by_product']:
        tiers = service.list_tiers(product_id)
        result = service.validate(tiers)

        if not engine.has_product(product_id):
            print(f"  ⚠️  {product_id}: tier table for a product missing from the catalog")

        if result.valid:
            lowest = min(t.unit_price for t in tiers)
            print(f"  ✅ {product_id}: {len(tiers)} tiers, from ${lowest:,.2f}")
        else:
            failures += 1
            print(f"  ❌ {product_id}: {result.reason}")

    print()
    if failures:
        print(f"❌ {failures} invalid tier tables")
        sys.exit(1)

    print(f"✅ {stats['products_with_tiers']} tier tables valid ({stats['total_tiers']} tiers)")


if __name__ == "__main__":
    main()
