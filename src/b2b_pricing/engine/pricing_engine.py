"""
Pricing Engine - Prices catalog products through their tier tables.

Resolution order for each product:
1. Look up the product's default price in the catalog
2. Load its tier table (ordered by sort_order)
3. Pick the band containing the requested quantity
4. Fall back to the default price when no band matches
"""
import logging
import pandas as pd
from typing import Optional

from ..config.settings import get_settings, Settings
from .models import PriceTier, ProductPrice, Request, LineItem, Result
from .tier_resolver import (
    find_tier,
    next_tier_hint,
    lowest_tier_price,
)


LOGGER = logging.getLogger(__name__)

TIER_COLUMNS = ['product_id', 'min_quantity', 'max_quantity', 'unit_price', 'sort_order']


def load_tier_frame(path) -> pd.DataFrame:
    """Read the tier CSV, or an empty frame with the expected columns."""
    if not path.exists():
        return pd.DataFrame(columns=TIER_COLUMNS)
    return pd.read_csv(path, dtype={'product_id': str})


def frame_to_tiers(frame: pd.DataFrame) -> list[PriceTier]:
    """Convert tier rows to PriceTier objects ordered by sort_order."""
    if frame.empty:
        return []
    frame = frame.sort_values('sort_order', kind='stable')
    tiers = []
    for row in frame.itertuples(index=False):
        tiers.append(PriceTier(
            min_quantity=int(row.min_quantity),
            max_quantity=None if pd.isna(row.max_quantity) else int(row.max_quantity),
            unit_price=float(row.unit_price),
            sort_order=int(row.sort_order) if pd.notna(row.sort_order) else 0,
        ))
    return tiers


class PricingEngine:
    """
    Core pricing engine that resolves prices using Quantity → Band → Price.

    The catalog is required; tier tables are optional and a product
    without one is always sold at its default price.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize engine with catalog and tier data."""
        self.settings = settings or get_settings()

        catalog_path = self.settings.products_csv

        if not catalog_path.exists():
            raise FileNotFoundError(
                f"products.csv not found at {catalog_path}. "
                "Create the catalog before starting the engine."
            )

        self.catalog = pd.read_csv(
            catalog_path,
            index_col='product_id',
            dtype={'product_id': str, 'sku': str},
        )
        self.catalog.index = self.catalog.index.str.strip()

        self.tiers = load_tier_frame(self.settings.tiers_csv)
        if not self.tiers.empty:
            self.tiers['product_id'] = self.tiers['product_id'].astype(str).str.strip()

        LOGGER.info(
            "Loaded %d products and %d tier rows",
            len(self.catalog), len(self.tiers),
        )

    def reload_data(self):
        """Reload catalog and tier data from disk."""
        self.__init__(self.settings)

    def has_product(self, product_id: str) -> bool:
        return str(product_id).strip() in self.catalog.index

    def get_product(self, product_id: str) -> Optional[dict]:
        """Catalog row for a product, or None if unknown."""
        product_id = str(product_id).strip()
        if product_id not in self.catalog.index:
            return None
        row = self.catalog.loc[[product_id]].head(1).iloc[0]
        return {
            'product_id': product_id,
            'name': row['name'] if pd.notna(row.get('name')) else "N/A",
            'sku': row['sku'] if 'sku' in row and pd.notna(row['sku']) else None,
            'price': float(row['price']),
        }

    def get_default_price(self, product_id: str) -> float:
        product = self.get_product(product_id)
        if product is None:
            raise KeyError(f"Unknown product '{product_id}'")
        return product['price']

    def get_tiers(self, product_id: str) -> list[PriceTier]:
        """Tier table for a product, ordered by sort_order."""
        if self.tiers.empty:
            return []
        product_id = str(product_id).strip()
        return frame_to_tiers(self.tiers[self.tiers['product_id'] == product_id])

    def price_product(self, product_id: str, quantity: int) -> ProductPrice:
        """
        Resolve the storefront price display for a product and quantity.

        Raises KeyError for products not in the catalog.
        """
        default_price = self.get_default_price(product_id)
        tiers = self.get_tiers(product_id)
        tier = find_tier(tiers, quantity)
        unit_price = tier.unit_price if tier else default_price

        return ProductPrice(
            product_id=str(product_id).strip(),
            quantity=quantity,
            unit_price=unit_price,
            subtotal=unit_price * quantity,
            default_price=default_price,
            lowest_price=lowest_tier_price(tiers, default_price),
            tier_label=tier.label() if tier else None,
            next_tier=next_tier_hint(tiers, quantity, default_price),
        )

    def calculate(self, request: Request) -> Result:
        """
        Price every item of a request with full traceability.

        Unknown products are skipped and reported as result warnings.
        """
        result = Result(total=0.0, lines=[])

        for product_id, qty in request.items.items():
            line = self._calculate_line(product_id, qty)
            if line is None:
                result.add_warning(f"Product {product_id} not found in catalog")
                continue

            result.lines.append(line)
            result.total += line.extended_price

            for warning in line.warnings:
                if warning not in result.warnings:
                    result.add_warning(warning)

        return result

    def _calculate_line(self, product_id: str, qty: int) -> Optional[LineItem]:
        """Calculate a single line item with trace."""
        product = self.get_product(product_id)
        if product is None:
            return None

        line = LineItem(
            product_id=product['product_id'],
            name=product['name'],
            quantity=qty,
            unit_price=product['price'],
            extended_price=0.0,
            source="Default",
        )
        line.add_trace("Product Lookup", "Found product in catalog", product['product_id'])

        tiers = self.get_tiers(product['product_id'])
        if not tiers:
            line.add_trace("Price Resolution", "No tier table, using default price", f"${line.unit_price:.2f}")
        else:
            tier = find_tier(tiers, qty)
            if tier is not None:
                line.unit_price = tier.unit_price
                line.source = "Tier"
                line.tier_label = tier.label()
                line.add_trace("Price Resolution", f"Quantity {qty} in band {tier.label()}", f"${line.unit_price:.2f}")
            else:
                line.add_trace("Price Resolution", f"No band contains quantity {qty}, using default price", f"${line.unit_price:.2f}")
                line.add_warning(f"Default price fallback used for product {product['product_id']}")
                LOGGER.warning("No band for product %s at quantity %d", product['product_id'], qty)

            line.next_tier = next_tier_hint(tiers, qty, product['price'])
            if line.next_tier:
                line.add_trace(
                    "Next Tier",
                    f"Add {line.next_tier.quantity_needed} more to save {line.next_tier.savings_percent}%",
                    f"${line.next_tier.next_price:.2f}",
                )

        line.extended_price = line.unit_price * qty
        line.add_trace("Extension", f"Quantity {qty} × ${line.unit_price:.2f}", f"${line.extended_price:.2f}")

        return line
