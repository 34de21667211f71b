"""
Tiers Service - CRUD operations for product tier tables.
Handles reading/writing price_tiers.csv; every save is validated first.
"""
import csv
import logging
from pathlib import Path
from typing import Optional

from ..engine.models import PriceTier, ValidationResult
from ..engine.tier_validator import validate_tiers, MAX_TIERS


LOGGER = logging.getLogger(__name__)


class TierValidationError(ValueError):
    """Raised when a tier table fails validation and cannot be saved."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def tier_to_csv_row(product_id: str, tier: PriceTier) -> dict:
    """Convert a tier to CSV row format."""
    return {
        'product_id': product_id,
        'min_quantity': str(tier.min_quantity),
        'max_quantity': str(tier.max_quantity) if tier.max_quantity is not None else '',
        'unit_price': str(tier.unit_price),
        'sort_order': str(tier.sort_order),
    }


class TiersService:
    """Service for managing persisted tier tables."""

    CSV_COLUMNS = ['product_id', 'min_quantity', 'max_quantity', 'unit_price', 'sort_order']

    def __init__(self, tiers_csv_path: Path, max_tiers: int = MAX_TIERS):
        self.tiers_csv_path = tiers_csv_path
        self.max_tiers = max_tiers

    def _read_rows(self) -> list[dict]:
        if not self.tiers_csv_path.exists():
            return []
        with open(self.tiers_csv_path, 'r', encoding='utf-8') as f:
            reader = csv.DictReader(f)
            return [row for row in reader if row.get('product_id')]

    def _write_rows(self, rows: list[dict]):
        """Write tier rows back to CSV."""
        self.tiers_csv_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.tiers_csv_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
            writer.writeheader()
            for row in rows:
                writer.writerow(row)

    def list_tiers(self, product_id: str) -> list[PriceTier]:
        """Tier table of a product, ordered by sort_order."""
        product_id = str(product_id).strip()
        tiers = [
            PriceTier.from_dict(row)
            for row in self._read_rows()
            if row['product_id'].strip() == product_id
        ]
        tiers.sort(key=lambda t: t.sort_order)
        return tiers

    def validate(self, tiers: list[PriceTier]) -> ValidationResult:
        """Validate a proposed tier table without saving."""
        return validate_tiers(tiers, max_tiers=self.max_tiers)

    def replace_tiers(self, product_id: str, tiers: list[PriceTier]) -> list[PriceTier]:
        """
        Replace a product's tier table.

        sort_order is reassigned from the input order. An empty list
        clears the table. Raises TierValidationError if invalid.
        """
        product_id = str(product_id).strip()

        validation = self.validate(tiers)
        if not validation.valid:
            LOGGER.warning("Rejected tier table for product %s: %s", product_id, validation.reason)
            raise TierValidationError(validation.reason)

        saved = [
            PriceTier(
                min_quantity=tier.min_quantity,
                max_quantity=tier.max_quantity,
                unit_price=tier.unit_price,
                sort_order=index,
            )
            for index, tier in enumerate(tiers)
        ]

        rows = [row for row in self._read_rows() if row['product_id'].strip() != product_id]
        rows.extend(tier_to_csv_row(product_id, tier) for tier in saved)
        self._write_rows(rows)

        LOGGER.info("Saved %d tiers for product %s", len(saved), product_id)
        return saved

    def delete_tiers(self, product_id: str) -> bool:
        """Remove a product's tier table. Returns False if it had none."""
        product_id = str(product_id).strip()
        rows = self._read_rows()
        kept = [row for row in rows if row['product_id'].strip() != product_id]

        if len(kept) == len(rows):
            return False

        self._write_rows(kept)
        LOGGER.info("Deleted tier table for product %s", product_id)
        return True

    def get_stats(self) -> dict:
        """Get statistics about stored tier tables."""
        by_product = {}
        for row in self._read_rows():
            pid = row['product_id'].strip()
            by_product[pid] = by_product.get(pid, 0) + 1

        return {
            'products_with_tiers': len(by_product),
            'total_tiers': sum(by_product.values()),
            'by_product': by_product,
        }
