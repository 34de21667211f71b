"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PriceTier:
    """
    One quantity band of a tier table.

    max_quantity of None means the band is unbounded; only the highest
    band of a valid table may be unbounded.
    """
    min_quantity: int
    max_quantity: Optional[int]
    unit_price: float
    sort_order: int = 0

    @property
    def is_unbounded(self) -> bool:
        return self.max_quantity is None

    def contains(self, quantity: int) -> bool:
        """Check whether a quantity falls inside this band."""
        if quantity < self.min_quantity:
            return False
        return self.max_quantity is None or quantity <= self.max_quantity

    def label(self) -> str:
        if self.max_quantity is None:
            return f"{self.min_quantity}+ units"
        return f"{self.min_quantity}-{self.max_quantity} units"

    @classmethod
    def from_dict(cls, data: dict) -> 'PriceTier':
        """Create a tier from a loose dict (API payload or CSV row)."""
        max_qty = data.get('max_quantity')
        return cls(
            min_quantity=int(data['min_quantity']),
            max_quantity=int(max_qty) if max_qty not in (None, '') else None,
            unit_price=float(data['unit_price']),
            sort_order=int(data.get('sort_order') or 0),
        )


@dataclass(frozen=True)
class NextTierHint:
    """How many more units unlock the next cheaper band."""
    quantity_needed: int
    next_price: float
    savings_percent: int


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of tier table validation. reason is set only when invalid."""
    valid: bool
    reason: Optional[str] = None


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class ProductPrice:
    """Storefront view of a product's price at a given quantity."""
    product_id: str
    quantity: int
    unit_price: float
    subtotal: float
    default_price: float
    lowest_price: float
    tier_label: Optional[str] = None
    next_tier: Optional[NextTierHint] = None


@dataclass
class LineItem:
    """A single priced line of a request."""
    product_id: str
    name: str
    quantity: int
    unit_price: float
    extended_price: float
    source: str  # "Tier" or "Default"
    tier_label: Optional[str] = None
    next_tier: Optional[NextTierHint] = None
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line item."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a warning for this line item."""
        self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class Request:
    """A pricing request: product ID → quantity."""
    items: dict[str, int]


@dataclass
class Result:
    """Complete result of a pricing calculation."""
    total: float
    lines: list[LineItem]
    warnings: list[str] = field(default_factory=list)

    def add_warning(self, warning: str):
        """Add a result-level warning."""
        self.warnings.append(warning)

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)
