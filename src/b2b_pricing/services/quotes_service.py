"""
Quotes Service - Request-for-quote (RFQ) workflow.

Customers submit a basket of products with contact details; admins list,
inspect and move quotes through their status lifecycle. Quotes are kept
in a single JSON file.
"""
import json
import logging
import math
import random
import re
import string
import time
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from ..engine.tier_resolver import resolve_price


LOGGER = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
BASE36 = string.digits + string.ascii_uppercase


class QuoteStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    QUOTED = "QUOTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


# Allowed moves; ACCEPTED, REJECTED and EXPIRED are terminal
STATUS_TRANSITIONS: dict[QuoteStatus, set[QuoteStatus]] = {
    QuoteStatus.PENDING: {QuoteStatus.PROCESSING, QuoteStatus.QUOTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED},
    QuoteStatus.PROCESSING: {QuoteStatus.QUOTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED},
    QuoteStatus.QUOTED: {QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED},
    QuoteStatus.ACCEPTED: set(),
    QuoteStatus.REJECTED: set(),
    QuoteStatus.EXPIRED: set(),
}


class QuoteNotFoundError(ValueError):
    """Raised when a quote ID does not exist."""


class QuoteTransitionError(ValueError):
    """Raised when a status change is not allowed from the current status."""


class QuoteValidationError(ValueError):
    """Raised when a quote submission is invalid. errors maps field → messages."""

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__("Invalid quote request")
        self.errors = errors


@dataclass
class QuoteItem:
    """A product line of a quote request."""
    product_id: str
    name: str
    price: float
    quantity: int
    sku: Optional[str] = None
    image: Optional[str] = None


@dataclass
class Quote:
    """A submitted quote request."""
    id: str
    quote_number: str
    name: str
    email: str
    contact: str
    items: list[QuoteItem]
    status: QuoteStatus = QuoteStatus.PENDING
    company_name: Optional[str] = None
    remark: Optional[str] = None
    expected_price: Optional[float] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def item_count(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['status'] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Quote':
        data = dict(data)
        data['items'] = [QuoteItem(**item) for item in data.get('items', [])]
        data['status'] = QuoteStatus(data.get('status', QuoteStatus.PENDING.value))
        return cls(**data)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36[rem])
    return "".join(reversed(digits))


def generate_quote_number() -> str:
    """Quote number in the form QT-<base36 ms timestamp>-<4 random chars>."""
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(BASE36, k=4))
    return f"QT-{timestamp}-{suffix}"


def _clean(value) -> Optional[str]:
    """Normalize optional strings: blank → None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def validate_quote_data(data: dict) -> dict[str, list[str]]:
    """Validate a quote submission. Returns field → error messages (empty if valid)."""
    errors: dict[str, list[str]] = {}

    def add(key: str, message: str):
        errors.setdefault(key, []).append(message)

    if not _clean(data.get('name')):
        add('name', "Name is required")

    email = _clean(data.get('email'))
    if not email or not EMAIL_PATTERN.match(email):
        add('email', "Invalid email")

    if not _clean(data.get('contact')):
        add('contact', "WhatsApp/WeChat is required")

    expected_price = data.get('expected_price')
    if expected_price is not None:
        try:
            expected = float(expected_price)
            if not math.isfinite(expected):
                add('expected_price', "Expected price must be a number")
            elif expected < 0:
                add('expected_price', "Expected price cannot be negative")
        except (TypeError, ValueError, OverflowError):
            add('expected_price', "Expected price must be a number")

    items = data.get('items') or []
    if not isinstance(items, list):
        add('items', "Items must be a list")
        items = []
    elif not items:
        add('items', "At least one item is required")
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            add('items', f"Item {index + 1}: invalid item")
            continue
        if not _clean(item.get('product_id')):
            add('items', f"Item {index + 1}: product is required")
        try:
            if int(item.get('quantity') or 0) < 1:
                add('items', f"Item {index + 1}: quantity must be at least 1")
        except (TypeError, ValueError, OverflowError):
            add('items', f"Item {index + 1}: quantity must be a whole number")
        try:
            price = float(item.get('price') or 0)
            if not math.isfinite(price):
                add('items', f"Item {index + 1}: price must be a number")
            elif price < 0:
                add('items', f"Item {index + 1}: price cannot be negative")
        except (TypeError, ValueError, OverflowError):
            add('items', f"Item {index + 1}: price must be a number")

    return errors


class QuotesService:
    """Service for creating and managing quote requests."""

    def __init__(self, quotes_json_path: Path, page_size: int = 20):
        self.quotes_json_path = quotes_json_path
        self.page_size = page_size

    def _load(self) -> list[Quote]:
        if not self.quotes_json_path.exists():
            return []
        with open(self.quotes_json_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return [Quote.from_dict(q) for q in data.get('quotes', [])]

    def _save(self, quotes: list[Quote]):
        self.quotes_json_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.quotes_json_path, 'w', encoding='utf-8') as f:
            json.dump({'quotes': [q.to_dict() for q in quotes]}, f, indent=2)

    def create_quote(self, data: dict) -> Quote:
        """
        Create a quote from a storefront submission.

        Raises QuoteValidationError with per-field messages if invalid.
        """
        errors = validate_quote_data(data)
        if errors:
            raise QuoteValidationError(errors)

        quotes = self._load()
        existing_numbers = {q.quote_number for q in quotes}
        quote_number = generate_quote_number()
        while quote_number in existing_numbers:
            quote_number = generate_quote_number()

        now = datetime.now().isoformat()
        expected_price = data.get('expected_price')

        quote = Quote(
            id=uuid.uuid4().hex,
            quote_number=quote_number,
            name=_clean(data['name']),
            email=_clean(data['email']),
            contact=_clean(data['contact']),
            company_name=_clean(data.get('company_name')),
            remark=_clean(data.get('remark')),
            expected_price=float(expected_price) if expected_price is not None else None,
            file_url=_clean(data.get('file_url')),
            file_name=_clean(data.get('file_name')),
            items=[
                QuoteItem(
                    product_id=_clean(item['product_id']),
                    name=str(item.get('name', '')),
                    sku=_clean(item.get('sku')),
                    price=float(item.get('price') or 0),
                    image=_clean(item.get('image')),
                    quantity=int(item['quantity']),
                )
                for item in data['items']
            ],
            created_at=now,
            updated_at=now,
        )

        quotes.append(quote)
        self._save(quotes)

        LOGGER.info("Created quote %s with %d items", quote.quote_number, quote.item_count)
        return quote

    def get_quote(self, quote_id: str) -> Optional[Quote]:
        for quote in self._load():
            if quote.id == quote_id:
                return quote
        return None

    def get_quote_by_number(self, quote_number: str) -> Optional[Quote]:
        for quote in self._load():
            if quote.quote_number == quote_number:
                return quote
        return None

    def list_quotes(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        search: str = "",
        status: Optional[QuoteStatus] = None,
    ) -> dict:
        """
        Admin listing, newest first.

        search matches quote number, name, email and company name
        case-insensitively.
        """
        limit = self.page_size if limit is None else limit
        if page < 1:
            raise ValueError(f"page must be at least 1, got {page}")
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        quotes = list(reversed(self._load()))

        if search:
            needle = search.lower()
            quotes = [
                q for q in quotes
                if any(
                    needle in (value or "").lower()
                    for value in (q.quote_number, q.name, q.email, q.company_name)
                )
            ]

        if status is not None:
            quotes = [q for q in quotes if q.status == QuoteStatus(status)]

        total = len(quotes)
        start = (page - 1) * limit

        return {
            'quotes': quotes[start:start + limit],
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'total_pages': math.ceil(total / limit),
            },
        }

    def update_status(self, quote_id: str, status: QuoteStatus) -> Quote:
        """Move a quote to a new status along the lifecycle."""
        status = QuoteStatus(status)
        quotes = self._load()

        for quote in quotes:
            if quote.id != quote_id:
                continue

            if quote.status == status:
                return quote

            if status not in STATUS_TRANSITIONS[quote.status]:
                raise QuoteTransitionError(
                    f"Cannot change quote {quote.quote_number} from {quote.status.value} to {status.value}"
                )

            previous = quote.status
            quote.status = status
            quote.updated_at = datetime.now().isoformat()
            self._save(quotes)

            LOGGER.info("Quote %s: %s → %s", quote.quote_number, previous.value, status.value)
            return quote

        raise QuoteNotFoundError(f"Quote '{quote_id}' not found")

    def delete_quote(self, quote_id: str) -> bool:
        quotes = self._load()
        kept = [q for q in quotes if q.id != quote_id]

        if len(kept) == len(quotes):
            raise QuoteNotFoundError(f"Quote '{quote_id}' not found")

        self._save(kept)
        LOGGER.info("Deleted quote %s", quote_id)
        return True

    def get_stats(self) -> dict:
        """Count quotes per status."""
        by_status = {status.value: 0 for status in QuoteStatus}
        quotes = self._load()
        for quote in quotes:
            by_status[quote.status.value] += 1
        return {'total': len(quotes), 'by_status': by_status}


def quote_total(quote: Quote, engine=None) -> float:
    """
    Sum of unit price × quantity over a quote's items.

    When a PricingEngine is given, items of products with a tier table
    are re-priced at the band for their quantity.
    """
    total = 0.0
    for item in quote.items:
        unit_price = item.price
        if engine is not None:
            tiers = engine.get_tiers(item.product_id)
            if tiers:
                unit_price = resolve_price(tiers, item.quantity, item.price)
        total += unit_price * item.quantity
    return total
