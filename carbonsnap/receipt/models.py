"""Data models for AI-extracted receipt data."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

CATEGORIES: tuple[str, ...] = (
    "food",
    "household",
    "electronics",
    "clothing",
    "other",
)

UNKNOWN_STORE = "Unknown Store"


def today_iso() -> str:
    """Return the current UTC calendar date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


@dataclass
class ReceiptItem:
    """A single purchased line from a receipt."""

    name: str
    price: float
    quantity: str = "1"
    category: str = "other"  # one of CATEGORIES

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "category": self.category,
        }


@dataclass
class ParsedReceipt:
    """A sanitized receipt, safe to return to callers or persist."""

    store_name: str = UNKNOWN_STORE
    date: str = field(default_factory=today_iso)
    items: list[ReceiptItem] = field(default_factory=list)
    subtotal: float | None = None
    tax: float | None = None
    total: float = 0.0
    confidence: float = 0.5

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape returned over HTTP."""
        return {
            "storeName": self.store_name,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "confidence": self.confidence,
        }


def fallback_payload(error: str) -> dict[str, Any]:
    """Build the safe response body used when extraction fails."""
    return {
        "error": error,
        "storeName": UNKNOWN_STORE,
        "date": today_iso(),
        "items": [],
        "total": 0,
        "confidence": 0,
    }
