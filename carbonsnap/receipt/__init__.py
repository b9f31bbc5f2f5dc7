"""Receipt data models and sanitization of AI-extracted receipts."""

from .models import (
    CATEGORIES,
    UNKNOWN_STORE,
    ParsedReceipt,
    ReceiptItem,
    fallback_payload,
    today_iso,
)
from .validate import (
    validate_and_clean_receipt,
    validate_category,
    validate_date,
    validate_items,
)

__all__ = [
    "CATEGORIES",
    "UNKNOWN_STORE",
    "ParsedReceipt",
    "ReceiptItem",
    "fallback_payload",
    "today_iso",
    "validate_and_clean_receipt",
    "validate_category",
    "validate_date",
    "validate_items",
]
