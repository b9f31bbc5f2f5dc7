"""Validation and normalization of untrusted receipt JSON.

The model's reply is decoded JSON of unknown shape. Every field is type- and
range-checked individually and replaced by a default when it does not fit, so
that ``validate_and_clean_receipt`` returns a structurally valid
``ParsedReceipt`` for any input and never raises.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .models import CATEGORIES, UNKNOWN_STORE, ParsedReceipt, ReceiptItem, today_iso

logger = logging.getLogger(__name__)

# Layouts tried after ISO 8601 parsing fails
_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_LOW_QUALITY_CONFIDENCE = 0.3
_DEFAULT_CONFIDENCE = 0.5


def validate_and_clean_receipt(raw: Any) -> ParsedReceipt:
    """Coerce a decoded model reply into a ``ParsedReceipt``.

    Fields are defaulted first; the total and confidence corrections run
    afterwards because they depend on the final item list and store name.
    """
    data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    store_name = data.get("storeName")
    confidence = data.get("confidence")

    cleaned = ParsedReceipt(
        store_name=store_name if isinstance(store_name, str) else UNKNOWN_STORE,
        date=validate_date(data.get("date")),
        items=validate_items(data.get("items")),
        subtotal=_number_or_none(data.get("subtotal")),
        tax=_number_or_none(data.get("tax")),
        total=_number_or_none(data.get("total")) or 0.0,
        confidence=(
            max(0.0, min(1.0, float(confidence)))
            if _is_number(confidence)
            else _DEFAULT_CONFIDENCE
        ),
    )

    if cleaned.total == 0 and cleaned.items:
        cleaned.total = sum(item.price for item in cleaned.items)

    if not cleaned.items or cleaned.store_name == UNKNOWN_STORE:
        cleaned.confidence = min(cleaned.confidence, _LOW_QUALITY_CONFIDENCE)

    return cleaned


def validate_date(value: Any) -> str:
    """Return ``value`` as YYYY-MM-DD if it is a parseable date, else today."""
    if not isinstance(value, str):
        return today_iso()

    text = value.strip()
    if not text:
        return today_iso()

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None

    if parsed is not None:
        if parsed.tzinfo is not None:
            try:
                parsed = parsed.astimezone(timezone.utc)
            except (OverflowError, ValueError):
                # offset pushes the instant outside year 1..9999
                return today_iso()
        return parsed.date().isoformat()

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    return today_iso()


def validate_items(value: Any) -> list[ReceiptItem]:
    """Keep only entries with a name and a strictly positive numeric price."""
    if not isinstance(value, list):
        return []

    items: list[ReceiptItem] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("name")
        price = entry.get("price")
        if not name or not _is_number(price) or price <= 0:
            continue
        name = _as_text(name).strip()
        if not name:
            continue

        quantity = entry.get("quantity")
        items.append(
            ReceiptItem(
                name=name,
                quantity=_as_text(quantity) if quantity else "1",
                price=float(price),
                category=validate_category(entry.get("category")),
            )
        )

    dropped = len(value) - len(items)
    if dropped:
        logger.info(
            "Dropped %d of %d extracted items without a name or positive price",
            dropped,
            len(value),
        )
    return items


def validate_category(value: Any) -> str:
    """Map anything outside the known category set to ``"other"``."""
    if isinstance(value, str) and value in CATEGORIES:
        return value
    return "other"


def _is_number(value: Any) -> bool:
    # bool is an int subclass; NaN and Infinity are valid Python JSON
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def _number_or_none(value: Any) -> float | None:
    return float(value) if _is_number(value) else None


def _as_text(value: Any) -> str:
    """Text form of a JSON scalar, matching how the model would print it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
