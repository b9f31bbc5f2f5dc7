"""Persistence of sanitized receipts in the hosted store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..carbon import FootprintCalculator

if TYPE_CHECKING:
    from ..carbon import ReceiptFootprint
    from ..receipt import ParsedReceipt
    from .schema import ReceiptItemsInsert, ReceiptItemsRow, ScannedItemsInsert, ScannedItemsRow

logger = logging.getLogger(__name__)

SCAN_METHODS = ("camera", "manual", "upload")


class ReceiptStore:
    """Manages the scanned_items and receipt_items tables for receipts."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def save_receipt(
        self,
        receipt: ParsedReceipt,
        user_id: str,
        *,
        scan_method: str = "camera",
        footprint: ReceiptFootprint | None = None,
    ) -> ScannedItemsRow:
        """Insert a receipt and its items.

        The footprint is estimated when not given.

        Returns:
            The inserted scanned_items row.
        """
        if scan_method not in SCAN_METHODS:
            raise ValueError(f"Unknown scan method: {scan_method!r}")
        if footprint is None:
            footprint = FootprintCalculator().estimate_receipt(receipt)

        scanned: ScannedItemsInsert = {
            "user_id": user_id,
            "item_type": "receipt",
            "store_name": receipt.store_name,
            "receipt_date": receipt.date,
            "receipt_total": receipt.total,
            "carbon_footprint": footprint.total_kg,
            "carbon_category": footprint.carbon_category,
            "scan_method": scan_method,
            "details": {
                "itemCount": len(receipt.items),
                "source": "Manual Input" if scan_method == "manual" else "AI OCR",
                "confidence": receipt.confidence,
            },
        }
        resp = self._client.table("scanned_items").insert(scanned).execute()
        row = resp.data[0]

        items: list[ReceiptItemsInsert] = [
            {
                "scanned_item_id": row["id"],
                "product_name": item.name,
                "quantity": item.quantity,
                "unit_price": item.price,
                "category": item.category,
                "carbon_footprint": fp.emissions_kg,
                "carbon_category": fp.impact,
            }
            for item, fp in zip(receipt.items, footprint.items)
        ]
        if items:
            self._client.table("receipt_items").insert(items).execute()

        logger.info(
            "Saved receipt %s with %d items (%.2f kg CO2e)",
            row["id"],
            len(items),
            footprint.total_kg,
        )
        return row

    def list_receipts(self, user_id: str, limit: int = 20) -> list[ScannedItemsRow]:
        """Return the user's most recent receipts, newest first."""
        resp = (
            self._client.table("scanned_items")
            .select("*")
            .eq("user_id", user_id)
            .eq("item_type", "receipt")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return list(resp.data)

    def get_items(self, scanned_item_id: str) -> list[ReceiptItemsRow]:
        """Return the line items stored for one receipt."""
        resp = (
            self._client.table("receipt_items")
            .select("*")
            .eq("scanned_item_id", scanned_item_id)
            .execute()
        )
        return list(resp.data)

    def delete_receipt(self, scanned_item_id: str) -> None:
        """Delete a receipt; its items are removed by the cascading foreign key."""
        self._client.table("scanned_items").delete().eq("id", scanned_item_id).execute()
