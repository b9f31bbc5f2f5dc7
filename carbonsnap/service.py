"""Receipt parsing pipeline: vision backend → JSON decode → sanitization."""

from __future__ import annotations

import logging

from .receipt import ParsedReceipt, validate_and_clean_receipt
from .vision import ReceiptVisionBackend, parse_reply

logger = logging.getLogger(__name__)


class ReceiptParser:
    """Turns one receipt image into a sanitized ``ParsedReceipt``.

    Holds no per-request state, so one instance can serve concurrent requests.
    """

    def __init__(self, backend: ReceiptVisionBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> ReceiptVisionBackend:
        return self._backend

    async def parse(self, image_data: str) -> ParsedReceipt:
        """Extract and sanitize a receipt.

        Raises:
            ValueError: If the backend has no API key configured.
            UpstreamAPIError: If the AI provider returns an error status.
            ReceiptFormatError: If the reply is not valid JSON.
        """
        logger.info("Processing receipt with %s backend", self._backend.name)
        text = await self._backend.extract_receipt(image_data)
        raw = parse_reply(text)
        receipt = validate_and_clean_receipt(raw)
        logger.info(
            "Parsed receipt from %s: %d items, total %.2f, confidence %.2f",
            receipt.store_name,
            len(receipt.items),
            receipt.total,
            receipt.confidence,
        )
        return receipt
