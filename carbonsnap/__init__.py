"""Client layer for the carbon-footprint tracking app."""

from .carbon import FootprintCalculator, ReceiptFootprint
from .config import (
    AIConfig,
    CarbonSnapConfig,
    LoggingConfig,
    ServerConfig,
    StoreConfig,
    load_config,
)
from .receipt import (
    ParsedReceipt,
    ReceiptItem,
    fallback_payload,
    validate_and_clean_receipt,
)
from .service import ReceiptParser
from .vision import ReceiptVisionBackend, create_backend

__all__ = [
    "ReceiptParser",
    "ReceiptVisionBackend",
    "create_backend",
    "ParsedReceipt",
    "ReceiptItem",
    "fallback_payload",
    "validate_and_clean_receipt",
    "FootprintCalculator",
    "ReceiptFootprint",
    "CarbonSnapConfig",
    "AIConfig",
    "StoreConfig",
    "ServerConfig",
    "LoggingConfig",
    "load_config",
]
