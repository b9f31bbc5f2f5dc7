"""Carbon footprint estimation for purchased items."""

from .calculator import (
    EmissionBreakdown,
    FootprintCalculator,
    ItemFootprint,
    ReceiptFootprint,
    equivalents,
)
from .units import parse_quantity, scaled_amount

__all__ = [
    "EmissionBreakdown",
    "FootprintCalculator",
    "ItemFootprint",
    "ReceiptFootprint",
    "equivalents",
    "parse_quantity",
    "scaled_amount",
]
