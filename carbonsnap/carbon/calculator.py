"""Carbon footprint estimates for receipt items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .units import scaled_amount

if TYPE_CHECKING:
    from ..receipt import ParsedReceipt

# Keyword groups, checked in order; first match wins
_KEYWORD_GROUPS: dict[str, list[str]] = {
    "meat": [
        "beef", "steak", "hamburger", "burger", "lamb", "pork", "bacon",
        "sausage", "ham", "chicken", "turkey", "fish", "salmon", "tuna",
    ],
    "dairy": ["milk", "cheese", "yogurt", "butter", "cream", "ice cream"],
    "packaged": [
        "chips", "crackers", "cookies", "candy", "chocolate", "cereal",
        "bread", "pasta", "rice",
    ],
    "processed": ["soda", "juice", "beer", "wine", "coffee", "tea"],
    "produce": [
        "apple", "banana", "orange", "lettuce", "spinach", "carrot",
        "tomato", "potato", "onion", "garlic",
    ],
    "grains": ["oats", "quinoa", "barley", "lentils", "beans"],
    "household": [
        "detergent", "soap", "shampoo", "toothpaste", "toilet paper",
        "paper towel",
    ],
    "personal": ["deodorant", "lotion", "makeup", "razor"],
}

# kg CO2e per unit and impact tier for each group
_GROUP_EMISSIONS: dict[str, tuple[float, str]] = {
    "dairy": (3.2, "medium"),
    "packaged": (2.1, "medium"),
    "processed": (2.1, "medium"),
    "produce": (0.8, "low"),
    "grains": (0.8, "low"),
    "household": (1.5, "low"),
    "personal": (1.5, "low"),
}
_MEAT_EMISSIONS: dict[str, float] = {"beef": 8.5, "lamb": 7.2}
_MEAT_DEFAULT = 5.5
_DEFAULT_EMISSIONS = 0.5

# Share of emissions per lifecycle stage
_STAGE_SHARES: dict[str, float] = {
    "production": 0.6,
    "packaging": 0.15,
    "transport": 0.15,
    "use": 0.05,
    "disposal": 0.05,
}

_SUGGESTIONS: dict[str, list[str]] = {
    "high": [
        "Consider plant-based alternatives",
        "Choose local/organic options when possible",
        "Reduce portion sizes",
    ],
    "medium": [
        "Look for items with minimal packaging",
        "Choose bulk options to reduce packaging waste",
        "Consider generic brands (often less packaging)",
    ],
    "low": [
        "Great choice! Low carbon footprint",
        "Buy local when possible",
        "Choose organic for even better impact",
    ],
}

_BASE_CONFIDENCE = 0.85
_KG_PER_MILE = 0.4
_KG_PER_PHONE_CHARGE = 0.008


@dataclass
class EmissionBreakdown:
    production: float = 0.0
    packaging: float = 0.0
    transport: float = 0.0
    use: float = 0.0
    disposal: float = 0.0


@dataclass
class ItemFootprint:
    """Estimated emissions for one receipt line."""

    name: str
    quantity: str
    emissions_kg: float
    impact: str  # low / medium / high
    breakdown: EmissionBreakdown = field(default_factory=EmissionBreakdown)
    suggestions: list[str] = field(default_factory=list)
    confidence: float = _BASE_CONFIDENCE


@dataclass
class ReceiptFootprint:
    """Aggregated emissions for a whole receipt."""

    items: list[ItemFootprint] = field(default_factory=list)
    total_kg: float = 0.0
    equivalents: list[str] = field(default_factory=list)
    highest_impact: str = "None"
    reduction_potential_kg: float = 0.0
    improvement_score: float = 0.0

    @property
    def carbon_category(self) -> str:
        """Receipt-level tier used for the scanned_items row."""
        if self.total_kg > 20:
            return "high"
        if self.total_kg > 10:
            return "medium"
        return "low"


class FootprintCalculator:
    """Keyword-based CO2e estimator for purchased items."""

    def estimate_item(
        self, name: str, quantity: str = "1", confidence: float = 1.0
    ) -> ItemFootprint:
        base, tier = self._base_emissions(name)
        amount = scaled_amount(quantity)
        total = base * amount

        return ItemFootprint(
            name=name,
            quantity=quantity,
            emissions_kg=round(total, 2),
            impact=_impact(total),
            breakdown=EmissionBreakdown(
                **{stage: round(total * share, 2) for stage, share in _STAGE_SHARES.items()}
            ),
            suggestions=list(_SUGGESTIONS[tier]),
            confidence=_BASE_CONFIDENCE * confidence,
        )

    def estimate_receipt(self, receipt: ParsedReceipt) -> ReceiptFootprint:
        items = [
            self.estimate_item(item.name, item.quantity, receipt.confidence)
            for item in receipt.items
        ]
        total = sum(i.emissions_kg for i in items)

        highest = max(items, key=lambda i: i.emissions_kg).impact if items else "None"
        return ReceiptFootprint(
            items=items,
            total_kg=round(total, 2),
            equivalents=equivalents(total),
            highest_impact=highest,
            reduction_potential_kg=round(total * 0.25, 2),
            improvement_score=min(95.0, max(60.0, 90.0 - total * 2)),
        )

    @staticmethod
    def _base_emissions(name: str) -> tuple[float, str]:
        """Return (kg CO2e per unit, suggestion tier) for an item name."""
        lower = name.lower()
        for group, keywords in _KEYWORD_GROUPS.items():
            if not any(k in lower for k in keywords):
                continue
            if group == "meat":
                for meat, kg in _MEAT_EMISSIONS.items():
                    if meat in lower:
                        return (kg, "high")
                return (_MEAT_DEFAULT, "high")
            return _GROUP_EMISSIONS[group]
        return (_DEFAULT_EMISSIONS, "low")


def _impact(emissions_kg: float) -> str:
    if emissions_kg > 8:
        return "high"
    if emissions_kg > 3:
        return "medium"
    return "low"


def equivalents(total_kg: float) -> list[str]:
    """Describe an emission total in everyday terms."""
    miles = round(total_kg / _KG_PER_MILE)
    charges = round(total_kg / _KG_PER_PHONE_CHARGE)
    return [
        f"Equivalent to driving {miles} miles in a gas-powered car",
        f"Same as charging a smartphone {charges} times",
    ]
