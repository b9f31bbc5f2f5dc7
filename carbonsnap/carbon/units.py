"""Receipt quantity parsing."""

from __future__ import annotations

import re

# Number (decimal or simple fraction) followed by an optional unit word
_QTY_PATTERN = re.compile(
    r"(?P<num>\d+(?:[.,]\d+)?(?:/\d+)?)\s*(?P<unit>[a-zA-Z]+)?"
)


def parse_quantity(text: str) -> tuple[float, str]:
    """Parse a receipt quantity string.

    Args:
        text: e.g. "2", "2x", "1.5 kg", "1/2 lb", "x3"

    Returns:
        (amount, unit) tuple. Defaults to (1.0, "") if no number is found.
    """
    m = _QTY_PATTERN.search(text or "")
    if m is None:
        return (1.0, "")

    amount = _parse_number(m.group("num"))
    unit = (m.group("unit") or "").lower()
    return (amount, unit)


def _parse_number(s: str) -> float:
    """Parse a number string that may be a fraction or use a decimal comma."""
    s = s.replace(",", ".")
    if "/" in s:
        num, _, den = s.partition("/")
        try:
            return float(num) / float(den)
        except (ValueError, ZeroDivisionError):
            return 1.0
    try:
        return float(s)
    except ValueError:
        return 1.0


# Weight units in kg and volume units in litres; anything else is a count
_UNIT_SCALE: dict[str, float] = {
    "mg": 0.000001,
    "g": 0.001,
    "gr": 0.001,
    "kg": 1.0,
    "lb": 0.4536,
    "lbs": 0.4536,
    "oz": 0.02835,
    "ml": 0.001,
    "cl": 0.01,
    "l": 1.0,
}


def scaled_amount(text: str) -> float:
    """Return the quantity in estimator units.

    Weights become kg and volumes become litres, so "500 g" counts as half a
    unit. Counts such as "3", "2x" or "4 pcs" are returned as is.
    """
    amount, unit = parse_quantity(text)
    return amount * _UNIT_SCALE.get(unit, 1.0)
