"""Currency magnitude heuristics for bare numbers in rent and budget replies.

People answering "what's your budget?" rarely type the full amount: "50" usually
means fifty thousand and "3" means three lakh. Single digits are lakhs, anything
up to 9,999 is thousands, and 10,000 and above is taken literally.
"""

from __future__ import annotations

from typing import Optional

LAKH = 100_000
CRORE = 10_000_000
THOUSAND = 1_000

EXACT_THRESHOLD = 10_000
THOUSANDS_THRESHOLD = 10

_UNIT_MULTIPLIERS = {
    "lakh": LAKH,
    "lakhs": LAKH,
    "lac": LAKH,
    "lacs": LAKH,
    "crore": CRORE,
    "crores": CRORE,
    "cr": CRORE,
    "thousand": THOUSAND,
    "k": THOUSAND,
}


def disambiguate(value: int) -> int:
    if value >= EXACT_THRESHOLD:
        return value
    if value >= THOUSANDS_THRESHOLD:
        return value * THOUSAND
    return value * LAKH


def unit_multiplier(unit: Optional[str]) -> int:
    if not unit:
        return 1
    return _UNIT_MULTIPLIERS.get(unit.strip().lower().rstrip("."), 1)


def apply_unit(amount: float, unit: Optional[str]) -> int:
    return int(round(amount * unit_multiplier(unit)))


def format_inr(amount: int) -> str:
    """Render an amount with the rupee sign and Indian digit grouping (₹3,00,000)."""
    sign = "-" if amount < 0 else ""
    digits = str(abs(int(amount)))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"{sign}₹{digits}"
