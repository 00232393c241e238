from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from re import Pattern
from typing import List, Optional, Tuple

from intake_agent.utils.fixture_loader import load_locations


@dataclass
class Location:
    official: str
    variations: List[str]
    is_city: bool = False


@lru_cache(maxsize=1)
def get_locations() -> List[Location]:
    return [
        Location(
            official=raw["official"],
            variations=[v.lower() for v in raw.get("variations", [])] or [raw["official"].lower()],
            is_city=bool(raw.get("city", False)),
        )
        for raw in load_locations()
    ]


@lru_cache(maxsize=1)
def _variation_patterns() -> List[Tuple[Pattern[str], Location]]:
    # Longest variations first so "hsr layout" wins over "hsr".
    pairs = [(variation, location) for location in get_locations() for variation in location.variations]
    pairs.sort(key=lambda pair: len(pair[0]), reverse=True)
    return [(re.compile(rf"\b{re.escape(variation)}\b", re.IGNORECASE), location) for variation, location in pairs]


def find_location(text: str) -> Optional[Location]:
    """Return the known neighbourhood mentioned in ``text``.

    A neighbourhood beats a bare city name ("Bangalore, Koramangala" gives
    Koramangala); otherwise the earliest mention wins.
    """
    best: Optional[Tuple[bool, int, Location]] = None
    for pattern, location in _variation_patterns():
        match = pattern.search(text)
        if not match:
            continue
        rank = (location.is_city, match.start(), location)
        if best is None or rank[:2] < best[:2]:
            best = rank
    return best[2] if best else None


def canonical_name(candidate: str) -> Optional[str]:
    """Official spelling when the whole candidate is a known variation."""
    cleaned = " ".join(candidate.lower().split())
    for location in get_locations():
        if cleaned in location.variations or cleaned == location.official.lower():
            return location.official
    return None
