from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def merge_details(previous: Optional[Mapping[str, Any]], extracted: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Fold one turn's extraction into the collected details.

    Returns a new dict. Non-empty extracted values overwrite; empty ones and
    absent keys leave the stored value alone, so nothing is ever dropped.
    """
    merged: Dict[str, Any] = dict(previous or {})
    for key, value in (extracted or {}).items():
        if is_empty(value):
            continue
        merged[key] = value
    return merged
